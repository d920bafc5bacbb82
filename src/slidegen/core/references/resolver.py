"""Reference lookup behind a narrow interface.

The pipeline only depends on `ReferenceResolver.resolve(ids) -> Resolution`.
`CliReferenceResolver` talks to the `ref` command line tool (reference-manager)
with a single batched call; `StaticReferenceResolver` serves fixed records and
is what tests use.
"""
from __future__ import annotations

import json
import logging
import shlex
import subprocess
from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping

from slidegen.core.references.models import ReferenceItem, Resolution

logger = logging.getLogger(__name__)

NOT_INSTALLED = "not-installed"
FAILED = "failed"


class ReferenceResolver(ABC):
    @abstractmethod
    def resolve(self, ids: list[str]) -> Resolution:
        """Return the records for `ids`. Never raises for lookup failures."""


class CliReferenceResolver(ReferenceResolver):
    def __init__(self, command: str = "ref", timeout: float | None = 30.0) -> None:
        self.command = command
        self.timeout = timeout

    def _argv(self) -> list[str]:
        return shlex.split(self.command) + ["list", "--format", "json"]

    def resolve(self, ids: list[str]) -> Resolution:
        if not ids:
            return Resolution()

        argv = self._argv()
        logger.debug("resolving %d citation ids via %s", len(ids), " ".join(argv))
        try:
            proc = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError:
            return Resolution(unavailable=NOT_INSTALLED, reason=f"command not found: {argv[0]}")
        except subprocess.TimeoutExpired:
            return Resolution(unavailable=FAILED, reason=f"timed out after {self.timeout}s")
        except OSError as e:
            return Resolution(unavailable=FAILED, reason=str(e))

        if proc.returncode != 0:
            detail = (proc.stderr or "").strip().splitlines()
            reason = f"exit status {proc.returncode}"
            if detail:
                reason += f": {detail[-1]}"
            return Resolution(unavailable=FAILED, reason=reason)

        try:
            records = json.loads(proc.stdout or "[]")
        except json.JSONDecodeError as e:
            return Resolution(unavailable=FAILED, reason=f"output is not valid JSON ({e.msg})")
        if not isinstance(records, list):
            return Resolution(unavailable=FAILED, reason="output is not a JSON array")

        return Resolution(items=_select(records, ids))


class StaticReferenceResolver(ReferenceResolver):
    """In-memory resolver over a fixed set of records."""

    def __init__(self, items: Iterable[ReferenceItem] = (), *, unavailable: str | None = None, reason: str = "") -> None:
        self.items = {item.id: item for item in items}
        self.unavailable = unavailable
        self.reason = reason
        self.calls: list[list[str]] = []

    @classmethod
    def from_csl(cls, records: Iterable[Mapping[str, Any]]) -> "StaticReferenceResolver":
        return cls(ReferenceItem.from_csl(r) for r in records)

    def resolve(self, ids: list[str]) -> Resolution:
        self.calls.append(list(ids))
        if self.unavailable is not None:
            return Resolution(unavailable=self.unavailable, reason=self.reason)
        return Resolution(items={i: self.items[i] for i in ids if i in self.items})


def _select(records: list[Any], ids: list[str]) -> dict[str, ReferenceItem]:
    wanted = set(ids)
    out: dict[str, ReferenceItem] = {}
    for r in records:
        if not isinstance(r, dict) or "id" not in r:
            continue
        rid = str(r["id"])
        if rid not in wanted or rid in out:
            continue
        try:
            out[rid] = ReferenceItem.from_csl(r)
        except (TypeError, ValueError, AttributeError, KeyError) as e:
            # the id is then reported as not found
            logger.warning("skipping malformed reference record %s: %s", rid, e)
    return out


__all__ = [
    "ReferenceResolver",
    "CliReferenceResolver",
    "StaticReferenceResolver",
    "NOT_INSTALLED",
    "FAILED",
]
