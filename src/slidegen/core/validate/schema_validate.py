from __future__ import annotations

import argparse
import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator

from slidegen.core.errors import format_schema_path

SCHEMA_DIR = Path(__file__).resolve().parents[1] / "schemas"


def schema_path(name: str) -> Path:
    """Path of a bundled schema, e.g. `schema_path("presentation")`."""
    return SCHEMA_DIR / f"{name}.schema.json"


@lru_cache(maxsize=None)
def _bundled_validator(name: str) -> Draft202012Validator:
    schema = json.loads(schema_path(name).read_text(encoding="utf-8"))
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def validator_for(schema: dict[str, Any] | str) -> Draft202012Validator:
    """Validator for a bundled schema name or an inline schema dict."""
    if isinstance(schema, str):
        return _bundled_validator(schema)
    return Draft202012Validator(schema)


def _path_key(e: Any) -> list[tuple[int, Any]]:
    # ints and strings may share a position; keep list indices numerically ordered
    return [(0, p) if isinstance(p, int) else (1, str(p)) for p in e.path]


def schema_errors(schema: dict[str, Any] | str, instance: Any) -> list[str]:
    """
    Validate `instance` against a JSON schema.
    Returns a list of human-readable error strings (empty if valid).
    Each error is formatted as: "<jsonpath>: <message>"
    """
    v = validator_for(schema)
    errors = sorted(v.iter_errors(instance), key=_path_key)
    return [f"{format_schema_path(e.path)}: {e.message}" for e in errors]


def schema_errors_with_paths(schema: dict[str, Any] | str, instance: Any) -> list[tuple[tuple[Any, ...], str]]:
    """Like `schema_errors` but keeps the raw path so callers can map errors back to source lines."""
    v = validator_for(schema)
    errors = sorted(v.iter_errors(instance), key=_path_key)
    return [(tuple(e.path), f"{format_schema_path(e.path)}: {e.message}") for e in errors]


def _load_any(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def main() -> int:
    ap = argparse.ArgumentParser(prog="schema_validate")
    ap.add_argument("--schema", required=True, help="bundled schema name (presentation, template, ...) or path to *.schema.json")
    ap.add_argument("--instance", required=True, help="path to yaml/json to validate")
    args = ap.parse_args()

    instance_path = Path(args.instance)
    if not instance_path.exists():
        print(f"[ERR] instance not found: {instance_path}")
        return 2

    schema: dict[str, Any] | str = args.schema
    if args.schema.endswith(".json"):
        schema = json.loads(Path(args.schema).read_text(encoding="utf-8"))

    errors = schema_errors(schema, _load_any(instance_path))
    if not errors:
        print(f"[OK] {instance_path} conforms to {args.schema}")
        return 0

    print(f"[NG] {instance_path} does NOT conform to {args.schema}")
    for err in errors:
        print(f"- {err}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
