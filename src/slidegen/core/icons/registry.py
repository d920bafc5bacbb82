from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

import yaml

from slidegen.core.errors import IconRegistryError
from slidegen.core.validate.schema_validate import schema_errors

logger = logging.getLogger(__name__)

# `icon("mi:home")` written inline in slide text
ICON_CALL_RE = re.compile(r"""icon\(['"]([^'"]+)['"]\)""")
ICON_KEY = "icon"


@dataclass(frozen=True)
class IconSource:
    name: str
    type: str
    prefix: str
    url: str | None = None
    path: Path | None = None
    render: str | None = None


@dataclass(frozen=True)
class IconDefaults:
    size: str = "24px"
    color: str = "currentColor"


@dataclass
class IconRegistry:
    """Icon sources by prefix, plus aliases and named colors.

    References are `prefix:name` (e.g. `mi:home`, `iconify:mdi:account`);
    aliases map a short name to such a reference.
    """

    sources: dict[str, IconSource] = field(default_factory=dict)
    aliases: dict[str, str] = field(default_factory=dict)
    colors: dict[str, str] = field(default_factory=dict)
    defaults: IconDefaults = field(default_factory=IconDefaults)

    @classmethod
    def from_dict(cls, data: Any, *, base_dir: Path | None = None) -> "IconRegistry":
        errors = schema_errors("icon-registry", data)
        if errors:
            raise IconRegistryError("Invalid icon registry", errors)
        sources: dict[str, IconSource] = {}
        for s in data["sources"]:
            path = None
            if s.get("path"):
                path = Path(s["path"])
                if base_dir is not None and not path.is_absolute():
                    path = base_dir / path
            sources[s["prefix"]] = IconSource(
                name=s["name"],
                type=s["type"],
                prefix=s["prefix"],
                url=s.get("url"),
                path=path,
                render=s.get("render"),
            )
        d = data.get("defaults") or {}
        return cls(
            sources=sources,
            aliases=dict(data.get("aliases") or {}),
            colors=dict(data.get("colors") or {}),
            defaults=IconDefaults(size=d.get("size", "24px"), color=d.get("color", "currentColor")),
        )

    @classmethod
    def load(cls, path: str | Path) -> "IconRegistry":
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise IconRegistryError(f"Failed to read icon registry: {path} ({e})") from e
        except yaml.YAMLError as e:
            raise IconRegistryError(f"Failed to parse icon registry: {path} ({e})") from e
        registry = cls.from_dict(data, base_dir=path.parent)
        logger.info("loaded icon registry %s (%d sources, %d aliases)", path, len(registry.sources), len(registry.aliases))
        return registry

    def resolve_alias(self, name_or_alias: str) -> str:
        return self.aliases.get(name_or_alias, name_or_alias)

    def resolve_color(self, color: str) -> str:
        return self.colors.get(color, color)

    def problem(self, name_or_alias: str) -> str | None:
        """Why `name_or_alias` cannot be rendered from this registry, or None."""
        parsed = self.parse_reference(self.resolve_alias(name_or_alias))
        if parsed is None:
            return f'Unknown icon "{name_or_alias}"'
        if parsed[0] not in self.sources:
            return f'Unknown icon source "{parsed[0]}" in "{name_or_alias}"'
        return None

    @staticmethod
    def parse_reference(reference: str) -> tuple[str, str] | None:
        prefix, sep, name = reference.partition(":")
        if not sep or not prefix or not name:
            return None
        return prefix, name


def icon_references(value: Any, key: str | None = None) -> Iterator[str]:
    """Icon references in slide content: `icon:` fields and inline `icon("...")` calls."""
    if isinstance(value, str):
        if key == ICON_KEY:
            yield value
        else:
            yield from ICON_CALL_RE.findall(value)
    elif isinstance(value, list):
        for v in value:
            yield from icon_references(v)
    elif isinstance(value, dict):
        for k, v in value.items():
            yield from icon_references(v, str(k))


__all__ = ["IconRegistry", "IconSource", "IconDefaults", "icon_references", "ICON_CALL_RE"]
