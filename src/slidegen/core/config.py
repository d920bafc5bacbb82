from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from slidegen.core.errors import ConfigError
from slidegen.core.references.formatter import FormatConfig
from slidegen.core.validate.schema_validate import schema_errors

logger = logging.getLogger(__name__)

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
BUILTIN_TEMPLATES = PACKAGE_ROOT / "templates"
BUILTIN_ICON_REGISTRY = PACKAGE_ROOT / "icons" / "registry.yaml"
CONFIG_NAMES = ("slidegen.yaml", "config.yaml")


@dataclass
class ReferencesConfig:
    enabled: bool = True
    command: str = "ref"
    timeout: float = 30.0
    format: FormatConfig = field(default_factory=FormatConfig)


@dataclass
class Config:
    builtin_templates: Path = BUILTIN_TEMPLATES
    custom_templates: Path | None = None
    icon_registry: Path | None = BUILTIN_ICON_REGISTRY
    references: ReferencesConfig = field(default_factory=ReferencesConfig)
    theme: str = "default"
    max_workers: int = 4
    source: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None, *, base_dir: Path | None = None) -> "Config":
        data = data or {}
        errors = schema_errors("config", data)
        if errors:
            raise ConfigError("Invalid configuration", errors)

        def _path(v: str | None) -> Path | None:
            if not v:
                return None
            p = Path(v).expanduser()
            if base_dir is not None and not p.is_absolute():
                p = base_dir / p
            return p

        tpl = data.get("templates") or {}
        icons = data.get("icons") or {}
        refs = data.get("references") or {}
        conn = refs.get("connection") or {}
        fmt = refs.get("format") or {}
        out = data.get("output") or {}
        pipe = data.get("pipeline") or {}

        defaults = FormatConfig()
        return cls(
            builtin_templates=_path(tpl.get("builtin")) or BUILTIN_TEMPLATES,
            custom_templates=_path(tpl.get("custom")),
            icon_registry=_path(icons.get("registry")) or BUILTIN_ICON_REGISTRY,
            references=ReferencesConfig(
                enabled=refs.get("enabled", True),
                command=conn.get("command", "ref"),
                timeout=float(conn.get("timeout", 30.0)),
                format=FormatConfig(
                    max_authors=fmt.get("maxAuthors", defaults.max_authors),
                    et_al=fmt.get("etAl", defaults.et_al),
                    et_al_ja=fmt.get("etAlJa", defaults.et_al_ja),
                    separator_ja=fmt.get("separatorJa", defaults.separator_ja),
                    author_sep=fmt.get("authorSep", defaults.author_sep),
                    identifier_sep=fmt.get("identifierSep", defaults.identifier_sep),
                    no_date=fmt.get("noDate", defaults.no_date),
                ),
            ),
            theme=out.get("theme", "default"),
            max_workers=pipe.get("max_workers", 4),
        )


def find_config(directory: str | Path) -> Path | None:
    directory = Path(directory)
    for name in CONFIG_NAMES:
        p = directory / name
        if p.is_file():
            return p
    return None


def load_config(path: str | Path | None = None, *, search_dir: str | Path | None = None) -> Config:
    """Load configuration.

    An explicit `path` must exist. Without one, the first of CONFIG_NAMES in
    `search_dir` (default: cwd) is used, and defaults apply when none exists.
    """
    if path is None:
        path = find_config(search_dir or Path.cwd())
        if path is None:
            logger.debug("no config file found; using defaults")
            return Config()
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Failed to read config: {path} ({e})") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config: {path} ({e})") from e
    cfg = Config.from_dict(data, base_dir=path.parent)
    cfg.source = path
    logger.info("loaded config %s", path)
    return cfg


__all__ = ["Config", "ReferencesConfig", "load_config", "find_config", "BUILTIN_TEMPLATES", "BUILTIN_ICON_REGISTRY"]
