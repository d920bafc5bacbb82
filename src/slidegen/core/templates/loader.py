from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from slidegen.core.errors import TemplateDefinitionError, UnknownTemplateError
from slidegen.core.validate.schema_validate import schema_errors

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIXES = (".yaml", ".yml")


@dataclass(frozen=True)
class TemplateDefinition:
    name: str
    category: str
    schema: dict[str, Any]
    output: str
    description: str = ""
    example: dict[str, Any] = field(default_factory=dict)
    css: str | None = None
    source: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, source: Path | None = None) -> "TemplateDefinition":
        return cls(
            name=data["name"],
            category=data["category"],
            schema=dict(data["schema"]),
            output=data["output"],
            description=data.get("description") or "",
            example=dict(data.get("example") or {}),
            css=data.get("css") or None,
            source=source,
        )


class TemplateRegistry:
    """Template definitions keyed by name.

    Populated once (`load_builtin`, then optionally `load_custom`, whose
    definitions override built-ins of the same name) and only read afterwards,
    so one registry can be shared by concurrent transformer workers.
    """

    def __init__(self) -> None:
        self._templates: dict[str, TemplateDefinition] = {}

    def load_string(self, text: str, *, source: Path | None = None) -> TemplateDefinition:
        where = f" ({source})" if source else ""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise TemplateDefinitionError(f"Invalid template definition{where}: {e}") from e
        errors = schema_errors("template", data)
        if errors:
            raise TemplateDefinitionError(f"Invalid template definition{where}", errors)
        tpl = TemplateDefinition.from_dict(data, source=source)
        if tpl.name in self._templates:
            logger.debug("template %s overridden by %s", tpl.name, source)
        self._templates[tpl.name] = tpl
        return tpl

    def load_file(self, path: str | Path) -> TemplateDefinition:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise TemplateDefinitionError(f"Failed to read template: {path} ({e})") from e
        return self.load_string(text, source=path)

    def load_directory(self, directory: str | Path) -> int:
        directory = Path(directory)
        if not directory.is_dir():
            raise TemplateDefinitionError(f"Template directory not found: {directory}")
        count = 0
        # sorted for a deterministic override order within one directory
        for path in sorted(directory.rglob("*")):
            if path.is_file() and path.suffix.lower() in TEMPLATE_SUFFIXES:
                self.load_file(path)
                count += 1
        logger.info("loaded %d templates from %s", count, directory)
        return count

    def load_builtin(self, directory: str | Path) -> int:
        return self.load_directory(directory)

    def load_custom(self, directory: str | Path) -> int:
        return self.load_directory(directory)

    def get(self, name: str) -> TemplateDefinition | None:
        return self._templates.get(name)

    def require(self, name: str, *, slide_index: int | None = None, source_line: int | None = None) -> TemplateDefinition:
        tpl = self._templates.get(name)
        if tpl is None:
            raise UnknownTemplateError(name, slide_index=slide_index, source_line=source_line)
        return tpl

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def names(self) -> list[str]:
        return sorted(self._templates)

    def list(self) -> list[TemplateDefinition]:
        return [self._templates[n] for n in self.names()]

    def list_by_category(self, category: str) -> list[TemplateDefinition]:
        return [t for t in self.list() if t.category == category]

    def validate_content(self, name: str, content: Any) -> list[str]:
        """Schema errors for `content` against template `name` (empty if valid)."""
        return schema_errors(self.require(name).schema, content)


__all__ = ["TemplateDefinition", "TemplateRegistry", "TEMPLATE_SUFFIXES"]
