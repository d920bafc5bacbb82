"""Exception taxonomy shared by every pipeline stage.

Fatal errors derive from `SlidegenError`. Non-fatal degradations (unavailable
reference resolver, unknown citation id, unknown icon) are never raised; they
are collected as warning strings by the stage that observes them.
"""
from __future__ import annotations

from typing import Any


class SlidegenError(Exception):
    """Base class for all fatal slidegen errors."""

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: list[str] = list(details or [])

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return self.message + "\n" + "\n".join(f"  - {d}" for d in self.details)


class DocumentSyntaxError(SlidegenError):
    """The source document could not be read or parsed as YAML."""

    def __init__(
        self,
        message: str,
        details: list[str] | None = None,
        *,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        super().__init__(message, details)
        self.line = line
        self.column = column


class DocumentSchemaError(SlidegenError):
    """Required fields are missing or malformed.

    Raised for the document shape during parsing and for per-slide content
    that does not match its template schema during transformation.
    """

    def __init__(
        self,
        message: str,
        details: list[str] | None = None,
        *,
        slide_index: int | None = None,
        source_line: int | None = None,
    ) -> None:
        super().__init__(message, details)
        self.slide_index = slide_index
        self.source_line = source_line


class UnknownTemplateError(SlidegenError):
    def __init__(self, name: str, *, slide_index: int | None = None, source_line: int | None = None) -> None:
        where = slide_location(slide_index, source_line)
        super().__init__(f'Template "{name}" not found{where}')
        self.name = name
        self.slide_index = slide_index
        self.source_line = source_line


class TemplateRenderError(SlidegenError):
    """Template evaluation failed (syntax error or runtime error inside the template)."""

    def __init__(self, message: str, *, template: str | None = None, slide_index: int | None = None) -> None:
        super().__init__(message)
        self.template = template
        self.slide_index = slide_index


class TemplateDefinitionError(SlidegenError):
    """A template definition file is unreadable or does not match the definition schema."""


class IconRegistryError(SlidegenError):
    """The icon registry file is unreadable or invalid."""


class UnknownIconError(SlidegenError):
    def __init__(self, reference: str, reason: str) -> None:
        super().__init__(f"{reason}: {reference}")
        self.reference = reference


class ConfigError(SlidegenError):
    """The configuration file is unreadable or invalid."""


def slide_location(slide_index: int | None, source_line: int | None) -> str:
    """Human-readable ` (slide N, line L)` suffix used by diagnostics."""
    if slide_index is None:
        return ""
    if source_line is None:
        return f" (slide {slide_index + 1})"
    return f" (slide {slide_index + 1}, line {source_line})"


def format_schema_path(path: Any) -> str:
    """Render a jsonschema error path as `$['key'][0]`."""
    out = "$"
    for p in path:
        out += f"[{p!r}]" if isinstance(p, str) else f"[{p}]"
    return out


__all__ = [
    "SlidegenError",
    "DocumentSyntaxError",
    "DocumentSchemaError",
    "UnknownTemplateError",
    "TemplateRenderError",
    "TemplateDefinitionError",
    "IconRegistryError",
    "UnknownIconError",
    "ConfigError",
    "slide_location",
    "format_schema_path",
]
