from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Union

# JSON-like slide content tree. Shape is template-specific and checked
# against the template's JSON schema during transformation.
ContentValue = Union[str, int, float, bool, None, list["ContentValue"], dict[str, "ContentValue"]]
Content = dict[str, ContentValue]


@dataclass(frozen=True)
class ReferencesMeta:
    enabled: bool = True
    style: str = "author-year-pmid"


@dataclass(frozen=True)
class PresentationMeta:
    title: str = ""
    author: str | None = None
    date: str | None = None
    theme: str | None = None
    references: ReferencesMeta | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PresentationMeta":
        refs = data.get("references")
        return cls(
            title=_text(data.get("title")) or "",
            author=_text(data.get("author")),
            date=_text(data.get("date")),
            theme=_text(data.get("theme")),
            references=ReferencesMeta(
                enabled=bool(refs.get("enabled", True)),
                style=str(refs.get("style", "author-year-pmid")),
            )
            if isinstance(refs, dict)
            else None,
        )


@dataclass(frozen=True)
class Slide:
    template: str
    content: Content = field(default_factory=dict)
    notes: str | None = None
    css_class: str | None = None
    raw: str | None = None
    source_line: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, source_line: int | None = None) -> "Slide":
        content = data.get("content")
        return cls(
            template=str(data["template"]),
            content=dict(content) if isinstance(content, dict) else {},
            notes=data.get("notes"),
            css_class=data.get("class"),
            raw=data.get("raw"),
            source_line=source_line,
        )

    def with_content(self, content: Content) -> "Slide":
        return replace(self, content=content)


@dataclass(frozen=True)
class Presentation:
    meta: PresentationMeta
    slides: tuple[Slide, ...] = ()

    def with_slide(self, index: int, slide: Slide) -> "Presentation":
        slides = list(self.slides)
        slides[index] = slide
        return replace(self, slides=tuple(slides))

    @property
    def template_names(self) -> list[str]:
        return [s.template for s in self.slides]


@dataclass(frozen=True)
class ParsedDocument:
    """Parser output: the presentation plus the 1-based source line of each slide."""

    presentation: Presentation
    slide_lines: tuple[int, ...] = ()


def _text(v: Any) -> str | None:
    # YAML happily turns `date: 2024-01-01` into a date object.
    if v is None:
        return None
    return str(v)


__all__ = [
    "ContentValue",
    "Content",
    "ReferencesMeta",
    "PresentationMeta",
    "Slide",
    "Presentation",
    "ParsedDocument",
]
