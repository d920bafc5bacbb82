from __future__ import annotations

import re
from typing import Any, Iterable, Iterator

from slidegen.core.document.models import Presentation, Slide
from slidegen.core.references.models import Citation

# [@id], [@id, p. 42], [@a; @b, ch. 3]
CITATION_GROUP_RE = re.compile(r"\[(@[\w-]+(?:,\s*[^;\]]+)?(?:;\s*@[\w-]+(?:,\s*[^;\]]+)?)*)\]")
SINGLE_CITATION_RE = re.compile(r"@([\w-]+)(?:,\s*([^;\]]+))?")
# a field whose whole value is a marker, e.g. `source: "@smith2024"`
SOURCE_CITATION_RE = re.compile(r"^@([\w-]+)$")


def iter_group(group_body: str) -> Iterator[tuple[str, str | None]]:
    """Yield (id, locator) for each entry of a bracket group body (`@a; @b, p. 3`)."""
    for m in SINGLE_CITATION_RE.finditer(group_body):
        locator = m.group(2).strip() if m.group(2) else None
        yield m.group(1), locator or None


def _walk(value: Any, path: str) -> Iterator[tuple[str, str]]:
    if isinstance(value, str):
        yield path, value
    elif isinstance(value, list):
        for i, v in enumerate(value):
            yield from _walk(v, f"{path}[{i}]")
    elif isinstance(value, dict):
        for k, v in value.items():
            yield from _walk(v, f"{path}.{k}")


class CitationExtractor:
    """Find citation markers in slide content and notes."""

    def extract(self, text: str) -> list[tuple[str, str | None]]:
        m = SOURCE_CITATION_RE.match(text.strip())
        if m:
            return [(m.group(1), None)]
        out: list[tuple[str, str | None]] = []
        for group in CITATION_GROUP_RE.finditer(text):
            out.extend(iter_group(group.group(1)))
        return out

    def extract_from_slide(self, slide: Slide, slide_index: int) -> list[Citation]:
        citations: list[Citation] = []
        fields = list(_walk(slide.content, "content"))
        if slide.notes:
            fields.append(("notes", slide.notes))
        for path, text in fields:
            for cid, locator in self.extract(text):
                citations.append(Citation(id=cid, slide_index=slide_index, field_path=path, locator=locator))
        return citations

    def extract_from_presentation(self, presentation: Presentation) -> list[Citation]:
        """Every occurrence, in slide order then field order."""
        citations: list[Citation] = []
        for i, slide in enumerate(presentation.slides):
            citations.extend(self.extract_from_slide(slide, i))
        return citations

    @staticmethod
    def unique_ids(citations: Iterable[Citation]) -> list[str]:
        """Ids in order of first appearance, each exactly once."""
        return list(dict.fromkeys(c.id for c in citations))


__all__ = [
    "CitationExtractor",
    "CITATION_GROUP_RE",
    "SINGLE_CITATION_RE",
    "SOURCE_CITATION_RE",
    "iter_group",
]
