from __future__ import annotations

import logging
from typing import Any, Mapping

from slidegen.core.document.models import Presentation
from slidegen.core.references.formatter import CitationFormatter, author_labels
from slidegen.core.references.models import BibliographyEntry, BibliographyResult, ReferenceItem

logger = logging.getLogger(__name__)

BIBLIOGRAPHY_TEMPLATE = "bibliography"
SORT_KEYS = ("citation-order", "author", "year")


def sort_items(items: list[ReferenceItem], sort: str) -> list[ReferenceItem]:
    """Stable sort of resolved items.

    - citation-order: unchanged (callers pass items in citation order)
    - author: first author's family name, case-insensitive ordinal compare
    - year: ascending, items without a year last
    """
    if sort == "author":
        return sorted(items, key=lambda it: it.first_author_family.casefold())
    if sort == "year":
        return sorted(items, key=lambda it: (it.issued_year is None, it.issued_year or 0))
    return list(items)


class BibliographyGenerator:
    def __init__(self, formatter: CitationFormatter | None = None) -> None:
        self.formatter = formatter or CitationFormatter()

    def entry(self, item: ReferenceItem) -> BibliographyEntry:
        return BibliographyEntry(
            id=item.id,
            text=self.formatter.format_full(item),
            authors=author_labels(item.authors),
            title=item.title or "",
            year=item.issued_year,
            journal=item.container_title,
            volume=item.volume,
            pages=item.page,
            doi=item.doi,
            pmid=item.pmid,
            url=item.url,
        )

    def generate(
        self,
        citation_ids: list[str],
        items: Mapping[str, ReferenceItem],
        sort: str = "citation-order",
    ) -> BibliographyResult:
        unique_ids = list(dict.fromkeys(citation_ids))
        found = [items[i] for i in unique_ids if i in items]
        missing = tuple(i for i in unique_ids if i not in items)
        entries = tuple(self.entry(it) for it in sort_items(found, sort))
        return BibliographyResult(entries=entries, missing=missing)


def wants_auto_bibliography(content: Mapping[str, Any]) -> bool:
    return content.get("autoGenerate") is True


def merge_bibliography(
    presentation: Presentation,
    citation_ids: list[str],
    items: Mapping[str, ReferenceItem],
    generator: BibliographyGenerator,
    *,
    report_missing: bool = True,
) -> tuple[Presentation, list[str]]:
    """Fill every auto-generating bibliography slide with entries.

    Returns a new Presentation (the input is untouched) and the warnings
    produced. Missing ids are only reported when `report_missing` is set,
    which callers clear when the resolver was unavailable.
    """
    warnings: list[str] = []
    result = presentation
    reported = False
    for index, slide in enumerate(presentation.slides):
        if slide.template != BIBLIOGRAPHY_TEMPLATE or not wants_auto_bibliography(slide.content):
            continue
        sort = slide.content.get("sort") or "citation-order"
        if sort not in SORT_KEYS:
            # the bibliography template schema rejects this during transform
            sort = "citation-order"
        bib = generator.generate(citation_ids, items, sort)
        if report_missing and not reported:
            warnings.extend(f"Bibliography: reference not found: {cid}" for cid in bib.missing)
            reported = True
        content = dict(slide.content)
        content["references"] = [e.as_content() for e in bib.entries]
        content["_autoGenerated"] = True
        result = result.with_slide(index, slide.with_content(content))
        logger.debug("bibliography slide %d: %d entries (sort=%s)", index + 1, len(bib.entries), sort)
    return result, warnings


__all__ = [
    "BibliographyGenerator",
    "merge_bibliography",
    "sort_items",
    "wants_auto_bibliography",
    "BIBLIOGRAPHY_TEMPLATE",
    "SORT_KEYS",
]
