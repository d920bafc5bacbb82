from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class Citation:
    """One occurrence of a citation marker in the source."""

    id: str
    slide_index: int
    field_path: str
    locator: str | None = None


@dataclass(frozen=True)
class Author:
    family: str
    given: str | None = None

    @property
    def initial(self) -> str:
        return f"{self.given[0]}." if self.given else ""


@dataclass(frozen=True)
class ReferenceItem:
    """Bibliographic record, built from CSL-JSON."""

    id: str
    authors: tuple[Author, ...] = ()
    title: str | None = None
    container_title: str | None = None
    volume: str | None = None
    issue: str | None = None
    page: str | None = None
    issued_year: int | None = None
    doi: str | None = None
    pmid: str | None = None
    url: str | None = None
    type: str | None = None

    @classmethod
    def from_csl(cls, data: Mapping[str, Any]) -> "ReferenceItem":
        authors = tuple(
            Author(family=str(a.get("family") or a.get("literal") or ""), given=_opt(a.get("given")))
            for a in (data.get("author") or [])
            if isinstance(a, Mapping)
        )
        return cls(
            id=str(data["id"]),
            authors=authors,
            title=_opt(data.get("title")),
            container_title=_opt(data.get("container-title")),
            volume=_opt(data.get("volume")),
            issue=_opt(data.get("issue")),
            page=_opt(data.get("page")),
            issued_year=_issued_year(data.get("issued")),
            doi=_opt(data.get("DOI")),
            pmid=_opt(data.get("PMID")),
            url=_opt(data.get("URL")),
            type=_opt(data.get("type")),
        )

    @property
    def first_author_family(self) -> str:
        return self.authors[0].family if self.authors else ""

    @property
    def identifier(self) -> str | None:
        """`PMID: ...` preferred over `DOI: ...`."""
        if self.pmid:
            return f"PMID: {self.pmid}"
        if self.doi:
            return f"DOI: {self.doi}"
        return None


@dataclass(frozen=True)
class BibliographyEntry:
    """A ReferenceItem projected into template-ready fields."""

    id: str
    text: str
    authors: tuple[str, ...] = ()
    title: str = ""
    year: int | None = None
    journal: str | None = None
    volume: str | None = None
    pages: str | None = None
    doi: str | None = None
    pmid: str | None = None
    url: str | None = None

    def as_content(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "text": self.text, "title": self.title}
        if self.authors:
            out["authors"] = list(self.authors)
        for key in ("year", "journal", "volume", "pages", "doi", "pmid", "url"):
            v = getattr(self, key)
            if v is not None:
                out[key] = v
        return out


@dataclass(frozen=True)
class BibliographyResult:
    entries: tuple[BibliographyEntry, ...] = ()
    missing: tuple[str, ...] = ()


@dataclass
class Resolution:
    """Outcome of one batched reference lookup.

    `unavailable` is None when the lookup ran, otherwise "not-installed" or
    "failed" with a human-readable `reason`.
    """

    items: dict[str, ReferenceItem] = field(default_factory=dict)
    unavailable: str | None = None
    reason: str = ""

    @property
    def available(self) -> bool:
        return self.unavailable is None

    def missing(self, ids: list[str]) -> list[str]:
        if not self.available:
            return []
        return [i for i in ids if i not in self.items]


def _opt(v: Any) -> str | None:
    if v is None or v == "":
        return None
    return str(v)


def _issued_year(issued: Any) -> int | None:
    if not isinstance(issued, Mapping):
        return None
    parts = issued.get("date-parts")
    try:
        year = parts[0][0]
    except (TypeError, IndexError, KeyError):
        return None
    try:
        return int(year)
    except (TypeError, ValueError):
        return None


__all__ = [
    "Citation",
    "Author",
    "ReferenceItem",
    "BibliographyEntry",
    "BibliographyResult",
    "Resolution",
]
