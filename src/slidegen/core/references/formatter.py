from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping

from slidegen.core.references.extractor import CITATION_GROUP_RE, SOURCE_CITATION_RE, iter_group
from slidegen.core.references.models import Author, ReferenceItem

# Hiragana, Katakana, CJK unified ideographs
JAPANESE_RE = re.compile(r"[\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FAF]")


@dataclass(frozen=True)
class FormatConfig:
    max_authors: int = 2
    et_al: str = "et al."
    et_al_ja: str = "ほか"
    separator_ja: str = "・"
    author_sep: str = ", "
    identifier_sep: str = "; "
    no_date: str = "n.d."


def is_japanese(authors: tuple[Author, ...]) -> bool:
    return bool(authors) and bool(JAPANESE_RE.search(authors[0].family))


def year_text(item: ReferenceItem, config: FormatConfig) -> str:
    return str(item.issued_year) if item.issued_year is not None else config.no_date


def format_authors_full(authors: tuple[Author, ...]) -> str:
    """Bibliography author list.

    Japanese: 田中太郎, 山田花子
    English:  Smith, J., Johnson, A., & Williams, B.
    """
    if not authors:
        return "Unknown"
    if is_japanese(authors):
        return ", ".join(f"{a.family}{a.given or ''}" for a in authors)
    if len(authors) == 1:
        a = authors[0]
        return f"{a.family}, {a.initial}" if a.initial else a.family
    parts = []
    for i, a in enumerate(authors):
        name = f"{a.family}, {a.initial}" if a.initial else a.family
        parts.append(f"& {name}" if i == len(authors) - 1 else name)
    return ", ".join(parts)


def author_labels(authors: tuple[Author, ...]) -> tuple[str, ...]:
    """Per-author `Family, G.` labels for templates."""
    return tuple(f"{a.family}, {a.initial}" if a.initial else a.family for a in authors)


class CitationFormatter:
    """Inline and full formatting over already-resolved records.

    The formatter never performs lookups; ids missing from `items` are left
    as their raw `[@id]` marker.
    """

    def __init__(self, items: Mapping[str, ReferenceItem] | None = None, config: FormatConfig | None = None) -> None:
        self.items = dict(items or {})
        self.config = config or FormatConfig()

    def format_author_inline(self, authors: tuple[Author, ...]) -> str:
        if not authors:
            return "Unknown"
        cfg = self.config
        japanese = is_japanese(authors)
        if len(authors) > cfg.max_authors:
            suffix = cfg.et_al_ja if japanese else f" {cfg.et_al}"
            return f"{authors[0].family}{suffix}"
        names = [a.family for a in authors]
        if len(names) == 1:
            return names[0]
        if japanese:
            return cfg.separator_ja.join(names)
        return ", ".join(names[:-1]) + " & " + names[-1]

    def format_inline_item(self, item: ReferenceItem) -> str:
        cfg = self.config
        text = f"{self.format_author_inline(item.authors)}{cfg.author_sep}{year_text(item, cfg)}"
        if item.identifier:
            text += f"{cfg.identifier_sep}{item.identifier}"
        return f"({text})"

    def format_inline(self, cid: str) -> str:
        """e.g. `(Smith et al., 2024; PMID: 12345678)`; unresolved ids stay `[@id]`."""
        cid = cid.lstrip("@")
        item = self.items.get(cid)
        if item is None:
            return f"[@{cid}]"
        return self.format_inline_item(item)

    def format_full(self, item: ReferenceItem) -> str:
        japanese = is_japanese(item.authors)
        parts = [format_authors_full(item.authors), f"({year_text(item, self.config)})."]
        if item.title:
            parts.append(f"{item.title}.")
        if item.container_title:
            journal = item.container_title if japanese else f"*{item.container_title}*"
            location = ""
            if item.volume:
                location = f"{item.volume}({item.issue})" if item.issue else item.volume
            if item.page:
                location = f"{location}, {item.page}" if location else item.page
            parts.append(f"{journal}, {location}." if location else f"{journal}.")
        if item.identifier:
            parts.append(item.identifier)
        return " ".join(parts)

    def expand(self, text: str) -> str:
        """Replace citation groups in `text` with their inline forms.

        A group none of whose ids resolve is left exactly as written.
        """
        if not isinstance(text, str):
            return text
        m = SOURCE_CITATION_RE.match(text.strip())
        if m:
            item = self.items.get(m.group(1))
            return self.format_inline_item(item) if item is not None else text
        return CITATION_GROUP_RE.sub(self._replace_group, text)

    def _replace_group(self, m: re.Match[str]) -> str:
        entries = list(iter_group(m.group(1)))
        if not any(cid in self.items for cid, _ in entries):
            return m.group(0)
        return ", ".join(self.format_inline(cid) for cid, _ in entries)


__all__ = [
    "FormatConfig",
    "CitationFormatter",
    "format_authors_full",
    "author_labels",
    "is_japanese",
    "year_text",
]
