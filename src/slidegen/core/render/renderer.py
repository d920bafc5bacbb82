from __future__ import annotations

from typing import Any, Mapping, Sequence

import yaml

from slidegen.core.document.models import PresentationMeta

FRONT_MATTER_DELIMITER = "---"
SLIDE_SEPARATOR = "\n\n---\n\n"
EMPTY_SLIDE = "<!-- empty slide -->"


class Renderer:
    """Assemble slide fragments into Marp Markdown.

    Layout:
        ---            front matter (marp: true, title, author, date, theme)
        ---
        <style>...</style>      only when templates contributed CSS
        slide 1
        ---
        slide 2
    """

    def __init__(self, default_theme: str = "default") -> None:
        self.default_theme = default_theme

    def front_matter(self, meta: PresentationMeta, extra: Mapping[str, Any] | None = None) -> str:
        fm: dict[str, Any] = {"marp": True, "title": meta.title}
        if meta.author:
            fm["author"] = meta.author
        if meta.date:
            fm["date"] = meta.date
        fm["theme"] = meta.theme or self.default_theme
        for key, value in (extra or {}).items():
            fm.setdefault(key, value)
        body = yaml.safe_dump(fm, sort_keys=False, allow_unicode=True, default_flow_style=False, width=10_000)
        return f"{FRONT_MATTER_DELIMITER}\n{body}{FRONT_MATTER_DELIMITER}"

    @staticmethod
    def style_block(css: str) -> str:
        return f"<style>\n{css.strip()}\n</style>"

    @staticmethod
    def speaker_notes(notes: str) -> str:
        return f"<!--\n{notes.strip()}\n-->"

    def render(
        self,
        fragments: Sequence[str],
        meta: PresentationMeta,
        *,
        notes: Sequence[str | None] | None = None,
        css: str = "",
        extra_front_matter: Mapping[str, Any] | None = None,
    ) -> str:
        parts = [self.front_matter(meta, extra_front_matter)]
        if css.strip():
            parts.append(self.style_block(css))

        slides: list[str] = []
        for i, fragment in enumerate(fragments):
            text = _trim_separators(fragment) or EMPTY_SLIDE
            note = notes[i] if notes is not None and i < len(notes) else None
            if note and note.strip():
                text = f"{text}\n\n{self.speaker_notes(note)}"
            slides.append(text)
        if slides:
            parts.append(SLIDE_SEPARATOR.join(slides))

        return "\n\n".join(parts) + "\n"


def _trim_separators(fragment: str) -> str:
    # a fragment must not open or close with its own `---` line
    lines = fragment.strip().splitlines()
    while lines and lines[0].strip() in ("", FRONT_MATTER_DELIMITER):
        lines.pop(0)
    while lines and lines[-1].strip() in ("", FRONT_MATTER_DELIMITER):
        lines.pop()
    return "\n".join(lines)


__all__ = ["Renderer", "SLIDE_SEPARATOR", "EMPTY_SLIDE", "FRONT_MATTER_DELIMITER"]
