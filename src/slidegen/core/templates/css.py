from __future__ import annotations

from typing import Iterable

from slidegen.core.templates.loader import TemplateRegistry


class CssCollector:
    """Gather template CSS, once per template name, in first-use order."""

    def __init__(self, registry: TemplateRegistry) -> None:
        self.registry = registry

    def collect(self, template_names: Iterable[str]) -> str:
        blocks: list[str] = []
        for name in dict.fromkeys(template_names):
            tpl = self.registry.get(name)
            if tpl is not None and tpl.css and tpl.css.strip():
                blocks.append(tpl.css.strip())
        return "\n\n".join(blocks)


__all__ = ["CssCollector"]
