"""Presentation source parsing.

    from slidegen.core.document import Parser
    doc = Parser().parse_file("slides.yaml")
    doc.presentation.slides[0].template
"""

from __future__ import annotations

from .models import ParsedDocument, Presentation, PresentationMeta, ReferencesMeta, Slide
from .parser import Parser

__all__ = [
    "Parser",
    "ParsedDocument",
    "Presentation",
    "PresentationMeta",
    "ReferencesMeta",
    "Slide",
]
