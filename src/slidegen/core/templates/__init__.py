"""Template definitions, content validation and evaluation."""

from __future__ import annotations

from .css import CssCollector
from .engine import IconsHelper, RefsHelper, TemplateEngine
from .loader import TemplateDefinition, TemplateRegistry

__all__ = [
    "CssCollector",
    "IconsHelper",
    "RefsHelper",
    "TemplateDefinition",
    "TemplateEngine",
    "TemplateRegistry",
]
