from __future__ import annotations

from .renderer import EMPTY_SLIDE, SLIDE_SEPARATOR, Renderer

__all__ = ["EMPTY_SLIDE", "SLIDE_SEPARATOR", "Renderer"]
