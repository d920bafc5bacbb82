from __future__ import annotations

from .transformer import RAW_TEMPLATE, SlideFragment, TransformContext, Transformer

__all__ = ["RAW_TEMPLATE", "SlideFragment", "TransformContext", "Transformer"]
