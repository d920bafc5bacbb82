"""Icon registry and inline icon rendering."""

from __future__ import annotations

from .registry import IconDefaults, IconRegistry, IconSource, icon_references
from .resolver import IconResolver

__all__ = ["IconDefaults", "IconRegistry", "IconResolver", "IconSource", "icon_references"]
