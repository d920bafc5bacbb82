"""Citations, reference lookup and bibliography generation."""

from __future__ import annotations

from .bibliography import BibliographyGenerator, merge_bibliography
from .extractor import CitationExtractor
from .formatter import CitationFormatter, FormatConfig
from .models import Author, BibliographyEntry, BibliographyResult, Citation, ReferenceItem, Resolution
from .resolver import CliReferenceResolver, ReferenceResolver, StaticReferenceResolver

__all__ = [
    "Author",
    "BibliographyEntry",
    "BibliographyGenerator",
    "BibliographyResult",
    "Citation",
    "CitationExtractor",
    "CitationFormatter",
    "CliReferenceResolver",
    "FormatConfig",
    "ReferenceItem",
    "ReferenceResolver",
    "Resolution",
    "StaticReferenceResolver",
    "merge_bibliography",
]
