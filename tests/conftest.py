"""
Pytest configuration and shared fixtures
"""

import tempfile
from pathlib import Path
from typing import Any, Dict, Generator, List

import pytest

from slidegen.core.config import BUILTIN_ICON_REGISTRY, BUILTIN_TEMPLATES, Config
from slidegen.core.icons import IconRegistry, IconResolver
from slidegen.core.references import CitationFormatter, ReferenceItem, StaticReferenceResolver
from slidegen.core.templates import TemplateEngine, TemplateRegistry
from slidegen.core.transform.transformer import Transformer


CSL_RECORDS: List[Dict[str, Any]] = [
    {
        "id": "smith2024",
        "type": "article-journal",
        "title": "Deep learning for slides",
        "author": [
            {"family": "Smith", "given": "John"},
            {"family": "Johnson", "given": "Alice"},
            {"family": "Williams", "given": "Bob"},
        ],
        "container-title": "Journal of Slides",
        "volume": "12",
        "issue": "3",
        "page": "45-67",
        "issued": {"date-parts": [[2024, 3]]},
        "PMID": "12345678",
        "DOI": "10.1000/slides.2024",
    },
    {
        "id": "tanaka2023",
        "type": "article-journal",
        "title": "日本語の論文",
        "author": [
            {"family": "田中", "given": "太郎"},
            {"family": "山田", "given": "花子"},
        ],
        "container-title": "日本医学雑誌",
        "volume": "5",
        "page": "1-10",
        "issued": {"date-parts": [[2023]]},
        "DOI": "10.2000/jp.2023",
    },
    {
        "id": "adams",
        "type": "report",
        "title": "Undated note",
        "author": [{"family": "adams", "given": "Zoe"}],
    },
]

DECK = """\
meta:
  title: Demo Deck
  author: Jane Doe
  date: 2024-05-01
slides:
  - template: title
    content:
      title: Demo Deck
  - template: bullet-list
    content:
      title: Findings
      items:
        - First [@smith2024]
        - Second [@tanaka2023; @smith2024]
    notes: Mention [@adams]
  - template: bibliography
    content:
      title: References
      autoGenerate: true
      sort: author
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def csl_records() -> List[Dict[str, Any]]:
    return [dict(r) for r in CSL_RECORDS]


@pytest.fixture
def reference_items() -> Dict[str, ReferenceItem]:
    return {r["id"]: ReferenceItem.from_csl(r) for r in CSL_RECORDS}


@pytest.fixture
def formatter(reference_items) -> CitationFormatter:
    return CitationFormatter(reference_items)


@pytest.fixture
def resolver() -> StaticReferenceResolver:
    """Resolver that knows every record in CSL_RECORDS."""
    return StaticReferenceResolver.from_csl(CSL_RECORDS)


@pytest.fixture
def registry() -> TemplateRegistry:
    reg = TemplateRegistry()
    reg.load_builtin(BUILTIN_TEMPLATES)
    return reg


@pytest.fixture
def icon_registry() -> IconRegistry:
    return IconRegistry.load(BUILTIN_ICON_REGISTRY)


@pytest.fixture
def transformer(registry, icon_registry) -> Transformer:
    return Transformer(registry, TemplateEngine(), IconResolver(icon_registry))


@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def deck_text() -> str:
    return DECK


@pytest.fixture
def deck_file(temp_dir: Path) -> Path:
    path = temp_dir / "deck.yaml"
    path.write_text(DECK, encoding="utf-8")
    return path
