"""
Tests for citation marker extraction
"""

from slidegen.core.document import Presentation, PresentationMeta, Slide
from slidegen.core.references import CitationExtractor


class TestExtract:
    """Tests for CitationExtractor.extract on single strings."""

    def test_single_marker(self):
        assert CitationExtractor().extract("As shown [@smith2024].") == [("smith2024", None)]

    def test_group_with_locator(self):
        """Groups may hold several ids; each may carry a locator."""
        out = CitationExtractor().extract("See [@smith2024, p. 42; @tanaka2023].")
        assert out == [("smith2024", "p. 42"), ("tanaka2023", None)]

    def test_whole_field_marker(self):
        """A field consisting only of @id is a citation."""
        assert CitationExtractor().extract("@smith2024") == [("smith2024", None)]
        assert CitationExtractor().extract("  @smith2024  ") == [("smith2024", None)]

    def test_email_is_not_a_citation(self):
        assert CitationExtractor().extract("mail foo@example.com today") == []

    def test_every_occurrence_is_kept(self):
        out = CitationExtractor().extract("[@a] then [@b] and again [@a]")
        assert [cid for cid, _ in out] == ["a", "b", "a"]

    def test_no_markers(self):
        assert CitationExtractor().extract("plain text [not a citation]") == []


class TestExtractFromPresentation:
    """Tests for slide and presentation level extraction."""

    def test_field_paths(self):
        """Content is walked depth-first; notes come last."""
        slide = Slide(
            template="bullet-list",
            content={"title": "T", "items": ["x [@a]", {"text": "y [@b]"}]},
            notes="remember [@c]",
        )
        cites = CitationExtractor().extract_from_slide(slide, 2)
        assert [(c.id, c.field_path) for c in cites] == [
            ("a", "content.items[0]"),
            ("b", "content.items[1].text"),
            ("c", "notes"),
        ]
        assert all(c.slide_index == 2 for c in cites)

    def test_unique_ids_first_appearance(self):
        """unique_ids keeps each id once, in order of first appearance."""
        pres = Presentation(
            meta=PresentationMeta(title="x"),
            slides=(
                Slide(template="bullet-list", content={"items": ["[@b]", "[@a; @b]"]}),
                Slide(template="quote", content={"text": "q", "source": "@a"}, notes="[@c]"),
            ),
        )
        ex = CitationExtractor()
        cites = ex.extract_from_presentation(pres)
        assert [c.id for c in cites] == ["b", "a", "b", "a", "c"]
        assert ex.unique_ids(cites) == ["b", "a", "c"]

    def test_non_string_values_ignored(self):
        slide = Slide(template="section", content={"title": "T", "number": 3, "flag": True})
        assert CitationExtractor().extract_from_slide(slide, 0) == []
