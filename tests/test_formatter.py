"""
Tests for inline and full citation formatting
"""

from slidegen.core.references import CitationFormatter, FormatConfig, ReferenceItem
from slidegen.core.references.formatter import format_authors_full, is_japanese


class TestInline:
    """Tests for CitationFormatter.format_inline."""

    def test_et_al_with_pmid(self, formatter):
        """More than max_authors collapses to et al.; PMID preferred over DOI."""
        assert formatter.format_inline("smith2024") == "(Smith et al., 2024; PMID: 12345678)"

    def test_japanese_authors(self, formatter):
        assert formatter.format_inline("tanaka2023") == "(田中・山田, 2023; DOI: 10.2000/jp.2023)"

    def test_leading_at_is_ignored(self, formatter):
        assert formatter.format_inline("@smith2024") == formatter.format_inline("smith2024")

    def test_missing_year(self, formatter):
        assert formatter.format_inline("adams") == "(adams, n.d.)"

    def test_unresolved_id(self, formatter):
        assert formatter.format_inline("ghost") == "[@ghost]"

    def test_two_english_authors(self):
        item = ReferenceItem.from_csl(
            {"id": "x", "author": [{"family": "Lee"}, {"family": "Kim"}], "issued": {"date-parts": [[2020]]}}
        )
        assert CitationFormatter({"x": item}).format_inline("x") == "(Lee & Kim, 2020)"

    def test_japanese_et_al(self):
        item = ReferenceItem.from_csl(
            {
                "id": "jp",
                "author": [{"family": "田中"}, {"family": "山田"}, {"family": "佐藤"}],
                "issued": {"date-parts": [[2021]]},
            }
        )
        assert CitationFormatter({"jp": item}).format_inline("jp") == "(田中ほか, 2021)"

    def test_config_overrides(self, reference_items):
        cfg = FormatConfig(max_authors=3, author_sep=" ", identifier_sep=", ")
        f = CitationFormatter(reference_items, cfg)
        assert f.format_inline("smith2024") == "(Smith, Johnson & Williams 2024, PMID: 12345678)"


class TestFull:
    """Tests for bibliography-style formatting."""

    def test_english_full(self, formatter, reference_items):
        text = formatter.format_full(reference_items["smith2024"])
        assert text == (
            "Smith, J., Johnson, A., & Williams, B. (2024). Deep learning for slides. "
            "*Journal of Slides*, 12(3), 45-67. PMID: 12345678"
        )

    def test_japanese_full(self, formatter, reference_items):
        text = formatter.format_full(reference_items["tanaka2023"])
        assert text == "田中太郎, 山田花子 (2023). 日本語の論文. 日本医学雑誌, 5, 1-10. DOI: 10.2000/jp.2023"

    def test_no_authors(self):
        assert format_authors_full(()) == "Unknown"

    def test_is_japanese(self, reference_items):
        assert is_japanese(reference_items["tanaka2023"].authors)
        assert not is_japanese(reference_items["smith2024"].authors)


class TestExpand:
    """Tests for in-text marker replacement."""

    def test_group_replaced(self, formatter):
        out = formatter.expand("Known [@tanaka2023; @smith2024].")
        assert out == "Known (田中・山田, 2023; DOI: 10.2000/jp.2023), (Smith et al., 2024; PMID: 12345678)."

    def test_unresolved_group_left_verbatim(self, formatter):
        assert formatter.expand("Unknown [@ghost, p. 3].") == "Unknown [@ghost, p. 3]."

    def test_partially_resolved_group(self, formatter):
        assert formatter.expand("[@smith2024; @ghost]") == "(Smith et al., 2024; PMID: 12345678), [@ghost]"

    def test_whole_field(self, formatter):
        assert formatter.expand("@adams") == "(adams, n.d.)"
        assert formatter.expand("@ghost") == "@ghost"

    def test_non_string_passthrough(self, formatter):
        assert formatter.expand(42) == 42

    def test_empty_formatter_changes_nothing(self):
        text = "Claim [@smith2024] and more."
        assert CitationFormatter().expand(text) == text
