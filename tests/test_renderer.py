"""
Tests for Marp Markdown assembly
"""

import yaml

from slidegen.core.document import PresentationMeta
from slidegen.core.render import EMPTY_SLIDE, SLIDE_SEPARATOR, Renderer


def _front_matter(output):
    return yaml.safe_load(output.split("---\n")[1])


class TestRenderer:
    """Tests for Renderer.render."""

    def test_layout(self):
        out = Renderer().render(["# A", "# B"], PresentationMeta(title="Demo", author="Me"))
        assert out == (
            "---\nmarp: true\ntitle: Demo\nauthor: Me\ntheme: default\n---\n\n"
            "# A\n\n---\n\n# B\n"
        )

    def test_separator_count(self):
        out = Renderer().render(["# 1", "# 2", "# 3"], PresentationMeta(title="x"), css=".a { color: red; }")
        assert out.count(SLIDE_SEPARATOR) == 2

    def test_no_slides(self):
        out = Renderer().render([], PresentationMeta(title="x"))
        assert out == "---\nmarp: true\ntitle: x\ntheme: default\n---\n"

    def test_empty_fragment(self):
        out = Renderer().render(["# A", "  ", "# C"], PresentationMeta(title="x"))
        assert f"{SLIDE_SEPARATOR}{EMPTY_SLIDE}{SLIDE_SEPARATOR}" in out

    def test_separator_fragment(self):
        """A fragment that is only `---` does not double the separator."""
        out = Renderer().render(["# A", "---", "# B"], PresentationMeta(title="x"))
        body = out.split("---\n", 2)[2]
        assert "---\n\n---" not in body
        assert out.count(SLIDE_SEPARATOR) == 2
        assert f"{SLIDE_SEPARATOR}{EMPTY_SLIDE}{SLIDE_SEPARATOR}" in out

    def test_fragment_separators_trimmed(self):
        out = Renderer().render(["---\n# X\n---\n", "# Y"], PresentationMeta(title="x"))
        assert out.endswith(f"---\n\n# X{SLIDE_SEPARATOR}# Y\n")

    def test_theme(self):
        assert _front_matter(Renderer("gaia").render([], PresentationMeta()))["theme"] == "gaia"
        meta = PresentationMeta(theme="uncover")
        assert _front_matter(Renderer("gaia").render([], meta))["theme"] == "uncover"

    def test_front_matter_quoting(self):
        """Values that need YAML quoting survive a round trip."""
        meta = PresentationMeta(title="Demo: part 1", date="2024-05-01")
        fm = _front_matter(Renderer().render(["# A"], meta))
        assert fm["title"] == "Demo: part 1"
        assert fm["date"] == "2024-05-01"
        assert fm["marp"] is True

    def test_extra_front_matter(self):
        out = Renderer().render([], PresentationMeta(title="x"), extra_front_matter={"paginate": True, "title": "no"})
        fm = _front_matter(out)
        assert fm["paginate"] is True
        assert fm["title"] == "x"

    def test_style_after_front_matter(self):
        out = Renderer().render(["# A"], PresentationMeta(title="x"), css=".a { color: red; }")
        assert "---\n\n<style>\n.a { color: red; }\n</style>\n\n# A\n" in out

    def test_speaker_notes(self):
        out = Renderer().render(["# A", "# B"], PresentationMeta(title="x"), notes=["Say hi", None])
        assert "# A\n\n<!--\nSay hi\n-->" + SLIDE_SEPARATOR + "# B\n" in out
