"""
Tests for the icon registry and icon rendering
"""

import pytest

from slidegen.core.errors import IconRegistryError, UnknownIconError
from slidegen.core.icons import IconRegistry, IconResolver, icon_references

STAR_SVG = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24"><path fill="currentColor" d="M0 0h24v24z"/></svg>'


@pytest.fixture
def local_registry(temp_dir):
    (temp_dir / "svg").mkdir()
    (temp_dir / "svg" / "star.svg").write_text(STAR_SVG, encoding="utf-8")
    return IconRegistry.from_dict(
        {
            "sources": [
                {"name": "local", "type": "local-svg", "prefix": "my", "path": "svg"},
                {"name": "sprite", "type": "svg-sprite", "prefix": "sp", "url": "sprite.svg"},
                {"name": "plain", "type": "web-font", "prefix": "wf"},
            ],
            "aliases": {"fav": "my:star"},
            "colors": {"accent": "#ff5500"},
            "defaults": {"size": "1em"},
        },
        base_dir=temp_dir,
    )


class TestIconRegistry:
    """Tests for IconRegistry."""

    def test_load_builtin(self, icon_registry):
        assert "mi" in icon_registry.sources
        assert icon_registry.resolve_alias("check") == "mi:check_circle"
        assert icon_registry.resolve_alias("mi:home") == "mi:home"
        assert icon_registry.resolve_color("primary").startswith("#")
        assert icon_registry.resolve_color("red") == "red"

    def test_relative_path(self, local_registry, temp_dir):
        assert local_registry.sources["my"].path == temp_dir / "svg"

    @pytest.mark.parametrize(
        "reference,expected",
        [
            ("mi:home", ("mi", "home")),
            ("iconify:mdi:account", ("iconify", "mdi:account")),
            ("home", None),
            (":home", None),
            ("mi:", None),
        ],
    )
    def test_parse_reference(self, reference, expected):
        assert IconRegistry.parse_reference(reference) == expected

    @pytest.mark.parametrize(
        "reference,expected",
        [
            ("mi:home", None),
            ("check", None),
            ("iconify:mdi:account", None),
            ("nothing", 'Unknown icon "nothing"'),
            ("zz:x", 'Unknown icon source "zz" in "zz:x"'),
        ],
    )
    def test_problem(self, icon_registry, reference, expected):
        assert icon_registry.problem(reference) == expected

    def test_icon_references(self):
        content = {
            "title": 'Intro icon("mi:home")',
            "items": [{"icon": "check", "text": "see icon('ms:star')"}, "plain", {"icon": 3}],
            "icons": "mi:ignored",
        }
        assert list(icon_references(content)) == ["mi:home", "check", "ms:star"]

    def test_invalid_registry(self):
        with pytest.raises(IconRegistryError):
            IconRegistry.from_dict({"sources": [{"name": "x", "type": "bogus", "prefix": "x"}]})

    def test_missing_file(self, temp_dir):
        with pytest.raises(IconRegistryError):
            IconRegistry.load(temp_dir / "registry.yaml")


class TestIconResolver:
    """Tests for IconResolver.render."""

    def test_web_font_alias(self, icon_registry):
        html = IconResolver(icon_registry).render("check")
        assert html.startswith('<span class="material-icons icon icon-check_circle"')
        assert html.endswith(">check_circle</span>")
        assert "font-size: 24px" in html

    def test_named_color(self, icon_registry):
        html = IconResolver(icon_registry).render("mi:home", color="primary", size="2em")
        assert "color: #1565c0" in html
        assert "font-size: 2em" in html

    def test_web_font_without_render_template(self, local_registry):
        html = IconResolver(local_registry).render("wf:bolt", css_class="big")
        assert html == '<span class="icon icon-bolt big" style="font-size: 1em; color: currentColor;">bolt</span>'

    def test_local_svg(self, local_registry):
        svg = IconResolver(local_registry).render("fav", size="32px", color="accent")
        assert svg.startswith("<svg ")
        assert 'class="icon icon-star"' in svg
        assert 'width="32px"' in svg
        assert 'height="32px"' in svg
        assert 'fill="#ff5500"' in svg

    def test_local_svg_missing_file(self, local_registry):
        with pytest.raises(UnknownIconError):
            IconResolver(local_registry).render("my:nothing")

    def test_svg_sprite(self, local_registry):
        svg = IconResolver(local_registry).render("sp:arrow")
        assert '<use xlink:href="sprite.svg#arrow"/>' in svg

    @pytest.mark.parametrize("name", ["zz:home", "plainname", "mi:../etc"])
    def test_unknown(self, icon_registry, name):
        with pytest.raises(UnknownIconError) as exc:
            IconResolver(icon_registry).render(name)
        assert exc.value.reference == name
