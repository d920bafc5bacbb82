from __future__ import annotations

import html
import re
from pathlib import Path

from jinja2.sandbox import SandboxedEnvironment

from slidegen.core.errors import UnknownIconError
from slidegen.core.icons.registry import IconRegistry, IconSource

_SAFE_NAME_RE = re.compile(r"^[A-Za-z0-9_.:-]+$")


class IconResolver:
    """Render an icon reference or alias to inline markup.

    Raises `UnknownIconError` for anything it cannot render; callers decide
    whether that is fatal (the transformer treats it as a warning).
    """

    def __init__(self, registry: IconRegistry) -> None:
        self.registry = registry
        self._env = SandboxedEnvironment(autoescape=False)

    def render(
        self,
        name_or_alias: str,
        *,
        size: str | None = None,
        color: str | None = None,
        css_class: str | None = None,
    ) -> str:
        reference = self.registry.resolve_alias(name_or_alias)
        parsed = self.registry.parse_reference(reference)
        if parsed is None:
            raise UnknownIconError(name_or_alias, "Invalid icon reference (expected prefix:name)")
        prefix, name = parsed
        if not _SAFE_NAME_RE.match(name):
            raise UnknownIconError(name_or_alias, "Invalid icon name")
        source = self.registry.sources.get(prefix)
        if source is None:
            raise UnknownIconError(name_or_alias, f'Unknown icon source prefix "{prefix}"')

        d = self.registry.defaults
        size = size or d.size
        color = self.registry.resolve_color(color or d.color)
        classes = " ".join(c for c in ("icon", f"icon-{name.replace(':', '-')}", css_class) if c)
        style = f"font-size: {size}; color: {color};"

        if source.type == "web-font":
            if source.render:
                return self._env.from_string(source.render).render(
                    name=name, style=style, size=size, color=color, **{"class": classes}
                )
            return f'<span class="{classes}" style="{style}">{html.escape(name)}</span>'
        if source.type == "local-svg":
            return self._local_svg(source, name, name_or_alias, classes, size, color)
        if source.type == "svg-sprite":
            return (
                f'<svg class="{classes}" width="{size}" height="{size}" fill="{color}">'
                f'<use xlink:href="{source.url or ""}#{name}"/></svg>'
            )
        # svg-inline needs a fetched copy; remote fetching is not done here
        return (
            f'<span class="{classes}" style="{style}" data-icon-source="{source.name}" '
            f'data-icon-name="{html.escape(name)}">[{html.escape(name)}]</span>'
        )

    def _local_svg(self, source: IconSource, name: str, reference: str, classes: str, size: str, color: str) -> str:
        if source.path is None:
            raise UnknownIconError(reference, f'Local SVG source "{source.name}" has no path')
        svg_path = Path(source.path) / f"{name}.svg"
        try:
            svg = svg_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError as e:
            raise UnknownIconError(reference, f"Icon file not found ({svg_path})") from e
        svg = _set_attr(svg, "class", classes)
        svg = _set_attr(svg, "width", size)
        svg = _set_attr(svg, "height", size)
        if color != "currentColor":
            svg = svg.replace('fill="currentColor"', f'fill="{color}"')
        return svg


def _set_attr(svg: str, attr: str, value: str) -> str:
    pattern = re.compile(rf'(<svg\b[^>]*?\s){attr}="[^"]*"')
    if pattern.search(svg):
        return pattern.sub(lambda m: f'{m.group(1)}{attr}="{value}"', svg, count=1)
    return svg.replace("<svg", f'<svg {attr}="{value}"', 1)


__all__ = ["IconResolver"]
