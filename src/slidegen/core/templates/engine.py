from __future__ import annotations

import threading
from typing import Any, Callable

from jinja2 import Template, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from slidegen.core.errors import TemplateRenderError

# Errors a template can raise while being evaluated against slide content.
# RuntimeError covers RecursionError from self-recursive macros.
_EVAL_ERRORS = (TemplateError, TypeError, ValueError, AttributeError, LookupError, ArithmeticError, RuntimeError)


class IconsHelper:
    """`icons.render(name, size=..., color=..., class=...)` inside templates."""

    def __init__(self, render: Callable[..., str]) -> None:
        self._render = render

    def render(self, name: str, **options: Any) -> str:
        return self._render(name, **options)


class RefsHelper:
    """`refs.cite("@id")` and `refs.expand(text)` inside templates."""

    def __init__(self, cite: Callable[[str], str], expand: Callable[[str], str]) -> None:
        self._cite = cite
        self._expand = expand

    def cite(self, cid: str) -> str:
        return self._cite(cid)

    def expand(self, text: Any) -> Any:
        return self._expand(text) if isinstance(text, str) else text


class TemplateEngine:
    """Sandboxed Jinja2 evaluation of template `output` sources.

    The only side-effecting callables a template can reach are the `icons`
    and `refs` helpers passed in the render context.
    """

    def __init__(self) -> None:
        self.env = SandboxedEnvironment(
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )
        self._compiled: dict[tuple[str, str], Template] = {}
        self._lock = threading.Lock()

    def compile(self, source: str, *, name: str | None = None) -> Template:
        key = (name or "", source)
        with self._lock:
            tpl = self._compiled.get(key)
            if tpl is not None:
                return tpl
        try:
            tpl = self.env.from_string(source)
        except TemplateError as e:
            raise TemplateRenderError(f"Template syntax error{_named(name)}: {e}", template=name) from e
        with self._lock:
            return self._compiled.setdefault(key, tpl)

    def render(self, source: str, context: dict[str, Any], *, name: str | None = None) -> str:
        tpl = self.compile(source, name=name)
        try:
            return tpl.render(**context)
        except _EVAL_ERRORS as e:
            raise TemplateRenderError(f"Template evaluation failed{_named(name)}: {e}", template=name) from e


def _named(name: str | None) -> str:
    return f' in "{name}"' if name else ""


__all__ = ["TemplateEngine", "IconsHelper", "RefsHelper"]
