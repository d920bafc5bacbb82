from __future__ import annotations

import html
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from slidegen.core.document.models import Presentation, PresentationMeta, Slide
from slidegen.core.errors import DocumentSchemaError, UnknownIconError, slide_location
from slidegen.core.icons.resolver import IconResolver
from slidegen.core.references.formatter import CitationFormatter
from slidegen.core.templates.engine import IconsHelper, RefsHelper, TemplateEngine
from slidegen.core.templates.loader import TemplateRegistry

logger = logging.getLogger(__name__)

RAW_TEMPLATE = "raw"


@dataclass(frozen=True)
class TransformContext:
    meta: PresentationMeta
    slide_index: int
    total_slides: int


@dataclass
class SlideFragment:
    text: str
    warnings: list[str] = field(default_factory=list)


class Transformer:
    """Bind each slide's content to its template and evaluate it."""

    def __init__(
        self,
        registry: TemplateRegistry,
        engine: TemplateEngine,
        icons: IconResolver | None = None,
    ) -> None:
        self.registry = registry
        self.engine = engine
        self.icons = icons

    def transform(self, slide: Slide, context: TransformContext, formatter: CitationFormatter) -> SlideFragment:
        index = context.slide_index
        if slide.template == RAW_TEMPLATE:
            return SlideFragment(text=(slide.raw or "").strip())

        tpl = self.registry.require(slide.template, slide_index=index, source_line=slide.source_line)
        errors = self.registry.validate_content(slide.template, slide.content)
        if errors:
            raise DocumentSchemaError(
                f'Slide content does not match template "{slide.template}"'
                f"{slide_location(index, slide.source_line)}",
                errors,
                slide_index=index,
                source_line=slide.source_line,
            )

        warnings: list[str] = []
        where = slide_location(index, slide.source_line)

        def render_icon(name: str, **options: Any) -> str:
            if self.icons is None:
                warnings.append(f"Unknown icon: {name} (no icon registry loaded){where}")
                return html.escape(str(name))
            try:
                return self.icons.render(
                    str(name),
                    size=options.get("size"),
                    color=options.get("color"),
                    css_class=options.get("class"),
                )
            except UnknownIconError as e:
                warnings.append(f"{e.message}{where}")
                return html.escape(str(name))

        ctx = {
            "content": slide.content,
            "meta": {
                "title": context.meta.title,
                "author": context.meta.author,
                "date": context.meta.date,
                "theme": context.meta.theme,
            },
            "slide": {"index": index, "total": context.total_slides},
            "icons": IconsHelper(render_icon),
            "refs": RefsHelper(formatter.format_inline, formatter.expand),
        }
        output = self.engine.render(tpl.output, ctx, name=tpl.name)
        output = output.strip()
        if slide.css_class:
            output = f"<!-- _class: {slide.css_class} -->\n{output}"
        for w in warnings:
            logger.warning(w)
        return SlideFragment(text=output, warnings=warnings)

    def transform_all(
        self,
        presentation: Presentation,
        formatter: CitationFormatter,
        *,
        max_workers: int = 1,
    ) -> tuple[list[str], list[str]]:
        """Transform every slide; returns (fragments, warnings) in slide order.

        With `max_workers > 1` slides are evaluated on a thread pool; results
        are placed by slide index, and when several slides fail the error of
        the lowest-indexed one is raised.
        """
        slides = presentation.slides
        total = len(slides)
        contexts = [TransformContext(presentation.meta, i, total) for i in range(total)]

        if max_workers <= 1 or total <= 1:
            results = [self.transform(s, c, formatter) for s, c in zip(slides, contexts)]
        else:
            results = self._transform_parallel(slides, contexts, formatter, max_workers)

        fragments = [r.text for r in results]
        warnings = [w for r in results for w in r.warnings]
        logger.debug("transformed %d slides (%d warnings)", total, len(warnings))
        return fragments, warnings

    def _transform_parallel(
        self,
        slides: tuple[Slide, ...],
        contexts: list[TransformContext],
        formatter: CitationFormatter,
        max_workers: int,
    ) -> list[SlideFragment]:
        results: list[SlideFragment | None] = [None] * len(slides)
        with ThreadPoolExecutor(max_workers=min(max_workers, len(slides)), thread_name_prefix="slidegen") as pool:
            futures: list[Future[SlideFragment]] = [
                pool.submit(self.transform, s, c, formatter) for s, c in zip(slides, contexts)
            ]
            try:
                for i, fut in enumerate(futures):
                    results[i] = fut.result()
            except BaseException:
                for fut in futures:
                    fut.cancel()
                raise
        return [r for r in results if r is not None]


__all__ = ["Transformer", "TransformContext", "SlideFragment", "RAW_TEMPLATE"]
