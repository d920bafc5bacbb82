"""Conversion pipeline: YAML presentation source -> Marp Markdown.

Stages run strictly in sequence, each consuming the full output of the
previous one:

    parse -> collect-citations -> resolve-references -> merge-bibliography
          -> transform -> render

Fatal errors abort the run as `PipelineError` tagged with one of
`parse`, `transform`, `render`, `initialize` or `unknown`. Non-fatal
conditions (reference tool missing, unknown citation id, unknown icon) are
returned as warnings in `PipelineResult`. Warnings belong to a single run and
are never stored on the `Pipeline` instance.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable

from slidegen.core.config import Config
from slidegen.core.document.models import ParsedDocument, Presentation
from slidegen.core.document.parser import Parser
from slidegen.core.errors import (
    DocumentSchemaError,
    DocumentSyntaxError,
    SlidegenError,
    TemplateRenderError,
    UnknownTemplateError,
    slide_location,
)
from slidegen.core.icons.registry import IconRegistry, icon_references
from slidegen.core.icons.resolver import IconResolver
from slidegen.core.references.bibliography import (
    BIBLIOGRAPHY_TEMPLATE,
    BibliographyGenerator,
    merge_bibliography,
    wants_auto_bibliography,
)
from slidegen.core.references.extractor import CitationExtractor
from slidegen.core.references.formatter import CitationFormatter
from slidegen.core.references.models import ReferenceItem, Resolution
from slidegen.core.references.resolver import NOT_INSTALLED, CliReferenceResolver, ReferenceResolver
from slidegen.core.render.renderer import Renderer
from slidegen.core.templates.css import CssCollector
from slidegen.core.templates.engine import TemplateEngine
from slidegen.core.templates.loader import TemplateRegistry
from slidegen.core.transform.transformer import RAW_TEMPLATE, Transformer

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    PARSE = "parse"
    COLLECT_CITATIONS = "collect-citations"
    RESOLVE_REFERENCES = "resolve-references"
    MERGE_BIBLIOGRAPHY = "merge-bibliography"
    TRANSFORM = "transform"
    RENDER = "render"
    DONE = "done"
    # failure classifications only
    INITIALIZE = "initialize"
    UNKNOWN = "unknown"


class PipelineError(Exception):
    """A fatal failure, tagged with the stage classification that produced it."""

    def __init__(self, message: str, stage: Stage, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.cause = cause

    def __str__(self) -> str:
        return str(self.cause) if isinstance(self.cause, SlidegenError) else self.message


class PipelineCancelled(Exception):
    def __init__(self, stage: Stage) -> None:
        super().__init__(f"pipeline cancelled before {stage.value}")
        self.stage = stage


@dataclass(frozen=True)
class PipelineResult:
    output: str
    citations: tuple[str, ...]
    warnings: tuple[str, ...]
    slide_count: int


@dataclass(frozen=True)
class ValidationResult:
    document: ParsedDocument
    citations: tuple[str, ...]
    warnings: tuple[str, ...]


@dataclass
class RunState:
    """Per-run mutable state. A fresh one is created by every `run` call."""

    stage: Stage = Stage.PARSE
    warnings: list[str] = field(default_factory=list)
    cancel: threading.Event | None = None

    def enter(self, stage: Stage) -> None:
        if self.cancel is not None and self.cancel.is_set():
            raise PipelineCancelled(stage)
        self.stage = stage
        logger.debug("stage: %s", stage.value)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


NOT_INSTALLED_WARNING = (
    "reference-manager CLI is not available ({reason}). "
    "Install it to enable citation features: npm install -g @ncukondo/reference-manager"
)
FAILED_WARNING = "Failed to resolve references: {reason}"


def classify(error: BaseException, stage: Stage) -> Stage:
    if isinstance(error, TemplateRenderError):
        return Stage.RENDER
    if isinstance(error, UnknownTemplateError):
        return Stage.TRANSFORM
    if isinstance(error, DocumentSchemaError):
        return Stage.PARSE if stage is Stage.PARSE else Stage.TRANSFORM
    if isinstance(error, DocumentSyntaxError):
        return Stage.PARSE
    if stage in (Stage.PARSE, Stage.TRANSFORM, Stage.RENDER):
        return stage
    return Stage.UNKNOWN


class Pipeline:
    def __init__(
        self,
        config: Config | None = None,
        *,
        resolver: ReferenceResolver | None = None,
        icon_registry: IconRegistry | None = None,
    ) -> None:
        self.config = config or Config()
        refs = self.config.references
        self.resolver = resolver or CliReferenceResolver(refs.command, timeout=refs.timeout)
        self.parser = Parser()
        self.extractor = CitationExtractor()
        self.registry = TemplateRegistry()
        self.engine = TemplateEngine()
        self.icon_registry = icon_registry
        self.renderer = Renderer(default_theme=self.config.theme)
        self.css = CssCollector(self.registry)
        self.transformer: Transformer | None = None
        self._init_lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self.transformer is not None

    def initialize(self) -> Transformer:
        """Load templates and the icon registry. Safe to call more than once."""
        with self._init_lock:
            if self.transformer is not None:
                return self.transformer
            try:
                self.registry.load_builtin(self.config.builtin_templates)
                if self.config.custom_templates:
                    self.registry.load_custom(self.config.custom_templates)
                if self.icon_registry is None and self.config.icon_registry is not None:
                    self.icon_registry = IconRegistry.load(self.config.icon_registry)
            except SlidegenError as e:
                raise PipelineError(f"Failed to initialize pipeline: {e.message}", Stage.INITIALIZE, e) from e
            icons = IconResolver(self.icon_registry) if self.icon_registry is not None else None
            self.transformer = Transformer(self.registry, self.engine, icons)
            logger.info("pipeline initialized with %d templates", len(self.registry))
            return self.transformer

    def run(
        self,
        input_path: str | Path,
        *,
        output_path: str | Path | None = None,
        cancel: threading.Event | None = None,
    ) -> PipelineResult:
        return self._run(lambda: self.parser.parse_file(input_path), output_path=output_path, cancel=cancel)

    def run_text(
        self,
        text: str,
        *,
        output_path: str | Path | None = None,
        cancel: threading.Event | None = None,
    ) -> PipelineResult:
        return self._run(lambda: self.parser.parse(text), output_path=output_path, cancel=cancel)

    def validate(self, input_path: str | Path) -> ValidationResult:
        """Check a document without rendering it.

        Every slide is checked against its template (fatal on failure). Icon
        references the registry cannot serve and citation ids the resolver
        does not know are returned as warnings; citations are looked up with
        one batched call, as in a run.
        """
        self.initialize()
        state = RunState()
        try:
            doc = self.parser.parse_file(input_path)
            state.enter(Stage.TRANSFORM)
            for i, slide in enumerate(doc.presentation.slides):
                if slide.template == RAW_TEMPLATE:
                    continue
                self.registry.require(slide.template, slide_index=i, source_line=slide.source_line)
                errors = self.registry.validate_content(slide.template, slide.content)
                if errors:
                    raise DocumentSchemaError(
                        f'Slide {i + 1} does not match template "{slide.template}"',
                        errors,
                        slide_index=i,
                        source_line=slide.source_line,
                    )
        except SlidegenError as e:
            raise PipelineError(e.message, classify(e, state.stage), e) from e

        presentation = doc.presentation
        self._check_icons(presentation, state)

        citations = self.extractor.extract_from_presentation(presentation)
        ids = self.extractor.unique_ids(citations)
        if ids and self._references_enabled(presentation):
            resolution = self.resolver.resolve(ids)
            if not resolution.available:
                state.warn(f"Reference validation skipped: {resolution.reason or resolution.unavailable}")
            else:
                first_seen = {c.id: c.slide_index for c in reversed(citations)}
                for cid in resolution.missing(ids):
                    idx = first_seen[cid]
                    where = slide_location(idx, presentation.slides[idx].source_line)
                    state.warn(f"Reference not found: {cid}{where}")

        return ValidationResult(document=doc, citations=tuple(ids), warnings=tuple(state.warnings))

    def _check_icons(self, presentation: Presentation, state: RunState) -> None:
        if self.icon_registry is None:
            return
        for i, slide in enumerate(presentation.slides):
            where = slide_location(i, slide.source_line)
            for ref in dict.fromkeys(icon_references(slide.content)):
                problem = self.icon_registry.problem(ref)
                if problem is not None:
                    state.warn(f"{problem}{where}")

    def _run(
        self,
        load: Callable[[], ParsedDocument],
        *,
        output_path: str | Path | None,
        cancel: threading.Event | None,
    ) -> PipelineResult:
        transformer = self.initialize()
        state = RunState(cancel=cancel)
        try:
            state.enter(Stage.PARSE)
            doc = load()
            presentation = doc.presentation

            state.enter(Stage.COLLECT_CITATIONS)
            citation_ids = self.extractor.unique_ids(self.extractor.extract_from_presentation(presentation))
            logger.info("collected %d unique citations", len(citation_ids))

            state.enter(Stage.RESOLVE_REFERENCES)
            resolution = self._resolve(presentation, citation_ids, state)

            state.enter(Stage.MERGE_BIBLIOGRAPHY)
            presentation = self._merge_bibliography(presentation, citation_ids, resolution, state)

            state.enter(Stage.TRANSFORM)
            formatter = CitationFormatter(resolution.items, self.config.references.format)
            fragments, warnings = transformer.transform_all(
                presentation, formatter, max_workers=self.config.max_workers
            )
            state.warnings.extend(warnings)

            state.enter(Stage.RENDER)
            output = self.renderer.render(
                fragments,
                presentation.meta,
                notes=[s.notes for s in presentation.slides],
                css=self.css.collect(presentation.template_names),
            )
            if output_path is not None:
                out = Path(output_path)
                out.parent.mkdir(parents=True, exist_ok=True)
                out.write_text(output, encoding="utf-8")
                logger.info("wrote %s", out)

            state.stage = Stage.DONE
        except (PipelineError, PipelineCancelled):
            raise
        except Exception as e:
            stage = classify(e, state.stage)
            message = e.message if isinstance(e, SlidegenError) else f"{type(e).__name__}: {e}"
            logger.debug("run failed in %s", state.stage.value, exc_info=True)
            raise PipelineError(message, stage, e) from e

        return PipelineResult(
            output=output,
            citations=tuple(citation_ids),
            warnings=tuple(state.warnings),
            slide_count=len(presentation.slides),
        )

    def _references_enabled(self, presentation: Presentation) -> bool:
        meta_refs = presentation.meta.references
        return self.config.references.enabled and (meta_refs is None or meta_refs.enabled)

    def _resolve(self, presentation: Presentation, ids: list[str], state: RunState) -> Resolution:
        if not ids or not self._references_enabled(presentation):
            return Resolution()
        # one batched lookup for the whole document
        resolution = self.resolver.resolve(ids)
        if not resolution.available:
            template = NOT_INSTALLED_WARNING if resolution.unavailable == NOT_INSTALLED else FAILED_WARNING
            state.warn(template.format(reason=resolution.reason or resolution.unavailable))
            return resolution
        for cid in resolution.missing(ids):
            state.warn(f"Reference not found: {cid}")
        return resolution

    def _merge_bibliography(
        self,
        presentation: Presentation,
        ids: list[str],
        resolution: Resolution,
        state: RunState,
    ) -> Presentation:
        if not any(
            s.template == BIBLIOGRAPHY_TEMPLATE and wants_auto_bibliography(s.content) for s in presentation.slides
        ):
            return presentation
        items: dict[str, ReferenceItem] = resolution.items
        generator = BibliographyGenerator(CitationFormatter(items, self.config.references.format))
        merged, warnings = merge_bibliography(
            presentation,
            ids,
            items,
            generator,
            report_missing=resolution.available and self._references_enabled(presentation),
        )
        for w in warnings:
            state.warn(w)
        return merged


__all__ = [
    "Pipeline",
    "PipelineError",
    "PipelineCancelled",
    "PipelineResult",
    "RunState",
    "Stage",
    "ValidationResult",
    "classify",
]
