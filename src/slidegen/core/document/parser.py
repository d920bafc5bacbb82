from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from slidegen.core.document.models import ParsedDocument, Presentation, PresentationMeta, Slide
from slidegen.core.errors import DocumentSchemaError, DocumentSyntaxError
from slidegen.core.validate.schema_validate import schema_errors_with_paths

logger = logging.getLogger(__name__)


class _DocumentLoader(yaml.SafeLoader):
    """SafeLoader that keeps dates as plain strings (`date: 2024-05-01` stays text)."""


_DocumentLoader.yaml_implicit_resolvers = {
    first: [r for r in resolvers if r[0] != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _compose_and_load(text: str) -> tuple[yaml.Node | None, Any]:
    loader = _DocumentLoader(text)
    try:
        node = loader.get_single_node()
        data = loader.construct_document(node) if node is not None else None
    finally:
        loader.dispose()
    return node, data


def _slide_lines(root: yaml.Node | None) -> list[int]:
    """1-based start line of every item under the top-level `slides` key."""
    if not isinstance(root, yaml.MappingNode):
        return []
    for key_node, value_node in root.value:
        if isinstance(key_node, yaml.ScalarNode) and key_node.value == "slides":
            if isinstance(value_node, yaml.SequenceNode):
                return [item.start_mark.line + 1 for item in value_node.value]
            return []
    return []


class Parser:
    """Parse a YAML presentation source into a `ParsedDocument`.

    Raises `DocumentSyntaxError` when the text is not YAML at all and
    `DocumentSchemaError` when the structure is wrong (missing `meta`/`slides`,
    slide without `template`, ...). Both are raised before anything else in
    the pipeline runs.
    """

    def parse(self, text: str) -> ParsedDocument:
        try:
            root, data = _compose_and_load(text)
        except yaml.MarkedYAMLError as e:
            mark = e.problem_mark
            line = mark.line + 1 if mark is not None else None
            column = mark.column + 1 if mark is not None else None
            where = f" at line {line}, column {column}" if line is not None else ""
            raise DocumentSyntaxError(
                f"Failed to parse YAML{where}: {e.problem or e}",
                line=line,
                column=column,
            ) from e
        except yaml.YAMLError as e:
            raise DocumentSyntaxError(f"Failed to parse YAML: {e}") from e

        lines = _slide_lines(root)

        errors = schema_errors_with_paths("presentation", data)
        if errors:
            details = []
            for path, msg in errors:
                if len(path) >= 2 and path[0] == "slides" and isinstance(path[1], int) and path[1] < len(lines):
                    msg = f"line {lines[path[1]]}: {msg}"
                details.append(msg)
            raise DocumentSchemaError("Schema validation failed", details)

        meta = PresentationMeta.from_dict(data["meta"])
        slides = tuple(
            Slide.from_dict(s, source_line=lines[i] if i < len(lines) else None)
            for i, s in enumerate(data["slides"])
        )
        logger.debug("parsed presentation %r with %d slides", meta.title, len(slides))
        return ParsedDocument(presentation=Presentation(meta=meta, slides=slides), slide_lines=tuple(lines))

    def parse_file(self, path: str | Path) -> ParsedDocument:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise DocumentSyntaxError(f"File not found: {path}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentSyntaxError(f"Failed to read file: {path} ({e})") from e
        return self.parse(text)


__all__ = ["Parser"]
