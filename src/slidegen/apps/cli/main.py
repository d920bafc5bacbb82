from __future__ import annotations

import argparse
import logging
from pathlib import Path

from slidegen import __version__
from slidegen.core.config import Config, load_config
from slidegen.core.errors import ConfigError
from slidegen.core.pipeline import Pipeline, PipelineCancelled, PipelineError, Stage

EXIT_OK = 0
EXIT_GENERAL = 1
EXIT_PARSE = 3
EXIT_TRANSFORM = 4
EXIT_RENDER = 5

_STAGE_EXIT = {
    Stage.PARSE: EXIT_PARSE,
    Stage.TRANSFORM: EXIT_TRANSFORM,
    Stage.RENDER: EXIT_RENDER,
}


def exit_code_for(stage: Stage) -> int:
    return _STAGE_EXIT.get(stage, EXIT_GENERAL)


def _default_output(input_path: Path) -> Path:
    return input_path.with_suffix(".md")


def _load_config(args: argparse.Namespace) -> Config | None:
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        print("[NG] invalid configuration")
        print(f"      detail: {e}")
        return None
    if getattr(args, "no_references", False):
        cfg.references.enabled = False
    return cfg


def _print_error(e: PipelineError) -> None:
    print(f"[NG] {e.stage.value} failed")
    for line in str(e).splitlines():
        print(f"      {line}")


def cmd_convert(args: argparse.Namespace) -> int:
    in_path = Path(args.input).resolve()
    out_path = Path(args.out).resolve() if args.out else _default_output(in_path)

    cfg = _load_config(args)
    if cfg is None:
        return EXIT_GENERAL

    pipeline = Pipeline(cfg)
    try:
        result = pipeline.run(in_path, output_path=out_path)
    except PipelineError as e:
        _print_error(e)
        return exit_code_for(e.stage)
    except PipelineCancelled as e:
        print(f"[NG] {e}")
        return EXIT_GENERAL

    for w in result.warnings:
        print(f"[WARN] {w}")
    print(f"[OK] converted {result.slide_count} slides ({len(result.citations)} citations): {out_path}")
    return EXIT_OK


def cmd_validate(args: argparse.Namespace) -> int:
    in_path = Path(args.input).resolve()
    cfg = _load_config(args)
    if cfg is None:
        return EXIT_GENERAL

    try:
        result = Pipeline(cfg).validate(in_path)
    except PipelineError as e:
        _print_error(e)
        return exit_code_for(e.stage)

    for w in result.warnings:
        print(f"[WARN] {w}")
    slides = len(result.document.presentation.slides)
    print(f"[OK] {in_path} ({slides} slides, {len(result.citations)} citations)")
    return EXIT_OK


def cmd_templates(args: argparse.Namespace) -> int:
    cfg = _load_config(args)
    if cfg is None:
        return EXIT_GENERAL

    pipeline = Pipeline(cfg)
    try:
        pipeline.initialize()
    except PipelineError as e:
        _print_error(e)
        return EXIT_GENERAL

    templates = pipeline.registry.list_by_category(args.category) if args.category else pipeline.registry.list()
    for t in templates:
        desc = f"  {t.description}" if t.description else ""
        print(f"{t.name:<16} [{t.category}]{desc}")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="slidegen")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--config", help="config file (default: slidegen.yaml or config.yaml in cwd)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_conv = sub.add_parser("convert", help="convert a YAML presentation to Marp markdown")
    p_conv.add_argument("input", help="presentation source (.yaml)")
    p_conv.add_argument("-o", "--out", help="output .md path (default: <input>.md)")
    p_conv.add_argument("--no-references", action="store_true", help="skip citation lookup")
    p_conv.set_defaults(func=cmd_convert)

    p_val = sub.add_parser("validate", help="check a presentation against its templates")
    p_val.add_argument("input", help="presentation source (.yaml)")
    p_val.add_argument("--no-references", action="store_true", help="skip citation lookup")
    p_val.set_defaults(func=cmd_validate)

    p_tpl = sub.add_parser("templates", help="list available templates")
    p_tpl.add_argument("--category", help="only list templates in this category")
    p_tpl.set_defaults(func=cmd_templates)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.ERROR,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
