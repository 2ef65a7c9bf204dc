"""
Command line entry point: read an OpenAPI document and print the Go type
declarations generated from it.

  oapi-typegen petstore.yaml --package petstore -o types.gen.go
  oapi-typegen petstore.yaml --include-tags pets,store --format json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from oapi_typegen.config import Configuration, load_config
from oapi_typegen.generate import generate, render_declarations, result_to_dict
from oapi_typegen.loader import load_document
from oapi_typegen.names import is_valid_go_identity

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def _eprint(*args: object) -> None:
    print(*args, file=sys.stderr)


def configure_logging(level: str = "WARNING") -> None:
    """Send log records to stderr; stdout carries the generated code."""
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
    root.setLevel(level.upper())


def _split_list(values: list[str]) -> Optional[list[str]]:
    """Flatten repeated, comma-separated option values; None when none were given."""
    out = [v.strip() for value in values for v in value.split(",") if v.strip()]
    return out or None


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Generate Go type declarations from an OpenAPI 3.0/3.1 document.")
    p.add_argument("spec", help="Path to the OpenAPI JSON/YAML document.")
    p.add_argument(
        "--config",
        default=None,
        help="YAML/JSON configuration file (package, output-options, compatibility, import-mapping).",
    )
    p.add_argument("--package", default=None, help="Go package name (overrides the configuration file).")
    p.add_argument(
        "--include-tags",
        action="append",
        default=[],
        help="Only generate types for operations with one of these tags. Comma-separated; can be repeated.",
    )
    p.add_argument(
        "--exclude-tags",
        action="append",
        default=[],
        help="Skip operations with any of these tags. Comma-separated; can be repeated.",
    )
    p.add_argument(
        "--include-operation-ids",
        action="append",
        default=[],
        help="Only generate types for these operation ids. Comma-separated; can be repeated.",
    )
    p.add_argument(
        "--exclude-operation-ids",
        action="append",
        default=[],
        help="Skip these operation ids. Comma-separated; can be repeated.",
    )
    p.add_argument(
        "--skip-prune",
        action="store_true",
        help="Keep components that nothing references.",
    )
    p.add_argument(
        "--inline-refs",
        action="store_true",
        help="Dereference internal '#/...' refs while loading (component names are restored where possible).",
    )
    p.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write output to this file (default: stdout).",
    )
    p.add_argument(
        "--format",
        choices=["go", "json"],
        default="go",
        help="'go' (default) emits Go source; 'json' emits a summary of the generated types.",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (-v for info, -vv for debug).",
    )
    return p.parse_args(argv)


def _configuration(args: argparse.Namespace) -> Configuration:
    config = load_config(args.config) if args.config else Configuration()
    if args.package:
        config.package = args.package
    return config.with_overrides(
        include_tags=_split_list(args.include_tags),
        exclude_tags=_split_list(args.exclude_tags),
        include_operation_ids=_split_list(args.include_operation_ids),
        exclude_operation_ids=_split_list(args.exclude_operation_ids),
        skip_prune=True if args.skip_prune else None,
    )


def main(argv: list[str]) -> int:
    args = _parse_args(argv)
    configure_logging(["WARNING", "INFO", "DEBUG"][min(args.verbose, 2)])

    spec = Path(args.spec)
    if not spec.exists():
        _eprint(f"error: spec does not exist: {spec}")
        return 2
    if args.package is not None and not is_valid_go_identity(args.package):
        _eprint(f"error: invalid Go package name: {args.package!r}")
        return 2

    try:
        config = _configuration(args)
        document = load_document(spec, inline_refs=bool(args.inline_refs))
        logger.info("loaded %s (openapi %s)", spec, document.openapi or "unknown")
        result = generate(document, config)
        if args.format == "json":
            content = json.dumps(result_to_dict(result, config), indent=2, ensure_ascii=False) + "\n"
        else:
            content = render_declarations(result, config)

        if args.output:
            Path(args.output).write_text(content, encoding="utf-8")
            logger.info("wrote %s", args.output)
        else:
            sys.stdout.write(content)
    except Exception as e:
        _eprint(f"error: {e}")
        return 1

    return 0


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
