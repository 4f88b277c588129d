#!/usr/bin/env python3
"""
Command-line interface for the OpenAPI client runner
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import ConfigurationError, load_config
from .document import to_json
from .files import build_inputs
from .merge import DEFAULT_TITLE, DEFAULT_VERSION, merge_openapis
from .pipeline import ClientPipeline
from .refs import replace_refs_in_file
from .tools import ToolError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openapi-client-runner",
        description="Merge OpenAPI specs and regenerate the client library built from them"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run the full fetch, merge, generate, build and push pipeline")
    run.add_argument(
        "-c", "--config",
        type=Path,
        help="YAML file overriding the default runner settings"
    )
    run.add_argument(
        "--no-push",
        action="store_true",
        help="Build the client but do not commit or push it"
    )

    merge = subparsers.add_parser("merge", help="Merge local spec directories into one OpenAPI JSON file")
    merge.add_argument("output", type=Path, help="Merged JSON file to write")
    merge.add_argument(
        "directories",
        type=Path,
        nargs="+",
        help="Directories holding .yaml, .yml or .json specs (not searched recursively)"
    )
    merge.add_argument("--title", default=DEFAULT_TITLE, help="Title of the merged document (default: %(default)s)")
    merge.add_argument("--version", default=DEFAULT_VERSION, help="Version of the merged document (default: %(default)s)")

    refs = subparsers.add_parser("replace-refs", help="Rewrite known cross-file $ref pointers")
    refs.add_argument("input", type=Path, help="JSON file to rewrite")
    refs.add_argument("output", type=Path, nargs="?", help="Output file (default: rewrite in place)")

    return parser


def run_merge(args) -> int:
    inputs = build_inputs(args.directories)
    result = merge_openapis(inputs, args.title, args.version)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(to_json(result.document), encoding="utf-8")

    document = result.document
    print(f"Merged OpenAPI spec written to {args.output}")
    print(f"Total paths in merged file: {len(document.paths)}")
    print(f"Total schemas in merged file: {len(document.components['schemas'])}")
    if result.skipped_count:
        print(f"Skipped {result.skipped_count} unreadable file(s)")
    return 0


def run_pipeline(args) -> int:
    config = load_config(args.config, push=False if args.no_push else None)
    return 0 if ClientPipeline(config).process() else 1


def main(argv=None) -> int:
    """Main CLI entry point"""
    args = build_parser().parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        if args.command == "merge":
            return run_merge(args)
        if args.command == "replace-refs":
            replace_refs_in_file(args.input, args.output or args.input)
            return 0
        return run_pipeline(args)

    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return 1

    except ToolError as e:
        logger.error("%s", e)
        return 2

    except OSError as e:
        logger.error("%s", e)
        return 1

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
