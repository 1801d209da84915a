"""Command line entry point for notion-docs-sync.

Usable both from a shell and as a GitHub Action step: inputs arrive as CLI
arguments or ``NOTION_*`` / ``INPUT_*`` environment variables, and when
``$GITHUB_OUTPUT`` is set the run's status, updated pages and errors are
written there as step outputs.
"""

import argparse
import asyncio
import json
import logging
import os
import sys

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from . import __version__
from .config import Config, load_config
from .config_loader import discover_config_files, load_hierarchical_config
from .config_schema import UnifiedConfig, build_config, to_fallbacks
from .logger import setup_logging
from .sync.engine import create_sync_service
from .sync.models import SyncResult, SyncStatus
from .sync.reporter import format_sync_result, result_to_json, write_action_outputs

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notion-docs-sync",
        description="Sync a directory of markdown documents into Notion pages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Token, destination and source from NOTION_* env vars or .env
  notion-docs-sync

  # Everything on the command line
  notion-docs-sync --token secret_xxx --destination-id <page id or URL> --source docs

  # Structured output for scripting
  notion-docs-sync --json

Note: the root README.md is written into the destination page itself; every
other markdown file becomes a child page of the destination.
        """,
    )
    parser.add_argument(
        "--token",
        help="Notion integration token (takes precedence over NOTION_TOKEN env var and config files)"
        " (visible in process list -- prefer NOTION_TOKEN env var for security)",
    )
    parser.add_argument(
        "--destination-id",
        help="Destination page id or URL (takes precedence over NOTION_DESTINATION_ID)",
    )
    parser.add_argument(
        "--source",
        help="Directory holding the markdown tree (takes precedence over NOTION_SOURCE)",
    )
    parser.add_argument(
        "--log-file",
        help="Also write log records to this file",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--debug-format",
        choices=["text", "json"],
        default="text",
        help="Console log format outside GitHub Actions (default: text)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON instead of a text summary",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"notion-docs-sync version {__version__}",
    )
    return parser


def _load_unified_config() -> UnifiedConfig:
    """Read the YAML config files, if any.

    Raises:
        ValueError: If a file cannot be parsed or holds invalid values.
    """
    if not discover_config_files():
        return UnifiedConfig()
    try:
        return build_config(load_hierarchical_config())
    except (yaml.YAMLError, ValidationError) as e:
        raise ValueError(f"Invalid config file: {e}") from e


def _resolve_config(args: argparse.Namespace) -> tuple[Config, UnifiedConfig]:
    """Merge .env, YAML and CLI sources into a validated ``Config``."""
    # .env first so ${VAR} interpolation and env lookups can see it
    load_dotenv()
    unified = _load_unified_config()
    config = load_config(
        token=args.token,
        destination_id=args.destination_id,
        source=args.source,
        debug=args.debug,
        yaml_fallbacks=to_fallbacks(unified),
    )
    return config, unified


def _print_result(result: SyncResult, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result_to_json(result), indent=2))
    else:
        print(format_sync_result(result))


def run(argv: list[str] | None = None) -> None:
    """Entry point that parses CLI arguments, runs one sync and reports it.

    Exits with status 1 on a configuration error or a failed run.
    """
    args = _build_parser().parse_args(argv)
    github = os.getenv("GITHUB_ACTIONS") == "true"

    try:
        config, unified = _resolve_config(args)
    except ValueError as e:
        setup_logging(
            mode="github" if github else "cli",
            debug=args.debug,
            debug_format=args.debug_format,
        )
        logger.error("Configuration error: %s", e)
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(
        mode="github" if github else "cli",
        debug=config.debug,
        log_file=args.log_file or unified.logging.file,
        debug_format=args.debug_format,
        level=unified.logging.level,
    )
    logger.info(
        "Syncing %s into Notion page %s", config.source, config.destination_id
    )

    engine = create_sync_service(config)
    try:
        result = asyncio.run(engine.run(config.destination_id, config.source))
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)

    _print_result(result, args.json)

    output_path = os.getenv("GITHUB_OUTPUT")
    if output_path:
        write_action_outputs(result, output_path)

    if result.status == SyncStatus.FAILED:
        print(f"ERROR: {', '.join(result.errors)}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    run()
