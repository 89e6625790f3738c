# main.py

"""Entry point for catalog_sync (TUI or headless CLI)."""

import argparse
import asyncio
import logging
import sys

from catalog_sync.config.logging_config import setup_logging
from catalog_sync.config.settings import Settings

logger = logging.getLogger("catalog_sync.main")

# CLI flag -> product form field name
_FIELD_FLAGS: dict[str, str] = {
    "name": "name",
    "count": "count",
    "image_url": "imageUrl",
    "weight": "weight",
    "width": "width",
    "height": "height",
}


def _add_product_fields(
    parser: argparse.ArgumentParser, required: bool,
) -> None:
    """Register the product form flags on a sub-parser."""
    parser.add_argument("--name", required=required)
    parser.add_argument("--count", required=required)
    parser.add_argument(
        "--image-url", dest="image_url", required=required
    )
    parser.add_argument("--weight", required=required)
    parser.add_argument("--width", required=required)
    parser.add_argument("--height", required=required)


def _add_format(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="catalog_sync",
        description="Product catalog client for a REST backend.",
        epilog=f"Backend: {Settings.API_BASE_URL}",
    )
    sub = parser.add_subparsers(dest="command")

    list_cmd = sub.add_parser("list", help="List products.")
    list_cmd.add_argument(
        "--sort",
        choices=["name", "count"],
        default=Settings.DEFAULT_SORT,
        help="Display order (default: %(default)s).",
    )
    _add_format(list_cmd)

    show_cmd = sub.add_parser("show", help="Show a product and its comments.")
    show_cmd.add_argument("product_id")
    _add_format(show_cmd)

    add_cmd = sub.add_parser("add", help="Create a product.")
    _add_product_fields(add_cmd, required=True)

    update_cmd = sub.add_parser("update", help="Edit a product.")
    update_cmd.add_argument("product_id")
    _add_product_fields(update_cmd, required=False)

    delete_cmd = sub.add_parser("delete", help="Delete a product.")
    delete_cmd.add_argument("product_id")

    comment_cmd = sub.add_parser("comment", help="Add a comment.")
    comment_cmd.add_argument("product_id")
    comment_cmd.add_argument("text")

    uncomment_cmd = sub.add_parser("uncomment", help="Delete a comment.")
    uncomment_cmd.add_argument("product_id")
    uncomment_cmd.add_argument("comment_id")

    sub.add_parser("health", help="Check backend connectivity.")
    return parser


def _collect_fields(args: argparse.Namespace) -> dict[str, str]:
    """Map the provided product flags to form field names."""
    return {
        field: str(getattr(args, flag))
        for flag, field in _FIELD_FLAGS.items()
        if getattr(args, flag, None) is not None
    }


def _run_tui() -> None:
    """Launch the interactive Textual TUI."""
    from catalog_sync.ui.app import CatalogApp

    try:
        app = CatalogApp()
        app.run()
    except Exception:
        logger.critical("Fatal error during TUI run", exc_info=True)
        raise
    finally:
        logger.info("catalog_sync TUI shutting down")


def _run_cli(args: argparse.Namespace) -> int:
    """Dispatch a headless sub-command and return its exit code."""
    from catalog_sync.cli import runner

    command = args.command
    if command == "list":
        coro = runner.cli_list(args.sort, args.output_format)
    elif command == "show":
        coro = runner.cli_show(args.product_id, args.output_format)
    elif command == "add":
        coro = runner.cli_add(_collect_fields(args))
    elif command == "update":
        coro = runner.cli_update(args.product_id, _collect_fields(args))
    elif command == "delete":
        coro = runner.cli_delete(args.product_id)
    elif command == "comment":
        coro = runner.cli_comment(args.product_id, args.text)
    elif command == "uncomment":
        coro = runner.cli_uncomment(args.product_id, args.comment_id)
    else:
        coro = runner.run_health_check()
    return asyncio.run(coro)


def main() -> None:
    """Route to the TUI (no command) or a headless CLI command."""
    parser = _build_parser()
    args = parser.parse_args()

    # The TUI owns the terminal, so it logs to file only
    log_file = setup_logging(console=args.command is not None)
    logger.info(
        "catalog_sync starting (%s), log file: %s",
        args.command or "tui",
        log_file,
    )

    if args.command is None:
        _run_tui()
    else:
        sys.exit(_run_cli(args))


if __name__ == "__main__":
    main()
