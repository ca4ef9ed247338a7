"""CLI entry point for ecsmapper."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ecsmapper import __version__, logger
from ecsmapper.async_runner import run_async
from ecsmapper.client import EcsMappingClient
from ecsmapper.dependencies import ensure_cli_dependencies
from ecsmapper.exceptions import BackendError, MappingValidationError, PackageError
from ecsmapper.logging import configure_logging
from ecsmapper.reconciliation import MappingsTable
from ecsmapper.settings import Settings, get_settings
from ecsmapper.submission import BatchMappingSession
from ecsmapper.typing.enums import ClassifierModel


def _positive_int(value: str) -> int:
    """Parse a strictly positive integer CLI value.

    Args:
        value (str): CLI value.

    Raises:
        argparse.ArgumentTypeError: If value is not an integer >= 1.

    Returns:
        int: Parsed value.
    """
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{value}'") from exc
    if number < 1:
        raise argparse.ArgumentTypeError("value must be >= 1")  # noqa: TRY003
    return number


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="ecsmapper")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    preview_parser = subparsers.add_parser("preview", help="Show the /map-batch payload built from JSON samples")
    preview_parser.add_argument("--input", default="-", dest="input_path", help="JSON file, '-' for stdin")
    preview_parser.add_argument("--sourcetype", default=None)
    preview_parser.add_argument("--max-depth", type=int, default=None, dest="max_depth")

    map_parser = subparsers.add_parser("map", help="Map fields of JSON samples to ECS via /map-batch")
    map_parser.add_argument("--input", default="-", dest="input_path", help="JSON file, '-' for stdin")
    map_parser.add_argument("--sourcetype", default=None)
    map_parser.add_argument("--model", choices=[model.value for model in ClassifierModel], default=None)
    map_parser.add_argument("--limit", type=_positive_int, default=None)
    map_parser.add_argument("--max-depth", type=int, default=None, dest="max_depth")
    map_parser.add_argument("--output-dir", type=Path, default=None, dest="output_dir")
    map_parser.add_argument("--no-export", action="store_true", dest="no_export")

    list_parser = subparsers.add_parser("list", help="List persisted mappings")
    list_parser.add_argument("--search", default="")
    list_parser.add_argument("--page", type=_positive_int, default=1)
    list_parser.add_argument("--page-size", type=_positive_int, default=None, dest="page_size")
    list_parser.add_argument("--export-csv", type=Path, default=None, dest="export_csv", metavar="DIR")

    edit_parser = subparsers.add_parser("edit", help="Override or verify one persisted mapping")
    edit_parser.add_argument("row_id", type=int)
    edit_parser.add_argument("--mapped-field-name", default=None, dest="mapped_field_name")
    verified = edit_parser.add_mutually_exclusive_group()
    verified.add_argument("--verified", action="store_true", dest="verified", default=None)
    verified.add_argument("--unverified", action="store_false", dest="verified", default=None)
    edit_parser.add_argument("--search", default="")
    edit_parser.add_argument("--page", type=_positive_int, default=1)
    edit_parser.add_argument("--page-size", type=_positive_int, default=None, dest="page_size")

    return parser


def _read_input(input_path: str) -> str:
    if input_path == "-":
        return sys.stdin.read()
    return Path(input_path).read_text(encoding="utf-8")


def _build_session(args: argparse.Namespace, settings: Settings, client: EcsMappingClient) -> BatchMappingSession:
    """Build a batch session from CLI arguments, falling back to settings defaults.

    Args:
        args (argparse.Namespace): Parsed CLI args.
        settings (Settings): Runtime settings.
        client (EcsMappingClient): Mapping backend client.

    Returns:
        BatchMappingSession: Session holding the sample text and request options.
    """
    session = BatchMappingSession(client, settings)
    session.text = _read_input(args.input_path)
    if args.sourcetype:
        session.sourcetype = args.sourcetype
    if getattr(args, "model", None):
        session.model = args.model
    if getattr(args, "limit", None):
        session.limit = args.limit
    if args.max_depth is not None:
        session.max_depth = args.max_depth
    return session


def _run_preview(args: argparse.Namespace, settings: Settings) -> int:
    session = _build_session(args, settings, EcsMappingClient(settings))
    preview = session.preview_payload()
    if not preview:
        logger.info("No payload to preview")
        return 0
    sys.stdout.write(preview + "\n")
    return 0


async def _run_map(args: argparse.Namespace, settings: Settings) -> int:
    from ecsmapper import display  # noqa: PLC0415

    session = _build_session(args, settings, EcsMappingClient(settings))
    await session.submit()
    if session.error:
        display.print_error(session.error)
        return 1
    if not session.results:
        logger.info("No results to display")
        return 0

    display.print_results(session.result_rows())
    if not args.no_export:
        output_dir = args.output_dir or Path(settings.export_dir)
        session.download_json(output_dir)
    return 0


async def _load_table(args: argparse.Namespace, settings: Settings) -> MappingsTable:
    table = MappingsTable(EcsMappingClient(settings), page_size=args.page_size or settings.page_size)
    table.set_query(args.search)
    table.page = args.page
    await table.load()
    return table


async def _run_list(args: argparse.Namespace, settings: Settings) -> int:
    from ecsmapper import display  # noqa: PLC0415

    table = await _load_table(args, settings)
    display.print_mappings(table)
    if args.export_csv is not None:
        table.download_csv(args.export_csv)
    return 0


async def _run_edit(args: argparse.Namespace, settings: Settings) -> int:
    from ecsmapper import display  # noqa: PLC0415

    table = await _load_table(args, settings)
    row = table.find(args.row_id)
    if row is None:
        display.print_error(f"Mapping {args.row_id} is not on the loaded page.")
        return 1

    session = table.start_edit(row)
    if args.mapped_field_name is not None:
        session.mapped_field_name = args.mapped_field_name
    if args.verified is not None:
        session.human_verified = args.verified

    try:
        await table.save_edit()
    except MappingValidationError as exc:
        display.print_error(exc.message)
        return 1
    except BackendError as exc:
        display.print_error(f"Failed to update: {exc}")
        return 1
    display.print_mappings(table)
    return 0


def main() -> int:
    """Run the CLI.

    Returns:
        int: Exit code (0 for success, 1 for error, 130 when interrupted).
    """
    settings = get_settings()
    configure_logging(settings=settings)

    parser = build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    ensure_cli_dependencies()

    try:
        if args.command == "preview":
            return _run_preview(args, settings)
        if args.command == "map":
            return run_async(_run_map(args, settings))
        if args.command == "list":
            return run_async(_run_list(args, settings))
        return run_async(_run_edit(args, settings))
    except PackageError:
        logger.exception("Command failed", extra={"command": args.command})
        return 1
    except OSError:
        logger.exception("Could not read input", extra={"command": args.command})
        return 1
    except KeyboardInterrupt:
        logger.info("Command aborted by user")
        return 130
    finally:
        settings.close_httpx_clients()


if __name__ == "__main__":
    raise SystemExit(main())
