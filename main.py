#!/usr/bin/env python3
"""Main entry point for Polar Flow Exporter."""

import argparse
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

from config import settings
from clients.polar_client import PolarFlowClient
from exporters.session_exporter import SessionExporter
from models.session import ExportFormat
from sinks import ArchiveSink, DirectorySink, ExportSink
from utils.errors import AuthError, ExporterError

logger = logging.getLogger(__name__)


def setup_logging(verbosity: int = 0):
    """Set up logging configuration.

    Args:
        verbosity: Number of -v flags (0 = warnings only, 1 = info, 2+ = debug)
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = getattr(logging, settings.LOG_LEVEL.upper(), logging.WARNING)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE))

    logging.basicConfig(level=level, format=settings.LOG_FORMAT, handlers=handlers, force=True)


def parse_input_date(value: str) -> date:
    """Parse a DD.MM.YYYY command line date."""
    try:
        return datetime.strptime(value, settings.INPUT_DATE_FORMAT).date()
    except ValueError:
        raise argparse.ArgumentTypeError("invalid date format") from None


def format_banner_date(value: date) -> str:
    """Format a date as day-month-year without padding the day (e.g. 1-Jan-1970)."""
    return f"{value.day}-{value:%b-%Y}"


class ExporterArgumentParser(argparse.ArgumentParser):
    """Argument parser reporting usage errors with exit code 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for CLI commands."""
    parser = ExporterArgumentParser(
        prog='polar-flow-exporter',
        description='Exports Polar Flow training sessions in various formats',
        formatter_class=argparse.RawTextHelpFormatter,
        epilog=(
            'Examples:\n'
            '  %(prog)s -u me@example.com -p secret zip -o sessions.zip\n'
            '  %(prog)s -u me@example.com -p secret -f gpx -s 01.01.2023 files -d exports/\n'
            '  %(prog)s -vv --on-error continue files'
        )
    )

    parser.add_argument(
        '--version', action='version', version=f'%(prog)s {settings.VERSION}'
    )
    parser.add_argument(
        '--email', '-u', metavar='EMAIL',
        help='Polar Flow registration email (default: $POLAR_EMAIL)'
    )
    parser.add_argument(
        '--password', '-p', metavar='PASSWORD',
        help='Polar Flow registration password (default: $POLAR_PASSWORD)'
    )
    parser.add_argument(
        '--format', '-f', metavar='EXPORT-FORMAT', type=str.lower, default='tcx',
        choices=[fmt.value for fmt in ExportFormat],
        help='Training sessions export format: tcx, gpx or csv (default: tcx)'
    )
    parser.add_argument(
        '--start-date', '-s', metavar='DATE', type=parse_input_date,
        default=parse_input_date(settings.DEFAULT_START_DATE),
        help=f'Start date for export, format DD.MM.YYYY (default: {settings.DEFAULT_START_DATE})'
    )
    parser.add_argument(
        '--end-date', '-e', metavar='DATE', type=parse_input_date,
        default=parse_input_date(settings.DEFAULT_END_DATE),
        help=f'End date for export, format DD.MM.YYYY (default: {settings.DEFAULT_END_DATE})'
    )
    parser.add_argument(
        '--verbose', '-v', action='count', default=0,
        help='Sets the level of verbosity (-v sessions, -vv debug)'
    )
    parser.add_argument(
        '--on-error', choices=settings.ON_ERROR_CHOICES, default=settings.ON_DOWNLOAD_ERROR,
        help=f'What to do when a session fails to export (default: {settings.ON_DOWNLOAD_ERROR})'
    )
    parser.add_argument(
        '--discard-partial', action='store_true', default=settings.DISCARD_PARTIAL,
        help='Remove already exported output when the run aborts'
    )

    subparsers = parser.add_subparsers(dest='mode', metavar='{zip,files}', help='Output mode')

    zip_parser = subparsers.add_parser('zip', help='exports all sessions into zip archive')
    zip_parser.add_argument(
        '--output-file', '-o', metavar='ZIP-ARCHIVE', required=True, help='output archive name'
    )

    files_parser = subparsers.add_parser('files', help='exports all sessions into directory')
    files_parser.add_argument(
        '--output-directory', '-d', metavar='OUTPUT-DIRECTORY', default='.',
        help='output directory name (default: current directory)'
    )

    return parser


def create_sink(args: argparse.Namespace) -> ExportSink:
    """Build the sink selected by the output mode subcommand."""
    if args.mode == 'zip':
        return ArchiveSink(Path(args.output_file))
    if args.mode == 'files':
        return DirectorySink(Path(args.output_directory or '.'))
    raise ValueError(f"Invalid mode: {args.mode}")


def run(args: argparse.Namespace) -> int:
    """Run one export.

    Returns:
        Process exit code
    """
    email, password = settings.get_polar_credentials(args.email, args.password)
    fmt = ExportFormat.parse(args.format)

    with PolarFlowClient() as client:
        try:
            client.login(email, password)
        except AuthError as e:
            print(f"Unable to login to polar flow, {e}", file=sys.stderr)
            return 1

        sink = create_sink(args)
        logger.info(
            f"Export of the sessions from {format_banner_date(args.start_date)} "
            f"to {format_banner_date(args.end_date)} "
            f"started, exporter version: {settings.VERSION}"
        )

        try:
            records = client.get_session_list(args.start_date, args.end_date)
            summary = SessionExporter(client, sink, fmt, on_error=args.on_error).export_all(records)
        except ExporterError:
            if args.discard_partial:
                sink.discard()
            else:
                sink.close()
                logger.warning(f"Partial output left in {sink.location}")
            raise

        sink.close()

    if not summary.ok:
        print(f"{len(summary.failed)} sessions could not be exported:", file=sys.stderr)
        for session_id, message in summary.failed:
            print(f"Session {session_id} failed: {message}", file=sys.stderr)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if not args.mode:
        print(f"Invalid mode, {parser.format_usage()}", file=sys.stderr)
        return 1

    try:
        return run(args)
    except (ExporterError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
