"""
Command line entry point: import data for an offline deal.

Usage:
    boost-import-data [options] <deal uuid | proposal cid> <file name>
"""

import argparse
import sys

import structlog

from .clients.boost_client import BoostApiClient
from .config import get_settings
from .errors import OfflineDealImportError
from .fetcher import RemoteFetcher
from .logging import configure_logging
from .workflow import ImportRequest, OfflineDealImporter

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='boost-import-data',
        description='Import data for an offline deal',
    )
    parser.add_argument(
        'identifier',
        help='deal UUID, or signed proposal CID for legacy deals',
    )
    parser.add_argument(
        'file_name',
        help='payload file name, joined to --local-path and --remote-path',
    )
    parser.add_argument(
        '--delete-after-import',
        action=argparse.BooleanOptionalAction,
        default=True,
        help='delete the data after the deal has been added to a sector (default: on)',
    )
    parser.add_argument(
        '--remote',
        action=argparse.BooleanOptionalAction,
        default=True,
        help='download the file when it is not present locally (default: on)',
    )
    parser.add_argument(
        '--remote-path',
        default='',
        help='base URL the file is downloaded from',
    )
    parser.add_argument(
        '--local-path',
        default='',
        help='local directory (or base path) the file is staged in',
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the import command; returns the process exit code."""
    args = build_parser().parse_args(argv)

    request = ImportRequest(
        identifier=args.identifier,
        file_name=args.file_name,
        local_path=args.local_path,
        remote_path=args.remote_path,
        remote=args.remote,
        delete_after_import=args.delete_after_import,
    )

    try:
        settings = get_settings()
        configure_logging(json_output=settings.LOG_JSON, log_level=settings.LOG_LEVEL)
        with BoostApiClient.from_settings(settings) as client:
            importer = OfflineDealImporter(
                deal_service=client,
                fetcher=RemoteFetcher(timeout=settings.HTTP_TIMEOUT_SECONDS),
            )
            result = importer.run(request)
    except OfflineDealImportError as exc:
        logger.error(
            'import.failed',
            error=str(exc),
            error_type=type(exc).__name__,
        )
        print(f'ERROR: {exc.message}', file=sys.stderr)
        return 1

    print(result.message)
    return 0


if __name__ == '__main__':
    sys.exit(main())
