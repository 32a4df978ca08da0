"""Command-line interface for the WORM uploader.

Provides argument parsing and main entry point for provisioning a
bucket with Object Lock and uploading a retention-locked file.
"""

import argparse
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from worm_upload.config import ConfigError, StorageConfig, load_storage_config
from worm_upload.models import InputError, UploadRequest
from worm_upload.preparer import DigestError
from worm_upload.reporters import ConsoleReporter
from worm_upload.runner import WormUploadRunner
from worm_upload.s3_client import build_s3_client
from worm_upload.storage import ObjectLockStorage, S3ObjectLockStorage

USAGE_MESSAGE = "You must supply a bucket name [-b BUCKET] and a filename [-f FILENAME]"

EXIT_OK = 0
EXIT_STEP_FAILED = 1
EXIT_ERROR = 2
EXIT_FATAL = 3


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="worm-upload",
        description=(
            "Create a bucket with Object Lock, upload a file with a COMPLIANCE "
            "retention lock and verify it"
        ),
    )

    parser.add_argument(
        "-b", "--bucket",
        default="",
        help="The name of the bucket",
    )

    parser.add_argument(
        "-f", "--file",
        default="",
        help="The file to upload",
    )

    parser.add_argument(
        "-k", "--key",
        default="",
        help="Object key (default: the file path as given)",
    )

    parser.add_argument(
        "-r", "--region",
        help="Region override (default: WORM_REGION, AWS_REGION or us-east-1)",
    )

    parser.add_argument(
        "--endpoint-url",
        metavar="URL",
        help="Endpoint of an S3-compatible provider (default: WORM_ENDPOINT_URL)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress per-step output, show only summary",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log storage calls at debug level",
    )

    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    """Route log records through Rich to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    if verbose:
        # botocore is very chatty at DEBUG
        logging.getLogger("botocore").setLevel(logging.INFO)
        logging.getLogger("urllib3").setLevel(logging.INFO)


def build_request(args: argparse.Namespace) -> UploadRequest:
    """Build the upload request from parsed arguments.

    Raises:
        InputError: If the bucket name or file name is missing.
    """
    if not args.bucket or not args.file:
        raise InputError(USAGE_MESSAGE)
    return UploadRequest(
        file_path=args.file,
        bucket_name=args.bucket,
        object_key=args.key,
    )


def build_storage(config: StorageConfig) -> ObjectLockStorage:
    """Build the S3 storage adapter.

    Raises:
        ConfigError: If credentials, region or endpoint are rejected.
    """
    return S3ObjectLockStorage(build_s3_client(config), region_name=config.region_name)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 when every step succeeded, 1 when a step failed,
        2 for input or configuration errors, 3 when hashing failed
    """
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        request = build_request(args)
    except InputError as e:
        print(str(e), file=sys.stderr)
        return EXIT_ERROR

    try:
        config = load_storage_config(region=args.region, endpoint_url=args.endpoint_url)
        storage = build_storage(config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_ERROR

    reporter = ConsoleReporter(quiet=args.quiet)
    runner = WormUploadRunner(storage, reporter=reporter)

    try:
        result = runner.run(request)
    except DigestError as e:
        print(f"Fatal: {e}", file=sys.stderr)
        return EXIT_FATAL

    return EXIT_OK if result.all_succeeded else EXIT_STEP_FAILED


if __name__ == "__main__":
    sys.exit(main())
