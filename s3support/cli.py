"""
Command line access to the storage facade.

Usage:
    s3support status
    s3support --bucket my-bucket upload reports/today.csv ./today.csv
    s3support create-bucket my-new-bucket
    s3support list-buckets

Configuration comes from S3_* environment variables or a .env file;
--bucket, --region and --mock override them for a single run.
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from .config.settings import get_settings
from .core.errors import StorageSupportError
from .core.facade import StorageFacade
from .dependencies import create_storage_facade

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="s3support",
        description="Upload objects and manage buckets in an S3-compatible store",
    )
    parser.add_argument("--bucket", help="Bucket to use instead of S3_BUCKET_NAME")
    parser.add_argument("--region", help="Region code to use instead of S3_REGION")
    parser.add_argument("--mock", action="store_true", help="Use an in-memory store")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Show configuration and whether credentials are usable")

    upload = subparsers.add_parser("upload", help="Upload a file, or stdin when SOURCE is '-'")
    upload.add_argument("key", help="Object key in the bucket")
    upload.add_argument("source", help="Path of the file to upload, or '-' for stdin")
    upload.add_argument("--content-type", help="Content-Type stored with the object")

    create = subparsers.add_parser("create-bucket", help="Create a bucket")
    create.add_argument("name", help="Bucket name")

    subparsers.add_parser("list-buckets", help="List bucket names")

    return parser


def run_command(facade: StorageFacade, args: argparse.Namespace) -> int:
    """Run one parsed command against a configured facade. Returns the exit code."""
    if args.command == "status":
        print(f"bucket:  {facade.bucket_name or '-'}")
        print(f"region:  {facade.region.value}")
        print(f"enabled: {'yes' if facade.is_enabled() else 'no'}")
        return 0 if facade.is_enabled() else 1

    if args.command == "upload":
        if args.source == "-":
            facade.upload_stream(args.key, sys.stdin.buffer, content_type=args.content_type)
        else:
            facade.upload_file(args.key, args.source, content_type=args.content_type)
        print(f"Uploaded {args.key} to {facade.bucket_name}")
        return 0

    if args.command == "create-bucket":
        facade.create_bucket(args.name)
        print(f"Created bucket {facade.bucket_name}")
        return 0

    if args.command == "list-buckets":
        for name in sorted(facade.list_bucket_names()):
            print(name)
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=settings.log_level.upper(),
    )

    if args.bucket:
        settings = settings.model_copy(update={"s3_bucket_name": args.bucket})

    try:
        facade = create_storage_facade(settings, mock_mode=True if args.mock else None)
        if args.region:
            facade.set_region(args.region)

        exit_code = run_command(facade, args)
    except StorageSupportError as e:
        logger.error(
            "Command failed",
            extra={"command": args.command, "error": str(e)},
        )
        print(f"ERROR: {e}", file=sys.stderr)
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
