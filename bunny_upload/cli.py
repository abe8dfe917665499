"""
Command line interface for Bunny Upload.

    upload-to-bunny --source ./dist --target /site --zone my-zone --key ...

Zone, key and region fall back to BUNNY_STORAGE_ZONE_NAME, BUNNY_ACCESS_KEY
and BUNNY_STORAGE_REGION, which may also come from a .env file.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import (
    CLEAN_AVOID_DELETES,
    CLEAN_MODES,
    DEFAULT_MAX_CONCURRENT_UPLOADS,
    UploadOptions,
    load_env_file,
)
from .core.formatting import format_duration, format_size, format_throughput
from .core.progress import SyncProgress
from .exceptions import ConfigError, TransportError, UploadError
from .sync import synchronize

# Failures listed after an aborted upload
MAX_FAILURES_SHOWN = 10


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="upload-to-bunny",
        description="Upload a local directory to Bunny Storage.",
    )
    parser.add_argument("--source", default=".", help="Local directory to upload (default: current directory)")
    parser.add_argument("--target", default="/", help="Remote directory path (default: /)")
    parser.add_argument("--zone", help="Storage zone name (or BUNNY_STORAGE_ZONE_NAME env)")
    parser.add_argument("--key", help="Access key (or BUNNY_ACCESS_KEY env)")
    parser.add_argument("--region", help="Storage region, e.g. 'ny', 'la', 'sg' (or BUNNY_STORAGE_REGION env)")
    parser.add_argument(
        "--clean",
        default=CLEAN_AVOID_DELETES,
        help="Clean destination before uploading (default: avoid-deletes). "
             "Modes: none, simple (delete all first), avoid-deletes (prune, never delete replaced files)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=DEFAULT_MAX_CONCURRENT_UPLOADS,
        help=f"Max concurrent uploads (default: {DEFAULT_MAX_CONCURRENT_UPLOADS})",
    )
    parser.add_argument("--include-hidden", action="store_true", help="Also upload dotfiles and dot-directories")
    parser.add_argument("--env-file", default=".env", help="Environment file to load (default: .env)")
    parser.add_argument("--quiet", action="store_true", help="Only print errors and the final summary")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    load_env_file(Path(args.env_file))

    options = UploadOptions.from_env(
        storage_zone_name=args.zone,
        access_key=args.key,
        region=args.region,
        clean_destination=args.clean,
        max_concurrent_uploads=args.concurrency,
        include_hidden=args.include_hidden,
    )
    try:
        options.validate()
    except ConfigError as e:
        print(e, file=sys.stderr)
        if args.clean not in CLEAN_MODES:
            print(f"Valid modes: {', '.join(CLEAN_MODES)}", file=sys.stderr)
        return 1

    source = Path(args.source).resolve()
    print(f"Uploading {source} to {options.storage_zone_name}{args.target}...")

    progress = SyncProgress(quiet=args.quiet)
    try:
        result = synchronize(source, args.target, options, progress=progress)
    except UploadError as e:
        print(f"Upload failed: {len(e.failures)} of {e.total} files could not be uploaded.", file=sys.stderr)
        for failure in e.failures[:MAX_FAILURES_SHOWN]:
            print(f"  {failure.message}", file=sys.stderr)
        if len(e.failures) > MAX_FAILURES_SHOWN:
            print(f"  ... and {len(e.failures) - MAX_FAILURES_SHOWN} more", file=sys.stderr)
        return 1
    except TransportError as e:
        print(f"Error talking to Bunny Storage: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error reading {source}: {e}", file=sys.stderr)
        return 1

    print("Upload complete.")
    summary = (
        f"  {result.files_uploaded} files ({format_size(result.bytes_uploaded)}) uploaded"
        f" in {format_duration(result.elapsed)}"
    )
    rate = format_throughput(result.bytes_uploaded, result.elapsed)
    if rate:
        summary += f" ({rate})"
    if result.files_deleted or result.dirs_deleted:
        summary += f", {result.files_deleted} files and {result.dirs_deleted} folders deleted"
    print(summary)
    if result.delete_failures:
        print(f"  Warning: {len(result.delete_failures)} deletes failed and were skipped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
