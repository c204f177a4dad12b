# src/main.py - v2
"""CLI entry point: create, flush, rebuild, ls, stat commands.

Usage:
    s3-local-index create
    s3-local-index flush [<path>] [--add]
    s3-local-index rebuild [--all] [--clear]
    s3-local-index ls <prefix>
    s3-local-index stat <path>

Results are reported as log lines.
"""

from __future__ import annotations

import argparse
import logging
import sys

from s3_local_index.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        from s3_local_index.api.facade import build_app
        from s3_local_index.config.settings import load_settings

        settings = load_settings()
        _setup_logging(settings, args.verbose)
        app = build_app(settings)
        return args.func(app, args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="s3-local-index",
        description=f"s3-local-index v{__version__} - local existence index for S3 objects",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- create ---
    p_create = subparsers.add_parser(
        "create", help="Index every object in the bucket",
    )
    p_create.set_defaults(func=_cmd_create)

    # --- flush ---
    p_flush = subparsers.add_parser(
        "flush", help="Flush the cached index for a path, or show the rebuild list",
    )
    p_flush.add_argument("path", nargs="?", default=None, help="Object path")
    p_flush.add_argument(
        "--add", action="store_true",
        help="Also queue the path's partition for rebuild",
    )
    p_flush.set_defaults(func=_cmd_flush)

    # --- rebuild ---
    p_rebuild = subparsers.add_parser(
        "rebuild", help="Rebuild queued partitions",
    )
    p_rebuild.add_argument(
        "--all", action="store_true",
        help="Rebuild every partition (same as create)",
    )
    p_rebuild.add_argument(
        "--clear", action="store_true",
        help="Clear the rebuild list afterwards",
    )
    p_rebuild.set_defaults(func=_cmd_rebuild)

    # --- ls ---
    p_ls = subparsers.add_parser(
        "ls", help="List indexed keys under a directory prefix",
    )
    p_ls.add_argument("prefix", help="Directory prefix, e.g. uploads/2023/01")
    p_ls.set_defaults(func=_cmd_ls)

    # --- stat ---
    p_stat = subparsers.add_parser(
        "stat", help="Existence check through the index-backed proxy",
    )
    p_stat.add_argument("path", help="Object path")
    p_stat.set_defaults(func=_cmd_stat)

    return parser


def _cmd_create(app, args: argparse.Namespace) -> int:
    """Build every partition from a full listing."""
    if app.builder is None:
        logger.error("No bucket configured (set S3_LOCAL_INDEX_S3_BUCKET)")
        return 1

    logger.info("Creating index in %s", app.store.base_dir)
    report = app.builder.create()
    logger.info(
        "Index created successfully. Total objects: %d, partitions: %d",
        report.objects_seen, report.partitions_written,
    )
    logger.info("Cache will be populated on next access.")
    return 0


def _cmd_flush(app, args: argparse.Namespace) -> int:
    """Flush one partition's cache, optionally queueing it for rebuild."""
    if args.path is None:
        tokens = app.tracker.list()
        if not tokens:
            logger.info("No items in rebuild list.")
        else:
            logger.info("Current rebuild list:")
            for token in tokens:
                logger.info("  - %s", token)
        return 0

    partition = app.index_manager.flush(args.path)
    if partition is None:
        logger.warning("Path does not match expected pattern: %s", args.path)
        return 1
    logger.info("Cache flushed for path: %s", args.path)

    if args.add:
        if app.tracker.add_for_path(args.path):
            logger.info("Added to rebuild list: %s", partition)
        else:
            logger.warning("Failed to add to rebuild list: %s", args.path)
            return 1
    return 0


def _cmd_rebuild(app, args: argparse.Namespace) -> int:
    """Rebuild queued partitions (or everything with --all)."""
    if app.builder is None:
        logger.error("No bucket configured (set S3_LOCAL_INDEX_S3_BUCKET)")
        return 1

    if args.all:
        logger.info("Rebuilding all indexes...")
        status = _cmd_create(app, args)
    elif not app.tracker.list():
        logger.info("No items in rebuild list.")
        status = 0
    else:
        report = app.builder.rebuild_queued()
        for token in report.failed:
            logger.warning("Partition left in rebuild list: %s", token)
        logger.info(
            "Selective rebuild completed: %d partitions, %d failed",
            report.partitions_written, len(report.failed),
        )
        status = 1 if report.failed else 0

    if args.clear:
        app.tracker.clear()
        logger.info("Rebuild list cleared.")
    return status


def _cmd_ls(app, args: argparse.Namespace) -> int:
    """Print indexed keys under a prefix, one per line."""
    from s3_local_index.index.exceptions import IndexManagerError

    try:
        keys = app.index_manager.list(args.prefix)
    except IndexManagerError as e:
        logger.error("%s", e)
        return 1
    for key in keys:
        print(key)
    return 0


def _cmd_stat(app, args: argparse.Namespace) -> int:
    """Existence check through the proxy; exit code 0 if found."""
    from s3_local_index.core.models import StatFlags

    if app.proxy is None:
        logger.error("No bucket configured (set S3_LOCAL_INDEX_S3_BUCKET)")
        return 1

    record = app.proxy.url_stat(args.path, StatFlags.QUIET)
    if record is None:
        logger.info("Not found: %s", args.path)
        return 1
    kind = "directory" if record.is_dir else "file"
    logger.info("Found %s: %s (%s)", kind, args.path, app.proxy.stats)
    return 0


def _setup_logging(settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from s3_local_index.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
