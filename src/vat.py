"""vat - poll upstreams for the current versions of configured packages

Loads every package below ``p/`` (or the packages named on the command line),
fetches their channels concurrently and writes the merged version snapshot.

    Returns:
        int: Exit code
"""
import logging
import sys
import time

from args import parse_args
from catalog import Package, PackageConfigError, VersionStore, find_all
from cli_config import ConfigError, build_context, load_config
from common.cache_dir import clean_cache, format_duration, increment_runcount, write_elapsed
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes
from fetching import fetch_all, write_all

logger = logging.getLogger(__name__)


def load_packages(names, root):
    """Load the named packages, or discover every package when none are named.

    Args:
        names (list): Package names relative to ``p/``; may be empty.
        root (Path): Run root.

    Raises:
        PackageConfigError: If any package configuration is invalid.

    Returns:
        list: Packages sorted by name
    """
    if not names:
        return find_all(root)
    return sorted(Package.from_name(name, root) for name in dict.fromkeys(names))


def main(argv=None):
    """Main function of the program."""
    # pylint: disable=too-many-statements
    start = time.monotonic()
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, args.LOG_FILE)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main"),
        )

    root = args.ROOT or "."
    try:
        config = load_config(root)
    except ConfigError as e:
        logger.error("%s, aborting", e)
        sys.exit(ExitCodes.CONFIG_ERROR.value)

    context = build_context(args, config)
    logger.debug("Using %d threads", context.threads)

    try:
        clean_cache(context.cache_dir, context.cache_timeout)
    except OSError as e:
        logger.error("Could not prepare cache directory: %s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    try:
        packages = load_packages(args.packages, context.root)
    except PackageConfigError as e:
        logger.error("%s, aborting", e)
        sys.exit(ExitCodes.CONFIG_ERROR.value)

    if not packages:
        logger.warning("No packages found under '%s'.", context.packages_dir)

    try:
        result = fetch_all(packages, context)
        elapsed = format_duration(time.monotonic() - start)
        if context.pretend:
            logger.info("Pretend run, not writing versions.")
        else:
            write_all(result.versions, VersionStore(context.root))
            increment_runcount(context.root / Constants.RUNCOUNT_FILE)
            write_elapsed(context.cache_dir, elapsed)
    except OSError as e:
        logger.error("Could not write results: %s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    counters = result.counters
    logger.info("Finished in %s", elapsed)
    logger.info(
        "Total: %d | Checked: %d | Skipped: %d | Failed: %d",
        counters.total,
        counters.checked,
        counters.skipped,
        counters.failed,
    )
    if result.omitted:
        logger.warning("Omitted without fallback versions: %s", ", ".join(result.omitted))

    if counters.failed and args.ERROR_ON_FAILURES:
        logger.error("Failures present, exiting with non-zero status code.")
        sys.exit(ExitCodes.EXIT_FAILURES.value)

    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
