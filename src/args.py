"""Argument parsing functionality for vat."""

import argparse

from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="vat",
        description=(
            "vat - poll upstreams for the current versions of configured packages"
        ),
        add_help=True,
    )

    parser.add_argument("packages",
                        help="Packages to fetch (default: every package under p/)",
                        nargs="*",
                        metavar="PACKAGE")
    parser.add_argument("-g", "--guarantee",
                        dest="GUARANTEE",
                        help="Always fetch, ignoring per-package chance.",
                        action="store_true")
    parser.add_argument("-n", "--no-cache",
                        dest="NO_CACHE",
                        help="Ask fetch scripts not to use cached upstream data.",
                        action="store_true")
    parser.add_argument("-p", "--pretend",
                        dest="PRETEND",
                        help="Fetch but do not write any version data.",
                        action="store_true")
    parser.add_argument("-r", "--root",
                        dest="ROOT",
                        help="Run root containing p/, sh/ and config.toml (default: current directory)",
                        action="store",
                        type=str)
    parser.add_argument("-j", "--threads",
                        dest="THREADS",
                        help=f"Worker threads (default: ${Constants.ENV_NUM_THREADS} or 2x CPUs)",
                        action="store",
                        type=int)
    parser.add_argument("--error-on-failures",
                        dest="ERROR_ON_FAILURES",
                        help="Exit with a non-zero status code if any package failed.",
                        action="store_true")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=Constants.LOG_LEVELS)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
