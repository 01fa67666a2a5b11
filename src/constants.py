"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONFIG_ERROR = 2
    EXIT_FAILURES = 3


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    FETCH_TIMEOUT_SEC = 30  # Maximum lifespan for a single fetch
    CACHE_TIMEOUT_SEC = 3600  # Maximum lifespan for the cache directory

    PACKAGES_DIR = "p"
    CACHE_DIR = ".vat-cache"
    SHLIB_FILE = "sh/lib.env"
    CONFIG_FILE = "config.toml"
    PACKAGE_CONFIG_FILE = "config"
    VERSIONS_JSON_FILE = "versions.json"
    VERSIONS_TXT_FILE = "versions.txt"
    CHANNELS_DIR = "channels"
    ALL_JSON_FILE = "ALL.json"
    ALL_TXT_FILE = "ALL.txt"
    RUNCOUNT_FILE = "runcount"
    ELAPSED_FILE = "elapsed"

    SHELL = "bash"
    THREADS_PER_CPU = 2
    ENV_NUM_THREADS = "VAT_NUM_THREADS"
    ENV_LOG_LEVEL = "VAT_LOG_LEVEL"
    ENV_LOG_LEVEL_FALLBACK = "LOG_LEVEL"

    LOG_FORMAT = "%(uptime)s %(levelname)-5s %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    CHANNEL_RELEASE = "release"
    CHANNEL_UNSTABLE = "unstable"
    CHANNEL_COMMIT = "commit"

    EXPECTED_RELEASE = r"^[0-9]+(\.[0-9]+)*$"
    EXPECTED_UNSTABLE = r"^[0-9]+(\.[0-9]+)*-?(rc|alpha|beta|a|b|pre|dev)?[0-9]*$"
    EXPECTED_COMMIT = r"^[0-9a-f]{40}$"
