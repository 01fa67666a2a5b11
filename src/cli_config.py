"""Global configuration and the immutable run context.

``config.toml`` at the run root holds tunables (fetch timeout, cache timeout,
upstream shortforms). CLI arguments and the environment are folded in once
at startup into a frozen ``RunContext`` that is passed to every component.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple, Union

from common.toml_utils import TOMLDecodeError, load_toml
from constants import Constants
from upstream.shortforms import DEFAULT_SHORTFORMS, Shortform

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """The global configuration cannot be read or is invalid."""


@dataclass(frozen=True)
class Config:
    """Tunables read from ``config.toml``."""

    fetch_timeout: int = Constants.FETCH_TIMEOUT_SEC
    cache_timeout: int = Constants.CACHE_TIMEOUT_SEC
    shortforms: Tuple[Shortform, ...] = field(default_factory=lambda: tuple(DEFAULT_SHORTFORMS))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Config":
        """Build from parsed TOML; keys that are absent keep their defaults.

        Raises:
            ConfigError: If a value has the wrong type.
        """
        defaults = cls()
        values = {}
        for key in ("fetch_timeout", "cache_timeout"):
            if key in data:
                value = data[key]
                if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                    raise ConfigError(f"Invalid config: '{key}' must be a positive integer")
                values[key] = value

        if "shortforms" in data:
            raw = data["shortforms"]
            if not isinstance(raw, list):
                raise ConfigError("Invalid config: 'shortforms' must be an array of tables")
            shortforms: List[Shortform] = []
            for entry in raw:
                if (
                    not isinstance(entry, dict)
                    or not isinstance(entry.get("short"), str)
                    or not isinstance(entry.get("full"), str)
                ):
                    raise ConfigError("Invalid config: each shortform needs 'short' and 'full' strings")
                shortforms.append(Shortform(entry["short"], entry["full"]))
            values["shortforms"] = tuple(shortforms)

        return cls(
            fetch_timeout=values.get("fetch_timeout", defaults.fetch_timeout),
            cache_timeout=values.get("cache_timeout", defaults.cache_timeout),
            shortforms=values.get("shortforms", defaults.shortforms),
        )


def load_config(root: Union[str, Path]) -> Config:
    """Load ``<root>/config.toml``, falling back to builtin defaults when absent.

    Raises:
        ConfigError: If the file exists but cannot be read or parsed.
    """
    path = Path(root) / Constants.CONFIG_FILE
    if not path.exists():
        logger.warning("Config at '%s' does not exist! Builtin defaults will be used.", path)
        return Config()
    try:
        data = load_toml(path)
    except OSError as exc:
        raise ConfigError(f"Could not read config at '{path}': {exc}") from exc
    except TOMLDecodeError as exc:
        raise ConfigError(f"Invalid config at '{path}': {exc}") from exc
    return Config.from_mapping(data)


def resolve_threads(cli_threads: Optional[int], environ: Mapping[str, str]) -> int:
    """Worker pool size: CLI, then ``VAT_NUM_THREADS``, then 2x logical CPUs."""
    if cli_threads is not None and cli_threads > 0:
        return cli_threads
    raw = environ.get(Constants.ENV_NUM_THREADS)
    if raw:
        try:
            value = int(raw.strip())
            if value > 0:
                return value
        except ValueError:
            pass
        logger.warning("Ignoring invalid %s=%r", Constants.ENV_NUM_THREADS, raw)
    return (os.cpu_count() or 1) * Constants.THREADS_PER_CPU


@dataclass(frozen=True)
class RunContext:
    """Everything a run needs, resolved once at startup."""

    root: Path
    fetch_timeout: float = Constants.FETCH_TIMEOUT_SEC
    cache_timeout: float = Constants.CACHE_TIMEOUT_SEC
    threads: int = 1
    guarantee: bool = False
    no_cache: bool = False
    pretend: bool = False
    shortforms: Tuple[Shortform, ...] = field(default_factory=lambda: tuple(DEFAULT_SHORTFORMS))

    @property
    def packages_dir(self) -> Path:
        return self.root / Constants.PACKAGES_DIR

    @property
    def cache_dir(self) -> Path:
        return self.root / Constants.CACHE_DIR

    @property
    def shlib_path(self) -> Path:
        return self.root / Constants.SHLIB_FILE

    def package_dir(self, name: str) -> Path:
        return self.packages_dir / name


def build_context(
    args: Any,
    config: Config,
    environ: Optional[Mapping[str, str]] = None,
) -> RunContext:
    """Fold parsed CLI arguments, config and environment into a ``RunContext``."""
    environ = os.environ if environ is None else environ
    root = Path(getattr(args, "ROOT", None) or os.getcwd()).resolve()
    return RunContext(
        root=root,
        fetch_timeout=config.fetch_timeout,
        cache_timeout=config.cache_timeout,
        threads=resolve_threads(getattr(args, "THREADS", None), environ),
        guarantee=bool(getattr(args, "GUARANTEE", False)),
        no_cache=bool(getattr(args, "NO_CACHE", False)),
        pretend=bool(getattr(args, "PRETEND", False)),
        shortforms=config.shortforms,
    )
