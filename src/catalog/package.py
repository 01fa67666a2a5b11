"""Package configuration model.

A package lives in ``p/<name>/`` and is described by a TOML file named
``config`` in that directory. Defaults (upstream, fetch script, expected
pattern) are filled once while the package is built; the resulting objects
are frozen.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from common.toml_utils import TOMLDecodeError, load_toml
from constants import Constants
from upstream.kinds import default_expected, default_fetch

logger = logging.getLogger(__name__)


class PackageConfigError(ValueError):
    """Raised when a package configuration is invalid or cannot be defaulted."""


def basename(name: str) -> str:
    """Last path segment of a (possibly nested) package name."""
    return name.rstrip("/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class PackageChannel:
    """One update stream of a package."""

    name: str
    enabled: bool = True
    upstream: Optional[str] = None
    fetch: str = ""
    expected: Optional[str] = None


@dataclass(frozen=True)
class PackageConfig:
    """Per-package settings; ``chance`` is the probability a real fetch happens."""

    upstream: str = ""
    chance: float = 1.0
    channels: Tuple[PackageChannel, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Package:
    """A named package and its configuration. Ordered by name."""

    name: str
    config: PackageConfig = field(default_factory=PackageConfig)

    def __lt__(self, other: "Package") -> bool:
        if not isinstance(other, Package):
            return NotImplemented
        return self.name < other.name

    @property
    def basename(self) -> str:
        return basename(self.name)

    def get_channel(self, name: str) -> Optional[PackageChannel]:
        for channel in self.config.channels:
            if channel.name == name:
                return channel
        return None

    def enabled_channels(self) -> Tuple[PackageChannel, ...]:
        return tuple(c for c in self.config.channels if c.enabled)

    def format_fetched(self, versions) -> str:
        """Human-readable listing of fetched versions (log output only)."""
        lines = [f"Fetched versions for {self.name}"]
        for vc in versions:
            lines.append(f"        - {vc.channel}: {vc.version}")
        return "\n".join(lines)

    @classmethod
    def from_mapping(cls, name: str, data: Mapping[str, Any]) -> "Package":
        """Build a package from parsed config data and fill in defaults.

        Raises:
            PackageConfigError: On invalid values, duplicate channels, or
                channels whose fetch/expected cannot be defaulted.
        """
        config = _parse_config(name, data)
        return cls(name=name, config=_with_defaults(name, config))

    @classmethod
    def from_name(cls, name: str, root: Union[str, Path]) -> "Package":
        """Load ``<root>/p/<name>/config``."""
        path = Path(root) / Constants.PACKAGES_DIR / name / Constants.PACKAGE_CONFIG_FILE
        return cls._load(name, path)

    @classmethod
    def from_config_path(cls, path: Union[str, Path], root: Union[str, Path]) -> "Package":
        """Load a package from its config file; the name is derived from the path."""
        path = Path(path)
        packages_dir = Path(root) / Constants.PACKAGES_DIR
        try:
            name = path.parent.relative_to(packages_dir).as_posix()
        except ValueError as exc:
            raise PackageConfigError(f"Config '{path}' is not inside '{packages_dir}'") from exc
        return cls._load(name, path)

    @classmethod
    def _load(cls, name: str, path: Path) -> "Package":
        try:
            data = load_toml(path)
        except OSError as exc:
            raise PackageConfigError(f"Could not read config for '{name}' at '{path}': {exc}") from exc
        except TOMLDecodeError as exc:
            raise PackageConfigError(f"Invalid config for '{name}' at '{path}': {exc}") from exc
        return cls.from_mapping(name, data)


def _opt_str(name: str, key: str, value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    raise PackageConfigError(f"Invalid config in {name}: '{key}' must be a string")


def _parse_channel(name: str, raw: Any) -> PackageChannel:
    if not isinstance(raw, dict):
        raise PackageConfigError(f"Invalid config in {name}: channels must be tables")
    channel_name = raw.get("name")
    if not isinstance(channel_name, str) or not channel_name:
        raise PackageConfigError(f"Invalid config in {name}: channel without a name")
    enabled = raw.get("enabled", True)
    if not isinstance(enabled, bool):
        raise PackageConfigError(f"Invalid config in {name}: 'enabled' must be a boolean")
    return PackageChannel(
        name=channel_name,
        enabled=enabled,
        upstream=_opt_str(name, "upstream", raw.get("upstream")),
        fetch=_opt_str(name, "fetch", raw.get("fetch")) or "",
        expected=_opt_str(name, "expected", raw.get("expected")),
    )


def _parse_config(name: str, data: Mapping[str, Any]) -> PackageConfig:
    upstream = _opt_str(name, "upstream", data.get("upstream")) or ""

    chance = data.get("chance", 1.0)
    if isinstance(chance, bool) or not isinstance(chance, (int, float)):
        raise PackageConfigError(f"Invalid config in {name}: 'chance' must be a number")
    chance = float(chance)
    if not 0.0 <= chance <= 1.0:
        raise PackageConfigError(f"Invalid config in {name}: chance {chance} is outside [0, 1]")

    raw_channels = data.get("channels", [])
    if not isinstance(raw_channels, list):
        raise PackageConfigError(f"Invalid config in {name}: 'channels' must be an array")
    channels = tuple(_parse_channel(name, raw) for raw in raw_channels)

    seen: Dict[str, int] = {}
    for channel in channels:
        seen[channel.name] = seen.get(channel.name, 0) + 1
    duplicates = sorted(n for n, count in seen.items() if count > 1)
    if duplicates:
        raise PackageConfigError(
            f"Invalid config in {name}: duplicate channels {', '.join(duplicates)}"
        )

    return PackageConfig(upstream=upstream, chance=chance, channels=channels)


def _with_defaults(name: str, config: PackageConfig) -> PackageConfig:
    upstream = config.upstream
    if not upstream:
        base = basename(name)
        upstream = f"gh:{base}/{base}"

    channels = []
    for channel in config.channels:
        effective_upstream = channel.upstream if channel.upstream is not None else upstream

        fetch = channel.fetch
        if not fetch:
            fetch = default_fetch(effective_upstream, channel.name)
            if fetch is None:
                raise PackageConfigError(
                    f"Invalid config in {name}: Missing fetch for {channel.name}"
                )

        expected = channel.expected
        if expected is None:
            expected = default_expected(channel.name)
            if expected is None:
                raise PackageConfigError(
                    f"Invalid config in {name}: Missing expected for {channel.name}"
                )
        try:
            re.compile(expected)
        except re.error as exc:
            raise PackageConfigError(
                f"Invalid config in {name}: Invalid expected regex for {channel.name}: {exc}"
            ) from exc

        channels.append(replace(channel, fetch=fetch, expected=expected))

    return replace(config, upstream=upstream, channels=tuple(channels))
