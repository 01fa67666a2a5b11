"""On-disk version data: per-package ``versions.json`` and the merged ALL listing."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Sequence, Union

from constants import Constants
from versioning.models import PackageVersions, VersionChannel

from .package import Package

logger = logging.getLogger(__name__)


class MissingFallback(Exception):
    """Previously recorded versions are required but missing or unreadable."""

    def __init__(self, package: str, reason: str):
        self.package = package
        self.reason = reason
        super().__init__(f"No usable fallback versions for '{package}': {reason}")


class VersionStore:
    """Reads and writes version data below ``<root>/p``."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self.packages_dir = self.root / Constants.PACKAGES_DIR

    def package_dir(self, name: str) -> Path:
        return self.packages_dir / name

    def versions_path(self, name: str) -> Path:
        return self.package_dir(name) / Constants.VERSIONS_JSON_FILE

    def read_versions(self, package: Package) -> List[VersionChannel]:
        """Read the package's persisted versions.

        Raises:
            MissingFallback: If the file is missing or cannot be parsed.
        """
        path = self.versions_path(package.name)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise MissingFallback(package.name, f"'{path}' does not exist") from exc
        except (OSError, ValueError) as exc:
            raise MissingFallback(package.name, f"could not read '{path}': {exc}") from exc
        if not isinstance(raw, list):
            raise MissingFallback(package.name, f"'{path}' is not a list")
        try:
            return [VersionChannel.from_dict(entry) for entry in raw]
        except ValueError as exc:
            raise MissingFallback(package.name, f"malformed entry in '{path}': {exc}") from exc

    def has_fallback_versions(self, package: Package) -> bool:
        """True if persisted versions cover every enabled channel of the package.

        Versions recorded for a channel that is no longer configured make the
        data stale, and stale data counts as absent.
        """
        try:
            versions = self.read_versions(package)
        except MissingFallback:
            return False
        recorded = {vc.channel for vc in versions}
        if any(package.get_channel(name) is None for name in recorded):
            return False
        return all(channel.name in recorded for channel in package.enabled_channels())

    def write_versions(self, package: Package, versions: Sequence[VersionChannel]) -> None:
        """Write ``versions.json``, ``versions.txt`` and one file per channel."""
        path = self.package_dir(package.name)
        path.mkdir(parents=True, exist_ok=True)
        self.versions_path(package.name).write_text(
            json.dumps([vc.to_dict() for vc in versions], indent=2), encoding="utf-8"
        )

        channels_dir = path / Constants.CHANNELS_DIR
        channels_dir.mkdir(exist_ok=True)

        lines = []
        for vc in versions:
            (channels_dir / vc.channel).write_text(vc.version, encoding="utf-8")
            lines.append(f"{vc.channel}\t{vc.version}\n")
        (path / Constants.VERSIONS_TXT_FILE).write_text("".join(lines), encoding="utf-8")

    def write_all(self, records: Iterable[PackageVersions]) -> None:
        """Write the merged ``ALL.json`` and ``ALL.txt`` listings."""
        records = list(records)
        self.packages_dir.mkdir(parents=True, exist_ok=True)
        (self.packages_dir / Constants.ALL_JSON_FILE).write_text(
            json.dumps([r.to_dict() for r in records], indent=2), encoding="utf-8"
        )
        lines = [
            f"{r.package}\t{vc.channel}\t{vc.version}\n"
            for r in records
            for vc in r.versions
        ]
        (self.packages_dir / Constants.ALL_TXT_FILE).write_text("".join(lines), encoding="utf-8")

    def write_snapshot(self, result: Mapping[Package, Sequence[VersionChannel]]) -> None:
        """Persist every package's versions, then the merged listing."""
        records = []
        for package, versions in result.items():
            self.write_versions(package, versions)
            records.append(PackageVersions(package=package.name, versions=tuple(versions)))
        self.write_all(records)
        logger.debug("Wrote versions for %d packages", len(records))
