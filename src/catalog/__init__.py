"""Package catalog: configuration model, discovery and the version store."""

from .discovery import find_all
from .package import Package, PackageChannel, PackageConfig, PackageConfigError
from .store import MissingFallback, VersionStore

__all__ = [
    "find_all",
    "Package",
    "PackageChannel",
    "PackageConfig",
    "PackageConfigError",
    "MissingFallback",
    "VersionStore",
]
