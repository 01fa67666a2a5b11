"""Data models for version results and run outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Sequence, Tuple


@dataclass(frozen=True)
class VersionChannel:
    """Resolved version for one channel of a package."""

    channel: str
    version: str

    def to_dict(self) -> Dict[str, str]:
        return {"channel": self.channel, "version": self.version}

    @classmethod
    def from_dict(cls, data: Any) -> "VersionChannel":
        """Build from a ``{"channel": ..., "version": ...}`` mapping.

        Raises:
            ValueError: If the mapping lacks string ``channel``/``version`` keys.
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {type(data).__name__}")
        channel = data.get("channel")
        version = data.get("version")
        if not isinstance(channel, str) or not isinstance(version, str):
            raise ValueError("entry needs string 'channel' and 'version'")
        return cls(channel=channel, version=version)


@dataclass(frozen=True)
class PackageVersions:
    """Record serialized into the merged ALL listing."""

    package: str
    versions: Tuple[VersionChannel, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"package": self.package, "versions": [v.to_dict() for v in self.versions]}


class OutcomeKind(Enum):
    """How a package's versions were obtained on this run."""

    FETCHED = "fetched"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchOutcome:
    """Per-package result of the fetch policy.

    ``versions`` is fresh data for FETCHED and fallback data otherwise.
    """

    kind: OutcomeKind
    versions: Tuple[VersionChannel, ...]

    @classmethod
    def fetched(cls, versions: Sequence[VersionChannel]) -> "FetchOutcome":
        return cls(OutcomeKind.FETCHED, tuple(versions))

    @classmethod
    def skipped(cls, versions: Sequence[VersionChannel]) -> "FetchOutcome":
        return cls(OutcomeKind.SKIPPED, tuple(versions))

    @classmethod
    def failed(cls, versions: Sequence[VersionChannel]) -> "FetchOutcome":
        return cls(OutcomeKind.FAILED, tuple(versions))


@dataclass(frozen=True)
class RunCounters:
    """Package counts for one run; ``checked`` is derived."""

    total: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def checked(self) -> int:
        return self.total - self.failed - self.skipped

    def as_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "failed": self.failed,
            "skipped": self.skipped,
            "checked": self.checked,
        }


@dataclass
class BulkResult:
    """Aggregated result of a bulk fetch."""

    versions: Dict[Any, List[VersionChannel]] = field(default_factory=dict)
    counters: RunCounters = field(default_factory=RunCounters)
    omitted: List[str] = field(default_factory=list)
