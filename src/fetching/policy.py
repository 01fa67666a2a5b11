"""Per-package fetch policy.

Decides whether a package is fetched for real or served from its previously
recorded versions:

- A package without usable fallback data, or any package when the run
  guarantees fetches, is always fetched.
- Otherwise a package with ``chance < 1`` draws one uniform sample and is
  skipped unless the sample falls below its chance.
- A fetch is all-or-nothing: if any enabled channel fails, the package is
  failed and its fallback data is used instead of the partial result.
"""

from __future__ import annotations

import json
import logging
import random
from typing import List, Optional

from catalog.package import Package
from catalog.store import VersionStore
from cli_config import RunContext
from common.logging_utils import is_debug_enabled
from versioning.models import FetchOutcome, VersionChannel
from versioning.resolver import ChannelResolver, FetchError

logger = logging.getLogger(__name__)


class FetchPolicy:
    """Applies the fetch/skip/fallback rules to single packages."""

    def __init__(
        self,
        context: RunContext,
        resolver: Optional[ChannelResolver] = None,
        store: Optional[VersionStore] = None,
        rng: Optional[random.Random] = None,
    ):
        self.context = context
        self.resolver = resolver if resolver is not None else ChannelResolver(context)
        self.store = store if store is not None else VersionStore(context.root)
        self.rng = rng if rng is not None else random.Random()

    def should_guarantee(self, package: Package) -> bool:
        """True when a real fetch must happen regardless of the chance roll."""
        return (
            package.config.chance >= 1.0
            or self.context.guarantee
            or not self.store.has_fallback_versions(package)
        )

    def should_skip(self, package: Package) -> bool:
        """Roll the package's chance; never skips a guaranteed package."""
        if self.should_guarantee(package):
            return False
        # Not below chance means skip: chance 0.0 always skips, chance 1.0 never rolls
        return self.rng.random() >= package.config.chance

    def fetch(self, package: Package) -> FetchOutcome:
        """Resolve a package's channels or fall back to recorded versions.

        Raises:
            MissingFallback: Fallback data is needed but cannot be read.
        """
        if self.should_skip(package):
            logger.debug("Skipped fetching versions for package '%s'", package.name)
            return FetchOutcome.skipped(self.store.read_versions(package))

        try:
            versions = self._fetch_channels(package)
        except FetchError as exc:
            logger.error("Failed to fetch versions for %s: %s", package.name, exc)
            return FetchOutcome.failed(self.store.read_versions(package))

        logger.info("%s", package.format_fetched(versions))
        if is_debug_enabled(logger):
            logger.debug(
                "Versions as JSON: %s",
                json.dumps([vc.to_dict() for vc in versions], indent=2),
            )
        return FetchOutcome.fetched(versions)

    def _fetch_channels(self, package: Package) -> List[VersionChannel]:
        versions = []
        for channel in package.enabled_channels():
            version = self.resolver.resolve(package, channel)
            versions.append(VersionChannel(channel=channel.name, version=version))
        return versions
