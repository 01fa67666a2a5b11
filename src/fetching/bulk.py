"""Bulk scheduler: run the fetch policy over every package on a worker pool."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from catalog.package import Package
from catalog.store import MissingFallback, VersionStore
from cli_config import RunContext
from common.cache_dir import write_counters
from common.logging_utils import Timer, extra_context
from versioning.models import (
    BulkResult,
    FetchOutcome,
    OutcomeKind,
    RunCounters,
    VersionChannel,
)

from .policy import FetchPolicy

logger = logging.getLogger(__name__)


def _fetch_isolated(policy: FetchPolicy, package: Package) -> Optional[FetchOutcome]:
    """Run the policy for one package; ``None`` means the package is omitted."""
    try:
        return policy.fetch(package)
    except MissingFallback as exc:
        logger.error("Omitting %s: %s", package.name, exc)
        return None
    except Exception:  # pylint: disable=broad-exception-caught
        logger.error("Unexpected error while fetching %s", package.name, exc_info=True)

    try:
        return FetchOutcome.failed(policy.store.read_versions(package))
    except MissingFallback as exc:
        logger.error("Omitting %s: %s", package.name, exc)
        return None


def _unique_by_name(packages: Sequence[Package]) -> List[Package]:
    """Keep the first package for each name; results are keyed by name."""
    unique: Dict[str, Package] = {}
    for package in packages:
        if package.name in unique:
            if package != unique[package.name]:
                logger.warning("Ignoring duplicate package %s with a different config", package.name)
            continue
        unique[package.name] = package
    return list(unique.values())


def fetch_all(
    packages: Sequence[Package],
    context: RunContext,
    policy: Optional[FetchPolicy] = None,
) -> BulkResult:
    """Fetch every package concurrently and fold the outcomes.

    Args:
        packages: Packages to process; each one is isolated from the others.
        context: Run context; ``threads`` sizes the pool.
        policy: Fetch policy to apply, built from ``context`` when omitted.

    Returns:
        BulkResult: Versions sorted by package name, counters and omitted names.
    """
    policy = policy if policy is not None else FetchPolicy(context)
    packages = _unique_by_name(packages)
    results: Dict[Package, List[VersionChannel]] = {}
    omitted: List[str] = []
    failed = 0
    skipped = 0

    with Timer() as t:
        with ThreadPoolExecutor(max_workers=max(1, context.threads)) as executor:
            futures = {
                executor.submit(_fetch_isolated, policy, package): package
                for package in packages
            }
            for future in as_completed(futures):
                package = futures[future]
                outcome = future.result()
                if outcome is None:
                    omitted.append(package.name)
                    failed += 1
                    continue
                if outcome.kind is OutcomeKind.FAILED:
                    failed += 1
                elif outcome.kind is OutcomeKind.SKIPPED:
                    skipped += 1
                results[package] = list(outcome.versions)

    counters = RunCounters(total=len(packages), failed=failed, skipped=skipped)
    logger.debug(
        "Bulk fetch finished",
        extra=extra_context(
            event="bulk_complete",
            component="bulk",
            duration_ms=t.duration_ms(),
            **counters.as_dict(),
        ),
    )
    write_counters(context.cache_dir, counters.as_dict())

    ordered: Tuple[Package, ...] = tuple(sorted(results))
    return BulkResult(
        versions={package: results[package] for package in ordered},
        counters=counters,
        omitted=sorted(omitted),
    )


def write_all(result_map: Mapping[Package, Sequence[VersionChannel]], store: VersionStore) -> None:
    """Persist a complete snapshot: per-package files, then the merged listing."""
    store.write_snapshot(result_map)
