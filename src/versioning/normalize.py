"""Version string normalization.

Fetch scripts print whatever the upstream calls its version: ``v1.2.3``,
``foo-1.2.3``, ``refs/tags/release-1.2``, ``1_2_3``. ``normalize_version``
turns that into the canonical form validated against channel patterns.
"""
from __future__ import annotations

import re

_PREFIXES = ("refs/tags/",)
_WORD_PREFIXES = ("release-", "version-", "ver-")
_V_PREFIX = re.compile(r"^[vV](?=[0-9])")
_UNDERSCORE_NUMERIC = re.compile(r"^[0-9]+(_[0-9]+)+$")


def _basename(name: str) -> str:
    return name.rstrip("/").rsplit("/", 1)[-1]


def _strip_prefix_ci(value: str, prefix: str) -> str:
    if prefix and value.lower().startswith(prefix.lower()):
        return value[len(prefix):]
    return value


def normalize_version(package_name: str, raw: str) -> str:
    """Return the canonical version string for ``raw``.

    Args:
        package_name: Package name (nested names use their basename).
        raw: Raw fetch output.

    Returns:
        The trimmed version; commit hashes and already-clean versions pass through.
    """
    lines = [line.strip() for line in raw.strip().splitlines() if line.strip()]
    if not lines:
        return ""
    version = lines[-1]

    for prefix in _PREFIXES:
        version = _strip_prefix_ci(version, prefix)

    base = _basename(package_name)
    for sep in ("-", "_"):
        stripped = _strip_prefix_ci(version, base + sep)
        if stripped != version and stripped:
            version = stripped
            break

    for prefix in _WORD_PREFIXES:
        stripped = _strip_prefix_ci(version, prefix)
        if stripped != version and stripped:
            version = stripped
            break

    version = _V_PREFIX.sub("", version)

    if _UNDERSCORE_NUMERIC.match(version):
        version = version.replace("_", ".")

    return version
