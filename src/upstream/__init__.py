"""Upstream reference helpers: shape detection and shortform expansion."""

from .kinds import UpstreamType, default_expected, default_fetch
from .shortforms import DEFAULT_SHORTFORMS, Shortform, expand_upstream

__all__ = [
    "UpstreamType",
    "default_expected",
    "default_fetch",
    "DEFAULT_SHORTFORMS",
    "Shortform",
    "expand_upstream",
]
