"""Upstream shape detection and per-channel defaults derived from it."""

from enum import Enum
from typing import Optional

from constants import Constants


class UpstreamType(Enum):
    """Shape of an upstream reference, used to pick a default fetch script."""

    ARCH = "arch"
    CURL = "curl"
    EMPTY = "empty"
    GIT = "git"

    @classmethod
    def from_upstream(cls, upstream: str) -> "UpstreamType":
        """Classify an upstream string.

        Arch package pages and sorted distfile listings (``C=M;O=D``) are
        recognized; an empty string is EMPTY; anything else is assumed to be git.
        """
        if "archlinux.org" in upstream:
            return cls.ARCH
        if "C=M" in upstream and "O=D" in upstream:
            return cls.CURL
        if upstream == "":
            return cls.EMPTY
        return cls.GIT


_DEFAULT_FETCHES = {
    (UpstreamType.ARCH, Constants.CHANNEL_RELEASE): "archver",
    (UpstreamType.CURL, Constants.CHANNEL_RELEASE): "defcurlrelease",
    (UpstreamType.CURL, Constants.CHANNEL_UNSTABLE): "defcurlunstable",
    (UpstreamType.CURL, Constants.CHANNEL_COMMIT): "defcurlcommit",
    (UpstreamType.GIT, Constants.CHANNEL_RELEASE): "defgitrelease",
    (UpstreamType.GIT, Constants.CHANNEL_UNSTABLE): "defgitunstable",
    (UpstreamType.GIT, Constants.CHANNEL_COMMIT): "defgitcommit",
}


def default_fetch(upstream: str, channel: str) -> Optional[str]:
    """Return the default fetch script for a channel, or None if there is none.

    An empty upstream yields an empty fetch string for every channel.
    """
    kind = UpstreamType.from_upstream(upstream)
    if kind is UpstreamType.EMPTY:
        return ""
    return _DEFAULT_FETCHES.get((kind, channel))


def default_expected(channel: str) -> Optional[str]:
    """Return the default expected pattern for a channel name, or None.

    Numeric channel names (e.g. ``"3"``) expect versions in that major series.
    """
    if channel == Constants.CHANNEL_RELEASE:
        return Constants.EXPECTED_RELEASE
    if channel == Constants.CHANNEL_UNSTABLE:
        return Constants.EXPECTED_UNSTABLE
    if channel == Constants.CHANNEL_COMMIT:
        return Constants.EXPECTED_COMMIT
    if channel.isdigit():
        return rf"^{channel}(\.[0-9]+)*$"
    return None
