"""Tests for upstream kinds, defaults and shortform expansion."""

import re

from constants import Constants
from upstream import (
    DEFAULT_SHORTFORMS,
    Shortform,
    UpstreamType,
    default_expected,
    default_fetch,
    expand_upstream,
)


class TestUpstreamType:
    """Upstream shape detection."""

    def test_arch(self):
        assert UpstreamType.from_upstream("https://archlinux.org/packages/core/x86_64/bash/") is UpstreamType.ARCH

    def test_curl_listing(self):
        assert UpstreamType.from_upstream("https://ftp.gnu.org/gnu/bash/?C=M;O=D") is UpstreamType.CURL

    def test_empty(self):
        assert UpstreamType.from_upstream("") is UpstreamType.EMPTY

    def test_git_is_the_fallback(self):
        assert UpstreamType.from_upstream("gh:curl/curl") is UpstreamType.GIT


class TestDefaults:
    """Default fetch scripts and expected patterns."""

    def test_git_defaults(self):
        assert default_fetch("gh:a/b", "release") == "defgitrelease"
        assert default_fetch("gh:a/b", "unstable") == "defgitunstable"
        assert default_fetch("gh:a/b", "commit") == "defgitcommit"

    def test_arch_only_has_release(self):
        url = "https://archlinux.org/packages/extra/x86_64/foo/"
        assert default_fetch(url, "release") == "archver"
        assert default_fetch(url, "commit") is None

    def test_empty_upstream_has_empty_fetch(self):
        assert default_fetch("", "anything") == ""

    def test_unknown_channel_has_no_default(self):
        assert default_fetch("gh:a/b", "lts") is None
        assert default_expected("lts") is None

    def test_expected_patterns(self):
        assert default_expected("release") == Constants.EXPECTED_RELEASE
        assert re.fullmatch(default_expected("unstable"), "1.0-rc2")
        assert re.fullmatch(default_expected("commit"), "a" * 40)

    def test_numeric_channel_is_anchored_on_major(self):
        pattern = default_expected("3")
        assert re.fullmatch(pattern, "3.12.1")
        assert not re.fullmatch(pattern, "4.0")
        assert not re.fullmatch(pattern, "33.0")


class TestExpandUpstream:
    """Shortform alias expansion."""

    def test_github(self):
        assert expand_upstream("gh:curl/curl", DEFAULT_SHORTFORMS) == "https://github.com/curl/curl"

    def test_sourcehut_keeps_tilde(self):
        assert expand_upstream("srht:sircmpwn/scdoc", DEFAULT_SHORTFORMS) == "https://git.sr.ht/~sircmpwn/scdoc"

    def test_unknown_passes_through(self):
        url = "https://example.org/repo.git"
        assert expand_upstream(url, DEFAULT_SHORTFORMS) == url

    def test_longest_alias_wins(self):
        forms = [Shortform("g:", "https://short/"), Shortform("gh:", "https://long/")]
        assert expand_upstream("gh:x/y", forms) == "https://long/x/y"
