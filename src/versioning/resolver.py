"""Channel resolution: run a channel's fetch script and validate its output."""

from __future__ import annotations

import logging
import re
from typing import Dict, Optional

from catalog.package import Package, PackageChannel
from cli_config import RunContext
from common.cmd import CommandError, execute
from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants
from upstream.shortforms import expand_upstream

from .normalize import normalize_version

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """A channel could not be resolved."""


class CommandFailed(FetchError):
    """The fetch command failed; ``error`` holds the classified command error."""

    def __init__(self, error: CommandError):
        self.error = error
        super().__init__(f"Failed to fetch version: {error}")


class ExpectedMismatch(FetchError):
    """The normalized version does not match the channel's expected pattern."""

    def __init__(self, version: str, pattern: str):
        self.version = version
        self.pattern = pattern
        super().__init__(f"Version '{version}' does not match expected '{pattern}'")


class InvalidPattern(FetchError):
    """The channel's expected pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        super().__init__(f"Invalid expected regex '{pattern}': {reason}")


class ChannelResolver:
    """Resolves channel versions for packages within one run context."""

    def __init__(self, context: RunContext):
        self.context = context

    def build_env(self, package: Package, channel: PackageChannel) -> Dict[str, str]:
        """Environment handed to the fetch script."""
        ctx = self.context
        upstream = channel.upstream if channel.upstream is not None else package.config.upstream
        return {
            "GIT_TERMINAL_PROMPT": "false",
            "PACKAGE_ROOT": str(ctx.package_dir(package.name)),
            "VAT_ROOT": str(ctx.root),
            "VAT_CACHE": str(ctx.cache_dir),
            "SHLIB_PATH": str(ctx.shlib_path),
            "NO_CACHE": "true" if ctx.no_cache else "false",
            "channel": channel.name,
            "name": package.basename,
            "upstream": upstream,
            "upstream_url": expand_upstream(upstream, ctx.shortforms),
        }

    def resolve(self, package: Package, channel: PackageChannel) -> str:
        """Fetch, normalize and validate one channel's version.

        Raises:
            CommandFailed: The fetch command failed.
            InvalidPattern: The expected pattern does not compile.
            ExpectedMismatch: The version does not fully match the pattern.
        """
        script = f". {self.context.shlib_path} && {channel.fetch}"
        command = [Constants.SHELL, "-c", script]

        with Timer() as t:
            try:
                raw = execute(
                    command,
                    self.build_env(package, channel),
                    self.context.package_dir(package.name),
                    self.context.fetch_timeout,
                )
            except CommandError as exc:
                raise CommandFailed(exc) from exc

        version = normalize_version(package.name, raw)
        if is_debug_enabled(logger):
            logger.debug(
                "Resolved %s/%s",
                package.name,
                channel.name,
                extra=extra_context(
                    event="channel_resolved",
                    component="resolver",
                    target=package.name,
                    channel=channel.name,
                    duration_ms=t.duration_ms(),
                ),
            )

        _check_expected(version, channel.expected)
        return version


def _check_expected(version: str, pattern: Optional[str]) -> None:
    if pattern is None:
        return
    try:
        regex = re.compile(pattern)
    except re.error as exc:
        logger.error("Invalid expected regex '%s': %s", pattern, exc)
        raise InvalidPattern(pattern, str(exc)) from exc
    if not regex.fullmatch(version):
        logger.error("Version '%s' does not match expected '%s'", version, pattern)
        raise ExpectedMismatch(version, pattern)
