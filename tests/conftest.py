"""Shared fixtures: a throwaway run root with packages and a shell library."""

import json
import logging

import pytest

from cli_config import RunContext
from common.cmd import CmdErrorKind, CommandError
from versioning.resolver import CommandFailed


def write_package(root, name, config, versions=None):
    """Create ``p/<name>/config`` and optionally a ``versions.json``."""
    pkg_dir = root / "p" / name
    pkg_dir.mkdir(parents=True, exist_ok=True)
    (pkg_dir / "config").write_text(config, encoding="utf-8")
    if versions is not None:
        (pkg_dir / "versions.json").write_text(
            json.dumps([{"channel": c, "version": v} for c, v in versions]),
            encoding="utf-8",
        )
    return pkg_dir


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo handler and level changes made by configure_logging."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def run_root(tmp_path):
    """Run root with an empty ``p/`` and a shell library defining ``say``."""
    (tmp_path / "p").mkdir()
    (tmp_path / "sh").mkdir()
    (tmp_path / "sh" / "lib.env").write_text('say() { echo "$@"; }\n', encoding="utf-8")
    return tmp_path


@pytest.fixture
def context(run_root):
    return RunContext(root=run_root, fetch_timeout=10, threads=4)


class StubResolver:
    """Resolver returning canned versions; fails or raises for chosen channels or packages."""

    def __init__(self, versions=None, fail_on=(), fail_packages=(), raise_packages=()):
        self.versions = versions or {}
        self.fail_on = set(fail_on)
        self.fail_packages = set(fail_packages)
        self.raise_packages = set(raise_packages)
        self.calls = []

    def resolve(self, package, channel):
        self.calls.append((package.name, channel.name))
        if package.name in self.raise_packages:
            raise RuntimeError("boom")
        if channel.name in self.fail_on or package.name in self.fail_packages:
            raise CommandFailed(CommandError(CmdErrorKind.NONZERO_STATUS, "exit code 1"))
        return self.versions.get(channel.name, "9.9")
