"""Tests for global config loading and run context construction."""

from types import SimpleNamespace

import pytest

from cli_config import Config, ConfigError, build_context, load_config, resolve_threads
from constants import Constants
from upstream import Shortform


class TestLoadConfig:
    """Reading config.toml."""

    def test_missing_file_uses_defaults(self, tmp_path, caplog):
        config = load_config(tmp_path)
        assert config == Config()
        assert "does not exist" in caplog.text

    def test_values_are_read(self, tmp_path):
        (tmp_path / "config.toml").write_text(
            'fetch_timeout = 5\ncache_timeout = 60\n'
            '[[shortforms]]\nshort = "ex:"\nfull = "https://example.org/"\n',
            encoding="utf-8",
        )
        config = load_config(tmp_path)
        assert config.fetch_timeout == 5
        assert config.cache_timeout == 60
        assert config.shortforms == (Shortform("ex:", "https://example.org/"),)

    def test_partial_file_keeps_defaults(self, tmp_path):
        (tmp_path / "config.toml").write_text("fetch_timeout = 7\n", encoding="utf-8")
        config = load_config(tmp_path)
        assert config.fetch_timeout == 7
        assert config.cache_timeout == Constants.CACHE_TIMEOUT_SEC

    def test_invalid_toml(self, tmp_path):
        (tmp_path / "config.toml").write_text("fetch_timeout = ", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(tmp_path)

    @pytest.mark.parametrize("text", ['fetch_timeout = "soon"\n', "cache_timeout = 0\n", "shortforms = 3\n"])
    def test_invalid_values(self, tmp_path, text):
        (tmp_path / "config.toml").write_text(text, encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(tmp_path)


class TestResolveThreads:
    """Thread count precedence."""

    def test_cli_wins(self):
        assert resolve_threads(3, {Constants.ENV_NUM_THREADS: "9"}) == 3

    def test_environment(self):
        assert resolve_threads(None, {Constants.ENV_NUM_THREADS: " 9 "}) == 9

    def test_default_is_twice_cpu_count(self, monkeypatch):
        monkeypatch.setattr("cli_config.os.cpu_count", lambda: 4)
        assert resolve_threads(None, {}) == 8

    def test_invalid_environment_falls_back(self, monkeypatch):
        monkeypatch.setattr("cli_config.os.cpu_count", lambda: 2)
        assert resolve_threads(None, {Constants.ENV_NUM_THREADS: "lots"}) == 4


class TestBuildContext:
    """Folding args, config and environment."""

    def test_fields(self, tmp_path):
        args = SimpleNamespace(ROOT=str(tmp_path), THREADS=2, GUARANTEE=True, NO_CACHE=True, PRETEND=False)
        ctx = build_context(args, Config(fetch_timeout=12), environ={})
        assert ctx.root == tmp_path.resolve()
        assert ctx.threads == 2
        assert ctx.guarantee and ctx.no_cache and not ctx.pretend
        assert ctx.fetch_timeout == 12
        assert ctx.cache_dir == tmp_path.resolve() / ".vat-cache"
        assert ctx.shlib_path == tmp_path.resolve() / "sh" / "lib.env"
        assert ctx.package_dir("py/build") == tmp_path.resolve() / "p" / "py" / "build"

    def test_context_is_frozen(self, tmp_path):
        ctx = build_context(SimpleNamespace(ROOT=str(tmp_path)), Config(), environ={})
        with pytest.raises(AttributeError):
            ctx.guarantee = True
