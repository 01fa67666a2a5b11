"""Tests for the bulk scheduler."""

import json
import random

from catalog import Package, VersionStore
from conftest import StubResolver, write_package
from fetching import FetchPolicy, fetch_all, write_all
from versioning.models import VersionChannel


def _pkg(name, chance=1.0, channels=("release",)):
    return Package.from_mapping(name, {"chance": chance, "channels": [{"name": c} for c in channels]})


def _policy(context, resolver):
    return FetchPolicy(context, resolver=resolver, store=VersionStore(context.root), rng=random.Random(7))


class TestFetchAll:
    """Aggregation, isolation and counters."""

    def test_fetched_and_skipped_example(self, context, run_root):
        write_package(run_root, "B", "", versions=[("release", "1.0.0")])
        resolver = StubResolver({"release": "2.0.0"})
        packages = [_pkg("B", chance=0.0), _pkg("A")]

        result = fetch_all(packages, context, _policy(context, resolver))

        assert [p.name for p in result.versions] == ["A", "B"]
        assert result.versions[packages[1]] == [VersionChannel("release", "2.0.0")]
        assert result.versions[packages[0]] == [VersionChannel("release", "1.0.0")]
        assert result.counters.as_dict() == {"total": 2, "failed": 0, "skipped": 1, "checked": 1}

    def test_counters_invariant_and_sorted_keys(self, context, run_root):
        names = [f"pkg{i:02d}" for i in range(20)]
        for name in names[::2]:
            write_package(run_root, name, "", versions=[("release", "0.1")])
        resolver = StubResolver(fail_packages=names[::4])
        packages = [_pkg(n, chance=0.5) for n in reversed(names)]

        result = fetch_all(packages, context, _policy(context, resolver))
        c = result.counters
        assert c.total == 20
        assert c.checked == c.total - c.failed - c.skipped
        assert c.checked >= 0
        keys = [p.name for p in result.versions]
        assert keys == sorted(keys)

    def test_failure_keeps_fallback(self, context, run_root):
        write_package(run_root, "A", "", versions=[("release", "1.0")])
        resolver = StubResolver(fail_packages={"A"})
        result = fetch_all([_pkg("A"), _pkg("B")], context, _policy(context, resolver))

        assert result.counters.failed == 1
        versions = {p.name: v for p, v in result.versions.items()}
        assert versions["A"] == [VersionChannel("release", "1.0")]
        assert versions["B"] == [VersionChannel("release", "9.9")]

    def test_missing_fallback_is_omitted(self, context):
        resolver = StubResolver(fail_packages={"A"})
        result = fetch_all([_pkg("A"), _pkg("B")], context, _policy(context, resolver))

        assert [p.name for p in result.versions] == ["B"]
        assert result.omitted == ["A"]
        assert result.counters.as_dict() == {"total": 2, "failed": 1, "skipped": 0, "checked": 1}

    def test_unexpected_exception_is_isolated(self, context, run_root):
        write_package(run_root, "A", "", versions=[("release", "1.0")])
        resolver = StubResolver(raise_packages={"A", "C"})
        result = fetch_all([_pkg("A"), _pkg("B"), _pkg("C")], context, _policy(context, resolver))

        versions = {p.name: v for p, v in result.versions.items()}
        assert versions["A"] == [VersionChannel("release", "1.0")]
        assert "B" in versions
        assert result.omitted == ["C"]
        assert result.counters.failed == 2

    def test_counter_files_written(self, context):
        fetch_all([_pkg("A")], context, _policy(context, StubResolver()))
        cache = context.cache_dir
        assert (cache / "total").read_text(encoding="utf-8") == "1"
        assert (cache / "failed").read_text(encoding="utf-8") == "0"
        assert (cache / "skipped").read_text(encoding="utf-8") == "0"
        assert (cache / "checked").read_text(encoding="utf-8") == "1"

    def test_duplicate_names_are_fetched_once(self, context):
        resolver = StubResolver()
        first = _pkg("A")
        second = _pkg("A", chance=0.5, channels=("release", "commit"))
        result = fetch_all([first, second, _pkg("B")], context, _policy(context, resolver))

        assert [p.name for p in result.versions] == ["A", "B"]
        assert first in result.versions
        assert result.counters.total == 2
        assert sorted(resolver.calls) == [("A", "release"), ("B", "release")]

    def test_empty_input(self, context):
        result = fetch_all([], context, _policy(context, StubResolver()))
        assert result.versions == {}
        assert result.counters.as_dict() == {"total": 0, "failed": 0, "skipped": 0, "checked": 0}


class TestWriteAll:
    """Persisting the complete snapshot."""

    def test_writes_per_package_and_merged_files(self, context, run_root):
        result = fetch_all([_pkg("B"), _pkg("A")], context, _policy(context, StubResolver({"release": "3.0"})))
        write_all(result.versions, VersionStore(run_root))

        listing = json.loads((run_root / "p" / "ALL.json").read_text(encoding="utf-8"))
        assert [entry["package"] for entry in listing] == ["A", "B"]
        assert (run_root / "p" / "A" / "channels" / "release").read_text(encoding="utf-8") == "3.0"
        assert (run_root / "p" / "ALL.txt").read_text(encoding="utf-8") == "A\trelease\t3.0\nB\trelease\t3.0\n"
