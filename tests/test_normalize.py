"""Tests for version normalization."""

import pytest

from versioning.normalize import normalize_version


class TestNormalizeVersion:
    """Raw fetch output to canonical version strings."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("1.2.3", "1.2.3"),
            ("  1.2.3\n", "1.2.3"),
            ("v1.2.3", "1.2.3"),
            ("V2.0", "2.0"),
            ("refs/tags/v1.4", "1.4"),
            ("release-3.1", "3.1"),
            ("version-3.1", "3.1"),
            ("ver-3.1", "3.1"),
            ("1_2_3", "1.2.3"),
        ],
    )
    def test_common_shapes(self, raw, expected):
        assert normalize_version("foo", raw) == expected

    def test_package_name_prefix_is_stripped(self):
        assert normalize_version("curl", "curl-8.5.0") == "8.5.0"
        assert normalize_version("curl", "curl_8_5_0") == "8.5.0"

    def test_package_name_prefix_is_case_insensitive(self):
        assert normalize_version("sdl2", "SDL2-2.30.1") == "2.30.1"

    def test_nested_package_uses_basename(self):
        assert normalize_version("py/build", "build-1.2.1") == "1.2.1"

    def test_last_non_empty_line_wins(self):
        assert normalize_version("foo", "noise\n1.0\n2.0\n\n") == "2.0"

    def test_commit_hash_passes_through(self):
        sha = "0123456789abcdef0123456789abcdef01234567"
        assert normalize_version("foo", sha) == sha

    def test_v_only_stripped_before_digit(self):
        assert normalize_version("foo", "vala") == "vala"

    def test_empty_output(self):
        assert normalize_version("foo", "  \n") == ""
