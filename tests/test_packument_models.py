"""Tests for packument parsing."""

import pytest

from deptree.registry.npm.models import Packument, PackumentVersion


class TestPackumentVersion:
    """Manifest parsing for a single version."""

    def test_full_manifest(self):
        manifest = {
            "name": "esbuild",
            "version": "0.19.0",
            "dependencies": {"a": "^1.0.0"},
            "optionalDependencies": {"@esbuild/linux-x64": "0.19.0"},
            "os": ["linux"],
            "cpu": ["x64"],
            "libc": ["glibc"],
            "deprecated": "use 0.20",
            "dist": {"unpackedSize": 4096, "tarball": "https://example.com/x.tgz"},
        }

        parsed = PackumentVersion.from_manifest("0.19.0", manifest)

        assert parsed.version == "0.19.0"
        assert dict(parsed.dependencies) == {"a": "^1.0.0"}
        assert dict(parsed.optional_dependencies) == {"@esbuild/linux-x64": "0.19.0"}
        assert parsed.os == ("linux",)
        assert parsed.cpu == ("x64",)
        assert parsed.libc == ("glibc",)
        assert parsed.deprecated == "use 0.20"
        assert parsed.unpacked_size == 4096

    def test_defaults_for_bare_manifest(self):
        parsed = PackumentVersion.from_manifest("1.0.0", {})

        assert dict(parsed.dependencies) == {}
        assert dict(parsed.optional_dependencies) == {}
        assert parsed.os == () and parsed.cpu == () and parsed.libc == ()
        assert parsed.deprecated is None
        assert parsed.unpacked_size == 0

    @pytest.mark.parametrize(
        "manifest",
        [
            {"dependencies": ["a"]},
            {"dependencies": {"a": 1}},
            {"os": "linux"},
            {"dist": {"unpackedSize": "big"}},
            {"dist": {"unpackedSize": True}},
            {"dist": None},
            {"deprecated": False},
        ],
    )
    def test_malformed_fields_are_dropped(self, manifest):
        parsed = PackumentVersion.from_manifest("1.0.0", manifest)

        assert dict(parsed.dependencies) == {}
        assert parsed.os == ()
        assert parsed.unpacked_size == 0
        assert parsed.deprecated is None

    def test_empty_deprecation_means_not_deprecated(self):
        assert PackumentVersion.from_manifest("1.0.0", {"deprecated": ""}).deprecated is None

    def test_non_string_tokens_are_dropped(self):
        assert PackumentVersion.from_manifest("1.0.0", {"cpu": ["x64", 7, None]}).cpu == ("x64",)

    def test_is_immutable(self):
        parsed = PackumentVersion.from_manifest("1.0.0", {"dependencies": {"a": "1"}})

        with pytest.raises(Exception):
            parsed.version = "2.0.0"
        with pytest.raises(TypeError):
            parsed.dependencies["b"] = "2"


class TestPackument:
    """Whole-document parsing."""

    def test_from_json(self):
        data = {
            "name": "left-pad",
            "dist-tags": {"latest": "1.3.0"},
            "versions": {"1.0.0": {}, "1.3.0": {"deprecated": "use String.prototype.padStart()"}},
        }

        packument = Packument.from_json("left-pad", data)

        assert packument.name == "left-pad"
        assert packument.version_list() == ["1.0.0", "1.3.0"]
        assert dict(packument.dist_tags) == {"latest": "1.3.0"}
        assert packument.versions["1.3.0"].deprecated == "use String.prototype.padStart()"

    @pytest.mark.parametrize("data", [None, [], "text", {"name": "x"}, {"versions": []}])
    def test_rejects_non_packuments(self, data):
        assert Packument.from_json("x", data) is None

    def test_name_falls_back_to_requested(self):
        assert Packument.from_json("requested", {"versions": {}}).name == "requested"
