"""Immutable views over npm registry metadata documents (packuments)."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple


def _string_map(raw: Any) -> Mapping[str, str]:
    """Keep only str -> str pairs from a manifest dependency block."""
    if not isinstance(raw, dict):
        return MappingProxyType({})
    return MappingProxyType(
        {k: v for k, v in raw.items() if isinstance(k, str) and isinstance(v, str)}
    )


def _token_list(raw: Any) -> Tuple[str, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(token for token in raw if isinstance(token, str))


def _unpacked_size(dist: Any) -> int:
    if not isinstance(dist, dict):
        return 0
    size = dist.get("unpackedSize")
    # bool is an int subclass; a flag is not a size
    if isinstance(size, int) and not isinstance(size, bool) and size >= 0:
        return size
    return 0


@dataclass(frozen=True)
class PackumentVersion:
    """Manifest facts for one published version."""

    version: str
    dependencies: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    optional_dependencies: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    os: Tuple[str, ...] = ()
    cpu: Tuple[str, ...] = ()
    libc: Tuple[str, ...] = ()
    deprecated: Optional[str] = None
    unpacked_size: int = 0

    @classmethod
    def from_manifest(cls, version: str, manifest: Any) -> "PackumentVersion":
        """Build from one entry of a packument's ``versions`` object.

        Malformed fields are dropped individually instead of rejecting the version.
        """
        if not isinstance(manifest, dict):
            manifest = {}
        deprecated = manifest.get("deprecated")
        return cls(
            version=version,
            dependencies=_string_map(manifest.get("dependencies")),
            optional_dependencies=_string_map(manifest.get("optionalDependencies")),
            os=_token_list(manifest.get("os")),
            cpu=_token_list(manifest.get("cpu")),
            libc=_token_list(manifest.get("libc")),
            # npm un-deprecates by publishing an empty message
            deprecated=deprecated if isinstance(deprecated, str) and deprecated else None,
            unpacked_size=_unpacked_size(manifest.get("dist")),
        )


@dataclass(frozen=True)
class Packument:
    """Registry document for a package name."""

    name: str
    versions: Mapping[str, PackumentVersion]
    dist_tags: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_json(cls, name: str, data: Any) -> Optional["Packument"]:
        """Parse a registry response body; None when it is not a packument."""
        if not isinstance(data, dict):
            return None
        raw_versions = data.get("versions")
        if not isinstance(raw_versions, dict):
            return None

        versions: Dict[str, PackumentVersion] = {
            version: PackumentVersion.from_manifest(version, manifest)
            for version, manifest in raw_versions.items()
            if isinstance(version, str)
        }
        return cls(
            name=data.get("name") if isinstance(data.get("name"), str) else name,
            versions=MappingProxyType(versions),
            dist_tags=_string_map(data.get("dist-tags")),
        )

    def version_list(self) -> list[str]:
        """Available version strings, in document order."""
        return list(self.versions.keys())
