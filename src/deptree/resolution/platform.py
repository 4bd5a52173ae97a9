"""Platform eligibility for packages declaring os/cpu/libc restrictions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..constants import Constants
from ..registry.npm.models import PackumentVersion


@dataclass(frozen=True)
class TargetPlatform:
    """The install target a resolution is performed for."""

    os: str
    cpu: str
    libc: str

    @classmethod
    def from_constants(cls) -> "TargetPlatform":
        """Build the configured target (linux/x64/glibc unless overridden)."""
        return cls(os=Constants.TARGET_OS, cpu=Constants.TARGET_CPU, libc=Constants.TARGET_LIBC)


DEFAULT_PLATFORM = TargetPlatform(os="linux", cpu="x64", libc="glibc")


def _axis_allows(tokens: Sequence[str], target: str) -> bool:
    """True if a restriction list admits ``target``.

    An empty list is no restriction. A plain token must equal the target; an
    exclusion (``!darwin``) passes for any target it does not name.
    """
    if not tokens:
        return True
    for token in tokens:
        if token.startswith("!"):
            if token[1:] != target:
                return True
        elif token == target:
            return True
    return False


def matches_platform(version: PackumentVersion, platform: Optional[TargetPlatform] = None) -> bool:
    """Check if a package version can be installed on ``platform``."""
    target = platform or DEFAULT_PLATFORM
    return (
        _axis_allows(version.os, target.os)
        and _axis_allows(version.cpu, target.cpu)
        and _axis_allows(version.libc, target.libc)
    )
