"""Data models for dependency tree resolution."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class DependencyDepth(Enum):
    """How far a package sits from the root, by level of first discovery."""
    ROOT = "root"
    DIRECT = "direct"
    TRANSITIVE = "transitive"

    @classmethod
    def for_level(cls, level: int) -> "DependencyDepth":
        if level == 0:
            return cls.ROOT
        if level == 1:
            return cls.DIRECT
        return cls.TRANSITIVE


def package_key(name: str, version: str) -> str:
    """Result key for a resolved package: ``name@version``."""
    return f"{name}@{version}"


@dataclass(frozen=True)
class WorkItem:
    """One pending dependency edge: resolve ``range`` for ``name``."""
    name: str
    range: str
    optional: bool = False
    path: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ResolvedPackage:
    """A package at a concrete version reachable from the root."""
    name: str
    version: str
    size: int
    optional: bool
    depth: Optional[DependencyDepth] = None
    path: Optional[Tuple[str, ...]] = None
    deprecated: Optional[str] = None

    @property
    def key(self) -> str:
        return package_key(self.name, self.version)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-friendly dict; untracked and absent fields are omitted."""
        data: Dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "size": self.size,
            "optional": self.optional,
        }
        if self.depth is not None:
            data["depth"] = self.depth.value
        if self.path is not None:
            data["path"] = list(self.path)
        if self.deprecated is not None:
            data["deprecated"] = self.deprecated
        return data


class ResolutionResult(Dict[str, ResolvedPackage]):
    """Resolved packages keyed by ``name@version``, in discovery order."""

    def __init__(self, root_name: str, root_range: str):
        super().__init__()
        self.root_name = root_name
        self.root_range = root_range

    @property
    def root(self) -> Optional[ResolvedPackage]:
        """The root package, or None when it could not be resolved."""
        for pkg in self.values():
            if pkg.name == self.root_name:
                return pkg
        return None

    def total_size(self) -> int:
        """Combined unpacked size of every resolved package, root included."""
        return sum(pkg.size for pkg in self.values())

    def summary(self) -> Dict[str, Any]:
        """Aggregate counts and sizes for reporting."""
        root = self.root
        deprecated = {key: pkg.deprecated for key, pkg in self.items() if pkg.deprecated}
        data: Dict[str, Any] = {
            "package_count": len(self),
            "dependency_count": len(self) - (1 if root is not None else 0),
            "total_size": self.total_size(),
            "optional_count": sum(1 for pkg in self.values() if pkg.optional),
            "deprecated": deprecated,
        }
        depths = [pkg.depth for pkg in self.values() if pkg.depth is not None]
        if depths:
            data["direct_count"] = depths.count(DependencyDepth.DIRECT)
            data["transitive_count"] = depths.count(DependencyDepth.TRANSITIVE)
        return data

    def to_dict(self) -> Dict[str, Any]:
        root = self.root
        return {
            "root": root.key if root is not None else None,
            "requested": package_key(self.root_name, self.root_range),
            "summary": self.summary(),
            "packages": {key: pkg.to_dict() for key, pkg in self.items()},
        }
