"""Dependency tree resolution: platform filtering, the BFS walker and its result model."""

from .models import DependencyDepth, ResolutionResult, ResolvedPackage, WorkItem
from .platform import DEFAULT_PLATFORM, TargetPlatform, matches_platform
from .walker import TreeWalker, resolve_dependency_tree

__all__ = [
    "DependencyDepth",
    "ResolutionResult",
    "ResolvedPackage",
    "WorkItem",
    "DEFAULT_PLATFORM",
    "TargetPlatform",
    "matches_platform",
    "TreeWalker",
    "resolve_dependency_tree",
]
