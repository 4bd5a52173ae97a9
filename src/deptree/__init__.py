"""deptree - resolve the transitive npm dependency tree of a package for a target platform."""

from .resolution.models import DependencyDepth, ResolutionResult, ResolvedPackage
from .resolution.platform import TargetPlatform
from .resolution.walker import TreeWalker, resolve_dependency_tree

__version__ = "0.1.0"

__all__ = [
    "DependencyDepth",
    "ResolutionResult",
    "ResolvedPackage",
    "TargetPlatform",
    "TreeWalker",
    "resolve_dependency_tree",
]
