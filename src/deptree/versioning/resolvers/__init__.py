"""Version resolvers."""

from .npm import resolve_version, max_satisfying

__all__ = [
    "resolve_version",
    "max_satisfying",
]
