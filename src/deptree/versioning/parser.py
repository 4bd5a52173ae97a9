"""Token parsing and validation for the root package request."""

from __future__ import annotations

import re
from typing import Tuple

from ..registry.npm.names import validate_package_name

DEFAULT_SPEC = "latest"

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


class InvalidPackageSpecError(ValueError):
    """Raised when a root package name or version spec is malformed."""


def tokenize_rightmost_at(token: str) -> Tuple[str, str]:
    """Split ``name@spec`` on the last ``@`` that is not the scope marker.

    ``@scope/pkg`` has no spec; ``@scope/pkg@^1.0.0`` splits into
    ``("@scope/pkg", "^1.0.0")``. A missing or empty spec means ``latest``.
    """
    s = token.strip()
    at_index = s.rfind("@")
    if at_index <= 0:
        return s, DEFAULT_SPEC
    name, spec = s[:at_index].strip(), s[at_index + 1:].strip()
    return name, spec or DEFAULT_SPEC


def validate_version_spec(spec: str) -> str:
    """Reject specs that are empty, contain control characters or traverse paths."""
    if not isinstance(spec, str) or not spec.strip():
        raise InvalidPackageSpecError("Version is required")
    if _CONTROL_CHARS_RE.search(spec):
        raise InvalidPackageSpecError("Invalid version format")
    if ".." in spec:
        raise InvalidPackageSpecError("Invalid version format: directory traversal not allowed")
    return spec.strip()


def parse_package_token(token: str) -> Tuple[str, str]:
    """Parse and validate a ``name[@spec]`` CLI token.

    Raises:
        InvalidPackageSpecError: when the name or spec is malformed.
    """
    name, spec = tokenize_rightmost_at(token)
    validation = validate_package_name(name)
    if not validation.valid_for_old_packages:
        raise InvalidPackageSpecError(f"Invalid package name {name!r}: {validation.errors[0]}")
    return name, validate_version_spec(spec)
