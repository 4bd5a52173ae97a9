"""npm package name helpers: registry path encoding and name validation."""

from __future__ import annotations

import re
import urllib.parse
from dataclasses import dataclass, field
from typing import List

# Characters encodeURIComponent leaves untouched besides alphanumerics.
_URI_COMPONENT_SAFE = "-_.!~*'()"
_SCOPED_RE = re.compile(r"^(?:@([^/]+?)/)?([^/]+?)$")
_SPECIAL_CHARS_RE = re.compile(r"[~'!()*]")
_BLOCKLIST = {"node_modules", "favicon.ico"}
MAX_NAME_LENGTH = 214


def _encode_component(value: str) -> str:
    return urllib.parse.quote(value, safe=_URI_COMPONENT_SAFE)


def encode_package_name(name: str) -> str:
    """Encode a package name as a single registry path segment.

    The scope marker survives and the scope separator is escaped:
    ``@scope/name`` becomes ``@scope%2Fname``.
    """
    if name.startswith("@"):
        return "@" + _encode_component(name[1:])
    return _encode_component(name)


@dataclass
class NameValidation:
    """Outcome of checking a name against npm's naming rules.

    Errors make a name unusable anywhere; warnings only disqualify it for
    new publishes (legacy names such as mixed-case ones still resolve).
    """

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def valid_for_old_packages(self) -> bool:
        return not self.errors

    @property
    def valid_for_new_packages(self) -> bool:
        return not self.errors and not self.warnings


def validate_package_name(name: object) -> NameValidation:
    """Check ``name`` against the registry's package naming rules."""
    result = NameValidation()

    if not isinstance(name, str):
        result.errors.append("name must be a string")
        return result
    if not name:
        result.errors.append("name length must be greater than zero")
        return result

    if name.startswith("."):
        result.errors.append("name cannot start with a period")
    if name.startswith("_"):
        result.errors.append("name cannot start with an underscore")
    if name.strip() != name:
        result.errors.append("name cannot contain leading or trailing spaces")
    if name.lower() in _BLOCKLIST:
        result.errors.append(f"{name} is not a valid package name")

    if len(name) > MAX_NAME_LENGTH:
        result.warnings.append(f"name can no longer contain more than {MAX_NAME_LENGTH} characters")
    if name.lower() != name:
        result.warnings.append("name can no longer contain capital letters")
    if _SPECIAL_CHARS_RE.search(name.split("/")[-1]):
        result.warnings.append('name can no longer contain special characters ("~\'!()*")')

    if _encode_component(name) != name:
        match = _SCOPED_RE.match(name)
        scoped_ok = False
        if match and match.group(1) is not None:
            scope, pkg = match.group(1), match.group(2)
            scoped_ok = (
                not scope.startswith(".")
                and _encode_component(scope) == scope
                and _encode_component(pkg) == pkg
            )
        if not scoped_ok:
            result.errors.append("name can only contain URL-friendly characters")

    return result
