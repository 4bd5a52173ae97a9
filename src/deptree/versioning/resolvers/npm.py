"""NPM version resolution using npm range semantics."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Mapping, Optional, Sequence

import semantic_version

logger = logging.getLogger(__name__)

ALIAS_PREFIX = "npm:"

# Dependency specs that point somewhere other than the registry.
_NON_REGISTRY_PREFIXES = (
    "http://",
    "https://",
    "git:",
    "git+",
    "git@",
    "github:",
    "file:",
    "link:",
    "workspace:",
)


def is_alias(spec: str) -> bool:
    """True for ``npm:<name>@<range>`` style aliases."""
    return spec.startswith(ALIAS_PREFIX)


def alias_range(spec: str) -> Optional[str]:
    """Range part of an alias, or None when the alias carries no range.

    The separator is the last ``@`` and must sit after the first character of
    the aliased name, so the scope marker in ``npm:@scope/pkg`` is not taken
    for it.
    """
    at_index = spec.rfind("@")
    if at_index > len(ALIAS_PREFIX):
        return spec[at_index + 1:]
    return None


def is_non_registry_spec(spec: str) -> bool:
    """True for URL, git, local path and workspace references."""
    return spec.startswith(_NON_REGISTRY_PREFIXES) or "/" in spec


# Comparator operator separated from its version: ">= 1.2.0", "^ 1.0.0".
_OPERATOR_GAP_RE = re.compile(r"(<=|>=|<|>|=|~|\^)\s+(?=[vV=]?[0-9xX*])")
# "v" prefix at the start of a comparator.
_V_PREFIX_RE = re.compile(r"(^|[\s<>=~^])[vV](?=\d)")


def normalize_range(spec_str: str) -> str:
    """Rewrite an npm range into the canonical spacing NpmSpec parses.

    npm tolerates loose spacing around operators and hyphens, and a ``v``
    before versions.
    """
    expression = " ".join(spec_str.split())
    expression = _OPERATOR_GAP_RE.sub(r"\1", expression)
    return _V_PREFIX_RE.sub(r"\1", expression)


def max_satisfying(candidates: Iterable[str], spec_str: str) -> Optional[str]:
    """Highest candidate satisfying an npm range, or None.

    Pre-releases only match when the range itself names a pre-release on the
    same major.minor.patch, as npm does. Unparseable candidates are skipped.
    """
    expression = normalize_range(spec_str) or "*"
    try:
        npm_spec = semantic_version.NpmSpec(expression)
    except Exception as e:  # pylint: disable=broad-exception-caught
        # semantic_version raises more than ValueError on some malformed ranges
        logger.debug("Invalid npm range %r: %s", spec_str, e)
        return None

    best: Optional[semantic_version.Version] = None
    best_raw: Optional[str] = None
    for raw in candidates:
        try:
            ver = semantic_version.Version(raw)
        except ValueError:
            continue  # Skip invalid versions
        if not npm_spec.match(ver):
            continue
        if best is None or ver > best:
            best, best_raw = ver, raw
    return best_raw


def resolve_version(
    spec: str,
    versions: Sequence[str],
    dist_tags: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Map a dependency spec onto one concrete version from ``versions``.

    Args:
        spec: Range, exact version, ``npm:`` alias or other reference.
        versions: Versions available for the package.
        dist_tags: Optional tag -> version mapping (e.g. ``latest``).

    Returns:
        The chosen version string exactly as it appears in ``versions``, or
        None when the spec cannot be satisfied from the registry.
    """
    if spec in versions:
        return spec

    if is_alias(spec):
        target = alias_range(spec)
        if target is None:
            return None
        return resolve_version(target, versions, dist_tags)

    if is_non_registry_spec(spec):
        return None

    if dist_tags:
        tagged = dist_tags.get(spec.strip())
        if tagged is not None:
            return tagged if tagged in versions else None

    return max_satisfying(versions, spec)
