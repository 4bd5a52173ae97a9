"""Breadth-first resolution of a package's transitive dependency tree.

The walk runs level by level. Every name in a level is marked seen before
any of the level's fetches start, so siblings sharing a dependency enqueue it
once and a cycle can never bring a visited name back. Fetches inside a level
run concurrently under a semaphore; the walker alone writes the result map
and the seen set once each level's fetches have finished.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Set

from ..common.logging_utils import Timer, extra_context, is_debug_enabled
from ..constants import Constants
from ..registry.npm.client import PackumentFetcher
from ..registry.npm.models import Packument, PackumentVersion
from ..versioning.resolvers.npm import resolve_version
from .models import DependencyDepth, ResolutionResult, ResolvedPackage, WorkItem, package_key
from .platform import TargetPlatform, matches_platform

logger = logging.getLogger(__name__)


class PackumentSource(Protocol):
    """Anything that can look up a packument by name without raising."""

    async def get_packument(self, name: str) -> Optional[Packument]:
        ...


@dataclass(frozen=True)
class _Outcome:
    """A work item whose version resolved and passed the platform check."""
    item: WorkItem
    version: PackumentVersion


class TreeWalker:
    """Resolve dependency trees against a packument source."""

    def __init__(
        self,
        source: PackumentSource,
        platform: Optional[TargetPlatform] = None,
        concurrency: Optional[int] = None,
    ):
        """Initialize the walker.

        Args:
            source: Packument lookup, normally a PackumentFetcher.
            platform: Install target; defaults to the configured platform.
            concurrency: Maximum packument fetches in flight within a level.
        """
        self._source = source
        self._platform = platform or TargetPlatform.from_constants()
        self._concurrency = max(1, concurrency or Constants.PACKUMENT_FETCH_CONCURRENCY)

    @property
    def platform(self) -> TargetPlatform:
        return self._platform

    async def walk(
        self, root_name: str, root_range: str, track_depth: bool = False
    ) -> ResolutionResult:
        """Resolve everything reachable from ``root_name@root_range``.

        Unfetchable packages, unsatisfiable ranges, non-registry specs and
        platform-ineligible versions are left out together with their
        subtrees; nothing is raised for them.
        """
        resolved = ResolutionResult(root_name, root_range)
        seen: Set[str] = set()
        current: Dict[str, WorkItem] = {root_name: WorkItem(root_name, root_range)}
        level = 0

        while current:
            seen.update(current.keys())

            with Timer() as timer:
                outcomes = await self._process_level(list(current.values()))

            next_level: Dict[str, WorkItem] = {}
            for outcome in outcomes:
                if outcome is None:
                    continue
                self._record(resolved, outcome, level, track_depth)
                self._expand(outcome, seen, next_level)

            if is_debug_enabled(logger):
                logger.debug(
                    "Resolved dependency level",
                    extra=extra_context(
                        event="level_complete", component="tree_walker", action="walk",
                        level=level, items=len(current), resolved=len(resolved),
                        next_items=len(next_level), duration_ms=timer.duration_ms()
                    ),
                )
            current = next_level
            level += 1

        logger.info(
            "Resolved %d packages for %s@%s in %d levels",
            len(resolved), root_name, root_range, level,
        )
        return resolved

    async def _process_level(self, items: List[WorkItem]) -> List[Optional[_Outcome]]:
        """Fetch, resolve and filter a level's items, at most N at a time.

        Results come back in work-set order regardless of completion order.
        """
        semaphore = asyncio.Semaphore(self._concurrency)

        async def bounded(item: WorkItem) -> Optional[_Outcome]:
            try:
                async with semaphore:
                    packument = await self._source.get_packument(item.name)
                return self._resolve_item(item, packument)
            except Exception:  # pylint: disable=broad-exception-caught
                logger.warning(
                    "Dropping %s@%s: resolution failed",
                    item.name,
                    item.range,
                    exc_info=True,
                    extra=extra_context(
                        event="resolution_error", component="tree_walker", action="resolve_item",
                        package=item.name
                    ),
                )
                return None

        return list(await asyncio.gather(*(bounded(item) for item in items)))

    def _resolve_item(self, item: WorkItem, packument: Optional[Packument]) -> Optional[_Outcome]:
        if packument is None:
            logger.debug("Dropping %s: no packument", item.name)
            return None

        version = resolve_version(item.range, packument.version_list(), packument.dist_tags)
        if version is None:
            logger.debug("Dropping %s: nothing satisfies %r", item.name, item.range)
            return None

        version_data = packument.versions.get(version)
        if version_data is None:
            return None

        if not matches_platform(version_data, self._platform):
            logger.debug("Dropping %s@%s: not installable on target platform", item.name, version)
            return None

        return _Outcome(item=item, version=version_data)

    @staticmethod
    def _record(
        resolved: ResolutionResult, outcome: _Outcome, level: int, track_depth: bool
    ) -> None:
        """Insert the package unless its key was already recorded (first wins)."""
        item, version_data = outcome.item, outcome.version
        key = package_key(item.name, version_data.version)
        if key in resolved:
            return
        resolved[key] = ResolvedPackage(
            name=item.name,
            version=version_data.version,
            size=version_data.unpacked_size,
            optional=item.optional,
            depth=DependencyDepth.for_level(level) if track_depth else None,
            path=item.path + (key,) if track_depth else None,
            deprecated=version_data.deprecated,
        )

    @staticmethod
    def _expand(outcome: _Outcome, seen: Set[str], next_level: Dict[str, WorkItem]) -> None:
        """Stage unseen dependencies of ``outcome`` for the next level."""
        item, version_data = outcome.item, outcome.version
        path = item.path + (package_key(item.name, version_data.version),)
        for deps, optional in (
            (version_data.dependencies, False),
            (version_data.optional_dependencies, True),
        ):
            for dep_name, dep_range in deps.items():
                if dep_name in seen or dep_name in next_level:
                    continue
                next_level[dep_name] = WorkItem(dep_name, dep_range, optional, path)


async def resolve_dependency_tree(
    root_name: str,
    root_range: str,
    *,
    track_depth: bool = False,
    source: Optional[PackumentSource] = None,
    platform: Optional[TargetPlatform] = None,
    concurrency: Optional[int] = None,
) -> ResolutionResult:
    """Resolve the entire dependency tree for a package.

    Uses a PackumentFetcher over the process-wide cache unless ``source`` is
    given; a fetcher created here is closed before returning.
    """
    if source is not None:
        return await TreeWalker(source, platform, concurrency).walk(root_name, root_range, track_depth)

    async with PackumentFetcher() as fetcher:
        return await TreeWalker(fetcher, platform, concurrency).walk(root_name, root_range, track_depth)
