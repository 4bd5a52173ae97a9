"""Shared fixtures: an in-memory packument source and Constants isolation."""

import asyncio
from typing import Dict, List, Optional

import pytest

from deptree.constants import Constants
from deptree.registry.npm.models import Packument


def make_packument(name: str, versions: Dict[str, dict], dist_tags: Optional[Dict[str, str]] = None) -> Packument:
    """Build a Packument from raw manifest dicts keyed by version."""
    data = {"name": name, "versions": versions}
    if dist_tags is not None:
        data["dist-tags"] = dist_tags
    return Packument.from_json(name, data)


class FakeSource:
    """Packument source backed by a dict; records lookups and peak concurrency."""

    def __init__(self, packuments: Dict[str, Packument], delay: float = 0.0):
        self.packuments = packuments
        self.delay = delay
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def get_packument(self, name: str) -> Optional[Packument]:
        self.calls.append(name)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            return self.packuments.get(name)
        finally:
            self.in_flight -= 1


@pytest.fixture(autouse=True)
def restore_constants():
    """Undo any runtime overrides a test applies to Constants."""
    saved = {k: v for k, v in vars(Constants).items() if k.isupper()}
    yield
    for key, value in saved.items():
        setattr(Constants, key, value)
