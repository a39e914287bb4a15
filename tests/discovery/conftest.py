"""Shared pytest fixtures for the discovery test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from aotscan.classfile import UnitInfo
from aotscan.discovery.types import RootLocator
from aotscan.errors import NameResolutionFailure


class FakeLoader:
    """In-memory ClassLoader: fixed roots per storage path, plus named resources and units."""

    def __init__(
        self,
        roots: dict[str, list[RootLocator]] | None = None,
        resources: dict[str, bytes] | None = None,
        units: dict[str, UnitInfo] | None = None,
    ) -> None:
        self.roots = roots or {}
        self.resources = resources or {}
        self.units = units or {}
        self.root_requests: list[str] = []

    def get_roots(self, path: str) -> list[RootLocator]:
        self.root_requests.append(path)
        return list(self.roots.get(path, []))

    def open_resource(self, name: str) -> bytes:
        if name not in self.resources:
            raise NameResolutionFailure(name=name, reason="resource not found")
        return self.resources[name]

    def load_unit(self, name: str) -> UnitInfo:
        if name not in self.units:
            raise NameResolutionFailure(name=name, reason="unit not found")
        return self.units[name]


@pytest.fixture
def fake_loader_factory():
    """Return the FakeLoader class for building in-memory classpaths."""
    return FakeLoader


@pytest.fixture
def bogus_archive(tmp_path: Path) -> Path:
    """A file with an archive name that is not a valid archive."""
    path = tmp_path / "corrupt.jar"
    path.write_bytes(b"PK\x03\x04 truncated")
    return path
