"""Classpath capability: root lookup, resource access and unit resolution."""

from __future__ import annotations

import logging
import os
import zipfile
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Protocol, runtime_checkable

from aotscan.classfile import UnitInfo, parse_class
from aotscan.discovery.types import ArchiveRoot, DirectoryRoot, RootKind, RootLocator
from aotscan.discovery.walker import open_root, scope_prefix
from aotscan.errors import DiscoveryIOError, NameResolutionFailure

if TYPE_CHECKING:
    from aotscan.config import DiscoverySettings

logger = logging.getLogger(__name__)

__all__ = ["ClassLoader", "ClassPath"]


@runtime_checkable
class ClassLoader(Protocol):
    """Capability object consulted by every discovery call."""

    def get_roots(self, path: str) -> list[RootLocator]:
        """Return every root holding the slash-separated storage path, scoped to it."""
        ...

    def open_resource(self, name: str) -> bytes:
        """Return the content of a named resource."""
        ...

    def load_unit(self, name: str) -> UnitInfo:
        """Resolve a dotted qualified name to a unit descriptor."""
        ...


class ClassPath:
    """An ordered set of directory and archive roots.

    Repeated entries collapse to their first occurrence, so each root is
    visited once per scan. Nothing is cached between calls.
    """

    def __init__(self, entries: Iterable[str | Path], unit_suffix: str = ".class") -> None:
        self._entries: list[Path] = []
        seen: set[str] = set()
        for entry in entries:
            path = Path(entry)
            key = os.path.normcase(os.path.abspath(path))
            if key in seen:
                logger.debug("Duplicate classpath entry %s ignored", path)
                continue
            seen.add(key)
            self._entries.append(path)
        self.unit_suffix = unit_suffix

    @classmethod
    def from_settings(cls, settings: DiscoverySettings) -> ClassPath:
        """Build a ClassPath from validated discovery settings."""
        return cls(settings.classpath, unit_suffix=settings.unit_suffix)

    @classmethod
    def from_path_string(cls, value: str, unit_suffix: str = ".class") -> ClassPath:
        """Build a ClassPath from an ``os.pathsep``-separated string."""
        return cls([part for part in value.split(os.pathsep) if part], unit_suffix=unit_suffix)

    @property
    def entries(self) -> list[Path]:
        """The de-duplicated classpath entries in lookup order."""
        return list(self._entries)

    def get_roots(self, path: str) -> list[RootLocator]:
        """Return a locator for every classpath entry that contains ``path``.

        An empty path matches every entry.

        Raises:
            DiscoveryIOError: If a classpath entry cannot be opened.
        """
        scope = scope_prefix(path)
        prefix = scope.rstrip("/")
        roots: list[RootLocator] = []
        for entry in self._entries:
            root = open_root(entry, prefix=prefix)
            if root.kind is RootKind.DIRECTORY:
                if not scope or (root.path / scope).is_dir():
                    roots.append(root)
            elif not scope or self._archive_contains(root, scope):
                roots.append(root)
        logger.debug("Resolved %d root(s) for '%s'", len(roots), path)
        return roots

    def open_resource(self, name: str) -> bytes:
        """Read the first resource named ``name`` in classpath order.

        Raises:
            NameResolutionFailure: If no root holds the resource.
            DiscoveryIOError: If a root holding it cannot be read.
        """
        name = name.lstrip("/")
        for entry in self._entries:
            root = open_root(entry)
            if root.kind is RootKind.DIRECTORY:
                data = self._read_directory_resource(root, name)
            else:
                data = self._read_archive_resource(root, name)
            if data is not None:
                return data
        raise NameResolutionFailure(name=name, reason="resource not found on classpath")

    def load_unit(self, name: str) -> UnitInfo:
        """Resolve a dotted name to the UnitInfo of its class file.

        Raises:
            NameResolutionFailure: If the unit is absent, malformed, or declares
                a different name than the one it is stored under.
        """
        storage_path = name.replace(".", "/") + self.unit_suffix
        try:
            data = self.open_resource(storage_path)
        except NameResolutionFailure as e:
            raise NameResolutionFailure(name=name, reason=f"{storage_path} not found on classpath") from e
        unit = parse_class(data, label=name)
        if unit.name != name:
            raise NameResolutionFailure(name=name, reason=f"stored unit declares name '{unit.name}'")
        return unit

    def find_unit(self, name: str) -> UnitInfo | None:
        """Like load_unit, but return None when the name does not resolve."""
        try:
            return self.load_unit(name)
        except NameResolutionFailure:
            return None

    def is_present(self, name: str) -> bool:
        """Check whether a dotted name resolves to a loadable unit."""
        return self.find_unit(name) is not None

    # ----- Internal helpers -----

    @staticmethod
    def _archive_contains(root: ArchiveRoot, scope: str) -> bool:
        try:
            with zipfile.ZipFile(root.path) as archive:
                return any(name.startswith(scope) for name in archive.namelist())
        except (OSError, zipfile.BadZipFile) as e:
            raise DiscoveryIOError(root=str(root.path), reason=str(e)) from e

    @staticmethod
    def _read_directory_resource(root: DirectoryRoot, name: str) -> bytes | None:
        candidate = root.path / name
        if not candidate.is_file():
            return None
        try:
            return candidate.read_bytes()
        except OSError as e:
            raise DiscoveryIOError(root=str(root.path), reason=f"cannot read {name}: {e}") from e

    @staticmethod
    def _read_archive_resource(root: ArchiveRoot, name: str) -> bytes | None:
        try:
            with zipfile.ZipFile(root.path) as archive:
                try:
                    info = archive.getinfo(name)
                except KeyError:
                    return None
                if info.is_dir():
                    return None
                return archive.read(info)
        except (OSError, zipfile.BadZipFile) as e:
            raise DiscoveryIOError(root=str(root.path), reason=str(e)) from e
