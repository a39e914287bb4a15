"""Namespace resolver: scoped, filtered unit and resource name discovery."""

from __future__ import annotations

import logging
from contextlib import closing
from typing import Callable, Iterable

from aotscan.classfile import UnitInfo
from aotscan.discovery.classpath import ClassLoader
from aotscan.discovery.types import Entry
from aotscan.discovery.walker import walk
from aotscan.errors import DiscoveryIOError, NameResolutionFailure

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_SYNTHETIC_MARKERS",
    "NamespaceResolver",
    "synthetic_marker_filter",
    "to_qualified_name",
]

# Marker used by the AOT code generator for classes such as Foo__BeanDefinitions.
DEFAULT_SYNTHETIC_MARKERS: tuple[str, ...] = ("__",)


def synthetic_marker_filter(markers: Iterable[str] = DEFAULT_SYNTHETIC_MARKERS) -> Callable[[str], bool]:
    """Build a predicate matching qualified names that contain any marker."""
    frozen = tuple(markers)

    def _is_synthetic(name: str) -> bool:
        return any(marker in name for marker in frozen)

    return _is_synthetic


def to_qualified_name(path: str, unit_suffix: str = ".class") -> str:
    """Convert a unit's storage path to its dotted qualified name."""
    if path.endswith(unit_suffix):
        path = path[: -len(unit_suffix)]
    return path.replace("/", ".")


class NamespaceResolver:
    """Answers unit and resource name queries against a ClassLoader.

    Holds no state between calls; every query walks storage afresh.
    """

    def __init__(
        self,
        loader: ClassLoader,
        unit_suffix: str = ".class",
        is_synthetic: Callable[[str], bool] | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            loader: Capability that resolves storage paths to roots and names to units.
            unit_suffix: File suffix that marks a compiled unit.
            is_synthetic: Predicate excluding generated units from filtered queries.
                Defaults to a substring test for ``__``.
        """
        self._loader = loader
        self._unit_suffix = unit_suffix
        self._is_synthetic = is_synthetic or synthetic_marker_filter()

    @property
    def loader(self) -> ClassLoader:
        return self._loader

    # ----- Name discovery -----

    def find_unit_names(self, prefixes: str | Iterable[str]) -> set[str]:
        """Return qualified names of all non-synthetic units under the given prefixes.

        Raises:
            DiscoveryIOError: If any resolved root cannot be read.
        """
        if isinstance(prefixes, str):
            prefixes = [prefixes]
        names: set[str] = set()
        for prefix in prefixes:
            names |= self._scan_units(prefix, apply_filter=True)
        return names

    def find_all_unit_names(self) -> set[str]:
        """Return every non-synthetic unit name on the classpath."""
        return self._scan_units("", apply_filter=True)

    def find_all_unit_names_unfiltered(self) -> set[str]:
        """Return every unit name on the classpath, synthetic units included."""
        return self._scan_units("", apply_filter=False)

    def find_resource_names(self, prefix: str = "") -> set[str]:
        """Return slash-separated paths of all non-unit entries under a prefix."""
        return self._collect(prefix, lambda entry: None if entry.is_unit else entry.path)

    # ----- Unit resolution -----

    def collect_units(
        self,
        prefixes: str | Iterable[str],
        predicate: Callable[[UnitInfo], bool] | None = None,
    ) -> list[UnitInfo]:
        """Resolve the filtered unit names under ``prefixes`` and keep those matching ``predicate``.

        Names that fail to resolve are skipped.
        """
        return self._resolve(self.find_unit_names(prefixes), predicate)

    def find_units(self, predicate: Callable[[UnitInfo], bool]) -> list[UnitInfo]:
        """Resolve every unit on the classpath, synthetic ones included, and filter by ``predicate``."""
        return self._resolve(self.find_all_unit_names_unfiltered(), predicate)

    def find_annotated_units(self, annotation: str) -> list[UnitInfo]:
        """Resolve every unit carrying the runtime-visible annotation with the given dotted type name."""
        return self.find_units(lambda unit: unit.has_annotation(annotation))

    # ----- Internal helpers -----

    def _scan_units(self, prefix: str, apply_filter: bool) -> set[str]:
        skipped = 0

        def _keep(entry: Entry) -> str | None:
            nonlocal skipped
            if not entry.is_unit:
                return None
            name = to_qualified_name(entry.path, self._unit_suffix)
            if apply_filter and self._is_synthetic(name):
                skipped += 1
                return None
            return name

        names = self._collect(prefix, _keep)
        logger.debug("Found %d unit(s) under '%s' (%d synthetic skipped)", len(names), prefix, skipped)
        return names

    def _collect(self, prefix: str, keep: Callable[[Entry], str | None]) -> set[str]:
        results: set[str] = set()
        path = prefix.replace(".", "/")
        try:
            for root in self._loader.get_roots(path):
                with closing(walk(root, unit_suffix=self._unit_suffix)) as entries:
                    for entry in entries:
                        value = keep(entry)
                        if value is not None:
                            results.add(value)
        except DiscoveryIOError as e:
            logger.error("Discovery of '%s' aborted: %s", prefix, e)
            raise
        return results

    def _resolve(
        self,
        names: Iterable[str],
        predicate: Callable[[UnitInfo], bool] | None,
    ) -> list[UnitInfo]:
        units: list[UnitInfo] = []
        for name in sorted(names):
            try:
                unit = self._loader.load_unit(name)
            except NameResolutionFailure as e:
                logger.debug("Skipping unresolvable unit %s: %s", name, e)
                continue
            if predicate is None or predicate(unit):
                units.append(unit)
        return units
