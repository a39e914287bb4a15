"""Collector: configured entry point to unit, resource and entry-point discovery."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, TypeVar

from aotscan.classfile import FieldInfo, MethodInfo, UnitInfo
from aotscan.config import Config, DiscoverySettings
from aotscan.discovery.classpath import ClassLoader, ClassPath
from aotscan.discovery.entry_point import EntryPointFinder
from aotscan.discovery.resolver import NamespaceResolver, synthetic_marker_filter
from aotscan.errors import NameResolutionFailure

logger = logging.getLogger(__name__)

__all__ = ["Collector"]

M = TypeVar("M", MethodInfo, FieldInfo)


class Collector:
    """Collects unit names, units and resources for a single classpath snapshot."""

    def __init__(
        self,
        loader: ClassLoader | None = None,
        settings: DiscoverySettings | None = None,
    ) -> None:
        """Initialize the Collector.

        Args:
            loader: Classpath capability. Defaults to a ClassPath built from
                ``settings.classpath``.
            settings: Discovery settings; defaults apply when omitted.
        """
        self._settings = settings or DiscoverySettings()
        self._loader: ClassLoader = loader if loader is not None else ClassPath.from_settings(self._settings)
        self._resolver = NamespaceResolver(
            self._loader,
            unit_suffix=self._settings.unit_suffix,
            is_synthetic=synthetic_marker_filter(self._settings.synthetic_markers),
        )
        self._entry_points = EntryPointFinder(
            self._loader,
            resolver=self._resolver,
            descriptor_name=self._settings.descriptor_name,
            method_name=self._settings.entry_method,
            unit_suffix=self._settings.unit_suffix,
        )

    @classmethod
    def from_config(cls, config: Config, loader: ClassLoader | None = None) -> Collector:
        """Create a Collector from a Config (see DiscoverySettings.from_config)."""
        return cls(loader=loader, settings=DiscoverySettings.from_config(config))

    @property
    def settings(self) -> DiscoverySettings:
        return self._settings

    @property
    def loader(self) -> ClassLoader:
        return self._loader

    @property
    def resolver(self) -> NamespaceResolver:
        return self._resolver

    # ----- Presence -----

    def is_present(self, name: str) -> bool:
        """Check whether a unit with the given qualified name can be loaded."""
        return self.load_unit(name) is not None

    def load_unit(self, name: str) -> UnitInfo | None:
        """Load a unit by qualified name, or return None if it does not resolve."""
        try:
            return self._loader.load_unit(name)
        except NameResolutionFailure as e:
            logger.debug("Unit %s not present: %s", name, e)
            return None

    # ----- Collection -----

    def collect_unit_names(self, *packages: str | Iterable[str]) -> set[str]:
        """Collect non-synthetic unit names under each package."""
        return self._resolver.find_unit_names(_flatten(packages))

    def collect_units(
        self,
        *packages: str | Iterable[str],
        predicate: Callable[[UnitInfo], bool] | None = None,
    ) -> list[UnitInfo]:
        """Collect resolvable, non-synthetic units under each package, optionally filtered."""
        return self._resolver.collect_units(_flatten(packages), predicate)

    def find_units(self, predicate: Callable[[UnitInfo], bool]) -> list[UnitInfo]:
        """Resolve every unit on the classpath and keep those matching ``predicate``."""
        return self._resolver.find_units(predicate)

    def find_all_unit_names(self, include_synthetic: bool = False) -> set[str]:
        """Every unit name on the classpath; synthetic units only on request."""
        if include_synthetic:
            return self._resolver.find_all_unit_names_unfiltered()
        return self._resolver.find_all_unit_names()

    def find_resources(self, package: str = "") -> set[str]:
        """Resource paths under a package (the whole classpath by default)."""
        return self._resolver.find_resource_names(package)

    # ----- Annotated units -----

    def find_annotated_units(self, annotation: str) -> list[UnitInfo]:
        """Units anywhere on the classpath carrying the given runtime-visible annotation."""
        return self._resolver.find_annotated_units(annotation)

    def find_application_units(self) -> list[UnitInfo]:
        """Units carrying the configured application annotation."""
        return self.find_annotated_units(self._settings.application_annotation)

    def find_application_packages(self) -> set[str]:
        """Packages of the application units."""
        return {unit.package_name for unit in self.find_application_units()}

    def collect_application_units(self, predicate: Callable[[UnitInfo], bool] | None = None) -> list[UnitInfo]:
        """Collect the units under every application package.

        Returns an empty list when no unit carries the application annotation.
        """
        packages = self.find_application_packages()
        if not packages:
            logger.info("No unit annotated with %s", self._settings.application_annotation)
            return []
        return self._resolver.collect_units(sorted(packages), predicate)

    # ----- Members -----

    def collect_methods(
        self,
        unit: UnitInfo,
        *names: str,
        predicate: Callable[[MethodInfo], bool] | None = None,
    ) -> list[MethodInfo]:
        """Declared methods of a unit, narrowed by name and/or predicate (all when neither is given)."""
        return _select(unit.methods, names, predicate)

    def collect_fields(
        self,
        unit: UnitInfo,
        *names: str,
        predicate: Callable[[FieldInfo], bool] | None = None,
    ) -> list[FieldInfo]:
        """Declared fields of a unit, narrowed by name and/or predicate (all when neither is given)."""
        return _select(unit.fields, names, predicate)

    # ----- Entry points -----

    def find_entry_units(self) -> set[str]:
        """Entry unit names, recovered from descriptor files when reflection finds none."""
        return self._entry_points.find_entry_units()

    def recover_entry_units(self) -> set[str]:
        """Entry unit names named by descriptor files only."""
        return self._entry_points.recover_entry_units()

    def find_entry_packages(self) -> set[str]:
        """Packages holding the entry units."""
        return self._entry_points.find_entry_packages()


def _flatten(packages: tuple[str | Iterable[str], ...]) -> list[str]:
    result: list[str] = []
    for item in packages:
        if isinstance(item, str):
            result.append(item)
        else:
            result.extend(item)
    return result


def _select(members: list[M], names: tuple[str, ...], predicate: Callable[[M], bool] | None) -> list[M]:
    return [m for m in members if (not names or m.name in names) and (predicate is None or predicate(m))]
