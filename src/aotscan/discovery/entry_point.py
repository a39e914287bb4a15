"""Entry unit detection, with recovery from native-image build descriptors."""

from __future__ import annotations

import logging
import re

from aotscan.classfile import UnitInfo
from aotscan.discovery.classpath import ClassLoader
from aotscan.discovery.resolver import NamespaceResolver
from aotscan.errors import DescriptorParseMiss, DiscoveryIOError, NameResolutionFailure

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_DESCRIPTOR_NAME",
    "ENTRY_CLASS_PATTERN",
    "EntryPointFinder",
    "is_entry_unit",
    "parse_entry_class",
]

DEFAULT_DESCRIPTOR_NAME = "native-image.properties"

ENTRY_CLASS_PATTERN = re.compile(r"-H:Class\s*=\s*([\w.]+)")


def parse_entry_class(text: str, descriptor: str | None = None) -> str:
    """Extract the first ``-H:Class=<name>`` value from descriptor text.

    Raises:
        DescriptorParseMiss: If the text is blank or carries no such token.
    """
    if not text or text.isspace():
        raise DescriptorParseMiss(descriptor=descriptor)
    match = ENTRY_CLASS_PATTERN.search(text)
    if match is None:
        raise DescriptorParseMiss(descriptor=descriptor)
    return match.group(1)


def is_entry_unit(unit: UnitInfo, loader: ClassLoader | None = None, method_name: str = "main") -> bool:
    """Check whether a unit exposes a conventional entry method.

    A unit qualifies when either a public static void ``main`` is visible on it
    or on one of its superclasses, or the unit itself declares a non-private
    void ``main``. Superclasses are only consulted when a loader is given;
    unresolvable superclasses end the search.
    """
    for method in unit.declared_methods(method_name):
        # Declared view: covers public static main as well.
        if method.returns_void and not method.is_private:
            return True

    if loader is None:
        return False

    seen = {unit.name}
    super_name = unit.super_name
    while super_name and super_name not in seen:
        seen.add(super_name)
        try:
            parent = loader.load_unit(super_name)
        except NameResolutionFailure:
            return False
        for method in parent.declared_methods(method_name):
            if method.returns_void and method.is_static and method.is_public:
                return True
        super_name = parent.super_name
    return False


class EntryPointFinder:
    """Locates the program's entry unit(s) on a classpath."""

    def __init__(
        self,
        loader: ClassLoader,
        resolver: NamespaceResolver | None = None,
        descriptor_name: str = DEFAULT_DESCRIPTOR_NAME,
        method_name: str = "main",
        unit_suffix: str = ".class",
    ) -> None:
        """Initialize the finder.

        Args:
            loader: Capability used to list descriptors and load candidate units.
            resolver: Resolver to scan with. Defaults to one over ``loader`` using ``unit_suffix``.
            descriptor_name: File name suffix identifying build descriptors.
            method_name: Name of the entry method.
            unit_suffix: Unit file suffix for the default resolver.
        """
        self._loader = loader
        self._resolver = resolver or NamespaceResolver(loader, unit_suffix=unit_suffix)
        self._descriptor_name = descriptor_name
        self._method_name = method_name

    def find_entry_units(self) -> set[str]:
        """Find entry units reflectively, falling back to descriptor recovery when none are found."""
        found = self.find_reflective_entry_units()
        if found:
            return found
        logger.info("No entry unit found reflectively, recovering from %s files", self._descriptor_name)
        return self.recover_entry_units()

    def find_entry_packages(self) -> set[str]:
        """Return the packages of all entry units (empty string for the default package)."""
        return {name.rpartition(".")[0] for name in self.find_entry_units()}

    def find_reflective_entry_units(self) -> set[str]:
        """Scan every unit on the classpath for an entry method."""
        units = self._resolver.find_units(self._is_entry)
        return {unit.name for unit in units}

    def recover_entry_units(self) -> set[str]:
        """Recover entry units named by ``-H:Class`` tokens in descriptor files.

        Unreadable descriptors, descriptors without a token, and candidates
        that do not resolve or lack an entry method are skipped.
        """
        confirmed: set[str] = set()
        for resource in sorted(self._resolver.find_resource_names()):
            if not resource.endswith(self._descriptor_name):
                continue
            candidate = self._read_candidate(resource)
            if candidate is None:
                continue
            try:
                unit = self._loader.load_unit(candidate)
            except NameResolutionFailure as e:
                logger.debug("Candidate %s from %s does not resolve: %s", candidate, resource, e)
                continue
            if self._is_entry(unit):
                confirmed.add(unit.name)
            else:
                logger.debug("Candidate %s from %s has no entry method", candidate, resource)
        return confirmed

    # ----- Internal helpers -----

    def _is_entry(self, unit: UnitInfo) -> bool:
        return is_entry_unit(unit, loader=self._loader, method_name=self._method_name)

    def _read_candidate(self, resource: str) -> str | None:
        try:
            content = self._loader.open_resource(resource)
        except (DiscoveryIOError, NameResolutionFailure) as e:
            logger.debug("Skipping unreadable descriptor %s: %s", resource, e)
            return None
        try:
            return parse_entry_class(content.decode("utf-8", errors="replace"), descriptor=resource)
        except DescriptorParseMiss as e:
            logger.debug("%s", e)
            return None
