"""Namespace discovery over directory and archive classpath roots.

Usage::

    from aotscan.discovery import ClassPath, NamespaceResolver

    classpath = ClassPath(["build/classes", "lib/app.jar"])
    resolver = NamespaceResolver(classpath)
    names = resolver.find_unit_names({"com.acme"})
"""

from __future__ import annotations

from aotscan.discovery.classpath import ClassLoader, ClassPath
from aotscan.discovery.entry_point import (
    DEFAULT_DESCRIPTOR_NAME,
    ENTRY_CLASS_PATTERN,
    EntryPointFinder,
    is_entry_unit,
    parse_entry_class,
)
from aotscan.discovery.resolver import (
    DEFAULT_SYNTHETIC_MARKERS,
    NamespaceResolver,
    synthetic_marker_filter,
    to_qualified_name,
)
from aotscan.discovery.types import ArchiveRoot, DirectoryRoot, Entry, RootKind, RootLocator
from aotscan.discovery.walker import open_root, walk

__all__ = [
    "ArchiveRoot",
    "ClassLoader",
    "ClassPath",
    "DEFAULT_DESCRIPTOR_NAME",
    "DEFAULT_SYNTHETIC_MARKERS",
    "DirectoryRoot",
    "ENTRY_CLASS_PATTERN",
    "Entry",
    "EntryPointFinder",
    "NamespaceResolver",
    "RootKind",
    "RootLocator",
    "is_entry_unit",
    "open_root",
    "parse_entry_class",
    "synthetic_marker_filter",
    "to_qualified_name",
    "walk",
]
