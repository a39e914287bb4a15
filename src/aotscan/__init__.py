"""aotscan - Namespace discovery for ahead-of-time compilation metadata."""

from __future__ import annotations

# Core
from aotscan.collector import Collector
from aotscan.classfile import FieldInfo, MethodInfo, UnitInfo, parse_class

# Discovery
from aotscan.discovery import (
    ArchiveRoot,
    ClassLoader,
    ClassPath,
    DirectoryRoot,
    Entry,
    EntryPointFinder,
    NamespaceResolver,
    RootKind,
    is_entry_unit,
    parse_entry_class,
    synthetic_marker_filter,
    walk,
)

# Config
from aotscan.config import Config, DiscoverySettings, load_config

# Errors
from aotscan.errors import (
    AotScanError,
    ClassFormatError,
    ConfigError,
    ConfigNotFoundError,
    DescriptorParseMiss,
    DiscoveryIOError,
    ErrorCodes,
    NameResolutionFailure,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "Collector",
    "FieldInfo",
    "MethodInfo",
    "UnitInfo",
    "parse_class",
    # Discovery
    "ArchiveRoot",
    "ClassLoader",
    "ClassPath",
    "DirectoryRoot",
    "Entry",
    "EntryPointFinder",
    "NamespaceResolver",
    "RootKind",
    "is_entry_unit",
    "parse_entry_class",
    "synthetic_marker_filter",
    "walk",
    # Config
    "Config",
    "DiscoverySettings",
    "load_config",
    # Errors
    "AotScanError",
    "ClassFormatError",
    "ConfigError",
    "ConfigNotFoundError",
    "DescriptorParseMiss",
    "DiscoveryIOError",
    "ErrorCodes",
    "NameResolutionFailure",
]
