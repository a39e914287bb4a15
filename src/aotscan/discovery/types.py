"""Discovery types: RootKind, DirectoryRoot, ArchiveRoot, Entry."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Union

__all__ = [
    "RootKind",
    "DirectoryRoot",
    "ArchiveRoot",
    "RootLocator",
    "Entry",
]


class RootKind(enum.Enum):
    """Storage representation of a classpath root."""

    DIRECTORY = "directory"
    ARCHIVE = "archive"


@dataclass(frozen=True)
class DirectoryRoot:
    """A loose directory tree on the classpath.

    ``prefix`` is the slash-separated storage path the lookup was scoped to;
    entry paths are always reported relative to ``path``, not to the prefix.
    """

    path: Path
    prefix: str = ""
    kind: ClassVar[RootKind] = RootKind.DIRECTORY


@dataclass(frozen=True)
class ArchiveRoot:
    """A zip-format archive container (jar, zip, war) on the classpath."""

    path: Path
    prefix: str = ""
    kind: ClassVar[RootKind] = RootKind.ARCHIVE


RootLocator = Union[DirectoryRoot, ArchiveRoot]


@dataclass(frozen=True)
class Entry:
    """A single stored item found while walking a root."""

    path: str
    is_unit: bool
