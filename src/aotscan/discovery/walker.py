"""Storage walker: uniform entry enumeration over directory and archive roots."""

from __future__ import annotations

import logging
import os
import zipfile
from pathlib import Path
from typing import Iterator

from aotscan.discovery.types import ArchiveRoot, DirectoryRoot, Entry, RootKind, RootLocator
from aotscan.errors import DiscoveryIOError

logger = logging.getLogger(__name__)

__all__ = ["walk", "open_root", "scope_prefix"]


def scope_prefix(prefix: str) -> str:
    """Normalize a storage-path prefix to ``a/b/`` form (``""`` for the whole root)."""
    prefix = prefix.strip("/")
    return f"{prefix}/" if prefix else ""


def open_root(path: str | Path, prefix: str = "") -> RootLocator:
    """Classify a classpath path as a directory or archive root."""
    root_path = Path(path)
    if root_path.is_dir():
        return DirectoryRoot(path=root_path, prefix=prefix)
    if root_path.is_file():
        return ArchiveRoot(path=root_path, prefix=prefix)
    raise DiscoveryIOError(root=str(root_path), reason="path does not exist")


def walk(root: RootLocator, unit_suffix: str = ".class", follow_symlinks: bool = True) -> Iterator[Entry]:
    """Yield every stored file under a root as an Entry.

    The returned iterator is lazy and single-use. Archive handles are held only
    while the iterator is being consumed and are closed on exhaustion, on error,
    and when the iterator is closed early.

    Raises:
        DiscoveryIOError: If the root, or any directory or archive below it,
            cannot be opened.
    """
    if root.kind is RootKind.ARCHIVE:
        return _walk_archive(root, unit_suffix)
    return _walk_directory(root, unit_suffix, follow_symlinks)


def _walk_directory(root: DirectoryRoot, unit_suffix: str, follow_symlinks: bool) -> Iterator[Entry]:
    base = Path(root.path)
    if not base.is_dir():
        raise DiscoveryIOError(root=str(base), reason="not a directory")

    scope = scope_prefix(root.prefix)
    start = base / scope if scope else base
    if not start.is_dir():
        logger.debug("Prefix '%s' absent from %s", root.prefix, base)
        return

    # Real paths of every directory entered, plain or linked.
    visited_real_paths: set[Path] = set()
    # Linked directories are followed only after the plain tree is exhausted,
    # so a real directory always claims its own path before any alias does.
    pending_links: list[Path] = []

    def _scan_dir(dir_path: Path) -> Iterator[Entry]:
        real = dir_path.resolve()
        if real in visited_real_paths:
            logger.warning("Directory %s already walked as %s, skipping", dir_path, real)
            return
        visited_real_paths.add(real)

        try:
            with os.scandir(dir_path) as it:
                entries = list(it)
        except OSError as e:
            raise DiscoveryIOError(root=str(base), reason=f"cannot list {dir_path}: {e}") from e

        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=follow_symlinks)
                is_file = entry.is_file(follow_symlinks=follow_symlinks)
                is_symlink = entry.is_symlink()
            except OSError as e:
                raise DiscoveryIOError(root=str(base), reason=f"cannot stat {entry.path}: {e}") from e

            entry_path = Path(entry.path)
            if is_dir and is_symlink:
                pending_links.append(entry_path)
            elif is_dir:
                yield from _scan_dir(entry_path)
            elif is_file:
                rel = entry_path.relative_to(base).as_posix()
                yield Entry(path=rel, is_unit=rel.endswith(unit_suffix))

    start_real = start.resolve()
    yield from _scan_dir(start)
    while pending_links:
        linked = pending_links.pop(0)
        if start_real.is_relative_to(linked.resolve()):
            logger.warning("Symlink %s points at or above the walk start, skipping", linked)
            continue
        yield from _scan_dir(linked)


def _walk_archive(root: ArchiveRoot, unit_suffix: str) -> Iterator[Entry]:
    try:
        archive = zipfile.ZipFile(root.path)
    except (OSError, zipfile.BadZipFile) as e:
        raise DiscoveryIOError(root=str(root.path), reason=str(e)) from e

    scope = scope_prefix(root.prefix)
    with archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            name = info.filename
            if scope and not name.startswith(scope):
                continue
            yield Entry(path=name, is_unit=name.endswith(unit_suffix))
