"""Tests for ClassPath: root lookup, resource access and unit loading."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from aotscan.config import DiscoverySettings
from aotscan.discovery.classpath import ClassLoader, ClassPath
from aotscan.discovery.types import ArchiveRoot, DirectoryRoot
from aotscan.errors import ClassFormatError, DiscoveryIOError, NameResolutionFailure

from classfile_helpers import PUBLIC_STATIC_MAIN, build_class, write_jar, write_tree


class TestClassPathConstruction:
    def test_duplicates_collapse(self, tmp_path: Path) -> None:
        """Repeated entries keep only their first occurrence."""
        a = tmp_path / "a"
        b = tmp_path / "b"
        cp = ClassPath([a, b, a, str(a)])
        assert cp.entries == [a, b]

    def test_from_path_string(self, tmp_path: Path) -> None:
        value = os.pathsep.join([str(tmp_path / "a"), "", str(tmp_path / "b.jar")])
        cp = ClassPath.from_path_string(value)
        assert cp.entries == [tmp_path / "a", tmp_path / "b.jar"]

    def test_from_settings(self, tmp_path: Path) -> None:
        settings = DiscoverySettings(classpath=[str(tmp_path)], unit_suffix=".py")
        cp = ClassPath.from_settings(settings)
        assert cp.entries == [tmp_path]
        assert cp.unit_suffix == ".py"

    def test_satisfies_loader_protocol(self) -> None:
        assert isinstance(ClassPath([]), ClassLoader)


class TestGetRoots:
    def test_directory_and_archive(self, classes_dir: Path, lib_jar: Path) -> None:
        """Both kinds of roots holding the path are returned, scoped to it."""
        roots = ClassPath([classes_dir, lib_jar]).get_roots("com/acme")
        assert roots == [DirectoryRoot(classes_dir, prefix="com/acme"), ArchiveRoot(lib_jar, prefix="com/acme")]

    def test_only_matching_roots(self, classes_dir: Path, lib_jar: Path) -> None:
        roots = ClassPath([classes_dir, lib_jar]).get_roots("org/other")
        assert roots == [ArchiveRoot(lib_jar, prefix="org/other")]

    def test_empty_path_matches_all(self, classes_dir: Path, lib_jar: Path) -> None:
        roots = ClassPath([classes_dir, lib_jar]).get_roots("")
        assert [r.path for r in roots] == [classes_dir, lib_jar]

    def test_archive_without_directory_entries(self, tmp_path: Path) -> None:
        """Archives lacking explicit directory entries still match by entry prefix."""
        jar = write_jar(tmp_path / "flat.jar", {"com/acme/A.class": b""}, with_dir_entries=False)
        assert ClassPath([jar]).get_roots("com/acme") == [ArchiveRoot(jar, prefix="com/acme")]

    def test_no_match(self, classes_dir: Path) -> None:
        assert ClassPath([classes_dir]).get_roots("net/none") == []

    def test_corrupt_archive_raises(self, classes_dir: Path, bogus_archive: Path) -> None:
        with pytest.raises(DiscoveryIOError):
            ClassPath([classes_dir, bogus_archive]).get_roots("com/acme")


class TestOpenResource:
    def test_directory_resource(self, classes_dir: Path) -> None:
        data = ClassPath([classes_dir]).open_resource("com/acme/application.yaml")
        assert data.startswith(b"server:")

    def test_archive_resource(self, lib_jar: Path) -> None:
        assert ClassPath([lib_jar]).open_resource("com/acme/data.json") == b'{"k": 1}'

    def test_first_root_wins(self, tmp_path: Path) -> None:
        first = write_tree(tmp_path / "first", {"app.properties": "a=1"})
        second = write_jar(tmp_path / "second.jar", {"app.properties": "a=2"})
        assert ClassPath([second, first]).open_resource("app.properties") == b"a=2"

    def test_leading_slash_ignored(self, lib_jar: Path) -> None:
        assert ClassPath([lib_jar]).open_resource("/com/acme/data.json") == b'{"k": 1}'

    def test_missing_resource(self, classes_dir: Path) -> None:
        with pytest.raises(NameResolutionFailure):
            ClassPath([classes_dir]).open_resource("nope.txt")

    def test_directory_entry_is_not_a_resource(self, lib_jar: Path) -> None:
        with pytest.raises(NameResolutionFailure):
            ClassPath([lib_jar]).open_resource("com/acme/")


class TestLoadUnit:
    def test_loads_from_directory(self, classes_dir: Path) -> None:
        unit = ClassPath([classes_dir]).load_unit("com.acme.App")
        assert unit.name == "com.acme.App"
        assert unit.super_name == "java.lang.Object"
        assert [m.name for m in unit.methods] == ["main"]

    def test_loads_from_archive(self, lib_jar: Path) -> None:
        assert ClassPath([lib_jar]).load_unit("org.other.Thing").name == "org.other.Thing"

    def test_missing_unit(self, classes_dir: Path) -> None:
        with pytest.raises(NameResolutionFailure) as exc_info:
            ClassPath([classes_dir]).load_unit("com.acme.Missing")
        assert exc_info.value.name == "com.acme.Missing"

    def test_malformed_unit(self, tmp_path: Path) -> None:
        root = write_tree(tmp_path / "c", {"p/Bad.class": b"\xca\xfe\xba\xbe\x00"})
        with pytest.raises(ClassFormatError):
            ClassPath([root]).load_unit("p.Bad")

    def test_name_mismatch(self, tmp_path: Path) -> None:
        root = write_tree(tmp_path / "c", {"p/Moved.class": build_class("q.Moved")})
        with pytest.raises(NameResolutionFailure, match="declares name 'q.Moved'"):
            ClassPath([root]).load_unit("p.Moved")

    def test_find_unit_and_is_present(self, classes_dir: Path) -> None:
        cp = ClassPath([classes_dir])
        assert cp.is_present("com.acme.App")
        assert not cp.is_present("com.acme.Nope")
        assert cp.find_unit("com.acme.Nope") is None

    def test_not_cached(self, tmp_path: Path) -> None:
        """A unit rewritten between calls is re-read."""
        root = write_tree(tmp_path / "c", {"p/A.class": build_class("p.A")})
        cp = ClassPath([root])
        assert cp.load_unit("p.A").methods == []
        (root / "p" / "A.class").write_bytes(build_class("p.A", methods=[PUBLIC_STATIC_MAIN]))
        assert [m.name for m in cp.load_unit("p.A").methods] == ["main"]
