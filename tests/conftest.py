"""Shared test fixtures for the aotscan test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from classfile_helpers import PUBLIC_STATIC_MAIN, build_class, write_jar, write_tree


# === Classpath Fixtures ===


@pytest.fixture
def classes_dir(tmp_path: Path) -> Path:
    """A loose class directory: one entry class, one helper, one generated class, one resource."""
    return write_tree(
        tmp_path / "classes",
        {
            "com/acme/App.class": build_class("com.acme.App", methods=[PUBLIC_STATIC_MAIN]),
            "com/acme/util/Strings.class": build_class("com.acme.util.Strings"),
            "com/acme/App__BeanDefinitions.class": build_class("com.acme.App__BeanDefinitions"),
            "com/acme/application.yaml": "server:\n  port: 8080\n",
        },
    )


@pytest.fixture
def lib_jar(tmp_path: Path) -> Path:
    """A library archive with units, a generated unit and a resource."""
    return write_jar(
        tmp_path / "lib" / "widgets.jar",
        {
            "com/acme/Widget.class": build_class("com.acme.Widget"),
            "com/acme/Widget__Autowiring.class": build_class("com.acme.Widget__Autowiring"),
            "com/acme/data.json": '{"k": 1}',
            "org/other/Thing.class": build_class("org.other.Thing"),
            "META-INF/MANIFEST.MF": "Manifest-Version: 1.0\n",
        },
    )
