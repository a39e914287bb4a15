"""Minimal JVM class-file reader.

Reads just enough of a class file to answer capability questions about a unit:
its name, superclass, interfaces, declared fields and methods, and the types of
its runtime-visible annotations. Code and other attribute bodies are skipped.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Callable

from aotscan.errors import ClassFormatError

__all__ = [
    "ACC_PUBLIC",
    "ACC_PRIVATE",
    "ACC_STATIC",
    "FieldInfo",
    "MethodInfo",
    "UnitInfo",
    "parse_class",
]

CLASS_MAGIC = 0xCAFEBABE

ACC_PUBLIC = 0x0001
ACC_PRIVATE = 0x0002
ACC_STATIC = 0x0008

_TAG_UTF8 = 1
_TAG_CLASS = 7
_TAG_LONG = 5
_TAG_DOUBLE = 6

_VISIBLE_ANNOTATIONS = "RuntimeVisibleAnnotations"

# Fixed payload size, in bytes, of every non-Utf8 constant pool tag.
_FIXED_SIZES = {
    3: 4,  # Integer
    4: 4,  # Float
    5: 8,  # Long
    6: 8,  # Double
    7: 2,  # Class
    8: 2,  # String
    9: 4,  # Fieldref
    10: 4,  # Methodref
    11: 4,  # InterfaceMethodref
    12: 4,  # NameAndType
    15: 3,  # MethodHandle
    16: 2,  # MethodType
    17: 4,  # Dynamic
    18: 4,  # InvokeDynamic
    19: 2,  # Module
    20: 2,  # Package
}

# Annotation element_value tags whose payload is a single constant pool index.
_CONST_VALUE_TAGS = frozenset(b"BCDFIJSZsc")


@dataclass(frozen=True)
class _Member:
    name: str
    descriptor: str
    access_flags: int

    @property
    def is_public(self) -> bool:
        return bool(self.access_flags & ACC_PUBLIC)

    @property
    def is_private(self) -> bool:
        return bool(self.access_flags & ACC_PRIVATE)

    @property
    def is_static(self) -> bool:
        return bool(self.access_flags & ACC_STATIC)


@dataclass(frozen=True)
class MethodInfo(_Member):
    """A method declared by a unit."""

    @property
    def returns_void(self) -> bool:
        return self.descriptor.endswith(")V")


@dataclass(frozen=True)
class FieldInfo(_Member):
    """A field declared by a unit."""


@dataclass
class UnitInfo:
    """Descriptor of a loadable compiled unit, with dotted names."""

    name: str
    super_name: str | None = None
    access_flags: int = 0
    interfaces: list[str] = field(default_factory=list)
    methods: list[MethodInfo] = field(default_factory=list)
    fields: list[FieldInfo] = field(default_factory=list)
    annotations: list[str] = field(default_factory=list)

    @property
    def package_name(self) -> str:
        """Dotted package of the unit; empty for the default package."""
        return self.name.rpartition(".")[0]

    def declared_methods(self, name: str) -> list[MethodInfo]:
        """Methods with the given name declared directly by this unit."""
        return [m for m in self.methods if m.name == name]

    def declared_fields(self, name: str) -> list[FieldInfo]:
        """Fields with the given name declared directly by this unit."""
        return [f for f in self.fields if f.name == name]

    def has_annotation(self, annotation: str) -> bool:
        """Check for a runtime-visible annotation by its dotted type name."""
        return annotation in self.annotations


class _Reader:
    def __init__(self, data: bytes, label: str) -> None:
        self._data = data
        self._pos = 0
        self.label = label

    def _take(self, fmt: str) -> tuple:
        try:
            values = struct.unpack_from(fmt, self._data, self._pos)
        except struct.error as e:
            raise ClassFormatError(name=self.label, reason=f"truncated at offset {self._pos}") from e
        self._pos += struct.calcsize(fmt)
        return values

    def u1(self) -> int:
        return self._take(">B")[0]

    def u2(self) -> int:
        return self._take(">H")[0]

    def u4(self) -> int:
        return self._take(">I")[0]

    def raw(self, length: int) -> bytes:
        end = self._pos + length
        if end > len(self._data):
            raise ClassFormatError(name=self.label, reason=f"truncated at offset {self._pos}")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def skip(self, length: int) -> None:
        self.raw(length)


def parse_class(data: bytes, label: str = "<bytes>") -> UnitInfo:
    """Parse class-file bytes into a UnitInfo.

    Args:
        data: Raw class-file content.
        label: Name used in error messages (usually the expected unit name).

    Raises:
        ClassFormatError: If the bytes are not a well-formed class file.
    """
    reader = _Reader(data, label)
    if reader.u4() != CLASS_MAGIC:
        raise ClassFormatError(name=label, reason="bad magic number")
    reader.u2()  # minor_version
    reader.u2()  # major_version

    pool_count = reader.u2()
    utf8: dict[int, str] = {}
    class_refs: dict[int, int] = {}
    index = 1
    while index < pool_count:
        tag = reader.u1()
        if tag == _TAG_UTF8:
            length = reader.u2()
            utf8[index] = reader.raw(length).decode("utf-8", errors="replace")
        elif tag == _TAG_CLASS:
            class_refs[index] = reader.u2()
        elif tag in _FIXED_SIZES:
            reader.skip(_FIXED_SIZES[tag])
        else:
            raise ClassFormatError(name=label, reason=f"unknown constant pool tag {tag} at index {index}")
        index += 2 if tag in (_TAG_LONG, _TAG_DOUBLE) else 1

    def _utf8(idx: int) -> str:
        try:
            return utf8[idx]
        except KeyError:
            raise ClassFormatError(name=label, reason=f"constant {idx} is not a Utf8 entry") from None

    def _class_name(idx: int) -> str:
        try:
            return _utf8(class_refs[idx]).replace("/", ".")
        except KeyError:
            raise ClassFormatError(name=label, reason=f"constant {idx} is not a Class entry") from None

    access_flags = reader.u2()
    this_name = _class_name(reader.u2())
    super_index = reader.u2()
    super_name = _class_name(super_index) if super_index else None
    interfaces = [_class_name(reader.u2()) for _ in range(reader.u2())]

    fields = [FieldInfo(*_read_member(reader, _utf8)) for _ in range(reader.u2())]
    methods = [MethodInfo(*_read_member(reader, _utf8)) for _ in range(reader.u2())]

    annotations: list[str] = []
    for _ in range(reader.u2()):
        attr_name = _utf8(reader.u2())
        body = reader.raw(reader.u4())
        if attr_name == _VISIBLE_ANNOTATIONS:
            annotations.extend(_annotation_types(_Reader(body, label), _utf8))

    return UnitInfo(
        name=this_name,
        super_name=super_name,
        access_flags=access_flags,
        interfaces=interfaces,
        methods=methods,
        fields=fields,
        annotations=annotations,
    )


def _read_member(reader: _Reader, utf8: Callable[[int], str]) -> tuple[str, str, int]:
    flags = reader.u2()
    name = utf8(reader.u2())
    descriptor = utf8(reader.u2())
    _skip_attributes(reader)
    return name, descriptor, flags


def _skip_attributes(reader: _Reader) -> None:
    for _ in range(reader.u2()):
        reader.u2()  # attribute_name_index
        reader.skip(reader.u4())


def _annotation_types(reader: _Reader, utf8: Callable[[int], str]) -> list[str]:
    types: list[str] = []
    for _ in range(reader.u2()):
        types.append(_type_name(utf8(reader.u2())))
        _skip_element_pairs(reader)
    return types


def _skip_element_pairs(reader: _Reader) -> None:
    for _ in range(reader.u2()):
        reader.u2()  # element_name_index
        _skip_element_value(reader)


def _skip_element_value(reader: _Reader) -> None:
    tag = reader.u1()
    if tag in _CONST_VALUE_TAGS:
        reader.u2()
    elif tag == ord("e"):
        reader.skip(4)  # type_name_index, const_name_index
    elif tag == ord("@"):
        reader.u2()  # type_index
        _skip_element_pairs(reader)
    elif tag == ord("["):
        for _ in range(reader.u2()):
            _skip_element_value(reader)
    else:
        raise ClassFormatError(name=reader.label, reason=f"unknown annotation element tag {chr(tag)!r}")


def _type_name(descriptor: str) -> str:
    """Convert a field descriptor such as ``Lcom/acme/Marker;`` to ``com.acme.Marker``."""
    if descriptor.startswith("L") and descriptor.endswith(";"):
        descriptor = descriptor[1:-1]
    return descriptor.replace("/", ".")
