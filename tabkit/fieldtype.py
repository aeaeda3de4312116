"""Primitive field types and their names in each target language."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldType:
    """A primitive type as written in a table and its language equivalents."""

    input_field_name: str
    go_field_name: str
    cs_field_name: str
    java_field_name: str
    pb_field_name: str
    default_value: str


FIELD_TYPES: tuple[FieldType, ...] = (
    FieldType("int16", "int16", "Int16", "int", "int32", "0"),
    FieldType("int32", "int32", "Int32", "int", "int32", "0"),
    FieldType("int64", "int64", "Int64", "long", "int64", "0"),
    FieldType("int", "int32", "Int32", "int", "int32", "0"),
    FieldType("uint", "uint32", "UInt32", "int", "uint32", "0"),
    FieldType("uint16", "uint16", "UInt16", "int", "uint32", "0"),
    FieldType("uint32", "uint32", "UInt32", "int", "uint32", "0"),
    FieldType("uint64", "uint64", "UInt64", "long", "uint64", "0"),
    FieldType("float", "float32", "float", "float", "float", "0"),
    FieldType("double", "float64", "double", "double", "double", "0"),
    FieldType("float32", "float32", "float", "float", "float", "0"),
    FieldType("float64", "float64", "double", "double", "double", "0"),
    FieldType("bool", "bool", "bool", "boolean", "bool", "FALSE"),
    FieldType("string", "string", "string", "String", "string", ""),
)

FIELD_TYPE_BY_TYPE: dict[str, FieldType] = {ft.input_field_name: ft for ft in FIELD_TYPES}

_LANGUAGE_ATTR = {
    "cs": "cs_field_name",
    "go": "go_field_name",
    "java": "java_field_name",
    "pb": "pb_field_name",
}

_TRUE_WORDS = frozenset({"是", "yes", "YES", "1", "true", "TRUE", "True"})
_FALSE_WORDS = frozenset({"否", "no", "NO", "0", "false", "FALSE", "False", ""})


def fetch_default_value(field_type: str) -> str:
    """Return the default value of a primitive type, or an empty string."""
    ft = FIELD_TYPE_BY_TYPE.get(field_type)
    return ft.default_value if ft else ""


def language_primitive(field_type: str, lan_type: str) -> str:
    """Map a table type to the primitive of a language; unknown types pass through."""
    ft = FIELD_TYPE_BY_TYPE.get(field_type)
    if ft is None:
        return field_type
    attr = _LANGUAGE_ATTR.get(lan_type)
    if attr is None:
        raise ValueError("unknown lan type: " + lan_type)
    return getattr(ft, attr)


def primitive_exists(field_type: str) -> bool:
    """Whether the name is a primitive type such as int32."""
    return field_type in FIELD_TYPE_BY_TYPE


def parse_bool(s: str) -> bool:
    """Parse a table boolean; raise ValueError on unknown words."""
    if s in _TRUE_WORDS:
        return True
    if s in _FALSE_WORDS:
        return False
    raise ValueError("invalid bool value")