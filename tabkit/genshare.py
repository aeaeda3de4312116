"""Helpers shared by the code and data generators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from tabkit.fieldtype import fetch_default_value, parse_bool
from tabkit.globals import Globals
from tabkit.table import DataTable
from tabkit.types import TableKind, TypeDefine

GenSingleFile = Callable[[Globals], bytes]
"""A generator that produces one output file as bytes."""

GenCustom = Callable[[Globals, str], None]
"""A generator that writes its own output, given a parameter such as a directory."""

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def _quote(value: str) -> str:
    """Escape a string and wrap it in double quotes."""
    return '"' + "".join(_ESCAPES.get(ch, ch) for ch in value) + '"'


@dataclass
class TableIndices:
    """A table column that gets an index in generated code."""

    table: DataTable
    field_info: TypeDefine


def key_value_type_names(globals: Globals) -> list[str]:
    """Distinct table types of the key-value tables in the index, in index order."""
    return list(
        dict.fromkeys(
            pragma.table_type
            for pragma in globals.index_list
            if pragma.kind == TableKind.KEY_VALUE
        )
    )


def wrap_single_value(globals: Globals, value_type: TypeDefine, value: str) -> str:
    """The source-code literal for a single cell value."""
    if value_type.field_type == "string":
        return _quote(value)
    if value_type.field_type == "float":
        return fetch_default_value(value_type.field_type) if value == "" else value
    if globals.types.is_enum_kind(value_type.field_type):
        return globals.types.resolve_enum_value(value_type.field_type, value)
    if value_type.field_type == "bool":
        try:
            return "true" if parse_bool(value) else "false"
        except ValueError:
            return "false"
    if value == "":
        return fetch_default_value(value_type.field_type)
    return value


def get_indices_by_table(tab: DataTable) -> list[TableIndices]:
    """The indexed columns of one table."""
    return [
        TableIndices(table=tab, field_info=header.type_info)
        for header in tab.headers
        if header.type_info is not None and header.type_info.make_index
    ]


def get_indices(globals: Globals) -> list[TableIndices]:
    """The indexed columns of all merged tables."""
    return [idx for tab in globals.datas.all_tables() for idx in get_indices_by_table(tab)]


USEFUL_FUNCS: dict[str, Callable[..., Any]] = {
    "HasKeyValueTypes": lambda globals: len(key_value_type_names(globals)) > 0,
    "GetKeyValueTypeNames": key_value_type_names,
    "GetIndicesByTable": get_indices_by_table,
    "GetIndices": get_indices,
}