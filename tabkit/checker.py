"""Consistency checks on type tables and on loaded and merged data tables."""

from __future__ import annotations

import math
import re
from typing import Optional

from tabkit.fieldtype import language_primitive, parse_bool
from tabkit.globals import Globals
from tabkit.report import report_error
from tabkit.table import Cell, DataTableList, HeaderField
from tabkit.types import TypeData, TypeTable, TypeUsage

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UINT_RE = re.compile(r"[0-9]+")
_INT_BITS = {"int16": 16, "int32": 32, "int64": 64}
_UINT_BITS = {"uint16": 16, "uint32": 32, "uint64": 64}
_FLOAT32_MAX = 3.4028234663852886e38

_GO_KEYWORDS = frozenset(
    {
        "break", "case", "chan", "const", "continue", "default", "defer", "else",
        "fallthrough", "for", "func", "go", "goto", "if", "import", "interface",
        "map", "package", "range", "return", "select", "struct", "switch", "type",
        "var",
    }
)


def _parse_int(value: str, bits: int) -> int:
    if not _INT_RE.fullmatch(value):
        raise ValueError(f"invalid syntax: {value!r}")
    number = int(value)
    limit = 1 << (bits - 1)
    if not -limit <= number < limit:
        raise ValueError(f"value out of range: {value!r}")
    return number


def _parse_uint(value: str, bits: int) -> int:
    if not _UINT_RE.fullmatch(value):
        raise ValueError(f"invalid syntax: {value!r}")
    number = int(value)
    if number >= 1 << bits:
        raise ValueError(f"value out of range: {value!r}")
    return number


def _parse_float(value: str, bits: int) -> float:
    if "_" in value or value != value.strip():
        raise ValueError(f"invalid syntax: {value!r}")
    try:
        number = float(value)
    except ValueError:
        raise ValueError(f"invalid syntax: {value!r}") from None
    if math.isinf(number) and not value.lstrip("+-").lower().startswith("inf"):
        raise ValueError(f"value out of range: {value!r}")
    if bits == 32 and math.isfinite(number) and abs(number) > _FLOAT32_MAX:
        raise ValueError(f"value out of range: {value!r}")
    return number


def check_single_value(header: HeaderField, value: str) -> object:
    """Parse a value by the header's type; raise ValueError if it does not fit.

    Returns the parsed value, or None for an empty value that the type allows.
    """
    go_type = language_primitive(header.type_info.field_type, "go")
    if go_type in _INT_BITS:
        return None if value == "" else _parse_int(value, _INT_BITS[go_type])
    if go_type in _UINT_BITS:
        return None if value == "" else _parse_uint(value, _UINT_BITS[go_type])
    if go_type == "float32":
        return _parse_float(value, 32)
    if go_type == "float64":
        return None if value == "" else _parse_float(value, 64)
    if go_type == "bool":
        return parse_bool(value)
    return value


def _checked_cells(tab, header: HeaderField):
    """Data cells of a column, commented rows left out."""
    for row in range(1, len(tab.rows)):
        cell = tab.get_cell(row, header.cell.col)
        if cell is not None:
            yield cell


def _check_data_type(globals: Globals) -> None:
    for tab in globals.datas.all_tables():
        for header in tab.headers:
            if header.type_info is None:
                continue
            for cell in _checked_cells(tab, header):
                if header.type_info.is_array():
                    values = list(cell.value_list)
                elif cell.value != "":
                    values = [cell.value]
                else:
                    values = []
                for value in values:
                    try:
                        check_single_value(header, value)
                    except ValueError:
                        report_error(
                            "DataMissMatchTypeDefine", header.type_info.field_type, str(cell)
                        )


def _check_enum_field_value(
    globals: Globals, header: HeaderField, value: str, cell: Cell
) -> None:
    if cell.value == "":
        return
    if globals.types.get_enum_value(header.type_info.field_type, value) is None:
        report_error("UnknownEnumValue", header.type_info.field_type, str(cell))


def _check_enum_value(globals: Globals) -> None:
    for tab in globals.datas.all_tables():
        for header in tab.headers:
            if header.type_info is None:
                continue
            if not globals.types.is_enum_kind(header.type_info.field_type):
                continue
            for cell in _checked_cells(tab, header):
                values = cell.value_list if header.type_info.is_array() else [cell.value]
                for value in values:
                    _check_enum_field_value(globals, header, value, cell)


def _check_repeat(globals: Globals) -> None:
    for tab in globals.datas.all_tables():
        for header in tab.headers:
            if header.type_info is None or not header.type_info.make_index:
                continue
            seen: dict[str, Cell] = {}
            for cell in _checked_cells(tab, header):
                if cell.value == "":
                    continue
                if cell.value in seen:
                    report_error("DuplicateValueInMakingIndex", str(cell))
                seen[cell.value] = cell


def _is_valid_field_name(name: str) -> bool:
    return name.isidentifier() and name not in _GO_KEYWORDS


def _source_cell(td: TypeData, column: str) -> str:
    cell: Optional[Cell] = None
    if td.tab is not None:
        cell = td.tab.get_value_by_name(td.row, column)
    return str(cell) if cell is not None else ""


def check_type(type_tab: TypeTable) -> None:
    """Check field names, empty enum values and duplicate enum values."""
    for td in type_tab.raw():
        if not _is_valid_field_name(td.define.field_name):
            report_error("InvalidFieldName", _source_cell(td, "字段名"))

    for td in type_tab.raw():
        if td.define.kind == TypeUsage.ENUM and td.define.value == "":
            report_error("EnumValueEmpty", _source_cell(td, "值"))

    seen: set[tuple[str, str]] = set()
    for td in type_tab.raw():
        if td.define.is_builtin or td.define.kind != TypeUsage.ENUM:
            continue
        key = (td.define.object_type, td.define.value)
        if key in seen:
            report_error("DuplicateEnumValue", _source_cell(td, "值"))
        seen.add(key)


def pre_check(data_list: DataTableList) -> None:
    """Before merging: an array field must span the same number of columns in every table."""
    counts: dict[tuple[str, str], int] = {}
    for tab in data_list.all_tables():
        for header in tab.headers:
            info = header.type_info
            if info is None or not info.is_array():
                continue
            key = (info.field_name, info.name)
            count = tab.array_field_count(header)
            previous = counts.setdefault(key, count)
            if previous != count:
                report_error("ArrayMultiColumnDefineNotMatch")


def post_check(globals: Globals) -> None:
    """After merging: enum values, index uniqueness and value types."""
    _check_enum_value(globals)
    _check_repeat(globals)
    _check_data_type(globals)