"""JSON output of the merged data tables."""

from __future__ import annotations

import json
import math
import re
import struct
from typing import Any, Optional

from tabkit.fieldtype import fetch_default_value, language_primitive, parse_bool
from tabkit.globals import ACTION_NO_GEN_FIELD_JSON, ACTION_NO_GEN_FIELD_JSON_DIR, Globals
from tabkit.table import Cell, DataTable
from tabkit.types import TypeDefine

TOOL_NAME = "tabkit"

_SIGNED_RE = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_RE = re.compile(r"[0-9]+")


def _parse_int(value: str, bits: int) -> int:
    """Parse a signed integer; bad syntax gives 0, out of range is clamped."""
    if not _SIGNED_RE.fullmatch(value):
        return 0
    limit = 1 << (bits - 1)
    return max(-limit, min(limit - 1, int(value)))


def _parse_uint(value: str, bits: int) -> int:
    """Parse an unsigned integer; bad syntax gives 0, out of range is clamped."""
    if not _UNSIGNED_RE.fullmatch(value):
        return 0
    return min((1 << bits) - 1, int(value))


def _parse_float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0


def _to_float32(number: float) -> float:
    """Round to single precision and return the shortest decimal that keeps it."""
    if not math.isfinite(number):
        return number
    try:
        single = struct.unpack("<f", struct.pack("<f", number))[0]
    except OverflowError:
        return math.copysign(math.inf, number)
    for digits in range(1, 10):
        candidate = float(f"{single:.{digits}g}")
        try:
            if struct.unpack("<f", struct.pack("<f", candidate))[0] == single:
                return candidate
        except OverflowError:
            continue
    return single


def _wrap_single_value(globals: Globals, value_type: TypeDefine, value: str) -> Any:
    go_type = language_primitive(value_type.field_type, "go")

    if go_type == "string":
        return value
    if go_type == "float32":
        return 0.0 if value == "" else _to_float32(_parse_float(value))
    if go_type == "float64":
        return 0.0 if value == "" else _parse_float(value)
    if globals.types.is_enum_kind(value_type.field_type):
        enum_value = globals.types.resolve_enum_value(value_type.field_type, value)
        try:
            return _parse_int(enum_value, 32) if _SIGNED_RE.fullmatch(enum_value) else 0
        except ValueError:
            return 0
    if go_type == "bool":
        try:
            return parse_bool(value)
        except ValueError:
            return False
    if go_type == "int16":
        return _parse_int(value, 16)
    if go_type == "int32":
        return _parse_int(value, 32)
    if go_type == "int64":
        return _parse_int(value, 64)
    if go_type == "uint16":
        return _parse_int(value, 16) & 0xFFFF
    if go_type == "uint32":
        return _parse_uint(value, 32)
    if go_type == "uint64":
        return _parse_uint(value, 64)

    if value == "":
        return fetch_default_value(value_type.field_type)
    return value


def wrap_value(
    globals: Globals, value_cell: Optional[Cell], value_type: TypeDefine
) -> Any:
    """The JSON value of a cell; arrays become lists, a missing cell its default."""
    if value_type.is_array():
        if value_cell is None:
            return []
        return [_wrap_single_value(globals, value_type, v) for v in value_cell.value_list]
    value = value_cell.value if value_cell is not None else ""
    return _wrap_single_value(globals, value_type, value)


def _table_rows(globals: Globals, tab: DataTable, action: str) -> Optional[list]:
    headers = globals.types.all_field_by_name(tab.original_header_type)
    rows = [
        {
            header.field_name: wrap_value(globals, tab.get_cell(row, col), header)
            for col, header in enumerate(headers)
            if not globals.can_do_action(action, header)
        }
        for row in range(1, len(tab.rows))
    ]
    return rows or None


def _jsonable(value: Any) -> Any:
    if isinstance(value, float) and math.isfinite(value):
        if value.is_integer() and abs(value) < 1e21:
            return int(value)
        return value
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


def _dumps(data: dict) -> bytes:
    text = json.dumps(
        _jsonable(data), indent="\t", sort_keys=True, ensure_ascii=False, allow_nan=False
    )
    for char, escaped in (
        ("&", "\\u0026"),
        ("<", "\\u003c"),
        (">", "\\u003e"),
        ("\u2028", "\\u2028"),
        ("\u2029", "\\u2029"),
    ):
        text = text.replace(char, escaped)
    return text.encode("utf-8")


def _file_header(globals: Globals) -> dict[str, Any]:
    return {"@Tool": TOOL_NAME, "@Version": globals.version}


def generate(globals: Globals) -> bytes:
    """All tables in one JSON document."""
    file_data = _file_header(globals)
    for tab in globals.datas.all_tables():
        file_data[tab.header_type] = _table_rows(globals, tab, ACTION_NO_GEN_FIELD_JSON)
    return _dumps(file_data)


def output(globals: Globals, param: str) -> None:
    """Write one JSON file per table into the directory param."""
    for tab in globals.datas.all_tables():
        file_data = _file_header(globals)
        file_data[tab.header_type] = _table_rows(globals, tab, ACTION_NO_GEN_FIELD_JSON_DIR)
        with open(f"{param}/{tab.header_type}.json", "wb") as fh:
            fh.write(_dumps(file_data))