"""Binary output of the merged data tables."""

from __future__ import annotations

import math
import re
import struct
from pathlib import Path

from tabkit.fieldtype import language_primitive, parse_bool
from tabkit.globals import ACTION_NO_GEN_FIELD_BINARY, Globals
from tabkit.table import DataTable
from tabkit.types import TypeDefine

FILE_MARK = "TABTOY"
FILE_VERSION = 4

_TYPE_CODES = {
    "int16": 1,
    "int32": 2,
    "int64": 3,
    "uint16": 4,
    "uint32": 5,
    "uint64": 6,
    "float32": 7,
    "string": 8,
    "bool": 9,
}
_ENUM_CODE = 10
_STRUCT_CODE = 11
_FLOAT64_CODE = 12
_ARRAY_OFFSET = 100

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT32_MAX = 3.4028234663852886e38


class BinaryWriter:
    """Accumulates little-endian binary values."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def getvalue(self) -> bytes:
        return bytes(self._buffer)

    def write(self, data: bytes) -> int:
        self._buffer += data
        return len(data)

    def _pack(self, fmt: str, x) -> None:
        try:
            self._buffer += struct.pack(fmt, x)
        except struct.error as exc:
            raise OverflowError(f"{x!r} does not fit {fmt!r}: {exc}") from None

    def write_int16(self, x: int) -> None:
        self._pack("<h", x)

    def write_int32(self, x: int) -> None:
        self._pack("<i", x)

    def write_int64(self, x: int) -> None:
        self._pack("<q", x)

    def write_uint16(self, x: int) -> None:
        self._pack("<H", x)

    def write_uint32(self, x: int) -> None:
        self._pack("<I", x)

    def write_uint64(self, x: int) -> None:
        self._pack("<Q", x)

    def write_float32(self, x: float) -> None:
        self._pack("<f", x)

    def write_float64(self, x: float) -> None:
        self._pack("<d", x)

    def write_bool(self, x: bool) -> None:
        self._pack("<?", bool(x))

    def write_string(self, x: str) -> None:
        """A uint32 byte length followed by the UTF-8 bytes."""
        data = x.encode("utf-8")
        self.write_uint32(len(data))
        self._buffer += data


def _parse_int(value: str, bits: int) -> int:
    if not _INT_RE.fullmatch(value):
        raise ValueError(f"invalid syntax: {value!r}")
    number = int(value)
    limit = 1 << (bits - 1)
    if not -limit <= number < limit:
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


_SIGNED_WRITERS = {
    "int16": (16, BinaryWriter.write_int16),
    "int32": (32, BinaryWriter.write_int32),
    "int64": (64, BinaryWriter.write_int64),
}
_UNSIGNED_WRITERS = {
    "uint16": (16, BinaryWriter.write_uint16),
    "uint32": (32, BinaryWriter.write_uint32),
    "uint64": (64, BinaryWriter.write_uint64),
}


def make_tag(globals: Globals, tf: TypeDefine, field_index: int) -> int:
    """Tag of a field: type code in the high 16 bits, field index in the low."""
    go_type = language_primitive(tf.field_type, "go")
    if go_type in _TYPE_CODES:
        code = _TYPE_CODES[go_type]
    elif globals.types.is_enum_kind(tf.field_type):
        code = _ENUM_CODE
    elif go_type == "float64":
        code = _FLOAT64_CODE
    else:
        raise ValueError("unknown type:" + tf.field_type)
    if tf.is_array():
        code += _ARRAY_OFFSET
    return ((code << 16) | field_index) & 0xFFFFFFFF


def make_tag_struct_array() -> int:
    """Tag that marks a table: an array of structs."""
    return (_STRUCT_CODE + _ARRAY_OFFSET) << 16


def _write_value(
    globals: Globals, writer: BinaryWriter, field_type: TypeDefine, go_type: str, value: str
) -> None:
    if go_type in _SIGNED_WRITERS:
        bits, write = _SIGNED_WRITERS[go_type]
        write(writer, 0 if value == "" else _parse_int(value, bits))
    elif go_type in _UNSIGNED_WRITERS:
        # Values are parsed as signed of the same width and then reinterpreted.
        bits, write = _UNSIGNED_WRITERS[go_type]
        number = 0 if value == "" else _parse_int(value, bits)
        write(writer, number & ((1 << bits) - 1))
    elif go_type == "bool":
        writer.write_bool(False if value == "" else parse_bool(value))
    elif go_type == "float32":
        writer.write_float32(0.0 if value == "" else _parse_float(value, 32))
    elif go_type == "float64":
        writer.write_float64(0.0 if value == "" else _parse_float(value, 64))
    elif go_type == "string":
        writer.write_string(value)
    elif globals.types.is_enum_kind(field_type.field_type):
        if value == "":
            writer.write_int32(0)
        else:
            enum_value = globals.types.resolve_enum_value(field_type.field_type, value)
            writer.write_int32(_parse_int(enum_value, 32))
    else:
        raise ValueError("unknown binary type: " + field_type.field_type)


def _write_pair(
    globals: Globals,
    writer: BinaryWriter,
    field_type: TypeDefine,
    go_type: str,
    value: str,
    field_index: int,
) -> None:
    writer.write_uint32(make_tag(globals, field_type, field_index))
    _write_value(globals, writer, field_type, go_type, value)


def _write_struct(globals: Globals, tab: DataTable, row: int) -> bytes:
    writer = BinaryWriter()
    for header in tab.headers:
        if header.type_info is None:
            continue
        if globals.can_do_action(ACTION_NO_GEN_FIELD_BINARY, header):
            continue
        cell = tab.get_cell(row, header.cell.col)
        if cell is None:
            continue
        info = header.type_info
        go_type = language_primitive(info.field_type, "go")
        if info.is_array():
            for element in cell.value_list:
                _write_pair(globals, writer, info, go_type, element, header.cell.col)
        elif cell.value != "":
            _write_pair(globals, writer, info, go_type, cell.value, header.cell.col)
    return writer.getvalue()


def _write_header(writer: BinaryWriter) -> None:
    writer.write_string(FILE_MARK)
    writer.write_uint32(FILE_VERSION)


def _export_table(globals: Globals, writer: BinaryWriter, tab: DataTable) -> None:
    writer.write_uint32(make_tag_struct_array())
    writer.write_string(tab.header_type)
    writer.write_uint32(len(tab.rows) - 1)
    for row in range(1, len(tab.rows)):
        data = _write_struct(globals, tab, row)
        writer.write_uint32(len(data))
        writer.write(data)


def generate(globals: Globals) -> bytes:
    """All tables in one binary document."""
    writer = BinaryWriter()
    _write_header(writer)
    for tab in globals.datas.all_tables():
        _export_table(globals, writer, tab)
    return writer.getvalue()


def output(globals: Globals, param: str) -> None:
    """Write one binary file per table into the directory param."""
    for tab in globals.datas.all_tables():
        writer = BinaryWriter()
        _write_header(writer)
        _export_table(globals, writer, tab)
        (Path(param) / f"{tab.header_type}.bin").write_bytes(writer.getvalue())