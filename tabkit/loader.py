"""Reading sheets into data tables, and the index and type tables into their models."""

from __future__ import annotations

import dataclasses
import functools
import os
from typing import Any, Optional

from tabkit.fieldtype import language_primitive, parse_bool, primitive_exists
from tabkit.globals import Globals
from tabkit.report import log, report_error
from tabkit.table import Cell, DataTable
from tabkit.types import IndexDefine, TableKind, TypeDefine, TypeTable, TypeUsage


def _to_int(text: str) -> int:
    return int(text) if text else 0


def _to_float(text: str) -> float:
    return float(text) if text else 0.0


_PRIMITIVE_PARSERS = {
    str: lambda text: text,
    bool: parse_bool,
    int: _to_int,
    float: _to_float,
}


def _header_value_exists(offset: int, name: str, headers) -> bool:
    return any(header.cell.value == name for header in headers[offset:])


def _resolve_header_fields(tab: DataTable, table_object_type: str, type_tab: TypeTable) -> None:
    tab.original_header_type = table_object_type
    for index, header in enumerate(tab.headers):
        if header.cell.value == "":
            continue
        tf = type_tab.field_by_name(table_object_type, header.cell.value)
        if tf is None:
            report_error("HeaderFieldNotDefined", str(header.cell), table_object_type)
        if _header_value_exists(index + 1, header.cell.value, tab.headers) and not tf.is_array():
            report_error("DuplicateHeaderField", str(header.cell))
        header.type_info = tf


def _check_header_types(tab: DataTable, symbols: TypeTable) -> None:
    for header in tab.headers:
        info = header.type_info
        if info is None:
            continue
        if not primitive_exists(info.field_type) and not symbols.object_exists(info.field_type):
            report_error("UnknownFieldType", info.field_type, str(header.cell))


def load_header(sheet, tab: DataTable, resolve_table_type: str, type_tab: TypeTable) -> int:
    """Read the header row of a sheet into the table; return the last header column."""
    max_col = 0
    col = 0
    while True:
        header_value = sheet.get_value(0, col)
        if header_value == "":
            break
        max_col = col
        if not header_value.startswith("#"):
            header = tab.must_get_header(col)
            header.cell.copy_from(Cell(value=header_value, col=col, row=0, table=tab))
        col += 1

    _resolve_header_fields(tab, resolve_table_type, type_tab)
    _check_header_types(tab, type_tab)
    return max_col


def _read_one_row(sheet, tab: DataTable, row: int) -> bool:
    for header in tab.headers:
        if header.type_info is None:
            continue
        is_float = language_primitive(header.type_info.field_type, "go") == "float32"
        value = sheet.get_value(row, header.cell.col, value_as_float=is_float)
        if header.cell.col == 0 and value.startswith("#"):
            return False
        tab.must_get_cell(row, header.cell.col).value = value
    return True


def load_data_table(
    file_getter,
    file_name: str,
    header_type: str,
    resolve_header_type: str,
    type_tab: TypeTable,
) -> list[DataTable]:
    """Load every sheet of a file as a data table."""
    try:
        file = file_getter.get_file(file_name)
    except OSError as exc:
        raise type(exc)(f"{file_name}: {exc}") from exc

    tables = []
    for sheet in file.sheets():
        tab = DataTable()
        tab.header_type = header_type
        tab.file_name = file_name
        tab.sheet_name = sheet.name
        tables.append(tab)

        max_col = load_header(sheet, tab, resolve_header_type, type_tab)
        row = 0
        while not sheet.is_row_empty(row, max_col + 1):
            _read_one_row(sheet, tab, row)
            row += 1
    return tables


def string_to_value(text: str, kind: Any, tf: Optional[TypeDefine], symbols: TypeTable) -> Any:
    """Convert cell text to a value of the given kind (str, bool, int, float, list or an enum)."""
    parser = _PRIMITIVE_PARSERS.get(kind)
    if parser is not None:
        return parser(text)

    if tf is None:
        raise TypeError("unsupported type: " + getattr(kind, "__name__", str(kind)))

    if tf.is_array():
        if kind is not list:
            raise TypeError("require list: " + text)
        if text == "":
            return []
        return text.split(tf.array_splitter)

    if symbols.is_enum_kind(tf.field_type):
        enum_text = symbols.resolve_enum_value(tf.field_type, text)
        return kind(int(enum_text)) if enum_text != "" else kind(0)

    raise ValueError("unhandled value: " + text)


def _field_kind(fd: dataclasses.Field) -> type:
    """The value kind of a dataclass field, taken from its default."""
    if fd.default is not dataclasses.MISSING:
        return type(fd.default)
    if fd.default_factory is not dataclasses.MISSING:
        return type(fd.default_factory())
    return str


@functools.lru_cache(maxsize=None)
def _fields_by_tag(cls: type) -> dict[str, tuple[str, Any]]:
    out = {}
    for fd in dataclasses.fields(cls):
        tag = fd.metadata.get("tb_name")
        if tag is None:
            continue
        out[tag] = (fd.name, _field_kind(fd))
    return out


def parse_row(obj: Any, tab: DataTable, row: int, symbols: TypeTable) -> bool:
    """Fill a dataclass from one data row; return False if the row is commented out."""
    if tab.get_cell(row, 0) is None:
        return False

    fields = _fields_by_tag(type(obj))
    for header in tab.headers:
        value_cell = tab.get_value_by_name(row, header.cell.value)
        if value_cell is None:
            continue
        match = fields.get(header.cell.value)
        if match is None:
            report_error("HeaderNotMatchFieldName", str(header.cell))
        attr, kind = match
        setattr(obj, attr, string_to_value(value_cell.value, kind, header.type_info, symbols))
    return True


def _parse_index_rows(tab: DataTable, symbols: TypeTable) -> list[IndexDefine]:
    pragmas = []
    for row in range(1, len(tab.rows)):
        pragma = IndexDefine()
        if not parse_row(pragma, tab, row, symbols):
            continue
        if pragma.kind == TableKind.TYPE:
            pragma.table_type = "TypeDefine"
        if pragma.table_type == "":
            base = os.path.basename(pragma.table_file_name)
            pragma.table_type = os.path.splitext(base)[0]
        pragmas.append(pragma)
    return pragmas


def load_index_table(globals: Globals, file_name: str) -> None:
    """Load the index table into globals.index_list, type tables first."""
    if file_name == "":
        return
    log.debug("Loading index file: '%s'...", file_name)
    tabs = load_data_table(
        globals.index_getter, file_name, "IndexDefine", "IndexDefine", globals.types
    )
    pragmas = [p for tab in tabs for p in _parse_index_rows(tab, globals.types)]
    pragmas.sort(key=lambda p: (p.kind, p.table_type, p.table_file_name))
    globals.index_list = pragmas


def load_type_table(type_tab: TypeTable, index_getter, file_name: str) -> None:
    """Load a type table and register its definitions."""
    tabs = load_data_table(index_getter, file_name, "TypeDefine", "TypeDefine", type_tab)
    for tab in tabs:
        for row in range(1, len(tab.rows)):
            objtype = TypeDefine()
            if not parse_row(objtype, tab, row, type_tab):
                continue
            if objtype.kind == TypeUsage.NONE:
                report_error("UnknownTypeKind", objtype.object_type, objtype.field_name)
            if type_tab.field_by_name(objtype.object_type, objtype.field_name) is not None:
                cell = tab.get_value_by_name(row, "字段名")
                if cell is not None:
                    report_error(
                        "DuplicateTypeFieldName",
                        str(cell),
                        objtype.object_type,
                        objtype.field_name,
                    )
                report_error(
                    "InvalidTypeTable", objtype.object_type, objtype.field_name, tab.file_name
                )
            type_tab.add_field(objtype, tab, row)