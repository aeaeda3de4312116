"""Compiling the index, type, data and key-value tables into merged data tables."""

from __future__ import annotations

from typing import Optional

from tabkit.checker import check_type, post_check, pre_check
from tabkit.fieldtype import primitive_exists
from tabkit.globals import ACTION_NO_GEN_TABLE, Globals
from tabkit.loader import load_data_table, load_index_table, load_type_table
from tabkit.report import log, report_error
from tabkit.sheets import FileLoader
from tabkit.table import Cell, DataTable, DataTableList, HeaderField
from tabkit.types import TableKind, TypeDefine, TypeTable, TypeUsage, init_builtin_types


def _create_output_table(symbols: TypeTable, input_tab: DataTable) -> DataTable:
    out = DataTable()
    out.header_type = input_tab.header_type
    out.original_header_type = input_tab.original_header_type
    out.file_name = input_tab.file_name
    out.sheet_name = input_tab.sheet_name

    header_fields = symbols.all_field_by_name(input_tab.original_header_type)
    if not header_fields:
        report_error("HeaderTypeNotFound", input_tab.original_header_type)

    for col, tf in enumerate(header_fields):
        header = out.must_get_header(col)
        header.cell.value = tf.name
        header.cell.col = col
        header.cell.row = 0
        header.type_info = tf
        out.must_get_cell(0, col).value = tf.name
    return out


def _combine_repeated_cell(
    output_cell: Cell, input_cell: Cell, input_header: HeaderField, input_tab: DataTable
) -> None:
    if input_tab.array_field_count(input_header) == 1:
        if input_cell.value != "":
            output_cell.value_list.extend(
                input_cell.value.split(input_header.type_info.array_splitter)
            )
    else:
        output_cell.value_list.append(input_cell.value)


def merge_data(
    input_list: DataTableList, output_list: DataTableList, symbols: TypeTable
) -> None:
    """Merge tables from files, sheets and key-value tables by their header type."""
    for input_tab in input_list.all_tables():
        output_tab = output_list.get_data_table(input_tab.header_type)
        if output_tab is None:
            output_tab = _create_output_table(symbols, input_tab)
            output_list.add_data_table(output_tab)

        for row in range(1, len(input_tab.rows)):
            output_row = 0
            if input_tab.get_cell(row, 0) is not None:
                output_row = output_tab.add_row()

            for input_header in input_tab.headers:
                info = input_header.type_info
                if info is None:
                    continue
                input_cell = input_tab.get_cell(row, input_header.cell.col)
                if input_cell is None:
                    break

                output_header = output_tab.header_by_name(info.field_name)
                if output_header is None:
                    raise LookupError("header not found in output table: " + info.field_name)

                output_cell = output_tab.must_get_cell(output_row, output_header.cell.col)
                if info.is_array():
                    _combine_repeated_cell(output_cell, input_cell, input_header, input_tab)
                else:
                    output_cell.copy_from(input_cell)


def _cell_or_empty(cell: Optional[Cell]) -> Cell:
    return cell if cell is not None else Cell()


def transpose_kv_to_data(symbols: TypeTable, kvtab: DataTable) -> DataTable:
    """Turn a merged key-value table into a one-row data table, defining its fields."""
    ret = DataTable()
    ret.header_type = kvtab.header_type
    ret.original_header_type = kvtab.header_type
    ret.file_name = kvtab.file_name
    ret.sheet_name = kvtab.sheet_name

    ret.add_row()
    ret.add_row()

    for row in range(1, len(kvtab.rows)):
        field_name = _cell_or_empty(kvtab.get_value_by_name(row, "字段名"))
        field_type = _cell_or_empty(kvtab.get_value_by_name(row, "字段类型"))
        name = _cell_or_empty(kvtab.get_value_by_name(row, "标识名"))
        array_splitter = _cell_or_empty(kvtab.get_value_by_name(row, "数组切割"))
        tags = kvtab.get_value_by_name(row, "标记")

        tf = TypeDefine(
            kind=TypeUsage.HEADER_STRUCT,
            object_type=kvtab.header_type,
            name=name.value,
        )

        if not primitive_exists(field_type.value) and not symbols.object_exists(
            field_type.value
        ):
            report_error("UnknownFieldType", field_type.value, str(field_type))

        tf.field_name = field_name.value
        tf.field_type = field_type.value
        tf.array_splitter = array_splitter.value

        if tags is not None and tags.value != "":
            tags_header = kvtab.header_by_name("标记")
            tf.tags = tags.value.split(tags_header.type_info.array_splitter)

        if symbols.field_by_name(tf.object_type, tf.field_name) is not None:
            report_error("DuplicateKVField", str(field_name))

        symbols.add_field(tf, kvtab, row)

        header_cell = ret.add_cell(0)
        header_cell.value = field_name.value

        header = ret.must_get_header(header_cell.col)
        header.cell.value = field_name.value
        header.type_info = tf

        input_value_cell = kvtab.get_value_by_name(row, "值")
        output_value_cell = ret.add_cell(1)
        if input_value_cell is not None:
            output_value_cell.copy_from(input_value_cell)

    return ret


def _load_variant_tables(
    globals: Globals, kv_list: DataTableList, data_list: DataTableList
) -> None:
    log.debug("Loading tables...")
    for pragma in globals.index_list:
        if globals.can_do_action(ACTION_NO_GEN_TABLE, pragma):
            log.debug(
                "   (%s) %s   action=nogentable, ignored(tag: %s)",
                pragma.table_type,
                pragma.table_file_name,
                pragma.tags,
            )
            continue

        log.debug("   (%s) %s", pragma.table_type, pragma.table_file_name)

        if pragma.kind == TableKind.DATA:
            for tab in load_data_table(
                globals.table_getter,
                pragma.table_file_name,
                pragma.table_type,
                pragma.table_type,
                globals.types,
            ):
                data_list.add_data_table(tab)
        elif pragma.kind == TableKind.TYPE:
            load_type_table(globals.types, globals.table_getter, pragma.table_file_name)
        elif pragma.kind == TableKind.KEY_VALUE:
            for tab in load_data_table(
                globals.table_getter,
                pragma.table_file_name,
                pragma.table_type,
                "KVDefine",
                globals.types,
            ):
                kv_list.add_data_table(tab)


def compile_tables(globals: Globals) -> None:
    """Load, check and merge all tables named by the index; raise TableError on bad input."""
    init_builtin_types(globals.types)

    load_index_table(globals, globals.index_file)

    if globals.table_getter is None:
        loader = FileLoader(not globals.para_loading, globals.cache_dir)
        if globals.para_loading:
            for pragma in globals.index_list:
                loader.add_file(pragma.table_file_name)
            loader.commit()
        globals.table_getter = loader

    kv_list = DataTableList()
    data_list = DataTableList()
    _load_variant_tables(globals, kv_list, data_list)

    log.debug("Checking types...")
    check_type(globals.types)
    pre_check(data_list)

    if len(kv_list) > 0:
        log.debug("Merge key-value tables...")
        merged_kv = DataTableList()
        merge_data(kv_list, merged_kv, globals.types)
        for tab in merged_kv.all_tables():
            data_list.add_data_table(transpose_kv_to_data(globals.types, tab))

    check_type(globals.types)

    log.debug("Merge data tables...")
    merge_data(data_list, globals.datas, globals.types)

    post_check(globals)