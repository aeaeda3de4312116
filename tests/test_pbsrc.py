from tabkit.compiler import compile_tables
from tabkit.globals import Globals
from tabkit.pbsrc import generate, pb_type
from tabkit.sheets import (
    MemFile,
    write_index_table_header,
    write_row_values,
    write_type_table_header,
)
from tabkit.types import TypeDefine


def _compiled() -> Globals:
    g = Globals(
        version="testver", index_file="Index", package_name="main", combine_struct_name="Table"
    )
    mem = MemFile()
    g.index_getter = mem
    g.table_getter = mem
    index = mem.create_csv_file("Index")
    write_index_table_header(index)
    write_row_values(index, "类型表", "", "Type")
    write_row_values(index, "数据表", "", "TestData")
    types = mem.create_csv_file("Type")
    write_type_table_header(types)
    write_row_values(types, "枚举", "ActorType", "", "None", "int", "", "0")
    write_row_values(types, "枚举", "ActorType", "", "Arch", "int", "", "1")
    write_row_values(types, "表头", "TestData", "ID", "ID", "int", "", "", "true")
    write_row_values(types, "表头", "TestData", "角色类型", "Type", "ActorType", "", "")
    write_row_values(types, "表头", "TestData", "列表", "List", "int", "|", "")
    data = mem.create_csv_file("TestData")
    write_row_values(data, "ID", "角色类型", "列表")
    write_row_values(data, "1", "Arch", "1|2")
    compile_tables(g)
    return g


def test_pb_type_scalar_and_array():
    assert pb_type(TypeDefine(field_type="int")) == "int32"
    assert pb_type(TypeDefine(field_type="double")) == "double"
    assert pb_type(TypeDefine(field_type="int64", array_splitter="|")) == "repeated int64"


def test_pb_type_keeps_object_names():
    assert pb_type(TypeDefine(field_type="ActorType")) == "ActorType"


def test_generate_schema():
    text = generate(_compiled()).decode("utf-8")
    assert 'syntax = "proto3";' in text
    assert "package main;" in text
    assert "enum ActorType" in text
    assert "Arch = 1; " in text
    assert "message TestData" in text
    assert "int32 ID = 1; // ID" in text
    assert "ActorType Type = 2;" in text
    assert "repeated int32 List = 3;" in text
    assert "repeated TestData TestData = 1; // table: TestData" in text


def test_generate_orders_enums_before_messages():
    text = generate(_compiled()).decode("utf-8")
    assert text.index("enum ActorType") < text.index("message TestData")
    assert text.index("message TestData") < text.index("message Table")