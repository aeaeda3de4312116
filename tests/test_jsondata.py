import json

import pytest

from tabkit.compiler import compile_tables
from tabkit.globals import Globals
from tabkit.jsondata import TOOL_NAME, generate, output, wrap_value
from tabkit.sheets import MemFile, write_index_table_header, write_row_values, write_type_table_header
from tabkit.table import Cell
from tabkit.types import TypeDefine, TypeUsage


def make_env():
    g = Globals(
        version="testver",
        index_file="Index",
        package_name="main",
        combine_struct_name="Table",
    )
    mem = MemFile()
    g.table_getter = mem
    g.index_getter = mem
    return g, mem


def verify(g):
    compile_tables(g)
    return json.loads(generate(g))


def basic_index(mem, *extra):
    index = mem.create_csv_file("Index")
    write_index_table_header(index)
    write_row_values(index, "类型表", "", "Type")
    for row in extra:
        write_row_values(index, *row)
    types = mem.create_csv_file("Type")
    write_type_table_header(types)
    return types


def test_disable_data_row():
    g, mem = make_env()
    types = basic_index(mem, ("数据表", "", "TestData"))
    write_row_values(types, "表头", "TestData", "整形", "Int", "int", "", "")
    write_row_values(types, "表头", "TestData", "字符串", "String", "string", "", "")
    write_row_values(types, "表头", "TestData", "布尔", "Bool", "bool", "", "")
    write_row_values(types, "表头", "TestData", "浮点", "Float", "float", "", "")
    data = mem.create_csv_file("TestData")
    write_row_values(data, "整形", "字符串", "#浮点", "布尔")
    write_row_values(data, "100", '"hello1"', "1", "")
    write_row_values(data, "200", '"hello2"', "2", "true")
    write_row_values(data, "#300", '"hello3"', "3", "是")
    write_row_values(data, "400", '"hello4"', "4", "")
    assert verify(g) == {
        "@Tool": TOOL_NAME,
        "@Version": "testver",
        "TestData": [
            {"Int": 100, "String": '"hello1"', "Bool": False, "Float": 0},
            {"Int": 200, "String": '"hello2"', "Bool": True, "Float": 0},
            {"Int": 400, "String": '"hello4"', "Bool": False, "Float": 0},
        ],
    }


def test_array_list():
    g, mem = make_env()
    types = basic_index(mem, ("数据表", "TestData", "TestData"), ("数据表", "TestData", "TestData2"))
    write_row_values(types, "表头", "TestData", "ID", "ID", "int", "", "")
    write_row_values(types, "表头", "TestData", "技能列表", "SkillList", "int", "|", "")
    write_row_values(types, "表头", "TestData", "名字列表", "NameList", "string", "|", "")
    write_row_values(types, "表头", "TestData", "ID列表", "IDList", "int32", "|", "")
    data = mem.create_csv_file("TestData")
    write_row_values(data, "ID", "技能列表", "技能列表", "技能列表", "名字列表", "名字列表", "ID列表")
    write_row_values(data, "1", "100", "200", "300", "", "", "1|2")
    write_row_values(data, "2", "1", "", "3", "", "", "")
    write_row_values(data, "3", "", "20", "30", "", "", "")
    write_row_values(data, "4", "", "", "", "", "", "")
    data2 = mem.create_csv_file("TestData2")
    write_row_values(data2, "ID", "技能列表", "技能列表", "技能列表")
    write_row_values(data2, "5", "1", "1")
    write_row_values(data2, "6", "2", "1")
    assert verify(g) == {
        "@Tool": TOOL_NAME,
        "@Version": "testver",
        "TestData": [
            {"ID": 1, "SkillList": [100, 200, 300], "NameList": ["", ""], "IDList": [1, 2]},
            {"ID": 2, "SkillList": [1, 0, 3], "NameList": ["", ""], "IDList": []},
            {"ID": 3, "SkillList": [0, 20, 30], "NameList": ["", ""], "IDList": []},
            {"ID": 4, "SkillList": [0, 0, 0], "NameList": ["", ""], "IDList": []},
            {"ID": 5, "SkillList": [1, 1, 0], "NameList": [], "IDList": []},
            {"ID": 6, "SkillList": [2, 1, 0], "NameList": [], "IDList": []},
        ],
    }


def test_array_splitter():
    g, mem = make_env()
    types = basic_index(mem, ("数据表", "", "TestData"))
    write_row_values(types, "表头", "TestData", "Week", "Week", "string", "$", "", "true")
    data = mem.create_csv_file("TestData")
    write_row_values(data, "Week", "Week")
    write_row_values(data, "1|2|3", "4|5|6")
    assert verify(g) == {
        "@Tool": TOOL_NAME,
        "@Version": "testver",
        "TestData": [{"Week": ["1|2|3", "4|5|6"]}],
    }


def test_enum_value():
    g, mem = make_env()
    types = basic_index(mem, ("数据表", "", "TestData"))
    write_row_values(types, "枚举", "ActorType", "", "None", "int", "", "0")
    write_row_values(types, "枚举", "ActorType", "", "Arch", "int", "", "1")
    write_row_values(types, "表头", "TestData", "角色类型", "Type", "ActorType", "", "")
    write_row_values(types, "表头", "TestData", "索引", "Index", "int", "", "")
    data = mem.create_csv_file("TestData")
    write_row_values(data, "索引", "角色类型")
    write_row_values(data, "", "Arch")
    write_row_values(data, "", "None")
    write_row_values(data, "3", "")
    assert verify(g) == {
        "@Tool": TOOL_NAME,
        "@Version": "testver",
        "TestData": [
            {"Type": 1, "Index": 0},
            {"Type": 0, "Index": 0},
            {"Type": 0, "Index": 3},
        ],
    }


def test_empty_enum_value():
    g, mem = make_env()
    types = basic_index(mem, ("数据表", "", "TestData"))
    write_row_values(types, "枚举", "ActorType", "", "None", "int", "", "1")
    write_row_values(types, "枚举", "ActorType", "", "Arch", "int", "", "2")
    write_row_values(types, "表头", "TestData", "ID", "ID", "int", "", "")
    write_row_values(types, "表头", "TestData", "角色类型", "Type", "ActorType", "", "")
    data = mem.create_csv_file("TestData")
    write_row_values(data, "ID", "角色类型")
    write_row_values(data, "1", "")
    assert verify(g) == {
        "@Tool": TOOL_NAME,
        "@Version": "testver",
        "TestData": [{"ID": 1, "Type": 1}],
    }


def _basic_type_env():
    g, mem = make_env()
    types = basic_index(mem, ("数据表", "", "TestData"))
    write_row_values(types, "表头", "TestData", "整形", "Int", "int", "", "")
    write_row_values(types, "表头", "TestData", "字符串", "String", "string", "", "")
    write_row_values(types, "表头", "TestData", "布尔", "Bool", "bool", "", "")
    write_row_values(types, "表头", "TestData", "浮点", "Float", "float", "", "")
    write_row_values(types, "表头", "TestData", "双精度", "Double", "double", "", "")
    write_row_values(types, "表头", "TestData", "整形数组", "IntList", "int", "|", "")
    data = mem.create_csv_file("TestData")
    write_row_values(data, "整形", "字符串", "布尔", "浮点", "双精度", "整形数组")
    write_row_values(data, "100", '"hello"', "true", "3.14159", "1.602176", "1|2|3")
    return g


def test_basic_type():
    g = _basic_type_env()
    result = verify(g)
    assert result["TestData"] == [
        {
            "Int": 100,
            "String": '"hello"',
            "Bool": True,
            "Float": 3.14159,
            "Double": 1.602176,
            "IntList": [1, 2, 3],
        }
    ]


def test_generate_is_sorted_tab_indented_text():
    g = _basic_type_env()
    compile_tables(g)
    text = generate(g).decode("utf-8")
    assert text.startswith('{\n\t"@Tool": ')
    assert text.index('"Bool"') < text.index('"Double"') < text.index('"Float"')


def test_output_writes_file_per_table(tmp_path):
    g = _basic_type_env()
    compile_tables(g)
    output(g, str(tmp_path))
    written = json.loads((tmp_path / "TestData.json").read_text(encoding="utf-8"))
    assert written["@Version"] == "testver"
    assert written["TestData"][0]["IntList"] == [1, 2, 3]


def _field(field_type, splitter=""):
    return TypeDefine(
        kind=TypeUsage.HEADER_STRUCT,
        object_type="T",
        field_name="F",
        field_type=field_type,
        array_splitter=splitter,
    )


@pytest.mark.parametrize(
    "field_type, value, expected",
    [
        ("int16", "40000", 32767),
        ("int32", "abc", 0),
        ("uint16", "-1", 65535),
        ("uint32", "-1", 0),
        ("bool", "是", True),
        ("bool", "maybe", False),
        ("float", "", 0.0),
        ("float", "0.1", 0.1),
        ("string", "text", "text"),
    ],
)
def test_wrap_value_single(field_type, value, expected):
    g = Globals()
    assert wrap_value(g, Cell(value=value), _field(field_type)) == expected


def test_wrap_value_missing_array_cell_is_empty_list():
    g = Globals()
    assert wrap_value(g, None, _field("int", "|")) == []


def test_wrap_value_array_elements():
    g = Globals()
    cell = Cell(value_list=["1", "", "3"])
    assert wrap_value(g, cell, _field("int", "|")) == [1, 0, 3]