import json

from tabkit.globals import Globals
from tabkit.jsondata import TOOL_NAME
from tabkit.jsontype import Field, Object, generate
from tabkit.types import IndexDefine, TableKind, TypeDefine, TypeUsage, init_builtin_types


def _globals():
    g = Globals(version="testver")
    init_builtin_types(g.types)
    g.types.add_field(
        TypeDefine(kind=TypeUsage.HEADER_STRUCT, object_type="TestData", name="编号", field_name="ID",
                   field_type="int", make_index=True)
    )
    g.types.add_field(
        TypeDefine(kind=TypeUsage.HEADER_STRUCT, object_type="TestData", name="列表", field_name="List",
                   field_type="int", array_splitter="|", tags=["client"])
    )
    g.types.add_field(
        TypeDefine(kind=TypeUsage.ENUM, object_type="ActorType", field_name="None", field_type="int", value="0")
    )
    g.types.add_field(
        TypeDefine(kind=TypeUsage.ENUM, object_type="ActorType", field_name="Arch", field_type="int", value="1")
    )
    g.index_list = [IndexDefine(kind=TableKind.DATA, table_type="TestData", tags=["server"])]
    return g


def test_field_enum_value():
    assert Field(name="A", type_name="int", value="5").enum_value() == 5
    assert Field(name="A", type_name="int", value="-3").enum_value() == -3
    assert Field(name="A", type_name="int", value="").enum_value() == 0
    assert Field(name="A", type_name="int", value="x").enum_value() == 0


def test_object_sort_key_orders_by_kind_then_name():
    objs = [Object(name="B", kind="Struct"), Object(name="Z", kind="Enum"), Object(name="A", kind="Struct")]
    assert [o.name for o in sorted(objs, key=Object.sort_key)] == ["Z", "A", "B"]


def test_generate_objects_sorted_and_builtins_excluded():
    doc = json.loads(generate(_globals()))
    assert doc["@Tool"] == TOOL_NAME
    assert doc["@Version"] == "testver"
    assert [o["Name"] for o in doc["Objects"]] == ["ActorType", "TestData"]
    assert [o["Type"] for o in doc["Objects"]] == ["Enum", "Struct"]


def test_generate_fields_and_omitted_keys():
    doc = json.loads(generate(_globals()))
    enum_obj, struct_obj = doc["Objects"]
    assert "Tags" not in enum_obj
    assert [f["Value"] for f in enum_obj["Fields"]] == ["0", "1"]
    assert struct_obj["Tags"] == ["server"]
    first, second = struct_obj["Fields"]
    assert first == {"Name": "ID", "Type": "int", "Comment": "编号", "MakeIndex": True}
    assert second["ArraySplitter"] == "|"
    assert second["Tags"] == ["client"]
    assert "Value" not in second


def test_generate_without_user_types_has_null_objects():
    g = Globals(version="v")
    init_builtin_types(g.types)
    doc = json.loads(generate(g))
    assert doc["Objects"] is None