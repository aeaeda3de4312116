import pytest

from tabkit.fieldtype import (
    FIELD_TYPE_BY_TYPE,
    fetch_default_value,
    language_primitive,
    parse_bool,
    primitive_exists,
)


@pytest.mark.parametrize(
    "field_type, lan, expected",
    [
        ("int", "go", "int32"),
        ("float", "go", "float32"),
        ("double", "cs", "double"),
        ("int64", "java", "long"),
        ("uint16", "pb", "uint32"),
        ("bool", "java", "boolean"),
        ("string", "java", "String"),
    ],
)
def test_language_primitive(field_type, lan, expected):
    assert language_primitive(field_type, lan) == expected


def test_language_primitive_passes_unknown_type_through():
    assert language_primitive("ActorType", "go") == "ActorType"
    assert language_primitive("ActorType", "klingon") == "ActorType"


def test_language_primitive_rejects_unknown_language():
    with pytest.raises(ValueError):
        language_primitive("int", "klingon")


def test_fetch_default_value():
    assert fetch_default_value("bool") == "FALSE"
    assert fetch_default_value("int") == "0"
    assert fetch_default_value("string") == ""
    assert fetch_default_value("ActorType") == ""


def test_primitive_exists():
    assert primitive_exists("int32")
    assert primitive_exists("double")
    assert not primitive_exists("ActorType")


def test_table_keys_match_input_names():
    assert all(name == ft.input_field_name for name, ft in FIELD_TYPE_BY_TYPE.items())


@pytest.mark.parametrize("word", ["是", "yes", "YES", "1", "true", "TRUE", "True"])
def test_parse_bool_true(word):
    assert parse_bool(word) is True


@pytest.mark.parametrize("word", ["否", "no", "NO", "0", "false", "FALSE", "False", ""])
def test_parse_bool_false(word):
    assert parse_bool(word) is False


@pytest.mark.parametrize("word", ["maybe", "2", "tRuE"])
def test_parse_bool_invalid(word):
    with pytest.raises(ValueError):
        parse_bool(word)