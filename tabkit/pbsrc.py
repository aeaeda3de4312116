"""Protobuf schema output of the user-defined types."""

from __future__ import annotations

import jinja2

from tabkit.fieldtype import language_primitive
from tabkit.globals import Globals
from tabkit.jsondata import TOOL_NAME
from tabkit.types import TypeDefine

_TEMPLATE = """\
// Generated by {{ tool }}
// DO NOT EDIT!!
// Version: {{ g.version }}
syntax = "proto3";
package {{ g.package_name }};

{% for name in g.types.enum_names() %}
enum {{ name }}
{
{% for f in g.types.all_field_by_name(name) %}
	{{ f.field_name }} = {{ f.value }}; // {{ f.name }}
{% endfor %}
}

{% endfor %}
{% for name in g.types.struct_names() %}
message {{ name }}
{
{% for f in g.types.all_field_by_name(name) %}
	{{ pb_type(f) }} {{ f.field_name }} = {{ loop.index }}; // {{ f.name }}
{% endfor %}
}

{% endfor %}
// Combine struct
message {{ g.combine_struct_name }}
{
{% for tab in g.datas.all_tables() %}
	repeated {{ tab.header_type }} {{ tab.header_type }} = {{ loop.index }}; // table: {{ tab.header_type }}
{% endfor %}
}
"""

_ENV = jinja2.Environment(
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    undefined=jinja2.StrictUndefined,
)


def pb_type(tf: TypeDefine) -> str:
    """The protobuf type of a field, repeated for arrays."""
    converted = language_primitive(tf.field_type, "pb")
    return "repeated " + converted if tf.is_array() else converted


def generate(globals: Globals) -> bytes:
    """A proto3 schema with the enums, structs and the combining message."""
    text = _ENV.from_string(_TEMPLATE).render(tool=TOOL_NAME, g=globals, pb_type=pb_type)
    return text.encode("utf-8")