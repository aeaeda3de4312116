"""Lua source output of the merged data tables and enums."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import jinja2

from tabkit.genshare import get_indices, get_indices_by_table, wrap_single_value
from tabkit.globals import ACTION_NO_GEN_FIELD_LUA, Globals
from tabkit.jsondata import TOOL_NAME
from tabkit.table import Cell, DataTable
from tabkit.types import TypeDefine

_ROWS_BLOCK = """\
{% for tab in tables %}
		g.{{ tab.name }} = {
{% for row in tab.rows %}
			{{ row }},
{% endfor %}
		}
{% endfor %}
{% for idx in indices %}
		-- {{ idx.table.header_type }}
		g.{{ idx.table.header_type }}By{{ idx.field_info.field_name }} = {}
		for _, rec in pairs(g.{{ idx.table.header_type }}) do
			g.{{ idx.table.header_type }}By{{ idx.field_info.field_name }}[rec.{{ idx.field_info.field_name }}] = rec
		end
{% endfor %}
"""

_ENUMS_BLOCK = """\
{% for enum in enums %}
		---@enum {{ package }}.{{ enum.name }}
		g.{{ enum.name }} = {
{% for f in enum.fields %}
			{{ f.field_name }} = {{ f.value }}, -- {{ f.name }}
{% endfor %}
{% for f in enum.fields %}
			[{{ f.value }}] = "{{ f.field_name }}", -- {{ f.name }}
{% endfor %}
		}
{% endfor %}
"""

_HEAD = """\
-- Generated by {{ tool }}
-- Version: {{ version }}

return {
	init = function( g )
"""

_TAIL = """\
		return g
	end
}
"""

_TEMPLATE_SRC = _HEAD + _ROWS_BLOCK + _ENUMS_BLOCK + _TAIL
_TEMPLATE_DIR = _HEAD + _ROWS_BLOCK + _TAIL
_TEMPLATE_TYPE = _HEAD + _ENUMS_BLOCK + _TAIL

_ENV = jinja2.Environment(
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    undefined=jinja2.StrictUndefined,
)


def wrap_value(globals: Globals, cell: Optional[Cell], value_type: TypeDefine) -> str:
    """The Lua literal of a cell; arrays become tables, a missing cell its default."""
    if value_type.is_array():
        values = cell.value_list if cell is not None else []
        return "{" + ",".join(wrap_single_value(globals, value_type, v) for v in values) + "}"
    value = cell.value if cell is not None else ""
    return wrap_single_value(globals, value_type, value)


def _row_literal(
    globals: Globals, tab: DataTable, headers: list[TypeDefine], row: int
) -> str:
    parts = "".join(
        f"{header.field_name} = {wrap_value(globals, tab.get_cell(row, col), header)}, "
        for col, header in enumerate(headers)
        if header is not None and not globals.can_do_action(ACTION_NO_GEN_FIELD_LUA, header)
    )
    return "{ " + parts + "}"


def _table_context(globals: Globals, tab: DataTable) -> dict:
    headers = globals.types.all_field_by_name(tab.original_header_type)
    return {
        "name": tab.header_type,
        "rows": [_row_literal(globals, tab, headers, row) for row in tab.data_row_index()],
    }


def _enum_context(globals: Globals) -> list[dict]:
    return [
        {"name": name, "fields": globals.types.all_field_by_name(name)}
        for name in globals.types.enum_names()
    ]


def _render(source: str, **context) -> bytes:
    return _ENV.from_string(source).render(tool=TOOL_NAME, **context).encode("utf-8")


def generate(globals: Globals) -> bytes:
    """One Lua module holding every table, its indices and the enums."""
    return _render(
        _TEMPLATE_SRC,
        version=globals.version,
        package=globals.package_name,
        tables=[_table_context(globals, tab) for tab in globals.datas.all_tables()],
        indices=get_indices(globals),
        enums=_enum_context(globals),
    )


def output(globals: Globals, param: str) -> None:
    """Write the enums and one Lua module per table into the directory param."""
    directory = Path(param)
    type_data = _render(
        _TEMPLATE_TYPE,
        version=globals.version,
        package=globals.package_name,
        enums=_enum_context(globals),
    )
    (directory / f"_{globals.combine_struct_name}Type.lua").write_bytes(type_data)

    for tab in globals.datas.all_tables():
        data = _render(
            _TEMPLATE_DIR,
            version=globals.version,
            tables=[_table_context(globals, tab)],
            indices=get_indices_by_table(tab),
        )
        (directory / f"{tab.header_type}.lua").write_bytes(data)