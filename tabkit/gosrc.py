"""Go source output of the user-defined types and the combining table struct."""

from __future__ import annotations

import jinja2

from tabkit.fieldtype import language_primitive
from tabkit.genshare import get_indices, get_indices_by_table, key_value_type_names
from tabkit.globals import Globals
from tabkit.jsondata import TOOL_NAME
from tabkit.types import TypeDefine

_TEMPLATE = """\
// Generated by {{ tool }}
// DO NOT EDIT!!
// Version: {{ g.version }}
package {{ g.package_name }}

import "errors"

type {{ c }}EnumValue struct {
	Name  string
	Index int32
}
{% for name in g.types.enum_names() %}

type {{ name }} int32

const (
{% for f in g.types.all_field_by_name(name) %}
	{{ name }}_{{ f.field_name }} = {{ f.value }} // {{ f.name }}
{% endfor %}
)

var (
	{{ name }}EnumValues = []{{ c }}EnumValue{
{% for f in g.types.all_field_by_name(name) %}
		{Name: "{{ f.field_name }}", Index: {{ f.value }}}, // {{ f.name }}
{% endfor %}
	}
	{{ name }}MapperValueByName = map[string]int32{}
	{{ name }}MapperNameByValue = map[int32]string{}
)

func (self {{ name }}) String() string {
	name, _ := {{ name }}MapperNameByValue[int32(self)]
	return name
}
{% endfor %}
{% for name in g.types.struct_names() %}

type {{ name }} struct {
{% for f in g.types.all_field_by_name(name) %}
	{{ (f.field_name ~ " " ~ go_type(f) ~ " " ~ go_tab_tag(f)) | trim }}
{% endfor %}
}
{% endfor %}

// Combine struct
type {{ c }} struct {
{% for tab in g.datas.all_tables() %}
	{{ tab.header_type }} []*{{ tab.header_type }} // table: {{ tab.header_type }}
{% endfor %}

	// Indices
{% for idx in indices %}
	{{ idx.table.header_type }}By{{ idx.field_info.field_name }} map[{{ go_type(idx.field_info) }}]*{{ idx.table.header_type }} `json:"-"` // table: {{ idx.table.header_type }}
{% endfor %}

	// Handlers
	postHandlers []func(*{{ c }}) error `json:"-"`
	preHandlers  []func(*{{ c }}) error `json:"-"`

	indexHandler map[string]func() `json:"-"`
	resetHandler map[string]func() `json:"-"`
}
{% for name in kv_names %}

// table: {{ name }}
func (self *{{ c }}) GetKeyValue_{{ name }}() *{{ name }} {
	return self.{{ name }}[0]
}
{% endfor %}

// RegisterPostEntry registers a handler called after loading.
func (self *{{ c }}) RegisterPostEntry(h func(*{{ c }}) error) {
	if h == nil {
		panic("empty postload handler")
	}

	self.postHandlers = append(self.postHandlers, h)
}

// RegisterPreEntry registers a handler called before loading.
func (self *{{ c }}) RegisterPreEntry(h func(*{{ c }}) error) {
	if h == nil {
		panic("empty preload handler")
	}

	self.preHandlers = append(self.preHandlers, h)
}

// ResetData clears all data and indices.
func (self *{{ c }}) ResetData() error {
	err := self.InvokePreHandler()
	if err != nil {
		return err
	}

	return self.ResetTable("")
}

// BuildData builds all indices and calls the post handlers.
func (self *{{ c }}) BuildData() error {
	err := self.IndexTable("")
	if err != nil {
		return err
	}

	return self.InvokePostHandler()
}

// InvokePreHandler calls the handlers registered for before loading.
func (self *{{ c }}) InvokePreHandler() error {
	for _, h := range self.preHandlers {
		if err := h(self); err != nil {
			return err
		}
	}

	return nil
}

// InvokePostHandler calls the handlers registered for after loading.
func (self *{{ c }}) InvokePostHandler() error {
	for _, h := range self.postHandlers {
		if err := h(self); err != nil {
			return err
		}
	}

	return nil
}

// IndexTable builds the indices of one table, or of all tables when the name is empty.
func (self *{{ c }}) IndexTable(tableName string) error {
	if tableName == "" {
		for _, h := range self.indexHandler {
			h()
		}
		return nil
	}

	if h, ok := self.indexHandler[tableName]; ok {
		h()
	}

	return nil
}

// ResetTable clears one table, or all tables when the name is empty.
func (self *{{ c }}) ResetTable(tableName string) error {
	if tableName == "" {
		for _, h := range self.resetHandler {
			h()
		}
		return nil
	}

	if h, ok := self.resetHandler[tableName]; ok {
		h()
		return nil
	}

	return errors.New("reset table failed, table not found: " + tableName)
}

// New{{ c }} creates an empty table set.
func New{{ c }}() *{{ c }} {
	self := &{{ c }}{
		indexHandler: make(map[string]func()),
		resetHandler: make(map[string]func()),
	}
{% for tab in g.datas.all_tables() %}

	self.indexHandler["{{ tab.header_type }}"] = func() {
{% for idx in indices_by_table(tab) %}
		for _, v := range self.{{ idx.table.header_type }} {
			self.{{ idx.table.header_type }}By{{ idx.field_info.field_name }}[v.{{ idx.field_info.field_name }}] = v
		}
{% endfor %}
	}
{% endfor %}
{% for tab in g.datas.all_tables() %}

	self.resetHandler["{{ tab.header_type }}"] = func() {
		self.{{ tab.header_type }} = nil
{% for idx in indices_by_table(tab) %}
		self.{{ idx.table.header_type }}By{{ idx.field_info.field_name }} = map[{{ go_type(idx.field_info) }}]*{{ idx.table.header_type }}{}
{% endfor %}
	}
{% endfor %}

	self.ResetData()

	return self
}

func init() {
{% for name in g.types.enum_names() %}
	for _, v := range {{ name }}EnumValues {
		{{ name }}MapperValueByName[v.Name] = v.Index
		{{ name }}MapperNameByValue[v.Index] = v.Name
	}
{% endfor %}
}
"""

_ENV = jinja2.Environment(
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    undefined=jinja2.StrictUndefined,
)


def go_type(tf: TypeDefine) -> str:
    """The Go type of a field, a slice for arrays."""
    converted = language_primitive(tf.field_type, "go")
    return "[]" + converted if tf.is_array() else converted


def go_tab_tag(field_type: TypeDefine) -> str:
    """The struct tag naming the column, or empty when the field has no name."""
    if not field_type.name:
        return ""
    return f'`tb_name:"{field_type.name}"`'


def generate(globals: Globals) -> bytes:
    """Go source with the enums, structs and the combining table struct."""
    text = _ENV.from_string(_TEMPLATE).render(
        tool=TOOL_NAME,
        g=globals,
        c=globals.combine_struct_name,
        indices=get_indices(globals),
        indices_by_table=get_indices_by_table,
        kv_names=key_value_type_names(globals),
        go_type=go_type,
        go_tab_tag=go_tab_tag,
    )
    return text.encode("utf-8")