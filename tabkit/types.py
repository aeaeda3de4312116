"""Type definitions, index definitions and the type table."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Optional


class TypeUsage(IntEnum):
    """What a type-table row defines."""

    NONE = 0
    HEADER_STRUCT = 1
    ENUM = 2

    def __str__(self) -> str:
        return {TypeUsage.HEADER_STRUCT: "表头", TypeUsage.ENUM: "枚举"}.get(self, "未知")


class TableKind(IntEnum):
    """Kind of a table listed in the index table."""

    NONE = 0
    TYPE = 1
    DATA = 2
    KEY_VALUE = 3


def _tb(name: str) -> dict[str, str]:
    return {"tb_name": name}


@dataclass
class TypeDefine:
    """One field of an object type or one value of an enum."""

    kind: TypeUsage = field(default=TypeUsage.NONE, metadata=_tb("种类"))
    object_type: str = field(default="", metadata=_tb("对象类型"))
    name: str = field(default="", metadata=_tb("标识名"))
    field_name: str = field(default="", metadata=_tb("字段名"))
    field_type: str = field(default="", metadata=_tb("字段类型"))
    value: str = field(default="", metadata=_tb("值"))
    array_splitter: str = field(default="", metadata=_tb("数组切割"))
    make_index: bool = field(default=False, metadata=_tb("索引"))
    tags: list[str] = field(default_factory=list, metadata=_tb("标记"))
    is_builtin: bool = False

    def contain_tag(self, tag: str) -> bool:
        return tag in self.tags

    def is_array(self) -> bool:
        return self.array_splitter != ""

    def to_dict(self) -> dict[str, Any]:
        """Mapping with the exported key names; empty optional values are left out."""
        out: dict[str, Any] = {
            "Kind": int(self.kind),
            "ObjectType": self.object_type,
            "Name": self.name,
            "FieldName": self.field_name,
            "FieldType": self.field_type,
        }
        if self.value:
            out["Value"] = self.value
        if self.array_splitter:
            out["ArraySplitter"] = self.array_splitter
        if self.make_index:
            out["MakeIndex"] = True
        if self.tags:
            out["Tags"] = list(self.tags)
        if self.is_builtin:
            out["IsBuiltin"] = True
        return out


@dataclass
class IndexDefine:
    """One row of the index table."""

    kind: TableKind = field(default=TableKind.NONE, metadata=_tb("模式"))
    table_type: str = field(default="", metadata=_tb("表类型"))
    table_file_name: str = field(default="", metadata=_tb("表文件名"))
    tags: list[str] = field(default_factory=list, metadata=_tb("标记"))

    def contain_tag(self, tag: str) -> bool:
        return tag in self.tags


@dataclass
class TypeData:
    """A type definition together with where it came from."""

    define: TypeDefine
    tab: Optional[Any] = None
    row: int = 0


def _distinct(items) -> list:
    return list(dict.fromkeys(items))


class TypeTable:
    """All known object types, their fields and enum values."""

    def __init__(self, show_builtin: bool = False) -> None:
        self._fields: list[TypeData] = []
        self.show_builtin = show_builtin

    def to_json(self) -> str:
        return json.dumps(
            [tf.to_dict() for tf in self.all_fields()], indent="\t", ensure_ascii=False
        )

    def add_field(self, tf: TypeDefine, data: Optional[Any] = None, row: int = 0) -> None:
        if self.field_by_name(tf.object_type, tf.field_name) is not None:
            raise ValueError("Duplicate table field: " + tf.field_name)
        self._fields.append(TypeData(define=tf, tab=data, row=row))

    def raw(self) -> list[TypeData]:
        return list(self._fields)

    def all_fields(self) -> list[TypeDefine]:
        """User-defined fields, builtins excluded."""
        return [td.define for td in self._fields if not td.define.is_builtin]

    def is_enum_kind(self, object_type: str) -> bool:
        return any(
            td.define.kind == TypeUsage.ENUM and td.define.object_type == object_type
            for td in self._fields
        )

    def _enum_fields(self, object_type: str) -> list[TypeData]:
        return [td for td in self._fields if td.define.object_type == object_type]

    def resolve_enum(self, object_type: str, value: str) -> Optional[TypeData]:
        """Find the enum entry for a value, falling back to the first entry."""
        found = self.get_enum_value(object_type, value)
        if found is not None:
            return found
        fields = self._enum_fields(object_type)
        return fields[0] if fields else None

    def get_enum_value(self, object_type: str, value: str) -> Optional[TypeData]:
        return next(
            (
                td
                for td in self._enum_fields(object_type)
                if td.define.name == value or td.define.field_name == value
            ),
            None,
        )

    def resolve_enum_value(self, object_type: str, value: str) -> str:
        td = self.resolve_enum(object_type, value)
        return td.define.value if td is not None else ""

    def _names_of_kind(self, kind: TypeUsage) -> list[str]:
        return _distinct(
            td.define.object_type
            for td in self._fields
            if (self.show_builtin or not td.define.is_builtin) and td.define.kind == kind
        )

    def enum_names(self) -> list[str]:
        return self._names_of_kind(TypeUsage.ENUM)

    def struct_names(self) -> list[str]:
        return self._names_of_kind(TypeUsage.HEADER_STRUCT)

    def all_field_by_name(self, object_type: str) -> list[TypeDefine]:
        return [td.define for td in self._fields if td.define.object_type == object_type]

    def field_by_name(self, object_type: str, name: str) -> Optional[TypeDefine]:
        """The last field of the object whose name or field name matches."""
        found = None
        for td in self._fields:
            tf = td.define
            if tf.object_type == object_type and (tf.name == name or tf.field_name == name):
                found = tf
        return found

    def object_exists(self, object_type: str) -> bool:
        return any(td.define.object_type == object_type for td in self._fields)


_H = TypeUsage.HEADER_STRUCT
_E = TypeUsage.ENUM

_BUILTIN_ROWS = (
    (_E, "TypeUsage", "", "None", "int", "0", ""),
    (_E, "TypeUsage", "表头", "HeaderStruct", "int", "1", ""),
    (_E, "TypeUsage", "枚举", "Enum", "int", "2", ""),
    (_H, "TypeDefine", "种类", "Kind", "TypeUsage", "", ""),
    (_H, "TypeDefine", "对象类型", "ObjectType", "string", "", ""),
    (_H, "TypeDefine", "标识名", "Name", "string", "", ""),
    (_H, "TypeDefine", "字段名", "FieldName", "string", "", ""),
    (_H, "TypeDefine", "字段类型", "FieldType", "string", "", ""),
    (_H, "TypeDefine", "值", "Value", "string", "", ""),
    (_H, "TypeDefine", "数组切割", "ArraySplitter", "string", "", ""),
    (_H, "TypeDefine", "索引", "MakeIndex", "bool", "", ""),
    (_H, "TypeDefine", "标记", "Tags", "string", "", "|"),
    (_E, "TableKind", "", "None", "int", "0", ""),
    (_E, "TableKind", "类型表", "Type", "int", "1", ""),
    (_E, "TableKind", "数据表", "Data", "int", "2", ""),
    (_E, "TableKind", "键值表", "KeyValue", "int", "3", ""),
    (_H, "IndexDefine", "模式", "TableKind", "TableKind", "", ""),
    (_H, "IndexDefine", "表类型", "TableType", "string", "", ""),
    (_H, "IndexDefine", "表文件名", "TableFileName", "string", "", ""),
    (_H, "IndexDefine", "标记", "Tags", "string", "", "|"),
    (_H, "KVDefine", "字段名", "FieldName", "string", "", ""),
    (_H, "KVDefine", "字段类型", "FieldType", "string", "", ""),
    (_H, "KVDefine", "标识名", "Name", "string", "", ""),
    (_H, "KVDefine", "值", "Value", "string", "", ""),
    (_H, "KVDefine", "数组切割", "ArraySplitter", "string", "", ""),
    (_H, "KVDefine", "标记", "Tags", "string", "", "|"),
)


def init_builtin_types(type_tab: TypeTable) -> None:
    """Register the types that describe the type, index and key-value tables."""
    for kind, obj, name, field_name, field_type, value, splitter in _BUILTIN_ROWS:
        type_tab.add_field(
            TypeDefine(
                kind=kind,
                object_type=obj,
                name=name,
                field_name=field_name,
                field_type=field_type,
                value=value,
                array_splitter=splitter,
                is_builtin=True,
            )
        )