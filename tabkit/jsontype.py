"""JSON description of the user-defined types."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

from tabkit.globals import Globals
from tabkit.jsondata import TOOL_NAME
from tabkit.types import TypeUsage

_INT_RE = re.compile(r"[+-]?[0-9]+")

_KIND_NAMES = {
    TypeUsage.HEADER_STRUCT: "Struct",
    TypeUsage.ENUM: "Enum",
}


@dataclass
class Field:
    """A field of a struct or a value of an enum."""

    name: str
    type_name: str
    comment: str = ""
    value: str = ""
    make_index: bool = False
    array_splitter: str = ""
    tags: list[str] = field(default_factory=list)

    def enum_value(self) -> int:
        """The value as an integer, 0 if it is not one."""
        return int(self.value) if _INT_RE.fullmatch(self.value) else 0

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "Name": self.name,
            "Type": self.type_name,
            "Comment": self.comment,
        }
        if self.value:
            out["Value"] = self.value
        if self.make_index:
            out["MakeIndex"] = True
        if self.array_splitter:
            out["ArraySplitter"] = self.array_splitter
        if self.tags:
            out["Tags"] = list(self.tags)
        return out


@dataclass
class Object:
    """A struct or an enum with its fields."""

    name: str
    kind: str = ""
    tags: list[str] = field(default_factory=list)
    fields: list[Field] = field(default_factory=list)

    def sort_key(self) -> tuple[str, str]:
        return (self.kind, self.name)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"Name": self.name, "Type": self.kind}
        if self.tags:
            out["Tags"] = list(self.tags)
        out["Fields"] = [f.to_dict() for f in self.fields]
        return out


def generate(globals: Globals) -> bytes:
    """Describe every user-defined type as JSON, ordered by kind and name."""
    objects: dict[str, Object] = {}
    for define in globals.types.all_fields():
        obj = objects.get(define.object_type)
        if obj is None:
            obj = Object(name=define.object_type, kind=_KIND_NAMES.get(define.kind, ""))
            for index_def in globals.index_list:
                if index_def.table_type == define.object_type:
                    obj.tags.extend(index_def.tags)
            objects[define.object_type] = obj
        obj.fields.append(
            Field(
                name=define.field_name,
                type_name=define.field_type,
                comment=define.name,
                value=define.value,
                make_index=define.make_index,
                array_splitter=define.array_splitter,
                tags=list(define.tags),
            )
        )

    ordered = sorted(objects.values(), key=Object.sort_key)
    document = {
        "@Tool": TOOL_NAME,
        "@Version": globals.version,
        "Objects": [obj.to_dict() for obj in ordered] or None,
    }
    return json.dumps(document, indent="\t", ensure_ascii=False).encode("utf-8")