"""Compilation state and tag-driven actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from tabkit.table import DataTableList, HeaderField
from tabkit.types import IndexDefine, TypeDefine, TypeTable

ACTION_NO_GEN_FIELD_JSON = "nogenfield_json"
ACTION_NO_GEN_FIELD_JSON_DIR = "nogenfield_jsondir"
ACTION_NO_GEN_FIELD_BINARY = "nogenfield_binary"
ACTION_NO_GEN_FIELD_PB_BINARY = "nogenfield_pbbin"
ACTION_NO_GEN_FIELD_LUA = "nogenfield_lua"
ACTION_NO_GEN_FIELD_CSHARP = "nogenfield_csharp"
ACTION_NO_GEN_TABLE = "nogentab"


@dataclass
class TagAction:
    """An action applied to everything that carries one of the tags."""

    verb: str
    tags: list[str] = field(default_factory=list)


def parse_tag_action(script: str) -> list[TagAction]:
    """Parse 'action1:tag1+tag2|action2:tag3'; raise ValueError on bad format."""
    actions = []
    for part in script.split("|"):
        pair = part.split(":")
        if len(pair) != 2:
            raise ValueError("invalid action format")
        actions.append(TagAction(verb=pair[0], tags=pair[1].split("+")))
    return actions


@dataclass
class Globals:
    """Settings and results shared by the whole compilation."""

    version: str = ""
    index_file: str = ""
    package_name: str = ""
    combine_struct_name: str = ""
    index_getter: Optional[Any] = None
    table_getter: Optional[Any] = None
    index_list: list[IndexDefine] = field(default_factory=list)
    types: TypeTable = field(default_factory=TypeTable)
    datas: DataTableList = field(default_factory=DataTableList)
    gen_binary: bool = False
    tag_actions: list[TagAction] = field(default_factory=list)
    para_loading: bool = False
    cache_dir: str = ""

    def can_do_action(self, action: str, obj: object) -> bool:
        """Whether an action applies to a header, type or index entry by its tags."""
        if isinstance(obj, HeaderField):
            target = obj.type_info
        elif isinstance(obj, (TypeDefine, IndexDefine)):
            target = obj
        else:
            return False
        if target is None:
            return False
        return any(
            target.contain_tag(tag)
            for ta in self.tag_actions
            if ta.verb == action
            for tag in ta.tags
        )