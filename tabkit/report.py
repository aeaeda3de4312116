"""Table errors with identifiers and Chinese descriptions."""

from __future__ import annotations

import logging

log = logging.getLogger("tabkit")

ERROR_BY_ID: dict[str, str] = {
    "HeaderNotMatchFieldName": "表头与字段不匹配",
    "HeaderFieldNotDefined": "表头字段未定义",
    "DuplicateHeaderField": "表头字段重复",
    "DuplicateKVField": "键值表字段重复",
    "UnknownFieldType": "未知字段类型",
    "DuplicateTypeFieldName": "类型表字段重复",
    "EnumValueEmpty": "枚举值空",
    "DuplicateEnumValue": "枚举值重复",
    "UnknownEnumValue": "未知的枚举值",
    "InvalidTypeTable": "非法的类型表",
    "HeaderTypeNotFound": "表头类型找不到",
    "DuplicateValueInMakingIndex": "创建索引时发现重复值",
    "UnknownInputFileExtension": "未知的输入文件扩展名",
    "DataMissMatchTypeDefine": "数据与定义类型不匹配",
    "ArrayMultiColumnDefineNotMatch": "数组类型多列跨表定义不一致",
    "InvalidFieldName": "非法字段名",
    "UnknownTypeKind": "非法的类型种类",
}


def error_description(id: str) -> str:
    """Return the description for an error id, or an empty string."""
    return ERROR_BY_ID.get(id, "")


def _format_context(value: object) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_format_context(v) for v in value) + "]"
    return str(value)


class TableError(Exception):
    """An error found in the input tables."""

    def __init__(self, id: str, *context: object) -> None:
        self.id = id
        self.context = context
        super().__init__(self._message())

    def _message(self) -> str:
        details = " ".join(_format_context(c) for c in self.context)
        return f"TableError.{self.id} {error_description(self.id)} | {details}"

    def __str__(self) -> str:
        return self._message()


def report_error(id: str, *args: object) -> None:
    """Raise a TableError with the given id and context."""
    raise TableError(id, *args)