"""Table files and sheets: CSV files, in-memory files and file loading."""

from __future__ import annotations

import csv
import io
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Protocol, Union

from tabkit.report import report_error


class TableSheet(Protocol):
    """A sheet whose cells can be read by row and column."""

    @property
    def name(self) -> str: ...

    def get_value(self, row: int, col: int, value_as_float: bool = False) -> str: ...

    def max_column(self) -> int: ...

    def write_row(self, *values: str) -> None: ...

    def is_row_empty(self, row: int, max_col: int = -1) -> bool: ...


class TableFile(Protocol):
    """A file holding one or more sheets."""

    def load(self, filename: str) -> None: ...

    def save(self, filename: str, encoding: str = "utf-8") -> None: ...

    def sheets(self) -> list[TableSheet]: ...


def read_sheet_row(sheet: TableSheet, row: int) -> list[str]:
    """All values of a row up to the sheet's widest column."""
    return [sheet.get_value(row, col) for col in range(sheet.max_column())]


class CSVFile:
    """A CSV file with a single sheet."""

    def __init__(self) -> None:
        self.name = ""
        self.records: list[list[str]] = []
        self.sheet = CSVSheet(self)

    def sheets(self) -> list["CSVSheet"]:
        return [self.sheet]

    def max_col(self) -> int:
        return len(self.records[0]) if self.records else 0

    def save(self, filename: str, encoding: str = "utf-8") -> None:
        with open(filename, "w", encoding=encoding, newline="") as fh:
            csv.writer(fh, lineterminator="\n").writerows(self.records)

    def load(self, filename: str) -> None:
        """Read the file; text that is not UTF-8 is decoded as GBK."""
        data = Path(filename).read_bytes()
        self.name = os.path.splitext(filename)[0]
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError:
            text = data.decode("gbk")
        records: list[list[str]] = []
        for record in csv.reader(io.StringIO(text, newline="")):
            if not record:
                continue
            if records and len(record) != len(records[0]):
                raise ValueError(
                    f"{filename}: record {len(records) + 1}: wrong number of fields"
                )
            records.append(record)
        self.records = records


class CSVSheet:
    """The sheet of a CSV file."""

    def __init__(self, file: CSVFile) -> None:
        self.file = file

    @property
    def name(self) -> str:
        return self.file.name

    def max_column(self) -> int:
        return self.file.max_col()

    def is_row_empty(self, row: int, max_col: int = -1) -> bool:
        if max_col == -1:
            max_col = self.file.max_col()
        return all(self.get_value(row, col) == "" for col in range(max_col))

    def get_value(self, row: int, col: int, value_as_float: bool = False) -> str:
        records = self.file.records
        if row >= len(records) or col >= len(records[row]):
            return ""
        return records[row][col]

    def set_value(self, row: int, col: int, value: str) -> bool:
        records = self.file.records
        if row >= len(records) or col >= len(records[row]):
            return False
        records[row][col] = value
        return True

    def write_row(self, *values: str) -> None:
        self.file.records.append(list(values))


@dataclass
class MemFileData:
    """A file kept in memory under a name."""

    file: TableFile
    file_name: str
    table_name: str = ""


class MemFile:
    """Files held in memory by name."""

    def __init__(self) -> None:
        self._data: dict[str, MemFileData] = {}

    def tables(self) -> Iterator[MemFileData]:
        return iter(list(self._data.values()))

    def add_file(self, filename: str, file: TableFile) -> MemFileData:
        entry = MemFileData(file=file, file_name=filename)
        self._data[filename] = entry
        return entry

    def create_csv_file(self, filename: str) -> CSVSheet:
        file = CSVFile()
        self.add_file(filename, file)
        return file.sheet

    def get_file(self, filename: str) -> TableFile:
        try:
            return self._data[filename].file
        except KeyError:
            raise FileNotFoundError("file not found: " + filename) from None


def _load_file_by_ext(filename: str, cache_dir: str) -> TableFile:
    if os.path.splitext(filename)[1] == ".csv":
        file = CSVFile()
        file.load(filename)
        return file
    report_error("UnknownInputFileExtension", filename)
    raise AssertionError("unreachable")


def _load_or_error(filename: str, cache_dir: str) -> Union[TableFile, Exception]:
    try:
        return _load_file_by_ext(filename, cache_dir)
    except Exception as exc:  # kept and raised again by get_file
        return exc


class FileLoader:
    """Loads table files by extension, either on demand or all at once in parallel."""

    def __init__(self, sync_load: bool = True, cache_dir: str = "") -> None:
        self.sync_load = sync_load
        self.cache_dir = cache_dir
        self._files: dict[str, Union[TableFile, Exception]] = {}
        self._pending: list[str] = []

    def add_file(self, filename: str) -> None:
        self._pending.append(filename)

    def commit(self) -> None:
        """Load every added file in parallel."""
        pending = list(self._pending)
        with ThreadPoolExecutor() as pool:
            results = list(pool.map(lambda n: _load_or_error(n, self.cache_dir), pending))
        self._files.update(zip(pending, results))
        self._pending.clear()

    def get_file(self, filename: str) -> TableFile:
        if self.sync_load:
            return _load_file_by_ext(filename, self.cache_dir)
        if filename not in self._files:
            raise FileNotFoundError("not found")
        result = self._files[filename]
        if isinstance(result, Exception):
            raise result
        return result


def write_index_table_header(sheet: TableSheet) -> None:
    sheet.write_row("模式", "表类型", "表文件名")


def write_type_table_header(sheet: TableSheet) -> None:
    sheet.write_row("种类", "对象类型", "标识名", "字段名", "字段类型", "数组切割", "值", "索引")


def write_row_values(sheet: TableSheet, *args: str) -> None:
    sheet.write_row(*args)


def convert_to_csv(input_file: TableFile) -> CSVFile:
    """Copy the first sheet of a file into a new CSV file, up to the first empty row."""
    out = CSVFile()
    in_sheet = input_file.sheets()[0]
    row = 0
    while not in_sheet.is_row_empty(row, -1):
        out.sheet.write_row(*read_sheet_row(in_sheet, row))
        row += 1
    return out


def write_file(filename: str, data: Union[bytes, str]) -> None:
    """Write data to a file, creating its directory first."""
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)
    if isinstance(data, str):
        data = data.encode("utf-8")
    Path(filename).write_bytes(data)


__all__: Optional[list[str]] = None