"""Cells, rows, headers and data tables as read from input sheets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

from tabkit.types import TypeDefine


def _column_letters(col: int) -> str:
    """Spreadsheet letters for a 1-based column number."""
    letters = ""
    while col > 0:
        col, rem = divmod(col - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def a1_name(row: int, col: int) -> str:
    """A1-style name of a cell given its 0-based row and column."""
    return f"{_column_letters(col + 1)}{row + 1}"


@dataclass(eq=False)
class Cell:
    """One cell of a data table."""

    value: str = ""
    value_list: list[str] = field(default_factory=list)
    row: int = 0
    col: int = 0
    table: Optional["DataTable"] = field(default=None, repr=False)

    def copy_from(self, other: "Cell") -> None:
        """Copy value and position from another cell; the value list is kept."""
        self.value = other.value
        self.row = other.row
        self.col = other.col
        self.table = other.table

    def __str__(self) -> str:
        file_name = self.table.file_name if self.table is not None else ""
        sheet_name = self.table.sheet_name if self.table is not None else ""
        if self.value_list:
            value = "[" + " ".join(self.value_list) + "]"
        else:
            value = self.value
        return f"'{value}' @{file_name}|{sheet_name}({a1_name(self.row, self.col)})"


class DataRow:
    """A row of cells belonging to a table."""

    def __init__(self, row: int, tab: Optional["DataTable"]) -> None:
        self.row = row
        self.tab = tab
        self.cells: list[Cell] = []

    def add_cell(self) -> Cell:
        cell = Cell(col=len(self.cells), row=self.row, table=self.tab)
        self.cells.append(cell)
        return cell

    def is_empty(self) -> bool:
        return not self.cells


@dataclass(eq=False)
class HeaderField:
    """A header cell and the type it resolved to."""

    cell: Cell = field(default_factory=Cell)
    type_info: Optional[TypeDefine] = None

    def __str__(self) -> str:
        parts = []
        if self.cell is not None:
            parts.append("Cell: " + str(self.cell))
        if self.type_info is not None:
            parts.append("TypeInfo: " + repr(self.type_info))
        return "".join(parts)


class DataTable:
    """All data of one sheet; row 0 holds the header."""

    def __init__(self) -> None:
        self.header_type = ""
        self.original_header_type = ""
        self.file_name = ""
        self.sheet_name = ""
        self.rows: list[DataRow] = []
        self.headers: list[HeaderField] = []

    def array_field_count(self, field: HeaderField) -> int:
        """Number of columns holding the same array field."""
        name = field.type_info.field_name
        return sum(
            1
            for hf in self.headers
            if hf.type_info is not None and hf.type_info.field_name == name
        )

    def data_row_index(self) -> list[int]:
        """Indices of the data rows, the header row excluded."""
        return list(range(1, len(self.rows)))

    def __str__(self) -> str:
        lines = [
            "====DataTable====",
            f"HeaderType: {self.header_type}",
            f"OriginalHeaderType: {self.original_header_type}",
            f"FileName: {self.file_name}",
            f"SheetName: {self.sheet_name}",
        ]
        for index, row in enumerate(self.rows):
            lines.append(f"{index} " + "/".join(cell.value for cell in row.cells))
        return "\n".join(lines) + "\n"

    def must_get_header(self, col: int) -> HeaderField:
        while len(self.headers) <= col:
            self.headers.append(HeaderField(cell=Cell(col=len(self.headers))))
        return self.headers[col]

    def header_by_column(self, col: int) -> Optional[HeaderField]:
        if col >= len(self.headers):
            return None
        return self.headers[col]

    def header_by_name(self, name: str) -> Optional[HeaderField]:
        for header in self.headers:
            info = header.type_info
            if info is None:
                continue
            if info.name == name or info.field_name == name:
                return header
        return None

    def add_row(self) -> int:
        row = len(self.rows)
        self.rows.append(DataRow(row, self))
        return row

    def add_cell(self, row: int) -> Optional[Cell]:
        if row >= len(self.rows):
            return None
        return self.rows[row].add_cell()

    def must_get_cell(self, row: int, col: int) -> Cell:
        while len(self.rows) <= row:
            self.add_row()
        data_row = self.rows[row]
        while len(data_row.cells) <= col:
            data_row.add_cell()
        return data_row.cells[col]

    def get_cell(self, row: int, col: int) -> Optional[Cell]:
        if row >= len(self.rows):
            return None
        cells = self.rows[row].cells
        if col >= len(cells):
            return None
        return cells[col]

    def get_value_by_name(self, row: int, name: str) -> Optional[Cell]:
        header = self.header_by_name(name)
        if header is None:
            return None
        return self.get_cell(row, header.cell.col)


class DataTableList:
    """An ordered collection of data tables."""

    def __init__(self) -> None:
        self._data: list[DataTable] = []

    def get_data_table(self, header_type: str) -> Optional[DataTable]:
        return next((t for t in self._data if t.header_type == header_type), None)

    def add_data_table(self, tab: DataTable) -> None:
        self._data.append(tab)

    def all_tables(self) -> list[DataTable]:
        return list(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[DataTable]:
        return iter(self._data)