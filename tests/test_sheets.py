import pytest

from tabkit.report import TableError
from tabkit.sheets import (
    CSVFile,
    FileLoader,
    MemFile,
    convert_to_csv,
    read_sheet_row,
    write_file,
    write_index_table_header,
    write_row_values,
    write_type_table_header,
)


def test_index_header():
    mem = MemFile()
    sheet = mem.create_csv_file("Index")
    write_index_table_header(sheet)
    assert read_sheet_row(sheet, 0) == ["模式", "表类型", "表文件名"]


def test_type_header_width():
    mem = MemFile()
    sheet = mem.create_csv_file("Type")
    write_type_table_header(sheet)
    assert sheet.max_column() == 8
    assert sheet.get_value(0, 0) == "种类"
    assert sheet.get_value(0, 7) == "索引"


def test_get_value_out_of_range_is_empty():
    f = CSVFile()
    write_row_values(f.sheet, "a", "b")
    assert f.sheet.get_value(0, 1) == "b"
    assert f.sheet.get_value(0, 5) == ""
    assert f.sheet.get_value(3, 0) == ""


def test_set_value():
    f = CSVFile()
    write_row_values(f.sheet, "a", "b")
    assert f.sheet.set_value(0, 1, "z")
    assert f.sheet.get_value(0, 1) == "z"
    assert not f.sheet.set_value(1, 0, "z")


def test_is_row_empty():
    f = CSVFile()
    write_row_values(f.sheet, "a", "b")
    write_row_values(f.sheet, "", "x")
    assert not f.sheet.is_row_empty(1, -1)
    assert f.sheet.is_row_empty(1, 1)
    assert f.sheet.is_row_empty(2, -1)


def test_save_and_load_round_trip(tmp_path):
    f = CSVFile()
    rows = [["名字", "值"], ["a,b", 'say "hi"'], ["x", "y"]]
    for r in rows:
        write_row_values(f.sheet, *r)
    path = tmp_path / "Data.csv"
    f.save(str(path))
    loaded = CSVFile()
    loaded.load(str(path))
    assert loaded.records == rows
    assert loaded.sheet.name == str(tmp_path / "Data")


def test_load_gbk(tmp_path):
    path = tmp_path / "g.csv"
    path.write_bytes("名字,值\n张三,1\n".encode("gbk"))
    f = CSVFile()
    f.load(str(path))
    assert f.records == [["名字", "值"], ["张三", "1"]]


def test_save_with_gbk_encoding(tmp_path):
    f = CSVFile()
    write_row_values(f.sheet, "名字", "x")
    path = tmp_path / "out.csv"
    f.save(str(path), encoding="gbk")
    assert path.read_bytes().decode("gbk").splitlines() == ["名字,x"]


def test_load_wrong_field_count(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("a,b\nc\n", encoding="utf-8")
    with pytest.raises(ValueError):
        CSVFile().load(str(path))


def test_memfile_get_and_tables():
    mem = MemFile()
    sheet = mem.create_csv_file("Index")
    write_row_values(sheet, "v")
    file = mem.get_file("Index")
    assert file.sheets()[0].get_value(0, 0) == "v"
    assert [d.file_name for d in mem.tables()] == ["Index"]
    with pytest.raises(FileNotFoundError, match="file not found: Missing"):
        mem.get_file("Missing")


def test_memfile_add_file_sets_table_name():
    mem = MemFile()
    entry = mem.add_file("a.csv", CSVFile())
    entry.table_name = "A"
    assert next(mem.tables()).table_name == "A"


def test_convert_to_csv_stops_at_empty_row():
    src = CSVFile()
    write_row_values(src.sheet, "a", "b")
    write_row_values(src.sheet, "c", "d")
    write_row_values(src.sheet, "", "")
    write_row_values(src.sheet, "e", "f")
    out = convert_to_csv(src)
    assert out.records == [["a", "b"], ["c", "d"]]


def test_file_loader_async(tmp_path):
    path = tmp_path / "t.csv"
    path.write_text("h1,h2\n1,2\n", encoding="utf-8")
    loader = FileLoader(sync_load=False)
    loader.add_file(str(path))
    loader.commit()
    assert loader.get_file(str(path)).sheets()[0].get_value(1, 1) == "2"
    with pytest.raises(FileNotFoundError):
        loader.get_file("other.csv")


def test_file_loader_async_keeps_errors(tmp_path):
    loader = FileLoader(sync_load=False)
    loader.add_file(str(tmp_path / "t.txt"))
    loader.commit()
    with pytest.raises(TableError) as info:
        loader.get_file(str(tmp_path / "t.txt"))
    assert info.value.id == "UnknownInputFileExtension"


def test_file_loader_sync(tmp_path):
    path = tmp_path / "s.csv"
    path.write_text("a\n", encoding="utf-8")
    loader = FileLoader(sync_load=True)
    assert loader.get_file(str(path)).records == [["a"]]
    with pytest.raises(TableError) as info:
        loader.get_file("x.doc")
    assert info.value.id == "UnknownInputFileExtension"


def test_write_file_creates_directories(tmp_path):
    target = tmp_path / "a" / "b" / "out.bin"
    write_file(str(target), b"\x01\x02")
    assert target.read_bytes() == b"\x01\x02"