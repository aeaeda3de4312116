# tabkit

tabkit turns configuration tables kept as CSV sheets into data and source
code that a program can load: JSON documents, a compact tagged binary
format, Lua tables, a proto3 schema and Go type definitions.

A project is described by three kinds of tables:

* an **index table** that lists every other table and says what it is
  (`类型表` type table, `数据表` data table, `键值表` key-value table);
* one or more **type tables** that declare structures (`表头`) and
  enumerations (`枚举`), their fields, field types, array splitters and
  whether a field gets an index;
* **data tables** whose header row names the fields of a structure and
  whose rows hold the values.

Rows whose first cell starts with `#`, and header columns that start with
`#`, are left out. Several sheets of the same table type are merged into
one output table, array fields may span several columns or be split from
one cell, and key-value tables are transposed into a single-row table.

## Checks

While compiling, the tables are validated, and every problem is raised as
a `tabkit.report.TableError` whose message names the error, its
description and the offending cell, for example:

```
TableError.DuplicateHeaderField 表头字段重复 | '整形' @TestData|(A1)
```

Checked are, among others: unknown field types, header fields that are not
declared, duplicated header and type fields, invalid field names, empty or
duplicated enum values, unknown enum values in data, duplicated values in
indexed columns, values that do not fit their declared type, and array
columns defined with different column counts across tables.

## Usage

Tables can be read from CSV files on disk through
`tabkit.sheets.FileLoader` (used automatically when `Globals.table_getter`
is left unset), or built in memory with `tabkit.sheets.MemFile`:

```python
from tabkit.globals import Globals
from tabkit.sheets import (
    MemFile,
    write_index_table_header,
    write_type_table_header,
    write_row_values,
)
from tabkit.compiler import compile_tables
from tabkit import jsondata

files = MemFile()

index = files.create_csv_file("Index")
write_index_table_header(index)
write_row_values(index, "类型表", "", "Type")
write_row_values(index, "数据表", "", "TestData")

types = files.create_csv_file("Type")
write_type_table_header(types)
write_row_values(types, "表头", "TestData", "整形", "Int", "int", "", "")
write_row_values(types, "表头", "TestData", "字符串", "String", "string", "", "")

data = files.create_csv_file("TestData")
write_row_values(data, "整形", "字符串")
write_row_values(data, "100", "hello")

g = Globals()
g.version = "1.0"
g.index_file = "Index"
g.package_name = "main"
g.combine_struct_name = "Table"
g.index_getter = files
g.table_getter = files

compile_tables(g)
print(jsondata.generate(g).decode("utf-8"))
```

CSV files read from disk are decoded as UTF-8, falling back to GBK.
`CSVFile.save(filename, encoding)` writes a sheet back out.

## Generators

Once `compile_tables` has run, the compiled `Globals` can be handed to any
of the generators:

| Module              | Produces                                               |
|---------------------|--------------------------------------------------------|
| `tabkit.jsondata`   | all tables in one JSON document, or one file per table |
| `tabkit.bindata`    | tagged little-endian binary data                       |
| `tabkit.jsontype`   | a JSON description of all declared types               |
| `tabkit.luasrc`     | Lua modules holding the data, indices and enums        |
| `tabkit.pbsrc`      | a proto3 schema for the tables                         |
| `tabkit.gosrc`      | Go source with the structures, enums and indices       |

Each generator offers `generate(globals)`, returning the output as bytes;
`jsondata`, `bindata` and `luasrc` also offer `output(globals, directory)`
to write one file per table into an existing directory.

`tabkit.binreader.BinaryReader` reads the little-endian integers and
booleans that `tabkit.bindata.BinaryWriter` writes. Its `read_bytes`
expects a 16-bit length prefix, while `BinaryWriter.write_string` writes a
32-bit one, so strings are read with `read_uint32` followed by slicing.

Tag actions (`tabkit.globals.parse_tag_action`) select tables or fields by
tag and leave them out of particular outputs, e.g.
`nogentab:client|nogenfield_json:server+debug`. The actions honoured are
`nogentab` (compiling), `nogenfield_json`, `nogenfield_jsondir`,
`nogenfield_binary` and `nogenfield_lua`.

## What tabkit does not do

* There is no command-line program; everything is driven from Python.
* Only CSV input is read; other file extensions raise
  `TableError.UnknownInputFileExtension`.
* No C# or Java sources and no protobuf-encoded data files are generated;
  only the proto3 schema is.

## Tests

The test suite uses pytest; install the `test` extra to get it.