[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tabkit"
version = "0.1.0"
description = "Compile CSV configuration tables into JSON, binary, Lua, protobuf schema and Go sources"
requires-python = ">=3.10"
dependencies = [
    "jinja2",
]
keywords = [
    "config",
    "tables",
    "csv",
    "code generation",
    "game data",
    "protobuf",
    "lua",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Code Generators",
    "Topic :: File Formats :: JSON",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["tabkit"]

[tool.hatch.build.targets.sdist]
include = [
    "tabkit",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
