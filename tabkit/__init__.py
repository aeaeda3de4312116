"""Compile CSV configuration tables into JSON, binary, Lua, proto3 and Go output."""

__version__ = "0.1.0"