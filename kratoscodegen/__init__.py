"""Helpers for generating CRUD service scaffolding from table descriptions."""

__version__ = "0.1.0"

__all__ = [
    "builder",
    "dbs",
    "entity",
    "errorsgen",
    "gocode_types",
    "httprule",
    "naming",
    "proto_error",
    "proto_message",
    "proto_service",
    "schema",
    "sql",
]