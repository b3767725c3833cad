"""Table description that drives the code generators."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

TABLE_TYPE_LIST = "list"
TABLE_TYPE_TREE = "tree"

NAME_RULE_HUMP = "hump"
NAME_RULE_SNAKE = "snake"

RELATION_TYPE_ONE = "one"
RELATION_TYPE_MANY = "many"

COLUMN_QUERY_TYPE_IN = "in"
COLUMN_QUERY_TYPE_NOT_IN = "not in"
COLUMN_QUERY_TYPE_BETWEEN = "between"

_PLURAL_QUERIES = (COLUMN_QUERY_TYPE_IN, COLUMN_QUERY_TYPE_NOT_IN, COLUMN_QUERY_TYPE_BETWEEN)

_GO_TYPES = {
    "numeric": "int32",
    "integer": "int32",
    "int": "int32",
    "smallint": "int32",
    "mediumint": "int32",
    "bigint": "uint32",
    "float": "float32",
    "real": "float64",
    "double": "float64",
    "decimal": "float64",
    "char": "string",
    "varchar": "string",
    "tinytext": "string",
    "mediumtext": "string",
    "longtext": "string",
    "binary": "[]byte",
    "varbinary": "[]byte",
    "tinyblob": "[]byte",
    "blob": "[]byte",
    "mediumblob": "[]byte",
    "longblob": "[]byte",
    "text": "string",
    "json": "string",
    "enum": "string",
    "time": "time.Time",
    "date": "time.Time",
    "datetime": "time.Time",
    "timestamp": "time.Time",
    "year": "int32",
    "bit": "[]uint8",
    "boolean": "bool",
    "bool": "bool",
}

_PROTO_TYPES = {
    "int32": "int32",
    "[]uint8": "bytes",
    "[]byte": "bytes",
    "float32": "float",
    "float64": "float",
    "time.Time": "google.protobuf.Timestamp",
    "int64": "uint32",
    "uint64": "uint32",
    "uint32": "uint32",
    "bool": "bool",
}


@dataclass
class ColumnQuery:
    """How a column is filtered in list queries."""

    type: str = ""

    def is_pluralize(self) -> bool:
        """Whether the query takes a list of values."""
        return self.type in _PLURAL_QUERIES


@dataclass
class ColumnOperation:
    """Which operations a column takes part in."""

    create: bool = False
    update: bool = False
    list: bool = False
    get: bool = False


@dataclass
class Relation:
    """A reference from a column to another table."""

    rules: dict[str, Any] = field(default_factory=dict)
    type: str = ""
    column: str = ""
    table: Table | None = None


@dataclass
class Index:
    """A table index."""

    names: list[str] = field(default_factory=list)
    unique: bool = False


@dataclass
class Column:
    """A table column."""

    name: str = ""
    type: str = ""
    column_type: str = ""
    size: str = ""
    comment: str = ""
    collation: str = ""
    is_null: bool = False
    default: str = ""
    unsigned: bool = False
    relations: list[Relation] = field(default_factory=list)
    operation: ColumnOperation = field(default_factory=ColumnOperation)
    rules: dict[str, Any] = field(default_factory=dict)
    query: ColumnQuery = field(default_factory=ColumnQuery)

    def is_relation(self) -> bool:
        """True when the column holds no relations."""
        return len(self.relations) == 0

    def is_proto_option(self) -> bool:
        """Whether the field is optional in proto messages."""
        return self.is_null or self.proto_type() == "bool"

    def is_deleted_at(self) -> bool:
        return self.name == "deleted_at"

    def proto_type(self) -> str:
        """The protobuf scalar type of the column."""
        return _PROTO_TYPES.get(self.go_type(), "string")

    def go_type(self) -> str:
        """The Go type of the column."""
        if self.type == "tinyint":
            if self.column_type.strip().startswith("tinyint(1)") or self.size == "1":
                return "bool"
            return "int32"
        return _GO_TYPES.get(self.type, "string")


@dataclass
class Table:
    """A database table and the code to generate for it."""

    type: str = ""
    module: str = ""
    name: str = ""
    struct: str = ""
    comment: str = ""
    columns: list[Column] = field(default_factory=list)
    indexes: list[Index] = field(default_factory=list)
    enable_batch_delete: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Table:
        """Build a table from its JSON description."""
        return cls(
            type=_str(data.get("type")),
            module=_str(data.get("module")),
            name=_str(data.get("name")),
            struct=_str(data.get("struct")),
            comment=_str(data.get("comment")),
            columns=[_column(c) for c in data.get("columns") or []],
            indexes=[_index(i) for i in data.get("indexes") or []],
            enable_batch_delete=bool(data.get("enableBatchDelete", False)),
        )


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _index(data: dict[str, Any]) -> Index:
    return Index(names=[str(n) for n in data.get("names") or []], unique=bool(data.get("unique", False)))


def _relation(data: dict[str, Any]) -> Relation:
    table = data.get("table")
    return Relation(
        rules=dict(data.get("rules") or {}),
        type=_str(data.get("type")),
        column=_str(data.get("column")),
        table=Table.from_dict(table) if table is not None else None,
    )


def _column(data: dict[str, Any]) -> Column:
    operation = data.get("operation") or {}
    query = data.get("query") or {}
    return Column(
        name=_str(data.get("name")),
        type=_str(data.get("type")),
        column_type=_str(data.get("columnType")),
        size=_str(data.get("size")),
        comment=_str(data.get("comment")),
        collation=_str(data.get("collation")),
        is_null=bool(data.get("is_null", False)),
        default=_str(data.get("default")),
        unsigned=bool(data.get("unsigned", False)),
        relations=[_relation(r) for r in data.get("relations") or []],
        operation=ColumnOperation(
            create=bool(operation.get("create", False)),
            update=bool(operation.get("update", False)),
            list=bool(operation.get("list", False)),
            get=bool(operation.get("get", False)),
        ),
        rules=dict(data.get("rules") or {}),
        query=ColumnQuery(type=_str(query.get("type"))),
    )


def load_table(path: str | Path) -> Table:
    """Read a table description from a JSON file."""
    with open(path, encoding="utf-8") as fh:
        return Table.from_dict(json.load(fh))