"""Query code for the Go data-access layer of one table."""

from __future__ import annotations

from dataclasses import dataclass, replace

from .builder import Builder
from .naming import to_lower_hump, to_pluralize, to_snake, to_upper_hump, unique
from .schema import RELATION_TYPE_MANY, Relation, Table

_ALL_FIELDS = '"*"'

_IN_QUERY = """if req.%s != nil {
\t\t\t\t\t\t\t\tdb = db.Where("%s IN ?", req.%s)
\t\t\t\t\t\t\t}"""

_NOT_IN_QUERY = """if req.%s != nil {
\t\t\t\t\t\t\t\tdb = db.Where("%s NOT IN ?", req.%s)
\t\t\t\t\t\t\t}"""

_BETWEEN_QUERY = """if len(req.%s) == 2 {
\t\t\t\t\t\t\t\tdb = db.Where("%s BETWEEN ? AND ?", req.%s[0], req.%s[1])
\t\t\t\t\t\t\t}"""

_LIKE_QUERY = """if req.%s != nil {
\t\t\t\t\t\t\t\tdb = db.Where("%s LIKE ?", *req.%s+"%%")
\t\t\t\t\t\t\t}"""

_DEFAULT_QUERY = """if req.%s != nil {
\t\t\t\t\t\t\t\tdb = db.Where("%s %s ?", *req.%s)
\t\t\t\t\t\t\t}"""


@dataclass
class ByCode:
    """A lookup by the columns of one unique index."""

    params: str
    where: str
    method: str


def make_get_by_codes(table: Table) -> list[ByCode]:
    """One lookup for every unique index of ``table``, ignoring ``deleted_at``."""
    columns = {column.name: column for column in table.columns}
    codes: list[ByCode] = []
    for index in table.indexes:
        if not index.unique:
            continue
        keys: list[str] = []
        params: list[str] = []
        where: list[str] = []
        for name in index.names:
            if name == "deleted_at":
                continue
            column = columns.get(name)
            if column is None:
                continue
            low_key = to_lower_hump(column.name)
            params.append(f"{low_key} {column.go_type()}")
            keys.append(to_upper_hump(column.name))
            where.append(f'Where("{low_key} = ?",{low_key})')
        if keys:
            codes.append(
                ByCode(params=",".join(params), where=".".join(where), method="And".join(keys))
            )
    return codes


def _related_table(relation: Relation) -> Table:
    if relation.table is None:
        raise ValueError(f"relation on column {relation.column!r} has no table")
    return relation.table


def _relation_key(relation: Relation) -> str:
    key = to_upper_hump(_related_table(relation).name)
    if relation.type == RELATION_TYPE_MANY:
        key = to_pluralize(key)
    return key


@dataclass
class DbsGenerator:
    """Builds the pieces of the data-access code of one table."""

    builder: Builder

    def make_get_fields(self, table: Table) -> list[str]:
        """Fields selected by get queries; every selected column is listed, so all of them."""
        return [_ALL_FIELDS]

    def make_list_fields(self, table: Table) -> list[str]:
        """Fields selected by list queries; every selected column is listed, so all of them."""
        return [_ALL_FIELDS]

    def make_get_trash_fields(self, table: Table) -> list[str]:
        """Fields selected by get queries on soft-deleted rows."""
        fields = self.make_get_fields(table)
        if fields == [_ALL_FIELDS]:
            return fields
        return fields + ["deleted_at"]

    def make_list_trash_fields(self, table: Table) -> list[str]:
        """Fields selected by list queries on soft-deleted rows."""
        fields = self.make_list_fields(table)
        if fields == [_ALL_FIELDS]:
            return fields
        return fields + ["deleted_at"]

    def get_preload(self, relation: Relation, tp: str, prefix: str = "") -> list[str]:
        """Preload calls for ``relation`` and the relations nested in it."""
        table = _related_table(relation)
        preload: list[str] = []
        inner: list[Relation] = []
        for column in table.columns:
            if tp == "GET" and not column.operation.get:
                continue
            if tp == "LIST" and not column.operation.list:
                continue
            preload.append(f'Preload("{prefix}{_relation_key(relation)}")')
            inner.extend(column.relations)

        for item in inner:
            prefix = prefix + _relation_key(relation) + "."
            preload.extend(self.get_preload(item, tp, prefix))
        return unique(preload)

    def make_preload(self, table: Table, tp: str) -> list[str]:
        """Preload calls for the relations of the columns read by get queries."""
        preload: list[str] = []
        for column in table.columns:
            if not column.operation.get:
                continue
            for relation in column.relations:
                preload.extend(self.get_preload(replace(relation), tp, ""))
        return preload

    def make_list_query(self, table: Table) -> list[str]:
        """Filter code for each column that takes part in list queries."""
        codes: list[str] = []
        for column in table.columns:
            query_type = column.query.type
            if not query_type:
                continue
            upper = to_upper_hump(column.name)
            snake = to_snake(column.name)
            plural = to_pluralize(upper)
            kind = query_type.lower()
            if kind == "in":
                codes.append(_IN_QUERY % (plural, snake, plural))
            elif kind == "not in":
                codes.append(_NOT_IN_QUERY % (plural, snake, plural))
            elif kind == "between":
                codes.append(_BETWEEN_QUERY % (plural, snake, plural, plural))
            elif kind == "like":
                codes.append(_LIKE_QUERY % (upper, snake, upper))
            else:
                codes.append(_DEFAULT_QUERY % (upper, snake, query_type, upper))
        return codes