"""MySQL table definitions built from a table description."""

from __future__ import annotations

from .schema import Column, Index, Table

_FIXED_COLUMNS = {
    "id": "`id` bigint unsigned NOT NULL PRIMARY KEY AUTO_INCREMENT COMMENT '主键ID'",
    "created_at": "`created_at` bigint unsigned NOT NULL DEFAULT '0' COMMENT '创建时间'",
    "updated_at": "`updated_at` bigint unsigned NOT NULL DEFAULT '0' COMMENT '修改时间'",
    "deleted_at": "`deleted_at` bigint unsigned NOT NULL DEFAULT '0' COMMENT '删除时间'",
}

_SIZED_TYPES = frozenset({"numeric", "char", "varchar", "varbinary", "tinyint"})


def gen_table_sql(table: Table) -> str:
    """The CREATE TABLE statement for ``table``."""
    parts = [gen_column_sql(c) for c in table.columns]
    parts.extend(gen_index_sql(i) for i in table.indexes)
    body = ",\n".join(parts)
    return (
        f"CREATE TABLE `{table.name}` (\n{body}\n)"
        f"ENGINE=InnoDB  CHARSET=utf8mb4 COMMENT='{table.comment}';"
    )


def gen_column_sql(column: Column) -> str:
    """The column definition for ``column``."""
    fixed = _FIXED_COLUMNS.get(column.name)
    if fixed is not None:
        return fixed

    column_type = column.column_type
    if not column_type:
        column_type = f"{column.type}({column.size})" if column.type in _SIZED_TYPES else column.type

    args = [f"`{column.name}`", column_type]
    if column.unsigned:
        args.append("unsigned")
    if column.collation:
        args.append("COLLATE " + column.collation)
    if not column.is_null:
        args.append("NOT NULL")
    if column.default:
        args.append(f"DEFAULT '{column.default}'")
    args.append(f"COMMENT '{column.comment}'")
    return " ".join(args)


def gen_index_sql(index: Index) -> str:
    """The index clause for ``index``."""
    args = ["UNIQUE"] if index.unique else []
    args.append("INDEX")
    args.append(f"({','.join(index.names)})")
    return " ".join(args)