import pytest

from kratoscodegen.builder import Builder
from kratoscodegen.dbs import ByCode, DbsGenerator, make_get_by_codes
from kratoscodegen.schema import (
    Column,
    ColumnOperation,
    ColumnQuery,
    Index,
    Relation,
    Table,
)


def _generator(table: Table) -> DbsGenerator:
    return DbsGenerator(
        Builder(table=table, module="m", server="s", srv_root="", tpl_root="", web_root="")
    )


def _col(name, type_="varchar", get=True, list_=True, query="", relations=None):
    return Column(
        name=name,
        type=type_,
        operation=ColumnOperation(get=get, list=list_),
        query=ColumnQuery(type=query),
        relations=relations or [],
    )


def test_get_by_codes_single_unique_index():
    table = Table(
        columns=[_col("user_name"), _col("deleted_at", "bigint")],
        indexes=[Index(names=["user_name", "deleted_at"], unique=True)],
    )
    assert make_get_by_codes(table) == [
        ByCode(
            params="userName string",
            where='Where("userName = ?",userName)',
            method="UserName",
        )
    ]


def test_get_by_codes_composite_index_joins_parts():
    table = Table(
        columns=[_col("name"), _col("age", "int")],
        indexes=[Index(names=["name", "age"], unique=True)],
    )
    (code,) = make_get_by_codes(table)
    assert code.method.split("And") == ["Name", "Age"]
    assert code.params.split(",") == ["name string", "age int32"]
    assert code.where.count("Where(") == 2


def test_get_by_codes_skips_non_unique_and_unknown():
    table = Table(
        columns=[_col("name")],
        indexes=[
            Index(names=["name"], unique=False),
            Index(names=["missing"], unique=True),
            Index(names=["deleted_at"], unique=True),
        ],
    )
    assert make_get_by_codes(table) == []


def test_fields_select_everything():
    table = Table(columns=[_col("name"), _col("age", get=False, list_=False)])
    gen = _generator(table)
    assert gen.make_get_fields(table) == ['"*"']
    assert gen.make_list_fields(table) == ['"*"']
    assert gen.make_get_trash_fields(table) == ['"*"']
    assert gen.make_list_trash_fields(table) == ['"*"']


def test_get_preload_one_relation():
    role = Table(name="role", columns=[_col("id"), _col("name")])
    gen = _generator(Table())
    result = gen.get_preload(Relation(type="one", table=role), "GET", "")
    assert result == ['Preload("Role")']


def test_get_preload_many_relation_is_plural_and_filtered():
    role = Table(name="role", columns=[_col("id", list_=False)])
    gen = _generator(Table())
    relation = Relation(type="many", table=role)
    assert gen.get_preload(relation, "GET", "") == ['Preload("Roles")']
    assert gen.get_preload(relation, "LIST", "") == []


def test_get_preload_nested_uses_prefix():
    menu = Table(name="menu", columns=[_col("id")])
    role = Table(
        name="role",
        columns=[_col("menu_id", relations=[Relation(type="one", table=menu)])],
    )
    gen = _generator(Table())
    result = gen.get_preload(Relation(type="one", table=role), "GET", "")
    assert result[0] == 'Preload("Role")'
    assert 'Preload("Role.Menu")' in result
    assert len(result) == len(set(result))


def test_get_preload_without_table_raises():
    with pytest.raises(ValueError):
        _generator(Table()).get_preload(Relation(type="one"), "GET", "")


def test_make_preload_only_for_get_columns():
    role = Table(name="role", columns=[_col("id")])
    table = Table(
        columns=[
            _col("role_id", relations=[Relation(type="one", table=role)]),
            _col("other_id", get=False, relations=[Relation(type="many", table=role)]),
        ]
    )
    gen = _generator(table)
    assert gen.make_preload(table, "GET") == gen.get_preload(
        Relation(type="one", table=role), "GET", ""
    )


def test_list_query_kinds():
    table = Table(
        columns=[
            _col("id", "bigint", query="in"),
            _col("status", query="not in"),
            _col("created_at", "bigint", query="between"),
            _col("name", query="like"),
            _col("age", "int", query=">"),
            _col("skip"),
        ]
    )
    codes = _generator(table).make_list_query(table)
    assert len(codes) == 5
    in_code, not_in, between, like, default = codes
    assert in_code.startswith("if req.Ids != nil {")
    assert 'db.Where("id IN ?", req.Ids)' in in_code
    assert '"status NOT IN ?"' in not_in
    assert "len(req.CreatedAts) == 2" in between
    assert '"created_at BETWEEN ? AND ?"' in between
    assert '*req.Name+"%")' in like
    assert '"age > ?", *req.Age' in default
    assert all(code.rstrip().endswith("}") for code in codes)


def test_list_query_type_is_case_insensitive():
    table = Table(columns=[_col("id", "bigint", query="IN")])
    (code,) = _generator(table).make_list_query(table)
    assert '"id IN ?"' in code
    assert "req.Ids" in code