# kratoscodegen

Helpers for generating the repetitive parts of a CRUD service from a table
description: proto3 request/reply messages, service definitions and error
enums, Go list-request types, entity structs and data-access query fragments,
and MySQL `CREATE TABLE` statements. It also holds the path and naming helpers
that HTTP and error code generators rely on.

Where a generated file already exists, it can be read back and merged with the
freshly generated definitions, so hand-added entries are kept.

## Describing a table

A table is described in JSON and loaded with `load_table`, or built from a
dictionary with `Table.from_dict`:

```python
from kratoscodegen.schema import Table, load_table

table = load_table("user.json")
# or
table = Table.from_dict({
    "type": "list",
    "module": "user",
    "name": "user",
    "struct": "user",
    "comment": "users",
    "columns": [
        {"name": "id", "type": "bigint"},
        {"name": "name", "type": "varchar", "size": "64",
         "operation": {"create": True, "update": True, "list": True, "get": True},
         "query": {"type": "like"}},
    ],
    "indexes": [{"names": ["name"], "unique": True}],
})
```

Each `Column` knows its Go and proto types (`go_type()`, `proto_type()`),
whether it becomes an optional proto field (`is_proto_option()`) and whether
it is the soft-delete column (`is_deleted_at()`). `ColumnQuery.is_pluralize()`
tells whether a query (`in`, `not in`, `between`) takes a list of values.

## SQL

```python
from kratoscodegen.sql import gen_table_sql, gen_column_sql, gen_index_sql

print(gen_table_sql(table))
```

The `id`, `created_at`, `updated_at` and `deleted_at` columns get fixed
definitions; other columns are built from their type, size, collation,
nullability, default and comment.

## Project layout

`Builder` ties a table to a service root and a template root and knows where
every generated file lives:

```python
from kratoscodegen.builder import Builder

builder = Builder.create(table, "/path/to/service", "/path/to/templates")
builder.proto_message_path()
builder.go_dbs_path()
```

The module path and server name are read from the service's `go.mod`; without
one, the directory name is used. `has_deleted_at()` tells whether the table
has a soft-delete column — without one, every generator leaves out its
`Trash` definitions.

## Generators

All generators take a `Builder`:

- `kratoscodegen.proto_error.ErrorGenerator` — `gen_error()` reads the error
  enum template (`proto_error_tpl_path()`), merges its entries with those of
  an existing error proto, and renders them numbered from 0.
  `parse_error_content` and `render_error_template` work on strings.
- `kratoscodegen.proto_service.ServiceGenerator` — `scan_service()` reads an
  existing service proto, `merge()` combines two `ServiceCode` values (new
  `rpc` blocks win) and `render_service()` writes the proto text;
  `package_name()` and `java_class()` give the package and outer class names.
- `kratoscodegen.proto_message.MessageGenerator` — `make_create_request`,
  `make_update_request`, `make_get_request`, `make_get_reply`,
  `make_list_request` and `make_list_reply` build `MessageStruct` trees;
  `render_struct()` turns one into proto text, with nested messages for
  relations and `oneof` for get requests. `rule_string` renders validation
  rules; `scan_message`, `merge` and `render_message` handle whole files.
- `kratoscodegen.gocode_types.TypesGenerator` — `gen_types()` produces the
  list (and trash list) request structs and merges them with the type
  declarations of an existing Go file, parsed by `parse_types_content`.
- `kratoscodegen.entity.EntityGenerator` — `gen_entity_struct()` builds the
  entity struct body, with relations, tree children and the base model chosen
  by how many of the standard columns are present; `render_entities()` wraps
  bodies in `type ... struct` declarations.
- `kratoscodegen.dbs.DbsGenerator` — selected fields, preload calls
  (`get_preload`, `make_preload`) and list filter clauses (`make_list_query`);
  `make_get_by_codes` builds lookups from unique indexes.

Files are written with `kratoscodegen.naming.write_code`, which creates
missing directories first. `gen_proto_grpc` runs `kratosx proto client` on a
proto file; that command must be installed and on the `PATH`.

## Naming helpers

```python
from kratoscodegen.naming import to_snake, to_upper_hump, to_pluralize, unique

to_snake("UserName")         # "user_name"
to_upper_hump("user_name")   # "UserName"
to_pluralize("category")     # "categories"
unique([1, 2, 1])            # [1, 2]
```

## HTTP paths and error names

```python
from kratoscodegen.httprule import build_path_vars, replace_path, rewrite_path, camel_case
from kratoscodegen.errorsgen import case_to_camel, collect_errors, EnumValueSpec

build_path_vars("/test/{message.name=messages/*}")
# {"message.name": "messages/*"}
replace_path("message.name", "messages/*", "/test/{message.name=messages/*}")
# "/test/{message.name:messages/.*}"
camel_case("_my_field_name_2")   # "XMyFieldName_2"
case_to_camel("SYSTEM_ERROR")    # "SystemError"
```

`collect_errors` turns `EnumValueSpec` values (code, message, comments) into
`ErrorInfo` records; a code above 600 or below 0 raises `ValueError`, and
values whose code resolves to 0 are skipped.

## What it does not do

- It has no command-line tool and no web server; everything is called from
  Python.
- It does not render the Go repository, service, app or data-access source
  files from templates, and does not format Go code. `DbsGenerator` and
  `EntityGenerator` give the pieces that such templates would use.
- It does not parse `.proto` files with a full parser or read protoc plugin
  requests; proto files are read with pattern matching, and the HTTP and
  error helpers work on plain values.
- It does not generate TypeScript clients.

## Requirements

Python 3.10 or later; no third-party dependencies. The tests use pytest
(`pip install .[test]`, then `pytest`).