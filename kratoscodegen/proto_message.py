"""Request and reply messages in proto files, built from a table description."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from .builder import Builder
from .naming import is_exist_file, to_pluralize, to_snake, to_upper_hump, unique, variable_name
from .schema import (
    RELATION_TYPE_MANY,
    RELATION_TYPE_ONE,
    TABLE_TYPE_LIST,
    TABLE_TYPE_TREE,
    Relation,
    Table,
)

_MESSAGE = re.compile(r"message (\w+)([\s]*?)\{([\s\S]*?)\n\}", re.ASCII)
_PACKAGE = re.compile(r"\bpackage\s+([\w.]+)\s*;", re.ASCII)
_IMPORT = re.compile(r'\bimport\s+(?:(?:public|weak)\s+)?"([^"]*)"\s*;', re.ASCII)
_OPTION = re.compile(
    r"\boption\s+([\w.()]+)\s*=\s*"
    r"(\"(?:[^\"\\]|\\.)*\"|'(?:[^'\\]|\\.)*'|[^;{\s]+)\s*;",
    re.ASCII,
)


@dataclass
class MessageField:
    """One field line of a proto message."""

    keyword: str = ""
    type: str = ""
    decorate: str = ""
    validate: str = ""


@dataclass
class MessageStruct:
    """A proto message with its fields and nested messages."""

    keyword: str = ""
    fields: list[MessageField] = field(default_factory=list)
    relations: list[MessageStruct] = field(default_factory=list)
    alias: str = ""
    relation_type: str = ""
    rules: dict[str, Any] = field(default_factory=dict)
    is_one_of: bool = False


@dataclass
class MessageCode:
    """The parts of a proto message file."""

    pkg: str = ""
    options: list[str] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)
    sort: list[str] = field(default_factory=list)
    bucket: dict[str, str] = field(default_factory=dict)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "<nil>"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


def rule_string(tp: str, rules: dict[str, Any]) -> str:
    """The validate option for a field of type ``tp``, or an empty string without rules."""
    if not rules:
        return ""
    parts: list[str] = []
    for key, value in rules.items():
        if isinstance(value, (list, tuple)):
            items = [f'"{v}"' if isinstance(v, str) else _format_value(v) for v in value]
            parts.append(f"{key}: [{','.join(items)}]")
        elif isinstance(value, str):
            parts.append(f'{key}: "{value}"')
        else:
            parts.append(f"{key}: {_format_value(value)}")
    return f"[(validate.rules).{tp} = {{{','.join(parts)}}}]"


def _strip_comments(text: str) -> str:
    """Remove comments while leaving string literals untouched."""
    out: list[str] = []
    i, n = 0, len(text)
    while i < n:
        c = text[i]
        if c in "\"'":
            j = i + 1
            while j < n and text[j] != c:
                j += 2 if text[j] == "\\" else 1
            out.append(text[i:j + 1])
            i = j + 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end < 0 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            out.append(" ")
            i = n if end < 0 else end + 2
        else:
            out.append(c)
            i += 1
    return "".join(out)


def _check_balanced(code: str) -> None:
    depth = 0
    quote = ""
    escaped = False
    for c in code:
        if quote:
            if escaped:
                escaped = False
            elif c == "\\":
                escaped = True
            elif c == quote:
                quote = ""
            continue
        if c in "\"'":
            quote = c
        elif c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth < 0:
                raise ValueError("unexpected '}' in proto content")
    if quote:
        raise ValueError("unterminated string in proto content")
    if depth != 0:
        raise ValueError("unclosed '{' in proto content")


def _leading_comment(content: str, start: int) -> str:
    """The first line of the comment block right above position ``start``."""
    lines = content[:start].split("\n")
    if lines[-1].strip():
        return ""
    block: list[str] = []
    for line in reversed(lines[:-1]):
        stripped = line.strip()
        if not stripped.startswith("//"):
            break
        block.append(stripped[2:].strip())
    return block[-1] if block else ""


def parse_message_content(content: str) -> MessageCode:
    """Split a proto message file into package, options, imports and messages."""
    code = _strip_comments(content)
    _check_balanced(code)

    reply = MessageCode()
    for match in _MESSAGE.finditer(content):
        name = match.group(1)
        body = match.group(0)
        comment = _leading_comment(content, match.start())
        if comment:
            body = "// " + comment + "\n" + body
        reply.sort.append(name)
        reply.bucket[name] = body

    package = _PACKAGE.search(code)
    if package is not None:
        reply.pkg = package.group(1)
    reply.imports = [f'import "{m.group(1)}"' for m in _IMPORT.finditer(code)]
    for option in _OPTION.finditer(code):
        name, value = option.group(1), option.group(2)
        if value[0] in "\"'":
            source = value[1:-1]
            if source:
                reply.options.append(f'option {name} = "{source}"')
        else:
            reply.options.append(f"option {name} = {value}")
    return reply


def _related_table(relation: Relation) -> Table:
    if relation.table is None:
        raise ValueError(f"relation on column {relation.column!r} has no table")
    return relation.table


@dataclass
class MessageGenerator:
    """Generates the proto message file of one table."""

    builder: Builder

    def _name(self, name: str) -> str:
        return variable_name(name, self.builder.name_rule)

    def render_struct(self, msg: MessageStruct, spec: str = "") -> str:
        """Render ``msg`` and its nested messages, indented by ``spec``."""
        seen: set[str] = set()
        fields = list(msg.fields)
        text = f"{spec}message {msg.keyword} {{\n"
        old_text = text

        for item in msg.relations:
            relation = replace(item, fields=list(item.fields), relations=list(item.relations))
            pf = MessageField(
                keyword=self._name(relation.keyword),
                type=to_upper_hump(relation.keyword),
                decorate="" if msg.is_one_of else "optional ",
                validate=rule_string("repeated", relation.rules),
            )
            if self.builder.is_relation_type_many(relation.relation_type):
                pf.keyword = to_pluralize(pf.keyword)
                pf.decorate = "repeated "
            if relation.alias:
                pf.keyword = relation.alias
            if relation.keyword not in seen:
                relation_text = self.render_struct(relation, spec + "  ")
                if relation_text:
                    fields.append(pf)
                    text += relation_text + "\n"
                    seen.add(relation.keyword)
            else:
                fields.append(pf)

        rows = [
            f"{spec}  {f.decorate}{f.type} {f.keyword} = {index}{f.validate};"
            for index, f in enumerate(fields, start=1)
        ]
        if msg.is_one_of and len(rows) > 1:
            indent = "  " + spec
            text += indent + "oneof params{\n"
            text += "\n".join(indent + row for row in rows) + "\n"
            text += indent + "}\n"
        else:
            text += "\n".join(rows) + "\n"

        if text == old_text and spec:
            return ""
        return text + spec + "}"

    def make_create_request(self, table: Table, deep: bool = False) -> MessageStruct:
        """The create request message of ``table``."""
        struct = to_upper_hump(table.struct)
        msg = MessageStruct(keyword=struct if deep else f"Create{struct}Request")
        for column in table.columns:
            if column.operation.create:
                tp = column.proto_type()
                msg.fields.append(
                    MessageField(
                        keyword=self._name(column.name),
                        type=tp,
                        validate=rule_string(tp, column.rules),
                        decorate="optional " if column.is_proto_option() else "",
                    )
                )
            for relation in column.relations:
                pm = self.make_create_request(_related_table(relation), True)
                pm.relation_type = relation.type
                pm.rules = relation.rules
                msg.relations.append(pm)
        return msg

    def make_update_request(self, table: Table, deep: bool = False) -> MessageStruct:
        """The update request message of ``table``."""
        struct = to_upper_hump(table.struct)
        msg = MessageStruct(keyword=struct if deep else f"Update{struct}Request")
        for column in table.columns:
            if column.operation.update:
                tp = column.proto_type()
                msg.fields.append(
                    MessageField(
                        keyword=self._name(column.name),
                        type=tp,
                        validate=rule_string(tp, column.rules),
                        decorate="optional " if column.name != "id" else "",
                    )
                )
            for relation in column.relations:
                pm = self.make_update_request(_related_table(relation))
                pm.relation_type = relation.type
                pm.rules = relation.rules
                msg.relations.append(pm)
        return msg

    def make_get_request(self, table: Table, trash: bool = False, deep: bool = False) -> MessageStruct:
        """The get request message: by id or by any unique index."""
        struct = to_upper_hump(table.struct)
        keyword = struct
        if not deep:
            keyword = f"GetTrash{struct}Request" if trash else f"Get{struct}Request"
        msg = MessageStruct(
            keyword=keyword,
            is_one_of=True,
            fields=[
                MessageField(
                    keyword="id",
                    type="uint32",
                    validate="[(validate.rules).uint32 = {gte: 1}]",
                )
            ],
        )
        columns = {c.name: c for c in table.columns if not c.is_deleted_at()}

        for index in table.indexes:
            if not index.unique:
                continue
            names: list[str] = []
            fields: list[MessageField] = []
            for name in index.names:
                column = columns.get(name)
                if column is None:
                    continue
                names.append(to_upper_hump(name))
                tp = column.proto_type()
                fields.append(
                    MessageField(
                        keyword=self._name(column.name),
                        type=tp,
                        validate=rule_string(tp, column.rules),
                    )
                )
            if not names:
                continue
            if len(names) > 1:
                msg.relations.append(
                    MessageStruct(
                        keyword="And".join(names),
                        relation_type=RELATION_TYPE_ONE,
                        fields=fields,
                    )
                )
            else:
                msg.fields.extend(fields)
        return msg

    def make_get_reply(self, table: Table, trash: bool = False, deep: bool = False) -> MessageStruct:
        """The get reply message of ``table``."""
        struct = to_upper_hump(table.struct)
        keyword = struct
        if not deep:
            keyword = f"GetTrash{struct}Reply" if trash else f"Get{struct}Reply"
        msg = MessageStruct(keyword=keyword)
        for column in table.columns:
            if not column.operation.get:
                continue
            if column.is_deleted_at() and not trash:
                continue
            msg.fields.append(
                MessageField(
                    keyword=self._name(column.name),
                    type=column.proto_type(),
                    decorate="optional " if column.is_proto_option() else "",
                )
            )
            for relation in column.relations:
                pm = self.make_get_reply(_related_table(relation), trash, True)
                pm.relation_type = relation.type
                msg.relations.append(pm)
        return msg

    def make_list_request(self, table: Table, trash: bool = False, deep: bool = False) -> MessageStruct:
        """The list request message: paging, ordering and query fields."""
        struct = to_upper_hump(table.struct)
        keyword = struct
        if not deep:
            keyword = f"ListTrash{struct}Request" if trash else f"List{struct}Request"
        msg = MessageStruct(keyword=keyword)

        if table.type == TABLE_TYPE_LIST:
            msg.fields.extend(
                [
                    MessageField(
                        keyword="page",
                        type="uint32",
                        validate="[(validate.rules).uint32 = {gte: 1}]",
                    ),
                    MessageField(
                        keyword="pageSize",
                        type="uint32",
                        validate="[(validate.rules).uint32 = {gte: 1,lte:50}]",
                    ),
                ]
            )

        order_keys = ['"id"']
        for index in table.indexes:
            if not index.names or index.names[0] == "deleted_at":
                continue
            order_keys.append(f'"{to_snake(index.names[0])}"')
        order_keys = unique(order_keys)

        msg.fields.extend(
            [
                MessageField(
                    decorate="optional ",
                    keyword="order",
                    type="string",
                    validate='[(validate.rules).string = {in: ["asc","desc"]}]',
                ),
                MessageField(
                    decorate="optional ",
                    keyword="orderBy",
                    type="string",
                    validate=f"[(validate.rules).string = {{in: [{','.join(order_keys)}]}}]",
                ),
            ]
        )

        for column in table.columns:
            if not column.query.type:
                continue
            tp = column.proto_type()
            f = MessageField(
                decorate="optional ",
                keyword=self._name(column.name),
                type=tp,
                validate=rule_string(tp, column.rules),
            )
            if column.query.is_pluralize():
                f.decorate = "repeated "
                f.keyword = to_pluralize(f.keyword)
            msg.fields.append(f)
        return msg

    def make_list_reply(self, table: Table, trash: bool = False, deep: bool = False) -> MessageStruct:
        """The list reply message; at the top level it wraps the items in a ``list`` field."""
        struct = to_upper_hump(table.struct)
        keyword = struct
        if not deep:
            keyword = f"ListTrash{struct}Reply" if trash else f"List{struct}Reply"

        msg = MessageStruct(keyword=struct)
        for column in table.columns:
            if not column.operation.list:
                continue
            if column.is_deleted_at() and not trash:
                continue
            msg.fields.append(
                MessageField(
                    keyword=self._name(column.name),
                    type=column.proto_type(),
                    decorate="optional " if column.is_proto_option() else "",
                )
            )
            for relation in column.relations:
                pm = self.make_list_reply(_related_table(relation), trash, True)
                pm.relation_type = relation.type
                msg.relations.append(pm)

        if table.type == TABLE_TYPE_TREE:
            msg.fields.append(MessageField(decorate="repeated ", keyword="children", type=struct))

        if deep:
            return msg

        msg.alias = "list"
        msg.relation_type = RELATION_TYPE_MANY
        parent = MessageStruct(keyword=keyword, relations=[msg])
        if table.type != TABLE_TYPE_TREE:
            parent.fields.append(MessageField(keyword="total", type="uint32"))
        return parent

    def scan_message(self) -> MessageCode:
        """The message file already written, if any."""
        path = self.builder.proto_message_path()
        if not is_exist_file(path):
            return MessageCode()
        return parse_message_content(Path(path).read_text(encoding="utf-8"))

    def merge(self, made: MessageCode, scanned: MessageCode) -> MessageCode:
        """Combine new and existing code; new messages win, order is new first."""
        return MessageCode(
            pkg=made.pkg,
            options=unique(made.options + scanned.options),
            imports=unique(made.imports + scanned.imports),
            sort=unique(made.sort + scanned.sort),
            bucket={**scanned.bucket, **made.bucket},
        )

    def render_message(self, msg: MessageCode) -> str:
        """Write ``msg`` out as a proto file, leaving out trash messages without soft delete."""
        parts = ['syntax = "proto3";\n\n', f"package {msg.pkg};\n\n"]
        parts.extend(option + ";\n" for option in msg.options)
        parts.append("\n")
        parts.extend(imp + ";\n" for imp in msg.imports)
        parts.append("\n")
        trash = self.builder.has_deleted_at()
        for name in msg.sort:
            if not trash and "Trash" in name:
                continue
            parts.append(msg.bucket[name] + "\n\n")
        return "".join(parts)