"""Go request types for list queries, merged from generated and existing code."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from .builder import Builder
from .naming import is_exist_file, to_pluralize, to_upper_hump, unique, variable_name
from .schema import TABLE_TYPE_LIST

_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass
class TypesCode:
    """Type declarations in order, each name mapped to its full declaration."""

    imports: list[str] = field(default_factory=list)
    sort: list[str] = field(default_factory=list)
    bucket: dict[str, str] = field(default_factory=dict)


def _skip_string(text: str, i: int) -> int:
    """Index just past the string or rune literal starting at ``i``."""
    quote = text[i]
    if quote == "`":
        end = text.find("`", i + 1)
        if end < 0:
            raise ValueError("unterminated raw string literal")
        return end + 1
    j, n = i + 1, len(text)
    while j < n:
        c = text[j]
        if c == "\\":
            j += 2
            continue
        if c == quote:
            return j + 1
        if c == "\n":
            break
        j += 1
    raise ValueError("unterminated string literal")


def _skip_block_comment(text: str, i: int) -> int:
    end = text.find("*/", i + 2)
    if end < 0:
        raise ValueError("unterminated block comment")
    return end + 2


def _skip_space(text: str, i: int) -> int:
    """Skip whitespace, semicolons and comments."""
    n = len(text)
    while i < n:
        if text[i] in " \t\r\n;":
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end < 0 else end
        elif text.startswith("/*", i):
            i = _skip_block_comment(text, i)
        else:
            break
    return i


def _read_spec(text: str, i: int) -> tuple[int, str]:
    """Read one specification up to the end of its line, dropping comments."""
    n = len(text)
    depth = 0
    out: list[str] = []
    while i < n:
        c = text[i]
        if c in "\"'`":
            j = _skip_string(text, i)
            out.append(text[i:j])
            i = j
            continue
        if text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end < 0 else end
            continue
        if text.startswith("/*", i):
            i = _skip_block_comment(text, i)
            out.append(" ")
            continue
        if c in "([{":
            depth += 1
        elif c in ")]}":
            if depth == 0:
                if c == ")":
                    break
                raise ValueError(f"unexpected {c!r}")
            depth -= 1
        elif depth == 0 and c in "\n;":
            break
        out.append(c)
        i += 1
    if depth:
        raise ValueError("unexpected end of file")
    spec = "\n".join(line.rstrip() for line in "".join(out).split("\n")).strip()
    return i, spec


def _import_spec(text: str, i: int, imports: list[str]) -> int:
    name = ""
    if text[i:i + 1] == ".":
        name, i = ".", i + 1
    else:
        m = _IDENT.match(text, i)
        if m is not None:
            name, i = m.group(), m.end()
    while i < len(text) and text[i] in " \t":
        i += 1
    if text[i:i + 1] not in ('"', "`"):
        raise ValueError("expected import path")
    j = _skip_string(text, i)
    path = text[i:j]
    imports.append(f"{name} {path}" if name else path)
    return j


def _parse_imports(text: str, i: int, imports: list[str]) -> int:
    i = _skip_space(text, i)
    if text[i:i + 1] != "(":
        return _import_spec(text, i, imports)
    i += 1
    while True:
        i = _skip_space(text, i)
        if i >= len(text):
            raise ValueError("unterminated import group")
        if text[i] == ")":
            return i + 1
        i = _import_spec(text, i, imports)


def _add_type(spec: str, prefix: str, code: TypesCode) -> None:
    m = _IDENT.match(spec)
    if m is None:
        raise ValueError(f"expected type name in {spec!r}")
    name = m.group()
    code.sort.append(name)
    code.bucket[name] = prefix + "type " + spec


def _parse_types(text: str, i: int, doc: list[str], code: TypesCode) -> int:
    prefix = "".join(line + "\n" for line in doc)
    i = _skip_space(text, i)
    if text[i:i + 1] != "(":
        i, spec = _read_spec(text, i)
        if i < len(text) and text[i] == ")":
            raise ValueError("unexpected ')'")
        _add_type(spec, prefix, code)
        return i
    i += 1
    while True:
        i = _skip_space(text, i)
        if i >= len(text):
            raise ValueError("unterminated type group")
        if text[i] == ")":
            return i + 1
        i, spec = _read_spec(text, i)
        _add_type(spec, prefix, code)


def parse_types_content(content: str) -> TypesCode:
    """Collect the imports and type declarations (with their doc comments) of a Go file."""
    code = TypesCode()
    n = len(content)
    i = 0
    doc: list[str] = []
    newlines = 2
    package_seen = False
    while i < n:
        c = content[i]
        if c == "\n":
            newlines += 1
            if newlines > 1:
                doc = []
            i += 1
            continue
        if c in " \t\r;":
            i += 1
            continue
        if content.startswith("//", i) or content.startswith("/*", i):
            if c == "/" and content[i + 1] == "/":
                end = content.find("\n", i)
                end = n if end < 0 else end
            else:
                end = _skip_block_comment(content, i)
            comment = content[i:end].rstrip()
            doc = doc + [comment] if doc and newlines == 1 else [comment]
            newlines = 0
            i = end
            continue
        m = _IDENT.match(content, i)
        if m is None:
            raise ValueError(f"unexpected {c!r} at top level")
        word, i = m.group(), m.end()
        if not package_seen:
            if word != "package":
                raise ValueError("expected 'package' clause")
            i, name = _read_spec(content, i)
            if not _IDENT.fullmatch(name):
                raise ValueError(f"invalid package name {name!r}")
            package_seen = True
        elif word == "import":
            i = _parse_imports(content, i, code.imports)
        elif word == "type":
            i = _parse_types(content, i, doc, code)
        elif word in ("func", "var", "const"):
            i, _ = _read_spec(content, i)
            if i < n and content[i] == ")":
                raise ValueError("unexpected ')'")
        else:
            raise ValueError(f"unexpected {word!r} at top level")
        doc = []
        newlines = 0
    if not package_seen:
        raise ValueError("expected 'package' clause")
    return code


@dataclass
class TypesGenerator:
    """Generates the Go types file of one table's module."""

    builder: Builder

    def _name(self, name: str) -> str:
        return variable_name(name, self.builder.name_rule)

    def scan_types(self) -> TypesCode:
        """The types file already written, if any."""
        path = self.builder.go_types_path()
        if not is_exist_file(path):
            return TypesCode()
        return parse_types_content(Path(path).read_text(encoding="utf-8"))

    def make_list_types(self) -> TypesCode:
        """The list request type: paging, ordering and query fields."""
        table = self.builder.table
        rows: list[str] = []
        if table.type == TABLE_TYPE_LIST:
            rows.append("\tPage uint32 `json:\"page\"`")
            rows.append(f"\tPageSize uint32 `json:\"{self._name('PageSize')}\"`")
        rows.append("\tOrder *string `json:\"order\"`")
        rows.append(f"\tOrderBy *string `json:\"{self._name('OrderBy')}\"`")

        for column in table.columns:
            if not column.query.type:
                continue
            if column.query.is_pluralize():
                rows.append(
                    f"\t{to_pluralize(to_upper_hump(column.name))} []{column.go_type()} "
                    f"`json:\"{to_pluralize(self._name(column.name))}\"`"
                )
            else:
                rows.append(
                    f"\t{to_upper_hump(column.name)} *{column.go_type()} "
                    f"`json:\"{self._name(column.name)}\"`"
                )
        key = f"List{to_upper_hump(table.struct)}Request"
        body = "\n".join(rows)
        return TypesCode(sort=[key], bucket={key: f"type {key} struct{{\n{body}\n}}"})

    def make_trash_list_types(self) -> TypesCode:
        """The list request type for soft-deleted rows."""
        code = self.make_list_types()
        name = code.sort[0]
        new_name = f"ListTrash{to_upper_hump(self.builder.table.struct)}Request"
        return TypesCode(
            sort=[new_name],
            bucket={new_name: code.bucket[name].replace(name, new_name)},
        )

    def make_types(self) -> TypesCode:
        """All generated types of the table."""
        listed = self.make_list_types()
        trash = self.make_trash_list_types()
        return TypesCode(
            sort=listed.sort + trash.sort,
            bucket={**listed.bucket, **trash.bucket},
        )

    def render_types(self, code: TypesCode) -> str:
        """Write ``code`` out as a Go file, leaving out trash types without soft delete."""
        parts = ["package types\n"]
        if code.imports:
            parts.append("import (\n" + "\n".join(code.imports) + "\n)\n")
        trash = self.builder.has_deleted_at()
        for name in code.sort:
            if not trash and "Trash" in name:
                continue
            parts.append(code.bucket[name] + "\n")
        return "".join(parts)

    def gen_types(self) -> str:
        """Merge the generated types with the existing ones and render the result."""
        try:
            scanned = self.scan_types()
        except (OSError, ValueError) as exc:
            raise RuntimeError(f"扫描types代码失败，{exc}") from exc
        made = self.make_types()
        merged = TypesCode(
            sort=unique(made.sort + scanned.sort),
            bucket={**scanned.bucket, **made.bucket},
        )
        return self.render_types(merged)