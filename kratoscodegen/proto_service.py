"""Service definitions in proto files, merged from generated and existing code."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from .builder import Builder
from .naming import is_exist_file, to_upper_hump, unique

_SERVICE = re.compile(r"service\s+(\w+)\s*\{([\s\S]*)\}", re.ASCII)
_RPC = re.compile(r"rpc\s+(\w+)", re.ASCII)
_PACKAGE = re.compile(r"\bpackage\s+([\w.]+)\s*;", re.ASCII)
_IMPORT = re.compile(r'\bimport\s+(?:(?:public|weak)\s+)?"([^"]*)"\s*;', re.ASCII)
_OPTION = re.compile(
    r"\boption\s+([\w.()]+)\s*=\s*"
    r"(\"(?:[^\"\\]|\\.)*\"|'(?:[^'\\]|\\.)*'|[^;{\s]+)\s*;",
    re.ASCII,
)


@dataclass
class ServiceCode:
    """The parts of a proto service file."""

    pkg: str = ""
    options: list[str] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)
    sort: list[str] = field(default_factory=list)
    bucket: dict[str, str] = field(default_factory=dict)


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


def parse_service_content(content: str) -> ServiceCode:
    """Split a proto service file into package, options, imports and rpc blocks."""
    reply = ServiceCode()

    match = _SERVICE.search(content)
    if match is None:
        raise ValueError("匹配数据错误")

    for chunk in match.group(2).strip().split("\n\n"):
        chunk = chunk.strip()
        if not chunk:
            continue
        rpc = _RPC.search(chunk)
        if rpc is None:
            raise ValueError(f"匹配数据错误: no rpc in {chunk!r}")
        name = rpc.group(1)
        reply.sort.append(name)
        reply.bucket[name] = "  " + chunk + "\n"

    code = _strip_comments(content)
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


@dataclass
class ServiceGenerator:
    """Generates the proto service file of one table's module."""

    builder: Builder

    def _dir(self) -> str:
        return f"api/{self.builder.server}/{self.builder.table.module}".lower()

    @staticmethod
    def _version() -> str:
        return "v1"

    def package_name(self) -> str:
        """The proto package, e.g. ``server.api.server.module.v1``."""
        return f"{self.builder.server}/{self._dir()}/{self._version()}".replace("/", ".")

    def java_class(self) -> str:
        """The outer Java class name."""
        last = f"{self._dir()}/{self._version()}".split("/")[-1]
        return to_upper_hump(self.builder.table.module) + to_upper_hump(last)

    def scan_service(self) -> ServiceCode:
        """The service file already written, if any."""
        path = self.builder.proto_service_path()
        if not is_exist_file(path):
            return ServiceCode()
        return parse_service_content(Path(path).read_text(encoding="utf-8"))

    def merge(self, made: ServiceCode, scanned: ServiceCode) -> ServiceCode:
        """Combine new and existing code; new rpc blocks win, order is new first."""
        return ServiceCode(
            pkg=made.pkg,
            options=unique(made.options + scanned.options),
            imports=unique(made.imports + scanned.imports),
            sort=unique(made.sort + scanned.sort),
            bucket={**scanned.bucket, **made.bucket},
        )

    def render_service(self, data: ServiceCode) -> str:
        """Write ``data`` out as a proto file, leaving out trash rpcs without soft delete."""
        parts = ['syntax = "proto3";\n\n', f"package {data.pkg};\n\n"]
        parts.extend(option + ";\n" for option in data.options)
        parts.append("\n")
        parts.extend(imp + ";\n" for imp in data.imports)
        parts.append("\n")
        parts.append(f"service {to_upper_hump(self.builder.table.module)}{{\n\n")
        trash = self.builder.has_deleted_at()
        for name in data.sort:
            if not trash and "Trash" in name:
                continue
            parts.append(data.bucket[name] + "\n")
        parts.append("}")
        return "".join(parts)