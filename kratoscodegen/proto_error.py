"""Error reason enums in proto files, merged from a template and existing code."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from .builder import Builder
from .naming import is_exist_file, unique

_ENTRY = re.compile(r"(\w+)\s*=\s*\d+\s*\[(.*?)\];", re.ASCII)
_ENTRY_LINE = re.compile(r"(\w+)\s*=\s*\d+\s*\[(.*?)\];\s", re.ASCII)


@dataclass
class ErrorCode:
    """Enum entries in order, each name mapped to its bracketed options."""

    sort: list[str] = field(default_factory=list)
    bucket: dict[str, str] = field(default_factory=dict)


def parse_error_content(content: str) -> ErrorCode:
    """Collect the ``NAME = n [options];`` entries of a proto error enum."""
    code = ErrorCode()
    for match in _ENTRY.finditer(content):
        name = match.group(1)
        code.sort.append(name)
        code.bucket[name] = f"[{match.group(2)}]"
    return code


def render_error_template(template: str, code: ErrorCode) -> str:
    """Replace the entries of ``template`` with those of ``code``, numbered from 0."""
    head = _ENTRY_LINE.sub("", template).strip()
    head = head.removesuffix("}").strip()
    lines = [f"  {name} = {index}{code.bucket[name]};" for index, name in enumerate(code.sort)]
    return head + "\n\n" + "\n".join(lines) + "\n}"


@dataclass
class ErrorGenerator:
    """Generates the error reason proto file of a service."""

    builder: Builder

    def scan_error(self) -> ErrorCode:
        """The entries of the error file already written, if any."""
        path = self.builder.proto_error_path()
        if not is_exist_file(path):
            return ErrorCode()
        return parse_error_content(Path(path).read_text(encoding="utf-8"))

    def make_error(self) -> ErrorCode:
        """The entries given by the template."""
        template = Path(self.builder.proto_error_tpl_path()).read_text(encoding="utf-8")
        return parse_error_content(template)

    def render_error(self, code: ErrorCode) -> str:
        """Render ``code`` into the error template."""
        template = Path(self.builder.proto_error_tpl_path()).read_text(encoding="utf-8")
        return render_error_template(template, code)

    def gen_error(self) -> str:
        """Merge the template entries with the existing ones and render the result."""
        try:
            scanned = self.scan_error()
        except OSError as exc:
            raise RuntimeError(f"扫描proto代码失败，{exc}") from exc
        try:
            made = self.make_error()
        except OSError as exc:
            raise RuntimeError(f"生成proto代码失败，{exc}") from exc

        merged = ErrorCode(
            sort=unique(made.sort + scanned.sort),
            bucket={**scanned.bucket, **made.bucket},
        )
        return self.render_error(merged)