"""Path templates and field names taken from HTTP rule annotations."""

from __future__ import annotations

import re
import sys

_PATH_VAR = re.compile(r"\{([a-z.0-9_\s]*)=?([^{}]*)\}", re.IGNORECASE)


def build_path_vars(path: str) -> dict[str, str | None]:
    """Map each variable of a path template to its pattern, or None when it has none."""
    if path.endswith("/"):
        print(f'\x1b[31mWARN\x1b[m: Path {path} should not end with "/" ', file=sys.stderr)
    result: dict[str, str | None] = {}
    for match in _PATH_VAR.finditer(path):
        name = match.group(1).strip()
        pattern = match.group(2)
        result[name] = pattern if len(name) > 1 and pattern else None
    return result


def replace_path(name: str, value: str, path: str) -> str:
    """Rewrite the first ``{name=value}`` of ``path`` as ``{name:regex}``."""
    pattern = re.compile(r"\{([\s]*%s\b[\s]*)=?([^{}]*)\}" % name, re.IGNORECASE)
    match = pattern.search(path)
    if match is None:
        return path
    regex = value.replace("*", ".*")
    return f"{path[:match.start()]}{{{name}:{regex}}}{path[match.end():]}"


def rewrite_path(path: str) -> str:
    """Rewrite every variable with a pattern in ``path`` into router form."""
    for name, pattern in build_path_vars(path).items():
        if pattern is not None:
            path = replace_path(name, pattern, path)
    return path


def _is_lower(c: str) -> bool:
    return "a" <= c <= "z"


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def camel_case(s: str) -> str:
    """CamelCase a field name: ``_my_field_name_2`` becomes ``XMyFieldName_2``."""
    if not s:
        return ""
    out: list[str] = []
    i = 0
    if s[0] == "_":
        out.append("X")
        i = 1
    n = len(s)
    while i < n:
        c = s[i]
        if c == "_" and i + 1 < n and _is_lower(s[i + 1]):
            i += 1
            continue
        if _is_digit(c):
            out.append(c)
            i += 1
            continue
        out.append(c.upper() if _is_lower(c) else c)
        while i + 1 < n and _is_lower(s[i + 1]):
            i += 1
            out.append(s[i])
        i += 1
    return "".join(out)


def camel_case_vars(s: str) -> str:
    """CamelCase every segment of a dotted field path."""
    return ".".join(camel_case(part) for part in s.split("."))