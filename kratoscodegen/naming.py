"""Name conversions and small file helpers used by the code generators."""

from __future__ import annotations

import os
import subprocess
from collections.abc import Hashable, Iterable
from pathlib import Path
from typing import TypeVar

T = TypeVar("T", bound=Hashable)

_VOWELS = frozenset("aeiou")


def to_pluralize(word: str) -> str:
    """Return the English plural form of ``word``."""
    if len(word) < 2:
        raise ValueError(f"cannot pluralize {word!r}: at least two characters are needed")
    last, before_last = word[-1], word[-2]
    if last == "y":
        if before_last in _VOWELS:
            return word + "s"
        return word[:-1] + "ies"
    if last in ("x", "s", "z", "o"):
        return word + "es"
    if last == "h":
        if before_last in ("s", "c"):
            return word + "es"
        return word + "s"
    if last == "f":
        if before_last == "f":
            return word[:-2] + "ves"
        return word[:-1] + "ves"
    return word + "s"


def to_snake(s: str) -> str:
    """Convert a camel-case name to snake case."""
    result: list[str] = []
    for i, ch in enumerate(s):
        if ch.isupper() and i > 0:
            next_lower = i + 1 < len(s) and s[i + 1].islower()
            if next_lower or s[i - 1].islower():
                result.append("_")
        result.append(ch.lower())
    return "".join(result).lower()


def _title(s: str) -> str:
    """Upper-case the first letter of every word, leaving the rest alone."""
    out: list[str] = []
    prev = ""
    for ch in s:
        starts_word = ch.isalpha() and not (prev.isalnum() or prev == "'")
        out.append(ch.title() if starts_word else ch)
        prev = ch
    return "".join(out)


def to_hump(s: str) -> str:
    """Convert a snake-case name to camel case with every word capitalised."""
    return _title(s.replace("_", " ")).replace(" ", "")


def to_lower_hump(s: str) -> str:
    """Camel case with a lower-case first letter."""
    s = to_hump(s)
    if not s:
        raise ValueError("cannot convert an empty name")
    return s[0].lower() + s[1:]


def to_upper_hump(s: str) -> str:
    """Camel case with an upper-case first letter."""
    s = to_hump(s)
    if not s:
        raise ValueError("cannot convert an empty name")
    return s[0].upper() + s[1:]


def variable_name(name: str, rule: str) -> str:
    """Name a variable after ``rule``: ``hump`` gives lower camel case, anything else snake case."""
    if rule == "hump":
        return to_lower_hump(name)
    return to_snake(name)


def unique(items: Iterable[T]) -> list[T]:
    """Drop repeated items, keeping the first occurrence of each in order."""
    return list(dict.fromkeys(items))


def is_exist_file(path: str | os.PathLike[str]) -> bool:
    """Whether ``path`` exists and is not a directory."""
    try:
        info = Path(path).stat()
    except FileNotFoundError:
        return False
    return not Path(path).is_dir() and info is not None


def is_exist_folder(path: str | os.PathLike[str]) -> bool:
    """Whether ``path`` exists and is a directory."""
    try:
        Path(path).stat()
    except FileNotFoundError:
        return False
    return Path(path).is_dir()


def auto_make_folder(path: str) -> None:
    """Create the directory of ``path``; a path with an extension is taken as a file."""
    slash, dot = path.rfind("/"), path.rfind(".")
    if slash < dot:
        if slash < 0:
            return
        path = path[:slash]
    if not path or is_exist_folder(path):
        return
    os.makedirs(path, exist_ok=True)


def write_code(path: str, code: str) -> None:
    """Write ``code`` to ``path``, creating its directory first."""
    auto_make_folder(path)
    Path(path).write_text(code, encoding="utf-8")


def gen_proto_grpc(work: str, path: str) -> None:
    """Run ``kratosx proto client`` on ``path`` relative to the ``work`` directory."""
    if path.startswith(work):
        path = path[len(work):]
    path = path.removeprefix("/")
    subprocess.run(["kratosx", "proto", "client", path], cwd=work, check=True)