"""Error definitions collected from annotated enum values."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .naming import to_hump

MAX_CODE = 600
DEFAULT_MESSAGE = "未知错误"


@dataclass
class EnumValueSpec:
    """An enum value together with its error annotations."""

    name: str
    code: int = 0
    message: str | None = None
    leading_comment: str = ""
    trailing_comment: str = ""


@dataclass
class ErrorInfo:
    """One error to be generated."""

    name: str
    value: str
    http_code: int
    camel_value: str
    comment: str
    message: str

    @property
    def has_comment(self) -> bool:
        return len(self.comment) > 0


def case_to_camel(name: str) -> str:
    """Turn an enum value name into CamelCase."""
    if "_" not in name:
        if name == name.upper():
            name = name.lower()
        return to_hump(name)
    words = []
    for word in name.split("_"):
        if not any(ch.islower() for ch in word):
            word = word.lower()
        words.append(to_hump(word))
    return "".join(words)


def _check_range(code: int, name: str) -> None:
    if code > MAX_CODE or code < 0:
        raise ValueError(
            f"Enum '{name}' range must be greater than 0 and less than or equal to {MAX_CODE}"
        )


def collect_errors(
    enum_name: str, values: Iterable[EnumValueSpec], default_code: int = 0
) -> list[ErrorInfo]:
    """Build the errors of an enum; values whose code resolves to 0 are left out."""
    _check_range(default_code, enum_name)
    errors: list[ErrorInfo] = []
    for value in values:
        code = value.code or default_code
        _check_range(code, value.name)
        if code == 0:
            continue
        comment = value.leading_comment or value.trailing_comment
        errors.append(
            ErrorInfo(
                name=enum_name,
                value=value.name,
                http_code=code,
                camel_value=case_to_camel(value.name),
                comment=comment,
                message=value.message if value.message is not None else DEFAULT_MESSAGE,
            )
        )
    return errors