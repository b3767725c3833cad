import pytest

from kratoscodegen.errorsgen import EnumValueSpec, case_to_camel, collect_errors


@pytest.mark.parametrize(
    "name, expected",
    [
        ("SYSTEM_ERROR", "SystemError"),
        ("System_Error", "SystemError"),
        ("system_error", "SystemError"),
        ("System_error", "SystemError"),
        ("UNKNOWN", "Unknown"),
        ("SystemError", "SystemError"),
        ("systemError", "SystemError"),
        ("system", "System"),
    ],
)
def test_case_to_camel(name, expected):
    assert case_to_camel(name) == expected


def test_default_code_applies():
    errors = collect_errors("ErrorReason", [EnumValueSpec("SYSTEM_ERROR")], default_code=500)
    assert len(errors) == 1
    err = errors[0]
    assert err.http_code == 500
    assert err.name == "ErrorReason"
    assert err.value == "SYSTEM_ERROR"
    assert err.camel_value == "SystemError"
    assert err.message == "未知错误"


def test_value_code_overrides_default():
    errors = collect_errors("E", [EnumValueSpec("NOT_FOUND", code=404, message="missing")], 500)
    assert errors[0].http_code == 404
    assert errors[0].message == "missing"


def test_zero_codes_are_skipped():
    assert collect_errors("E", [EnumValueSpec("A"), EnumValueSpec("B")]) == []


def test_comment_falls_back_to_trailing():
    errors = collect_errors("E", [EnumValueSpec("A", code=400, trailing_comment="// tail\n")])
    assert errors[0].comment == "// tail\n"
    assert errors[0].has_comment is True
    errors = collect_errors("E", [EnumValueSpec("A", code=400)])
    assert errors[0].has_comment is False


@pytest.mark.parametrize("code", [601, -1])
def test_default_code_out_of_range(code):
    with pytest.raises(ValueError, match="Enum 'E'"):
        collect_errors("E", [], default_code=code)


def test_value_code_out_of_range():
    with pytest.raises(ValueError, match="Enum 'BAD'"):
        collect_errors("E", [EnumValueSpec("BAD", code=700)])