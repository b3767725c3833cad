import subprocess
from unittest import mock

import pytest

from kratoscodegen import naming


@pytest.mark.parametrize("word", ["day", "key", "boy", "guy"])
def test_pluralize_vowel_y(word):
    assert naming.to_pluralize(word) == word + "s"


@pytest.mark.parametrize("word", ["category", "city", "party"])
def test_pluralize_consonant_y(word):
    result = naming.to_pluralize(word)
    assert result.endswith("ies")
    assert result[:-3] == word[:-1]


@pytest.mark.parametrize("word", ["box", "bus", "quiz", "hero", "match", "wish"])
def test_pluralize_es(word):
    assert naming.to_pluralize(word) == word + "es"


def test_pluralize_plain_h_and_default():
    assert naming.to_pluralize("month") == "month" + "s"
    assert naming.to_pluralize("user") == "user" + "s"


def test_pluralize_f_endings():
    assert naming.to_pluralize("staff").endswith("ves")
    assert naming.to_pluralize("staff")[:-3] == "sta"
    assert naming.to_pluralize("leaf")[:-3] == "lea"


@pytest.mark.parametrize("word", ["", "a"])
def test_pluralize_too_short(word):
    with pytest.raises(ValueError):
        naming.to_pluralize(word)


def test_snake_known_value():
    assert naming.to_snake("UserName") == "user_name"


@pytest.mark.parametrize("name", ["user_name", "created_at", "id", "role_menu_id"])
def test_snake_hump_round_trip(name):
    assert naming.to_snake(naming.to_upper_hump(name)) == name
    assert naming.to_snake(naming.to_lower_hump(name)) == name


def test_snake_is_lower_case():
    result = naming.to_snake("HTTPServerName")
    assert result == result.lower()
    assert not result.startswith("_")


def test_hump_known_value():
    assert naming.to_hump("user_name") == "UserName"


def test_hump_keeps_inner_capitals():
    assert naming.to_hump("orderBy") == "OrderBy"


def test_lower_and_upper_hump():
    lower = naming.to_lower_hump("page_size")
    upper = naming.to_upper_hump("page_size")
    assert lower[0].islower()
    assert upper[0].isupper()
    assert lower[1:] == upper[1:]


def test_hump_of_empty_raises():
    with pytest.raises(ValueError):
        naming.to_lower_hump("")
    with pytest.raises(ValueError):
        naming.to_upper_hump("")


def test_variable_name_rules():
    assert naming.variable_name("PageSize", "hump") == naming.to_lower_hump("PageSize")
    assert naming.variable_name("PageSize", "snake") == naming.to_snake("PageSize")


def test_unique_keeps_first_occurrence_order():
    items = [3, 1, 3, 2, 1, 2]
    result = naming.unique(items)
    assert len(result) == len(set(items))
    assert result == sorted(set(items), key=items.index)


def test_unique_empty():
    assert naming.unique([]) == []


def test_exist_file_and_folder(tmp_path):
    file = tmp_path / "a.txt"
    file.write_text("x")
    assert naming.is_exist_file(file) is True
    assert naming.is_exist_folder(file) is False
    assert naming.is_exist_file(tmp_path) is False
    assert naming.is_exist_folder(tmp_path) is True
    assert naming.is_exist_file(tmp_path / "missing") is False
    assert naming.is_exist_folder(tmp_path / "missing") is False


def test_auto_make_folder_for_file_path(tmp_path):
    target = tmp_path / "one" / "two" / "file.go"
    naming.auto_make_folder(str(target))
    assert (tmp_path / "one" / "two").is_dir()
    assert not target.exists()


def test_auto_make_folder_for_dir_path(tmp_path):
    target = tmp_path / "dir" / "sub"
    naming.auto_make_folder(str(target))
    assert target.is_dir()


def test_write_code_round_trip(tmp_path):
    target = tmp_path / "api" / "x" / "code.proto"
    naming.write_code(str(target), "syntax = \"proto3\";\n")
    assert target.read_text(encoding="utf-8") == "syntax = \"proto3\";\n"


def test_gen_proto_grpc_runs_command(tmp_path):
    work = str(tmp_path)
    with mock.patch("subprocess.run") as run:
        naming.gen_proto_grpc(work, work + "/api/x.proto")
    run.assert_called_once_with(
        ["kratosx", "proto", "client", "api/x.proto"], cwd=work, check=True
    )


def test_gen_proto_grpc_failure_raises(tmp_path):
    error = subprocess.CalledProcessError(1, ["kratosx"])
    with mock.patch("subprocess.run", side_effect=error):
        with pytest.raises(subprocess.CalledProcessError):
            naming.gen_proto_grpc(str(tmp_path), "api/x.proto")