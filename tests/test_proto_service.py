from pathlib import Path

import pytest

from kratoscodegen.builder import Builder
from kratoscodegen.proto_service import ServiceCode, ServiceGenerator, parse_service_content
from kratoscodegen.schema import Column, Table

PROTO = """syntax = "proto3";

package demo.api.demo.user.v1;

option go_package = "./v1;v1";
option java_multiple_files = true;

import "google/api/annotations.proto"; // http rules
import "api/demo/user/demo_user.proto";

service User{

  // GetUser 获取用户
  rpc GetUser (GetUserRequest) returns (GetUserReply) {
    option (google.api.http) = {
      get: "/demo/api/v1/user",
    };
  }

  rpc ListTrashUser (ListTrashUserRequest) returns (ListTrashUserReply) {
    option (google.api.http) = {
      get: "/demo/api/v1/user/trash",
    };
  }
}
"""


def _generator(tmp_path: Path, columns=None) -> ServiceGenerator:
    builder = Builder(
        table=Table(module="User", struct="user", columns=columns or []),
        module="demo",
        server="demo",
        srv_root=str(tmp_path),
        tpl_root=str(tmp_path / "tpl"),
        web_root=str(tmp_path),
    )
    return ServiceGenerator(builder)


def test_parse_service_content_header():
    code = parse_service_content(PROTO)
    assert code.pkg == "demo.api.demo.user.v1"
    assert code.options == [
        'option go_package = "./v1;v1"',
        "option java_multiple_files = true",
    ]
    assert code.imports == [
        'import "google/api/annotations.proto"',
        'import "api/demo/user/demo_user.proto"',
    ]


def test_parse_service_content_rpcs():
    code = parse_service_content(PROTO)
    assert code.sort == ["GetUser", "ListTrashUser"]
    assert code.bucket["GetUser"].startswith("  // GetUser 获取用户\n  rpc GetUser")
    assert code.bucket["GetUser"].endswith("}\n")


def test_parse_service_content_without_service():
    with pytest.raises(ValueError):
        parse_service_content('syntax = "proto3";\npackage a;\n')


def test_package_name_and_java_class(tmp_path):
    gen = _generator(tmp_path)
    assert gen.package_name() == "demo.api.demo.user.v1"
    assert gen.java_class() == "UserV1"


def test_scan_service_without_file(tmp_path):
    assert _generator(tmp_path).scan_service() == ServiceCode()


def test_scan_service_reads_file(tmp_path):
    gen = _generator(tmp_path)
    path = Path(gen.builder.proto_service_path())
    path.parent.mkdir(parents=True)
    path.write_text(PROTO, encoding="utf-8")
    assert gen.scan_service() == parse_service_content(PROTO)


def test_merge_prefers_made_and_dedups(tmp_path):
    gen = _generator(tmp_path)
    made = ServiceCode(pkg="new", options=["o1"], imports=["i1"], sort=["A", "B"],
                       bucket={"A": "newA", "B": "newB"})
    scanned = ServiceCode(pkg="old", options=["o1", "o2"], imports=["i2"], sort=["B", "C"],
                          bucket={"B": "oldB", "C": "oldC"})
    merged = gen.merge(made, scanned)
    assert merged.pkg == "new"
    assert merged.sort == ["A", "B", "C"]
    assert merged.options == ["o1", "o2"]
    assert merged.imports == ["i1", "i2"]
    assert merged.bucket == {"A": "newA", "B": "newB", "C": "oldC"}


def test_render_service_drops_trash_without_deleted_at(tmp_path):
    gen = _generator(tmp_path)
    data = ServiceCode(pkg="p", options=["option x = 1"], imports=['import "a.proto"'],
                       sort=["A", "ListTrashA"], bucket={"A": "  rpc A\n", "ListTrashA": "  rpc T\n"})
    result = gen.render_service(data)
    assert result == (
        'syntax = "proto3";\n\npackage p;\n\noption x = 1;\n\nimport "a.proto";\n\n'
        "service User{\n\n  rpc A\n\n}"
    )


def test_render_service_keeps_trash_with_deleted_at(tmp_path):
    gen = _generator(tmp_path, columns=[Column(name="deleted_at")])
    data = ServiceCode(pkg="p", sort=["ListTrashA"], bucket={"ListTrashA": "  rpc T\n"})
    assert "  rpc T\n" in gen.render_service(data)


def test_render_parse_round_trip(tmp_path):
    gen = _generator(tmp_path, columns=[Column(name="deleted_at")])
    code = parse_service_content(PROTO)
    reparsed = parse_service_content(gen.render_service(code))
    assert reparsed.sort == code.sort
    assert reparsed.pkg == code.pkg
    assert reparsed.options == code.options
    assert reparsed.imports == code.imports