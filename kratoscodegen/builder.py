"""Locations and naming shared by the code generators of one table."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .naming import to_snake
from .schema import NAME_RULE_HUMP, RELATION_TYPE_MANY, Table


def _module_path(content: str) -> str:
    for line in content.splitlines():
        line = line.strip()
        if not line.startswith("module"):
            continue
        rest = line[len("module"):]
        if rest and not rest[0].isspace():
            continue
        rest = rest.split("//", 1)[0].strip()
        if len(rest) >= 2 and rest[0] == rest[-1] and rest[0] in "\"`":
            rest = rest[1:-1]
        return rest
    return ""


def read_module(srv_root: str) -> str:
    """The module path of the service at ``srv_root``, or its directory name without a go.mod."""
    try:
        content = Path(srv_root, "go.mod").read_text(encoding="utf-8")
    except OSError:
        return srv_root.split("/")[-1]
    return _module_path(content)


@dataclass
class Builder:
    """Where generated code goes and how names are formed for one table."""

    table: Table
    module: str
    server: str
    srv_root: str
    tpl_root: str
    web_root: str
    name_rule: str = NAME_RULE_HUMP

    @classmethod
    def create(
        cls, table: Table, srv_root: str, tpl_root: str, web_root: str | None = None
    ) -> Builder:
        """Set up a builder for the service at ``srv_root``."""
        module = read_module(srv_root)
        return cls(
            table=table,
            module=module,
            server=module.split("/")[-1],
            srv_root=srv_root,
            tpl_root=tpl_root,
            web_root=srv_root if web_root is None else web_root,
        )

    @property
    def _module_file(self) -> str:
        return to_snake(self.table.module) + ".go"

    def proto_error_path(self) -> str:
        return f"{self.srv_root}/api/{self.server}/errors/{self.server}_error_reason.proto"

    def proto_error_tpl_path(self) -> str:
        return self.tpl_root + "/proto/error.tpl"

    def proto_message_path(self) -> str:
        filename = f"{self.server}_{to_snake(self.table.struct)}.proto"
        return f"{self.srv_root}/api/{self.server}/{self.table.module}/{filename}"

    def proto_message_tpl_path(self) -> str:
        return self.tpl_root + "/proto/message.tpl"

    def proto_service_path(self) -> str:
        filename = f"{self.server}_{to_snake(self.table.module)}_service.proto"
        return f"{self.srv_root}/api/{self.server}/{self.table.module}/{filename}"

    def proto_service_tpl_path(self) -> str:
        return self.tpl_root + "/proto/service.tpl"

    def go_types_path(self) -> str:
        return self.srv_root + "/internal/types/" + self._module_file

    def go_repo_path(self) -> str:
        return self.srv_root + "/internal/domain/repository/" + self._module_file

    def go_repo_tpl_path(self) -> str:
        return self.tpl_root + "/go/repo.tpl"

    def go_entity_path(self) -> str:
        return self.srv_root + "/internal/domain/entity/" + self._module_file

    def go_entity_tpl_path(self) -> str:
        return self.tpl_root + "/go/entity.tpl"

    def go_dbs_path(self) -> str:
        return self.srv_root + "/internal/infra/dbs/" + self._module_file

    def go_dbs_tpl_path(self) -> str:
        return self.tpl_root + "/go/dbs.tpl"

    def go_service_path(self) -> str:
        return self.srv_root + "/internal/domain/service/" + self._module_file

    def go_service_tpl_path(self) -> str:
        return self.tpl_root + "/go/service.tpl"

    def go_app_path(self) -> str:
        return self.srv_root + "/internal/app/" + self._module_file

    def go_app_tpl_path(self) -> str:
        return self.tpl_root + "/go/app.tpl"

    def go_app_entry_path(self) -> str:
        return self.srv_root + "/internal/app/entry.go"

    def go_app_entry_tpl_path(self) -> str:
        return self.tpl_root + "/go/entry.tpl"

    def is_relation_type_many(self, tp: str) -> bool:
        return tp == RELATION_TYPE_MANY

    def has_deleted_at(self) -> bool:
        """Whether the table has a soft-delete column."""
        return any(column.is_deleted_at() for column in self.table.columns)