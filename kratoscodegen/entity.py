"""Go entity structs built from a table description."""

from __future__ import annotations

from dataclasses import dataclass

from .builder import Builder
from .naming import to_pluralize, to_snake, to_upper_hump, variable_name
from .schema import RELATION_TYPE_ONE, TABLE_TYPE_TREE, Relation, Table

_BASE_COLUMNS = frozenset({"id", "created_at", "updated_at", "deleted_at"})

_BASE_MODELS = {
    1: "Id  uint32 `json:\"id\" gorm:\"primaryKey;autoIncrement\"` // 主键ID",
    2: "types.CreateModel",
    3: "types.BaseModel",
    4: "types.DeleteModel",
}


def _related_table(relation: Relation) -> Table:
    if relation.table is None:
        raise ValueError(f"relation on column {relation.column!r} has no table")
    return relation.table


@dataclass
class EntityGenerator:
    """Generates the entity struct of one table."""

    builder: Builder

    def _name(self, name: str) -> str:
        return variable_name(name, self.builder.name_rule)

    def gen_entity_struct(self, table: Table) -> dict[str, str]:
        """Map the struct name of ``table`` to the body of its Go struct."""
        fields: list[str] = []
        relations: list[str] = []
        count = 0
        for column in table.columns:
            opt = "*" if column.is_proto_option() else ""
            if column.name in _BASE_COLUMNS:
                count += 1
                continue
            fields.append(
                f"\t{to_upper_hump(column.name)} {opt}{column.go_type()} "
                f"`gorm:\"column:{to_snake(column.name)}\" json:\"{self._name(column.name)}\"` "
                f"//{column.comment}"
            )
            for item in column.relations:
                obj = _related_table(item)
                obj_struct = to_upper_hump(obj.name)
                gorm = f"foreignKey:{to_snake(item.column)};references:{to_snake(column.name)}"
                if item.type == RELATION_TYPE_ONE:
                    relations.append(
                        f"\t{obj_struct} *{obj_struct} "
                        f"`gorm:\"{gorm}\" json:\"{self._name(obj.name)}\"` // {obj.comment}"
                    )
                else:
                    relations.append(
                        f"\t{to_pluralize(obj_struct)} []*{obj_struct} "
                        f"`gorm:\"{gorm}\" json:\"{to_pluralize(self._name(obj.name))}\"` "
                        f"// {obj.comment}"
                    )
        fields.extend(relations)
        if table.type == TABLE_TYPE_TREE:
            fields.append(
                f"\tChildren []*{to_upper_hump(table.struct)} `gorm:\"-\" json:\"children\"` // 子节点"
            )
        base = _BASE_MODELS.get(count)
        if base is not None:
            fields.insert(0, base)
        return {to_upper_hump(table.struct): "\n".join(fields)}

    def render_entities(self, entities: dict[str, str]) -> str:
        """Go struct declarations for the given entity bodies."""
        return "\n\n".join(
            f"type {name} struct {{\n{body}\n}}" for name, body in entities.items()
        )