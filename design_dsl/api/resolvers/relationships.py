"""
Relationship resolution between entities.

Relationships are derived from property types: a property typed with an
entity name is an association, an array of an entity is a has-many. The
target is kept as a name and looked up in the registry when needed.
"""

import re
from dataclasses import dataclass
from typing import Optional

from design_dsl.api.errors import DesignError, UnitNotFoundError
from design_dsl.api.registry import UnitKind
from design_dsl.api.utils import is_scalar, lower_first

from .identity import resolve_identity

BELONGS_TO = "Belongs To"
HAS_MANY = "Has Many"
HAS_ONE = "Has One"
REFERENCES = "References"

# kinds whose foreign key is a column of the owner
OWNER_SIDE = (BELONGS_TO, REFERENCES)

_UNIT_TYPE_NAME = re.compile(r"^[A-Z]\w*$")


@dataclass(frozen=True)
class Relationship:
    kind: str
    name: str
    foreign_key: str
    foreign_key_type: str
    target: str
    optional: bool = False

    @property
    def is_owner_side(self) -> bool:
        return self.kind in OWNER_SIDE


@dataclass(frozen=True)
class IncomingForeignKey:
    """A column another entity's has-many/has-one expects on this entity."""

    name: str
    type: str
    source: str
    relationship: str


def _relationship_kind(prop) -> str:
    if prop.type.array:
        return HAS_MANY
    if prop.config.references:
        return REFERENCES
    if prop.config.has_one:
        return HAS_ONE
    return BELONGS_TO


def resolve_relationships(unit, registry, ctx=None, properties=None) -> list[Relationship]:
    """
    Compute the associations of an entity, in property declaration order.

    `properties` defaults to the entity's own properties; callers that work
    on the mixin-merged list pass that instead.
    """
    owner_identity = None
    relationships = []
    seen_keys = {}

    for prop in properties if properties is not None else unit.node.properties:
        type_name = prop.type.name
        target = registry.find(UnitKind.ENTITY, type_name)

        if target is None:
            if prop.config.association_markers or (
                not is_scalar(type_name) and _UNIT_TYPE_NAME.match(type_name)
            ):
                raise UnitNotFoundError("Entity", type_name, referenced_by=f"{unit.name}.{prop.name}")
            continue

        kind = _relationship_kind(prop)
        if kind in OWNER_SIDE:
            fk = prop.config.foreign_key or f"{prop.name}Id"
            fk_type = resolve_identity(target).type
            holder = unit.name
        else:
            if owner_identity is None:
                owner_identity = resolve_identity(unit)
            fk = prop.config.foreign_key or f"{lower_first(unit.name)}Id"
            fk_type = owner_identity.type
            holder = target.name

        previous = seen_keys.get((holder, fk))
        if previous is not None:
            raise DesignError(
                f"Entity '{unit.name}': foreign key '{fk}' is used by both "
                f"'{previous}' and '{prop.name}'."
            )
        seen_keys[(holder, fk)] = prop.name

        relationship = Relationship(kind, prop.name, fk, fk_type, target.name, bool(prop.optional))
        if ctx is not None:
            ctx.debug(f"{kind} {unit.name}.{prop.name} -> {target.name} via {fk}: {fk_type}")
        relationships.append(relationship)

    return relationships


def find_relationship(unit, registry, name: str) -> Optional[Relationship]:
    return next((r for r in resolve_relationships(unit, registry) if r.name == name), None)


def resolve_incoming_foreign_keys(unit, registry, ctx=None, declared=()) -> list[IncomingForeignKey]:
    """
    Foreign keys other entities' has-many/has-one associations put on `unit`.

    Keys named in `declared` (the unit's own columns) are left out, and each
    key appears once even when several associations share it.
    """
    taken = set(declared) | {p.name for p in unit.node.properties}
    incoming = []
    for source in registry.list(UnitKind.ENTITY):
        # Only entities with a property typed `unit` can put a key on it.
        if not any(p.type.name == unit.name for p in source.node.properties):
            continue
        for relationship in resolve_relationships(source, registry):
            if relationship.is_owner_side or relationship.target != unit.name:
                continue
            if relationship.foreign_key in taken:
                continue
            taken.add(relationship.foreign_key)
            incoming.append(
                IncomingForeignKey(
                    relationship.foreign_key,
                    relationship.foreign_key_type,
                    source.name,
                    relationship.name,
                )
            )
            if ctx is not None:
                ctx.debug(f"incoming key {unit.name}.{relationship.foreign_key} from {source.name}.{relationship.name}")
    return incoming
