"""Identity property of an entity."""

from dataclasses import dataclass, field
from typing import Any

from design_dsl.api.utils import identity_type

AUTO_INCREMENT_TYPES = {"number", "integer", "serial"}


@dataclass(frozen=True)
class IdentityProperty:
    name: str
    type: str  # "number" or "string"
    auto_increment: bool
    column: dict[str, Any] = field(default_factory=dict)
    implicit: bool = False


def resolve_identity(unit, ctx=None) -> IdentityProperty:
    """
    Return the identity property of an entity.

    The property flagged `id` wins, else a property named `id`, else an
    implicit auto-incremented `id: number`.
    """
    properties = list(unit.node.properties)
    flagged = next((p for p in properties if p.config.id), None)
    prop = flagged or next((p for p in properties if p.name == "id"), None)

    if prop is None:
        if ctx is not None:
            ctx.debug(f"implicit identity 'id: number' for {unit.name}")
        return IdentityProperty("id", "number", True, implicit=True)

    kind = identity_type(prop.type.name) or "number"
    auto = (
        prop.type.name.lower() in AUTO_INCREMENT_TYPES
        and prop.config.column.get("autoIncrement", True) is not False
    )
    return IdentityProperty(prop.name, kind, auto, dict(prop.config.column))
