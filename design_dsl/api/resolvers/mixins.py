"""Mixin composition for entities and components."""

from dataclasses import dataclass
from typing import Any

from design_dsl.api.errors import DesignError, UnitNotFoundError
from design_dsl.api.registry import UnitKind

from .behaviors import resolve_behaviors


@dataclass(frozen=True)
class MixinApplication:
    name: str
    unit: Any
    properties: tuple
    behaviors: tuple


def resolve_mixins(unit, registry, ctx=None) -> list[MixinApplication]:
    """Mixins applied to an entity or component, in declaration order."""
    if unit.kind not in (UnitKind.ENTITY, UnitKind.COMPONENT):
        raise DesignError(f"{unit.kind.value} '{unit.name}' cannot apply mixins.")

    applications = []
    for name in getattr(unit.node, "mixins", None) or []:
        mixin = registry.find(UnitKind.MIXIN, name)
        if mixin is None:
            raise UnitNotFoundError("Mixin", name, referenced_by=unit.name)
        applications.append(
            MixinApplication(
                name=mixin.name,
                unit=mixin,
                properties=tuple(mixin.node.properties),
                behaviors=tuple(resolve_behaviors(mixin, registry, ctx)),
            )
        )
        if ctx is not None:
            ctx.debug(f"mixin {mixin.name} applied to {unit.name}")
    return applications


def merge_properties(own, applications, ctx=None) -> list:
    """
    Effective property list of a unit.

    The owner's properties come first, then each mixin's in order. On a name
    collision the property keeps its first position and takes the value of
    the last application; every collision is reported as a warning.
    """
    merged = {}
    origin = {}
    for prop in own:
        merged[prop.name] = prop
        origin[prop.name] = "the owner"
    for application in applications:
        for prop in application.properties:
            if prop.name in merged and ctx is not None:
                ctx.warning(
                    f"property '{prop.name}' from mixin {application.name} "
                    f"overrides the one from {origin[prop.name]}"
                )
            merged[prop.name] = prop
            origin[prop.name] = f"mixin {application.name}"
    return list(merged.values())


def effective_properties(unit, registry, ctx=None) -> list:
    """Own plus mixin-contributed properties of an entity or component."""
    if not getattr(unit.node, "mixins", None):
        return list(unit.node.properties)
    return merge_properties(unit.node.properties, resolve_mixins(unit, registry, ctx), ctx)
