"""
Behaviors attached to entities, mixins and projects.

A behavior names its parent (`Behavior Approve on Supplier`). Instance and
Class behaviors become callable methods of the generated business object;
lifecycle behaviors are spliced into the CRUD operation of their stage.
After Start and App behaviors attach to the project.
"""

from dataclasses import dataclass, field
from typing import Optional

from design_dsl.api.registry import UnitKind

INSTANCE = "Instance"
CLASS = "Class"
AFTER_START = "After Start"
APP = "App"

LIFECYCLE_TYPES = (
    "Before Create",
    "After Create",
    "Before Update",
    "After Update",
    "Before Delete",
    "After Delete",
    "Before Read",
    "After Read",
    AFTER_START,
)

PROJECT_TYPES = (AFTER_START, APP)

DEFAULT_HTTP_METHOD = "Post"


@dataclass(frozen=True)
class BehaviorParameter:
    name: str
    type: Optional[str] = None
    array: bool = False
    optional: bool = False


@dataclass(frozen=True)
class Behavior:
    name: str
    parent: str
    kind: str
    function_name: str
    http_method: str = DEFAULT_HTTP_METHOD
    parameters: tuple = ()
    return_type: Optional[str] = None
    is_async: bool = False
    body: str = ""
    imports: str = ""
    uses: tuple = field(default_factory=tuple)

    @property
    def is_lifecycle(self) -> bool:
        return self.kind in LIFECYCLE_TYPES

    @property
    def is_method(self) -> bool:
        return self.kind in (INSTANCE, CLASS)

    @property
    def stage(self) -> Optional[str]:
        """'Create', 'Update', 'Delete' or 'Read' for lifecycle behaviors."""
        if self.kind in LIFECYCLE_TYPES and self.kind != AFTER_START:
            return self.kind.split(" ", 1)[1]
        return None

    @property
    def timing(self) -> Optional[str]:
        """'Before' or 'After' for lifecycle behaviors."""
        if self.kind in LIFECYCLE_TYPES and self.kind != AFTER_START:
            return self.kind.split(" ", 1)[0]
        return None


def behavior_from_node(node) -> Behavior:
    function = node.function
    params = tuple(
        BehaviorParameter(
            p.name,
            p.type.name if p.type else None,
            bool(p.type and p.type.array),
            bool(p.optional),
        )
        for p in function.params
    )
    return_type = None
    if function.returnType:
        return_type = function.returnType.name + ("[]" if function.returnType.array else "")
    return Behavior(
        name=node.name,
        parent=node.owner,
        kind=node.type,
        function_name=function.name,
        http_method=node.httpMethod or DEFAULT_HTTP_METHOD,
        parameters=params,
        return_type=return_type,
        is_async=bool(function.isAsync),
        body=function.body,
        imports=node.imports or "",
        uses=tuple(node.uses),
    )


def resolve_behaviors(unit, registry, ctx=None) -> list[Behavior]:
    """
    Behaviors whose parent is `unit`, in declaration order.

    Behaviors without a type or a function cannot be generated; they are
    reported as warnings and skipped. Project-level types only attach to a
    project and the other types never do.
    """
    on_project = unit.kind is UnitKind.PROJECT
    behaviors = []
    for candidate in registry.list(UnitKind.BEHAVIOR):
        node = candidate.node
        if node.owner != unit.name:
            continue
        if not node.type:
            _skip(ctx, f"behavior {node.name} on {unit.name} has no type; skipped")
            continue
        if node.function is None:
            _skip(ctx, f"behavior {node.name} on {unit.name} has no function; skipped")
            continue
        if (node.type in PROJECT_TYPES) != on_project:
            where = "a project" if node.type in PROJECT_TYPES else "an entity or mixin"
            _skip(ctx, f"{node.type} behavior {node.name} must be attached to {where}; skipped")
            continue
        behaviors.append(behavior_from_node(node))
    return behaviors


def entity_behaviors(unit, registry, ctx=None) -> list[Behavior]:
    """Behaviors of an entity followed by those of its mixins."""
    behaviors = resolve_behaviors(unit, registry, ctx)
    for name in unit.node.mixins or []:
        mixin = registry.find(UnitKind.MIXIN, name)
        if mixin is not None:
            behaviors.extend(resolve_behaviors(mixin, registry, ctx))
    return behaviors


def orphan_behaviors(registry) -> list:
    """Behavior units whose parent is not an entity, mixin or project."""
    parents = (UnitKind.ENTITY, UnitKind.MIXIN, UnitKind.PROJECT)
    return [
        b for b in registry.list(UnitKind.BEHAVIOR)
        if not any(registry.has(kind, b.node.owner) for kind in parents)
    ]


def _skip(ctx, message: str) -> None:
    if ctx is not None:
        ctx.warning(message)
