"""
Server business object synthesis.

The CRUD skeleton is rendered from business_object.py.jinja, then edited:
Instance and Class behaviors are added as methods and lifecycle behaviors
are spliced around the persistence call of their CRUD operations.
"""

import ast
import textwrap

from design_dsl.api.errors import DesignError
from design_dsl.api.resolvers import entity_behaviors, resolve_identity
from design_dsl.api.templating import template_env
from design_dsl.api.utils import python_type, snake_case

from .python_module import PythonModule

GENERATED_HEADER = "# Generated by ddsl. Changes will be overwritten."

# authors import business objects from this package name in behavior imports
BUSINESS_OBJECTS_PACKAGE = "business_objects"

# lifecycle type -> (target methods, splice position, aliases)
LIFECYCLE_SPLICES = {
    "Before Create": (("create", "create_many"), "before", {"model": "cls"}),
    "After Create": (("create", "create_many"), "after", {"model": "cls"}),
    "Before Update": (("update", "update_by_id"), "before", {"model": "cls"}),
    "After Update": (("update", "update_by_id"), "after", {"model": "cls"}),
    "Before Delete": (("delete", "delete_by_id"), "before", {"model": "cls"}),
    "After Delete": (("delete", "delete_by_id"), "after", {"model": "cls"}),
    "Before Read": (("find", "find_by_id"), "before", {"model": "cls"}),
    "After Read": (("find", "find_by_id"), "after", {"model": "cls"}),
}

ID_PYTHON_TYPES = {"number": "int", "string": "str"}


def behavior_params(behavior, entity_names, skip_first: bool = False) -> list[str]:
    """Parameter source text; optional parameters default to None."""
    params = list(behavior.parameters)[1:] if skip_first else list(behavior.parameters)
    rendered = []
    seen_optional = False
    for param in params:
        text = param.name
        if param.type:
            text += f": {python_type(param.type, param.array, entity_names)}"
        if param.optional:
            seen_optional = True
            text += " = None"
        elif seen_optional:
            raise DesignError(
                f"Behavior '{behavior.name}': required parameter '{param.name}' follows an optional one."
            )
        rendered.append(text)
    return rendered


def _import_nodes(source: str) -> list:
    if not source or not source.strip():
        return []
    return ast.parse(textwrap.dedent(source)).body


def imported_business_objects(source: str) -> list[str]:
    """Names an author imports block takes from the business_objects package."""
    names = []
    for node in _import_nodes(source):
        if isinstance(node, ast.ImportFrom) and node.module == BUSINESS_OBJECTS_PACKAGE:
            names.extend(alias.name for alias in node.names)
    return names


def server_imports(source: str) -> str:
    """An author imports block without its business_objects imports."""
    kept = [
        ast.unparse(node)
        for node in _import_nodes(source)
        if not (isinstance(node, ast.ImportFrom) and node.module == BUSINESS_OBJECTS_PACKAGE)
    ]
    return "\n".join(kept)


def business_object_import(name: str) -> str:
    return f"from app.business_objects.{snake_case(name)} import {name}"


def uses_imports(behavior, owner: str = None) -> list[str]:
    """
    Imports of the business objects a behavior body uses, named by `uses:`
    or imported from business_objects. Business objects emit them as
    function-local imports.
    """
    names = dict.fromkeys([*behavior.uses, *imported_business_objects(behavior.imports)])
    return [business_object_import(name) for name in names if name != owner]


def add_behavior_method(module: PythonModule, class_name: str, behavior, entity_names) -> None:
    returns = None
    if behavior.return_type:
        array = behavior.return_type.endswith("[]")
        name = behavior.return_type[:-2] if array else behavior.return_type
        returns = python_type(name, array, entity_names)

    prologue = uses_imports(behavior, class_name)
    if behavior.kind == "Instance":
        first = behavior.parameters[0].name if behavior.parameters else None
        if first:
            prologue.append(f"{first} = self")
        module.add_method(
            class_name,
            behavior.function_name,
            params=behavior_params(behavior, entity_names, skip_first=True),
            body=behavior.body,
            is_async=behavior.is_async,
            returns=returns,
            prologue=prologue,
        )
    else:
        module.add_method(
            class_name,
            behavior.function_name,
            params=behavior_params(behavior, entity_names),
            body=behavior.body,
            is_async=behavior.is_async,
            decorators=["classmethod"],
            returns=returns,
            prologue=prologue,
            receiver="cls",
        )


def splice_lifecycle(module: PythonModule, class_name: str, behavior) -> None:
    methods, position, aliases = LIFECYCLE_SPLICES[behavior.kind]
    for method in methods:
        body = "\n".join(uses_imports(behavior, class_name) + [behavior.body])
        module.splice(class_name, method, body, position, aliases)


def synthesize_business_object(unit, registry, data_source, ctx) -> str:
    """Render the business object module of an entity."""
    identity = resolve_identity(unit, ctx)
    module = PythonModule.from_template(
        template_env("server"),
        "business_object.py.jinja",
        name=unit.name,
        entity=unit.name,
        id_field=identity.name,
        id_type=ID_PYTHON_TYPES[identity.type],
        data_source_module=snake_case(data_source.name),
    )
    module.get_class(unit.name)

    entity_names = registry.entity_names()
    for behavior in entity_behaviors(unit, registry, ctx):
        module.add_import_source(server_imports(behavior.imports))
        if behavior.is_method:
            add_behavior_method(module, unit.name, behavior, entity_names)
            ctx.debug(f"{behavior.kind.lower()} method {behavior.function_name}")
        elif behavior.kind in LIFECYCLE_SPLICES:
            splice_lifecycle(module, unit.name, behavior)
            ctx.debug(f"{behavior.kind} spliced from {behavior.name}")

    return module.render(header=GENERATED_HEADER)
