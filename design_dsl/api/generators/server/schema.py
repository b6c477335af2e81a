"""
business-object-schema: SQLModel table plus Create/Update schemas.

Scalar properties (own and mixin-contributed) become columns carrying the
presentation metadata of their option bags. Associations become foreign key
columns and SQLModel relationships; has-many/has-one associations declared
on other entities add their foreign key columns here.
"""

import ast
import json
from dataclasses import dataclass

from design_dsl.api.generators.base import Generator, Trigger, server_entity
from design_dsl.api.registry import UnitKind
from design_dsl.api.resolvers import (
    BELONGS_TO,
    HAS_ONE,
    REFERENCES,
    effective_properties,
    resolve_identity,
    resolve_incoming_foreign_keys,
    resolve_relationships,
)
from design_dsl.api.synthesis import PythonModule
from design_dsl.api.synthesis.business_object import GENERATED_HEADER, ID_PYTHON_TYPES
from design_dsl.api.templating import template_env
from design_dsl.api.utils import python_type, python_type_import, snake_case

JSON_TYPES = ("Any", "dict[str, Any]")

COLUMN_OPTIONS = {
    "unique": "unique",
    "index": "index",
    "length": "max_length",
    "maxLength": "max_length",
    "nullable": "nullable",
}


@dataclass
class FieldSpec:
    name: str
    annotation: str
    optional_annotation: str
    arguments: str


def table_name(entity_name: str) -> str:
    return snake_case(entity_name)


def schema_path(unit) -> str:
    return f"server/app/schemas/{snake_case(unit.name)}.py"


def _literal(text: str):
    """Python value of a simple initializer (JSON or Python literal), or None."""
    try:
        return json.loads(text)
    except ValueError:
        pass
    try:
        return ast.literal_eval(text)
    except (ValueError, SyntaxError):
        return None


def _metadata(config) -> dict:
    extra = {}
    if config.hidden:
        extra["hidden"] = True
    if config.disabled:
        extra["disabled"] = True
    if config.placeholder:
        extra["placeholder"] = config.placeholder
    if config.present_as:
        extra["presentAs"] = config.present_as
    for key, rule in (
        ("requiredWhen", config.required_when),
        ("excludeWhen", config.exclude_when),
        ("disabledWhen", config.disabled_when),
    ):
        if rule is not None:
            extra[key] = rule.model_dump(exclude_none=True)
    return extra


def _field_arguments(prop, annotation: str, required: bool, imports: dict) -> str:
    config = prop.config
    args = []
    default = _literal(prop.initializer) if prop.initializer else None
    if default is not None:
        args.append(f"default={default!r}")
    elif not required:
        args.append("default=None")
    if config.display_name:
        args.append(f"title={config.display_name!r}")
    if config.help_text:
        args.append(f"description={config.help_text!r}")
    for key, value in config.column.items():
        if key in COLUMN_OPTIONS:
            args.append(f"{COLUMN_OPTIONS[key]}={value!r}")
    inner = annotation[5:-1] if annotation.startswith("list[") else annotation
    if inner in JSON_TYPES or annotation.startswith("list["):
        imports.setdefault("sqlalchemy", set()).add("JSON")
        args.append("sa_type=JSON")
    extra = _metadata(config)
    if extra:
        args.append(f"schema_extra={{'json_schema_extra': {extra!r}}}")
    return ", ".join(args)


def _foreign_key_field(name: str, key_type: str, target) -> FieldSpec:
    target_identity = resolve_identity(target)
    annotation = f"Optional[{ID_PYTHON_TYPES[key_type]}]"
    arguments = f"default=None, foreign_key={table_name(target.name) + '.' + target_identity.name!r}"
    return FieldSpec(name, annotation, annotation, arguments)


def generate_schema(unit, registry, ctx) -> str:
    identity = resolve_identity(unit, ctx)
    properties = effective_properties(unit, registry, ctx)
    relationships = resolve_relationships(unit, registry, ctx, properties=properties)
    related = {r.name for r in relationships}
    entity_names = registry.entity_names()

    module_fields = []
    imports = {}

    for prop in properties:
        if prop.name in related or prop.name == identity.name:
            continue
        annotation = python_type(prop.type.name, prop.type.array, entity_names)
        needed = python_type_import(annotation)
        if needed:
            imports.setdefault(needed[0], set()).add(needed[1])
        required = bool(prop.config.required) or not prop.optional
        field_annotation = annotation if required else f"Optional[{annotation}]"
        module_fields.append(
            FieldSpec(prop.name, field_annotation, f"Optional[{annotation}]", _field_arguments(prop, annotation, required, imports))
        )

    declared = {f.name for f in module_fields}
    relations = []
    for relationship in relationships:
        target = registry.get(UnitKind.ENTITY, relationship.target, referenced_by=unit.name)
        if relationship.kind in (BELONGS_TO, REFERENCES):
            if relationship.foreign_key not in declared:
                module_fields.append(
                    _foreign_key_field(relationship.foreign_key, relationship.foreign_key_type, target)
                )
                declared.add(relationship.foreign_key)
            kwargs = {"foreign_keys": f"[{unit.name}.{relationship.foreign_key}]"}
            if target.name == unit.name:
                kwargs["remote_side"] = f"{unit.name}.{identity.name}"
            relations.append({"name": relationship.name, "annotation": f'Optional["{target.name}"]', "kwargs": repr(kwargs)})
        else:
            kwargs = {"foreign_keys": f"[{target.name}.{relationship.foreign_key}]"}
            if relationship.kind == HAS_ONE:
                kwargs["uselist"] = False
                annotation = f'Optional["{target.name}"]'
            else:
                annotation = f'list["{target.name}"]'
            relations.append({"name": relationship.name, "annotation": annotation, "kwargs": repr(kwargs)})

    for incoming in resolve_incoming_foreign_keys(unit, registry, ctx, declared=declared):
        source = registry.get(UnitKind.ENTITY, incoming.source)
        module_fields.append(_foreign_key_field(incoming.name, incoming.type, source))

    if identity.type == "number":
        identity_spec = {"name": identity.name, "annotation": "Optional[int]", "arguments": "default=None, primary_key=True"}
    else:
        identity_spec = {"name": identity.name, "annotation": "Optional[str]", "arguments": "default=None, primary_key=True"}

    rendered = PythonModule.from_template(
        template_env("server"),
        "schema.py.jinja",
        name=unit.name,
        entity=unit.name,
        table=table_name(unit.name),
        fields=module_fields,
        identity=identity_spec,
        relations=relations,
    )
    rendered.get_class(unit.name)
    for module_name, names in sorted(imports.items()):
        rendered.merge_import(module_name, sorted(names))
    ctx.debug(f"{len(module_fields)} column(s), {len(relations)} relationship(s)")
    return rendered.render(header=GENERATED_HEADER)


SCHEMA_GENERATOR = Generator(
    name="business-object-schema",
    triggers=(Trigger(UnitKind.ENTITY, server_entity),),
    outputs=lambda unit: [schema_path(unit)],
    generate=generate_schema,
    description="SQLModel table and Create/Update schemas",
)
