"""
business-object-form-group: typed Angular form classes of an entity.

For every entity the client gets `<Name>FormGroup` (one record),
`<Name>FormArray` (editable records) and `<Name>PersistedArray` (read-only
records), all built on the persisted-form-group base. Scalar properties,
mixin properties included, and owner-side foreign keys become form
controls. Relationships become nested form groups or arrays, created when
loaded data carries them so that self-references never recurse.
"""

from design_dsl.api.generators.base import Generator, Trigger, not_library
from design_dsl.api.registry import UnitKind
from design_dsl.api.resolvers import (
    HAS_MANY,
    effective_properties,
    resolve_identity,
    resolve_relationships,
)
from design_dsl.api.synthesis import TsClass, TsMethod, TsProperty, TsSourceFile
from design_dsl.api.synthesis.typescript import ts_object, ts_string
from design_dsl.api.utils import is_scalar, kebab_case, typescript_type

from .business_object import BUSINESS_OBJECTS_DIR

PERSISTED_FORM_GROUP_MODULE = "./persisted-form-group"


def form_group_module(entity_name: str) -> str:
    return f"{kebab_case(entity_name)}-form-group"


def form_group_path(unit) -> str:
    return f"{BUSINESS_OBJECTS_DIR}/{form_group_module(unit.name)}.ts"


def _control(value_type: str, required: bool = False) -> str:
    validators = ", [Validators.required]" if required else ""
    return f"new FormControl<{value_type} | null>(null{validators})"


def _relation_class(relationship) -> str:
    suffix = "FormArray" if relationship.kind == HAS_MANY else "FormGroup"
    return f"{relationship.target}{suffix}"


def form_controls(unit, registry, ctx=None) -> tuple:
    """
    (controls, relationships) of an entity's form group.

    `controls` maps each scalar control name to its `FormControl` initializer:
    the identity first, then own and mixin properties in declaration order,
    then owner-side foreign keys.
    """
    identity = resolve_identity(unit, ctx)
    properties = effective_properties(unit, registry, ctx)
    relationships = resolve_relationships(unit, registry, ctx, properties=properties)
    skipped = {r.name for r in relationships} | {r.foreign_key for r in relationships if r.is_owner_side}

    controls = {identity.name: _control(identity.type)}
    for prop in properties:
        if prop.name in controls or prop.name in skipped:
            continue
        value_type = typescript_type(prop.type.name, prop.type.array) if is_scalar(prop.type.name) else "any"
        controls[prop.name] = _control(value_type, bool(prop.config.required) and not prop.optional)
    for relationship in relationships:
        if relationship.is_owner_side and relationship.foreign_key not in controls:
            controls[relationship.foreign_key] = _control(relationship.foreign_key_type)
    return controls, relationships


def generate_form_group(unit, registry, ctx) -> str:
    name = unit.name
    identity = resolve_identity(unit, ctx)
    controls, relationships = form_controls(unit, registry, ctx)
    id_field = ts_string(identity.name)

    source = TsSourceFile(f"{name}FormGroup")
    source.add_import("@angular/forms", "FormControl")
    if any("Validators.required" in control for control in controls.values()):
        source.add_import("@angular/forms", "Validators")
    source.add_import(
        PERSISTED_FORM_GROUP_MODULE,
        "PersistedArray",
        "PersistedArrayOptions",
        "PersistedFormArray",
        "PersistedFormArrayOptions",
        "PersistedFormGroup",
        "PersistedFormGroupOptions",
    )
    source.add_import(f"./{kebab_case(name)}", name)
    for relationship in sorted(relationships, key=lambda r: r.target):
        if relationship.target != name:
            source.add_import(f"./{form_group_module(relationship.target)}", _relation_class(relationship))

    declared = [f"  {control}: FormControl;" for control in controls]
    declared += [f"  {r.name}?: {_relation_class(r)};" for r in relationships]
    factories = {r.name: f"() => new {_relation_class(r)}()" for r in relationships}

    group = TsClass(f"{name}FormGroup", extends="PersistedFormGroup")
    group.add_member(TsProperty("controls", "{\n" + "\n".join(declared) + "\n}", modifiers=["declare"]))
    group.add_member(TsProperty("value", f"Partial<{name}>", modifiers=["declare"]))
    group.add_member(TsMethod(
        "constructor",
        ["options?: PersistedFormGroupOptions"],
        body=(
            "super(\n"
            f"  {ts_object(controls, level=1)},\n"
            f"  {name},\n"
            f"  {ts_object(factories, level=1)},\n"
            "  options,\n"
            f"  {id_field},\n"
            ");"
        ),
    ))

    array = TsClass(f"{name}FormArray", extends=f"PersistedFormArray<{name}FormGroup>")
    array.add_member(TsMethod(
        "constructor",
        ["options?: PersistedFormArrayOptions"],
        body=f"super(() => new {name}FormGroup(), {name}, options, {id_field});",
    ))

    persisted = TsClass(f"{name}PersistedArray", extends=f"PersistedArray<{name}>")
    persisted.add_member(TsMethod(
        "constructor",
        ["options?: PersistedArrayOptions"],
        body=f"super({name}, options, {id_field});",
    ))

    source.classes.extend([group, array, persisted])
    ctx.debug(f"{len(controls)} control(s), {len(relationships)} nested relation(s)")
    return source.render()


BUSINESS_OBJECT_FORM_GROUP_GENERATOR = Generator(
    name="business-object-form-group",
    triggers=(Trigger(UnitKind.ENTITY, not_library),),
    outputs=lambda unit: [form_group_path(unit)],
    generate=generate_form_group,
    target="client",
    description="Typed form group, form array and persisted array of an entity",
)
