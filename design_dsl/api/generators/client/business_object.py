"""
business-object-client: TypeScript class of an entity for the client.

The class extends BusinessObjectBase with static CRUD calls against the
generated routes and one stub per Instance or Class behavior, posting to
the behavior's endpoint.
"""

from design_dsl.api.generators.base import Generator, Trigger, not_library
from design_dsl.api.registry import UnitKind
from design_dsl.api.resolvers import (
    BELONGS_TO,
    HAS_MANY,
    REFERENCES,
    effective_properties,
    entity_behaviors,
    resolve_identity,
    resolve_relationships,
)
from design_dsl.api.synthesis import TsClass, TsMethod, TsProperty, TsSourceFile
from design_dsl.api.synthesis.typescript import ts_string
from design_dsl.api.utils import collection_path, kebab_case, typescript_type

BUSINESS_OBJECTS_DIR = "client/src/app/business-objects"

# behavior verb -> (BusinessObjectBase helper, arguments travel as query params)
HTTP_HELPERS = {
    "Post": ("post", False),
    "Put": ("put", False),
    "Patch": ("patch", False),
    "Get": ("get", True),
    "Delete": ("del", True),
}


def client_business_object_path(unit) -> str:
    return f"{BUSINESS_OBJECTS_DIR}/{kebab_case(unit.name)}.ts"


def _data_interface(unit, registry, ctx, source: TsSourceFile, identity) -> str:
    properties = effective_properties(unit, registry, ctx)
    relationships = resolve_relationships(unit, registry, ctx, properties=properties)
    related = {r.name: r for r in relationships}
    lines = [f"export interface {unit.name}Data {{", f"  readonly {identity.name}: {identity.type};"]
    declared = {identity.name}

    for prop in properties:
        if prop.name in declared or prop.name in related:
            continue
        optional = "?" if prop.optional or not prop.config.required else ""
        lines.append(f"  {prop.name}{optional}: {typescript_type(prop.type.name, prop.type.array)};")
        declared.add(prop.name)

    for relationship in relationships:
        if relationship.kind in (BELONGS_TO, REFERENCES) and relationship.foreign_key not in declared:
            lines.append(f"  {relationship.foreign_key}?: {relationship.foreign_key_type};")
            declared.add(relationship.foreign_key)
        suffix = "[]" if relationship.kind == HAS_MANY else ""
        lines.append(f"  {relationship.name}?: {relationship.target}{suffix};")
        if relationship.target != unit.name:
            source.add_import(f"./{kebab_case(relationship.target)}", relationship.target)

    lines.append("}")
    return "\n".join(lines)


def _crud_methods(name: str, id_type: str) -> list:
    data = f"{name}Data"
    return [
        TsMethod(
            "find",
            ["filter?: QueryFilter"],
            f"Promise<{name}[]>",
            f"const results = await this.get<{data}[]>(this.collectionUrl(), this.filterParams(filter));\n"
            f"return results.map((item) => new {name}(item));",
            is_async=True,
            modifiers=["static"],
        ),
        TsMethod(
            "findOne",
            ["filter?: QueryFilter"],
            f"Promise<{name} | undefined>",
            f"const results = await {name}.find({{ ...filter, limit: 1 }});\nreturn results[0];",
            is_async=True,
            modifiers=["static"],
        ),
        TsMethod(
            "findById",
            [f"id: {id_type}", "filter?: QueryFilter"],
            f"Promise<{name}>",
            f"const item = await this.get<{data}>(`${{this.collectionUrl()}}/${{id}}`, this.filterParams(filter));\n"
            f"return new {name}(item);",
            is_async=True,
            modifiers=["static"],
        ),
        TsMethod(
            "create",
            [f"data: Partial<{data}>"],
            f"Promise<{name}>",
            f"const item = await this.post<{data}>(this.collectionUrl(), data);\nreturn new {name}(item);",
            is_async=True,
            modifiers=["static"],
        ),
        TsMethod(
            "updateById",
            [f"id: {id_type}", f"data: Partial<{data}>"],
            f"Promise<{name}>",
            f"const item = await this.patch<{data}>(`${{this.collectionUrl()}}/${{id}}`, data);\n"
            f"return new {name}(item);",
            is_async=True,
            modifiers=["static"],
        ),
        TsMethod(
            "deleteById",
            [f"id: {id_type}"],
            "Promise<boolean>",
            "try {\n"
            "  await this.del<void>(`${this.collectionUrl()}/${id}`);\n"
            "  return true;\n"
            "} catch {\n"
            "  return false;\n"
            "}",
            is_async=True,
            modifiers=["static"],
        ),
    ]


def _return_type(behavior) -> str:
    if not behavior.return_type:
        return "any"
    if behavior.return_type.endswith("[]"):
        return typescript_type(behavior.return_type[:-2], True)
    return typescript_type(behavior.return_type)


def _behavior_stub(unit, behavior, identity) -> TsMethod:
    instance = behavior.kind == "Instance"
    params = list(behavior.parameters)[1:] if instance else list(behavior.parameters)
    rendered = [
        f"{p.name}{'?' if p.optional else ''}: {typescript_type(p.type, p.array) if p.type else 'any'}"
        for p in params
    ]
    returns = _return_type(behavior)
    helper, as_query = HTTP_HELPERS.get(behavior.http_method, HTTP_HELPERS["Post"])
    values = "{ " + ", ".join(p.name for p in params) + " }" if params else "{}"
    argument = f"{unit.name}.queryParams({values})" if as_query else values

    suffix = kebab_case(behavior.function_name)
    if instance:
        url = f"`${{{unit.name}.collectionUrl()}}/${{this.{identity.name}}}/{suffix}`"
    else:
        url = f"`${{{unit.name}.collectionUrl()}}/{suffix}`"
    return TsMethod(
        behavior.function_name,
        rendered,
        f"Promise<{returns}>",
        f"return {unit.name}.{helper}<{returns}>({url}, {argument});",
        is_async=True,
        modifiers=[] if instance else ["static"],
    )


def generate_client_business_object(unit, registry, ctx) -> str:
    identity = resolve_identity(unit, ctx)
    source = TsSourceFile(unit.name)
    source.add_import("./base", "BusinessObjectBase", "QueryFilter")
    source.add_statement(_data_interface(unit, registry, ctx, source, identity))
    source.add_statement(f"export interface {unit.name} extends {unit.name}Data {{}}")

    cls = TsClass(unit.name, extends="BusinessObjectBase")
    cls.add_member(TsProperty("entityName", initializer=ts_string(unit.name), modifiers=["static", "override"]))
    cls.add_member(TsProperty("plural", initializer=ts_string(collection_path(unit.name)), modifiers=["static", "override"]))
    cls.add_member(TsProperty("idField", initializer=ts_string(identity.name), modifiers=["static", "override"]))
    for method in _crud_methods(unit.name, identity.type):
        cls.add_member(method)

    for behavior in entity_behaviors(unit, registry, ctx):
        if behavior.is_method:
            cls.add_member(_behavior_stub(unit, behavior, identity))
    source.classes.append(cls)
    source.exported_class()
    return source.render()


BUSINESS_OBJECT_CLIENT_GENERATOR = Generator(
    name="business-object-client",
    triggers=(Trigger(UnitKind.ENTITY, not_library),),
    outputs=lambda unit: [client_business_object_path(unit)],
    generate=generate_client_business_object,
    target="client",
    description="Client business object class calling the server routes",
)
