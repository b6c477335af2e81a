"""
business-object-route: FastAPI router of an entity.

CRUD endpoints come from route.py.jinja. Every Instance and Class behavior
then gets an endpoint of its own, decorated with the behavior's HTTP verb.
"""

from design_dsl.api.generators.base import Generator, Trigger, server_entity
from design_dsl.api.registry import UnitKind
from design_dsl.api.resolvers import effective_properties, entity_behaviors, resolve_identity, resolve_relationships
from design_dsl.api.synthesis import PythonModule
from design_dsl.api.synthesis.business_object import GENERATED_HEADER, ID_PYTHON_TYPES
from design_dsl.api.templating import template_env
from design_dsl.api.utils import collection_path, kebab_case, pluralize, snake_case

# verbs whose arguments travel in the query string instead of a JSON body
QUERY_VERBS = ("get", "delete")


def route_module(entity_name: str) -> str:
    return snake_case(pluralize(entity_name))


def route_path(unit) -> str:
    return f"server/app/routes/{route_module(unit.name)}.py"


def behavior_path(behavior) -> str:
    suffix = kebab_case(behavior.function_name)
    return f"/{{id}}/{suffix}" if behavior.kind == "Instance" else f"/{suffix}"


def _behavior_endpoint(module: PythonModule, unit, behavior, id_type: str) -> None:
    verb = behavior.http_method.lower()
    single = snake_case(unit.name)
    receiver = unit.name
    params = []
    body = []
    if behavior.kind == "Instance":
        params.append(f"id: {id_type}")
        body.append(f"record = await {unit.name}.find_by_id(id)")
        receiver = "record"

    if verb in QUERY_VERBS:
        params.append("request: Request")
        body.insert(0, "payload = dict(request.query_params)")
        module.merge_import("fastapi", ["Request"])
    else:
        params.append("payload: dict = Body(default_factory=dict)")
        module.merge_import("fastapi", ["Body"])

    call = f"{receiver}.{behavior.function_name}(**payload)"
    body.append(f"result = {'await ' if behavior.is_async else ''}{call}")
    body.append("return serialize(result)")

    # Class behavior paths must be matched ahead of "/{id}"
    before = None if behavior.kind == "Instance" else f"get_{single}"
    module.add_function(
        f"{snake_case(behavior.function_name)}_{single}",
        params=params,
        body="\n".join(body),
        is_async=True,
        decorators=[f"router.{verb}({behavior_path(behavior)!r})"],
        before=before,
    )


def generate_route(unit, registry, ctx) -> str:
    identity = resolve_identity(unit, ctx)
    resolve_relationships(unit, registry, ctx, properties=effective_properties(unit, registry))
    id_type = ID_PYTHON_TYPES[identity.type]
    module = PythonModule.from_template(
        template_env("server"),
        "route.py.jinja",
        name=unit.name,
        entity=unit.name,
        module=snake_case(unit.name),
        path=collection_path(unit.name),
        plural=route_module(unit.name),
        single=snake_case(unit.name),
        id_type=id_type,
    )
    module.get_function("list_" + route_module(unit.name))

    for behavior in entity_behaviors(unit, registry, ctx):
        if not behavior.is_method:
            continue
        _behavior_endpoint(module, unit, behavior, id_type)
        ctx.debug(f"{behavior.http_method.upper()} {behavior_path(behavior)} -> {behavior.function_name}")

    return module.render(header=GENERATED_HEADER)


ROUTE_GENERATOR = Generator(
    name="business-object-route",
    triggers=(Trigger(UnitKind.ENTITY, server_entity),),
    outputs=lambda unit: [route_path(unit)],
    generate=generate_route,
    description="FastAPI CRUD and behavior endpoints",
)
