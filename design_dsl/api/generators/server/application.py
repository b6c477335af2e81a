"""
Server entry points: the routes index and main.py.

Both are aggregates of the main project: the index mounts the router of
every server entity and App behavior, main.py connects the data sources
and awaits the After Start behaviors once the application has started.
"""

import ast

from design_dsl.api.generators.base import Generator, Trigger, not_library
from design_dsl.api.registry import UnitKind
from design_dsl.api.resolvers.behaviors import AFTER_START, APP
from design_dsl.api.synthesis import PythonModule
from design_dsl.api.synthesis.business_object import GENERATED_HEADER
from design_dsl.api.templating import template_env
from design_dsl.api.utils import snake_case

from .app_behavior import app_behavior_module, project_behaviors
from .data_source import used_by_server
from .route import route_module

ROUTES_INDEX_PATH = "server/app/routes/__init__.py"
SERVER_MAIN_PATH = "server/app/main.py"

MAIN_PROJECT = (Trigger(UnitKind.PROJECT, not_library),)


def server_entities(registry) -> list:
    # An entity naming a missing data source fails its own units and is not mounted.
    return [
        e for e in registry.list(UnitKind.ENTITY)
        if not e.is_library and registry.has(UnitKind.DATA_SOURCE, registry.data_source_name(e))
    ]


def generate_routes_index(unit, registry, ctx) -> str:
    routes = [{"module": route_module(e.name)} for e in server_entities(registry)]
    app_behaviors = [app_behavior_module(b.name) for b in project_behaviors(registry, APP)]
    module = PythonModule.from_template(
        template_env("server"),
        "routes_index.py.jinja",
        name="routes",
        routes=routes,
        app_behaviors=app_behaviors,
    )
    ctx.debug(f"{len(routes)} entity router(s), {len(app_behaviors)} app behavior router(s)")
    return module.render(header=GENERATED_HEADER)


def _after_start_call(behavior) -> list:
    call = f"{'await ' if behavior.is_async else ''}{behavior.function_name}()"
    message = f"[ERROR] After Start behavior {behavior.function_name} failed"
    source = (
        "try:\n"
        f"    {call}\n"
        "except Exception:\n"
        f"    logger.exception({message!r})"
    )
    return ast.parse(source).body


def generate_server_main(unit, registry, ctx) -> str:
    data_sources = [
        snake_case(ds.name)
        for ds in registry.list(UnitKind.DATA_SOURCE)
        if used_by_server(ds, registry) and ds.node.persistenceType
    ]
    after_start = project_behaviors(registry, AFTER_START)
    module = PythonModule.from_template(
        template_env("server"),
        "main.py.jinja",
        name="main",
        project=registry.project_name(),
        data_sources=data_sources,
        after_start=[
            {"module": app_behavior_module(b.name), "function": b.function_name}
            for b in after_start
        ],
    )
    if after_start:
        function = module.get_function("run_after_start")
        function.body = [statement for b in after_start for statement in _after_start_call(b)]
    ctx.debug(f"{len(data_sources)} data source(s), {len(after_start)} After Start behavior(s)")
    return module.render(header=GENERATED_HEADER)


ROUTES_INDEX_GENERATOR = Generator(
    name="routes-index",
    triggers=MAIN_PROJECT,
    outputs=lambda unit: [ROUTES_INDEX_PATH],
    generate=generate_routes_index,
    is_aggregate=True,
    description="Router mounting every generated route module",
)

SERVER_GENERATOR = Generator(
    name="server",
    triggers=MAIN_PROJECT,
    outputs=lambda unit: [SERVER_MAIN_PATH],
    generate=generate_server_main,
    is_aggregate=True,
    description="FastAPI application entry point",
)
