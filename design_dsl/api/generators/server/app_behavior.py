"""
app-behavior: project-level behaviors as server functions.

Every App or After Start behavior of the main project becomes a module in
app/app_behaviors. App behaviors are also exposed as `POST /app/<name>`
(or the behavior's own HTTP verb); After Start behaviors are awaited by
main.py once the server has started.
"""

from design_dsl.api.errors import GenerationSkipped
from design_dsl.api.generators.base import Generator, Trigger
from design_dsl.api.registry import UnitKind
from design_dsl.api.resolvers.behaviors import APP, PROJECT_TYPES, behavior_from_node
from design_dsl.api.synthesis import PythonModule
from design_dsl.api.synthesis.business_object import (
    GENERATED_HEADER,
    behavior_params,
    server_imports,
    uses_imports,
)
from design_dsl.api.templating import template_env
from design_dsl.api.utils import kebab_case, python_type, snake_case


def app_behavior_module(name: str) -> str:
    return snake_case(name)


def app_behavior_path(unit) -> str:
    return f"server/app/app_behaviors/{app_behavior_module(unit.name)}.py"


def project_behavior(unit, registry) -> bool:
    """App and After Start behaviors attached to the main project."""
    node = unit.node
    if node.type not in PROJECT_TYPES:
        return False
    project = registry.find(UnitKind.PROJECT, node.owner)
    return project is not None and not project.is_library and not unit.is_library


def project_behaviors(registry, kind: str = None) -> list:
    """Generatable project behaviors in declaration order, optionally of one kind."""
    behaviors = []
    for unit in registry.list(UnitKind.BEHAVIOR):
        if not project_behavior(unit, registry) or unit.node.function is None:
            continue
        behavior = behavior_from_node(unit.node)
        if kind is None or behavior.kind == kind:
            behaviors.append(behavior)
    return behaviors


def _returns(behavior, entity_names):
    if not behavior.return_type:
        return None
    array = behavior.return_type.endswith("[]")
    name = behavior.return_type[:-2] if array else behavior.return_type
    return python_type(name, array, entity_names)


def generate_app_behavior(unit, registry, ctx) -> str:
    if unit.node.function is None:
        raise GenerationSkipped(f"behavior {unit.name} has no function")
    behavior = behavior_from_node(unit.node)
    entity_names = registry.entity_names()
    endpoint = behavior.kind == APP

    module = PythonModule.from_template(
        template_env("server"),
        "app_behavior.py.jinja",
        name=unit.name,
        kind=behavior.kind,
        project=behavior.parent,
        module=app_behavior_module(unit.name),
        endpoint=endpoint,
        is_async=behavior.is_async,
        function=behavior.function_name,
        params=behavior_params(behavior, entity_names),
        returns=_returns(behavior, entity_names),
    )
    function = module.get_function(behavior.function_name)
    function.body = [module.verbatim(behavior.body)]

    module.add_import_source(server_imports(behavior.imports))
    module.add_import_source("\n".join(uses_imports(behavior)))

    if endpoint:
        verb = behavior.http_method.lower()
        module.merge_import("fastapi", ["Body"])
        call = f"{behavior.function_name}(**payload)"
        module.add_function(
            f"{snake_case(behavior.function_name)}_endpoint",
            params=["payload: dict = Body(default_factory=dict)"],
            body=f"return {'await ' if behavior.is_async else ''}{call}",
            is_async=True,
            decorators=[f"router.{verb}({'/' + kebab_case(behavior.function_name)!r})"],
        )
        ctx.debug(f"{verb.upper()} /app/{kebab_case(behavior.function_name)}")

    return module.render(header=GENERATED_HEADER)


APP_BEHAVIOR_GENERATOR = Generator(
    name="app-behavior",
    triggers=(Trigger(UnitKind.BEHAVIOR, project_behavior),),
    outputs=lambda unit: [app_behavior_path(unit)],
    generate=generate_app_behavior,
    description="Project-level App and After Start behaviors",
)
