"""
data-source: one module per data source exposing a `data_source` object.

The module imports the schema of every entity stored in the data source.
A data source without a persistenceType cannot be generated and is skipped.
"""

from design_dsl.api.errors import GenerationSkipped
from design_dsl.api.generators.base import Generator, Trigger
from design_dsl.api.registry import UnitKind
from design_dsl.api.resolvers import resolve_identity
from design_dsl.api.synthesis.business_object import GENERATED_HEADER
from design_dsl.api.templating import render
from design_dsl.api.utils import snake_case

PERSISTENCE_TYPES = ("Memory", "Sql", "Sqlite", "Postgres", "MySql")

DEFAULT_URLS = {
    "Memory": "",
    "Sql": "sqlite:///{db}.db",
    "Sqlite": "sqlite:///{db}.db",
    "Postgres": "postgresql://localhost/{db}",
    "MySql": "mysql+pymysql://localhost/{db}",
}


def data_source_path(unit) -> str:
    return f"server/app/data_sources/{snake_case(unit.name)}.py"


def used_by_server(unit, registry) -> bool:
    """Main-project data sources, and library ones that main entities use."""
    if not unit.is_library:
        return True
    return any(not e.is_library for e in registry.entities_for_data_source(unit))


def generate_data_source(unit, registry, ctx) -> str:
    node = unit.node
    if not node.persistenceType:
        raise GenerationSkipped(f"data source {unit.name} has no persistenceType")
    if node.persistenceType not in PERSISTENCE_TYPES:
        ctx.warning(
            f"unknown persistenceType '{node.persistenceType}', expected one of {', '.join(PERSISTENCE_TYPES)}"
        )

    entities = []
    for entity in registry.entities_for_data_source(unit):
        if entity.is_library:
            continue
        entities.append({
            "name": entity.name,
            "module": snake_case(entity.name),
            "id_field": resolve_identity(entity, ctx).name,
        })
    if not entities:
        ctx.warning(f"no entity is stored in data source {unit.name}")

    url = node.url or DEFAULT_URLS.get(node.persistenceType, "").format(db=snake_case(unit.name))
    content = render(
        "server",
        "data_source.py.jinja",
        name=unit.name,
        persistence_type=node.persistenceType,
        url=url,
        entities=entities,
        settings=repr({s.key: s.value for s in node.settings}),
    )
    ctx.debug(f"{len(entities)} entity table(s)")
    return f"{GENERATED_HEADER}\n{content}"


DATA_SOURCE_GENERATOR = Generator(
    name="data-source",
    triggers=(Trigger(UnitKind.DATA_SOURCE, used_by_server),),
    outputs=lambda unit: [data_source_path(unit)],
    generate=generate_data_source,
    description="Persistence object shared by the business objects of a data source",
)
