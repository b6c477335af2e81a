"""business-object: server CRUD class of an entity with its behaviors."""

from design_dsl.api.generators.base import Generator, Trigger, server_entity
from design_dsl.api.registry import UnitKind
from design_dsl.api.resolvers import effective_properties, resolve_relationships
from design_dsl.api.synthesis import synthesize_business_object
from design_dsl.api.utils import snake_case


def business_object_path(unit) -> str:
    return f"server/app/business_objects/{snake_case(unit.name)}.py"


def generate_business_object(unit, registry, ctx) -> str:
    data_source = registry.data_source_for(unit)
    ctx.debug(f"data source {data_source.name}")
    # the class persists through the schema's table, so its associations must resolve
    resolve_relationships(unit, registry, ctx, properties=effective_properties(unit, registry))
    return synthesize_business_object(unit, registry, data_source, ctx)


BUSINESS_OBJECT_GENERATOR = Generator(
    name="business-object",
    triggers=(Trigger(UnitKind.ENTITY, server_entity),),
    outputs=lambda unit: [business_object_path(unit)],
    generate=generate_business_object,
    description="Business object class with CRUD operations and behaviors",
)
