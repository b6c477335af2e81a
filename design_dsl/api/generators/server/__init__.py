"""Generators of the Python (FastAPI + SQLModel) server."""

from .schema import SCHEMA_GENERATOR
from .business_object import BUSINESS_OBJECT_GENERATOR
from .route import ROUTE_GENERATOR
from .data_source import DATA_SOURCE_GENERATOR
from .app_behavior import APP_BEHAVIOR_GENERATOR
from .application import ROUTES_INDEX_GENERATOR, SERVER_GENERATOR
from .scaffold import SCAFFOLD_GENERATOR
from .package import SERVER_PACKAGE_GENERATOR

SERVER_GENERATORS = [
    SCHEMA_GENERATOR,
    BUSINESS_OBJECT_GENERATOR,
    ROUTE_GENERATOR,
    DATA_SOURCE_GENERATOR,
    APP_BEHAVIOR_GENERATOR,
    ROUTES_INDEX_GENERATOR,
    SERVER_GENERATOR,
    SCAFFOLD_GENERATOR,
    SERVER_PACKAGE_GENERATOR,
]

__all__ = [
    "SERVER_GENERATORS",
    "SCHEMA_GENERATOR",
    "BUSINESS_OBJECT_GENERATOR",
    "ROUTE_GENERATOR",
    "DATA_SOURCE_GENERATOR",
    "APP_BEHAVIOR_GENERATOR",
    "ROUTES_INDEX_GENERATOR",
    "SERVER_GENERATOR",
    "SCAFFOLD_GENERATOR",
    "SERVER_PACKAGE_GENERATOR",
]
