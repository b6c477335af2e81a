"""Generators of the Angular client."""

from .business_object import BUSINESS_OBJECT_CLIENT_GENERATOR
from .form_group import BUSINESS_OBJECT_FORM_GROUP_GENERATOR
from .views import COMPONENT_GENERATOR, PAGE_GENERATOR, PAGES_INDEX_GENERATOR
from .application import (
    BUSINESS_OBJECT_BASE_GENERATOR,
    CLIENT_APP_CONFIG_GENERATOR,
    CLIENT_PACKAGE_GENERATOR,
    CLIENT_ROUTES_GENERATOR,
    CLIENT_STYLES_GENERATOR,
    PERSISTED_FORM_GROUP_GENERATOR,
)

CLIENT_GENERATORS = [
    BUSINESS_OBJECT_BASE_GENERATOR,
    BUSINESS_OBJECT_CLIENT_GENERATOR,
    PERSISTED_FORM_GROUP_GENERATOR,
    BUSINESS_OBJECT_FORM_GROUP_GENERATOR,
    COMPONENT_GENERATOR,
    PAGE_GENERATOR,
    PAGES_INDEX_GENERATOR,
    CLIENT_ROUTES_GENERATOR,
    CLIENT_APP_CONFIG_GENERATOR,
    CLIENT_STYLES_GENERATOR,
    CLIENT_PACKAGE_GENERATOR,
]

__all__ = [
    "CLIENT_GENERATORS",
    "BUSINESS_OBJECT_BASE_GENERATOR",
    "BUSINESS_OBJECT_CLIENT_GENERATOR",
    "PERSISTED_FORM_GROUP_GENERATOR",
    "BUSINESS_OBJECT_FORM_GROUP_GENERATOR",
    "COMPONENT_GENERATOR",
    "PAGE_GENERATOR",
    "PAGES_INDEX_GENERATOR",
    "CLIENT_ROUTES_GENERATOR",
    "CLIENT_APP_CONFIG_GENERATOR",
    "CLIENT_STYLES_GENERATOR",
    "CLIENT_PACKAGE_GENERATOR",
]
