"""Utility functions shared by resolvers, synthesizers and generators."""

from .naming import (
    split_words,
    kebab_case,
    snake_case,
    pascal_case,
    camel_case,
    lower_first,
    pluralize,
)
from .paths import (
    extract_route_params,
    route_param_property,
    normalize_route_path,
    segment_count,
    collection_path,
)
from .views import (
    component_base,
    component_class,
    component_stem,
    component_selector,
    page_base,
    page_class,
    page_stem,
    page_selector,
    is_app_component,
)
from .types import (
    is_scalar,
    identity_type,
    python_type,
    python_type_import,
    typescript_type,
)

__all__ = [
    "split_words",
    "kebab_case",
    "snake_case",
    "pascal_case",
    "camel_case",
    "lower_first",
    "pluralize",
    "extract_route_params",
    "route_param_property",
    "normalize_route_path",
    "segment_count",
    "collection_path",
    "component_base",
    "component_class",
    "component_stem",
    "component_selector",
    "page_base",
    "page_class",
    "page_stem",
    "page_selector",
    "is_app_component",
    "is_scalar",
    "identity_type",
    "python_type",
    "python_type_import",
    "typescript_type",
]
