"""
Processors module for DDSL.

This module contains TextX object processors that run during model construction
to normalize raw code blocks and validate option bags.
"""

from design_dsl.processors.object_processors import (
    BEHAVIOR_TYPES,
    get_obj_processors,
    raw_text,
    options_to_dict,
    property_obj_processor,
    method_obj_processor,
    behavior_obj_processor,
    view_obj_processor,
)

__all__ = [
    "BEHAVIOR_TYPES",
    "get_obj_processors",
    "raw_text",
    "options_to_dict",
    "property_obj_processor",
    "method_obj_processor",
    "behavior_obj_processor",
    "view_obj_processor",
]
