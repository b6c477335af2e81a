"""
Validation module for DDSL.

Model processors that check a parsed design file as a whole:
- unique unit and member names
- identity property rules
- page route parameters
- method option placement
"""

from design_dsl.validation.unit_validators import (
    UNIT_RULES,
    verify_unique_names,
    verify_unique_members,
    verify_identity_properties,
    verify_page_paths,
    verify_method_options,
)

__all__ = [
    "UNIT_RULES",
    "verify_unique_names",
    "verify_unique_members",
    "verify_identity_properties",
    "verify_page_paths",
    "verify_method_options",
]
