"""
TextX object processors for DDSL.

Object processors run during model construction to normalize and validate
individual model elements: raw code fences become verbatim text and inline
option bags become validated PropertyOptions / MethodOptions models.
"""

import textwrap

from pydantic import ValidationError
from textx import get_location, TextXSemanticError

from design_dsl.lib.options import MethodOptions, PropertyOptions

BEHAVIOR_TYPES = (
    "Instance",
    "Class",
    "Before Create",
    "After Create",
    "Before Update",
    "After Update",
    "Before Delete",
    "After Delete",
    "Before Read",
    "After Read",
    "After Start",
    "App",
)


# ------------------------------------------------------------------------------
# Raw text helpers

def raw_text(value) -> str:
    """
    Strip a ``` fence (or a single backtick pair) and dedent the enclosed code.

    Leading and trailing blank lines inside the fence are dropped; every other
    line is kept as written, minus the indentation common to all lines.
    """
    if not value:
        return ""
    if len(value) >= 6 and value.startswith("```") and value.endswith("```"):
        lines = value[3:-3].split("\n")
        while lines and not lines[0].strip():
            lines.pop(0)
        while lines and not lines[-1].strip():
            lines.pop()
        return textwrap.dedent("\n".join(lines))
    if len(value) >= 2 and value.startswith("`") and value.endswith("`"):
        return value[1:-1]
    return value


def option_value(value):
    """Convert a parsed option value into plain Python data."""
    entries = getattr(value, "entries", None)
    if entries is not None:
        return {entry.key: option_value(entry.value) for entry in entries}
    if isinstance(value, str):
        return raw_text(value)
    return value


def options_to_dict(options, owner) -> dict:
    """Turn `(flag, key: value, ...)` into a dict; bare keys become True."""
    result = {}
    for option in options or []:
        if option.key in result:
            raise TextXSemanticError(
                f"Option '{option.key}' is given more than once on '{owner.name}'.",
                **get_location(option),
            )
        result[option.key] = option_value(option.value) if option.valued else True
    return result


def _validate_options(model_cls, owner, kind: str):
    data = options_to_dict(getattr(owner, "options", None), owner)
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or kind}: {err['msg']}" for err in e.errors()
        )
        raise TextXSemanticError(
            f"Invalid options on {kind} '{owner.name}': {problems}",
            **get_location(owner),
        )


# ------------------------------------------------------------------------------
# Object processors

def property_obj_processor(prop):
    """Validate the option bag of a property and unwrap its initializer."""
    prop.config = _validate_options(PropertyOptions, prop, "property")
    prop.initializer = raw_text(prop.initializer)

    if prop.config.has_many and not prop.type.array:
        raise TextXSemanticError(
            f"Property '{prop.name}' is marked hasMany but its type is not an array.",
            **get_location(prop),
        )
    markers = prop.config.association_markers
    if len(markers) > 1:
        raise TextXSemanticError(
            f"Property '{prop.name}' has conflicting association markers: {', '.join(markers)}.",
            **get_location(prop),
        )


def method_obj_processor(method):
    method.config = _validate_options(MethodOptions, method, "method")
    method.body = raw_text(method.body)


def behavior_function_obj_processor(function):
    function.body = raw_text(function.body)


def behavior_obj_processor(behavior):
    """Check the behavior type when present; a missing type is reported later, softly."""
    behavior.imports = raw_text(behavior.imports)
    if behavior.type and behavior.type not in BEHAVIOR_TYPES:
        raise TextXSemanticError(
            f"Behavior '{behavior.name}' has unknown type '{behavior.type}'. "
            f"Expected one of: {', '.join(BEHAVIOR_TYPES)}.",
            **get_location(behavior),
        )


def view_obj_processor(view):
    """Pages and components: unwrap template, styles and preamble code."""
    view.template = raw_text(view.template)
    view.styles = raw_text(view.styles)
    view.preamble = raw_text(view.preamble)


def project_obj_processor(project):
    project.styles = raw_text(project.styles)


def get_obj_processors():
    """Return object processor configuration for the metamodel."""
    return {
        "Property": property_obj_processor,
        "Method": method_obj_processor,
        "BehaviorFunction": behavior_function_obj_processor,
        "Behavior": behavior_obj_processor,
        "Page": view_obj_processor,
        "Component": view_obj_processor,
        "Project": project_obj_processor,
    }
