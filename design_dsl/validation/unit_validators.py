"""
Model-wide validation for design units.

These run as textX model processors, after a whole file has been built,
and report problems with the location of the offending declaration.
"""

from textx import get_children_of_type, get_location, TextXSemanticError

from design_dsl.api.utils import extract_route_params, identity_type, route_param_property

UNIT_RULES = (
    "Project",
    "DataSource",
    "Entity",
    "Mixin",
    "Behavior",
    "Page",
    "Component",
    "SelectorInterface",
)


def _ensure_unique(objs, kind, what="name"):
    seen = set()
    for obj in objs:
        if obj.name in seen:
            raise TextXSemanticError(
                f"{kind} with {what} '{obj.name}' already exists.",
                **get_location(obj),
            )
        seen.add(obj.name)


def verify_unique_names(model):
    """Unit names are unique per kind within a file."""
    for rule in UNIT_RULES:
        _ensure_unique(get_children_of_type(rule, model), rule)


def verify_unique_members(model):
    """Property and method names are unique within their unit."""
    for rule in ("Entity", "Mixin", "Page", "Component"):
        for unit in get_children_of_type(rule, model):
            _ensure_unique(unit.properties, f"{rule} '{unit.name}' property")
            _ensure_unique(getattr(unit, "methods", []) or [], f"{rule} '{unit.name}' method")


def verify_identity_properties(model):
    """At most one identity property per entity, typed number or string."""
    for entity in get_children_of_type("Entity", model):
        flagged = [p for p in entity.properties if p.config.id]
        if len(flagged) > 1:
            raise TextXSemanticError(
                f"Entity '{entity.name}' declares more than one identity property: "
                f"{', '.join(p.name for p in flagged)}.",
                **get_location(flagged[1]),
            )
        for prop in flagged:
            if prop.type.array or identity_type(prop.type.name) is None:
                raise TextXSemanticError(
                    f"Identity property '{entity.name}.{prop.name}' must be a number or string, "
                    f"not '{prop.type.name}'.",
                    **get_location(prop),
                )


def verify_page_paths(model):
    """Dotted route parameters (:supplier.id) must name a page property."""
    for page in get_children_of_type("Page", model):
        names = {p.name for p in page.properties}
        for param in extract_route_params(page.path):
            prop, fld = route_param_property(param)
            if fld and prop not in names:
                raise TextXSemanticError(
                    f"Page '{page.name}' path parameter ':{param}' does not match a page property.",
                    **get_location(page),
                )


def verify_method_options(model):
    """callOnLoad belongs to pages and callAfterLoad to components."""
    for page in get_children_of_type("Page", model):
        for method in page.methods:
            if method.config.call_after_load:
                raise TextXSemanticError(
                    f"Page method '{page.name}.{method.name}' cannot use callAfterLoad; use callOnLoad.",
                    **get_location(method),
                )
    for component in get_children_of_type("Component", model):
        for method in component.methods:
            if method.config.call_on_load:
                raise TextXSemanticError(
                    f"Component method '{component.name}.{method.name}' cannot use callOnLoad; "
                    f"use callAfterLoad.",
                    **get_location(method),
                )
