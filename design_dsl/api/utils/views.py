"""Class names, selectors and file stems of generated pages and components."""

from .naming import kebab_case


def _strip_suffix(name: str, suffix: str) -> str:
    if name.endswith(suffix) and name != suffix:
        return name[: -len(suffix)]
    return name


def component_base(name: str) -> str:
    return _strip_suffix(name, "Component")


def component_class(name: str) -> str:
    """SupplierCard / SupplierCardComponent -> SupplierCardComponent"""
    return f"{component_base(name)}Component"


def component_stem(name: str) -> str:
    """File and directory stem: SupplierCard -> supplier-card"""
    return kebab_case(component_base(name))


def component_selector(unit) -> str:
    return getattr(unit.node, "selector", None) or component_stem(unit.name)


def page_base(name: str) -> str:
    return _strip_suffix(name, "Page")


def page_class(name: str) -> str:
    """Suppliers / SuppliersPage -> SuppliersPage"""
    return f"{page_base(name)}Page"


def page_stem(name: str) -> str:
    return kebab_case(page_base(name))


def page_selector(unit) -> str:
    return getattr(unit.node, "selector", None) or page_stem(unit.name)


def is_app_component(unit) -> bool:
    """The root component is generated as app.component.* with selector app-root."""
    return component_base(unit.name) == "App"
