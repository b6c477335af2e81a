"""
Import resolution for view templates.

Given a template, compute the minimal set of imports the generated page or
component needs: child components and pages by element selector, then
element, directive and pipe interfaces declared as SelectorInterface units.
"""

from dataclasses import dataclass

from design_dsl.api.registry import UnitKind
from design_dsl.api.utils import (
    component_class,
    component_selector,
    component_stem,
    page_class,
    page_selector,
)

from .parser import (
    extract_directive_selectors,
    extract_element_selectors,
    extract_pipe_names,
    parse_template,
)
from .selectors import matches_directive_selector, selector_parts

PAGES_MODULE = "@pages"


@dataclass(frozen=True)
class TemplateImport:
    module_specifier: str
    named_imports: tuple


def _interface_imports(unit) -> list[tuple]:
    pairs = []
    for spec in unit.node.imports:
        for name in spec.names:
            pairs.append((spec.module, name))
    return pairs


def _resolve_element(element, registry, exclude):
    for unit in registry.list(UnitKind.COMPONENT):
        if unit.name != exclude and component_selector(unit) == element:
            stem = component_stem(unit.name)
            return [(f"@components/{stem}/{stem}.component", component_class(unit.name))]
    for unit in registry.list(UnitKind.PAGE):
        if unit.name != exclude and page_selector(unit) == element:
            return [(PAGES_MODULE, page_class(unit.name))]
    for unit in registry.interfaces("Element"):
        if element in selector_parts(unit.node.selector):
            return _interface_imports(unit)
    return None


def resolve_template_imports(template: str, registry, ctx=None, exclude: str = None) -> list[TemplateImport]:
    """
    Imports needed by a template, merged per module and sorted.

    `exclude` names the unit that owns the template, so a view never
    imports itself.
    """
    if not template:
        return []

    collected = {}

    def add(pairs):
        for module, name in pairs:
            collected.setdefault(module, set()).add(name)

    elements = extract_element_selectors(template)
    for element in elements:
        pairs = _resolve_element(element, registry, exclude)
        if pairs is None:
            if ctx is not None:
                ctx.debug(f"no declaration for element <{element}>")
            continue
        add(pairs)

    directives = extract_directive_selectors(template)
    if directives:
        parsed = parse_template(template)
        for unit in registry.interfaces("Directive"):
            parts = selector_parts(unit.node.selector)
            if any(
                matches_directive_selector(part, attribute, parsed.elements, parsed.attributes)
                for part in parts
                for attribute in directives
            ):
                add(_interface_imports(unit))

    pipes = set(extract_pipe_names(template))
    for unit in registry.interfaces("Pipe"):
        if unit.node.selector in pipes:
            add(_interface_imports(unit))

    return [TemplateImport(module, tuple(sorted(names))) for module, names in sorted(collected.items())]
