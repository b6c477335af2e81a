"""
Angular views: component and page sources plus the pages index.

Library components and pages are generated too: the main project's
templates may use them.
"""

from design_dsl.api.generators.base import Generator, Trigger
from design_dsl.api.registry import UnitKind
from design_dsl.api.synthesis import component_paths, page_paths, synthesize_component, synthesize_page
from design_dsl.api.utils import page_class, page_stem

PAGES_INDEX_PATH = "client/src/app/pages/index.ts"


def _by_path(paths: dict, produced: dict) -> dict:
    return {paths[role]: content for role, content in produced.items()}


def generate_component(unit, registry, ctx) -> dict:
    return _by_path(component_paths(unit), synthesize_component(unit, registry, ctx))


def generate_page(unit, registry, ctx) -> dict:
    return _by_path(page_paths(unit), synthesize_page(unit, registry, ctx))


def generate_pages_index(unit, registry, ctx) -> str:
    """Re-export every page class so that templates can import from one module."""
    pages = sorted(registry.list(UnitKind.PAGE), key=lambda p: page_class(p.name))
    lines = [
        f"export {{ {page_class(p.name)} }} from './{page_stem(p.name)}/{page_stem(p.name)}.page';"
        for p in pages
    ]
    ctx.debug(f"{len(lines)} page(s)")
    return "\n".join(lines) + "\n" if lines else "export {};\n"


COMPONENT_GENERATOR = Generator(
    name="component",
    triggers=(Trigger(UnitKind.COMPONENT),),
    outputs=lambda unit: list(component_paths(unit).values()),
    generate=generate_component,
    target="client",
    description="Standalone Angular component (ts, html, scss)",
)

PAGE_GENERATOR = Generator(
    name="page",
    triggers=(Trigger(UnitKind.PAGE),),
    outputs=lambda unit: list(page_paths(unit).values()),
    generate=generate_page,
    target="client",
    description="Routed Angular page (ts, html, scss)",
)

PAGES_INDEX_GENERATOR = Generator(
    name="pages-index",
    triggers=(Trigger(UnitKind.PAGE),),
    outputs=lambda unit: [PAGES_INDEX_PATH],
    generate=generate_pages_index,
    is_aggregate=True,
    target="client",
    description="Barrel module re-exporting every page",
)
