"""Angular component synthesis."""

from design_dsl.api.registry import UnitKind
from design_dsl.api.resolvers import merge_properties, resolve_mixins
from design_dsl.api.utils import (
    component_class,
    component_selector,
    component_stem,
    is_app_component,
    lower_first,
)

from .typescript import TsDecorator, TsMethod, TsProperty
from .views import COMPONENTS_ALIAS, ViewBuilder, relative_modules


def component_paths(unit) -> dict:
    """Output paths of a component, keyed by file role."""
    if is_app_component(unit):
        base = "client/src/app/app.component"
    else:
        stem = component_stem(unit.name)
        base = f"client/src/app/components/{stem}/{stem}.component"
    return {"ts": f"{base}.ts", "html": f"{base}.html", "scss": f"{base}.scss"}


def _child_module(app: bool):
    if app:
        return relative_modules("./components/", "./pages")
    return relative_modules("../", "../../pages")


def _content_children(builder: ViewBuilder, prop, child) -> str:
    """`items: Child[]` becomes a QueryList plus an array kept in sync."""
    child_class = component_class(child.name)
    query = f"_{prop.name}Components"
    builder.source.add_import("@angular/core", "ContentChildren", "QueryList", "AfterContentInit")
    builder.cls.add_member(
        TsProperty(
            query,
            f"QueryList<{child_class}>",
            decorators=[TsDecorator("ContentChildren", [child_class])],
            definite=True,
        )
    )
    builder.cls.add_member(TsProperty(prop.name, f"{child_class}[]", initializer="[]"))
    return query


def synthesize_component(unit, registry, ctx) -> dict:
    """Return {"ts", "html", "scss"} sources for a component."""
    app = is_app_component(unit)
    stem = "app" if app else component_stem(unit.name)
    builder = ViewBuilder(
        unit,
        registry,
        ctx,
        class_name=component_class(unit.name),
        file_name=unit.name,
        bo_prefix="./business-objects/" if app else "../../business-objects/",
    )
    builder.apply_author_imports()
    builder.apply_preamble()

    rewrite = _child_module(app)
    properties = merge_properties(unit.node.properties, resolve_mixins(unit, registry, ctx), ctx)
    synced = []
    for prop in properties:
        child = registry.find(UnitKind.COMPONENT, prop.type.name) if prop.type.array else None
        if child is not None:
            query = _content_children(builder, prop, child)
            if child.name != unit.name:
                child_stem = component_stem(child.name)
                module = rewrite(f"{COMPONENTS_ALIAS}{child_stem}/{child_stem}.component")
                builder.source.add_import(module, component_class(child.name))
            synced.append((prop.name, query))
            continue
        member = builder.plain_property(prop)
        if prop.config.input:
            builder.source.add_import("@angular/core", "Input")
            member.decorators.append(TsDecorator("Input"))
        builder.cls.add_member(member)

    builder.add_methods()

    if synced:
        body = []
        for name, query in synced:
            body.append(f"this.{name} = this.{query}.toArray();")
            body.append(f"this.{query}.changes.subscribe(() => {{")
            body.append(f"  this.{name} = this.{query}.toArray();")
            body.append("});")
        builder.cls.implement("AfterContentInit")
        builder.cls.add_member(TsMethod("ngAfterContentInit", return_type="void", body="\n".join(body)))

    after_load = [m for m in unit.node.methods if m.config.call_after_load]
    if after_load:
        builder.source.add_import("@angular/core", "AfterViewInit")
        builder.cls.implement("AfterViewInit")
        hook = TsMethod(
            "ngAfterViewInit",
            return_type="void",
            body="\n".join(f"this.{m.name}();" for m in after_load),
        )
        builder.cls.add_member(hook)

    builder.apply_debug(lower_first(builder.cls.name))

    imports = builder.template_imports(rewrite=rewrite)
    selector = "app-root" if app else component_selector(unit)
    builder.decorate(selector, stem, "component", imports)
    builder.source.exported_class()

    return {
        "ts": builder.source.render(),
        "html": builder.template_html(),
        "scss": builder.styles(),
    }
