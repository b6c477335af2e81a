"""
Client application files: routes, global styles, app config, package.json,
the business object base class and the persisted form base classes.

These are aggregates. Values declared by several projects are folded with
the libraries first and the main project last.
"""

import json
from pathlib import Path

from design_dsl.api.generators.base import (
    Generator,
    Trigger,
    fold_projects,
    not_library,
    project_dependencies,
    project_settings,
)
from design_dsl.api.registry import UnitKind
from design_dsl.api.synthesis import TsSourceFile
from design_dsl.api.synthesis.typescript import ts_object, ts_string
from design_dsl.api.utils import kebab_case, normalize_route_path, page_class, page_stem, segment_count

ROUTES_PATH = "client/src/app/app.routes.ts"
STYLES_PATH = "client/src/styles.scss"
APP_CONFIG_PATH = "client/src/app/app.config.ts"
PACKAGE_PATH = "client/package.json"
BUSINESS_OBJECT_BASE_PATH = "client/src/app/business-objects/base.ts"
PERSISTED_FORM_GROUP_PATH = "client/src/app/business-objects/persisted-form-group.ts"

BASE_CLIENT_DIR = Path(__file__).resolve().parents[3] / "base" / "client"

MAIN_PROJECT = (Trigger(UnitKind.PROJECT, not_library),)

DEFAULT_STYLES = "/* Global application styles */\n"

DEFAULT_DEPENDENCIES = {"debug": "^4.3.4"}
DEFAULT_DEV_DEPENDENCIES = {"@types/debug": "^4.1.12"}

# project parameter -> mat-form-field default option
FORM_FIELD_PARAMETERS = {
    "formFieldAppearance": "appearance",
    "formFieldSubscriptSizing": "subscriptSizing",
    "formFieldFloatLabel": "floatLabel",
}


# ------------------------------------------------------------------------------
# Routes

def routed_pages(registry) -> list:
    """(page unit, path) for pages with a path, most specific path first."""
    pages = [(p, p.node.path) for p in registry.list(UnitKind.PAGE) if p.node.path]
    return sorted(pages, key=lambda item: (-segment_count(item[1]), item[1]))


def default_page_path(registry, pages) -> str:
    project = registry.main_project()
    if project is None or not project.node.defaultPage:
        return ""
    wanted = project.node.defaultPage
    for page, path in pages:
        if page.name in (wanted, f"{wanted}Page") or page_class(page.name) == page_class(wanted):
            return path
    return ""


def _route(entries: dict) -> str:
    return ts_object(entries, level=1)


def generate_client_routes(unit, registry, ctx) -> str:
    pages = routed_pages(registry)
    routes = []
    default_path = default_page_path(registry, pages)
    if default_path and default_path != "/":
        routes.append(_route({
            "path": ts_string(""),
            "redirectTo": ts_string(normalize_route_path(default_path)),
            "pathMatch": ts_string("full"),
        }))
    for page, path in pages:
        stem = page_stem(page.name)
        load = f"() => import('./pages/{stem}/{stem}.page').then((m) => m.{page_class(page.name)})"
        routes.append(_route({
            "path": ts_string(normalize_route_path(path)),
            "loadComponent": load,
            "pathMatch": ts_string("full"),
        }))

    source = TsSourceFile("app.routes")
    source.add_import("@angular/router", "Routes")
    body = ",\n".join(f"  {route}" for route in routes)
    source.add_statement(f"export const routes: Routes = [\n{body}\n];" if routes else "export const routes: Routes = [];")
    ctx.debug(f"{len(pages)} route(s)")
    return source.render()


# ------------------------------------------------------------------------------
# Styles

def generate_client_styles(unit, registry, ctx) -> str:
    """Project styles, libraries in declaration order before the main project."""
    parts = []
    ordered = registry.library_projects() + [p for p in [registry.main_project()] if p is not None]
    for project in ordered:
        styles = (project.node.styles or "").strip()
        if styles:
            parts.append(f"/* Styles from {project.name} */\n{styles}")
    if not parts:
        return DEFAULT_STYLES
    return "\n\n".join(parts) + "\n"


# ------------------------------------------------------------------------------
# App config

def generate_app_config(unit, registry, ctx) -> str:
    source = TsSourceFile("app.config")
    source.add_import("@angular/core", "APP_INITIALIZER", "ApplicationConfig", "inject")
    source.add_import("@angular/router", "provideRouter")
    source.add_import("@angular/common/http", "HttpClient", "provideHttpClient")
    source.add_import("./business-objects/base", "BusinessObjectBase")
    source.add_import("./app.routes", "routes")

    providers = ["provideRouter(routes)", "provideHttpClient()"]
    parameters = registry.parameter_values()
    form_field = {
        option: ts_string(str(parameters[name]))
        for name, option in FORM_FIELD_PARAMETERS.items()
        if parameters.get(name)
    }
    if form_field:
        source.add_import("@angular/material/form-field", "MAT_FORM_FIELD_DEFAULT_OPTIONS")
        providers.append(ts_object({
            "provide": "MAT_FORM_FIELD_DEFAULT_OPTIONS",
            "useValue": ts_object(form_field, level=3),
        }, level=2))
    providers.append(ts_object({
        "provide": "APP_INITIALIZER",
        "useFactory": "() => {\n"
                      "      BusinessObjectBase.configure(inject(HttpClient));\n"
                      "      return () => {};\n"
                      "    }",
        "multi": "true",
    }, level=2))

    listed = ",\n".join(f"    {provider}" for provider in providers)
    source.add_statement(f"export const appConfig: ApplicationConfig = {{\n  providers: [\n{listed},\n  ],\n}};")
    return source.render()


# ------------------------------------------------------------------------------
# package.json

def generate_client_package(unit, registry, ctx) -> str:
    project = registry.main_project()
    node = project.node if project else None
    base_name = (node.packageName if node else "") or kebab_case(registry.project_name())

    runtime, dev = project_dependencies(registry, "clientDependencies")
    package = {"name": f"{base_name}-client", "version": (node.version if node else "") or "0.0.1"}
    if node is not None and node.displayName:
        package["displayName"] = node.displayName
    if node is not None and node.description:
        package["description"] = node.description

    scripts = project_settings(registry, "clientScripts")
    if scripts:
        package["scripts"] = scripts
    package["dependencies"] = {**DEFAULT_DEPENDENCIES, **runtime}
    package["devDependencies"] = {**DEFAULT_DEV_DEPENDENCIES, **dev}
    overrides = project_settings(registry, "overrides")
    if overrides:
        package["overrides"] = overrides

    ctx.debug(f"folded {len(fold_projects(registry))} project(s)")
    return json.dumps(package, indent=2) + "\n"


# ------------------------------------------------------------------------------
# Business object base

def generate_business_object_base(unit, registry, ctx) -> str:
    return (BASE_CLIENT_DIR / "src" / "app" / "business-objects" / "base.ts").read_text(encoding="utf-8")


def generate_persisted_form_group(unit, registry, ctx) -> str:
    return (BASE_CLIENT_DIR / "src" / "app" / "business-objects" / "persisted-form-group.ts").read_text(encoding="utf-8")


CLIENT_ROUTES_GENERATOR = Generator(
    name="client-routes",
    triggers=(Trigger(UnitKind.PAGE), *MAIN_PROJECT),
    outputs=lambda unit: [ROUTES_PATH],
    generate=generate_client_routes,
    is_aggregate=True,
    target="client",
    description="Lazy-loaded Angular routes of every page",
)

CLIENT_STYLES_GENERATOR = Generator(
    name="client-styles",
    triggers=MAIN_PROJECT,
    outputs=lambda unit: [STYLES_PATH],
    generate=generate_client_styles,
    is_aggregate=True,
    target="client",
    description="Global styles of the libraries and the main project",
)

CLIENT_APP_CONFIG_GENERATOR = Generator(
    name="client-app-config",
    triggers=MAIN_PROJECT,
    outputs=lambda unit: [APP_CONFIG_PATH],
    generate=generate_app_config,
    is_aggregate=True,
    target="client",
    description="Application providers and business object wiring",
)

CLIENT_PACKAGE_GENERATOR = Generator(
    name="client-package",
    triggers=(Trigger(UnitKind.PROJECT),),
    outputs=lambda unit: [PACKAGE_PATH],
    generate=generate_client_package,
    is_aggregate=True,
    target="client",
    description="package.json with folded client dependencies",
)

BUSINESS_OBJECT_BASE_GENERATOR = Generator(
    name="business-object-base",
    triggers=MAIN_PROJECT,
    outputs=lambda unit: [BUSINESS_OBJECT_BASE_PATH],
    generate=generate_business_object_base,
    is_aggregate=True,
    target="client",
    description="Base class of the client business objects",
)

PERSISTED_FORM_GROUP_GENERATOR = Generator(
    name="persisted-form-group",
    triggers=MAIN_PROJECT,
    outputs=lambda unit: [PERSISTED_FORM_GROUP_PATH],
    generate=generate_persisted_form_group,
    is_aggregate=True,
    target="client",
    description="Base classes of the entity form groups and arrays",
)
