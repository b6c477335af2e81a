"""
Shared edit steps for page and component synthesis.

Both views start from the unit's declarations: author imports (with the
DSL-only ones stripped), a free preamble, properties and methods. The page
and component pipelines then add their framework metadata.
"""

import re

from design_dsl.api.markup import convert_template, resolve_template_imports
from design_dsl.api.markup.imports import PAGES_MODULE
from design_dsl.api.registry import UnitKind
from design_dsl.api.utils import kebab_case, typescript_type

from .typescript import TsClass, TsDecorator, TsMethod, TsProperty, TsSourceFile, ts_array, ts_object, ts_string

DSL_MODULE = "@design/dsl"
BUSINESS_OBJECTS_MODULE = "@business-objects"
COMPONENTS_ALIAS = "@components/"

_DEBUG_CALL = re.compile(r"\bdebug\(")


def is_dsl_module(module: str) -> bool:
    """DSL-only import sources: the DSL package and single-segment @aliases."""
    return module == DSL_MODULE or (module.startswith("@") and "/" not in module)


def business_object_module(name: str, prefix: str) -> str:
    return f"{prefix}{kebab_case(name)}"


def ts_type_of(type_ref) -> str:
    return typescript_type(type_ref.name, type_ref.array) if type_ref else None


def ts_params(params) -> list[str]:
    rendered = []
    for param in params:
        text = param.name + ("?" if param.optional else "")
        if param.type:
            text += f": {ts_type_of(param.type)}"
        rendered.append(text)
    return rendered


def return_type_of(method) -> str:
    base = ts_type_of(method.returnType)
    if base and method.isAsync and not base.startswith("Promise<"):
        return f"Promise<{base}>"
    return base


class ViewBuilder:
    """
    Common state of one page or component synthesis call.

    `bo_prefix` is the relative path from the generated file to the client
    business-objects directory.
    """

    def __init__(self, unit, registry, ctx, class_name: str, file_name: str, bo_prefix: str):
        self.unit = unit
        self.node = unit.node
        self.registry = registry
        self.ctx = ctx
        self.bo_prefix = bo_prefix
        self.source = TsSourceFile(file_name)
        self.cls = TsClass(class_name)
        self.source.classes.append(self.cls)
        self.business_objects = set()

    # ------------------------------------------------------------------
    # Declarations

    def add_business_object(self, name: str) -> None:
        if name in self.business_objects:
            return
        self.business_objects.add(name)
        self.source.add_import(business_object_module(name, self.bo_prefix), name)

    def apply_author_imports(self) -> None:
        """Keep real imports, map @business-objects, drop DSL-only ones."""
        for spec in self.node.imports:
            if spec.module == BUSINESS_OBJECTS_MODULE:
                for name in spec.names:
                    self.add_business_object(name)
            elif is_dsl_module(spec.module):
                self.ctx.debug(f"dropped DSL import from '{spec.module}'")
            else:
                self.source.add_import(spec.module, *spec.names)

    def apply_preamble(self) -> None:
        self.source.add_statement(self.node.preamble)

    def entity_type(self, prop):
        return self.registry.find(UnitKind.ENTITY, prop.type.name)

    def plain_property(self, prop) -> TsProperty:
        if self.entity_type(prop) is not None:
            self.add_business_object(prop.type.name)
        initializer = prop.initializer or None
        if initializer is None and prop.type.array:
            initializer = "[]"
        return TsProperty(
            prop.name,
            ts_type_of(prop.type),
            initializer=initializer,
            optional=bool(prop.optional) or (initializer is None and not prop.type.array),
        )

    def add_methods(self) -> None:
        for method in self.node.methods:
            modifiers = [] if method.config.scope == "public" else [method.config.scope]
            self.cls.add_member(
                TsMethod(
                    method.name,
                    ts_params(method.params),
                    return_type_of(method),
                    method.body,
                    is_async=bool(method.isAsync),
                    modifiers=modifiers,
                )
            )

    def method_call(self, method) -> str:
        return f"await this.{method.name}();" if method.isAsync else f"this.{method.name}();"

    def apply_debug(self, namespace: str) -> None:
        """Methods calling debug(...) get a logger scoped to the method."""
        using = [
            m for m in self.cls.members
            if isinstance(m, TsMethod) and _DEBUG_CALL.search(m.body)
        ]
        if not using:
            return
        self.source.add_import("debug", default="createDebug")
        self.source.add_statement(f"const Debug = createDebug({ts_string(namespace)});")
        for method in using:
            method.prepend(f"const debug = Debug.extend({ts_string(method.name)});")

    # ------------------------------------------------------------------
    # Template and metadata

    def template_html(self) -> str:
        html = convert_template(self.node.template or "").strip()
        return html + "\n" if html else ""

    def template_imports(self, rewrite=None) -> list[str]:
        """Import the template's symbols; returns the standalone import names."""
        names = []
        resolved = resolve_template_imports(self.template_html(), self.registry, self.ctx, exclude=self.unit.name)
        for item in resolved:
            module = rewrite(item.module_specifier) if rewrite else item.module_specifier
            self.source.add_import(module, *item.named_imports)
            names.extend(item.named_imports)
        return sorted(set(names))

    def decorate(self, selector: str, stem: str, suffix: str, imports) -> None:
        self.source.add_import("@angular/core", "Component")
        self.cls.decorators.append(
            TsDecorator(
                "Component",
                [
                    ts_object({
                        "selector": ts_string(selector),
                        "templateUrl": ts_string(f"./{stem}.{suffix}.html"),
                        "styleUrls": f"[{ts_string(f'./{stem}.{suffix}.scss')}]",
                        "imports": ts_array(imports, level=1),
                    })
                ],
            )
        )

    def styles(self) -> str:
        styles = (self.node.styles or "").strip()
        return styles + "\n" if styles else ""


def relative_modules(components_prefix: str, pages_module: str):
    """Rewrite @components/... and @pages specifiers relative to the output file."""
    def rewrite(module: str) -> str:
        if module.startswith(COMPONENTS_ALIAS):
            return components_prefix + module[len(COMPONENTS_ALIAS):]
        if module == PAGES_MODULE:
            return pages_module
        return module
    return rewrite
