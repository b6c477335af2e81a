"""
Angular page synthesis.

On top of the shared view steps a page gets:
- change notification for properties with `onChangeCall`,
- automatic reads (`read: Automatically`) and saves (`save: Automatically`)
  of business-object properties,
- route parameters taken from its `path`, subscribed in ngOnInit and
  released in ngOnDestroy,
- `callOnLoad` methods invoked once the page is initialized.
"""

from design_dsl.api.utils import (
    extract_route_params,
    normalize_route_path,
    page_class,
    page_selector,
    page_stem,
    route_param_property,
)

from .typescript import TsAccessor, TsMethod, TsProperty, ts_string
from .views import ViewBuilder, relative_modules, ts_type_of

AUTOMATICALLY = "Automatically"


def page_paths(unit) -> dict:
    stem = page_stem(unit.name)
    base = f"client/src/app/pages/{stem}/{stem}.page"
    return {"ts": f"{base}.ts", "html": f"{base}.html", "scss": f"{base}.scss"}


def param_key(param: str) -> str:
    """Route parameter name as seen by the router: supplier.id -> supplierId"""
    return normalize_route_path(f":{param}")[1:]


def _filter_value(value: str) -> str:
    """Object and array literals pass through; anything else is a string."""
    return value if value.lstrip().startswith(("{", "[")) else ts_string(value)


def _read_options(prop, extra: dict = None) -> str:
    entries = dict(extra or {})
    if prop.config.include:
        entries["include"] = _filter_value(prop.config.include)
    if prop.config.order:
        entries["order"] = _filter_value(prop.config.order)
    if not entries:
        return ""
    return "{ " + ", ".join(f"{k}: {v}" for k, v in entries.items()) + " }"


class PageBuilder(ViewBuilder):
    def __init__(self, unit, registry, ctx):
        super().__init__(
            unit,
            registry,
            ctx,
            class_name=page_class(unit.name),
            file_name=unit.name,
            bo_prefix="../../business-objects/",
        )
        self.methods = {m.name: m for m in unit.node.methods}
        self.properties = {p.name: p for p in unit.node.properties}

    def after_read(self, prop) -> list[str]:
        name = prop.config.after_read_call
        if not name:
            return []
        method = self.methods.get(name)
        if method is None:
            self.ctx.warning(f"afterReadCall '{name}' of property {prop.name} is not a method")
            return []
        return [self.method_call(method)]

    def change_notified(self, prop) -> None:
        """A private field with a getter, and a setter that calls the handler."""
        type_text = ts_type_of(prop.type)
        handler = prop.config.on_change_call
        if handler not in self.methods:
            self.ctx.warning(f"onChangeCall '{handler}' of property {prop.name} is not a method")
        self.cls.add_member(
            TsProperty(
                f"_{prop.name}",
                type_text,
                initializer=prop.initializer or ("[]" if prop.type.array else None),
                modifiers=["private"],
                optional=not prop.initializer and not prop.type.array,
            )
        )
        self.cls.add_member(TsAccessor("get", prop.name, return_type=type_text, body=f"return this._{prop.name};"))
        self.cls.add_member(
            TsAccessor(
                "set",
                prop.name,
                param=f"value: {type_text}",
                body=f"this._{prop.name} = value;\nthis.{handler}();",
            )
        )

    # ------------------------------------------------------------------
    # Lifecycle

    def route_lines(self) -> list[str]:
        lines = []
        for param in extract_route_params(self.node.path):
            prop_name, field_name = route_param_property(param)
            prop = self.properties.get(prop_name)
            key = ts_string(param_key(param))
            if field_name:
                entity = self.entity_type(prop) if prop is not None else None
                if entity is None:
                    self.ctx.warning(f"route parameter :{param} needs {prop_name} to be a business object; skipped")
                    continue
                where = f"{{ {field_name}: params[{key}] }}"
                options = _read_options(prop, {"where": where})
                lines.append(f"this.{prop_name} = await {prop.type.name}.findOne({options});")
                lines.extend(self.after_read(prop))
            elif prop is not None:
                value = f"Number(params[{key}])" if ts_type_of(prop.type) == "number" else f"params[{key}]"
                lines.append(f"this.{prop_name} = {value};")
            else:
                self.ctx.debug(f"route parameter :{param} has no matching property")
        return lines

    def auto_read_lines(self, routed: set) -> list[str]:
        lines = []
        for prop in self.node.properties:
            if prop.config.read != AUTOMATICALLY or prop.name in routed:
                continue
            if self.entity_type(prop) is None:
                self.ctx.warning(f"property {prop.name} reads automatically but is not a business object")
                continue
            if not prop.type.array:
                self.ctx.warning(f"property {prop.name} reads automatically but no route parameter identifies it")
                continue
            lines.append(f"this.{prop.name} = await {prop.type.name}.find({_read_options(prop)});")
            lines.extend(self.after_read(prop))
        return lines

    def auto_save_lines(self) -> list[str]:
        lines = []
        for prop in self.node.properties:
            if prop.config.save != AUTOMATICALLY:
                continue
            if self.entity_type(prop) is None:
                self.ctx.warning(f"property {prop.name} saves automatically but is not a business object")
                continue
            lines.append(f"{prop.type.name}.autoSave(() => this.{prop.name}, this.destroyRef);")
        return lines

    def lifecycle_hooks(self) -> tuple:
        """Injected fields and the ngOnInit / ngOnDestroy hooks of the page."""
        params = extract_route_params(self.node.path)
        routed = {p.split(".", 1)[0] for p in params if "." in p}
        on_load = [self.method_call(m) for m in self.node.methods if m.config.call_on_load]
        saves = self.auto_save_lines()
        hooks = []
        fields = []

        if saves:
            self.source.add_import("@angular/core", "DestroyRef", "inject")
            fields.append(TsProperty("destroyRef", initializer="inject(DestroyRef)", modifiers=["private"]))

        if params:
            self.source.add_import("@angular/core", "OnInit", "OnDestroy", "inject")
            self.source.add_import("@angular/router", "ActivatedRoute")
            self.source.add_import("rxjs", "Subscription")
            fields.append(TsProperty("route", initializer="inject(ActivatedRoute)", modifiers=["private"]))
            fields.append(TsProperty("routeSubscription", "Subscription", modifiers=["private"], optional=True))

            inner = self.route_lines() + self.auto_read_lines(routed) + on_load
            body = ["this.routeSubscription = this.route.params.subscribe(async (params) => {"]
            body.extend(f"  {line}" for line in inner)
            body.append("});")
            body.extend(saves)
            hooks.append(TsMethod("ngOnInit", return_type="void", body="\n".join(body)))
            hooks.append(TsMethod("ngOnDestroy", return_type="void", body="this.routeSubscription?.unsubscribe();"))
            self.cls.implement("OnInit", "OnDestroy")
        else:
            lines = self.auto_read_lines(routed) + on_load + saves
            if lines:
                self.source.add_import("@angular/core", "OnInit")
                awaited = any("await " in line for line in lines)
                hooks.append(
                    TsMethod(
                        "ngOnInit",
                        return_type="Promise<void>" if awaited else "void",
                        body="\n".join(lines),
                        is_async=awaited,
                    )
                )
                self.cls.implement("OnInit")
        return fields, hooks


def synthesize_page(unit, registry, ctx) -> dict:
    """Return {"ts", "html", "scss"} sources for a page."""
    builder = PageBuilder(unit, registry, ctx)
    builder.apply_author_imports()
    builder.apply_preamble()

    for prop in unit.node.properties:
        if prop.config.on_change_call:
            if builder.entity_type(prop) is not None:
                builder.add_business_object(prop.type.name)
            builder.change_notified(prop)
        else:
            builder.cls.add_member(builder.plain_property(prop))

    fields, hooks = builder.lifecycle_hooks()
    for member in reversed(fields):
        builder.cls.add_member(member, first=True)
    builder.cls.members.extend(hooks)
    builder.add_methods()
    builder.apply_debug(page_stem(unit.name))

    imports = builder.template_imports(rewrite=relative_modules("../../components/", ".."))
    stem = page_stem(unit.name)
    builder.decorate(page_selector(unit), stem, "page", imports)
    builder.source.exported_class()

    return {
        "ts": builder.source.render(),
        "html": builder.template_html(),
        "scss": builder.styles(),
    }
