"""
Unit tests for template transpilation and template symbol resolution.
"""

from design_dsl.api.markup import (
    convert_template,
    extract_directive_selectors,
    extract_element_selectors,
    extract_pipe_names,
    matches_directive_selector,
    normalize_attribute,
    parse_template,
    resolve_template_imports,
    strip_not_clauses,
)


class TestTranspiler:
    """Test block-control markup conversion."""

    def test_if(self):
        assert convert_template('<if condition="show"><div>hi</div></if>') == "@if (show) {<div>hi</div>}"

    def test_for_with_track(self):
        source = '<for const="x" of="xs" trackBy="x.id">{{x}}</for>'
        assert convert_template(source) == "@for (x of xs; track x.id) {{{x}}}"

    def test_for_defaults_to_index_tracking(self):
        assert convert_template('<for const="x" of="xs"></for>') == "@for (x of xs; track $index) {}"

    def test_for_aliases(self):
        source = '<for const="x" of="xs" index="i" last="isLast">{{ i }}</for>'
        assert convert_template(source) == (
            "@for (x of xs; track $index) { @let i = $index; @let isLast = $last;{{ i }}}"
        )

    def test_else_if_and_else(self):
        source = (
            '<if condition="a">A</if>'
            '<else-if condition="b">B</else-if>'
            '<else>C</else>'
        )
        assert convert_template(source) == "@if (a) {A}} @else if (b) {B} @else {C"

    def test_empty_block(self):
        source = '<for const="x" of="xs">{{x}}<when-empty>none</when-empty></for>'
        assert convert_template(source) == "@for (x of xs; track $index) {{{x}}} @empty {none}"

    def test_switch(self):
        source = (
            '<switch expression="mode">'
            '<case valueExpression="\'edit\'">E</case>'
            '<default>V</default>'
            '</switch>'
        )
        assert convert_template(source) == "@switch (mode) {@case ('edit') {E}@default {V}}"

    def test_other_markup_is_untouched(self):
        source = '<div class="x">\n  <span>{{ a }}</span>\n</div>\n'
        assert convert_template(source) == source

    def test_empty_input(self):
        assert convert_template("") == ""
        assert convert_template(None) == ""


class TestSelectors:
    """Test directive selector matching."""

    def test_simple(self):
        assert matches_directive_selector("[routerLink]", "routerLink", set(), set())
        assert matches_directive_selector("routerLink", "routerLink", set(), set())
        assert not matches_directive_selector("[routerLink]", "href", set(), set())

    def test_unbalanced_brackets_never_match(self):
        assert not matches_directive_selector("[routerLink", "routerLink", set(), {"routerLink"})
        assert not matches_directive_selector("routerLink]", "routerLink", set(), {"routerLink"})

    def test_compound_needs_element(self):
        assert matches_directive_selector("input[matInput]", "matInput", {"input"}, {"matInput"})
        assert not matches_directive_selector("input[matInput]", "matInput", {"textarea"}, {"matInput"})

    def test_multi_attribute_needs_all(self):
        part = "[confirm][confirmMessage]"
        assert matches_directive_selector(part, "confirm", set(), {"confirm", "confirmMessage"})
        assert not matches_directive_selector(part, "confirm", set(), {"confirm"})

    def test_not_clauses_are_ignored(self):
        assert strip_not_clauses("[matButton]:not(.plain):not([disabled])") == "[matButton]"
        assert matches_directive_selector("[matButton]:not(.plain)", "matButton", set(), set())


class TestTemplateScanning:
    """Test element, attribute and pipe extraction."""

    TEMPLATE = '''
<mat-form-field>
  <input matInput [(ngModel)]="search" placeholder="Search" data-test="q">
</mat-form-field>
<!-- <ignored-element> -->
<p *ngIf="ready" (click)="go()">{{ created | date }}</p>
<span [title]="name | uppercase"></span>
'''

    def test_normalize_attribute(self):
        assert normalize_attribute("[(ngModel)]") == "ngModel"
        assert normalize_attribute("[title]") == "title"
        assert normalize_attribute("(click)") == "click"
        assert normalize_attribute("*ngIf") == "ngIf"
        assert normalize_attribute("class") == "class"

    def test_parse_preserves_case(self):
        parsed = parse_template(self.TEMPLATE)
        assert {"mat-form-field", "input", "p", "span"} == parsed.elements
        assert "matInput" in parsed.attributes

    def test_custom_elements(self):
        assert extract_element_selectors(self.TEMPLATE) == ["mat-form-field"]

    def test_custom_attributes(self):
        assert extract_directive_selectors(self.TEMPLATE) == ["click", "matInput", "ngIf", "ngModel"]

    def test_pipes(self):
        assert extract_pipe_names(self.TEMPLATE) == ["date", "uppercase"]

    def test_blank_template(self):
        parsed = parse_template("   ")
        assert parsed.elements == set() and parsed.attributes == set()


class TestTemplateImports:
    """Test the import list computed for a view template."""

    DESIGN = '''
Component SupplierCard
    selector: "app-supplier-card"
end

Page Detail
    path: "/detail"
end

Interface<Element> MatFormField
    selector: "mat-form-field"
    imports:
        - MatFormFieldModule from "@angular/material/form-field";
end

Interface<Directive> MatInput
    selector: "input[matInput], textarea[matInput]"
    imports:
        - MatInputModule from "@angular/material/input";
end

Interface<Directive> RouterLink
    selector: "[routerLink]"
    imports:
        - RouterLink from "@angular/router";
end

Interface<Pipe> DatePipe
    selector: "date"
    imports:
        - DatePipe from "@angular/common";
end
'''

    TEMPLATE = '''
<mat-form-field><input matInput></mat-form-field>
<app-supplier-card [supplier]="s"></app-supplier-card>
<detail></detail>
<p>{{ s.createdAt | date }}</p>
'''

    def test_imports_sorted_by_module(self, build_registry):
        registry = build_registry(self.DESIGN)
        imports = resolve_template_imports(self.TEMPLATE, registry)
        assert [(i.module_specifier, i.named_imports) for i in imports] == [
            ("@angular/common", ("DatePipe",)),
            ("@angular/material/form-field", ("MatFormFieldModule",)),
            ("@angular/material/input", ("MatInputModule",)),
            ("@components/supplier-card/supplier-card.component", ("SupplierCardComponent",)),
            ("@pages", ("DetailPage",)),
        ]

    def test_view_does_not_import_itself(self, build_registry):
        registry = build_registry(self.DESIGN)
        imports = resolve_template_imports("<app-supplier-card></app-supplier-card>", registry, exclude="SupplierCard")
        assert imports == []

    def test_unknown_element_is_ignored(self, build_registry, ctx):
        registry = build_registry(self.DESIGN)
        assert resolve_template_imports("<x-unknown></x-unknown>", registry, ctx) == []

    def test_empty_template(self, build_registry):
        assert resolve_template_imports("", build_registry(self.DESIGN)) == []
