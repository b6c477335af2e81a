"""
Unit tests for parsing and model validation.

Covers raw code blocks, option bags and the semantic checks that run as
textX object and model processors.
"""

import pytest
from textx import TextXSemanticError, TextXSyntaxError

from design_dsl.language import (
    build_model,
    build_model_str,
    get_model_behaviors,
    get_model_entities,
    iter_design_files,
)


class TestParsing:
    """Test that design units parse into the expected model."""

    def test_entity_properties_and_options(self):
        model = build_model_str('''
Entity Supplier
    properties:
        - id: integer (id);
        - name: string (required, displayName: "Supplier Name", placeholder: "Acme");
        - phone?: string (requiredWhen: "!email");
        - tags: string[];
end
''')
        supplier = get_model_entities(model)[0]
        props = {p.name: p for p in supplier.properties}

        assert props["id"].config.id is True
        assert props["name"].config.required is True
        assert props["name"].config.display_name == "Supplier Name"
        assert props["name"].config.placeholder == "Acme"
        assert props["phone"].optional is True
        assert props["phone"].config.required_when.condition == "!email"
        assert props["tags"].type.array is True

    def test_object_option_values(self):
        model = build_model_str('''
Entity Note
    properties:
        - body: text (column: { dataType: "text", length: 2000 });
end
''')
        prop = get_model_entities(model)[0].properties[0]
        assert prop.config.column == {"dataType": "text", "length": 2000}

    def test_raw_blocks_are_dedented(self):
        model = build_model_str('''
Behavior Greet on Supplier
    type: Instance
    function greet(supplier) ```
        if supplier.name:
            return "hello"
    ```
end
''')
        behavior = model.units[0]
        assert behavior.function.body == 'if supplier.name:\n    return "hello"'

    def test_behavior_names_its_owner(self):
        model = build_model_str('''
Entity A
end

Behavior Touch on A
    type: Instance
    function touch(a) ```pass```
end
''')
        [behavior] = get_model_behaviors(model)
        assert behavior.owner == "A"
        assert behavior.parent is model
        assert [e.name for e in get_model_entities(model)] == ["A"]

    def test_inline_code_initializer(self):
        model = build_model_str('''
Entity Flag
    properties:
        - active: boolean = `true`;
end
''')
        assert get_model_entities(model)[0].properties[0].initializer == "true"

    def test_sections_in_any_order(self):
        model = build_model_str('''
Page Home
    template: ```<p>hi</p>```
    path: "/home"
end
''')
        page = model.units[0]
        assert page.path == "/home"
        assert page.template == "<p>hi</p>"

    def test_syntax_error(self):
        with pytest.raises(TextXSyntaxError):
            build_model_str("Entity Broken properties: - name string; end")


class TestValidation:
    """Test semantic errors raised while building a model."""

    def test_unknown_option_is_rejected(self):
        with pytest.raises(TextXSemanticError, match="Invalid options"):
            build_model_str('''
Entity A
    properties:
        - name: string (bogus);
end
''')

    def test_duplicate_option_is_rejected(self):
        with pytest.raises(TextXSemanticError, match="more than once"):
            build_model_str('''
Entity A
    properties:
        - name: string (required, required);
end
''')

    def test_two_identity_properties(self):
        with pytest.raises(TextXSemanticError, match="more than one identity"):
            build_model_str('''
Entity A
    properties:
        - code: string (id);
        - key: string (id);
end
''')

    def test_identity_must_be_number_or_string(self):
        with pytest.raises(TextXSemanticError, match="must be a number or string"):
            build_model_str('''
Entity A
    properties:
        - flag: boolean (id);
end
''')

    def test_has_many_requires_array(self):
        with pytest.raises(TextXSemanticError, match="not an array"):
            build_model_str('''
Entity A
    properties:
        - b: B (hasMany);
end
''')

    def test_conflicting_association_markers(self):
        with pytest.raises(TextXSemanticError, match="conflicting association markers"):
            build_model_str('''
Entity A
    properties:
        - b: B (belongsTo, references);
end
''')

    def test_unknown_behavior_type(self):
        with pytest.raises(TextXSemanticError, match="unknown type"):
            build_model_str('''
Behavior Odd on A
    type: "Sometimes"
    function odd() ```pass```
end
''')

    def test_duplicate_unit_names(self):
        with pytest.raises(TextXSemanticError, match="already exists"):
            build_model_str('''
Entity A
end

Entity A
end
''')

    def test_dotted_route_parameter_needs_property(self):
        with pytest.raises(TextXSemanticError, match="does not match a page property"):
            build_model_str('''
Page Detail
    path: "/suppliers/:supplier.id"
end
''')

    def test_call_on_load_only_on_pages(self):
        with pytest.raises(TextXSemanticError, match="cannot use callOnLoad"):
            build_model_str('''
Component Card
    methods:
        - load() (callOnLoad) ```return;```
end
''')


class TestDesignFiles:
    """Test loading design files from disk."""

    def test_build_model_from_file(self, write_ddsl_file):
        path = write_ddsl_file('''
Entity A
    properties:
        - name: string;
end
''')
        model = build_model(path)
        assert [e.name for e in get_model_entities(model)] == ["A"]

    def test_iter_design_files_is_sorted(self, write_ddsl_file):
        write_ddsl_file("Entity B end", name="b.ddsl")
        path = write_ddsl_file("Entity A end", name="a.ddsl")
        files = iter_design_files(path.parent)
        assert [f.name for f in files] == ["a.ddsl", "b.ddsl"]

    def test_missing_directory(self, temp_output_dir):
        with pytest.raises(FileNotFoundError):
            iter_design_files(temp_output_dir / "nope")
