"""
Unit tests for the unit registry and project folding.
"""

import typing

import pytest

from design_dsl.api.errors import DuplicateUnitError, UnitNotFoundError
from design_dsl.api.registry import DesignUnit, UnitKind, UnitRegistry, fold_projects, merge_maps


MAIN = '''
Project Main
    defaultDataSource: Db
    parameters:
        - formFieldAppearance: "fill";
end

DataSource Db
    persistenceType: Sqlite
end

DataSource Other
    persistenceType: Memory
end

Entity A
end

Entity B
    dataSource: Other
end
'''

LIB_ONE = '''
Project LibOne
    library: true
    parameters:
        - formFieldAppearance: "outline";
        - favicon: "one.ico";
end
'''

LIB_TWO = '''
Project LibTwo
    library: true
    parameters:
        - favicon: "two.ico";
end
'''


class TestRegistry:
    """Test lookup, ordering and library flags."""

    def test_units_keep_declaration_order(self, build_registry):
        registry = build_registry(MAIN, [LIB_ONE])
        names = [u.name for u in registry]
        assert names == ["LibOne", "Main", "Db", "Other", "A", "B"]

    def test_library_flags(self, build_registry):
        registry = build_registry(MAIN, [LIB_ONE])
        assert registry.find(UnitKind.PROJECT, "LibOne").is_library
        assert not registry.find(UnitKind.ENTITY, "A").is_library
        assert registry.main_project().name == "Main"
        assert [p.name for p in registry.library_projects()] == ["LibOne"]

    def test_get_missing_unit(self, build_registry):
        registry = build_registry(MAIN)
        with pytest.raises(UnitNotFoundError, match="referenced by 'X'"):
            registry.get(UnitKind.ENTITY, "Nope", referenced_by="X")

    def test_duplicate_across_library_and_main(self, build_registry):
        with pytest.raises(DuplicateUnitError):
            build_registry("Entity A end", ["Entity A end"])

    def test_same_name_different_kind_is_allowed(self, build_registry):
        registry = build_registry("Entity Card end\nComponent Card end")
        assert registry.has(UnitKind.ENTITY, "Card")
        assert registry.has(UnitKind.COMPONENT, "Card")

    def test_data_source_defaults_to_project(self, build_registry):
        registry = build_registry(MAIN)
        a = registry.find(UnitKind.ENTITY, "A")
        b = registry.find(UnitKind.ENTITY, "B")
        assert registry.data_source_for(a).name == "Db"
        assert registry.data_source_for(b).name == "Other"
        other = registry.find(UnitKind.DATA_SOURCE, "Other")
        assert [e.name for e in registry.entities_for_data_source(other)] == ["B"]

    def test_no_data_source(self, build_registry):
        registry = build_registry("Entity A end")
        assert registry.data_source_for(registry.find(UnitKind.ENTITY, "A")) is None

    def test_load_from_directories(self, write_ddsl_file):
        main = write_ddsl_file(MAIN, subdir="main")
        lib = write_ddsl_file(LIB_ONE, subdir="lib")
        registry = UnitRegistry.load(main.parent, [lib.parent])
        assert len(registry) == 6
        assert registry.find(UnitKind.ENTITY, "A").source_path == main

    def test_list_by_kind(self, build_registry):
        registry = build_registry(MAIN)
        assert [u.name for u in registry.list(UnitKind.ENTITY)] == ["A", "B"]
        assert [u.name for u in registry.list(UnitKind.DATA_SOURCE)] == ["Db", "Other"]
        assert len(registry.list()) == 5

    def test_annotations_resolve(self):
        hints = typing.get_type_hints(UnitRegistry.entities_for_data_source)
        assert hints["return"] == list[DesignUnit]


class TestFolding:
    """Test library/main precedence for aggregate values."""

    def test_fold_order(self, build_registry):
        registry = build_registry(MAIN, [LIB_ONE, LIB_TWO])
        assert [p.name for p in fold_projects(registry)] == ["LibTwo", "LibOne", "Main"]

    def test_parameter_values_main_wins(self, build_registry):
        registry = build_registry(MAIN, [LIB_ONE, LIB_TWO])
        values = registry.parameter_values()
        assert values["formFieldAppearance"] == "fill"
        # the first declared library wins over later ones
        assert values["favicon"] == "one.ico"

    def test_merge_maps(self):
        merged = merge_maps([{"a": 1, "b": 1}, {"b": 2, "c": 2}])
        assert merged == {"a": 1, "b": 2, "c": 2}
        assert list(merged) == ["a", "b", "c"]
