"""
Unit tests for structural edits of generated Python modules.
"""

import ast

import pytest

from design_dsl.api.errors import MissingDeclarationError
from design_dsl.api.synthesis.python_module import PythonModule
from design_dsl.api.templating import template_env

SKELETON = '''"""Orders."""
from typing import Any
from app.core.base import BusinessObject


class Order(BusinessObject):

    @classmethod
    async def create(cls, data_items):
        records = await cls.data_source.create("orders", data_items)
        return [cls(**r) for r in records]


def helper():
    pass
'''


def _imports(text: str) -> list:
    return [
        (node.module, [a.name for a in node.names])
        for node in ast.parse(text).body
        if isinstance(node, ast.ImportFrom)
    ]


class TestImports:
    """Test import merging."""

    def test_merge_into_existing_import(self):
        module = PythonModule(SKELETON)
        module.merge_import("typing", ["Optional", "Any", "Optional"])
        assert ("typing", ["Any", "Optional"]) in _imports(module.render())

    def test_re_adding_is_a_no_op(self):
        module = PythonModule(SKELETON)
        before = module.render()
        module.merge_import("typing", ["Any"])
        assert module.render() == before

    def test_new_import_goes_after_existing_imports(self):
        module = PythonModule(SKELETON)
        module.merge_import("datetime", ["datetime", "date"])
        assert _imports(module.render()) == [
            ("typing", ["Any"]),
            ("app.core.base", ["BusinessObject"]),
            ("datetime", ["date", "datetime"]),
        ]

    def test_author_import_block(self):
        module = PythonModule(SKELETON)
        module.add_import_source("import json\nfrom typing import List\nfrom decimal import Decimal as D\n")
        text = module.render()
        assert "import json" in text
        assert "from typing import Any, List" in text
        assert "from decimal import Decimal as D" in text

    def test_author_import_block_rejects_code(self):
        module = PythonModule(SKELETON)
        with pytest.raises(ValueError, match="Only import statements"):
            module.add_import_source("x = 1\n")


class TestBodies:
    """Test methods, functions and lifecycle splices."""

    def test_add_method_keeps_body_verbatim(self):
        module = PythonModule(SKELETON)
        module.add_method(
            "Order",
            "cancel",
            params=["reason"],
            body='# keep me\nself.total = 0\nreturn self',
            is_async=True,
        )
        text = module.render()
        assert "    async def cancel(self, reason):\n" in text
        assert "        # keep me\n        self.total = 0\n        return self\n" in text

    def test_empty_body_becomes_pass(self):
        module = PythonModule(SKELETON)
        module.add_method("Order", "noop")
        assert "    def noop(self):\n        pass\n" in module.render()

    def test_splice_before_persistence_call(self):
        module = PythonModule(SKELETON)
        module.splice("Order", "create", "check(data_items)")
        module.splice("Order", "create", "audit(data_items)")
        text = module.render()
        first = text.index("check(data_items)")
        second = text.index("audit(data_items)")
        call = text.index("records = await cls.data_source.create")
        assert first < second < call

    def test_splice_after_with_aliases(self):
        module = PythonModule(SKELETON)
        module.splice("Order", "create", "notify(created)", position="after", aliases={"created": "records"})
        text = module.render()
        call = text.index("records = await cls.data_source.create")
        alias = text.index("created = records")
        body = text.index("notify(created)")
        assert call < alias < body < text.index("return [cls(**r) for r in records]")

    def test_splice_needs_persistence_call(self):
        module = PythonModule(SKELETON)
        module.add_method("Order", "plain", body="return 1")
        with pytest.raises(MissingDeclarationError, match="persistence call"):
            module.splice("Order", "plain", "pass")

    def test_missing_method(self):
        with pytest.raises(MissingDeclarationError, match="method Order.update"):
            PythonModule(SKELETON).get_method("Order", "update")

    def test_add_function_before(self):
        module = PythonModule(SKELETON)
        module.add_function("first", body="return 1", before="helper")
        module.add_function("last", body="return 2")
        names = [n.name for n in ast.parse(module.render()).body if isinstance(n, ast.FunctionDef)]
        assert names == ["first", "helper", "last"]

    def test_render_header(self):
        text = PythonModule(SKELETON).render(header="# Generated")
        assert text.startswith("# Generated\n")
        assert text.endswith("\n")


class TestTemplates:
    """Test modules rendered from Jinja skeletons."""

    def test_name_reaches_the_template(self):
        module = PythonModule.from_template(
            template_env("server"),
            "app_behavior.py.jinja",
            name="Seed",
            kind="After Start",
            project="Shop",
            module="seed",
            endpoint=False,
            is_async=True,
            function="seed",
            params=[],
            returns=None,
        )
        assert module.name == "Seed"
        assert ast.get_docstring(module.tree) == "Seed: After Start behavior of Shop."
        assert module.get_function("seed").name == "seed"
