"""
Editable Python module.

A generated Python file starts as a Jinja-rendered skeleton. The skeleton is
parsed with `ast`, edited structurally (imports merged, methods added,
lifecycle code spliced around persistence calls) and unparsed again.

Author-supplied bodies are never parsed: they travel through the tree as
`__verbatim__(N)` placeholder statements and are substituted, re-indented,
when the module is rendered.
"""

import ast
import re
import textwrap
from typing import Optional

from design_dsl.api.errors import MissingDeclarationError

VERBATIM = "__verbatim__"

_PLACEHOLDER_LINE = re.compile(rf"^(?P<indent>[ \t]*){VERBATIM}\((?P<index>\d+)\)$", re.MULTILINE)

PERSISTENCE_ATTRIBUTE = "data_source"

FunctionNode = (ast.FunctionDef, ast.AsyncFunctionDef)


def _statements(source: str) -> list:
    return ast.parse(textwrap.dedent(source)).body


def _expression(source: str) -> ast.expr:
    return ast.parse(source, mode="eval").body


def _is_persistence_statement(node) -> bool:
    """True when the statement touches `cls.data_source` / `self.data_source`."""
    for child in ast.walk(node):
        if isinstance(child, ast.Attribute) and child.attr == PERSISTENCE_ATTRIBUTE:
            if isinstance(child.value, ast.Name) and child.value.id in ("cls", "self"):
                return True
    return False


class PythonModule:
    def __init__(self, source: str, name: str = "<module>"):
        self.name = name
        self.tree = ast.parse(source)
        self._verbatim: list[str] = []
        self._after_splices: dict[tuple, int] = {}

    @classmethod
    def from_template(cls, env, template_name: str, name: str = None, **context) -> "PythonModule":
        """Render a skeleton; `name` labels the module and is also visible to the template."""
        source = env.get_template(template_name).render(name=name, **context)
        return cls(source, name or template_name)

    # ------------------------------------------------------------------
    # Lookup

    def find_class(self, name: str) -> Optional[ast.ClassDef]:
        return next(
            (n for n in self.tree.body if isinstance(n, ast.ClassDef) and n.name == name),
            None,
        )

    def get_class(self, name: str) -> ast.ClassDef:
        cls_node = self.find_class(name)
        if cls_node is None:
            raise MissingDeclarationError(self.name, f"class {name}")
        return cls_node

    def get_method(self, class_name: str, method_name: str):
        cls_node = self.get_class(class_name)
        for node in cls_node.body:
            if isinstance(node, FunctionNode) and node.name == method_name:
                return node
        raise MissingDeclarationError(self.name, f"method {class_name}.{method_name}")

    def get_function(self, name: str):
        for node in self.tree.body:
            if isinstance(node, FunctionNode) and node.name == name:
                return node
        raise MissingDeclarationError(self.name, f"function {name}")

    def has_method(self, class_name: str, method_name: str) -> bool:
        cls_node = self.find_class(class_name)
        return cls_node is not None and any(
            isinstance(n, FunctionNode) and n.name == method_name for n in cls_node.body
        )

    # ------------------------------------------------------------------
    # Imports

    def _import_insert_index(self) -> int:
        index = 0
        for position, node in enumerate(self.tree.body):
            if isinstance(node, (ast.Import, ast.ImportFrom)):
                index = position + 1
            elif position == 0 and isinstance(node, ast.Expr) and isinstance(node.value, ast.Constant):
                index = 1
        return index

    def merge_import(self, module: str, names) -> None:
        """
        Add `from module import names`, merging into an existing import of
        the same module. Names already imported are left alone; the merged
        name list is kept sorted.
        """
        names = [n for n in names if n]
        if not names:
            return
        for node in self.tree.body:
            if isinstance(node, ast.ImportFrom) and node.module == module and node.level == 0:
                present = {alias.name for alias in node.names}
                missing = [n for n in names if n not in present]
                if missing:
                    node.names = sorted(
                        node.names + [ast.alias(name=n) for n in dict.fromkeys(missing)],
                        key=lambda alias: alias.name,
                    )
                return
        node = ast.ImportFrom(
            module=module,
            names=[ast.alias(name=n) for n in sorted(dict.fromkeys(names))],
            level=0,
        )
        self.tree.body.insert(self._import_insert_index(), node)

    def add_import(self, module: str) -> None:
        for node in self.tree.body:
            if isinstance(node, ast.Import) and any(a.name == module for a in node.names):
                return
        self.tree.body.insert(self._import_insert_index(), ast.Import(names=[ast.alias(name=module)]))

    def add_import_source(self, source: str) -> None:
        """Merge the import statements of an author-supplied block."""
        if not source or not source.strip():
            return
        for node in _statements(source):
            if isinstance(node, ast.ImportFrom) and node.level == 0:
                plain = [a.name for a in node.names if a.asname is None]
                self.merge_import(node.module, plain)
                for alias in node.names:
                    if alias.asname is not None:
                        self.tree.body.insert(
                            self._import_insert_index(),
                            ast.ImportFrom(module=node.module, names=[alias], level=0),
                        )
            elif isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.asname is None:
                        self.add_import(alias.name)
                    else:
                        self.tree.body.insert(self._import_insert_index(), ast.Import(names=[alias]))
            else:
                raise ValueError(f"Only import statements are allowed in an imports block, got: {ast.unparse(node)}")

    # ------------------------------------------------------------------
    # Bodies

    def verbatim(self, body: str) -> ast.stmt:
        """Placeholder statement for a body that is emitted as written."""
        self._verbatim.append(body or "")
        return _statements(f"{VERBATIM}({len(self._verbatim) - 1})")[0]

    def add_method(
        self,
        class_name: str,
        name: str,
        params=(),
        body: str = "",
        is_async: bool = False,
        decorators=(),
        returns: str = None,
        prologue=(),
        receiver: str = "self",
    ):
        """
        Append a method whose body is `prologue` statements followed by a
        verbatim body. Parameters are given as source text ("name: str = None").
        """
        cls_node = self.get_class(class_name)
        header = ", ".join([receiver, *params]) if receiver else ", ".join(params)
        keyword = "async def" if is_async else "def"
        annotation = f" -> {returns}" if returns else ""
        function = _statements(f"{keyword} {name}({header}){annotation}:\n    pass")[0]
        statements = []
        for line in prologue:
            statements.extend(_statements(line))
        statements.append(self.verbatim(body))
        function.body = statements
        function.decorator_list = [_expression(d) for d in decorators]
        cls_node.body = [n for n in cls_node.body if not _is_pass(n)]
        cls_node.body.append(function)
        return function

    def add_function(
        self,
        name: str,
        params=(),
        body: str = "pass",
        is_async: bool = False,
        decorators=(),
        returns: str = None,
        before: str = None,
    ):
        """
        Add a module-level function built from generated source lines.

        The function is appended, or inserted ahead of the function named
        `before` when it exists.
        """
        keyword = "async def" if is_async else "def"
        annotation = f" -> {returns}" if returns else ""
        indented = textwrap.indent(body, "    ")
        function = _statements(f"{keyword} {name}({', '.join(params)}){annotation}:\n{indented}")[0]
        function.decorator_list = [_expression(d) for d in decorators]
        index = next(
            (i for i, n in enumerate(self.tree.body) if isinstance(n, FunctionNode) and n.name == before),
            len(self.tree.body),
        )
        self.tree.body.insert(index, function)
        return function

    def add_decorator(self, function, decorator: str) -> None:
        function.decorator_list.append(_expression(decorator))

    def splice(self, class_name: str, method_name: str, body: str, position: str = "before", aliases=None) -> None:
        """
        Insert a verbatim body into a method, around its persistence call.

        `aliases` maps local names to expressions; they are assigned just
        before the body so that it can refer to them. Successive splices at
        the same position keep their call order.
        """
        if position not in ("before", "after"):
            raise ValueError(f"Unknown splice position '{position}'.")
        method = self.get_method(class_name, method_name)
        anchor = next((i for i, n in enumerate(method.body) if _is_persistence_statement(n)), None)
        if anchor is None:
            raise MissingDeclarationError(self.name, f"persistence call in {class_name}.{method_name}")

        statements = []
        for alias, expression in (aliases or {}).items():
            statements.extend(_statements(f"{alias} = {expression}"))
        statements.append(self.verbatim(body))

        key = (class_name, method_name)
        if position == "before":
            index = anchor
        else:
            index = anchor + 1 + self._after_splices.get(key, 0)
            self._after_splices[key] = self._after_splices.get(key, 0) + len(statements)
        method.body[index:index] = statements

    # ------------------------------------------------------------------
    # Output

    def render(self, header: str = None) -> str:
        ast.fix_missing_locations(self.tree)
        text = ast.unparse(self.tree)

        def substitute(match):
            body = self._verbatim[int(match.group("index"))]
            indent = match.group("indent")
            if not body.strip():
                return f"{indent}pass"
            return textwrap.indent(body.rstrip("\n"), indent, lambda line: bool(line.strip()))

        text = _PLACEHOLDER_LINE.sub(substitute, text)
        if header:
            text = f"{header}\n{text}"
        return text if text.endswith("\n") else text + "\n"


def _is_pass(node) -> bool:
    return isinstance(node, ast.Pass)
