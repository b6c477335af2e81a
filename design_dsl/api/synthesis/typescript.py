"""
A small TypeScript code model and printer.

Generated TypeScript (pages, components, client business objects) is built
as a TsSourceFile of imports, free statements and classes, edited in place
and printed once. The printer uses single quotes and two-space indentation.
"""

import textwrap
from dataclasses import dataclass, field
from typing import Optional

from design_dsl.api.errors import MissingDeclarationError

INDENT = "  "
ANGULAR_CORE = "@angular/core"


def ts_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def ts_object(entries: dict, level: int = 0) -> str:
    """Print a dict of already-rendered values as a multi-line object literal."""
    if not entries:
        return "{}"
    pad = INDENT * (level + 1)
    lines = [f"{pad}{key}: {value}," for key, value in entries.items()]
    return "{\n" + "\n".join(lines) + "\n" + INDENT * level + "}"


def ts_array(items, level: int = 0, inline_limit: int = 3) -> str:
    items = list(items)
    if len(items) <= inline_limit:
        return "[" + ", ".join(items) + "]"
    pad = INDENT * (level + 1)
    return "[\n" + ",\n".join(f"{pad}{item}" for item in items) + ",\n" + INDENT * level + "]"


def _indent_block(text: str, level: int) -> str:
    return textwrap.indent(text, INDENT * level, lambda line: bool(line.strip()))


@dataclass
class TsImport:
    module: str
    names: list = field(default_factory=list)
    default: Optional[str] = None

    def add(self, *names: str) -> None:
        for name in names:
            if name and name not in self.names:
                self.names.append(name)

    def render(self) -> str:
        parts = []
        if self.default:
            parts.append(self.default)
        if self.names:
            parts.append("{ " + ", ".join(sorted(self.names)) + " }")
        if not parts:
            return f"import {ts_string(self.module)};"
        return f"import {', '.join(parts)} from {ts_string(self.module)};"


@dataclass
class TsDecorator:
    name: str
    arguments: list = field(default_factory=list)

    def render(self) -> str:
        return f"@{self.name}({', '.join(self.arguments)})"


@dataclass
class TsStatement:
    text: str

    def render(self) -> str:
        return self.text


@dataclass
class TsProperty:
    name: str
    type: Optional[str] = None
    initializer: Optional[str] = None
    modifiers: list = field(default_factory=list)
    decorators: list = field(default_factory=list)
    optional: bool = False
    definite: bool = False

    def render(self) -> str:
        head = " ".join([d.render() for d in self.decorators] + self.modifiers + [self.name])
        if self.optional:
            head += "?"
        elif self.definite:
            head += "!"
        if self.type:
            head += f": {self.type}"
        if self.initializer is not None:
            head += f" = {self.initializer}"
        return head + ";"


@dataclass
class TsMethod:
    name: str
    params: list = field(default_factory=list)
    return_type: Optional[str] = None
    body: str = ""
    is_async: bool = False
    modifiers: list = field(default_factory=list)
    decorators: list = field(default_factory=list)

    def signature(self) -> str:
        words = [d.render() for d in self.decorators] + list(self.modifiers)
        if self.is_async:
            words.append("async")
        head = " ".join(words + [f"{self.name}({', '.join(self.params)})"])
        return head + (f": {self.return_type}" if self.return_type else "")

    def prepend(self, *lines: str) -> None:
        prefix = "\n".join(lines)
        self.body = f"{prefix}\n{self.body}" if self.body.strip() else prefix

    def append(self, *lines: str) -> None:
        suffix = "\n".join(lines)
        self.body = f"{self.body.rstrip()}\n{suffix}" if self.body.strip() else suffix

    def render(self) -> str:
        if not self.body.strip():
            return f"{self.signature()} {{}}"
        return f"{self.signature()} {{\n{_indent_block(self.body.rstrip(), 1)}\n}}"


@dataclass
class TsAccessor:
    kind: str  # "get" or "set"
    name: str
    param: Optional[str] = None
    return_type: Optional[str] = None
    body: str = ""

    def render(self) -> str:
        params = self.param or ""
        head = f"{self.kind} {self.name}({params})"
        if self.return_type:
            head += f": {self.return_type}"
        return f"{head} {{\n{_indent_block(self.body.rstrip(), 1)}\n}}"


@dataclass
class TsClass:
    name: str
    exported: bool = True
    extends: Optional[str] = None
    implements: list = field(default_factory=list)
    decorators: list = field(default_factory=list)
    members: list = field(default_factory=list)

    def find_member(self, name: str, kind=None):
        for member in self.members:
            if member.name == name and (kind is None or isinstance(member, kind)):
                return member
        return None

    def get_method(self, name: str) -> TsMethod:
        method = self.find_member(name, TsMethod)
        if method is None:
            raise MissingDeclarationError(self.name, f"method {name}")
        return method

    def add_member(self, member, first: bool = False) -> None:
        if first:
            self.members.insert(0, member)
        else:
            self.members.append(member)

    def implement(self, *interfaces: str) -> None:
        for interface in interfaces:
            if interface not in self.implements:
                self.implements.append(interface)

    def render(self) -> str:
        lines = [d.render() for d in self.decorators]
        head = f"{'export ' if self.exported else ''}class {self.name}"
        if self.extends:
            head += f" extends {self.extends}"
        if self.implements:
            head += f" implements {', '.join(self.implements)}"
        if not self.members:
            lines.append(head + " {}")
            return "\n".join(lines)

        blocks = []
        previous = None
        for member in self.members:
            text = _indent_block(member.render(), 1)
            field_like = isinstance(member, TsProperty)
            if blocks and not (field_like and isinstance(previous, TsProperty)):
                blocks.append("")
            blocks.append(text)
            previous = member
        lines.append(head + " {")
        lines.extend(blocks)
        lines.append("}")
        return "\n".join(lines)


@dataclass
class TsSourceFile:
    name: str
    imports: list = field(default_factory=list)
    statements: list = field(default_factory=list)
    classes: list = field(default_factory=list)
    epilogue: list = field(default_factory=list)

    # ------------------------------------------------------------------
    # Imports

    def find_import(self, module: str) -> Optional[TsImport]:
        return next((i for i in self.imports if i.module == module), None)

    def add_import(self, module: str, *names: str, default: str = None) -> TsImport:
        """Merge names into the import of `module`, creating it if needed."""
        existing = self.find_import(module)
        if existing is None:
            existing = TsImport(module)
            if module == ANGULAR_CORE:
                self.imports.insert(0, existing)
            else:
                self.imports.append(existing)
        existing.add(*names)
        if default and not existing.default:
            existing.default = default
        return existing

    def remove_imports(self, predicate) -> list:
        removed = [i for i in self.imports if predicate(i.module)]
        self.imports = [i for i in self.imports if not predicate(i.module)]
        return removed

    def imported_names(self) -> set:
        names = set()
        for item in self.imports:
            names.update(item.names)
            if item.default:
                names.add(item.default)
        return names

    # ------------------------------------------------------------------
    # Declarations

    def exported_class(self) -> TsClass:
        cls = next((c for c in self.classes if c.exported), None)
        if cls is None:
            raise MissingDeclarationError(self.name, "exported class")
        return cls

    def add_statement(self, text: str) -> None:
        if text and text.strip():
            self.statements.append(TsStatement(text.rstrip()))

    def render(self) -> str:
        sections = []
        if self.imports:
            core = [i for i in self.imports if i.module == ANGULAR_CORE]
            rest = [i for i in self.imports if i.module != ANGULAR_CORE]
            sections.append("\n".join(i.render() for i in core + rest))
        if self.statements:
            sections.append("\n".join(s.render() for s in self.statements))
        for cls in self.classes:
            sections.append(cls.render())
        for statement in self.epilogue:
            sections.append(statement.render())
        return "\n\n".join(sections) + "\n"
