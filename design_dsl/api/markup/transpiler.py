"""
Block-control markup to Angular control flow.

Templates may use element-style control blocks:

    <if condition="show">...</if><else>...</else>
    <for const="item" of="items" trackBy="item.id" index="i">...</for>
    <switch expression="mode"><case valueExpression="'a'">...</case></switch>

`convert_template` rewrites them into `@if`, `@for` and `@switch` blocks.
Each construct is an independent regex substitution: everything else is
kept byte for byte, and block balance is not checked.
"""

import re

_FOR_ALIASES = (
    ("index", "$index"),
    ("first", "$first"),
    ("last", "$last"),
    ("odd", "$odd"),
    ("even", "$even"),
    ("count", "$count"),
)

_FOR_OPEN = re.compile(
    r'<for\s+const="([^"]*)"\s+of="([^"]*)"'
    r'(?:\s+trackBy="([^"]*)")?'
    + "".join(rf'(?:\s+{name}="([^"]*)")?' for name, _ in _FOR_ALIASES)
    + r"\s*>"
)


def _for_header(match) -> str:
    item, items, track = match.group(1), match.group(2), match.group(3)
    header = f"@for ({item} of {items}; track {track or '$index'}) {{"
    lets = []
    for position, (_, variable) in enumerate(_FOR_ALIASES, start=4):
        alias = match.group(position)
        if alias:
            lets.append(f"@let {alias} = {variable};")
    return f"{header} {' '.join(lets)}" if lets else header


_SUBSTITUTIONS = (
    (re.compile(r'<if\s+condition="([^"]*)"\s*>'), r"@if (\1) {"),
    (re.compile(r"</if>"), "}"),
    (re.compile(r'<else-if\s+condition="([^"]*)"\s*>'), r"} @else if (\1) {"),
    (re.compile(r"</else-if>"), ""),
    (re.compile(r"<else\s*>"), "} @else {"),
    (re.compile(r"</else>"), ""),
    (_FOR_OPEN, _for_header),
    (re.compile(r"</for>"), "}"),
    (re.compile(r"<when-empty\s*>"), "} @empty {"),
    (re.compile(r"</when-empty>"), ""),
    (re.compile(r'<switch\s+expression="([^"]*)"\s*>'), r"@switch (\1) {"),
    (re.compile(r"</switch>"), "}"),
    (re.compile(r'<case\s+valueExpression="([^"]*)"\s*>'), r"@case (\1) {"),
    (re.compile(r"</case>"), "}"),
    (re.compile(r"<default\s*>"), "@default {"),
    (re.compile(r"</default>"), "}"),
)


def convert_template(text: str) -> str:
    """Rewrite block-control markup into Angular control-flow syntax."""
    if not text:
        return ""
    for pattern, replacement in _SUBSTITUTIONS:
        text = pattern.sub(replacement, text)
    return text
