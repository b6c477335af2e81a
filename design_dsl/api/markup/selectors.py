"""Directive selector matching against the symbols of a template."""

import re

_NOT_CLAUSE = re.compile(r":not\([^)]+\)")
_SIMPLE = re.compile(r"^(?:\[([\w-]+)\]|([\w-]+))$")
_COMPOUND = re.compile(r"^([\w-]+)\[([^\]]+)\]$")
_BRACKETED = re.compile(r"\[([^\]]+)\]")


def strip_not_clauses(selector: str) -> str:
    previous = None
    while previous != selector:
        previous = selector
        selector = _NOT_CLAUSE.sub("", selector)
    return selector.strip()


def matches_directive_selector(selector_part: str, attribute: str, elements, all_attributes) -> bool:
    """
    Does one comma-separated part of a directive selector match `attribute`?

    - `[attr]` or `attr` matches when it names the attribute.
    - `tag[attr]` also needs `tag` among the template's elements.
    - `[a][b]` needs every named attribute in the template.
    """
    part = strip_not_clauses(selector_part)
    if not part:
        return False

    simple = _SIMPLE.match(part)
    if simple:
        return (simple.group(1) or simple.group(2)) == attribute

    compound = _COMPOUND.match(part)
    if compound:
        tag, attr = compound.group(1), compound.group(2)
        return attr == attribute and tag in elements

    if "][" in part:
        required = _BRACKETED.findall(part)
        return attribute in required and all(name in all_attributes for name in required)

    return False


def selector_parts(selector: str) -> list[str]:
    return [p.strip() for p in (selector or "").split(",") if p.strip()]
