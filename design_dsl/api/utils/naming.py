"""Identifier case conversion and pluralization for generated names."""

import re

_BOUNDARY_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_BOUNDARY_ACRONYM = re.compile(r"([A-Z]+)([A-Z][a-z])")
_SEPARATORS = re.compile(r"[\s_\-.]+")


def split_words(name: str) -> list[str]:
    """Split an identifier in any case style into its words."""
    if not name:
        return []
    spaced = _BOUNDARY_LOWER_UPPER.sub(r"\1 \2", name)
    spaced = _BOUNDARY_ACRONYM.sub(r"\1 \2", spaced)
    return [w for w in _SEPARATORS.split(spaced) if w]


def kebab_case(name: str) -> str:
    return "-".join(w.lower() for w in split_words(name))


def snake_case(name: str) -> str:
    return "_".join(w.lower() for w in split_words(name))


def pascal_case(name: str) -> str:
    return "".join(w[0].upper() + w[1:].lower() for w in split_words(name))


def camel_case(name: str) -> str:
    pascal = pascal_case(name)
    return pascal[:1].lower() + pascal[1:]


def lower_first(name: str) -> str:
    """Lower-case the first letter only: SupplierContact -> supplierContact."""
    return name[:1].lower() + name[1:]


def pluralize(word: str) -> str:
    """English plural of the last word of an identifier."""
    if not word:
        return word
    if re.search(r"[^aeiouAEIOU]y$", word):
        return word[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", word):
        return word + "es"
    return word + "s"
