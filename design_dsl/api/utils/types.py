"""
Mapping of design-level property types to Python and TypeScript types.

Design types are written the way authors think of them (string, number,
Date, ...). Entity and component names are not scalar types; those are
resolved by the relationship and mixin resolvers.
"""

from typing import Optional

# design type (lower-cased) -> (python annotation, typescript type, identity class)
SCALAR_TYPES = {
    "string": ("str", "string", "string"),
    "text": ("str", "string", "string"),
    "uuid": ("str", "string", "string"),
    "email": ("str", "string", "string"),
    "number": ("float", "number", "number"),
    "integer": ("int", "number", "number"),
    "serial": ("int", "number", "number"),
    "boolean": ("bool", "boolean", None),
    "date": ("date", "Date", None),
    "datetime": ("datetime", "Date", None),
    "any": ("Any", "any", None),
    "object": ("dict[str, Any]", "Record<string, any>", None),
    "json": ("dict[str, Any]", "Record<string, any>", None),
    "void": ("None", "void", None),
}

# Python imports a scalar annotation needs
_PYTHON_IMPORTS = {
    "date": ("datetime", "date"),
    "datetime": ("datetime", "datetime"),
    "Any": ("typing", "Any"),
    "dict[str, Any]": ("typing", "Any"),
}


def is_scalar(type_name: str) -> bool:
    return bool(type_name) and type_name.lower() in SCALAR_TYPES


def identity_type(type_name: str) -> Optional[str]:
    """Return 'number' or 'string' when the type can hold an identity, else None."""
    entry = SCALAR_TYPES.get((type_name or "").lower())
    return entry[2] if entry else None


def python_type(type_name: str, array: bool = False, forward_refs: frozenset = frozenset()) -> str:
    """
    Python annotation text for a design type.

    Names listed in forward_refs (usually entity class names) are emitted as
    string forward references; unknown names fall back to Any.
    """
    entry = SCALAR_TYPES.get((type_name or "").lower())
    if entry:
        base = entry[0]
    elif type_name in forward_refs:
        base = f'"{type_name}"'
    else:
        base = "Any"
    return f"list[{base}]" if array else base


def python_type_import(annotation: str) -> Optional[tuple]:
    """(module, name) to import for a scalar annotation, if any."""
    inner = annotation[5:-1] if annotation.startswith("list[") else annotation
    return _PYTHON_IMPORTS.get(inner)


def typescript_type(type_name: str, array: bool = False) -> str:
    """TypeScript type text for a design type; non-scalar names pass through."""
    entry = SCALAR_TYPES.get((type_name or "").lower())
    base = entry[1] if entry else type_name or "any"
    return f"{base}[]" if array else base
