"""Page path and route utilities."""

import re

from .naming import kebab_case, pluralize

_ROUTE_PARAM = re.compile(r":([A-Za-z_][\w]*(?:\.[A-Za-z_][\w]*)?)")
_DOTTED_PARAM = re.compile(r":(\w+)\.(\w+)")


def extract_route_params(path: str) -> list[str]:
    """
    Return the named parameters of a page path, in order.

    "/suppliers/:supplier.id/contacts/:contactId" -> ["supplier.id", "contactId"]
    """
    if not path:
        return []
    return _ROUTE_PARAM.findall(path)


def route_param_property(param: str) -> tuple:
    """
    Split a route parameter into (property, field).

    "supplier.id" -> ("supplier", "id"); "contactId" -> ("contactId", None)
    """
    if "." in param:
        prop, fld = param.split(".", 1)
        return prop, fld
    return param, None


def normalize_route_path(path: str) -> str:
    """Strip the leading slash and fold dotted params: '/a/:supplier.id' -> 'a/:supplierId'."""
    if not path:
        return ""
    if path.startswith("/"):
        path = path[1:]

    def fold(match):
        prop, fld = match.group(1), match.group(2)
        return f":{prop}{fld[:1].upper()}{fld[1:]}"

    return _DOTTED_PARAM.sub(fold, path)


def segment_count(path: str) -> int:
    return len([s for s in (path or "").split("/") if s])


def collection_path(entity_name: str) -> str:
    """URL segment of an entity collection: SupplierContact -> supplier-contacts."""
    return kebab_case(pluralize(entity_name))
