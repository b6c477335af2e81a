"""Template transpilation and symbol resolution."""

from .transpiler import convert_template
from .parser import (
    STANDARD_HTML_ATTRIBUTES,
    STANDARD_HTML_ELEMENTS,
    ParsedTemplate,
    parse_template,
    normalize_attribute,
    extract_element_selectors,
    extract_directive_selectors,
    extract_pipe_names,
)
from .selectors import matches_directive_selector, strip_not_clauses
from .imports import TemplateImport, resolve_template_imports

__all__ = [
    "convert_template",
    "STANDARD_HTML_ATTRIBUTES",
    "STANDARD_HTML_ELEMENTS",
    "ParsedTemplate",
    "parse_template",
    "normalize_attribute",
    "extract_element_selectors",
    "extract_directive_selectors",
    "extract_pipe_names",
    "matches_directive_selector",
    "strip_not_clauses",
    "TemplateImport",
    "resolve_template_imports",
]
