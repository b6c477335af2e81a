"""
Template scanning for symbol resolution.

Templates are scanned with the markup grammar into tag and attribute names.
Binding syntax is normalized so that `[(ngModel)]`, `[ngModel]`,
`(ngModel)` and `*ngModel` all count as the attribute `ngModel`.
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache

from textx import TextXError, get_children_of_type

from design_dsl.api.gen_logging import get_logger
from design_dsl.language import get_markup_metamodel

logger = get_logger(__name__)

STANDARD_HTML_ELEMENTS = frozenset([
    "div", "span", "p", "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "li", "a", "button", "input", "form", "label",
    "table", "tr", "td", "th", "thead", "tbody",
    "main", "section", "header", "footer", "nav", "article", "aside",
    "img", "br", "hr", "pre", "code", "strong", "em", "small", "blockquote",
    "select", "option", "textarea", "fieldset", "legend",
    "iframe", "video", "audio", "source", "canvas",
    "svg", "path", "circle", "rect", "line", "polygon", "g",
])

STANDARD_HTML_ATTRIBUTES = frozenset([
    "class", "style", "id", "src", "href", "value", "disabled", "checked", "selected",
    "readonly", "required", "type", "name", "placeholder", "alt", "title", "width",
    "height", "min", "max", "step", "maxlength", "minlength", "pattern", "autocomplete",
    "autofocus", "multiple", "accept", "target", "rel", "role", "tabindex", "hidden",
    "lang", "dir", "translate", "contenteditable", "draggable", "spellcheck", "loading",
    "decoding", "crossorigin", "referrerpolicy", "sizes", "srcset", "colspan", "rowspan",
    "scope", "headers", "for", "form", "action", "method", "enctype", "novalidate",
    "formaction", "formmethod", "formenctype", "formnovalidate", "formtarget", "open",
    "wrap", "rows", "cols", "label", "async", "defer", "integrity", "nonce", "slot",
    "part", "exportparts", "xmlns", "viewbox", "d", "fill", "stroke", "cx", "cy", "r",
    "x", "y", "x1", "y1", "x2", "y2", "points", "transform",
])

_BINDINGS = (
    re.compile(r"^\[\((.+)\)\]$"),
    re.compile(r"^\[(.+)\]$"),
    re.compile(r"^\((.+)\)$"),
    re.compile(r"^\*(.+)$"),
)

_PIPE_IN_INTERPOLATION = re.compile(r"\{\{[^}]*\|\s*(\w+)")
_PIPE_IN_BINDING = re.compile(r"[\w\[\]]+=\"[^\"]*\|\s*(\w+)")


@dataclass
class ParsedTemplate:
    elements: set = field(default_factory=set)
    attributes: set = field(default_factory=set)


@lru_cache(maxsize=1)
def _markup_metamodel():
    return get_markup_metamodel()


def normalize_attribute(name: str) -> str:
    """Strip Angular binding syntax from an attribute name."""
    for pattern in _BINDINGS:
        match = pattern.match(name)
        if match:
            return match.group(1)
    return name


def parse_template(html: str) -> ParsedTemplate:
    """
    Collect the tag names and normalized attribute names of a template.

    Case is preserved. A template the scanner cannot read is logged and
    yields empty sets.
    """
    parsed = ParsedTemplate()
    if not html or not html.strip():
        return parsed
    try:
        document = _markup_metamodel().model_from_str(html)
    except TextXError as e:
        logger.warning(f"[SKIP] template could not be scanned: {e}")
        return ParsedTemplate()

    for tag in get_children_of_type("OpenTag", document):
        parsed.elements.add(tag.name)
        for attribute in tag.attributes:
            parsed.attributes.add(normalize_attribute(attribute.name))
    return parsed


def extract_element_selectors(html: str) -> list[str]:
    """Non-standard element names used in a template, sorted."""
    elements = parse_template(html).elements
    return sorted(e for e in elements if e.lower() not in STANDARD_HTML_ELEMENTS)


def _is_custom_attribute(name: str) -> bool:
    lowered = name.lower()
    if lowered.startswith("data-") or lowered.startswith("aria-"):
        return False
    return lowered not in STANDARD_HTML_ATTRIBUTES


def extract_directive_selectors(html: str) -> list[str]:
    """Non-standard attribute names used in a template, sorted."""
    attributes = parse_template(html).attributes
    return sorted(a for a in attributes if _is_custom_attribute(a))


def extract_pipe_names(html: str) -> list[str]:
    """Pipe names used in interpolations and bound attribute values, sorted."""
    if not html:
        return []
    names = set(_PIPE_IN_INTERPOLATION.findall(html))
    names.update(_PIPE_IN_BINDING.findall(html))
    return sorted(names)
