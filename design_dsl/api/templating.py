"""Jinja environment for generated-source skeletons."""

import json
from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from design_dsl.api.utils import camel_case, kebab_case, pascal_case, snake_case

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


def py_literal(value) -> str:
    """Python source for a plain value (used for defaults and metadata)."""
    return repr(value)


def toml_string(value) -> str:
    """TOML basic string; JSON string escapes are valid TOML."""
    return json.dumps(str(value))


@lru_cache(maxsize=None)
def template_env(subdir: str) -> Environment:
    """
    Environment for one template family ("server" or "client").

    Autoescape stays off: the output is source code, not HTML.
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR / subdir)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["snake"] = snake_case
    env.filters["kebab"] = kebab_case
    env.filters["pascal"] = pascal_case
    env.filters["camel"] = camel_case
    env.filters["py"] = py_literal
    env.filters["toml"] = toml_string
    env.filters["json"] = json.dumps
    return env


def render(subdir: str, template_name: str, **context) -> str:
    return template_env(subdir).get_template(template_name).render(**context)
