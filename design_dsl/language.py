"""
Core metamodel and model builders for the Design DSL (DDSL).

This module provides the entry points for parsing and validating design
files. Validation logic lives in the validation/ package and object
processors in the processors/ package. Cross-unit references are plain
names; they are resolved later, against the UnitRegistry.
"""

from os.path import join, dirname, abspath
from pathlib import Path

from textx import metamodel_from_file, get_children_of_type

from design_dsl.processors import get_obj_processors
from design_dsl.validation import (
    UNIT_RULES,
    verify_unique_names,
    verify_unique_members,
    verify_identity_properties,
    verify_page_paths,
    verify_method_options,
)


# ------------------------------------------------------------------------------
# Constants
THIS_DIR = dirname(abspath(__file__))
GRAMMAR_DIR = join(THIS_DIR, "grammar")
DESIGN_FILE_SUFFIX = ".ddsl"


# ------------------------------------------------------------------------------
# Public model builders

def build_model(model_path):
    """Parse & validate a design file."""
    return DesignDSLMetaModel.model_from_file(str(model_path))


def build_model_str(model_str: str):
    """Parse & validate a design from a string."""
    return DesignDSLMetaModel.model_from_str(model_str)


def iter_design_files(design_dir) -> list:
    """All design files below a directory, in a stable order."""
    root = Path(design_dir)
    if root.is_file():
        return [root]
    if not root.exists():
        raise FileNotFoundError(f"Design directory not found: {root}")
    return sorted(root.rglob(f"*{DESIGN_FILE_SUFFIX}"))


def build_models(design_dir) -> list:
    """Parse every design file of a directory; returns (path, model) pairs."""
    return [(path, build_model(path)) for path in iter_design_files(design_dir)]


# ------------------------------------------------------------------------------
# Model element getters

def get_model_units(model):
    """All units of a model in declaration order."""
    return list(getattr(model, "units", []) or [])


def get_model_entities(model):
    return get_children_of_type("Entity", model)


def get_model_pages(model):
    return get_children_of_type("Page", model)


def get_model_components(model):
    return get_children_of_type("Component", model)


def get_model_behaviors(model):
    return get_children_of_type("Behavior", model)


def unit_rule_name(node) -> str:
    """Grammar rule name of a unit node (Entity, Page, SelectorInterface, ...)."""
    name = node.__class__.__name__
    if name not in UNIT_RULES:
        raise ValueError(f"'{name}' is not a design unit.")
    return name


# ------------------------------------------------------------------------------
# Model processor

def model_processor(model, metamodel=None):
    """
    Main model processor - runs after parsing to perform cross-object validation.
    Order matters: names -> members -> identities -> page paths -> method options
    """
    verify_unique_names(model)
    verify_unique_members(model)
    verify_identity_properties(model)
    verify_page_paths(model)
    verify_method_options(model)


# ------------------------------------------------------------------------------
# Metamodel creation

def get_metamodel(debug: bool = False):
    """
    Load the textX metamodel from grammar/design.tx.
    Registers object processors and the model processor.
    """
    mm = metamodel_from_file(
        join(GRAMMAR_DIR, "design.tx"),
        auto_init_attributes=True,
        autokwd=True,
        debug=debug,
    )

    # Object processors run during model construction
    mm.register_obj_processors(get_obj_processors())

    # Model processors run after the whole model is built
    mm.register_model_processor(model_processor)

    return mm


def get_markup_metamodel(debug: bool = False):
    """Load the template markup scanner metamodel from grammar/markup.tx."""
    return metamodel_from_file(
        join(GRAMMAR_DIR, "markup.tx"),
        auto_init_attributes=True,
        debug=debug,
    )


# Create the global metamodel instance
DesignDSLMetaModel = get_metamodel(debug=False)
