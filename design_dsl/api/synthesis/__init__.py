"""
Source synthesis: editable trees for generated Python and TypeScript files,
and the per-unit edit pipelines that build them.
"""

from .python_module import PythonModule
from .typescript import (
    TsAccessor,
    TsClass,
    TsDecorator,
    TsImport,
    TsMethod,
    TsProperty,
    TsSourceFile,
    TsStatement,
)
from .business_object import synthesize_business_object, LIFECYCLE_SPLICES
from .component import synthesize_component, component_paths
from .page import synthesize_page, page_paths

__all__ = [
    "PythonModule",
    "TsAccessor",
    "TsClass",
    "TsDecorator",
    "TsImport",
    "TsMethod",
    "TsProperty",
    "TsSourceFile",
    "TsStatement",
    "synthesize_business_object",
    "LIFECYCLE_SPLICES",
    "synthesize_component",
    "component_paths",
    "synthesize_page",
    "page_paths",
]
