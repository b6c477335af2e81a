"""
Unit registry.

The registry owns every design unit of one generation run. Units are
created once, when the design files of the main project and of its
libraries are parsed, and never change afterwards. Cross-unit references
are plain names that resolvers look up here (an index keyed by kind and
name), so mutually referencing units never form object cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional

from design_dsl.language import build_model_str, build_models, get_model_units, unit_rule_name

from .errors import DuplicateUnitError, UnitNotFoundError
from .gen_logging import get_logger

logger = get_logger(__name__)


class UnitKind(str, Enum):
    ENTITY = "Entity"
    PAGE = "Page"
    COMPONENT = "Component"
    MIXIN = "Mixin"
    BEHAVIOR = "Behavior"
    DATA_SOURCE = "DataSource"
    PROJECT = "Project"
    SELECTOR_INTERFACE = "SelectorInterface"


@dataclass(frozen=True)
class DesignUnit:
    name: str
    kind: UnitKind
    node: Any = field(compare=False, repr=False)
    is_library: bool = False
    source_path: Optional[Path] = None
    order: int = 0

    @property
    def key(self) -> tuple:
        return (self.kind, self.name)


class UnitRegistry:
    """Index of design units by kind and name, in declaration order."""

    def __init__(self, units: Iterable[DesignUnit] = ()):
        self._units: list[DesignUnit] = []
        self._index: dict[tuple, DesignUnit] = {}
        for unit in units:
            self._add(unit)

    def _add(self, unit: DesignUnit) -> None:
        if unit.key in self._index:
            raise DuplicateUnitError(unit.kind.value, unit.name)
        self._index[unit.key] = unit
        self._units.append(unit)

    # ------------------------------------------------------------------
    # Construction

    @classmethod
    def from_models(cls, models: Iterable[tuple], is_library: bool = False, start: int = 0) -> list[DesignUnit]:
        """Wrap the units of parsed models; models are (path, model) pairs."""
        units = []
        order = start
        for path, model in models:
            for node in get_model_units(model):
                kind = UnitKind(unit_rule_name(node))
                library = is_library or (kind is UnitKind.PROJECT and bool(node.isLibrary))
                units.append(DesignUnit(node.name, kind, node, library, path, order))
                order += 1
        return units

    @classmethod
    def load(cls, design_dir, library_dirs: Iterable = ()) -> "UnitRegistry":
        """Parse the main design directory and every library directory."""
        units = []
        for library_dir in library_dirs:
            logger.debug(f"  [LOAD] library {library_dir}")
            units.extend(cls.from_models(build_models(library_dir), is_library=True, start=len(units)))
        logger.debug(f"  [LOAD] design {design_dir}")
        units.extend(cls.from_models(build_models(design_dir), start=len(units)))
        registry = cls(units)
        logger.info(f"[REGISTRY] {len(registry)} units loaded")
        return registry

    @classmethod
    def from_strings(cls, main: str, libraries: Iterable[str] = ()) -> "UnitRegistry":
        """Build a registry from design source text (libraries first, then main)."""
        units = []
        for source in libraries:
            units.extend(cls.from_models([(None, build_model_str(source))], is_library=True, start=len(units)))
        units.extend(cls.from_models([(None, build_model_str(main))], start=len(units)))
        return cls(units)

    # ------------------------------------------------------------------
    # Lookup

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self):
        return iter(self._units)

    def list(self, kind: UnitKind = None) -> list[DesignUnit]:
        if kind is None:
            return list(self._units)
        return [u for u in self._units if u.kind is kind]

    def find(self, kind: UnitKind, name: str) -> Optional[DesignUnit]:
        return self._index.get((kind, name))

    def get(self, kind: UnitKind, name: str, referenced_by: str = None) -> DesignUnit:
        unit = self.find(kind, name)
        if unit is None:
            raise UnitNotFoundError(kind.value, name, referenced_by)
        return unit

    def has(self, kind: UnitKind, name: str) -> bool:
        return (kind, name) in self._index

    def entity_names(self) -> frozenset:
        return frozenset(u.name for u in self.list(UnitKind.ENTITY))

    def interfaces(self, interface_kind: str) -> list[DesignUnit]:
        """Selector interfaces of one kind: Element, Directive or Pipe."""
        return [u for u in self.list(UnitKind.SELECTOR_INTERFACE) if u.node.kind == interface_kind]

    # ------------------------------------------------------------------
    # Projects

    def main_project(self) -> Optional[DesignUnit]:
        return next((p for p in self.list(UnitKind.PROJECT) if not p.is_library), None)

    def library_projects(self) -> list[DesignUnit]:
        return [p for p in self.list(UnitKind.PROJECT) if p.is_library]

    def project_name(self, default: str = "App") -> str:
        project = self.main_project()
        return project.name if project else default

    def parameter_values(self) -> dict:
        """Project parameters, libraries folded first so the main project wins."""
        values = {}
        for project in fold_projects(self):
            for setting in project.node.parameters:
                values[setting.key] = setting.value
        return values

    def parameter_value(self, name: str, default=None):
        return self.parameter_values().get(name, default)

    # ------------------------------------------------------------------
    # Data sources

    def data_source_name(self, entity: DesignUnit) -> str:
        """The data source an entity names, else the main project's default; '' when neither."""
        name = entity.node.dataSource
        if not name:
            project = self.main_project()
            name = project.node.defaultDataSource if project else ""
        return name or ""

    def data_source_for(self, entity: DesignUnit) -> Optional[DesignUnit]:
        """The entity's own data source, else the main project's default one."""
        name = self.data_source_name(entity)
        if not name:
            return None
        return self.get(UnitKind.DATA_SOURCE, name, referenced_by=entity.name)

    def entities_for_data_source(self, data_source: DesignUnit) -> list[DesignUnit]:
        # Compared by name so an entity naming a missing data source fails on its own.
        return [e for e in self.list(UnitKind.ENTITY) if self.data_source_name(e) == data_source.name]


def fold_projects(registry: UnitRegistry) -> list[DesignUnit]:
    """
    Projects in merge order for aggregate outputs.

    Library projects come first, in reverse declaration order, and the main
    project comes last, so folding left to right lets the main project's
    values win on key collisions.
    """
    ordered = list(reversed(registry.library_projects()))
    main = registry.main_project()
    if main is not None:
        ordered.append(main)
    return ordered


def merge_maps(maps: Iterable[dict]) -> dict:
    """Fold dicts left to right; later values win, first insertion order is kept."""
    merged = {}
    for mapping in maps:
        for key, value in mapping.items():
            merged[key] = value
    return merged
