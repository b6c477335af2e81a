"""
Generator contract.

A generator declares which units trigger it, which paths it writes for a
unit, and a `generate` callable. Per-unit generators run once for every
triggering unit; aggregate generators run once for the whole registry.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from design_dsl.api.registry import UnitKind, fold_projects, merge_maps

GenerateResult = Union[str, dict]


@dataclass(frozen=True)
class Trigger:
    unit_kind: UnitKind
    predicate: Optional[Callable] = None

    def matches(self, unit) -> bool:
        return unit.kind is self.unit_kind

    def accepts(self, unit, registry) -> bool:
        return self.predicate is None or bool(self.predicate(unit, registry))


@dataclass(frozen=True)
class Generator:
    name: str
    triggers: tuple
    outputs: Callable
    generate: Callable
    is_aggregate: bool = False
    target: str = "server"
    description: str = field(default="", compare=False)

    def trigger_for(self, unit) -> Optional[Trigger]:
        return next((t for t in self.triggers if t.matches(unit)), None)


# ------------------------------------------------------------------------------
# Common predicates

def not_library(unit, registry) -> bool:
    return not unit.is_library


def has_data_source(unit, registry) -> bool:
    return registry.data_source_for(unit) is not None


def server_entity(unit, registry) -> bool:
    """Entities that get server code: non-library ones with a data source."""
    return not_library(unit, registry) and has_data_source(unit, registry)


# ------------------------------------------------------------------------------
# Project folding for aggregate outputs

def project_dependencies(registry, attribute: str) -> tuple:
    """
    (runtime, dev) dependency maps of a project attribute such as
    `serverDependencies`, folded so that the main project wins.
    """
    runtime, dev = [], []
    for project in fold_projects(registry):
        declared = getattr(project.node, attribute)
        runtime.append({d.package: d.version for d in declared if not d.dev})
        dev.append({d.package: d.version for d in declared if d.dev})
    return merge_maps(runtime), merge_maps(dev)


def project_settings(registry, attribute: str) -> dict:
    """Key/value settings such as `clientScripts`, folded so that the main project wins."""
    return merge_maps(
        {s.key: s.value for s in getattr(project.node, attribute)}
        for project in fold_projects(registry)
    )


__all__ = [
    "GenerateResult",
    "Trigger",
    "Generator",
    "not_library",
    "has_data_source",
    "server_entity",
    "fold_projects",
    "merge_maps",
    "project_dependencies",
    "project_settings",
]
