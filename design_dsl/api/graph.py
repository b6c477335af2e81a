"""
Unit graph of a design using NetworkX.

Nodes are design units keyed "<Kind>.<name>". Edge kinds:

- "relationship": entity -> target entity of a relationship property
- "mixin": entity or component -> applied mixin
- "behavior": behavior -> the entity, mixin or project it is attached to
- "uses": page or component -> component or page used in its template
- "data-source": entity -> its data source

Used by `ddsl inspect` and `ddsl visualize-model`, and to report cycles
that generation cannot resolve.
"""

import networkx as nx

from design_dsl.api.errors import DesignError
from design_dsl.api.markup import extract_element_selectors
from design_dsl.api.registry import UnitKind
from design_dsl.api.resolvers import resolve_relationships
from design_dsl.api.utils import component_selector, page_selector

NODE_STYLES = {
    UnitKind.PROJECT: {"shape": "folder", "fillcolor": "lightgrey"},
    UnitKind.DATA_SOURCE: {"shape": "cylinder", "fillcolor": "lightyellow"},
    UnitKind.ENTITY: {"shape": "box", "fillcolor": "lightblue"},
    UnitKind.MIXIN: {"shape": "box", "fillcolor": "lavender"},
    UnitKind.BEHAVIOR: {"shape": "note", "fillcolor": "mistyrose"},
    UnitKind.PAGE: {"shape": "component", "fillcolor": "palegreen"},
    UnitKind.COMPONENT: {"shape": "component", "fillcolor": "honeydew"},
    UnitKind.SELECTOR_INTERFACE: {"shape": "ellipse", "fillcolor": "white"},
}

EDGE_STYLES = {
    "relationship": {"color": "blue"},
    "mixin": {"color": "purple", "style": "dashed"},
    "behavior": {"color": "red", "style": "dotted"},
    "uses": {"color": "darkgreen"},
    "data-source": {"color": "orange", "style": "dashed"},
}


def node_id(kind: UnitKind, name: str) -> str:
    return f"{kind.value}.{name}"


class UnitGraph:
    """Directed graph over the units of a registry."""

    def __init__(self, registry, ctx=None):
        self.registry = registry
        self.ctx = ctx
        self.graph = nx.DiGraph()
        self.problems = []
        self._build_graph()

    # ------------------------------------------------------------------
    # Construction

    def _build_graph(self):
        for unit in self.registry:
            self.graph.add_node(node_id(unit.kind, unit.name), kind=unit.kind, name=unit.name, library=unit.is_library)

        for unit in self.registry.list(UnitKind.ENTITY):
            source = unit.node.dataSource
            if source and self.registry.has(UnitKind.DATA_SOURCE, source):
                self._add_edge(unit, UnitKind.DATA_SOURCE, source, "data-source")
            try:
                relationships = resolve_relationships(unit, self.registry, self.ctx)
            except DesignError as e:
                self.problems.append(str(e))
                continue
            for relationship in relationships:
                self._add_edge(unit, UnitKind.ENTITY, relationship.target, "relationship", label=relationship.name)

        for unit in self.registry.list(UnitKind.ENTITY) + self.registry.list(UnitKind.COMPONENT):
            for name in getattr(unit.node, "mixins", None) or []:
                self._add_edge(unit, UnitKind.MIXIN, name, "mixin")

        for unit in self.registry.list(UnitKind.BEHAVIOR):
            parent = unit.node.owner
            for kind in (UnitKind.ENTITY, UnitKind.MIXIN, UnitKind.PROJECT):
                if self.registry.has(kind, parent):
                    self._add_edge(unit, kind, parent, "behavior")
                    break

        self._add_view_edges()

    def _add_view_edges(self):
        selectors = {}
        for unit in self.registry.list(UnitKind.COMPONENT):
            selectors[component_selector(unit)] = unit
        for unit in self.registry.list(UnitKind.PAGE):
            selectors[page_selector(unit)] = unit

        for unit in self.registry.list(UnitKind.PAGE) + self.registry.list(UnitKind.COMPONENT):
            for element in extract_element_selectors(unit.node.template or ""):
                used = selectors.get(element)
                if used is not None and used.key != unit.key:
                    self._add_edge(unit, used.kind, used.name, "uses")

    def _add_edge(self, unit, target_kind: UnitKind, target_name: str, kind: str, label: str = ""):
        target = node_id(target_kind, target_name)
        if target not in self.graph:
            # dangling reference; generation reports it as UnitNotFoundError
            self.graph.add_node(target, kind=target_kind, name=target_name, library=False, missing=True)
        self.graph.add_edge(node_id(unit.kind, unit.name), target, kind=kind, label=label)

    # ------------------------------------------------------------------
    # Queries

    def subgraph(self, *edge_kinds: str) -> nx.DiGraph:
        edges = [(u, v) for u, v, data in self.graph.edges(data=True) if data["kind"] in edge_kinds]
        return self.graph.edge_subgraph(edges).copy()

    def cycles(self, *edge_kinds: str) -> list:
        graph = self.subgraph(*edge_kinds) if edge_kinds else self.graph
        return sorted(sorted(cycle) for cycle in nx.simple_cycles(graph))

    def mixin_cycles(self) -> list:
        return self.cycles("mixin")

    def view_cycles(self) -> list:
        """Pages and components that end up containing themselves."""
        return self.cycles("uses")

    def missing(self) -> list:
        return sorted(n for n, data in self.graph.nodes(data=True) if data.get("missing"))

    def dependents(self, kind: UnitKind, name: str) -> list:
        """Units that reference the given unit, directly or not."""
        target = node_id(kind, name)
        if target not in self.graph:
            return []
        return sorted(nx.ancestors(self.graph, target))

    def edges(self, kind: str = None) -> list:
        return [
            (u, v, data)
            for u, v, data in self.graph.edges(data=True)
            if kind is None or data["kind"] == kind
        ]

    # ------------------------------------------------------------------
    # Export

    def to_digraph(self, comment: str = "DDSL Design"):
        """The graph as a graphviz Digraph ready to render or save as DOT."""
        from graphviz import Digraph

        dot = Digraph(comment=comment)
        dot.attr(rankdir="LR", fontsize="10", fontname="Arial")
        dot.attr(nodesep="0.5", ranksep="1.0")
        dot.attr("edge", fontsize="9")

        for node, data in sorted(self.graph.nodes(data=True)):
            style = dict(NODE_STYLES.get(data["kind"], {}))
            label = f"[{data['kind'].value.upper()}]\\n{data['name']}"
            if data.get("library"):
                label += "\\n(library)"
            if data.get("missing"):
                style.update(color="red", fontcolor="red")
                label += "\\n(missing)"
            dot.node(node, label=label, style="filled", **style)

        for source, target, data in self.graph.edges(data=True):
            dot.edge(source, target, label=data.get("label", ""), **EDGE_STYLES.get(data["kind"], {}))
        return dot
