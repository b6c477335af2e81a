"""
Unit tests for the NetworkX unit graph.
"""

from design_dsl.api.graph import UnitGraph, node_id
from design_dsl.api.registry import UnitKind


class TestUnitGraph:
    """Test graph construction and queries."""

    def test_edges_by_kind(self, build_registry, shop_design):
        graph = UnitGraph(build_registry(shop_design))

        relationships = {(u, v) for u, v, _ in graph.edges("relationship")}
        assert relationships == {("Entity.Customer", "Entity.Order"), ("Entity.Order", "Entity.Customer")}

        behaviors = {(u, v) for u, v, _ in graph.edges("behavior")}
        assert behaviors == {("Behavior.CheckTotal", "Entity.Order"), ("Behavior.Cancel", "Entity.Order")}
        assert graph.problems == []
        assert graph.missing() == []

    def test_relationship_cycle_is_reported(self, build_registry, shop_design):
        graph = UnitGraph(build_registry(shop_design))
        assert graph.cycles("relationship") == [["Entity.Customer", "Entity.Order"]]

    def test_view_cycles_and_dependents(self, build_registry):
        graph = UnitGraph(build_registry('''
Component Tree
    selector: "app-tree"
    template: ```<app-node></app-node>```
end

Component Node
    selector: "app-node"
    template: ```<app-tree></app-tree>```
end

Page Home
    path: "/"
    template: ```<app-tree></app-tree>```
end
'''))
        assert graph.view_cycles() == [["Component.Node", "Component.Tree"]]
        assert graph.dependents(UnitKind.COMPONENT, "Node") == ["Component.Tree", "Page.Home"]
        assert graph.dependents(UnitKind.PAGE, "Home") == []
        assert graph.dependents(UnitKind.ENTITY, "Nope") == []

    def test_unresolved_relationship_is_a_problem(self, build_registry):
        graph = UnitGraph(build_registry('''
Entity Order
    properties:
        - customer: Customer;
end
'''))
        assert len(graph.problems) == 1
        assert "Customer" in graph.problems[0]

    def test_dangling_mixin_node(self, build_registry):
        graph = UnitGraph(build_registry('''
Entity Post
    mixins: Audited
end
'''))
        assert graph.missing() == ["Mixin.Audited"]
        assert graph.graph.has_edge("Entity.Post", node_id(UnitKind.MIXIN, "Audited"))

    def test_data_source_edge(self, build_registry):
        graph = UnitGraph(build_registry('''
DataSource Cache
    persistenceType: Memory
end

Entity Token
    dataSource: Cache
end
'''))
        assert [(u, v) for u, v, _ in graph.edges("data-source")] == [("Entity.Token", "DataSource.Cache")]

    def test_to_digraph(self, build_registry, shop_design):
        dot = UnitGraph(build_registry(shop_design)).to_digraph(comment="Shop")
        source = dot.source
        assert "// Shop" in source
        assert '"Entity.Customer"' in source
        assert "[ENTITY]\\nCustomer" in source
        assert '"Entity.Customer" -> "Entity.Order"' in source
