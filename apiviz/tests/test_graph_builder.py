"""Tests for relationship graph construction and the category table."""

import pytest

from apiviz.core.constants import CATEGORY_PALETTE, DEFAULT_FILL_COLOR
from apiviz.core.errors import DiagramTargetNotFoundError
from apiviz.core.graph.builder import RelationshipGraphBuilder
from apiviz.core.graph.categories import CategoryTable, parse_category_option
from apiviz.core.graph.models import (
    DiagramTarget,
    Edge,
    EdgeKind,
    Graph,
    PackageMetrics,
    ReferenceConvention,
    TypeKind,
    TypeNode,
    guess_package,
)
from apiviz.core.model.adapter import DocumentationModelAdapter
from apiviz.core.model.models import DocumentationModel, MemberDoc, PackageDoc, TypeDoc
from apiviz.core.render.dot import serialize
from apiviz.core.splice.layout import PageLayout


# =========================================================================
# Sample model
# =========================================================================

def _make_model(extra_widget_tags=None) -> DocumentationModel:
    types = [
        TypeDoc(
            "Widget", "com.acme",
            superclass="com.acme.Base",
            interfaces=["com.acme.Shape"],
            members=[
                MemberDoc("gear", "field", type_name="com.acme.Gear"),
                MemberDoc("secret", "field", type_name="com.acme.internal.Secret"),
                MemberDoc("draw", "method", type_name="void", parameter_types=["com.acme.gfx.Canvas"]),
            ],
            tags=dict(extra_widget_tags or {}),
        ),
        TypeDoc("Base", "com.acme", superclass="java.util.AbstractList"),
        TypeDoc("Shape", "com.acme", kind=TypeKind.INTERFACE),
        TypeDoc("Gear", "com.acme", tags={"apiviz.category": ["core"]}),
        TypeDoc("Button", "com.acme", superclass="com.acme.Widget"),
        TypeDoc("Secret", "com.acme.internal"),
        TypeDoc("Leak", "com.acme.internal", superclass="com.acme.Widget"),
        TypeDoc("Canvas", "com.acme.gfx", superclass="java.lang.Object"),
    ]
    packages = {
        "com.acme": PackageDoc("com.acme"),
        "com.acme.internal": PackageDoc("com.acme.internal", tags={"apiviz.hidden": [""]}),
        "com.acme.gfx": PackageDoc("com.acme.gfx", tags={"apiviz.category": ["gfx"]}),
    }
    return DocumentationModel(types=types, packages=packages)


def _make_builder(model=None, convention=ReferenceConvention.FIELD_ASSOCIATION, categories=None):
    adapter = DocumentationModelAdapter(model or _make_model())
    return RelationshipGraphBuilder(
        adapter,
        categories or CategoryTable.from_options(["core:#FFEEAA"]),
        PageLayout(),
        convention,
    )


def _edges(graph: Graph):
    return {(e.source, e.target): e.kind for e in graph.edges}


# =========================================================================
# Tests: Graph invariants
# =========================================================================

class TestGraphCreate:
    def test_nodes_and_edges_sorted(self):
        nodes = [TypeNode("b.B", TypeKind.CLASS), TypeNode("a.A", TypeKind.CLASS)]
        edges = [
            Edge("b.B", "a.A", EdgeKind.DEPENDENCY),
            Edge("a.A", "b.B", EdgeKind.ASSOCIATION),
        ]
        graph = Graph.create(DiagramTarget.CLASS, "a.A", nodes, edges)

        assert graph.node_ids == ("a.A", "b.B")
        assert [e.source for e in graph.edges] == ["a.A", "b.B"]

    def test_dangling_edge_rejected(self):
        with pytest.raises(ValueError):
            Graph.create(
                DiagramTarget.CLASS, "a.A",
                [TypeNode("a.A", TypeKind.CLASS)],
                [Edge("a.A", "b.B", EdgeKind.DEPENDENCY)],
            )

    def test_edge_strength_order(self):
        strengths = [k.strength for k in (
            EdgeKind.INHERITANCE, EdgeKind.REALIZATION, EdgeKind.AGGREGATION,
            EdgeKind.ASSOCIATION, EdgeKind.DEPENDENCY,
        )]
        assert strengths == sorted(strengths, reverse=True)


# =========================================================================
# Tests: Class diagrams
# =========================================================================

class TestClassDiagram:
    def test_relationships(self):
        graph = _make_builder().class_diagram("com.acme.Widget")

        assert graph.target is DiagramTarget.CLASS
        assert graph.subject == "com.acme.Widget"
        assert _edges(graph) == {
            ("com.acme.Widget", "com.acme.Base"): EdgeKind.INHERITANCE,
            ("com.acme.Base", "java.util.AbstractList"): EdgeKind.INHERITANCE,
            ("com.acme.Widget", "com.acme.Shape"): EdgeKind.REALIZATION,
            ("com.acme.Button", "com.acme.Widget"): EdgeKind.INHERITANCE,
            ("com.acme.Widget", "com.acme.Gear"): EdgeKind.ASSOCIATION,
            ("com.acme.Widget", "com.acme.gfx.Canvas"): EdgeKind.DEPENDENCY,
        }

    def test_edge_endpoints_are_nodes(self):
        graph = _make_builder().class_diagram("com.acme.Widget")
        ids = set(graph.node_ids)
        for edge in graph.edges:
            assert edge.source in ids
            assert edge.target in ids

    def test_hidden_types_excluded(self):
        graph = _make_builder().class_diagram("com.acme.Widget")
        assert "com.acme.internal.Secret" not in graph.node_ids
        assert "com.acme.internal.Leak" not in graph.node_ids

    def test_out_of_model_supertype_is_external(self):
        graph = _make_builder().class_diagram("com.acme.Widget")
        node = graph.get_node("java.util.AbstractList")
        assert node.external is True
        assert node.link is None

    def test_implicit_root_not_drawn(self):
        graph = _make_builder().class_diagram("com.acme.gfx.Canvas")
        assert graph.node_ids == ("com.acme.gfx.Canvas",)

    def test_links_relative_to_type_page(self):
        graph = _make_builder().class_diagram("com.acme.Widget")
        assert graph.get_node("com.acme.Gear").link == "Gear.html"
        assert graph.get_node("com.acme.gfx.Canvas").link == "gfx/Canvas.html"

    def test_category_resolved_from_package(self):
        graph = _make_builder().class_diagram("com.acme.Widget")
        assert graph.get_node("com.acme.Gear").category == "core"
        assert graph.get_node("com.acme.gfx.Canvas").category == "gfx"

    def test_strongest_edge_kind_kept(self):
        model = _make_model({"apiviz.owns": ["Gear"]})
        graph = _make_builder(model).class_diagram("com.acme.Widget")

        gear_edges = [e for e in graph.edges if e.target == "com.acme.Gear"]
        assert len(gear_edges) == 1
        assert gear_edges[0].kind is EdgeKind.AGGREGATION

    def test_declared_relation_does_not_downgrade_supertype_edge(self):
        model = _make_model({"apiviz.has": ["com.acme.Shape 0..*"]})
        graph = _make_builder(model).class_diagram("com.acme.Widget")

        edge = [e for e in graph.edges if e.target == "com.acme.Shape"][0]
        assert edge.kind is EdgeKind.REALIZATION
        assert edge.cardinality is None

    def test_cardinality_from_tag(self):
        model = _make_model({"apiviz.has": ["Gear 1..*"]})
        graph = _make_builder(model).class_diagram("com.acme.Widget")

        edge = [e for e in graph.edges if e.target == "com.acme.Gear"][0]
        assert edge.kind is EdgeKind.ASSOCIATION
        assert edge.cardinality == "1..*"

    def test_dependency_convention(self):
        graph = _make_builder(convention=ReferenceConvention.DEPENDENCY).class_diagram("com.acme.Widget")
        assert _edges(graph)[("com.acme.Widget", "com.acme.Gear")] is EdgeKind.DEPENDENCY

    def test_interface_extends_interface(self):
        model = DocumentationModel(types=[
            TypeDoc("Shape", "com.acme", kind=TypeKind.INTERFACE),
            TypeDoc("Polygon", "com.acme", kind=TypeKind.INTERFACE, interfaces=["com.acme.Shape"]),
            TypeDoc("Square", "com.acme", interfaces=["com.acme.Shape"]),
        ])
        graph = _make_builder(model).class_diagram("com.acme.Shape")
        assert _edges(graph) == {
            ("com.acme.Polygon", "com.acme.Shape"): EdgeKind.INHERITANCE,
            ("com.acme.Square", "com.acme.Shape"): EdgeKind.REALIZATION,
        }

    def test_superclass_cycle_terminates(self):
        model = DocumentationModel(types=[
            TypeDoc("A", "p", superclass="p.B"),
            TypeDoc("B", "p", superclass="p.A"),
        ])
        graph = _make_builder(model).class_diagram("p.A")
        assert graph.node_ids == ("p.A", "p.B")

    def test_missing_root(self):
        with pytest.raises(DiagramTargetNotFoundError) as exc_info:
            _make_builder().class_diagram("com.acme.Nope")
        assert isinstance(exc_info.value, KeyError)
        assert "com.acme.Nope" in str(exc_info.value)

    def test_deterministic(self):
        builder = _make_builder()
        assert builder.class_diagram("com.acme.Widget") == builder.class_diagram("com.acme.Widget")


class TestNestedTypes:
    @staticmethod
    def _make_nested_model() -> DocumentationModel:
        types = [
            TypeDoc("Widget", "com.acme", members=[
                MemberDoc("gear", "field", type_name="com.acme.Widget.Gear"),
            ]),
            TypeDoc("Widget.Gear", "com.acme", members=[
                MemberDoc("spring", "field", type_name="com.acme.Spring"),
            ]),
            TypeDoc("Spring", "com.acme"),
            TypeDoc("Cog", "org.parts", superclass="com.acme.internal.Outer.Base"),
            TypeDoc("Pair", "org.parts", interfaces=["java.util.Map.Entry"]),
        ]
        packages = {
            "com.acme": PackageDoc("com.acme"),
            "com.acme.internal": PackageDoc("com.acme.internal", tags={"apiviz.hidden": [""]}),
            "org.parts": PackageDoc("org.parts"),
        }
        return DocumentationModel(types=types, packages=packages)

    def test_nested_node_keeps_declared_package(self):
        graph = _make_builder(self._make_nested_model()).class_diagram("com.acme.Widget")
        node = graph.get_node("com.acme.Widget.Gear")

        assert node.package == "com.acme"
        assert node.simple_name == "Widget.Gear"
        assert node.link == "Widget.Gear.html"

    def test_nested_label_not_qualified_with_outer_type(self):
        graph = _make_builder(self._make_nested_model()).class_diagram("com.acme.Widget")
        source = serialize(graph, CategoryTable())

        assert 'label="Widget.Gear"' in source
        assert "(com.acme.Widget)" not in source

    def test_diagram_rooted_at_nested_type(self):
        graph = _make_builder(self._make_nested_model()).class_diagram("com.acme.Widget.Gear")
        source = serialize(graph, CategoryTable())

        assert 'label="Spring"' in source
        assert "(com.acme" not in source

    def test_nested_supertype_in_hidden_package_not_drawn(self):
        graph = _make_builder(self._make_nested_model()).class_diagram("org.parts.Cog")
        assert graph.node_ids == ("org.parts.Cog",)

    def test_external_nested_supertype(self):
        graph = _make_builder(self._make_nested_model()).class_diagram("org.parts.Pair")
        node = graph.get_node("java.util.Map.Entry")

        assert node.external is True
        assert node.package == "java.util"
        assert 'label="«interface»\\nMap.Entry\\n(java.util)"' in serialize(graph, CategoryTable())

    def test_guess_package(self):
        assert guess_package("java.util.Map.Entry") == "java.util"
        assert guess_package("com.acme.Widget") == "com.acme"
        assert guess_package("Widget") == ""
        assert TypeNode("java.util.List", TypeKind.INTERFACE).package == "java.util"


# =========================================================================
# Tests: Package and overview diagrams
# =========================================================================

class TestPackageDiagram:
    def test_members_and_direct_relations(self):
        graph = _make_builder().package_diagram("com.acme")

        assert graph.target is DiagramTarget.PACKAGE_SUMMARY
        assert set(graph.node_ids) == {
            "com.acme.Widget", "com.acme.Base", "com.acme.Shape", "com.acme.Gear",
            "com.acme.Button", "com.acme.gfx.Canvas", "java.util.AbstractList",
        }
        assert _edges(graph)[("com.acme.Button", "com.acme.Widget")] is EdgeKind.INHERITANCE

    def test_links_relative_to_summary_page(self):
        graph = _make_builder().package_diagram("com.acme")
        assert graph.get_node("com.acme.Widget").link == "Widget.html"

    def test_unknown_package_is_empty(self):
        graph = _make_builder().package_diagram("org.nowhere")
        assert graph.nodes == ()
        assert graph.edges == ()


class TestOverviewDiagram:
    def test_visible_packages_and_dependencies(self):
        graph = _make_builder().overview_diagram()

        assert graph.target is DiagramTarget.OVERVIEW_SUMMARY
        assert graph.node_ids == ("com.acme", "com.acme.gfx")
        assert _edges(graph) == {("com.acme", "com.acme.gfx"): EdgeKind.DEPENDENCY}

    def test_without_metrics(self):
        graph = _make_builder().overview_diagram(None)
        assert all(n.metrics is None for n in graph.nodes)

    def test_with_metrics(self):
        graph = _make_builder().overview_diagram({"com.acme": PackageMetrics(afferent=0, efferent=1)})
        assert graph.get_node("com.acme").metrics == PackageMetrics(0, 1)
        assert graph.get_node("com.acme.gfx").metrics is None

    def test_package_links_and_category(self):
        graph = _make_builder().overview_diagram()
        node = graph.get_node("com.acme.gfx")
        assert node.link == "com/acme/gfx/package-summary.html"
        assert node.category == "gfx"


# =========================================================================
# Tests: Category table
# =========================================================================

class TestCategories:
    def test_parse_option(self):
        assert parse_category_option("core") == ("core", None, None)
        assert parse_category_option("core:#FF0000") == ("core", "#FF0000", None)
        assert parse_category_option("core:#FF0000:#000080") == ("core", "#FF0000", "#000080")

    @pytest.mark.parametrize("option", [":red", "a:b:c:d"])
    def test_parse_invalid(self, option):
        with pytest.raises(ValueError):
            parse_category_option(option)

    def test_first_registration_wins(self):
        table = CategoryTable.from_options(["core:#FF0000", "core:#00FF00"])
        assert len(table) == 1
        assert table.style_for("core").fill_color == "#FF0000"

    def test_palette_for_unassigned_fill(self):
        table = CategoryTable.from_options(["a", "b:#123456"])
        assert table.style_for("a").fill_color == CATEGORY_PALETTE[0][0]
        assert table.style_for("a").line_color == CATEGORY_PALETTE[0][1]
        assert table.style_for("b").fill_color == "#123456"

    def test_style_for_is_total(self):
        table = CategoryTable()
        assert table.style_for(None).fill_color == DEFAULT_FILL_COLOR
        assert table.style_for("unknown").fill_color == DEFAULT_FILL_COLOR
