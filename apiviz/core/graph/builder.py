"""Relationship graph construction.

One construction rule per diagram target:

  class            the type, its superclass chain, its interfaces, its
                   direct subtypes and the visible types it references
  package-summary  the package's visible types plus whatever they
                   directly extend, implement or reference
  overview         visible packages, one edge per ordered package pair
                   with at least one type-level reference

Every build starts from the immutable model and returns a fresh Graph.
"""

import logging
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Tuple

from ..constants import IMPLICIT_ROOT_TYPES, TAG_CATEGORY
from ..errors import DiagramTargetNotFoundError
from .categories import CategoryTable
from .models import (
    DiagramTarget,
    Edge,
    EdgeKind,
    Graph,
    Node,
    PackageMetrics,
    PackageNode,
    ReferenceConvention,
    TypeKind,
    TypeNode,
    guess_package,
)

if TYPE_CHECKING:
    from ..model.adapter import DocumentationModelAdapter
    from ..model.models import TypeDoc
    from ..splice.layout import PageLayout

logger = logging.getLogger(__name__)

# (edge kind, target qualified name, cardinality)
Relation = Tuple[EdgeKind, str, Optional[str]]


class _GraphCollector:
    """Accumulates nodes and edges for one graph.

    Keeps the first node seen per id and, per ordered node pair, the
    strongest edge kind. A cardinality declared on an equal-kind
    relation is kept.
    """

    def __init__(self):
        self.nodes: Dict[str, Node] = {}
        self.edges: Dict[Tuple[str, str], Edge] = {}

    def add_node(self, node: Node) -> None:
        self.nodes.setdefault(node.id, node)

    def add_edge(self, source: str, target: str, kind: EdgeKind, cardinality: Optional[str] = None) -> None:
        if source == target:
            return
        key = (source, target)
        current = self.edges.get(key)
        if (
            current is None
            or kind.strength > current.kind.strength
            or (kind is current.kind and cardinality and not current.cardinality)
        ):
            self.edges[key] = Edge(source, target, kind, cardinality)

    def build(self, target: DiagramTarget, subject: str) -> Graph:
        return Graph.create(target, subject, self.nodes.values(), self.edges.values())


class RelationshipGraphBuilder:
    """Builds relationship graphs from the documentation model.

    Args:
        adapter: Read-only model view.
        categories: Category color table; only consulted for validation
            logging here, the renderer resolves the actual colors.
        layout: Page naming strategy used to compute node hyperlinks.
        convention: How member references map to edge kinds.
    """

    def __init__(
        self,
        adapter: "DocumentationModelAdapter",
        categories: CategoryTable,
        layout: "PageLayout",
        convention: ReferenceConvention = ReferenceConvention.FIELD_ASSOCIATION,
    ):
        self._adapter = adapter
        self._categories = categories
        self._layout = layout
        self._convention = convention
        self._unknown_categories_reported = set()

    # ── Public API ─────────────────────────────────────────────────────

    def class_diagram(self, qualified_name: str) -> Graph:
        root = self._adapter.get_type(qualified_name)
        if root is None:
            raise DiagramTargetNotFoundError(qualified_name)

        page = self._layout.type_page(root.package, root.name)
        graph = _GraphCollector()
        graph.add_node(self._type_node(root, page))

        # Superclass chain
        current = root
        while current.superclass and current.superclass not in IMPLICIT_ROOT_TYPES:
            parent = self._adapter.resolve(current.superclass, current.package)
            if parent is None:
                if not self._is_hidden_name(current.superclass):
                    graph.add_node(self._external_node(current.superclass, TypeKind.CLASS))
                    graph.add_edge(current.qualified_name, current.superclass, EdgeKind.INHERITANCE)
                break
            if self._adapter.is_type_hidden(parent):
                break
            seen = parent.qualified_name in graph.nodes
            graph.add_node(self._type_node(parent, page))
            graph.add_edge(current.qualified_name, parent.qualified_name, EdgeKind.INHERITANCE)
            if seen:
                break
            current = parent

        for kind, name, cardinality in self._interface_relations(root):
            self._add_relation(graph, root, kind, name, cardinality, page)

        for sub in self._adapter.known_subtypes(root):
            if self._adapter.is_type_hidden(sub):
                continue
            graph.add_node(self._type_node(sub, page))
            graph.add_edge(sub.qualified_name, root.qualified_name, self._subtype_kind(sub, root))

        for kind, name, cardinality in self._member_relations(root):
            self._add_relation(graph, root, kind, name, cardinality, page)

        result = graph.build(DiagramTarget.CLASS, qualified_name)
        logger.debug(
            "Class diagram for %s: %d nodes, %d edges",
            qualified_name, len(result.nodes), len(result.edges),
        )
        return result

    def package_diagram(self, package: str) -> Graph:
        page = self._layout.package_page(package)
        graph = _GraphCollector()

        members = [
            t for t in self._adapter.types_in(package)
            if not self._adapter.is_type_hidden(t)
        ]
        if not members:
            logger.debug("Package %s has no visible types", package)

        for t in members:
            graph.add_node(self._type_node(t, page))

        for t in members:
            for kind, name, cardinality in self._direct_relations(t):
                self._add_relation(graph, t, kind, name, cardinality, page)

        return graph.build(DiagramTarget.PACKAGE_SUMMARY, package)

    def overview_diagram(self, metrics: Optional[Mapping[str, PackageMetrics]] = None) -> Graph:
        page = self._layout.overview_page()
        visible = [p for p in self._adapter.packages() if not self._adapter.is_hidden(p)]
        visible_set = set(visible)

        graph = _GraphCollector()
        for package in visible:
            graph.add_node(PackageNode(
                id=package,
                metrics=metrics.get(package) if metrics is not None else None,
                link=self._layout.href(page, self._layout.package_page(package)),
                category=self._package_category(package),
            ))

        for package in visible:
            for t in self._adapter.types_in(package):
                if self._adapter.is_type_hidden(t):
                    continue
                for _, name, _ in self._direct_relations(t):
                    target = self._adapter.resolve(name, t.package)
                    if target is None or target.package not in visible_set:
                        continue
                    if self._adapter.is_type_hidden(target):
                        continue
                    graph.add_edge(package, target.package, EdgeKind.DEPENDENCY)

        return graph.build(DiagramTarget.OVERVIEW_SUMMARY, page)

    # ── Relations ──────────────────────────────────────────────────────

    def _interface_relations(self, t: "TypeDoc") -> List[Relation]:
        kind = EdgeKind.INHERITANCE if t.kind is TypeKind.INTERFACE else EdgeKind.REALIZATION
        return [(kind, name, None) for name in t.interfaces]

    def _member_relations(self, t: "TypeDoc") -> List[Relation]:
        relations: List[Relation] = [
            (self._convention.edge_kind(ref), name, None)
            for ref, name in self._adapter.referenced_types(t)
        ]
        relations.extend(self._adapter.declared_relations(t))
        return relations

    def _direct_relations(self, t: "TypeDoc") -> List[Relation]:
        relations: List[Relation] = []
        if t.superclass and t.superclass not in IMPLICIT_ROOT_TYPES:
            relations.append((EdgeKind.INHERITANCE, t.superclass, None))
        relations.extend(self._interface_relations(t))
        relations.extend(self._member_relations(t))
        return relations

    def _add_relation(
        self,
        graph: _GraphCollector,
        source: "TypeDoc",
        kind: EdgeKind,
        name: str,
        cardinality: Optional[str],
        page: str,
    ) -> None:
        """Add the target of a relation (if visible) and the edge to it.

        Supertypes outside the model are drawn as external nodes; other
        references must resolve to a visible documented type.
        """
        target = self._adapter.resolve(name, source.package)
        if target is not None:
            if self._adapter.is_type_hidden(target):
                return
            graph.add_node(self._type_node(target, page))
            graph.add_edge(source.qualified_name, target.qualified_name, kind, cardinality)
            return

        if kind not in (EdgeKind.INHERITANCE, EdgeKind.REALIZATION):
            return
        if name in IMPLICIT_ROOT_TYPES or self._is_hidden_name(name):
            return
        external_kind = TypeKind.INTERFACE if name in source.interfaces else TypeKind.CLASS
        graph.add_node(self._external_node(name, external_kind))
        graph.add_edge(source.qualified_name, name, kind, cardinality)

    @staticmethod
    def _subtype_kind(sub: "TypeDoc", parent: "TypeDoc") -> EdgeKind:
        if parent.kind is TypeKind.INTERFACE and sub.kind is not TypeKind.INTERFACE:
            return EdgeKind.REALIZATION
        return EdgeKind.INHERITANCE

    # ── Nodes ──────────────────────────────────────────────────────────

    def _type_node(self, t: "TypeDoc", page: str) -> TypeNode:
        category = self._adapter.category_of(t)
        self._check_category(category)
        return TypeNode(
            id=t.qualified_name,
            kind=t.kind,
            category=category,
            link=self._layout.href(page, self._layout.type_page(t.package, t.name)),
            package=t.package or "",
        )

    def _external_node(self, name: str, kind: TypeKind) -> TypeNode:
        return TypeNode(id=name, kind=kind, external=True, package=self._external_package(name))

    def _package_category(self, package: str) -> Optional[str]:
        doc = self._adapter.package_doc(package)
        values = doc.tag_values(TAG_CATEGORY) if doc is not None else []
        category = values[0].strip() if values and values[0].strip() else None
        self._check_category(category)
        return category

    def _check_category(self, category: Optional[str]) -> None:
        if category and category not in self._categories and category not in self._unknown_categories_reported:
            self._unknown_categories_reported.add(category)
            logger.info("Category '%s' has no color configured; using the default style", category)

    def _external_package(self, qualified_name: str) -> str:
        """Longest documented package prefixing the name, else a guess."""
        prefix = qualified_name
        while "." in prefix:
            prefix = prefix.rsplit(".", 1)[0]
            if self._adapter.package_doc(prefix) is not None:
                return prefix
        return guess_package(qualified_name)

    def _is_hidden_name(self, qualified_name: str) -> bool:
        return self._adapter.is_hidden(self._external_package(qualified_name) or None)
