"""Relationship graph data structures.

A Graph is built once per diagram target and never mutated afterwards.
Nodes and edges are stored sorted by id so that serializing the same
target twice yields identical output.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Tuple, Union


class DiagramTarget(Enum):
    """The three kinds of diagram, each with its own construction rule."""
    CLASS = "class"
    PACKAGE_SUMMARY = "package-summary"
    OVERVIEW_SUMMARY = "overview-summary"


class TypeKind(Enum):
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    ANNOTATION = "annotation"


class EdgeKind(Enum):
    """Relationship kinds; declaration order is strength, strongest first."""
    INHERITANCE = "inheritance"
    REALIZATION = "realization"
    AGGREGATION = "aggregation"
    ASSOCIATION = "association"
    DEPENDENCY = "dependency"

    @property
    def strength(self) -> int:
        return len(EdgeKind) - list(EdgeKind).index(self)


class ReferenceConvention(str, Enum):
    """How member type references map onto edge kinds."""
    FIELD_ASSOCIATION = "field-association"  # fields: association, params/returns: dependency
    ASSOCIATION = "association"
    DEPENDENCY = "dependency"

    def edge_kind(self, reference: str) -> EdgeKind:
        """Edge kind for a reference of type 'field', 'parameter' or 'return'."""
        if self is ReferenceConvention.ASSOCIATION:
            return EdgeKind.ASSOCIATION
        if self is ReferenceConvention.DEPENDENCY:
            return EdgeKind.DEPENDENCY
        return EdgeKind.ASSOCIATION if reference == "field" else EdgeKind.DEPENDENCY


def guess_package(qualified_name: str) -> str:
    """Package of a qualified name when no model says otherwise.

    Segments up to the first capitalized one are the package, so
    ``java.util.Map.Entry`` lives in ``java.util``. A name with no
    capitalized segment falls back to everything before the last dot.
    """
    parts = qualified_name.split(".")
    for i, part in enumerate(parts[:-1]):
        if part[:1].isupper():
            return ".".join(parts[:i])
    return ".".join(parts[:-1])


@dataclass(frozen=True)
class PackageMetrics:
    """Coupling counts for one package."""
    afferent: int
    efferent: int


@dataclass(frozen=True)
class TypeNode:
    id: str  # qualified name
    kind: TypeKind
    category: Optional[str] = None
    link: Optional[str] = None  # href relative to the page showing the diagram
    external: bool = False  # supertype outside the documented model
    package: Optional[str] = None  # "" for the default package; guessed from id when None

    def __post_init__(self):
        if self.package is None:
            object.__setattr__(self, "package", guess_package(self.id))

    @property
    def simple_name(self) -> str:
        """Name inside the package; nested types keep their outer names."""
        if self.package and self.id.startswith(self.package + "."):
            return self.id[len(self.package) + 1:]
        return self.id


@dataclass(frozen=True)
class PackageNode:
    id: str  # package name
    hidden: bool = False
    metrics: Optional[PackageMetrics] = None
    link: Optional[str] = None
    category: Optional[str] = None


Node = Union[TypeNode, PackageNode]


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    kind: EdgeKind
    cardinality: Optional[str] = None

    @property
    def sort_key(self) -> Tuple[str, str, str]:
        return (self.source, self.target, self.kind.value)


@dataclass(frozen=True)
class Graph:
    """An immutable relationship graph scoped to one diagram target.

    Use Graph.create() to build one; it sorts nodes and edges by id and
    rejects edges whose endpoints are not in the node set.
    """
    target: DiagramTarget
    subject: str
    nodes: Tuple[Node, ...] = field(default_factory=tuple)
    edges: Tuple[Edge, ...] = field(default_factory=tuple)

    @classmethod
    def create(
        cls,
        target: DiagramTarget,
        subject: str,
        nodes: Iterable[Node],
        edges: Iterable[Edge],
    ) -> "Graph":
        by_id = {}
        for node in nodes:
            by_id.setdefault(node.id, node)

        sorted_edges = sorted(edges, key=lambda e: e.sort_key)
        for edge in sorted_edges:
            if edge.source not in by_id or edge.target not in by_id:
                raise ValueError(
                    f"Edge {edge.source} -> {edge.target} references a node "
                    f"outside the {target.value} graph for {subject}"
                )

        return cls(
            target=target,
            subject=subject,
            nodes=tuple(by_id[k] for k in sorted(by_id)),
            edges=tuple(sorted_edges),
        )

    @property
    def node_ids(self) -> Tuple[str, ...]:
        return tuple(n.id for n in self.nodes)

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None
