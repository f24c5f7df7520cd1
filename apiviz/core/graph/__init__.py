# Relationship graph construction for class, package-summary and overview diagrams.

from .builder import RelationshipGraphBuilder
from .categories import Category, CategoryTable, parse_category_option
from .models import (
    DiagramTarget,
    Edge,
    EdgeKind,
    Graph,
    PackageMetrics,
    PackageNode,
    ReferenceConvention,
    TypeKind,
    TypeNode,
)

__all__ = [
    "RelationshipGraphBuilder",
    "Category",
    "CategoryTable",
    "parse_category_option",
    "DiagramTarget",
    "Edge",
    "EdgeKind",
    "Graph",
    "PackageMetrics",
    "PackageNode",
    "ReferenceConvention",
    "TypeKind",
    "TypeNode",
]
