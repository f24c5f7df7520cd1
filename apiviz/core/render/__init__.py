# DOT serialization and Graphviz invocation.

from .dot import EDGE_STYLES, serialize
from .graphviz import GraphvizRenderer, RenderedDiagram

__all__ = [
    "EDGE_STYLES",
    "serialize",
    "GraphvizRenderer",
    "RenderedDiagram",
]
