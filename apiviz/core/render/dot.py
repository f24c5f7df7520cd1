"""Deterministic DOT generation for relationship graphs.

Takes a built Graph and produces Graphviz DOT source. Node and edge
statements follow the graph's own (sorted) order, so the same graph
always serializes to the same text.
"""

import logging
from typing import Dict, List

from ..constants import EXTERNAL_FILL_COLOR, EXTERNAL_LINE_COLOR, MAP_NAME
from ..graph.categories import CategoryTable
from ..graph.models import (
    DiagramTarget,
    Edge,
    EdgeKind,
    Graph,
    PackageNode,
    TypeKind,
    TypeNode,
)

logger = logging.getLogger(__name__)

_GRAPH_ATTRS = {
    DiagramTarget.CLASS: 'rankdir="BT", ranksep="0.4", nodesep="0.3"',
    DiagramTarget.PACKAGE_SUMMARY: 'rankdir="BT", ranksep="0.4", nodesep="0.3"',
    DiagramTarget.OVERVIEW_SUMMARY: 'rankdir="TB", ranksep="0.5", nodesep="0.4"',
}

_NODE_DEFAULTS = 'fontname="Helvetica", fontsize="10", shape="box", style="filled", margin="0.1,0.05"'
_EDGE_DEFAULTS = 'fontname="Helvetica", fontsize="8", arrowsize="0.8"'

# Arrow style is a pure function of edge kind.
EDGE_STYLES: Dict[EdgeKind, Dict[str, str]] = {
    EdgeKind.INHERITANCE: {"style": "solid", "arrowhead": "empty"},
    EdgeKind.REALIZATION: {"style": "dashed", "arrowhead": "empty"},
    EdgeKind.ASSOCIATION: {"style": "solid", "arrowhead": "open"},
    EdgeKind.DEPENDENCY: {"style": "dashed", "arrowhead": "open"},
    EdgeKind.AGGREGATION: {"style": "solid", "dir": "both", "arrowtail": "odiamond", "arrowhead": "open"},
}

_STEREOTYPES = {
    TypeKind.INTERFACE: "«interface»",
    TypeKind.ENUM: "«enum»",
    TypeKind.ANNOTATION: "«annotation»",
}


def quote(value: str) -> str:
    """Quote a string as a DOT ID."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def _attrs(attrs: Dict[str, str]) -> str:
    return ", ".join(f"{k}={quote(v)}" for k, v in attrs.items())


def serialize(graph: Graph, categories: CategoryTable) -> str:
    """Render a Graph to DOT source."""
    lines: List[str] = [
        f"digraph {MAP_NAME} {{",
        f"  graph [{_GRAPH_ATTRS[graph.target]}];",
        f"  node [{_NODE_DEFAULTS}];",
        f"  edge [{_EDGE_DEFAULTS}];",
        "",
    ]

    for node in graph.nodes:
        if isinstance(node, PackageNode):
            attrs = _package_attrs(node, categories)
        else:
            attrs = _type_attrs(node, graph, categories)
        if node.id == graph.subject:
            attrs["penwidth"] = "2"
            attrs["fontname"] = "Helvetica-Bold"
        lines.append(f"  {quote(node.id)} [{_attrs(attrs)}];")

    if graph.edges:
        lines.append("")
    for edge in graph.edges:
        lines.append(f"  {quote(edge.source)} -> {quote(edge.target)} [{_attrs(_edge_attrs(edge))}];")

    lines.append("}")
    return "\n".join(lines) + "\n"


def _type_attrs(node: TypeNode, graph: Graph, categories: CategoryTable) -> Dict[str, str]:
    label_lines = []
    stereotype = _STEREOTYPES.get(node.kind)
    if stereotype:
        label_lines.append(stereotype)
    label_lines.append(node.simple_name)
    # Qualify names that live outside the diagram's own package
    if node.package and (node.external or node.package != _home_package(graph)):
        label_lines.append(f"({node.package})")

    if node.external:
        fill, line = EXTERNAL_FILL_COLOR, EXTERNAL_LINE_COLOR
    else:
        style = categories.style_for(node.category)
        fill, line = style.fill_color, style.line_color

    attrs = {
        "label": "\n".join(label_lines),
        "fillcolor": fill,
        "color": line,
        "tooltip": node.id,
    }
    if node.kind is TypeKind.INTERFACE:
        attrs["fontname"] = "Helvetica-Oblique"
    if node.link:
        attrs["URL"] = node.link
    return attrs


def _package_attrs(node: PackageNode, categories: CategoryTable) -> Dict[str, str]:
    label = node.id
    if node.metrics is not None:
        label += f"\nCa: {node.metrics.afferent} / Ce: {node.metrics.efferent}"
    style = categories.style_for(node.category)
    attrs = {
        "label": label,
        "shape": "tab",
        "fillcolor": style.fill_color,
        "color": style.line_color,
        "tooltip": node.id,
    }
    if node.link:
        attrs["URL"] = node.link
    return attrs


def _edge_attrs(edge: Edge) -> Dict[str, str]:
    attrs = dict(EDGE_STYLES[edge.kind])
    if edge.cardinality:
        attrs["headlabel"] = edge.cardinality
    return attrs


def _home_package(graph: Graph) -> str:
    if graph.target is DiagramTarget.PACKAGE_SUMMARY:
        return graph.subject
    if graph.target is DiagramTarget.CLASS:
        subject = graph.get_node(graph.subject)
        return subject.package if isinstance(subject, TypeNode) else ""
    return ""
