"""
Mind map diagram helper
Turns a MindMapNode tree into a left-to-right Graphviz tree
"""

import logging

import graphviz

from studybuddy.core.errors import DiagramRenderError
from studybuddy.schemas.mindmap import MindMapNode

logger = logging.getLogger(__name__)

PRIMARY_COLOR = "#4f46e5"
LEAF_FILL = "#ffffff"
LINK_COLOR = "#cbd5e1"
LABEL_COLOR = "#1e293b"

SUPPORTED_FORMATS = ("svg", "png")


def build_mind_map_graph(root: MindMapNode) -> graphviz.Digraph:
    """
    Create a Graphviz diagram for a mind map

    Node ids are the node's path in the tree ("n0", "n0_1", "n0_1_2", ...)
    so repeated names under different parents stay separate nodes.
    Parents are filled with the primary colour, leaves are white.
    """
    dot = graphviz.Digraph(comment=root.name, engine="dot")
    dot.attr(rankdir="LR")
    dot.attr(
        "graph",
        ranksep="1.2",
        nodesep="0.4",
        fontname="sans-serif",
        bgcolor="transparent",
    )
    dot.attr(
        "node",
        shape="box",
        style="rounded,filled",
        fontname="sans-serif",
        fontsize="14",
        penwidth="2",
        color=PRIMARY_COLOR,
    )
    dot.attr("edge", color=LINK_COLOR, penwidth="2", arrowhead="none")

    def add(node: MindMapNode, node_id: str) -> None:
        # plain text even when the name looks like <...>
        label = graphviz.nohtml(node.name)
        if node.children:
            dot.node(node_id, label, fillcolor=PRIMARY_COLOR, fontcolor=LEAF_FILL)
        else:
            dot.node(node_id, label, fillcolor=LEAF_FILL, fontcolor=LABEL_COLOR)
        for index, child in enumerate(node.children):
            child_id = f"{node_id}_{index}"
            add(child, child_id)
            dot.edge(node_id, child_id)

    add(root, "n0")
    return dot


def render_mind_map(root: MindMapNode, fmt: str = "svg") -> bytes:
    """Render through the Graphviz binary. Raises DiagramRenderError if unavailable."""
    if fmt not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported diagram format '{fmt}'. Use one of {SUPPORTED_FORMATS}.")

    dot = build_mind_map_graph(root)
    try:
        return dot.pipe(format=fmt)
    except graphviz.ExecutableNotFound as e:
        logger.warning("[MINDMAP] Graphviz executable not found, cannot render diagram")
        raise DiagramRenderError("Graphviz is not installed on the server.") from e
    except graphviz.CalledProcessError as e:
        raise DiagramRenderError(f"Graphviz failed to render the diagram: {e}") from e
