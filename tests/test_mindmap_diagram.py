import graphviz
import pytest

from studybuddy.core.errors import DiagramRenderError
from studybuddy.schemas.mindmap import MindMapNode
from studybuddy.services.mindmap_diagram import build_mind_map_graph, render_mind_map


@pytest.fixture
def tree():
    return MindMapNode.model_validate({
        "name": "Biology",
        "children": [
            {"name": "Cells", "children": [{"name": "Organelles"}]},
            {"name": "Genes"},
            {"name": "Genes"},
        ],
    })


def _node_line(source, node_id):
    return next(line for line in source.splitlines() if line.strip().startswith(f"{node_id} "))


def test_tree_layout_left_to_right(tree):
    source = build_mind_map_graph(tree).source

    assert "rankdir=LR" in source
    assert "n0 -> n0_0" in source
    assert "n0_0 -> n0_0_0" in source
    assert "n0 -> n0_2" in source


def test_parents_filled_leaves_white(tree):
    source = build_mind_map_graph(tree).source

    assert 'fillcolor="#4f46e5"' in _node_line(source, "n0")
    assert 'fillcolor="#4f46e5"' in _node_line(source, "n0_0")
    assert 'fillcolor="#ffffff"' in _node_line(source, "n0_0_0")
    assert 'fillcolor="#ffffff"' in _node_line(source, "n0_1")


def test_duplicate_names_stay_separate_nodes(tree):
    source = build_mind_map_graph(tree).source
    assert "label=Genes" in _node_line(source, "n0_1")
    assert "label=Genes" in _node_line(source, "n0_2")


def test_unknown_format_rejected(tree):
    with pytest.raises(ValueError):
        render_mind_map(tree, fmt="gif")


def test_missing_graphviz_binary(tree, monkeypatch):
    def no_binary(self, *args, **kwargs):
        raise graphviz.ExecutableNotFound(["dot"])

    monkeypatch.setattr(graphviz.Digraph, "pipe", no_binary)
    with pytest.raises(DiagramRenderError):
        render_mind_map(tree)


def test_angle_bracket_names_are_plain_labels():
    root = MindMapNode.model_validate({
        "name": "<Vectors & Scalars>",
        "children": [{"name": "<b>Magnitude</b>"}],
    })
    source = build_mind_map_graph(root).source

    assert 'label="<Vectors & Scalars>"' in _node_line(source, "n0")
    assert 'label="<b>Magnitude</b>"' in _node_line(source, "n0_0")
