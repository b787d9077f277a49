import json

import pytest

from studybuddy.core.errors import (
    EmptyResponseError,
    JSONParseError,
    MalformedResponseError,
    NoJSONStructureError,
    SchemaValidationError,
)
from studybuddy.schemas.learning_path import LearningPath
from studybuddy.schemas.mindmap import MindMapNode
from studybuddy.services.json_recovery import clean_and_parse_json, decode_model

EMBEDDED = '{"topic": "Cells", "steps": [{"n": 1, "tags": ["a", "b"]}], "done": false, "score": 2.5}'


@pytest.mark.parametrize(
    "wrapped",
    [
        EMBEDDED,
        f"```json\n{EMBEDDED}\n```",
        f"```\n{EMBEDDED}\n```",
        f"Sure! Here is your data:\n```json\n{EMBEDDED}\n```\nLet me know if you need more.",
        f"Preamble text {EMBEDDED} trailing words",
        f"  \n\n{EMBEDDED}\n\n  ",
    ],
)
def test_embedded_object_survives_prose_and_fences(wrapped):
    assert clean_and_parse_json(wrapped) == json.loads(EMBEDDED)


def test_end_to_end_mind_map_scenario():
    raw = 'Sure! ```json\n{"name":"Root","children":[{"name":"Leaf"}]}\n```'
    assert clean_and_parse_json(raw) == {"name": "Root", "children": [{"name": "Leaf"}]}


def test_empty_input():
    with pytest.raises(EmptyResponseError):
        clean_and_parse_json("")


@pytest.mark.parametrize("raw", ["no json here at all", "only an opening { brace", "closing } only", "```json```"])
def test_no_brace_pair(raw):
    with pytest.raises(NoJSONStructureError):
        clean_and_parse_json(raw)


def test_invalid_content_between_braces_is_a_parse_error():
    with pytest.raises(JSONParseError) as exc_info:
        clean_and_parse_json("{not json}")

    err = exc_info.value
    assert err.fragment == "{not json}"
    assert isinstance(err, MalformedResponseError)
    assert isinstance(err, ValueError)
    assert isinstance(err.__cause__, json.JSONDecodeError)


def test_truncated_response_reports_the_slice():
    raw = 'Here: {"name": "Root", "children": [{"name": "Leaf"}, {"name": "Cut'
    with pytest.raises(JSONParseError) as exc_info:
        clean_and_parse_json(raw)
    assert exc_info.value.fragment == '{"name": "Root", "children": [{"name": "Leaf"}'


def test_unescaped_control_character_is_a_parse_error():
    with pytest.raises(JSONParseError):
        clean_and_parse_json('{"text": "line one\nline two"}')


def test_braces_in_wrong_order_is_a_parse_error():
    with pytest.raises(JSONParseError):
        clean_and_parse_json("} then {")


def test_decode_model_builds_typed_tree():
    raw = '```json\n{"name": "Biology", "children": [{"name": "Cells", "children": null}, {"name": "Genes"}]}\n```'
    node = decode_model(MindMapNode, raw)

    assert node.name == "Biology"
    assert [child.name for child in node.children] == ["Cells", "Genes"]
    assert node.children[0].children == []
    assert node.depth() == 2


def test_decode_model_accepts_camel_case_learning_steps():
    raw = json.dumps({
        "topic": "Algebra",
        "steps": [{
            "title": "Level 1: Mission Start",
            "description": "Variables and expressions.",
            "estimatedTime": "2 hours",
            "keyConcepts": ["variables", "terms"],
        }],
    })
    path = decode_model(LearningPath, raw)

    assert path.steps[0].estimated_time == "2 hours"
    assert path.steps[0].key_concepts == ["variables", "terms"]


def test_wrong_shape_is_a_distinct_validation_error():
    with pytest.raises(SchemaValidationError) as exc_info:
        decode_model(MindMapNode, '{"children": [{"name": "orphan"}]}')

    err = exc_info.value
    assert not isinstance(err, JSONParseError)
    assert isinstance(err, MalformedResponseError)
    assert any(e["loc"] == ("name",) for e in err.errors)


def test_learning_path_without_steps_is_rejected():
    with pytest.raises(SchemaValidationError):
        decode_model(LearningPath, '{"topic": "Algebra", "steps": []}')
