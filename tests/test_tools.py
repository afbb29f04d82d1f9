import json
import logging

import pytest

from mermaid_parser.errors import InvalidSyntaxError, ParseError, ValidationError
from server.tools import (
    TOOLS, class_diagram_tool, er_diagram_tool, error_to_dict, run_tool, validate_source,
)


def payload_json(payload):
    assert payload["content"][0]["type"] == "text"
    return json.loads(payload["content"][0]["text"])


# ─── Validation ───────────────────────────────────────────────────

def test_validate_source_accepts_limit():
    source = "x" * 100000
    assert validate_source(source) is source


@pytest.mark.parametrize("source", ["", "x" * 100001, None, 42])
def test_validate_source_rejects(source):
    with pytest.raises(ValidationError, match="Invalid input"):
        validate_source(source)


def test_validate_source_custom_limit():
    with pytest.raises(ValidationError):
        validate_source("classDiagram", max_length=5)


# ─── Tools ────────────────────────────────────────────────────────

def test_class_diagram_tool_output():
    payload = class_diagram_tool("classDiagram\nAnimal <|-- Duck")
    text = payload["content"][0]["text"]
    assert text.startswith('{\n  "classes"')
    assert list(payload_json(payload)["relationships"][0]) == ["from", "to", "type"]
    assert "isError" not in payload


def test_er_diagram_tool_output():
    payload = er_diagram_tool("erDiagram\nCUSTOMER ||--o{ ORDER : places")
    data = payload_json(payload)
    assert [e["name"] for e in data["entities"]] == ["CUSTOMER", "ORDER"]
    assert data["relationships"][0]["type"] == "ONE_TO_MANY"


def test_invalid_syntax_passes_through():
    with pytest.raises(InvalidSyntaxError) as excinfo:
        class_diagram_tool("invalid syntax")
    assert excinfo.value.message == "Invalid Mermaid syntax: must start with classDiagram"


def test_parse_errors_are_prefixed():
    with pytest.raises(ParseError) as excinfo:
        er_diagram_tool("erDiagram\nthis is not valid")
    assert excinfo.value.message == "Parse error: Invalid syntax: this is not valid"


def test_blank_er_source_is_a_validation_error():
    with pytest.raises(ValidationError) as excinfo:
        er_diagram_tool("   ")
    assert excinfo.value.message == "Invalid input: Empty input provided"


def test_error_to_dict():
    assert error_to_dict(InvalidSyntaxError("nope")) == {"type": "INVALID_SYNTAX", "message": "nope"}
    assert error_to_dict(ValidationError("bad"))["type"] == "VALIDATION_ERROR"
    assert error_to_dict(ParseError("x", details="y")) == {"type": "PARSE_ERROR", "message": "x"}


# ─── run_tool ─────────────────────────────────────────────────────

def test_registry_names():
    assert sorted(TOOLS) == ["class_diagram", "er_diagram"]


def test_run_tool_success():
    payload = run_tool("class_diagram", "classDiagram\nclass A")
    assert payload_json(payload)["classes"] == [{"name": "A", "members": []}]


@pytest.mark.parametrize("name, source, message", [
    ("class_diagram", "", "Error: Invalid input: mermaidSource must not be empty"),
    ("class_diagram", "invalid syntax", "Error: Invalid Mermaid syntax: must start with classDiagram"),
    ("er_diagram", "invalid syntax", "Error: Invalid ER diagram: missing 'erDiagram' keyword"),
])
def test_run_tool_error_payload(name, source, message):
    payload = run_tool(name, source)
    assert payload == {"content": [{"type": "text", "text": message}], "isError": True}


def test_run_tool_unknown_name():
    with pytest.raises(KeyError):
        run_tool("sequence_diagram", "sequenceDiagram")


def test_tool_call_is_logged(caplog):
    with caplog.at_level(logging.INFO, logger="server.tools"):
        class_diagram_tool("classDiagram\nclass A")
    assert "class_diagram called with source length: 20" in caplog.text
