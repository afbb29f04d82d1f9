"""
Tool layer shared by the HTTP and MCP transports.

Each tool validates the raw source, runs one parser, and wraps the JSON
result in a content payload:

    {"content": [{"type": "text", "text": "<JSON, 2-space indent>"}]}

Failures are raised as MermaidParserError with the boundary message already
applied; run_tool() turns them into the error payload instead.
"""

import logging
from typing import Any, Callable, Dict

from mermaid_parser.class_diagram import parse_class_diagram
from mermaid_parser.diagram_model import to_json_text
from mermaid_parser.er_diagram import parse_er_diagram
from mermaid_parser.errors import (
    InvalidSyntaxError, MermaidParserError, ParseError, ValidationError,
)
from server.config import MAX_SOURCE_LENGTH

logger = logging.getLogger(__name__)

CLASS_DIAGRAM_TOOL = "class_diagram"
ER_DIAGRAM_TOOL = "er_diagram"


def validate_source(source: Any, max_length: int = MAX_SOURCE_LENGTH) -> str:
    """Reject non-string, empty and oversized input."""
    if not isinstance(source, str):
        raise ValidationError("Invalid input: mermaidSource must be a string")
    if len(source) < 1:
        raise ValidationError("Invalid input: mermaidSource must not be empty")
    if len(source) > max_length:
        raise ValidationError(
            f"Invalid input: mermaidSource must be at most {max_length} characters"
        )
    return source


def _text_content(text: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}]}


def _run_parser(tool: str, parse: Callable, source: Any, max_length: int) -> Dict[str, Any]:
    logger.info("%s called with source length: %d",
                tool, len(source) if isinstance(source, str) else 0)
    validate_source(source, max_length)

    try:
        result = parse(source)
    except InvalidSyntaxError:
        raise
    except ValidationError as exc:
        raise ValidationError(f"Invalid input: {exc.message}", exc.details) from exc
    except ParseError as exc:
        raise ParseError(f"Parse error: {exc.message}", exc.details) from exc

    text = to_json_text(result)
    logger.debug("%s produced %d characters of JSON", tool, len(text))
    return _text_content(text)


def class_diagram_tool(mermaid_source: Any, max_length: int = MAX_SOURCE_LENGTH) -> Dict[str, Any]:
    """Parse a classDiagram and return it as a text content payload."""
    return _run_parser(CLASS_DIAGRAM_TOOL, parse_class_diagram, mermaid_source, max_length)


def er_diagram_tool(mermaid_source: Any, max_length: int = MAX_SOURCE_LENGTH) -> Dict[str, Any]:
    """Parse an erDiagram and return it as a text content payload."""
    return _run_parser(ER_DIAGRAM_TOOL, parse_er_diagram, mermaid_source, max_length)


TOOLS: Dict[str, Dict[str, Any]] = {
    CLASS_DIAGRAM_TOOL: {
        "handler": class_diagram_tool,
        "description": (
            "Parse Mermaid classDiagram source into JSON: classes with members, "
            "annotations and generics, relationships, and namespaces."
        ),
    },
    ER_DIAGRAM_TOOL: {
        "handler": er_diagram_tool,
        "description": (
            "Parse Mermaid erDiagram source into JSON: entities with attributes "
            "and keys, and relationships with cardinality."
        ),
    },
}


def error_to_dict(exc: MermaidParserError) -> Dict[str, Any]:
    """Boundary error shape: {"type": ..., "message": ...}."""
    return {"type": exc.error_type, "message": exc.message}


def run_tool(name: str, mermaid_source: Any) -> Dict[str, Any]:
    """Run a tool by name, returning an error payload instead of raising.

    Raises KeyError for an unknown tool name.
    """
    handler = TOOLS[name]["handler"]
    try:
        return handler(mermaid_source)
    except MermaidParserError as exc:
        logger.warning("%s failed: %s", name, exc.message)
        payload = _text_content(f"Error: {exc.message}")
        payload["isError"] = True
        return payload
