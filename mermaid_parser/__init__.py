"""Deterministic Mermaid diagram parsers.

Converts `classDiagram` and `erDiagram` source text into structured results
(classes, members, relationships; entities, attributes, cardinalities) that
serialize to JSON. Pure functions, no I/O.
"""

from mermaid_parser.class_diagram import parse_class_diagram
from mermaid_parser.diagram_model import ClassDiagramResult, ERDiagramResult, to_json_text
from mermaid_parser.er_diagram import parse_er_diagram
from mermaid_parser.errors import (
    InvalidSyntaxError,
    MermaidParserError,
    ParseError,
    ValidationError,
)

__all__ = [
    "parse_class_diagram",
    "parse_er_diagram",
    "ClassDiagramResult",
    "ERDiagramResult",
    "to_json_text",
    "MermaidParserError",
    "ValidationError",
    "InvalidSyntaxError",
    "ParseError",
]
