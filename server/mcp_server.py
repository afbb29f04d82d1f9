#!/usr/bin/env python3
"""
Mermaid Parser - MCP Server
===========================

Exposes the diagram parsers as MCP tools over stdio.

Tools:
- class_diagram: Parse Mermaid classDiagram source into JSON
- er_diagram: Parse Mermaid erDiagram source into JSON
"""

import sys
from typing import Annotated

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from server.config import LOG_LEVEL, MAX_SOURCE_LENGTH, configure_logging
from server.tools import CLASS_DIAGRAM_TOOL, ER_DIAGRAM_TOOL, run_tool

mcp = FastMCP("mermaid-parser")

MermaidSource = Annotated[
    str,
    Field(
        min_length=1,
        max_length=MAX_SOURCE_LENGTH,
        description="Mermaid diagram source text",
    ),
]


def _call(name: str, mermaid_source: str) -> str:
    """Run a tool and unwrap its text; an error payload becomes a ToolError."""
    payload = run_tool(name, mermaid_source)
    text = payload["content"][0]["text"]
    if payload.get("isError"):
        raise ToolError(text)
    return text


@mcp.tool()
def class_diagram(mermaidSource: MermaidSource) -> str:
    """Parse a Mermaid classDiagram.

    Returns JSON with:
    - classes: name, label, annotations, members, genericType
    - relationships: from, to, type, label, multiplicity
    - namespaces: present only when the diagram declares any
    """
    return _call(CLASS_DIAGRAM_TOOL, mermaidSource)


@mcp.tool()
def er_diagram(mermaidSource: MermaidSource) -> str:
    """Parse a Mermaid erDiagram.

    Returns JSON with:
    - entities: name and members (dataType, keys, comment, length)
    - relationships: from, to, type, label, cardinality
    """
    return _call(ER_DIAGRAM_TOOL, mermaidSource)


def main() -> None:
    configure_logging(LOG_LEVEL)
    print("[mcp] mermaid-parser running on stdio", file=sys.stderr)
    mcp.run()


if __name__ == "__main__":
    main()
