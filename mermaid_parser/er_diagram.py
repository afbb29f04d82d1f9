#!/usr/bin/env python3
"""
Mermaid ER Diagram Parser

Parses an `erDiagram` block into an ERDiagramResult with:
- Entity attribute blocks (`CUSTOMER { string name PK "comment" }`)
- Crow's-foot relationships, solid and dotted (`CUSTOMER ||--o{ ORDER : places`)
- Natural-language relationships (`CAR 1 to zero or more DRIVER : allows`)
- YAML frontmatter skipping

Usage:
    python -m mermaid_parser.er_diagram --input schema.mmd
    python -m mermaid_parser.er_diagram --input schema.mmd --output schema.json
    cat schema.mmd | python -m mermaid_parser.er_diagram --stdin
"""

import argparse
import logging
import re
import sys
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from mermaid_parser.cardinality import resolve_natural_language, resolve_symbol
from mermaid_parser.diagram_model import (
    KEY_TYPES, Entity, EntityMember, ERDiagramResult, ERRelationship,
    save_result, to_json_text,
)
from mermaid_parser.errors import (
    InvalidSyntaxError, MermaidParserError, ParseError, ValidationError,
)
from mermaid_parser.preprocess import FRONTMATTER_DELIMITER

logger = logging.getLogger(__name__)

DIAGRAM_KEYWORD = 'erDiagram'

_ENTITY = r'\w+(?:-\w+)*'
_SYMBOL = r'[|}o\-{.]+'

_BLOCK_OPEN_RE = re.compile(r'^(' + _ENTITY + r')\s*\{$')
_KEYWORD_LINE_RE = re.compile(r'^' + DIAGRAM_KEYWORD + r'(?:\s|$)')

# ─── Attribute grammar ────────────────────────────────────────────

_ATTRIBUTE_RE = re.compile(r'^(\S+(?:\(\d+\))?)\s+(\w+)(.*)$')
_SIZED_TYPE_RE = re.compile(r'^(\w+)\((\d+)\)$')
_COMMENT_RE = re.compile(r'"([^"]+)"$')


def parse_data_type(raw: str) -> Tuple[str, Optional[int]]:
    """Split `string(99)` into ("string", 99); other types pass through."""
    m = _SIZED_TYPE_RE.match(raw)
    if m:
        return m.group(1), int(m.group(2))
    return raw, None


def parse_keys_and_comment(rest: str) -> Tuple[List[str], Optional[str]]:
    """Pull the trailing quoted comment, then keep the PK/FK/UK tokens before it."""
    rest = rest.strip()
    if not rest:
        return [], None

    comment = None
    keys_text = rest
    m = _COMMENT_RE.search(rest)
    if m:
        comment = m.group(1)
        keys_text = rest[:m.start()]

    keys = [token for token in re.split(r'[,\s]+', keys_text) if token in KEY_TYPES]
    return keys, comment


def parse_attribute(line: str) -> Optional[EntityMember]:
    """Parse `dataType[(length)] name [keys] ["comment"]`, or None if no name token."""
    m = _ATTRIBUTE_RE.match(line)
    if not m:
        return None
    data_type, length = parse_data_type(m.group(1))
    keys, comment = parse_keys_and_comment(m.group(3))
    return EntityMember(
        name=m.group(2),
        data_type=data_type,
        keys=keys,
        comment=comment,
        length=length,
    )


# ─── Relationship grammar ─────────────────────────────────────────

# Tried in order; the symbol forms need a recognized symbol to count as a match.
SYMBOL_GRAMMARS: List[Tuple[str, re.Pattern]] = [
    ('quoted_label', re.compile(
        r'^(' + _ENTITY + r')\s+(' + _SYMBOL + r')\s+(' + _ENTITY + r')\s*:\s*"([^"]+)"$')),
    ('bare_label', re.compile(
        r'^(' + _ENTITY + r')\s+(' + _SYMBOL + r')\s+(' + _ENTITY + r')\s*:\s*(\S+)$')),
    ('no_label', re.compile(
        r'^(' + _ENTITY + r')\s+(' + _SYMBOL + r')\s+(' + _ENTITY + r')$')),
]
NATURAL_LANGUAGE_GRAMMAR = re.compile(
    r'^(' + _ENTITY + r')\s+(.+?)\s+(' + _ENTITY + r')\s*:\s*(.+)$'
)


def parse_relationship(line: str) -> Optional[ERRelationship]:
    """Match a relationship line, or return None if no grammar accepts it."""
    for name, pattern in SYMBOL_GRAMMARS:
        m = pattern.match(line)
        if not m:
            continue
        resolved = resolve_symbol(m.group(2))
        if resolved is None:
            logger.debug("Symbol %r in %s form not recognized", m.group(2), name)
            continue
        kind, cardinality = resolved
        label = m.group(4) if m.lastindex and m.lastindex >= 4 else None
        return ERRelationship(
            source=m.group(1), target=m.group(3), kind=kind,
            label=label, cardinality=cardinality,
        )

    m = NATURAL_LANGUAGE_GRAMMAR.match(line)
    if m:
        resolved = resolve_natural_language(m.group(2))
        if resolved is not None:
            kind, cardinality = resolved
            return ERRelationship(
                source=m.group(1), target=m.group(3), kind=kind,
                label=m.group(4), cardinality=cardinality,
            )
    return None


# ─── Scanner ──────────────────────────────────────────────────────

class ERScanState(Enum):
    SCANNING = "scanning"
    IN_FRONTMATTER = "in_frontmatter"
    IN_ENTITY_BLOCK = "in_entity_block"


class ERDiagramScanner:
    """Line-by-line state machine building one ERDiagramResult."""

    def __init__(self) -> None:
        self.state = ERScanState.SCANNING
        self._entities: Dict[str, Entity] = {}
        self._relationships: List[ERRelationship] = []
        self._current: Optional[Entity] = None

    def _entity(self, name: str) -> Entity:
        """Return the named entity, registering it on first sight."""
        entity = self._entities.get(name)
        if entity is None:
            entity = Entity(name=name)
            self._entities[name] = entity
        return entity

    def feed(self, line: str) -> None:
        if self.state is ERScanState.IN_FRONTMATTER:
            if line == FRONTMATTER_DELIMITER:
                self.state = ERScanState.SCANNING
            return

        if self.state is ERScanState.IN_ENTITY_BLOCK:
            self._block_line(line)
            return

        if line == FRONTMATTER_DELIMITER:
            self.state = ERScanState.IN_FRONTMATTER
            return

        if not line or _KEYWORD_LINE_RE.match(line):
            return

        m = _BLOCK_OPEN_RE.match(line)
        if m:
            self._current = self._entity(m.group(1))
            self.state = ERScanState.IN_ENTITY_BLOCK
            return

        rel = parse_relationship(line)
        if rel is None:
            raise ParseError(f"Invalid syntax: {line}")
        self._entity(rel.source)
        self._entity(rel.target)
        self._relationships.append(rel)

    def _block_line(self, line: str) -> None:
        if not line:
            return
        if line == '}':
            self._current = None
            self.state = ERScanState.SCANNING
            return
        member = parse_attribute(line)
        if member is None:
            logger.debug("Skipping malformed attribute in %s: %s", self._current.name, line)
            return
        if self._current.members is None:
            self._current.members = []
        self._current.members.append(member)

    def finish(self) -> ERDiagramResult:
        return ERDiagramResult(
            entities=list(self._entities.values()),
            relationships=list(self._relationships),
        )


# ─── Public API ───────────────────────────────────────────────────

def parse_er_diagram(source: str) -> ERDiagramResult:
    """Parse Mermaid erDiagram source.

    Raises ValidationError for blank input, InvalidSyntaxError when the
    erDiagram keyword is missing, and ParseError for the first line that
    matches no block, attribute or relationship grammar.
    """
    if not source or not source.strip():
        raise ValidationError("Empty input provided")
    if DIAGRAM_KEYWORD not in source:
        raise InvalidSyntaxError(f"Invalid ER diagram: missing '{DIAGRAM_KEYWORD}' keyword")

    scanner = ERDiagramScanner()
    try:
        for raw in source.split('\n'):
            scanner.feed(raw.strip())
    except MermaidParserError:
        raise
    except Exception as exc:
        raise ParseError("Failed to parse ER diagram", details=str(exc)) from exc
    result = scanner.finish()

    logger.debug(
        "Parsed ER diagram: %d entities, %d relationships",
        len(result.entities), len(result.relationships),
    )
    return result


# ─── CLI ──────────────────────────────────────────────────────────

def main() -> int:
    parser = argparse.ArgumentParser(description="Parse a Mermaid ER diagram to JSON")
    parser.add_argument("--input", "-i", help="Input .mmd file")
    parser.add_argument("--output", "-o", help="Output .json path (default: stdout)")
    parser.add_argument("--stdin", action="store_true", help="Read from stdin")
    args = parser.parse_args()

    if args.stdin:
        content = sys.stdin.read()
    elif args.input:
        input_path = Path(args.input)
        if not input_path.exists():
            print(f"Error: Input file not found: {input_path}", file=sys.stderr)
            return 1
        content = input_path.read_text(encoding='utf-8')
    else:
        parser.error("Either --input or --stdin is required")
        return 1

    try:
        result = parse_er_diagram(content)
    except MermaidParserError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        if exc.details:
            print(f"  {exc.details}", file=sys.stderr)
        return 1

    if args.output:
        save_result(result, args.output)
        print(f"  ER diagram written to {args.output}", file=sys.stderr)
    else:
        print(to_json_text(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
