#!/usr/bin/env python3
"""
Mermaid Class Diagram Parser

Parses a `classDiagram` block into a ClassDiagramResult with:
- Class declarations (bare, brace body, generic `Name~T~`, labelled `Name["..."]`)
- Members in brace bodies and colon form (`Name : +int age`)
- Annotations (`<<interface>>` inside a body or before a class name)
- Relationships with optional multiplicities and labels
- Namespaces as display groupings

Usage:
    python -m mermaid_parser.class_diagram --input diagram.mmd
    python -m mermaid_parser.class_diagram --input diagram.mmd --output diagram.json
    cat diagram.mmd | python -m mermaid_parser.class_diagram --stdin
"""

import argparse
import logging
import re
import sys
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from mermaid_parser.diagram_model import (
    ClassDefinition, ClassDiagramResult, ClassMember, MethodParameter,
    Multiplicity, Namespace, Relationship, parse_visibility, save_result, to_json_text,
)
from mermaid_parser.errors import InvalidSyntaxError, MermaidParserError, ParseError
from mermaid_parser.generics import rewrite_generic_type, split_generic_name
from mermaid_parser.preprocess import (
    split_lines, starts_with_keyword, strip_comments, strip_frontmatter, strip_notes,
)

logger = logging.getLogger(__name__)

DIAGRAM_KEYWORD = 'classDiagram'

_IDENT = r'[A-Za-z_][A-Za-z0-9_]*'
_TYPE = r'[A-Za-z_][A-Za-z0-9_~<>\[\]]*'

_KEYWORD_RE = re.compile(r'^classdiagram(?:-v2)?$', re.IGNORECASE)
_NAMESPACE_RE = re.compile(r'^namespace\s+(' + _IDENT + r')\s*\{?')
_CLASS_HEADER_RE = re.compile(
    r'^class\s+([A-Za-z][A-Za-z0-9_~]*)(?:\s*\["([^"]*)"\])?\s*(\{)?\s*(\})?'
)
_ANNOTATION_RE = re.compile(r'^<<(\w+)>>$')
_STANDALONE_ANNOTATION_RE = re.compile(r'^<<(\w+)>>\s+(' + _IDENT + r')$')
_COLON_MEMBER_RE = re.compile(r'^(' + _IDENT + r')\s*:\s*(.+)$')

# ─── Member grammar ───────────────────────────────────────────────

_BARE_MEMBER_RE = re.compile(r'^' + _IDENT + r'$')
_METHOD_RE = re.compile(
    r'^([+\-#~]?)(' + _IDENT + r')\s*\(([^)]*)\)\s*([$*])?\s*(' + _TYPE + r')?\s*([$*])?'
)
_PROPERTY_RE = re.compile(r'^([+\-#~]?)(' + _TYPE + r')\s+(' + _IDENT + r')\s*([$*])?')
_PARAMETER_RE = re.compile(r'^(' + _TYPE + r')\s+(' + _IDENT + r')$')


def _apply_classifier(member: ClassMember, *markers: Optional[str]) -> None:
    if '$' in markers:
        member.is_static = True
    if '*' in markers:
        member.is_abstract = True


def parse_method_parameters(params_text: str) -> List[MethodParameter]:
    """Parse `Type name, other` into parameters; a lone token is a name."""
    params: List[MethodParameter] = []
    for raw in params_text.split(','):
        param = raw.strip()
        if not param:
            continue
        m = _PARAMETER_RE.match(param)
        if m:
            params.append(MethodParameter(name=m.group(2), type=rewrite_generic_type(m.group(1))))
        else:
            params.append(MethodParameter(name=param))
    return params


def parse_member(line: str) -> ClassMember:
    """Parse one member declaration into a property or method."""
    line = line.strip()

    # enumeration values and untyped fields
    if _BARE_MEMBER_RE.match(line):
        return ClassMember(name=line, type='property', visibility='public')

    if '(' in line:
        m = _METHOD_RE.match(line)
        if not m:
            raise ParseError(f"Invalid method definition: {line}")
        member = ClassMember(
            name=m.group(2),
            type='method',
            visibility=parse_visibility(m.group(1)),
            parameters=parse_method_parameters(m.group(3)),
        )
        if m.group(5):
            member.return_type = rewrite_generic_type(m.group(5))
        _apply_classifier(member, m.group(4), m.group(6))
        return member

    m = _PROPERTY_RE.match(line)
    if not m:
        raise ParseError(f"Invalid property definition: {line}")
    member = ClassMember(
        name=m.group(3),
        type='property',
        visibility=parse_visibility(m.group(1)),
        data_type=rewrite_generic_type(m.group(2)),
    )
    _apply_classifier(member, m.group(4))
    return member


# ─── Relationship grammar ─────────────────────────────────────────

def _relationship_pattern(operator: str) -> re.Pattern:
    # a letter operator (o--) must not swallow the end of the source name
    guard = r'(?<![A-Za-z0-9_])' if operator[0].isalnum() else ''
    return re.compile(
        r'(' + _IDENT + r')\s*(?:"([^"]*)"\s*)?'
        + guard + re.escape(operator)
        + r'\s*(?:"([^"]*)"\s*)?(' + _IDENT + r')(?:\s*:\s*(.*\S))?'
    )


# First match wins: longer operators must come before the ones they contain.
RELATIONSHIP_GRAMMARS: List[Tuple[str, re.Pattern]] = [
    ('inheritance', _relationship_pattern('<|--')),
    ('composition', _relationship_pattern('*--')),
    ('aggregation', _relationship_pattern('o--')),
    ('association', _relationship_pattern('-->')),
    ('dependency', _relationship_pattern('..>')),
    ('realization', _relationship_pattern('..|>')),
    ('link_solid', _relationship_pattern('--')),
    ('link_dashed', _relationship_pattern('..')),
]

_ARROW_OPERATORS = ('<|--', '-->', '*--', 'o--', '..>', '..|>')
_LINK_OPERATORS = ('--', '..')


def looks_like_relationship(line: str) -> bool:
    """True when a line carries a relationship operator."""
    if any(op in line for op in _ARROW_OPERATORS):
        return True
    if any(op in line for op in _LINK_OPERATORS):
        return not re.match(r'^' + _IDENT + r'\s*:', line)
    return False


def parse_relationship(line: str) -> Relationship:
    """Match a relationship line against the ordered operator grammars."""
    for kind, pattern in RELATIONSHIP_GRAMMARS:
        m = pattern.search(line)
        if not m:
            continue
        rel = Relationship(source=m.group(1), target=m.group(4), kind=kind)
        source_mult, target_mult = m.group(2) or None, m.group(3) or None
        if source_mult or target_mult:
            rel.multiplicity = Multiplicity(source=source_mult, target=target_mult)
        if m.group(5):
            rel.label = m.group(5)
        return rel
    raise ParseError(f"Invalid relationship definition: {line}")


# ─── Scanner ──────────────────────────────────────────────────────

class ClassScanState(Enum):
    SCANNING = "scanning"
    IN_NAMESPACE = "in_namespace"
    IN_CLASS_BODY = "in_class_body"


class ClassDiagramScanner:
    """Line-by-line state machine building one ClassDiagramResult."""

    def __init__(self) -> None:
        self.result = ClassDiagramResult()
        self.state = ClassScanState.SCANNING
        self._namespace: Optional[Namespace] = None
        self._body: Optional[ClassDefinition] = None
        self._handlers: List[Tuple[Callable[[str], bool], Callable[[str], None]]] = [
            (self._is_namespace_open, self._open_namespace),
            (self._is_namespace_close, self._close_namespace),
            (lambda line: starts_with_keyword(line, 'class '), self._class_header),
            (lambda line: bool(_STANDALONE_ANNOTATION_RE.match(line)), self._standalone_annotation),
            (self._is_colon_member, self._colon_member),
            (looks_like_relationship, self._relationship),
        ]

    def feed(self, line: str) -> None:
        if self.state is ClassScanState.IN_CLASS_BODY:
            self._class_body_line(line)
            return
        for matches, handle in self._handlers:
            if matches(line):
                handle(line)
                return
        logger.debug("Skipping unrecognized line: %s", line)

    def finish(self) -> ClassDiagramResult:
        if self.state is ClassScanState.IN_CLASS_BODY and self._body is not None:
            logger.debug("Class body for %s not closed before end of input", self._body.name)
        return self.result

    # ── namespaces ────────────────────────────────────────────────

    def _is_namespace_open(self, line: str) -> bool:
        return bool(_NAMESPACE_RE.match(line))

    def _open_namespace(self, line: str) -> None:
        m = _NAMESPACE_RE.match(line)
        self._namespace = Namespace(name=m.group(1))
        if self.result.namespaces is None:
            self.result.namespaces = []
        self.result.namespaces.append(self._namespace)
        self.state = ClassScanState.IN_NAMESPACE

    def _is_namespace_close(self, line: str) -> bool:
        return line == '}' and self.state is ClassScanState.IN_NAMESPACE

    def _close_namespace(self, line: str) -> None:
        self._namespace = None
        self.state = ClassScanState.SCANNING

    # ── classes ───────────────────────────────────────────────────

    def _class_header(self, line: str) -> None:
        m = _CLASS_HEADER_RE.match(line)
        if not m:
            raise ParseError(f"Invalid class definition: {line}")

        name, generic_type = split_generic_name(m.group(1))
        label = m.group(2)
        opens_body = m.group(3) is not None
        closes_body = m.group(4) is not None

        cls = ClassDefinition(name=name, label=label, generic_type=generic_type)
        self._store_class(cls, self.result.find_class(name))

        if self._namespace is not None and name not in self._namespace.classes:
            self._namespace.classes.append(name)

        if opens_body and not closes_body:
            self._body = cls
            self.state = ClassScanState.IN_CLASS_BODY

    def _store_class(self, cls: ClassDefinition, existing: Optional[ClassDefinition]) -> None:
        """Append a new class, or replace a redeclared one at its existing position."""
        if existing is None:
            self.result.classes.append(cls)
            return
        index = self.result.classes.index(existing)
        self.result.classes[index] = cls
        logger.debug("Class %s redeclared; replacing previous definition", cls.name)

    def _class_body_line(self, line: str) -> None:
        if line == '}':
            self._body = None
            self.state = (
                ClassScanState.IN_NAMESPACE if self._namespace is not None
                else ClassScanState.SCANNING
            )
            return
        m = _ANNOTATION_RE.match(line)
        if m:
            self._body.annotations.append(m.group(1))
            return
        self._body.members.append(parse_member(line))

    def _standalone_annotation(self, line: str) -> None:
        m = _STANDALONE_ANNOTATION_RE.match(line)
        self.result.ensure_class(m.group(2)).annotations.append(m.group(1))

    # ── members and relationships ─────────────────────────────────

    def _is_colon_member(self, line: str) -> bool:
        return bool(_COLON_MEMBER_RE.match(line)) and not any(
            op in line for op in ('<|--', '-->', '--', '..')
        )

    def _colon_member(self, line: str) -> None:
        m = _COLON_MEMBER_RE.match(line)
        member = parse_member(m.group(2))
        self.result.ensure_class(m.group(1)).members.append(member)

    def _relationship(self, line: str) -> None:
        rel = parse_relationship(line)
        self.result.relationships.append(rel)
        self.result.ensure_class(rel.source)
        self.result.ensure_class(rel.target)


# ─── Public API ───────────────────────────────────────────────────

def preprocess_class_source(source: str) -> List[str]:
    """Strip frontmatter, notes and comments; return the non-blank lines."""
    text = strip_frontmatter(source)
    text = strip_notes(text)
    text = strip_comments(text)
    return split_lines(text)


def parse_class_diagram(source: str) -> ClassDiagramResult:
    """Parse Mermaid classDiagram source.

    Raises InvalidSyntaxError when the first line is not the classDiagram
    keyword, and ParseError naming the first malformed class header, member
    or relationship line.
    """
    lines = preprocess_class_source(source)
    if not lines or not _KEYWORD_RE.match(lines[0]):
        raise InvalidSyntaxError(f"Invalid Mermaid syntax: must start with {DIAGRAM_KEYWORD}")

    scanner = ClassDiagramScanner()
    for line in lines[1:]:
        scanner.feed(line)
    result = scanner.finish()

    logger.debug(
        "Parsed class diagram: %d classes, %d relationships",
        len(result.classes), len(result.relationships),
    )
    return result


# ─── CLI ──────────────────────────────────────────────────────────

def main() -> int:
    parser = argparse.ArgumentParser(description="Parse a Mermaid class diagram to JSON")
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
        result = parse_class_diagram(content)
    except MermaidParserError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

    if args.output:
        save_result(result, args.output)
        print(f"  Class diagram written to {args.output}", file=sys.stderr)
    else:
        print(to_json_text(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
