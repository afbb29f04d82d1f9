"""
Cardinality resolution for ER diagrams.

Two front ends produce the same normalized vocabulary ("exactly one",
"zero or one", "one or more", "zero or more"):

- crow's-foot symbols such as `||--o{` or `}|..|{`
- natural-language phrases such as `only one to zero or more`

A (left, right) cardinality pair then maps to one of the eight relationship
kinds through a fixed combination table.
"""

import re
from typing import Dict, Optional, Tuple

from mermaid_parser.diagram_model import Cardinality, ERRelationshipKind as Kind

EXACTLY_ONE = "exactly one"
ZERO_OR_ONE = "zero or one"
ONE_OR_MORE = "one or more"
ZERO_OR_MORE = "zero or more"

SOLID_CONNECTOR = '--'
DOTTED_CONNECTOR = '..'

# Each marker reads the same from either side of the connector.
SYMBOL_CARDINALITY: Dict[str, str] = {
    '||': EXACTLY_ONE,
    '|o': ZERO_OR_ONE,
    'o|': ZERO_OR_ONE,
    '|{': ONE_OR_MORE,
    '{|': ONE_OR_MORE,
    '}|': ONE_OR_MORE,
    'o{': ZERO_OR_MORE,
    '{o': ZERO_OR_MORE,
    '}o': ZERO_OR_MORE,
}

COMBINATION_KINDS: Dict[Tuple[str, str], Kind] = {
    (EXACTLY_ONE, EXACTLY_ONE): Kind.ONE_TO_ONE,
    (EXACTLY_ONE, ZERO_OR_MORE): Kind.ONE_TO_MANY,
    (EXACTLY_ONE, ONE_OR_MORE): Kind.ONE_TO_MANY,
    (ZERO_OR_MORE, EXACTLY_ONE): Kind.MANY_TO_ONE,
    (ONE_OR_MORE, EXACTLY_ONE): Kind.MANY_TO_ONE,
    (ZERO_OR_MORE, ZERO_OR_MORE): Kind.MANY_TO_MANY,
    (ONE_OR_MORE, ONE_OR_MORE): Kind.MANY_TO_MANY,
    (ZERO_OR_ONE, EXACTLY_ONE): Kind.ZERO_OR_ONE_TO_ONE,
    (ZERO_OR_ONE, ZERO_OR_MORE): Kind.ZERO_OR_ONE_TO_MANY,
    (ZERO_OR_ONE, ONE_OR_MORE): Kind.ZERO_OR_ONE_TO_MANY,
    # No dedicated kind for one-to-zero-or-one; approximated.
    (EXACTLY_ONE, ZERO_OR_ONE): Kind.ONE_TO_ZERO_OR_MANY,
    (ZERO_OR_ONE, ZERO_OR_ONE): Kind.ZERO_OR_MANY_TO_ZERO_OR_MANY,
    (ONE_OR_MORE, ZERO_OR_ONE): Kind.ONE_TO_MANY,
    (ZERO_OR_MORE, ZERO_OR_ONE): Kind.MANY_TO_ONE,
}

# Phrase form reads "one to zero or more" as the optional side of the
# relationship, unlike the `||--o{` symbol.
NATURAL_LANGUAGE_OVERRIDES: Dict[Tuple[str, str], Kind] = {
    (EXACTLY_ONE, ZERO_OR_MORE): Kind.ONE_TO_ZERO_OR_MANY,
}


# ─── Crow's-foot symbols ──────────────────────────────────────────

def split_symbol(symbol: str) -> Optional[Tuple[str, str]]:
    """Split a symbol at its connector into (left, right) markers."""
    index = symbol.find(SOLID_CONNECTOR)
    if index == -1:
        index = symbol.find(DOTTED_CONNECTOR)
    if index == -1:
        return None
    left = symbol[:index]
    right = symbol[index + 2:]
    if len(left) != 2 or len(right) != 2:
        return None
    return left, right


def resolve_symbol_cardinality(symbol: str) -> Optional[Cardinality]:
    """Map a crow's-foot symbol to its normalized cardinality pair."""
    parts = split_symbol(symbol)
    if parts is None:
        return None
    left = SYMBOL_CARDINALITY.get(parts[0])
    right = SYMBOL_CARDINALITY.get(parts[1])
    if not left or not right:
        return None
    return Cardinality(source=left, target=right)


def resolve_symbol(symbol: str) -> Optional[Tuple[Kind, Cardinality]]:
    """Resolve a symbol to (kind, cardinality), or None if it is not recognized."""
    cardinality = resolve_symbol_cardinality(symbol)
    if cardinality is None:
        return None
    kind = COMBINATION_KINDS.get((cardinality.source, cardinality.target))
    if kind is None:
        return None
    return kind, cardinality


# ─── Natural language ─────────────────────────────────────────────

PHRASE_CARDINALITY: Dict[str, str] = {
    'only one': EXACTLY_ONE,
    'exactly one': EXACTLY_ONE,
    'one': EXACTLY_ONE,
    '1': EXACTLY_ONE,
    'zero or one': ZERO_OR_ONE,
    'zero or more': ZERO_OR_MORE,
    'many': ZERO_OR_MORE,
    '0+': ZERO_OR_MORE,
    'many(0)': ZERO_OR_MORE,
    'one or more': ONE_OR_MORE,
    '1+': ONE_OR_MORE,
    'many(1)': ONE_OR_MORE,
}

# Longest phrases first so "one or more" is not read as "one".
_PHRASE_ALTERNATION = '|'.join(
    re.escape(p) for p in sorted(PHRASE_CARDINALITY, key=len, reverse=True)
)
_NATURAL_LANGUAGE_RE = re.compile(
    r'^(' + _PHRASE_ALTERNATION + r')\s*(?:optionally\s+)?to\s+(' + _PHRASE_ALTERNATION + r')$'
)


def normalize_phrase(text: str) -> Optional[str]:
    """Map one cardinality phrase to the normalized vocabulary."""
    return PHRASE_CARDINALITY.get(' '.join(text.lower().split()))


def resolve_natural_language_cardinality(text: str) -> Optional[Cardinality]:
    """Parse `<phrase> [optionally] to <phrase>`, case-insensitively."""
    m = _NATURAL_LANGUAGE_RE.match(' '.join(text.lower().split()))
    if not m:
        return None
    left = normalize_phrase(m.group(1))
    right = normalize_phrase(m.group(2))
    if not left or not right:
        return None
    return Cardinality(source=left, target=right)


def resolve_natural_language(text: str) -> Optional[Tuple[Kind, Cardinality]]:
    """Resolve a phrase like "only one to zero or more" to (kind, cardinality)."""
    cardinality = resolve_natural_language_cardinality(text)
    if cardinality is None:
        return None
    pair = (cardinality.source, cardinality.target)
    kind = NATURAL_LANGUAGE_OVERRIDES.get(pair) or COMBINATION_KINDS.get(pair)
    if kind is None:
        return None
    return kind, cardinality
