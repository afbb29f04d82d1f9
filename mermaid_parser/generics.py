"""
Generic-type rewriting for class diagrams.

Mermaid writes type parameters between tildes, `List~int~`, and nests them by
doubling the closing tilde, `List~List~int~~`. These helpers turn that into
angle brackets, innermost pair first.
"""

import re
from typing import Optional, Tuple

GENERIC_MARKER = '~'

_INNERMOST_PAIR_RE = re.compile(r'~([^~]+)~(?!~)')
_GENERIC_NAME_RE = re.compile(r'^([A-Za-z_][A-Za-z0-9_]*)~(.+)~$')


def rewrite_generic_type(type_text: str) -> str:
    """Rewrite `Outer~Inner~X~~` notation to `Outer<Inner<X>>`.

    A pair closed by N tildes sits N-1 levels deep, so resolving from the
    deepest level outward turns each level into a plain single-tilde pair
    for the next pass.
    """
    if not type_text or GENERIC_MARKER not in type_text:
        return type_text

    result = type_text
    depth = result.count(GENERIC_MARKER) // 2
    for level in range(depth, 0, -1):
        if level == 1:
            result = _INNERMOST_PAIR_RE.sub(r'<\1>', result)
            continue
        closing = GENERIC_MARKER * level
        remaining = GENERIC_MARKER * (level - 1)
        pattern = re.compile('~([^~]+)' + re.escape(closing))
        result = pattern.sub(lambda m: '<' + m.group(1) + '>' + remaining, result)
    return result


def split_generic_name(name_text: str) -> Tuple[str, Optional[str]]:
    """Split `Square~Shape~` into ("Square", "Shape").

    The parameter is itself rewritten, so `Box~List~int~~` gives
    ("Box", "List<int>"). A name without a generic suffix is returned as is.
    """
    m = _GENERIC_NAME_RE.match(name_text)
    if not m:
        return name_text, None
    return m.group(1), rewrite_generic_type(m.group(2))
