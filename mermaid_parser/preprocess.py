"""
Source preprocessing shared by the diagram parsers.

Frontmatter, notes and comments carry no structure, so the class-diagram
parser strips them before its scan. The ER parser handles frontmatter inline
as part of its own scan state and does not use these helpers.
"""

import re
from typing import List

FRONTMATTER_DELIMITER = '---'

_NOTE_RE = re.compile(r'^note\s+"[^"]*"$')
_NOTE_FOR_RE = re.compile(r'^note\s+for\s+\w+\s+"[^"]*"$')


def split_lines(text: str) -> List[str]:
    """Split text into trimmed, non-blank lines."""
    return [line.strip() for line in text.split('\n') if line.strip()]


def starts_with_keyword(line: str, keyword: str) -> bool:
    """Case-insensitive prefix test."""
    return line.lower().startswith(keyword.lower())


def strip_frontmatter(text: str) -> str:
    """Remove the first `---` ... `---` block. Later `---` lines are kept."""
    result: List[str] = []
    in_frontmatter = False
    frontmatter_done = False

    for line in text.split('\n'):
        if line.strip() == FRONTMATTER_DELIMITER:
            if not in_frontmatter and not frontmatter_done:
                in_frontmatter = True
                continue
            if in_frontmatter:
                in_frontmatter = False
                frontmatter_done = True
                continue
        if not in_frontmatter:
            result.append(line)

    return '\n'.join(result)


def strip_notes(text: str) -> str:
    """Remove `note "..."` and `note for Name "..."` lines."""
    kept = [
        line for line in text.split('\n')
        if not _NOTE_RE.match(line.strip()) and not _NOTE_FOR_RE.match(line.strip())
    ]
    return '\n'.join(kept)


def strip_comments(text: str) -> str:
    """Remove `%%` comment lines."""
    return '\n'.join(line for line in text.split('\n') if not line.strip().startswith('%%'))
