"""
Parser error types.

Every failure raised by the parsers is a MermaidParserError carrying the
boundary error type (VALIDATION_ERROR, INVALID_SYNTAX, PARSE_ERROR) so the
tool layer can map it to a response without inspecting message text.
"""

from typing import Any, Dict, Optional


class MermaidParserError(Exception):
    error_type = "PARSE_ERROR"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.error_type, "message": self.message}
        if self.details:
            data["details"] = self.details
        return data


class ValidationError(MermaidParserError):
    """Empty input, or input over the size ceiling."""
    error_type = "VALIDATION_ERROR"


class InvalidSyntaxError(MermaidParserError):
    """Missing diagram keyword; nothing was parsed."""
    error_type = "INVALID_SYNTAX"


class ParseError(MermaidParserError):
    """A line failed its grammar. The message names the offending line."""
    error_type = "PARSE_ERROR"
