"""Character processing layer for the typed XML parser.

This module provides the position-tracking lexer, the character classes of
the supported grammar and entity reference decoding.
"""

from .entities import ENTITY_REFS, decode_code_point, is_scalar_value, parse_entity
from .lexer import (
    ALPHANUMERIC,
    DIGIT,
    HEX,
    LOWERCASE,
    QUOTE,
    UPPERCASE,
    WHITESPACE,
    Lexer,
    SourcePosition,
)

__all__ = [
    "ENTITY_REFS",
    "decode_code_point",
    "is_scalar_value",
    "parse_entity",
    "ALPHANUMERIC",
    "DIGIT",
    "HEX",
    "LOWERCASE",
    "QUOTE",
    "UPPERCASE",
    "WHITESPACE",
    "Lexer",
    "SourcePosition",
]
