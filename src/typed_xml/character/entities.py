"""Entity reference decoding for text and attribute values.

Supports the five predefined named entities and decimal/hexadecimal
character references. No DTD-declared entities exist.
"""

from typing import Dict

from typed_xml.shared.errors import ParseErrorKind

from .lexer import DIGIT, HEX, LOWERCASE, Lexer

ENTITY_REFS: Dict[str, str] = {
    "amp": "&",
    "apos": "'",
    "gt": ">",
    "lt": "<",
    "quot": '"',
}

MAX_HEX_DIGITS = 6
MAX_DECIMAL_DIGITS = 7
MAX_CODE_POINT = 0x10FFFF
SURROGATE_RANGE = range(0xD800, 0xE000)


def is_scalar_value(code_point: int) -> bool:
    """Check whether ``code_point`` is a Unicode scalar value."""
    return 0 <= code_point <= MAX_CODE_POINT and code_point not in SURROGATE_RANGE


def decode_code_point(lexer: Lexer, code_point: int) -> str:
    if not is_scalar_value(code_point):
        raise lexer.error(
            f"Entity refers to invalid Unicode code point {code_point}",
            ParseErrorKind.INVALID_ENTITY,
        )
    return chr(code_point)


def parse_entity(lexer: Lexer) -> str:
    """Parse one ``&...;`` reference at the cursor and return its text."""
    lexer.expect("&")
    if lexer.skip_if("#"):
        if lexer.skip_if("x") or lexer.skip_if("X"):
            digits = lexer.consume_while(HEX)
            if not 1 <= len(digits) <= MAX_HEX_DIGITS:
                raise lexer.error(
                    "Hexadecimal entity is invalid", ParseErrorKind.INVALID_ENTITY
                )
            code_point = int(digits, 16)
        else:
            digits = lexer.consume_while(DIGIT)
            if not 1 <= len(digits) <= MAX_DECIMAL_DIGITS:
                raise lexer.error(
                    "Decimal entity is invalid", ParseErrorKind.INVALID_ENTITY
                )
            code_point = int(digits, 10)
        lexer.expect(";")
        return decode_code_point(lexer, code_point)

    name = lexer.consume_while(LOWERCASE)
    replacement = ENTITY_REFS.get(name)
    if replacement is None:
        raise lexer.error(
            f"Invalid entity reference: {name}",
            ParseErrorKind.UNKNOWN_ENTITY_REFERENCE,
        )
    lexer.expect(";")
    return replacement
