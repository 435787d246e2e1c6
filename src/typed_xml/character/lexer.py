"""Character cursor with line/column tracking for the XML parser.

The lexer exposes primitive peek/consume/expect operations over character
sets; every failure is an ``XmlParseError`` carrying the current position.
Lines are 1-based. The column counts characters consumed on the current line,
so after consuming a character it is that character's 1-based column.
"""

import string
from dataclasses import dataclass
from typing import List, Optional

from typed_xml.shared.errors import ParseErrorKind, XmlParseError

# Character classes fixed by the grammar
LOWERCASE = string.ascii_lowercase
UPPERCASE = string.ascii_uppercase
DIGIT = string.digits
HEX = string.hexdigits
ALPHANUMERIC = LOWERCASE + UPPERCASE + DIGIT
WHITESPACE = " \r\n\t"
QUOTE = "'\""


@dataclass(frozen=True)
class SourcePosition:
    """Position of the lexer cursor within the source text."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 0:
            raise ValueError("Column number must be >= 0")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")


class Lexer:
    """Single-pass cursor over an in-memory XML source string."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._next = 0
        self._line = 1
        self._column = 0

    @property
    def position(self) -> SourcePosition:
        """Current cursor position."""
        return SourcePosition(self._line, self._column, self._next)

    @property
    def line(self) -> int:
        return self._line

    @property
    def column(self) -> int:
        return self._column

    def error(
        self,
        message: str,
        kind: ParseErrorKind = ParseErrorKind.UNEXPECTED_CHARACTER,
    ) -> XmlParseError:
        """Create a parse error located at the current position."""
        return XmlParseError(kind, message, self._line, self._column)

    def peek(self) -> Optional[str]:
        """Return the next character without consuming it, or None at the end."""
        if self._next >= len(self._source):
            return None
        return self._source[self._next]

    def is_end(self) -> bool:
        return self._next >= len(self._source)

    def consume_or_end(self) -> Optional[str]:
        """Consume the next character, returning None at the end of input."""
        char = self.peek()
        if char is None:
            return None
        # "\r\n" is one line break; the "\n" neither advances line nor column.
        if char == "\r" or (
            char == "\n" and (self._next == 0 or self._source[self._next - 1] != "\r")
        ):
            self._line += 1
            self._column = 0
        elif char != "\n":
            self._column += 1
        self._next += 1
        return char

    def consume(self) -> str:
        char = self.consume_or_end()
        if char is None:
            raise self.error("Unexpected end", ParseErrorKind.UNEXPECTED_END)
        return char

    def consume_while(self, charset: str) -> str:
        """Consume the longest run of characters from ``charset``."""
        chars: List[str] = []
        char = self.maybe_expect_one_of(charset)
        while char is not None:
            chars.append(char)
            char = self.maybe_expect_one_of(charset)
        return "".join(chars)

    def expect(self, expected: str) -> None:
        got = self.consume()
        if got != expected:
            raise self.error(f"Expected {expected} but got {got}")

    def expect_one_of(self, charset: str) -> str:
        got = self.consume()
        if got not in charset:
            raise self.error(f"Expected one of {{{charset}}} but got {got}")
        return got

    def maybe_expect(self, expected: str) -> bool:
        """Consume ``expected`` if it is the next character."""
        if self.peek() == expected:
            self.consume()
            return True
        return False

    def maybe_expect_one_of(self, charset: str) -> Optional[str]:
        char = self.peek()
        if char is not None and char in charset:
            return self.consume()
        return None

    def maybe_expect_not_one_of(self, charset: str) -> Optional[str]:
        """Consume the next character unless it is in ``charset``.

        Reaching the end of input is not a match for "not one of", so it fails
        with an unexpected end rather than returning None.
        """
        char = self.peek()
        if char is None or char not in charset:
            return self.consume()
        return None

    def expect_one_or_more_of(self, charset: str, expect_name: str) -> str:
        matched = self.consume_while(charset)
        if not matched:
            raise self.error(f"Expected {expect_name}", ParseErrorKind.EXPECTED_NAME)
        return matched

    # Alias kept for readability at call sites that only test and skip.
    skip_if = maybe_expect

    def skip_while(self, charset: str) -> int:
        count = 0
        while self.maybe_expect_one_of(charset) is not None:
            count += 1
        return count

    def skip_until(self, charset: str) -> int:
        """Skip characters up to (not including) the next one in ``charset``."""
        count = 0
        while self.maybe_expect_not_one_of(charset) is not None:
            count += 1
        return count
