"""Stack-based XML parser producing a single rooted element tree.

Comments and other ``<!...>`` markup, as well as processing instructions, are
skipped rather than modeled. Namespace prefixes are kept as opaque strings.
Parsing halts at the first error; no partial tree is ever returned.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Tuple

from typed_xml.character import (
    ALPHANUMERIC,
    QUOTE,
    WHITESPACE,
    Lexer,
    parse_entity,
)
from typed_xml.shared import (
    ParseErrorKind,
    ParserConfig,
    XmlParseError,
    get_logger,
)
from typed_xml.tree import XmlElement, XmlName

MS_PER_SECOND = 1000  # Milliseconds per second conversion

# Document-level checks happen after lexing and are reported here.
DOCUMENT_LINE = 1
DOCUMENT_COLUMN = 0


def _parse_name(lexer: Lexer) -> XmlName:
    name = lexer.expect_one_or_more_of(ALPHANUMERIC, "element/attribute name")
    if not lexer.maybe_expect(":"):
        return XmlName("", name)
    return XmlName(
        name,
        lexer.expect_one_or_more_of(ALPHANUMERIC, "prefixed element/attribute name"),
    )


def _parse_text_or_value(lexer: Lexer, delimiter: str) -> str:
    """Scan literal text up to ``delimiter`` or the end, decoding entities."""
    parts: List[str] = []
    while True:
        char = lexer.peek()
        if char is None or char == delimiter:
            break
        if char == "&":
            parts.append(parse_entity(lexer))
        else:
            parts.append(lexer.consume())
    return "".join(parts)


def _skip_processing_instruction(lexer: Lexer) -> None:
    # Quoted regions may contain "?" and ">".
    while True:
        lexer.skip_until(QUOTE + "?")
        quote = lexer.maybe_expect_one_of(QUOTE)
        if quote is not None:
            lexer.skip_until(quote)
            lexer.expect(quote)
            continue
        lexer.expect("?")
        if lexer.skip_if(">"):
            return


def _parse_attributes(lexer: Lexer) -> Tuple[List[Tuple[XmlName, str]], bool]:
    """Parse attributes up to the end of an opening tag.

    Returns:
        The attributes in source order and whether the tag was self-closing
    """
    attrs: List[Tuple[XmlName, str]] = []
    while True:
        lexer.skip_while(WHITESPACE)
        if lexer.skip_if("/"):
            lexer.expect(">")
            return attrs, True
        if lexer.skip_if(">"):
            return attrs, False
        attr_name = _parse_name(lexer)
        lexer.skip_while(WHITESPACE)
        lexer.expect("=")
        lexer.skip_while(WHITESPACE)
        quote = lexer.expect_one_of(QUOTE)
        value = _parse_text_or_value(lexer, quote)
        lexer.expect(quote)
        attrs.append((attr_name, value))


def _parse_content(
    lexer: Lexer, wrapper: XmlElement, max_depth: Optional[int]
) -> None:
    """Parse the whole document into ``wrapper``.

    Open elements are kept on an explicit stack, so nesting depth is bounded
    only by ``max_depth``. The wrapper at the bottom of the stack is the
    synthetic document node, which has no closing tag and ends at the end of
    input. Elements are attached to their parent once their closing tag is read.
    """
    stack: List[XmlElement] = [wrapper]
    while True:
        parent = stack[-1]
        depth = len(stack) - 1
        text = _parse_text_or_value(lexer, "<")
        if text:
            parent.add_child(text)
            continue
        if lexer.is_end():
            if depth > 0:
                raise lexer.error(
                    f"Unexpected end; element {parent.name} is not closed",
                    ParseErrorKind.UNEXPECTED_END,
                )
            return
        lexer.expect("<")
        if lexer.skip_if("!"):
            lexer.skip_until(">")
            lexer.expect(">")
            continue
        if lexer.skip_if("?"):
            _skip_processing_instruction(lexer)
            continue

        is_closing = lexer.skip_if("/")
        name = _parse_name(lexer)
        if is_closing:
            if depth == 0:
                raise lexer.error(
                    "Unexpected closing tag", ParseErrorKind.UNEXPECTED_CLOSING_TAG
                )
            if name != parent.name:
                raise lexer.error(
                    f"Mismatched closing tag; expected {parent.name} but got {name}",
                    ParseErrorKind.MISMATCHED_CLOSING_TAG,
                )
            lexer.skip_while(WHITESPACE)
            lexer.expect(">")
            stack.pop()
            stack[-1].add_child(parent)
            continue

        if max_depth is not None and depth + 1 > max_depth:
            raise lexer.error(
                f"Element {name} exceeds the maximum depth of {max_depth}",
                ParseErrorKind.MAX_DEPTH_EXCEEDED,
            )
        attrs, self_closing = _parse_attributes(lexer)
        element = XmlElement(name, attrs)
        if self_closing:
            parent.add_child(element)
        else:
            stack.append(element)


def _select_root(wrapper: XmlElement) -> XmlElement:
    root: Optional[XmlElement] = None
    for child in wrapper.children:
        if isinstance(child, str):
            if child.strip(WHITESPACE):
                raise XmlParseError(
                    ParseErrorKind.UNEXPECTED_ROOT_TEXT,
                    "XML document has top-level non-whitespace text",
                    DOCUMENT_LINE,
                    DOCUMENT_COLUMN,
                )
        elif root is not None:
            raise XmlParseError(
                ParseErrorKind.MULTIPLE_ROOT_ELEMENTS,
                "XML document has multiple top level elements",
                DOCUMENT_LINE,
                DOCUMENT_COLUMN,
            )
        else:
            root = child
    if root is None:
        raise XmlParseError(
            ParseErrorKind.MISSING_ROOT_ELEMENT,
            "XML document does not have root element",
            DOCUMENT_LINE,
            DOCUMENT_COLUMN,
        )
    root.detach()
    return root


class XmlParser:
    """Configured, reusable XML parser.

    Attributes:
        config: Parser limits and correlation settings

    Examples:
        >>> parser = XmlParser(ParserConfig.strict())
        >>> str(parser.parse('<root a="1"><b/></root>'))
        '<root a="1"><b/></root>'
    """

    def __init__(self, config: Optional[ParserConfig] = None) -> None:
        self.config = config or ParserConfig()
        self.logger = get_logger(__name__, self.config.correlation_id, "xml_parser")

        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0

    def parse(self, xml: str) -> XmlElement:
        """Parse ``xml`` into a parentless root element.

        Raises:
            XmlParseError: the input is malformed or exceeds a configured limit
        """
        start_time = time.time()
        self._parse_count += 1
        self.logger.debug("Starting parse", extra={"input_length": len(xml)})

        try:
            max_length = self.config.max_input_length
            if max_length is not None and len(xml) > max_length:
                raise XmlParseError(
                    ParseErrorKind.INPUT_TOO_LARGE,
                    f"Input of {len(xml)} characters exceeds the limit of {max_length}",
                    DOCUMENT_LINE,
                    DOCUMENT_COLUMN,
                )
            wrapper = XmlElement(XmlName("", ""))
            _parse_content(Lexer(xml), wrapper, self.config.max_depth)
            root = _select_root(wrapper)
        except XmlParseError as e:
            self.logger.warning(
                "Parse failed",
                extra={
                    "error_kind": e.kind.name,
                    "line": e.line,
                    "column": e.column,
                },
            )
            raise
        finally:
            self._total_processing_time += (time.time() - start_time) * MS_PER_SECOND

        self._successful_parses += 1
        if self.logger.is_enabled_for(logging.DEBUG):
            self.logger.debug(
                "Parse completed",
                extra={
                    "root": str(root.name),
                    "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
                },
            )
        return root

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        return {
            "total_parses": self._parse_count,
            "successful_parses": self._successful_parses,
            "success_rate": (
                self._successful_parses / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "correlation_id": self.config.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0


def parse_xml(xml: str, config: Optional[ParserConfig] = None) -> XmlElement:
    """Parse an XML document string into its root element.

    Args:
        xml: The complete document text
        config: Optional limits; defaults to ``ParserConfig()``

    Returns:
        The root element, with no parent

    Raises:
        XmlParseError: on the first syntax or document-structure error

    Examples:
        >>> root = parse_xml('<root id="1">Hello</root>')
        >>> root.get_attribute("id"), root.combined_text
        ('1', 'Hello')
    """
    return XmlParser(config).parse(xml)
