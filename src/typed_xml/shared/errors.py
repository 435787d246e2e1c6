"""Exception hierarchy for typed XML processing.

Two disjoint families exist:

- ``XmlParseError`` is raised by the lexer and parser on malformed input and
  always carries the 1-based line and the column where lexing stopped.
- ``XmlTreeError`` and ``XmlMappingError`` report structural and schema
  contract violations raised by the tree model and the mapper builder.
"""

from enum import Enum, auto
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

if TYPE_CHECKING:
    from typed_xml.mapping.path import ValuePath


class XmlError(Exception):
    """Base exception for every error raised by this package."""


class ParseErrorKind(Enum):
    """Categories of malformed input detected while parsing."""

    UNEXPECTED_END = auto()             # Input ended while more was required
    UNEXPECTED_CHARACTER = auto()       # A specific character was required
    EXPECTED_NAME = auto()              # Element or attribute name missing
    MISMATCHED_CLOSING_TAG = auto()     # </b> closing <a>
    UNEXPECTED_CLOSING_TAG = auto()     # Closing tag at document level
    INVALID_ENTITY = auto()             # Malformed or out of range &#...;
    UNKNOWN_ENTITY_REFERENCE = auto()   # &name; not in the fixed table
    MULTIPLE_ROOT_ELEMENTS = auto()
    UNEXPECTED_ROOT_TEXT = auto()
    MISSING_ROOT_ELEMENT = auto()
    MAX_DEPTH_EXCEEDED = auto()
    INPUT_TOO_LARGE = auto()


class XmlParseError(XmlError):
    """Malformed XML input, with the position at which parsing halted."""

    def __init__(
        self,
        kind: ParseErrorKind,
        description: str,
        line: int,
        column: int,
    ) -> None:
        super().__init__(f"{description} [{line}:{column}]")
        self.kind = kind
        self.description = description
        self.line = line
        self.column = column


class XmlTreeError(XmlError):
    """Base exception for violations of the tree ownership and query contracts."""


class NoParentError(XmlTreeError):
    """Raised when detaching an element that has no parent."""


class AlreadyHasParentError(XmlTreeError):
    """Raised when attaching an element that is already owned by a parent."""


class CyclicTreeError(XmlTreeError, ValueError):
    """Raised when an element would become its own ancestor."""


class IndexOutOfRangeError(XmlTreeError, IndexError):
    """Raised when a child position is outside ``0..len(children)``."""


class MultipleMatchesError(XmlTreeError, LookupError):
    """Raised when more than one element matches an at-most-one query."""


class NoMatchError(XmlTreeError, LookupError):
    """Raised when no element matches a query that requires one."""


class MissingAttributeError(XmlTreeError, LookupError):
    """Raised when a required attribute lookup finds nothing."""


class BuilderMisuseError(XmlError, ValueError):
    """Raised when a mapper builder is configured inconsistently."""


class XmlMappingError(XmlError):
    """An element subtree does not satisfy the schema of a compiled mapper."""

    def __init__(self, path: "ValuePath", reason: str) -> None:
        super().__init__(f"{path} is bad as it {reason}")
        self.path = path
        self.reason = reason


class UnexpectedElementNameError(XmlMappingError):
    """Element local name differs from the expected one."""


class UnexpectedAttributeError(XmlMappingError):
    """Attribute has no declared rule, or appears more than once."""


class MissingAttributesError(XmlMappingError):
    """One or more required attributes are absent."""

    def __init__(self, path: "ValuePath", names: Iterable[str]) -> None:
        self.names: List[str] = sorted(names)
        super().__init__(path, f"is missing attributes: {', '.join(self.names)}")


class UnexpectedChildError(XmlMappingError):
    """Child element has no declared rule or exceeds its cardinality."""


class MissingChildrenError(XmlMappingError):
    """Declared child rules whose minimum count was not reached."""

    def __init__(self, path: "ValuePath", counts: Dict[str, int]) -> None:
        self.counts = dict(counts)
        details = ", ".join(
            f"{count} more {name} element{'s' if count != 1 else ''}"
            for name, count in sorted(self.counts.items())
        )
        super().__init__(path, f"does not have {details}")


class UnexpectedTextError(XmlMappingError):
    """Non-whitespace text where none, or no more, is allowed."""


class MissingTextError(XmlMappingError):
    """A text rule is declared but no non-whitespace text exists."""


class FieldValidationError(XmlMappingError):
    """A raw attribute or text value was rejected by its validator."""

    def __init__(
        self, path: "ValuePath", reason: str, value: Optional[str] = None
    ) -> None:
        super().__init__(path, reason)
        self.value = value
