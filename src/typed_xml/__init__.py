"""Typed XML.

A strict XML parser for a restricted dialect, an element tree with
ownership-checked mutation and OR-combined queries, and a declarative builder
that projects a validated element subtree into a typed record.

Progressive API Disclosure:
- Level 1: Simple function - parse_xml()
- Level 2: Configured parser - XmlParser class with ParserConfig
- Level 3: Schema mapping - XmlElementMapperBuilder and validators
"""

__version__ = "0.1.0"
__author__ = "Typed XML Team"

from .api import XmlParser, parse_xml
from .mapping import (
    BooleanValidator,
    CompiledElementMapper,
    DateValidator,
    EnumValidator,
    FloatValidator,
    IntegerValidator,
    StringValidator,
    TypeValidator,
    Validator,
    ValuePath,
    XmlElementMapperBuilder,
    text_only_mapper,
)
from .shared import (
    MapperConfig,
    ParseErrorKind,
    ParserConfig,
    XmlError,
    XmlMappingError,
    XmlParseError,
    XmlTreeError,
)
from .tree import XmlElement, XmlName, XmlNode, XmlQuery

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing function
    "parse_xml",

    # Level 2: Configured parser
    "XmlParser",
    "ParserConfig",

    # Tree model
    "XmlElement",
    "XmlName",
    "XmlNode",
    "XmlQuery",

    # Level 3: Schema mapping
    "XmlElementMapperBuilder",
    "CompiledElementMapper",
    "MapperConfig",
    "ValuePath",
    "text_only_mapper",
    "Validator",
    "TypeValidator",
    "BooleanValidator",
    "DateValidator",
    "EnumValidator",
    "FloatValidator",
    "IntegerValidator",
    "StringValidator",

    # Error families
    "XmlError",
    "XmlParseError",
    "ParseErrorKind",
    "XmlTreeError",
    "XmlMappingError",
]
