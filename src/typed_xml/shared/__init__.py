"""Shared utilities for typed XML processing.

This module provides the exception hierarchy, configuration objects and
logging helpers used across all processing layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    MapperConfig,
    ParserConfig,
)
from .errors import (
    AlreadyHasParentError,
    BuilderMisuseError,
    CyclicTreeError,
    FieldValidationError,
    IndexOutOfRangeError,
    MissingAttributeError,
    MissingAttributesError,
    MissingChildrenError,
    MissingTextError,
    MultipleMatchesError,
    NoMatchError,
    NoParentError,
    ParseErrorKind,
    UnexpectedAttributeError,
    UnexpectedChildError,
    UnexpectedElementNameError,
    UnexpectedTextError,
    XmlError,
    XmlMappingError,
    XmlParseError,
    XmlTreeError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "MapperConfig",
    "ParserConfig",
    "AlreadyHasParentError",
    "BuilderMisuseError",
    "CyclicTreeError",
    "FieldValidationError",
    "IndexOutOfRangeError",
    "MissingAttributeError",
    "MissingAttributesError",
    "MissingChildrenError",
    "MissingTextError",
    "MultipleMatchesError",
    "NoMatchError",
    "NoParentError",
    "ParseErrorKind",
    "UnexpectedAttributeError",
    "UnexpectedChildError",
    "UnexpectedElementNameError",
    "UnexpectedTextError",
    "XmlError",
    "XmlMappingError",
    "XmlParseError",
    "XmlTreeError",
    "CorrelationLogger",
    "get_logger",
]
