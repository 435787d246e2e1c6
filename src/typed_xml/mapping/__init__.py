"""Schema mapping from element trees to typed records.

Key Components:
    XmlElementMapperBuilder: Fluent schema builder compiled with ``build()``
    CompiledElementMapper: Reusable validating projection produced by a builder
    ValuePath: Diagnostic path attached to every mapping error
    Validator: Protocol for field validators, with pydantic-backed implementations
"""

from .builder import (
    AttrMode,
    ChildMode,
    CompiledElementMapper,
    ElementMapper,
    XmlElementMapperBuilder,
    text_only_mapper,
)
from .path import ValuePath
from .validators import (
    BooleanValidator,
    DateValidator,
    EnumValidator,
    FloatValidator,
    IntegerValidator,
    StringValidator,
    TypeValidator,
    Validator,
)

__all__ = [
    "AttrMode",
    "ChildMode",
    "CompiledElementMapper",
    "ElementMapper",
    "XmlElementMapperBuilder",
    "text_only_mapper",
    "ValuePath",
    "BooleanValidator",
    "DateValidator",
    "EnumValidator",
    "FloatValidator",
    "IntegerValidator",
    "StringValidator",
    "TypeValidator",
    "Validator",
]
