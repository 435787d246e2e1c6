"""Field validators turning raw attribute and text values into typed values.

The mapper only relies on the ``Validator`` protocol. The bundled validators
delegate coercion and constraint checking to pydantic and convert its
``ValidationError`` into a path-qualified ``FieldValidationError``.

Raw XML values are always strings, so every bundled validator first checks the
exact lexical form it accepts; pydantic's lax string coercions (``"yes"`` for
``True``, ``"1_000"`` for ``1000``, Unix timestamps for dates) never apply.
"""

import re
from datetime import datetime, timezone
from typing import (
    Annotated,
    Any,
    Generic,
    Iterable,
    Literal,
    Optional,
    Protocol,
    TypeVar,
)

from pydantic import (
    AfterValidator,
    BeforeValidator,
    Field,
    TypeAdapter,
    ValidationError,
)

from typed_xml.shared.errors import FieldValidationError

from .path import ValuePath

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

# Lexical forms accepted from raw XML strings
INTEGER_PATTERN = r"[+-]?[0-9]+"
FLOAT_PATTERN = r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?"
DATETIME_PATTERN = (
    r"[0-9]{4}-[0-9]{2}-[0-9]{2}"
    r"[T ][0-9]{2}:[0-9]{2}(:[0-9]{2}(\.[0-9]+)?)?"
    r"(Z|[+-][0-9]{2}:?[0-9]{2})?"
)
TRUE_VALUES = ("true", "1")


def _lexical_form(pattern: str, description: str) -> BeforeValidator:
    """Reject raw values whose whole text does not match ``pattern``."""
    compiled = re.compile(pattern)

    def check(raw: Any) -> Any:
        if not isinstance(raw, str) or compiled.fullmatch(raw) is None:
            raise ValueError(f"Input should be {description}")
        return raw

    return BeforeValidator(check)


def _to_bool(raw: str) -> bool:
    return raw in TRUE_VALUES


class Validator(Protocol[T_co]):
    """Parses one raw string into a typed value, or raises a path-qualified error."""

    def parse(self, path: ValuePath, raw: str) -> T_co:
        ...


class TypeValidator(Generic[T]):
    """Validator for any target type pydantic can validate from a string.

    Args:
        target: Type or ``Annotated`` type to validate against
        description: Human-readable name used in error messages
    """

    def __init__(self, target: Any, description: Optional[str] = None) -> None:
        self._adapter: TypeAdapter[T] = TypeAdapter(target)
        self.description = description or getattr(target, "__name__", repr(target))

    def parse(self, path: ValuePath, raw: str) -> T:
        try:
            return self._adapter.validate_python(raw)
        except ValidationError as e:
            details = "; ".join(error["msg"] for error in e.errors())
            raise FieldValidationError(
                path, f"is not a valid {self.description} ({details})", raw
            ) from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.description})"


class IntegerValidator(TypeValidator[int]):
    """Decimal integer, optionally bounded inclusively by ``min`` and ``max``.

    Only an optional sign followed by ASCII digits is accepted.
    """

    def __init__(self, min: Optional[int] = None, max: Optional[int] = None) -> None:
        super().__init__(
            Annotated[
                int,
                Field(ge=min, le=max),
                _lexical_form(INTEGER_PATTERN, "a decimal integer"),
            ],
            "integer",
        )


class FloatValidator(TypeValidator[float]):
    def __init__(self) -> None:
        super().__init__(
            Annotated[float, _lexical_form(FLOAT_PATTERN, "a decimal number")],
            "number",
        )


class BooleanValidator(TypeValidator[bool]):
    """Boolean spelled exactly ``true``/``false`` or ``1``/``0``."""

    def __init__(self) -> None:
        super().__init__(
            Annotated[Literal["true", "false", "1", "0"], AfterValidator(_to_bool)],
            "boolean",
        )


class StringValidator(TypeValidator[str]):
    def __init__(
        self,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None,
        pattern: Optional[str] = None,
    ) -> None:
        super().__init__(
            Annotated[
                str,
                Field(min_length=min_length, max_length=max_length, pattern=pattern),
            ],
            "string",
        )


class EnumValidator(TypeValidator[str]):
    """One of a fixed set of string values."""

    def __init__(self, values: Iterable[str]) -> None:
        self.values = tuple(values)
        if not self.values:
            raise ValueError("EnumValidator requires at least one value")
        super().__init__(Literal[self.values], "choice")  # type: ignore[valid-type]


class DateValidator(TypeValidator[datetime]):
    """ISO 8601 date and time; results without an offset are taken to be UTC.

    Both the date and the time of day are required. Numeric timestamps are
    rejected.
    """

    def __init__(self) -> None:
        super().__init__(
            Annotated[
                datetime, _lexical_form(DATETIME_PATTERN, "an ISO 8601 date and time")
            ],
            "date",
        )

    def parse(self, path: ValuePath, raw: str) -> datetime:
        parsed = super().parse(path, raw)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed
