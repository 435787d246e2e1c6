"""Configuration classes for typed XML parsing and mapping.

Configuration objects are frozen dataclasses validated on construction, so a
single instance can be shared between parsers and mappers on any thread.
"""

import json
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, List, Optional

DEFAULT_MAX_DEPTH = 256
STRICT_MAX_DEPTH = 64
STRICT_MAX_INPUT_LENGTH = 10 * 1024 * 1024  # 10 MiB of characters


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError, ValueError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


def _known_fields(cls: type, data: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - names)
    if unknown:
        raise ConfigValidationError(
            f"Unknown {cls.__name__} fields: {', '.join(unknown)}",
            field_name=unknown[0],
            suggestions=[f"Valid fields are: {', '.join(sorted(names))}"],
        )
    return dict(data)


@dataclass(frozen=True)
class ParserConfig:
    """Limits and diagnostics settings for the XML parser.

    Attributes:
        max_depth: Maximum element nesting depth, or None for no limit
        max_input_length: Maximum input length in characters, or None
        correlation_id: Optional correlation ID attached to log records
    """

    max_depth: Optional[int] = DEFAULT_MAX_DEPTH
    max_input_length: Optional[int] = None
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate parser configuration."""
        if self.max_depth is not None and self.max_depth <= 0:
            raise ConfigValidationError(
                "max_depth must be > 0 or None",
                field_name="max_depth",
                suggestions=["Use None to disable the depth limit"],
            )
        if self.max_input_length is not None and self.max_input_length <= 0:
            raise ConfigValidationError(
                "max_input_length must be > 0 or None",
                field_name="max_input_length",
            )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Example:
            >>> ParserConfig().override(max_depth=32).max_depth
            32
        """
        return replace(self, **_known_fields(type(self), kwargs))

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary, rejecting unknown keys."""
        return cls(**_known_fields(cls, data))

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def strict(cls) -> "ParserConfig":
        """Preset for untrusted input: shallow trees and bounded input size."""
        return cls(
            max_depth=STRICT_MAX_DEPTH,
            max_input_length=STRICT_MAX_INPUT_LENGTH,
        )

    @classmethod
    def permissive(cls) -> "ParserConfig":
        """Preset with every limit disabled."""
        return cls(max_depth=None, max_input_length=None)


@dataclass(frozen=True)
class MapperConfig:
    """Settings shared by every mapper compiled from one builder.

    Attributes:
        skip_namespace_declarations: Silently skip ``xmlns`` and ``xmlns:*``
            attributes instead of requiring a rule for them
        correlation_id: Optional correlation ID attached to log records
    """

    skip_namespace_declarations: bool = True
    correlation_id: Optional[str] = None

    def override(self, **kwargs: Any) -> "MapperConfig":
        """Create a new configuration with specific overrides."""
        return replace(self, **_known_fields(type(self), kwargs))

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MapperConfig":
        """Create configuration from dictionary, rejecting unknown keys."""
        return cls(**_known_fields(cls, data))
