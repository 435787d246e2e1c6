"""Declarative builder compiling element schemas into validating mappers.

A builder accumulates attribute, child element and text rules, then ``build()``
compiles them once into a reusable mapper ``(element, path=None) -> record``.
Rules match by local name only; namespace prefixes are not interpreted.

Example:
    >>> user = XmlElementMapperBuilder().attr("id", IntegerValidator()).build()
    >>> mapper = (
    ...     XmlElementMapperBuilder()
    ...     .expect_name("root")
    ...     .one_or_more("User", user)
    ...     .zero_or_more("Group", XmlElementMapperBuilder().build())
    ...     .build()
    ... )
    >>> mapper(parse_xml('<root><User id="1"/><User id="2"/></root>'))
    {'User': [{'id': 1}, {'id': 2}], 'Group': []}
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional, Set

from typed_xml.character import WHITESPACE
from typed_xml.shared import (
    BuilderMisuseError,
    MapperConfig,
    MissingAttributesError,
    MissingChildrenError,
    MissingTextError,
    UnexpectedAttributeError,
    UnexpectedChildError,
    UnexpectedElementNameError,
    UnexpectedTextError,
    XmlMappingError,
    get_logger,
)
from typed_xml.tree import XmlElement, XmlName

from .path import ValuePath
from .validators import Validator

ElementMapper = Callable[[XmlElement, Optional[ValuePath]], Any]
Record = Dict[str, Any]

TEXT_CONTENT = "text content"


class AttrMode(Enum):
    """How an attribute rule treats presence and output."""

    REQUIRED = auto()   # Must be present; stored
    OPTIONAL = auto()   # May be absent; stored or None
    IGNORED = auto()    # May be absent; validated but never stored


class ChildMode(Enum):
    """Cardinality of a child element rule."""

    REQUIRED = auto()   # Exactly one; stored as the mapped value
    OPTIONAL = auto()   # Zero or one; stored as the mapped value or None
    REPEATED = auto()   # At least ``min``; stored as a list


@dataclass(frozen=True)
class AttrRule:
    name: str
    mode: AttrMode
    validator: Validator[Any]


@dataclass(frozen=True)
class ChildRule:
    name: str
    mode: ChildMode
    mapper: ElementMapper
    min: int = 0
    ignore: bool = False

    @property
    def min_count(self) -> int:
        if self.mode is ChildMode.REQUIRED:
            return 1
        if self.mode is ChildMode.OPTIONAL:
            return 0
        return self.min

    @property
    def max_count(self) -> Optional[int]:
        """Upper bound on occurrences, or None when unbounded."""
        if self.mode is ChildMode.REPEATED:
            return None
        return 1


@dataclass(frozen=True)
class TextRule:
    name: Optional[str]
    validator: Optional[Validator[Any]] = None

    @property
    def ignore(self) -> bool:
        return self.name is None


def _ignore_element(element: XmlElement, path: Optional[ValuePath] = None) -> None:
    return None


def _is_whitespace(text: str) -> bool:
    return not text.strip(WHITESPACE)


def _is_namespace_declaration(name: XmlName) -> bool:
    return name.prefix == "xmlns" or (not name.prefix and name.name == "xmlns")


class CompiledElementMapper:
    """Validating projection from an element subtree to a record.

    Instances are immutable once built and may be shared freely; calling one
    never mutates the element it maps.
    """

    def __init__(
        self,
        expected_name: Optional[str],
        attr_rules: List[AttrRule],
        child_rules: List[ChildRule],
        text_rule: Optional[TextRule],
        config: MapperConfig,
        record_type: Optional[Callable[..., Any]] = None,
    ) -> None:
        self.expected_name = expected_name
        self.config = config
        self.record_type = record_type
        self._attr_rules = {rule.name: rule for rule in attr_rules}
        self._child_rules = {rule.name: rule for rule in child_rules}
        self._text_rule = text_rule
        self._required_attr_names = frozenset(
            rule.name for rule in attr_rules if rule.mode is AttrMode.REQUIRED
        )
        self._logger = get_logger(
            __name__, config.correlation_id, "element_mapper"
        ).bind(expected_name=expected_name)

    def __call__(self, element: XmlElement, path: Optional[ValuePath] = None) -> Any:
        if path is None:
            path = ValuePath.of(str(element.name))

        if self.expected_name is not None and element.name.name != self.expected_name:
            raise self._fail(path.is_bad_as_it(
                f"is not an element with the name {self.expected_name}",
                UnexpectedElementNameError,
            ))

        record: Record = {}
        self._map_attributes(element, path, record)
        self._map_children(element, path, record)

        if self.record_type is not None:
            return self.record_type(**record)
        return record

    def _fail(self, error: XmlMappingError) -> XmlMappingError:
        if self._logger.is_enabled_for(logging.DEBUG):
            self._logger.debug(
                "Element does not match mapper schema",
                extra={"path": str(error.path), "error_kind": type(error).__name__},
            )
        return error

    def _map_attributes(
        self, element: XmlElement, path: ValuePath, record: Record
    ) -> None:
        for rule in self._attr_rules.values():
            if rule.mode is AttrMode.OPTIONAL:
                record[rule.name] = None

        skip_declarations = self.config.skip_namespace_declarations
        remaining: Set[str] = set(self._required_attr_names)
        seen: Set[str] = set()
        for name, value in element.attrs:
            if skip_declarations and _is_namespace_declaration(name):
                continue
            rule = self._attr_rules.get(name.name)
            if rule is None:
                raise self._fail(path.is_bad_as_it(
                    f"has an unexpected attribute {name}", UnexpectedAttributeError
                ))
            if name.name in seen:
                raise self._fail(path.is_bad_as_it(
                    f"has a duplicate attribute {name}", UnexpectedAttributeError
                ))
            seen.add(name.name)
            remaining.discard(name.name)
            parsed = rule.validator.parse(path.and_then(f"Attr {name}"), value)
            if rule.mode is not AttrMode.IGNORED:
                record[name.name] = parsed

        if remaining:
            raise self._fail(MissingAttributesError(path, remaining))

    def _map_children(
        self, element: XmlElement, path: ValuePath, record: Record
    ) -> None:
        for rule in self._child_rules.values():
            if rule.ignore:
                continue
            if rule.mode is ChildMode.REPEATED:
                record[rule.name] = []
            elif rule.mode is ChildMode.OPTIONAL:
                record[rule.name] = None

        text_rule = self._text_rule
        seen_text = False
        counts: Dict[str, int] = {}
        for index, child in enumerate(element.children):
            if isinstance(child, str):
                if _is_whitespace(child):
                    continue
                child_path = path.and_then(f"Child #{index} ({TEXT_CONTENT})")
                if text_rule is None or seen_text:
                    raise self._fail(
                        child_path.is_bad_as_it("is unexpected", UnexpectedTextError)
                    )
                seen_text = True
                text = child
                if text_rule.validator is not None:
                    text = text_rule.validator.parse(child_path, child)
                if not text_rule.ignore:
                    record[text_rule.name] = text
                continue

            local_name = child.name.name
            child_path = path.and_then(f"Child #{index} ({child.name})")
            rule = self._child_rules.get(local_name)
            if rule is None:
                raise self._fail(
                    child_path.is_bad_as_it("is unexpected", UnexpectedChildError)
                )
            counts[local_name] = counts.get(local_name, 0) + 1
            if rule.max_count is not None and counts[local_name] > rule.max_count:
                raise self._fail(child_path.is_bad_as_it(
                    f"is unexpected as at most {rule.max_count} {local_name} "
                    "element is allowed",
                    UnexpectedChildError,
                ))
            value = rule.mapper(child, child_path)
            if rule.ignore:
                continue
            if rule.mode is ChildMode.REPEATED:
                record[local_name].append(value)
            else:
                record[local_name] = value

        missing = {
            rule.name: rule.min_count - counts.get(rule.name, 0)
            for rule in self._child_rules.values()
            if counts.get(rule.name, 0) < rule.min_count
        }
        if missing:
            raise self._fail(MissingChildrenError(path, missing))
        if text_rule is not None and not seen_text:
            raise self._fail(path.is_bad_as_it(
                "does not have any expected text content", MissingTextError
            ))

    def __repr__(self) -> str:
        return (
            f"<CompiledElementMapper name={self.expected_name!r} "
            f"attrs={len(self._attr_rules)} children={len(self._child_rules)} "
            f"text={self._text_rule is not None}>"
        )


class XmlElementMapperBuilder:
    """Fluent builder of element mappers.

    Every declaring method returns the builder itself. Declaring the same
    attribute, child or record key twice, a second expected name or a second
    text rule raises ``BuilderMisuseError`` immediately.
    """

    def __init__(self, config: Optional[MapperConfig] = None) -> None:
        self.config = config or MapperConfig()
        self._expected_name: Optional[str] = None
        self._attr_rules: List[AttrRule] = []
        self._child_rules: List[ChildRule] = []
        self._text_rule: Optional[TextRule] = None
        self._record_keys: Set[str] = set()

    def _claim_key(self, key: str) -> None:
        if key in self._record_keys:
            raise BuilderMisuseError(f"Record key {key} is already declared")
        self._record_keys.add(key)

    # Element name

    def expect_name(self, name: str) -> "XmlElementMapperBuilder":
        if self._expected_name is not None:
            raise BuilderMisuseError(
                f"Expected element name is already set to {self._expected_name}"
            )
        self._expected_name = name
        return self

    # Attributes

    def _add_attr(
        self, name: str, mode: AttrMode, validator: Validator[Any]
    ) -> "XmlElementMapperBuilder":
        if any(rule.name == name for rule in self._attr_rules):
            raise BuilderMisuseError(f"Attribute {name} is already declared")
        if mode is not AttrMode.IGNORED:
            self._claim_key(name)
        self._attr_rules.append(AttrRule(name, mode, validator))
        return self

    def attr(self, name: str, validator: Validator[Any]) -> "XmlElementMapperBuilder":
        """Require attribute ``name`` and store its validated value."""
        return self._add_attr(name, AttrMode.REQUIRED, validator)

    def maybe_attr(
        self, name: str, validator: Validator[Any]
    ) -> "XmlElementMapperBuilder":
        """Accept optional attribute ``name``; stored as None when absent."""
        return self._add_attr(name, AttrMode.OPTIONAL, validator)

    def ignore_attr(
        self, name: str, validator: Validator[Any]
    ) -> "XmlElementMapperBuilder":
        """Accept and validate attribute ``name`` without storing it."""
        return self._add_attr(name, AttrMode.IGNORED, validator)

    # Child elements

    def _add_child(self, rule: ChildRule) -> "XmlElementMapperBuilder":
        if any(existing.name == rule.name for existing in self._child_rules):
            raise BuilderMisuseError(f"Child element {rule.name} is already declared")
        if not rule.ignore:
            self._claim_key(rule.name)
        self._child_rules.append(rule)
        return self

    def one(self, name: str, mapper: ElementMapper) -> "XmlElementMapperBuilder":
        return self._add_child(ChildRule(name, ChildMode.REQUIRED, mapper))

    def maybe_one(self, name: str, mapper: ElementMapper) -> "XmlElementMapperBuilder":
        return self._add_child(ChildRule(name, ChildMode.OPTIONAL, mapper))

    def repeated(
        self, name: str, mapper: ElementMapper, min: int = 0
    ) -> "XmlElementMapperBuilder":
        """Accept ``min`` or more ``name`` children, stored as a list."""
        if isinstance(min, bool) or not isinstance(min, int) or min < 0:
            raise BuilderMisuseError(
                f"Minimum count for {name} must be an integer >= 0"
            )
        return self._add_child(ChildRule(name, ChildMode.REPEATED, mapper, min=min))

    def one_or_more(
        self, name: str, mapper: ElementMapper
    ) -> "XmlElementMapperBuilder":
        return self.repeated(name, mapper, min=1)

    def zero_or_more(
        self, name: str, mapper: ElementMapper
    ) -> "XmlElementMapperBuilder":
        return self.repeated(name, mapper, min=0)

    def ignore(
        self, name: str, mapper: ElementMapper = _ignore_element
    ) -> "XmlElementMapperBuilder":
        """Accept any number of ``name`` children; ``mapper`` still runs on each."""
        return self._add_child(
            ChildRule(name, ChildMode.REPEATED, mapper, min=0, ignore=True)
        )

    # Text

    def _set_text(self, rule: TextRule) -> "XmlElementMapperBuilder":
        if self._text_rule is not None:
            raise BuilderMisuseError("A text rule is already declared")
        if rule.name is not None:
            self._claim_key(rule.name)
        self._text_rule = rule
        return self

    def text(
        self, name: str, validator: Optional[Validator[Any]] = None
    ) -> "XmlElementMapperBuilder":
        """Require one non-whitespace text child, stored under ``name``.

        Without a validator the text is stored verbatim.
        """
        return self._set_text(TextRule(name, validator))

    def ignore_text(
        self, validator: Optional[Validator[Any]] = None
    ) -> "XmlElementMapperBuilder":
        """Require one non-whitespace text child without storing it."""
        return self._set_text(TextRule(None, validator))

    def build(
        self, record_type: Optional[Callable[..., Any]] = None
    ) -> CompiledElementMapper:
        """Compile the declared rules into a reusable mapper.

        Args:
            record_type: Optional callable (dataclass, pydantic model, ...)
                receiving the record as keyword arguments

        Returns:
            Mapper called as ``mapper(element)`` or ``mapper(element, path)``
        """
        mapper = CompiledElementMapper(
            self._expected_name,
            list(self._attr_rules),
            list(self._child_rules),
            self._text_rule,
            self.config,
            record_type,
        )
        if mapper._logger.is_enabled_for(logging.DEBUG):
            mapper._logger.debug(
                "Compiled element mapper",
                extra={
                    "attr_rules": len(self._attr_rules),
                    "child_rules": len(self._child_rules),
                    "has_text_rule": self._text_rule is not None,
                },
            )
        return mapper


def text_only_mapper(
    validator: Validator[Any], path: Optional[ValuePath] = None
) -> ElementMapper:
    """Mapper validating an element's combined direct text.

    Args:
        validator: Validator applied to ``element.combined_text``
        path: Diagnostic path used when the caller supplies none

    Example:
        >>> builder = XmlElementMapperBuilder().one(
        ...     "Count", text_only_mapper(IntegerValidator()))
    """
    default_path = path or ValuePath.of("Text content")

    def map_text(element: XmlElement, path: Optional[ValuePath] = None) -> Any:
        effective_path = default_path if path is None else path.and_then("Text content")
        return validator.parse(effective_path, element.combined_text)

    return map_text
