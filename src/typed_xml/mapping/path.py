"""Diagnostic paths locating a value inside a mapped element subtree."""

from dataclasses import dataclass
from typing import Tuple, Type, TypeVar

from typed_xml.shared.errors import XmlMappingError

E = TypeVar("E", bound=XmlMappingError)

PATH_SEPARATOR = " > "


@dataclass(frozen=True)
class ValuePath:
    """Immutable sequence of path components, rendered as ``a > b > c``."""

    components: Tuple[str, ...] = ()

    @classmethod
    def of(cls, *components: str) -> "ValuePath":
        return cls(tuple(components))

    def and_then(self, component: str) -> "ValuePath":
        """Path to a value nested one level below this one."""
        return ValuePath(self.components + (component,))

    def is_bad_as_it(
        self,
        reason: str,
        error_class: Type[E] = XmlMappingError,  # type: ignore[assignment]
    ) -> E:
        """Build (not raise) a mapping error for the value at this path.

        Example:
            >>> str(ValuePath.of("root", "Attr id").is_bad_as_it("is empty"))
            'root > Attr id is bad as it is empty'
        """
        return error_class(self, reason)

    def __str__(self) -> str:
        return PATH_SEPARATOR.join(self.components)
