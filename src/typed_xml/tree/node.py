"""Element tree model with ownership tracking, queries and mutation.

A node is either a text leaf (a plain ``str``) or an ``XmlElement``. Every
element has at most one parent: attaching an element that already has a
parent fails, and the parent link is only ever changed by ``add_child``,
``detach`` and ``delete_child``. Parents are referenced weakly, children are
owned by their parent's child sequence.
"""

import weakref
from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)

from typed_xml.shared.errors import (
    AlreadyHasParentError,
    CyclicTreeError,
    IndexOutOfRangeError,
    MissingAttributeError,
    MultipleMatchesError,
    NoMatchError,
    NoParentError,
)

from .serialization import to_dict, to_xml_string

# Attribute carrying element identity for XmlQuery(id=...)
ID_ATTRIBUTE = "ID"


@dataclass(frozen=True)
class XmlName:
    """Qualified name: an opaque prefix (possibly empty) and a local name."""

    prefix: str
    name: str

    @classmethod
    def from_qname(cls, qname: str) -> "XmlName":
        """Split ``prefix:name`` on the first colon."""
        prefix, sep, local = qname.partition(":")
        if not sep:
            return cls("", qname)
        return cls(prefix, local)

    def __str__(self) -> str:
        return f"{self.prefix}:{self.name}" if self.prefix else self.name


@dataclass(frozen=True)
class XmlQuery:
    """Filter over elements.

    An element matches when ANY configured field matches: ``id`` compares the
    value of the element's ``ID`` attribute, ``name`` compares the element's
    local name. A query with no field set matches nothing.
    """

    id: Optional[str] = None
    name: Optional[str] = None


Attribute = Tuple[XmlName, str]
XmlNode = Union["XmlElement", str]
Selector = Union[XmlQuery, "XmlElement"]


def _at_most_one(matches: Iterator["XmlElement"]) -> Optional["XmlElement"]:
    one = next(matches, None)
    if one is None:
        return None
    for _ in matches:
        raise MultipleMatchesError(
            "More than one element found; for safety reasons, at most one "
            "element can match"
        )
    return one


def _assert_matched(query: XmlQuery, result: Optional["XmlElement"]) -> "XmlElement":
    if result is None:
        raise NoMatchError(
            f"No XML elements could be found matching the query {query!r}"
        )
    return result


@dataclass(eq=False, repr=False)
class XmlElement:
    """An XML element with a qualified name, ordered attributes and children.

    Elements compare by identity. Use ``to_dict()`` for structural comparison.
    """

    name: XmlName
    attrs: List[Attribute] = field(default_factory=list)
    _children: List[XmlNode] = field(default_factory=list, init=False)
    _parent: Optional["weakref.ReferenceType[XmlElement]"] = field(
        default=None, init=False
    )

    def __post_init__(self) -> None:
        """Normalize the name and take a private copy of the attributes."""
        if isinstance(self.name, str):
            self.name = XmlName.from_qname(self.name)
        if not isinstance(self.name, XmlName):
            raise TypeError("Element name must be an XmlName or a qualified name")
        self.attrs = [(attr_name, value) for attr_name, value in self.attrs]

    @classmethod
    def of(
        cls,
        qname: str,
        attrs: Optional[Mapping[str, Optional[str]]] = None,
        children: Iterable[XmlNode] = (),
    ) -> "XmlElement":
        """Build an element from qualified names; None attribute values are dropped.

        Example:
            >>> str(XmlElement.of("a:b", {"id": "1", "x": None}, ["hi"]))
            '<a:b id="1">hi</a:b>'
        """
        element = cls(
            XmlName.from_qname(qname),
            [
                (XmlName.from_qname(attr_qname), value)
                for attr_qname, value in (attrs or {}).items()
                if value is not None
            ],
        )
        for child in children:
            element.add_child(child)
        return element

    @property
    def parent(self) -> Optional["XmlElement"]:
        """Owning element, or None for a root or detached element."""
        if self._parent is None:
            return None
        return self._parent()

    @property
    def children(self) -> Tuple[XmlNode, ...]:
        """Snapshot of the child sequence in document order."""
        return tuple(self._children)

    def element_children(self) -> Iterator["XmlElement"]:
        for child in self._children:
            if isinstance(child, XmlElement):
                yield child

    # Mutation

    def add_child(self, child: XmlNode, position: Optional[int] = None) -> None:
        """Insert ``child`` at ``position`` (end of the sequence by default).

        Raises:
            IndexOutOfRangeError: position is negative or past the end
            AlreadyHasParentError: child element is owned by another element
            CyclicTreeError: child element is this element or an ancestor of it
        """
        if position is None:
            position = len(self._children)
        if isinstance(position, bool) or not isinstance(position, int):
            raise TypeError("Child position must be an integer")
        if position < 0 or position > len(self._children):
            raise IndexOutOfRangeError(
                f"Cannot add child at out-of-bounds position {position}"
            )
        if isinstance(child, XmlElement):
            if child.parent is not None:
                raise AlreadyHasParentError("Cannot add child that already has parent")
            ancestor: Optional[XmlElement] = self
            while ancestor is not None:
                if ancestor is child:
                    raise CyclicTreeError(
                        "Cannot add an element beneath itself or its descendants"
                    )
                ancestor = ancestor.parent
            child._parent = weakref.ref(self)
        elif not isinstance(child, str):
            raise TypeError("Child must be an XmlElement or a str")
        self._children.insert(position, child)

    def detach(self) -> Tuple["XmlElement", int]:
        """Remove this element from its parent.

        Returns:
            The former parent and the index this element occupied in it
        """
        parent = self.parent
        if parent is None:
            raise NoParentError(
                "XML element does not have a parent and cannot be detached"
            )
        return parent, parent.delete_child(self)

    def delete_child(self, child: "XmlElement") -> int:
        """Remove ``child`` by identity; returns its former index or -1."""
        for index, candidate in enumerate(self._children):
            if candidate is child:
                del self._children[index]
                child._parent = None
                return index
        return -1

    def filter_out(self, unselector: Selector) -> "XmlElement":
        """Copy this subtree without descendants matching ``unselector``.

        The returned tree consists of new elements with copied attribute lists;
        this element itself is always kept.
        """
        filtered = XmlElement(self.name, self.attrs)
        pending = [(self, filtered)]
        while pending:
            source, target = pending.pop()
            for child in source._children:
                if isinstance(child, str):
                    target._children.append(child)
                elif not child.matches(unselector):
                    copy = XmlElement(child.name, child.attrs)
                    copy._parent = weakref.ref(target)
                    target._children.append(copy)
                    pending.append((child, copy))
        return filtered

    # Attributes

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Value of the last attribute with local name ``name``."""
        value = default
        for attr_name, attr_value in self.attrs:
            if attr_name.name == name:
                value = attr_value
        return value

    def get_attribute_value_or_throw(self, name: str) -> str:
        value = self.get_attribute(name)
        if value is None:
            raise MissingAttributeError(f"No attribute found with name {name}")
        return value

    def delete_attribute(self, name: str) -> Optional[str]:
        """Remove all attributes with local name ``name``.

        Returns:
            The effective (last-seen) value removed, or None if none existed
        """
        removed = self.get_attribute(name)
        self.attrs = [attr for attr in self.attrs if attr[0].name != name]
        return removed

    # Queries

    def matches(self, selector: Selector) -> bool:
        if isinstance(selector, XmlElement):
            return selector is self
        if selector.id is not None:
            for attr_name, value in self.attrs:
                if attr_name.name == ID_ATTRIBUTE:
                    if value == selector.id:
                        return True
                    break
        return selector.name is not None and self.name.name == selector.name

    def find_children(self, query: XmlQuery) -> Iterator["XmlElement"]:
        """Lazily yield matching direct child elements in document order."""
        for child in self.element_children():
            if child.matches(query):
                yield child

    def find_at_most_one_child(self, query: XmlQuery) -> Optional["XmlElement"]:
        return _at_most_one(self.find_children(query))

    def find_at_most_one_child_or_throw(self, query: XmlQuery) -> "XmlElement":
        return _assert_matched(query, self.find_at_most_one_child(query))

    def find_descendants(self, query: XmlQuery) -> Iterator["XmlElement"]:
        """Lazily yield matching descendants in pre-order, excluding this element."""
        pending = [self.element_children()]
        while pending:
            child = next(pending[-1], None)
            if child is None:
                pending.pop()
                continue
            if child.matches(query):
                yield child
            pending.append(child.element_children())

    def find_at_most_one_descendant(self, query: XmlQuery) -> Optional["XmlElement"]:
        return _at_most_one(self.find_descendants(query))

    def find_at_most_one_descendant_or_throw(self, query: XmlQuery) -> "XmlElement":
        return _assert_matched(query, self.find_at_most_one_descendant(query))

    # Content

    @property
    def combined_text(self) -> str:
        """Concatenation of the direct text children; child elements are skipped."""
        return "".join(child for child in self._children if isinstance(child, str))

    def to_dict(self) -> Dict[str, Any]:
        """Convert element to dictionary representation."""
        return to_dict(self)

    def __str__(self) -> str:
        return to_xml_string(self)

    def __repr__(self) -> str:
        return (
            f"<XmlElement {self.name} attrs={len(self.attrs)} "
            f"children={len(self._children)}>"
        )
