"""Serialization of element trees back to XML text and plain structures."""

from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Tuple

if TYPE_CHECKING:
    from .node import XmlElement, XmlNode


def encode_xml_entities(raw: str) -> str:
    """Escape text or an attribute value for inclusion in XML output."""
    return (
        # Ampersands first, so later replacements are not escaped twice.
        raw.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
        .replace(">", "&gt;")
    )


def _start_tag(
    element: "XmlElement", open_elements: List[Tuple["XmlElement", Iterator["XmlNode"]]]
) -> str:
    attrs = "".join(
        f' {name}="{encode_xml_entities(value)}"' for name, value in element.attrs
    )
    if not element.children:
        return f"<{element.name}{attrs}/>"
    open_elements.append((element, iter(element.children)))
    return f"<{element.name}{attrs}>"


def _render(element: "XmlElement") -> Iterator[str]:
    # Stack of open elements paired with their unrendered children.
    open_elements: List[Tuple["XmlElement", Iterator["XmlNode"]]] = []
    yield _start_tag(element, open_elements)
    while open_elements:
        current, remaining = open_elements[-1]
        child = next(remaining, None)
        if child is None:
            open_elements.pop()
            yield f"</{current.name}>"
        elif isinstance(child, str):
            yield encode_xml_entities(child)
        else:
            yield _start_tag(child, open_elements)


def to_xml_string(element: "XmlElement") -> str:
    """Render ``element`` and its subtree as XML text.

    Elements with an empty child sequence are written self-closing; an element
    whose only child is an empty string still gets an explicit closing tag.
    """
    return "".join(_render(element))


def _shallow_dict(element: "XmlElement") -> Dict[str, Any]:
    return {
        "name": str(element.name),
        "attrs": {str(name): value for name, value in element.attrs},
        "children": [],
    }


def to_dict(element: "XmlElement") -> Dict[str, Any]:
    """Convert ``element`` to nested plain dicts, lists and strings.

    Attribute names are rendered qualified (``prefix:name``). With duplicate
    attribute names the last value wins.
    """
    result = _shallow_dict(element)
    pending = [(element, result)]
    while pending:
        source, target = pending.pop()
        children: List[Any] = target["children"]
        for child in source.children:
            if isinstance(child, str):
                children.append(child)
            else:
                converted = _shallow_dict(child)
                children.append(converted)
                pending.append((child, converted))
    return result
