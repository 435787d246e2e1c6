"""Element tree model for typed XML processing.

Key Components:
    XmlName: Qualified (prefix, local name) pair
    XmlQuery: OR-combined filter over the ``ID`` attribute and local name
    XmlElement: Element node with ownership-checked children and queries
    XmlNode: Union of XmlElement and text (plain ``str``)
"""

from .node import ID_ATTRIBUTE, Selector, XmlElement, XmlName, XmlNode, XmlQuery
from .serialization import encode_xml_entities, to_dict, to_xml_string

__all__ = [
    "ID_ATTRIBUTE",
    "Selector",
    "XmlElement",
    "XmlName",
    "XmlNode",
    "XmlQuery",
    "encode_xml_entities",
    "to_dict",
    "to_xml_string",
]
