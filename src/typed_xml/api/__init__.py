"""Parsing API for typed XML processing.

Level 1 is the ``parse_xml`` function; Level 2 is the configured, reusable
``XmlParser`` class.
"""

from .parser import XmlParser, parse_xml

__all__ = [
    "XmlParser",
    "parse_xml",
]
