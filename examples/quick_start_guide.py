#!/usr/bin/env python3
"""
Quick Start Guide for Typed XML.

This example walks through parsing a document, navigating and editing the
element tree, and mapping it into typed records with a declarative schema.
"""

import sys
import traceback

from typed_xml import (
    DateValidator,
    EnumValidator,
    IntegerValidator,
    ParserConfig,
    XmlElement,
    XmlElementMapperBuilder,
    XmlError,
    XmlMappingError,
    XmlParseError,
    XmlParser,
    XmlQuery,
    parse_xml,
    text_only_mapper,
)

LIBRARY_XML = """<?xml version="1.0"?>
<!-- Sample catalogue -->
<library created="2021-02-05T05:00:00.000Z">
  <book ID="b1" format="paperback">
    <title>The Art of Parsing</title>
    <pages>320</pages>
  </book>
  <book ID="b2" format="ebook">
    <title>Trees &amp; Queries</title>
    <pages>128</pages>
  </book>
</library>
"""


def quick_start_example():
    """Quick start example showing parsing and navigation."""

    print("🚀 QUICK START - Typed XML")
    print("=" * 45)

    # Step 1: Parse a document
    print("\n📄 Step 1: Parsing")
    print("-" * 30)

    root = parse_xml(LIBRARY_XML)
    print(f"✅ Parsed root element <{root.name}>")
    print(f"📏 Root has {len(list(root.element_children()))} child elements")

    # Step 2: Query the tree
    print("\n🔍 Step 2: Queries")
    print("-" * 30)

    second = root.find_at_most_one_descendant_or_throw(XmlQuery(id="b2"))
    title = second.find_at_most_one_child_or_throw(XmlQuery(name="title"))
    print(f"📖 Book b2 is titled '{title.combined_text}'")

    titles = [t.combined_text for t in root.find_descendants(XmlQuery(name="title"))]
    print(f"📚 All titles: {titles}")

    # Step 3: Edit the tree
    print("\n✏️  Step 3: Editing")
    print("-" * 30)

    second.detach()
    extra = XmlElement.of("book", {"ID": "b3", "format": "ebook"})
    extra.add_child(XmlElement.of("title", children=["Appendix <A>"]))
    extra.add_child(XmlElement.of("pages", children=["12"]))
    root.add_child(extra)
    print(str(root.filter_out(XmlQuery(name="pages"))))

    print("\n🎉 Quick start complete!")


def mapping_example():
    """Example mapping the catalogue into typed records."""

    print("\n\n🧩 SCHEMA MAPPING EXAMPLE")
    print("=" * 40)

    book = (
        XmlElementMapperBuilder()
        .attr("ID", EnumValidator(["b1", "b2"]))
        .maybe_attr("format", EnumValidator(["paperback", "hardback", "ebook"]))
        .one("title", text_only_mapper(EnumValidator(
            ["The Art of Parsing", "Trees & Queries"])))
        .one("pages", text_only_mapper(IntegerValidator(min=1)))
        .build()
    )
    library = (
        XmlElementMapperBuilder()
        .expect_name("library")
        .attr("created", DateValidator())
        .one_or_more("book", book)
        .build()
    )

    record = library(parse_xml(LIBRARY_XML))
    print(f"🗓️  Created: {record['created'].isoformat()}")
    for entry in record["book"]:
        print(f"  - {entry['ID']}: {entry['title']} ({entry['pages']} pages)")

    broken = LIBRARY_XML.replace("<pages>128</pages>", "<pages>many</pages>")
    try:
        library(parse_xml(broken))
    except XmlMappingError as e:
        print(f"\n❌ Rejected: {e}")


def error_reporting_example():
    """Example showing parse errors and parser limits."""

    print("\n\n🚨 ERROR REPORTING EXAMPLE")
    print("=" * 35)

    parser = XmlParser(ParserConfig.strict().override(max_depth=2))
    samples = [
        "<a><b></a>",
        "<a/><b/>",
        "<a>&nbsp;</a>",
        "<a><b><c/></b></a>",
    ]
    for xml in samples:
        try:
            parser.parse(xml)
        except XmlParseError as e:
            print(f"  {xml!r:24} -> {e.kind.name}: {e}")

    print(f"\n📊 Statistics: {parser.statistics}")


def main():
    """Main function."""
    try:
        quick_start_example()
        mapping_example()
        error_reporting_example()

        print("\n✅ All examples completed successfully!")
        return 0

    except XmlError as e:
        print(f"\n❌ Example failed: {e}")
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
