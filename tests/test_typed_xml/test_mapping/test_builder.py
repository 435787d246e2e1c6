"""Tests for the element mapper builder."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List

import pytest

from typed_xml.api import parse_xml
from typed_xml.mapping import (
    DateValidator,
    IntegerValidator,
    StringValidator,
    ValuePath,
    XmlElementMapperBuilder,
    text_only_mapper,
)
from typed_xml.shared import (
    BuilderMisuseError,
    FieldValidationError,
    MapperConfig,
    MissingAttributesError,
    MissingChildrenError,
    MissingTextError,
    UnexpectedAttributeError,
    UnexpectedChildError,
    UnexpectedElementNameError,
    UnexpectedTextError,
)


def _empty_mapper():
    return XmlElementMapperBuilder().build()


@pytest.fixture
def user_mapper():
    """Mapper for <User id="..."/> elements."""
    return XmlElementMapperBuilder().attr("id", IntegerValidator()).build()


@pytest.fixture
def root_mapper(user_mapper):
    """Mapper for the root document of users and groups."""
    return (
        XmlElementMapperBuilder()
        .expect_name("root")
        .attr("created", DateValidator())
        .one_or_more("User", user_mapper)
        .zero_or_more("Group", _empty_mapper())
        .build()
    )


class TestElementMapper:
    """Test mapping of whole documents."""

    def test_users_and_groups(self, root_mapper):
        """Test a document with repeated children maps to a record."""
        root = parse_xml(
            '<root created="2021-02-05T05:00:00.000Z">\n'
            '  <User id="1"/>\n'
            '  <User id="2"/>\n'
            "</root>"
        )

        assert root_mapper(root) == {
            "created": datetime(2021, 2, 5, 5, tzinfo=timezone.utc),
            "User": [{"id": 1}, {"id": 2}],
            "Group": [],
        }

    def test_missing_required_children(self, root_mapper):
        """Test a whitespace-only element lacks its required children."""
        root = parse_xml('<root created="2021-02-05T05:00:00.000Z">\n  \n</root>')

        with pytest.raises(MissingChildrenError) as info:
            root_mapper(root)

        assert info.value.counts == {"User": 1}
        assert "does not have 1 more User element" in str(info.value)

    def test_unexpected_element_name(self, root_mapper):
        """Test the expected local name is enforced."""
        with pytest.raises(UnexpectedElementNameError) as info:
            root_mapper(parse_xml('<other created="2021-02-05T05:00:00Z"/>'))

        assert str(info.value) == (
            "other is bad as it is not an element with the name root"
        )

    def test_prefix_is_ignored_for_name(self):
        """Test the expected name is compared against the local name."""
        mapper = XmlElementMapperBuilder().expect_name("root").build()

        assert mapper(parse_xml("<x:root/>")) == {}

    def test_mapping_does_not_mutate(self, root_mapper):
        """Test the input tree is left unchanged."""
        root = parse_xml('<root created="2021-02-05T05:00:00Z"><User id="1"/></root>')
        before = root.to_dict()

        root_mapper(root)

        assert root.to_dict() == before

    def test_validator_error_path(self, root_mapper):
        """Test nested validation failures carry the full path."""
        root = parse_xml('<root created="2021-02-05T05:00:00Z"><User id="x"/></root>')

        with pytest.raises(FieldValidationError) as info:
            root_mapper(root)

        assert info.value.path == ValuePath.of(
            "root", "Child #0 (User)", "Attr id"
        )
        assert str(info.value).startswith(
            "root > Child #0 (User) > Attr id is bad as it is not a valid integer"
        )

    def test_caller_supplied_path(self, user_mapper):
        """Test a caller path replaces the element name root."""
        with pytest.raises(FieldValidationError) as info:
            user_mapper(parse_xml('<User id="x"/>'), ValuePath.of("users.xml"))

        assert str(info.value.path) == "users.xml > Attr id"

    def test_record_type(self):
        """Test records can be passed to a constructor."""

        @dataclass
        class User:
            id: int
            name: str

        mapper = (
            XmlElementMapperBuilder()
            .attr("id", IntegerValidator())
            .attr("name", StringValidator())
            .build(record_type=User)
        )

        assert mapper(parse_xml('<User id="3" name="ann"/>')) == User(3, "ann")

    def test_mapper_is_reusable(self, user_mapper):
        """Test one compiled mapper maps many elements."""
        results = [user_mapper(parse_xml(f'<User id="{i}"/>')) for i in range(3)]

        assert results == [{"id": 0}, {"id": 1}, {"id": 2}]


class TestAttributeRules:
    """Test attribute declarations."""

    def test_unexpected_attribute(self, user_mapper):
        """Test undeclared attributes are rejected."""
        with pytest.raises(UnexpectedAttributeError, match="attribute extra"):
            user_mapper(parse_xml('<User id="1" extra="x"/>'))

    def test_duplicate_attribute(self, user_mapper):
        """Test a declared attribute may only appear once."""
        with pytest.raises(UnexpectedAttributeError, match="duplicate attribute"):
            user_mapper(parse_xml('<User id="1" p:id="2"/>'))

    def test_missing_attributes_are_all_listed(self):
        """Test every missing required attribute is reported."""
        mapper = (
            XmlElementMapperBuilder()
            .attr("b", StringValidator())
            .attr("a", StringValidator())
            .attr("c", StringValidator())
            .build()
        )

        with pytest.raises(MissingAttributesError) as info:
            mapper(parse_xml('<e c="1"/>'))

        assert info.value.names == ["a", "b"]
        assert str(info.value) == "e is bad as it is missing attributes: a, b"

    def test_optional_attribute(self):
        """Test optional attributes default to None."""
        mapper = XmlElementMapperBuilder().maybe_attr("n", IntegerValidator()).build()

        assert mapper(parse_xml("<e/>")) == {"n": None}
        assert mapper(parse_xml('<e n="5"/>')) == {"n": 5}

    def test_ignored_attribute(self):
        """Test ignored attributes are validated but not stored."""
        mapper = XmlElementMapperBuilder().ignore_attr("v", IntegerValidator()).build()

        assert mapper(parse_xml('<e v="1"/>')) == {}
        with pytest.raises(FieldValidationError):
            mapper(parse_xml('<e v="one"/>'))

    def test_ignored_attribute_may_be_absent(self):
        """Test an ignored attribute is not required to be present.

        Only attributes declared with ``attr`` are required; ``ignore_attr``
        tolerates the attribute and validates it when it occurs, so its absence
        is not reported as a missing attribute.
        """
        mapper = (
            XmlElementMapperBuilder()
            .attr("id", IntegerValidator())
            .ignore_attr("v", IntegerValidator())
            .build()
        )

        assert mapper(parse_xml('<e id="3"/>')) == {"id": 3}
        with pytest.raises(MissingAttributesError) as info:
            mapper(parse_xml('<e v="1"/>'))
        assert info.value.names == ["id"]

    def test_namespace_declarations_are_skipped(self, user_mapper):
        """Test xmlns attributes are not matched against rules."""
        element = parse_xml('<User xmlns="urn:a" xmlns:p="urn:b" id="1"/>')

        assert user_mapper(element) == {"id": 1}

    def test_namespace_declarations_can_be_strict(self):
        """Test namespace declarations are rejected when not skipped."""
        mapper = XmlElementMapperBuilder(
            MapperConfig(skip_namespace_declarations=False)
        ).build()

        with pytest.raises(UnexpectedAttributeError):
            mapper(parse_xml('<e xmlns="urn:a"/>'))


class TestChildRules:
    """Test child element declarations."""

    def test_one(self):
        """Test exactly one child is required."""
        mapper = XmlElementMapperBuilder().one("a", _empty_mapper()).build()

        assert mapper(parse_xml("<e><a/></e>")) == {"a": {}}
        with pytest.raises(MissingChildrenError):
            mapper(parse_xml("<e/>"))
        with pytest.raises(UnexpectedChildError) as info:
            mapper(parse_xml("<e><a/><a/></e>"))
        assert str(info.value.path) == "e > Child #1 (a)"

    def test_maybe_one(self):
        """Test an optional child defaults to None."""
        mapper = XmlElementMapperBuilder().maybe_one("a", _empty_mapper()).build()

        assert mapper(parse_xml("<e/>")) == {"a": None}
        assert mapper(parse_xml("<e><a/></e>")) == {"a": {}}
        with pytest.raises(UnexpectedChildError):
            mapper(parse_xml("<e><a/><a/></e>"))

    def test_repeated_minimum(self):
        """Test the shortfall below the minimum is reported."""
        mapper = XmlElementMapperBuilder().repeated("a", _empty_mapper(), min=3).build()

        with pytest.raises(MissingChildrenError) as info:
            mapper(parse_xml("<e><a/></e>"))

        assert info.value.counts == {"a": 2}
        assert str(info.value) == "e is bad as it does not have 2 more a elements"

    def test_unexpected_child(self):
        """Test undeclared children are rejected with their index."""
        mapper = XmlElementMapperBuilder().zero_or_more("a", _empty_mapper()).build()

        with pytest.raises(UnexpectedChildError) as info:
            mapper(parse_xml("<e>\n  <a/>\n  <p:b/>\n</e>"))

        assert str(info.value) == "e > Child #3 (p:b) is bad as it is unexpected"

    def test_children_match_by_local_name(self):
        """Test prefixed children match rules for their local name."""
        mapper = XmlElementMapperBuilder().zero_or_more("a", _empty_mapper()).build()

        assert mapper(parse_xml("<e><x:a/><a/></e>")) == {"a": [{}, {}]}

    def test_ignored_children(self):
        """Test ignored children are accepted and mapped but not stored."""
        seen: List[str] = []

        def record_meta(element, path=None):
            seen.append(str(path))

        mapper = XmlElementMapperBuilder().ignore("Meta", record_meta).build()

        assert mapper(parse_xml("<e><Meta/><Meta/></e>")) == {}
        assert mapper(parse_xml("<e/>")) == {}
        assert seen == ["e > Child #0 (Meta)", "e > Child #1 (Meta)"]

    def test_ignored_children_still_validated(self, user_mapper):
        """Test errors from an ignored child's mapper propagate."""
        mapper = XmlElementMapperBuilder().ignore("User", user_mapper).build()

        with pytest.raises(FieldValidationError):
            mapper(parse_xml('<e><User id="nope"/></e>'))


class TestTextRules:
    """Test text content declarations."""

    def test_text_stored_verbatim(self):
        """Test text without a validator is stored as-is."""
        mapper = XmlElementMapperBuilder().text("body").build()

        assert mapper(parse_xml("<e> hello </e>")) == {"body": " hello "}

    def test_text_validated(self):
        """Test text with a validator."""
        mapper = XmlElementMapperBuilder().text("n", IntegerValidator()).build()

        assert mapper(parse_xml("<e>42</e>")) == {"n": 42}
        with pytest.raises(FieldValidationError) as info:
            mapper(parse_xml("<e>x</e>"))
        assert str(info.value.path) == "e > Child #0 (text content)"

    def test_missing_text(self):
        """Test whitespace-only text does not satisfy a text rule."""
        mapper = XmlElementMapperBuilder().text("body").build()

        with pytest.raises(MissingTextError, match="does not have any expected text"):
            mapper(parse_xml("<e>\n  </e>"))

    def test_unexpected_text(self):
        """Test text is rejected without a text rule."""
        with pytest.raises(UnexpectedTextError) as info:
            _empty_mapper()(parse_xml("<e>oops</e>"))

        assert str(info.value) == (
            "e > Child #0 (text content) is bad as it is unexpected"
        )

    def test_second_text_run_is_unexpected(self):
        """Test only one non-whitespace text child is accepted."""
        mapper = XmlElementMapperBuilder().text("body").build()

        with pytest.raises(UnexpectedTextError):
            mapper(parse_xml("<e>a<!-- split -->b</e>"))

    def test_ignore_text(self):
        """Test ignored text is required but not stored."""
        mapper = XmlElementMapperBuilder().ignore_text().build()

        assert mapper(parse_xml("<e>anything</e>")) == {}
        with pytest.raises(MissingTextError):
            mapper(parse_xml("<e/>"))

    def test_text_alongside_children(self):
        """Test text and child rules combine."""
        mapper = (
            XmlElementMapperBuilder()
            .text("label")
            .maybe_one("b", _empty_mapper())
            .build()
        )

        assert mapper(parse_xml("<e>\n  <b/>\n  tail\n</e>")) == {
            "label": "\n  tail\n",
            "b": {},
        }


class TestTextOnlyMapper:
    """Test the text-only element mapper."""

    def test_as_child_mapper(self):
        """Test combined text is validated for a child element."""
        mapper = (
            XmlElementMapperBuilder()
            .one("Count", text_only_mapper(IntegerValidator()))
            .build()
        )

        assert mapper(parse_xml("<r><Count>7</Count></r>")) == {"Count": 7}

    def test_error_path(self):
        """Test failures extend the caller's path."""
        mapper = (
            XmlElementMapperBuilder()
            .one("Count", text_only_mapper(IntegerValidator()))
            .build()
        )

        with pytest.raises(FieldValidationError) as info:
            mapper(parse_xml("<r><Count>x</Count></r>"))

        assert str(info.value.path) == "r > Child #0 (Count) > Text content"

    def test_standalone_default_path(self):
        """Test the default path when called without one."""
        mapper = text_only_mapper(IntegerValidator(), ValuePath.of("count.xml"))

        assert mapper(parse_xml("<c>1<x/>2</c>")) == 12
        with pytest.raises(FieldValidationError) as info:
            mapper(parse_xml("<c>x</c>"))
        assert str(info.value.path) == "count.xml"


class TestBuilderMisuse:
    """Test declaration errors raised while building."""

    def test_duplicate_expected_name(self):
        """Test the expected name can only be set once."""
        builder = XmlElementMapperBuilder().expect_name("a")

        with pytest.raises(BuilderMisuseError, match="already set to a"):
            builder.expect_name("b")

    def test_duplicate_attribute(self):
        """Test an attribute can only be declared once."""
        builder = XmlElementMapperBuilder().ignore_attr("a", StringValidator())

        with pytest.raises(BuilderMisuseError, match="Attribute a is already declared"):
            builder.attr("a", StringValidator())

    def test_duplicate_child(self):
        """Test a child name can only be declared once."""
        builder = XmlElementMapperBuilder().ignore("a")

        with pytest.raises(BuilderMisuseError, match="Child element a"):
            builder.one("a", _empty_mapper())

    def test_record_key_collision(self):
        """Test attribute, child and text keys share one namespace."""
        builder = XmlElementMapperBuilder().attr("a", StringValidator())

        with pytest.raises(BuilderMisuseError, match="Record key a"):
            builder.one("a", _empty_mapper())
        with pytest.raises(BuilderMisuseError, match="Record key a"):
            builder.text("a")

    def test_second_text_rule(self):
        """Test only one text rule may be declared."""
        builder = XmlElementMapperBuilder().ignore_text()

        with pytest.raises(BuilderMisuseError, match="text rule"):
            builder.text("body")

    def test_negative_minimum(self):
        """Test a negative minimum count is rejected."""
        with pytest.raises(BuilderMisuseError):
            XmlElementMapperBuilder().repeated("a", _empty_mapper(), min=-1)
