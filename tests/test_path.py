"""Tests for property path parsing and navigation in livevars._path."""

from dataclasses import dataclass

import pytest
from pydantic import BaseModel

from livevars._path import (
    AttributePart,
    ItemPart,
    PropertyPath,
    get_value_by_parts,
    lookup_variable,
)

# --- Test Fixtures ---


class Address(BaseModel):
    city: str


class Person(BaseModel):
    name: str
    addresses: list[Address]


@dataclass
class Widget:
    title: str
    _secret: str = "hidden"


# --- PropertyPath.parse() Tests ---


class TestPropertyPathParse:
    def test_root_only(self) -> None:
        path = PropertyPath.parse("user")
        assert path.root == "user"
        assert path.parts == ()

    def test_attribute_access(self) -> None:
        path = PropertyPath.parse("user.name")
        assert path.root == "user"
        assert path.parts == (AttributePart(name="name"),)

    def test_item_access(self) -> None:
        path = PropertyPath.parse("items[0].title")
        assert path.root == "items"
        assert path.parts == (ItemPart(key="0"), AttributePart(name="title"))

    def test_quoted_item_key(self) -> None:
        assert PropertyPath.parse("table['some key']").parts == (ItemPart(key="some key"),)
        assert PropertyPath.parse('table["k"]').parts == (ItemPart(key="k"),)

    def test_strips_whitespace(self) -> None:
        assert PropertyPath.parse("  user.name  ") == PropertyPath.parse("user.name")

    def test_str_roundtrip(self) -> None:
        assert str(PropertyPath.parse("items[0].title")) == "items[0].title"

    @pytest.mark.parametrize("path_str", ["", ".name", "[0]", "user.", "user..name", "items[0", "items[0]x"])
    def test_malformed(self, path_str: str) -> None:
        with pytest.raises(ValueError):  # noqa: PT011
            PropertyPath.parse(path_str)


# --- get_value_by_parts() Tests ---


class TestGetValueByParts:
    def test_empty_parts_returns_data(self) -> None:
        data = {"a": 1}
        assert get_value_by_parts(data, ()) is data

    def test_mapping(self) -> None:
        assert get_value_by_parts({"a": {"b": 2}}, (AttributePart("a"), ItemPart("b"))) == 2

    def test_mapping_with_int_keys(self) -> None:
        assert get_value_by_parts({1: "one"}, (ItemPart("1"),)) == "one"

    def test_sequence(self) -> None:
        assert get_value_by_parts([1, 2, 3], (ItemPart("2"),)) == 3

    def test_sequence_out_of_range(self) -> None:
        assert get_value_by_parts([1, 2, 3], (ItemPart("3"),)) is None

    def test_sequence_with_non_integer_key(self) -> None:
        assert get_value_by_parts([1, 2, 3], (AttributePart("count"),)) is None

    def test_strings_are_not_indexed(self) -> None:
        assert get_value_by_parts("abc", (ItemPart("0"),)) is None

    def test_pydantic_model(self) -> None:
        person = Person(name="Ada", addresses=[Address(city="London")])
        path = PropertyPath.parse("person.addresses[0].city")
        assert get_value_by_parts(person, path.parts) == "London"

    def test_plain_object(self) -> None:
        assert get_value_by_parts(Widget(title="Hi"), (AttributePart("title"),)) == "Hi"

    def test_private_attributes_are_hidden(self) -> None:
        assert get_value_by_parts(Widget(title="Hi"), (AttributePart("_secret"),)) is None

    def test_stops_at_none(self) -> None:
        assert get_value_by_parts({"a": None}, (AttributePart("a"), AttributePart("b"))) is None


# --- lookup_variable() Tests ---


class TestLookupVariable:
    def test_direct_key(self) -> None:
        assert lookup_variable({"a": 1}, "a") == ("a", 1)

    def test_missing_key(self) -> None:
        assert lookup_variable({}, "a") == ("a", None)

    def test_path_depends_on_root(self) -> None:
        assert lookup_variable({"user": {"name": "Ada"}}, "user.name") == ("user", "Ada")

    def test_missing_root(self) -> None:
        assert lookup_variable({}, "user.name") == ("user", None)

    def test_dotted_key_wins(self) -> None:
        assert lookup_variable({"a.b": 1, "a": {"b": 2}}, "a.b") == ("a.b", 1)

    def test_unparsable_name(self) -> None:
        assert lookup_variable({"a": 1}, "a[") == ("a[", None)
