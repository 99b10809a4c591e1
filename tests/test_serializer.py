"""Tests for wire serialization."""

import json

import pytest

from component_tree_engine.core import (
    Component,
    SerializationError,
    camel_case_key,
    camel_case_keys,
    serialize,
    serialize_children,
    to_json,
)


class TestCamelCaseKey:

    @pytest.mark.parametrize("key,expected", [
        ("foo_bar_baz", "fooBarBaz"),
        ("foo", "foo"),
        ("theme_name", "themeName"),
        ("themeName", "themeName"),
        ("Title", "title"),
        ("redirect_to", "redirectTo"),
    ])
    def test_recasing(self, key, expected):
        assert camel_case_key(key) == expected

    @pytest.mark.parametrize("key", ["", "123", 5, None])
    def test_passthrough_keys(self, key):
        assert camel_case_key(key) == key

    def test_recasing_is_stable(self):
        once = camel_case_key("max_image_width")
        assert camel_case_key(once) == once


class TestCamelCaseKeys:

    def test_nested_mappings_and_lists(self):
        config = {
            "theme_name": "dark",
            "social_links": {"display_icons": True, "services": [{"service_name": "x"}, "raw_text"]},
        }
        assert camel_case_keys(config) == {
            "themeName": "dark",
            "socialLinks": {"displayIcons": True, "services": [{"serviceName": "x"}, "raw_text"]},
        }

    def test_heterogeneous_values_per_node(self):
        assert camel_case_keys({"items": [{"item_id": 1}]}) == {"items": [{"itemId": 1}]}
        assert camel_case_keys({"items": {"item_id": 1}}) == {"items": {"itemId": 1}}

    def test_values_untouched(self):
        assert camel_case_keys({"label": "snake_case_value"}) == {"label": "snake_case_value"}

    def test_collision_raises(self):
        with pytest.raises(SerializationError) as exc_info:
            camel_case_keys({"fooBar": 1, "foo_bar": 2})
        assert exc_info.value.path == "config.foo_bar"


class TestSerialize:

    def test_wire_shape(self):
        node = Component("container", {"theme_name": "fullBleed"}, ("text", Component("p", {"css_class": "x"})))
        assert serialize(node) == {
            "type": "container",
            "config": {"themeName": "fullBleed"},
            "children": [
                "text",
                {"type": "p", "config": {"cssClass": "x"}, "children": []},
            ],
        }

    def test_text_leaf(self):
        assert serialize("hello") == "hello"

    def test_child_order_preserved(self):
        node = Component("list", children=[Component(str(i)) for i in range(5)])
        assert [c["type"] for c in serialize(node)["children"]] == ["0", "1", "2", "3", "4"]

    def test_fragments_are_spliced(self):
        fragment = Component("", children=[Component("a"), "b"])
        node = Component("row", children=["first", fragment, "last"])
        children = serialize(node)["children"]
        assert children == ["first", {"type": "a", "config": {}, "children": []}, "b", "last"]

    def test_empty_fragment_renders_nothing(self):
        assert serialize_children([Component(""), "x"]) == ["x"]

    def test_components_inside_config(self):
        node = Component("card", {"header_node": Component("title", {"font_size": 2})})
        assert serialize(node)["config"]["headerNode"] == {
            "type": "title",
            "config": {"fontSize": 2},
            "children": [],
        }

    def test_non_component_rejected(self):
        with pytest.raises(SerializationError):
            serialize(42)

    def test_collision_path_points_at_node(self):
        node = Component("row", children=[Component("cell", {"a_b": 1, "aB": 2})])
        with pytest.raises(SerializationError) as exc_info:
            serialize(node)
        assert exc_info.value.path.startswith("root.children[0].config")

    def test_to_json(self):
        data = json.loads(to_json(Component("p", {"text_align": "left"}, ("café",))))
        assert data == {"type": "p", "config": {"textAlign": "left"}, "children": ["café"]}
