"""Tests for the Component value object and builder."""

import pytest

from component_tree_engine.core import Component, ComponentBuilder, component


class TestComponentConstruction:
    """Constructing nodes and converting from storage shape."""

    def test_defaults(self):
        node = Component()
        assert node.type == ""
        assert node.config == {}
        assert node.children == ()
        assert node.is_fragment

    def test_from_dict_recurses_into_children(self):
        node = Component.from_dict({
            "type": "group",
            "config": {"title": "Hi"},
            "children": [{"type": "item"}, "text", None, ""],
        })
        assert node.type == "group"
        assert node.children == (Component("item"), "text")

    def test_from_dict_accepts_name_alias(self):
        assert Component.from_dict({"name": "quote"}).type == "quote"

    def test_from_dict_rejects_non_list_children(self):
        with pytest.raises(ValueError):
            Component.from_dict({"type": "x", "children": "oops"})

    def test_non_mapping_config_rejected(self):
        with pytest.raises(ValueError):
            Component(type="x", config=["a"])

    def test_invalid_child_rejected(self):
        with pytest.raises(ValueError):
            Component(type="x", children=[42])

    def test_to_dict_round_trip(self):
        data = {"type": "a", "config": {"k_v": 1}, "children": [{"type": "b", "config": {}, "children": []}, "t"]}
        assert Component.from_dict(data).to_dict() == data


class TestPureUpdates:
    """Helpers return new nodes and leave the original alone."""

    def test_set_config_does_not_mutate(self):
        node = Component("quote", {"text": "hi"})
        updated = node.set_config("author", "me")
        assert node.config == {"text": "hi"}
        assert updated.config == {"text": "hi", "author": "me"}

    def test_with_defaults_keeps_node_values(self):
        node = Component("quote", {"text": "hi", "author": "me"})
        merged = node.with_defaults({"author": "unknown", "style": "plain"})
        assert merged.config == {"author": "me", "style": "plain", "text": "hi"}

    def test_with_defaults_copies_nested_defaults(self):
        defaults = {"items": []}
        merged = Component("list").with_defaults(defaults)
        merged.config["items"].append(1)
        assert defaults == {"items": []}

    def test_with_children_drops_empty(self):
        node = Component("x").with_children([None, "", "a", Component("y")])
        assert node.children == ("a", Component("y"))

    def test_structural_equality(self):
        assert component("a", {"k": 1}, ["t"]) == Component("a", {"k": 1}, ("t",))
        assert Component("a", {"k": 1}) != Component("a", {"k": 2})


class TestComponentBuilder:
    """The chainable builder finalizes into an immutable node."""

    def test_build(self):
        node = (
            ComponentBuilder("image")
            .set_config("alt", "A cat")
            .merge_config({"url": "http://x/cat.jpg"})
            .add_child("caption")
            .build()
        )
        assert node == Component("image", {"alt": "A cat", "url": "http://x/cat.jpg"}, ("caption",))

    def test_builder_is_independent_of_built_node(self):
        builder = ComponentBuilder("x").set_config("a", 1)
        first = builder.build()
        builder.set_config("a", 2)
        assert first.config == {"a": 1}

    def test_from_component(self):
        original = Component("x", {"a": 1}, ("t",))
        rebuilt = ComponentBuilder.from_component(original).set_type("y").build()
        assert rebuilt == Component("y", {"a": 1}, ("t",))
