"""Tests for document-bound components and the markup adapter."""

import pytest

from component_tree_engine.components import post, register_builtin_components
from component_tree_engine.components.post import MISSING_DOCUMENT_TEXT
from component_tree_engine.core import Component, Resolver, html_to_components, serialize


@pytest.fixture
def builtin(registry):
    register_builtin_components(registry)
    return Resolver(registry)


class TestHtmlToComponents:

    def test_tags_in_requested_order(self):
        markup = "<p>one</p><h2>Title</h2><p>two</p>"
        nodes = html_to_components(markup, ["h2", "p"])
        assert [(n.type, n.children) for n in nodes] == [
            ("h2", ("Title",)),
            ("p", ("one",)),
            ("p", ("two",)),
        ]

    def test_attributes_become_config(self):
        nodes = html_to_components('<img src="a.jpg" alt="A"><p class="lead big">x</p>', ["img", "p"])
        assert nodes[0] == Component("img", {"src": "a.jpg", "alt": "A"})
        assert nodes[1].config == {"class": "lead big"}

    def test_empty_markup(self):
        assert html_to_components("", ["p"]) == []


class TestPostComponents:

    def test_register_lists_all_types(self, registry):
        assert set(post.register(registry)) == set(registry.list_by_namespace("post"))

    def test_title_unescapes_entities(self, builtin, context):
        assert builtin.resolve(Component("post/title"), context) == "Fish & Chips"

    def test_excerpt_is_escaped(self, builtin, context):
        assert builtin.resolve(Component("post/excerpt"), context) == "Short &lt;b&gt;summary&lt;/b&gt;"

    def test_permalink_becomes_link(self, builtin, context):
        tree = builtin.resolve(Component("post/permalink", children=["Read more"]), context)
        assert tree == Component("link", {"href": "https://example.com/fish-and-chips/"}, ("Read more",))

    def test_byline_becomes_html(self, builtin, context):
        tree = builtin.resolve(Component("post/byline"), context)
        assert tree == Component("html", {"content": "jdoe"})

    def test_social_sharing_placeholder(self, builtin, context):
        tree = builtin.resolve(Component("post/social-sharing"), context)
        assert tree == Component("html", {"content": "Share post"})

    def test_tags_splice_into_parent(self, builtin, context):
        tree = builtin.resolve(Component("row", children=[Component("post/tags")]), context)
        children = serialize(tree)["children"]
        assert [c["config"]["content"] for c in children] == [
            '<a href="https://example.com/tag/food/">food</a>',
            '<a href="https://example.com/tag/uk/">uk</a>',
        ]

    def test_content_becomes_full_bleed_container(self, builtin, context):
        tree = builtin.resolve(Component("post/content"), context)
        assert tree.type == "container"
        assert tree.get_config("theme_name") == "fullBleed"
        assert tree.get_config("max_width") == "lg"
        assert [c.type for c in tree.children] == ["h2", "p", "p"]

    def test_content_tags_override(self, builtin, context):
        tree = builtin.resolve(Component("post/content", {"content_tags": ["h2"]}), context)
        assert [c.type for c in tree.children] == ["h2"]
        assert "content_tags" not in tree.config

    def test_without_document(self, builtin, empty_context):
        assert builtin.resolve(Component("post/title"), empty_context) == MISSING_DOCUMENT_TEXT
        assert builtin.resolve(Component("post/excerpt"), empty_context) == ""
        assert serialize(builtin.resolve(Component("row", children=[Component("post/content")]), empty_context)) == {
            "type": "row",
            "config": {},
            "children": [],
        }


class TestSiteComponents:

    def test_footer_fills_copyright(self, builtin, empty_context):
        tree = builtin.resolve(Component("footer", {"copyright_holder": "Example"}), empty_context)
        assert tree.get_config("copyright").startswith("Copyright © ")
        assert tree.get_config("copyright").endswith(" - Example")

    def test_footer_keeps_configured_copyright(self, builtin, empty_context):
        tree = builtin.resolve(Component("footer", {"copyright": "Mine"}), empty_context)
        assert tree.get_config("copyright") == "Mine"

    def test_social_links_defaults(self, builtin, empty_context):
        wire = serialize(builtin.resolve(Component("social-links"), empty_context))
        assert wire["config"]["displayIcons"] is True
        assert "twitter" in wire["config"]["services"]
