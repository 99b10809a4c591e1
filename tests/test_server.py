"""Tests for the HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from component_tree_engine.components import register_builtin_components
from component_tree_engine.components.content import Document
from component_tree_engine.config import config_defaults
from component_tree_engine.core import Component, ComponentDefinition
from component_tree_engine.server import InMemoryQueryLayer, PageTrees, create_app
from component_tree_engine.server.pages import normalize_path


@pytest.fixture
def query_layer(document):
    layer = InMemoryQueryLayer({"/fish-and-chips/": document})
    layer.add("/archive/", Document(id=1, title="One", permalink="/one/"), Document(id=2, title="Two", permalink="/two/"))
    return layer


@pytest.fixture
def app_registry(registry):
    register_builtin_components(registry)
    registry.freeze()
    return registry


@pytest.fixture
def client(app_registry, query_layer):
    app = create_app(registry=app_registry, query_layer=query_layer, config=config_defaults())
    return TestClient(app)


class TestComponentsEndpoint:

    def test_document_page(self, client):
        response = client.get("/components", params={"path": "/fish-and-chips/"})
        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"defaults", "page", "providers", "redirectTo", "redirectStatus"}
        assert body["defaults"] == []
        assert body["redirectTo"] == ""
        assert body["redirectStatus"] == 0

        container = body["page"][0]
        assert container["type"] == "container"
        assert container["config"]["themeName"] == "default"
        title, byline, content = container["children"][:3]
        assert title == "Fish & Chips"
        assert byline == {"type": "html", "config": {"content": "jdoe"}, "children": []}
        assert content["config"]["themeName"] == "fullBleed"
        # Tag links are spliced in after the content
        assert [c["type"] for c in container["children"][3:]] == ["html", "html"]

    def test_site_context_sends_defaults(self, client):
        body = client.get("/components", params={"path": "/fish-and-chips/", "context": "site"}).json()
        footer = body["defaults"][0]
        assert footer["type"] == "footer"
        assert footer["config"]["copyright"].startswith("Copyright © ")
        assert "copyrightHolder" in footer["config"]

    def test_listing_page(self, client):
        body = client.get("/components", params={"path": "/archive/"}).json()
        links = body["page"][0]["children"]
        assert [link["config"]["href"] for link in links] == ["/one/", "/two/"]
        assert [link["children"] for link in links] == [["One"], ["Two"]]

    def test_not_found(self, client):
        response = client.get("/components", params={"path": "/nope/", "context": "site"})
        assert response.status_code == 404
        body = response.json()
        assert body["page"] == []
        assert body["redirectTo"] == ""
        assert body["defaults"][0]["type"] == "footer"

    def test_trailing_slash_redirect(self, client):
        response = client.get(
            "/components",
            params={"path": "/fish-and-chips", "context": "site"},
            follow_redirects=False,
        )
        assert response.status_code == 301
        location = response.headers["location"]
        assert "path=%2Ffish-and-chips%2F" in location
        assert "context=site" in location

    def test_custom_page_builder(self, app_registry, query_layer):
        seen = {}

        def builder(path, context_name, query, params):
            seen.update(params)
            return PageTrees(
                page=[Component("post/title")],
                redirect_to="/elsewhere/",
                redirect_status=302,
            )

        client = TestClient(create_app(
            registry=app_registry, query_layer=query_layer, page_builder=builder, config=config_defaults()
        ))
        body = client.get("/components", params={"path": "/fish-and-chips/", "preview": "1"}).json()
        assert seen == {"preview": "1"}
        assert body["page"] == ["Fish & Chips"]
        assert body["redirectTo"] == "/elsewhere/"
        assert body["redirectStatus"] == 302

    def test_serialization_error_is_reported(self, registry, query_layer):
        registry.register("clash", ComponentDefinition(name="clash", default_config={"a_b": 1, "aB": 2}))

        def builder(path, context_name, query, params):
            return PageTrees(page=[Component("clash")])

        client = TestClient(create_app(
            registry=registry, query_layer=query_layer, page_builder=builder, config=config_defaults()
        ))
        response = client.get("/components", params={"path": "/fish-and-chips/"})
        assert response.status_code == 500
        assert response.json()["error"] == "SerializationError"


class TestComponentTypes:

    def test_list(self, client, app_registry):
        body = client.get("/component-types").json()
        assert body["total"] == len(app_registry)
        assert "post/title" in body["types"]["post"]
        assert "footer" in body["types"]["general"]

    def test_describe(self, client):
        body = client.get("/component-types/post/title").json()
        assert body["name"] == "post/title"
        assert body["data_requirements"]["postId"] == {
            "type": "integer",
            "source": "documentId",
            "default": None,
            "description": "",
        }

    def test_unknown(self, client):
        assert client.get("/component-types/nope").status_code == 404

    def test_docs(self, client):
        body = client.get("/docs/component-types").json()
        assert body["format"] == "markdown"
        assert "### `post/title`" in body["content"]


class TestHealth:

    def test_health(self, client, app_registry):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["definitions_loaded"] == len(app_registry)


class TestQueryLayer:

    @pytest.mark.parametrize("path,expected", [
        ("/", "/"),
        ("", "/"),
        ("about", "/about/"),
        ("/about/", "/about/"),
        (" /a/b ", "/a/b/"),
    ])
    def test_normalize_path(self, path, expected):
        assert normalize_path(path) == expected

    def test_search_flag(self, query_layer):
        assert query_layer.query("/archive/", {"s": "fish"}).is_search
        assert not query_layer.query("/archive/", {}).is_search

    def test_miss(self, query_layer):
        result = query_layer.query("/missing/", {})
        assert result.is_404
        assert not result.have_documents
