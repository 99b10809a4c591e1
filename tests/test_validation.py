"""Tests for declaration and tree validation."""

from component_tree_engine.core import validate_declaration, validate_tree


class TestValidateDeclaration:

    def test_valid(self):
        report = validate_declaration({
            "name": "post/id",
            "default_config": {},
            "data_requirements": {"postId": {"type": "int", "source": "documentId"}},
            "transform": "pkg.mod:fn",
        })
        assert report.valid
        assert report.format() == "✓ Validation passed with no issues"

    def test_missing_name(self):
        report = validate_declaration({"default_config": {}})
        assert not report.valid
        assert "name" in report.errors[0].message

    def test_not_a_mapping(self):
        assert not validate_declaration(["name"]).valid

    def test_bad_shapes(self):
        report = validate_declaration({
            "name": "x",
            "default_config": [],
            "data_requirements": {"a": "datetime", "b": 3},
            "transform": "no-colon",
        })
        assert len(report.errors) == 4

    def test_unknown_key_is_warning(self):
        report = validate_declaration({"name": "x", "colour": "red"})
        assert report.valid
        assert len(report.warnings) == 1
        assert "PASSED with warnings" in report.format()


class TestValidateTree:

    def test_valid_tree(self, registry):
        registry.register("quote")
        tree = {"type": "quote", "config": {}, "children": ["a", {"type": "", "children": []}, None]}
        assert validate_tree(tree, registry).messages == []

    def test_structural_errors(self):
        tree = {"type": "row", "config": [], "children": [{"config": {}}, 5, {"type": "x", "children": "y"}]}
        report = validate_tree(tree)
        assert not report.valid
        assert len(report.errors) == 4

    def test_unknown_type_is_warning(self, registry):
        registry.register("post/title")
        report = validate_tree({"type": "title"}, registry)
        assert report.valid
        assert report.warnings[0].suggestion == "Similar types: ['post/title']"
