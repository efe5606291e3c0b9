"""
Tests for the layout tree model, serialization and validation.
"""

import pytest

from openframe.layout.tree import (
    EMPTY,
    Axis,
    Child,
    NestedContent,
    Section,
    WidgetContent,
    default_tree,
    find_child,
    find_section,
    from_dict,
    iter_children,
    iter_sections,
    load_tree_or_default,
    replace_section,
    to_dict,
    validate,
    validation_errors,
    with_fresh_ids,
)


class TestAxis:
    """Tests for axis parsing."""

    def test_from_value(self):
        assert Axis.from_value("row") is Axis.ROW
        assert Axis.from_value("COLUMN") is Axis.COLUMN
        assert Axis.from_value(Axis.ROW) is Axis.ROW

    def test_legacy_directions(self):
        """Planner documents used horizontal/vertical."""
        assert Axis.from_value("horizontal") is Axis.ROW
        assert Axis.from_value("vertical") is Axis.COLUMN

    def test_invalid(self):
        with pytest.raises(ValueError, match="Invalid axis"):
            Axis.from_value("diagonal")
        with pytest.raises(ValueError):
            Axis.from_value(None)

    def test_other(self):
        assert Axis.ROW.other is Axis.COLUMN
        assert Axis.COLUMN.other is Axis.ROW


class TestNodes:
    """Tests for Section and Child."""

    def test_section_requires_children(self):
        with pytest.raises(ValueError, match="at least one child"):
            Section("root", Axis.ROW, ())

    def test_children_normalized_to_tuple(self):
        section = Section("root", Axis.ROW, [Child("a")])
        assert isinstance(section.children, tuple)

    def test_child_content_kinds(self, nested_tree):
        clock, right = nested_tree.children
        assert clock.is_widget and clock.widget_id == "clock-1"
        assert right.is_nested and right.section.id == "col"
        assert Child("x").is_empty
        assert Child("x").widget_id is None
        assert Child("x").section is None

    def test_nodes_are_immutable(self, single_tree):
        with pytest.raises(AttributeError):
            single_tree.id = "other"  # type: ignore[misc]

    def test_total_flex_and_index_of(self, nested_tree):
        assert nested_tree.total_flex == 3.0
        assert nested_tree.index_of("right") == 1
        assert nested_tree.index_of("missing") is None

    def test_default_tree(self):
        tree = default_tree()
        assert tree.id == "root"
        assert tree.axis is Axis.ROW
        assert len(tree.children) == 1
        assert tree.children[0].flex == 1.0
        assert tree.children[0].is_empty

    def test_default_tree_ids_are_stable(self):
        assert default_tree() == default_tree()
        assert default_tree().children[0].id == "main"


class TestLookup:
    """Tests for depth-first lookup and copy-on-write replacement."""

    def test_iter_sections_order(self, nested_tree):
        assert [s.id for s in iter_sections(nested_tree)] == ["root", "col"]

    def test_iter_children_order(self, nested_tree):
        ids = [child.id for _, _, child in iter_children(nested_tree)]
        assert ids == ["clock-slot", "right", "top", "bottom"]

    def test_find_section(self, nested_tree):
        assert find_section(nested_tree, "col").axis is Axis.COLUMN
        assert find_section(nested_tree, "nope") is None

    def test_find_child(self, nested_tree):
        parent, index = find_child(nested_tree, "bottom")
        assert parent.id == "col"
        assert index == 1
        assert find_child(nested_tree, "nope") is None

    def test_replace_section_shares_untouched_subtrees(self, nested_tree):
        new_tree = replace_section(nested_tree, "root", lambda s: s.with_axis(Axis.COLUMN))
        assert new_tree.axis is Axis.COLUMN
        assert new_tree.children[1].section is nested_tree.children[1].section

    def test_replace_nested_section_copies_path(self, nested_tree):
        new_tree = replace_section(
            nested_tree, "col", lambda s: s.with_children([Child("only", 1.0)])
        )
        assert new_tree is not nested_tree
        assert [c.id for c in find_section(new_tree, "col").children] == ["only"]
        # Input untouched
        assert [c.id for c in find_section(nested_tree, "col").children] == ["top", "bottom"]
        # Sibling reused
        assert new_tree.children[0] is nested_tree.children[0]

    def test_replace_missing_section(self, nested_tree):
        assert replace_section(nested_tree, "nope", lambda s: s) is None

    def test_with_fresh_ids(self, nested_tree):
        copy = with_fresh_ids(nested_tree)
        old_ids = {c.id for _, _, c in iter_children(nested_tree)} | {"col"}
        new_ids = {c.id for _, _, c in iter_children(copy)} | {s.id for s in iter_sections(copy)}
        assert copy.id == "root"
        assert not (old_ids & (new_ids - {"root"}))
        # Shape and weights preserved
        assert [c.flex for c in copy.children] == [2.0, 1.0]
        assert copy.children[0].widget_id == "clock-1"


class TestSerialization:
    """Tests for to_dict / from_dict."""

    def test_round_trip(self, nested_tree):
        assert from_dict(to_dict(nested_tree)) == nested_tree

    def test_dict_shape(self, nested_tree):
        data = to_dict(nested_tree)
        assert data["axis"] == "row"
        assert data["children"][0] == {
            "id": "clock-slot",
            "flex": 2.0,
            "type": "widget",
            "widgetId": "clock-1",
        }
        assert data["children"][1]["type"] == "section"
        assert data["children"][1]["section"]["axis"] == "column"

    def test_legacy_planner_document(self):
        """Planner layouts used direction, a sections wrapper and widget slots without ids."""
        data = {
            "sections": [
                {
                    "id": "root",
                    "direction": "horizontal",
                    "children": [
                        {"id": "a", "flex": 1, "type": "widget"},
                        {"id": "b", "flex": 1, "type": "widget", "widgetId": "w-1"},
                    ],
                }
            ]
        }
        assert validate(data)
        tree = from_dict(data)
        assert tree.axis is Axis.ROW
        assert tree.children[0].content == EMPTY
        assert tree.children[1].content == WidgetContent("w-1")


class TestValidation:
    """Tests for validation_errors / validate / load_tree_or_default."""

    def test_valid_tree(self, nested_tree):
        assert validation_errors(nested_tree) == []
        assert validate(to_dict(nested_tree))

    def test_not_an_object(self):
        assert validation_errors([1, 2]) == ["root: section must be an object"]

    def test_empty_children(self):
        errors = validation_errors({"id": "root", "axis": "row", "children": []})
        assert any("non-empty list" in e for e in errors)

    def test_bad_axis(self):
        errors = validation_errors(
            {"id": "root", "axis": "sideways", "children": [{"id": "a", "flex": 1}]}
        )
        assert any("Invalid axis" in e for e in errors)

    def test_flex_below_minimum(self):
        errors = validation_errors(
            {"id": "root", "axis": "row", "children": [{"id": "a", "flex": 0.05}]}
        )
        assert any("below the minimum" in e for e in errors)

    def test_flex_not_numeric(self):
        for bad in ("1", True, None, float("nan")):
            errors = validation_errors(
                {"id": "root", "axis": "row", "children": [{"id": "a", "flex": bad}]}
            )
            assert any("flex must be a number" in e for e in errors), bad

    def test_duplicate_ids(self):
        data = {
            "id": "root",
            "axis": "row",
            "children": [{"id": "a", "flex": 1}, {"id": "a", "flex": 1}],
        }
        assert any("duplicate id 'a'" in e for e in validation_errors(data))

    def test_unknown_child_type(self):
        data = {"id": "root", "axis": "row", "children": [{"id": "a", "type": "iframe"}]}
        assert any("unknown child type" in e for e in validation_errors(data))

    def test_nested_errors_have_paths(self):
        data = {
            "id": "root",
            "axis": "row",
            "children": [
                {"id": "a", "type": "section", "section": {"id": "s", "axis": "column", "children": []}}
            ],
        }
        errors = validation_errors(data)
        assert errors and errors[0].startswith("root.children[0].section")

    def test_load_tree_or_default_falls_back(self):
        tree = load_tree_or_default({"garbage": True})
        assert tree.id == "root"
        assert len(tree.children) == 1

    def test_load_tree_or_default_keeps_valid(self, nested_tree):
        assert load_tree_or_default(to_dict(nested_tree)) == nested_tree


def test_nested_content_holds_section():
    inner = Section("inner", Axis.COLUMN, (Child("x"),))
    assert NestedContent(inner).section is inner
