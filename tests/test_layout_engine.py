"""
Tests for the splitter engine operations.
"""

import random

import pytest

from openframe.config.constants import MIN_FLEX
from openframe.layout.engine import (
    OperationError,
    add_row_above,
    add_row_below,
    assign_widget,
    distribute_evenly,
    remove_slot,
    resize_siblings,
    set_section_children,
    split,
)
from openframe.layout.tree import (
    Axis,
    Child,
    NestedContent,
    Section,
    WidgetContent,
    find_child,
    find_section,
    iter_children,
    iter_sections,
    to_dict,
    validate,
)


def _all_flex(tree):
    return [child.flex for _, _, child in iter_children(tree)]


class TestSplit:
    """Tests for split."""

    def test_split_nests_two_halves(self, single_tree):
        result = split(single_tree, "root", "a", Axis.COLUMN)

        assert result.ok
        wrapper = result.tree.children[0]
        assert wrapper.id == "a"
        assert wrapper.flex == 1.0
        nested = wrapper.section
        assert nested.axis is Axis.COLUMN
        assert [c.flex for c in nested.children] == [0.5, 0.5]
        assert all(c.is_empty for c in nested.children)
        assert result.new_ids == (nested.id, nested.children[0].id, nested.children[1].id)

    def test_split_halves_sum_to_original(self, nested_tree):
        """Splitting flex F yields two children summing to F."""
        result = split(nested_tree, "col", "bottom", Axis.ROW)
        parent, index = find_child(result.tree, "bottom")
        halves = parent.children[index].section.children
        assert halves[0].flex + halves[1].flex == pytest.approx(3.0)

    def test_split_moves_content_to_first_half(self, nested_tree):
        result = split(nested_tree, "root", "clock-slot", Axis.COLUMN)
        first, second = result.tree.children[0].section.children
        assert first.widget_id == "clock-1"
        assert second.is_empty

    def test_split_along_same_axis_still_nests(self, single_tree):
        result = split(single_tree, "root", "a", Axis.ROW)
        assert len(result.tree.children) == 1
        assert result.tree.children[0].is_nested

    def test_split_does_not_modify_input(self, single_tree):
        split(single_tree, "root", "a", Axis.ROW)
        assert single_tree.children[0].is_empty

    def test_split_missing_section(self, single_tree):
        result = split(single_tree, "nope", "a", Axis.ROW)
        assert not result.ok
        assert result.error is OperationError.SECTION_NOT_FOUND
        assert result.tree is single_tree

    def test_split_missing_child(self, single_tree):
        result = split(single_tree, "root", "nope", Axis.ROW)
        assert result.error is OperationError.CHILD_NOT_FOUND

    def test_split_refused_below_min_flex(self):
        tree = Section("root", Axis.ROW, (Child("a", 0.15), Child("b", 1.0)))
        result = split(tree, "root", "a", Axis.COLUMN)
        assert not result.ok
        assert result.error is OperationError.BELOW_MIN_FLEX
        assert result.tree is tree

    def test_split_at_exact_double_min_flex(self):
        tree = Section("root", Axis.ROW, (Child("a", 2 * MIN_FLEX),))
        assert split(tree, "root", "a", Axis.COLUMN).ok


class TestRemove:
    """Tests for remove_slot."""

    def test_remove_sibling(self, nested_tree):
        result = remove_slot(nested_tree, "col", "top")
        assert result.ok
        col = find_section(result.tree, "col")
        assert [c.id for c in col.children] == ["bottom"]
        # Flex values are not renormalized
        assert col.children[0].flex == 3.0

    def test_remove_lone_child_refused(self, single_tree):
        result = remove_slot(single_tree, "root", "a")
        assert not result.ok
        assert result.error is OperationError.LONE_CHILD
        assert result.tree is single_tree

    def test_remove_collapses_lone_nested_sibling(self, nested_tree):
        """Removing the clock leaves only the nested column, which is lifted."""
        result = remove_slot(nested_tree, "root", "clock-slot")
        assert result.ok
        root = result.tree
        assert root.id == "root"
        assert root.axis is Axis.COLUMN
        assert [c.id for c in root.children] == ["top", "bottom"]
        assert find_section(root, "col") is None

    def test_remove_keeps_single_widget_sibling(self):
        tree = Section("root", Axis.ROW, (Child("a", 1.0, WidgetContent("w")), Child("b", 1.0)))
        result = remove_slot(tree, "root", "b")
        assert [c.id for c in result.tree.children] == ["a"]
        assert result.tree.axis is Axis.ROW

    def test_remove_wrong_parent(self, nested_tree):
        result = remove_slot(nested_tree, "root", "top")
        assert result.error is OperationError.CHILD_NOT_FOUND


class TestAssign:
    """Tests for assign_widget."""

    def test_assign_empty_slot(self, nested_tree):
        result = assign_widget(nested_tree, "top", "weather-1")
        parent, index = find_child(result.tree, "top")
        assert parent.children[index].widget_id == "weather-1"

    def test_reassign_replaces(self, single_tree):
        """Assigning W1 then W2 leaves W2."""
        tree = assign_widget(single_tree, "a", "W1").tree
        tree = assign_widget(tree, "a", "W2").tree
        assert tree.children[0].widget_id == "W2"

    def test_assign_keeps_flex(self, nested_tree):
        result = assign_widget(nested_tree, "bottom", "w")
        parent, index = find_child(result.tree, "bottom")
        assert parent.children[index].flex == 3.0

    def test_assign_unknown_slot(self, single_tree):
        result = assign_widget(single_tree, "nope", "w")
        assert result.error is OperationError.SLOT_NOT_FOUND

    def test_assign_to_nested_refused(self, nested_tree):
        result = assign_widget(nested_tree, "right", "w")
        assert result.error is OperationError.NOT_A_SLOT
        assert result.tree is nested_tree


class TestAddRow:
    """Tests for add_row_above / add_row_below."""

    def test_add_row_below(self, nested_tree):
        result = add_row_below(nested_tree, "col", "top")
        col = find_section(result.tree, "col")
        assert [c.id for c in col.children] == ["top", result.new_ids[0], "bottom"]
        assert col.children[1].is_empty

    def test_add_row_above(self, nested_tree):
        result = add_row_above(nested_tree, "col", "top")
        col = find_section(result.tree, "col")
        assert [c.id for c in col.children] == [result.new_ids[0], "top", "bottom"]

    def test_new_row_copies_target_flex(self, nested_tree):
        result = add_row_below(nested_tree, "col", "bottom")
        col = find_section(result.tree, "col")
        assert [c.flex for c in col.children] == [1.0, 3.0, 3.0]

    def test_add_row_stays_in_section_regardless_of_axis(self, nested_tree):
        """In a row section the new sibling sits beside the target."""
        result = add_row_below(nested_tree, "root", "clock-slot")
        assert result.tree.axis is Axis.ROW
        assert len(result.tree.children) == 3

    def test_add_row_missing(self, nested_tree):
        assert add_row_below(nested_tree, "col", "nope").error is OperationError.CHILD_NOT_FOUND
        assert add_row_above(nested_tree, "zzz", "top").error is OperationError.SECTION_NOT_FOUND


class TestDistribute:
    """Tests for distribute_evenly and set_section_children."""

    def test_distribute_is_single_level(self):
        """Nested sections keep their internal ratios."""
        inner = Section("inner", Axis.COLUMN, (Child("x", 0.3), Child("y", 0.7)))
        tree = Section(
            "root",
            Axis.ROW,
            (Child("a", 2.0), Child("b", 1.0), Child("c", 0.5, NestedContent(inner))),
        )
        result = distribute_evenly(tree, "root")
        assert [c.flex for c in result.tree.children] == [1.0, 1.0, 1.0]
        assert [c.flex for c in find_section(result.tree, "inner").children] == [0.3, 0.7]

    def test_distribute_custom_flex(self, nested_tree):
        result = distribute_evenly(nested_tree, "col", flex=2.0)
        assert [c.flex for c in find_section(result.tree, "col").children] == [2.0, 2.0]

    def test_distribute_missing(self, nested_tree):
        assert distribute_evenly(nested_tree, "nope").error is OperationError.SECTION_NOT_FOUND

    def test_set_section_children(self, nested_tree):
        result = set_section_children(nested_tree, "col", [Child("z", 1.0)])
        assert [c.id for c in find_section(result.tree, "col").children] == ["z"]

    def test_set_section_children_empty_refused(self, nested_tree):
        result = set_section_children(nested_tree, "col", [])
        assert result.error is OperationError.EMPTY_CHILDREN
        assert result.tree is nested_tree

    @pytest.mark.parametrize("flex", [0.0, 0.05, MIN_FLEX / 2])
    def test_distribute_below_min_flex_refused(self, nested_tree, flex):
        result = distribute_evenly(nested_tree, "col", flex)
        assert result.error is OperationError.BELOW_MIN_FLEX
        assert result.tree is nested_tree

    def test_distribute_at_min_flex(self, nested_tree):
        result = distribute_evenly(nested_tree, "col", MIN_FLEX)
        assert result.ok
        assert validate(to_dict(result.tree))

    def test_distribute_non_finite_refused(self, nested_tree):
        assert distribute_evenly(nested_tree, "col", float("inf")).error is OperationError.INVALID_FLEX
        assert distribute_evenly(nested_tree, "col", float("nan")).error is OperationError.INVALID_FLEX

    def test_set_section_children_below_min_flex_refused(self, nested_tree):
        result = set_section_children(nested_tree, "col", [Child("z", 1.0), Child("w", 0.01)])
        assert result.error is OperationError.BELOW_MIN_FLEX
        assert result.tree is nested_tree

    def test_set_section_children_duplicate_ids_refused(self, nested_tree):
        result = set_section_children(nested_tree, "col", [Child("z", 1.0), Child("z", 1.0)])
        assert result.error is OperationError.DUPLICATE_ID
        assert result.tree is nested_tree

        # clock-slot already lives in the root section
        result = set_section_children(nested_tree, "col", [Child("clock-slot", 1.0)])
        assert result.error is OperationError.DUPLICATE_ID

    def test_set_section_children_may_reuse_replaced_ids(self, nested_tree):
        result = set_section_children(nested_tree, "col", [Child("bottom", 1.0), Child("top", 1.0)])
        assert result.ok
        assert [c.id for c in find_section(result.tree, "col").children] == ["bottom", "top"]
        assert validate(to_dict(result.tree))


class TestResize:
    """Tests for resize_siblings."""

    def test_resize_converts_pixels_to_flex(self):
        tree = Section("root", Axis.ROW, (Child("a", 1.0), Child("b", 1.0)))
        # 400px across total flex 2 -> 200px per flex; +40px = +0.2
        result = resize_siblings(tree, "root", 0, 40, 400)
        assert result.ok
        assert result.tree.children[0].flex == pytest.approx(1.2)
        assert result.tree.children[1].flex == pytest.approx(0.8)

    def test_resize_conserves_pair_sum(self, nested_tree):
        result = resize_siblings(nested_tree, "col", 0, 55, 300)
        a, b = find_section(result.tree, "col").children
        assert a.flex + b.flex == pytest.approx(4.0)

    def test_resize_rejects_whole_tick_below_min(self):
        """(a=0.15, b=3.0) with a delta pushing a below 0.1 leaves the tree unchanged."""
        tree = Section("root", Axis.ROW, (Child("a", 0.15), Child("b", 3.0)))
        # 315px over total 3.15 -> 100px per flex; -10px = -0.1 -> a = 0.05
        result = resize_siblings(tree, "root", 0, -10, 315)
        assert not result.ok
        assert result.error is OperationError.BELOW_MIN_FLEX
        assert result.tree is tree

    def test_resize_rejects_when_second_pane_would_shrink(self):
        tree = Section("root", Axis.ROW, (Child("a", 1.0), Child("b", 0.15)))
        result = resize_siblings(tree, "root", 0, 20, 115)
        assert result.tree is tree

    def test_resize_index_out_of_range(self, nested_tree):
        assert resize_siblings(nested_tree, "col", 1, 10, 100).error is OperationError.INDEX_OUT_OF_RANGE
        assert resize_siblings(nested_tree, "col", -1, 10, 100).error is OperationError.INDEX_OUT_OF_RANGE

    def test_resize_invalid_container(self, nested_tree):
        assert resize_siblings(nested_tree, "col", 0, 10, 0).error is OperationError.INVALID_CONTAINER
        assert resize_siblings(nested_tree, "col", 0, 10, float("inf")).error is OperationError.INVALID_CONTAINER

    def test_resize_non_finite_delta(self, nested_tree):
        result = resize_siblings(nested_tree, "col", 0, float("nan"), 400)
        assert result.error is OperationError.INVALID_DELTA
        assert result.tree is nested_tree

    def test_resize_overflowing_total_flex(self):
        """Weights that pass validation but sum to infinity are refused, not divided by."""
        tree = Section("root", Axis.ROW, (Child("a", 1e308), Child("b", 1e308)))
        assert validate(to_dict(tree))
        result = resize_siblings(tree, "root", 0, 10, 400)
        assert result.error is OperationError.INVALID_CONTAINER
        assert result.tree is tree

    def test_resize_missing_section(self, nested_tree):
        assert resize_siblings(nested_tree, "nope", 0, 10, 100).error is OperationError.SECTION_NOT_FOUND

    def test_resize_leaves_other_children(self):
        tree = Section("root", Axis.ROW, (Child("a", 1.0), Child("b", 1.0), Child("c", 2.0)))
        result = resize_siblings(tree, "root", 0, 40, 400)
        assert result.ok
        assert result.tree.children[2] is tree.children[2]


class TestInvariants:
    """Properties that must hold for every reachable tree."""

    def _walk(self, tree):
        """Apply a long sequence of mixed operations, yielding every tree."""
        yield tree
        for step in range(30):
            slot_ids = [c.id for _, _, c in iter_children(tree) if not c.is_nested]
            target = slot_ids[step % len(slot_ids)]
            parent, _ = find_child(tree, target)
            if step % 5 == 0:
                tree = split(tree, parent.id, target, Axis.ROW if step % 2 else Axis.COLUMN).tree
            elif step % 5 == 1:
                tree = resize_siblings(tree, parent.id, 0, -500, 100).tree
            elif step % 5 == 2:
                tree = add_row_below(tree, parent.id, target).tree
            elif step % 5 == 3:
                tree = remove_slot(tree, parent.id, target).tree
            else:
                tree = resize_siblings(tree, parent.id, 0, 500, 100).tree
            yield tree

    def test_flex_floor_and_nonempty_sections(self, single_tree):
        for tree in self._walk(single_tree):
            assert all(flex >= MIN_FLEX for flex in _all_flex(tree))
            assert all(section.children for section in iter_sections(tree))

    def test_ids_stay_unique(self, single_tree):
        for tree in self._walk(single_tree):
            ids = [c.id for _, _, c in iter_children(tree)] + [s.id for s in iter_sections(tree)]
            assert len(ids) == len(set(ids))

    def _random_walk(self, tree, seed):
        """Apply random operations with random arguments, including ones that must be refused."""
        rng = random.Random(seed)
        yield tree
        for _ in range(80):
            parent, index, child = rng.choice(list(iter_children(tree)))
            operation = rng.randrange(6)
            if operation == 0:
                tree = split(tree, parent.id, child.id, rng.choice([Axis.ROW, Axis.COLUMN])).tree
            elif operation == 1:
                tree = remove_slot(tree, parent.id, child.id).tree
            elif operation == 2:
                tree = add_row_above(tree, parent.id, child.id).tree
            elif operation == 3:
                flex = rng.choice([0.0, 0.05, MIN_FLEX, 1.0, 2.5, float("inf")])
                tree = distribute_evenly(tree, parent.id, flex).tree
            elif operation == 4:
                replacement = [
                    Child(rng.choice([child.id, "a", f"new-{rng.randrange(4)}"]), rng.choice([0.01, MIN_FLEX, 1.0]))
                    for _ in range(rng.randint(1, 3))
                ]
                tree = set_section_children(tree, parent.id, replacement).tree
            else:
                pair = max(index - 1, 0)
                tree = resize_siblings(
                    tree, parent.id, pair, rng.uniform(-300, 300), rng.choice([0, 50, 400])
                ).tree
            yield tree

    @pytest.mark.parametrize("seed", range(10))
    def test_random_operations_keep_tree_valid(self, single_tree, seed):
        for tree in self._random_walk(single_tree, seed):
            assert all(flex >= MIN_FLEX for flex in _all_flex(tree))
            assert all(section.children for section in iter_sections(tree))
            assert validate(to_dict(tree))


def test_end_to_end_split_assign_resize():
    """Row([Empty(1)]) -> split(Column) -> assign clock-1 -> resize +40px of 400px."""
    tree = Section("root", Axis.ROW, (Child("slot", 1.0),))

    result = split(tree, "root", "slot", Axis.COLUMN)
    assert result.ok
    nested_id, first_id, second_id = result.new_ids
    nested = find_section(result.tree, nested_id)
    assert nested.axis is Axis.COLUMN
    assert [c.flex for c in nested.children] == [0.5, 0.5]

    result = assign_widget(result.tree, first_id, "clock-1")
    assert result.ok

    result = resize_siblings(result.tree, nested_id, 0, 40, 400)
    assert result.ok
    first, second = find_section(result.tree, nested_id).children
    assert first.id == first_id and first.widget_id == "clock-1"
    assert second.id == second_id
    assert first.flex == pytest.approx(0.6)
    assert second.flex == pytest.approx(0.4)
