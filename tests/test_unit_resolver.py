"""
Unit tests for visibility resolution.

Tests cover:
- Preorder traversal with (sortOrder, id) child ordering
- Edge `when` gating and node visibility pruning of whole subtrees
- Idempotence and independence from declared edge order
- Graceful handling of dangling references, blank roots and cycles
- Path tag collection
"""

import itertools

import pytest

from option_tree.engine.resolver import resolve_visible_nodes, resolve_visible_path
from option_tree.schemas.option_tree import OptionTree

TRUE = {"op": "not", "arg": {"op": "truthy", "ref": "__never_set__"}}
FALSE = {"op": "truthy", "ref": "__never_set__"}


class TestEndToEnd:
    @pytest.mark.anyio
    async def test_branch_shown_when_condition_holds(self, branching_tree, make_selections):
        """Test that a satisfied edge condition shows the branch."""
        assert resolve_visible_nodes(branching_tree, make_selections(Q1="yes")) == ["Q1", "Q2"]

    @pytest.mark.anyio
    async def test_branch_hidden_when_condition_fails(self, branching_tree, make_selections):
        """Test that a failing edge condition hides the branch."""
        assert resolve_visible_nodes(branching_tree, make_selections(Q1="no")) == ["Q1"]

    @pytest.mark.anyio
    async def test_no_selections(self, branching_tree):
        """Test resolution with no selections at all."""
        assert resolve_visible_nodes(branching_tree, None) == ["Q1"]


class TestOrdering:
    @pytest.mark.anyio
    async def test_preorder_depth_first(self, make_tree, make_node):
        """Test preorder depth-first traversal."""
        tree = make_tree(
            ["A"],
            make_node("A", "B", "C"),
            make_node("B", "B1"),
            make_node("B1"),
            make_node("C"),
        )
        assert resolve_visible_nodes(tree, None) == ["A", "B", "B1", "C"]

    @pytest.mark.anyio
    async def test_children_sorted_by_sort_order_then_id(self, make_tree, make_node):
        """Test ordering by sortOrder, then id."""
        tree = make_tree(
            ["root"],
            make_node("root", "z", "b", "a", "m", kind="group"),
            make_node("z", sort_order=-1),
            make_node("b", sort_order=5),
            make_node("a", sort_order=5),
            make_node("m"),
        )
        # m has no sortOrder and sorts as 0
        assert resolve_visible_nodes(tree, None) == ["root", "z", "m", "a", "b"]

    @pytest.mark.anyio
    async def test_sibling_ids_compare_case_insensitively(self, make_tree, make_node):
        """Test that "a" sorts before "B" and only exact case variants fall back to code points."""
        tree = make_tree(
            ["P"],
            make_node("P", "b", "B", "a", kind="group"),
            make_node("a"),
            make_node("B"),
            make_node("b"),
        )
        assert resolve_visible_nodes(tree, None) == ["P", "a", "B", "b"]

    @pytest.mark.anyio
    async def test_roots_keep_array_order(self, make_tree, make_node):
        """Test that roots keep their array order."""
        tree = make_tree(["b", "a"], make_node("a"), make_node("b"))
        assert resolve_visible_nodes(tree, None) == ["b", "a"]

    @pytest.mark.anyio
    async def test_order_independent_of_declared_edge_order(self, make_tree, make_node):
        """Test that declared edge order never changes the result."""
        children = ["c1", "c2", "c3", "c4"]
        leaves = [
            make_node("c1", sort_order=2),
            make_node("c2", sort_order=1),
            make_node("c3", sort_order=2),
            make_node("c4"),
        ]
        results = {
            tuple(resolve_visible_nodes(make_tree(["P"], make_node("P", *perm), *leaves), None))
            for perm in itertools.permutations(children)
        }
        assert results == {("P", "c4", "c2", "c1", "c3")}

    @pytest.mark.anyio
    async def test_idempotent(self, make_tree, make_node, make_selections):
        """Test that resolving twice gives the same result."""
        tree = make_tree(
            ["A"],
            make_node("A", {"toNodeId": "B", "when": {"op": "truthy", "ref": "x"}}, "C"),
            make_node("B"),
            make_node("C", sort_order=-1),
        )
        selections = make_selections(x=True)
        first = resolve_visible_nodes(tree, selections)
        assert resolve_visible_nodes(tree, selections) == first == ["A", "C", "B"]


class TestPruning:
    @pytest.mark.anyio
    async def test_hidden_node_prunes_whole_subtree(self, make_tree, make_node):
        """Test that a hidden node hides its whole subtree."""
        tree = make_tree(
            ["A"],
            make_node("A", "B", condition=TRUE),
            make_node("B", "C", condition=FALSE),
            make_node("C", condition=TRUE),
        )
        assert resolve_visible_nodes(tree, None) == ["A"]

    @pytest.mark.anyio
    async def test_hidden_root(self, make_tree, make_node):
        """Test that a hidden root is skipped."""
        tree = make_tree(["A", "B"], make_node("A", condition=FALSE), make_node("B"))
        assert resolve_visible_nodes(tree, None) == ["B"]

    @pytest.mark.anyio
    async def test_failing_edge_does_not_hide_node_reached_elsewhere(
        self, make_tree, make_node
    ):
        """Test that a node stays visible if another edge reaches it."""
        tree = make_tree(
            ["A", "B"],
            make_node("A", {"toNodeId": "shared", "when": FALSE}),
            make_node("B", "shared"),
            make_node("shared"),
        )
        assert resolve_visible_nodes(tree, None) == ["A", "B", "shared"]


class TestDiamondsAndCycles:
    @pytest.mark.anyio
    async def test_shared_descendant_appears_once_at_first_position(self, make_tree, make_node):
        """Test that a shared descendant appears once, at its first position."""
        tree = make_tree(
            ["A"],
            make_node("A", "B", "C"),
            make_node("B", "D"),
            make_node("C", "D"),
            make_node("D"),
        )
        assert resolve_visible_nodes(tree, None) == ["A", "B", "D", "C"]

    @pytest.mark.anyio
    async def test_cycle_terminates(self, make_tree, make_node):
        """Test that a cycle does not loop forever."""
        tree = make_tree(["A"], make_node("A", "B"), make_node("B", "A"))
        assert resolve_visible_nodes(tree, None) == ["A", "B"]

    @pytest.mark.anyio
    async def test_self_loop_terminates(self, make_tree, make_node):
        """Test that a self loop does not loop forever."""
        tree = make_tree(["A"], make_node("A", "A"))
        assert resolve_visible_nodes(tree, None) == ["A"]

    @pytest.mark.anyio
    async def test_long_chain_does_not_hit_recursion_limit(self, make_tree, make_node):
        """Test that a very long chain resolves without recursion."""
        depth = 5000
        nodes = [make_node(f"n{i}", f"n{i + 1}") for i in range(depth)]
        nodes.append(make_node(f"n{depth}"))
        tree = make_tree(["n0"], *nodes)
        visible = resolve_visible_nodes(tree, None)
        assert len(visible) == depth + 1
        assert visible[-1] == f"n{depth}"


class TestUnvalidatedTrees:
    """The resolver degrades gracefully on trees that would fail validation."""

    @pytest.mark.anyio
    async def test_dangling_edge_is_skipped(self, make_tree, make_node):
        """Test that an edge to a missing node is skipped."""
        tree = make_tree(["A"], make_node("A", "missing", "B"), make_node("B"))
        assert resolve_visible_nodes(tree, None) == ["A", "B"]

    @pytest.mark.anyio
    async def test_missing_and_blank_roots_are_skipped(self, make_tree, make_node):
        """Test that missing and blank roots are skipped."""
        tree = make_tree(["", "  ", "ghost", "A"], make_node("A"))
        assert resolve_visible_nodes(tree, None) == ["A"]

    @pytest.mark.anyio
    async def test_empty_roots(self):
        """Test that an empty root list resolves to nothing."""
        tree = OptionTree.model_validate({"schemaVersion": 2, "rootNodeIds": [], "nodes": {}})
        assert resolve_visible_nodes(tree, None) == []


class TestPathTags:
    @pytest.mark.anyio
    async def test_tags_from_edges_that_reach_visible_nodes(
        self, make_tree, make_node, make_selections
    ):
        """Test that tags come from edges that reach visible nodes."""
        tree = make_tree(
            ["A"],
            make_node(
                "A",
                {"toNodeId": "B", "effectTag": "rush"},
                {"toNodeId": "C", "effectTag": "laminate", "when": FALSE},
                {"toNodeId": "D", "effectTag": "rush"},
            ),
            make_node("B"),
            make_node("C"),
            make_node("D", "E"),
            make_node("E", condition=FALSE),
        )
        resolved = resolve_visible_path(tree, make_selections())
        assert resolved.visible_node_ids == ["A", "B", "D"]
        assert resolved.path_tags == ["rush"]

    @pytest.mark.anyio
    async def test_tag_on_edge_to_hidden_node_is_not_collected(self, make_tree, make_node):
        """Test that a tag on an edge to a hidden node is dropped."""
        tree = make_tree(
            ["A"],
            make_node("A", {"toNodeId": "B", "effectTag": "grommets"}),
            make_node("B", condition=FALSE),
        )
        assert resolve_visible_path(tree, None).path_tags == []

    @pytest.mark.anyio
    async def test_visible_ids_match_resolve_visible_nodes(self, branching_tree, make_selections):
        """Test that resolve_visible_path agrees with resolve_visible_nodes."""
        selections = make_selections(Q1="yes")
        assert (
            resolve_visible_path(branching_tree, selections).visible_node_ids
            == resolve_visible_nodes(branching_tree, selections)
        )
