"""Unit tests for the resolved display cache on line item selections."""

import pytest

from option_tree.engine.canonicalizer import tree_fingerprint
from option_tree.schemas.selections import ResolvedCache
from option_tree.services.resolved_cache import is_resolved_cache_current, refresh_resolved_cache


class TestRefreshResolvedCache:
    @pytest.mark.anyio
    async def test_populates_cache(self, branching_tree, make_selections):
        """Test that the resolved cache is populated."""
        updated = refresh_resolved_cache(branching_tree, make_selections(Q1="yes"))
        assert updated.resolved.visible_node_ids == ["Q1", "Q2"]
        assert updated.resolved.path_tags == []
        assert updated.resolved.tree_fingerprint == tree_fingerprint(branching_tree)

    @pytest.mark.anyio
    async def test_does_not_mutate_input(self, branching_tree, make_selections):
        """Test that the input selections are not mutated."""
        selections = make_selections(Q1="yes")
        refresh_resolved_cache(branching_tree, selections)
        assert selections.resolved is None

    @pytest.mark.anyio
    async def test_cache_is_written_to_document(self, branching_tree, make_selections):
        """Test that the cache is written to the selections document."""
        doc = refresh_resolved_cache(branching_tree, make_selections(Q1="no")).to_document()
        assert doc["selected"] == {"Q1": {"value": "no"}}
        assert doc["resolved"]["visibleNodeIds"] == ["Q1"]
        assert doc["resolved"]["treeFingerprint"] == tree_fingerprint(branching_tree)


class TestIsResolvedCacheCurrent:
    @pytest.mark.anyio
    async def test_fresh_cache_is_current(self, branching_tree, make_selections):
        """Test that a freshly written cache is current."""
        updated = refresh_resolved_cache(branching_tree, make_selections(Q1="yes"))
        assert is_resolved_cache_current(branching_tree, updated) is True

    @pytest.mark.anyio
    async def test_missing_cache_is_not_current(self, branching_tree, make_selections):
        """Test that a missing cache is not current."""
        assert is_resolved_cache_current(branching_tree, make_selections(Q1="yes")) is False

    @pytest.mark.anyio
    async def test_stale_after_selection_change(self, branching_tree, make_selections):
        """Test that changing a selection makes the cache stale."""
        updated = refresh_resolved_cache(branching_tree, make_selections(Q1="yes"))
        updated.selected["Q1"].value = "no"
        assert is_resolved_cache_current(branching_tree, updated) is False

    @pytest.mark.anyio
    async def test_stale_after_tree_change(self, branching_tree_doc, make_selections):
        """Test that changing the tree makes the cache stale."""
        from option_tree.schemas.option_tree import parse_option_tree

        tree = parse_option_tree(branching_tree_doc)
        updated = refresh_resolved_cache(tree, make_selections(Q1="yes"))

        branching_tree_doc["nodes"]["Q2"]["label"] = "Renamed"
        assert is_resolved_cache_current(parse_option_tree(branching_tree_doc), updated) is False

    @pytest.mark.anyio
    async def test_cache_without_fingerprint_is_not_current(
        self, branching_tree, make_selections
    ):
        """Test that a cache without a fingerprint is not current."""
        selections = make_selections(Q1="yes")
        selections.resolved = ResolvedCache(visible_node_ids=["Q1", "Q2"], path_tags=[])
        assert is_resolved_cache_current(branching_tree, selections) is False
