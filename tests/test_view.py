"""
Tests for the Cluster View

These tests verify the ClusterView class:
- rotate(): deterministic member rotation
- adopt_leader_hint(): leader redirects
- resolve(): URL building against the preferred member

Run with: python -m pytest tests/test_view.py -v
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from etcd_client.cluster.view import ClusterView
from etcd_client.errors import RedirectError


class TestConstruction:
    """Test building a view from configured members."""

    def test_preferred_starts_at_first_member(self, view: ClusterView, members):
        assert view.preferred == members[0]

    def test_members_keep_configured_order(self, view: ClusterView, members):
        assert view.machines == tuple(members)
        assert len(view) == 3

    def test_duplicates_and_trailing_slashes_dropped(self):
        view = ClusterView(["http://a:4001/", "http://b:4001", "http://a:4001", " http://b:4001/ "])
        assert view.machines == ("http://a:4001", "http://b:4001")

    def test_empty_member_list_rejected(self):
        with pytest.raises(ValueError):
            ClusterView([])

    def test_blank_members_ignored(self):
        with pytest.raises(ValueError):
            ClusterView(["", "  "])


class TestRotate:
    """Test rotate(retry_count)."""

    def test_rotate_is_modulo_member_count(self, view: ClusterView, members):
        """rotate(r) == members[r % len(members)] for every r."""
        for retry in range(25):
            assert view.rotate(retry) == members[retry % len(members)]
            assert view.preferred == members[retry % len(members)]

    def test_rotate_cycles_through_all_members(self, view: ClusterView, members):
        seen = {view.rotate(retry) for retry in range(1, len(members) + 1)}
        assert seen == set(members)

    def test_rotate_is_reproducible(self, members):
        first = ClusterView(members)
        second = ClusterView(members)
        assert [first.rotate(r) for r in range(10)] == [second.rotate(r) for r in range(10)]

    def test_single_member_always_itself(self):
        view = ClusterView(["http://solo:4001"])
        assert all(view.rotate(r) == "http://solo:4001" for r in range(5))


class TestAdoptLeaderHint:
    """Test adopting redirect targets as the preferred member."""

    def test_adopts_scheme_and_host(self, view: ClusterView):
        endpoint = view.adopt_leader_hint("http://m2:4001/v2/keys/foo?recursive=true")
        assert endpoint == "http://m2:4001"
        assert view.preferred == "http://m2:4001"

    def test_leader_outside_member_list_accepted(self, view: ClusterView, members):
        view.adopt_leader_hint("https://leader.example:2379/v2/keys/foo")
        assert view.preferred == "https://leader.example:2379"
        # Membership itself never changes
        assert view.machines == tuple(members)

    def test_rotation_folds_back_into_members(self, view: ClusterView, members):
        view.adopt_leader_hint("http://elsewhere:4001/v2/keys/foo")
        assert view.rotate(1) == members[1]

    @pytest.mark.parametrize("location", ["/v2/keys/foo", "m2:4001", "", "http://[bad/v2/keys/foo"])
    def test_unusable_location_rejected(self, view: ClusterView, members, location):
        with pytest.raises(RedirectError):
            view.adopt_leader_hint(location)
        assert view.preferred == members[0]


class TestResolve:
    """Test URL resolution."""

    def test_resolve_against_preferred(self, view: ClusterView):
        assert view.resolve("keys/foo") == "http://m1:4001/v2/keys/foo"

    def test_resolve_follows_rotation(self, view: ClusterView):
        view.rotate(2)
        assert view.resolve("keys/foo?recursive=true") == "http://m3:4001/v2/keys/foo?recursive=true"

    def test_resolve_custom_api_version(self, members):
        view = ClusterView(members, api_version="v3alpha")
        assert view.resolve("/keys/foo") == "http://m1:4001/v3alpha/keys/foo"


class TestConcurrentUpdates:
    """Test the preferred member under concurrent writers."""

    def test_concurrent_rotation_and_redirects(self, view: ClusterView, members):
        """Concurrent updates never leave the preferred member invalid."""
        leader = "http://leader:4001"
        valid = set(members) | {leader}
        barrier = threading.Barrier(8)

        def worker(worker_id: int) -> None:
            barrier.wait()
            for retry in range(500):
                if worker_id % 2:
                    view.rotate(retry)
                else:
                    view.adopt_leader_hint(f"{leader}/v2/keys/{retry}")
                assert view.preferred in valid

        with ThreadPoolExecutor(max_workers=8) as pool:
            for future in [pool.submit(worker, i) for i in range(8)]:
                future.result()

        assert view.preferred in valid
        assert view.machines == tuple(members)
