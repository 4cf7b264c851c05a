"""
Follow State Machine Tests

Covers toggle/accept/reject transitions, status reads and the counts
derived from follow edges.
"""

import pytest

from toplists.errors import InvalidOperation, NotFound
from toplists.models import FollowStatus
from toplists.social import FollowManager, NEUTRAL_STATUS


@pytest.fixture
def follows(storage, users):
    return FollowManager(storage)


class TestToggleFollow:
    """Tests for toggle_follow()."""

    def test_first_toggle_creates_pending_request(self, follows, storage):
        """
        GIVEN: No edge between alice and bob
        WHEN: alice toggles follow on bob
        THEN: A pending edge exists and status 'pending' is returned
        """
        result = follows.toggle_follow("alice", "bob")

        assert result == {"following": False, "status": "pending"}
        edge = storage.get_follow("alice", "bob")
        assert edge is not None
        assert edge.status is FollowStatus.PENDING

    def test_second_toggle_cancels_request(self, follows, storage):
        follows.toggle_follow("alice", "bob")

        result = follows.toggle_follow("alice", "bob")

        assert result == {"following": False, "status": None}
        assert storage.get_follow("alice", "bob") is None

    def test_toggle_on_accepted_edge_unfollows(self, follows, storage, make_follow):
        make_follow("alice", "bob")

        result = follows.toggle_follow("alice", "bob")

        assert result["status"] is None
        assert storage.get_follows(follower_id="alice") == []

    def test_self_follow_rejected(self, follows, storage):
        with pytest.raises(InvalidOperation, match="yourself"):
            follows.toggle_follow("alice", "alice")
        assert storage.get_follows() == []

    def test_edges_are_directed(self, follows, storage, make_follow):
        """bob -> alice does not affect alice -> bob."""
        make_follow("bob", "alice")

        follows.toggle_follow("alice", "bob")

        assert storage.get_follow("bob", "alice").is_accepted
        assert storage.get_follow("alice", "bob").is_pending

    def test_toggle_cycle_returns_to_pending(self, follows, storage):
        """
        GIVEN: alice requested bob and then cancelled
        WHEN: alice toggles a third time
        THEN: A fresh pending request is answered and stored
        """
        results = [follows.toggle_follow("alice", "bob") for _ in range(3)]

        assert results == [
            {"following": False, "status": "pending"},
            {"following": False, "status": None},
            {"following": False, "status": "pending"},
        ]
        assert storage.get_follow("alice", "bob").is_pending
        assert follows.get_status("alice", "bob")["status"] == "pending"

    def test_at_most_one_edge_per_pair(self, follows, storage):
        for _ in range(3):
            follows.toggle_follow("alice", "bob")

        assert len(storage.get_follows(follower_id="alice", followed_id="bob")) == 1


class TestAnswerRequests:
    """Tests for accept_follow_request() and reject_follow_request()."""

    def test_accept_turns_edge_accepted(self, follows, storage):
        follows.toggle_follow("alice", "dave")
        edge = storage.get_follow("alice", "dave")

        follows.accept_follow_request(edge.id, "dave")

        assert storage.get_follow("alice", "dave").is_accepted
        assert follows.get_status("alice", "dave") == {
            "isFollowing": True, "isPending": False, "status": "accepted",
        }

    def test_reject_deletes_edge(self, follows, storage):
        follows.toggle_follow("alice", "dave")
        edge = storage.get_follow("alice", "dave")

        follows.reject_follow_request(edge.id, "dave")

        assert storage.get_follow("alice", "dave") is None

    def test_new_request_allowed_after_reject(self, follows, storage):
        follows.toggle_follow("alice", "dave")
        follows.reject_follow_request(storage.get_follow("alice", "dave").id, "dave")

        assert follows.toggle_follow("alice", "dave")["status"] == "pending"

    def test_only_the_target_can_answer(self, follows, storage):
        """
        GIVEN: A pending request alice -> dave
        WHEN: bob (or alice herself) tries to accept it
        THEN: NotFound and the edge stays pending
        """
        follows.toggle_follow("alice", "dave")
        edge = storage.get_follow("alice", "dave")

        for intruder in ("bob", "alice"):
            with pytest.raises(NotFound):
                follows.accept_follow_request(edge.id, intruder)
            with pytest.raises(NotFound):
                follows.reject_follow_request(edge.id, intruder)

        assert storage.get_follow("alice", "dave").is_pending

    def test_accepting_accepted_edge_is_not_found(self, follows, make_follow):
        edge = make_follow("alice", "dave")

        with pytest.raises(NotFound):
            follows.accept_follow_request(edge.id, "dave")

    def test_unknown_request(self, follows):
        with pytest.raises(NotFound, match="Follow request not found"):
            follows.accept_follow_request("missing", "dave")


class TestStatus:
    """Tests for get_status()."""

    def test_anonymous_viewer_gets_neutral_status(self, follows):
        assert follows.get_status(None, "bob") == NEUTRAL_STATUS

    def test_no_edge_gets_neutral_status(self, follows):
        assert follows.get_status("alice", "bob") == NEUTRAL_STATUS

    def test_neutral_status_is_a_copy(self, follows):
        status = follows.get_status(None, "bob")
        status["isFollowing"] = True
        assert NEUTRAL_STATUS["isFollowing"] is False

    def test_pending_status(self, follows):
        follows.toggle_follow("alice", "bob")
        assert follows.get_status("alice", "bob") == {
            "isFollowing": False, "isPending": True, "status": "pending",
        }


class TestRequestLists:
    """Tests for pending/outgoing request listings."""

    def test_pending_requests_newest_first(self, follows, make_follow):
        make_follow("alice", "dave", status=FollowStatus.PENDING, minutes=1)
        make_follow("bob", "dave", status=FollowStatus.PENDING, minutes=2)
        make_follow("carol", "dave", status=FollowStatus.ACCEPTED, minutes=3)

        requests = follows.pending_requests("dave")

        assert [r["user"]["username"] for r in requests] == ["bob", "alice"]
        assert follows.pending_count("dave") == 2

    def test_outgoing_requests(self, follows, make_follow):
        edge = make_follow("alice", "dave", status=FollowStatus.PENDING)

        requests = follows.outgoing_requests("alice")

        assert len(requests) == 1
        assert requests[0]["requestId"] == edge.id
        assert requests[0]["user"]["id"] == "dave"
        assert requests[0]["createdAt"]

    def test_unknown_requester(self, follows, make_follow):
        make_follow("ghost", "dave", status=FollowStatus.PENDING)

        requests = follows.pending_requests("dave")

        assert requests[0]["user"] == {"id": "ghost", "username": "Unknown", "avatar": ""}


class TestCounts:
    """Counts only consider accepted edges."""

    def test_stats(self, follows, make_follow, make_list):
        make_follow("alice", "bob")
        make_follow("carol", "bob")
        make_follow("dave", "bob", status=FollowStatus.PENDING)
        make_follow("bob", "alice")
        make_list("bob", title="Una")
        make_list("bob", title="Otra")

        assert follows.stats("bob") == {"followers": 2, "following": 1, "lists": 2}

    def test_followers_and_following(self, follows, make_follow):
        make_follow("alice", "bob")
        make_follow("bob", "carol")
        make_follow("bob", "dave", status=FollowStatus.PENDING)

        assert [u["username"] for u in follows.followers("bob")] == ["alice"]
        assert [u["username"] for u in follows.following("bob")] == ["carol"]
