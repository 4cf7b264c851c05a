"""
Engagement Tests

Likes, favorites and comments.
"""

import pytest

from toplists.errors import InvalidOperation, NotFound
from toplists.services import EngagementService


@pytest.fixture
def engagement(storage, users):
    return EngagementService(storage)


@pytest.fixture
def top_list(make_list):
    return make_list("alice", title="Libros")


class TestLikes:
    """Tests for toggle_like() and like_status()."""

    def test_toggle_adds_then_removes(self, engagement, top_list):
        assert engagement.toggle_like("bob", top_list.id) == {"liked": True, "likesCount": 1}
        assert engagement.toggle_like("bob", top_list.id) == {"liked": False, "likesCount": 0}

    def test_count_covers_all_users(self, engagement, top_list):
        engagement.toggle_like("bob", top_list.id)
        result = engagement.toggle_like("carol", top_list.id)

        assert result["likesCount"] == 2

    def test_status_for_viewer(self, engagement, top_list):
        engagement.toggle_like("bob", top_list.id)

        assert engagement.like_status(top_list.id, "bob") == {"likesCount": 1, "isLiked": True}
        assert engagement.like_status(top_list.id, "carol") == {"likesCount": 1, "isLiked": False}
        assert engagement.like_status(top_list.id, None)["isLiked"] is False

    def test_missing_list(self, engagement):
        with pytest.raises(NotFound):
            engagement.toggle_like("bob", "nope")


class TestFavorites:
    def test_toggle(self, engagement, top_list):
        assert engagement.toggle_favorite("bob", top_list.id) == {"favorited": True}
        assert engagement.is_favorited(top_list.id, "bob") is True

        assert engagement.toggle_favorite("bob", top_list.id) == {"favorited": False}
        assert engagement.is_favorited(top_list.id, "bob") is False

    def test_anonymous_is_not_favorited(self, engagement, top_list):
        assert engagement.is_favorited(top_list.id, None) is False

    def test_missing_list(self, engagement):
        with pytest.raises(NotFound):
            engagement.toggle_favorite("bob", "nope")


class TestComments:
    """Tests for comment CRUD."""

    def test_add_returns_author_card(self, engagement, top_list):
        comment = engagement.add_comment("bob", top_list.id, "  Muy buena  ")

        assert comment["content"] == "Muy buena"
        assert comment["user"]["username"] == "bob"
        assert comment["createdAt"]

    @pytest.mark.parametrize("content", ["", "   ", None, 42])
    def test_empty_content_rejected(self, engagement, top_list, content):
        with pytest.raises(InvalidOperation, match="empty"):
            engagement.add_comment("bob", top_list.id, content)

    def test_comment_on_missing_list(self, engagement):
        with pytest.raises(NotFound):
            engagement.add_comment("bob", "nope", "Hola")

    def test_list_comments_with_unknown_author(self, engagement, storage, top_list):
        engagement.add_comment("bob", top_list.id, "Uno")
        engagement.add_comment("ghost", top_list.id, "Dos")

        usernames = sorted(c["user"]["username"] for c in engagement.list_comments(top_list.id))

        assert usernames == ["Usuario", "bob"]

    def test_only_author_deletes(self, engagement, storage, top_list):
        comment = engagement.add_comment("bob", top_list.id, "Mío")

        with pytest.raises(NotFound, match="unauthorized"):
            engagement.delete_comment(comment["id"], "alice")

        engagement.delete_comment(comment["id"], "bob")
        assert storage.get_comments(top_list.id) == []
