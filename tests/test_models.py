"""
Tests for the data models.

Covers validation in __post_init__, derived properties and the JSON
payloads the API returns.
"""

from datetime import datetime, timezone

import pytest

from toplists.models import (
    Comment,
    DEFAULT_AVATAR_URL,
    FeedEntry,
    FollowEdge,
    FollowStatus,
    ListItem,
    RadarEntry,
    TopList,
    User,
    parse_timestamp,
    subtract_months,
)


class TestUser:
    """Tests for the User model."""

    def test_defaults(self):
        user = User(username="alice")
        assert user.id
        assert user.avatar_url == DEFAULT_AVATAR_URL
        assert user.is_public is True

    def test_empty_username_rejected(self):
        with pytest.raises(ValueError, match="username"):
            User(username="  ")

    @pytest.mark.parametrize("flag,expected", [(True, True), (None, True), (False, False)])
    def test_unset_privacy_counts_as_public(self, flag, expected):
        assert User(username="x", is_public=flag).is_profile_public is expected

    def test_public_profile_hides_email(self):
        user = User(id="u1", username="alice", email="a@example.com", is_public=False)

        public = user.to_profile_dict()
        private = user.to_profile_dict(include_private=True)

        assert "email" not in public
        assert private["email"] == "a@example.com"
        assert private["is_public"] is False


class TestListItem:
    """Tests for ListItem validation."""

    @pytest.mark.parametrize("rating", [-0.5, 10.5])
    def test_rating_out_of_range(self, rating):
        with pytest.raises(ValueError, match="rating"):
            ListItem(name="Dune", rating=rating)

    def test_rank_must_be_positive(self):
        with pytest.raises(ValueError, match="rank"):
            ListItem(name="Dune", rank=0)

    def test_normalized_name(self):
        assert ListItem(name="  Dune ").normalized_name == "dune"

    def test_blank_name_is_not_named(self):
        assert ListItem(name="   ").has_name is False


class TestTopList:
    """Tests for the TopList model."""

    def test_items_sorted_by_rank_and_linked(self):
        top_list = TopList(
            owner_id="u1",
            title="Libros",
            items=[ListItem(name="B", rank=2), ListItem(name="A", rank=1)],
        )
        assert [i.name for i in top_list.items] == ["A", "B"]
        assert all(i.list_id == top_list.id for i in top_list.items)

    def test_missing_category_defaults_to_general(self):
        assert TopList(owner_id="u1", title="T", category="").category == "General"

    def test_empty_subcategory_is_none(self):
        assert TopList(owner_id="u1", title="T", subcategory="").subcategory is None

    def test_title_required(self):
        with pytest.raises(ValueError, match="title"):
            TopList(owner_id="u1", title=" ")

    def test_to_dict_uses_first_item_as_cover(self):
        top_list = TopList(
            owner_id="u1",
            title="T",
            subcategory="Terror",
            items=[ListItem(name="A", rank=1, image_url="https://img/a.jpg")],
        )
        data = top_list.to_dict()
        assert data["coverImage"] == "https://img/a.jpg"
        assert data["genre"] == "Terror"
        assert data["items"][0]["title"] == "A"


class TestFollowEdge:
    """Tests for FollowEdge."""

    def test_self_edge_rejected(self):
        with pytest.raises(ValueError, match="self-follow"):
            FollowEdge(follower_id="a", followed_id="a")

    def test_status_coerced_from_string(self):
        edge = FollowEdge(follower_id="a", followed_id="b", status="accepted")
        assert edge.status is FollowStatus.ACCEPTED
        assert edge.is_accepted and not edge.is_pending


class TestComment:
    """Tests for Comment payloads."""

    def test_blank_content_rejected(self):
        with pytest.raises(ValueError):
            Comment(list_id="l1", user_id="u1", content="   ")

    def test_unknown_author_fallback(self):
        data = Comment(list_id="l1", user_id="u1", content="hola").to_dict()
        assert data["user"]["username"] == "Usuario"
        assert "seed=u1" in data["user"]["avatar"]


class TestRadarEntry:
    """Tests for RadarEntry."""

    def test_title_and_category_required(self):
        with pytest.raises(ValueError, match="item_title"):
            RadarEntry(user_id="u1", item_title="", category="Libros")
        with pytest.raises(ValueError, match="category"):
            RadarEntry(user_id="u1", item_title="Dune", category="")

    def test_to_dict_is_camel_case(self):
        data = RadarEntry(user_id="u1", item_title="Dune", category="Libros").to_dict()
        assert data["itemTitle"] == "Dune"
        assert data["userId"] == "u1"
        assert "addedAt" in data


class TestFeedEntry:
    """Tests for FeedEntry payloads."""

    def test_author_and_counts(self):
        author = User(id="u1", username="alice")
        entry = FeedEntry(top_list=TopList(owner_id="u1", title="T"), author=author, likes=3, comments=1)

        data = entry.to_dict()

        assert data["author"]["userId"] == "u1"
        assert data["author"]["username"] == "alice"
        assert data["likes"] == 3
        assert data["comments"] == 1

    def test_missing_author_keeps_owner_id(self):
        entry = FeedEntry(top_list=TopList(owner_id="u1", title="T"), author=None)
        assert entry.to_dict()["author"] == {"userId": "u1"}


class TestTimestamps:
    """Tests for timestamp helpers."""

    def test_parse_z_suffix(self):
        assert parse_timestamp("2025-03-01T10:00:00Z").tzinfo is not None

    def test_parse_empty(self):
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None

    @pytest.mark.parametrize("value,microsecond", [
        ("2024-05-01T10:11:12.12345+00:00", 123450),
        ("2024-05-01T10:11:12.1+00:00", 100000),
        ("2024-05-01T10:11:12.1234567+00:00", 123456),
        ("2024-05-01T10:11:12.12345", 123450),
        ("2024-05-01T10:11:12.12Z", 120000),
    ])
    def test_parse_any_fraction_length(self, value, microsecond):
        """
        GIVEN: A backend timestamp whose fraction is not 3 or 6 digits
        WHEN: It is parsed
        THEN: The fraction is read as microseconds and the result is UTC
        """
        parsed = parse_timestamp(value)

        assert parsed == datetime(2024, 5, 1, 10, 11, 12, microsecond, tzinfo=timezone.utc)

    def test_parse_keeps_offset(self):
        parsed = parse_timestamp("2024-05-01T12:00:00.5+02:00")
        assert parsed == datetime(2024, 5, 1, 10, 0, 0, 500000, tzinfo=timezone.utc)

    def test_parse_garbage(self):
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")

    def test_subtract_months_clamps_day(self):
        value = datetime(2025, 5, 31, tzinfo=timezone.utc)
        assert subtract_months(value, 3) == datetime(2025, 2, 28, tzinfo=timezone.utc)

    def test_subtract_months_crosses_year(self):
        value = datetime(2025, 2, 10, tzinfo=timezone.utc)
        assert subtract_months(value, 3) == datetime(2024, 11, 10, tzinfo=timezone.utc)
