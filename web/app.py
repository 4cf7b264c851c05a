"""
TopLists - JSON API

Flask app exposing lists, feeds, rankings, follows, engagement, profiles
and the radar under ``/api``.

Run with: python -m web.app
Or: python main.py serve
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Optional

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException

from toplists.auth import (
    IdentityProvider,
    MockIdentityProvider,
    SupabaseIdentityProvider,
    bearer_token,
)
from toplists.config import (
    DEBUG,
    LOG_LEVEL,
    SEARCH_LIMIT,
    TRENDING_DEFAULT_LIMIT,
    TRENDING_MAX_LIMIT,
    USER_TOP_LISTS_LIMIT,
    WEB_PORT,
    is_supabase_configured,
)
from toplists.criteria import all_categories, default_ratings
from toplists.errors import StorageFailure, TopListsError
from toplists.feeds import FeedAssembler
from toplists.logging_util import setup_logger
from toplists.ranking import top_categories, top_items, trending_radar_items
from toplists.services import EngagementService, ListService, ProfileService, RadarService
from toplists.social import FollowManager
from toplists.storage import Storage, create_storage

setup_logger("toplists", LOG_LEVEL)
logger = logging.getLogger("toplists.web")

app = Flask(__name__)

_storage: Optional[Storage] = None
_storage_lock = threading.Lock()


def get_storage() -> Storage:
    """Configured storage backend, created once on first use."""
    global _storage
    if _storage is None:
        with _storage_lock:
            if _storage is None:
                _storage = create_storage()
                logger.info("Using %s storage", _storage.name)
    return _storage


def get_identity_provider() -> IdentityProvider:
    """Supabase auth when configured; otherwise every caller is anonymous."""
    if is_supabase_configured():
        return SupabaseIdentityProvider()
    return MockIdentityProvider()


# =============================================================================
# Request helpers
# =============================================================================

def current_user_id(advisory: bool = False) -> Optional[str]:
    """
    Authenticated user id from the bearer token, or None.

    With ``advisory=True`` a failing identity provider is treated as an
    anonymous caller. Only status hints (follow, like and favorite status)
    use this.
    """
    token = bearer_token(request.headers.get("Authorization"))
    try:
        return get_identity_provider().resolve(token)
    except StorageFailure:
        if not advisory:
            raise
        logger.warning("Could not resolve caller for a status read, answering as anonymous")
        return None


def require_user_id() -> str:
    """
    Raises:
        Unauthorized: If the request carries no valid bearer token.
    """
    token = bearer_token(request.headers.get("Authorization"))
    return get_identity_provider().require(token)


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if data is not None else {}


def entries_json(entries) -> list:
    return [entry.to_dict() for entry in entries]


# =============================================================================
# Error handlers
# =============================================================================

@app.errorhandler(TopListsError)
def handle_domain_error(error: TopListsError):
    if isinstance(error, StorageFailure):
        logger.error("Storage failure on %s %s: %s", request.method, request.path, error, exc_info=error)
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"error": error.message}), error.status_code


@app.errorhandler(HTTPException)
def handle_http_error(error: HTTPException):
    return jsonify({"error": error.description}), error.code


@app.errorhandler(Exception)
def handle_unexpected_error(error: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# Lists and feeds
# =============================================================================

@app.route("/api/lists", methods=["GET"])
def api_lists():
    """All lists the caller may see, newest first."""
    entries = FeedAssembler(get_storage()).list_all(current_user_id())
    return jsonify({"lists": entries_json(entries)})


@app.route("/api/lists", methods=["POST"])
def api_create_list():
    user_id = require_user_id()
    storage = get_storage()
    created = ListService(storage).create_list(user_id, json_body())
    entry = FeedAssembler(storage).list_detail(created.id, user_id)
    return jsonify({"success": True, "list": entry.to_dict()})


@app.route("/api/lists/<list_id>", methods=["GET"])
def api_list_detail(list_id):
    entry = FeedAssembler(get_storage()).list_detail(list_id, current_user_id())
    return jsonify({"list": entry.to_dict()})


@app.route("/api/lists/<list_id>", methods=["PUT"])
def api_update_list(list_id):
    user_id = require_user_id()
    ListService(get_storage()).update_list(list_id, user_id, json_body())
    return jsonify({"success": True})


@app.route("/api/lists/<list_id>", methods=["DELETE"])
def api_delete_list(list_id):
    user_id = require_user_id()
    ListService(get_storage()).delete_list(list_id, user_id)
    return jsonify({"success": True})


@app.route("/api/my-lists")
def api_my_lists():
    user_id = require_user_id()
    return jsonify({"lists": entries_json(FeedAssembler(get_storage()).list_owned(user_id))})


@app.route("/api/following-feed")
def api_following_feed():
    user_id = require_user_id()
    return jsonify({"lists": entries_json(FeedAssembler(get_storage()).list_from_followed(user_id))})


@app.route("/api/favorites")
def api_favorites():
    user_id = require_user_id()
    return jsonify({"lists": entries_json(FeedAssembler(get_storage()).list_favorites(user_id))})


@app.route("/api/trending")
def api_trending():
    """Most liked public lists. Query: limit (default 20, capped)."""
    limit = request.args.get("limit", TRENDING_DEFAULT_LIMIT, type=int)
    limit = min(limit, TRENDING_MAX_LIMIT)
    entries = FeedAssembler(get_storage()).list_trending(limit)
    return jsonify({"lists": entries_json(entries)})


# =============================================================================
# Rankings and categories
# =============================================================================

@app.route("/api/top-items")
def api_top_items():
    category = request.args.get("category") or None
    ranked = top_items(get_storage(), category)
    return jsonify({
        "topItems": {
            name: [item.to_dict() for item in items]
            for name, items in ranked.items()
        }
    })


@app.route("/api/top-categories")
def api_top_categories():
    return jsonify({"topCategories": [c.to_dict() for c in top_categories(get_storage())]})


@app.route("/api/categories")
def api_categories():
    """Categories with their rating criteria and zeroed starting ratings."""
    categories = [
        {**c.to_dict(), "defaultRatings": default_ratings(c.category)}
        for c in all_categories()
    ]
    return jsonify({"categories": categories})


# =============================================================================
# Likes, favorites, comments
# =============================================================================

@app.route("/api/lists/<list_id>/like", methods=["POST"])
def api_toggle_like(list_id):
    user_id = require_user_id()
    return jsonify(EngagementService(get_storage()).toggle_like(user_id, list_id))


@app.route("/api/lists/<list_id>/likes")
def api_like_status(list_id):
    viewer_id = current_user_id(advisory=True)
    return jsonify(EngagementService(get_storage()).like_status(list_id, viewer_id))


@app.route("/api/lists/<list_id>/favorite", methods=["POST"])
def api_toggle_favorite(list_id):
    user_id = require_user_id()
    return jsonify(EngagementService(get_storage()).toggle_favorite(user_id, list_id))


@app.route("/api/lists/<list_id>/is-favorited")
def api_is_favorited(list_id):
    viewer_id = current_user_id(advisory=True)
    return jsonify({"isFavorited": EngagementService(get_storage()).is_favorited(list_id, viewer_id)})


@app.route("/api/lists/<list_id>/comments", methods=["GET"])
def api_comments(list_id):
    return jsonify({"comments": EngagementService(get_storage()).list_comments(list_id)})


@app.route("/api/lists/<list_id>/comments", methods=["POST"])
def api_add_comment(list_id):
    user_id = require_user_id()
    comment = EngagementService(get_storage()).add_comment(user_id, list_id, json_body().get("content"))
    return jsonify({"comment": comment})


@app.route("/api/comments/<comment_id>", methods=["DELETE"])
def api_delete_comment(comment_id):
    user_id = require_user_id()
    EngagementService(get_storage()).delete_comment(comment_id, user_id)
    return jsonify({"success": True})


# =============================================================================
# Follows and users
# =============================================================================

@app.route("/api/users/<user_id>/follow", methods=["POST"])
def api_toggle_follow(user_id):
    requester_id = require_user_id()
    return jsonify(FollowManager(get_storage()).toggle_follow(requester_id, user_id))


@app.route("/api/users/<user_id>/follow-status")
def api_follow_status(user_id):
    viewer_id = current_user_id(advisory=True)
    return jsonify(FollowManager(get_storage()).get_status(viewer_id, user_id))


@app.route("/api/users/<user_id>/followers")
def api_followers(user_id):
    return jsonify({"followers": FollowManager(get_storage()).followers(user_id)})


@app.route("/api/users/<user_id>/following")
def api_following(user_id):
    return jsonify({"following": FollowManager(get_storage()).following(user_id)})


@app.route("/api/users/<user_id>/stats")
def api_user_stats(user_id):
    return jsonify(FollowManager(get_storage()).stats(user_id))


@app.route("/api/users/<user_id>/profile")
def api_public_profile(user_id):
    return jsonify({"profile": ProfileService(get_storage()).public_profile(user_id)})


@app.route("/api/users/<user_id>/top-lists")
def api_user_top_lists(user_id):
    limit = request.args.get("limit", USER_TOP_LISTS_LIMIT, type=int)
    entries = FeedAssembler(get_storage()).user_top_lists(user_id, current_user_id(), limit)
    return jsonify({"lists": entries_json(entries)})


@app.route("/api/users/suggested")
def api_suggested_users():
    return jsonify({"users": ProfileService(get_storage()).suggested_users(current_user_id())})


@app.route("/api/follow-requests/pending")
def api_pending_requests():
    user_id = require_user_id()
    return jsonify({"requests": FollowManager(get_storage()).pending_requests(user_id)})


@app.route("/api/follow-requests/outgoing")
def api_outgoing_requests():
    user_id = require_user_id()
    return jsonify({"requests": FollowManager(get_storage()).outgoing_requests(user_id)})


@app.route("/api/follow-requests/count")
def api_pending_count():
    user_id = require_user_id()
    return jsonify({"count": FollowManager(get_storage()).pending_count(user_id)})


@app.route("/api/follow-requests/<request_id>/accept", methods=["POST"])
def api_accept_request(request_id):
    user_id = require_user_id()
    FollowManager(get_storage()).accept_follow_request(request_id, user_id)
    return jsonify({"success": True})


@app.route("/api/follow-requests/<request_id>/reject", methods=["POST"])
def api_reject_request(request_id):
    user_id = require_user_id()
    FollowManager(get_storage()).reject_follow_request(request_id, user_id)
    return jsonify({"success": True})


# =============================================================================
# Own profile and search
# =============================================================================

@app.route("/api/profile", methods=["GET"])
def api_profile():
    user_id = require_user_id()
    return jsonify({"profile": ProfileService(get_storage()).get_profile(user_id)})


@app.route("/api/profile", methods=["PUT"])
def api_update_profile():
    user_id = require_user_id()
    return jsonify({"profile": ProfileService(get_storage()).update_profile(user_id, json_body())})


@app.route("/api/profile/settings", methods=["PUT"])
def api_profile_settings():
    user_id = require_user_id()
    profile = ProfileService(get_storage()).update_settings(user_id, json_body())
    return jsonify({"success": True, "profile": profile})


@app.route("/api/search")
def api_search():
    """Search users and lists. Query: q."""
    results = ProfileService(get_storage()).search(
        request.args.get("q", ""),
        current_user_id(),
        SEARCH_LIMIT,
    )
    return jsonify(results)


# =============================================================================
# Radar
# =============================================================================

@app.route("/api/radar", methods=["GET"])
def api_radar():
    user_id = require_user_id()
    entries = RadarService(get_storage()).list_for(user_id)
    return jsonify({"radarItems": [e.to_dict() for e in entries]})


@app.route("/api/radar", methods=["POST"])
def api_add_radar():
    user_id = require_user_id()
    entry = RadarService(get_storage()).add(user_id, json_body())
    return jsonify({"radarItem": entry.to_dict()})


@app.route("/api/radar/<entry_id>", methods=["PUT"])
def api_update_radar(entry_id):
    user_id = require_user_id()
    entry = RadarService(get_storage()).update_notes(entry_id, user_id, json_body().get("notes"))
    return jsonify({"radarItem": entry.to_dict()})


@app.route("/api/radar/<entry_id>", methods=["DELETE"])
def api_delete_radar(entry_id):
    user_id = require_user_id()
    RadarService(get_storage()).remove(entry_id, user_id)
    return jsonify({"success": True})


@app.route("/api/radar/check")
def api_radar_check():
    user_id = require_user_id()
    result = RadarService(get_storage()).check(
        user_id,
        request.args.get("itemTitle"),
        request.args.get("category"),
    )
    return jsonify(result)


@app.route("/api/radar/trending")
def api_radar_trending():
    require_user_id()
    items = trending_radar_items(get_storage())
    return jsonify({"trendingItems": [i.to_dict() for i in items]})


if __name__ == "__main__":
    app.run(debug=DEBUG, port=WEB_PORT)
