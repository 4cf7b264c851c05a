"""
Pytest Configuration and Fixtures

This module provides:
- Timestamped result file generation
- Shared fixtures over MemoryStorage (users, lists, follow edges)
- A Flask test client wired to the in-memory backend
"""

import pytest
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Dict, Any
from unittest.mock import patch

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tests.test_config import CONFIG, TEST_DATA, TEST_CATEGORIES

from toplists.auth import MockIdentityProvider
from toplists.models import FollowEdge, FollowStatus, ListItem, TopList, User
from toplists.storage import MemoryStorage


# =============================================================================
# TEST RESULT FILE
# =============================================================================

RESULTS_DIR = PROJECT_ROOT / CONFIG["test_output_dir"]


class TestResultCollector:
    """Collects test results for the report written after the run."""

    __test__ = False

    def __init__(self):
        self.results: List[Dict[str, Any]] = []
        self.start_time: datetime = None

    def add_result(self, nodeid: str, outcome: str, duration: float) -> None:
        filename = nodeid.split("::")[0].split("/")[-1]
        self.results.append({
            "nodeid": nodeid,
            "category": filename.replace("test_", "").replace(".py", ""),
            "outcome": outcome,
            "duration": duration,
        })

    def get_summary(self) -> Dict[str, int]:
        outcomes = [r["outcome"] for r in self.results]
        return {
            "total": len(outcomes),
            "passed": outcomes.count("passed"),
            "failed": outcomes.count("failed"),
            "skipped": outcomes.count("skipped"),
        }

    def report(self) -> str:
        summary = self.get_summary()
        lines = [
            "=" * 80,
            "TOPLISTS - TEST RESULTS REPORT",
            "=" * 80,
            f"Run Date:     {self.start_time:%Y-%m-%d %H:%M:%S}",
            f"Total Tests:  {summary['total']}",
            f"Passed:       {summary['passed']}",
            f"Failed:       {summary['failed']}",
            f"Skipped:      {summary['skipped']}",
            "",
        ]
        categories = sorted({r["category"] for r in self.results})
        for category in categories:
            info = TEST_CATEGORIES.get(category, {"name": category.replace("_", " ").title()})
            results = [r for r in self.results if r["category"] == category]
            passed = sum(1 for r in results if r["outcome"] == "passed")
            lines.append(f"{info['name']}: {passed}/{len(results)} passed")
            for r in results:
                if r["outcome"] == "failed":
                    lines.append(f"    FAILED {r['nodeid']}")
        return "\n".join(lines)


_collector = TestResultCollector()


def pytest_configure(config):
    """Register markers and start the collector."""
    config.addinivalue_line("markers", "web: Flask API tests")
    _collector.start_time = datetime.now()


def pytest_runtest_logreport(report):
    if report.when == "call":
        _collector.add_result(report.nodeid, report.outcome, report.duration)


def pytest_sessionfinish(session, exitstatus):
    """Write the report to a timestamped file."""
    if not _collector.results:
        return
    RESULTS_DIR.mkdir(exist_ok=True)
    filepath = RESULTS_DIR / f"test_results_{datetime.now():%Y%m%d_%H%M%S}.txt"
    filepath.write_text(_collector.report())


# =============================================================================
# SHARED FIXTURES
# =============================================================================

@pytest.fixture
def base_time() -> datetime:
    return CONFIG["base_time"]


@pytest.fixture
def storage():
    """An empty in-memory backend."""
    return MemoryStorage()


@pytest.fixture
def users(storage) -> Dict[str, User]:
    """alice, bob, carol (public) and dave (private); ids equal usernames."""
    created = {}
    for username, is_public in TEST_DATA["users"].items():
        created[username] = storage.add_user(User(id=username, username=username, is_public=is_public))
    return created


@pytest.fixture
def make_list(storage, base_time):
    """
    Factory storing a list owned by ``owner``.

    ``minutes`` offsets created_at from base_time so ordering is explicit.
    ``items`` is a list of (name, rating) tuples.
    """
    def _make(owner, title="Lista", category="Libros", subcategory=None,
              items=None, minutes=0, image=""):
        if items is None:
            items = [("Uno", 5), ("Dos", 4), ("Tres", 3)]
        top_list = TopList(
            owner_id=owner,
            title=title,
            category=category,
            subcategory=subcategory,
            items=[
                ListItem(name=name, rank=rank, rating=rating, image_url=image)
                for rank, (name, rating) in enumerate(items, start=1)
            ],
            created_at=base_time + timedelta(minutes=minutes),
        )
        return storage.add_list(top_list)
    return _make


@pytest.fixture
def make_follow(storage, base_time):
    """Factory storing a follow edge follower -> followed."""
    def _make(follower, followed, status=FollowStatus.ACCEPTED, minutes=0):
        return storage.add_follow(FollowEdge(
            follower_id=follower,
            followed_id=followed,
            status=status,
            created_at=base_time + timedelta(minutes=minutes),
        ))
    return _make


@pytest.fixture
def identity():
    """Token -> user id table matching the users fixture."""
    return MockIdentityProvider(TEST_DATA["tokens"])


@pytest.fixture
def client(storage, identity):
    """Flask test client backed by the in-memory storage."""
    from web.app import app

    app.config["TESTING"] = True
    with patch("web.app.get_storage", return_value=storage), \
         patch("web.app.get_identity_provider", return_value=identity):
        with app.test_client() as test_client:
            yield test_client