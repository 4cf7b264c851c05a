"""
TopLists - social top-N list cataloging backend.

Ranked lists, follows with approval, likes, favorites, comments, radar
and the feed / leaderboard aggregations built on top of them.
"""

__version__ = "1.0.0"
