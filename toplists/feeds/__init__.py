"""
Feeds module.

Assembles the visibility-filtered list views.
"""

from toplists.feeds.assembler import FeedAssembler

__all__ = ["FeedAssembler"]
