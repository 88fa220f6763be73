"""
twixter - A client for twtxt, the decentralised microblog for hackers.

This package reads twtxt feeds from local files and URLs, merges them into a
single reverse-chronological timeline, and appends new posts to the local feed.
"""

__version__ = "0.1.0"
