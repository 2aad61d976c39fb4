"""
pow-lite — proof-of-work share search for lightweight mining clients.

Exposes the search loop and its data types; the header and target helpers
live in `pow_lite.crypto`.
"""

from .mining.search import Job, SearchConfig, SearchStats, Share, search

__version__ = "0.1.0"

__all__ = ["Job", "SearchConfig", "SearchStats", "Share", "search", "__version__"]
