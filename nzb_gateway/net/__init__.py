"""
Network Layer.

This package contains the HTTP fetcher used to retrieve NZB content from
indexers.
"""

from .fetcher import NzbFetcher

__all__ = ["NzbFetcher"]
