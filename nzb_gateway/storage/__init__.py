"""
Storage Layer.

This package handles all data persistence: the configuration file, the
search result store and the download history database.
"""

from .config_manager import ConfigManager
from .history import DownloadHistory
from .search_results import SearchResultStore

__all__ = ["ConfigManager", "DownloadHistory", "SearchResultStore"]
