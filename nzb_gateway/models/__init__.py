"""
Data Models Layer.

This package contains the configuration model and the data structures
exchanged between the store, the download handler and its callers.
"""

from .config import GatewayConfig, IndexerConfig
from .download import (
    AccessResult,
    AccessSource,
    AccessType,
    DownloadRecord,
    DownloadType,
    NfoResult,
    NzbDownloadResult,
    SearchResult,
)
from .stats import BundleStats

__all__ = [
    "AccessResult",
    "AccessSource",
    "AccessType",
    "BundleStats",
    "DownloadRecord",
    "DownloadType",
    "GatewayConfig",
    "IndexerConfig",
    "NfoResult",
    "NzbDownloadResult",
    "SearchResult",
]
