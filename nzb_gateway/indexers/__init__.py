"""
Indexer Layer.

This package talks to the indexers that produced the stored search results,
for auxiliary lookups such as NFOs.
"""

from .newznab import NewznabIndexer
from .registry import IndexerRegistry

__all__ = ["IndexerRegistry", "NewznabIndexer"]
