"""
Looks up configured indexers by name.
"""

import logging

from nzb_gateway.exceptions import IndexerNotFoundError
from nzb_gateway.models.config import GatewayConfig

from .newznab import NewznabIndexer

log = logging.getLogger(__name__)


class IndexerRegistry:
    """Holds one NewznabIndexer per indexer section in the configuration."""

    def __init__(self, indexers: list[NewznabIndexer]):
        self._indexers = {indexer.name: indexer for indexer in indexers}

    @classmethod
    def from_config(cls, config: GatewayConfig) -> "IndexerRegistry":
        return cls(
            [
                NewznabIndexer(indexer_config, timeout_s=config.fetch_timeout)
                for indexer_config in config.indexers
            ]
        )

    def get_indexer_by_name(self, name: str) -> NewznabIndexer:
        try:
            return self._indexers[name]
        except KeyError:
            raise IndexerNotFoundError(
                f"Indexer '{name}' is not configured."
            ) from None

    @property
    def names(self) -> list[str]:
        return list(self._indexers)

    async def close(self) -> None:
        for indexer in self._indexers.values():
            await indexer.close()
