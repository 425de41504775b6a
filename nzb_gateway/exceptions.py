"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class NzbGatewayError(Exception):
    """Base exception for all application-specific errors."""


class SearchResultNotFoundError(NzbGatewayError):
    """Raised when a GUID does not resolve to a known search result."""


class FetchError(NzbGatewayError):
    """
    Raised by the fetcher when content could not be retrieved from the origin
    (connection failure, timeout or non-2xx status).
    """


class NothingRetrievableError(NzbGatewayError):
    """Raised when none of the NZBs requested for a ZIP could be retrieved."""


class ArchiveAssemblyError(NzbGatewayError):
    """Raised when the ZIP container itself could not be written."""


class IndexerNotFoundError(NzbGatewayError):
    """Raised when a search result references an indexer that is not configured."""


class ConfigurationError(NzbGatewayError):
    """Raised for issues related to configuration loading or validation."""
