"""
Builds the download links handed out for stored search results.
"""

from urllib.parse import urlencode

from nzb_gateway.models.config import GatewayConfig
from nzb_gateway.models.download import DownloadType

INTERNAL_ACCESS_SEGMENT = "user"
API_ACCESS_SEGMENT = "api"


def build_download_link(
    config: GatewayConfig,
    search_result_id: int,
    internal: bool,
    download_type: DownloadType = DownloadType.NZB,
) -> str:
    """
    Returns the link under which a search result can be downloaded from us.

    Internal links (used by our own UI) always point at the local address and
    never carry the API key. External links use the configured external URL
    unless API access is forced onto the local address, and carry the API key
    when one is configured.

    Args:
        config: Current configuration. Only read.
        search_result_id: The GUID of the stored search result.
        internal: Whether the link is for in-application use.
        download_type: Selects the 'getnzb' or 'gettorrent' path.

    Returns:
        The absolute URL as a string.
    """
    if internal:
        path = f"/{download_type.value}/{INTERNAL_ACCESS_SEGMENT}/{search_result_id}"
        return config.base_url + path

    if config.external_url and not config.use_local_url_for_api_access:
        base = config.external_url
    else:
        base = config.base_url

    link = f"{base}/{download_type.value}/{API_ACCESS_SEGMENT}/{search_result_id}"
    if config.api_key:
        link += "?" + urlencode({"apikey": config.api_key})
    return link
