"""
nzb-gateway: resolves stored search results into NZB/torrent downloads,
keeps a download history and bundles several NZBs into one ZIP.
"""

__version__ = "1.0.0"
