"""
Core download logic.

`NzbHandler` resolves a single search result into a redirect or downloaded
content and records the access. `ZipBundler` drives the handler over a list
of search results to build a ZIP, and `build_download_link` computes the
links under which search results are offered.
"""

from .bundler import ZipBundler, create_zip
from .handler import NzbHandler
from .links import build_download_link

__all__ = ["NzbHandler", "ZipBundler", "build_download_link", "create_zip"]
