"""
Utilities for naming files derived from search result titles.
"""

from pathvalidate import sanitize_filename

NZB_EXTENSION = ".nzb"
# Most filesystems limit a single path component to 255 bytes
MAX_FILENAME_BYTES = 255


def _fit(stem: str, suffix: str) -> str:
    """Cuts `stem` so that `stem + suffix` fits into MAX_FILENAME_BYTES."""
    budget = MAX_FILENAME_BYTES - len(suffix.encode("utf-8"))
    encoded = stem.encode("utf-8")
    if len(encoded) > budget:
        stem = encoded[:budget].decode("utf-8", "ignore").rstrip(" .") or "nzb"
    return f"{stem}{suffix}"


def artifact_name(title: str, taken: set[str], extension: str = NZB_EXTENSION) -> str:
    """
    Builds a filesystem-safe file name for a title that is unique within `taken`.

    The returned name is added to `taken`. Repeated titles get ' (2)', ' (3)', ...
    appended before the extension. Long titles are shortened so the whole name,
    suffix included, stays within MAX_FILENAME_BYTES.
    """
    stem = sanitize_filename(title, platform="universal").strip() or "nzb"
    name = _fit(stem, extension)
    counter = 2
    while name.lower() in taken:
        name = _fit(stem, f" ({counter}){extension}")
        counter += 1
    taken.add(name.lower())
    return name
