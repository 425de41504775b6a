"""
Tracks how a ZIP bundling run went.
"""

import time
from dataclasses import dataclass, field


@dataclass
class BundleStats:
    """Counts for one bundling call. Reported, never used to fail the call."""

    requested: int = 0
    bundled: int = 0
    failed: int = 0
    total_size: int = 0
    _start_time: float = field(default_factory=time.monotonic, repr=False)

    def record_success(self, size: int) -> None:
        self.bundled += 1
        self.total_size += size

    def record_failure(self) -> None:
        self.failed += 1

    @property
    def elapsed_s(self) -> float:
        return time.monotonic() - self._start_time
