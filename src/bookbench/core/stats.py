# ABOUTME: Streaming latency aggregate for the query driver.
# ABOUTME: Folds per-operation wall times into a running sum without keeping samples.

import time
from collections import Counter
from dataclasses import dataclass, field


@dataclass
class LatencyStats:
    """Running totals since the driver started.

    Only the driver loop touches an instance, so no locking is needed.
    """

    ops: int = 0
    total_ns: int = 0
    errors: int = 0
    shape_counts: Counter = field(default_factory=Counter)
    started: float = field(default_factory=time.monotonic)

    def record(self, shape: int, elapsed_ns: int) -> None:
        """Fold one completed operation into the aggregate."""
        self.ops += 1
        self.total_ns += elapsed_ns
        self.shape_counts[shape] += 1

    def record_error(self) -> None:
        self.errors += 1

    @property
    def average_ms(self) -> float:
        """Mean latency in milliseconds; 0.0 before the first operation."""
        if self.ops == 0:
            return 0.0
        return self.total_ns / 1_000_000 / self.ops

    @property
    def elapsed_seconds(self) -> float:
        return time.monotonic() - self.started

    def due(self, every: int) -> bool:
        """Whether a rolling report is due after the latest operation."""
        return self.ops > 0 and self.ops % every == 0
