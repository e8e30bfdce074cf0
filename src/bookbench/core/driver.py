# ABOUTME: Query driver that hammers the books collection with a random read mix.
# ABOUTME: Times every operation and prints rolling latency reports until asked to stop.

import logging
import random
import signal
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum

import click
from pymongo.collection import Collection

from bookbench.core.queries import SHAPE_COUNT, QueryBounds, execute, plan_query
from bookbench.core.stats import LatencyStats
from bookbench.db.connection import (
    DEFAULT_COLLECTION,
    DEFAULT_DB_NAME,
    DEFAULT_URI,
    BackendConnectionError,
    is_fatal,
)

logger = logging.getLogger(__name__)

_STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class DriverState(Enum):
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclass(frozen=True)
class DriverConfig:
    """Tunables for the query driver."""

    uri: str = DEFAULT_URI
    db_name: str = DEFAULT_DB_NAME
    collection: str = DEFAULT_COLLECTION
    sleep_ms: int = 0
    stats_every: int = 200
    bounds: QueryBounds = field(default_factory=QueryBounds)
    max_ops: int | None = None
    seed: int | None = None

    @property
    def page_size(self) -> int:
        return self.bounds.page_size


class QueryDriver:
    """Runs one randomly chosen query shape per iteration, forever.

    The loop is single-threaded. `stop()` (usually from a signal handler)
    lets the current iteration finish, then the driver prints one final
    report and returns.
    """

    def __init__(
        self,
        collection: Collection,
        config: DriverConfig | None = None,
        *,
        emit: Callable[[str], None] = click.echo,
        rnd: random.Random | None = None,
    ) -> None:
        self._collection = collection
        self._config = config or DriverConfig()
        self._emit = emit
        self._rnd = rnd or random.Random(self._config.seed)
        self._state = DriverState.RUNNING
        self.stats = LatencyStats()

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is DriverState.RUNNING

    def stop(self) -> None:
        """Ask the loop to finish after the current iteration."""
        if self._state is DriverState.RUNNING:
            self._state = DriverState.STOPPING
            self._announce("\n[perf] finishing...")

    def _announce(self, line: str) -> None:
        try:
            self._emit(line)
        except Exception as exc:
            logger.warning("Could not print stop notice: %s", exc)

    @contextmanager
    def signal_handlers(self) -> Iterator[None]:
        """Route SIGINT and SIGTERM to stop() while the block runs."""
        previous = {sig: signal.getsignal(sig) for sig in _STOP_SIGNALS}

        def _handle(signum, frame):
            self.stop()

        for sig in _STOP_SIGNALS:
            signal.signal(sig, _handle)
        try:
            yield
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)

    def run(self) -> LatencyStats:
        """Drive queries until stopped or max_ops is reached.

        Returns:
            The final LatencyStats.

        Raises:
            BackendConnectionError: If the backend connection is lost.
        """
        config = self._config
        self._emit(
            f"[perf] target={config.db_name}.{config.collection} | "
            f"page={config.page_size} | delay={config.sleep_ms}ms"
        )
        self.stats = LatencyStats()
        reported = 0

        try:
            while self.running:
                self.step()

                if self.stats.ops != reported and self.stats.due(config.stats_every):
                    reported = self.stats.ops
                    self._emit(
                        f"[perf] ops={self.stats.ops} | avg={self.stats.average_ms:.2f} ms | "
                        f"wall={int(self.stats.elapsed_seconds)}s"
                    )

                if config.max_ops is not None and self.stats.ops >= config.max_ops:
                    self._state = DriverState.STOPPING

                if config.sleep_ms > 0 and self.running:
                    time.sleep(config.sleep_ms / 1000)
        finally:
            self._state = DriverState.STOPPED

        self._emit(
            f"[perf] fim. ops={self.stats.ops} | avg={self.stats.average_ms:.2f} ms"
        )
        return self.stats

    def step(self) -> int:
        """Plan, execute and time one query. Returns the shape that ran."""
        shape = self._rnd.randrange(SHAPE_COUNT)
        query = plan_query(shape, self._rnd, self._config.bounds)

        before = time.perf_counter_ns()
        try:
            execute(self._collection, query, self._emit)
        except Exception as exc:
            if is_fatal(exc):
                raise BackendConnectionError(f"Lost the backend: {exc}") from exc
            self.stats.record_error()
            logger.warning("Query shape %d failed: %s", shape, exc)
            return shape

        self.stats.record(shape, time.perf_counter_ns() - before)
        return shape
