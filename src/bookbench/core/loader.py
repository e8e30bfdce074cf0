# ABOUTME: Bulk loader that fills an empty books collection with synthetic documents.
# ABOUTME: Batches unordered insert_many calls, optionally across parallel writer threads.

import logging
import random
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from enum import Enum

import click
from pymongo.collection import Collection
from pymongo.errors import BulkWriteError, PyMongoError
from pymongo.write_concern import WriteConcern

from bookbench.core.synthetic import make_book, new_run_prefix
from bookbench.db.connection import BackendConnectionError, is_fatal

logger = logging.getLogger(__name__)

Emit = Callable[[str], None]


class WriteAck(str, Enum):
    """Write concern used for the bulk inserts."""

    ACKNOWLEDGED = "acknowledged"
    UNACKNOWLEDGED = "unacknowledged"


class LoaderConfigError(ValueError):
    """Raised when loader tunables are out of range."""


class PartitionError(Exception):
    """Raised when the sequence space cannot be split across workers exactly."""


@dataclass(frozen=True)
class LoaderConfig:
    """Tunables for a loader run. Defaults describe the serial variant."""

    total_books: int = 10_000_000
    batch_size: int = 10_000
    num_threads: int = 1
    write_ack: WriteAck = WriteAck.ACKNOWLEDGED
    exact_count: bool = False
    progress_every: int = 100_000
    verify_count: bool = True
    seed: int | None = None

    @classmethod
    def parallel(cls, **overrides: object) -> "LoaderConfig":
        """The max-throughput preset: 8 writers, 50k batches, fire-and-forget writes."""
        preset = cls(
            batch_size=50_000,
            num_threads=8,
            write_ack=WriteAck.UNACKNOWLEDGED,
        )
        return replace(preset, **overrides)  # type: ignore[arg-type]

    def validate(self) -> None:
        if self.total_books < 0:
            raise LoaderConfigError(f"total_books must be >= 0, got {self.total_books}")
        if self.batch_size < 1:
            raise LoaderConfigError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.num_threads < 1:
            raise LoaderConfigError(f"num_threads must be >= 1, got {self.num_threads}")
        if self.progress_every < 1:
            raise LoaderConfigError(
                f"progress_every must be >= 1, got {self.progress_every}"
            )


@dataclass
class WorkerResult:
    """What one writer managed to do over its range."""

    worker_id: int
    submitted: int = 0
    inserted: int = 0
    failed: int = 0
    failed_batches: int = 0


@dataclass
class LoadResult:
    """Summary of a loader run."""

    skipped: bool = False
    existing: int = 0
    requested: int = 0
    inserted: int = 0
    failed: int = 0
    failed_batches: int = 0
    elapsed: float = 0.0
    run_prefix: int | None = None
    final_count: int | None = None
    count_mismatch: bool = False

    @property
    def throughput(self) -> float:
        """Documents per second over the whole run."""
        if self.elapsed <= 0:
            return float(self.inserted)
        return self.inserted / self.elapsed


def partition(total: int, workers: int) -> list[range]:
    """Split [0, total) into `workers` contiguous ranges.

    Every range has total // workers elements except the last, which absorbs
    the remainder.

    Raises:
        PartitionError: If the ranges would not tile [0, total) exactly.
    """
    if workers < 1:
        raise PartitionError(f"Cannot partition across {workers} workers")

    per_worker = total // workers
    ranges = [
        range(
            worker * per_worker,
            total if worker == workers - 1 else (worker + 1) * per_worker,
        )
        for worker in range(workers)
    ]

    contiguous = all(
        prev.stop == nxt.start for prev, nxt in zip(ranges, ranges[1:])
    )
    if (
        ranges[0].start != 0
        or ranges[-1].stop != total
        or not contiguous
        or sum(len(r) for r in ranges) != total
    ):
        raise PartitionError(f"Bad partition of {total} across {workers}: {ranges}")
    return ranges


class BulkLoader:
    """Populates an empty collection with `total_books` synthetic books.

    Workers share the collection handle but nothing else: each owns its
    random source and its own counters, which are merged once all writers
    have finished.
    """

    def __init__(
        self,
        collection: Collection,
        config: LoaderConfig | None = None,
        *,
        emit: Emit = click.echo,
        run_prefix: int | None = None,
    ) -> None:
        self._collection = collection
        self._config = config or LoaderConfig()
        self._emit = emit
        self._run_prefix = run_prefix
        self._abort = threading.Event()

    @property
    def config(self) -> LoaderConfig:
        return self._config

    def run(self) -> LoadResult:
        """Load the collection unless it already holds data.

        Returns:
            LoadResult describing the run, with skipped=True when the
            collection was non-empty.

        Raises:
            LoaderConfigError: If the config is out of range.
            PartitionError: If work partitioning breaks its invariant.
            BackendConnectionError: On connection-level backend failures.
        """
        config = self._config
        config.validate()

        existing = self._count_existing()
        if existing > 0:
            message = f"Database already contains {existing} books. Skipping initialization."
            logger.info(message)
            self._emit(message)
            return LoadResult(skipped=True, existing=existing)

        ranges = partition(config.total_books, config.num_threads)

        if self._run_prefix is None:
            seeded = random.Random(config.seed) if config.seed is not None else None
            self._run_prefix = new_run_prefix(seeded)

        self._emit(f"Initializing database with {config.total_books} random books...")
        logger.info(
            "Loading %d books: batch=%d threads=%d ack=%s prefix=%d",
            config.total_books,
            config.batch_size,
            config.num_threads,
            config.write_ack.value,
            self._run_prefix,
        )

        target = self._write_collection()
        started = time.monotonic()

        if config.num_threads == 1:
            worker_results = [self._load_range(target, 0, ranges[0], random.Random(config.seed))]
        else:
            worker_results = self._load_parallel(target, ranges)

        result = LoadResult(
            requested=config.total_books,
            elapsed=time.monotonic() - started,
            run_prefix=self._run_prefix,
        )
        for worker in worker_results:
            result.inserted += worker.inserted
            result.failed += worker.failed
            result.failed_batches += worker.failed_batches

        if config.verify_count:
            self._verify(result)

        self._emit(
            f"Successfully initialized {result.inserted} books "
            f"in {result.elapsed:.0f} seconds!"
        )
        self._emit(f"Throughput: {result.throughput:.0f} docs/second")
        if result.failed:
            self._emit(
                f"{result.failed} document(s) in {result.failed_batches} batch(es) failed to insert"
            )
        return result

    def _count_existing(self) -> int:
        # estimated_document_count reads collection metadata; exact counts scan.
        try:
            if self._config.exact_count:
                return self._collection.count_documents({})
            return self._collection.estimated_document_count()
        except PyMongoError as exc:
            raise BackendConnectionError(f"Cannot count existing books: {exc}") from exc

    def _write_collection(self) -> Collection:
        if self._config.write_ack is WriteAck.UNACKNOWLEDGED:
            return self._collection.with_options(write_concern=WriteConcern(w=0))
        return self._collection

    def _load_parallel(self, target: Collection, ranges: list[range]) -> list[WorkerResult]:
        seed_base = self._config.seed or 0
        results: list[WorkerResult] = []
        fatal: BaseException | None = None

        with ThreadPoolExecutor(
            max_workers=len(ranges), thread_name_prefix="bookbench-writer"
        ) as executor:
            try:
                futures = [
                    executor.submit(
                        self._load_range,
                        target,
                        worker_id,
                        span,
                        random.Random(seed_base + worker_id),
                    )
                    for worker_id, span in enumerate(ranges)
                ]
                for future in futures:
                    try:
                        results.append(future.result())
                    except BackendConnectionError as exc:
                        if fatal is None:
                            fatal = exc
            except BaseException:
                # Interrupts and unexpected worker errors stop every writer.
                self._abort.set()
                executor.shutdown(wait=True, cancel_futures=True)
                raise

        if fatal is not None:
            raise fatal
        return results

    def _load_range(
        self,
        target: Collection,
        worker_id: int,
        span: range,
        rnd: random.Random,
    ) -> WorkerResult:
        """Generate and insert the documents for one worker's sequence range."""
        config = self._config
        result = WorkerResult(worker_id=worker_id)
        total_for_worker = len(span)
        batch: list[dict] = []

        try:
            for sequence in span:
                batch.append(make_book(rnd, self._run_prefix, sequence).to_document())
                if len(batch) == config.batch_size:
                    if not self._flush_and_report(target, batch, result, total_for_worker):
                        return result
                    batch = []

            if batch:
                self._flush_and_report(target, batch, result, total_for_worker)
        except BaseException:
            self._abort.set()
            raise
        return result

    def _flush_and_report(
        self,
        target: Collection,
        batch: list[dict],
        result: WorkerResult,
        total_for_worker: int,
    ) -> bool:
        """Insert one batch and emit progress. Returns False once the run is aborted."""
        if self._abort.is_set():
            return False

        before = result.submitted
        ok = self._flush(target, batch, result)
        done = result.submitted

        if self._config.num_threads == 1:
            every = self._config.progress_every
            if done // every > before // every or done == total_for_worker:
                self._report(f"Inserted {done}/{total_for_worker} books")
        elif ok:
            percent = done * 100.0 / total_for_worker if total_for_worker else 100.0
            self._report(
                f"Thread {result.worker_id} progress: "
                f"{done}/{total_for_worker} ({percent:.2f}%)"
            )
        return True

    def _flush(self, target: Collection, batch: list[dict], result: WorkerResult) -> bool:
        """Submit a batch with an unordered insert_many.

        Per-batch failures are counted and logged; only connection-level
        failures abort the run.
        """
        result.submitted += len(batch)
        try:
            target.insert_many(batch, ordered=False)
        except BulkWriteError as exc:
            write_errors = exc.details.get("writeErrors", [])
            inserted = exc.details.get("nInserted", len(batch) - len(write_errors))
            result.inserted += inserted
            result.failed += len(batch) - inserted
            result.failed_batches += 1
            logger.warning(
                "Worker %d: %d of %d documents failed in batch: %s",
                result.worker_id,
                len(batch) - inserted,
                len(batch),
                exc,
            )
            return False
        except PyMongoError as exc:
            if is_fatal(exc):
                self._abort.set()
                raise BackendConnectionError(
                    f"Worker {result.worker_id} lost the backend: {exc}"
                ) from exc
            result.failed += len(batch)
            result.failed_batches += 1
            logger.warning(
                "Worker %d: batch of %d documents failed: %s",
                result.worker_id,
                len(batch),
                exc,
            )
            return False

        result.inserted += len(batch)
        return True

    def _report(self, line: str) -> None:
        try:
            self._emit(line)
        except Exception as exc:
            logger.warning("Progress report failed: %s", exc)

    def _verify(self, result: LoadResult) -> None:
        """Compare the final collection size with what we believe was inserted."""
        try:
            result.final_count = self._collection.count_documents({})
        except PyMongoError as exc:
            if is_fatal(exc):
                raise BackendConnectionError(f"Cannot verify final count: {exc}") from exc
            logger.warning("Could not verify final count: %s", exc)
            return

        if result.final_count == result.inserted:
            return

        if self._config.write_ack is WriteAck.UNACKNOWLEDGED:
            logger.warning(
                "Collection holds %d books, %d were submitted (unacknowledged writes)",
                result.final_count,
                result.inserted,
            )
            return

        result.count_mismatch = True
        logger.error(
            "Collection holds %d books but %d inserts were acknowledged",
            result.final_count,
            result.inserted,
        )
