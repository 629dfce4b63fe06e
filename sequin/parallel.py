"""
divide-and-conquer evaluation: split the source into partitions, run the
stage chain and the collector's accumulation per partition on a worker
pool, then merge the partial accumulators with the collector's combiner.
"""
from __future__ import annotations
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed, Future
from contextlib import contextmanager
from itertools import chain, islice
from .types import *
from .config import ParallelConfig
from .source import Source
from .stages import Stage, Limit, TakeWhile, run_stages, first_match, split_at_barrier

logger = logging.getLogger(__name__)


class _StopSignal:
    """
    shared by the partitions of one evaluation. workers poll it between
    pulls; a cancelled evaluation, or (for ordered searches) a match in an
    earlier partition, makes them stop producing.
    """

    def __init__(self):
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._earliest_match: Optional[int] = None

    def cancel(self) -> None:
        self._cancelled.set()

    def record_match(self, index: int) -> None:
        with self._lock:
            if self._earliest_match is None or index < self._earliest_match:
                self._earliest_match = index

    def should_stop(self, index: int) -> bool:
        if self._cancelled.is_set(): return True
        earliest = self._earliest_match
        return earliest is not None and index > earliest


class _PrefixQuota:
    """
    stops the partitions after index i once partitions 0..i have all
    finished and together produced at least 'needed' elements.
    """

    def __init__(self, partitions: int, needed: int, stop: _StopSignal):
        self._counts: List[Optional[int]] = [None] * partitions
        self._needed = needed
        self._stop = stop
        self._lock = threading.Lock()

    def finished(self, index: int, produced: int) -> None:
        with self._lock:
            self._counts[index] = produced
            total = 0
            for i, count in enumerate(self._counts):
                if count is None: return
                total += count
                if total >= self._needed:
                    self._stop.record_match(i)
                    return


def _cancellable(items: Iterator[T], should_stop: Callable[[], bool]) -> Iterator[T]:
    """checks the stop signal before every pull from the partition"""
    if should_stop(): return
    for item in items:
        yield item
        if should_stop(): return


def _combine_pairwise(partials: List[A], combiner: BinaryOperator[A]) -> A:
    """balanced combine tree; adjacent partials merge left-to-right so order is kept"""
    while len(partials) > 1:
        merged = [combiner(partials[i], partials[i + 1]) for i in range(0, len(partials) - 1, 2)]
        if len(partials) % 2:
            merged.append(partials[-1])
        partials = merged
    return partials[0]


class ParallelEngine:
    def __init__(self, config: ParallelConfig):
        self.config = config

    # --- partitioning ---

    def partition(self, source: Source[T]) -> List[Source[T]]:
        """split a source into leaf partitions, listed in encounter order"""
        if not source.finite:
            return [source]
        source.set_batch_unit(self.config.split_batch_unit)
        return self._split(source, 0)

    def _split(self, source: Source[T], depth: int) -> List[Source[T]]:
        size = source.estimate_size()
        if depth >= self.config.max_split_depth or (size is not None and size <= self.config.min_partition_size):
            return [source]
        prefix = source.try_split()
        if prefix is None:
            return [source]
        return self._split(prefix, depth + 1) + self._split(source, depth + 1)

    # --- worker pool ---

    @staticmethod
    def _guarded(task: Callable[[int, Source[T], _StopSignal], R], index: int,
                 partition: Source[T], stop: _StopSignal) -> R:
        try:
            return task(index, partition, stop)
        except Exception as e:
            logger.debug(f"partition {index} failed, cancelling siblings: {e!r}")
            stop.cancel()
            raise

    @contextmanager
    def _worker_pool(self, partitions: List[Source[T]], task: Callable[[int, Source[T], _StopSignal], R],
                     stop: Optional[_StopSignal] = None):
        stop = stop or _StopSignal()
        executor = ThreadPoolExecutor(max_workers=min(self.config.max_workers, len(partitions)),
                                      thread_name_prefix='sequin')
        try:
            futures: List[Future] = [executor.submit(self._guarded, task, index, partition, stop)
                                     for index, partition in enumerate(partitions)]
            yield futures
        finally:
            # reached on completion, early return or failure; idle workers stop either way
            stop.cancel()
            executor.shutdown(wait=True, cancel_futures=True)

    def _gather(self, partitions: List[Source[T]], stages: Sequence[Stage],
                bound: Optional[Stage] = None) -> Iterator[Any]:
        """
        run stages on every partition and join the outputs back in partition order.

        a Limit or TakeWhile bound is applied per partition as well: no partition
        keeps more than Limit.count elements, and a partition stops at its first
        element failing TakeWhile. either way, once the partitions up to some
        index settle the joined result, the partitions after it are stopped.
        """
        stop = _StopSignal()
        quota = _PrefixQuota(len(partitions), bound.count, stop) if isinstance(bound, Limit) else None

        def task(index, partition, stop):
            items = run_stages(stages, _cancellable(partition.iterate(), lambda: stop.should_stop(index)))
            if isinstance(bound, Limit):
                chunk = list(islice(items, bound.count))
                quota.finished(index, len(chunk))
                return chunk, False
            if isinstance(bound, TakeWhile):
                chunk = []
                for item in items:
                    if not bound.predicate(item):
                        stop.record_match(index)
                        return chunk, True
                    chunk.append(item)
                return chunk, False
            return list(items), False

        chunks = []
        with self._worker_pool(partitions, task, stop) as futures:
            produced = 0
            for future in futures:
                chunk, cut = future.result()
                chunks.append(chunk)
                produced += len(chunk)
                if cut or (quota is not None and produced >= bound.count):
                    break
        return chain.from_iterable(chunks)

    def _joined(self, partitions: List[Source[T]], prefix: Sequence[Stage], tail: Sequence[Stage]) -> Iterator[Any]:
        """the partitionable prefix runs per partition; the tail runs sequentially over the joined output"""
        logger.debug(f"barrier at {type(tail[0]).__name__}; joining {len(partitions)} partitions before it")
        bound = tail[0] if isinstance(tail[0], (Limit, TakeWhile)) else None
        joined = self._gather(partitions, prefix, bound)
        if isinstance(bound, TakeWhile):
            # already applied while gathering
            tail = tail[1:]
        return run_stages(tail, joined)

    # --- terminals ---

    def collect(self, source: Source[T], stages: Sequence[Stage], collector: 'Collector[Any, A, R]',
                ordered: bool = True) -> R:
        partitions = self.partition(source)
        if len(partitions) == 1:
            logger.debug(f"{type(source).__name__} did not split; evaluating sequentially")
            return collector.evaluate(run_stages(stages, partitions[0].iterate()))

        prefix, tail = split_at_barrier(stages)
        if tail:
            return collector.evaluate(self._joined(partitions, prefix, tail))

        logger.debug(f"collecting over {len(partitions)} partitions (ordered={ordered})")

        def task(index, partition, stop):
            return collector.fold(run_stages(stages, _cancellable(partition.iterate(), lambda: stop.should_stop(index))))

        with self._worker_pool(partitions, task) as futures:
            completed = futures if ordered else as_completed(futures)
            partials = [future.result() for future in completed]
        return collector.finish(_combine_pairwise(partials, collector.combiner))

    def search(self, source: Source[T], stages: Sequence[Stage], predicate: Optional[Predicate[Any]] = None,
               ordered: bool = True) -> Option[Any]:
        """
        find a produced element matching predicate (any element when none).
        ordered searches return the match from the earliest partition; unordered
        searches return whichever partition matches first and cancel the rest.
        """
        partitions = self.partition(source)
        if len(partitions) == 1:
            logger.debug(f"{type(source).__name__} did not split; searching sequentially")
            return first_match(run_stages(stages, partitions[0].iterate()), predicate)

        prefix, tail = split_at_barrier(stages)
        if tail:
            return first_match(self._joined(partitions, prefix, tail), predicate)

        def task(index, partition, stop):
            found = first_match(run_stages(stages, _cancellable(partition.iterate(), lambda: stop.should_stop(index))),
                                predicate)
            if found:
                if ordered:
                    stop.record_match(index)
                else:
                    stop.cancel()
            return found

        with self._worker_pool(partitions, task) as futures:
            for future in (futures if ordered else as_completed(futures)):
                found = future.result()
                if found:
                    return found
        return Option.empty()
