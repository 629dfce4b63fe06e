from __future__ import annotations

from .types import *
from .source import Source, IteratorSource
from .stages import Stage, run_stages, first_match
from .config import ParallelConfig
from .parallel import ParallelEngine

# --- core functionality ---
from .extensions.core import _CoreOperations

# --- accessors ---
from .extensions.terminal import TerminalAccessor
from .extensions.grouping import GroupingAccessor
from .extensions.stats import StatsAccessor


# --- base stream implementation ---

class _BaseStream(Generic[T]):
    def __init__(self, source_func: Callable[[], Source[T]], stages: Tuple[Stage, ...] = (),
                 ordered: bool = True, parallel_config: Optional[ParallelConfig] = None):
        """
        init with a function that opens a fresh source per terminal evaluation.
        nothing is read from the source until a terminal operation runs.
        """
        self._source_func = source_func
        self._stages = tuple(stages)
        self._ordered = ordered
        self._parallel_config = parallel_config

    def _derive(self, stage: Optional[Stage] = None, **changes: Any) -> 'Stream[Any]':
        """a new stream sharing this one's source, with one more stage and/or changed flags"""
        stages = self._stages + (stage,) if stage is not None else self._stages
        return Stream(self._source_func, stages,
                      changes.get('ordered', self._ordered),
                      changes.get('parallel_config', self._parallel_config))

    @property
    def is_parallel(self) -> bool: return self._parallel_config is not None

    @property
    def is_ordered(self) -> bool: return self._ordered

    def _pull(self) -> Iterator[T]:
        """sequential pull chain over a freshly opened source"""
        return run_stages(self._stages, self._source_func().iterate())

    def _open_source(self) -> Source[T]:
        """this stream as a source for another stream (used by concat)"""
        source = self._source_func()
        if not self._stages: return source
        return IteratorSource(run_stages(self._stages, source.iterate()), ordered=self._ordered, finite=source.finite)

    def _collect(self, collector: 'Collector[T, Any, R]') -> R:
        if self._parallel_config is not None:
            ordered = self._ordered and not collector.unordered
            return ParallelEngine(self._parallel_config).collect(self._source_func(), self._stages, collector, ordered)
        return collector.evaluate(self._pull())

    def _search(self, predicate: Optional[Predicate[T]] = None, ordered: bool = True) -> Option[T]:
        if self._parallel_config is not None:
            return ParallelEngine(self._parallel_config).search(self._source_func(), self._stages, predicate,
                                                                ordered and self._ordered)
        return first_match(self._pull(), predicate)

    def __iter__(self) -> Iterator[T]:
        # iteration is always sequential, even on a parallel stream
        return self._pull()

    def __repr__(self) -> str:
        stages = ', '.join(type(stage).__name__ for stage in self._stages) or 'no stages'
        mode = 'parallel' if self.is_parallel else 'sequential'
        return f"Stream({stages}; {mode}, {'ordered' if self._ordered else 'unordered'})"


# --- main stream class ---

class Stream(
    _BaseStream[T],
    _CoreOperations[T]
):
    """a lazy, composable stream over a source, with pluggable collectors and a parallel mode."""
    def __init__(self, source_func: Callable[[], Source[T]], stages: Tuple[Stage, ...] = (),
                 ordered: bool = True, parallel_config: Optional[ParallelConfig] = None):
        super().__init__(source_func, stages, ordered, parallel_config)
        # --- initialize accessors ---
        self.to = TerminalAccessor(self)
        self.group = GroupingAccessor(self)
        self.stats = StatsAccessor(self)
