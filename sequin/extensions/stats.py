from __future__ import annotations
import typing
from ..types import *
from ..collectors import summing_int, summing_float, averaging_float, summarizing_int, min_by, max_by

if typing.TYPE_CHECKING:
    from ..stream import Stream

class StatsAccessor(Generic[T]):
    """numeric reductions; each one is a single pass through a collector, so they all run in parallel too"""
    def __init__(self, stream_instance: 'Stream[T]'):
        self._stream = stream_instance

    def sum(self, selector: Optional[Selector[T, Any]] = None) -> Any:
        """sum with the values' own arithmetic (exact for ints)"""
        return self._stream._collect(summing_int(selector))

    def fsum(self, selector: Optional[Selector[T, float]] = None) -> float:
        """compensated float sum"""
        return self._stream._collect(summing_float(selector))

    def average(self, selector: Optional[Selector[T, float]] = None) -> float:
        """calc average; 0.0 for an empty stream"""
        return self._stream._collect(averaging_float(selector))

    def summary(self, selector: Optional[Selector[T, Any]] = None) -> SummaryStatistics:
        """count, sum, min, max and average in one pass"""
        return self._stream._collect(summarizing_int(selector))

    def min(self, selector: Optional[Selector[T, Any]] = None) -> Option[T]:
        """element with the smallest selected value"""
        return self._stream._collect(min_by(key=selector))

    def max(self, selector: Optional[Selector[T, Any]] = None) -> Option[T]:
        """element with the largest selected value"""
        return self._stream._collect(max_by(key=selector))
