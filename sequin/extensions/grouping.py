from __future__ import annotations
import typing
from ..types import *
from ..collectors import Collector, grouping_by, partitioning_by, counting

if typing.TYPE_CHECKING:
    from ..stream import Stream

class GroupingAccessor(Generic[T]):
    def __init__(self, stream_instance: 'Stream[T]'):
        self._stream = stream_instance

    def group_by(self, key_selector: KeySelector[T, K],
                 downstream: Optional[Collector[T, Any, V]] = None) -> Dict[K, Any]:
        """group elements by a key; each group is a list unless a downstream collector is given"""
        return self._stream._collect(grouping_by(key_selector, downstream))

    def partition_by(self, predicate: Predicate[T],
                     downstream: Optional[Collector[T, Any, V]] = None) -> Dict[bool, Any]:
        """split on a predicate; the result always has both True and False keys"""
        return self._stream._collect(partitioning_by(predicate, downstream))

    def count_by(self, key_selector: KeySelector[T, K]) -> Dict[K, int]:
        """number of elements per key"""
        return self._stream._collect(grouping_by(key_selector, counting()))
