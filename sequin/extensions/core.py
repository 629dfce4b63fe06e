from __future__ import annotations
import typing
from ..types import *
from ..config import ParallelConfig, get_default_config
from ..stages import Filter, Map, FlatMap, Peek, Sorted, Distinct, Limit, Skip, TakeWhile, DropWhile

if typing.TYPE_CHECKING:
    from ..stream import Stream

class _CoreOperations(Generic[T]):
    def filter(self: 'Stream[T]', predicate: Predicate[T]) -> 'Stream[T]':
        """keep elements matching the predicate"""
        return self._derive(Filter(predicate))

    def map(self: 'Stream[T]', mapper: Selector[T, U]) -> 'Stream[U]':
        """project each element to a new form"""
        return self._derive(Map(mapper))

    def flat_map(self: 'Stream[T]', mapper: Callable[[T], Optional[Iterable[U]]]) -> 'Stream[U]':
        """
        project each element to a sequence and flatten lazily. empty sequences,
        empty options and none contribute nothing, so flat_map(lambda o: o)
        over options keeps only the present values.
        """
        return self._derive(FlatMap(mapper))

    def peek(self: 'Stream[T]', action: Callable[[T], Any]) -> 'Stream[T]':
        """call action on each element as it is pulled through, without changing it"""
        return self._derive(Peek(action))

    def sorted(self: 'Stream[T]', comparator: Optional[Comparer[T]] = None,
               key: Optional[KeySelector[T, K]] = None, reverse: bool = False) -> 'Stream[T]':
        """
        stable sort by natural order, a comparator (negative/zero/positive) or a key.
        all upstream elements are buffered before the first one is produced.
        """
        # a sorted stream has a meaningful encounter order again
        return self._derive(Sorted(comparator, key, reverse), ordered=True)

    def distinct(self: 'Stream[T]', key: Optional[KeySelector[T, K]] = None) -> 'Stream[T]':
        """drop repeats, keeping the first occurrence; compares key(element) when a key is given"""
        return self._derive(Distinct(key))

    def limit(self: 'Stream[T]', count: int) -> 'Stream[T]':
        """at most 'count' elements; nothing past them is pulled from upstream"""
        if count < 0:
            raise ValueError(f"limit count cannot be negative: {count}")
        return self._derive(Limit(count))

    def skip(self: 'Stream[T]', count: int) -> 'Stream[T]':
        """discard the first 'count' elements"""
        if count < 0:
            raise ValueError(f"skip count cannot be negative: {count}")
        return self._derive(Skip(count))

    def take_while(self: 'Stream[T]', predicate: Predicate[T]) -> 'Stream[T]':
        """take elements until the predicate first fails, then stop for good"""
        return self._derive(TakeWhile(predicate))

    def drop_while(self: 'Stream[T]', predicate: Predicate[T]) -> 'Stream[T]':
        """drop elements until the predicate first fails, then pass everything through"""
        return self._derive(DropWhile(predicate))

    # --- execution mode ---

    def parallel(self: 'Stream[T]', config: Optional[ParallelConfig] = None) -> 'Stream[T]':
        """evaluate terminal operations on a worker pool (the default config unless one is given)"""
        return self._derive(parallel_config=config or get_default_config())

    def sequential(self: 'Stream[T]') -> 'Stream[T]':
        return self._derive(parallel_config=None)

    def unordered(self: 'Stream[T]') -> 'Stream[T]':
        """
        declares that encounter order does not matter, so parallel merges may
        follow completion order. does not shuffle anything.
        """
        return self._derive(ordered=False)
