import typing
import itertools
from .types import *
from collections.abc import Collection, Sequence
from .source import Source, ListSource, IteratorSource, ConcatSource, single_use

if typing.TYPE_CHECKING:
    from .stream import Stream

def from_iterable(data: Iterable[T], ordered: Optional[bool] = None) -> 'Stream[T]':
    """
    create stream from iterable. sequences are indexed directly and split
    by halving; other collections are snapshotted per evaluation; plain
    iterators and generators give a single-use stream. sets default to unordered.
    """
    from .stream import Stream
    if ordered is None:
        ordered = not isinstance(data, (set, frozenset))
    if isinstance(data, Sequence):
        return Stream(lambda: ListSource(data, ordered=ordered), ordered=ordered)
    if isinstance(data, Collection):
        return Stream(lambda: ListSource(tuple(data), ordered=ordered), ordered=ordered)
    return Stream(single_use(lambda: IteratorSource(data, ordered=ordered)), ordered=ordered)

def of(*items: T) -> 'Stream[T]':
    """create stream from the arguments"""
    return from_iterable(items)

def from_range(start: int, count: int) -> 'Stream[int]':
    """create stream from range"""
    return from_iterable(range(start, start + count))

def range_closed(start: int, end: int) -> 'Stream[int]':
    """start through end, inclusive"""
    return from_iterable(range(start, end + 1))

def repeat(item: T, count: Optional[int] = None) -> 'Stream[T]':
    """create stream with repeated item; endless when count is none"""
    from .stream import Stream
    if count is None:
        return Stream(lambda: IteratorSource(itertools.repeat(item), finite=False))
    return from_iterable((item,) * count)

def empty() -> 'Stream[Any]':
    """create empty stream"""
    return from_iterable(())

def generate(supplier: Supplier[T]) -> 'Stream[T]':
    """endless stream of supplier() results; bound it with limit() or a short-circuiting terminal"""
    from .stream import Stream
    def supplied():
        while True:
            yield supplier()
    return Stream(lambda: IteratorSource(supplied(), finite=False))

def iterate(seed: T, next_fn: Selector[T, T], has_next: Optional[Predicate[T]] = None) -> 'Stream[T]':
    """
    seed, next_fn(seed), next_fn(next_fn(seed)), ...
    endless unless has_next is given, in which case it stops before the first value failing it.
    """
    from .stream import Stream
    def iterated():
        value = seed
        while has_next is None or has_next(value):
            yield value
            value = next_fn(value)
    return Stream(lambda: IteratorSource(iterated(), finite=has_next is not None))

def concat(first: 'Stream[T]', second: 'Stream[T]') -> 'Stream[T]':
    """all elements of first, then all of second"""
    from .stream import Stream
    return Stream(lambda: ConcatSource(first._open_source(), second._open_source()),
                  ordered=first.is_ordered and second.is_ordered)

def from_source(source_func: Callable[[], Source[T]], ordered: bool = True) -> 'Stream[T]':
    """create stream from a factory that opens a fresh source per evaluation"""
    from .stream import Stream
    return Stream(source_func, ordered=ordered)

# --- aliases ---
sequin = from_iterable
S = from_iterable
