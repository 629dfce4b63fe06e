from __future__ import annotations
import threading
from abc import ABC, abstractmethod
from itertools import chain, islice
from .types import *
from .errors import StreamConsumedError

# upper bound on the batch pulled by a single IteratorSource split
_MAX_BATCH = 1 << 25
# batch growth for iterator sources that were never given one
_DEFAULT_BATCH_UNIT = 1024


class Source(ABC, Generic[T]):
    """
    produces the elements for one terminal evaluation.

    sources are cursors: try_split() hands a prefix of the remaining
    elements to a new source and keeps the suffix, so after splitting,
    the receiver and the returned source cover disjoint ranges whose
    concatenation (prefix first) is the original encounter order.
    """

    def __init__(self, ordered: bool = True, finite: bool = True):
        self.ordered = ordered
        self.finite = finite

    @abstractmethod
    def iterate(self) -> Iterator[T]:
        """sequential cursor over the remaining elements"""
        pass

    def try_split(self) -> Optional['Source[T]']:
        """split off a prefix, or return none when this source cannot split"""
        return None

    def estimate_size(self) -> Optional[int]:
        """remaining element count, or none when unknown"""
        return None

    def set_batch_unit(self, unit: int) -> None:
        """batch growth for sources that split by pulling batches; others ignore it"""
        pass

    def __iter__(self) -> Iterator[T]:
        return self.iterate()


class ListSource(Source[T]):
    """a half-open index range [lo, hi) over any sequence (list, tuple, range, str)"""

    def __init__(self, data: Sequence[T], lo: int = 0, hi: Optional[int] = None, ordered: bool = True):
        super().__init__(ordered=ordered, finite=True)
        self._data = data
        self._lo = lo
        self._hi = len(data) if hi is None else hi

    def iterate(self) -> Iterator[T]:
        data, lo, hi = self._data, self._lo, self._hi
        for index in range(lo, hi):
            yield data[index]

    def try_split(self) -> Optional['ListSource[T]']:
        remaining = self._hi - self._lo
        if remaining < 2: return None
        mid = self._lo + remaining // 2
        prefix = ListSource(self._data, self._lo, mid, ordered=self.ordered)
        self._lo = mid
        return prefix

    def estimate_size(self) -> int:
        return self._hi - self._lo

    def __repr__(self) -> str:
        return f"ListSource(lo={self._lo}, hi={self._hi}, ordered={self.ordered})"


class IteratorSource(Source[T]):
    """
    a single pass over an arbitrary iterable. a finite one splits by pulling
    a batch (growing by batch_unit per split) into a ListSource prefix.
    an infinite one never splits. without an explicit batch_unit, the
    parallel engine supplies its config's split_batch_unit.
    """

    def __init__(self, iterable: Iterable[T], ordered: bool = True, finite: bool = True,
                 batch_unit: Optional[int] = None):
        super().__init__(ordered=ordered, finite=finite)
        self._iterable = iterable
        self._iterator: Optional[Iterator[T]] = None
        self._batch_unit = batch_unit
        self._batch_size = 0

    def _get_iterator(self) -> Iterator[T]:
        if self._iterator is None:
            self._iterator = iter(self._iterable)
        return self._iterator

    def iterate(self) -> Iterator[T]:
        return self._get_iterator()

    def set_batch_unit(self, unit: int) -> None:
        if self._batch_unit is None:
            self._batch_unit = unit

    def try_split(self) -> Optional[ListSource[T]]:
        if not self.finite: return None
        self._batch_size = min(self._batch_size + (self._batch_unit or _DEFAULT_BATCH_UNIT), _MAX_BATCH)
        batch = list(islice(self._get_iterator(), self._batch_size))
        if not batch: return None
        return ListSource(batch, ordered=self.ordered)

    def __repr__(self) -> str:
        return f"IteratorSource(ordered={self.ordered}, finite={self.finite})"


class ConcatSource(Source[T]):
    """all elements of first, then all elements of second"""

    def __init__(self, first: Source[T], second: Source[T]):
        super().__init__(ordered=first.ordered and second.ordered, finite=first.finite and second.finite)
        self._first: Optional[Source[T]] = first
        self._second = second

    def iterate(self) -> Iterator[T]:
        if self._first is None:
            return self._second.iterate()
        return chain(self._first.iterate(), self._second.iterate())

    def set_batch_unit(self, unit: int) -> None:
        if self._first is not None:
            self._first.set_batch_unit(unit)
        self._second.set_batch_unit(unit)

    def try_split(self) -> Optional[Source[T]]:
        if not self.finite: return None
        # split at the seam first, then let the remaining side split itself
        if self._first is not None:
            prefix, self._first = self._first, None
            return prefix
        return self._second.try_split()

    def estimate_size(self) -> Optional[int]:
        second_size = self._second.estimate_size()
        if self._first is None: return second_size
        first_size = self._first.estimate_size()
        if first_size is None or second_size is None: return None
        return first_size + second_size


def single_use(source_func: Callable[[], Source[T]]) -> Callable[[], Source[T]]:
    """wrap a source factory so that a second evaluation fails instead of seeing a drained iterator"""
    lock = threading.Lock()
    opened = False

    def open_once() -> Source[T]:
        nonlocal opened
        with lock:
            if opened:
                raise StreamConsumedError("stream has already been operated upon; its source is single-use")
            opened = True
        return source_func()

    return open_once
