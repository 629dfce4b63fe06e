from __future__ import annotations
import typing
import numpy as np
import pandas as pd
from ..types import *
from ..types import _ABSENT
from ..collectors import (
    Collector, UNORDERED, to_list, to_set, to_map, counting, reducing, min_by, max_by, joining
)

if typing.TYPE_CHECKING:
    from ..stream import Stream

class TerminalAccessor(Generic[T]):
    def __init__(self, stream_instance: 'Stream[T]'):
        self._stream = stream_instance

    # --- collection ---

    def collect(self, collector: Collector[T, Any, R]) -> R:
        """reduce the stream with a collector"""
        return self._stream._collect(collector)

    def list(self) -> List[T]:
        """convert to list"""
        return self._stream._collect(to_list())

    def set(self) -> Set[T]:
        """convert to set"""
        return self._stream._collect(to_set())

    def dict(self, key_selector: KeySelector[T, K], value_selector: Optional[Selector[T, V]] = None,
             merge: Optional[BinaryOperator[V]] = None) -> Dict[K, V]:
        """convert to dictionary; repeated keys raise DuplicateKeyError unless merge is given"""
        return self._stream._collect(to_map(key_selector, value_selector, merge))

    def array(self) -> np.ndarray:
        """convert to numpy array"""
        return np.array(self.list())

    def pandas(self) -> pd.Series:
        """convert to pandas series"""
        return pd.Series(self.list())

    def df(self) -> pd.DataFrame:
        """convert to pandas dataframe"""
        return pd.DataFrame(self.list())

    def join(self, delimiter: str = '', prefix: str = '', suffix: str = '') -> str:
        """concatenate str elements"""
        return self._stream._collect(joining(delimiter, prefix, suffix))

    # --- reduction ---

    def count(self) -> int:
        """count elements (always a full traversal)"""
        return self._stream._collect(counting())

    def reduce(self, op: BinaryOperator[T], identity: Any = _ABSENT) -> Union[T, Option[T]]:
        """
        left fold. op comes first and identity is an optional second argument
        (reduce(op) or reduce(op, identity)), like functools.reduce. with an
        identity the result is a value (identity for an empty stream); without
        one it is an Option. op must be associative on parallel streams.
        """
        return self._stream._collect(reducing(op, identity))

    def min(self, comparator: Optional[Comparer[T]] = None, key: Optional[KeySelector[T, Any]] = None) -> Option[T]:
        """smallest element, or an empty option for an empty stream"""
        return self._stream._collect(min_by(comparator, key))

    def max(self, comparator: Optional[Comparer[T]] = None, key: Optional[KeySelector[T, Any]] = None) -> Option[T]:
        """largest element, or an empty option for an empty stream"""
        return self._stream._collect(max_by(comparator, key))

    # --- short-circuit search ---

    def find_first(self) -> Option[T]:
        """first element in encounter order"""
        return self._stream._search(None, ordered=True)

    def find_any(self) -> Option[T]:
        """some element; on a parallel stream, whichever partition produces one first"""
        return self._stream._search(None, ordered=False)

    def any_match(self, predicate: Predicate[T]) -> bool:
        """false for an empty stream"""
        return self._stream._search(predicate, ordered=False).is_present

    def all_match(self, predicate: Predicate[T]) -> bool:
        """true for an empty stream"""
        return self._stream._search(lambda item: not predicate(item), ordered=False).is_empty

    def none_match(self, predicate: Predicate[T]) -> bool:
        """true for an empty stream"""
        return not self.any_match(predicate)

    # --- side effects ---

    def for_each(self, action: Callable[[T], Any]) -> None:
        """call action on every element; on a parallel stream the call order is unspecified"""
        self._stream._collect(Collector(lambda: None, lambda _, item: action(item), lambda left, right: None,
                                        characteristics=(UNORDERED,)))

    def for_each_ordered(self, action: Callable[[T], Any]) -> None:
        """call action on every element in encounter order"""
        items = self.list() if self._stream.is_parallel else self._stream
        for item in items:
            action(item)
