import math
from typing import (
    TypeVar, Generic, Callable, Iterator, Iterable, Any, Optional, Union,
    Dict, List, Tuple, Set, Sequence
)
from .errors import NoSuchElementError

T = TypeVar('T')
U = TypeVar('U')
K = TypeVar('K')
V = TypeVar('V')
A = TypeVar('A')
R = TypeVar('R')

Predicate = Callable[[T], bool]
Selector = Callable[[T], U]
KeySelector = Callable[[T], K]
Comparer = Callable[[T, T], int]
Accumulator = Callable[[U, T], U]
BinaryOperator = Callable[[T, T], T]
Supplier = Callable[[], T]

# marks "no value" where none is itself a legitimate value
_ABSENT = object()


class Option(Generic[T]):
    """
    holds zero or one value. an option holding none is *present*, so
    "nothing matched" and "the match is none" stay distinguishable.
    iterating an option yields its value (if any), which makes
    flat_map(lambda opt: opt) drop the empty ones.
    """
    __slots__ = ('_value',)

    def __init__(self, value: Any = _ABSENT):
        self._value = value

    @classmethod
    def of(cls, value: T) -> 'Option[T]':
        return cls(value)

    @classmethod
    def of_nullable(cls, value: Optional[T]) -> 'Option[T]':
        """treats none as absence"""
        return cls() if value is None else cls(value)

    @classmethod
    def empty(cls) -> 'Option[T]':
        return cls()

    @property
    def is_present(self) -> bool: return self._value is not _ABSENT

    @property
    def is_empty(self) -> bool: return self._value is _ABSENT

    def get(self) -> T:
        if self._value is _ABSENT:
            raise NoSuchElementError("no value present")
        return self._value

    def or_else(self, default: T) -> T:
        return default if self._value is _ABSENT else self._value

    def or_else_get(self, supplier: Supplier[T]) -> T:
        return supplier() if self._value is _ABSENT else self._value

    def or_else_raise(self, error_factory: Optional[Callable[[], Exception]] = None) -> T:
        if self._value is _ABSENT:
            raise error_factory() if error_factory else NoSuchElementError("no value present")
        return self._value

    def map(self, mapper: Selector[T, U]) -> 'Option[U]':
        """the mapped value is kept even when it is none"""
        return self if self._value is _ABSENT else Option(mapper(self._value))

    def flat_map(self, mapper: Callable[[T], 'Option[U]']) -> 'Option[U]':
        return self if self._value is _ABSENT else mapper(self._value)

    def filter(self, predicate: Predicate[T]) -> 'Option[T]':
        if self._value is _ABSENT or predicate(self._value):
            return self
        return Option()

    def if_present(self, action: Callable[[T], Any]) -> None:
        if self._value is not _ABSENT:
            action(self._value)

    def if_present_or_else(self, action: Callable[[T], Any], empty_action: Callable[[], Any]) -> None:
        if self._value is _ABSENT:
            empty_action()
        else:
            action(self._value)

    def to_stream(self) -> 'Stream[T]':
        from .factories import from_iterable
        return from_iterable(tuple(self))

    def __iter__(self) -> Iterator[T]:
        if self._value is not _ABSENT:
            yield self._value

    def __bool__(self) -> bool:
        return self._value is not _ABSENT

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Option):
            return NotImplemented
        if self._value is _ABSENT or other._value is _ABSENT:
            return self._value is other._value
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(()) if self._value is _ABSENT else hash((self._value,))

    def __repr__(self) -> str:
        return "Option.empty" if self._value is _ABSENT else f"Option({self._value!r})"


class SummaryStatistics:
    """
    running count, sum, min, max and average of numeric values.
    values are added with plain `+`, so the caller's numeric type decides
    widening and rounding (ints stay exact, fractions stay fractions).
    instances merge with combine(), which makes them parallel accumulators.
    """

    def __init__(self):
        self.count = 0
        self.min = None
        self.max = None
        self._sum = 0

    def accept(self, value) -> 'SummaryStatistics':
        self.count += 1
        self._add(value)
        if self.min is None or value < self.min: self.min = value
        if self.max is None or value > self.max: self.max = value
        return self

    def combine(self, other: 'SummaryStatistics') -> 'SummaryStatistics':
        if other.count == 0: return self
        if self.count == 0:
            self.min, self.max = other.min, other.max
        else:
            if other.min < self.min: self.min = other.min
            if other.max > self.max: self.max = other.max
        self.count += other.count
        self._merge_sum(other)
        return self

    def _add(self, value) -> None:
        self._sum += value

    def _merge_sum(self, other: 'SummaryStatistics') -> None:
        self._sum += other._sum

    @property
    def sum(self):
        return self._sum

    @property
    def average(self) -> float:
        # zero, not nan, for an empty sequence
        return 0.0 if self.count == 0 else self.sum / self.count

    def as_dict(self) -> Dict[str, Any]:
        return {'count': self.count, 'sum': self.sum, 'min': self.min, 'max': self.max, 'average': self.average}

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, SummaryStatistics):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(count={self.count}, sum={self.sum}, min={self.min}, "
                f"max={self.max}, average={self.average})")


class FloatSummaryStatistics(SummaryStatistics):
    """
    float variant using neumaier compensated summation. the compensation
    term is merged along with the running sum, so split-and-combine keeps
    the same error bound as a single sequential pass.
    """

    def __init__(self):
        super().__init__()
        self._sum = 0.0
        self._compensation = 0.0
        # plain sum, used when the compensated sum degenerates to nan via infinities
        self._simple_sum = 0.0

    def accept(self, value) -> 'FloatSummaryStatistics':
        return super().accept(float(value))

    def _compensated_add(self, value: float) -> None:
        total = self._sum + value
        if abs(self._sum) >= abs(value):
            self._compensation += (self._sum - total) + value
        else:
            self._compensation += (value - total) + self._sum
        self._sum = total

    def _add(self, value: float) -> None:
        self._simple_sum += value
        self._compensated_add(value)

    def _merge_sum(self, other: 'FloatSummaryStatistics') -> None:
        self._simple_sum += other._simple_sum
        self._compensated_add(other._sum)
        self._compensated_add(other._compensation)

    @property
    def sum(self) -> float:
        total = self._sum + self._compensation
        if math.isnan(total) and math.isinf(self._simple_sum):
            return self._simple_sum
        return total
