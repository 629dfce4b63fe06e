"""
composable reducers usable as the terminal stage of a stream.

a collector is four functions: supplier() -> A makes a fresh accumulator,
accumulator(A, T) -> A folds one element in (mutating and returning the
container, or returning a new value), combiner(A, A) -> A merges two
accumulators built from adjacent sub-sequences, and finisher(A) -> R
produces the result. combiner must be associative; unless the collector
is flagged UNORDERED its left argument always holds the earlier elements.
"""
from __future__ import annotations
import operator
from enum import Enum
from .types import *
from .types import _ABSENT
from .errors import DuplicateKeyError
from .stages import ordering_key


class Characteristics(Enum):
    IDENTITY_FINISH = 'identity_finish'  # finisher is the identity; the accumulator is the result
    UNORDERED = 'unordered'  # result does not depend on encounter order


IDENTITY_FINISH = Characteristics.IDENTITY_FINISH
UNORDERED = Characteristics.UNORDERED


def _identity(item):
    return item


class Collector(Generic[T, A, R]):
    def __init__(self, supplier: Supplier[A], accumulator: Callable[[A, T], A], combiner: BinaryOperator[A],
                 finisher: Optional[Callable[[A], R]] = None, characteristics: Iterable[Characteristics] = ()):
        self.supplier = supplier
        self.accumulator = accumulator
        self.combiner = combiner
        self._finisher = finisher
        flags = {flag for flag in characteristics if flag is not IDENTITY_FINISH}
        if finisher is None:
            flags.add(IDENTITY_FINISH)
        self.characteristics = frozenset(flags)

    @classmethod
    def of(cls, supplier: Supplier[A], accumulator: Callable[[A, T], A], combiner: BinaryOperator[A],
           finisher: Optional[Callable[[A], R]] = None,
           characteristics: Iterable[Characteristics] = ()) -> 'Collector[T, A, R]':
        """build a custom collector from its four parts"""
        return cls(supplier, accumulator, combiner, finisher, characteristics)

    @property
    def finisher(self) -> Callable[[A], R]:
        return _identity if self._finisher is None else self._finisher

    @property
    def unordered(self) -> bool:
        return UNORDERED in self.characteristics

    def finish(self, container: A) -> R:
        return container if self._finisher is None else self._finisher(container)

    def fold(self, items: Iterable[T]) -> A:
        """sequential left fold into a fresh accumulator"""
        container = self.supplier()
        accumulate = self.accumulator
        for item in items:
            container = accumulate(container, item)
        return container

    def evaluate(self, items: Iterable[T]) -> R:
        return self.finish(self.fold(items))

    def and_then(self, finisher: Callable[[R], V]) -> 'Collector[T, A, V]':
        return collecting_and_then(self, finisher)

    def __repr__(self) -> str:
        flags = ', '.join(sorted(flag.value for flag in self.characteristics))
        return f"Collector({flags})"


# --- container helpers ---

def _append(container: List[T], item: T) -> List[T]:
    container.append(item)
    return container


def _extend(left: List[T], right: List[T]) -> List[T]:
    left.extend(right)
    return left


def _add(container: Set[T], item: T) -> Set[T]:
    container.add(item)
    return container


def _update(left: Set[T], right: Set[T]) -> Set[T]:
    left.update(right)
    return left


# --- collection building ---

def to_list() -> Collector[T, List[T], List[T]]:
    return Collector(list, _append, _extend)


def to_tuple() -> Collector[T, List[T], Tuple[T, ...]]:
    return Collector(list, _append, _extend, tuple)


def to_set() -> Collector[T, Set[T], Set[T]]:
    return Collector(set, _add, _update, characteristics=(UNORDERED,))


def to_map(key_fn: KeySelector[T, K], value_fn: Optional[Selector[T, V]] = None,
           merge_fn: Optional[BinaryOperator[V]] = None,
           map_factory: Supplier[Dict[K, V]] = dict) -> Collector[T, Dict[K, V], Dict[K, V]]:
    """
    build a mapping. a repeated key raises DuplicateKeyError unless merge_fn
    is given, in which case the stored value becomes merge_fn(existing, new).
    """
    val_sel = value_fn if value_fn else _identity

    def put(container, key, value):
        if key in container:
            if merge_fn is None:
                raise DuplicateKeyError(key, container[key], value)
            container[key] = merge_fn(container[key], value)
        else:
            container[key] = value

    def accumulate(container, item):
        put(container, key_fn(item), val_sel(item))
        return container

    def combine(left, right):
        for key, value in right.items():
            put(left, key, value)
        return left

    return Collector(map_factory, accumulate, combine)


def grouping_by(key_fn: KeySelector[T, K], downstream: Optional[Collector[T, Any, V]] = None,
                map_factory: Supplier[Dict[K, Any]] = dict) -> Collector[T, Dict[K, Any], Dict[K, V]]:
    """
    route each element to the group for key_fn(element) and reduce each group
    with downstream (a list by default). groups appear in first-seen key order.
    """
    downstream = downstream or to_list()
    supply, accumulate_one, combine_one = downstream.supplier, downstream.accumulator, downstream.combiner

    def accumulate(groups, item):
        key = key_fn(item)
        groups[key] = accumulate_one(groups[key] if key in groups else supply(), item)
        return groups

    def combine(left, right):
        for key, container in right.items():
            left[key] = combine_one(left[key], container) if key in left else container
        return left

    finisher = None
    if IDENTITY_FINISH not in downstream.characteristics:
        def finisher(groups):
            for key in groups:
                groups[key] = downstream.finish(groups[key])
            return groups

    flags = (UNORDERED,) if downstream.unordered else ()
    return Collector(map_factory, accumulate, combine, finisher, flags)


def partitioning_by(predicate: Predicate[T],
                    downstream: Optional[Collector[T, Any, V]] = None) -> Collector[T, Dict[bool, Any], Dict[bool, V]]:
    """split into exactly two groups keyed True and False; both keys are always present"""
    downstream = downstream or to_list()

    def supplier():
        return {True: downstream.supplier(), False: downstream.supplier()}

    def accumulate(parts, item):
        key = bool(predicate(item))
        parts[key] = downstream.accumulator(parts[key], item)
        return parts

    def combine(left, right):
        for key in (True, False):
            left[key] = downstream.combiner(left[key], right[key])
        return left

    finisher = None
    if IDENTITY_FINISH not in downstream.characteristics:
        def finisher(parts):
            return {key: downstream.finish(container) for key, container in parts.items()}

    flags = (UNORDERED,) if downstream.unordered else ()
    return Collector(supplier, accumulate, combine, finisher, flags)


# --- adapters ---

def mapping(transform: Selector[T, U], downstream: Collector[U, A, R]) -> Collector[T, A, R]:
    accumulate_one = downstream.accumulator
    return Collector(downstream.supplier, lambda container, item: accumulate_one(container, transform(item)),
                     downstream.combiner, downstream._finisher, downstream.characteristics)


def filtering(predicate: Predicate[T], downstream: Collector[T, A, R]) -> Collector[T, A, R]:
    accumulate_one = downstream.accumulator

    def accumulate(container, item):
        return accumulate_one(container, item) if predicate(item) else container

    return Collector(downstream.supplier, accumulate, downstream.combiner,
                     downstream._finisher, downstream.characteristics)


def flat_mapping(mapper: Callable[[T], Optional[Iterable[U]]], downstream: Collector[U, A, R]) -> Collector[T, A, R]:
    accumulate_one = downstream.accumulator

    def accumulate(container, item):
        for nested in mapper(item) or ():
            container = accumulate_one(container, nested)
        return container

    return Collector(downstream.supplier, accumulate, downstream.combiner,
                     downstream._finisher, downstream.characteristics)


def collecting_and_then(downstream: Collector[T, A, R], finisher: Callable[[R], V]) -> Collector[T, A, V]:
    return Collector(downstream.supplier, downstream.accumulator, downstream.combiner,
                     lambda container: finisher(downstream.finish(container)),
                     downstream.characteristics)


def teeing(first: Collector[T, Any, U], second: Collector[T, Any, V],
           merger: Callable[[U, V], R]) -> Collector[T, List[Any], R]:
    """feed every element to both collectors in one pass, then merge the two results"""

    def supplier():
        return [first.supplier(), second.supplier()]

    def accumulate(pair, item):
        pair[0] = first.accumulator(pair[0], item)
        pair[1] = second.accumulator(pair[1], item)
        return pair

    def combine(left, right):
        left[0] = first.combiner(left[0], right[0])
        left[1] = second.combiner(left[1], right[1])
        return left

    def finisher(pair):
        return merger(first.finish(pair[0]), second.finish(pair[1]))

    flags = (UNORDERED,) if first.unordered and second.unordered else ()
    return Collector(supplier, accumulate, combine, finisher, flags)


# --- reductions ---

def reducing(op: BinaryOperator[Any], identity: Any = _ABSENT,
             mapper: Optional[Selector[T, Any]] = None) -> Collector[T, Any, Any]:
    """
    fold with op. with an identity the result is a plain value (identity for
    empty input); without one it is an Option. op must be associative and
    identity a true identity for op, since every partition starts from it.
    """
    mapper = mapper or _identity

    if identity is not _ABSENT:
        return Collector(lambda: identity, lambda acc, item: op(acc, mapper(item)), op)

    def accumulate(acc, item):
        value = mapper(item)
        return value if acc is _ABSENT else op(acc, value)

    def combine(left, right):
        if left is _ABSENT: return right
        if right is _ABSENT: return left
        return op(left, right)

    def finisher(acc):
        return Option.empty() if acc is _ABSENT else Option.of(acc)

    return Collector(lambda: _ABSENT, accumulate, combine, finisher)


def min_by(comparator: Optional[Comparer[T]] = None, key: Optional[KeySelector[T, Any]] = None) -> Collector[T, Any, Option[T]]:
    """smallest element as an Option; ties keep the earlier element"""
    sort_key = ordering_key(comparator, key) or _identity
    return reducing(lambda left, right: right if sort_key(right) < sort_key(left) else left)


def max_by(comparator: Optional[Comparer[T]] = None, key: Optional[KeySelector[T, Any]] = None) -> Collector[T, Any, Option[T]]:
    """largest element as an Option; ties keep the earlier element"""
    sort_key = ordering_key(comparator, key) or _identity
    return reducing(lambda left, right: right if sort_key(left) < sort_key(right) else left)


def counting() -> Collector[T, int, int]:
    return Collector(lambda: 0, lambda count, _: count + 1, operator.add)


# --- numeric accumulation ---

def summing_int(extractor: Optional[Selector[T, Any]] = None) -> Collector[T, Any, Any]:
    """exact sum with the values' own `+` (ints, fractions, decimals)"""
    extractor = extractor or _identity
    return Collector(lambda: 0, lambda total, item: total + extractor(item), operator.add)


def summing_float(extractor: Optional[Selector[T, float]] = None) -> Collector[T, FloatSummaryStatistics, float]:
    """compensated float sum"""
    return collecting_and_then(summarizing_float(extractor), lambda stats: stats.sum)


def averaging_int(extractor: Optional[Selector[T, Any]] = None) -> Collector[T, Tuple[int, Any], float]:
    """average of exactly summed values; 0.0 for empty input"""
    extractor = extractor or _identity

    def accumulate(state, item):
        count, total = state
        return count + 1, total + extractor(item)

    def combine(left, right):
        return left[0] + right[0], left[1] + right[1]

    def finisher(state):
        count, total = state
        return 0.0 if count == 0 else total / count

    return Collector(lambda: (0, 0), accumulate, combine, finisher)


def averaging_float(extractor: Optional[Selector[T, float]] = None) -> Collector[T, FloatSummaryStatistics, float]:
    """average of compensated float sum; 0.0 for empty input"""
    return collecting_and_then(summarizing_float(extractor), lambda stats: stats.average)


def summarizing_int(extractor: Optional[Selector[T, Any]] = None) -> Collector[T, SummaryStatistics, SummaryStatistics]:
    extractor = extractor or _identity
    return Collector(SummaryStatistics, lambda stats, item: stats.accept(extractor(item)),
                     lambda left, right: left.combine(right))


def summarizing_float(extractor: Optional[Selector[T, float]] = None) -> Collector[T, FloatSummaryStatistics, FloatSummaryStatistics]:
    extractor = extractor or _identity
    return Collector(FloatSummaryStatistics, lambda stats, item: stats.accept(extractor(item)),
                     lambda left, right: left.combine(right))


# --- strings ---

def joining(delimiter: str = '', prefix: str = '', suffix: str = '') -> Collector[str, List[str], str]:
    """concatenate str elements in encounter order; empty input gives prefix + suffix"""

    def accumulate(parts, item):
        if not isinstance(item, str):
            raise TypeError(f"joining expects str elements, got {type(item).__name__}")
        parts.append(item)
        return parts

    return Collector(list, accumulate, _extend, lambda parts: prefix + delimiter.join(parts) + suffix)
