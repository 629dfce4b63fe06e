from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import cmp_to_key
from .types import *


def ordering_key(comparator: Optional[Comparer[Any]] = None,
                 key: Optional[KeySelector[Any, Any]] = None) -> Optional[Callable[[Any], Any]]:
    """
    turn a comparator and/or key selector into a single sort key.
    with both, the comparator orders the extracted keys. none means natural order.
    """
    if comparator is None: return key
    wrapped = cmp_to_key(comparator)
    if key is None: return wrapped
    return lambda item: wrapped(key(item))


class _SeenValues:
    """membership tracking that also accepts unhashable values (compared with ==, linearly)"""

    def __init__(self):
        self._hashable = set()
        self._unhashable = []

    def add(self, value: Any) -> bool:
        """record value; true if it had not been seen before"""
        try:
            if value in self._hashable: return False
            self._hashable.add(value)
        except TypeError:
            if value in self._unhashable: return False
            self._unhashable.append(value)
        return True


class Stage(ABC):
    """
    one lazy transformation step. apply() wraps an upstream iterator in a
    generator, so nothing is pulled until the downstream consumer asks.
    a consumer that stops early closes the generator chain; no stage uses
    exceptions to signal routine termination.
    """
    # true when the stage looks at each element in isolation and can run per partition
    partitionable = False
    # true when the stage must see all of its input (or remember all of it)
    stateful = False

    @abstractmethod
    def apply(self, upstream: Iterator[Any]) -> Iterator[Any]:
        pass


@dataclass(frozen=True)
class Filter(Stage):
    predicate: Predicate[Any]
    partitionable = True

    def apply(self, upstream):
        predicate = self.predicate
        for item in upstream:
            if predicate(item):
                yield item


@dataclass(frozen=True)
class Map(Stage):
    mapper: Selector[Any, Any]
    partitionable = True

    def apply(self, upstream):
        mapper = self.mapper
        for item in upstream:
            yield mapper(item)


@dataclass(frozen=True)
class FlatMap(Stage):
    """each nested sequence is drained before the next outer element is pulled"""
    mapper: Callable[[Any], Optional[Iterable[Any]]]
    partitionable = True

    def apply(self, upstream):
        mapper = self.mapper
        for item in upstream:
            nested = mapper(item)
            if nested is None:  # treated as empty
                continue
            yield from nested


@dataclass(frozen=True)
class Peek(Stage):
    action: Callable[[Any], Any]
    partitionable = True

    def apply(self, upstream):
        action = self.action
        for item in upstream:
            action(item)
            yield item


@dataclass(frozen=True)
class Sorted(Stage):
    """stable sort; the whole upstream is materialized before the first output"""
    comparator: Optional[Comparer[Any]] = None
    key: Optional[KeySelector[Any, Any]] = None
    reverse: bool = False
    stateful = True

    def apply(self, upstream):
        yield from sorted(upstream, key=ordering_key(self.comparator, self.key), reverse=self.reverse)


@dataclass(frozen=True)
class Distinct(Stage):
    """keeps the first occurrence of each value (or of each key)"""
    key: Optional[KeySelector[Any, Any]] = None
    stateful = True

    def apply(self, upstream):
        seen = _SeenValues()
        key = self.key
        for item in upstream:
            if seen.add(item if key is None else key(item)):
                yield item


@dataclass(frozen=True)
class Limit(Stage):
    count: int

    def apply(self, upstream):
        if self.count <= 0:
            return
        produced = 0
        for item in upstream:
            yield item
            produced += 1
            # stop before pulling the next upstream element
            if produced >= self.count:
                return


@dataclass(frozen=True)
class Skip(Stage):
    count: int

    def apply(self, upstream):
        skipped = 0
        for item in upstream:
            if skipped < self.count:
                skipped += 1
                continue
            yield item


@dataclass(frozen=True)
class TakeWhile(Stage):
    predicate: Predicate[Any]

    def apply(self, upstream):
        predicate = self.predicate
        for item in upstream:
            if not predicate(item):
                return
            yield item


@dataclass(frozen=True)
class DropWhile(Stage):
    """once the predicate fails it is never consulted again"""
    predicate: Predicate[Any]

    def apply(self, upstream):
        predicate = self.predicate
        dropping = True
        for item in upstream:
            if dropping:
                if predicate(item):
                    continue
                dropping = False
            yield item


def run_stages(stages: Sequence[Stage], upstream: Iterator[Any]) -> Iterator[Any]:
    """compose stages over an iterator without pulling anything"""
    for stage in stages:
        upstream = stage.apply(upstream)
    return upstream


def first_match(items: Iterator[Any], predicate: Optional[Predicate[Any]] = None) -> Option[Any]:
    """pull until an element matches (any element without a predicate), then close the chain"""
    try:
        for item in items:
            if predicate is None or predicate(item):
                return Option.of(item)
        return Option.empty()
    finally:
        close = getattr(items, 'close', None)
        if close is not None:
            close()


def split_at_barrier(stages: Sequence[Stage]) -> Tuple[Tuple[Stage, ...], Tuple[Stage, ...]]:
    """
    split a chain into the leading partitionable stages and the rest.
    the rest needs a global view of encounter order, so it has to run
    after partition outputs are joined back together.
    """
    for index, stage in enumerate(stages):
        if not stage.partitionable:
            return tuple(stages[:index]), tuple(stages[index:])
    return tuple(stages), ()
