from enum import Enum
from typing import Any, Callable, Iterable, List


class Directive(Enum):
    CONTINUE = "continue"
    STOP = "stop"


# consumer(index, value) -> Directive
SymbolConsumer = Callable[[int, Any], Directive]


class SymbolProducer:
    """Pull-based source of symbols: has_next() / next()."""

    def __init__(self, values: Iterable[Any]):
        self._it = iter(values)
        self._pending: List[Any] = []

    @classmethod
    def from_list(cls, values: List[Any]) -> "SymbolProducer":
        return cls(values)

    def has_next(self) -> bool:
        if self._pending:
            return True
        for v in self._it:
            self._pending.append(v)
            return True
        return False

    def next(self):
        if not self.has_next():
            raise StopIteration
        return self._pending.pop()

    def __iter__(self):
        while self.has_next():
            yield self.next()


def as_producer(values) -> SymbolProducer:
    if isinstance(values, SymbolProducer):
        return values
    return SymbolProducer(values)


def collect(into: List[Any], limit: int = -1) -> SymbolConsumer:
    """
    Consumer that appends values to 'into' (index checked against order)
    and stops after 'limit' values when limit >= 0.
    """
    def consumer(index: int, value) -> Directive:
        if index != len(into):
            raise ValueError(f"out-of-order index {index}, expected {len(into)}")
        into.append(value)
        if 0 <= limit <= len(into):
            return Directive.STOP
        return Directive.CONTINUE
    return consumer
