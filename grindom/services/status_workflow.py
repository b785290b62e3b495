"""Board column order and the cyclic "advance" transition."""
from typing import Iterable, Iterator, Optional, Tuple

from ..errors import InvalidInputError
from ..models import OrderStatus

CANONICAL_STATUSES: Tuple[OrderStatus, ...] = (
    OrderStatus.NEW,
    OrderStatus.IN_PROGRESS,
    OrderStatus.DONE,
    OrderStatus.CANCELED,
)


class StatusOrder:
    """An ordering of the four order statuses.

    Always a permutation of :data:`CANONICAL_STATUSES`: every method that
    changes the sequence validates the result first and raises
    :class:`~grindom.errors.InvalidInputError` otherwise, leaving the
    current order untouched.
    """

    def __init__(self, statuses: Optional[Iterable] = None) -> None:
        self._seq: Tuple[OrderStatus, ...] = CANONICAL_STATUSES
        if statuses is not None:
            self.replace(statuses)

    def __iter__(self) -> Iterator[OrderStatus]:
        return iter(self._seq)

    def __len__(self) -> int:
        return len(self._seq)

    def __getitem__(self, index: int) -> OrderStatus:
        return self._seq[index]

    def __eq__(self, other) -> bool:
        if isinstance(other, StatusOrder):
            return self._seq == other._seq
        if isinstance(other, (tuple, list)):
            return list(self._seq) == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"StatusOrder({[s.value for s in self._seq]!r})"

    def as_tuple(self) -> Tuple[OrderStatus, ...]:
        return self._seq

    def replace(self, statuses: Iterable) -> None:
        """Swap in a whole new ordering (statuses or their wire values)."""
        try:
            seq = tuple(OrderStatus(s) for s in statuses)
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from None
        if len(seq) != len(CANONICAL_STATUSES) or set(seq) != set(CANONICAL_STATUSES):
            raise InvalidInputError(
                f"Status order must contain each status exactly once, got {[s.value for s in seq]}")
        self._seq = seq

    def move(self, from_index: int, to_index: int) -> None:
        """Move the status at *from_index* so it ends up at *to_index*."""
        size = len(self._seq)
        if not (0 <= from_index < size and 0 <= to_index < size):
            raise InvalidInputError(
                f"Status positions must be between 0 and {size - 1}")
        seq = list(self._seq)
        seq.insert(to_index, seq.pop(from_index))
        self._seq = tuple(seq)

    def next_after(self, status: OrderStatus) -> Optional[OrderStatus]:
        """The status following *status*, wrapping from last to first.

        Returns ``None`` if *status* is not part of the ordering.
        """
        if status not in self._seq:
            return None
        idx = self._seq.index(status)
        return self._seq[(idx + 1) % len(self._seq)]
