"""Non-owning windows over a network's neuron signal arrays."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, MutableSequence


class SignalView:
    """Indexed window onto ``backing[offset:offset + length]``.

    Reads and writes go straight through to the backing list; nothing is
    copied. The view does not own the list and must not outlive the network
    that created it.
    """

    __slots__ = ("_backing", "_offset", "_length")

    def __init__(
        self,
        backing: MutableSequence[float],
        offset: int,
        length: int,
    ) -> None:
        if offset < 0 or length < 0:
            msg = "offset and length must be non-negative."
            raise ValueError(msg)
        if offset + length > len(backing):
            msg = (
                f"Window [{offset}, {offset + length}) exceeds backing array "
                f"of length {len(backing)}."
            )
            raise ValueError(msg)
        self._backing = backing
        self._offset = offset
        self._length = length

    @property
    def offset(self) -> int:
        return self._offset

    def __len__(self) -> int:
        return self._length

    def _position(self, position: int) -> int:
        if not 0 <= position < self._length:
            msg = f"Signal position {position} out of range [0, {self._length})."
            raise IndexError(msg)
        return self._offset + position

    def __getitem__(self, position: int) -> float:
        return self._backing[self._position(position)]

    def __setitem__(self, position: int, value: float) -> None:
        self._backing[self._position(position)] = value

    def __iter__(self) -> Iterator[float]:
        for position in range(self._length):
            yield self[position]

    def copy_from(self, values: Iterable[float], start: int = 0) -> None:
        """Write ``values`` into consecutive positions beginning at ``start``."""
        items = list(values)
        if start < 0 or start + len(items) > self._length:
            msg = (
                f"Cannot copy {len(items)} values at position {start} into a "
                f"view of length {self._length}."
            )
            raise IndexError(msg)
        base = self._offset + start
        self._backing[base : base + len(items)] = items

    def copy_to(self, target: MutableSequence[float], start: int = 0) -> None:
        """Copy the visible signals into ``target`` beginning at ``start``."""
        for position, value in enumerate(self):
            target[start + position] = value

    def reset(self) -> None:
        """Set every signal in the window to zero."""
        base = self._offset
        self._backing[base : base + self._length] = [0.0] * self._length

    def to_list(self) -> list[float]:
        return list(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_list()!r})"


class BoundedSignalView(SignalView):
    """Signal view whose reads are clamped to ``[lower, upper]``.

    Only the returned value is bounded; the backing array keeps the raw
    signal so recurrent state is unaffected.
    """

    __slots__ = ("_lower", "_upper")

    def __init__(
        self,
        backing: MutableSequence[float],
        offset: int,
        length: int,
        *,
        lower: float = 0.0,
        upper: float = 1.0,
    ) -> None:
        super().__init__(backing, offset, length)
        if not lower <= upper:
            msg = "lower bound must not exceed upper bound."
            raise ValueError(msg)
        self._lower = float(lower)
        self._upper = float(upper)

    @property
    def bounds(self) -> tuple[float, float]:
        return self._lower, self._upper

    def __getitem__(self, position: int) -> float:
        value = self._backing[self._position(position)]
        if value < self._lower:
            return self._lower
        if value > self._upper:
            return self._upper
        return value


__all__ = ["BoundedSignalView", "SignalView"]
