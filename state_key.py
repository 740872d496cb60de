from __future__ import annotations

from typing import Iterator, List, Optional

from physics import INPUT_SHIFT, MAX_GEAR, MAX_SPEED, MAX_TACHOMETER, SimState

# shift bit x gear x speed x tachometer x tachometer delta
MAX_STATES = MAX_TACHOMETER * MAX_SPEED * (MAX_GEAR + 1) * 2 * 2

_GEAR_RADIX = 2
_SPEED_RADIX = _GEAR_RADIX * (MAX_GEAR + 1)
_TACH_RADIX = _SPEED_RADIX * MAX_SPEED
_DELTA_RADIX = _TACH_RADIX * MAX_TACHOMETER


class TableAllocationError(MemoryError):
    """Raised when a generation table cannot be allocated."""


def encode_state(state: SimState) -> int:
    """
    Pack the fields that drive every future frame into a dense key.

    Distance and elapsed frames are not part of the key: two states sharing a
    key evolve identically from here on, apart from an additive distance offset.
    """
    return (
        (1 if state.last_input & INPUT_SHIFT else 0)
        + _GEAR_RADIX * state.gear
        + _SPEED_RADIX * state.speed
        + _TACH_RADIX * state.tachometer
        + _DELTA_RADIX * state.tachometer_delta
    )


class GenerationTable:
    """
    Dense key -> state array holding one generation of the search.

    Occupied keys are tracked so clear() and iteration only touch live slots.
    """

    def __init__(self, capacity: int = MAX_STATES) -> None:
        try:
            self._slots: List[Optional[SimState]] = [None] * capacity
        except MemoryError as exc:
            raise TableAllocationError(f"Could not allocate a generation table of {capacity} states") from exc
        self._occupied: List[int] = []

    @property
    def capacity(self) -> int:
        return len(self._slots)

    def __len__(self) -> int:
        return len(self._occupied)

    def __iter__(self) -> Iterator[SimState]:
        # Ascending key order, like a scan over the whole array.
        for key in sorted(self._occupied):
            yield self._slots[key]

    def get(self, key: int) -> Optional[SimState]:
        return self._slots[key]

    def put(self, key: int, state: SimState) -> None:
        """Unconditional store; last write wins."""
        if self.get(key) is None:
            self._occupied.append(key)
        self._slots[key] = state

    def offer(self, key: int, state: SimState) -> bool:
        """
        Store `state` unless the slot already holds a state that went further.
        Ties replace. Returns True when the state was stored.
        """
        current = self.get(key)
        if current is None:
            self._occupied.append(key)
        elif state.distance < current.distance:
            return False
        self._slots[key] = state
        return True

    def clear(self) -> None:
        for key in self._occupied:
            self._slots[key] = None
        self._occupied.clear()
