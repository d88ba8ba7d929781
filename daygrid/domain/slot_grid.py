"""
Fixed time-slot axis of the day calendar.

The axis does not depend on employees or appointments: every calendar day
shows the same business hours, so cells can be addressed by label or by
position.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Tuple

import pendulum
from pendulum import DateTime

DEFAULT_START_HOUR = 7
DEFAULT_END_HOUR = 20
DEFAULT_SLOT_MINUTES = 30


def _build_labels(start_hour: int, end_hour: int, slot_minutes: int) -> Tuple[str, ...]:
    labels = []
    minute_of_day = start_hour * 60
    last = end_hour * 60  # inclusive: the closing hour is itself a slot

    while minute_of_day <= last:
        labels.append(f"{minute_of_day // 60:02d}:{minute_of_day % 60:02d}")
        minute_of_day += slot_minutes

    return tuple(labels)


@dataclass(frozen=True)
class SlotGrid:
    """
    Ordered slot labels from ``start_hour`` to ``end_hour`` (both inclusive).

    With the defaults this is 07:00, 07:30, ..., 20:00 (27 labels).
    """
    start_hour: int = DEFAULT_START_HOUR
    end_hour: int = DEFAULT_END_HOUR
    slot_minutes: int = DEFAULT_SLOT_MINUTES
    labels: Tuple[str, ...] = field(init=False)
    _positions: Dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not 0 <= self.start_hour < self.end_hour <= 23:
            raise ValueError(
                f"Invalid business hours {self.start_hour}-{self.end_hour}"
            )
        if self.slot_minutes <= 0 or 60 % self.slot_minutes:
            raise ValueError(f"slot_minutes must divide 60, got {self.slot_minutes}")

        labels = _build_labels(self.start_hour, self.end_hour, self.slot_minutes)
        object.__setattr__(self, "labels", labels)
        object.__setattr__(self, "_positions", {label: i for i, label in enumerate(labels)})

    def __len__(self) -> int:
        return len(self.labels)

    def __iter__(self):
        return iter(self.labels)

    def __contains__(self, label: object) -> bool:
        return label in self._positions

    def index(self, label: str) -> int:
        """Position of ``label`` on the axis."""
        try:
            return self._positions[label]
        except KeyError:
            raise ValueError(f"Unknown slot label: {label!r}") from None

    def slot_time(self, day: date, label: str, tz: str) -> DateTime:
        """Wall-clock instant of ``label`` on ``day`` in timezone ``tz``."""
        self.index(label)
        hour, minute = (int(part) for part in label.split(":"))
        return pendulum.datetime(day.year, day.month, day.day, hour, minute, tz=tz)

    def slot_end_time(self, day: date, label: str, tz: str) -> DateTime:
        """End of the slot starting at ``label`` (one slot width later)."""
        return self.slot_time(day, label, tz).add(minutes=self.slot_minutes)


DEFAULT_GRID = SlotGrid()


def generate_slots() -> Tuple[str, ...]:
    """Return the default slot axis: 07:00 to 20:00 every 30 minutes."""
    return DEFAULT_GRID.labels
