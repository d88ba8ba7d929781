"""
Click-and-drag range selection over free slots.

The selection is an explicit two-state machine:

    Idle --start--> Dragging --extend--> Dragging
    Dragging --commit--> Idle   (emits a SelectionIntent)
    Dragging --cancel--> Idle   (emits nothing)

Guard failures are silent no-ops that leave the state unchanged.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional, Union

from .models import SelectionIntent, TimeRange
from .occupancy import OccupancyResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    """No selection in progress."""


@dataclass(frozen=True)
class Dragging:
    """
    Active selection in one employee column.

    Invariant: index(start_slot) <= index(end_slot).
    """
    employee_id: str
    start_slot: str
    end_slot: str

    def __post_init__(self):
        # labels are zero-padded HH:mm, so string order is time order
        if self.end_slot < self.start_slot:
            raise ValueError(
                f"Selection end {self.end_slot} is before its start {self.start_slot}"
            )


DragState = Union[Idle, Dragging]

IDLE = Idle()

RangeSelectedHandler = Callable[[SelectionIntent], None]


class DragSelection:
    """
    Tracks a single drag selection against an occupancy resolver.

    ``inert`` switches every transition off, e.g. while the day's data is
    being (re)loaded and occupancy is not trustworthy.
    """

    def __init__(
        self,
        resolver: OccupancyResolver,
        on_range_selected: Optional[RangeSelectedHandler] = None,
    ):
        self.resolver = resolver
        self.on_range_selected = on_range_selected
        self.state: DragState = IDLE
        self.inert = False

    @property
    def is_dragging(self) -> bool:
        return isinstance(self.state, Dragging)

    def start(self, employee_id: str, slot: str) -> DragState:
        """Begin a selection on a free cell."""
        if self.inert or self.is_dragging:
            return self.state

        if not self.resolver.is_free(employee_id, slot):
            return self.state

        self.state = Dragging(employee_id=employee_id, start_slot=slot, end_slot=slot)
        return self.state

    def extend(self, employee_id: str, slot: str) -> DragState:
        """Move the end of the selection forward to ``slot`` if allowed."""
        state = self.state
        if self.inert or not isinstance(state, Dragging):
            return state

        if employee_id != state.employee_id:
            return state

        grid = self.resolver.grid
        anchor = grid.index(state.start_slot)
        target = grid.index(slot)
        if target < anchor:
            return state

        # the whole range must stay free, not only the cell under the pointer
        for label in grid.labels[anchor:target + 1]:
            if not self.resolver.is_free(employee_id, label):
                return state

        self.state = replace(state, end_slot=slot)
        return self.state

    def commit(self) -> Optional[SelectionIntent]:
        """
        Finish the drag and emit a creation intent.

        The end instant is one slot width after the last selected label.
        """
        state = self.state
        if self.inert or not isinstance(state, Dragging):
            return None

        resolver = self.resolver
        start = resolver.grid.slot_time(resolver.view_date, state.start_slot, resolver.timezone)
        end = resolver.grid.slot_end_time(resolver.view_date, state.end_slot, resolver.timezone)

        intent = SelectionIntent(
            employee_id=state.employee_id,
            start=start,
            end=end,
            duration_minutes=TimeRange(start=start, end=end).duration_minutes(),
        )

        self.state = IDLE
        logger.debug("Selection committed: %s %s", intent.employee_id, intent.format_display())

        if self.on_range_selected is not None:
            self.on_range_selected(intent)

        return intent

    def cancel(self) -> DragState:
        """Discard any selection without emitting."""
        self.state = IDLE
        return self.state

    def is_selected(self, employee_id: str, slot: str) -> bool:
        """Whether the cell lies inside the active selection (inclusive)."""
        state = self.state
        if not isinstance(state, Dragging) or state.employee_id != employee_id:
            return False

        grid = self.resolver.grid
        position = grid.index(slot)
        return grid.index(state.start_slot) <= position <= grid.index(state.end_slot)
