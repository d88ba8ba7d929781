"""
Application service driving one day view of the calendar.

The controller owns the viewed date, the employee page, the loaded
schedule and the drag selection. It fetches data through a schedule client
adapter and delegates occupancy and selection to the domain layer. Only the
most recently requested (date, page) response is ever applied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import List, Optional, Protocol, Sequence, Tuple

from ..domain.exceptions import DayGridError
from ..domain.models import Appointment, DaySchedule, Employee, SelectionIntent, SlotState, clamp_page
from ..domain.occupancy import DEFAULT_TIMEZONE, OccupancyResolver
from ..domain.selection import DragSelection, RangeSelectedHandler
from ..domain.slot_grid import DEFAULT_GRID, SlotGrid

logger = logging.getLogger(__name__)


class ScheduleClientProtocol(Protocol):
    """Protocol describing the schedule client behaviour needed by the service."""

    async def get_day_schedule(self, day: date, page: int) -> DaySchedule:
        """Return employees of ``page`` and all appointments of ``day``."""

    async def delete_appointment(self, appointment_id: str) -> None:
        """Delete one appointment."""


class LoadStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class GridCell:
    """Render model of one cell."""
    employee_id: str
    label: str
    state: SlotState
    appointment: Optional[Appointment]
    span: int
    selected: bool
    conflicts: Tuple[Appointment, ...] = ()


@dataclass(frozen=True)
class GridRow:
    label: str
    cells: Tuple[GridCell, ...]


class DayCalendar:
    """
    Day view controller.

    Pointer events are ignored unless the schedule is loaded (``READY``).
    Changing the date resets the page to 1 and cancels any selection.
    """

    def __init__(
        self,
        schedule_client: ScheduleClientProtocol,
        *,
        view_date: date,
        grid: SlotGrid = DEFAULT_GRID,
        timezone: str = DEFAULT_TIMEZONE,
        canceled_blocks_slots: bool = True,
        on_range_selected: Optional[RangeSelectedHandler] = None,
    ) -> None:
        self._schedule_client = schedule_client
        self.grid = grid
        self.timezone = timezone
        self.canceled_blocks_slots = canceled_blocks_slots
        self.view_date = _as_date(view_date)
        self.page_number = 1
        self.status = LoadStatus.LOADING
        self.schedule: Optional[DaySchedule] = None
        self.error: Optional[str] = None
        self._request_token = 0

        self.selection = DragSelection(self._build_resolver([]), on_range_selected)
        self.selection.inert = True

    @property
    def resolver(self) -> OccupancyResolver:
        return self.selection.resolver

    @property
    def employees(self) -> List[Employee]:
        return list(self.schedule.employees) if self.schedule else []

    def _build_resolver(self, appointments: Sequence[Appointment]) -> OccupancyResolver:
        return OccupancyResolver(
            appointments,
            self.view_date,
            grid=self.grid,
            timezone=self.timezone,
            canceled_blocks_slots=self.canceled_blocks_slots,
        )

    async def refresh(self) -> bool:
        """
        Load the schedule for the current date and page.

        Returns False when the fetch failed or its response was superseded
        by a newer request.
        """
        self._request_token += 1
        token = self._request_token
        day, page = self.view_date, self.page_number

        self.status = LoadStatus.LOADING
        self.selection.cancel()
        self.selection.inert = True

        try:
            schedule = await self._schedule_client.get_day_schedule(day, page)
        except DayGridError as e:
            if token != self._request_token:
                return False
            logger.error("Could not load day schedule for %s page %s: %s", day, page, e)
            self.schedule = None
            self.error = str(e)
            self.status = LoadStatus.ERROR
            self.selection.resolver = self._build_resolver([])
            return False

        if token != self._request_token:
            logger.debug("Discarding stale schedule for %s page %s", day, page)
            return False

        self.schedule = schedule
        self.error = None
        self.selection.resolver = self._build_resolver(schedule.appointments)
        self.status = LoadStatus.READY
        self.selection.inert = False
        return True

    async def set_date(self, day: date) -> bool:
        self.view_date = _as_date(day)
        self.page_number = 1
        self.selection.cancel()
        return await self.refresh()

    async def shift_day(self, days: int) -> bool:
        """Move the view by ``days`` (negative for earlier days)."""
        return await self.set_date(self.view_date + timedelta(days=days))

    async def go_to_page(self, page_number: int) -> bool:
        total_pages = self.schedule.page_info.total_pages if self.schedule else 1
        self.page_number = clamp_page(page_number, total_pages)
        return await self.refresh()

    async def next_page(self) -> bool:
        # bound on the requested page, which may be ahead of the loaded one
        if not self.schedule or self.page_number >= self.schedule.page_info.total_pages:
            return False
        self.page_number += 1
        return await self.refresh()

    async def previous_page(self) -> bool:
        if not self.schedule or self.page_number <= 1:
            return False
        self.page_number -= 1
        return await self.refresh()

    async def delete_appointment(self, appointment_id: str) -> bool:
        """Delete an appointment and reload the day."""
        try:
            await self._schedule_client.delete_appointment(appointment_id)
        except DayGridError as e:
            logger.error("Could not delete appointment %s: %s", appointment_id, e)
            return False

        return await self.refresh()

    def pointer_down(self, employee_id: str, slot: str) -> None:
        if self.status is LoadStatus.READY:
            self.selection.start(employee_id, slot)

    def pointer_enter(self, employee_id: str, slot: str) -> None:
        if self.status is LoadStatus.READY:
            self.selection.extend(employee_id, slot)

    def pointer_up(self) -> Optional[SelectionIntent]:
        if self.status is not LoadStatus.READY:
            return None
        return self.selection.commit()

    def pointer_leave(self) -> None:
        self.selection.cancel()

    def rows(self) -> List[GridRow]:
        """Render model: one row per slot, one cell per employee on the page."""
        rows: List[GridRow] = []
        employees = self.employees

        for label in self.grid:
            cells = []
            for employee in employees:
                cell = self.resolver.classify(employee.id, label)
                span = 1
                if cell.state is SlotState.STARTS and cell.appointment is not None:
                    span = self.resolver.span_slots(cell.appointment)
                cells.append(
                    GridCell(
                        employee_id=employee.id,
                        label=label,
                        state=cell.state,
                        appointment=cell.appointment,
                        span=span,
                        selected=self.selection.is_selected(employee.id, label),
                        conflicts=cell.conflicts,
                    )
                )
            rows.append(GridRow(label=label, cells=tuple(cells)))

        return rows


def _as_date(value: date) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value
