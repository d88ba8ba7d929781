"""
Occupancy resolution for the day grid.

Given the appointments of a day and the slot axis, decide for every
(employee, slot) pair whether the slot is where an appointment starts,
is covered by an appointment that started earlier, or is free.
"""

import logging
import math
from datetime import date, datetime
from typing import Dict, Iterable, List, Tuple

from pendulum import DateTime

from .models import Appointment, AppointmentStatus, Cell, SlotState
from .slot_grid import DEFAULT_GRID, SlotGrid

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/Sao_Paulo"


class OccupancyResolver:
    """
    Classifies cells of one calendar day.

    Days are compared by their local calendar date string, never by instant
    arithmetic, so an appointment late in the evening is not pulled into the
    next day when the UTC date differs.

    When appointments of one employee overlap, the one with the earliest
    start wins a contested slot (ties broken by id) and the others are
    reported on ``Cell.conflicts``.
    """

    def __init__(
        self,
        appointments: Iterable[Appointment],
        view_date: date,
        grid: SlotGrid = DEFAULT_GRID,
        timezone: str = DEFAULT_TIMEZONE,
        canceled_blocks_slots: bool = True,
    ):
        if isinstance(view_date, datetime):
            view_date = view_date.date()

        self.view_date = view_date
        self.grid = grid
        self.timezone = timezone
        self.canceled_blocks_slots = canceled_blocks_slots
        self._day_key = view_date.isoformat()
        self._by_employee = self._index_appointments(appointments)

        for first, second in self.conflicts():
            logger.warning(
                "Overlapping appointments %s and %s for employee %s on %s",
                first.id,
                second.id,
                first.employee_id,
                self._day_key,
            )

    def _index_appointments(
        self,
        appointments: Iterable[Appointment],
    ) -> Dict[str, List[Appointment]]:
        by_employee: Dict[str, List[Appointment]] = {}

        for appointment in appointments:
            local = appointment.in_timezone(self.timezone)

            if local.local_date_key(self.timezone) != self._day_key:
                continue

            if local.status is AppointmentStatus.CANCELED and not self.canceled_blocks_slots:
                continue

            by_employee.setdefault(local.employee_id, []).append(local)

        for employee_appointments in by_employee.values():
            employee_appointments.sort(key=lambda a: (a.start, a.id))

        return by_employee

    def appointments_for(self, employee_id: str) -> List[Appointment]:
        """Appointments of ``employee_id`` on the viewed day, earliest first."""
        return list(self._by_employee.get(employee_id, ()))

    def busy_employee_ids(self) -> List[str]:
        return list(self._by_employee)

    def classify(self, employee_id: str, slot: str) -> Cell:
        """Classify the cell of ``employee_id`` at ``slot``."""
        moment = self.grid.slot_time(self.view_date, slot, self.timezone)
        covering = self._covering(employee_id, moment)

        if not covering:
            return Cell(state=SlotState.FREE)

        winner = covering[0]
        state = SlotState.STARTS if winner.start == moment else SlotState.OCCUPIED

        return Cell(state=state, appointment=winner, conflicts=tuple(covering[1:]))

    def is_free(self, employee_id: str, slot: str) -> bool:
        return self.classify(employee_id, slot).is_free

    def _covering(self, employee_id: str, moment: DateTime) -> List[Appointment]:
        return [
            appointment
            for appointment in self._by_employee.get(employee_id, ())
            if appointment.time_range().contains(moment)
        ]

    def span_slots(self, appointment: Appointment) -> int:
        """Number of slots the appointment covers visually."""
        return math.ceil(appointment.duration_minutes / self.grid.slot_minutes)

    def conflicts(self) -> List[Tuple[Appointment, Appointment]]:
        """All pairs of overlapping appointments for the same employee."""
        pairs: List[Tuple[Appointment, Appointment]] = []

        for employee_appointments in self._by_employee.values():
            for i, first in enumerate(employee_appointments):
                for second in employee_appointments[i + 1:]:
                    if not first.time_range().overlaps(second.time_range()):
                        break
                    pairs.append((first, second))

        return pairs
