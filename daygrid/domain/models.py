"""
Domain models for the day calendar grid.
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import InvalidAppointmentError


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another."""
        return self.start < other.end and self.end > other.start

    def contains(self, moment: DateTime) -> bool:
        """Half-open membership test: start <= moment < end."""
        return self.start <= moment < self.end

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


class AppointmentStatus(str, Enum):
    """Lifecycle status of an appointment. Values match the wire format."""
    SCHEDULED = "agendado"
    COMPLETED = "concluido"
    CANCELED = "cancelado"


@dataclass(frozen=True)
class Employee:
    """A staff member shown as one column of the day grid."""
    id: str
    display_name: str


@dataclass(frozen=True)
class Appointment:
    """
    A booked appointment occupying ``[start, start + duration)``.

    ``start`` must be timezone-aware. Adapters convert it to the display
    timezone once, when the data enters the core.
    """
    id: str
    employee_id: str
    start: DateTime
    duration_minutes: int
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    client_name: str = ""
    service_name: str = ""

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise InvalidAppointmentError(
                f"Appointment {self.id} has non-positive duration {self.duration_minutes}"
            )

    @property
    def end(self) -> DateTime:
        return self.start.add(minutes=self.duration_minutes)

    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)

    def in_timezone(self, tz: str) -> "Appointment":
        """Return a copy whose start is expressed in ``tz``."""
        return replace(self, start=self.start.in_timezone(tz))

    def local_date_key(self, tz: str) -> str:
        """Calendar date (YYYY-MM-DD) of the start as seen in ``tz``."""
        return self.start.in_timezone(tz).to_date_string()


class SlotState(str, Enum):
    """Occupancy classification of one (employee, slot) cell."""
    STARTS = "starts"
    OCCUPIED = "occupied"
    FREE = "free"


@dataclass(frozen=True)
class Cell:
    """
    Result of classifying a single cell.

    ``conflicts`` lists other appointments of the same employee that also
    cover this slot but lost to ``appointment``.
    """
    state: SlotState
    appointment: Optional[Appointment] = None
    conflicts: Tuple[Appointment, ...] = ()

    @property
    def is_free(self) -> bool:
        return self.state is SlotState.FREE


@dataclass(frozen=True)
class SelectionIntent:
    """Creation intent emitted when a drag selection is committed."""
    employee_id: str
    start: DateTime
    end: DateTime
    duration_minutes: int

    def to_query_params(self) -> Dict[str, str]:
        """
        Prefill parameters for the appointment creation form.

        Instants are written as local wall-clock time without offset.
        """
        return {
            "funcionarioId": self.employee_id,
            "dataInicio": self.start.format("YYYY-MM-DD[T]HH:mm"),
            "dataFim": self.end.format("YYYY-MM-DD[T]HH:mm"),
            "duracao": str(self.duration_minutes),
        }

    def format_display(self) -> str:
        """Format: DD.MM.YYYY | HH:MM – HH:MM (N min)"""
        return (
            f"{self.start.format('DD.MM.YYYY')} | "
            f"{self.start.format('HH:mm')} – {self.end.format('HH:mm')} "
            f"({self.duration_minutes} min)"
        )


@dataclass(frozen=True)
class PageInfo:
    """
    Window over the ordered employee list.

    ``page_number`` is kept as requested; use ``clamp_page`` before asking
    for a page when the bounds are known.
    """
    page_number: int
    page_size: int
    total_employees: int

    def __post_init__(self):
        if self.page_size <= 0:
            raise ValueError(f"page_size must be greater than zero, got {self.page_size}")

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_employees / self.page_size)

    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page_number > 1

    @property
    def first_index(self) -> int:
        """1-based position of the first employee on this page."""
        return self.page_size * (self.page_number - 1) + 1

    @property
    def last_index(self) -> int:
        """1-based position of the last employee on this page."""
        return min(self.page_size * self.page_number, self.total_employees)


def clamp_page(page_number: int, total_pages: int) -> int:
    """Clamp ``page_number`` into ``[1, max(1, total_pages)]``."""
    return max(1, min(page_number, max(1, total_pages)))


@dataclass
class DaySchedule:
    """Everything the grid needs for one (date, page) request."""
    employees: List[Employee]
    appointments: List[Appointment]
    page_info: PageInfo
    day: Optional[pendulum.Date] = None
    skipped: List[str] = field(default_factory=list)  # ids rejected at the boundary
