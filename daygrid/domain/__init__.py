"""
Domain layer - Pure grid, occupancy and selection logic without I/O.
"""

from .models import (
    Appointment,
    AppointmentStatus,
    Cell,
    DaySchedule,
    Employee,
    PageInfo,
    SelectionIntent,
    SlotState,
    TimeRange,
    clamp_page,
)
from .occupancy import OccupancyResolver
from .pagination import Page, paginate
from .selection import DragSelection, Dragging, Idle
from .slot_grid import SlotGrid, generate_slots

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "Cell",
    "DaySchedule",
    "DragSelection",
    "Dragging",
    "Employee",
    "Idle",
    "OccupancyResolver",
    "Page",
    "PageInfo",
    "SelectionIntent",
    "SlotGrid",
    "SlotState",
    "TimeRange",
    "clamp_page",
    "generate_slots",
    "paginate",
]
