"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .day_calendar import DayCalendar, GridCell, GridRow, LoadStatus, ScheduleClientProtocol

__all__ = ["DayCalendar", "GridCell", "GridRow", "LoadStatus", "ScheduleClientProtocol"]
