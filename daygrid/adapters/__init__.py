"""
Adapters layer - External integrations (salon backend HTTP API).
"""

from .mock_schedule_client import MockScheduleClient
from .schedule_client import ScheduleClient, parse_day_schedule

__all__ = ["MockScheduleClient", "ScheduleClient", "parse_day_schedule"]
