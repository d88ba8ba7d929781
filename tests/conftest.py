"""
Shared fixtures for day grid tests.
"""

from datetime import date

import pendulum
import pytest

from daygrid.domain.models import Appointment, AppointmentStatus, Employee

TZ = "America/Sao_Paulo"
DAY = date(2024, 11, 25)  # Monday


def _make_appointment(
    appointment_id: str,
    employee_id: str,
    hhmm: str,
    duration: int,
    status: AppointmentStatus = AppointmentStatus.SCHEDULED,
    day: date = DAY,
) -> Appointment:
    hour, minute = (int(part) for part in hhmm.split(":"))
    return Appointment(
        id=appointment_id,
        employee_id=employee_id,
        start=pendulum.datetime(day.year, day.month, day.day, hour, minute, tz=TZ),
        duration_minutes=duration,
        status=status,
        client_name=f"Client {appointment_id}",
        service_name="Corte",
    )


@pytest.fixture
def make_appointment():
    """Factory for appointments given as local wall-clock times on 2024-11-25."""
    return _make_appointment


@pytest.fixture
def employees():
    return [Employee(id=f"e{i}", display_name=f"Employee {i}") for i in range(1, 4)]
