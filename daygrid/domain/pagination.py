"""
Employee pagination for the day grid.

Employees with appointments on the viewed day come first so the busiest
staff are on the first page.
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from .models import Appointment, Employee, PageInfo


@dataclass
class Page:
    """One page of employees plus its window information."""
    employees: List[Employee]
    page_info: PageInfo


def order_by_activity(
    employees: Sequence[Employee],
    busy_employee_ids: Iterable[str],
) -> List[Employee]:
    """
    Stable partition: employees in ``busy_employee_ids`` first, the rest after.

    Relative order inside each group is preserved.
    """
    busy = set(busy_employee_ids)
    with_appointments = [e for e in employees if e.id in busy]
    without_appointments = [e for e in employees if e.id not in busy]
    return with_appointments + without_appointments


def paginate(
    employees: Sequence[Employee],
    appointments_today: Iterable[Appointment],
    page_number: int,
    page_size: int,
) -> Page:
    """
    Return the requested page of employees.

    A page past the end yields an empty employee list; callers clamp with
    ``clamp_page`` when they need to.
    """
    ordered = order_by_activity(
        employees,
        (appointment.employee_id for appointment in appointments_today),
    )

    page_info = PageInfo(
        page_number=page_number,
        page_size=page_size,
        total_employees=len(ordered),
    )

    offset = max(0, (page_number - 1) * page_size)
    return Page(
        employees=ordered[offset:offset + page_size] if page_number >= 1 else [],
        page_info=page_info,
    )
