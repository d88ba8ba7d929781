"""
Mock day-schedule client for running the grid without a backend.
"""

import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum

from ..domain.models import DaySchedule, Employee
from ..domain.pagination import paginate
from .schedule_client import parse_day_schedule


class MockScheduleClient:
    """
    Mock client that simulates the backend's day-schedule endpoint.

    Appointments in ``mock_day_data.json`` are stored as local wall-clock
    times and replayed on whatever day is requested. They are serialised to
    UTC and parsed back through the real boundary code, and employees are
    paginated the way the backend does it.
    """

    def __init__(
        self,
        timezone: str = "America/Sao_Paulo",
        page_size: int = 6,
        data_file: Optional[Path] = None,
    ):
        self.timezone = timezone
        self.page_size = page_size
        self.data_file = data_file or Path(__file__).parent / "mock_day_data.json"
        self.deleted_ids: set[str] = set()
        self._load_day_data()

    def _load_day_data(self):
        """Load mock day data from JSON file."""
        if self.data_file.exists():
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        else:
            # Fallback to empty if file doesn't exist
            data = {}

        self.employees_data: List[Dict[str, Any]] = data.get("funcionarios", [])
        self.appointment_templates: List[Dict[str, Any]] = data.get("agendamentos", [])

    def _wire_appointments(self, day: date) -> List[Dict[str, Any]]:
        """Render templates for ``day`` in the backend's response format."""
        items = []

        for template in self.appointment_templates:
            if template["id"] in self.deleted_ids:
                continue

            hour, minute = (int(part) for part in template["hora"].split(":"))
            local_start = pendulum.datetime(
                day.year, day.month, day.day, hour, minute, tz=self.timezone
            )
            items.append(
                {
                    "id": template["id"],
                    "dataHora": local_start.in_timezone("UTC").to_iso8601_string(),
                    "status": template.get("status", "agendado"),
                    "cliente": {"nome": template.get("cliente", "")},
                    "funcionario": {"id": template["funcionarioId"]},
                    "servico": {
                        "nome": template.get("servico", ""),
                        "duracao": template["duracao"],
                    },
                }
            )

        return items

    def fetch_day_schedule(self, day: date, page: int) -> DaySchedule:
        parsed = parse_day_schedule(
            {"agendamentos": self._wire_appointments(day)},
            self.timezone,
            day=day,
        )

        employees = sorted(
            (Employee(id=str(e["id"]), display_name=e.get("nome", "")) for e in self.employees_data),
            key=lambda e: e.display_name,
        )
        page_result = paginate(employees, parsed.appointments, page, self.page_size)

        return DaySchedule(
            employees=page_result.employees,
            appointments=parsed.appointments,
            page_info=page_result.page_info,
            day=day,
            skipped=parsed.skipped,
        )

    async def get_day_schedule(self, day: date, page: int) -> DaySchedule:
        return self.fetch_day_schedule(day, page)

    async def delete_appointment(self, appointment_id: str) -> None:
        self.deleted_ids.add(appointment_id)
