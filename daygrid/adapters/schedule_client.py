"""
HTTP client for the salon backend's day-schedule endpoint.

This is the data boundary of the core: instants arrive as UTC strings and
are converted to the display timezone exactly once, here.
"""

import asyncio
import logging
from datetime import date
from typing import Any, Dict, List, Optional

import pendulum
import requests
from pendulum import DateTime

from ..domain.exceptions import InvalidAppointmentError, ScheduleFetchError
from ..domain.models import Appointment, AppointmentStatus, DaySchedule, Employee, PageInfo

logger = logging.getLogger(__name__)


def parse_datetime(datetime_str: str, timezone: str) -> DateTime:
    """
    Parse an ISO 8601 string and convert it to ``timezone``.

    Strings without an offset are taken as UTC, which is how the backend
    stores appointment instants.
    """
    dt = pendulum.parse(datetime_str)

    if isinstance(dt, DateTime):
        return dt.in_timezone(timezone)

    raise ValueError(f"Could not parse datetime: {datetime_str}")


def _parse_status(value: Optional[str]) -> AppointmentStatus:
    try:
        return AppointmentStatus(value or AppointmentStatus.SCHEDULED.value)
    except ValueError:
        logger.debug("Unknown appointment status %r, treating as scheduled", value)
        return AppointmentStatus.SCHEDULED


def parse_appointment(item: Dict[str, Any], timezone: str) -> Appointment:
    """Build an Appointment from one ``agendamentos`` entry."""
    employee = item.get("funcionario") or {}
    service = item.get("servico") or {}
    client = item.get("cliente") or {}

    return Appointment(
        id=str(item["id"]),
        employee_id=str(employee.get("id") or item["funcionarioId"]),
        start=parse_datetime(item["dataHora"], timezone),
        duration_minutes=int(service["duracao"]),
        status=_parse_status(item.get("status")),
        client_name=client.get("nome", ""),
        service_name=service.get("nome", ""),
    )


def parse_day_schedule(
    data: Dict[str, Any],
    timezone: str,
    day: Optional[date] = None,
) -> DaySchedule:
    """
    Parse the day-schedule response into domain models.

    Response format:
    {
        "funcionarios": [{"id": "...", "nome": "..."}],
        "agendamentos": [
            {
                "id": "...",
                "dataHora": "2024-11-25T12:00:00.000Z",
                "status": "agendado",
                "cliente": {"id": "...", "nome": "..."},
                "funcionario": {"id": "...", "nome": "..."},
                "servico": {"id": "...", "nome": "...", "duracao": 60}
            }
        ],
        "paginacao": {
            "paginaAtual": 1,
            "totalPaginas": 2,
            "totalFuncionarios": 8,
            "funcionariosPorPagina": 6,
            "temProximaPagina": true,
            "temPaginaAnterior": false
        }
    }

    Appointments that cannot be parsed or have a non-positive duration are
    skipped with a warning; their ids are kept on ``DaySchedule.skipped``.

    Raises:
        ScheduleFetchError: If the employee list or the pagination block is malformed
    """
    try:
        employees = [
            Employee(id=str(item["id"]), display_name=item.get("nome", ""))
            for item in data.get("funcionarios") or []
        ]

        pagination = data.get("paginacao") or {}
        page_info = PageInfo(
            page_number=int(pagination.get("paginaAtual", 1)),
            page_size=int(pagination.get("funcionariosPorPagina") or max(1, len(employees))),
            total_employees=int(pagination.get("totalFuncionarios", len(employees))),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ScheduleFetchError(f"Malformed day schedule response: {e!r}") from e

    appointments: List[Appointment] = []
    skipped: List[str] = []

    for item in data.get("agendamentos") or []:
        try:
            appointments.append(parse_appointment(item, timezone))
        except InvalidAppointmentError as e:
            logger.warning("Rejecting appointment from occupancy: %s", e)
            skipped.append(str(item.get("id", "")))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Could not parse appointment %s: %s", item.get("id"), e)
            skipped.append(str(item.get("id", "")))

    return DaySchedule(
        employees=employees,
        appointments=appointments,
        page_info=page_info,
        day=day,
        skipped=skipped,
    )


class ScheduleClient:
    """
    Client for the salon backend's appointment endpoints.

    Blocking ``requests`` calls are pushed to a worker thread so the async
    controller stays responsive.
    """

    DAY_ENDPOINT = "/api/agendamentos/dia"
    APPOINTMENT_ENDPOINT = "/api/agendamentos"

    def __init__(
        self,
        base_url: str,
        timezone: str,
        token: Optional[str] = None,
        timeout: float = 30,
    ):
        """
        Initialize the client.

        Args:
            base_url: Root URL of the salon backend
            timezone: IANA timezone the grid is displayed in
            token: Optional bearer token
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timezone = timezone
        self.timeout = timeout
        self.headers = {"Accept": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    async def get_day_schedule(self, day: date, page: int) -> DaySchedule:
        return await asyncio.to_thread(self.fetch_day_schedule, day, page)

    async def delete_appointment(self, appointment_id: str) -> None:
        await asyncio.to_thread(self.remove_appointment, appointment_id)

    def fetch_day_schedule(self, day: date, page: int) -> DaySchedule:
        """
        Fetch employees and appointments for ``day``, page ``page``.

        Raises:
            ScheduleFetchError: If the request fails or the body is not JSON
        """
        url = f"{self.base_url}{self.DAY_ENDPOINT}"
        params = {"data": day.isoformat(), "pagina": page}

        try:
            response = requests.get(
                url,
                headers=self.headers,
                params=params,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.RequestException as e:
            raise ScheduleFetchError(f"Failed to fetch day schedule for {day}: {e}") from e
        except ValueError as e:
            raise ScheduleFetchError(f"Invalid day schedule response for {day}: {e}") from e

        if not isinstance(data, dict):
            raise ScheduleFetchError(f"Unexpected day schedule payload for {day}")

        return parse_day_schedule(data, self.timezone, day=day)

    def remove_appointment(self, appointment_id: str) -> None:
        """
        Delete an appointment.

        Raises:
            ScheduleFetchError: If the request fails
        """
        url = f"{self.base_url}{self.APPOINTMENT_ENDPOINT}/{appointment_id}"

        try:
            response = requests.delete(url, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise ScheduleFetchError(f"Failed to delete appointment {appointment_id}: {e}") from e

        logger.info("Deleted appointment %s", appointment_id)
