"""
Main CLI application using Typer.
"""

import asyncio
import logging
from datetime import date
from pathlib import Path
from typing import Annotated, List, Optional
from urllib.parse import urlencode

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.mock_schedule_client import MockScheduleClient
from ..adapters.schedule_client import ScheduleClient
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import DayGridError
from ..domain.models import AppointmentStatus, SelectionIntent, SlotState
from ..services.day_calendar import DayCalendar, GridRow, LoadStatus

app = typer.Typer(
    name="daygrid",
    help="Day calendar grid for the salon schedule",
    add_completion=False
)

console = Console()

CREATE_APPOINTMENT_PATH = "/agendamentos/novo"

STATUS_STYLES = {
    AppointmentStatus.SCHEDULED: "blue",
    AppointmentStatus.COMPLETED: "green",
    AppointmentStatus.CANCELED: "red",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path], mock: bool) -> AppConfig:
    """Load config; mock runs may go without a config file."""
    config_path = config_file or get_default_config_path()
    if mock and not config_path.exists():
        return AppConfig()
    return AppConfig.load_from_yaml(config_path)


def _parse_day(value: Optional[str], tz: str) -> date:
    if not value:
        return pendulum.today(tz).date()
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        raise ValueError(f"Data inválida '{value}' (esperado YYYY-MM-DD): {e}") from e


def _build_calendar(config: AppConfig, view_date: date, mock: bool) -> DayCalendar:
    if mock:
        client = MockScheduleClient(timezone=config.timezone, page_size=config.grid.page_size)
    else:
        client = ScheduleClient(
            base_url=config.api.base_url,
            timezone=config.timezone,
            token=config.api.token,
            timeout=config.api.timeout_seconds,
        )

    return DayCalendar(
        client,
        view_date=view_date,
        grid=config.grid.build_grid(),
        timezone=config.timezone,
        canceled_blocks_slots=config.grid.canceled_blocks_slots,
    )


async def _open_day(calendar: DayCalendar, page: int) -> None:
    await calendar.refresh()
    if page != 1 and calendar.status is LoadStatus.READY:
        await calendar.go_to_page(page)


def _cell_text(cell) -> str:
    if cell.state is SlotState.STARTS:
        appointment = cell.appointment
        style = STATUS_STYLES.get(appointment.status, "white")
        text = f"[{style}]{appointment.client_name} - {appointment.service_name}[/{style}]"
        if cell.span > 1:
            text += f" [dim]({cell.span}x)[/dim]"
    elif cell.state is SlotState.OCCUPIED:
        text = "[dim]│[/dim]"
    elif cell.selected:
        text = "[bold blue]✓[/bold blue]"
    else:
        text = "[dim]Livre[/dim]"

    if cell.conflicts:
        text += " [bold yellow]⚠[/bold yellow]"
    return text


def _render_grid(calendar: DayCalendar, rows: List[GridRow]) -> Table:
    table = Table(
        title=f"Agenda do Dia - {calendar.view_date.strftime('%d.%m.%Y')}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Horário", style="bold yellow")
    for employee in calendar.employees:
        table.add_column(employee.display_name, justify="center")

    for row in rows:
        table.add_row(row.label, *(_cell_text(cell) for cell in row.cells))

    return table


def _print_page_footer(calendar: DayCalendar) -> None:
    page_info = calendar.schedule.page_info
    if page_info.total_pages > 1:
        console.print(
            f"Página {page_info.page_number}/{page_info.total_pages}: "
            f"{page_info.first_index} - {page_info.last_index} de "
            f"{page_info.total_employees} funcionários"
        )


def _print_intent(intent: SelectionIntent) -> None:
    console.print("[bold green]✓ Horário selecionado:[/bold green]")
    console.print(f"   Funcionário: {intent.employee_id}")
    console.print(f"   {intent.format_display()}")
    console.print(f"   Novo agendamento: {CREATE_APPOINTMENT_PATH}?{urlencode(intent.to_query_params())}")


@app.command()
def day(
    day_option: Annotated[Optional[str], typer.Option("--date", help="Day to show (YYYY-MM-DD). Defaults to today")] = None,
    page: Annotated[int, typer.Option("--page", "-p", help="Employee page")] = 1,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use bundled mock data instead of the backend.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Show the day grid: employees as columns, 30-minute slots as rows.

    Examples:

        daygrid day --mock
        daygrid day --date 2024-11-25 --page 2
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file, mock)
        view_date = _parse_day(day_option, config.timezone)
        calendar = _build_calendar(config, view_date, mock)

        asyncio.run(_open_day(calendar, page))

        if calendar.status is LoadStatus.ERROR:
            console.print(f"[bold red]Erro ao carregar dados do dia:[/bold red] {calendar.error}")
            raise typer.Exit(1)

        if not calendar.employees:
            console.print("[yellow]Nenhum funcionário encontrado[/yellow]")
            return

        console.print()
        console.print(_render_grid(calendar, calendar.rows()))
        _print_page_footer(calendar)
        console.print()

    except (FileNotFoundError, ValueError, DayGridError) as e:
        console.print(f"[bold red]Erro:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def select(
    employee: Annotated[str, typer.Argument(help="Employee id")],
    start: Annotated[str, typer.Argument(help="First slot label, e.g. 09:00")],
    end: Annotated[Optional[str], typer.Argument(help="Last slot label. Defaults to the first one")] = None,
    day_option: Annotated[Optional[str], typer.Option("--date", help="Day (YYYY-MM-DD). Defaults to today")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use bundled mock data instead of the backend.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Drag-select free slots of one employee and print the creation intent.

    Examples:

        daygrid select func-ana 09:00 10:00 --mock
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file, mock)
        view_date = _parse_day(day_option, config.timezone)
        calendar = _build_calendar(config, view_date, mock)

        asyncio.run(calendar.refresh())

        if calendar.status is LoadStatus.ERROR:
            console.print(f"[bold red]Erro ao carregar dados do dia:[/bold red] {calendar.error}")
            raise typer.Exit(1)

        calendar.pointer_down(employee, start)
        calendar.pointer_enter(employee, end or start)
        intent = calendar.pointer_up()

        if intent is None:
            console.print(f"[yellow]⚠ Horário {start} ocupado para {employee}.[/yellow]")
            raise typer.Exit(1)

        if intent.end != calendar.grid.slot_end_time(view_date, end or start, config.timezone):
            # the drag stopped short of the requested end slot
            console.print("[yellow]⚠ Seleção encurtada: há horários ocupados no intervalo.[/yellow]")

        _print_intent(intent)

    except (FileNotFoundError, ValueError, DayGridError) as e:
        console.print(f"[bold red]Erro:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def slots(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
):
    """
    Print the slot axis of the day grid.
    """
    try:
        config_path = config_file or get_default_config_path()
        config = AppConfig.load_from_yaml(config_path) if config_path.exists() else AppConfig()
    except ValueError as e:
        console.print(f"[bold red]Erro:[/bold red] {e}")
        raise typer.Exit(1)

    labels = config.grid.build_grid().labels
    console.print(" ".join(labels))
    console.print(f"[dim]{len(labels)} horários[/dim]")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]daygrid[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
