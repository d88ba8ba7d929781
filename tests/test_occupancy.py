"""
Tests for the occupancy resolver.
"""

from datetime import date

import pendulum

from daygrid.domain.models import Appointment, AppointmentStatus, SlotState
from daygrid.domain.occupancy import OccupancyResolver
from daygrid.domain.slot_grid import generate_slots

TZ = "America/Sao_Paulo"
DAY = date(2024, 11, 25)


def _states(resolver, employee_id):
    return {label: resolver.classify(employee_id, label).state for label in generate_slots()}


class TestClassify:
    """Tests for OccupancyResolver.classify."""

    def test_free_when_no_appointments(self):
        resolver = OccupancyResolver([], DAY, timezone=TZ)

        assert all(state is SlotState.FREE for state in _states(resolver, "e1").values())

    def test_start_and_occupied_slots(self, make_appointment):
        """A 60-minute appointment starts at its slot and occupies the next one."""
        appointment = make_appointment("a1", "e1", "10:00", 60)
        resolver = OccupancyResolver([appointment], DAY, timezone=TZ)

        start_cell = resolver.classify("e1", "10:00")
        assert start_cell.state is SlotState.STARTS
        assert start_cell.appointment.id == "a1"

        assert resolver.classify("e1", "10:30").state is SlotState.OCCUPIED
        assert resolver.classify("e1", "11:00").state is SlotState.FREE
        assert resolver.classify("e1", "09:30").state is SlotState.FREE

    def test_other_employee_unaffected(self, make_appointment):
        resolver = OccupancyResolver([make_appointment("a1", "e1", "10:00", 60)], DAY, timezone=TZ)

        assert resolver.classify("e2", "10:00").state is SlotState.FREE

    def test_coverage_matches_span(self, make_appointment):
        """Exactly ceil(d/30) slots are claimed: one STARTS, the rest OCCUPIED."""
        for duration in (30, 45, 60, 90, 120):
            appointment = make_appointment("a1", "e1", "14:00", duration)
            resolver = OccupancyResolver([appointment], DAY, timezone=TZ)
            states = list(_states(resolver, "e1").values())

            assert states.count(SlotState.STARTS) == 1
            assert states.count(SlotState.OCCUPIED) == resolver.span_slots(appointment) - 1
            assert resolver.span_slots(appointment) == -(-duration // 30)

    def test_utc_input_is_converted(self):
        """Instants given in UTC land on their local wall-clock slot."""
        appointment = Appointment(
            id="a1",
            employee_id="e1",
            start=pendulum.datetime(2024, 11, 25, 12, 0, tz="UTC"),
            duration_minutes=30,
        )
        resolver = OccupancyResolver([appointment], DAY, timezone=TZ)

        assert resolver.classify("e1", "09:00").state is SlotState.STARTS
        assert resolver.classify("e1", "12:00").state is SlotState.FREE

    def test_day_compared_by_local_date(self):
        """UTC date differs from local date near midnight."""
        late_evening = Appointment(  # 21:00 local on the 25th
            id="late",
            employee_id="e1",
            start=pendulum.parse("2024-11-26T00:00:00Z"),
            duration_minutes=30,
        )
        previous_night = Appointment(  # 23:00 local on the 24th
            id="prev",
            employee_id="e2",
            start=pendulum.parse("2024-11-25T02:00:00Z"),
            duration_minutes=30,
        )

        resolver = OccupancyResolver([late_evening, previous_night], DAY, timezone=TZ)
        next_day = OccupancyResolver([late_evening, previous_night], date(2024, 11, 26), timezone=TZ)

        assert resolver.busy_employee_ids() == ["e1"]
        assert next_day.busy_employee_ids() == []

    def test_off_grid_start_only_occupies(self, make_appointment):
        """A 09:15 start has no STARTS cell; 09:30 is occupied."""
        resolver = OccupancyResolver([make_appointment("a1", "e1", "09:15", 30)], DAY, timezone=TZ)

        assert resolver.classify("e1", "09:00").state is SlotState.FREE
        assert resolver.classify("e1", "09:30").state is SlotState.OCCUPIED

    def test_crossing_closing_time_not_clipped(self, make_appointment):
        appointment = make_appointment("a1", "e1", "19:30", 90)
        resolver = OccupancyResolver([appointment], DAY, timezone=TZ)

        assert resolver.classify("e1", "19:30").state is SlotState.STARTS
        assert resolver.classify("e1", "20:00").state is SlotState.OCCUPIED
        assert resolver.span_slots(appointment) == 3

    def test_classify_is_idempotent(self, make_appointment):
        resolver = OccupancyResolver([make_appointment("a1", "e1", "10:00", 60)], DAY, timezone=TZ)

        assert resolver.classify("e1", "10:30") == resolver.classify("e1", "10:30")
        assert _states(resolver, "e1") == _states(resolver, "e1")


class TestCanceledAppointments:
    """Canceled appointments block slots unless configured otherwise."""

    def test_canceled_blocks_by_default(self, make_appointment):
        canceled = make_appointment("a1", "e1", "10:00", 30, AppointmentStatus.CANCELED)
        resolver = OccupancyResolver([canceled], DAY, timezone=TZ)

        assert resolver.classify("e1", "10:00").state is SlotState.STARTS

    def test_canceled_released_when_disabled(self, make_appointment):
        canceled = make_appointment("a1", "e1", "10:00", 30, AppointmentStatus.CANCELED)
        resolver = OccupancyResolver([canceled], DAY, timezone=TZ, canceled_blocks_slots=False)

        assert resolver.classify("e1", "10:00").state is SlotState.FREE


class TestOverlaps:
    """Overlapping appointments of one employee."""

    def test_earliest_start_wins_and_conflict_is_reported(self, make_appointment):
        first = make_appointment("a", "e1", "10:00", 60)
        second = make_appointment("b", "e1", "10:30", 30)

        for ordering in ([first, second], [second, first]):
            resolver = OccupancyResolver(ordering, DAY, timezone=TZ)
            cell = resolver.classify("e1", "10:30")

            assert cell.state is SlotState.OCCUPIED
            assert cell.appointment.id == "a"
            assert [c.id for c in cell.conflicts] == ["b"]

    def test_conflicts_lists_overlapping_pairs(self, make_appointment):
        resolver = OccupancyResolver(
            [
                make_appointment("a", "e1", "10:00", 60),
                make_appointment("b", "e1", "10:30", 30),
                make_appointment("c", "e1", "11:00", 30),
                make_appointment("d", "e2", "10:00", 30),
            ],
            DAY,
            timezone=TZ,
        )

        assert [(x.id, y.id) for x, y in resolver.conflicts()] == [("a", "b")]

    def test_same_start_tie_broken_by_id(self, make_appointment):
        resolver = OccupancyResolver(
            [make_appointment("z", "e1", "10:00", 30), make_appointment("m", "e1", "10:00", 30)],
            DAY,
            timezone=TZ,
        )

        cell = resolver.classify("e1", "10:00")
        assert cell.appointment.id == "m"
        assert cell.conflicts[0].id == "z"
