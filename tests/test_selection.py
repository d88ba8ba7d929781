"""
Tests for the drag selection state machine.
"""

from datetime import date

import pendulum
import pytest

from daygrid.domain.occupancy import OccupancyResolver
from daygrid.domain.selection import Dragging, DragSelection, Idle

TZ = "America/Sao_Paulo"
DAY = date(2024, 11, 25)


@pytest.fixture
def selection(make_appointment):
    """Employee e1 is busy 10:30-11:30, e2 is free all day."""
    resolver = OccupancyResolver(
        [make_appointment("a1", "e1", "10:30", 60)],
        DAY,
        timezone=TZ,
    )
    return DragSelection(resolver)


class TestStart:
    """Tests for the start transition."""

    def test_start_on_free_cell(self, selection):
        state = selection.start("e1", "09:00")

        assert state == Dragging(employee_id="e1", start_slot="09:00", end_slot="09:00")
        assert selection.is_dragging

    def test_start_on_occupied_cell_is_ignored(self, selection):
        assert selection.start("e1", "10:30") == Idle()
        assert selection.start("e1", "11:00") == Idle()
        assert not selection.is_dragging


class TestExtend:
    """Tests for the extend transition."""

    def test_extend_forward(self, selection):
        selection.start("e1", "09:00")

        state = selection.extend("e1", "10:00")

        assert state.end_slot == "10:00"

    def test_extend_into_occupied_keeps_last_valid_end(self, selection):
        selection.start("e1", "09:00")
        selection.extend("e1", "10:00")

        state = selection.extend("e1", "10:30")

        assert state.end_slot == "10:00"
        assert selection.is_dragging

    def test_extend_past_occupied_block_is_ignored(self, selection):
        """The whole dragged range must stay free."""
        selection.start("e1", "09:00")

        state = selection.extend("e1", "12:00")

        assert state.end_slot == "09:00"

    def test_extend_backward_is_ignored(self, selection):
        selection.start("e1", "09:00")

        assert selection.extend("e1", "08:30").end_slot == "09:00"

    def test_reversed_dragging_state_is_rejected(self):
        with pytest.raises(ValueError):
            Dragging(employee_id="e1", start_slot="10:00", end_slot="09:00")

    def test_extend_other_employee_is_ignored(self, selection):
        selection.start("e1", "09:00")

        state = selection.extend("e2", "09:30")

        assert state == Dragging(employee_id="e1", start_slot="09:00", end_slot="09:00")

    def test_extend_while_idle_does_nothing(self, selection):
        assert selection.extend("e1", "09:30") == Idle()

    def test_shrink_back_towards_anchor(self, selection):
        selection.start("e2", "09:00")
        selection.extend("e2", "11:00")

        assert selection.extend("e2", "09:30").end_slot == "09:30"


class TestCommitAndCancel:
    """Tests for commit and cancel."""

    def test_commit_emits_intent(self, selection):
        """Dragging 09:00-10:00 books 09:00-10:30 (90 minutes)."""
        emitted = []
        selection.on_range_selected = emitted.append
        selection.start("e2", "09:00")
        selection.extend("e2", "09:30")
        selection.extend("e2", "10:00")

        intent = selection.commit()

        assert intent.employee_id == "e2"
        assert intent.start == pendulum.datetime(2024, 11, 25, 9, 0, tz=TZ)
        assert intent.end == pendulum.datetime(2024, 11, 25, 10, 30, tz=TZ)
        assert intent.duration_minutes == 90
        assert emitted == [intent]
        assert selection.state == Idle()

    def test_single_cell_selection_is_one_slot(self, selection):
        selection.start("e2", "19:30")

        intent = selection.commit()

        assert intent.duration_minutes == 30
        assert intent.end.format("HH:mm") == "20:00"

    def test_commit_while_idle_returns_none(self, selection):
        assert selection.commit() is None

    def test_cancel_emits_nothing(self, selection):
        emitted = []
        selection.on_range_selected = emitted.append
        selection.start("e2", "09:00")

        selection.cancel()

        assert selection.state == Idle()
        assert selection.commit() is None
        assert emitted == []

    def test_intent_query_params(self, selection):
        selection.start("e2", "09:00")
        selection.extend("e2", "10:00")

        params = selection.commit().to_query_params()

        assert params == {
            "funcionarioId": "e2",
            "dataInicio": "2024-11-25T09:00",
            "dataFim": "2024-11-25T10:30",
            "duracao": "90",
        }


class TestRenderingAndInertness:
    """Tests for is_selected and the inert flag."""

    def test_is_selected_covers_inclusive_range(self, selection):
        selection.start("e2", "09:00")
        selection.extend("e2", "10:00")

        assert selection.is_selected("e2", "09:00")
        assert selection.is_selected("e2", "09:30")
        assert selection.is_selected("e2", "10:00")
        assert not selection.is_selected("e2", "10:30")
        assert not selection.is_selected("e2", "08:30")
        assert not selection.is_selected("e1", "09:30")

    def test_inert_blocks_transitions(self, selection):
        selection.inert = True

        assert selection.start("e2", "09:00") == Idle()
        assert selection.commit() is None
