from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from helpdesk_sla.config import STATUS_SLA_PHASE, ChangeType, SLAPhase, TicketStatus, sla_phase
from helpdesk_sla.sla.domain import BusinessCalendar, StatusPeriod, build_periods, finished_at

from tests.factories import at, status_change

CREATED = at(0, 8)


def assert_contiguous(periods, created_at):
    assert periods[0].start == created_at
    for previous, current in zip(periods, periods[1:]):
        assert previous.end == current.start
        assert previous.end > previous.start


class TestStatusClassification:
    """Every status belongs to exactly one SLA phase."""

    def test_table_is_exhaustive(self):
        assert set(STATUS_SLA_PHASE) == set(TicketStatus)

    @pytest.mark.parametrize("status, phase", [
        ("new", SLAPhase.ACTIVE),
        ("ongoing", SLAPhase.ACTIVE),
        ("escalated", SLAPhase.ACTIVE),
        ("in_analysis", SLAPhase.ACTIVE),
        ("reopened", SLAPhase.ACTIVE),
        ("suspended", SLAPhase.PAUSED),
        ("waiting_customer", SLAPhase.PAUSED),
        ("pending_deployment", SLAPhase.PAUSED),
        ("resolved", SLAPhase.FINISHED),
        ("closed", SLAPhase.FINISHED),
    ])
    def test_phase(self, status, phase):
        assert sla_phase(status) is phase

    def test_period_paused_flag(self):
        assert not StatusPeriod.for_status(TicketStatus.ONGOING, CREATED).is_paused
        assert StatusPeriod.for_status(TicketStatus.WAITING_CUSTOMER, CREATED).is_paused
        assert StatusPeriod.for_status(TicketStatus.CLOSED, CREATED).is_paused


class TestBuildPeriods:
    """Reconstruction of status periods from history."""

    def test_no_history_gives_single_open_period(self):
        periods = build_periods(CREATED, TicketStatus.NEW, [])
        assert periods == [StatusPeriod(TicketStatus.NEW, CREATED, None, False)]

    def test_none_history(self):
        periods = build_periods(CREATED, TicketStatus.NEW, None)
        assert len(periods) == 1
        assert periods[0].is_open

    def test_pause_and_resume(self):
        history = [
            status_change("ongoing", at(0, 9), "new"),
            status_change("waiting_customer", at(0, 12), "ongoing"),
            status_change("ongoing", at(0, 16), "waiting_customer"),
        ]
        periods = build_periods(CREATED, TicketStatus.ONGOING, history)

        assert [(p.status, p.start, p.end, p.is_paused) for p in periods] == [
            (TicketStatus.NEW, at(0, 8), at(0, 9), False),
            (TicketStatus.ONGOING, at(0, 9), at(0, 12), False),
            (TicketStatus.WAITING_CUSTOMER, at(0, 12), at(0, 16), True),
            (TicketStatus.ONGOING, at(0, 16), None, False),
        ]
        assert_contiguous(periods, CREATED)

    def test_history_order_does_not_matter(self):
        history = [
            status_change("ongoing", at(0, 16)),
            status_change("ongoing", at(0, 9)),
            status_change("suspended", at(0, 12)),
        ]
        periods = build_periods(CREATED, TicketStatus.ONGOING, history)
        assert [p.status for p in periods] == [
            TicketStatus.NEW, TicketStatus.ONGOING, TicketStatus.SUSPENDED, TicketStatus.ONGOING
        ]

    def test_non_status_changes_ignored(self):
        history = [
            status_change("escalated", at(0, 9), change_type=ChangeType.PRIORITY.value),
            status_change(None, at(0, 10), change_type="assignment"),
            status_change("ongoing", at(0, 11), change_type=None),
        ]
        periods = build_periods(CREATED, TicketStatus.ONGOING, history)
        assert [(p.status, p.start) for p in periods] == [
            (TicketStatus.NEW, at(0, 8)),
            (TicketStatus.ONGOING, at(0, 11)),
        ]

    def test_malformed_events_skipped(self):
        history = [
            status_change("teleported", at(0, 9)),
            status_change(None, at(0, 10)),
            status_change("suspended", "not-a-date"),
            status_change("suspended", None),
            status_change("ongoing", "2025-03-03T11:00:00"),
        ]
        periods = build_periods(CREATED, TicketStatus.ONGOING, history)
        assert [(p.status, p.start) for p in periods] == [
            (TicketStatus.NEW, at(0, 8)),
            (TicketStatus.ONGOING, at(0, 11)),
        ]

    def test_aware_event_on_naive_ticket_is_aligned(self):
        history = [
            status_change("waiting_customer", "2025-03-03T10:00:00Z"),
            status_change("ongoing", datetime(2025, 3, 3, 12, tzinfo=timezone.utc)),
        ]
        periods = build_periods(CREATED, TicketStatus.ONGOING, history)
        assert [(p.status, p.start) for p in periods] == [
            (TicketStatus.NEW, at(0, 8)),
            (TicketStatus.WAITING_CUSTOMER, at(0, 10)),
            (TicketStatus.ONGOING, at(0, 12)),
        ]

    def test_aware_event_read_in_calendar_zone(self):
        calendar = BusinessCalendar(tz=ZoneInfo("America/Sao_Paulo"))
        history = [status_change("ongoing", "2025-03-03T13:00:00+00:00")]
        periods = build_periods(CREATED, TicketStatus.ONGOING, history, calendar=calendar)
        assert periods[1].start == at(0, 10)

    def test_only_garbage_gives_single_running_period(self):
        history = [status_change("???", "yesterday"), object()]
        periods = build_periods(CREATED, TicketStatus.ONGOING, history)
        assert periods == [StatusPeriod(TicketStatus.NEW, CREATED, None, False)]

    def test_events_before_creation_are_clamped(self):
        history = [status_change("ongoing", at(0, 7))]
        periods = build_periods(CREATED, TicketStatus.ONGOING, history)
        assert periods == [StatusPeriod(TicketStatus.ONGOING, CREATED, None, False)]

    def test_simultaneous_events_last_one_wins(self):
        history = [
            status_change("suspended", at(0, 10)),
            status_change("ongoing", at(0, 10)),
        ]
        periods = build_periods(CREATED, TicketStatus.ONGOING, history)
        assert [(p.status, p.start, p.end) for p in periods] == [
            (TicketStatus.NEW, at(0, 8), at(0, 10)),
            (TicketStatus.ONGOING, at(0, 10), None),
        ]

    def test_initial_status(self):
        periods = build_periods(CREATED, TicketStatus.ONGOING, [], initial_status=TicketStatus.ONGOING)
        assert periods[0].status is TicketStatus.ONGOING


class TestFinishedTickets:
    """A ticket in a finished status has a frozen clock."""

    def test_final_finished_period_omitted(self):
        history = [
            status_change("ongoing", at(0, 9)),
            status_change("resolved", at(0, 15)),
        ]
        periods = build_periods(CREATED, TicketStatus.RESOLVED, history)

        assert [(p.status, p.end) for p in periods] == [
            (TicketStatus.NEW, at(0, 9)),
            (TicketStatus.ONGOING, at(0, 15)),
        ]
        assert finished_at(periods) == at(0, 15)

    def test_closed_counts_as_finished(self):
        history = [status_change("closed", at(1, 10))]
        periods = build_periods(CREATED, TicketStatus.CLOSED, history)
        assert finished_at(periods) == at(1, 10)

    def test_finished_without_matching_history_keeps_open_period(self):
        periods = build_periods(CREATED, TicketStatus.RESOLVED, [])
        assert periods[-1].is_open
        assert finished_at(periods) is None

    def test_finished_at_creation_instant(self):
        history = [status_change("resolved", CREATED)]
        periods = build_periods(CREATED, TicketStatus.RESOLVED, history)
        assert periods == [StatusPeriod(TicketStatus.NEW, CREATED, CREATED, False)]
        assert finished_at(periods) == CREATED

    def test_reopened_ticket_runs_again(self):
        history = [
            status_change("resolved", at(0, 12)),
            status_change("reopened", at(0, 14)),
        ]
        periods = build_periods(CREATED, TicketStatus.REOPENED, history)

        assert [(p.status, p.is_paused, p.is_open) for p in periods] == [
            (TicketStatus.NEW, False, False),
            (TicketStatus.RESOLVED, True, False),
            (TicketStatus.REOPENED, False, True),
        ]
        assert finished_at(periods) is None
        assert_contiguous(periods, CREATED)
