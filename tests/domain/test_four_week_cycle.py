import logging
import random
from datetime import date, datetime, timedelta

import pytest

from compliance_cycles.domain import dates
from compliance_cycles.domain.configuration import ComplianceConfig, FourWeekCycleConfig
from compliance_cycles.domain.entities import CycleWindowState
from compliance_cycles.domain.exceptions import InvalidArgument
from compliance_cycles.domain.four_week_cycle import FourWeekCycleModel, format_cycle_label
from compliance_cycles.domain.logging import DOMAIN_LOGGER_NAME


def eod(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, 23, 59, 59, 999999)


def _random_ranges(seed: int, count: int, max_span: int):
    rng = random.Random(seed)
    for _ in range(count):
        start = date(2020, 1, 1) + timedelta(days=rng.randrange(0, 2500))
        yield start, start + timedelta(days=rng.randrange(0, max_span))


def test_first_cycles_match_worked_example(four_week, scenario_a):
    cycles = four_week.cycles(*scenario_a)

    first, second, third = cycles[:3]
    assert first.period_start == datetime(2025, 12, 15)
    assert first.period_end == eod(2026, 1, 11)
    assert first.submission_window_start == datetime(2026, 1, 12)
    assert first.due_at == eod(2026, 1, 16)
    assert first.report_due_at == first.due_at == first.submission_window_end
    assert first.visit_due_at == eod(2026, 1, 16)
    assert first.days_in_period == 28

    assert second.period_start == datetime(2026, 1, 12)
    assert second.period_end == eod(2026, 2, 8)
    assert second.due_at == eod(2026, 2, 13)

    assert third.period_start == datetime(2026, 2, 9)
    assert third.period_end == eod(2026, 3, 8)
    assert third.due_at == eod(2026, 3, 13)


def test_final_cycle_is_truncated_to_the_end_date(four_week, scenario_a):
    cycles = four_week.cycles(*scenario_a)

    assert len(cycles) == 7
    last = cycles[-1]
    assert last.period_start == datetime(2026, 6, 1)
    assert last.period_end == eod(2026, 6, 15)
    assert last.days_in_period == 15
    assert last.due_at == eod(2026, 6, 20)
    assert [c.is_first for c in cycles] == [True] + [False] * 6
    assert [c.is_last for c in cycles] == [False] * 6 + [True]


def test_same_day_range_yields_single_cycle(four_week):
    cycles = four_week.cycles(date(2026, 3, 10), date(2026, 3, 10))

    assert len(cycles) == 1
    only = cycles[0]
    assert only.days_in_period == 1
    assert only.is_first and only.is_last
    assert only.due_at == eod(2026, 3, 16)
    assert only.visit_due_at == only.due_at


def test_reversed_range_has_no_cycles(four_week):
    assert four_week.cycles(date(2026, 3, 10), date(2026, 3, 1)) == []
    assert four_week.total_expected_count(date(2026, 3, 10), date(2026, 3, 1)) == 0


@pytest.mark.parametrize("start, end", [(None, date(2026, 1, 1)), ("garbage", date(2026, 1, 1)), (date(2026, 1, 1), "")])
def test_missing_dates_are_rejected(four_week, start, end):
    with pytest.raises(InvalidArgument):
        four_week.cycles(start, end)
    with pytest.raises(InvalidArgument):
        four_week.total_expected_count(start, end)


def test_cycles_tile_the_range_without_gaps(four_week):
    for start, end in _random_ranges(seed=7, count=200, max_span=700):
        cycles = four_week.cycles(start, end)

        assert cycles[0].period_start == dates.start_of_day(start)
        assert cycles[-1].period_end == dates.end_of_day(end)
        for previous, following in zip(cycles, cycles[1:]):
            assert following.period_start == dates.start_of_day(dates.add_days(previous.period_end, 1))
            assert following.due_at > previous.due_at
        assert sum(c.days_in_period for c in cycles) == dates.inclusive_days(start, end)
        assert [c.index for c in cycles] == list(range(1, len(cycles) + 1))
        assert sum(c.is_first for c in cycles) == 1
        assert sum(c.is_last for c in cycles) == 1


def test_closed_form_count_agrees_with_enumeration(four_week):
    for start, end in _random_ranges(seed=11, count=300, max_span=1500):
        assert four_week.total_expected_count(start, end) == len(four_week.cycles(start, end))


def test_closed_form_count_with_custom_duration():
    model = FourWeekCycleModel(ComplianceConfig(four_week=FourWeekCycleConfig(cycle_duration_days=14, max_cycles=40)))
    for start, end in _random_ranges(seed=3, count=100, max_span=900):
        assert model.total_expected_count(start, end) == len(model.cycles(start, end))


def test_cycle_ceiling_stops_generation_and_warns(four_week, caplog):
    with caplog.at_level(logging.WARNING, logger=DOMAIN_LOGGER_NAME):
        cycles = four_week.cycles(date(2020, 1, 1), date(2030, 1, 1))

    assert len(cycles) == 26
    assert cycles[-1].is_last
    assert sum(c.is_last for c in cycles) == 1
    assert four_week.total_expected_count(date(2020, 1, 1), date(2030, 1, 1)) == 26
    assert any("exceeds" in record.getMessage() for record in caplog.records)


def test_enumeration_is_idempotent(four_week, scenario_a):
    assert four_week.cycles(*scenario_a) == four_week.cycles(*scenario_a)


def test_configurations_coexist(scenario_a):
    standard = FourWeekCycleModel()
    relaxed = FourWeekCycleModel(ComplianceConfig(four_week=FourWeekCycleConfig(submission_grace_days=10)))

    assert standard.cycles(*scenario_a)[0].due_at == eod(2026, 1, 16)
    assert relaxed.cycles(*scenario_a)[0].due_at == eod(2026, 1, 21)
    assert standard.cycles(*scenario_a)[0].due_at == eod(2026, 1, 16)


def test_cycle_number_for_date(four_week):
    start = date(2025, 12, 15)

    assert four_week.cycle_number_for_date(start, date(2025, 12, 15)) == 1
    assert four_week.cycle_number_for_date(start, date(2026, 1, 11)) == 1
    assert four_week.cycle_number_for_date(start, date(2026, 1, 12)) == 2
    assert four_week.cycle_number_for_date(start, date(2025, 12, 1)) == 0


def test_submission_lateness(four_week, scenario_a):
    on_time = four_week.is_submission_late(1, *scenario_a, submitted_at=datetime(2026, 1, 16, 23, 0))
    late = four_week.is_submission_late(1, *scenario_a, submitted_at=datetime(2026, 1, 18, 12, 0))
    unsubmitted = four_week.is_submission_late(1, *scenario_a, now=datetime(2026, 1, 20))

    assert not on_time.is_late
    assert late.is_late and late.days_late == 1
    assert unsubmitted.is_late and unsubmitted.days_late == 3
    assert not four_week.is_submission_late(99, *scenario_a, now=datetime(2027, 1, 1)).is_late


def test_internship_cycle_status(four_week, scenario_a):
    result = four_week.internship_cycle_status(*scenario_a, completed_cycles=[1], now=datetime(2026, 2, 20))

    assert result.total_expected_cycles == 7
    assert result.overdue_count == 1
    assert result.current_cycle_index == 2
    assert result.next_due_date == eod(2026, 3, 13)


def test_internship_cycle_status_all_completed(four_week, scenario_a):
    result = four_week.internship_cycle_status(
        *scenario_a, completed_cycles=range(1, 8), now=datetime(2026, 12, 1)
    )

    assert result.overdue_count == 0
    assert result.current_cycle_index is None
    assert result.next_due_date is None


def test_cycle_window_status_progression(four_week, scenario_a):
    first = four_week.cycles(*scenario_a)[0]

    running = four_week.cycle_window_status(first, now=datetime(2026, 1, 5))
    assert running.status is CycleWindowState.NOT_YET_DUE
    assert running.label == "In Progress"
    assert running.sublabel == "7 days until cycle ends"
    assert not running.can_submit

    open_window = four_week.cycle_window_status(first, now=datetime(2026, 1, 14, 12))
    assert open_window.status is CycleWindowState.CAN_SUBMIT
    assert open_window.label == "Due Soon"
    assert open_window.sublabel == "3 days to submit"

    late = four_week.cycle_window_status(first, now=datetime(2026, 1, 18, 12))
    assert late.status is CycleWindowState.OVERDUE
    assert late.sublabel == "1 day late"
    assert late.can_submit

    done = four_week.cycle_window_status(first, is_completed=True, now=datetime(2026, 1, 18, 12))
    assert done.status is CycleWindowState.COMPLETED
    assert not done.can_submit


def test_format_cycle_label(four_week, scenario_a):
    first = four_week.cycles(*scenario_a)[0]

    assert format_cycle_label(first) == "Cycle 1: Dec 15 - Jan 11, 2026"


def test_trailing_junk_in_dates_is_rejected(four_week):
    with pytest.raises(InvalidArgument):
        four_week.cycles("2026-01-15xyz", "2026-03-01")


@pytest.mark.parametrize(
    "start, end",
    [(date(9999, 12, 20), date(9999, 12, 31)), (date(9999, 12, 31), date(9999, 12, 31))],
)
def test_deadlines_past_year_9999_are_rejected(four_week, start, end):
    with pytest.raises(InvalidArgument, match="supported range"):
        four_week.cycles(start, end)


def test_far_future_range_that_fits_is_enumerated(four_week):
    cycles = four_week.cycles(date(9999, 11, 1), date(9999, 11, 20))

    assert len(cycles) == 1
    assert cycles[0].due_at == eod(9999, 11, 25)
