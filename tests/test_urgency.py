"""
Tests for engine/urgency.py.

Covers:
- Component values (due multiplier bounds, priority table, done floor)
- Monotonicity in due date, priority and status
- Task.urgency caching and exclusion from equality
"""

import sys
from datetime import date, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from engine.urgency import (
    DONE_URGENCY,
    DUE_COEFFICIENT,
    PRIORITY_URGENCY,
    calculate_urgency,
    due_multiplier,
)
from models.task import Priority, Status, Task

TODAY = date(2024, 1, 10)


def _task(**overrides) -> Task:
    fields = dict(status=Status.OPEN, description="Something")
    fields.update(overrides)
    return Task(**fields)


class TestDueMultiplier:
    def test_week_overdue_is_max(self):
        assert due_multiplier(TODAY - timedelta(days=7), TODAY) == 1.0
        assert due_multiplier(TODAY - timedelta(days=30), TODAY) == 1.0

    def test_far_future_is_min(self):
        assert due_multiplier(TODAY + timedelta(days=15), TODAY) == 0.2
        assert due_multiplier(TODAY + timedelta(days=365), TODAY) == 0.2

    def test_two_weeks_out_meets_floor(self):
        assert due_multiplier(TODAY + timedelta(days=14), TODAY) == pytest.approx(0.2)

    def test_due_today(self):
        assert due_multiplier(TODAY, TODAY) == pytest.approx((14 * 0.8) / 21 + 0.2)


class TestCalculateUrgency:
    def test_no_due_date_is_priority_only(self):
        for priority in Priority:
            assert calculate_urgency(_task(priority=priority), TODAY) == PRIORITY_URGENCY[priority]

    def test_overdue_high(self):
        task = _task(priority=Priority.HIGH, due_date=TODAY - timedelta(days=10))
        assert calculate_urgency(task, TODAY) == pytest.approx(DUE_COEFFICIENT + 6.0)

    def test_done_is_floor(self):
        task = _task(status=Status.DONE, priority=Priority.HIGH, due_date=TODAY - timedelta(days=10))
        assert calculate_urgency(task, TODAY) == DONE_URGENCY

    def test_done_below_any_open(self):
        lowest_open = _task(priority=Priority.WAITING)
        done = _task(status=Status.DONE)
        assert calculate_urgency(done, TODAY) < calculate_urgency(lowest_open, TODAY)


class TestMonotonicity:
    def test_nearer_due_never_lowers_score(self):
        scores = [
            calculate_urgency(_task(due_date=TODAY + timedelta(days=offset)), TODAY)
            for offset in range(-30, 31)
        ]
        assert scores == sorted(scores, reverse=True)

    def test_any_due_date_beats_none(self):
        far = calculate_urgency(_task(due_date=TODAY + timedelta(days=400)), TODAY)
        assert far > calculate_urgency(_task(), TODAY)

    def test_higher_priority_never_lowers_score(self):
        ordered = [Priority.HIGH, Priority.MEDIUM, Priority.NONE, Priority.LOW, Priority.WAITING]
        scores = [calculate_urgency(_task(priority=p, due_date=TODAY), TODAY) for p in ordered]
        assert scores == sorted(scores, reverse=True)


class TestTaskUrgencyProperty:
    def test_cached_value_matches_today(self):
        task = _task(due_date=date.today())
        assert task.urgency == calculate_urgency(task, date.today())

    def test_not_part_of_equality(self):
        a = _task(priority=Priority.HIGH)
        b = _task(priority=Priority.HIGH)
        _ = a.urgency
        assert a == b
        assert hash(a) == hash(b)
