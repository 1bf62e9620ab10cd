from datetime import date, datetime

from myday.services.stats import (
    completion_rate,
    count_progress,
    global_streak,
    priority_level,
    tag_counts,
    task_missed_count,
    task_streak,
)
from myday.schemas import TagOut
from tests.helpers import make_completion, make_spillover, make_task

TODAY = date(2024, 1, 10)


def completions_for(task_id, *days):
    return [make_completion(task_id, d) for d in days]


class TestGlobalStreak:
    def test_yesterday_fully_completed_gives_streak(self):
        task = make_task(id="a")
        completions = completions_for("a", "2024-01-09")
        assert global_streak([task], completions, TODAY) >= 1

    def test_missed_day_breaks_streak(self):
        a = make_task(id="a")
        b = make_task(id="b")
        completions = (
            completions_for("a", "2024-01-09", "2024-01-08", "2024-01-07")
            + completions_for("b", "2024-01-09", "2024-01-07")
        )
        # b was missed on the 8th
        assert global_streak([a, b], completions, TODAY) == 1

    def test_today_does_not_count(self):
        task = make_task(id="a")
        assert global_streak([task], completions_for("a", "2024-01-10"), TODAY) == 0

    def test_days_with_nothing_due_are_skipped(self):
        # Monday-only task: 2024-01-08 is a Monday, 2024-01-01 the one before
        task = make_task(id="w", frequency="weekly", days_of_week=[1])
        completions = completions_for("w", "2024-01-08", "2024-01-01")
        assert global_streak([task], completions, TODAY) == 2

    def test_held_days_do_not_break_streak(self):
        task = make_task(id="a", on_hold=True, hold_start_date="2024-01-07", hold_end_date="2024-01-08")
        completions = completions_for("a", "2024-01-09", "2024-01-06")
        assert global_streak([task], completions, TODAY) == 2

    def test_days_before_creation_not_due(self):
        task = make_task(id="a", created_at=datetime(2024, 1, 8, 9, 0))
        completions = completions_for("a", "2024-01-09", "2024-01-08")
        assert global_streak([task], completions, TODAY) == 2

    def test_window_caps_streak(self):
        task = make_task(id="a")
        completions = completions_for("a", *[f"2024-01-0{d}" for d in range(1, 10)])
        assert global_streak([task], completions, TODAY, window=5) == 5


class TestTaskStats:
    def test_task_streak_counts_consecutive_due_days(self):
        task = make_task(id="a")
        completions = completions_for("a", "2024-01-09", "2024-01-08", "2024-01-06")
        assert task_streak(task, completions, TODAY) == 2

    def test_missed_count_ignores_spilled_days(self):
        task = make_task(id="a")
        completions = completions_for("a", "2024-01-09", "2024-01-08", "2024-01-07", "2024-01-06")
        spillovers = [make_spillover("a", "2024-01-05", "2024-01-06")]
        # 03-04 missed, 05 spilled
        assert task_missed_count(task, completions, spillovers, TODAY) == 2

    def test_held_days_never_missed(self):
        task = make_task(id="a", on_hold=True, hold_start_date="2024-01-03", hold_end_date="2024-01-09")
        assert task_missed_count(task, [], [], TODAY) == 0

    def test_days_before_creation_never_missed(self):
        task = make_task(id="a", created_at=datetime(2024, 1, 8, 9, 0))
        assert task_missed_count(task, [], [], TODAY) == 2

    def test_count_progress_for_week(self):
        task = make_task(id="cb", frequency="count-based", frequency_count=3, frequency_period="week")
        completions = completions_for("cb", "2024-01-07", "2024-01-09", "2024-01-06")
        progress = count_progress(task, completions, TODAY)
        assert progress == {"current": 2, "target": 3, "label": "2/3 this week"}

    def test_count_progress_none_for_other_frequencies(self):
        assert count_progress(make_task(id="a"), [], TODAY) is None


def test_priority_levels():
    assert priority_level(10) == "critical"
    assert priority_level(9) == "critical"
    assert priority_level(7) == "high"
    assert priority_level(4) == "medium"
    assert priority_level(3) == "low"


def test_completion_rate_rounds_percentage():
    assert completion_rate([]) == 0
    assert completion_rate([True, False, False]) == 33
    assert completion_rate([True, True]) == 100


def test_tag_counts_only_trackable_tags():
    created = datetime(2024, 1, 1)
    tags = [
        TagOut(id="tag_fit", name="Fitness", color="#f00", trackable=True, created_at=created),
        TagOut(id="tag_misc", name="Misc", trackable=False, created_at=created),
        TagOut(id="tag_read", name="Reading", trackable=True, created_at=created),
    ]
    tasks = [
        make_task(id="run", tags=["tag_fit", "tag_misc"]),
        make_task(id="book", tags=["tag_read"]),
    ]
    completions = completions_for("run", "2024-01-02", "2024-01-03") + completions_for("book", "2023-12-30")

    rows = tag_counts(tasks, completions, tags, start="2024-01-01")
    assert rows == [
        {"tag_id": "tag_fit", "name": "Fitness", "color": "#f00", "count": 2},
        {"tag_id": "tag_read", "name": "Reading", "color": None, "count": 0},
    ]
