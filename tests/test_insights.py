from datetime import date

import pytest

from myday.exceptions import ValidationError
from myday.schemas import Recommendation
from myday.services.insights import (
    analyze_task_performance,
    find_underperforming,
    frequency_label,
    recommendation_changes,
    suggested_frequency_value,
    weekly_frequency,
)
from tests.helpers import make_completion, make_task

TODAY = date(2024, 1, 22)


class TestWeeklyFrequency:
    def test_known_frequencies(self):
        assert weekly_frequency(make_task(frequency="daily")) == 7
        assert weekly_frequency(make_task(frequency="weekly", days_of_week=[1, 3, 5])) == 3
        assert weekly_frequency(make_task(frequency="monthly", day_of_month=3)) == 0.25
        assert weekly_frequency(make_task(frequency="count-based", frequency_count=4, frequency_period="week")) == 4
        assert weekly_frequency(make_task(frequency="count-based", frequency_count=4, frequency_period="month")) == 1

    def test_labels(self):
        assert frequency_label(7) == "Keep Daily"
        assert frequency_label(5) == "Reduce to Weekdays"
        assert frequency_label(3) == "Reduce to 3x/week"

    def test_daily_reduction_becomes_weekly_pattern(self):
        value = suggested_frequency_value(make_task(frequency="daily"), 4)
        assert value == {"frequency": "weekly", "daysOfWeek": [1, 3, 5, 6]}


class TestAnalyzeTaskPerformance:
    def test_on_track_task_has_no_insight(self):
        task = make_task(id="a", frequency="weekly", days_of_week=[1])
        completions = [make_completion("a", d) for d in ("2024-01-08", "2024-01-15")]
        assert analyze_task_performance(task, completions, TODAY) is None

    def test_rarely_done_daily_task(self):
        task = make_task(id="a", name="Meditate")
        completions = [make_completion("a", "2024-01-10")]

        insight = analyze_task_performance(task, completions, TODAY)

        assert insight.task_id == "a"
        assert insight.current_metrics.completion_rate == 5
        assert insight.current_metrics.attempted_count == 21
        types = [r.type for r in insight.recommendations]
        assert types == ["reduce_frequency", "pause"]
        reduce = insight.recommendations[0]
        assert reduce.confidence == 85
        assert reduce.action_label == "Reduce to 4x/week"
        assert reduce.suggested_value == {"frequency": "weekly", "daysOfWeek": [1, 3, 5, 6]}

    def test_weekly_task_also_gets_new_days(self):
        task = make_task(id="w", frequency="weekly", days_of_week=[1, 3, 5])
        insight = analyze_task_performance(task, [make_completion("w", "2024-01-10")] * 2, TODAY)
        types = [r.type for r in insight.recommendations]
        assert "change_days" in types

    def test_monthly_task_with_too_little_history_skipped(self):
        task = make_task(id="m", frequency="monthly", day_of_month=5)
        assert analyze_task_performance(task, [], TODAY) is None

    def test_worst_first(self):
        a = make_task(id="a")
        b = make_task(id="b")
        completions = [make_completion("a", f"2024-01-{d:02d}") for d in range(10, 16)]
        insights = find_underperforming([a, b], completions, TODAY)
        assert [i.task_id for i in insights] == ["b", "a"]


class TestRecommendationChanges:
    def test_reduce_frequency_maps_wire_names(self):
        rec = Recommendation(
            type="reduce_frequency",
            confidence=85,
            suggested_value={"frequency": "weekly", "daysOfWeek": [1, 4]},
        )
        assert recommendation_changes(rec, TODAY) == {"frequency": "weekly", "days_of_week": [1, 4]}

    def test_change_days(self):
        rec = Recommendation(type="change_days", confidence=70, suggested_value=[2, 4])
        assert recommendation_changes(rec, TODAY) == {"frequency": "weekly", "days_of_week": [2, 4]}

    def test_pause_ends_task_in_two_weeks(self):
        rec = Recommendation(type="pause", confidence=60, suggested_value=True)
        assert recommendation_changes(rec, TODAY) == {"end_date": "2024-02-05"}

    def test_unsupported_type_rejected(self):
        rec = Recommendation(type="change_time", confidence=50)
        with pytest.raises(ValidationError):
            recommendation_changes(rec, TODAY)
