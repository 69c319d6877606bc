from metrics import (
    analytics_summary,
    consistency_score,
    day_progress,
    overall_progress,
    percent,
    week_progress,
    weekly_growth,
)

TODAY = "2024-03-13"


def test_percent_rounds_half_up_and_guards_zero():
    assert percent(1, 8) == 13
    assert percent(1, 3) == 33
    assert percent(-1, 8) == -12
    assert percent(5, 0) == 0


def test_day_progress_counts_habits_done_today(make_habit):
    habits = [make_habit("a", dates=[TODAY]), make_habit("b")]
    progress = day_progress(habits, TODAY)
    assert progress.model_dump() == {"completed": 1, "total": 2, "percentage": 50}


def test_day_progress_without_habits():
    assert day_progress([], TODAY).model_dump() == {"completed": 0, "total": 0, "percentage": 0}


def test_week_progress_is_all_or_nothing_per_day(make_habit):
    habits = [
        make_habit("a", created_at="2024-03-01", dates=["2024-03-11", "2024-03-12"]),
        make_habit("b", created_at="2024-03-12", dates=["2024-03-12"]),
    ]
    week = week_progress(habits, TODAY)
    assert [d.day for d in week] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    assert [d.date for d in week][:3] == ["2024-03-11", "2024-03-12", "2024-03-13"]
    # Monday: only "a" existed and it was done
    assert week[0].completed and week[0].percentage == 100
    # Tuesday: both existed and both were done
    assert week[1].completed and week[1].percentage == 100
    # Wednesday: neither done yet
    assert not week[2].completed and week[2].percentage == 0


def test_week_progress_day_before_any_habit_is_not_completed(make_habit):
    habits = [make_habit("a", created_at="2024-03-13", dates=[TODAY])]
    week = week_progress(habits, TODAY)
    assert not week[0].completed
    assert week[0].percentage == 0
    assert week[2].completed


def test_consistency_score_over_days_since_join(make_habit):
    # Joined 10 days ago, active on 5 distinct days (one of them twice)
    habits = [
        make_habit("a", dates=["2024-03-13", "2024-03-12", "2024-03-10"]),
        make_habit("b", dates=["2024-03-12", "2024-03-08", "2024-03-05"]),
    ]
    assert consistency_score(habits, "2024-03-03", TODAY) == 50


def test_consistency_score_window_is_capped_at_thirty_days(make_habit):
    dates = ["2024-03-%02d" % d for d in range(1, 14)] + ["2024-02-%02d" % d for d in range(13, 30)]
    habits = [make_habit("a", created_at="2024-01-01", dates=dates)]
    assert consistency_score(habits, "2023-01-01", TODAY) == 100
    assert consistency_score([], "2023-01-01", TODAY) == 0


def test_consistency_score_on_join_day(make_habit):
    assert consistency_score([make_habit("a", dates=[TODAY])], TODAY, TODAY) == 100


def test_weekly_growth(make_habit):
    assert weekly_growth([], TODAY) == 0
    fresh = [make_habit("a", dates=["2024-03-13"])]
    assert weekly_growth(fresh, TODAY) == 100

    # prior window 2024-02-29..2024-03-06, current 2024-03-07..2024-03-13
    steady = [make_habit("a", dates=["2024-03-01", "2024-03-02", "2024-03-10", "2024-03-11", "2024-03-12"])]
    assert weekly_growth(steady, TODAY) == 50

    slowing = [make_habit("a", dates=["2024-03-01", "2024-03-02", "2024-03-03", "2024-03-04", "2024-03-12"])]
    assert weekly_growth(slowing, TODAY) == -75


def test_overall_progress_is_lifetime_adherence(make_habit):
    habits = [
        # 13 possible days, 4 done
        make_habit("a", created_at="2024-03-01", dates=["2024-03-01", "2024-03-05", "2024-03-09", TODAY]),
        # 3 possible days, 3 done
        make_habit("b", created_at="2024-03-11", dates=["2024-03-11", "2024-03-12", TODAY]),
    ]
    assert overall_progress(habits, TODAY) == 44
    assert overall_progress([], TODAY) == 0


def test_analytics_summary(make_habit):
    habits = [
        make_habit("a", category="Health", dates=[TODAY], streak=3),
        make_habit("b", category="Health", streak=0),
        make_habit("c", category="Learning", dates=["2024-03-12", TODAY], streak=2),
    ]
    summary = analytics_summary(habits, "2024-03-01", TODAY)
    assert summary.completion_rate == 67
    assert summary.average_streak == 2
    assert summary.total_completions == 3
    by_category = {c.category: c for c in summary.categories}
    assert by_category["Health"].habits == 2
    assert by_category["Health"].completions == 1
    assert by_category["Health"].average_streak == 2
    assert by_category["Career"].habits == 0
    assert by_category["Career"].average_streak == 0
