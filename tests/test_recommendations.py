from recommendations import MAX_RECOMMENDATIONS, RULES, recommend
from schemas import Assessment


def ids(recs):
    return [r.id for r in recs]


def test_empty_or_missing_assessment_recommends_nothing():
    assert recommend(Assessment()) == []
    assert recommend(None) == []


def test_goal_rule_carries_its_payload():
    (rec,) = recommend(Assessment(goals=["Reduce stress"]))
    assert rec.id == "mindfulness-meditation"
    assert rec.category == "Mindfulness"
    assert rec.estimated_time == "10 minutes"
    assert rec.benefits[0] == "Reduced stress"
    assert rec.tips
    assert "reduce stress" in rec.reason


def test_reason_quotes_the_triggering_answer():
    recs = recommend(Assessment(stress_level=8, profession="Manager/Executive"))
    assert ids(recs) == ["breathing-breaks", "evening-planning"]
    assert "8/10" in recs[0].reason
    assert "Manager/Executive" in recs[1].reason


def test_low_stress_does_not_trigger_breathing_breaks():
    assert recommend(Assessment(stress_level=6)) == []


def test_free_text_bad_habits_are_matched():
    recs = recommend(Assessment(bad_habits="Procrastination and too much social media"))
    assert ids(recs) == ["two-minute-start", "digital-detox"]


def test_results_are_ranked_by_priority_and_truncated():
    assessment = Assessment(
        goals=[
            "Improve productivity", "Better health habits", "Learn new skills",
            "Reduce stress", "Career advancement", "Better relationships",
        ],
        profession="Software Developer",
        stress_level=9,
        sleep_schedule="Irregular",
        activity_level="Sedentary",
        work_schedule="Long hours",
        challenges=["Procrastination", "Excessive screen time"],
    )
    recs = recommend(assessment)
    assert len(recs) == MAX_RECOMMENDATIONS
    assert ids(recs) == [
        "breathing-breaks", "mindfulness-meditation", "deep-work",
        "bedtime-routine", "morning-exercise", "two-minute-start",
    ]
    priorities = [r.priority for r in recs]
    assert priorities == sorted(priorities, reverse=True)
    assert len(recommend(assessment, limit=20)) == 13


def test_equal_priorities_keep_table_order():
    recs = recommend(Assessment(goals=["Learn new skills"], challenges=["Excessive screen time"]))
    assert ids(recs) == ["daily-reading", "digital-detox"]
    assert recs[0].priority == recs[1].priority


def test_recommend_is_deterministic():
    assessment = Assessment(goals=["Better health habits", "Reduce stress"], activity_level="Lightly active")
    assert recommend(assessment) == recommend(assessment)


def test_unknown_answers_are_ignored():
    assert recommend(Assessment(profession="Astronaut", goals=["Fly"], lifestyle="Busy")) == []


def test_every_rule_can_fire():
    assert len({r.payload["id"] for r in RULES}) == len(RULES)
    everything = Assessment(
        goals=[
            "Improve productivity", "Better health habits", "Learn new skills",
            "Reduce stress", "Career advancement", "Better relationships",
        ],
        stress_level=10,
        sleep_schedule="Irregular",
        activity_level="Sedentary",
        work_schedule="Night shift",
        challenges=["Procrastination", "Excessive screen time"],
    )
    fired = set(ids(recommend(everything, limit=len(RULES))))
    fired |= set(ids(recommend(Assessment(profession="Student"))))
    fired |= set(ids(recommend(Assessment(profession="Software Developer"))))
    assert fired == {r.payload["id"] for r in RULES}
