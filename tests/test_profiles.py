from badges import BADGE_CATALOG, make_badge
from profiles import aggregate_profile, apply_badges
from schemas import BadgeAward, UserProfile

TODAY = "2024-03-13"


def test_aggregate_profile_formulas(make_habit):
    habits = [
        make_habit("a", dates=[TODAY], total_completions=12, streak=2, best_streak=9),
        make_habit("b", total_completions=3, streak=3, best_streak=4),
    ]
    profile = aggregate_profile(UserProfile(name="Sam", join_date="2024-03-01"), habits, TODAY)
    assert profile.name == "Sam"
    assert profile.total_habits == 2
    assert profile.completed_today == 1
    assert profile.longest_streak == 9
    assert profile.xp == 150
    assert profile.level == 2
    assert profile.xp_in_level == 50
    assert profile.xp_for_next == 100


def test_aggregate_profile_without_habits():
    profile = aggregate_profile(UserProfile(join_date=TODAY, xp=500, level=6), [], TODAY)
    assert (profile.total_habits, profile.longest_streak, profile.xp, profile.level) == (0, 0, 0, 1)


def test_aggregate_profile_is_idempotent_and_keeps_badges(make_habit):
    badge = make_badge(BADGE_CATALOG[0], "2024-03-02")
    start = UserProfile(join_date="2024-03-01", badges=[badge])
    habits = [make_habit("a", dates=[TODAY], total_completions=1)]
    once = aggregate_profile(start, habits, TODAY)
    twice = aggregate_profile(once, habits, TODAY)
    assert once == twice
    assert twice.badges == [badge]
    assert start.xp == 0


def test_apply_badges_never_duplicates():
    badge = make_badge(BADGE_CATALOG[0], TODAY)
    profile = apply_badges(UserProfile(join_date=TODAY), BadgeAward(badges=[badge], primary=badge))
    again = apply_badges(profile, BadgeAward(badges=[badge], primary=badge))
    assert [b.id for b in again.badges] == ["first-habit"]
