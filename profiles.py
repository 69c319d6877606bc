from typing import Sequence

from schemas import BadgeAward, Habit, UserProfile

XP_PER_COMPLETION = 10
XP_PER_LEVEL = 100


def aggregate_profile(profile: UserProfile, habits: Sequence[Habit], today: str) -> UserProfile:
    """Recompute the numeric profile fields from the habit collection.

    Identity fields and badges are carried over untouched, so running this twice
    on the same habits gives the same profile.
    """
    xp = sum(h.total_completions * XP_PER_COMPLETION for h in habits)
    return profile.model_copy(
        deep=True,
        update={
            "total_habits": len(habits),
            "completed_today": sum(1 for h in habits if today in h.completed_dates),
            "longest_streak": max([h.best_streak for h in habits], default=0),
            "xp": xp,
            # Fixed 100 XP per level
            "level": xp // XP_PER_LEVEL + 1,
            "xp_in_level": xp % XP_PER_LEVEL,
            "xp_for_next": XP_PER_LEVEL,
        },
    )


def apply_badges(profile: UserProfile, award: BadgeAward) -> UserProfile:
    owned = {b.id for b in profile.badges}
    fresh = [b for b in award.badges if b.id not in owned]
    if not fresh:
        return profile
    return profile.model_copy(update={"badges": profile.badges + fresh})
