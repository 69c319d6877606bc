import logging
from typing import Callable, List, NamedTuple, Sequence

from days import day_range
from metrics import day_is_complete
from schemas import Badge, BadgeAward, Habit, UserProfile

logger = logging.getLogger(__name__)

PERFECT_RUN_DAYS = 30


class BadgeRule(NamedTuple):
    id: str
    name: str
    description: str
    icon: str
    rarity: str
    condition: Callable[[Sequence[Habit], str], bool]


def _completed_today(habits: Sequence[Habit], today: str) -> int:
    return sum(1 for h in habits if today in h.completed_dates)


def _perfect_run(habits: Sequence[Habit], today: str) -> bool:
    return all(day_is_complete(habits, d) for d in day_range(today, PERFECT_RUN_DAYS))


# Catalog order decides which new badge is surfaced first
BADGE_CATALOG = [
    BadgeRule(
        "first-habit", "Getting Started", "Created your first habit", "🌱", "common",
        lambda habits, today: len(habits) >= 1,
    ),
    BadgeRule(
        "week-streak", "Week Warrior", "7-day streak achieved", "🔥", "common",
        lambda habits, today: any(h.streak >= 7 for h in habits),
    ),
    BadgeRule(
        "month-streak", "Monthly Master", "30-day streak achieved", "💪", "rare",
        lambda habits, today: any(h.streak >= 30 for h in habits),
    ),
    BadgeRule(
        "habit-master", "Habit Master", "Tracking 10 habits at once", "🏆", "epic",
        lambda habits, today: len(habits) >= 10,
    ),
    BadgeRule(
        "consistency", "Consistency King", "Completed every habit today (3 or more)", "👑", "epic",
        lambda habits, today: len(habits) >= 3 and _completed_today(habits, today) == len(habits),
    ),
    BadgeRule(
        "perfectionist", "Perfectionist", "100% completion rate for a month", "⭐", "legendary",
        _perfect_run,
    ),
]


def make_badge(rule: BadgeRule, earned_at: str) -> Badge:
    return Badge(
        id=rule.id,
        name=rule.name,
        description=rule.description,
        icon=rule.icon,
        rarity=rule.rarity,
        earned_at=earned_at,
    )


def evaluate(habits: Sequence[Habit], profile: UserProfile, today: str) -> BadgeAward:
    owned = {b.id for b in profile.badges}
    earned: List[Badge] = []
    for rule in BADGE_CATALOG:
        if rule.id in owned:
            continue
        if rule.condition(habits, today):
            earned.append(make_badge(rule, today))
    if earned:
        logger.info("Badges unlocked: %s", ", ".join(b.id for b in earned))
    return BadgeAward(badges=earned, primary=earned[0] if earned else None)
