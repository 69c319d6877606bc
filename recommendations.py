"""
Rule-based habit recommendations.

Each rule pairs a condition over the assessment with the habit it suggests.
Rules are independent: any number can fire for one assessment, a missing answer
simply fails the rules that look at it. The resulting list is ranked by
priority (catalog order breaks ties) and cut to the top few.
"""

import logging
from typing import Callable, Dict, List, NamedTuple, Optional

from schemas import Assessment, Recommendation

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 6


class RecommendationRule(NamedTuple):
    priority: int
    condition: Callable[[Assessment], bool]
    reason: str
    payload: Dict


def has_goal(goal: str) -> Callable[[Assessment], bool]:
    return lambda a: goal in (a.goals or [])


def answer_in(field: str, *values: str) -> Callable[[Assessment], bool]:
    return lambda a: getattr(a, field) in values


def has_challenge(challenge: str, *keywords: str) -> Callable[[Assessment], bool]:
    # Matches a picked challenge or a mention in the free-text bad habits
    def check(a: Assessment) -> bool:
        if challenge in (a.challenges or []):
            return True
        text = (a.bad_habits or "").lower()
        return any(k in text for k in keywords)
    return check


def stress_at_least(level: int) -> Callable[[Assessment], bool]:
    return lambda a: a.stress_level is not None and a.stress_level >= level


RULES: List[RecommendationRule] = [
    RecommendationRule(
        80, has_goal("Improve productivity"),
        "Based on your goal to improve productivity",
        {
            "id": "deep-work",
            "title": "Deep Work Sessions",
            "description": "Dedicate 90 minutes daily to focused, distraction-free work",
            "category": "Productivity",
            "difficulty": "medium",
            "estimated_time": "90 minutes",
            "benefits": ["Increased focus", "Higher quality output", "Reduced stress"],
            "tips": ["Turn off notifications", "Use the Pomodoro technique", "Choose your most important task"],
        },
    ),
    RecommendationRule(
        75, has_goal("Better health habits"),
        "Aligns with your goal of better health habits and energizes your day",
        {
            "id": "morning-exercise",
            "title": "Morning Exercise",
            "description": "30 minutes of physical activity to start your day",
            "category": "Health",
            "difficulty": "medium",
            "estimated_time": "30 minutes",
            "benefits": ["Increased energy", "Better mood", "Improved fitness"],
            "tips": ["Start with light exercises", "Prepare workout clothes the night before", "Find activities you enjoy"],
        },
    ),
    RecommendationRule(
        70, has_goal("Learn new skills"),
        "Supports your goal to learn new skills through steady daily input",
        {
            "id": "daily-reading",
            "title": "Daily Reading",
            "description": "Read for 30 minutes daily to expand knowledge and skills",
            "category": "Learning",
            "difficulty": "easy",
            "estimated_time": "30 minutes",
            "benefits": ["Expanded knowledge", "Improved vocabulary", "Better critical thinking"],
            "tips": ["Choose books related to your goals", "Read at the same time daily", "Take notes on key insights"],
        },
    ),
    RecommendationRule(
        85, has_goal("Reduce stress"),
        "Directly addresses your goal to reduce stress and improve mental clarity",
        {
            "id": "mindfulness-meditation",
            "title": "Mindfulness Meditation",
            "description": "10 minutes of daily meditation to reduce stress and improve focus",
            "category": "Mindfulness",
            "difficulty": "easy",
            "estimated_time": "10 minutes",
            "benefits": ["Reduced stress", "Better emotional regulation", "Improved focus"],
            "tips": ["Start with guided meditations", "Find a quiet space", "Be consistent with timing"],
        },
    ),
    RecommendationRule(
        65, has_goal("Career advancement"),
        "Builds toward your goal of career advancement one session at a time",
        {
            "id": "skill-practice",
            "title": "Career Skill Practice",
            "description": "Practice one career-relevant skill for 45 minutes",
            "category": "Career",
            "difficulty": "hard",
            "estimated_time": "45 minutes",
            "benefits": ["Visible progress at work", "Stronger portfolio", "More confidence in reviews"],
            "tips": ["Pick one skill per month", "Track what you practiced", "Share results with a mentor"],
        },
    ),
    RecommendationRule(
        60, has_goal("Better relationships"),
        "Supports your goal of better relationships",
        {
            "id": "gratitude-journal",
            "title": "Gratitude Journal",
            "description": "Write down three things, or people, you are grateful for each evening",
            "category": "Mindfulness",
            "difficulty": "easy",
            "estimated_time": "5 minutes",
            "benefits": ["More positive outlook", "Stronger connections", "Better sleep"],
            "tips": ["Be specific", "Mention one person each day", "Keep the journal by your bed"],
        },
    ),
    RecommendationRule(
        68, answer_in("profession", "Software Developer", "Manager/Executive"),
        "As a {profession}, planning tomorrow tonight keeps you organized and cuts decision fatigue",
        {
            "id": "evening-planning",
            "title": "Evening Planning",
            "description": "Spend 15 minutes each evening planning the next day",
            "category": "Productivity",
            "difficulty": "easy",
            "estimated_time": "15 minutes",
            "benefits": ["Better time management", "Reduced stress", "Clearer priorities"],
            "tips": ["Review accomplishments", "Set 3 key priorities", "Prepare materials needed"],
        },
    ),
    RecommendationRule(
        66, answer_in("profession", "Student"),
        "As a {profession}, short daily reviews make exam weeks far lighter",
        {
            "id": "spaced-review",
            "title": "Spaced Repetition Review",
            "description": "Review flashcards from recent lessons for 20 minutes",
            "category": "Learning",
            "difficulty": "easy",
            "estimated_time": "20 minutes",
            "benefits": ["Better retention", "Less cramming", "Steady progress"],
            "tips": ["Use a flashcard app", "Review before new material", "Keep cards short"],
        },
    ),
    RecommendationRule(
        90, stress_at_least(7),
        "You rated your stress at {stress_level}/10, so short breathing breaks can bring it down quickly",
        {
            "id": "breathing-breaks",
            "title": "Breathing Breaks",
            "description": "Three 5-minute box-breathing breaks spread through the day",
            "category": "Mindfulness",
            "difficulty": "easy",
            "estimated_time": "5 minutes",
            "benefits": ["Lower heart rate", "Calmer reactions", "Sharper focus"],
            "tips": ["Set three reminders", "Breathe in 4, hold 4, out 4, hold 4", "Step away from the screen"],
        },
    ),
    RecommendationRule(
        78, answer_in("sleep_schedule", "Irregular", "Late nights (after midnight)", "Less than 6 hours"),
        "Your sleep schedule ({sleep_schedule}) is the first thing to stabilize",
        {
            "id": "bedtime-routine",
            "title": "Consistent Bedtime Routine",
            "description": "Wind down at the same time every night, screens off 30 minutes before bed",
            "category": "Health",
            "difficulty": "medium",
            "estimated_time": "30 minutes",
            "benefits": ["Deeper sleep", "More morning energy", "Better mood"],
            "tips": ["Pick a fixed lights-out time", "Dim the lights", "Keep the phone out of the bedroom"],
        },
    ),
    RecommendationRule(
        72, answer_in("activity_level", "Sedentary", "Lightly active"),
        "You described yourself as {activity_level}, and a daily walk is the easiest way to move more",
        {
            "id": "daily-walk",
            "title": "Daily Walk",
            "description": "A brisk 20-minute walk, outside when possible",
            "category": "Health",
            "difficulty": "easy",
            "estimated_time": "20 minutes",
            "benefits": ["Better cardiovascular health", "Clearer thinking", "Improved mood"],
            "tips": ["Walk after lunch", "Invite a friend", "Leave the headphones at home sometimes"],
        },
    ),
    RecommendationRule(
        67, answer_in("work_schedule", "Long hours", "Night shift", "Irregular shifts"),
        "Working {work_schedule} makes a clear end-of-day boundary important",
        {
            "id": "shutdown-ritual",
            "title": "Shutdown Ritual",
            "description": "Close the workday with a 10-minute review and a fixed stop signal",
            "category": "Productivity",
            "difficulty": "easy",
            "estimated_time": "10 minutes",
            "benefits": ["Less evening rumination", "Clear next steps", "Better recovery"],
            "tips": ["Write tomorrow's first task", "Close every work tab", "Say a stop phrase out loud"],
        },
    ),
    RecommendationRule(
        74, has_challenge("Procrastination", "procrastinat"),
        "You named procrastination as something to overcome; starting tiny removes the friction",
        {
            "id": "two-minute-start",
            "title": "Two-Minute Start",
            "description": "Begin your hardest task for just two minutes before anything else",
            "category": "Productivity",
            "difficulty": "easy",
            "estimated_time": "2 minutes",
            "benefits": ["Momentum", "Less avoidance", "Fewer last-minute rushes"],
            "tips": ["Decide the task the night before", "Use a visible timer", "Allow yourself to stop after two minutes"],
        },
    ),
    RecommendationRule(
        70, has_challenge("Excessive screen time", "social media", "screen time", "phone"),
        "You want to cut back on screen time, so one offline hour a day is a concrete start",
        {
            "id": "digital-detox",
            "title": "Digital Detox Hour",
            "description": "Spend one hour a day with every screen switched off",
            "category": "Mindfulness",
            "difficulty": "medium",
            "estimated_time": "60 minutes",
            "benefits": ["More presence", "Better sleep", "Less comparison stress"],
            "tips": ["Put the phone in another room", "Plan an offline activity", "Tell people when you are offline"],
        },
    ),
]


def _build(rule: RecommendationRule, answers: Dict) -> Recommendation:
    return Recommendation(priority=rule.priority, reason=rule.reason.format(**answers), **rule.payload)


def recommend(assessment: Optional[Assessment], limit: int = MAX_RECOMMENDATIONS) -> List[Recommendation]:
    if assessment is None:
        return []
    answers = assessment.model_dump()
    matched = [_build(rule, answers) for rule in RULES if rule.condition(assessment)]
    # sorted() is stable, so equal priorities keep table order
    ranked = sorted(matched, key=lambda r: r.priority, reverse=True)[:limit]
    logger.debug("%d of %d recommendation rules matched", len(matched), len(RULES))
    return ranked
