"""
The habit store owns the habit collection, the user profile and the assessment.

Every command validates its input first and builds the new collection aside,
so a rejected command leaves the store exactly as it was. A successful command
then recomputes the profile, appends any newly earned badges, saves the changed
blobs and notifies subscribers, in that order.

Commands and read projections hold one re-entrant lock, so a command runs to
completion before the next starts even when requests arrive on worker threads.
"""

import json
import logging
import os
import re
import threading
from typing import Any, Callable, Dict, List, Optional, Set, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

import metrics
from badges import evaluate
from database import PersistenceError
from days import Clock, DayLike, day_key, system_clock, today_key
from errors import InvalidInput, NotFound, SnapshotImportError
from profiles import aggregate_profile, apply_badges
from recommendations import recommend
from schemas import (
    DEFAULT_GOAL,
    GOAL_MAX,
    GOAL_MIN,
    AnalyticsSummary,
    Assessment,
    DayProgress,
    Habit,
    HabitIn,
    HabitUpdate,
    MutationResult,
    ProfileUpdate,
    Recommendation,
    UserProfile,
    WeekDay,
)
from snapshot import (
    ASSESSMENT_KEY,
    HABITS_KEY,
    PROFILE_KEY,
    ParsedImport,
    build_export,
    dump_habits,
    parse_import,
)

logger = logging.getLogger(__name__)

Listener = Callable[[str, "HabitStore"], None]
M = TypeVar("M", bound=BaseModel)

_LEADING_NUMBER = re.compile(r"\s*(\d+)")


def _validate(model: Type[M], data: Union[M, Dict[str, Any]]) -> M:
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning("Rejected %s: %s", model.__name__, e.errors()[0]["msg"])
        raise InvalidInput(str(e))


def goal_from_estimate(estimated_time: str) -> int:
    m = _LEADING_NUMBER.match(estimated_time or "")
    if not m:
        return DEFAULT_GOAL
    return min(GOAL_MAX, max(GOAL_MIN, int(m.group(1))))


class HabitStore:
    def __init__(self, persistence=None, clock: Optional[Clock] = None, profile: Optional[UserProfile] = None):
        self.persistence = persistence
        self.clock = clock or system_clock
        self._habits: List[Habit] = []
        self._profile = profile or self.fresh_profile()
        self._assessment = Assessment()
        self._recommendations: List[Recommendation] = []
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()
        self._unsaved: Set[str] = set()

    def today(self) -> str:
        return today_key(self.clock)

    def fresh_profile(self) -> UserProfile:
        return UserProfile(
            name=os.getenv("PROFILE_NAME", "Alex Johnson"),
            email=os.getenv("PROFILE_EMAIL", "alex@example.com"),
            join_date=self.today(),
        )

    # -------------------- Observers --------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str):
        for listener in list(self._listeners):
            listener(event, self)

    # -------------------- Persistence --------------------

    def _blob(self, key: str) -> str:
        if key == HABITS_KEY:
            return json.dumps(dump_habits(self._habits))
        if key == PROFILE_KEY:
            return self._profile.model_dump_json()
        return self._assessment.model_dump_json()

    def _save(self, *keys: str):
        if self.persistence is None:
            return
        # Keys whose last save failed ride along with the next save of any key
        pending = [k for k in (HABITS_KEY, PROFILE_KEY, ASSESSMENT_KEY) if k in keys or k in self._unsaved]
        for key in pending:
            try:
                self.persistence.set(key, self._blob(key))
            except PersistenceError:
                logger.exception("Failed to save %s", key)
                self._unsaved.add(key)
            else:
                self._unsaved.discard(key)

    def load(self):
        if self.persistence is None:
            return
        with self._lock:
            for key in (HABITS_KEY, PROFILE_KEY, ASSESSMENT_KEY):
                try:
                    text = self.persistence.get(key)
                except PersistenceError:
                    logger.exception("Failed to load %s", key)
                    continue
                if text is None:
                    continue
                try:
                    parsed = parse_import({key: json.loads(text)})
                except (ValueError, SnapshotImportError) as e:
                    logger.warning("Ignoring stored %s: %s", key, e)
                    continue
                self._apply(parsed)
            logger.info("Loaded %d habit(s)", len(self._habits))

    def _apply(self, parsed: ParsedImport):
        if parsed.habits is not None:
            self._habits = parsed.habits
        if parsed.profile is not None:
            self._profile = parsed.profile
        if parsed.assessment is not None:
            self._assessment = parsed.assessment
            self._recommendations = recommend(self._assessment)

    # -------------------- Read API --------------------

    def _view(self, habit: Habit, today: str) -> Habit:
        return habit.model_copy(deep=True, update={"completed": today in habit.completed_dates})

    def _find(self, habit_id: str) -> Habit:
        for h in self._habits:
            if h.id == habit_id:
                return h
        raise NotFound(f"Habit {habit_id} not found")

    def list(self, category: Optional[str] = None) -> List[Habit]:
        with self._lock:
            today = self.today()
            return [self._view(h, today) for h in self._habits if category is None or h.category == category]

    def get(self, habit_id: str) -> Habit:
        with self._lock:
            return self._view(self._find(habit_id), self.today())

    @property
    def profile(self) -> UserProfile:
        with self._lock:
            return aggregate_profile(self._profile, self._habits, self.today())

    @property
    def assessment(self) -> Assessment:
        with self._lock:
            return self._assessment.model_copy(deep=True)

    @property
    def recommendations(self) -> List[Recommendation]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._recommendations]

    def day_progress(self) -> DayProgress:
        with self._lock:
            return metrics.day_progress(self._habits, self.today())

    def week_progress(self) -> List[WeekDay]:
        with self._lock:
            return metrics.week_progress(self._habits, self.today())

    def analytics(self) -> AnalyticsSummary:
        with self._lock:
            return metrics.analytics_summary(self._habits, self._profile.join_date, self.today())

    # -------------------- Commands --------------------

    def _commit(self, habits: List[Habit], event: str, habit: Optional[Habit] = None,
                today: Optional[str] = None) -> MutationResult:
        # Callers hold the lock
        today = today or self.today()
        profile = aggregate_profile(self._profile, habits, today)
        award = evaluate(habits, profile, today)
        self._habits = habits
        self._profile = apply_badges(profile, award)
        self._save(HABITS_KEY, PROFILE_KEY)
        self._notify(event)
        return MutationResult(
            habit=self._view(habit, today) if habit is not None else None,
            profile=self._profile.model_copy(deep=True),
            award=award,
        )

    def _new_id(self) -> str:
        token = int(self.clock().timestamp() * 1000)
        taken = {h.id for h in self._habits}
        while str(token) in taken:
            token += 1
        return str(token)

    def create(self, data: Union[HabitIn, Dict[str, Any]]) -> MutationResult:
        data = _validate(HabitIn, data)
        with self._lock:
            today = self.today()
            habit = Habit(id=self._new_id(), created_at=today, **data.model_dump())
            logger.info("Created habit %s (%s)", habit.id, habit.title)
            return self._commit(self._habits + [habit], "created", habit, today)

    def update(self, habit_id: str, fields: Union[HabitUpdate, Dict[str, Any]]) -> MutationResult:
        fields = _validate(HabitUpdate, fields)
        with self._lock:
            current = self._find(habit_id)
            # Descriptive fields only, tracking state is never edited here
            updated = current.model_copy(deep=True, update=fields.model_dump(exclude_none=True))
            habits = [updated if h.id == habit_id else h for h in self._habits]
            logger.info("Updated habit %s", habit_id)
            return self._commit(habits, "updated", updated)

    def delete(self, habit_id: str) -> MutationResult:
        with self._lock:
            self._find(habit_id)
            habits = [h for h in self._habits if h.id != habit_id]
            logger.info("Deleted habit %s", habit_id)
            return self._commit(habits, "deleted")

    def toggle(self, habit_id: str, today: Optional[DayLike] = None) -> MutationResult:
        with self._lock:
            today = day_key(today) if today is not None else self.today()
            habit = self._find(habit_id).model_copy(deep=True)
            if today in habit.completed_dates:
                habit.completed_dates = [d for d in habit.completed_dates if d != today]
                habit.streak = max(0, habit.streak - 1)
                habit.total_completions = max(0, habit.total_completions - 1)
                habit.completed = False
            else:
                habit.completed_dates = sorted(habit.completed_dates + [today])
                habit.streak += 1
                habit.best_streak = max(habit.best_streak, habit.streak)
                habit.total_completions += 1
                habit.completed = True
            habits = [habit if h.id == habit_id else h for h in self._habits]
            logger.info("Toggled habit %s on %s: %s", habit_id, today, "done" if habit.completed else "pending")
            return self._commit(habits, "toggled", habit, today)

    def submit_assessment(self, assessment: Union[Assessment, Dict[str, Any]]) -> List[Recommendation]:
        assessment = _validate(Assessment, assessment).model_copy(deep=True)
        with self._lock:
            self._assessment = assessment
            self._recommendations = recommend(self._assessment)
            self._save(ASSESSMENT_KEY)
            self._notify("assessed")
            return self.recommendations

    def add_recommended(self, recommendation: Union[Recommendation, str]) -> MutationResult:
        with self._lock:
            if isinstance(recommendation, str):
                matches = [r for r in self._recommendations if r.id == recommendation]
                if not matches:
                    raise NotFound(f"Recommendation {recommendation} not found")
                recommendation = matches[0]
            return self.create(
                HabitIn(
                    title=recommendation.title,
                    description=recommendation.description,
                    category=recommendation.category,
                    difficulty=recommendation.difficulty,
                    goal=goal_from_estimate(recommendation.estimated_time),
                )
            )

    def update_profile(self, fields: Union[ProfileUpdate, Dict[str, Any]]) -> UserProfile:
        fields = _validate(ProfileUpdate, fields)
        with self._lock:
            self._profile = self._profile.model_copy(deep=True, update=fields.model_dump(exclude_none=True))
            self._save(PROFILE_KEY)
            self._notify("profile")
            return self.profile

    def reset(self):
        with self._lock:
            self._habits = []
            self._profile = self.fresh_profile()
            self._assessment = Assessment()
            self._recommendations = []
            logger.info("Cleared all data")
            self._save(HABITS_KEY, PROFILE_KEY, ASSESSMENT_KEY)
            self._notify("reset")

    # -------------------- Export / Import --------------------

    def export_snapshot(self) -> Dict[str, Any]:
        with self._lock:
            # Derived profile fields are recomputed for the moment of export
            return build_export(self._habits, self.profile, self._assessment, self.clock())

    def import_snapshot(self, document: Union[str, bytes, Dict[str, Any]]) -> ParsedImport:
        try:
            parsed = parse_import(document)
        except SnapshotImportError as e:
            logger.warning("Import rejected: %s", e)
            raise
        with self._lock:
            self._apply(parsed)
            keys = [k for k, v in ((HABITS_KEY, parsed.habits), (PROFILE_KEY, parsed.profile),
                                   (ASSESSMENT_KEY, parsed.assessment)) if v is not None]
            logger.info("Imported %s", ", ".join(keys) or "nothing")
            self._save(*keys)
            self._notify("imported")
            return parsed
