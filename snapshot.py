import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from errors import SnapshotImportError
from schemas import Assessment, Habit, UserProfile

HABITS_KEY = "habits"
PROFILE_KEY = "userProfile"
ASSESSMENT_KEY = "assessment"
EXPORT_DATE_KEY = "exportDate"

_habit_list = TypeAdapter(List[Habit])


def dump_habits(habits: List[Habit]) -> List[Dict[str, Any]]:
    return _habit_list.dump_python(habits, mode="json")


def load_habits(data: Any) -> List[Habit]:
    return _habit_list.validate_python(data)


def build_export(
    habits: List[Habit], profile: UserProfile, assessment: Assessment, exported_at: datetime
) -> Dict[str, Any]:
    return {
        HABITS_KEY: dump_habits(habits),
        PROFILE_KEY: profile.model_dump(mode="json"),
        ASSESSMENT_KEY: assessment.model_dump(mode="json"),
        EXPORT_DATE_KEY: exported_at.isoformat(),
    }


class ParsedImport:
    def __init__(
        self,
        habits: Optional[List[Habit]] = None,
        profile: Optional[UserProfile] = None,
        assessment: Optional[Assessment] = None,
    ):
        self.habits = habits
        self.profile = profile
        self.assessment = assessment

    def is_empty(self) -> bool:
        return self.habits is None and self.profile is None and self.assessment is None


def parse_import(document: Union[str, bytes, Dict[str, Any]]) -> ParsedImport:
    """Parse and validate an export document without touching any state.

    Only the top-level keys that are present are returned; a document that is not
    JSON, not an object, or holds an invalid section raises SnapshotImportError.
    """
    if isinstance(document, (str, bytes)):
        try:
            document = json.loads(document)
        except (ValueError, UnicodeDecodeError) as e:
            raise SnapshotImportError(f"Import is not valid JSON: {e}")
    if not isinstance(document, dict):
        raise SnapshotImportError("Import must be a JSON object")

    parsed = ParsedImport()
    try:
        if HABITS_KEY in document:
            parsed.habits = load_habits(document[HABITS_KEY])
        if PROFILE_KEY in document:
            parsed.profile = UserProfile.model_validate(document[PROFILE_KEY])
        if ASSESSMENT_KEY in document:
            parsed.assessment = Assessment.model_validate(document[ASSESSMENT_KEY] or {})
    except ValidationError as e:
        raise SnapshotImportError(f"Import has invalid data: {e.error_count()} error(s)")

    ids = [h.id for h in parsed.habits or []]
    if len(ids) != len(set(ids)):
        raise SnapshotImportError("Import contains duplicate habit ids")
    return parsed
