import logging
import os
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from database import db, get_blob_store
from errors import NotFound, SnapshotImportError
from store import HabitStore

# Import schema metadata for external viewers
import schemas
from schemas import (
    AnalyticsSummary,
    Assessment,
    Badge,
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

logger = logging.getLogger(__name__)

app = FastAPI(title="HabitFlow API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

store = HabitStore(persistence=get_blob_store())


@app.on_event("startup")
def startup():
    store.load()
    logger.info("HabitFlow API ready")


# -------------------- Utilities --------------------

def get_store() -> HabitStore:
    return store


def not_found(e: NotFound) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


# -------------------- Schemas Endpoint --------------------
@app.get("/schema")
def get_schema():
    return schemas.SCHEMA_MODELS


# -------------------- Habits --------------------
@app.get("/api/habits", response_model=List[Habit])
def list_habits(category: Optional[str] = Query(default=None), s: HabitStore = Depends(get_store)):
    return s.list(category)


@app.post("/api/habits", response_model=MutationResult)
def create_habit(habit: HabitIn, s: HabitStore = Depends(get_store)):
    return s.create(habit)


@app.get("/api/habits/{habit_id}", response_model=Habit)
def get_habit(habit_id: str, s: HabitStore = Depends(get_store)):
    try:
        return s.get(habit_id)
    except NotFound as e:
        raise not_found(e)


@app.put("/api/habits/{habit_id}", response_model=MutationResult)
def update_habit(habit_id: str, fields: HabitUpdate, s: HabitStore = Depends(get_store)):
    try:
        return s.update(habit_id, fields)
    except NotFound as e:
        raise not_found(e)


@app.delete("/api/habits/{habit_id}", response_model=MutationResult)
def delete_habit(habit_id: str, s: HabitStore = Depends(get_store)):
    try:
        return s.delete(habit_id)
    except NotFound as e:
        raise not_found(e)


# Track habit completion for today
@app.post("/api/habits/{habit_id}/toggle", response_model=MutationResult)
def toggle_habit(habit_id: str, s: HabitStore = Depends(get_store)):
    try:
        return s.toggle(habit_id)
    except NotFound as e:
        raise not_found(e)


# -------------------- Progress & Analytics --------------------
@app.get("/api/progress/day", response_model=DayProgress)
def day_progress(s: HabitStore = Depends(get_store)):
    return s.day_progress()


@app.get("/api/progress/week", response_model=List[WeekDay])
def week_progress(s: HabitStore = Depends(get_store)):
    return s.week_progress()


@app.get("/api/analytics", response_model=AnalyticsSummary)
def analytics(s: HabitStore = Depends(get_store)):
    return s.analytics()


# -------------------- Profile & Badges --------------------
@app.get("/api/profile", response_model=UserProfile)
def get_profile(s: HabitStore = Depends(get_store)):
    return s.profile


@app.put("/api/profile", response_model=UserProfile)
def update_profile(fields: ProfileUpdate, s: HabitStore = Depends(get_store)):
    return s.update_profile(fields)


@app.get("/api/badges", response_model=List[Badge])
def badges(s: HabitStore = Depends(get_store)):
    return s.profile.badges


# -------------------- Assessment & Recommendations --------------------
@app.get("/api/assessment", response_model=Assessment)
def get_assessment(s: HabitStore = Depends(get_store)):
    return s.assessment


@app.post("/api/assessment", response_model=List[Recommendation])
def submit_assessment(assessment: Assessment, s: HabitStore = Depends(get_store)):
    return s.submit_assessment(assessment)


@app.get("/api/recommendations", response_model=List[Recommendation])
def list_recommendations(s: HabitStore = Depends(get_store)):
    return s.recommendations


@app.post("/api/recommendations/{rec_id}/adopt", response_model=MutationResult)
def adopt_recommendation(rec_id: str, s: HabitStore = Depends(get_store)):
    try:
        return s.add_recommended(rec_id)
    except NotFound as e:
        raise not_found(e)


# -------------------- Export / Import --------------------
@app.get("/api/export")
def export_data(s: HabitStore = Depends(get_store)):
    filename = f"habitflow-export-{s.today()}.json"
    return JSONResponse(
        content=s.export_snapshot(),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/api/import")
async def import_data(request: Request, s: HabitStore = Depends(get_store)):
    body = await request.body()
    try:
        # The store lock is taken off the event loop
        parsed = await run_in_threadpool(s.import_snapshot, body)
    except SnapshotImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "ok": True,
        "habits": parsed.habits is not None,
        "userProfile": parsed.profile is not None,
        "assessment": parsed.assessment is not None,
    }


@app.post("/api/reset")
def reset(s: HabitStore = Depends(get_store)):
    s.reset()
    return {"ok": True}


# -------------------- Health --------------------
@app.get("/")
def read_root():
    return {"message": "HabitFlow API running"}


@app.get("/test")
def test_database():
    response: Dict[str, Any] = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": None,
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": [],
    }
    if db is not None:
        response["database"] = "✅ Available"
        response["database_name"] = db.name
        response["connection_status"] = "Connected"
        try:
            response["collections"] = db.list_collection_names()[:10]
            response["database"] = "✅ Connected & Working"
        except Exception as e:
            response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
    else:
        response["database"] = "⚠️  Using in-memory storage"

    response["database_url"] = "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set"
    response["database_name"] = "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set"
    return response


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
