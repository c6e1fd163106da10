from __future__ import annotations

import os
import secrets
from datetime import date, datetime
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, status
from fastapi.responses import PlainTextResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from fastlife import (
    FileAccessError,
    InvalidFormatError,
    PersistenceError,
    SessionStateError,
    Tracker,
    import_from_file,
    preview_file,
    render_export,
)


app = FastAPI(title="FastLife API", version="0.1.0")

security = HTTPBasic(auto_error=False)


# ── Auth ──────────────────────────────────────────────────────


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("FASTLIFE_USERNAME", "")
    expected_password = os.environ.get("FASTLIFE_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


def get_tracker() -> Tracker:
    """Open the workspace named by FASTLIFE_ROOT for one request."""
    try:
        return Tracker.open()
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))


# ── Helpers ───────────────────────────────────────────────────


def _parse_time(value: Any, tracker: Tracker, field: str) -> datetime | None:
    """ISO-8601 from the payload; naive values are on the user's clock."""
    if value is None or value == "":
        return None
    try:
        ts = datetime.fromisoformat(str(value))
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {field}: {value}")
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=tracker.tz)
    return ts


def _parse_hours(value: Any, field: str) -> float | None:
    if value is None:
        return None
    try:
        hours = float(value)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail=f"Invalid {field}: {value}")
    if hours <= 0:
        raise HTTPException(status_code=400, detail=f"{field} must be positive")
    return hours


def _fasting_state(tracker: Tracker) -> dict[str, Any]:
    repo = tracker.fasting
    return {
        "activeSession": repo.current_session.to_dict() if repo.current_session else None,
        "history": [s.to_dict() for s in repo.history()],
        "goalHours": repo.goal_hours,
        **repo.streaks.to_dict(),
    }


def _import_path(payload: dict[str, Any]) -> str:
    path = str(payload.get("path", "") or "")
    if not path:
        raise HTTPException(status_code=400, detail="Missing path")
    return path


# ── Endpoints ─────────────────────────────────────────────────


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/api/fasting")
def api_fasting(
    username: str = Depends(get_current_user),
    tracker: Tracker = Depends(get_tracker),
) -> dict[str, Any]:
    """Active session, history and both streak counters."""
    return _fasting_state(tracker)


@app.post("/api/fasting/start")
def api_fasting_start(
    payload: dict[str, Any] = Body(default={}),
    username: str = Depends(get_current_user),
    tracker: Tracker = Depends(get_tracker),
) -> dict[str, Any]:
    goal = _parse_hours(payload.get("goal_hours"), "goal_hours")
    try:
        session = tracker.fasting.start_session(goal)
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"ok": True, "session": session.to_dict()}


@app.post("/api/fasting/stop")
def api_fasting_stop(
    payload: dict[str, Any] = Body(default={}),
    username: str = Depends(get_current_user),
    tracker: Tracker = Depends(get_tracker),
) -> dict[str, Any]:
    """Stop the active fast, optionally back-dating its start and end."""
    end_time = _parse_time(payload.get("end_time"), tracker, "end_time")
    start_time = _parse_time(payload.get("start_time"), tracker, "start_time")
    try:
        session = tracker.fasting.stop_session(end_time=end_time, start_time=start_time)
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"ok": True, "session": session.to_dict(), **tracker.fasting.streaks.to_dict()}


@app.post("/api/fasting/manual")
def api_fasting_manual(
    payload: dict[str, Any] = Body(...),
    username: str = Depends(get_current_user),
    tracker: Tracker = Depends(get_tracker),
) -> dict[str, Any]:
    start_time = _parse_time(payload.get("start_time"), tracker, "start_time")
    end_time = _parse_time(payload.get("end_time"), tracker, "end_time")
    if start_time is None or end_time is None:
        raise HTTPException(status_code=400, detail="start_time and end_time are required")
    goal = _parse_hours(payload.get("goal_hours"), "goal_hours")
    try:
        session = tracker.fasting.add_manual_session(start_time, end_time, goal)
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"ok": True, "session": session.to_dict(), **tracker.fasting.streaks.to_dict()}


@app.delete("/api/fasting/current")
def api_fasting_discard(
    username: str = Depends(get_current_user),
    tracker: Tracker = Depends(get_tracker),
) -> dict[str, Any]:
    try:
        session = tracker.fasting.discard_current_session()
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if session is None:
        raise HTTPException(status_code=409, detail="No fast in progress to discard.")
    return {"ok": True, "session": session.to_dict()}


@app.delete("/api/fasting/day/{day}")
def api_fasting_delete_day(
    day: str,
    username: str = Depends(get_current_user),
    tracker: Tracker = Depends(get_tracker),
) -> dict[str, Any]:
    try:
        target = date.fromisoformat(day)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date: {day}")
    try:
        deleted = tracker.fasting.delete_session_on(target)
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail=f"No fast recorded on {day}")
    return {"ok": True, "day": day, **tracker.fasting.streaks.to_dict()}


@app.delete("/api/fasting")
def api_fasting_delete_all(
    username: str = Depends(get_current_user),
    tracker: Tracker = Depends(get_tracker),
) -> dict[str, Any]:
    """Erase all fasting history. Not recoverable."""
    try:
        tracker.fasting.delete_all()
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"ok": True, **tracker.fasting.streaks.to_dict()}


@app.put("/api/fasting/goal")
def api_fasting_goal(
    payload: dict[str, Any] = Body(...),
    username: str = Depends(get_current_user),
    tracker: Tracker = Depends(get_tracker),
) -> dict[str, Any]:
    goal = _parse_hours(payload.get("goal_hours"), "goal_hours")
    if goal is None:
        raise HTTPException(status_code=400, detail="Missing goal_hours")
    try:
        tracker.fasting.set_goal_hours(goal)
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"ok": True, "goalHours": tracker.fasting.goal_hours}


@app.get("/api/streaks")
def api_streaks(
    username: str = Depends(get_current_user),
    tracker: Tracker = Depends(get_tracker),
) -> dict[str, Any]:
    return tracker.fasting.streaks.to_dict()


@app.post("/api/import")
def api_import(
    payload: dict[str, Any] = Body(...),
    username: str = Depends(get_current_user),
    tracker: Tracker = Depends(get_tracker),
) -> dict[str, Any]:
    """Import an export file from the server's filesystem."""
    path = _import_path(payload)
    try:
        result = import_from_file(path, tracker)
    except FileAccessError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"ok": True, **result.to_dict(), **tracker.fasting.streaks.to_dict()}


@app.post("/api/import/preview")
def api_import_preview(
    payload: dict[str, Any] = Body(...),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    path = _import_path(payload)
    try:
        preview = preview_file(path)
    except FileAccessError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, **preview.to_dict()}


@app.get("/api/export")
def api_export(
    username: str = Depends(get_current_user),
    tracker: Tracker = Depends(get_tracker),
) -> PlainTextResponse:
    return PlainTextResponse(render_export(tracker))
