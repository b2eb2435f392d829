# trackgate/server.py
"""
FastAPI server exposing per-session trackers.

Only per-sample decisions are returned; summing distance is left to the client.
"""

import threading
import uuid

from fastapi import FastAPI, HTTPException, Request
from starlette.responses import JSONResponse

from trackgate.analysis.config import resolve_profile
from trackgate.analysis.tracker import Tracker
from trackgate.utils.log import get_logger
from trackgate.utils.validate import DecisionOut, ProfileOut, SampleIn, SessionCreate

logger = get_logger(__name__)


class TrackerRegistry:
    """
    In-memory map of session id -> (Tracker, lock).
    """
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, tuple[Tracker, threading.Lock]] = {}

    def create(self, tracker: Tracker) -> str:
        session_id = str(uuid.uuid4())
        with self._lock:
            self._sessions[session_id] = (tracker, threading.Lock())
        return session_id

    def get(self, session_id: str) -> tuple[Tracker, threading.Lock]:
        with self._lock:
            entry = self._sessions.get(session_id)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"unknown session {session_id}")
        return entry

    def delete(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise HTTPException(status_code=404, detail=f"unknown session {session_id}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


def create_app() -> FastAPI:
    """
    Build a FastAPI instance with an empty tracker registry.
    """
    app = FastAPI()
    app.state.registry = TrackerRegistry()

    @app.get("/api/status", response_class=JSONResponse)
    async def status(request: Request) -> JSONResponse:
        return JSONResponse(
            status_code=200,
            content={"status": "ok", "sessions": len(request.app.state.registry)},
        )

    @app.get("/api/profiles/{mode}", response_model=ProfileOut)
    async def get_profile(mode: str):
        """
        return the resolved thresholds for a mode (unknown modes get the default).
        """
        return ProfileOut.from_profile(resolve_profile(mode))

    @app.post("/api/sessions", response_class=JSONResponse)
    async def create_session(request: Request, body: SessionCreate) -> JSONResponse:
        overrides = body.overrides.to_overrides() if body.overrides else None
        try:
            tracker = Tracker(body.mode, overrides)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        session_id = request.app.state.registry.create(tracker)
        logger.info("Created session %s (mode=%s)", session_id, tracker.mode.value)
        return JSONResponse(
            status_code=201,
            content={
                "session_id": session_id,
                "mode": tracker.mode.value,
                "profile": ProfileOut.from_profile(tracker.profile).model_dump(),
            },
        )

    @app.post("/api/sessions/{session_id}/samples", response_model=DecisionOut)
    def ingest_sample(request: Request, session_id: str, sample: SampleIn):
        # sync handler: runs in the threadpool, so serialize per session
        tracker, lock = request.app.state.registry.get(session_id)
        with lock:
            decision = tracker.ingest(sample.to_sample())
        return DecisionOut.from_decision(decision)

    @app.post("/api/sessions/{session_id}/reset", response_class=JSONResponse)
    def reset_session(request: Request, session_id: str) -> JSONResponse:
        tracker, lock = request.app.state.registry.get(session_id)
        with lock:
            tracker.reset()
        logger.info("Reset session %s", session_id)
        return JSONResponse(status_code=200, content={"session_id": session_id, "reset": True})

    @app.delete("/api/sessions/{session_id}", response_class=JSONResponse)
    async def delete_session(request: Request, session_id: str) -> JSONResponse:
        request.app.state.registry.delete(session_id)
        logger.info("Deleted session %s", session_id)
        return JSONResponse(status_code=200, content={"session_id": session_id, "deleted": True})

    return app
