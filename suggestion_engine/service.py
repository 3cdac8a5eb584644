"""HTTP surface for the suggestion engine."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from suggestion_engine.adapters.params import optional, parse_bool, parse_length, parse_timestamp, require
from suggestion_engine.engine import SuggestionEngine
from suggestion_engine.errors import (
    EngineError,
    MissingParameter,
    MalformedInput,
    NotFoundError,
    PersistenceUnavailable,
    ResetFailed,
)

logger = logging.getLogger(__name__)

_STATUS_CODES = (
    (MissingParameter, 400),
    (MalformedInput, 400),
    (NotFoundError, 404),
    (PersistenceUnavailable, 503),
    (ResetFailed, 409),
)


class SuggestionOut(BaseModel):
    tag: str
    start: str
    length_minutes: int
    repeat_rule: str


class Ack(BaseModel):
    ok: bool
    error: str = ""


class EventOut(BaseModel):
    action: str
    tag: str
    start: str
    length_minutes: int
    repeat_rule: str


class EventsOut(BaseModel):
    events: list[EventOut]


def _status_for(exc: EngineError) -> int:
    for error_type, status in _STATUS_CODES:
        if isinstance(exc, error_type):
            return status
    return 500


def create_app(engine: SuggestionEngine) -> FastAPI:
    """Build the API around an already constructed engine."""

    app = FastAPI(title="suggestion-engine")
    app.state.engine = engine
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    @app.exception_handler(EngineError)
    async def engine_error_handler(request: Request, exc: EngineError):
        status = _status_for(exc)
        log = logger.error if status >= 500 else logger.info
        log("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content=Ack(ok=False, error=str(exc)).model_dump())

    @app.get("/suggest", response_model=SuggestionOut)
    def suggest(request: Request):
        params = dict(request.query_params)
        action = require(params, "action")
        by = optional(params, "by")
        after = optional(params, "after")
        suggestion = engine.suggest(
            action,
            before=parse_timestamp(by, "by") if by else None,
            after=parse_timestamp(after, "after") if after else None,
        )
        return suggestion.to_payload()

    @app.post("/suggest", response_model=Ack)
    def feedback(request: Request):
        params = dict(request.query_params)
        tag = require(params, "tag")
        start = parse_timestamp(require(params, "start_date"), "start_date")
        length = parse_length(require(params, "length"))
        accepted = parse_bool(require(params, "accepted"))
        engine.feedback(tag, start, length, accepted)
        return Ack(ok=True)

    @app.get("/schedule", response_model=EventsOut)
    def schedule():
        slot_minutes = engine.config.slot_minutes
        return {"events": [event.to_payload(slot_minutes) for event in engine.list_schedule()]}

    @app.post("/schedule", response_model=Ack)
    def commit(request: Request):
        params = dict(request.query_params)
        action = require(params, "action")
        tag = require(params, "tag")
        start = parse_timestamp(require(params, "start_date"), "start_date")
        length = parse_length(require(params, "length"))
        repeats = require(params, "repeats")
        engine.commit(action, tag, start, length, repeats)
        return Ack(ok=True)

    @app.get("/reset", response_model=Ack)
    def reset():
        engine.reset()
        return Ack(ok=True)

    return app
