"""REST service to play Bésigue against bot seats."""

from __future__ import annotations

import logging
import uuid
from dataclasses import asdict
from typing import Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError

from besigue.game import BesigueGame
from besigue.rules_schema import RuleSet
from besigue.service import ActionRejected, GameService, GameView
from bots.bot_arena import BOT_REGISTRY
from bots.scheduler import TurnScheduler

logger = logging.getLogger(__name__)

HUMAN_SEAT = 0


class StartRequest(BaseModel):
    player_name: str = "You"
    opponents: List[Literal["greedy", "random"]] = Field(default_factory=lambda: ["greedy"], min_length=1, max_length=3)
    winning_score: Optional[int] = None
    dealer_determination: Literal["random", "draw_jacks"] = "random"
    seed: Optional[int] = None


class PlayRequest(BaseModel):
    slot: int


class MeldRequest(BaseModel):
    slots: List[int]


class SessionState:
    def __init__(self, service: GameService, scheduler: TurnScheduler) -> None:
        self.service = service
        self.scheduler = scheduler


sessions: Dict[str, SessionState] = {}


app = FastAPI(title="Bésigue Play Service")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def ensure_session(session_id: str) -> SessionState:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def serialize_view(view: GameView) -> Dict[str, object]:
    return asdict(view)


def _advance(session: SessionState) -> Dict[str, object]:
    session.scheduler.run_until_human()
    return {"state": serialize_view(session.service.get_game_view(HUMAN_SEAT))}


def _rejected(exc: ActionRejected) -> HTTPException:
    return HTTPException(status_code=400, detail={"code": exc.code, "message": str(exc)})


@app.post("/session/start")
def start_session(request: StartRequest) -> Dict[str, object]:
    try:
        rules = RuleSet(
            player_count=len(request.opponents) + 1,
            winning_score=request.winning_score,
            dealer_determination=request.dealer_determination,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors()) from exc
    names = [request.player_name] + [f"{name.title()} Bot {seat}" for seat, name in enumerate(request.opponents, start=1)]
    game = BesigueGame(rules, player_names=names, human_seats=(HUMAN_SEAT,), seed=request.seed)
    providers = {seat: BOT_REGISTRY[name]() for seat, name in enumerate(request.opponents, start=1)}
    session = SessionState(service=GameService(game), scheduler=TurnScheduler(game, providers))
    session.scheduler.start_game()
    session_id = uuid.uuid4().hex
    sessions[session_id] = session
    logger.info("Started session %s with %d players", session_id, rules.player_count)
    payload = _advance(session)
    payload["session_id"] = session_id
    return payload


@app.get("/session/{session_id}")
def get_session(session_id: str) -> Dict[str, object]:
    session = ensure_session(session_id)
    return {"state": serialize_view(session.service.get_game_view(HUMAN_SEAT))}


@app.post("/session/{session_id}/dealer-draw")
def dealer_draw(session_id: str) -> Dict[str, object]:
    session = ensure_session(session_id)
    try:
        session.service.draw_for_dealer(HUMAN_SEAT)
    except ActionRejected as exc:
        raise _rejected(exc) from exc
    return _advance(session)


@app.post("/session/{session_id}/draw")
def draw(session_id: str) -> Dict[str, object]:
    session = ensure_session(session_id)
    try:
        session.service.draw_card(HUMAN_SEAT)
    except ActionRejected as exc:
        raise _rejected(exc) from exc
    return _advance(session)


@app.post("/session/{session_id}/play")
def play(session_id: str, request: PlayRequest) -> Dict[str, object]:
    session = ensure_session(session_id)
    try:
        session.service.play_card(HUMAN_SEAT, request.slot)
    except ActionRejected as exc:
        raise _rejected(exc) from exc
    return _advance(session)


@app.post("/session/{session_id}/meld")
def meld(session_id: str, request: MeldRequest) -> Dict[str, object]:
    session = ensure_session(session_id)
    try:
        session.service.declare_meld(HUMAN_SEAT, request.slots)
    except ActionRejected as exc:
        raise _rejected(exc) from exc
    return _advance(session)
