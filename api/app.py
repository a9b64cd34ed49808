import logging
import os
from contextlib import asynccontextmanager
from typing import List, Optional
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from battle.engine import Engine
from battle.errors import BattleStalled, MapParseError, NoQualifyingBoost
from battle.model import BattleConfig
from battle.parser import parse_map
from battle.search import OutcomeSearch, simulate
from runtime.runner import RoundRunner
from .schemas import (EventsResponse, OutcomeResponse, SearchRequest, SearchResponse,
                      SimulateRequest, StartRequest)

logger = logging.getLogger("api")

runner: RoundRunner | None = None

async def shutdown():
    """Stop the live battle, if one is running."""
    if runner:
        await runner.stop()

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await shutdown()

app = FastAPI(title="Grid Battle Engine API", lifespan=lifespan)

def cors_origins(value: Optional[str]) -> List[str]:
    """Origins from a comma-separated BATTLE_CORS_ORIGINS value."""
    return [o.strip() for o in (value or "").split(",") if o.strip()]

# Cross-origin access is off unless a browser client is configured.
_origins = cors_origins(os.environ.get("BATTLE_CORS_ORIGINS"))
if _origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

def _parse(text: str, config: BattleConfig):
    """Parse a map, turning parse failures into a 422."""
    try:
        return parse_map(text, config)
    except MapParseError as exc:
        raise HTTPException(422, str(exc)) from exc

@app.get("/")
async def root():
    """API root endpoint."""
    return {
        "message": "Grid Battle Engine API",
        "docs": "/docs",
        "version": "1.0"
    }

@app.post("/battle/simulate", response_model=OutcomeResponse)
def simulate_battle(req: SimulateRequest):
    """Run a full battle and return its outcome."""
    state = _parse(req.map, BattleConfig())
    try:
        outcome = simulate(state, req.elf_boost, req.max_rounds)
    except BattleStalled as exc:
        raise HTTPException(409, str(exc)) from exc
    return outcome.to_dict()

@app.post("/battle/search", response_model=SearchResponse)
def search_boost(req: SearchRequest):
    """Find the smallest elf boost that wins without losing an elf."""
    state = _parse(req.map, BattleConfig())
    search = OutcomeSearch(state, max_boost=req.max_boost, workers=req.workers,
                           max_rounds=req.max_rounds)
    try:
        result = search.run()
    except (BattleStalled, NoQualifyingBoost) as exc:
        raise HTTPException(409, str(exc)) from exc
    return result.to_dict()

@app.post("/battle/start")
async def start_battle(req: StartRequest):
    """Start a live battle that advances one round per tick."""
    config = BattleConfig(elf_boost=req.elf_boost, max_rounds=req.max_rounds)
    state = _parse(req.map, config)
    await shutdown()
    global runner
    eng = Engine(state, max_rounds=config.max_rounds)
    runner = RoundRunner(eng, tick_ms=req.tick_ms, time_compression=req.time_compression)
    await runner.start()
    logger.info("Live battle started with %d units", len(state.registry))
    return {"battle_id": "local"}

@app.get("/battle/local/state")
async def get_state():
    """Get current battle state snapshot."""
    if not runner:
        raise HTTPException(400, "Battle not started")
    s = await runner.snapshot()
    return {
        "rounds": runner.engine.completed_rounds,
        "status": runner.engine.status.value,
        "error": str(runner.error) if runner.error else None,
        "map": s.render(with_hp=True),
        "tally": runner.events.tally(),
        "units": {
            str(u.id): {
                "id": u.id,
                "faction": u.faction.name,
                "pos": list(u.pos),  # Convert tuple to list for JSON
                "hp": u.hp,
                "attack_power": u.attack_power,
            } for u in s.registry
        }
    }

@app.get("/battle/local/events")
async def get_events(since: int = 0, limit: int = 500, kind: Optional[List[str]] = Query(None)):
    """Get events since offset, optionally only some kinds (?kind=Destroyed)."""
    if not runner:
        raise HTTPException(400, "Battle not started")
    evts, next_offset = runner.events.since(since, limit, kinds=kind)
    return EventsResponse(
        next_offset=next_offset,
        events=[{"kind": e.kind, "round": e.round, "data": e.data} for e in evts]
    )

@app.get("/battle/local/rounds/{round_no}/events")
async def get_round_events(round_no: int):
    """Get everything that happened during one round."""
    if not runner:
        raise HTTPException(400, "Battle not started")
    if round_no < 1 or round_no > runner.events.last_round + 1:
        raise HTTPException(404, f"Round {round_no} has not been played")
    return {
        "round": round_no,
        "events": [{"kind": e.kind, "round": e.round, "data": e.data}
                   for e in runner.events.for_round(round_no)],
    }

@app.post("/battle/local/time-control")
async def set_time_control(time_compression: float):
    """Set round pacing (1.0 = one round per tick_ms, higher = faster)."""
    if not runner:
        raise HTTPException(400, "Battle not started")
    runner.set_time_compression(time_compression)
    return {"time_compression": runner.time_compression}

@app.get("/battle/local/time-control")
async def get_time_control():
    """Get current time compression setting."""
    if not runner:
        raise HTTPException(400, "Battle not started")
    return {"time_compression": runner.time_compression}
