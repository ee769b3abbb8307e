"""
Duel HTTP service.

Plays FSM vs FuSM rounds on request and serves the running scoreboard.

Usage:
    python duel_server.py --port 8001 --seed 7
"""

import argparse
import logging
import threading
from typing import Dict, List, Optional

import uvicorn
from fastapi import Body, FastAPI
from pydantic import BaseModel, Field

from arena.maps import load_arena
from arena.match import DEFAULT_MAX_TICKS, DuelArena, RoundStats, Scoreboard
from arena.settings import load_overrides
from duel_core.agent import AgentStats

logger = logging.getLogger(__name__)


# ============================================================================
# REQUEST / RESPONSE MODELS
# ============================================================================

class RoundsRequest(BaseModel):
    rounds: int = Field(1, ge=1, le=1000)
    max_ticks: int = Field(DEFAULT_MAX_TICKS, ge=1)


class RoundsResponse(BaseModel):
    played: List[RoundStats]
    scoreboard: Scoreboard


class StatsResponse(BaseModel):
    scoreboard: Scoreboard
    rounds: List[RoundStats]
    agents: Dict[str, AgentStats]


class ResetRequest(BaseModel):
    seed: Optional[int] = None


app = FastAPI(
    title="FSM vs FuSM Duel",
    description="Headless duel between a crisp state machine and a fuzzy controller",
    version="1.0.0",
)

# Global duel instance; rounds never interleave.
duel = DuelArena()
duel_lock = threading.Lock()


@app.get("/")
async def root():
    return {"message": "Duel arena is running", "rounds_played": duel.scoreboard.rounds_played}


@app.post("/duel/rounds", response_model=RoundsResponse)
def play_rounds(request: Optional[RoundsRequest] = Body(None)):
    """Play ``rounds`` more rounds and return them."""
    request = request or RoundsRequest()
    with duel_lock:
        played = [duel.run_round(request.max_ticks) for _ in range(request.rounds)]
        return RoundsResponse(played=played, scoreboard=duel.scoreboard.model_copy())


@app.get("/duel/stats", response_model=StatsResponse)
def stats():
    with duel_lock:
        return StatsResponse(
            scoreboard=duel.scoreboard.model_copy(),
            rounds=list(duel.rounds),
            agents={agent.name: agent.stats() for agent in duel.agents},
        )


@app.post("/duel/reset", status_code=204)
def reset(request: Optional[ResetRequest] = Body(None)):
    """Clear the scoreboard; a seed rebuilds the duel with fresh random streams."""
    global duel
    request = request or ResetRequest()
    with duel_lock:
        if request.seed is not None:
            duel = DuelArena(duel.arena, duel.fsm.config, duel.fuzzy.config, seed=request.seed, dt=duel.dt)
        else:
            duel.reset()
        logger.info("duel reset (seed=%s)", request.seed)


# ============================================================================
# MAIN
# ============================================================================

def main():
    global duel
    parser = argparse.ArgumentParser(description="Run the FSM vs FuSM duel service")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Host address")
    parser.add_argument("--port", type=int, default=8001, help="Port number")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for hit rolls")
    parser.add_argument("--dt", type=float, default=0.1, help="Simulated seconds per tick")
    parser.add_argument("--map", type=str, default=None, help="Arena layout (.csv or text)")
    parser.add_argument("--config", type=str, default=None, help="JSON file with config overrides")
    parser.add_argument("--log-level", type=str, default="INFO", help="Logging level")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    fsm_config, fuzzy_config = load_overrides(args.config).resolve()
    duel = DuelArena(load_arena(args.map), fsm_config, fuzzy_config, seed=args.seed, dt=args.dt)

    print(f"Starting duel service on {args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level="warning", access_log=False)


if __name__ == "__main__":
    main()
