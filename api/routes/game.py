"""Game API endpoints."""

import time
from typing import Annotated, Any, Callable

from fastapi import APIRouter, HTTPException, Header

from api.schemas import ActionRequest, RoundStateResponse, SessionResponse, StartRequest
from api.session import create_session, extract_session_id, get_session_store
from config import config
from core.game import GameStatus, RoundEngine, RoundSnapshot
from logging_utils import get_logger

logger = get_logger(__name__)

router = APIRouter()

# In-memory engine cache (for performance, backed by session store)
_games: dict[str, RoundEngine] = {}

# Session data keys
SESSION_KEY_ROUND = "round"
SESSION_KEY_CREATED_AT = "created_at"
SESSION_KEY_LAST_ACTIVITY = "last_activity"


def _new_engine() -> RoundEngine:
    return RoundEngine(starting_bankroll=config.game.starting_bankroll)


def _serialize_game(game: RoundEngine) -> dict[str, Any]:
    """Serialize engine state for session storage."""
    return game.snapshot().to_dict()


def _deserialize_game(data: dict[str, Any]) -> RoundEngine:
    """Restore an engine from session data."""
    return RoundEngine.restore(
        RoundSnapshot.from_dict(data),
        starting_bankroll=config.game.starting_bankroll,
    )


async def _load_game(session_id: str) -> RoundEngine | None:
    """Load game from session store."""
    store = await get_session_store()
    session_data = await store.get(session_id)
    if session_data and SESSION_KEY_ROUND in session_data:
        return _deserialize_game(session_data[SESSION_KEY_ROUND])
    return None


async def _save_game(session_id: str, game: RoundEngine) -> None:
    """Save game to session store."""
    store = await get_session_store()
    session_data = await store.get(session_id) or {}
    session_data[SESSION_KEY_ROUND] = _serialize_game(game)
    session_data[SESSION_KEY_LAST_ACTIVITY] = int(time.time())
    session_data.setdefault(SESSION_KEY_CREATED_AT, int(time.time()))
    await store.set(session_id, session_data)


async def _get_game(session_id: str) -> RoundEngine:
    """Get or create a game for the session."""
    if extract_session_id(session_id) is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    if session_id in _games:
        return _games[session_id]

    game = await _load_game(session_id)
    if game is not None:
        logger.debug("Restored round for session %s", session_id)
        _games[session_id] = game
        return game

    game = _new_engine()
    _games[session_id] = game
    await _save_game(session_id, game)
    return game


@router.post("/new")
async def new_game(
    session_id: Annotated[str | None, Header(alias="X-Session-ID")] = None,
) -> SessionResponse:
    """Create a new game session."""
    if session_id is None or extract_session_id(session_id) is None:
        session_id = await create_session()

    game = _new_engine()
    _games[session_id] = game
    await _save_game(session_id, game)
    logger.info("New game for session %s", session_id)

    return SessionResponse(session_id=session_id)


@router.get("/state")
async def get_state(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> RoundStateResponse:
    """Get current round state."""
    game = await _get_game(session_id)
    return RoundStateResponse.of(game.snapshot())


@router.post("/start")
async def start_round(
    request: StartRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> RoundStateResponse:
    """Place a bet and deal a new round."""
    game = await _get_game(session_id)

    if not game.start_game(request.bet):
        raise HTTPException(status_code=400, detail=game.message)

    await _save_game(session_id, game)
    return RoundStateResponse.of(game.snapshot())


def _action_allowed(game: RoundEngine, action: str) -> bool:
    """Gate actions the way a table UI gates its buttons."""
    if game.game_status != GameStatus.PLAYING:
        return False
    if action == "split":
        return game.can_split()
    if action == "insurance":
        return game.can_insure()
    return True


@router.post("/action")
async def player_action(
    request: ActionRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> RoundStateResponse:
    """Execute a player action."""
    game = await _get_game(session_id)

    actions: dict[str, Callable[[], None]] = {
        "hit": game.hit,
        "stand": game.stand,
        "split": game.split,
        "insurance": game.insurance,
    }

    if not _action_allowed(game, request.action):
        raise HTTPException(status_code=400, detail=f"Cannot {request.action} now")

    actions[request.action]()

    await _save_game(session_id, game)
    return RoundStateResponse.of(game.snapshot())


@router.post("/reset")
async def reset_game(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> RoundStateResponse:
    """Reset bankroll and round to their starting values."""
    game = await _get_game(session_id)
    game.reset()

    await _save_game(session_id, game)
    return RoundStateResponse.of(game.snapshot())
