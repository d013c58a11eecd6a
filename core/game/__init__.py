"""Round engine and state management."""

from core.game.events import GameEvent, EventType
from core.game.state import GameStatus
from core.game.snapshot import RoundSnapshot, HandView
from core.game.engine import RoundEngine

__all__ = [
    "GameEvent",
    "EventType",
    "GameStatus",
    "RoundSnapshot",
    "HandView",
    "RoundEngine",
]
