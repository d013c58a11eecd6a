"""Game state enumeration."""

from enum import Enum


class GameStatus(Enum):
    """
    Round state machine states.

    Flow: WAITING → PLAYING → DEALER → FINISHED, and FINISHED → PLAYING for
    the next round. DEALER is transient: the dealer plays out inside the same
    command that started the turn, so callers never observe it at rest.
    """

    # Initial state, or after a reset
    WAITING = "waiting"

    # Player (or the active split hand) is acting
    PLAYING = "playing"

    # Dealer draws to 17
    DEALER = "dealer"

    # Round resolved, ready for the next one
    FINISHED = "finished"

    def __str__(self) -> str:
        return self.value


# Valid state transitions
VALID_TRANSITIONS: dict[GameStatus, list[GameStatus]] = {
    GameStatus.WAITING: [GameStatus.PLAYING, GameStatus.WAITING],
    GameStatus.PLAYING: [GameStatus.DEALER, GameStatus.FINISHED, GameStatus.WAITING],
    GameStatus.DEALER: [GameStatus.FINISHED],
    GameStatus.FINISHED: [GameStatus.PLAYING, GameStatus.WAITING],
}


def is_valid_transition(from_state: GameStatus, to_state: GameStatus) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Desired state

    Returns:
        True if the transition is allowed
    """
    return to_state in VALID_TRANSITIONS.get(from_state, [])
