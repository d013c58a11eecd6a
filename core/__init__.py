"""Core blackjack round engine - 100% UI-agnostic."""

from core.cards import Card, Shoe, Rank, Suit
from core.hand import Hand, HandStatus, calculate_hand

__all__ = [
    "Card",
    "Shoe",
    "Rank",
    "Suit",
    "Hand",
    "HandStatus",
    "calculate_hand",
]
