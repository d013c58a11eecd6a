"""Immutable views of the round state handed to callers after each command."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from core.cards import Card
from core.game.state import GameStatus
from core.hand import Hand, HandStatus


def card_to_dict(card: Card) -> dict[str, Any]:
    """Serialize a card to a dict."""
    return {"value": card.value, "label": card.label, "suit": card.suit.value}


def card_from_dict(data: dict[str, Any]) -> Card:
    """Deserialize a card from a dict."""
    return Card.from_string(f"{data['label']}{data['suit']}")


@dataclass(frozen=True)
class HandView:
    """Read-only copy of a split hand."""

    cards: tuple[Card, ...]
    bet: Decimal
    status: HandStatus
    result: str

    @classmethod
    def of(cls, hand: Hand) -> "HandView":
        return cls(
            cards=tuple(hand.cards),
            bet=hand.bet,
            status=hand.status,
            result=hand.result,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "cards": [card_to_dict(c) for c in self.cards],
            "bet": str(self.bet),
            "status": self.status.value,
            "result": self.result,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HandView":
        return cls(
            cards=tuple(card_from_dict(c) for c in data["cards"]),
            bet=Decimal(data["bet"]),
            status=HandStatus(data["status"]),
            result=data["result"],
        )


@dataclass(frozen=True)
class RoundSnapshot:
    """
    Everything a caller may observe about a round.

    Snapshots are plain values: two snapshots compare equal exactly when the
    observable state is the same, so a presentation layer can diff them to
    decide what to redraw.
    """

    player_hand: tuple[Card, ...]
    dealer_hand: tuple[Card, ...]
    split_hands: tuple[HandView, ...]
    current_split_hand: int
    game_status: GameStatus
    message: str
    bankroll: Decimal
    current_bet: Decimal
    insurance_bet: Decimal
    has_insurance: bool
    player_total: int = 0
    dealer_total: int = 0
    can_split: bool = False
    can_insure: bool = False
    split_totals: tuple[int, ...] = field(default_factory=tuple)

    @property
    def is_split(self) -> bool:
        return bool(self.split_hands)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe dict; money is kept as decimal strings."""
        return {
            "player_hand": [card_to_dict(c) for c in self.player_hand],
            "dealer_hand": [card_to_dict(c) for c in self.dealer_hand],
            "split_hands": [h.to_dict() for h in self.split_hands],
            "current_split_hand": self.current_split_hand,
            "game_status": self.game_status.value,
            "message": self.message,
            "bankroll": str(self.bankroll),
            "current_bet": str(self.current_bet),
            "insurance_bet": str(self.insurance_bet),
            "has_insurance": self.has_insurance,
            "player_total": self.player_total,
            "dealer_total": self.dealer_total,
            "can_split": self.can_split,
            "can_insure": self.can_insure,
            "split_totals": list(self.split_totals),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoundSnapshot":
        return cls(
            player_hand=tuple(card_from_dict(c) for c in data["player_hand"]),
            dealer_hand=tuple(card_from_dict(c) for c in data["dealer_hand"]),
            split_hands=tuple(HandView.from_dict(h) for h in data["split_hands"]),
            current_split_hand=data["current_split_hand"],
            game_status=GameStatus(data["game_status"]),
            message=data["message"],
            bankroll=Decimal(data["bankroll"]),
            current_bet=Decimal(data["current_bet"]),
            insurance_bet=Decimal(data["insurance_bet"]),
            has_insurance=data["has_insurance"],
            player_total=data.get("player_total", 0),
            dealer_total=data.get("dealer_total", 0),
            can_split=data.get("can_split", False),
            can_insure=data.get("can_insure", False),
            split_totals=tuple(data.get("split_totals", ())),
        )
