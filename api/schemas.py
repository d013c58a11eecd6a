"""Pydantic schemas for API requests and responses."""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from core.cards import Card
from core.game.snapshot import HandView, RoundSnapshot


class StartRequest(BaseModel):
    """Request to bet and deal a new round."""

    bet: int = Field(..., ge=1, description="Bet amount")


class ActionRequest(BaseModel):
    """Request for a player action."""

    action: Literal["hit", "stand", "split", "insurance"]


class CardResponse(BaseModel):
    """Card representation."""

    model_config = ConfigDict(from_attributes=True)

    value: int
    label: str
    suit: str

    @classmethod
    def of(cls, card: Card) -> "CardResponse":
        return cls(value=card.value, label=card.label, suit=card.suit.value)


class SplitHandResponse(BaseModel):
    """Split hand representation."""

    cards: list[CardResponse]
    total: int
    bet: Decimal
    status: Literal["playing", "finished"]
    result: str

    @classmethod
    def of(cls, hand: HandView, total: int) -> "SplitHandResponse":
        return cls(
            cards=[CardResponse.of(c) for c in hand.cards],
            total=total,
            bet=hand.bet,
            status=hand.status.value,
            result=hand.result,
        )


class RoundStateResponse(BaseModel):
    """Observable round state, rendered after every command."""

    game_status: Literal["waiting", "playing", "dealer", "finished"]
    message: str
    player_hand: list[CardResponse]
    player_total: int
    dealer_hand: list[CardResponse]
    dealer_total: int
    split_hands: list[SplitHandResponse]
    is_split: bool
    current_split_hand: int
    bankroll: Decimal
    current_bet: Decimal
    insurance_bet: Decimal
    has_insurance: bool
    can_split: bool
    can_insure: bool

    @classmethod
    def of(cls, snapshot: RoundSnapshot) -> "RoundStateResponse":
        return cls(
            game_status=snapshot.game_status.value,
            message=snapshot.message,
            player_hand=[CardResponse.of(c) for c in snapshot.player_hand],
            player_total=snapshot.player_total,
            dealer_hand=[CardResponse.of(c) for c in snapshot.dealer_hand],
            dealer_total=snapshot.dealer_total,
            split_hands=[
                SplitHandResponse.of(h, total)
                for h, total in zip(snapshot.split_hands, snapshot.split_totals)
            ],
            is_split=snapshot.is_split,
            current_split_hand=snapshot.current_split_hand,
            bankroll=snapshot.bankroll,
            current_bet=snapshot.current_bet,
            insurance_bet=snapshot.insurance_bet,
            has_insurance=snapshot.has_insurance,
            can_split=snapshot.can_split,
            can_insure=snapshot.can_insure,
        )


class SessionResponse(BaseModel):
    """A newly created game session."""

    session_id: str
