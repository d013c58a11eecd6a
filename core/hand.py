"""Hand evaluation for blackjack."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterable, Iterator

from core.cards import Card
from core.rules import BLACKJACK, SOFT_ACE_REDUCTION


class HandStatus(Enum):
    """Whether a hand is still being played."""

    PLAYING = "playing"
    FINISHED = "finished"

    def __str__(self) -> str:
        return self.value


# Result labels shown for split hands
RESULT_NONE = ""
RESULT_BUST = "Bust!"
RESULT_WIN = "Win!"
RESULT_LOSE = "Lose"
RESULT_PUSH = "Push"


def calculate_hand(cards: Iterable[Card]) -> int:
    """
    Calculate the best total of a set of cards.

    Aces start at 11 and are softened to 1, one at a time, while the total
    exceeds 21. Returns the highest total that doesn't bust, or the lowest
    bust total when every Ace is already hard.
    """
    total = 0
    aces = 0

    for card in cards:
        total += card.value
        if card.is_ace:
            aces += 1

    while total > BLACKJACK and aces > 0:
        total -= SOFT_ACE_REDUCTION
        aces -= 1

    return total


def is_blackjack(cards: list[Card]) -> bool:
    """Check for a natural: 21 with exactly two cards."""
    return len(cards) == 2 and calculate_hand(cards) == BLACKJACK


@dataclass
class Hand:
    """A hand of cards with its stake, status and result label."""

    cards: list[Card] = field(default_factory=list)
    bet: Decimal = Decimal("0")
    status: HandStatus = HandStatus.PLAYING
    result: str = RESULT_NONE

    def add_card(self, card: Card) -> None:
        """Add a card to the hand."""
        self.cards.append(card)

    def finish(self, result: str = RESULT_NONE) -> None:
        """Mark the hand finished, recording its result if one is known."""
        self.status = HandStatus.FINISHED
        if result:
            self.result = result

    @property
    def value(self) -> int:
        return calculate_hand(self.cards)

    @property
    def is_busted(self) -> bool:
        return self.value > BLACKJACK

    @property
    def is_finished(self) -> bool:
        return self.status == HandStatus.FINISHED

    @property
    def is_pair(self) -> bool:
        """Check if the hand is two cards with the same label."""
        return len(self.cards) == 2 and self.cards[0].label == self.cards[1].label

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        value_str = "(BUST)" if self.is_busted else f"({self.value})"
        return f"{cards_str} {value_str}"

    def __repr__(self) -> str:
        return f"Hand({self.cards!r}, bet={self.bet}, status={self.status.value})"
