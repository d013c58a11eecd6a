"""Card and Shoe classes - immutable card representations."""

import logging
from dataclasses import dataclass
from enum import Enum
from random import Random
from typing import Iterable, Iterator

logger = logging.getLogger(__name__)


class Suit(Enum):
    """Card suits, valued by their display symbol."""

    SPADES = "♠"
    HEARTS = "♥"
    DIAMONDS = "♦"
    CLUBS = "♣"

    def __str__(self) -> str:
        return self.value


class Rank(Enum):
    """Card ranks in shoe order."""

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    def __str__(self) -> str:
        if 2 <= self.value <= 10:
            return str(self.value)
        return {
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
            Rank.ACE: "A",
        }[self]

    @property
    def blackjack_value(self) -> int:
        """Return the blackjack point value (Ace = 11, face cards = 10)."""
        if self == Rank.ACE:
            return 11
        return min(self.value, 10)

    @property
    def is_ace(self) -> bool:
        return self == Rank.ACE


_RANKS_BY_LABEL = {str(rank): rank for rank in Rank}
_RANKS_BY_LABEL["T"] = Rank.TEN

_SUITS_BY_CODE = {
    "S": Suit.SPADES,
    "H": Suit.HEARTS,
    "D": Suit.DIAMONDS,
    "C": Suit.CLUBS,
}
_SUITS_BY_CODE.update({suit.value: suit for suit in Suit})


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def value(self) -> int:
        """Return the blackjack point value, 11 for an Ace."""
        return self.rank.blackjack_value

    @property
    def label(self) -> str:
        """Return the display label: A, 2..10, J, Q or K."""
        return str(self.rank)

    @property
    def is_ace(self) -> bool:
        return self.rank.is_ace

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '8♣', 'AS', 'Kh' or '10d'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        if rank_str not in _RANKS_BY_LABEL:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in _SUITS_BY_CODE:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(_RANKS_BY_LABEL[rank_str], _SUITS_BY_CODE[suit_str])


def full_deck() -> list[Card]:
    """Return the 52 cards of a standard deck in suit-major order."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


class Shoe:
    """
    A single-deck shoe that never runs dry.

    Cards are drawn from the end of the internal list. When the shoe is
    empty, the next draw refills it with a freshly shuffled 52-card deck
    first, approximating an infinite shoe.
    """

    SIZE = 52

    def __init__(self, rng: Random | None = None) -> None:
        self._rng = rng or Random()
        self._cards: list[Card] = []
        self.refills = 0
        self.shuffle()

    def shuffle(self) -> None:
        """Restore all 52 cards and shuffle them."""
        self._cards = full_deck()
        self._rng.shuffle(self._cards)

    def stack(self, cards: Iterable[Card]) -> None:
        """
        Replace the shoe contents so that cards are drawn in the given order.

        Used to reproduce specific deals; once the stacked cards are used up
        the shoe refills as usual.
        """
        self._cards = list(reversed(list(cards)))

    def draw(self) -> Card:
        """Draw a card, refilling the shoe first if it is empty."""
        if not self._cards:
            self.shuffle()
            self.refills += 1
            logger.debug("Shoe exhausted, refilled with %d cards", len(self._cards))
        return self._cards.pop()

    @property
    def cards_remaining(self) -> int:
        return len(self._cards)

    @property
    def is_empty(self) -> bool:
        return not self._cards

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)
