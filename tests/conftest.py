"""Pytest fixtures for round engine tests."""

from random import Random

import pytest

from core.cards import Card, Shoe
from core.game import RoundEngine


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def shoe(rng):
    """A shuffled single-deck shoe."""
    return Shoe(rng=rng)


@pytest.fixture
def engine(rng):
    """A fresh engine with the default 500 stake."""
    return RoundEngine(rng=rng)


@pytest.fixture
def make_engine():
    """
    Factory for engines whose shoe deals the given cards in order.

    Deal order for start_game() is player, player, dealer; every later draw
    (hits, split cards, dealer hits) continues down the list.
    """

    def _make(*cards: str, bankroll: int = 500) -> RoundEngine:
        stacked = Shoe(rng=Random(7))
        stacked.stack(Card.from_string(c) for c in cards)
        return RoundEngine(starting_bankroll=bankroll, shoe=stacked)

    return _make

