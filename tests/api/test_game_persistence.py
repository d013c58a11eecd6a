"""Tests for round state persistence (snapshot serialization)."""

import json
from decimal import Decimal

from api.routes.game import _deserialize_game, _serialize_game
from core.cards import Card, Rank, Suit
from core.game import GameStatus, RoundSnapshot
from core.game.snapshot import card_from_dict, card_to_dict
from core.hand import HandStatus


class TestCardSerialization:
    def test_card_dict_shape(self):
        assert card_to_dict(Card(Rank.ACE, Suit.SPADES)) == {
            "value": 11,
            "label": "A",
            "suit": "♠",
        }

    def test_every_card_survives(self):
        for rank in Rank:
            for suit in Suit:
                card = Card(rank, suit)
                assert card_from_dict(card_to_dict(card)) == card


class TestGameSerialization:
    def test_serialized_game_is_json(self, make_engine):
        game = make_engine("AS", "KH", "9C")
        game.start_game(25)

        data = json.loads(json.dumps(_serialize_game(game)))

        assert data["game_status"] == "playing"
        assert data["bankroll"] == "475"
        assert data["player_total"] == 21

    def test_mid_split_round_restores(self, make_engine):
        game = make_engine("8S", "8H", "10C", "3D", "2C", "KS")
        game.start_game(100)
        game.split()
        game.hit()

        restored = _deserialize_game(json.loads(json.dumps(_serialize_game(game))))

        assert restored.game_status == GameStatus.PLAYING
        assert restored.current_split_hand == 1
        assert restored.split_hands[0].status == HandStatus.FINISHED
        assert restored.split_hands[1].status == HandStatus.PLAYING
        assert restored.bankroll == Decimal("300")
        assert restored.snapshot() == game.snapshot()

    def test_finished_round_restores(self, make_engine):
        game = make_engine("AS", "KH", "9C", "8D")
        game.start_game(25)
        game.stand()

        restored = _deserialize_game(_serialize_game(game))

        assert restored.game_status == GameStatus.FINISHED
        assert restored.bankroll == Decimal("537.5")
        assert restored.message == "Blackjack! You win!"
        assert restored.start_game(100) is True

    def test_snapshot_from_dict_defaults_derived_fields(self, engine):
        data = engine.snapshot().to_dict()
        for key in ("player_total", "dealer_total", "can_split", "can_insure", "split_totals"):
            del data[key]

        snapshot = RoundSnapshot.from_dict(data)

        assert snapshot.game_status == GameStatus.WAITING
        assert snapshot.bankroll == Decimal("500")
