"""Blackjack round engine with state machine."""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from random import Random
from typing import Callable, Iterable

from transitions import Machine

from core.cards import Card, Shoe
from core.hand import (
    RESULT_BUST,
    RESULT_LOSE,
    RESULT_PUSH,
    RESULT_WIN,
    Hand,
    HandStatus,
    calculate_hand,
    is_blackjack,
)
from core.rules import (
    BLACKJACK,
    BLACKJACK_PAYOUT,
    DEALER_STANDS_ON,
    DEFAULT_BET,
    INSURANCE_DIVISOR,
    INSURANCE_PAYOUT,
    MAX_SPLIT_HANDS,
    PUSH_PAYOUT,
    STARTING_BANKROLL,
    WIN_PAYOUT,
)
from core.game.events import EventEmitter, EventType, GameEvent
from core.game.snapshot import HandView, RoundSnapshot
from core.game.state import GameStatus, is_valid_transition

logger = logging.getLogger(__name__)

MSG_WELCOME = "Want to play a round?"
MSG_NO_FUNDS = "Not enough money to place bet!"
MSG_HIT_OR_STAND = "Hit or Stand?"
MSG_INSURANCE_AVAILABLE = "Insurance available! Dealer showing Ace"
MSG_INSURANCE_PLACED = "Insurance placed! Continue playing"
MSG_BUST = "Bust! You lose!"
MSG_SPLIT_FINISHED = "Split hands finished!"
MSG_BLACKJACK = "Blackjack! You win!"
MSG_DEALER_BLACKJACK = "Dealer has Blackjack! You lose!"
MSG_DEALER_BUSTS = "Dealer busts! You win!"
MSG_DEALER_WINS = "Dealer wins!"
MSG_PLAYER_WINS = "You win!"
MSG_PUSH = "Push!"


def split_hand_message(index: int) -> str:
    """Prompt naming the active split hand, 1-based."""
    return f"Playing split hand {index + 1}"


@dataclass
class SingleHand:
    """The player's un-split hand."""

    hand: Hand = field(default_factory=Hand)


@dataclass
class SplitHands:
    """Split hands played in order; active is -1 once all are finished."""

    hands: list[Hand] = field(default_factory=list)
    active: int = 0

    @property
    def current(self) -> Hand | None:
        if 0 <= self.active < len(self.hands):
            return self.hands[self.active]
        return None


PlayerHands = SingleHand | SplitHands


def _money(amount: int | float | str | Decimal) -> Decimal:
    return amount if isinstance(amount, Decimal) else Decimal(str(amount))


class RoundEngine:
    """
    Single-player blackjack round engine.

    Commands mutate the engine in place and never raise: a command issued
    out of turn is ignored, and start_game() reports rejection through its
    return value and the status message. Read snapshot() after each command
    to render the round.
    """

    # State machine states
    STATES = [s.value for s in GameStatus]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "deal", "source": ["waiting", "finished"], "dest": "playing"},
        {"trigger": "player_busts", "source": "playing", "dest": "finished"},
        {"trigger": "dealer_plays", "source": "playing", "dest": "dealer"},
        {"trigger": "settle", "source": "dealer", "dest": "finished"},
        {"trigger": "restart", "source": "*", "dest": "waiting"},
    ]

    def __init__(
        self,
        starting_bankroll: int | Decimal = STARTING_BANKROLL,
        rng: Random | None = None,
        shoe: Shoe | None = None,
    ) -> None:
        """
        Initialize a new engine in the waiting state.

        Args:
            starting_bankroll: Stake the bankroll starts at and returns to on reset
            rng: Random number generator for reproducible shuffles
            shoe: Pre-built shoe, e.g. one stacked for a known deal
        """
        self._starting_bankroll = _money(starting_bankroll)
        self._shoe = shoe or Shoe(rng=rng)
        self.events = EventEmitter()

        self._hands: PlayerHands = SingleHand()
        self.dealer_hand: list[Card] = []
        self.message = MSG_WELCOME
        self.bankroll = self._starting_bankroll
        self.current_bet = Decimal("0")
        self.insurance_bet = Decimal("0")
        self.has_insurance = False

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial=GameStatus.WAITING.value,
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    # -- observable state -------------------------------------------------

    @property
    def game_status(self) -> GameStatus:
        """Get current game status as enum."""
        return GameStatus(self._machine_state)  # type: ignore[attr-defined]

    @property
    def player_hand(self) -> list[Card]:
        """Cards of the un-split hand; empty once the hand has been split."""
        if isinstance(self._hands, SingleHand):
            return self._hands.hand.cards
        return []

    @player_hand.setter
    def player_hand(self, cards: Iterable[Card]) -> None:
        """Replace the un-split hand, discarding any split hands."""
        self._hands = SingleHand(Hand(cards=list(cards), bet=self.current_bet))

    @property
    def split_hands(self) -> list[Hand]:
        if isinstance(self._hands, SplitHands):
            return self._hands.hands
        return []

    @property
    def current_split_hand(self) -> int:
        """Index of the split hand being played, or -1."""
        if isinstance(self._hands, SplitHands):
            return self._hands.active
        return -1

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to round events."""
        self.events.subscribe(handler, event_type)

    def snapshot(self) -> RoundSnapshot:
        """Return an immutable copy of the observable round state."""
        return RoundSnapshot(
            player_hand=tuple(self.player_hand),
            dealer_hand=tuple(self.dealer_hand),
            split_hands=tuple(HandView.of(h) for h in self.split_hands),
            current_split_hand=self.current_split_hand,
            game_status=self.game_status,
            message=self.message,
            bankroll=self.bankroll,
            current_bet=self.current_bet,
            insurance_bet=self.insurance_bet,
            has_insurance=self.has_insurance,
            player_total=calculate_hand(self.player_hand),
            dealer_total=calculate_hand(self.dealer_hand),
            can_split=self.can_split(),
            can_insure=self.can_insure(),
            split_totals=tuple(h.value for h in self.split_hands),
        )

    @classmethod
    def restore(
        cls,
        snapshot: RoundSnapshot,
        starting_bankroll: int | Decimal = STARTING_BANKROLL,
        rng: Random | None = None,
    ) -> "RoundEngine":
        """
        Rebuild an engine from a snapshot.

        The shoe is not part of the observable state, so the restored engine
        draws from a freshly shuffled one.
        """
        engine = cls(starting_bankroll=starting_bankroll, rng=rng)
        engine.dealer_hand = list(snapshot.dealer_hand)
        engine.message = snapshot.message
        engine.bankroll = snapshot.bankroll
        engine.current_bet = snapshot.current_bet
        engine.insurance_bet = snapshot.insurance_bet
        engine.has_insurance = snapshot.has_insurance

        if snapshot.split_hands:
            engine._hands = SplitHands(
                hands=[
                    Hand(cards=list(h.cards), bet=h.bet, status=h.status, result=h.result)
                    for h in snapshot.split_hands
                ],
                active=snapshot.current_split_hand,
            )
        else:
            engine._hands = SingleHand(
                Hand(cards=list(snapshot.player_hand), bet=snapshot.current_bet)
            )

        engine.machine.set_state(snapshot.game_status.value)
        return engine

    # -- queries ----------------------------------------------------------

    def calculate_hand(self, hand: Iterable[Card]) -> int:
        """Best total for a hand; see core.hand.calculate_hand."""
        return calculate_hand(hand)

    def can_split(self) -> bool:
        """Check if the un-split hand is a pair the bankroll can cover."""
        if not isinstance(self._hands, SingleHand):
            return False
        return (
            self._hands.hand.is_pair
            and self.bankroll >= self.current_bet
            and len(self.split_hands) < MAX_SPLIT_HANDS
        )

    def can_insure(self) -> bool:
        """Check if insurance is available against a lone dealer Ace."""
        return (
            len(self.dealer_hand) == 1
            and self.dealer_hand[0].is_ace
            and not self.has_insurance
            and self.bankroll >= self._insurance_stake()
        )

    # -- commands ---------------------------------------------------------

    def start_game(self, bet: int | Decimal = DEFAULT_BET) -> bool:
        """
        Place a bet and deal a new round.

        Args:
            bet: Stake for the round, debited immediately

        Returns:
            True if the round was dealt
        """
        amount = _money(bet)

        if amount <= 0:
            self._reject("Bet must be positive", bet=str(amount))
            return False

        if not is_valid_transition(self.game_status, GameStatus.PLAYING):
            self._reject("Cannot start a round in current state")
            return False

        if self.bankroll < amount:
            self.message = MSG_NO_FUNDS
            self.events.emit_new(
                EventType.INSUFFICIENT_FUNDS,
                required=str(amount),
                available=str(self.bankroll),
            )
            logger.debug("Bet %s rejected, bankroll %s", amount, self.bankroll)
            return False

        self._clear_hands()
        self.current_bet = amount
        self.bankroll -= amount
        self.events.emit_new(EventType.BET_PLACED, amount=str(amount))

        hand = Hand(bet=amount)
        self._hands = SingleHand(hand)
        self._deal_card(hand.cards, "player")
        self._deal_card(hand.cards, "player")
        self._deal_card(self.dealer_hand, "dealer")

        self.deal()  # type: ignore[attr-defined]
        self.message = MSG_HIT_OR_STAND
        self.events.emit_new(EventType.ROUND_STARTED, bet=str(amount))

        if is_blackjack(hand.cards):
            self.events.emit_new(EventType.PLAYER_BLACKJACK)

        if self.can_insure():
            self.message = MSG_INSURANCE_AVAILABLE
            self.events.emit_new(EventType.INSURANCE_OFFERED)

        logger.info(
            "Round started: bet=%s bankroll=%s player=%s dealer=%s",
            amount,
            self.bankroll,
            " ".join(str(c) for c in hand.cards),
            " ".join(str(c) for c in self.dealer_hand),
        )
        return True

    def split(self) -> None:
        """Split a pair into two hands, each completed with a fresh card."""
        if self.game_status != GameStatus.PLAYING:
            self._reject("Cannot split in current state")
            return
        if not self.can_split():
            self._reject("Cannot split")
            return

        first, second = self.player_hand
        hands = [
            Hand(cards=[first], bet=self.current_bet),
            Hand(cards=[second], bet=self.current_bet),
        ]
        for i, hand in enumerate(hands):
            self._deal_card(hand.cards, f"split {i + 1}")

        self.bankroll -= self.current_bet
        self._hands = SplitHands(hands=hands, active=0)
        self.message = split_hand_message(0)
        self.events.emit_new(
            EventType.PLAYER_SPLIT,
            hand_values=[h.value for h in hands],
            bankroll=str(self.bankroll),
        )

    def insurance(self) -> None:
        """Buy insurance for half the current bet."""
        if self.game_status != GameStatus.PLAYING:
            self._reject("Cannot insure in current state")
            return
        if not self.can_insure():
            self._reject("Cannot insure")
            return

        self.insurance_bet = self._insurance_stake()
        self.bankroll -= self.insurance_bet
        self.has_insurance = True
        self.message = MSG_INSURANCE_PLACED
        self.events.emit_new(EventType.INSURANCE_TAKEN, amount=str(self.insurance_bet))

    def hit(self) -> None:
        """Draw a card onto the active hand."""
        if self.game_status != GameStatus.PLAYING:
            self._reject("Cannot hit in current state")
            return

        hand = self._active_hand()
        self._deal_card(hand.cards, "player")
        total = hand.value
        self.events.emit_new(
            EventType.PLAYER_HIT,
            hand_index=self.current_split_hand,
            hand_value=total,
        )

        if total > BLACKJACK:
            self._handle_bust()
        elif total == BLACKJACK:
            self.stand()

    def stand(self) -> None:
        """Finish the active hand; the dealer plays once no hands remain."""
        if self.game_status != GameStatus.PLAYING:
            self._reject("Cannot stand in current state")
            return

        self.events.emit_new(
            EventType.PLAYER_STAND,
            hand_index=self.current_split_hand,
            hand_value=self._active_hand().value,
        )

        if isinstance(self._hands, SplitHands) and self._hands.current is not None:
            self._hands.current.finish()
            self.events.emit_new(
                EventType.SPLIT_HAND_FINISHED, hand_index=self._hands.active
            )
            self._next_split_hand()
        else:
            self._play_dealer_turn()

    def reset(self) -> None:
        """Return to a freshly constructed engine: full stake, new shoe."""
        self._clear_hands()
        self.bankroll = self._starting_bankroll
        self.message = MSG_WELCOME
        self._shoe.shuffle()
        self.restart()  # type: ignore[attr-defined]
        self.events.emit_new(EventType.GAME_RESET, bankroll=str(self.bankroll))
        logger.info("Engine reset, bankroll %s", self.bankroll)

    # -- internals --------------------------------------------------------

    def _reject(self, reason: str, **data) -> None:
        self.events.emit_new(EventType.INVALID_ACTION, message=reason, **data)
        logger.debug("%s (status=%s)", reason, self.game_status)

    def _insurance_stake(self) -> Decimal:
        # Division keeps the bet's exponent, so a 100 bet stakes 50 rather than 50.0
        return self.current_bet / INSURANCE_DIVISOR

    def _clear_hands(self) -> None:
        self._hands = SingleHand()
        self.dealer_hand = []
        self.current_bet = Decimal("0")
        self.insurance_bet = Decimal("0")
        self.has_insurance = False

    def _draw(self) -> Card:
        refilling = self._shoe.is_empty
        card = self._shoe.draw()
        if refilling:
            self.events.emit_new(EventType.SHOE_REFILLED, cards=len(self._shoe) + 1)
        return card

    def _deal_card(self, cards: list[Card], target: str) -> Card:
        card = self._draw()
        cards.append(card)
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=str(card),
            hand=target,
            hand_value=calculate_hand(cards),
        )
        return card

    def _active_hand(self) -> Hand:
        if isinstance(self._hands, SplitHands) and self._hands.current is not None:
            return self._hands.current
        if isinstance(self._hands, SingleHand):
            return self._hands.hand
        # All split hands finished; only reachable while the dealer plays
        raise RuntimeError("No active hand")

    def _handle_bust(self) -> None:
        if isinstance(self._hands, SplitHands) and self._hands.current is not None:
            index = self._hands.active
            self._hands.current.finish(RESULT_BUST)
            self.events.emit_new(EventType.PLAYER_BUSTS, hand_index=index)
            self._next_split_hand()
            return

        # Insurance stake was debited at purchase and is simply forfeited
        self.player_busts()  # type: ignore[attr-defined]
        self.message = MSG_BUST
        self.events.emit_new(EventType.PLAYER_BUSTS, hand_index=-1)
        self.events.emit_new(EventType.PLAYER_LOSES, amount=str(self.current_bet))
        self._end_round()

    def _next_split_hand(self) -> None:
        hands = self._hands
        assert isinstance(hands, SplitHands)
        hands.active += 1
        if hands.active >= len(hands.hands):
            hands.active = -1
            self._play_dealer_turn()
        else:
            self.message = split_hand_message(hands.active)

    def _play_dealer_turn(self) -> None:
        self.dealer_plays()  # type: ignore[attr-defined]

        while calculate_hand(self.dealer_hand) < DEALER_STANDS_ON:
            self._deal_card(self.dealer_hand, "dealer")
            self.events.emit_new(
                EventType.DEALER_HITS, hand_value=calculate_hand(self.dealer_hand)
            )

        dealer_total = calculate_hand(self.dealer_hand)
        if dealer_total > BLACKJACK:
            self.events.emit_new(EventType.DEALER_BUSTS, hand_value=dealer_total)
        else:
            self.events.emit_new(EventType.DEALER_STANDS, hand_value=dealer_total)

        self._resolve_round()

    def _resolve_round(self) -> None:
        dealer_total = calculate_hand(self.dealer_hand)
        dealer_blackjack = is_blackjack(self.dealer_hand)

        if dealer_blackjack:
            self.events.emit_new(EventType.DEALER_BLACKJACK)
            if self.has_insurance:
                payout = self.insurance_bet * INSURANCE_PAYOUT
                self.bankroll += payout
                self.events.emit_new(EventType.INSURANCE_WINS, amount=str(payout))

        if isinstance(self._hands, SplitHands):
            self._resolve_split_hands(dealer_total)
        else:
            self._resolve_single_hand(self._hands.hand, dealer_total, dealer_blackjack)

        self.settle()  # type: ignore[attr-defined]
        self._end_round()

    def _resolve_split_hands(self, dealer_total: int) -> None:
        for i, hand in enumerate(self._hands.hands):  # type: ignore[union-attr]
            total = hand.value
            if total > BLACKJACK:
                continue  # Result recorded when it busted

            if dealer_total > BLACKJACK or total > dealer_total:
                hand.result = RESULT_WIN
                self._pay(hand.bet * WIN_PAYOUT, EventType.PLAYER_WINS, hand_index=i)
            elif total < dealer_total:
                hand.result = RESULT_LOSE
                self.events.emit_new(
                    EventType.PLAYER_LOSES, hand_index=i, amount=str(hand.bet)
                )
            else:
                hand.result = RESULT_PUSH
                self._pay(hand.bet * PUSH_PAYOUT, EventType.PUSH, hand_index=i)

        self.message = MSG_SPLIT_FINISHED

    def _resolve_single_hand(
        self, hand: Hand, dealer_total: int, dealer_blackjack: bool
    ) -> None:
        total = hand.value
        player_blackjack = is_blackjack(hand.cards)
        bet = self.current_bet

        if player_blackjack and not dealer_blackjack:
            self.message = MSG_BLACKJACK
            self._pay(bet * BLACKJACK_PAYOUT, EventType.PLAYER_WINS)
        elif dealer_blackjack and not player_blackjack:
            self.message = MSG_DEALER_BLACKJACK
            self.events.emit_new(EventType.PLAYER_LOSES, amount=str(bet))
        elif dealer_total > BLACKJACK:
            self.message = MSG_DEALER_BUSTS
            self._pay(bet * WIN_PAYOUT, EventType.PLAYER_WINS)
        elif dealer_total > total:
            self.message = MSG_DEALER_WINS
            self.events.emit_new(EventType.PLAYER_LOSES, amount=str(bet))
        elif total > dealer_total:
            self.message = MSG_PLAYER_WINS
            self._pay(bet * WIN_PAYOUT, EventType.PLAYER_WINS)
        else:
            self.message = MSG_PUSH
            self._pay(bet * PUSH_PAYOUT, EventType.PUSH)

        hand.status = HandStatus.FINISHED

    def _pay(self, amount: Decimal, event_type: EventType, **data) -> None:
        self.bankroll += amount
        self.events.emit_new(event_type, amount=str(amount), **data)

    def _end_round(self) -> None:
        self.events.emit_new(
            EventType.ROUND_ENDED,
            message=self.message,
            bankroll=str(self.bankroll),
        )
        logger.info(
            "Round ended: %s bankroll=%s dealer=%s",
            self.message,
            self.bankroll,
            " ".join(str(c) for c in self.dealer_hand),
        )
