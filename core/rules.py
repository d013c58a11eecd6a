"""Fixed house rules for the round engine."""

from decimal import Decimal

BLACKJACK = 21
SOFT_ACE_REDUCTION = 10

# Dealer draws until reaching this total; a soft 17 stands
DEALER_STANDS_ON = 17

# Split cap: at most 3 split hands may exist before another split (4 hands total)
MAX_SPLIT_HANDS = 3

# Payouts are returned stake multiples, the bet having been debited up front
WIN_PAYOUT = Decimal("2")
BLACKJACK_PAYOUT = Decimal("2.5")
PUSH_PAYOUT = Decimal("1")
INSURANCE_PAYOUT = Decimal("3")

# Insurance stake is the current bet divided by this
INSURANCE_DIVISOR = 2

STARTING_BANKROLL = Decimal("500")
DEFAULT_BET = 100
