# 游戏引擎模块
from .card import Card, CardName, Color, create_deck, shuffle_and_deal, sort_cards, is_no_xiang
from .hand_type import PlayType, PlayStrength, Play
from .hand_detector import evaluate, valid_plays, can_beat, round_winner
from .errors import (
    GameError, InvalidCardCount, InsufficientStrength, IllegalCombination,
    CardsNotInHand, ForcedDiscardRequired, OutOfTurn, PhaseViolation,
)
