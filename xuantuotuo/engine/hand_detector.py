"""牌力计算与合法出牌枚举"""

from itertools import combinations
from typing import List, Optional, Sequence

from .card import Card, CardName, Color
from .hand_type import PlayType, PlayStrength, Play


# 大小王对 / 双红尔 为最大的对子
TOP_PAIR_STRENGTH = 125

# 对子、三曲的牌力偏移，保证 扣牌 < 单张 < 对子 < 三曲
PAIR_OFFSET = 100
TRIPLE_OFFSET = 200

_DISCARD = PlayStrength(PlayType.DISCARD, -1)


def evaluate(cards: Sequence[Card]) -> PlayStrength:
    """
    计算一组牌（0~3张）的类型和牌力。
    不成型的组合一律视为扣牌（牌力 -1）。
    """
    n = len(cards)
    if n == 0:
        return _DISCARD
    if n == 1:
        return PlayStrength(PlayType.SINGLE, cards[0].strength)
    if n == 2:
        return _evaluate_pair(cards[0], cards[1])
    if n == 3:
        return _evaluate_triple(cards)
    return _DISCARD


def _evaluate_pair(c1: Card, c2: Card) -> PlayStrength:
    """对子判定"""
    names = {c1.name, c2.name}
    if names == {CardName.BIG_JOKER, CardName.SMALL_JOKER}:
        return PlayStrength(PlayType.PAIR, TOP_PAIR_STRENGTH)
    if c1.name == c2.name == CardName.ER and c1.is_red and c2.is_red:
        return PlayStrength(PlayType.PAIR, TOP_PAIR_STRENGTH)
    # 曲曲只看颜色；其余同名同色
    if c1.name == c2.name and c1.color == c2.color and c1.color != Color.NONE:
        return PlayStrength(PlayType.PAIR, max(c1.strength, c2.strength) + PAIR_OFFSET)
    return _DISCARD


def _evaluate_triple(cards: Sequence[Card]) -> PlayStrength:
    """三曲：三张同色曲"""
    if all(c.name == CardName.QU for c in cards) and len({c.color for c in cards}) == 1:
        return PlayStrength(PlayType.TRIPLE, max(c.strength for c in cards) + TRIPLE_OFFSET)
    return _DISCARD


# ============================================================
#  合法出牌枚举
# ============================================================

_SIZE_OF_TYPE = {PlayType.SINGLE: 1, PlayType.PAIR: 2, PlayType.TRIPLE: 3}


def valid_plays(
    hand: Sequence[Card],
    target: Optional[Play] = None,
    current_max: int = -1,
) -> List[List[Card]]:
    """
    枚举手牌中所有合法出法。
    target 为空时是首出：所有单张、对子、三曲都可以出。
    否则只返回与 target 同类型、且牌力严格大于 current_max 的组合；
    返回空列表表示管不上，只能扣牌。
    """
    if target is None:
        results: List[List[Card]] = [[c] for c in hand]
        results += _combos_of_type(hand, 2, PlayType.PAIR)
        if len(hand) >= 3:
            results += _combos_of_type(hand, 3, PlayType.TRIPLE)
        return results

    size = _SIZE_OF_TYPE.get(target.type)
    if size is None:
        return []
    return [
        combo for combo in _combos_of_type(hand, size, target.type)
        if evaluate(combo).strength > current_max
    ]


def _combos_of_type(hand: Sequence[Card], size: int, play_type: PlayType) -> List[List[Card]]:
    return [
        list(combo) for combo in combinations(hand, size)
        if evaluate(combo).type == play_type
    ]


def can_beat(cards: Sequence[Card], target: Play, current_max: int) -> bool:
    """判断 cards 能否管上本轮（同类型且严格大于当前最大牌力）"""
    ps = evaluate(cards)
    if len(cards) != len(target.cards) or ps.type != target.type:
        return False
    return ps.strength > current_max


def round_winner(table: Sequence[Play]) -> Play:
    """
    一轮的赢家：牌力最大的一手。
    同牌力时先出者胜。
    """
    if not table:
        raise ValueError("empty table has no winner")
    best = table[0]
    for play in table[1:]:
        if play.strength > best.strength:
            best = play
    return best
