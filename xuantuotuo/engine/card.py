"""牌的定义 - 宣坨坨24张牌的数据模型"""

from enum import Enum
from dataclasses import dataclass
from typing import List, Optional, Tuple
import random


class CardName(str, Enum):
    """牌名枚举"""
    ZU = "卒"
    MA = "马"
    XIANG = "相"
    ER = "尔"
    QU = "曲"
    BIG_JOKER = "大王"
    SMALL_JOKER = "小王"


class Color(str, Enum):
    """颜色枚举"""
    RED = "red"
    BLACK = "black"
    NONE = "none"


# 每人手牌张数
HAND_SIZE = 8

# 缺少这两种牌即为"无相"，必须重新发牌
XIANG_NAMES = (CardName.ER, CardName.XIANG)


@dataclass(frozen=True)
class Card:
    """一张牌（发牌后不再变化）"""
    id: str
    name: CardName
    color: Color
    value: str       # 牌面点数 7/8/9/10/J/Q/K/RJ/SJ
    suit: str
    strength: int    # 比较大小的唯一依据

    @property
    def display(self) -> str:
        if self.name in (CardName.BIG_JOKER, CardName.SMALL_JOKER):
            return self.name.value
        return f"{self.suit}{self.name.value}"

    @property
    def is_red(self) -> bool:
        return self.color == Color.RED

    def __repr__(self) -> str:
        return self.display

    def __lt__(self, other: "Card") -> bool:
        return self.strength < other.strength


def _pair_of(name: CardName, value: str, red: int, black: int, tag: str) -> List[Card]:
    """同名牌：红♥♦两张 + 黑♠♣两张"""
    return [
        Card(f"r_{tag}1", name, Color.RED, value, "♥", red),
        Card(f"r_{tag}2", name, Color.RED, value, "♦", red),
        Card(f"b_{tag}1", name, Color.BLACK, value, "♠", black),
        Card(f"b_{tag}2", name, Color.BLACK, value, "♣", black),
    ]


def create_deck() -> List[Card]:
    """创建一副24张宣坨坨牌"""
    deck: List[Card] = []
    deck += _pair_of(CardName.ZU, "7", 18, 17, "z")
    deck += _pair_of(CardName.MA, "8", 20, 19, "m")
    deck += _pair_of(CardName.XIANG, "9", 22, 21, "x")
    deck += _pair_of(CardName.ER, "10", 24, 23, "e")

    # 大王与红曲曲同大，小王与黑曲曲同大
    deck.append(Card("bj", CardName.BIG_JOKER, Color.NONE, "RJ", "★", 16))
    for i, v in enumerate(("J", "Q", "K"), start=1):
        deck.append(Card(f"r_q{i}", CardName.QU, Color.RED, v, "♥", 16))
    deck.append(Card("sj", CardName.SMALL_JOKER, Color.NONE, "SJ", "☆", 14))
    for i, v in enumerate(("J", "Q", "K"), start=1):
        deck.append(Card(f"b_q{i}", CardName.QU, Color.BLACK, v, "♠", 14))

    assert len(deck) == 3 * HAND_SIZE, f"牌数错误: {len(deck)}"
    return deck


def shuffle_and_deal(
    deck: List[Card], rng: Optional[random.Random] = None
) -> Tuple[List[Card], List[Card], List[Card]]:
    """洗牌并发牌: 返回三家手牌，每家8张"""
    rng = rng or random.Random()
    shuffled = deck.copy()
    rng.shuffle(shuffled)

    hand1 = sort_cards(shuffled[0:HAND_SIZE])
    hand2 = sort_cards(shuffled[HAND_SIZE:2 * HAND_SIZE])
    hand3 = sort_cards(shuffled[2 * HAND_SIZE:3 * HAND_SIZE])
    return hand1, hand2, hand3


def sort_cards(cards) -> List[Card]:
    """按牌力排序（从小到大）"""
    return sorted(cards, key=lambda c: (c.strength, c.id))


def is_no_xiang(hand) -> bool:
    """手里既没有尔也没有相"""
    return not any(c.name in XIANG_NAMES for c in hand)
