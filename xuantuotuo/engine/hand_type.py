"""出牌类型定义 - 单张/对子/三曲/扣牌"""

from enum import Enum
from dataclasses import dataclass
from typing import Tuple, TYPE_CHECKING

from .card import Card

if TYPE_CHECKING:
    from xuantuotuo.game.player import Participant


class PlayType(str, Enum):
    """出牌类型枚举"""
    SINGLE = "single"     # 单张
    PAIR = "pair"         # 对子
    TRIPLE = "triple"     # 三曲（同色三张曲）
    DISCARD = "discard"   # 扣牌（管不上，本轮认输）


@dataclass(frozen=True)
class PlayStrength:
    """一组牌的类型与牌力"""
    type: PlayType
    strength: int

    @property
    def is_legal(self) -> bool:
        return self.type != PlayType.DISCARD


@dataclass(frozen=True)
class Play:
    """摆上桌的一手牌"""
    participant: "Participant"
    cards: Tuple[Card, ...]
    type: PlayType
    strength: int       # 扣牌为 -1

    @property
    def is_discard(self) -> bool:
        return self.type == PlayType.DISCARD

    def __repr__(self) -> str:
        cards_str = " ".join(c.display for c in self.cards)
        return f"[{self.type.value}] {cards_str}"
