"""玩家座位 - 三家固定的出牌轮转"""

from enum import Enum


class Participant(str, Enum):
    """三个座位"""
    AI_LEFT = "AI_LEFT"     # 左家
    PLAYER = "PLAYER"       # 玩家本人
    AI_RIGHT = "AI_RIGHT"   # 右家

    @property
    def is_human_seat(self) -> bool:
        return self == Participant.PLAYER

    def next(self) -> "Participant":
        """下一个出牌的人：左家 → 玩家 → 右家 → 左家"""
        return _NEXT_TURN[self]


# 固定轮转，与谁先出无关
TURN_ORDER = (Participant.AI_LEFT, Participant.PLAYER, Participant.AI_RIGHT)

_NEXT_TURN = {
    Participant.AI_LEFT: Participant.PLAYER,
    Participant.PLAYER: Participant.AI_RIGHT,
    Participant.AI_RIGHT: Participant.AI_LEFT,
}

# 展示顺序（玩家本人 + 两个 AI）
PARTICIPANTS = (Participant.PLAYER, Participant.AI_LEFT, Participant.AI_RIGHT)
