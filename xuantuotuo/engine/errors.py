"""出牌/流程校验异常 - 被拒绝的动作不会改动任何状态"""


class GameError(Exception):
    """Base exception for rejected game actions."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class InvalidCardCount(GameError):
    """出牌张数与本轮要求不符"""


class InsufficientStrength(GameError):
    """牌力不足，管不上当前最大的一手"""


class IllegalCombination(GameError):
    """所选的牌不构成单张/对子/三曲"""


class CardsNotInHand(IllegalCombination):
    """所选的牌不在手牌中（或重复选择）"""


class ForcedDiscardRequired(GameError):
    """手里有管得上的牌却选择扣牌"""


class OutOfTurn(GameError):
    """还没轮到该玩家"""


class PhaseViolation(GameError):
    """当前阶段不允许该动作"""
