"""游戏状态 - 一局宣坨坨的完整状态记录（不可变，每次转换产生新状态）"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional, Tuple

from xuantuotuo.config import INITIAL_STAR_COINS
from xuantuotuo.engine.card import Card
from xuantuotuo.engine.hand_type import Play
from xuantuotuo.game.player import Participant, PARTICIPANTS
from xuantuotuo.game.scoring import SettlementResult


class GamePhase(str, Enum):
    """游戏阶段"""
    WAITING = "WAITING"                   # 等待开局
    PLAYING = "PLAYING"                   # 出牌中
    ROUND_OVER = "ROUND_OVER"             # 一轮结束，桌面待收
    KOU_LE_DECISION = "KOU_LE_DECISION"   # "扣了"表态中
    SETTLEMENT = "SETTLEMENT"             # 本局结算


class KouLeResponse(str, Enum):
    """对"扣了"的表态"""
    AGREE = "agree"           # 扣了（同意提前结束）
    CHALLENGE = "challenge"   # 宣（挑战，继续打）


@dataclass(frozen=True)
class KouLeState:
    """一次"扣了"博弈"""
    initiator: Participant
    responses: Dict[Participant, Optional[KouLeResponse]]

    @property
    def pending(self) -> Tuple[Participant, ...]:
        """还没表态的人"""
        return tuple(p for p in PARTICIPANTS if self.responses.get(p) is None)

    @property
    def challengers(self) -> Tuple[Participant, ...]:
        return tuple(
            p for p in PARTICIPANTS if self.responses.get(p) == KouLeResponse.CHALLENGE
        )


def _per_participant(value) -> Dict[Participant, Any]:
    return {p: value for p in PARTICIPANTS}


@dataclass(frozen=True)
class GameEvent:
    """游戏事件记录"""
    phase: GamePhase
    participant: Optional[Participant]
    action: str                  # "deal", "play", "round", "kou_le", "respond", "settle"...
    data: Any = None


@dataclass(frozen=True)
class GameState:
    """一局游戏的完整状态"""
    phase: GamePhase = GamePhase.WAITING
    hand_number: int = 0

    hands: Dict[Participant, Tuple[Card, ...]] = field(default_factory=lambda: _per_participant(()))
    collected: Dict[Participant, Tuple[Card, ...]] = field(default_factory=lambda: _per_participant(()))

    # 出牌相关
    table: Tuple[Play, ...] = ()
    turn: Participant = Participant.PLAYER
    starter: Participant = Participant.PLAYER
    round_winner: Optional[Participant] = None     # 下一轮首出
    round_history: Tuple[Tuple[Play, ...], ...] = ()

    # "扣了"相关
    kou_le: Optional[KouLeState] = None
    challengers: FrozenSet[Participant] = frozenset()

    # 跨局保留
    star_coins: Dict[Participant, int] = field(
        default_factory=lambda: _per_participant(INITIAL_STAR_COINS)
    )
    ai_names: Dict[Participant, str] = field(default_factory=lambda: {
        Participant.AI_LEFT: "AI 左", Participant.AI_RIGHT: "AI 右",
    })

    # 结算相关
    settlement: Optional[Dict[Participant, SettlementResult]] = None

    @property
    def target(self) -> Optional[Play]:
        """本轮首出的一手（跟牌要对齐的目标）"""
        return self.table[0] if self.table else None

    @property
    def current_max(self) -> int:
        """桌面上的最大牌力"""
        return max((p.strength for p in self.table), default=-1)

    def collected_count(self, participant: Participant) -> int:
        return len(self.collected[participant])

    def display_name(self, participant: Participant) -> str:
        if participant == Participant.PLAYER:
            return "您"
        return self.ai_names.get(participant, participant.value)

    def card_total(self) -> int:
        """手牌 + 收牌 + 桌面（ROUND_OVER 时桌面已计入收牌）"""
        total = sum(len(h) for h in self.hands.values())
        total += sum(len(c) for c in self.collected.values())
        if self.phase != GamePhase.ROUND_OVER:
            total += sum(len(p.cards) for p in self.table)
        return total
