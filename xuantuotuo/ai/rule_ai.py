"""规则引擎 AI - 宣坨坨电脑玩家的出牌与"扣了"表态策略"""

import logging
import random
from typing import List, Optional, Sequence

from xuantuotuo.config import KOU_LE_DECLARE_RATE
from xuantuotuo.engine.card import Card, sort_cards
from xuantuotuo.engine.hand_type import Play
from xuantuotuo.engine.hand_detector import evaluate, valid_plays
from xuantuotuo.game.game_state import KouLeResponse

logger = logging.getLogger(__name__)

# 档位门槛（收牌张数）
GANG_GOU_THRESHOLD = 9
WU_LE_THRESHOLD = 15

# 对子牌力 ≥120 视为大对子（红马对及以上）
STRONG_PAIR_STRENGTH = 120

# 牌力 ≥22 视为顶级大牌（红相、黑尔、红尔）
TOP_CARD_STRENGTH = 22


def _strength(cards: Sequence[Card]) -> int:
    return evaluate(cards).strength


class RuleAI:
    """基于简单规则的 AI 策略"""

    def __init__(self, rng: Optional[random.Random] = None, kou_le_rate: float = KOU_LE_DECLARE_RATE):
        self.rng = rng or random.Random()
        self.kou_le_rate = kou_le_rate

    def decide_play(
        self,
        hand: Sequence[Card],
        target: Optional[Play],
        current_max: int,
        collected_count: int,
    ) -> List[Card]:
        """
        出牌决策。
        管不上：扣最小的同样张数。
        首出：按收牌目标挑牌型。
        跟牌：出能管上的最小组合。
        """
        options = valid_plays(hand, target, current_max)
        if target is not None and not options:
            count = len(target.cards)
            return sort_cards(hand)[:count]

        if target is None:
            return self._open(options, collected_count)
        return self._follow(options, target, collected_count)

    def _open(self, options: List[List[Card]], collected_count: int) -> List[Card]:
        """首出"""
        need_to_9 = max(0, GANG_GOU_THRESHOLD - collected_count)
        triples = [o for o in options if len(o) == 3]
        pairs = [o for o in options if len(o) == 2]
        strong_pairs = [p for p in pairs if _strength(p) >= STRONG_PAIR_STRENGTH]

        # 离刚够还差很多，三曲一次收 9 张
        if need_to_9 > 3 and triples:
            return triples[0]
        if strong_pairs:
            return max(strong_pairs, key=_strength)
        # 已经五了，留着大牌，出最小单张
        if collected_count >= WU_LE_THRESHOLD:
            singles = [o for o in options if len(o) == 1]
            return min(singles, key=_strength)
        if pairs:
            return pairs[0]
        return min(options, key=_strength)

    def _follow(self, options: List[List[Card]], target: Play, collected_count: int) -> List[Card]:
        """跟牌：总是出能管上的最小组合"""
        round_value = len(target.cards) * 3
        potential = collected_count + round_value
        crucial = (
            (collected_count < GANG_GOU_THRESHOLD <= potential)
            or (collected_count < WU_LE_THRESHOLD <= potential)
        )
        choice = min(options, key=_strength)
        logger.debug("跟牌 %s (关键轮=%s, 可收%d张)", choice, crucial, round_value)
        return choice

    def evaluate_kou_le(self, hand: Sequence[Card], collected_count: int) -> KouLeResponse:
        """有顶级大牌或者已收牌不少，就挑战"""
        top_cards = sum(1 for c in hand if c.strength >= TOP_CARD_STRENGTH)
        pair_count = sum(1 for o in valid_plays(hand) if len(o) == 2)

        if top_cards >= 2 or (collected_count >= 6 and pair_count >= 2) or collected_count >= GANG_GOU_THRESHOLD:
            return KouLeResponse.CHALLENGE
        return KouLeResponse.AGREE

    def wants_kou_le(self, hand: Sequence[Card], collected_count: int) -> bool:
        """首出前是否发起扣了（随机）"""
        return self.rng.random() < self.kou_le_rate
