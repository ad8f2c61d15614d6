"""RuleAI 单元测试"""

import random

import pytest

from xuantuotuo.engine.card import Card, create_deck
from xuantuotuo.engine.hand_type import Play
from xuantuotuo.engine.hand_detector import evaluate
from xuantuotuo.game.game_state import KouLeResponse
from xuantuotuo.game.player import Participant
from xuantuotuo.ai.rule_ai import RuleAI


# ============================================================
#  辅助工具
# ============================================================

_DECK = {card.id: card for card in create_deck()}


def _hand(*ids: str) -> list[Card]:
    """按 id 构造手牌"""
    return [_DECK[i] for i in ids]


def _target(*ids: str) -> Play:
    """构造一手首出"""
    cards = _hand(*ids)
    ps = evaluate(cards)
    return Play(Participant.AI_LEFT, tuple(cards), ps.type, ps.strength)


# ============================================================
#  首出测试
# ============================================================

class TestOpening:
    """测试首出策略"""

    def setup_method(self):
        self.ai = RuleAI(rng=random.Random(0))

    def test_triple_when_far_from_gang_gou(self):
        """离刚够还差很多时出三曲"""
        hand = _hand("r_q1", "r_q2", "r_q3", "b_z1")
        result = self.ai.decide_play(hand, None, -1, collected_count=0)
        assert len(result) == 3

    def test_no_triple_when_close_to_gang_gou(self):
        """只差3张时不急着出三曲，出对子"""
        hand = _hand("r_q1", "r_q2", "r_q3", "b_z1")
        result = self.ai.decide_play(hand, None, -1, collected_count=6)
        assert len(result) == 2
        assert all(c.name.value == "曲" for c in result)

    def test_strongest_strong_pair(self):
        """有大对子时出最大的"""
        hand = _hand("r_m1", "r_m2", "r_e1", "r_e2", "b_z1")
        result = self.ai.decide_play(hand, None, -1, collected_count=0)
        assert evaluate(result).strength == 125

    def test_weakest_single_when_wu_le(self):
        """已收15张且没有大对子：出最小单张"""
        hand = _hand("r_z1", "r_z2", "b_m1", "sj")
        result = self.ai.decide_play(hand, None, -1, collected_count=15)
        assert result == [_DECK["sj"]]

    def test_any_pair_before_singles(self):
        hand = _hand("r_z1", "r_z2", "b_m1", "sj")
        result = self.ai.decide_play(hand, None, -1, collected_count=0)
        assert result == _hand("r_z1", "r_z2")

    def test_weakest_option_without_pairs(self):
        hand = _hand("r_z1", "b_m1", "r_x1")
        result = self.ai.decide_play(hand, None, -1, collected_count=0)
        assert result == [_DECK["r_z1"]]


# ============================================================
#  跟牌测试
# ============================================================

class TestFollowPlay:
    """测试跟牌策略"""

    def setup_method(self):
        self.ai = RuleAI(rng=random.Random(0))

    def test_weakest_winner(self):
        """能管上时出最小的"""
        hand = _hand("b_z1", "r_m1", "r_e1")
        result = self.ai.decide_play(hand, _target("r_z1"), 18, collected_count=0)
        assert result == [_DECK["r_m1"]]

    def test_beats_current_max_not_target(self):
        """要管的是桌上最大的，不是首出"""
        hand = _hand("b_z1", "r_m1", "r_e1")
        result = self.ai.decide_play(hand, _target("r_z1"), 22, collected_count=0)
        assert result == [_DECK["r_e1"]]

    def test_weakest_winner_even_on_crucial_round(self):
        """差一轮就到刚够，仍然出最小的管牌"""
        hand = _hand("b_x1", "b_x2", "r_e1", "r_e2")
        result = self.ai.decide_play(hand, _target("b_m1", "b_m2"), 119, collected_count=6)
        assert evaluate(result).strength == 121

    def test_forced_discard_lowest_cards(self):
        """管不上时扣最小的同样张数"""
        hand = _hand("r_z1", "b_z1", "b_q1", "r_m1")
        result = self.ai.decide_play(hand, _target("r_e1", "r_e2"), 125, collected_count=0)
        assert len(result) == 2
        assert {c.id for c in result} == {"b_q1", "b_z1"}
        assert evaluate(result).strength <= 125

    def test_forced_discard_single(self):
        hand = _hand("b_z1", "sj")
        result = self.ai.decide_play(hand, _target("r_e1"), 24, collected_count=0)
        assert result == [_DECK["sj"]]


# ============================================================
#  扣了表态测试
# ============================================================

class TestKouLe:

    def setup_method(self):
        self.ai = RuleAI(rng=random.Random(0))

    def test_two_top_cards_challenge(self):
        hand = _hand("r_x1", "b_e1", "b_z1")
        assert self.ai.evaluate_kou_le(hand, 0) == KouLeResponse.CHALLENGE

    def test_collected_and_pairs_challenge(self):
        hand = _hand("r_z1", "r_z2", "b_m1", "b_m2")
        assert self.ai.evaluate_kou_le(hand, 6) == KouLeResponse.CHALLENGE

    def test_already_gang_gou_challenge(self):
        hand = _hand("b_z1")
        assert self.ai.evaluate_kou_le(hand, 9) == KouLeResponse.CHALLENGE

    def test_weak_hand_agree(self):
        hand = _hand("r_z1", "r_z2", "b_m1", "b_m2")
        assert self.ai.evaluate_kou_le(hand, 5) == KouLeResponse.AGREE

    @pytest.mark.parametrize("rate, expected", [(1.0, True), (0.0, False)])
    def test_wants_kou_le_rate(self, rate, expected):
        ai = RuleAI(rng=random.Random(1), kou_le_rate=rate)
        assert ai.wants_kou_le(_hand("b_z1"), 0) is expected
