"""控制器测试 - 电脑调度、延迟、过期任务、全电脑对局"""

import random

import pytest

from xuantuotuo.ai.rule_ai import RuleAI
from xuantuotuo.config import INITIAL_STAR_COINS, Pacing
from xuantuotuo.engine.card import create_deck, sort_cards
from xuantuotuo.engine.hand_type import PlayType, Play
from xuantuotuo.engine.errors import OutOfTurn
from xuantuotuo.game.controller import GameController
from xuantuotuo.game.game_state import GameState, GamePhase, KouLeResponse
from xuantuotuo.game.player import Participant, PARTICIPANTS
from xuantuotuo.game.scheduler import InlineScheduler, ManualScheduler

LEFT, PLAYER, RIGHT = Participant.AI_LEFT, Participant.PLAYER, Participant.AI_RIGHT

_DECK = {card.id: card for card in create_deck()}


# ============================================================
#  辅助工具
# ============================================================

def _c(*ids: str) -> tuple:
    return tuple(_DECK[i] for i in ids)


def _all_ai(seed: int) -> GameController:
    rng = random.Random(seed)
    strategies = {p: RuleAI(rng=random.Random(seed + i)) for i, p in enumerate(PARTICIPANTS)}
    return GameController(strategies, scheduler=InlineScheduler(), rng=rng)


def _vs_human(scheduler, seed: int = 0, kou_le_rate: float = 0.0) -> GameController:
    strategies = {
        LEFT: RuleAI(rng=random.Random(seed), kou_le_rate=kou_le_rate),
        RIGHT: RuleAI(rng=random.Random(seed + 1), kou_le_rate=kou_le_rate),
    }
    return GameController(strategies, scheduler=scheduler, rng=random.Random(seed))


def _human_move(gc: GameController) -> None:
    """人类座位：能管就出第一个合法组合，否则扣最小的牌"""
    legal = gc.legal_plays(PLAYER)
    if legal:
        gc.submit_play(PLAYER, legal[0])
        return
    need = len(gc.state.target.cards)
    gc.submit_play(PLAYER, sort_cards(gc.state.hands[PLAYER])[:need], is_discard=True)


# ============================================================
#  全电脑对局
# ============================================================

class TestAutomatedHands:

    @pytest.mark.parametrize("seed", range(12))
    def test_hand_reaches_settlement(self, seed):
        gc = _all_ai(seed)
        s = gc.run_hand()
        assert s.phase == GamePhase.SETTLEMENT
        assert s.card_total() == 24
        assert sum(s.star_coins.values()) == 3 * INITIAL_STAR_COINS
        assert any(e.action == "settle" for e in gc.events)

    def test_coins_carry_across_hands(self):
        gc = _all_ai(3)
        for _ in range(5):
            gc.run_hand()
        assert gc.state.hand_number == 5
        assert sum(gc.state.star_coins.values()) == 3 * INITIAL_STAR_COINS

    def test_full_hand_plays_every_card_without_kou_le(self):
        rng = random.Random(5)
        strategies = {p: RuleAI(rng=random.Random(i), kou_le_rate=0.0) for i, p in enumerate(PARTICIPANTS)}
        gc = GameController(strategies, scheduler=InlineScheduler(), rng=rng)
        s = gc.run_hand()
        # 每轮三家出牌张数相同
        assert sum(len(table[0].cards) for table in s.round_history) == 8
        assert all(len(table) == 3 for table in s.round_history)
        assert all(len(h) == 0 for h in s.hands.values())
        assert sum(len(c) for c in s.collected.values()) == 24

    def test_run_hand_requires_all_automated(self):
        gc = _vs_human(InlineScheduler())
        with pytest.raises(ValueError):
            gc.run_hand()


# ============================================================
#  对人类座位的调度
# ============================================================

class TestSchedulingWithHuman:

    def test_human_plays_out_a_hand(self):
        sched = ManualScheduler()
        gc = _vs_human(sched, seed=4)
        gc.new_hand()
        for _ in range(500):
            s = gc.state
            if s.phase == GamePhase.SETTLEMENT:
                break
            if s.phase == GamePhase.PLAYING and s.turn == PLAYER:
                assert sched.pending == 0
                _human_move(gc)
            else:
                assert sched.pending >= 1
                sched.advance(gc.pacing.round_over_delay)
        assert gc.state.phase == GamePhase.SETTLEMENT
        assert gc.state.card_total() == 24

    def test_ai_waits_for_delay(self):
        sched = ManualScheduler()
        gc = _vs_human(sched)
        gc.state = GameState(
            phase=GamePhase.PLAYING,
            hands={LEFT: _c("b_z1"), PLAYER: _c("r_m1"), RIGHT: _c("b_q1")},
            turn=PLAYER, starter=PLAYER,
        )
        gc.submit_play(PLAYER, list(_c("r_m1")))
        assert gc.state.turn == RIGHT
        assert sched.advance(1.0) == 0
        assert gc.state.turn == RIGHT
        assert sched.advance(0.3) == 1
        assert gc.state.turn == LEFT

    def test_human_out_of_turn_rejected(self):
        sched = ManualScheduler()
        gc = _vs_human(sched)
        gc.state = GameState(
            phase=GamePhase.PLAYING,
            hands={LEFT: _c("b_z1"), PLAYER: _c("r_m1"), RIGHT: _c("b_q1")},
            turn=LEFT, starter=LEFT,
        )
        with pytest.raises(OutOfTurn):
            gc.submit_play(PLAYER, list(_c("r_m1")))
        assert gc.state.table == ()

    def test_round_finished_once(self):
        """手动结束一轮后，调度中的结束任务作废"""
        sched = ManualScheduler()
        gc = _vs_human(sched)
        table = (
            Play(RIGHT, _c("b_z1"), PlayType.SINGLE, 17),
            Play(LEFT, _c("b_q1"), PlayType.DISCARD, -1),
        )
        gc.state = GameState(
            phase=GamePhase.PLAYING,
            hands={LEFT: _c("b_m1"), PLAYER: _c("r_e1", "r_m1"), RIGHT: _c("b_x1")},
            table=table, turn=PLAYER, starter=RIGHT,
        )
        gc.submit_play(PLAYER, list(_c("r_e1")))
        assert gc.state.phase == GamePhase.ROUND_OVER
        assert sched.pending == 1

        gc.finish_round()
        assert gc.state.phase == GamePhase.PLAYING
        assert gc.state.turn == PLAYER
        assert sched.advance(5.0) == 1
        assert gc.state.phase == GamePhase.PLAYING
        assert gc.state.table == ()
        assert len(gc.state.round_history) == 1
        assert len(gc.state.collected[PLAYER]) == 3

    def test_round_event_emitted(self):
        sched = ManualScheduler()
        gc = _vs_human(sched)
        gc.state = GameState(
            phase=GamePhase.PLAYING,
            hands={LEFT: _c("b_m1"), PLAYER: _c("r_e1"), RIGHT: _c("b_z1")},
            table=(Play(RIGHT, _c("b_x1"), PlayType.SINGLE, 21),
                   Play(LEFT, _c("b_q1"), PlayType.DISCARD, -1)),
            turn=PLAYER, starter=RIGHT,
        )
        gc.submit_play(PLAYER, list(_c("r_e1")))
        rounds = [e for e in gc.events if e.action == "round"]
        assert len(rounds) == 1
        assert rounds[0].participant == PLAYER


# ============================================================
#  扣了调度
# ============================================================

class TestKouLeScheduling:

    def _declare(self, left, right) -> tuple:
        sched = ManualScheduler()
        gc = _vs_human(sched)
        gc.state = GameState(
            phase=GamePhase.PLAYING,
            hands={LEFT: _c(*left), PLAYER: _c("r_e1", "r_e2"), RIGHT: _c(*right)},
            turn=PLAYER, starter=PLAYER,
        )
        gc.declare_kou_le(PLAYER)
        return gc, sched

    def test_ai_responses_one_at_a_time(self):
        gc, sched = self._declare(["b_z1", "b_m1"], ["b_z2", "b_m2"])
        assert sched.pending == 1
        sched.advance(1.0)
        assert gc.state.kou_le.responses[LEFT] == KouLeResponse.AGREE
        assert gc.state.phase == GamePhase.KOU_LE_DECISION
        sched.advance(1.0)
        assert gc.state.phase == GamePhase.SETTLEMENT
        assert any(e.action == "settle" for e in gc.events)

    def test_ai_challenge_resumes_play(self):
        gc, sched = self._declare(["b_z1", "b_m1"], ["r_x1", "b_e1"])
        sched.run_all()
        assert gc.state.phase == GamePhase.PLAYING
        assert gc.state.challengers == frozenset({RIGHT})
        assert gc.state.turn == PLAYER
        assert sched.pending == 0

    def _ai_declares(self, right_hand) -> tuple:
        """左家首出前发起扣了，右家表态后停在等玩家"""
        sched = ManualScheduler()
        gc = _vs_human(sched, kou_le_rate=1.0)
        gc.state = GameState(
            phase=GamePhase.PLAYING,
            hands={LEFT: _c("b_z1"), PLAYER: _c("r_m1"), RIGHT: _c(*right_hand)},
            turn=LEFT, starter=LEFT,
        )
        gc._drive()
        sched.advance(gc.pacing.ai_play_delay)
        assert gc.state.phase == GamePhase.KOU_LE_DECISION
        assert gc.state.kou_le.initiator == LEFT
        sched.run_all()
        assert gc.state.kou_le.pending == (PLAYER,)
        return gc, sched

    def test_ai_initiated_kou_le_all_agree(self):
        gc, sched = self._ai_declares(["b_q1"])
        assert gc.state.kou_le.responses[RIGHT] == KouLeResponse.AGREE
        gc.respond_kou_le(PLAYER, KouLeResponse.AGREE)
        assert gc.state.phase == GamePhase.SETTLEMENT
        assert gc.state.challengers == frozenset()

    def test_ai_initiated_kou_le_challenged(self):
        gc, sched = self._ai_declares(["r_x1", "b_e1"])
        assert gc.state.kou_le.responses[RIGHT] == KouLeResponse.CHALLENGE
        gc.respond_kou_le(PLAYER, KouLeResponse.AGREE)
        assert gc.state.phase == GamePhase.PLAYING
        assert gc.state.challengers == frozenset({RIGHT})
        assert gc.state.turn == LEFT
        assert any(e.action == "challenged" for e in gc.events)

    def test_instant_pacing(self):
        pacing = Pacing.instant()
        assert pacing.ai_play_delay == pacing.round_over_delay == 0.0
