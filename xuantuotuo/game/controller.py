"""游戏控制器 - 持有唯一的游戏状态，驱动电脑玩家和一轮结束的节奏"""

import logging
import random
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from xuantuotuo.config import Pacing
from xuantuotuo.engine.card import Card
from xuantuotuo.engine.hand_type import Play
from xuantuotuo.engine.hand_detector import evaluate
from xuantuotuo.game import rules
from xuantuotuo.game.player import Participant, PARTICIPANTS
from xuantuotuo.game.game_state import GameState, GamePhase, GameEvent, KouLeResponse
from xuantuotuo.game.scheduler import Scheduler, InlineScheduler

logger = logging.getLogger(__name__)


class AIStrategy(Protocol):
    """AI 决策接口（策略模式）"""

    def decide_play(
        self, hand: Sequence[Card], target: Optional[Play], current_max: int, collected_count: int
    ) -> List[Card]:
        """决定出哪几张牌"""
        ...

    def evaluate_kou_le(self, hand: Sequence[Card], collected_count: int) -> KouLeResponse:
        """对别人发起的扣了表态"""
        ...

    def wants_kou_le(self, hand: Sequence[Card], collected_count: int) -> bool:
        """首出前是否发起扣了"""
        ...


class GameController:
    """
    游戏控制器。
    strategies 中没有的座位由人操作（通过 submit_play 等接口）。
    每次状态变化后最多调度一个后续动作（AI 出牌/表态，或结束本轮）。
    """

    def __init__(
        self,
        strategies: Dict[Participant, AIStrategy],
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        pacing: Optional[Pacing] = None,
    ):
        self.strategies = dict(strategies)
        self.scheduler = scheduler or InlineScheduler()
        self.rng = rng or random.Random()
        self.pacing = pacing or Pacing()
        self.state = GameState()
        self.events: List[GameEvent] = []
        self._callbacks: List[Callable[[GameEvent], None]] = []
        self._version = 0

    def on_event(self, callback: Callable[[GameEvent], None]) -> None:
        """注册事件回调"""
        self._callbacks.append(callback)

    def _emit(self, participant: Optional[Participant], action: str, data=None) -> None:
        """触发事件通知"""
        event = GameEvent(self.state.phase, participant, action, data)
        self.events.append(event)
        for cb in self._callbacks:
            cb(event)

    def is_automated(self, participant: Participant) -> bool:
        return participant in self.strategies

    # ============================================================
    #  对外接口
    # ============================================================

    def new_hand(self) -> GameState:
        """发牌开局"""
        self._commit(rules.new_hand(self.state, self.rng))
        logger.info(
            "第%d局开始，%s 首先出牌", self.state.hand_number, self.state.display_name(self.state.turn)
        )
        self._emit(self.state.turn, "deal", dict(self.state.hands))
        self._drive()
        return self.state

    def legal_plays(self, participant: Participant) -> List[List[Card]]:
        """该玩家当前能出（管上）的所有组合；跟牌时为空表示只能扣牌"""
        if self.state.phase != GamePhase.PLAYING or participant != self.state.turn:
            return []
        return rules.legal_plays(self.state, participant)

    def submit_play(self, participant: Participant, cards: Sequence[Card], is_discard: bool = False) -> GameState:
        """出牌；非法时抛出 GameError，状态不变"""
        self._commit(rules.submit_play(self.state, participant, cards, is_discard))
        play = self._last_play()
        self._emit(participant, "play", play)
        if self.state.phase == GamePhase.ROUND_OVER:
            self._emit(self.state.round_winner, "round", self.state.round_history[-1])
        self._drive()
        return self.state

    def declare_kou_le(self, participant: Participant) -> GameState:
        """发起扣了"""
        self._commit(rules.declare_kou_le(self.state, participant))
        self._emit(participant, "kou_le")
        self._drive()
        return self.state

    def respond_kou_le(self, participant: Participant, response: KouLeResponse) -> GameState:
        """对扣了表态"""
        self._commit(rules.respond_kou_le(self.state, participant, response))
        self._emit(participant, "respond", KouLeResponse(response))
        if self.state.phase == GamePhase.SETTLEMENT:
            self._emit(None, "settle", self.state.settlement)
        elif self.state.phase == GamePhase.PLAYING:
            self._emit(None, "challenged", sorted(self.state.challengers))
        self._drive()
        return self.state

    def settle_and_restart(self) -> GameState:
        """结算完毕，回到等待阶段（星光币保留）"""
        self._commit(rules.settle_and_restart(self.state))
        self._emit(None, "restart")
        return self.state

    def finish_round(self) -> GameState:
        """结束展示中的一轮"""
        self._commit(rules.finish_round(self.state))
        if self.state.phase == GamePhase.SETTLEMENT:
            self._emit(None, "settle", self.state.settlement)
        self._drive()
        return self.state

    # ============================================================
    #  内部调度
    # ============================================================

    def _commit(self, new_state: GameState) -> None:
        self.state = new_state
        self._version += 1

    def _last_play(self) -> Play:
        if self.state.phase == GamePhase.ROUND_OVER:
            return self.state.round_history[-1][-1]
        return self.state.table[-1]

    def _drive(self) -> None:
        """状态变化后：若轮到电脑或一轮刚结束，调度下一步"""
        s = self.state
        version = self._version

        if s.phase == GamePhase.ROUND_OVER:
            self._schedule(self.pacing.round_over_delay, version, self.finish_round)
        elif s.phase == GamePhase.PLAYING and self.is_automated(s.turn):
            self._schedule(self.pacing.ai_play_delay, version, self._ai_turn)
        elif s.phase == GamePhase.KOU_LE_DECISION and s.kou_le is not None:
            ai_pending = [p for p in s.kou_le.pending if self.is_automated(p)]
            if ai_pending:
                self._schedule(
                    self.pacing.kou_le_response_delay, version,
                    lambda: self._ai_respond(ai_pending[0]),
                )

    def _schedule(self, delay: float, version: int, action: Callable[[], object]) -> None:
        def task() -> None:
            # 状态已被其他动作推进，作废
            if version != self._version:
                return
            action()
        self.scheduler.call_later(delay, task)

    def _ai_turn(self) -> None:
        """电脑出牌（或首出前发起扣了）"""
        s = self.state
        pid = s.turn
        strategy = self.strategies[pid]
        hand = s.hands[pid]
        collected = s.collected_count(pid)

        if s.target is None and strategy.wants_kou_le(hand, collected):
            self.declare_kou_le(pid)
            return

        cards = strategy.decide_play(hand, s.target, s.current_max, collected)
        is_discard = s.target is not None and evaluate(cards).strength <= s.current_max
        logger.debug("%s 出牌 %s (扣牌=%s)", s.display_name(pid), cards, is_discard)
        self.submit_play(pid, cards, is_discard)

    def _ai_respond(self, participant: Participant) -> None:
        s = self.state
        decision = self.strategies[participant].evaluate_kou_le(
            s.hands[participant], s.collected_count(participant)
        )
        self.respond_kou_le(participant, decision)

    # ============================================================
    #  完整游戏入口（全电脑对局）
    # ============================================================

    def run_hand(self) -> GameState:
        """
        跑完一整局，直到结算。
        要求三家都是电脑，且调度器是同步的 InlineScheduler。
        """
        if any(p not in self.strategies for p in PARTICIPANTS):
            raise ValueError("run_hand 需要三家都由电脑控制")
        if self.state.phase == GamePhase.SETTLEMENT:
            self.settle_and_restart()
        self.new_hand()
        return self.state
