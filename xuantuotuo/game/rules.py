"""状态转换 - 每个动作都是 (旧状态, 参数) → 新状态 的纯函数

非法动作抛出 GameError，传入的状态保持不变。
"""

import logging
import random
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from xuantuotuo.config import AI_NAME_POOL, MAX_REDEAL_ATTEMPTS
from xuantuotuo.engine.card import Card, XIANG_NAMES, create_deck, shuffle_and_deal, sort_cards, is_no_xiang
from xuantuotuo.engine.hand_type import PlayType, Play
from xuantuotuo.engine.hand_detector import evaluate, valid_plays, round_winner
from xuantuotuo.engine.errors import (
    InvalidCardCount, InsufficientStrength, IllegalCombination, CardsNotInHand,
    ForcedDiscardRequired, OutOfTurn, PhaseViolation,
)
from xuantuotuo.game.player import Participant, TURN_ORDER, PARTICIPANTS
from xuantuotuo.game.game_state import GameState, GamePhase, KouLeState, KouLeResponse
from xuantuotuo.game.scoring import settle

logger = logging.getLogger(__name__)


# ============================================================
#  发牌
# ============================================================

def deal_hands(rng: random.Random) -> Tuple[List[Card], List[Card], List[Card]]:
    """
    发三家手牌，保证没有人"无相"。
    先重洗最多 MAX_REDEAL_ATTEMPTS 次，仍不行就定向换牌。
    """
    deck = create_deck()
    hands = shuffle_and_deal(deck, rng)
    for attempt in range(1, MAX_REDEAL_ATTEMPTS):
        if not any(is_no_xiang(h) for h in hands):
            return hands
        logger.info("有人无相，重新发牌 (第%d次)", attempt)
        hands = shuffle_and_deal(deck, rng)

    if any(is_no_xiang(h) for h in hands):
        logger.warning("重发%d次仍有人无相，改为定向换牌", MAX_REDEAL_ATTEMPTS)
        hands = repair_no_xiang(hands)
    return hands


def repair_no_xiang(hands: Sequence[List[Card]]) -> Tuple[List[Card], ...]:
    """
    给每个无相的手牌换入一张尔/相：
    从尔/相最多的一家拿最弱的一张，还给对方自己最弱的一张。
    """
    hands = [list(h) for h in hands]
    for needy in hands:
        if not is_no_xiang(needy):
            continue
        donor = max(hands, key=lambda h: sum(c.name in XIANG_NAMES for c in h))
        given = min((c for c in donor if c.name in XIANG_NAMES), key=lambda c: c.strength)
        returned = min(needy, key=lambda c: c.strength)
        donor.remove(given)
        donor.append(returned)
        needy.remove(returned)
        needy.append(given)
    return tuple(sort_cards(h) for h in hands)


def new_hand(state: GameState, rng: random.Random) -> GameState:
    """开新一局：发牌、随机首出、随机分配 AI 名字"""
    if state.phase != GamePhase.WAITING:
        raise PhaseViolation(f"只能在等待阶段开局（当前: {state.phase.value}）")

    h1, h2, h3 = deal_hands(rng)
    names = rng.sample(AI_NAME_POOL, 2)
    starter = rng.choice(TURN_ORDER)

    return replace(
        state,
        phase=GamePhase.PLAYING,
        hand_number=state.hand_number + 1,
        hands={
            Participant.PLAYER: tuple(h1),
            Participant.AI_LEFT: tuple(h2),
            Participant.AI_RIGHT: tuple(h3),
        },
        collected={p: () for p in PARTICIPANTS},
        table=(),
        turn=starter,
        starter=starter,
        round_winner=None,
        round_history=(),
        kou_le=None,
        challengers=frozenset(),
        ai_names={Participant.AI_LEFT: names[0], Participant.AI_RIGHT: names[1]},
        settlement=None,
    )


# ============================================================
#  出牌
# ============================================================

def legal_plays(state: GameState, participant: Participant) -> List[List[Card]]:
    """当前局面下该玩家能出的所有管上/首出组合"""
    return valid_plays(state.hands[participant], state.target, state.current_max)


def _take_from_hand(
    hand: Tuple[Card, ...], cards: Sequence[Card]
) -> Tuple[List[Card], Tuple[Card, ...]]:
    """
    按 id 从手牌中取牌，返回 (手牌里的原牌, 剩余手牌)。
    只认 id，牌面和牌力一律以手牌里的为准。
    """
    ids = [c.id for c in cards]
    if len(set(ids)) != len(ids):
        raise CardsNotInHand("不能重复选择同一张牌")
    held = {c.id: c for c in hand}
    missing = [c for c in cards if c.id not in held]
    if missing:
        raise CardsNotInHand(f"手牌中没有: {' '.join(c.display for c in missing)}")
    chosen = set(ids)
    return [held[i] for i in ids], tuple(c for c in hand if c.id not in chosen)


def _check_play(state: GameState, participant: Participant, cards: Sequence[Card], is_discard: bool) -> Play:
    """校验一手牌，返回要摆上桌的 Play"""
    target = state.target
    ps = evaluate(cards)

    if target is None:
        if is_discard:
            raise IllegalCombination("首出不能扣牌")
        if not ps.is_legal:
            raise IllegalCombination("牌型不合法，只能出单张、对子或三曲")
        return Play(participant, tuple(cards), ps.type, ps.strength)

    need = len(target.cards)
    if len(cards) != need:
        raise InvalidCardCount(f"数量不符，需出 {need} 张")

    if is_discard:
        if legal_plays(state, participant):
            raise ForcedDiscardRequired("有管上的大牌，必须出牌")
        return Play(participant, tuple(cards), PlayType.DISCARD, -1)

    if not ps.is_legal:
        raise IllegalCombination("牌型不合法")
    if ps.type != target.type:
        raise IllegalCombination(f"牌型不符，需出{target.type.value}")
    if ps.strength <= state.current_max:
        raise InsufficientStrength("牌力不足")
    return Play(participant, tuple(cards), ps.type, ps.strength)


def submit_play(
    state: GameState,
    participant: Participant,
    cards: Sequence[Card],
    is_discard: bool = False,
) -> GameState:
    """出牌/跟牌/扣牌。第三手落桌后立即结算本轮。"""
    if state.phase != GamePhase.PLAYING:
        raise PhaseViolation(f"当前阶段不能出牌（{state.phase.value}）")
    if participant != state.turn:
        raise OutOfTurn(f"还没轮到 {state.display_name(participant)}")

    taken, remaining = _take_from_hand(state.hands[participant], cards)
    play = _check_play(state, participant, taken, is_discard)

    hands = dict(state.hands)
    hands[participant] = remaining
    new_state = replace(
        state,
        hands=hands,
        table=state.table + (play,),
        turn=participant.next(),
    )
    if len(new_state.table) == len(TURN_ORDER):
        new_state = resolve_round(new_state)
    return new_state


def resolve_round(state: GameState) -> GameState:
    """桌面满三手：牌力最大者收走桌上所有的牌（包括扣牌）"""
    winner = round_winner(state.table).participant
    on_table = tuple(c for p in state.table for c in p.cards)

    collected = dict(state.collected)
    collected[winner] = collected[winner] + on_table
    logger.info("%s 赢得本轮，收 %d 张", state.display_name(winner), len(on_table))
    return replace(
        state,
        phase=GamePhase.ROUND_OVER,
        collected=collected,
        round_winner=winner,
        round_history=state.round_history + (state.table,),
    )


def finish_round(state: GameState) -> GameState:
    """本轮展示结束：手牌打完则结算，否则赢家开始下一轮"""
    if state.phase != GamePhase.ROUND_OVER:
        raise PhaseViolation(f"没有待结束的一轮（{state.phase.value}）")

    if all(len(h) == 0 for h in state.hands.values()):
        return enter_settlement(replace(state, table=()))

    winner = state.round_winner
    return replace(
        state,
        phase=GamePhase.PLAYING,
        table=(),
        turn=winner,
        starter=winner,
        round_winner=None,
    )


# ============================================================
#  扣了
# ============================================================

def declare_kou_le(state: GameState, participant: Participant) -> GameState:
    """首出前发起"扣了"，发起者视为同意"""
    if state.phase != GamePhase.PLAYING:
        raise PhaseViolation("只有出牌阶段才能发起扣了")
    if participant != state.turn:
        raise OutOfTurn(f"还没轮到 {state.display_name(participant)}")
    if state.table:
        raise PhaseViolation("只有首出时才能发起扣了")

    responses: Dict[Participant, Optional[KouLeResponse]] = {p: None for p in PARTICIPANTS}
    responses[participant] = KouLeResponse.AGREE
    logger.info("%s 发起了扣了", state.display_name(participant))
    return replace(
        state,
        phase=GamePhase.KOU_LE_DECISION,
        kou_le=KouLeState(initiator=participant, responses=responses),
    )


def respond_kou_le(state: GameState, participant: Participant, response: KouLeResponse) -> GameState:
    """
    对扣了表态。
    全部表态后：无人挑战 → 直接结算；有人挑战 → 继续出牌，记录挑战者。
    """
    if state.phase != GamePhase.KOU_LE_DECISION or state.kou_le is None:
        raise PhaseViolation("当前没有进行中的扣了")
    kou_le = state.kou_le
    if participant == kou_le.initiator:
        raise PhaseViolation("发起者不需要表态")
    if kou_le.responses.get(participant) is not None:
        raise PhaseViolation(f"{state.display_name(participant)} 已经表过态")

    responses = dict(kou_le.responses)
    responses[participant] = KouLeResponse(response)
    kou_le = replace(kou_le, responses=responses)
    if kou_le.pending:
        return replace(state, kou_le=kou_le)

    challengers = kou_le.challengers
    if not challengers:
        logger.info("大家都同意扣了，本局提前结束")
        return enter_settlement(replace(state, kou_le=None))

    logger.info("%s 选择了挑战，游戏继续", ", ".join(state.display_name(p) for p in challengers))
    return replace(
        state,
        phase=GamePhase.PLAYING,
        kou_le=None,
        challengers=state.challengers | frozenset(challengers),
    )


# ============================================================
#  结算
# ============================================================

def enter_settlement(state: GameState) -> GameState:
    """计算本局结算，并计入星光币"""
    counts = {p: state.collected_count(p) for p in PARTICIPANTS}
    results = settle(counts, state.challengers)
    coins = {p: state.star_coins[p] + results[p].net_gain for p in PARTICIPANTS}
    logger.info(
        "本局结算: %s",
        ", ".join(f"{state.display_name(p)} {r.net_gain:+d}" for p, r in results.items()),
    )
    return replace(state, phase=GamePhase.SETTLEMENT, settlement=results, star_coins=coins)


def settle_and_restart(state: GameState) -> GameState:
    """回到等待阶段，只保留星光币"""
    if state.phase != GamePhase.SETTLEMENT:
        raise PhaseViolation("还没有到结算阶段")
    return GameState(
        hand_number=state.hand_number,
        star_coins=dict(state.star_coins),
        ai_names=dict(state.ai_names),
    )
