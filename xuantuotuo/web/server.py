"""WebSocket 后端服务 - 玩家本人对两个电脑，实时推送局面

每个连接一局，互不共享。
"""

import asyncio
import json
import logging
import random
from typing import Dict, List, Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from xuantuotuo.ai.rule_ai import RuleAI
from xuantuotuo.config import Pacing
from xuantuotuo.engine.card import Card
from xuantuotuo.engine.hand_type import Play
from xuantuotuo.engine.errors import GameError, CardsNotInHand
from xuantuotuo.game.controller import GameController
from xuantuotuo.game.game_state import GameState, GameEvent, KouLeResponse
from xuantuotuo.game.player import Participant, PARTICIPANTS
from xuantuotuo.game.scheduler import AsyncioScheduler

logger = logging.getLogger(__name__)


# ============================================================
#  序列化工具
# ============================================================

def card_to_dict(c: Card) -> dict:
    """将 Card 序列化为前端可用的 dict"""
    return {
        "id": c.id,
        "name": c.name.value,
        "color": c.color.value,
        "value": c.value,
        "suit": c.suit,
        "strength": c.strength,
        "display": c.display,
    }


def play_to_dict(p: Play) -> dict:
    """扣牌背面朝上，不暴露牌面"""
    return {
        "participant": p.participant.value,
        "type": p.type.value,
        "strength": p.strength,
        "count": len(p.cards),
        "cards": [] if p.is_discard else [card_to_dict(c) for c in p.cards],
    }


def state_to_dict(state: GameState, viewer: Participant = Participant.PLAYER) -> dict:
    """以 viewer 的视角序列化局面（只看得到自己的手牌）"""
    data = {
        "phase": state.phase.value,
        "hand_number": state.hand_number,
        "turn": state.turn.value,
        "starter": state.starter.value,
        "hand": [card_to_dict(c) for c in state.hands[viewer]],
        "hand_sizes": {p.value: len(state.hands[p]) for p in PARTICIPANTS},
        "collected": {p.value: state.collected_count(p) for p in PARTICIPANTS},
        "table": [play_to_dict(p) for p in state.table],
        "star_coins": {p.value: state.star_coins[p] for p in PARTICIPANTS},
        "names": {p.value: state.display_name(p) for p in PARTICIPANTS},
        "challengers": sorted(p.value for p in state.challengers),
        "kou_le": None,
        "settlement": None,
    }
    if state.kou_le is not None:
        data["kou_le"] = {
            "initiator": state.kou_le.initiator.value,
            "responses": {
                p.value: (r.value if r else None) for p, r in state.kou_le.responses.items()
            },
        }
    if state.settlement is not None:
        data["settlement"] = {
            p.value: {
                "level": r.level.value,
                "cards": r.cards,
                "net_gain": r.net_gain,
                "challenge_failed": r.challenge_failed,
            }
            for p, r in state.settlement.items()
        }
    return data


def _cards_by_id(state: GameState, ids: List[str]) -> List[Card]:
    """把前端传来的 id 换成手牌里的 Card"""
    held: Dict[str, Card] = {c.id: c for c in state.hands[Participant.PLAYER]}
    missing = [i for i in ids if i not in held]
    if missing:
        raise CardsNotInHand(f"手牌中没有: {', '.join(missing)}")
    return [held[i] for i in ids]


# ============================================================
#  单连接会话
# ============================================================

class Session:
    """一个 WebSocket 连接上的一局（玩家本人 vs 两个 RuleAI）"""

    def __init__(self, ws: WebSocket, pacing: Pacing, seed: Optional[int] = None):
        self.ws = ws
        self.outbox: asyncio.Queue = asyncio.Queue()
        rng = random.Random(seed)
        self.scheduler = AsyncioScheduler()
        self.controller = GameController(
            strategies={
                Participant.AI_LEFT: RuleAI(rng=random.Random(rng.random())),
                Participant.AI_RIGHT: RuleAI(rng=random.Random(rng.random())),
            },
            scheduler=self.scheduler,
            rng=rng,
            pacing=pacing,
        )
        self.controller.on_event(self._on_event)

    def _on_event(self, event: GameEvent) -> None:
        """控制器事件 → 推送队列（电脑的动作在定时器里发生）"""
        self.outbox.put_nowait({
            "type": "event",
            "action": event.action,
            "participant": event.participant.value if event.participant else None,
            "state": state_to_dict(self.controller.state),
        })

    def snapshot(self) -> dict:
        gc = self.controller
        return {
            "type": "state",
            "state": state_to_dict(gc.state),
            "legal": [[c.id for c in combo] for combo in gc.legal_plays(Participant.PLAYER)],
        }

    def handle(self, msg: dict) -> None:
        """执行一条玩家指令，非法时抛出 GameError；格式不对抛出 ValueError"""
        if not isinstance(msg, dict):
            raise ValueError("bad request: message must be an object")
        gc = self.controller
        action = msg.get("action")
        if action == "start":
            gc.new_hand()
        elif action == "play":
            ids = msg.get("cards", [])
            if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
                raise ValueError("bad request: cards must be a list of ids")
            cards = _cards_by_id(gc.state, ids)
            gc.submit_play(Participant.PLAYER, cards, bool(msg.get("discard", False)))
        elif action == "kou_le":
            gc.declare_kou_le(Participant.PLAYER)
        elif action == "respond":
            response = msg.get("response")
            if not isinstance(response, str):
                raise ValueError("bad request: response must be a string")
            gc.respond_kou_le(Participant.PLAYER, KouLeResponse(response))
        elif action == "restart":
            gc.settle_and_restart()
        elif action != "legal":
            raise ValueError(f"unknown action: {action}")

    async def pump(self) -> None:
        """把推送队列里的消息发给客户端"""
        while True:
            msg = await self.outbox.get()
            await self.ws.send_text(json.dumps(msg, ensure_ascii=False))


# ============================================================
#  FastAPI 应用
# ============================================================

def create_app(pacing: Optional[Pacing] = None, seed: Optional[int] = None) -> FastAPI:
    """创建应用；pacing 控制电脑思考与一轮结束的停顿"""
    pacing = pacing or Pacing()
    app = FastAPI(title="宣坨坨")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.websocket("/ws")
    async def websocket_endpoint(ws: WebSocket):
        """WebSocket 端点：客户端发送 JSON 指令，服务端回推局面"""
        await ws.accept()
        session = Session(ws, pacing, seed)
        pump = asyncio.create_task(session.pump())
        try:
            while True:
                data = await ws.receive_text()
                # 回复也走推送队列，保证排在本指令产生的事件之后
                try:
                    msg = json.loads(data)
                    session.handle(msg)
                except GameError as e:
                    session.outbox.put_nowait(
                        {"type": "error", "error": type(e).__name__, "reason": e.reason}
                    )
                    continue
                except (ValueError, KeyError) as e:
                    session.outbox.put_nowait(
                        {"type": "error", "error": "BadRequest", "reason": str(e)}
                    )
                    continue
                session.outbox.put_nowait(session.snapshot())
        except WebSocketDisconnect:
            logger.info("客户端断开连接")
        finally:
            session.scheduler.cancel_all()
            pump.cancel()

    return app


app = create_app()
