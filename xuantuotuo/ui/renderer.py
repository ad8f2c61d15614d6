"""终端可视化渲染器 - 在终端中展示宣坨坨对局过程"""

import os
import time
from typing import Dict, Sequence

from xuantuotuo.engine.card import Card, Color
from xuantuotuo.engine.hand_type import PlayType, Play
from xuantuotuo.game.player import Participant, PARTICIPANTS
from xuantuotuo.game.game_state import GameState, GameEvent, KouLeResponse
from xuantuotuo.game.scoring import RewardLevel, SettlementResult


# 颜色常量 (ANSI)
RED = "\033[91m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
MAGENTA = "\033[95m"
CYAN = "\033[96m"
BOLD = "\033[1m"
DIM = "\033[2m"
RESET = "\033[0m"

# 出牌类型中文名
PLAY_TYPE_NAME = {
    PlayType.SINGLE: "单张",
    PlayType.PAIR: "对子",
    PlayType.TRIPLE: "三曲",
    PlayType.DISCARD: "扣牌",
}

# 档位中文名
REWARD_LEVEL_NAME = {
    RewardLevel.CI_LE: "次了",
    RewardLevel.WU_LE: "五了",
    RewardLevel.GANG_GOU: "刚够",
    RewardLevel.BU_GOU: "不够",
}

KOU_LE_RESPONSE_NAME = {
    KouLeResponse.AGREE: "扣了",
    KouLeResponse.CHALLENGE: "宣(挑战)",
}


class TerminalRenderer:
    """终端可视化渲染器"""

    def __init__(self, delay: float = 0.8):
        self.delay = delay  # 每步之间的延迟（秒）

    def clear(self) -> None:
        """清屏"""
        os.system("clear" if os.name != "nt" else "cls")

    def pause(self, seconds: float = 0) -> None:
        """暂停"""
        if self.delay > 0:
            time.sleep(seconds or self.delay)

    # ============================================================
    #  牌面渲染
    # ============================================================

    @staticmethod
    def format_cards(cards: Sequence[Card], face_down: bool = False) -> str:
        """将牌列表格式化为彩色字符串"""
        if face_down:
            return " ".join(f"{DIM}🂠{RESET}" for _ in cards)
        parts = []
        for c in cards:
            if c.color == Color.RED:
                parts.append(f"{RED}{c.display}{RESET}")
            elif c.color == Color.NONE:
                parts.append(f"{CYAN}{BOLD}{c.display}{RESET}")
            else:
                parts.append(c.display)
        return " ".join(parts)

    @staticmethod
    def format_name(state: GameState, participant: Participant) -> str:
        color = GREEN if participant == Participant.PLAYER else YELLOW
        return f"{color}{BOLD}{state.display_name(participant)}{RESET}"

    def print_header(self, title: str) -> None:
        """打印带框的标题"""
        print(f"\n{YELLOW}{BOLD}{'═' * 60}{RESET}")
        print(f"{YELLOW}{BOLD}  {title}{RESET}")
        print(f"{YELLOW}{BOLD}{'═' * 60}{RESET}\n")

    # ============================================================
    #  各阶段展示
    # ============================================================

    def show_deal(self, state: GameState) -> None:
        """展示发牌结果"""
        self.print_header(f"🃏 第{state.hand_number}局 发牌完成")
        for p in PARTICIPANTS:
            hand = state.hands[p]
            print(f"  {self.format_name(state, p)} ({len(hand)}张): {self.format_cards(hand)}")
        print(f"\n  {self.format_name(state, state.starter)} 首先出牌\n")

    def show_play(self, state: GameState, play: Play) -> None:
        """展示一手出牌（扣牌背面朝上）"""
        name = self.format_name(state, play.participant)
        type_name = PLAY_TYPE_NAME[play.type]
        cards_str = self.format_cards(play.cards, face_down=play.is_discard)
        left = len(state.hands[play.participant])
        print(f"  {name} [{type_name}]: {cards_str}  (剩余{left}张)")

    def show_round(self, state: GameState, winner: Participant, table: Sequence[Play]) -> None:
        """展示一轮赢家"""
        won = sum(len(p.cards) for p in table)
        print(f"  {MAGENTA}→ {state.display_name(winner)} 赢得本轮，收 {won} 张"
              f"（共 {state.collected_count(winner)} 张）{RESET}\n")

    def show_kou_le(self, state: GameState, initiator: Participant) -> None:
        print(f"\n  {RED}{BOLD}⚖️  {state.display_name(initiator)} 发起了“扣了”！{RESET}")

    def show_response(self, state: GameState, participant: Participant, response: KouLeResponse) -> None:
        print(f"  {self.format_name(state, participant)}: {KOU_LE_RESPONSE_NAME[response]}")

    def show_challenged(self, state: GameState, challengers: Sequence[Participant]) -> None:
        names = "、".join(state.display_name(p) for p in challengers)
        print(f"  {RED}{BOLD}→ {names} 宣了，继续打！{RESET}\n")

    def show_restart(self, state: GameState) -> None:
        print(f"{DIM}  第{state.hand_number}局结束，准备下一局…{RESET}")

    def show_result(self, state: GameState, results: Dict[Participant, SettlementResult]) -> None:
        """展示本局结算"""
        self.print_header("🏆 对局结算")
        print(f"  {'玩家':<10} {'档位':<6} {'收牌':<6} {'星光币变化':<10} {'余额'}")
        print(f"  {'─' * 48}")
        for p in PARTICIPANTS:
            r = results[p]
            level = REWARD_LEVEL_NAME[r.level]
            mark = f" {RED}挑战失败×2{RESET}" if r.challenge_failed else ""
            print(f"  {state.display_name(p):<10} {level:<6} {r.cards:<6} "
                  f"{r.net_gain:+d}{mark:<10} {state.star_coins[p]}")
        print()

    # ============================================================
    #  事件回调（注册到 GameController）
    # ============================================================

    def make_event_callback(self, controller):
        """创建事件回调函数，供 GameController.on_event() 使用"""
        renderer = self

        def callback(event: GameEvent) -> None:
            state = controller.state
            if event.action == "deal":
                renderer.show_deal(state)
                renderer.pause(1.0)
            elif event.action == "play":
                renderer.show_play(state, event.data)
                renderer.pause()
            elif event.action == "round":
                renderer.show_round(state, event.participant, event.data)
                renderer.pause()
            elif event.action == "kou_le":
                renderer.show_kou_le(state, event.participant)
                renderer.pause()
            elif event.action == "respond":
                renderer.show_response(state, event.participant, event.data)
                renderer.pause(0.5)
            elif event.action == "challenged":
                renderer.show_challenged(state, event.data)
                renderer.pause()
            elif event.action == "settle":
                renderer.show_result(state, event.data)
            elif event.action == "restart":
                renderer.show_restart(state)

        return callback
