"""宣坨坨 三家电脑对局 - 主入口"""

import argparse
import logging
import random

from xuantuotuo.ai.rule_ai import RuleAI
from xuantuotuo.game.controller import GameController
from xuantuotuo.game.player import PARTICIPANTS
from xuantuotuo.game.scheduler import InlineScheduler
from xuantuotuo.ui.renderer import TerminalRenderer


def create_controller(seed=None) -> GameController:
    """创建三家都由 RuleAI 控制的对局"""
    rng = random.Random(seed)
    strategies = {p: RuleAI(rng=random.Random(rng.random())) for p in PARTICIPANTS}
    return GameController(strategies=strategies, scheduler=InlineScheduler(), rng=rng)


def run_hands(hands: int, delay: float = 0.8, seed=None) -> None:
    """连续运行若干局，星光币跨局累计"""
    renderer = TerminalRenderer(delay=delay)
    gc = create_controller(seed)
    gc.on_event(renderer.make_event_callback(gc))

    renderer.clear()
    renderer.print_header("🀄 宣坨坨 对局开始")
    for _ in range(hands):
        gc.run_hand()

    renderer.print_header("💰 星光币余额")
    for p in PARTICIPANTS:
        print(f"  {gc.state.display_name(p):<10} {gc.state.star_coins[p]}")


def main():
    """命令行入口"""
    parser = argparse.ArgumentParser(description="宣坨坨 电脑对局演示")
    parser.add_argument("--hands", type=int, default=1, help="局数 (默认1)")
    parser.add_argument("--delay", type=float, default=0.8, help="出牌延迟秒数 (默认0.8)")
    parser.add_argument("--fast", action="store_true", help="快速模式 (无延迟)")
    parser.add_argument("--seed", type=int, default=None, help="随机种子 (可复现发牌)")
    parser.add_argument("--log-level", default="WARNING", help="日志级别 (默认 WARNING)")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    delay = 0.0 if args.fast else args.delay
    run_hands(args.hands, delay=delay, seed=args.seed)


if __name__ == "__main__":
    main()
