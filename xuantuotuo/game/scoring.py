"""结算 - 按收牌张数定档，输家两两付给赢家星光币"""

from enum import Enum
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, NamedTuple

from xuantuotuo.game.player import Participant, PARTICIPANTS


class RewardLevel(str, Enum):
    """奖励档位"""
    CI_LE = "CI_LE"         # ≥18 张
    WU_LE = "WU_LE"         # ≥15 张
    GANG_GOU = "GANG_GOU"   # ≥9 张（刚够）
    BU_GOU = "BU_GOU"       # 不够


class RewardInfo(NamedTuple):
    level: RewardLevel
    coins: int


# (最少张数, 档位, 星光币)，从高到低匹配
REWARD_TIERS = (
    (18, RewardLevel.CI_LE, 3),
    (15, RewardLevel.WU_LE, 2),
    (9, RewardLevel.GANG_GOU, 1),
)

# 挑战失败的输家加倍赔付
CHALLENGE_PENALTY = 2


@dataclass(frozen=True)
class SettlementResult:
    """单个玩家的结算结果"""
    participant: Participant
    level: RewardLevel
    cards: int                    # 收牌张数
    net_gain: int
    challenge_failed: bool = False


def reward_info(collected_count: int) -> RewardInfo:
    """收牌张数 → 档位与星光币"""
    for threshold, level, coins in REWARD_TIERS:
        if collected_count >= threshold:
            return RewardInfo(level, coins)
    return RewardInfo(RewardLevel.BU_GOU, 0)


def settle(
    collected_counts: Mapping[Participant, int],
    challengers: Iterable[Participant] = (),
) -> Dict[Participant, SettlementResult]:
    """
    结算一局。
    每个 0 币的输家分别向每个有币的赢家支付该赢家的币数；
    输家若本局挑战过"扣了"，每笔加倍并标记挑战失败。
    """
    challengers = set(challengers)
    rewards = {p: reward_info(collected_counts.get(p, 0)) for p in PARTICIPANTS}
    winners = [p for p in PARTICIPANTS if rewards[p].coins > 0]
    losers = [p for p in PARTICIPANTS if rewards[p].coins == 0]

    net = {p: 0 for p in PARTICIPANTS}
    failed = set()
    for loser in losers:
        for winner in winners:
            amount = rewards[winner].coins
            if loser in challengers:
                amount *= CHALLENGE_PENALTY
                failed.add(loser)
            net[loser] -= amount
            net[winner] += amount

    return {
        p: SettlementResult(
            participant=p,
            level=rewards[p].level,
            cards=collected_counts.get(p, 0),
            net_gain=net[p],
            challenge_failed=p in failed,
        )
        for p in PARTICIPANTS
    }
