"""全局配置 - 规则常量与展示节奏"""

from dataclasses import dataclass

# 初始星光币（跨局累计，进程启动时重置）
INITIAL_STAR_COINS = 100

# AI 名字池，每局随机抽两个
AI_NAME_POOL = ("王铁柱", "李翠花", "赵大壮", "孙木耳", "钱多多", "周公瑾", "吴二娃", "郑牛牛")

# 无相重发的最大次数，超过后改为定向换牌
MAX_REDEAL_ATTEMPTS = 50

# AI 首出时发起"扣了"的概率
KOU_LE_DECLARE_RATE = 0.15


@dataclass
class Pacing:
    """展示节奏（秒），只影响调度器，不影响规则"""

    ai_play_delay: float = 1.2
    kou_le_response_delay: float = 1.0
    round_over_delay: float = 1.5

    @classmethod
    def instant(cls) -> "Pacing":
        return cls(0.0, 0.0, 0.0)
