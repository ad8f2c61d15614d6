# 游戏流程控制模块
from .player import Participant, TURN_ORDER, PARTICIPANTS
from .game_state import GameState, GamePhase, GameEvent, KouLeState, KouLeResponse
from .scoring import RewardLevel, SettlementResult, reward_info, settle
from .scheduler import InlineScheduler, ManualScheduler, AsyncioScheduler
from .controller import GameController, AIStrategy
