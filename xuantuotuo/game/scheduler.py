"""调度器 - 把 AI 决策和"一轮结束"的延迟交给外部节奏控制

规则本身不依赖延迟；延迟只是给人看的节奏。
"""

import asyncio
import heapq
import itertools
from collections import deque
from typing import Callable, Deque, List, Optional, Protocol, Tuple

Task = Callable[[], None]


class Scheduler(Protocol):
    """延迟执行接口"""

    def call_later(self, delay: float, task: Task) -> None:
        ...

    def cancel_all(self) -> None:
        ...


class InlineScheduler:
    """
    同步执行，忽略延迟。
    用队列蹦床执行，避免任务里再调度时层层递归。
    """

    def __init__(self):
        self._queue: Deque[Task] = deque()
        self._running = False

    def call_later(self, delay: float, task: Task) -> None:
        self._queue.append(task)
        if self._running:
            return
        self._running = True
        try:
            while self._queue:
                self._queue.popleft()()
        finally:
            self._running = False

    def cancel_all(self) -> None:
        self._queue.clear()


class ManualScheduler:
    """手动推进的假时钟，测试用"""

    def __init__(self):
        self.now = 0.0
        self._heap: List[Tuple[float, int, Task]] = []
        self._seq = itertools.count()

    @property
    def pending(self) -> int:
        return len(self._heap)

    def call_later(self, delay: float, task: Task) -> None:
        heapq.heappush(self._heap, (self.now + delay, next(self._seq), task))

    def advance(self, seconds: float) -> int:
        """时钟前进 seconds 秒，执行所有到期任务，返回执行数"""
        deadline = self.now + seconds
        ran = 0
        while self._heap and self._heap[0][0] <= deadline:
            due, _, task = heapq.heappop(self._heap)
            self.now = due
            task()
            ran += 1
        self.now = deadline
        return ran

    def run_all(self, limit: int = 10000) -> int:
        """一直执行到队列清空"""
        ran = 0
        while self._heap and ran < limit:
            due, _, task = heapq.heappop(self._heap)
            self.now = max(self.now, due)
            task()
            ran += 1
        return ran

    def cancel_all(self) -> None:
        self._heap.clear()


class AsyncioScheduler:
    """基于事件循环 call_later，Web 服务用"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._handles: List[asyncio.TimerHandle] = []

    def call_later(self, delay: float, task: Task) -> None:
        loop = self._loop or asyncio.get_running_loop()
        self._handles = [h for h in self._handles if not h.cancelled()]
        self._handles.append(loop.call_later(delay, task))

    def cancel_all(self) -> None:
        for h in self._handles:
            h.cancel()
        self._handles.clear()
