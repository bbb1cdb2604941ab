"""
节流器

固定频率发放许可：构造后第一次 acquire 立即返回，之后每隔 interval 发放一个。
只缓存一个未领取的许可，无人领取时多余的 tick 直接丢弃（不会补发形成突发）。
interval 为 0 时不限速，不启动 ticker。
"""
import asyncio
from typing import Optional

from loguru import logger


class Throttle:
    """固定频率节流器（ticker，而非每次调用重新计时）"""

    def __init__(self, interval: float):
        """
        Args:
            interval: 许可间隔（秒）
        """
        if interval < 0:
            raise ValueError("interval must be >= 0")
        self.interval = interval
        self._permits: Optional[asyncio.Queue] = None
        self._ticker: Optional[asyncio.Task] = None
        self.dropped = 0

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def start(self):
        """启动 ticker（需在事件循环内调用）；立即放入第一个许可"""
        if self._ticker is not None:
            return
        loop = asyncio.get_running_loop()
        self._permits = asyncio.Queue(maxsize=1)
        self._permits.put_nowait(loop.time())
        self._ticker = asyncio.create_task(self._tick())
        logger.debug(f"Throttle started: interval={self.interval}s")

    async def _tick(self):
        loop = asyncio.get_running_loop()
        while True:
            await asyncio.sleep(self.interval)
            try:
                self._permits.put_nowait(loop.time())
            except asyncio.QueueFull:
                self.dropped += 1

    async def acquire(self) -> float:
        """
        获取许可（阻塞直到可用）

        Returns:
            许可发放时间（事件循环时钟）
        """
        if self.interval == 0:
            return asyncio.get_running_loop().time()
        if self._ticker is None:
            self.start()
        return await self._permits.get()

    async def close(self):
        """停止 ticker"""
        if self._ticker is None:
            return
        self._ticker.cancel()
        try:
            await self._ticker
        except asyncio.CancelledError:
            pass
        self._ticker = None
        self._permits = None
