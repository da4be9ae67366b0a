"""过期记录清扫服务"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Optional

from domain.verification.repositories.verification_store import VerificationStore


class ExpirySweepService:
    """
    过期记录清扫服务

    周期性删除已过期的待验证记录，仅用于回收存储空间。
    正确性不依赖本服务：VerificationStore.get 会惰性判断过期。

    - 启动后立即执行第一次清扫
    - 阻塞的存储调用放到线程池执行
    - 单次清扫失败只记录日志，不中断循环
    - 优雅停止
    """

    DEFAULT_INTERVAL: float = 60.0

    def __init__(
        self,
        store: VerificationStore,
        interval: float = DEFAULT_INTERVAL,
        clock: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化清扫服务

        Args:
            store: 验证记录存储
            interval: 清扫间隔（秒）
            clock: 当前时间函数
            logger: 日志记录器
        """
        self._store = store
        self._interval = interval
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._logger = logger or logging.getLogger(__name__)

        self._executor: Optional[ThreadPoolExecutor] = None
        self._task: Optional[asyncio.Task] = None
        self._running = False
        self._total_purged = 0

    @property
    def is_running(self) -> bool:
        """检查清扫服务是否正在运行"""
        return self._running and self._task is not None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def total_purged(self) -> int:
        """启动以来累计清理的记录数"""
        return self._total_purged

    async def start(self) -> None:
        """启动清扫服务"""
        if self._running:
            self._logger.warning("Expiry sweep already running")
            return

        self._running = True
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="otp-sweep-")
        self._task = asyncio.create_task(self._sweep_loop())
        self._logger.info(f"Expiry sweep started (interval={self._interval}s)")

    async def stop(self) -> None:
        """停止清扫服务"""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self._executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

        self._logger.info("Expiry sweep stopped")

    async def _sweep_loop(self) -> None:
        """清扫主循环"""
        await self.sweep_once()

        while self._running:
            await asyncio.sleep(self._interval)
            if self._running:
                await self.sweep_once()

    async def sweep_once(self) -> int:
        """执行一次清扫

        Returns:
            本次删除的记录数；失败时返回 0
        """
        loop = asyncio.get_running_loop()
        now = self._clock()
        try:
            purged = await loop.run_in_executor(self._executor, self._store.purge_expired, now)
        except Exception as e:
            self._logger.error(f"Expiry sweep failed: {e}")
            return 0

        self._total_purged += purged
        if purged:
            self._logger.info(f"Purged {purged} expired verifications")
        return purged
