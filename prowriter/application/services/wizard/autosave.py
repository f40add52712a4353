"""防抖自动保存。

每次修改调用 `schedule()` 重新计时；静默 `delay_seconds` 后执行一次保存。
保存回调在触发时读取向导的最新状态，而不是调度时的快照。
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from prowriter.shared.logging import get_logger, log_extra

log = get_logger(__name__)


class AutoSaveDebouncer:
    def __init__(
        self,
        save: Callable[[], Awaitable[None]],
        delay_seconds: float,
        *,
        name: str = "",
    ):
        self._save = save
        self.delay_seconds = max(0.0, float(delay_seconds))
        self.name = name
        self._timer: asyncio.Task | None = None
        self.closed = False
        # 同一份草稿的保存串行执行
        self._lock = asyncio.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def schedule(self) -> None:
        """（重新）开始计时，之前未触发的保存被取消。"""
        if self.closed:
            log.info("wizard.autosave_skipped_closed", extra=log_extra(name=self.name))
            return
        self.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._wait_and_save())

    def cancel(self) -> bool:
        """取消尚未触发的保存；已经开始写库的保存不受影响。"""
        timer, self._timer = self._timer, None
        if timer is None or timer.done():
            return False
        timer.cancel()
        return True

    async def flush(self) -> None:
        """立即执行挂起的保存（没有挂起时等待进行中的保存结束）。"""
        if self.cancel():
            await self.save_now()
            return
        async with self._lock:
            pass

    async def close(self) -> None:
        """写入挂起的保存；此后 schedule() 不再计时。"""
        self.closed = True
        await self.flush()

    async def save_now(self) -> None:
        async with self._lock:
            try:
                await self._save()
            except Exception as exc:
                # 自动保存失败不影响编辑，只记录日志
                log.exception(
                    "wizard.autosave_failed",
                    extra=log_extra(name=self.name, error=str(exc), type=exc.__class__.__name__),
                )

    async def _wait_and_save(self) -> None:
        await asyncio.sleep(self.delay_seconds)
        # 计时结束后脱离 timer，后续 schedule() 不会打断正在进行的写库
        if self._timer is asyncio.current_task():
            self._timer = None
        await self.save_now()
