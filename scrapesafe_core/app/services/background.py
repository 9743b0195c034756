# app/services/background.py
# -*- coding: utf-8 -*-
"""
Periodic background tasks (cache sweep, pin retries).

Each task runs its synchronous body in the default executor every
`interval_seconds` on the app's event loop. `run_once()` runs one pass
inline so tests never wait on timers.
"""

import asyncio
import traceback
from typing import Any, Callable, Optional


class PeriodicTask:
    def __init__(self, name: str, interval_seconds: float, fn: Callable[[], Any]):
        self.name = name
        self.interval_seconds = interval_seconds
        self.fn = fn
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    def run_once(self) -> Any:
        try:
            return self.fn()
        except Exception:
            # a failed pass must not kill the loop
            print(f"[{self.name}] Pass failed")
            traceback.print_exc()
            return None

    async def _loop(self):
        loop = asyncio.get_running_loop()
        try:
            while self._running:
                await asyncio.sleep(self.interval_seconds)
                if not self._running:
                    break
                await loop.run_in_executor(None, self.run_once)
        except asyncio.CancelledError:
            pass
        finally:
            self._running = False

    def start(self) -> bool:
        """Schedule the loop on the running event loop. Call from a startup hook."""
        if self._running:
            return False
        loop = asyncio.get_running_loop()
        self._running = True
        self._task = loop.create_task(self._loop())
        print(f"[{self.name}] Started (every {self.interval_seconds}s)")
        return True

    def stop(self):
        self._running = False
        if self._task is not None:
            self._task.cancel()
            self._task = None
        print(f"[{self.name}] Stopped")
