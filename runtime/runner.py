import asyncio
import logging
from typing import List, Optional
from battle.engine import Engine
from battle.errors import BattleError
from battle.model import Event
from battle.state import BattleState
from .eventlog import EventLog

logger = logging.getLogger("runtime.runner")

class RoundRunner:
    """Async driver that resolves one battle round per tick."""

    def __init__(self, engine: Engine, tick_ms: int = 500, time_compression: float = 30.0):
        self.engine = engine
        self.tick_ms = tick_ms
        self.time_compression = time_compression
        self.sleep_s = (tick_ms / 1000.0) / max(1.0, time_compression)
        self.events = EventLog()
        self.error: Optional[BattleError] = None
        self._task: asyncio.Task | None = None
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self):
        """Start the round loop."""
        if self._task:
            return
        self._task = asyncio.create_task(self._loop())

    async def stop(self):
        """Stop the round loop gracefully."""
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def wait_finished(self):
        """Block until the battle has ended or failed."""
        if self._task:
            await asyncio.shield(self._task)

    async def _loop(self):
        """Main loop - step the engine, log events, sleep until the next tick."""
        while not self.engine.ended:
            async with self._lock:
                try:
                    evts: List[Event] = self.engine.step()
                except BattleError as exc:
                    logger.warning("Battle stopped after %d rounds: %s",
                                   self.engine.completed_rounds, exc)
                    self.error = exc
                    return
            self.events.record_round(evts)
            await asyncio.sleep(self.sleep_s)
        logger.info("Battle finished, %d events logged", len(self.events))

    async def snapshot(self) -> BattleState:
        """Get a copy of the current state, never one caught mid-round."""
        async with self._lock:
            return self.engine.snapshot().copy()

    def set_time_compression(self, time_compression: float):
        """Update time compression factor (1.0 = real-time, higher = faster)."""
        self.time_compression = max(0.1, min(1000.0, time_compression))
        self.sleep_s = (self.tick_ms / 1000.0) / max(1.0, self.time_compression)
        logger.debug("Time compression set to %sx (sleep: %.4fs)",
                     self.time_compression, self.sleep_s)
