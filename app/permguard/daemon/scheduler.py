"""Reconciliation scheduling: periodic timer, change debouncing, pass queueing.

All scheduling decisions are made on a single asyncio event loop. Change
notifications may arrive from any thread; they are handed to the loop with
``call_soon_threadsafe`` into a bounded queue and never block the producer.

Scheduling rules:

- A timer tick triggers a pass immediately.
- A change notification opens (or restarts) a settle window; a pass is
  triggered only once the window expires without further notifications.
- At most one pass runs at a time. A trigger arriving while a pass runs
  sets a single pending flag, so exactly one more pass follows, however
  many triggers arrived in the meantime.
"""

import asyncio
import logging
import threading
from collections.abc import Callable
from enum import Enum

from permguard.config.models import GuardConfig
from permguard.daemon.events import ChangeEvent

logger = logging.getLogger(__name__)

# Change hand-off capacity; bursts are coalesced downstream anyway
DEFAULT_QUEUE_SIZE = 128

PassRunner = Callable[[], object]


class LoopState(str, Enum):
    """State of the reconciliation loop.

    Attributes:
        IDLE: Waiting for a trigger.
        RUNNING: A pass is in progress.
    """

    IDLE = "idle"
    RUNNING = "running"


class TriggerReason(str, Enum):
    """Why a pass was requested."""

    STARTUP = "startup"
    TIMER = "scheduled"
    CHANGE = "file system event"


class ReconciliationLoop:
    """Drives reconciliation passes from timer ticks and change notifications.

    The loop owns the debounce timer and the pending-pass flag; producers
    only ever enqueue wake-ups and never decide whether a pass runs.

    Each pass executes on its own daemon thread, so filesystem I/O does not
    block the event loop that ingests triggers, and shutdown never waits for
    a pass in progress. Passes never overlap: the next one starts only after
    the previous thread has reported back.

    Args:
        run_pass: Callable performing one full pass (typically
            ``Reconciler.run_pass``). Exceptions are logged, never propagated.
        interval: Seconds between scheduled passes.
        settle: Debounce window in seconds after a change notification.
        queue_size: Capacity of the change hand-off queue.
    """

    def __init__(
        self,
        run_pass: PassRunner,
        *,
        interval: float = 3600.0,
        settle: float = 0.1,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        if interval <= 0:
            msg = f"Interval must be positive, got {interval}"
            raise ValueError(msg)
        if settle < 0:
            msg = f"Settle window cannot be negative, got {settle}"
            raise ValueError(msg)

        self._run_pass = run_pass
        self._interval = interval
        self._settle = settle
        self._queue_size = queue_size

        self._state = LoopState.IDLE
        self._pending = False
        self._pending_reason = TriggerReason.STARTUP
        self._passes_started = 0

        # Bound to the running event loop in run()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: asyncio.Queue[ChangeEvent] | None = None
        self._wake: asyncio.Event | None = None
        self._settle_handle: asyncio.TimerHandle | None = None

    @classmethod
    def from_config(cls, config: GuardConfig, run_pass: PassRunner) -> "ReconciliationLoop":
        """Build a loop using the interval and settle window from config."""
        return cls(run_pass, interval=config.check_interval, settle=config.settle_window)

    @property
    def state(self) -> LoopState:
        """Current loop state."""
        return self._state

    @property
    def passes_started(self) -> int:
        """Number of passes started since run() began."""
        return self._passes_started

    @property
    def has_pending_pass(self) -> bool:
        """True when a pass is queued behind the running one."""
        return self._pending

    # -- producer side (any thread) ------------------------------------------

    def notify_threadsafe(self, event: ChangeEvent) -> None:
        """Hand a change notification to the loop from any thread.

        Never blocks. Notifications arriving before the loop runs, or after
        it stopped, are dropped.
        """
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.debug("Loop not running, dropping change event for %s", event.root)
            return
        try:
            loop.call_soon_threadsafe(self._enqueue, event)
        except RuntimeError:
            # Loop closed between the check and the call
            logger.debug("Loop closed, dropping change event for %s", event.root)

    def _enqueue(self, event: ChangeEvent) -> None:
        if self._queue is None:
            return
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            # Queued wake-ups already guarantee a pass
            logger.debug("Change queue full, dropping event for %s", event.root)

    # -- coordinator side (event loop thread) -------------------------------

    def notify(self, event: ChangeEvent) -> None:
        """Open or restart the settle window for a change notification."""
        if self._loop is None:
            msg = "ReconciliationLoop is not running"
            raise RuntimeError(msg)
        if self._settle_handle is not None:
            self._settle_handle.cancel()
        logger.debug("Change under %s, settling for %.3fs", event.root, self._settle)
        self._settle_handle = self._loop.call_later(self._settle, self._on_settled)

    def tick(self) -> None:
        """Request a pass for a timer tick."""
        self.trigger(TriggerReason.TIMER)

    def trigger(self, reason: TriggerReason) -> None:
        """Request a pass; coalesces with any pass already pending."""
        if self._wake is None:
            msg = "ReconciliationLoop is not running"
            raise RuntimeError(msg)
        if self._state is LoopState.RUNNING:
            logger.debug("Pass in progress, queueing one more (%s)", reason.value)
        self._pending = True
        self._pending_reason = reason
        self._wake.set()

    def _on_settled(self) -> None:
        self._settle_handle = None
        self.trigger(TriggerReason.CHANGE)

    async def run(self, *, startup_pass: bool = True) -> None:
        """Run forever, executing passes as triggers arrive.

        Args:
            startup_pass: Run one unconditional pass before waiting for
                triggers.
        """
        queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=self._queue_size)
        wake = asyncio.Event()
        self._loop = asyncio.get_running_loop()
        self._queue = queue
        self._wake = wake
        self._passes_started = 0

        tasks = [
            asyncio.create_task(self._consume_changes(queue), name="permguard-changes"),
            asyncio.create_task(self._run_timer(), name="permguard-timer"),
        ]

        if startup_pass:
            self.trigger(TriggerReason.STARTUP)

        try:
            await self._run_passes(wake)
        finally:
            if self._settle_handle is not None:
                self._settle_handle.cancel()
                self._settle_handle = None
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            self._loop = None
            self._queue = None
            self._wake = None
            self._state = LoopState.IDLE

    async def _run_passes(self, wake: asyncio.Event) -> None:
        """Single consumer: waits for triggers and executes passes in order."""
        loop = asyncio.get_running_loop()

        while True:
            await wake.wait()
            wake.clear()
            if not self._pending:
                continue

            self._state = LoopState.RUNNING
            try:
                while self._pending:
                    reason = self._pending_reason
                    self._pending = False
                    await self._execute(loop, reason)
            finally:
                self._state = LoopState.IDLE

    async def _execute(self, loop: asyncio.AbstractEventLoop, reason: TriggerReason) -> None:
        self._passes_started += 1
        logger.info("Running check due to %s", reason.value)
        try:
            await self._start_pass_thread(loop)
        except Exception:
            logger.exception("Error during %s check", reason.value)

    async def _consume_changes(self, queue: asyncio.Queue[ChangeEvent]) -> None:
        while True:
            event = await queue.get()
            self.notify(event)

    def _start_pass_thread(self, loop: asyncio.AbstractEventLoop) -> "asyncio.Future[object]":
        """Run one pass on a daemon thread and return a future for its outcome.

        Cancelling the future abandons the pass; the thread finishes on its
        own and is not joined at interpreter exit.
        """
        future: asyncio.Future[object] = loop.create_future()

        def _target() -> None:
            try:
                result = self._run_pass()
            except BaseException as e:
                _resolve_threadsafe(loop, future, error=e)
            else:
                _resolve_threadsafe(loop, future, result=result)

        threading.Thread(target=_target, name="permguard-pass", daemon=True).start()
        return future

    async def _run_timer(self) -> None:
        # Deadlines are anchored to the start time, so tick latency never
        # accumulates; ticks missed while the loop was stalled are skipped.
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self._interval
        while True:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            self.tick()
            now = loop.time()
            while next_tick <= now:
                next_tick += self._interval


def _resolve_threadsafe(
    loop: asyncio.AbstractEventLoop,
    future: "asyncio.Future[object]",
    *,
    result: object = None,
    error: BaseException | None = None,
) -> None:
    """Complete ``future`` from a worker thread, unless it was abandoned."""

    def _resolve() -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)

    try:
        loop.call_soon_threadsafe(_resolve)
    except RuntimeError:
        # Loop already closed; nobody is waiting for this pass
        logger.debug("Event loop closed, discarding pass outcome")
