"""Background daemon: change notifications, scheduling and startup."""

from permguard.daemon.events import (
    ChangeEvent,
    ChangeSource,
    WatchdogChangeSource,
    WatchError,
)
from permguard.daemon.scheduler import (
    DEFAULT_QUEUE_SIZE,
    LoopState,
    ReconciliationLoop,
    TriggerReason,
)
from permguard.daemon.service import (
    PermissionDaemon,
    StartupError,
    check_watch_roots,
    run_daemon,
)

__all__ = [
    "DEFAULT_QUEUE_SIZE",
    "ChangeEvent",
    "ChangeSource",
    "LoopState",
    "PermissionDaemon",
    "ReconciliationLoop",
    "StartupError",
    "TriggerReason",
    "WatchError",
    "WatchdogChangeSource",
    "check_watch_roots",
    "run_daemon",
]
