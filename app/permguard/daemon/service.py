"""Daemon startup and lifetime.

Startup order:
1. Verify every watch root exists (fatal otherwise).
2. Install the change notification source (fatal on failure).
3. Run one unconditional startup pass.
4. Serve timer ticks and change notifications until terminated.
"""

import asyncio
import logging

from permguard.config.models import GuardConfig
from permguard.daemon.events import ChangeSource, WatchdogChangeSource
from permguard.daemon.scheduler import ReconciliationLoop
from permguard.enforcement.reconciler import Reconciler

logger = logging.getLogger(__name__)


class StartupError(Exception):
    """Raised when the daemon cannot start (e.g. a watch root is missing)."""


def check_watch_roots(config: GuardConfig) -> None:
    """Verify that every configured watch root is an existing directory.

    Args:
        config: Daemon configuration.

    Raises:
        StartupError: If no roots are configured, or a root is missing or
            not a directory.
    """
    if not config.watch_roots:
        raise StartupError("No watch directories configured")

    for root in config.watch_roots:
        if not root.exists():
            raise StartupError(f"Directory {root} does not exist")
        if not root.is_dir():
            raise StartupError(f"{root} is not a directory")


class PermissionDaemon:
    """Owns the daemon context: config, reconciler, change source and loop.

    Args:
        config: Daemon configuration.
        source: Change source override (defaults to a watchdog observer
            over the watch roots).
        reconciler: Reconciler override (defaults to one built from config).
    """

    def __init__(
        self,
        config: GuardConfig,
        *,
        source: ChangeSource | None = None,
        reconciler: Reconciler | None = None,
    ) -> None:
        self._config = config
        self._reconciler = reconciler if reconciler is not None else Reconciler(config)
        self._source = source if source is not None else WatchdogChangeSource(config.watch_roots)
        self._loop = ReconciliationLoop.from_config(config, self._reconciler.run_pass)
        self._watching = False

    @property
    def loop(self) -> ReconciliationLoop:
        """The reconciliation loop driven by this daemon."""
        return self._loop

    def start(self) -> None:
        """Run the startup checks and install the change source.

        Raises:
            StartupError: If a watch root is missing.
            WatchError: If the change source cannot be installed.
        """
        check_watch_roots(self._config)
        self._source.start(self._loop.notify_threadsafe)
        self._watching = True
        logger.info(
            "Enforcing mode %03o on %d root(s), checking every %ss",
            self._config.target_mode,
            len(self._config.watch_roots),
            self._config.check_interval_seconds,
        )

    def stop(self) -> None:
        """Stop the change source."""
        if self._watching:
            self._source.stop()
            self._watching = False

    async def serve(self) -> None:
        """Run the startup pass, then reconcile until cancelled."""
        await self._loop.run(startup_pass=True)


def run_daemon(config: GuardConfig, *, source: ChangeSource | None = None) -> None:
    """Start the daemon and block until interrupted.

    Args:
        config: Daemon configuration.
        source: Change source override.

    Raises:
        StartupError: If a watch root is missing.
        WatchError: If the change source cannot be installed.
    """
    daemon = PermissionDaemon(config, source=source)
    daemon.start()
    try:
        asyncio.run(daemon.serve())
    finally:
        daemon.stop()
        logger.info("permguard stopped")
