"""Filesystem change notification sources.

A change source delivers a bare wake-up signal whenever something under a
watched root is created, modified, removed or renamed. Delivery carries no
guarantees about ordering, exactly-once delivery or payload accuracy; the
scheduler treats every event as "something changed, re-check soon".

The daemon's own chmod calls are reported back as "modified" events (inotify
signals metadata changes as IN_ATTRIB). A pass that fixes anything is
therefore followed by one more pass after the settle window, which finds
nothing to do and converges.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

logger = logging.getLogger(__name__)

# Opened/closed notifications do not change permissions
RELEVANT_EVENT_TYPES: frozenset[str] = frozenset(
    {EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_DELETED, EVENT_TYPE_MOVED}
)


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """Opaque "something changed" token.

    Attributes:
        root: Watch root the change was observed under, if known.
    """

    root: str | None = None


ChangeCallback = Callable[[ChangeEvent], None]


class WatchError(Exception):
    """Raised when the change notification source cannot be installed."""


class ChangeSource(ABC):
    """Abstract source of filesystem change notifications.

    Implementations may invoke the callback from any thread. The callback
    must return quickly and never block.
    """

    @abstractmethod
    def start(self, callback: ChangeCallback) -> None:
        """Begin delivering change events to ``callback``.

        Raises:
            WatchError: If watching cannot be set up.
        """

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering events and release OS resources."""


class _RootEventHandler(FileSystemEventHandler):
    """Forwards relevant watchdog events for one root as ChangeEvents."""

    def __init__(self, root: str, callback: ChangeCallback) -> None:
        self._root = root
        self._callback = callback

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in RELEVANT_EVENT_TYPES:
            return
        logger.debug("File system event detected: %s %s", event.event_type, event.src_path)
        self._callback(ChangeEvent(root=self._root))


class WatchdogChangeSource(ChangeSource):
    """Change source backed by a watchdog observer.

    Each root is watched recursively with the platform's native backend
    (inotify, FSEvents, ...), as chosen by ``watchdog.observers.Observer``.

    Args:
        roots: Directory trees to watch.
    """

    def __init__(self, roots: Iterable[Path]) -> None:
        self._roots = tuple(roots)
        self._observer: BaseObserver | None = None

    def start(self, callback: ChangeCallback) -> None:
        """Schedule a recursive watch on every root and start the observer.

        Raises:
            WatchError: If a root cannot be watched or the observer fails
                to start.
        """
        observer = Observer()
        for root in self._roots:
            try:
                observer.schedule(_RootEventHandler(str(root), callback), str(root), recursive=True)
            except OSError as e:
                raise WatchError(f"Cannot watch {root}: {e}") from e
            logger.info("Watching directory: %s", root)

        try:
            observer.start()
        except (OSError, RuntimeError) as e:
            # Emitters started before the failure must not outlive it
            observer.stop()
            if observer.is_alive():
                observer.join(timeout=5.0)
            raise WatchError(f"Cannot start file watcher: {e}") from e

        self._observer = observer

    def stop(self) -> None:
        """Stop the observer thread and wait for it to exit."""
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5.0)
        self._observer = None
