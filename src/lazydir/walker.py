"""Lazy, pull-based enumeration of every file under a root directory."""

from __future__ import annotations

import os
import threading
import weakref
from collections.abc import Iterator
from enum import Enum
from pathlib import Path

from lazydir.channel import ChannelClosed, Receiver, open_channel
from lazydir.config.models import WalkSettings
from lazydir.errors import WalkerStateError
from lazydir.listing import Lister, list_directory, resolve_root
from lazydir.outcome import WalkOutcome
from lazydir.producers import DEFAULT_MAX_WORKERS, FanOutProducer, ProducerSession, SequentialProducer
from lazydir.runtime_logging import get_runtime_logger


class WalkState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    EXHAUSTED = "exhausted"
    CLOSED = "closed"


class Walker:
    """Iterator over the absolute paths of all files below ``root``.

    Nothing touches the tree until the first pull. That pull starts exactly
    one background producer: a single depth-first thread by default, or a
    bounded fan-out pool when ``multithreaded`` is set. Each later pull blocks
    until a path is available or production has finished.

    A directory that cannot be listed is reported in-band: ``next()`` raises
    its ``FileError`` (or ``ListerError``) once and iteration carries on with the other
    branches. ``outcomes()`` yields the same stream as ``WalkOutcome`` values.

    With ``follow_symlinks=False`` (the default) a symbolic link is never
    descended: a link to a directory is yielded as an entry of its own, so
    check ``path.is_symlink()`` before opening paths as regular files.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        multithreaded: bool = False,
        max_workers: int = DEFAULT_MAX_WORKERS,
        follow_symlinks: bool = False,
        lister: Lister = list_directory,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._root = resolve_root(path)
        self._multithreaded = multithreaded
        self._max_workers = max_workers
        self._follow_symlinks = follow_symlinks
        self._lister = lister
        self._lock = threading.Lock()
        self._state = WalkState.NOT_STARTED
        self._receiver: Receiver[WalkOutcome] | None = None
        self._session: ProducerSession | None = None
        self._logger = get_runtime_logger()
        self._logger.debug(
            "walker.created",
            root=str(self._root),
            multithreaded=multithreaded,
            follow_symlinks=follow_symlinks,
        )

    @classmethod
    def from_settings(
        cls,
        path: str | os.PathLike[str],
        settings: WalkSettings,
        *,
        lister: Lister = list_directory,
    ) -> Walker:
        return cls(
            path,
            multithreaded=settings.multithreaded,
            max_workers=settings.max_workers,
            follow_symlinks=settings.follow_symlinks,
            lister=lister,
        )

    @property
    def root(self) -> Path:
        return self._root

    @property
    def multithreaded(self) -> bool:
        return self._multithreaded

    @property
    def state(self) -> WalkState:
        return self._state

    def set_mode(self, multithreaded: bool) -> None:
        """Choose fan-out (``True``) or single-worker production before the first pull."""
        with self._lock:
            if self._state is not WalkState.NOT_STARTED:
                raise WalkerStateError(f"cannot change traversal mode once the walker is {self._state.value}")
            self._multithreaded = multithreaded

    def _producer(self) -> SequentialProducer | FanOutProducer:
        if self._multithreaded:
            return FanOutProducer(
                max_workers=self._max_workers,
                lister=self._lister,
                follow_symlinks=self._follow_symlinks,
            )
        return SequentialProducer(lister=self._lister, follow_symlinks=self._follow_symlinks)

    def _ensure_started(self) -> Receiver[WalkOutcome] | None:
        with self._lock:
            if self._state is WalkState.NOT_STARTED:
                sender, receiver = open_channel()
                self._session = self._producer().start(self._root, sender)
                self._receiver = receiver
                self._state = WalkState.RUNNING
                # Producers never hold the walker, so dropping it closes the channel.
                weakref.finalize(self, receiver.close)
            return self._receiver

    def next_outcome(self) -> WalkOutcome | None:
        """Pull the next outcome, or ``None`` once the sequence has ended."""
        if self._state in (WalkState.EXHAUSTED, WalkState.CLOSED):
            return None
        receiver = self._ensure_started()
        if receiver is None:
            return None
        try:
            return receiver.recv()
        except ChannelClosed:
            with self._lock:
                if self._state is WalkState.RUNNING:
                    self._state = WalkState.EXHAUSTED
            return None

    def outcomes(self) -> Iterator[WalkOutcome]:
        while True:
            outcome = self.next_outcome()
            if outcome is None:
                return
            yield outcome

    def __iter__(self) -> Walker:
        return self

    def __next__(self) -> Path:
        outcome = self.next_outcome()
        if outcome is None:
            raise StopIteration
        return outcome.unwrap()

    def close(self) -> None:
        """Abandon the walk; producers stop at their next hand-off."""
        with self._lock:
            if self._state is WalkState.CLOSED:
                return
            previous = self._state
            self._state = WalkState.CLOSED
            receiver = self._receiver
        if receiver is not None:
            receiver.close()
        self._logger.debug("walker.closed", root=str(self._root), previous_state=previous.value)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until background production is over; ``True`` if it never started."""
        session = self._session
        if session is None:
            return True
        return session.wait(timeout)

    def __enter__(self) -> Walker:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        mode = "fanout" if self._multithreaded else "sequential"
        return f"Walker(root={str(self._root)!r}, mode={mode!r}, state={self._state.value!r})"


def walk(
    path: str | os.PathLike[str],
    *,
    multithreaded: bool = False,
    max_workers: int = DEFAULT_MAX_WORKERS,
    follow_symlinks: bool = False,
    lister: Lister = list_directory,
) -> Walker:
    """Shorthand for constructing a ``Walker``."""
    return Walker(
        path,
        multithreaded=multithreaded,
        max_workers=max_workers,
        follow_symlinks=follow_symlinks,
        lister=lister,
    )
