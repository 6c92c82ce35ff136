"""Unbounded multi-producer/single-consumer hand-off between walker threads."""

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Iterator
from typing import Generic, TypeVar

from lazydir.errors import ChannelError

T = TypeVar("T")


class ChannelClosed(Exception):
    """Every sender is gone and nothing is left to receive."""


class ChannelTimeout(Exception):
    """``recv`` waited for its full timeout without an item or closure."""


class ReceiverGone(Exception):
    """Underlying cause of a ``ChannelError``: the receiver was closed."""


class _ChannelState(Generic[T]):
    def __init__(self) -> None:
        self.cond = threading.Condition()
        self.items: deque[T] = deque()
        self.senders = 0
        self.receiver_closed = False


class Sender(Generic[T]):
    """One producer handle. The channel closes when every handle is closed."""

    def __init__(self, state: _ChannelState[T]) -> None:
        self._state = state
        self._closed = False
        with state.cond:
            state.senders += 1

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def receiver_closed(self) -> bool:
        return self._state.receiver_closed

    def send(self, item: T) -> None:
        if self._closed:
            raise ValueError("send on a closed sender")
        state = self._state
        with state.cond:
            if state.receiver_closed:
                raise ChannelError(ReceiverGone("receiver closed"))
            state.items.append(item)
            state.cond.notify()

    def clone(self) -> Sender[T]:
        if self._closed:
            raise ValueError("clone of a closed sender")
        return Sender(self._state)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        state = self._state
        with state.cond:
            state.senders -= 1
            if state.senders == 0:
                state.cond.notify_all()

    def __enter__(self) -> Sender[T]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class Receiver(Generic[T]):
    """The single consumer handle."""

    def __init__(self, state: _ChannelState[T]) -> None:
        self._state = state

    @property
    def closed(self) -> bool:
        return self._state.receiver_closed

    def recv(self, timeout: float | None = None) -> T:
        """Return the next item, blocking while senders remain.

        Raises ``ChannelClosed`` once all senders are closed and the buffer is
        empty, or ``ChannelTimeout`` if ``timeout`` seconds pass first.
        """
        state = self._state
        deadline = None if timeout is None else time.monotonic() + timeout
        with state.cond:
            while True:
                if state.items:
                    return state.items.popleft()
                if state.senders == 0 or state.receiver_closed:
                    raise ChannelClosed()
                if deadline is None:
                    state.cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise ChannelTimeout()
                state.cond.wait(remaining)

    def close(self) -> None:
        state = self._state
        with state.cond:
            if state.receiver_closed:
                return
            state.receiver_closed = True
            state.items.clear()
            state.cond.notify_all()

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.recv()
            except ChannelClosed:
                return


def open_channel() -> tuple[Sender[T], Receiver[T]]:
    """Create a channel with one open sender and its receiver."""
    state: _ChannelState[T] = _ChannelState()
    return Sender(state), Receiver(state)
