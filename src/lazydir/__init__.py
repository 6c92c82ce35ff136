"""Lazily started, concurrently produced enumeration of files under a directory."""

from __future__ import annotations

from lazydir.channel import ChannelClosed, ChannelTimeout, Receiver, Sender, open_channel
from lazydir.config.models import WalkSettings
from lazydir.errors import ChannelError, ErrorKind, FileError, ListerError, WalkError, WalkerStateError
from lazydir.outcome import WalkOutcome
from lazydir.version import __version__
from lazydir.walker import Walker, WalkState, walk

__all__ = [
    "ChannelClosed",
    "ChannelError",
    "ChannelTimeout",
    "ErrorKind",
    "FileError",
    "ListerError",
    "Receiver",
    "Sender",
    "WalkError",
    "WalkOutcome",
    "WalkSettings",
    "WalkState",
    "Walker",
    "WalkerStateError",
    "__version__",
    "open_channel",
    "walk",
]
