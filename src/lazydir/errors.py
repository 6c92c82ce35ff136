"""Error kinds raised by walkers and delivered in-band by producers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ErrorKind(str, Enum):
    FILE = "file"
    CHANNEL = "channel"
    LISTER = "lister"


@dataclass(eq=False)
class WalkError(Exception):
    """Tagged failure: a stable ``kind`` plus the original ``cause``."""

    kind: ErrorKind
    cause: BaseException
    path: Path | None = None

    def __post_init__(self) -> None:
        self.args = (self.kind, self.cause, self.path)

    def __str__(self) -> str:
        where = f" at {self.path}" if self.path is not None else ""
        return f"{self.kind.value} error{where}: {self.cause}"


def _as_path(path: Path | str | None) -> Path | None:
    return Path(path) if path is not None else None


class FileError(WalkError):
    """A root could not be resolved or a directory could not be listed."""

    def __init__(self, cause: OSError, path: Path | str | None = None) -> None:
        super().__init__(ErrorKind.FILE, cause, _as_path(path))
        # args mirror this constructor so copy and pickle rebuild the error.
        self.args = (cause, self.path)


class ChannelError(WalkError):
    """An item could not be handed over because the consumer went away."""

    def __init__(self, cause: BaseException, path: Path | str | None = None) -> None:
        super().__init__(ErrorKind.CHANNEL, cause, _as_path(path))
        self.args = (cause, self.path)


class ListerError(WalkError):
    """A custom lister failed with something other than ``OSError``."""

    def __init__(self, cause: BaseException, path: Path | str | None = None) -> None:
        super().__init__(ErrorKind.LISTER, cause, _as_path(path))
        self.args = (cause, self.path)


class WalkerStateError(RuntimeError):
    """A walker was reconfigured after its production session started."""
