"""In-band walk results: each delivered item is a path or a branch failure."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from lazydir.errors import WalkError


@dataclass(slots=True, frozen=True)
class WalkOutcome:
    path: Path | None = None
    error: WalkError | None = None

    @classmethod
    def found(cls, path: Path) -> WalkOutcome:
        return cls(path=path)

    @classmethod
    def failed(cls, error: WalkError) -> WalkOutcome:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Path:
        if self.error is not None:
            raise self.error
        if self.path is None:
            raise ValueError("outcome carries neither a path nor an error")
        return self.path
