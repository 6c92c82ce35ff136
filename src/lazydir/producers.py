"""Background producers feeding walk outcomes into a channel."""

from __future__ import annotations

import concurrent.futures
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path

from lazydir.channel import Sender
from lazydir.errors import ChannelError, FileError, ListerError, WalkError
from lazydir.listing import Lister, list_directory
from lazydir.outcome import WalkOutcome
from lazydir.runtime_logging import get_runtime_logger

DEFAULT_MAX_WORKERS = 8


@dataclass(slots=True)
class WalkStats:
    files: int = 0
    directories: int = 0
    failures: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def add(self, *, files: int = 0, directories: int = 0, failures: int = 0) -> None:
        with self._lock:
            self.files += files
            self.directories += directories
            self.failures += failures


class ProducerSession:
    """Handle on one running production; finished once every task has exited."""

    def __init__(self, mode: str, root: Path) -> None:
        self.mode = mode
        self.root = root
        self.stats = WalkStats()
        self._started = time.monotonic()
        self._done = threading.Event()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._done.wait(timeout)

    def finish(self) -> None:
        get_runtime_logger().info(
            "walk.session.finished",
            mode=self.mode,
            root=str(self.root),
            files=self.stats.files,
            directories=self.stats.directories,
            failures=self.stats.failures,
            elapsed_s=round(time.monotonic() - self._started, 6),
        )
        self._done.set()


def emit_directory(
    directory: Path,
    sender: Sender[WalkOutcome],
    *,
    lister: Lister,
    follow_symlinks: bool,
    stats: WalkStats,
) -> list[Path]:
    """Send every file of ``directory`` and return its subdirectories.

    An unlistable directory becomes one failed outcome and no subdirectories:
    ``FileError`` for platform failures, ``ListerError`` for anything else a
    custom lister raises. ``ChannelError`` propagates when the consumer is gone.
    """
    error: WalkError
    try:
        entries = list(lister(directory, follow_symlinks=follow_symlinks))
    except OSError as exc:
        error = FileError(exc, directory)
        error.__cause__ = exc
    except Exception as exc:
        error = ListerError(exc, directory)
        error.__cause__ = exc
    else:
        subdirs: list[Path] = []
        sent = 0
        for entry in entries:
            if entry.is_dir:
                subdirs.append(entry.path)
                continue
            sender.send(WalkOutcome.found(entry.path))
            sent += 1
        stats.add(files=sent, directories=1)
        return subdirs

    stats.add(failures=1)
    get_runtime_logger().warning(
        "walk.listing.failed",
        path=str(directory),
        kind=error.kind.value,
        error=repr(error.cause),
    )
    sender.send(WalkOutcome.failed(error))
    return []


class SequentialProducer:
    """One background thread, depth-first, a directory's files before its descendants."""

    mode = "sequential"

    def __init__(self, *, lister: Lister = list_directory, follow_symlinks: bool = False) -> None:
        self._lister = lister
        self._follow_symlinks = follow_symlinks

    def start(self, root: Path, sender: Sender[WalkOutcome]) -> ProducerSession:
        session = ProducerSession(self.mode, root)
        thread = threading.Thread(
            target=self._run,
            args=(root, sender, session),
            name="lazydir-walk",
            daemon=True,
        )
        get_runtime_logger().info("walk.session.started", mode=self.mode, root=str(root))
        thread.start()
        return session

    def _run(self, root: Path, sender: Sender[WalkOutcome], session: ProducerSession) -> None:
        try:
            pending = [root]
            while pending:
                directory = pending.pop()
                subdirs = emit_directory(
                    directory,
                    sender,
                    lister=self._lister,
                    follow_symlinks=self._follow_symlinks,
                    stats=session.stats,
                )
                # Reversed so the first discovered subdirectory is popped next.
                pending.extend(reversed(subdirs))
        except ChannelError:
            get_runtime_logger().debug("walk.consumer.gone", mode=self.mode, root=str(root))
        finally:
            sender.close()
            session.finish()


class FanOutProducer:
    """Every subdirectory is a work item on a bounded thread pool.

    Ordering across subdirectories is unspecified; only completeness holds.
    """

    mode = "fanout"

    def __init__(
        self,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
        lister: Lister = list_directory,
        follow_symlinks: bool = False,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._max_workers = max_workers
        self._lister = lister
        self._follow_symlinks = follow_symlinks

    def start(self, root: Path, sender: Sender[WalkOutcome]) -> ProducerSession:
        session = ProducerSession(self.mode, root)
        pool = concurrent.futures.ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="lazydir-fanout",
        )
        run = _FanOutRun(
            pool,
            session,
            lister=self._lister,
            follow_symlinks=self._follow_symlinks,
        )
        get_runtime_logger().info(
            "walk.session.started",
            mode=self.mode,
            root=str(root),
            max_workers=self._max_workers,
        )
        run.submit(root, sender)
        return session


class _FanOutRun:
    def __init__(
        self,
        pool: concurrent.futures.ThreadPoolExecutor,
        session: ProducerSession,
        *,
        lister: Lister,
        follow_symlinks: bool,
    ) -> None:
        self._pool = pool
        self._session = session
        self._lister = lister
        self._follow_symlinks = follow_symlinks
        self._lock = threading.Lock()
        self._outstanding = 0

    def submit(self, directory: Path, sender: Sender[WalkOutcome]) -> None:
        """Queue ``directory``; the work item owns ``sender`` and closes it."""
        with self._lock:
            self._outstanding += 1
        try:
            future = self._pool.submit(self._visit, directory, sender)
        except RuntimeError as exc:
            # Only reachable while the interpreter is shutting down.
            get_runtime_logger().error("walk.submit.failed", path=str(directory), error=str(exc))
            sender.close()
            self._task_done()
            return
        future.add_done_callback(self._report_crash)

    def _visit(self, directory: Path, sender: Sender[WalkOutcome]) -> None:
        try:
            if sender.receiver_closed:
                return
            subdirs = emit_directory(
                directory,
                sender,
                lister=self._lister,
                follow_symlinks=self._follow_symlinks,
                stats=self._session.stats,
            )
            for subdir in subdirs:
                self.submit(subdir, sender.clone())
        except ChannelError:
            get_runtime_logger().debug("walk.consumer.gone", mode=FanOutProducer.mode, path=str(directory))
        finally:
            sender.close()
            self._task_done()

    def _task_done(self) -> None:
        with self._lock:
            self._outstanding -= 1
            finished = self._outstanding == 0
        if finished:
            self._pool.shutdown(wait=False)
            self._session.finish()

    @staticmethod
    def _report_crash(future: concurrent.futures.Future[None]) -> None:
        exc = future.exception()
        if exc is not None:
            get_runtime_logger().error("walk.task.crashed", error=repr(exc))
