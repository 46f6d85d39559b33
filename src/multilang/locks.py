"""Cross-process locks for the language registry.

Every registry mutation rewrites the whole JSON file. Two CLI invocations
or two web workers editing languages at once would otherwise overwrite
each other, so the cycle runs under an exclusive lock taken on a sidecar
file (``languages.json`` is guarded by ``.languages.json.lock``). The
registry file itself is never opened for locking because atomic writes
replace it.

Strategies:
- FcntlLockStrategy: ``flock`` on POSIX systems
- FileLockStrategy: the filelock library, for Windows and network mounts
- NoOpLockStrategy: no locking, for tests and single-writer deployments

Example:
    >>> strategy = get_lock_strategy("auto")
    >>> with strategy.lock(Path("translations/languages.json"), timeout=5):
    ...     pass
"""

from __future__ import annotations

import logging
import os
import sys
import threading
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Iterator

import filelock

from multilang.exceptions import LockTimeout


logger = logging.getLogger(__name__)

# Delay between non-blocking flock attempts
_POLL_INTERVAL = 0.01


class LockMode(Enum):
    """How a registry file is locked."""

    SHARED = auto()
    EXCLUSIVE = auto()


@dataclass(frozen=True)
class LockHandle:
    """An acquired lock, returned by acquire() and passed back to release().

    Attributes:
        path: Registry file the lock guards (not the sidecar).
        mode: Mode the lock was taken in.
        fd: Open descriptor of the sidecar, for strategies that keep one.
        timestamp: Acquisition time.
        thread_id: Acquiring thread.
        process_id: Acquiring process.
    """

    path: Path
    mode: LockMode
    fd: int | None = None
    timestamp: float = field(default_factory=time.time)
    thread_id: int = field(default_factory=threading.get_ident)
    process_id: int = field(default_factory=os.getpid)

    def __str__(self) -> str:
        return f"LockHandle({self.path}, {self.mode.name}, pid={self.process_id})"


def sidecar_path(path: Path) -> Path:
    """Get the lock file guarding ``path``."""
    return path.parent / f".{path.name}.lock"


class LockStrategy(ABC):
    """Base class for registry lock strategies."""

    @abstractmethod
    def acquire(
        self,
        path: Path,
        mode: LockMode = LockMode.EXCLUSIVE,
        timeout: float | None = None,
    ) -> LockHandle:
        """Lock ``path``, waiting at most ``timeout`` seconds (None waits forever).

        Raises:
            LockTimeout: If the lock is still held by someone else at the deadline.
        """

    @abstractmethod
    def release(self, handle: LockHandle) -> None:
        """Release a lock from acquire().

        Raises:
            ValueError: If this strategy does not hold the handle.
        """

    @contextmanager
    def lock(
        self,
        path: Path,
        mode: LockMode = LockMode.EXCLUSIVE,
        timeout: float | None = None,
    ) -> Iterator[LockHandle]:
        """Hold a lock for the duration of a ``with`` block."""
        handle = self.acquire(path, mode, timeout)
        try:
            yield handle
        finally:
            self.release(handle)

    def _get_lock_path(self, path: Path) -> Path:
        lock_path = sidecar_path(path)
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        return lock_path


def _poll(attempt: Callable[[], None], path: Path, timeout: float) -> None:
    """Retry a non-blocking lock attempt until it succeeds or time runs out."""
    deadline = time.monotonic() + timeout
    while True:
        try:
            attempt()
            return
        except BlockingIOError:
            if time.monotonic() >= deadline:
                raise LockTimeout(path, timeout)
            time.sleep(_POLL_INTERVAL)


class FcntlLockStrategy(LockStrategy):
    """Advisory ``flock`` locking on the sidecar file.

    Each acquisition opens its own descriptor, so shared locks from one
    strategy coexist and the kernel drops the lock if the process dies.
    """

    def __init__(self) -> None:
        if sys.platform == "win32":
            raise RuntimeError("fcntl locking is not available on Windows")

        import fcntl

        self._fcntl = fcntl
        self._held: dict[int, Path] = {}
        self._guard = threading.Lock()

    def acquire(
        self,
        path: Path,
        mode: LockMode = LockMode.EXCLUSIVE,
        timeout: float | None = None,
    ) -> LockHandle:
        flags = self._fcntl.LOCK_SH if mode is LockMode.SHARED else self._fcntl.LOCK_EX
        fd = os.open(str(self._get_lock_path(path)), os.O_RDWR | os.O_CREAT, 0o666)

        try:
            if timeout is None:
                self._fcntl.flock(fd, flags)
            else:
                _poll(lambda: self._fcntl.flock(fd, flags | self._fcntl.LOCK_NB), path, timeout)
        except BaseException:
            os.close(fd)
            raise

        with self._guard:
            self._held[fd] = path
        logger.debug(f"Locked {path} ({mode.name})")
        return LockHandle(path=path, mode=mode, fd=fd)

    def release(self, handle: LockHandle) -> None:
        with self._guard:
            if handle.fd is None or self._held.pop(handle.fd, None) is None:
                raise ValueError(f"Lock not held: {handle.path}")

        try:
            self._fcntl.flock(handle.fd, self._fcntl.LOCK_UN)
        finally:
            os.close(handle.fd)


class FileLockStrategy(LockStrategy):
    """Locking through ``filelock.FileLock``.

    filelock has no shared mode, so every lock is exclusive. Handles are
    tracked per registry path and thread.
    """

    def __init__(self) -> None:
        self._held: dict[tuple[str, int], filelock.FileLock] = {}
        self._guard = threading.Lock()

    def acquire(
        self,
        path: Path,
        mode: LockMode = LockMode.EXCLUSIVE,
        timeout: float | None = None,
    ) -> LockHandle:
        lock = filelock.FileLock(str(self._get_lock_path(path)))

        try:
            lock.acquire(timeout=-1 if timeout is None else timeout)
        except filelock.Timeout as e:
            raise LockTimeout(path, timeout or 0) from e

        handle = LockHandle(path=path, mode=mode)
        with self._guard:
            self._held[(str(path), handle.thread_id)] = lock
        return handle

    def release(self, handle: LockHandle) -> None:
        with self._guard:
            lock = self._held.pop((str(handle.path), handle.thread_id), None)
        if lock is None:
            raise ValueError(f"Lock not held: {handle.path}")
        lock.release()


class NoOpLockStrategy(LockStrategy):
    """Hands out handles without locking anything."""

    def acquire(
        self,
        path: Path,
        mode: LockMode = LockMode.EXCLUSIVE,
        timeout: float | None = None,
    ) -> LockHandle:
        return LockHandle(path=path, mode=mode)

    def release(self, handle: LockHandle) -> None:
        pass


def get_default_lock_strategy() -> LockStrategy:
    """Use flock where the platform has it, filelock otherwise."""
    if sys.platform != "win32":
        try:
            return FcntlLockStrategy()
        except (ImportError, RuntimeError) as e:
            logger.debug(f"fcntl locking unavailable, using filelock: {e}")
    return FileLockStrategy()


_STRATEGIES: dict[str, Callable[[], LockStrategy]] = {
    "auto": get_default_lock_strategy,
    "fcntl": FcntlLockStrategy,
    "filelock": FileLockStrategy,
    "none": NoOpLockStrategy,
}


def get_lock_strategy(name: str = "auto") -> LockStrategy:
    """Create the strategy named by ``MultilangConfig.lock_strategy``.

    Raises:
        ValueError: If the name is not one of "auto", "fcntl", "filelock", "none".
    """
    try:
        factory = _STRATEGIES[name]
    except KeyError:
        raise ValueError(f"Unknown lock strategy: {name}") from None
    return factory()
