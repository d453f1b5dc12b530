from __future__ import annotations

import asyncio
import fcntl
import json
import logging
import os
import tempfile
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from time import monotonic
from typing import Any, AsyncIterator

from services.agent_store.records import STORE_VERSION, new_store_document

logger = logging.getLogger("agentstore.store")

LOAD_LOADED = "loaded"
LOAD_DEFAULTED = "defaulted"
LOAD_CORRUPT = "corrupt"

DEFAULT_LOCK_TIMEOUT_S = 10.0
LOCK_RETRY_DELAY_S = 0.05


class StoreClosedError(RuntimeError):
    pass


class StoreLockTimeout(TimeoutError):
    def __init__(self, lock_path: Path, timeout_s: float) -> None:
        super().__init__(f"Could not acquire lock on {lock_path} after {timeout_s}s")
        self.lock_path = lock_path
        self.timeout_s = timeout_s


@dataclass(frozen=True)
class StoreLoad:
    """Outcome of reading the store file.

    ``defaulted`` means there was no file yet, ``corrupt`` means the file was
    unreadable and ``reason`` says why. Both carry a fresh empty document.
    """

    state: str
    document: dict[str, Any]
    reason: str = ""

    @property
    def defaulted(self) -> bool:
        return self.state == LOAD_DEFAULTED

    @property
    def corrupt(self) -> bool:
        return self.state == LOAD_CORRUPT


@dataclass
class StoreSession:
    document: dict[str, Any]
    dirty: bool = field(default=False)

    @property
    def agents(self) -> dict[str, dict[str, Any]]:
        return self.document["agents"]

    def mark_dirty(self) -> None:
        self.dirty = True


class AgentStore:
    def __init__(self, path: Path | str, lock_timeout_s: float = DEFAULT_LOCK_TIMEOUT_S) -> None:
        self.path = Path(path)
        self.lock_path = self.path.with_name(f"{self.path.name}.lock")
        self.lock_timeout_s = max(0.0, float(lock_timeout_s))
        self._lock = asyncio.Lock()
        self._closed = False

    @classmethod
    def from_settings(cls, settings: Any) -> "AgentStore":
        return cls(settings.store_path, lock_timeout_s=settings.lock_timeout_s)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> "AgentStore":
        self._ensure_open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreClosedError(f"agent store at {self.path} is closed")

    def load(self) -> StoreLoad:
        self._ensure_open()
        if not self.path.exists():
            return StoreLoad(state=LOAD_DEFAULTED, document=new_store_document())
        try:
            loaded = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            return self._corrupt(str(exc))
        if not isinstance(loaded, dict):
            return self._corrupt("store root is not an object")
        agents = loaded.setdefault("agents", {})
        if not isinstance(agents, dict):
            return self._corrupt("'agents' is not an object")
        for agent_id, record in agents.items():
            if not isinstance(record, dict):
                return self._corrupt(f"record '{agent_id}' is not an object")
        loaded.setdefault("version", STORE_VERSION)
        return StoreLoad(state=LOAD_LOADED, document=loaded)

    def _corrupt(self, reason: str) -> StoreLoad:
        logger.warning("Agent store %s is unreadable, treating as empty: %s", self.path, reason)
        return StoreLoad(state=LOAD_CORRUPT, document=new_store_document(), reason=reason)

    def save(self, document: dict[str, Any]) -> Path:
        self._ensure_open()
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=str(directory))
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2, ensure_ascii=False)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self.path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
        logger.debug("Saved %d agent record(s) to %s", len(document.get("agents", {})), self.path)
        return self.path

    @asynccontextmanager
    async def mutate(self) -> AsyncIterator[StoreSession]:
        """Hold both locks around one load-modify-save cycle.

        The document is written back on a clean exit only when the block
        called ``mark_dirty``.
        """
        self._ensure_open()
        async with self._lock:
            fd = await self._acquire_file_lock()
            try:
                session = StoreSession(document=self.load().document)
                yield session
                if session.dirty:
                    self.save(session.document)
            finally:
                fcntl.flock(fd, fcntl.LOCK_UN)
                os.close(fd)

    async def _acquire_file_lock(self) -> int:
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.lock_path, os.O_RDWR | os.O_CREAT, 0o644)
        deadline = monotonic() + self.lock_timeout_s
        acquired = False
        try:
            while True:
                try:
                    fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                    acquired = True
                    return fd
                except BlockingIOError:
                    if monotonic() >= deadline:
                        logger.warning("Timed out after %.2fs waiting for %s", self.lock_timeout_s, self.lock_path)
                        raise StoreLockTimeout(self.lock_path, self.lock_timeout_s) from None
                    await asyncio.sleep(LOCK_RETRY_DELAY_S)
        finally:
            # also reached on cancellation while sleeping
            if not acquired:
                os.close(fd)


__all__ = [
    "AgentStore",
    "LOAD_CORRUPT",
    "LOAD_DEFAULTED",
    "LOAD_LOADED",
    "StoreClosedError",
    "StoreLoad",
    "StoreLockTimeout",
    "StoreSession",
]
