"""File-backed ticker cache.

The whole table is read into memory on construction and written back as one
flat JSON object ``{identity_key: {"ticker": ..., "currency": ...}}``.

Writes are debounced: each ``set`` (re)schedules a single delayed write so a
burst of updates produces one file write. Callers must call :meth:`flush`
(or use the cache as a context manager) before the process exits; pending
writes are not persisted otherwise.

Atomicity: writes target ``<path>.tmp`` first and then ``os.replace`` into place.
"""

from __future__ import annotations

import contextlib
import json
import os
import threading
from os import PathLike
from pathlib import Path
from types import TracebackType

from pydantic import ValidationError

from .logging_setup import get_logger
from .models import TickerCacheFile, TickerResolution

DEFAULT_DEBOUNCE_SECONDS = 0.5

_logger = get_logger("broker_parser.cache")


class LocalFileTickerCache:
    """:class:`~broker_parser.enricher.TickerCache` persisted to a JSON file.

    A missing or unreadable file starts the cache empty. Failed writes are
    logged and the in-memory table stays authoritative for the process.
    ``debounce_seconds <= 0`` writes synchronously on every ``set``.
    """

    def __init__(
        self,
        path: str | PathLike[str],
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self.path = Path(path)
        self.debounce_seconds = debounce_seconds
        self._lock = threading.RLock()
        self._timer: threading.Timer | None = None
        self._dirty = False
        self._table: dict[str, TickerResolution] = self._load()

    # ------------------------------------------------------------------
    # TickerCache
    # ------------------------------------------------------------------

    async def get(self, key: str) -> TickerResolution | None:
        with self._lock:
            return self._table.get(key)

    async def set(self, key: str, value: TickerResolution) -> None:
        with self._lock:
            self._table[key] = value
            self._dirty = True
            if self.debounce_seconds <= 0:
                self._write()
            else:
                self._schedule()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def flush(self) -> None:
        """Cancel any pending delayed write and persist now if there are changes."""

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if self._dirty:
                self._write()

    def __enter__(self) -> LocalFileTickerCache:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.flush()

    def __len__(self) -> int:
        with self._lock:
            return len(self._table)

    def _load(self) -> dict[str, TickerResolution]:
        if not self.path.exists():
            return {}
        try:
            parsed = TickerCacheFile.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValidationError):
            _logger.warning(
                "ticker cache unreadable; starting empty path=%s",
                os.fspath(self.path),
                exc_info=True,
            )
            return {}
        _logger.debug("ticker cache loaded entries=%d path=%s", len(parsed.root), self.path)
        return dict(parsed.root)

    def _schedule(self) -> None:
        # Caller holds the lock.
        if self._timer is not None:
            self._timer.cancel()
        timer = threading.Timer(self.debounce_seconds, self._on_timer)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _on_timer(self) -> None:
        with self._lock:
            # A newer timer was scheduled while this one waited on the lock.
            if self._timer is not threading.current_thread():
                return
            self._timer = None
            if self._dirty:
                self._write()

    def _write(self) -> None:
        # Caller holds the lock.
        payload = TickerCacheFile(dict(self._table)).model_dump(mode="json")
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(
                json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True),
                encoding="utf-8",
            )
            os.replace(tmp, self.path)
        except OSError:
            with contextlib.suppress(OSError):
                tmp.unlink()
            _logger.warning(
                "ticker cache write failed path=%s", os.fspath(self.path), exc_info=True
            )
            return
        self._dirty = False
        _logger.debug("ticker cache written entries=%d path=%s", len(self._table), self.path)


__all__ = ["DEFAULT_DEBOUNCE_SECONDS", "LocalFileTickerCache"]
