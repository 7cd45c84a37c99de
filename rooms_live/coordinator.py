# rooms_live/coordinator.py
"""
Single-flight refresh of the room snapshot.

At most one fetch-and-parse cycle runs at a time. Callers that lose the race
to start a cycle get whatever snapshot is current (possibly none) and return
right away; they never wait on the browser.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional, Protocol

from . import config
from .models import Snapshot
from .parse import has_room_table, parse_rooms

logger = logging.getLogger(__name__)


class StructuralMismatch(Exception):
    """Raised when a fetched page has no room table."""


class DocumentSource(Protocol):
    def ensure_ready(self) -> None: ...

    def fetch_document(self, url: str, timeout_ms: int) -> str: ...


class LocalDocuments(Protocol):
    def load_local_document(self, name: str) -> Optional[str]: ...


class FetchState:
    """The fetching flag and the current snapshot, behind one lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._fetching = False
        self._snapshot: Optional[Snapshot] = None

    @property
    def snapshot(self) -> Optional[Snapshot]:
        with self._lock:
            return self._snapshot

    @property
    def fetching(self) -> bool:
        with self._lock:
            return self._fetching

    def try_begin_cycle(self) -> bool:
        """Mark a cycle as running. False if one already is."""
        with self._lock:
            if self._fetching:
                return False
            self._fetching = True
            return True

    def end_cycle(self, snapshot: Optional[Snapshot] = None) -> Optional[Snapshot]:
        """Clear the flag, install `snapshot` if given, return the current one."""
        with self._lock:
            if snapshot is not None:
                self._snapshot = snapshot
            self._fetching = False
            return self._snapshot


class FetchCoordinator:
    def __init__(
        self,
        session: DocumentSource,
        fallback: LocalDocuments,
        *,
        url: str = config.WIIMMFI_URL,
        timeout_ms: int = config.FETCH_TIMEOUT_MS,
        fallback_name: str = config.FALLBACK_FILE,
        state: Optional[FetchState] = None,
    ):
        self.session = session
        self.fallback = fallback
        self.url = url
        self.timeout_ms = timeout_ms
        self.fallback_name = fallback_name
        self.state = state or FetchState()

    def current(self) -> Optional[Snapshot]:
        return self.state.snapshot

    def refresh(self) -> Optional[Snapshot]:
        """
        Run one cycle unless another is running.

        Returns the snapshot current after the call, which is None only on a
        cold start while another caller's cycle is still running.
        """
        if not self.state.try_begin_cycle():
            return self.state.snapshot

        fresh: Optional[Snapshot] = None
        try:
            fresh = self._run_cycle(had_snapshot=self.state.snapshot is not None)
        finally:
            current = self.state.end_cycle(fresh)
        return current

    def _run_cycle(self, had_snapshot: bool) -> Optional[Snapshot]:
        try:
            self.session.ensure_ready()
            html = self.session.fetch_document(self.url, self.timeout_ms)
            if not has_room_table(html):
                raise StructuralMismatch(f"No room table in page from {self.url}")
            rooms = parse_rooms(html)
        except StructuralMismatch as e:
            logger.warning("%s, falling back to local HTML.", e)
            return self._from_fallback()
        except Exception:
            logger.exception("Error during scraping")
            if had_snapshot:
                # keep serving the previous snapshot
                return None
            return self._from_fallback()

        logger.info("Fetched %d rooms.", len(rooms))
        return Snapshot.from_rooms(rooms, source="live")

    def _from_fallback(self) -> Snapshot:
        html = self.fallback.load_local_document(self.fallback_name)
        if html is None:
            logger.warning("No local fallback file %r, serving an empty room list.", self.fallback_name)
            return Snapshot.empty()
        rooms = parse_rooms(html)
        logger.info("Parsed %d rooms offline.", len(rooms))
        return Snapshot.from_rooms(rooms, source="fallback")
