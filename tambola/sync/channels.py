"""Message channels carrying engine output to display screens.

The engine only knows the :class:`Channel` interface. Concrete channels
decide how snapshots, winner events and the roster travel: kept in memory,
written to a shared SQL key-value store, or posted over HTTP.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable, Optional
from urllib.parse import urljoin

import requests
from sqlalchemy.orm import sessionmaker

from ..config import DISPLAY_URL, HTTP_TIMEOUT
from ..errors import ChannelError
from ..game.events import GameSnapshot, WinnerEvent
from ..game.participant import Participant
from ..models import AnnouncementRecord, SharedStateEntry
from ..roster import roster_payload

logger = logging.getLogger(__name__)

STATE_KEY = "tambolaGameState"
WINNER_KEY = "tambolaWinner"
ROSTER_KEY = "tambolaParticipants"
DISPLAY_READY_KEY = "tambolaDisplayReady"


def _now_millis() -> int:
    return int(time.time() * 1000)


def state_message(snapshot: GameSnapshot) -> dict[str, Any]:
    return {**snapshot.to_json(), "timestamp": _now_millis()}


def winner_message(event: WinnerEvent) -> dict[str, Any]:
    return {**event.to_json(), "timestamp": _now_millis()}


class Channel:
    """Sink for engine output. Subclasses implement the three publishers."""

    def publish_state(self, snapshot: GameSnapshot) -> None:
        raise NotImplementedError

    def publish_winner(self, event: WinnerEvent) -> None:
        raise NotImplementedError

    def publish_roster(self, participants: Iterable[Participant]) -> None:
        raise NotImplementedError


class MemoryChannel(Channel):
    """Keeps every message in order; handy for tests and in-process displays.

    Parameters
    ----------
    listener : Optional[Callable[[str, dict], None]], default: None
        Called as ``listener(kind, message)`` after each message is stored,
        with ``kind`` one of ``"state"``, ``"winner"`` or ``"roster"``.
    """

    def __init__(self, listener: Optional[Callable[[str, dict], None]] = None) -> None:
        self.states: list[dict[str, Any]] = []
        self.winners: list[dict[str, Any]] = []
        self.rosters: list[dict[str, Any]] = []
        self._listener = listener

    def publish_state(self, snapshot: GameSnapshot) -> None:
        self._store("state", self.states, state_message(snapshot))

    def publish_winner(self, event: WinnerEvent) -> None:
        self._store("winner", self.winners, winner_message(event))

    def publish_roster(self, participants: Iterable[Participant]) -> None:
        self._store("roster", self.rosters, roster_payload(participants))

    @property
    def last_state(self) -> Optional[dict[str, Any]]:
        return self.states[-1] if self.states else None

    def _store(self, kind: str, bucket: list, message: dict[str, Any]) -> None:
        bucket.append(message)
        if self._listener is not None:
            self._listener(kind, message)


class DatabaseChannel(Channel):
    """Shared key-value store in a SQL database.

    Mirrors the browser storage keys: the latest snapshot under
    ``tambolaGameState``, the latest winner under ``tambolaWinner`` and the
    roster under ``tambolaParticipants``. Winners are also appended to the
    announcement log so a slow poller never misses one.

    Parameters
    ----------
    session_factory : sessionmaker
        Factory producing sessions bound to the store's engine. Each publish
        runs in its own committed transaction.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._sessions = session_factory

    def publish_state(self, snapshot: GameSnapshot) -> None:
        with self._sessions.begin() as session:
            SharedStateEntry.put(session, STATE_KEY, snapshot.to_json())

    def publish_winner(self, event: WinnerEvent) -> None:
        with self._sessions.begin() as session:
            SharedStateEntry.put(session, WINNER_KEY, event.to_json())
            session.add(
                AnnouncementRecord(
                    category=event.category.value,
                    participant_name=event.participant_name,
                    rank_label=event.rank_label,
                    display_name=event.display_name,
                )
            )

    def publish_roster(self, participants: Iterable[Participant]) -> None:
        with self._sessions.begin() as session:
            SharedStateEntry.put(session, ROSTER_KEY, roster_payload(participants))

    def read(self, key: str) -> Optional[Any]:
        """Decoded payload stored under ``key``, or ``None`` if never written."""
        with self._sessions() as session:
            entry = SharedStateEntry.get(session, key)
            return entry.payload if entry is not None else None

    def read_entry(self, key: str) -> Optional[dict[str, Any]]:
        """Payload plus ``version`` and ``timestamp`` for change detection."""
        with self._sessions() as session:
            entry = SharedStateEntry.get(session, key)
            return entry.to_json() if entry is not None else None

    def announcements_since(self, last_id: int = 0) -> list[dict[str, Any]]:
        with self._sessions() as session:
            return [record.to_json() for record in AnnouncementRecord.since(session, last_id)]

    def signal_display_ready(self) -> None:
        """Called by a display screen once it is listening."""
        with self._sessions.begin() as session:
            SharedStateEntry.put(session, DISPLAY_READY_KEY, True)

    def display_ready(self) -> bool:
        return bool(self.read(DISPLAY_READY_KEY))

    def dispose(self) -> None:
        """Release the pooled connections of the store's engine."""
        bind = self._sessions.kw.get("bind")
        if bind is not None:
            bind.dispose()


class HttpChannel(Channel):
    """POST engine output as JSON to a display service.

    Parameters
    ----------
    base_url : Optional[str], default: None
        Base URL of the display service. Defaults to ``TAMBOLA_DISPLAY_URL``.
    session : Optional[requests.Session], default: None
        Session used for requests; a new one is created when omitted.
    timeout : float, default: HTTP_TIMEOUT
        Per-request timeout in seconds.
    """

    STATE_PATH = "/api/v1/state"
    WINNER_PATH = "/api/v1/winner"
    ROSTER_PATH = "/api/v1/roster"

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = HTTP_TIMEOUT,
    ) -> None:
        url = base_url or DISPLAY_URL
        if not url:
            raise ValueError("Environment variable 'TAMBOLA_DISPLAY_URL' is not set")
        self.base_url = url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def publish_state(self, snapshot: GameSnapshot) -> None:
        self._post(self.STATE_PATH, state_message(snapshot))

    def publish_winner(self, event: WinnerEvent) -> None:
        self._post(self.WINNER_PATH, winner_message(event))

    def publish_roster(self, participants: Iterable[Participant]) -> None:
        self._post(self.ROSTER_PATH, roster_payload(participants))

    def _post(self, path: str, payload: dict[str, Any]) -> Any:
        url = urljoin(self.base_url + "/", path.lstrip("/"))
        try:
            r = self.session.post(
                url,
                json=payload,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            r.raise_for_status()
        except requests.RequestException as e:
            logger.critical(f"Error occurred while publishing to {url}: {e}")
            raise ChannelError(f"Failed to publish to {url}: {e}") from e
        return r.json() if r.content else None


__all__ = [
    "Channel",
    "DISPLAY_READY_KEY",
    "DatabaseChannel",
    "HttpChannel",
    "MemoryChannel",
    "ROSTER_KEY",
    "STATE_KEY",
    "WINNER_KEY",
    "state_message",
    "winner_message",
]
