# rooms_live/models.py
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import List, Literal, Optional, Tuple

RoomType = Literal["private", "worldwide", "unknown"]
SnapshotSource = Literal["live", "fallback", "empty"]

UNKNOWN_ROOM_ID = "Unknown"
UNKNOWN_CREATED = "unknown"
UNKNOWN_TRACK = "—unknown—"


@dataclass
class Player:
    """One row of a room's player table."""
    pid: str
    fc: str
    role: str
    region: str
    room_mode: str
    world: str
    conn_fail: str
    ev: str
    eb: str
    name: str


@dataclass
class Room:
    """
    Room header fields plus the players listed under it.

    Field order is the key order of the JSON output.
    """
    room_id: str = UNKNOWN_ROOM_ID
    type: RoomType = "unknown"
    created: str = UNKNOWN_CREATED
    last_track: str = UNKNOWN_TRACK
    players: List[Player] = field(default_factory=list)


@dataclass(frozen=True)
class Snapshot:
    """
    The serialized room list served to clients.

    The body is rendered once when the snapshot is built, so every reader
    gets the same bytes.
    """
    rooms: Tuple[Room, ...]
    body: str
    produced_at: datetime
    source: SnapshotSource

    @classmethod
    def from_rooms(
        cls,
        rooms: List[Room],
        source: SnapshotSource = "live",
        produced_at: Optional[datetime] = None,
    ) -> "Snapshot":
        body = json.dumps([asdict(r) for r in rooms], indent=2, ensure_ascii=False)
        return cls(
            rooms=tuple(rooms),
            body=body,
            produced_at=produced_at or datetime.now(timezone.utc),
            source=source,
        )

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls.from_rooms([], source="empty")

    def summary(self) -> dict:
        return {
            "produced_at": self.produced_at.isoformat(),
            "source": self.source,
            "rooms": len(self.rooms),
        }
