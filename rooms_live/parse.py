# rooms_live/parse.py
"""
Parser for the Wiimmfi room list.

The page is one long ``.table11`` table: a room header row (``<tr id="r...">``)
followed by the player rows of that room (``<tr class="tr0">`` /
``<tr class="tr1">``), then the next header, and so on. The parser walks the
rows in document order and regroups them into ``Room`` objects.

The row helpers only see ``Node``, a small wrapper over a BeautifulSoup tag,
and the text rules are plain string functions so they can be tested on their
own.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List, Optional

from bs4 import BeautifulSoup, Tag

from .config import ROOM_TABLE_MARKER
from .models import (
    Player,
    Room,
    RoomType,
    UNKNOWN_CREATED,
    UNKNOWN_ROOM_ID,
    UNKNOWN_TRACK,
)

ROW_SELECTOR = ".table11 tr"
ROOM_ROW_PREFIX = "r"
PLAYER_ROW_CLASSES = ("tr0", "tr1")

ROOM_LINK = 'a[data-href*="/stats/mkw/list/r"]'
TRACK_LINK = 'a[data-href*="ct.wiimm.de"]'
PLAYER_LINK = 'a[data-href*="/stats/mkw/list/p"]'
NAME_SPAN = "span.mii-font"

MIN_PLAYER_CELLS = 9

WHITESPACE = re.compile(r"\s+")
CREATED = re.compile(r"\(created\s+(.*?)\)")
SHA1 = re.compile(r"SHA1:\s*([\da-f]{40})")
ORDINAL = re.compile(r"^\d+\.\s*")

HEADER_ROW = "header"
DETAIL_ROW = "detail"
IGNORE = "ignore"


class Node:
    """Read-only view of one element of the parsed page."""

    __slots__ = ("_tag",)

    def __init__(self, tag: Tag):
        self._tag = tag

    def attr(self, name: str) -> str:
        value = self._tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value or ""

    def has_class(self, name: str) -> bool:
        return name in (self._tag.get("class") or [])

    def text(self) -> str:
        return self._tag.get_text()

    def cells(self) -> List["Node"]:
        return [Node(td) for td in self._tag.find_all("td")]

    def select_one(self, selector: str) -> Optional["Node"]:
        found = self._tag.select_one(selector)
        return Node(found) if found is not None else None


# ----------------------------------------------------------------------
# Text rules
# ----------------------------------------------------------------------


def collapse_whitespace(text: str) -> str:
    return WHITESPACE.sub(" ", text or "").strip()


def classify_room_type(header_text: str) -> RoomType:
    lowered = (header_text or "").lower()
    if "private room" in lowered:
        return "private"
    if "worldwide room" in lowered:
        return "worldwide"
    return "unknown"


def extract_created(header_text: str) -> Optional[str]:
    """'... (created 2021-01-01 12:00) ...' -> '2021-01-01 12:00'"""
    m = CREATED.search(header_text or "")
    return m.group(1) if m else None


def extract_sha1(header_text: str) -> Optional[str]:
    """Return 'SHA1: <40 hex>' when the header names the track by hash only."""
    m = SHA1.search(header_text or "")
    return f"SHA1: {m.group(1)}" if m else None


def strip_ordinal(text: str) -> str:
    """'3. Host' -> 'Host'"""
    return ORDINAL.sub("", (text or "").strip(), count=1).strip()


def strip_pid_prefix(title: str) -> str:
    return (title or "").replace("pid=", "", 1).strip()


def has_room_table(html: str) -> bool:
    return ROOM_TABLE_MARKER in (html or "")


# ----------------------------------------------------------------------
# Rows
# ----------------------------------------------------------------------


def classify_row(row: Node, room_open: bool) -> str:
    if row.attr("id").startswith(ROOM_ROW_PREFIX):
        return HEADER_ROW
    if room_open and any(row.has_class(c) for c in PLAYER_ROW_CLASSES):
        return DETAIL_ROW
    return IGNORE


def _link_text(row: Node, selector: str) -> Optional[str]:
    link = row.select_one(selector)
    return link.text().strip() if link is not None else None


def parse_room_header(row: Node) -> Room:
    """Build a Room from a header row. Missing fields fall back to defaults."""
    header_text = collapse_whitespace(row.text())

    room_id = _link_text(row, ROOM_LINK)
    created = extract_created(header_text)

    # a track link wins over the hash printed for unnamed tracks
    last_track = _link_text(row, TRACK_LINK)
    if last_track is None:
        last_track = extract_sha1(header_text)

    return Room(
        room_id=room_id if room_id is not None else UNKNOWN_ROOM_ID,
        type=classify_room_type(header_text),
        created=created if created is not None else UNKNOWN_CREATED,
        last_track=last_track if last_track is not None else UNKNOWN_TRACK,
    )


def parse_player_row(row: Node) -> Optional[Player]:
    """Build a Player from a detail row, or None for filler/malformed rows."""
    cols = row.cells()
    if len(cols) < MIN_PLAYER_CELLS:
        return None

    fc_link = cols[0].select_one(PLAYER_LINK)
    name_span = cols[8].select_one(NAME_SPAN)
    if fc_link is None or name_span is None:
        return None

    region, room_mode, world, conn_fail, ev, eb = (c.text().strip() for c in cols[2:8])

    return Player(
        pid=strip_pid_prefix(cols[0].attr("title")),
        fc=fc_link.text().strip(),
        role=strip_ordinal(cols[1].text()),
        region=region,
        room_mode=room_mode,
        world=world,
        conn_fail=conn_fail,
        ev=ev,
        eb=eb,
        name=name_span.text().strip(),
    )


# ----------------------------------------------------------------------
# Table
# ----------------------------------------------------------------------


def iter_rows(html: str) -> Iterator[Node]:
    soup = BeautifulSoup(html or "", "html.parser")
    for tr in soup.select(ROW_SELECTOR):
        yield Node(tr)


def assemble_rooms(rows: Iterable[Node]) -> List[Room]:
    rooms: List[Room] = []
    current: Optional[Room] = None

    for row in rows:
        kind = classify_row(row, current is not None)
        if kind == HEADER_ROW:
            if current is not None:
                rooms.append(current)
            current = parse_room_header(row)
        elif kind == DETAIL_ROW:
            player = parse_player_row(row)
            if player is not None:
                current.players.append(player)

    if current is not None:
        rooms.append(current)
    return rooms


def parse_rooms(html: str) -> List[Room]:
    return assemble_rooms(iter_rows(html))
