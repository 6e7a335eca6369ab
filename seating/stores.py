"""Input records and the store contracts the allocation engine reads from.

The engine never talks to a database directly. It asks four narrow
collaborators for plain records:

- `TimeSlotStore`: time slot -> ordered session ids
- `RoomStore`: room ids -> grid dimensions
- `EnrollmentStore`: session ids -> sections with roster or headcount
- `ConstraintStore`: owner -> most recently saved constraint record

`InMemorySeatingStore` implements all four and is what the demo script and the
tests use. `load_store_from_json` fills one from a JSON document.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from .constraints import FILL_ORDERS, ROLL_NO_ORDERS, StoredConstraint
from .validators import (
    raise_if_invalid,
    validate_choice,
    validate_id,
    validate_room_dimensions,
    validate_section,
)


DEFAULT_DATA_FILENAME = "sample_seating_problem.json"


# ----------------------------
# Records
# ----------------------------


@dataclass(frozen=True)
class SectionRecord:
    section_id: str
    name: str
    roll_numbers: Tuple[str, ...] = ()
    student_count: int = 0  # used only when roll_numbers is empty


@dataclass(frozen=True)
class SessionRecord:
    session_id: str
    name: str
    owner_id: str
    sections: Tuple[SectionRecord, ...] = ()


@dataclass(frozen=True)
class RoomRecord:
    room_id: str
    name: str
    rows: int
    columns: int
    owner_id: str

    @property
    def capacity(self) -> int:
        return self.rows * self.columns


@dataclass(frozen=True)
class TimeSlotRecord:
    time_slot_id: str
    time: str
    owner_id: str
    session_ids: Tuple[str, ...] = ()


# ----------------------------
# Store contracts
# ----------------------------


class TimeSlotStore(Protocol):
    def get_time_slot(self, time_slot_id: str) -> Optional[TimeSlotRecord]:  # pragma: no cover
        """Return the time slot or None."""


class RoomStore(Protocol):
    def find_rooms(self, room_ids: Iterable[str]) -> List[RoomRecord]:  # pragma: no cover
        """Return the rooms that exist among `room_ids` (any order)."""


class EnrollmentStore(Protocol):
    def find_sessions(self, session_ids: Iterable[str]) -> List[SessionRecord]:  # pragma: no cover
        """Return the sessions that exist among `session_ids` (any order)."""


class ConstraintStore(Protocol):
    def latest_constraints(self, owner_id: str) -> Optional[StoredConstraint]:  # pragma: no cover
        """Return the most recently created constraint record of `owner_id`."""


class SeatingStore(TimeSlotStore, RoomStore, EnrollmentStore, ConstraintStore, Protocol):
    """Everything the allocation engine reads."""


# ----------------------------
# In-memory implementation
# ----------------------------


@dataclass
class InMemorySeatingStore:
    rooms: Dict[str, RoomRecord] = field(default_factory=dict)
    sessions: Dict[str, SessionRecord] = field(default_factory=dict)
    time_slots: Dict[str, TimeSlotRecord] = field(default_factory=dict)
    constraints: List[StoredConstraint] = field(default_factory=list)

    def add_room(self, room: RoomRecord) -> RoomRecord:
        raise_if_invalid(validate_id(room.room_id, "Room ID"))
        raise_if_invalid(validate_room_dimensions(rows=room.rows, columns=room.columns))
        self.rooms[room.room_id] = room
        return room

    def add_session(self, session: SessionRecord) -> SessionRecord:
        raise_if_invalid(validate_id(session.session_id, "Session ID"))
        for sec in session.sections:
            raise_if_invalid(
                validate_section(name=sec.name, roll_numbers=sec.roll_numbers, student_count=sec.student_count)
            )
        self.sessions[session.session_id] = session
        return session

    def add_time_slot(self, time_slot: TimeSlotRecord) -> TimeSlotRecord:
        raise_if_invalid(validate_id(time_slot.time_slot_id, "Time slot ID"))
        self.time_slots[time_slot.time_slot_id] = time_slot
        return time_slot

    def save_constraints(self, record: StoredConstraint) -> StoredConstraint:
        if record.fill_order is not None:
            raise_if_invalid(validate_choice(record.fill_order, "fill_order", FILL_ORDERS))
        if record.roll_no_order is not None:
            raise_if_invalid(validate_choice(record.roll_no_order, "roll_no_order", ROLL_NO_ORDERS))
        self.constraints.append(record)
        return record

    def get_time_slot(self, time_slot_id: str) -> Optional[TimeSlotRecord]:
        return self.time_slots.get(time_slot_id)

    def find_rooms(self, room_ids: Iterable[str]) -> List[RoomRecord]:
        return [self.rooms[rid] for rid in dict.fromkeys(room_ids) if rid in self.rooms]

    def find_sessions(self, session_ids: Iterable[str]) -> List[SessionRecord]:
        return [self.sessions[sid] for sid in dict.fromkeys(session_ids) if sid in self.sessions]

    def latest_constraints(self, owner_id: str) -> Optional[StoredConstraint]:
        # Latest created_at wins; on equal timestamps the later save wins.
        latest: Optional[StoredConstraint] = None
        for record in self.constraints:
            if record.owner_id != owner_id:
                continue
            if latest is None or record.created_at >= latest.created_at:
                latest = record
        return latest


# -------------------------------------------------
# Loading
# -------------------------------------------------


def default_data_path() -> Path:
    """Resolve the demo data file.

    Uses `SEAT_PLANNER_DATA` env var if set, else `data/` at the project root.
    """

    override = os.getenv("SEAT_PLANNER_DATA")
    if override:
        return Path(override).expanduser().resolve()

    return (Path(__file__).resolve().parents[1] / "data" / DEFAULT_DATA_FILENAME).resolve()


def _section_from_raw(raw: dict) -> SectionRecord:
    return SectionRecord(
        section_id=str(raw["section_id"]),
        name=str(raw["name"]),
        roll_numbers=tuple(str(rn) for rn in raw.get("roll_numbers", [])),
        student_count=int(raw.get("student_count", 0) or 0),
    )


def load_store_from_json(path: str) -> InMemorySeatingStore:
    """Load an `InMemorySeatingStore` from a JSON file.

    Records without an `owner_id` inherit the top-level one.
    """

    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    default_owner = str(raw.get("owner_id", ""))
    store = InMemorySeatingStore()

    for r in raw.get("rooms", []):
        store.add_room(
            RoomRecord(
                room_id=str(r["room_id"]),
                name=str(r.get("name", r["room_id"])),
                rows=int(r["rows"]),
                columns=int(r["columns"]),
                owner_id=str(r.get("owner_id", default_owner)),
            )
        )

    for s in raw.get("sessions", []):
        store.add_session(
            SessionRecord(
                session_id=str(s["session_id"]),
                name=str(s.get("name", s["session_id"])),
                owner_id=str(s.get("owner_id", default_owner)),
                sections=tuple(_section_from_raw(sec) for sec in s.get("sections", [])),
            )
        )

    for t in raw.get("time_slots", []):
        store.add_time_slot(
            TimeSlotRecord(
                time_slot_id=str(t["time_slot_id"]),
                time=str(t.get("time", "")),
                owner_id=str(t.get("owner_id", default_owner)),
                session_ids=tuple(str(sid) for sid in t.get("session_ids", [])),
            )
        )

    for c in raw.get("constraints", []):
        store.save_constraints(
            StoredConstraint(
                owner_id=str(c.get("owner_id", default_owner)),
                created_at=str(c.get("created_at", "")),
                no_adjacent_same_session=c.get("no_adjacent_same_session"),
                allow_adjacent_same_session=bool(c.get("allow_adjacent_same_session", False)),
                fill_order=c.get("fill_order", "row"),
                roll_no_order=c.get("roll_no_order", "sequential"),
                alternate_sessions_enabled=bool(c.get("alternate_sessions_enabled", False)),
                random_shuffle=bool(c.get("random_shuffle", False)),
            )
        )

    return store
