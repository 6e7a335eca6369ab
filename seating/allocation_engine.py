"""Seating plan generation for one exam time slot.

`AllocationEngine.generate` turns a time slot (its exam sessions), a list of
rooms and the requester's constraint configuration into one seat-by-seat plan
per room.

Pipeline
--------
1. Resolve constraints (latest saved by the requester, else defaults).
2. Validate inputs; every failure raises a `SeatingError` before any seat is
   written.
3. Build the student pool and check total seats >= total students.
4. For each room, in the order given: walk the cells in fill order, collect the
   sessions already seated next to the cell, and ask the pool for a student
   from another session. Cells left over once the pool is empty stay empty.

It is a single greedy forward pass with no backtracking. When the adjacency
rule cannot be honoured the student is seated anyway (see
`StudentPool.take_next`).
"""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from .capacity import total_capacity
from .constraints import ConstraintConfig, normalize_constraints
from .errors import CapacityExceededError, EmptyInputError, NotFoundError, OwnershipError
from .seat_grid import Seat, SeatGrid
from .stores import RoomRecord, SeatingStore, SessionRecord, TimeSlotRecord
from .student_pool import StudentPool, build_student_pool


LOG = logging.getLogger(__name__)


# ----------------------------
# Output models
# ----------------------------


@dataclass(frozen=True)
class SeatingPlan:
    plan_id: str
    room_id: str
    time_slot_id: str
    seats: List[List[Dict[str, object]]]
    generated_at: str

    @property
    def rows(self) -> int:
        return len(self.seats)

    @property
    def columns(self) -> int:
        return len(self.seats[0]) if self.seats else 0

    def occupied_seats(self) -> List[Dict[str, object]]:
        return [seat for row in self.seats for seat in row if not seat["is_empty"]]


@dataclass(frozen=True)
class GenerationResult:
    time_slot_id: str
    plans: List[SeatingPlan]
    generated_at: str
    constraints: ConstraintConfig
    total_students: int
    total_seats: int


@dataclass(frozen=True)
class RoomFillStats:
    placed: int
    empty: int
    fallbacks: int  # students seated next to their own session because nothing else was left


# -------------------------------------------------
# Room filling
# -------------------------------------------------


def occupied_neighbor_sessions(grid: SeatGrid, seat: Seat) -> Set[str]:
    """Sessions sitting on seats that touch `seat` (unfilled seats have none)."""

    return {n.session_id for n in grid.get_neighbors(seat) if n.session_id}


def fill_room(grid: SeatGrid, pool: StudentPool, constraints: ConstraintConfig) -> RoomFillStats:
    """Fill `grid` from `pool` in a single pass."""

    placed = 0
    empty = 0
    fallbacks = 0

    for r, c in grid.iter_cells(constraints.fill_order):
        seat = grid.get_seat(r, c)
        avoid = occupied_neighbor_sessions(grid, seat) if constraints.no_adjacent_same_session else set()

        result = pool.take_next(avoid)
        if result is None:
            empty += 1
            continue

        if result.session_id in avoid:
            fallbacks += 1

        token = result.token
        seat.assign(token.session_id, token.section_id, token.roll_no)
        placed += 1

    return RoomFillStats(placed=placed, empty=empty, fallbacks=fallbacks)


def _new_plan_id(room_id: str) -> str:
    return f"plan-{room_id}-{uuid.uuid4().hex[:12]}"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


# -------------------------------------------------
# Engine
# -------------------------------------------------


class AllocationEngine:
    """Generate seating plans from the records in `store`.

    Args:
        store: Anything implementing the four store contracts.
        rng: Source for roster shuffling; defaults to the `random` module.
        clock: Returns the ISO timestamp stamped on generated plans.
    """

    def __init__(
        self,
        store: SeatingStore,
        *,
        rng: Optional[random.Random] = None,
        clock: Callable[[], str] = _utc_now,
    ) -> None:
        self.store = store
        self.rng = rng
        self.clock = clock

    def resolve_constraints(self, requester_id: str) -> ConstraintConfig:
        return normalize_constraints(self.store.latest_constraints(requester_id))

    def _load_time_slot(self, time_slot_id: str, requester_id: str) -> TimeSlotRecord:
        time_slot = self.store.get_time_slot(time_slot_id)
        if time_slot is None or time_slot.owner_id != requester_id:
            raise NotFoundError("TimeSlot not found")
        if not time_slot.session_ids:
            raise EmptyInputError("TimeSlot has no sessions assigned")
        return time_slot

    def _load_rooms(self, room_ids: Sequence[str], requester_id: str) -> List[RoomRecord]:
        if not room_ids:
            raise EmptyInputError("No rooms selected")

        found = {r.room_id: r for r in self.store.find_rooms(room_ids) if r.owner_id == requester_id}
        missing = [rid for rid in room_ids if rid not in found]
        if missing:
            raise NotFoundError(f"Rooms not found: {', '.join(missing)}")

        # Requested order, duplicates dropped.
        return [found[rid] for rid in dict.fromkeys(room_ids)]

    def _load_sessions(self, session_ids: Sequence[str], requester_id: str) -> List[SessionRecord]:
        found = {s.session_id: s for s in self.store.find_sessions(session_ids)}
        missing = [sid for sid in session_ids if sid not in found]
        if missing:
            raise NotFoundError(f"Sessions not found: {', '.join(missing)}")

        foreign = [sid for sid in session_ids if found[sid].owner_id != requester_id]
        if foreign:
            raise OwnershipError("Some sessions do not belong to the user")

        return [found[sid] for sid in dict.fromkeys(session_ids)]

    def generate(self, time_slot_id: str, room_ids: Sequence[str], requester_id: str) -> GenerationResult:
        """Generate one seating plan per room for the time slot.

        Raises:
            NotFoundError, EmptyInputError, OwnershipError, CapacityExceededError
        """

        LOG.info("Generating seating plans for time slot %s over %d room(s)", time_slot_id, len(room_ids or ()))

        constraints = self.resolve_constraints(requester_id)
        time_slot = self._load_time_slot(time_slot_id, requester_id)
        rooms = self._load_rooms(list(room_ids or ()), requester_id)
        sessions = self._load_sessions(list(time_slot.session_ids), requester_id)

        pool = build_student_pool(sessions, constraints, rng=self.rng)
        students = pool.total_students
        seats = total_capacity(rooms)
        if seats < students:
            LOG.warning("Capacity exceeded for time slot %s: %d students, %d seats", time_slot_id, students, seats)
            raise CapacityExceededError(students, seats)

        generated_at = self.clock()
        plans: List[SeatingPlan] = []

        for room in rooms:
            grid = SeatGrid(room.room_id, room.rows, room.columns)
            stats = fill_room(grid, pool, constraints)
            LOG.debug("Room %s: %d placed, %d empty", room.room_id, stats.placed, stats.empty)
            if stats.fallbacks:
                LOG.warning(
                    "Room %s: %d student(s) seated next to their own session (no other session left)",
                    room.room_id,
                    stats.fallbacks,
                )

            plans.append(
                SeatingPlan(
                    plan_id=_new_plan_id(room.room_id),
                    room_id=room.room_id,
                    time_slot_id=time_slot.time_slot_id,
                    seats=grid.seats_view(),
                    generated_at=generated_at,
                )
            )

        LOG.info("Generated %d plan(s): %d students, %d seats", len(plans), students, seats)

        return GenerationResult(
            time_slot_id=time_slot.time_slot_id,
            plans=plans,
            generated_at=generated_at,
            constraints=constraints,
            total_students=students,
            total_seats=seats,
        )


def generate_plans_for_time_slot(
    store: SeatingStore,
    time_slot_id: str,
    room_ids: Sequence[str],
    requester_id: str,
    *,
    rng: Optional[random.Random] = None,
) -> GenerationResult:
    return AllocationEngine(store, rng=rng).generate(time_slot_id, room_ids, requester_id)


# -------------------------------------------------
# Metrics
# -------------------------------------------------


def adjacency_violations(seats: List[List[Dict[str, object]]]) -> List[Tuple[Tuple[int, int], Tuple[int, int]]]:
    """Pairs of horizontally/vertically adjacent seats holding the same session."""

    pairs: List[Tuple[Tuple[int, int], Tuple[int, int]]] = []
    for r, row in enumerate(seats):
        for c, seat in enumerate(row):
            sid = seat.get("session_id")
            if not sid:
                continue
            if c + 1 < len(row) and row[c + 1].get("session_id") == sid:
                pairs.append(((r, c), (r, c + 1)))
            if r + 1 < len(seats) and c < len(seats[r + 1]) and seats[r + 1][c].get("session_id") == sid:
                pairs.append(((r, c), (r + 1, c)))
    return pairs


def compute_plan_metrics(plans: Sequence[SeatingPlan]) -> Dict[str, float]:
    """Return metrics used for reports."""

    placed = 0
    empty = 0
    violations = 0
    for plan in plans:
        for row in plan.seats:
            for seat in row:
                if seat["is_empty"]:
                    empty += 1
                else:
                    placed += 1
        violations += len(adjacency_violations(plan.seats))

    total = placed + empty
    return {
        "rooms": float(len(plans)),
        "placed_seats": float(placed),
        "empty_seats": float(empty),
        "utilization": (placed / total) if total else 0.0,
        "adjacency_violations": float(violations),
    }
