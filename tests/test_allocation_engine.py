import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import seating.allocation_engine as engine_module
from seating import (
    DEFAULT_CONSTRAINTS,
    AllocationEngine,
    CapacityExceededError,
    EmptyInputError,
    InMemorySeatingStore,
    NotFoundError,
    OwnershipError,
    RoomRecord,
    SectionRecord,
    SessionRecord,
    StoredConstraint,
    TimeSlotRecord,
    compute_plan_metrics,
)
from seating.allocation_engine import adjacency_violations


USER = "U1"


def _store(sessions, rooms, *, owner=USER, constraints=()):
    """sessions: {session_id: [(section_name, count), ...]}, rooms: {room_id: (rows, cols)}."""

    store = InMemorySeatingStore()
    for sid, sections in sessions.items():
        store.add_session(
            SessionRecord(
                session_id=sid,
                name=sid,
                owner_id=owner,
                sections=tuple(
                    SectionRecord(section_id=f"{sid}-{name}", name=name, student_count=n) for name, n in sections
                ),
            )
        )
    for rid, (rows, cols) in rooms.items():
        store.add_room(RoomRecord(room_id=rid, name=rid, rows=rows, columns=cols, owner_id=owner))
    store.add_time_slot(TimeSlotRecord(time_slot_id="T1", time="09:30", owner_id=owner, session_ids=tuple(sessions)))
    for c in constraints:
        store.save_constraints(c)
    return store


def _constraints(**kwargs):
    kwargs.setdefault("created_at", "2026-01-01T00:00:00")
    return StoredConstraint(owner_id=USER, **kwargs)


def _occupied(result):
    return [seat for plan in result.plans for seat in plan.occupied_seats()]


def test_every_student_is_seated_exactly_once():
    store = _store({"A": [("A", 30)], "B": [("B1", 12), ("B2", 8)], "C": [("C", 7)]}, {"R1": (5, 5), "R2": (6, 6)})

    result = AllocationEngine(store).generate("T1", ["R1", "R2"], USER)

    seated = [(s["session_id"], s["student_id"]) for s in _occupied(result)]
    assert len(seated) == 57
    assert len(set(seated)) == 57
    assert result.total_students == 57
    assert result.total_seats == 61

    metrics = compute_plan_metrics(result.plans)
    assert metrics["placed_seats"] == 57.0
    assert metrics["empty_seats"] == 4.0


@pytest.mark.parametrize("fill_order", ["row", "column"])
@pytest.mark.parametrize("random_shuffle", [False, True])
def test_no_adjacent_same_session_when_two_sessions_balance(fill_order, random_shuffle):
    store = _store(
        {"A": [("A", 32)], "B": [("B", 32)]},
        {"R1": (8, 8)},
        constraints=[_constraints(fill_order=fill_order, random_shuffle=random_shuffle)],
    )

    result = AllocationEngine(store).generate("T1", ["R1"], USER)

    assert len(_occupied(result)) == 64
    assert adjacency_violations(result.plans[0].seats) == []


def test_single_session_still_completes():
    store = _store({"A": [("A", 10)]}, {"R1": (3, 4)})

    result = AllocationEngine(store).generate("T1", ["R1"], USER)

    assert len(_occupied(result)) == 10
    assert compute_plan_metrics(result.plans)["adjacency_violations"] > 0


def test_sequential_runs_are_identical():
    store = _store({"A": [("A", 9), ("A2", 4)], "B": [("B", 11)], "C": [("C", 3)]}, {"R1": (4, 4), "R2": (3, 4)})
    engine = AllocationEngine(store)

    first = engine.generate("T1", ["R1", "R2"], USER)
    second = engine.generate("T1", ["R1", "R2"], USER)

    assert [p.seats for p in first.plans] == [p.seats for p in second.plans]


def test_row_fill_order():
    store = _store(
        {"A": [("A", 3)]},
        {"R1": (2, 2)},
        constraints=[_constraints(no_adjacent_same_session=False, fill_order="row")],
    )

    seats = AllocationEngine(store).generate("T1", ["R1"], USER).plans[0].seats

    assert seats[0][0]["student_id"] == "A-1"
    assert seats[0][1]["student_id"] == "A-2"
    assert seats[1][0]["student_id"] == "A-3"
    assert seats[1][1]["is_empty"] is True


def test_column_fill_order():
    store = _store(
        {"A": [("A", 3)]},
        {"R1": (2, 2)},
        constraints=[_constraints(no_adjacent_same_session=False, fill_order="column")],
    )

    seats = AllocationEngine(store).generate("T1", ["R1"], USER).plans[0].seats

    assert seats[0][0]["student_id"] == "A-1"
    assert seats[1][0]["student_id"] == "A-2"
    assert seats[0][1]["student_id"] == "A-3"
    assert seats[1][1]["is_empty"] is True


def test_capacity_failure_writes_no_seats(monkeypatch):
    store = _store({"A": [("A", 50)], "B": [("B", 50)]}, {"R1": (8, 8)})

    def _no_grid(*args, **kwargs):
        raise AssertionError("no grid should be built when capacity is exceeded")

    monkeypatch.setattr(engine_module, "SeatGrid", _no_grid)

    with pytest.raises(CapacityExceededError) as excinfo:
        AllocationEngine(store).generate("T1", ["R1"], USER)

    err = excinfo.value
    assert str(err) == "Not enough seats. Students: 100, Seats: 64"
    assert "Students: 100" in str(err) and "Seats: 64" in str(err)
    assert (err.total_students, err.total_seats) == (100, 64)
    assert err.kind == "capacity_exceeded"


def test_rooms_are_filled_in_requested_order():
    store = _store({"A": [("A", 3)], "B": [("B", 2)]}, {"R1": (2, 2), "R2": (3, 3)})

    result = AllocationEngine(store).generate("T1", ["R2", "R1"], USER)

    assert [p.room_id for p in result.plans] == ["R2", "R1"]
    assert len(result.plans[0].occupied_seats()) == 5
    assert result.plans[1].occupied_seats() == []
    assert all(p.time_slot_id == "T1" for p in result.plans)


def test_plans_share_generation_timestamp():
    store = _store({"A": [("A", 3)]}, {"R1": (2, 2), "R2": (1, 1)})

    result = AllocationEngine(store, clock=lambda: "2026-11-02T09:00:00+00:00").generate("T1", ["R1", "R2"], USER)

    assert result.generated_at == "2026-11-02T09:00:00+00:00"
    assert {p.generated_at for p in result.plans} == {"2026-11-02T09:00:00+00:00"}
    assert len({p.plan_id for p in result.plans}) == 2


def test_sessions_without_students_do_not_block_generation():
    store = _store({"EMPTY": [("E", 0)], "A": [("A", 2)]}, {"R1": (1, 3)})

    result = AllocationEngine(store).generate("T1", ["R1"], USER)
    assert {s["session_id"] for s in _occupied(result)} == {"A"}


def test_default_constraints_apply_without_saved_config():
    store = _store({"A": [("A", 1)]}, {"R1": (1, 1)})
    result = AllocationEngine(store).generate("T1", ["R1"], USER)
    assert result.constraints == DEFAULT_CONSTRAINTS


def test_latest_saved_constraints_win():
    store = _store(
        {"A": [("A", 1)]},
        {"R1": (1, 1)},
        constraints=[
            _constraints(created_at="2026-03-01T00:00:00", fill_order="column"),
            _constraints(created_at="2026-01-01T00:00:00", fill_order="row", random_shuffle=True),
            StoredConstraint(owner_id="OTHER", created_at="2026-12-01T00:00:00", fill_order="row"),
        ],
    )

    cfg = AllocationEngine(store).resolve_constraints(USER)
    assert cfg.fill_order == "column"
    assert cfg.random_shuffle is False


def test_unknown_time_slot_is_not_found():
    store = _store({"A": [("A", 1)]}, {"R1": (1, 1)})
    with pytest.raises(NotFoundError):
        AllocationEngine(store).generate("NOPE", ["R1"], USER)


def test_time_slot_of_other_user_is_not_found():
    store = _store({"A": [("A", 1)]}, {"R1": (1, 1)})
    with pytest.raises(NotFoundError):
        AllocationEngine(store).generate("T1", ["R1"], "SOMEONE-ELSE")


def test_time_slot_without_sessions_is_empty_input():
    store = _store({}, {"R1": (1, 1)})
    with pytest.raises(EmptyInputError) as excinfo:
        AllocationEngine(store).generate("T1", ["R1"], USER)
    assert excinfo.value.kind == "empty_input"


def test_empty_room_list_is_empty_input():
    store = _store({"A": [("A", 1)]}, {"R1": (1, 1)})
    with pytest.raises(EmptyInputError):
        AllocationEngine(store).generate("T1", [], USER)


def test_missing_room_is_not_found():
    store = _store({"A": [("A", 1)]}, {"R1": (1, 1)})
    with pytest.raises(NotFoundError) as excinfo:
        AllocationEngine(store).generate("T1", ["R1", "R404"], USER)
    assert "R404" in str(excinfo.value)


def test_missing_session_is_not_found():
    store = _store({"A": [("A", 1)]}, {"R1": (1, 1)})
    store.add_time_slot(TimeSlotRecord(time_slot_id="T2", time="", owner_id=USER, session_ids=("A", "GHOST")))
    with pytest.raises(NotFoundError):
        AllocationEngine(store).generate("T2", ["R1"], USER)


def test_session_of_other_user_is_ownership_error():
    store = _store({"A": [("A", 1)]}, {"R1": (2, 2)})
    store.add_session(
        SessionRecord(
            session_id="FOREIGN",
            name="FOREIGN",
            owner_id="OTHER",
            sections=(SectionRecord(section_id="f", name="F", student_count=1),),
        )
    )
    store.add_time_slot(TimeSlotRecord(time_slot_id="T2", time="", owner_id=USER, session_ids=("A", "FOREIGN")))

    with pytest.raises(OwnershipError) as excinfo:
        AllocationEngine(store).generate("T2", ["R1"], USER)
    assert excinfo.value.kind == "ownership"


def test_adjacency_violations_counts_pairs():
    seats = [
        [{"session_id": "A"}, {"session_id": "A"}],
        [{"session_id": "B"}, {"session_id": None}],
    ]
    assert adjacency_violations(seats) == [((0, 0), (0, 1))]
