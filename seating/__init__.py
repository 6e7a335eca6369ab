"""Exam seating: seat grids, student pool and the allocation engine."""

from .allocation_engine import (
    AllocationEngine,
    GenerationResult,
    SeatingPlan,
    compute_plan_metrics,
    fill_room,
    generate_plans_for_time_slot,
)
from .capacity import CapacityReport, can_accommodate
from .constraints import DEFAULT_CONSTRAINTS, ConstraintConfig, StoredConstraint, normalize_constraints
from .errors import CapacityExceededError, EmptyInputError, NotFoundError, OwnershipError, SeatingError
from .seat_grid import Seat, SeatGrid
from .stores import (
    InMemorySeatingStore,
    RoomRecord,
    SectionRecord,
    SessionRecord,
    TimeSlotRecord,
    load_store_from_json,
)
from .student_pool import Placement, StudentPool, StudentToken, build_student_pool

__all__ = [
    "AllocationEngine",
    "GenerationResult",
    "SeatingPlan",
    "compute_plan_metrics",
    "fill_room",
    "generate_plans_for_time_slot",
    "CapacityReport",
    "can_accommodate",
    "DEFAULT_CONSTRAINTS",
    "ConstraintConfig",
    "StoredConstraint",
    "normalize_constraints",
    "CapacityExceededError",
    "EmptyInputError",
    "NotFoundError",
    "OwnershipError",
    "SeatingError",
    "Seat",
    "SeatGrid",
    "InMemorySeatingStore",
    "RoomRecord",
    "SectionRecord",
    "SessionRecord",
    "TimeSlotRecord",
    "load_store_from_json",
    "Placement",
    "StudentPool",
    "StudentToken",
    "build_student_pool",
]
