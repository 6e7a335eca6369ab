"""Constraint configuration for one seating generation run.

A configuration is read-only for the duration of a run. When a requester has
never saved one, `DEFAULT_CONSTRAINTS` applies.

Stored records may come from older clients that only know the legacy
`allow_adjacent_same_session` flag; `normalize_constraints` folds that into
`no_adjacent_same_session`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .validators import raise_if_invalid, validate_choice


FILL_ORDERS = ("row", "column")
ROLL_NO_ORDERS = ("sequential", "random")


@dataclass(frozen=True)
class ConstraintConfig:
    """User-tunable seating constraints.

    Notes:
    - `no_adjacent_same_session` is best effort; see `StudentPool.take_next`.
    - `random_shuffle` shuffles rosters even when `roll_no_order` is sequential.
    - `alternate_sessions_enabled` is stored and reported but does not change
      allocation.
    """

    no_adjacent_same_session: bool = True
    fill_order: str = "row"  # row | column
    roll_no_order: str = "sequential"  # sequential | random
    alternate_sessions_enabled: bool = False
    random_shuffle: bool = False

    @property
    def shuffles_rosters(self) -> bool:
        return self.roll_no_order == "random" or bool(self.random_shuffle)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ConstraintConfig":
        """Build a validated config from a plain mapping (JSON, form data)."""

        fill_order = str(raw.get("fill_order", "row"))
        roll_no_order = str(raw.get("roll_no_order", "sequential"))
        raise_if_invalid(validate_choice(fill_order, "fill_order", FILL_ORDERS))
        raise_if_invalid(validate_choice(roll_no_order, "roll_no_order", ROLL_NO_ORDERS))

        return cls(
            no_adjacent_same_session=bool(raw.get("no_adjacent_same_session", True)),
            fill_order=fill_order,
            roll_no_order=roll_no_order,
            alternate_sessions_enabled=bool(raw.get("alternate_sessions_enabled", False)),
            random_shuffle=bool(raw.get("random_shuffle", False)),
        )

    def as_dict(self) -> dict:
        return {
            "no_adjacent_same_session": self.no_adjacent_same_session,
            "fill_order": self.fill_order,
            "roll_no_order": self.roll_no_order,
            "alternate_sessions_enabled": self.alternate_sessions_enabled,
            "random_shuffle": self.random_shuffle,
        }


DEFAULT_CONSTRAINTS = ConstraintConfig()


@dataclass(frozen=True)
class StoredConstraint:
    """A constraint record as saved by a user.

    `no_adjacent_same_session=None` means the record predates that field and
    only `allow_adjacent_same_session` is meaningful.
    """

    owner_id: str
    created_at: str = ""
    no_adjacent_same_session: Optional[bool] = None
    allow_adjacent_same_session: bool = False
    fill_order: Optional[str] = "row"
    roll_no_order: Optional[str] = "sequential"
    alternate_sessions_enabled: bool = False
    random_shuffle: bool = False


def normalize_constraints(stored: Optional[StoredConstraint]) -> ConstraintConfig:
    """Derive the effective configuration from a stored record (or defaults)."""

    if stored is None:
        return DEFAULT_CONSTRAINTS

    if isinstance(stored.no_adjacent_same_session, bool):
        no_adjacent = stored.no_adjacent_same_session
    else:
        no_adjacent = not stored.allow_adjacent_same_session

    return ConstraintConfig(
        no_adjacent_same_session=no_adjacent,
        fill_order="column" if stored.fill_order == "column" else "row",
        roll_no_order=stored.roll_no_order or "sequential",
        alternate_sessions_enabled=bool(stored.alternate_sessions_enabled),
        random_shuffle=bool(stored.random_shuffle),
    )
