"""Errors raised before a seating plan is generated.

Every failure is detected up front and aborts the whole request; once seats
start being written, generation cannot fail. Callers can branch on `kind`
instead of on the concrete class.
"""

from __future__ import annotations


class SeatingError(ValueError):
    kind = "error"


class NotFoundError(SeatingError):
    """A time slot, room or session does not exist for the requester."""

    kind = "not_found"


class EmptyInputError(SeatingError):
    """The time slot has no sessions, or no rooms were requested."""

    kind = "empty_input"


class OwnershipError(SeatingError):
    """A referenced session exists but belongs to another user."""

    kind = "ownership"


class CapacityExceededError(SeatingError):
    """More students than seats across the requested rooms.

    The message format is relied upon by outer layers, keep it stable.
    """

    kind = "capacity_exceeded"

    def __init__(self, total_students: int, total_seats: int) -> None:
        self.total_students = int(total_students)
        self.total_seats = int(total_seats)
        super().__init__(f"Not enough seats. Students: {self.total_students}, Seats: {self.total_seats}")
