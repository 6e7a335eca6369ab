"""Seat capacity checks.

Used both as a standalone pre-check (can these sessions fit at all?) and by the
allocation engine before any seat is written.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .stores import RoomRecord, SectionRecord, SessionRecord


@dataclass(frozen=True)
class CapacityReport:
    can_fit: bool
    total_capacity: int
    total_students: int

    @property
    def shortage(self) -> int:
        return max(0, self.total_students - self.total_capacity)

    @property
    def message(self) -> str:
        if self.can_fit:
            return "Sessions can be accommodated"
        return f"Not enough capacity. Students: {self.total_students}, Capacity: {self.total_capacity}"


def total_capacity(rooms: Iterable[RoomRecord]) -> int:
    return sum(int(r.rows) * int(r.columns) for r in rooms)


def section_headcount(section: SectionRecord) -> int:
    """An explicit roster wins over the recorded strength."""

    if section.roll_numbers:
        return len(section.roll_numbers)
    return max(0, int(section.student_count or 0))


def total_students(sessions: Iterable[SessionRecord]) -> int:
    return sum(section_headcount(sec) for s in sessions for sec in s.sections)


def can_accommodate(sessions: Iterable[SessionRecord], rooms: Iterable[RoomRecord]) -> CapacityReport:
    seats = total_capacity(rooms)
    students = total_students(sessions)
    return CapacityReport(can_fit=students <= seats, total_capacity=seats, total_students=students)
