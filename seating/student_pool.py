"""Student pool: who sits next.

The pool groups the students of a time slot by exam session and, inside a
session, by section. It hands out students one at a time with a weighted
round-robin over sessions: the session with the most students left goes first,
so large sessions are spread over the whole room and small ones are not
starved or bunched up at the end.

Scheduling policy
-----------------
`take_next(avoid)` tries to skip sessions in `avoid` (the sessions already
sitting next to the seat being filled). When every remaining session is in
`avoid`, the last one popped is used anyway: seating everybody wins over the
adjacency rule.

Within a session, students come from the first section that still has
students (sections are scanned from the start on every call). Earlier sections
are therefore emptied first.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import AbstractSet, List, Optional, Sequence

from structures import MaxPriorityQueue, Queue

from .constraints import DEFAULT_CONSTRAINTS, ConstraintConfig
from .stores import SectionRecord, SessionRecord


LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudentToken:
    session_id: str
    section_id: str
    roll_no: str


@dataclass
class SectionQueue:
    section_id: str
    queue: Queue[StudentToken] = field(default_factory=Queue)


@dataclass
class SessionEntry:
    """Per-session scheduling state.

    `total_remaining` caches the number of queued students; it must always
    equal `remaining()`.
    """

    session_id: str
    total_remaining: int = 0
    queues: List[SectionQueue] = field(default_factory=list)

    def remaining(self) -> int:
        return sum(q.queue.size() for q in self.queues)


@dataclass(frozen=True)
class Placement:
    token: StudentToken
    session_id: str


def _by_remaining(a: SessionEntry, b: SessionEntry) -> int:
    return a.total_remaining - b.total_remaining


def roster_for_section(section: SectionRecord) -> List[str]:
    """Explicit roll numbers, or `<name>-1 .. <name>-N` from the headcount."""

    roll_numbers = list(section.roll_numbers)
    if not roll_numbers and section.student_count and section.student_count > 0:
        roll_numbers = [f"{section.name}-{i}" for i in range(1, int(section.student_count) + 1)]
    return roll_numbers


def fisher_yates_shuffle(items: List[str], rng=None) -> None:
    """Shuffle `items` in place (unbiased)."""

    rng = rng or random
    for i in range(len(items) - 1, 0, -1):
        j = rng.randrange(i + 1)
        items[i], items[j] = items[j], items[i]


class StudentPool:
    def __init__(self, entries: Sequence[SessionEntry]) -> None:
        self.heap: MaxPriorityQueue[SessionEntry] = MaxPriorityQueue(_by_remaining)
        self.total_students = 0
        for entry in entries:
            if entry.total_remaining <= 0:
                continue
            self.heap.push(entry)
            self.total_students += entry.total_remaining

    def is_empty(self) -> bool:
        return self.heap.is_empty()

    def active_entries(self) -> List[SessionEntry]:
        return list(self.heap)

    def remaining(self) -> int:
        return sum(e.total_remaining for e in self.heap)

    def take_next(self, avoid: AbstractSet[str] = frozenset()) -> Optional[Placement]:
        """Take the next student, preferring sessions not in `avoid`.

        Returns None once the pool is exhausted.
        """

        if self.heap.is_empty():
            return None

        skipped: List[SessionEntry] = []
        chosen: Optional[SessionEntry] = None

        while not self.heap.is_empty():
            top = self.heap.pop()
            if top.session_id not in avoid or self.heap.is_empty():
                chosen = top
                break
            skipped.append(top)

        for entry in skipped:
            self.heap.push(entry)

        if chosen is None:
            return None

        if chosen.session_id in avoid:
            LOG.debug("Every remaining session is adjacent; falling back to %s", chosen.session_id)

        token: Optional[StudentToken] = None
        for section in chosen.queues:
            if not section.queue.is_empty():
                token = section.queue.dequeue()
                break

        if token is None:
            # Out of sync with total_remaining: drop the entry and retry.
            LOG.warning("Session %s reported %d students but has none queued", chosen.session_id, chosen.total_remaining)
            return self.take_next(avoid)

        chosen.total_remaining -= 1
        if chosen.total_remaining > 0:
            self.heap.push(chosen)

        return Placement(token=token, session_id=chosen.session_id)


def build_student_pool(
    sessions: Sequence[SessionRecord],
    constraints: ConstraintConfig = DEFAULT_CONSTRAINTS,
    rng: Optional[random.Random] = None,
) -> StudentPool:
    """Queue every student of `sessions` and build the scheduling heap.

    Sessions are taken in the given order; sessions without students are left
    out of the pool.
    """

    entries: List[SessionEntry] = []

    for s in sessions:
        entry = SessionEntry(session_id=str(s.session_id))

        for sec in s.sections:
            roll_numbers = roster_for_section(sec)
            if constraints.shuffles_rosters:
                fisher_yates_shuffle(roll_numbers, rng)

            q: Queue[StudentToken] = Queue()
            for rn in roll_numbers:
                q.enqueue(StudentToken(session_id=entry.session_id, section_id=str(sec.section_id), roll_no=rn))

            if q.size() > 0:
                entry.queues.append(SectionQueue(section_id=str(sec.section_id), queue=q))
                entry.total_remaining += q.size()

        if entry.total_remaining > 0:
            entries.append(entry)
        else:
            LOG.debug("Session %s has no students; left out of the pool", entry.session_id)

    return StudentPool(entries)
