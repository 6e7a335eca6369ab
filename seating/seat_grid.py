"""Seat grid for one room.

A room is a rows x columns matrix of seats. Adjacency is kept in a `Graph`
keyed by `(row, col)`: while building, each seat is linked to its left and top
neighbour, which yields the full up/down/left/right neighbourhood. Diagonals
are not adjacent.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from structures import Graph


@dataclass
class Seat:
    row: int
    col: int
    session_id: Optional[str] = None
    section_id: Optional[str] = None
    student_id: Optional[str] = None
    is_empty: bool = True

    @property
    def key(self) -> Tuple[int, int]:
        return (self.row, self.col)

    def assign(self, session_id: str, section_id: str, student_id: str) -> None:
        if not self.is_empty:
            raise ValueError(f"Seat ({self.row}, {self.col}) is already assigned")
        self.session_id = session_id
        self.section_id = section_id
        self.student_id = student_id
        self.is_empty = False

    def to_record(self) -> Dict[str, object]:
        return asdict(self)


def iter_cells(rows: int, columns: int, fill_order: str = "row") -> Iterator[Tuple[int, int]]:
    """Yield `(row, col)` in row-major order, or column-major for "column"."""

    if fill_order == "column":
        for c in range(columns):
            for r in range(rows):
                yield (r, c)
    else:
        for r in range(rows):
            for c in range(columns):
                yield (r, c)


class SeatGrid:
    def __init__(self, room_id: str, rows: int, columns: int) -> None:
        self.room_id = room_id
        self.rows = int(rows)
        self.columns = int(columns)
        self.seats: List[List[Seat]] = []
        self.graph = Graph()
        self._build()

    def _build(self) -> None:
        for r in range(self.rows):
            row_seats: List[Seat] = []
            for c in range(self.columns):
                row_seats.append(Seat(row=r, col=c))
                self.graph.add_node((r, c))
                if c > 0:
                    self.graph.add_edge((r, c), (r, c - 1))
                if r > 0:
                    self.graph.add_edge((r, c), (r - 1, c))
            self.seats.append(row_seats)

    @property
    def capacity(self) -> int:
        return self.rows * self.columns

    def get_seat(self, row: int, col: int) -> Optional[Seat]:
        if row < 0 or row >= self.rows or col < 0 or col >= self.columns:
            return None
        return self.seats[row][col]

    def get_neighbors(self, seat: Seat) -> List[Seat]:
        neighbors: List[Seat] = []
        for r, c in sorted(self.graph.neighbors(seat.key)):
            neighbor = self.get_seat(r, c)
            if neighbor is not None:
                neighbors.append(neighbor)
        return neighbors

    def iter_cells(self, fill_order: str = "row") -> Iterator[Tuple[int, int]]:
        return iter_cells(self.rows, self.columns, fill_order)

    def seats_view(self) -> List[List[Dict[str, object]]]:
        return [[seat.to_record() for seat in row] for row in self.seats]
