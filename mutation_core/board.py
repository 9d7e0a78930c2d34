from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

Coord = Tuple[int, int]

BOARD_SIZE = 10


@dataclass(frozen=True)
class Piece:
    """One placed or spawned mutation. Every cell of its footprint points here."""
    type_id: int
    origin: Coord
    size: int
    is_player_placed: bool
    growth_stage: int
    placement_id: int

    def footprint(self) -> Iterator[Coord]:
        r0, c0 = self.origin
        for r in range(r0, r0 + self.size):
            for c in range(c0, c0 + self.size):
                yield (r, c)

    def with_stage(self, stage: int) -> 'Piece':
        return replace(self, growth_stage=stage)


@dataclass
class Board:
    """10x10 grid of placement ids backed by an arena of pieces."""
    size: int = BOARD_SIZE
    grid: List[Optional[int]] = field(default_factory=list)
    pieces: Dict[int, Piece] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.grid:
            self.grid = [None] * (self.size * self.size)

    def index(self, r: int, c: int) -> int:
        return r * self.size + c

    def in_bounds(self, r: int, c: int) -> bool:
        return 0 <= r < self.size and 0 <= c < self.size

    def coords(self) -> Iterable[Coord]:
        for r in range(self.size):
            for c in range(self.size):
                yield (r, c)

    def at(self, r: int, c: int) -> Optional[Piece]:
        """Returns the piece covering (r, c), or None if empty or off-board."""
        if not self.in_bounds(r, c):
            return None
        pid = self.grid[self.index(r, c)]
        return self.pieces.get(pid) if pid is not None else None

    def is_empty(self, r: int, c: int) -> bool:
        return self.in_bounds(r, c) and self.grid[self.index(r, c)] is None

    def fits(self, origin: Coord, size: int) -> bool:
        r, c = origin
        return r >= 0 and c >= 0 and r + size <= self.size and c + size <= self.size

    def is_rect_empty(self, origin: Coord, size: int) -> bool:
        """True iff every cell of the size x size square at origin is on-board and unoccupied."""
        if not self.fits(origin, size):
            return False
        r0, c0 = origin
        for r in range(r0, r0 + size):
            for c in range(c0, c0 + size):
                if self.grid[self.index(r, c)] is not None:
                    return False
        return True

    def surrounding_cells(self, origin: Coord, size: int) -> List[Coord]:
        """The on-board ring around a size x size footprint (8, 12 or 16 cells at most)."""
        r0, c0 = origin
        out: List[Coord] = []
        for r in range(r0 - 1, r0 + size + 1):
            for c in range(c0 - 1, c0 + size + 1):
                if r0 <= r < r0 + size and c0 <= c < c0 + size:
                    continue
                if self.in_bounds(r, c):
                    out.append((r, c))
        return out

    def empty_cells(self) -> List[Coord]:
        return [(r, c) for (r, c) in self.coords() if self.grid[self.index(r, c)] is None]

    def iter_pieces(self) -> List[Piece]:
        """Distinct pieces in row-major order of their origins."""
        return sorted(self.pieces.values(), key=lambda p: (p.origin[0], p.origin[1]))

    def put(self, piece: Piece) -> None:
        """Writes a piece into the arena and claims its footprint. Caller checks emptiness."""
        self.pieces[piece.placement_id] = piece
        for (r, c) in piece.footprint():
            self.grid[self.index(r, c)] = piece.placement_id

    def update(self, piece: Piece) -> None:
        """Replaces a stored piece's metadata in place (same placement id and footprint)."""
        self.pieces[piece.placement_id] = piece

    def remove(self, piece: Piece) -> None:
        for (r, c) in piece.footprint():
            if self.grid[self.index(r, c)] == piece.placement_id:
                self.grid[self.index(r, c)] = None
        self.pieces.pop(piece.placement_id, None)

    def clear(self) -> None:
        self.grid = [None] * (self.size * self.size)
        self.pieces = {}

    def copy(self) -> 'Board':
        # Pieces are frozen, so copying the containers gives an independent board.
        return Board(size=self.size, grid=list(self.grid), pieces=dict(self.pieces))

    def pretty(self, names: Optional[Dict[int, str]] = None) -> str:
        """Human-readable grid: '.' empty, type label at origins, '+' on secondary cells.
        Player-placed origins are marked with a trailing '*'."""
        cells: List[List[str]] = []
        for r in range(self.size):
            row: List[str] = []
            for c in range(self.size):
                piece = self.at(r, c)
                if piece is None:
                    row.append('.')
                elif piece.origin != (r, c):
                    row.append('+')
                else:
                    label = names.get(piece.type_id, str(piece.type_id)) if names else str(piece.type_id)
                    row.append(label + ('*' if piece.is_player_placed else ''))
            cells.append(row)
        width = max((len(x) for row in cells for x in row), default=1)
        return "\n".join(" ".join(x.rjust(width) for x in row) for row in cells)
