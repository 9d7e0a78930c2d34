from __future__ import annotations

from typing import Dict, Sequence

from .board import Board, Coord
from .catalog import SpawnCondition


def ring_counts(board: Board, origin: Coord, size: int) -> Dict[int, int]:
    """Counts occupied ring cells per type id, one per grid cell (a 2x2 neighbour adds up to 4)."""
    counts: Dict[int, int] = {}
    for (r, c) in board.surrounding_cells(origin, size):
        piece = board.at(r, c)
        if piece is None:
            continue
        counts[piece.type_id] = counts.get(piece.type_id, 0) + 1
    return counts


def satisfies_spawn_conditions(board: Board, origin: Coord, conditions: Sequence[SpawnCondition], size: int) -> bool:
    """True if `origin` is empty and every condition holds over the footprint's ring."""
    if not conditions:
        return False
    if not board.is_empty(*origin):
        return False
    counts = ring_counts(board, origin, size)
    for cond in conditions:
        if counts.get(cond.type_id, 0) < cond.min_count:
            return False
    return True
