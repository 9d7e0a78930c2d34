from __future__ import annotations

from typing import List

from .board import Coord, Piece
from .effects import rule_for
from .state import GameState


def overlapping_pieces(state: GameState, origin: Coord, size: int) -> List[Piece]:
    """Distinct pieces (by origin) covering any cell of the target footprint."""
    seen: List[Piece] = []
    r0, c0 = origin
    for r in range(r0, r0 + size):
        for c in range(c0, c0 + size):
            piece = state.board.at(r, c)
            if piece is not None and all(p.origin != piece.origin for p in seen):
                seen.append(piece)
    return seen


def place(state: GameState, origin: Coord, type_id: int, simulation: bool = False) -> bool:
    """Places a player piece with its top-left corner at `origin`.

    Pieces under the new footprint are removed whole. Returns False and leaves
    the board untouched for unknown types or footprints that leave the board.
    """
    mtype = state.catalog.get(type_id)
    if mtype is None:
        return False
    origin = (int(origin[0]), int(origin[1]))
    if not state.board.fits(origin, mtype.size):
        return False

    for piece in overlapping_pieces(state, origin, mtype.size):
        state.board.remove(piece)

    piece = Piece(
        type_id=mtype.id,
        origin=origin,
        size=mtype.size,
        is_player_placed=True,
        growth_stage=rule_for(mtype).initial_stage(mtype, simulation),
        placement_id=state.allocate_placement_id(),
    )
    state.board.put(piece)
    return True


def destroy(state: GameState, coord: Coord) -> bool:
    """Removes the whole piece covering `coord`. False if the cell is empty."""
    piece = state.board.at(int(coord[0]), int(coord[1]))
    if piece is None:
        return False
    state.board.remove(piece)
    return True
