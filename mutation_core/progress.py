from __future__ import annotations

import random
from typing import List, Optional

from .board import Coord, Piece
from .catalog import MutationType
from .effects import rule_for
from .spawn import satisfies_spawn_conditions
from .state import POLICY_ALL, EngineSettings, GameState


def advance_growth(state: GameState) -> int:
    """Moves every piece one growth stage forward. Returns how many pieces changed."""
    changed = 0
    for piece in list(state.board.pieces.values()):
        mtype = state.catalog.get(piece.type_id)
        if mtype is None:
            continue
        stage = rule_for(mtype).advance(mtype, piece.growth_stage)
        if stage != piece.growth_stage:
            state.board.update(piece.with_stage(stage))
            changed += 1
    return changed


def can_spawn_at(state: GameState, mtype: MutationType, cell: Coord) -> bool:
    return (
        satisfies_spawn_conditions(state.board, cell, mtype.conditions, mtype.size)
        and state.board.is_rect_empty(cell, mtype.size)
    )


def _accept(settings: EngineSettings, rng: random.Random) -> bool:
    if not settings.simulation_mode:
        return True
    return rng.random() < settings.spawn_probability


def _spawn(state: GameState, mtype: MutationType, cell: Coord) -> Piece:
    piece = Piece(
        type_id=mtype.id,
        origin=cell,
        size=mtype.size,
        is_player_placed=False,
        growth_stage=0,
        placement_id=state.allocate_placement_id(),
    )
    state.board.put(piece)
    return piece


def spawn_pass(state: GameState, settings: EngineSettings, rng: random.Random) -> List[Piece]:
    """Visits the empty cells in shuffled order and spawns eligible mutations.

    Spawns land immediately, so cells visited later see them as neighbours.
    With the default policy each cell takes only its highest-id eligible type;
    with POLICY_ALL every type in id order claims every cell it qualifies for.
    """
    cells = state.board.empty_cells()
    rng.shuffle(cells)
    spawned: List[Piece] = []

    if settings.spawn_policy == POLICY_ALL:
        for mtype in state.catalog.spawnable():
            for cell in cells:
                if can_spawn_at(state, mtype, cell) and _accept(settings, rng):
                    spawned.append(_spawn(state, mtype, cell))
        return spawned

    candidates = sorted(state.catalog.spawnable(), key=lambda t: t.id, reverse=True)
    for cell in cells:
        if not state.board.is_empty(*cell):
            continue
        chosen = next((t for t in candidates if can_spawn_at(state, t, cell)), None)
        if chosen is not None and _accept(settings, rng):
            spawned.append(_spawn(state, chosen, cell))
    return spawned


def progress(state: GameState, settings: EngineSettings, rng: Optional[random.Random] = None) -> List[Piece]:
    """One tick: grow existing pieces (simulation mode only), then run the spawn pass."""
    if rng is None:
        rng = random.Random()
    if settings.simulation_mode:
        advance_growth(state)
    return spawn_pass(state, settings, rng)
