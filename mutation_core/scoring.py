from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Tuple

from .board import Board, Coord, Piece
from .catalog import Catalog, MutationType
from .effects import rule_for
from .state import EngineSettings

GH_MAX_LEVEL = 9
GH_MAX_PERCENT = 20
UNIQUE_STEP_PERCENT = 3
UNIQUE_MAX_PERCENT = 36
UNIQUE_MAX_LEVEL = UNIQUE_MAX_PERCENT // UNIQUE_STEP_PERCENT


@dataclass(frozen=True)
class ScoreModifiers:
    """Global bonuses applied once to the board's base yield."""
    fortune: float = 0
    chips: float = 0
    gh_upgrade_level: int = 0
    unique_buff_level: int = 0
    additive_buff_base: float = 1
    multiplicative_buff_base: float = 1


@dataclass(frozen=True)
class ScoreResult:
    base_yield: float
    final_yield: int
    breakdown: Tuple[Tuple[Coord, int, float], ...] = ()  # (origin, type_id, score) per piece


def gh_upgrade_percent(level: int) -> int:
    """2% per level, except the top level which is pinned to 20% instead of 18%."""
    if level >= GH_MAX_LEVEL:
        return GH_MAX_PERCENT
    return max(0, level) * 2


def unique_buff_percent(level: int) -> int:
    return min(max(0, level) * UNIQUE_STEP_PERCENT, UNIQUE_MAX_PERCENT)


def additive_total(mods: ScoreModifiers) -> float:
    return mods.additive_buff_base + gh_upgrade_percent(mods.gh_upgrade_level) / 100


def modifier_multiplier(mods: ScoreModifiers) -> float:
    chip_factor = 1 + mods.chips / 100
    fortune_factor = 1 + mods.fortune / 100
    unique_factor = 1 + unique_buff_percent(mods.unique_buff_level) / 100
    return additive_total(mods) * chip_factor * fortune_factor * unique_factor * mods.multiplicative_buff_base


def apply_modifiers(base_yield: float, mods: ScoreModifiers) -> int:
    return math.floor(base_yield * modifier_multiplier(mods))


def piece_score(piece: Piece, mtype: MutationType, param_index: int, settings: EngineSettings) -> float:
    """Yield of one piece for the selected score parameter."""
    base = mtype.param(param_index)
    evaluating = settings.evaluation_mode
    if not settings.simulation_mode:
        if piece.is_player_placed and not evaluating:
            return 0
        return base
    if piece.is_player_placed and mtype.is_mutated and not evaluating:
        return 0  # uncollectable
    return rule_for(mtype).score(mtype, piece.growth_stage, base, evaluating)


def calculate_score(
    board: Board,
    catalog: Catalog,
    param_index: int,
    settings: EngineSettings,
    mods: ScoreModifiers = ScoreModifiers(),
) -> ScoreResult:
    """Sums each piece once (not once per covered cell) and applies the modifier chain."""
    total: float = 0
    rows: List[Tuple[Coord, int, float]] = []
    for piece in board.iter_pieces():
        mtype = catalog.get(piece.type_id)
        if mtype is None:
            continue
        s = piece_score(piece, mtype, param_index, settings)
        rows.append((piece.origin, piece.type_id, s))
        total += s
    return ScoreResult(base_yield=total, final_yield=apply_modifiers(total, mods), breakdown=tuple(rows))
