from __future__ import annotations

import math
import random
from dataclasses import fields, replace
from typing import Any, List, Mapping, Optional

from .board import Board, Coord, Piece
from .catalog import Catalog, MutationType, load_catalog
from .codec import ExportResult, encode_board, import_board
from .history import HISTORY_LIMIT, History
from .placement import destroy, place
from .progress import progress
from .scoring import GH_MAX_LEVEL, UNIQUE_MAX_LEVEL, ScoreModifiers, ScoreResult, calculate_score
from .state import SPAWN_POLICIES, EngineSettings, GameState


class Session:
    """One player's game: live board, history, settings and the RNG.

    Commands record an undo snapshot on success unless `record=False`.
    """

    def __init__(
        self,
        catalog: Catalog,
        rng: Optional[random.Random] = None,
        settings: Optional[EngineSettings] = None,
        modifiers: Optional[ScoreModifiers] = None,
        history_limit: int = HISTORY_LIMIT,
    ) -> None:
        self.catalog = catalog
        self.state = GameState(catalog=catalog)
        self.rng = rng if rng is not None else random.Random()
        self.settings = settings or EngineSettings()
        self.modifiers = modifiers or ScoreModifiers()
        self.score_param_index = 0
        self.history = History(limit=history_limit)
        self.history.save(self.state)

    @classmethod
    def from_config(cls, config: Mapping[str, Any], seed: Optional[int] = None, **kwargs: Any) -> 'Session':
        return cls(load_catalog(config), rng=random.Random(seed), **kwargs)

    # ---------- queries ----------

    @property
    def board(self) -> Board:
        return self.state.board

    @property
    def placement_id_counter(self) -> int:
        return self.state.placement_id_counter

    def mutation_types(self) -> List[MutationType]:
        return list(self.catalog.types)

    def piece_at(self, coord: Coord) -> Optional[Piece]:
        return self.state.board.at(*coord)

    def score(self) -> ScoreResult:
        return calculate_score(self.state.board, self.catalog, self.score_param_index, self.settings, self.modifiers)

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    # ---------- commands ----------

    def place(self, origin: Coord, type_id: int, record: bool = True) -> bool:
        ok = place(self.state, origin, type_id, simulation=self.settings.simulation_mode)
        if ok and record:
            self.history.save(self.state)
        return ok

    def destroy(self, coord: Coord, record: bool = True) -> bool:
        ok = destroy(self.state, coord)
        if ok and record:
            self.history.save(self.state)
        return ok

    def tick(self, record: bool = True) -> List[Piece]:
        spawned = progress(self.state, self.settings, self.rng)
        if record:
            self.history.save(self.state)
        return spawned

    def undo(self) -> bool:
        return self.history.undo(self.state)

    def redo(self) -> bool:
        return self.history.redo(self.state)

    def save_snapshot(self) -> None:
        self.history.save(self.state)

    def export_board(self) -> ExportResult:
        return encode_board(self.state.board)

    def import_board(self, code: str, record: bool = True) -> bool:
        ok = import_board(self.state, code, simulation=self.settings.simulation_mode)
        if ok and record:
            self.history.save(self.state)
        return ok

    # ---------- settings ----------

    @property
    def score_param_name(self) -> str:
        return self.catalog.param_name(self.score_param_index)

    def set_score_param(self, index: int) -> bool:
        if not (0 <= index < len(self.catalog.score_params)):
            return False
        self.score_param_index = index
        return True

    def set_simulation_mode(self, enabled: bool) -> None:
        self.settings = replace(self.settings, simulation_mode=bool(enabled))

    def set_evaluation_mode(self, enabled: bool) -> None:
        self.settings = replace(self.settings, evaluation_mode=bool(enabled))

    def set_spawn_probability(self, probability: float) -> bool:
        if not (0.0 <= probability <= 1.0):
            return False
        self.settings = replace(self.settings, spawn_probability=float(probability))
        return True

    def set_spawn_policy(self, policy: str) -> bool:
        if policy not in SPAWN_POLICIES:
            return False
        self.settings = replace(self.settings, spawn_policy=policy)
        return True

    def set_modifiers(self, **changes: Any) -> bool:
        """Updates any subset of ScoreModifiers fields; levels are clamped to their ranges.

        Unknown names and non-finite or non-numeric values reject the whole update.
        """
        known = {f.name for f in fields(ScoreModifiers)}
        values = {}
        for name, value in changes.items():
            if name not in known or isinstance(value, bool):
                return False
            try:
                number = float(value)
            except (TypeError, ValueError, OverflowError):
                return False
            if not math.isfinite(number):
                return False
            values[name] = number
        for name, top in (('gh_upgrade_level', GH_MAX_LEVEL), ('unique_buff_level', UNIQUE_MAX_LEVEL)):
            if name in values:
                values[name] = min(max(int(values[name]), 0), top)
        self.modifiers = replace(self.modifiers, **values)
        return True
