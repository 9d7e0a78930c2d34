from __future__ import annotations

from dataclasses import dataclass, field

from .board import Board
from .catalog import Catalog

POLICY_HIGHEST_ID = 'highest_id'
POLICY_ALL = 'all'
SPAWN_POLICIES = (POLICY_HIGHEST_ID, POLICY_ALL)

DEFAULT_SPAWN_PROBABILITY = 0.25


@dataclass(frozen=True)
class EngineSettings:
    """Per-operation switches. Replaced wholesale when the player changes a mode."""
    simulation_mode: bool = False
    evaluation_mode: bool = False
    spawn_probability: float = DEFAULT_SPAWN_PROBABILITY
    spawn_policy: str = POLICY_HIGHEST_ID


@dataclass
class GameState:
    """The mutable board plus the data that must survive undo/redo."""
    catalog: Catalog
    board: Board = field(default_factory=Board)
    placement_id_counter: int = 0

    def allocate_placement_id(self) -> int:
        pid = self.placement_id_counter
        self.placement_id_counter += 1
        return pid
