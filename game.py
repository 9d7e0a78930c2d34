from __future__ import annotations

# Facade module that re-exports the mutation planner core.
# The Flask app and the tests import from here; single-responsibility
# modules live under mutation_core/*.

import sys

from mutation_core.board import BOARD_SIZE, Board, Coord, Piece
from mutation_core.catalog import Catalog, MutationType, SpawnCondition, load_catalog, normalize_mutation
from mutation_core.effects import GLASSCORN, MAGIC_JERRYBEAN, GrowthRule, rule_for
from mutation_core.state import (
    DEFAULT_SPAWN_PROBABILITY,
    POLICY_ALL,
    POLICY_HIGHEST_ID,
    EngineSettings,
    GameState,
)
from mutation_core.spawn import ring_counts, satisfies_spawn_conditions
from mutation_core.placement import destroy, overlapping_pieces, place
from mutation_core.progress import advance_growth, progress, spawn_pass
from mutation_core.scoring import (
    ScoreModifiers,
    ScoreResult,
    additive_total,
    apply_modifiers,
    calculate_score,
    gh_upgrade_percent,
    piece_score,
    unique_buff_percent,
)
from mutation_core.history import HISTORY_LIMIT, History, Snapshot
from mutation_core.codec import (
    EMPTY,
    PLAYER_FLAG,
    ExportResult,
    board_to_bytes,
    decode_cells,
    encode_board,
    import_board,
    rle_decode,
    rle_encode,
)
from mutation_core.config import ConfigError, load_config
from mutation_core.session import Session


def main() -> None:
    # CLI driver delegated to mutation_core.cli
    from mutation_core.cli import main as _main
    sys.exit(_main())


if __name__ == '__main__':
    main()
