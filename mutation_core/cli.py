from __future__ import annotations

import argparse
import sys
from typing import List, Optional, Tuple

from .board import Coord
from .config import ConfigError, load_config
from .session import Session
from .state import POLICY_HIGHEST_ID, SPAWN_POLICIES, EngineSettings


def parse_placement(text: str) -> Tuple[int, Coord]:
    """'TYPE@R,C' -> (type_id, (r, c))."""
    type_s, _, pos = text.partition('@')
    r_s, c_s = [t for t in pos.replace(' ', ',').split(',') if t != '']
    return int(type_s), (int(r_s), int(c_s))


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Mutation planner: place, tick and score a 10x10 mutation board')
    parser.add_argument('--config', default=None, help='Catalog JSON (default: $MUTATION_CONFIG or data/config.json)')
    parser.add_argument('--seed', type=int, default=None, help='RNG seed for spawn order and rolls')
    parser.add_argument('--simulation', action='store_true', help='Enable growth stages and probabilistic spawns')
    parser.add_argument('--evaluate', action='store_true', help='Score ignoring growth and placement gating')
    parser.add_argument('--spawn-probability', type=float, default=None, help='Spawn acceptance in simulation mode')
    parser.add_argument('--policy', choices=list(SPAWN_POLICIES), default=POLICY_HIGHEST_ID, help='Spawn tie-break policy')
    parser.add_argument('--import', dest='import_code', default=None, help='Start from an exported board string')
    parser.add_argument('--place', action='append', default=[], help='Place TYPE@R,C (repeatable)')
    parser.add_argument('--ticks', type=int, default=0, help='Number of progress ticks to run')
    parser.add_argument('--param', type=int, default=0, help='Score parameter index')
    parser.add_argument('--fortune', type=float, default=0)
    parser.add_argument('--chips', type=float, default=0)
    parser.add_argument('--gh-level', type=int, default=0)
    parser.add_argument('--unique-level', type=int, default=0)
    parser.add_argument('--list', action='store_true', help='List the catalog and exit')
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"error: {e}")
        return 2

    session = Session.from_config(
        config,
        seed=args.seed,
        settings=EngineSettings(simulation_mode=args.simulation, evaluation_mode=args.evaluate, spawn_policy=args.policy),
    )
    if args.spawn_probability is not None and not session.set_spawn_probability(args.spawn_probability):
        print('error: --spawn-probability must be within [0, 1]')
        return 2

    if args.list:
        for t in session.mutation_types():
            cond = ', '.join(f"{c.min_count}x#{c.type_id}" for c in t.conditions) or '-'
            print(f"{t.id:3d} {t.name:<20} {t.size}x{t.size} stages={t.max_growth_stage} spawn: {cond}")
        return 0

    if not session.set_score_param(args.param) and session.catalog.score_params:
        print(f"error: no score parameter {args.param}")
        return 2
    if not session.set_modifiers(
        fortune=args.fortune,
        chips=args.chips,
        gh_upgrade_level=args.gh_level,
        unique_buff_level=args.unique_level,
    ):
        print('error: modifier values must be finite numbers')
        return 2

    if args.import_code is not None and not session.import_board(args.import_code):
        print('error: could not decode board string')
        return 1

    for text in args.place:
        try:
            type_id, origin = parse_placement(text)
        except ValueError:
            print(f"Could not parse placement {text!r}; expected TYPE@R,C")
            return 2
        if not session.place(origin, type_id):
            print(f"Rejected placement {text}")

    for i in range(args.ticks):
        spawned = session.tick()
        if spawned:
            print(f"Tick {i + 1}: spawned " + ', '.join(f"#{p.type_id}@{p.origin}" for p in spawned))

    print(session.board.pretty())
    result = session.score()
    print(f"\n{session.score_param_name}: base {result.base_yield}, final {result.final_yield}")
    exported = session.export_board()
    if exported.lossy:
        print(f"warning: pieces at {list(exported.dropped)} cannot be exported and were left out")
    print('Board code:', exported.code)
    return 0


if __name__ == '__main__':
    sys.exit(main())
