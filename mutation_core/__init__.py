"""
Mutation planner core Python package.

Pure-logic engine for the 10x10 mutation board, kept free of any UI so the
Flask app, the CLI and the tests can share it.
Modules:
- catalog.py: MutationType, Catalog, config normalization
- effects.py: growth/scoring rules for special effects
- board.py: Board, Piece, Coord and geometry helpers
- spawn.py: neighbourhood spawn conditions
- placement.py, progress.py: player commands and the tick
- scoring.py: base yield and global modifiers
- history.py, codec.py: undo/redo and the export string
- session.py: Session, the API used by game.py and app.py
"""
