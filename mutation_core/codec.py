from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from .board import Board, Coord
from .config import debug
from .placement import place
from .state import GameState

EMPTY = 0xFF
PLAYER_FLAG = 0x80
TYPE_MASK = 0x7F
MAX_TYPE_ID = 126  # 127 | 0x80 would collide with EMPTY
MAX_RUN = 255


@dataclass(frozen=True)
class ExportResult:
    code: str
    dropped: Tuple[Coord, ...] = ()  # origins exported as empty because their type id is too large

    @property
    def lossy(self) -> bool:
        return len(self.dropped) > 0


def board_to_bytes(board: Board) -> Tuple[bytes, Tuple[Coord, ...]]:
    """One byte per cell, row-major. Only origin cells carry a value."""
    out = bytearray([EMPTY] * (board.size * board.size))
    dropped: List[Coord] = []
    for piece in board.iter_pieces():
        if not (0 <= piece.type_id <= MAX_TYPE_ID):
            dropped.append(piece.origin)
            continue
        value = piece.type_id | (PLAYER_FLAG if piece.is_player_placed else 0)
        out[board.index(*piece.origin)] = value
    return bytes(out), tuple(dropped)


def rle_encode(data: bytes) -> bytes:
    """(value, count) pairs; runs longer than 255 are split."""
    out = bytearray()
    i = 0
    n = len(data)
    while i < n:
        value = data[i]
        run = 1
        while i + run < n and data[i + run] == value and run < MAX_RUN:
            run += 1
        out.append(value)
        out.append(run)
        i += run
    return bytes(out)


def rle_decode(data: bytes) -> bytes:
    # A dangling value byte without a count is ignored.
    out = bytearray()
    for i in range(0, len(data) - 1, 2):
        out.extend([data[i]] * data[i + 1])
    return bytes(out)


def encode_board(board: Board) -> ExportResult:
    raw, dropped = board_to_bytes(board)
    if dropped:
        debug('codec', f"type id above {MAX_TYPE_ID} exported as empty at {list(dropped)}")
    code = base64.b64encode(rle_encode(raw)).decode('ascii')
    return ExportResult(code=code, dropped=dropped)


def decode_cells(code: str, cell_count: int) -> Optional[bytes]:
    """Flat per-cell bytes, padded with EMPTY or truncated to `cell_count`. None for invalid base64."""
    try:
        packed = base64.b64decode(''.join(code.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        debug('codec', f"invalid export string: {e}")
        return None
    cells = rle_decode(packed)
    if len(cells) < cell_count:
        debug('codec', f"short export string: {len(cells)} of {cell_count} cells, padding")
        cells = cells + bytes([EMPTY] * (cell_count - len(cells)))
    return cells[:cell_count]


def import_board(state: GameState, code: str, simulation: bool = False) -> bool:
    """Replaces the board with the decoded one. Returns False (board untouched) on invalid base64.

    Pieces are rebuilt through the normal placement rules, so growth stages
    follow the current mode; the player flag is then restored per piece.
    """
    if not isinstance(code, str):
        return False
    board = state.board
    cells = decode_cells(code, board.size * board.size)
    if cells is None:
        return False
    board.clear()
    for idx, value in enumerate(cells):
        if value == EMPTY:
            continue
        origin = divmod(idx, board.size)
        type_id = value & TYPE_MASK
        if not place(state, origin, type_id, simulation=simulation):
            debug('codec', f"skipping unknown or off-board type {type_id} at {origin}")
            continue
        if not value & PLAYER_FLAG:
            piece = state.board.at(*origin)
            if piece is not None:
                state.board.update(replace(piece, is_player_placed=False))
    return True