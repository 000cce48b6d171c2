"""Chess board state, move validation and terminal rendering."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, Optional

BOARD_SIZE = 8
HISTSIZE = 4096

BACKGROUND_DEFAULT = "\033[37m\033[40m"

# Each pair is indexed by square colour: 0 for dark squares, 1 for light ones.
_POINTER_COLOR = ("\033[32m\033[40m", "\033[32m\033[44m")
_SELECTION_COLOR = ("\033[35m\033[40m", "\033[35m\033[44m")
_OP_POINTER_COLOR = ("\033[33m\033[40m", "\033[33m\033[44m")
_OP_SELECTION_COLOR = ("\033[31m\033[40m", "\033[31m\033[44m")
_BACKGROUND_COLOR = ("\033[37m\033[40m", "\033[37m\033[44m")

_SYMBOL_BASE = 0x2654


class Color(IntEnum):
    BLACK = 0
    WHITE = 1

    @property
    def opponent(self) -> "Color":
        return Color(1 - self)


class Piece(IntEnum):
    KING_B = 0
    QUEEN_B = 1
    ROOK_B = 2
    BISHOP_B = 3
    KNIGHT_B = 4
    PAWN_B = 5
    KING_W = 6
    QUEEN_W = 7
    ROOK_W = 8
    BISHOP_W = 9
    KNIGHT_W = 10
    PAWN_W = 11
    EMPTY = 12


class Status(IntEnum):
    WAITING = 0
    MY_TURN = 1
    BAD_MOVE = 2
    CHECKED = 3


@dataclass(frozen=True)
class Pos:
    """A square; i is the rank index, j the file index. Both wrap modulo 8."""

    i: int
    j: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "i", self.i % BOARD_SIZE)
        object.__setattr__(self, "j", self.j % BOARD_SIZE)


@dataclass(frozen=True)
class Move:
    src: Pos
    dst: Pos


def color_of(piece: Piece) -> Optional[Color]:
    """Return the colour of a piece, or None for an empty square."""
    if Piece.KING_B <= piece <= Piece.PAWN_B:
        return Color.BLACK
    if Piece.KING_W <= piece <= Piece.PAWN_W:
        return Color.WHITE
    return None


def piece_symbol(piece: Piece) -> str:
    """Return the chess glyph for a piece, or a space for an empty square."""
    if piece == Piece.EMPTY:
        return " "
    return chr(_SYMBOL_BASE + int(piece))


def _sign(x: int) -> int:
    return (x > 0) - (x < 0)


_Changes = Dict[Pos, Piece]


class Board:
    """An 8x8 board together with the history of moves played on it."""

    def __init__(self) -> None:
        self._grid: list[list[Piece]] = []
        self._history: deque[Move] = deque(maxlen=HISTSIZE)
        self.move_count = 0
        self._validators: Dict[Piece, Callable[[Move, Move], Optional[_Changes]]] = {
            Piece.KING_B: self._king_black,
            Piece.QUEEN_B: self._queen,
            Piece.ROOK_B: self._rook,
            Piece.BISHOP_B: self._bishop,
            Piece.KNIGHT_B: self._knight,
            Piece.PAWN_B: self._pawn_black,
            Piece.KING_W: self._king_white,
            Piece.QUEEN_W: self._queen,
            Piece.ROOK_W: self._rook,
            Piece.BISHOP_W: self._bishop,
            Piece.KNIGHT_W: self._knight,
            Piece.PAWN_W: self._pawn_white,
            Piece.EMPTY: lambda move, op_move: None,
        }
        self.reset()

    def reset(self) -> None:
        """Put every piece on its starting square and forget the history."""
        back = [Piece.ROOK_W, Piece.KNIGHT_W, Piece.BISHOP_W, Piece.QUEEN_W,
                Piece.KING_W, Piece.BISHOP_W, Piece.KNIGHT_W, Piece.ROOK_W]
        self._grid = [[Piece.EMPTY] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        self._grid[0] = list(back)
        self._grid[1] = [Piece.PAWN_W] * BOARD_SIZE
        self._grid[6] = [Piece.PAWN_B] * BOARD_SIZE
        self._grid[7] = [Piece(p - Piece.KING_W) for p in back]
        self._history.clear()
        self.move_count = 0

    def piece_at(self, pos: Pos) -> Piece:
        return self._grid[pos.i][pos.j]

    def set_piece(self, pos: Pos, piece: Piece) -> None:
        self._grid[pos.i][pos.j] = Piece(piece)

    def has_moved(self, pos: Pos) -> bool:
        """True if a remembered move started or ended on pos."""
        return any(pos in (m.src, m.dst) for m in self._history)

    def threatened(self, pos: Pos, color: Color, op_move: Move) -> bool:
        """True if any piece of the given colour could move to pos."""
        for i, row in enumerate(self._grid):
            for j, piece in enumerate(row):
                if color_of(piece) == color and self.is_valid_move(Move(Pos(i, j), pos), op_move):
                    return True
        return False

    def is_checked(self, color: Color, op_move: Move) -> bool:
        """True if the king of the given colour is threatened."""
        king = Piece.KING_W if color == Color.WHITE else Piece.KING_B
        for i, row in enumerate(self._grid):
            for j, piece in enumerate(row):
                if piece == king:
                    return self.threatened(Pos(i, j), Color(color).opponent, op_move)
        return False

    def is_valid_move(self, move: Move, op_move: Move) -> bool:
        """True if the piece on move.src may move to move.dst."""
        return self._validate(move, op_move) is not None

    def move_piece(self, move: Move, op_move: Move, color: Color) -> Status:
        """Play a move for color; return WAITING on success, else BAD_MOVE or CHECKED."""
        taker = self.piece_at(move.src)
        taken = self.piece_at(move.dst)
        if color_of(taker) != color or color_of(taken) == color:
            return Status.BAD_MOVE
        extra = self._validate(move, op_move)
        if extra is None:
            return Status.BAD_MOVE

        changes: _Changes = dict(extra)
        changes[move.dst] = taker
        changes[move.src] = Piece.EMPTY
        saved = {pos: self.piece_at(pos) for pos in changes}
        for pos, piece in changes.items():
            self.set_piece(pos, piece)

        if self.is_checked(color, op_move):
            for pos, piece in saved.items():
                self.set_piece(pos, piece)
            return Status.CHECKED

        self._history.append(move)
        self.move_count += 1
        return Status.WAITING

    def render(self, move: Move, op_move: Move, color: Color, selected: bool) -> str:
        """Draw the board from the side of color, marking cursor and last moves."""
        lines = []
        for row in range(BOARD_SIZE):
            i = BOARD_SIZE - row - 1 if color == Color.WHITE else row
            cells = [f"{i + 1}|"]
            for col in range(BOARD_SIZE):
                j = BOARD_SIZE - col - 1 if color == Color.BLACK else col
                here = Pos(i, j)
                glyph = piece_symbol(self._grid[i][j])
                shade = int((i + j) % 2 != 0)
                background = _BACKGROUND_COLOR[shade]
                opponent_shown = self.move_count > color
                if selected and here == move.src:
                    marker = _SELECTION_COLOR[shade]
                elif here == move.dst:
                    marker = _POINTER_COLOR[shade]
                elif opponent_shown and here == op_move.src:
                    marker = _OP_SELECTION_COLOR[shade]
                elif opponent_shown and here == op_move.dst:
                    marker = _OP_POINTER_COLOR[shade]
                else:
                    marker = None
                if marker is None:
                    cells.append(f"{background} {glyph} ")
                else:
                    cells.append(f"{marker}[{background}{glyph}{marker}]")
            cells.append(BACKGROUND_DEFAULT)
            lines.append("".join(cells))
        lines.append("   ______________________")
        if color == Color.WHITE:
            lines.append("   a  b  c  d  e  f  g  h")
        else:
            lines.append("   h  g  f  e  d  c  b  a")
        return "\n".join(lines) + "\n"

    # Validation. Each validator returns None for an illegal move, otherwise
    # the extra square changes the move brings with it (en passant, castling).

    def _validate(self, move: Move, op_move: Move) -> Optional[_Changes]:
        return self._validators[self.piece_at(move.src)](move, op_move)

    def _is_empty(self, i: int, j: int) -> bool:
        return self._grid[i][j] == Piece.EMPTY

    def _path_clear(self, move: Move) -> bool:
        di = _sign(move.dst.i - move.src.i)
        dj = _sign(move.dst.j - move.src.j)
        steps = max(abs(move.dst.i - move.src.i), abs(move.dst.j - move.src.j))
        return all(
            self._is_empty(move.src.i + k * di, move.src.j + k * dj)
            for k in range(1, steps)
        )

    def _pawn(self, move: Move, op_move: Move, forward: int, start_row: int,
              ep_row: int, enemy_pawn: Piece) -> Optional[_Changes]:
        src, dst = move.src, move.dst
        step = (dst.i - src.i) * forward
        if step <= 0:
            return None
        if step == 1:
            side = abs(dst.j - src.j)
            if side == 0:
                return {} if self.piece_at(dst) == Piece.EMPTY else None
            if side == 1:
                if (src.i == ep_row
                        and self.piece_at(op_move.dst) == enemy_pawn
                        and op_move.src.i == ep_row + 2 * forward
                        and op_move.dst.i == ep_row
                        and dst.j == op_move.dst.j):
                    return {op_move.dst: Piece.EMPTY}
                return None if self.piece_at(dst) == Piece.EMPTY else {}
            return None
        if src.i == start_row:
            if (step != 2 or src.j != dst.j
                    or self.piece_at(dst) != Piece.EMPTY
                    or not self._is_empty(dst.i - forward, dst.j)):
                return None
            return {}
        return None

    def _pawn_white(self, move: Move, op_move: Move) -> Optional[_Changes]:
        return self._pawn(move, op_move, 1, 1, 4, Piece.PAWN_B)

    def _pawn_black(self, move: Move, op_move: Move) -> Optional[_Changes]:
        return self._pawn(move, op_move, -1, 6, 3, Piece.PAWN_W)

    def _rook(self, move: Move, op_move: Move) -> Optional[_Changes]:
        if move.dst.i != move.src.i and move.dst.j != move.src.j:
            return None
        return {} if self._path_clear(move) else None

    def _bishop(self, move: Move, op_move: Move) -> Optional[_Changes]:
        di = move.dst.i - move.src.i
        dj = move.dst.j - move.src.j
        if abs(di) != abs(dj) or di == 0:
            return None
        return {} if self._path_clear(move) else None

    def _queen(self, move: Move, op_move: Move) -> Optional[_Changes]:
        rook = self._rook(move, op_move)
        return rook if rook is not None else self._bishop(move, op_move)

    def _knight(self, move: Move, op_move: Move) -> Optional[_Changes]:
        di = abs(move.src.i - move.dst.i)
        dj = abs(move.src.j - move.dst.j)
        return {} if di + dj == 3 and di != 0 and dj != 0 else None

    def _king(self, move: Move, op_move: Move, home: int, rook: Piece,
              enemy: Color) -> Optional[_Changes]:
        src, dst = move.src, move.dst
        if src == Pos(home, 4) and dst.i == home:
            if dst.j == 2:
                if self.has_moved(src):
                    return None
                if not all(self._is_empty(home, j) for j in (1, 2, 3)):
                    return None
                if any(self.threatened(Pos(home, j), enemy, op_move) for j in (2, 3, 4)):
                    return None
                return {Pos(home, 0): Piece.EMPTY, Pos(home, 3): rook}
            if dst.j == 6:
                if self.has_moved(src):
                    return None
                if not all(self._is_empty(home, j) for j in (6, 5)):
                    return None
                if any(self.threatened(Pos(home, j), enemy, op_move) for j in (6, 4)):
                    return None
                return {Pos(home, 7): Piece.EMPTY, Pos(home, 5): rook}
            return None
        if abs(dst.i - src.i) > 1 or abs(dst.j - src.j) > 1:
            return None
        return {}

    def _king_white(self, move: Move, op_move: Move) -> Optional[_Changes]:
        return self._king(move, op_move, 0, Piece.ROOK_W, Color.BLACK)

    def _king_black(self, move: Move, op_move: Move) -> Optional[_Changes]:
        return self._king(move, op_move, 7, Piece.ROOK_B, Color.WHITE)