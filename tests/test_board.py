import pytest

from netchess.board import (
    BACKGROUND_DEFAULT,
    Board,
    Color,
    Move,
    Piece,
    Pos,
    Status,
    color_of,
    piece_symbol,
)

NO_MOVE = Move(Pos(0, 0), Pos(0, 0))


def mv(a, b, c, d):
    return Move(Pos(a, b), Pos(c, d))


def empty_board():
    board = Board()
    for i in range(8):
        for j in range(8):
            board.set_piece(Pos(i, j), Piece.EMPTY)
    return board


def snapshot(board):
    return [[board.piece_at(Pos(i, j)) for j in range(8)] for i in range(8)]


def test_initial_position():
    board = Board()
    assert board.piece_at(Pos(0, 4)) == Piece.KING_W
    assert board.piece_at(Pos(0, 3)) == Piece.QUEEN_W
    assert board.piece_at(Pos(7, 4)) == Piece.KING_B
    assert board.piece_at(Pos(7, 0)) == Piece.ROOK_B
    assert all(board.piece_at(Pos(1, j)) == Piece.PAWN_W for j in range(8))
    assert all(board.piece_at(Pos(6, j)) == Piece.PAWN_B for j in range(8))
    assert all(board.piece_at(Pos(i, j)) == Piece.EMPTY for i in range(2, 6) for j in range(8))
    assert board.move_count == 0


def test_color_of():
    assert color_of(Piece.KING_B) == Color.BLACK
    assert color_of(Piece.PAWN_B) == Color.BLACK
    assert color_of(Piece.KING_W) == Color.WHITE
    assert color_of(Piece.PAWN_W) == Color.WHITE
    assert color_of(Piece.EMPTY) is None


def test_piece_symbol():
    assert piece_symbol(Piece.KING_B) == "\u2654"
    assert piece_symbol(Piece.EMPTY) == " "
    symbols = {piece_symbol(p) for p in Piece if p != Piece.EMPTY}
    assert len(symbols) == 12
    assert all(len(s) == 1 for s in symbols)


def test_pos_wraps_like_three_bit_field():
    assert Pos(8, -1) == Pos(0, 7)
    assert Pos(3, 4) == Pos(3, 4)


@pytest.mark.parametrize(
    "move, expected",
    [
        (mv(1, 4, 2, 4), True),
        (mv(1, 4, 3, 4), True),
        (mv(1, 4, 4, 4), False),
        (mv(1, 4, 2, 5), False),
        (mv(6, 4, 5, 4), True),
        (mv(6, 4, 4, 4), True),
        (mv(6, 4, 7, 4), False),
        (mv(0, 6, 2, 5), True),
        (mv(0, 6, 2, 6), False),
        (mv(0, 0, 3, 0), False),
        (mv(0, 2, 2, 4), False),
    ],
)
def test_initial_move_validity(move, expected):
    assert Board().is_valid_move(move, NO_MOVE) is expected


def test_is_valid_move_does_not_change_board():
    board = Board()
    before = snapshot(board)
    board.is_valid_move(mv(0, 6, 2, 5), NO_MOVE)
    assert snapshot(board) == before


def test_move_piece_success_updates_board_and_history():
    board = Board()
    assert board.move_piece(mv(1, 4, 3, 4), NO_MOVE, Color.WHITE) == Status.WAITING
    assert board.piece_at(Pos(3, 4)) == Piece.PAWN_W
    assert board.piece_at(Pos(1, 4)) == Piece.EMPTY
    assert board.move_count == 1
    assert board.has_moved(Pos(1, 4))
    assert board.has_moved(Pos(3, 4))
    assert not board.has_moved(Pos(1, 3))


def test_move_wrong_color_is_bad():
    board = Board()
    before = snapshot(board)
    assert board.move_piece(mv(6, 4, 5, 4), NO_MOVE, Color.WHITE) == Status.BAD_MOVE
    assert snapshot(board) == before
    assert board.move_count == 0


def test_capture_own_piece_is_bad():
    board = Board()
    assert board.move_piece(mv(0, 0, 1, 0), NO_MOVE, Color.WHITE) == Status.BAD_MOVE


def test_move_from_empty_square_is_bad():
    board = Board()
    assert board.move_piece(mv(3, 3, 4, 3), NO_MOVE, Color.WHITE) == Status.BAD_MOVE


def test_en_passant_removes_captured_pawn():
    board = Board()
    board.set_piece(Pos(1, 4), Piece.EMPTY)
    board.set_piece(Pos(4, 4), Piece.PAWN_W)
    black = mv(6, 3, 4, 3)
    assert board.move_piece(black, NO_MOVE, Color.BLACK) == Status.WAITING
    assert board.move_piece(mv(4, 4, 5, 3), black, Color.WHITE) == Status.WAITING
    assert board.piece_at(Pos(5, 3)) == Piece.PAWN_W
    assert board.piece_at(Pos(4, 3)) == Piece.EMPTY


def test_diagonal_pawn_move_needs_capture():
    board = Board()
    board.set_piece(Pos(4, 4), Piece.PAWN_W)
    assert not board.is_valid_move(mv(4, 4, 5, 3), NO_MOVE)
    board.set_piece(Pos(5, 3), Piece.KNIGHT_B)
    assert board.is_valid_move(mv(4, 4, 5, 3), NO_MOVE)


def test_kingside_castling_moves_rook():
    board = Board()
    board.set_piece(Pos(0, 5), Piece.EMPTY)
    board.set_piece(Pos(0, 6), Piece.EMPTY)
    assert board.move_piece(mv(0, 4, 0, 6), NO_MOVE, Color.WHITE) == Status.WAITING
    assert board.piece_at(Pos(0, 6)) == Piece.KING_W
    assert board.piece_at(Pos(0, 5)) == Piece.ROOK_W
    assert board.piece_at(Pos(0, 7)) == Piece.EMPTY
    assert board.piece_at(Pos(0, 4)) == Piece.EMPTY


def test_queenside_castling_black():
    board = Board()
    for j in (1, 2, 3):
        board.set_piece(Pos(7, j), Piece.EMPTY)
    assert board.move_piece(mv(7, 4, 7, 2), NO_MOVE, Color.BLACK) == Status.WAITING
    assert board.piece_at(Pos(7, 2)) == Piece.KING_B
    assert board.piece_at(Pos(7, 3)) == Piece.ROOK_B
    assert board.piece_at(Pos(7, 0)) == Piece.EMPTY


def test_castling_through_threat_is_refused():
    board = Board()
    board.set_piece(Pos(0, 5), Piece.EMPTY)
    board.set_piece(Pos(0, 6), Piece.EMPTY)
    board.set_piece(Pos(1, 6), Piece.EMPTY)
    board.set_piece(Pos(4, 6), Piece.ROOK_B)
    before = snapshot(board)
    assert board.move_piece(mv(0, 4, 0, 6), NO_MOVE, Color.WHITE) == Status.BAD_MOVE
    assert snapshot(board) == before


def test_castling_blocked_by_piece():
    board = Board()
    board.set_piece(Pos(0, 6), Piece.EMPTY)
    assert not board.is_valid_move(mv(0, 4, 0, 6), NO_MOVE)


def test_moving_into_check_is_reverted():
    board = empty_board()
    board.set_piece(Pos(0, 4), Piece.KING_W)
    board.set_piece(Pos(1, 4), Piece.ROOK_W)
    board.set_piece(Pos(7, 4), Piece.ROOK_B)
    board.set_piece(Pos(7, 0), Piece.KING_B)
    before = snapshot(board)
    assert board.move_piece(mv(1, 4, 1, 0), NO_MOVE, Color.WHITE) == Status.CHECKED
    assert snapshot(board) == before
    assert board.move_count == 0
    assert not board.has_moved(Pos(1, 4))


def test_is_checked():
    board = empty_board()
    board.set_piece(Pos(0, 4), Piece.KING_W)
    board.set_piece(Pos(7, 0), Piece.KING_B)
    assert not board.is_checked(Color.WHITE, NO_MOVE)
    board.set_piece(Pos(5, 4), Piece.QUEEN_B)
    assert board.is_checked(Color.WHITE, NO_MOVE)
    board.set_piece(Pos(3, 4), Piece.KNIGHT_W)
    assert not board.is_checked(Color.WHITE, NO_MOVE)


def test_threatened_on_initial_board():
    board = Board()
    assert board.threatened(Pos(2, 0), Color.WHITE, NO_MOVE)
    assert not board.threatened(Pos(4, 4), Color.WHITE, NO_MOVE)
    assert board.threatened(Pos(5, 7), Color.BLACK, NO_MOVE)


def test_sliding_pieces_on_open_board():
    board = empty_board()
    board.set_piece(Pos(3, 3), Piece.QUEEN_W)
    assert board.is_valid_move(mv(3, 3, 7, 7), NO_MOVE)
    assert board.is_valid_move(mv(3, 3, 3, 0), NO_MOVE)
    assert not board.is_valid_move(mv(3, 3, 5, 4), NO_MOVE)
    board.set_piece(Pos(5, 5), Piece.PAWN_B)
    assert not board.is_valid_move(mv(3, 3, 7, 7), NO_MOVE)
    assert board.is_valid_move(mv(3, 3, 5, 5), NO_MOVE)


def test_bishop_rejects_straight_lines():
    board = empty_board()
    board.set_piece(Pos(2, 2), Piece.BISHOP_B)
    assert board.is_valid_move(mv(2, 2, 0, 0), NO_MOVE)
    assert not board.is_valid_move(mv(2, 2, 2, 5), NO_MOVE)
    assert not board.is_valid_move(mv(2, 2, 2, 2), NO_MOVE)


def test_king_steps_one_square():
    board = empty_board()
    board.set_piece(Pos(3, 3), Piece.KING_B)
    assert board.is_valid_move(mv(3, 3, 4, 4), NO_MOVE)
    assert not board.is_valid_move(mv(3, 3, 5, 3), NO_MOVE)


def test_reset_restores_start():
    board = Board()
    fresh = snapshot(board)
    board.move_piece(mv(1, 4, 3, 4), NO_MOVE, Color.WHITE)
    board.reset()
    assert snapshot(board) == fresh
    assert board.move_count == 0
    assert not board.has_moved(Pos(1, 4))


def test_render_white_orientation():
    text = Board().render(NO_MOVE, NO_MOVE, Color.WHITE, False)
    lines = text.split("\n")
    assert lines[0].startswith("8|")
    assert lines[7].startswith("1|")
    assert lines[0].endswith(BACKGROUND_DEFAULT)
    assert lines[8] == "   ______________________"
    assert lines[9] == "   a  b  c  d  e  f  g  h"
    assert text.endswith("\n")


def test_render_black_orientation():
    lines = Board().render(NO_MOVE, NO_MOVE, Color.BLACK, False).split("\n")
    assert lines[0].startswith("1|")
    assert lines[7].startswith("8|")
    assert lines[9] == "   h  g  f  e  d  c  b  a"


def test_render_selection_and_opponent_markers():
    board = Board()
    cursor = mv(1, 4, 3, 4)
    text = board.render(cursor, NO_MOVE, Color.WHITE, True)
    assert "\033[35m" in text
    assert "\033[32m" in text
    assert "\033[31m" not in text
    op = mv(6, 4, 4, 4)
    board.move_piece(cursor, NO_MOVE, Color.WHITE)
    board.move_piece(op, cursor, Color.BLACK)
    text = board.render(NO_MOVE, op, Color.WHITE, False)
    assert "\033[31m" in text
    assert "\033[33m" in text
    assert "\033[35m" not in text
    assert piece_symbol(Piece.KING_B) in text