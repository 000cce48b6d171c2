# netchess

Two-player chess in the terminal, played between two machines over a TCP
connection. One player hosts the game and plays white; the other joins and
plays black. Each side has a ten-minute clock.

## Installing

```
pip install .
```

## Playing

The hosting player listens on a host name and port:

```
netchess host 0.0.0.0 5000
```

The other player connects to it:

```
netchess join 192.0.2.10 5000
```

Running `netchess` with anything other than a mode (`host` or `join`), a host
name and a port prints a short usage message and exits with status 1. A
failed name lookup, bind, listen, accept or connect, or the opponent
disconnecting mid-game, also ends the program with status 1 and a message on
standard error.

### Controls

- `W`/`A`/`S`/`D` or `K`/`H`/`J`/`L` move the cursor around the board. The
  cursor wraps around at the board's edges.
- Enter or Space selects the piece under the cursor.
- Move the cursor to the destination square and press Enter or Space again
  to make the move.
- `c` cancels the current selection.

Your cursor is shown in green and your selected piece in purple. Your
opponent's last move is marked red (from) and yellow (to).

The rules covered are piece movement, captures, castling, en passant and
refusing moves that would leave your own king in check. A player whose clock
runs out loses, and the opponent is told that they have won.

### What it does not do

- Pawns are not promoted; a pawn that reaches the last rank stays a pawn and
  can no longer move.
- Checkmate and stalemate are not detected. The game ends only when a clock
  runs out or a player quits.
- There is no move list, saving, resigning or draw offer.
- The terminal handling needs a POSIX system.

## Using the board in code

The `netchess.board` module holds the game state and move rules:
`Board`, `Pos`, `Move`, `Piece`, `Color`, `Status`, and the helpers
`color_of` and `piece_symbol`.

```python
from netchess.board import Board, Color, Move, Pos, Status

board = Board()
no_move = Move(Pos(0, 0), Pos(0, 0))
opening = Move(Pos(1, 4), Pos(3, 4))  # e2 to e4
status = board.move_piece(opening, no_move, Color.WHITE)
assert status is Status.WAITING
print(board.render(opening, no_move, Color.WHITE, False))
```

Positions are `(row, column)` pairs counted from white's side, so `Pos(0, 4)`
is the white king's starting square; both indices wrap modulo 8.
`Board.move_piece` returns `Status.WAITING` when the move was played,
`Status.BAD_MOVE` when it is not legal for that piece or player, and
`Status.CHECKED` when it would leave the mover's king in check (the board is
left unchanged in both error cases). The second argument is the opponent's
last move, which en passant depends on.

`netchess.cli` holds the terminal game: `Game` keeps one player's side
(`screen`, `handle_key`, `receive`, `tick`, `run`), `encode_move` and
`decode_move` convert moves to and from the four bytes sent over the wire,
`open_connection` hosts or joins a game, and `main` is the `netchess`
command.

## Running the tests

```
pip install .[test]
pytest
```