"""Terminal front end and network play for a two-player game."""

from __future__ import annotations

import argparse
import contextlib
import os
import select
import socket
import sys
import time
from typing import Iterator, Optional, TextIO

from netchess.board import Board, Color, Move, Pos, Status

MESSAGE_SIZE = 4
LOSE_MESSAGE = b"lll\x00"
START_SECONDS = 600

LOSE_BANNER = (
    "############\n"
    "#          #\n"
    "# YOU LOSE #\n"
    "#          #\n"
    "############\n"
)

WIN_BANNER = (
    "###########\n"
    "#         #\n"
    "# YOU WIN #\n"
    "#         #\n"
    "###########\n"
)

STATUS_TEXT = {
    Status.WAITING: "\n## Waiting for the other player... ##",
    Status.MY_TURN: "\n## Your turn. ##",
    Status.BAD_MOVE: "\n## Bad move! Please try again. ##",
    Status.CHECKED: "\n## Cannot move due to check condition. ##",
}

USAGE = (
    "Usage: chess mode [hostname] [port]...\n"
    'mode is either "host" or "join".\n'
    "You provide the host and port whre to listen/connect\n"
    "In-game rules: use WASD or HJKL to navigate the board.\n"
    "Press the Enter or Space key to make a selection. "
    "Press 'c' to cancel your selection.\n"
    "Move the cursor over the desired location and press Enter again to move the piece.\n"
    "Your cursor has green color, your selection purple. "
    "Your oponents move is marked with red->yellow\n"
)

_CLEAR_SCREEN = "\033[H\033[2J"

# Cursor steps (di, dj) per key, before the per-colour direction is applied.
_CURSOR_KEYS = {
    "w": (1, 0), "k": (1, 0),
    "a": (0, -1), "h": (0, -1),
    "s": (-1, 0), "j": (-1, 0),
    "d": (0, 1), "l": (0, 1),
}
_CONFIRM_KEYS = ("\n", " ")


class GameOver(Exception):
    """The game has ended; won tells whether this player won."""

    def __init__(self, won: bool) -> None:
        super().__init__("you win" if won else "you lose")
        self.won = won

    @property
    def banner(self) -> str:
        return WIN_BANNER if self.won else LOSE_BANNER


def encode_move(move: Move) -> bytes:
    """Pack a move into the four bytes sent over the wire."""
    return bytes((move.src.i, move.src.j, move.dst.i, move.dst.j))


def decode_move(data: bytes) -> Move:
    """Unpack four wire bytes into a move."""
    if len(data) != MESSAGE_SIZE:
        raise ValueError(f"a move takes {MESSAGE_SIZE} bytes, got {len(data)}")
    si, sj, di, dj = data
    return Move(Pos(si, sj), Pos(di, dj))


def open_connection(color: Color, hostname: str, port: str) -> socket.socket:
    """Host (white) waits for one opponent; join (black) connects to a host."""
    infos = socket.getaddrinfo(
        hostname, port, socket.AF_UNSPEC, socket.SOCK_STREAM, 0, socket.AI_PASSIVE
    )
    if color == Color.WHITE:
        for family, socktype, proto, _, address in infos:
            try:
                server = socket.socket(family, socktype, proto)
            except OSError:
                continue
            try:
                server.bind(address)
            except OSError:
                server.close()
                continue
            break
        else:
            raise ConnectionError("bind() failure!")
        with server:
            try:
                server.listen(1)
            except OSError as exc:
                raise ConnectionError("listen() failure!") from exc
            print(f"Waiting for an oponent to join, listening on: {hostname}:{port}")
            try:
                conn, _ = server.accept()
            except OSError as exc:
                raise ConnectionError("accept() failure!") from exc
        return conn

    for family, socktype, proto, _, address in infos:
        try:
            conn = socket.socket(family, socktype, proto)
        except OSError:
            continue
        try:
            conn.connect(address)
        except OSError:
            conn.close()
            continue
        return conn
    raise ConnectionError("connect() failure!")


def _format_clock(seconds: int) -> str:
    minutes = int(seconds / 60)
    return f"{minutes}:{seconds - minutes * 60:02d}"


@contextlib.contextmanager
def _cbreak(stream: TextIO) -> Iterator[None]:
    """Let single key presses through without waiting for Enter."""
    try:
        import termios
    except ImportError:
        yield
        return
    if not stream.isatty():
        yield
        return
    fd = stream.fileno()
    saved = termios.tcgetattr(fd)
    changed = termios.tcgetattr(fd)
    changed[3] &= ~termios.ICANON
    termios.tcsetattr(fd, termios.TCSANOW, changed)
    try:
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSANOW, saved)


def _flush_input(stream: TextIO) -> None:
    try:
        import termios
    except ImportError:
        return
    if stream.isatty():
        termios.tcflush(stream.fileno(), termios.TCIFLUSH)


class Game:
    """One player's side of a networked game."""

    def __init__(self, color: Color, conn: socket.socket) -> None:
        self.color = Color(color)
        self.conn = conn
        self.board = Board()
        self.status = Status.MY_TURN if self.color == Color.WHITE else Status.WAITING
        self.clocks = {Color.WHITE: START_SECONDS, Color.BLACK: START_SECONDS}
        self.selection = Move(Pos(0, 0), Pos(0, 0))
        self.op_move = Move(Pos(0, 0), Pos(0, 0))
        self.selected = False
        self._direction = 1 if self.color == Color.WHITE else -1

    def screen(self) -> str:
        """The full text shown to the player."""
        header = (
            f"White: {_format_clock(self.clocks[Color.WHITE])}; "
            f"Black: {_format_clock(self.clocks[Color.BLACK])}\n\n"
        )
        board = self.board.render(self.selection, self.op_move, self.color, self.selected)
        return f"{header}{board}{STATUS_TEXT[self.status]}\n"

    def handle_key(self, key: str) -> None:
        """Act on one key press made while it is this player's turn."""
        key = key.lower()
        if key in _CURSOR_KEYS:
            di, dj = _CURSOR_KEYS[key]
            dst = self.selection.dst
            self.selection = Move(
                self.selection.src,
                Pos(dst.i + di * self._direction, dst.j + dj * self._direction),
            )

        if self.selected:
            if key in _CONFIRM_KEYS:
                self.status = self.board.move_piece(self.selection, self.op_move, self.color)
                if self.status == Status.WAITING:
                    self.conn.sendall(encode_move(self.selection))
                self.selected = False
            elif key == "c":
                self.selected = False
        elif key in _CONFIRM_KEYS:
            self.selection = Move(self.selection.dst, self.selection.dst)
            self.selected = True

    def receive(self, data: bytes) -> None:
        """Apply a message from the opponent; raise GameOver if they lost."""
        if data == LOSE_MESSAGE:
            raise GameOver(won=True)
        self.op_move = decode_move(data)
        self.board.move_piece(self.op_move, self.selection, self.color.opponent)
        self.status = Status.MY_TURN

    def tick(self) -> None:
        """Run the clock of the player to move down by one second."""
        if self.status == Status.WAITING:
            self.clocks[self.color.opponent] -= 1
        else:
            self.clocks[self.color] -= 1
        if self.clocks[self.color] < 0:
            with contextlib.suppress(OSError):
                self.conn.sendall(LOSE_MESSAGE)
            raise GameOver(won=False)

    def run(self) -> Optional[bool]:
        """Play on the terminal until the game ends; True on a win, False on a loss."""
        stdin = sys.stdin
        stdout = sys.stdout
        with _cbreak(stdin):
            try:
                return self._loop(stdin, stdout)
            except GameOver as over:
                stdout.write(over.banner)
                stdout.flush()
                return over.won

    def _redraw(self, stdout: TextIO) -> None:
        stdout.write(_CLEAR_SCREEN + self.screen())
        stdout.flush()

    def _receive_message(self) -> bytes:
        data = b""
        while len(data) < MESSAGE_SIZE:
            chunk = self.conn.recv(MESSAGE_SIZE - len(data))
            if not chunk:
                raise ConnectionError("opponent disconnected")
            data += chunk
        return data

    def _loop(self, stdin: TextIO, stdout: TextIO) -> Optional[bool]:
        fd = stdin.fileno()
        next_tick = time.monotonic() + 1
        self._redraw(stdout)
        while True:
            waiting = self.status == Status.WAITING
            source = self.conn if waiting else fd
            timeout = max(0.0, next_tick - time.monotonic())
            ready, _, _ = select.select([source], [], [], timeout)
            if not ready:
                next_tick += 1
                self._redraw(stdout)
                self.tick()
                continue
            if waiting:
                self.receive(self._receive_message())
                _flush_input(stdin)
            else:
                key = os.read(fd, 1)
                if not key:
                    return None
                self.handle_key(key.decode("latin-1"))
            self._redraw(stdout)


def main(argv: Optional[list[str]] = None) -> int:
    """Start a game as host (white) or joiner (black)."""
    args = list(sys.argv[1:] if argv is None else argv)
    modes = {"host": Color.WHITE, "join": Color.BLACK}
    if len(args) != 3 or args[0] not in modes:
        sys.stderr.write(USAGE)
        return 1
    parser = argparse.ArgumentParser(prog="chess", add_help=False)
    parser.add_argument("mode")
    parser.add_argument("hostname")
    parser.add_argument("port")
    options = parser.parse_args(args)
    color = modes[options.mode]
    try:
        conn = open_connection(color, options.hostname, options.port)
    except socket.gaierror as exc:
        print(f"getaddrinfo: {exc.strerror}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(exc, file=sys.stderr)
        return 1
    with conn:
        try:
            Game(color, conn).run()
        except ConnectionError as exc:
            print(exc, file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())