"""Two-player chess over a TCP connection, played in the terminal."""

__version__ = "0.1.0"
__all__ = ["board", "cli"]