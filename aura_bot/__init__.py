"""Chat bot core for weekly goals, individual channels and anonymous messages, stored in SQLite."""

__version__ = "0.1.0"