"""SQLite storage for channels, the weekly goal, members and deliveries."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from .models import ChannelIds, Goal
from .timeutil import get_last_monday_at_18, get_next_monday_at_18

SCHEMA = """
CREATE TABLE IF NOT EXISTS channels (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    individuals_category_id INTEGER NOT NULL,
    anonymous_channel_id INTEGER NOT NULL,
    meta_channel_id INTEGER NOT NULL,
    logs_channel_id INTEGER NOT NULL,
    approval_channel_id INTEGER NOT NULL,
    results_channel_id INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS current_goal (
    goal INTEGER NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS users (
    discord_id INTEGER NOT NULL,
    channel_id TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS goals (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    discord_id INTEGER NOT NULL,
    amount INTEGER NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    status TEXT DEFAULT 'Pending',
    message_id TEXT
);
"""

_GOAL_COLUMNS = "id, discord_id, amount, created_at, status, message_id"
_MAX_ID = 2**64


class RepositoryError(Exception):
    """A database operation failed."""


class NotFoundError(RepositoryError):
    """A row that had to exist was not found."""


@contextmanager
def _errors(action: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        raise RepositoryError(f"{action}: {exc}") from exc


def _parse_id(text: object) -> int | None:
    if not isinstance(text, str):
        return None
    digits = text[1:] if text.startswith("+") else text
    if not (digits and digits.isascii() and digits.isdigit()):
        return None
    value = int(digits)
    return value if value < _MAX_ID else None


def _sql_utc(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _database_path(database_url: str) -> str:
    for prefix in ("sqlite://", "sqlite:"):
        if database_url.startswith(prefix):
            database_url = database_url[len(prefix):]
            break
    return database_url.split("?", 1)[0]


class Repository:
    """Queries over an open SQLite connection."""

    def __init__(self, db: sqlite3.Connection) -> None:
        self.db = db
        self.db.row_factory = sqlite3.Row

    def __enter__(self) -> Repository:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.db.close()

    # Channels

    def set_channels(
        self,
        individual: int,
        anonymous: int,
        meta: int,
        logs: int,
        approval: int,
        results: int,
    ) -> None:
        values = (logs, meta, anonymous, individual, approval, results)
        with _errors("Error saving channels"), self.db:
            current = self.db.execute("SELECT 1 FROM channels").fetchone()
            if current is not None:
                self.db.execute(
                    "UPDATE channels SET logs_channel_id = ?, meta_channel_id = ?, "
                    "anonymous_channel_id = ?, individuals_category_id = ?, "
                    "approval_channel_id = ?, results_channel_id = ?",
                    values,
                )
            else:
                self.db.execute(
                    "INSERT INTO channels (logs_channel_id, meta_channel_id, "
                    "anonymous_channel_id, individuals_category_id, "
                    "approval_channel_id, results_channel_id) VALUES (?, ?, ?, ?, ?, ?)",
                    values,
                )

    def get_channels(self) -> ChannelIds:
        with _errors("Error reading channels"):
            row = self.db.execute(
                "SELECT individuals_category_id, anonymous_channel_id, meta_channel_id, "
                "logs_channel_id, approval_channel_id, results_channel_id FROM channels"
            ).fetchone()
        if row is None:
            raise NotFoundError("no channels have been configured")
        return ChannelIds.from_row(row)

    # Weekly goal

    def set_meta(self, amount: int) -> None:
        with _errors("Error saving the goal"), self.db:
            current = self.db.execute("SELECT goal FROM current_goal").fetchone()
            if current is not None:
                self.db.execute(
                    "UPDATE current_goal SET goal = ?, created_at = CURRENT_TIMESTAMP",
                    (amount,),
                )
            else:
                self.db.execute("INSERT INTO current_goal (goal) VALUES (?)", (amount,))

    def get_meta(self) -> int:
        with _errors("Error reading the goal"):
            row = self.db.execute("SELECT goal FROM current_goal").fetchone()
        if row is None:
            raise NotFoundError("no weekly goal has been set")
        return row["goal"]

    def _approved_in_week(
        self, now: datetime | None, user_id: int | None = None
    ) -> list[Goal]:
        start = _sql_utc(get_last_monday_at_18(now))
        end = _sql_utc(get_next_monday_at_18(now))
        sql = (
            f"SELECT {_GOAL_COLUMNS} FROM goals WHERE status = 'Approved' "
            "AND datetime(created_at) >= datetime(?) AND datetime(created_at) < datetime(?)"
        )
        params: tuple[object, ...] = (start, end)
        if user_id is not None:
            sql += " AND discord_id = ?"
            params += (user_id,)
        with _errors("Error reading approved goals"):
            rows = self.db.execute(sql, params).fetchall()
        return [Goal.from_row(row) for row in rows]

    def get_approved_metas_from_current_week(self, now: datetime | None = None) -> list[Goal]:
        """Approved deliveries of every member in the current week."""
        return self._approved_in_week(now)

    # Members

    def get_user_channel(self, user_id: int) -> int | None:
        with _errors("Error reading user channel"):
            row = self.db.execute(
                "SELECT channel_id FROM users WHERE discord_id = ?", (user_id,)
            ).fetchone()
        return None if row is None else _parse_id(row["channel_id"])

    def get_all_user_channels(self) -> list[tuple[int, int]]:
        with _errors("Error reading user channels"):
            rows = self.db.execute("SELECT discord_id, channel_id FROM users").fetchall()
        pairs = ((row["discord_id"], _parse_id(row["channel_id"])) for row in rows)
        return [(user, channel) for user, channel in pairs if channel is not None]

    def create_user_channel(self, user_id: int, channel_id: int) -> None:
        with _errors("Error creating user channel"), self.db:
            self.db.execute(
                "INSERT INTO users (discord_id, channel_id) VALUES (?, ?)",
                (user_id, str(channel_id)),
            )

    # Deliveries

    def get_user_last_goal(self, user_id: int) -> Goal | None:
        with _errors("Error reading last goal"):
            row = self.db.execute(
                f"SELECT {_GOAL_COLUMNS} FROM goals WHERE discord_id = ? "
                "ORDER BY created_at DESC, id DESC LIMIT 1",
                (user_id,),
            ).fetchone()
        return None if row is None else Goal.from_row(row)

    def create_goal(self, user_id: int, amount: int, message_id: object) -> None:
        with _errors("Error creating goal"), self.db:
            self.db.execute(
                "INSERT INTO goals (discord_id, amount, message_id) VALUES (?, ?, ?)",
                (user_id, amount, str(message_id)),
            )

    def get_user_meta_by_message_id(self, message_id: int) -> Goal:
        with _errors("Error reading goal"):
            row = self.db.execute(
                f"SELECT {_GOAL_COLUMNS} FROM goals WHERE message_id = ?",
                (str(message_id),),
            ).fetchone()
        if row is None:
            raise NotFoundError(f"no goal for message {message_id}")
        return Goal.from_row(row)

    def update_meta_status(self, message_id: int, status: str) -> None:
        with _errors("Error updating goal status"), self.db:
            self.db.execute(
                "UPDATE goals SET status = ? WHERE message_id = ?",
                (status, str(message_id)),
            )

    def get_user_approved_weekly(self, user_id: int, now: datetime | None = None) -> list[Goal]:
        """Approved deliveries of one member in the current week."""
        return self._approved_in_week(now, user_id)


def init_db(database_url: str) -> Repository:
    """Open the database, creating it and its tables when missing."""
    path = _database_path(database_url)
    in_memory = path in ("", ":memory:")
    if not in_memory and not Path(path).exists():
        print(f"[INFO] - Creating database {database_url}")
        try:
            Path(path).touch()
        except OSError as exc:
            raise RepositoryError(f"Error creating database: {exc}") from exc
    with _errors("Error connecting to database"):
        connection = sqlite3.connect(":memory:" if in_memory else path)
    with _errors("Error running the migrations"):
        connection.executescript(SCHEMA)
    return Repository(connection)