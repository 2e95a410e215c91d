"""Records stored by the repository."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any


@dataclass(frozen=True)
class ChannelIds:
    """The configured channels of the guild."""

    individuals_category_id: int
    anonymous_channel_id: int
    meta_channel_id: int
    logs_channel_id: int
    approval_channel_id: int
    results_channel_id: int

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ChannelIds:
        return cls(**{field.name: int(row[field.name]) for field in fields(cls)})


@dataclass(frozen=True)
class Goal:
    """A delivery of the weekly goal submitted by a member."""

    id: int
    user_id: int
    amount: int
    created_at: str | None = None
    status: str | None = None
    message_id: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Goal:
        return cls(
            id=row["id"],
            user_id=row["discord_id"],
            amount=row["amount"],
            created_at=row["created_at"],
            status=row["status"],
            message_id=row["message_id"],
        )