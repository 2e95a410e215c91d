import dataclasses

import pytest

from aura_bot.models import ChannelIds, Goal


def test_goal_from_row_maps_discord_id_to_user_id():
    row = {
        "id": 3,
        "discord_id": 42,
        "amount": 5000,
        "created_at": "2024-05-14 10:00:00",
        "status": "Pending",
        "message_id": "77",
    }
    goal = Goal.from_row(row)
    assert goal == Goal(3, 42, 5000, "2024-05-14 10:00:00", "Pending", "77")


def test_goal_optional_fields_default_to_none():
    goal = Goal(id=1, user_id=2, amount=3)
    assert (goal.created_at, goal.status, goal.message_id) == (None, None, None)


def test_channel_ids_from_row_reads_every_field():
    row = {
        "individuals_category_id": 1,
        "anonymous_channel_id": 2,
        "meta_channel_id": 3,
        "logs_channel_id": 4,
        "approval_channel_id": 5,
        "results_channel_id": 6,
        "extra": 99,
    }
    ids = ChannelIds.from_row(row)
    assert dataclasses.astuple(ids) == (1, 2, 3, 4, 5, 6)


def test_channel_ids_from_row_missing_field_raises():
    with pytest.raises(KeyError):
        ChannelIds.from_row({"individuals_category_id": 1})


def test_models_are_immutable():
    goal = Goal(id=1, user_id=2, amount=3)
    with pytest.raises(dataclasses.FrozenInstanceError):
        goal.amount = 10
    assert goal.amount == 3
    replaced = dataclasses.replace(goal, amount=10)
    assert replaced.amount == 10
    assert goal == Goal(id=1, user_id=2, amount=3)