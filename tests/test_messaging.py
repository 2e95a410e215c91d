from datetime import datetime, timezone

import pytest

from aura_bot.messaging import (
    Colour,
    CommandSpec,
    Context,
    Embed,
    Gateway,
    Intents,
    Message,
    PermissionOverwrite,
    Permissions,
    Response,
    User,
    CommandInteraction,
    default_intents,
    send_log,
)
from aura_bot.repository import init_db


@pytest.fixture
def ctx():
    repository = init_db(":memory:")
    yield Context(repo=repository, gateway=Gateway(), current_user_id=1)
    repository.close()


def test_colour_rgb_round_trip():
    colour = Colour.from_rgb(144, 238, 144)
    assert (colour.r, colour.g, colour.b) == (144, 238, 144)
    assert Colour(colour.value) == colour


def test_colour_light_grey_constant():
    colour = Colour.from_rgb(0x97, 0x9C, 0x9F)
    assert colour == Colour.LIGHT_GREY
    assert colour.value == 0x979C9F


def test_colour_rejects_out_of_range():
    with pytest.raises(ValueError):
        Colour.from_rgb(256, 0, 0)
    with pytest.raises(ValueError):
        Colour(-1)


def test_default_intents():
    intents = default_intents()
    for flag in (Intents.GUILD_MESSAGES, Intents.DIRECT_MESSAGES, Intents.MESSAGE_CONTENT):
        assert flag in intents
    assert Intents.GUILDS not in intents
    assert Intents.MESSAGE_CONTENT.value == 1 << 15


def test_permissions_flags():
    combined = Permissions(
        Permissions.VIEW_CHANNEL.value | Permissions.MANAGE_CHANNELS.value
    )
    assert combined == Permissions.VIEW_CHANNEL | Permissions.MANAGE_CHANNELS
    assert Permissions.VIEW_CHANNEL in combined
    assert Permissions.ADMINISTRATOR not in combined
    assert Permissions(8) == Permissions.ADMINISTRATOR


def test_send_message_assigns_ids():
    gateway = Gateway()
    first = gateway.send_message(10, Message(content="a"))
    second = gateway.send_message(10, Message(content="b"))
    assert first.id != second.id
    assert first.channel_id == 10
    assert gateway.messages[second.id].content == "b"


def test_edit_message_replaces_content():
    gateway = Gateway()
    sent = gateway.send_message(10, Message(content="a"))
    edited = gateway.edit_message(10, sent.id, Message(content="b"))
    assert edited.id == sent.id
    assert gateway.messages[sent.id].content == "b"


def test_edit_unknown_message_raises():
    gateway = Gateway()
    sent = gateway.send_message(10, Message(content="a"))
    with pytest.raises(LookupError):
        gateway.edit_message(10, sent.id + 100, Message())
    with pytest.raises(LookupError):
        gateway.edit_message(11, sent.id, Message())


def test_create_channel_records_overwrites():
    gateway = Gateway()
    overwrite = PermissionOverwrite(Permissions.NONE, Permissions.VIEW_CHANNEL, "role", 5)
    channel_id = gateway.create_channel(5, "room", 7, [overwrite])
    record = gateway.channels[channel_id]
    assert (record.guild_id, record.name, record.category_id) == (5, "room", 7)
    assert record.overwrites == (overwrite,)


def test_respond_and_commands():
    gateway = Gateway()
    interaction = CommandInteraction(name="info", user=User(1, "ana"))
    response = Response(content="ok", ephemeral=True)
    gateway.respond(interaction, response)
    assert gateway.responses == [(interaction, response)]
    specs = [CommandSpec("info", "desc")]
    assert gateway.set_guild_commands(9, specs) == specs
    assert gateway.guild_commands[9] == specs
    assert gateway.set_global_commands([]) == []


def test_send_log_posts_embed(ctx):
    before = datetime.now(timezone.utc)
    sent = send_log(ctx, "hello", 42)
    assert sent.channel_id == 42
    (embed,) = sent.embeds
    assert embed.description == "hello"
    assert embed.colour == Colour.LIGHT_GREY
    assert before <= embed.timestamp <= datetime.now(timezone.utc)
    assert ctx.gateway.messages[sent.id] == sent


def test_context_exposes_repository(ctx):
    ctx.repo.set_meta(300)
    assert ctx.repo.get_meta() == 300
    assert Embed().description is None or ctx.current_user_id == 1