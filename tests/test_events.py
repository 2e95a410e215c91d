import pytest

from aura_bot.commands import register_commands
from aura_bot.events import Handler, dispatch_interaction, on_ready
from aura_bot.messaging import (
    CommandInteraction,
    ComponentInteraction,
    Context,
    InputText,
    Modal,
    ModalInteraction,
    User,
)
from aura_bot.repository import init_db

APPROVAL, LOGS, MEMBER_CHANNEL = 105, 104, 500
MEMBER = User(10, "ana")
ADMIN = User(20, "admin")


@pytest.fixture
def ctx():
    repo = init_db(":memory:")
    repo.set_channels(101, 102, 103, LOGS, APPROVAL, 106)
    repo.set_meta(1_000_000)
    repo.create_user_channel(MEMBER.id, MEMBER_CHANNEL)
    context = Context(repo=repo, current_user_id=999)
    yield context
    repo.close()


def _goal_modal(custom_id="goal"):
    return ModalInteraction(
        custom_id=custom_id,
        user=MEMBER,
        components=(
            (InputText("value", "Valor Entregue", value="5000"),),
            (InputText("who", "A quem entregou", value="Bruno"),),
        ),
    )


def _request(ctx):
    dispatch_interaction(ctx, _goal_modal())
    (request,) = [m for m in ctx.gateway.messages.values() if m.channel_id == APPROVAL]
    return request


def test_meta_command_opens_modal(ctx):
    command = CommandInteraction(name="meta", user=MEMBER)
    result = dispatch_interaction(ctx, command)
    assert isinstance(result, Modal)
    assert result.custom_id == "goal"
    assert ctx.gateway.responses == [(command, result)]


def test_info_command_is_routed(ctx):
    result = dispatch_interaction(ctx, CommandInteraction(name="info", user=MEMBER))
    assert result.embeds[0].title == "📊 Informações da Meta Semanal"


def test_unknown_command_is_ignored(ctx):
    assert dispatch_interaction(ctx, CommandInteraction(name="nada", user=MEMBER)) is None
    assert ctx.gateway.responses == []


def test_goal_modal_is_routed(ctx):
    request = _request(ctx)
    assert ctx.repo.get_user_meta_by_message_id(request.id).amount == 5000


def test_unknown_modal_is_ignored(ctx):
    assert dispatch_interaction(ctx, _goal_modal("other")) is None
    assert ctx.repo.get_user_last_goal(MEMBER.id) is None


@pytest.mark.parametrize("custom_id, status", [("aprove", "Approved"), ("deny", "Rejected")])
def test_buttons_are_routed(ctx, custom_id, status):
    request = _request(ctx)
    dispatch_interaction(ctx, ComponentInteraction(custom_id, ADMIN, request))
    assert ctx.repo.get_user_meta_by_message_id(request.id).status == status


def test_unknown_button_is_ignored(ctx):
    request = _request(ctx)
    assert dispatch_interaction(ctx, ComponentInteraction("x", ADMIN, request)) is None
    assert ctx.repo.get_user_meta_by_message_id(request.id).status == "Pending"


def test_unknown_interaction_type_is_ignored(ctx):
    assert dispatch_interaction(ctx, "ping") is None


def test_on_ready_registers_guild_commands(ctx, capsys):
    registered = on_ready(ctx, "Aura", 42)
    expected = [spec.name for spec in register_commands()]
    assert [spec.name for spec in registered] == expected
    assert [spec.name for spec in ctx.gateway.guild_commands[42]] == expected
    assert ctx.gateway.global_commands == []
    assert "✅ - Aura started successfully!" in capsys.readouterr().out


def test_on_ready_reads_guild_from_environment(ctx, monkeypatch):
    monkeypatch.setenv("GUILD_ID", "77")
    on_ready(ctx, "Aura")
    assert list(ctx.gateway.guild_commands) == [77]


def test_on_ready_requires_guild_id(ctx, monkeypatch):
    monkeypatch.delenv("GUILD_ID", raising=False)
    with pytest.raises(RuntimeError):
        on_ready(ctx, "Aura")


def test_on_ready_rejects_non_integer_guild_id(ctx, monkeypatch):
    monkeypatch.setenv("GUILD_ID", "abc")
    with pytest.raises(ValueError):
        on_ready(ctx, "Aura")


def test_handler_delegates(ctx):
    handler = Handler(guild_id=5)
    registered = handler.ready(ctx, "Aura")
    assert len(registered) == len(register_commands())
    assert 5 in ctx.gateway.guild_commands
    result = handler.interaction_create(ctx, CommandInteraction(name="meta", user=MEMBER))
    assert result.title == "Entregar Meta"