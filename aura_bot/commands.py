"""Slash commands: their registration specs and their handlers."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from .messaging import (
    Colour,
    CommandInteraction,
    CommandOption,
    CommandSpec,
    Context,
    Embed,
    InputText,
    Message,
    Modal,
    PermissionOverwrite,
    Permissions,
    Response,
    send_log,
)
from .repository import RepositoryError
from .timeutil import format_amount, get_next_monday_at_18

logger = logging.getLogger(__name__)

_FOOTER_INDIVIDUAL = "Aura - Canal Individual"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _option_value(command: CommandInteraction, index: int) -> object:
    try:
        return command.options[index].value
    except IndexError:
        return None


def _required_id(command: CommandInteraction, index: int) -> int:
    value = _option_value(command, index)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"option {index} of /{command.name} must be an id, got {value!r}")
    return value


def _existing_channel(ctx: Context, user_id: int) -> int | None:
    try:
        return ctx.repo.get_user_channel(user_id)
    except RepositoryError:
        return None


def _respond(ctx: Context, command: CommandInteraction, response: Response) -> Response:
    try:
        ctx.gateway.respond(command, response)
    except Exception as exc:  # transport failures are reported, not fatal
        logger.error("❌ - Failed to send response: %s", exc)
    return response


# /anonimo


def register_anonimo() -> CommandSpec:
    return CommandSpec(
        name="anonimo",
        description="Envie uma mensagem anónima",
        options=(
            CommandOption("string", "mensagem", "Mande uma mensagem anónima.", required=True),
        ),
    )


def run_anonimo(ctx: Context, command: CommandInteraction) -> Response | None:
    """Repost the member's text anonymously in the anonymous channel."""
    try:
        channels = ctx.repo.get_channels()
    except RepositoryError:
        logger.error("❌ - Error getting channels.")
        return None

    user_message = _option_value(command, 0)
    if not isinstance(user_message, str):
        logger.error("❌ - Missing or invalid message option.")
        return None

    embed = Embed(description=user_message, timestamp=_now(), colour=Colour.LIGHT_GREY)
    try:
        ctx.gateway.send_message(channels.anonymous_channel_id, Message(embeds=(embed,)))
    except Exception as exc:
        logger.error("❌ - Falha ao enviar mensagem anónima: %s", exc)
        return None

    reply = Response(
        embeds=(
            Embed(
                description="A sua mensagem foi enviada com sucesso!",
                colour=Colour.LIGHT_GREY,
            ),
        ),
        ephemeral=True,
    )
    return _respond(ctx, command, reply)


# /canal


def register_canal() -> CommandSpec:
    return CommandSpec(name="canal", description="Crie o seu canal individual")


def run_canal(ctx: Context, command: CommandInteraction) -> Response | None:
    """Open a private channel for the member, unless one already exists."""
    user = command.user
    existing = _existing_channel(ctx, user.id)
    if existing is not None:
        reply = Response(
            content=f"❌ - Você já possui um canal individual aberto <#{existing}>.",
            ephemeral=True,
        )
        return _respond(ctx, command, reply)

    guild_id = command.guild_id
    if guild_id is None:
        logger.error("❌ - Guild ID not found.")
        return None

    try:
        channels = ctx.repo.get_channels()
    except RepositoryError:
        logger.error("❌ - Error getting channels.")
        return None

    overwrites = [
        PermissionOverwrite(
            allow=Permissions.NONE,
            deny=Permissions.VIEW_CHANNEL,
            kind="role",
            target_id=guild_id,
        ),
        PermissionOverwrite(
            allow=Permissions.VIEW_CHANNEL,
            deny=Permissions.SEND_TTS_MESSAGES,
            kind="member",
            target_id=user.id,
        ),
        PermissionOverwrite(
            allow=Permissions.VIEW_CHANNEL | Permissions.MANAGE_CHANNELS,
            deny=Permissions.NONE,
            kind="member",
            target_id=ctx.current_user_id,
        ),
    ]

    try:
        channel_id = ctx.gateway.create_channel(
            guild_id, f"🙋┇{user.name}", channels.individuals_category_id, overwrites
        )
    except Exception as exc:
        logger.error("❌ - Failed to create channel: %s", exc)
        return None

    try:
        ctx.repo.create_user_channel(user.id, channel_id)
    except RepositoryError as exc:
        logger.error("❌ - Failed to create user channel in database: %s", exc)
        return None

    embed = Embed(
        description=(
            f"- Olá <@{user.id}>, o seu novo canal individual foi aberto.\n"
            f"> Você pode encontrar ele aqui <#{channel_id}>."
        ),
        footer=_FOOTER_INDIVIDUAL,
        timestamp=_now(),
        colour=Colour.LIGHT_GREY,
    )
    reply = _respond(ctx, command, Response(embeds=(embed,), ephemeral=True))

    send_log(
        ctx,
        f"Canal individual criado com sucesso!\n> Canal: <#{channel_id}>\n> Criador: <@{user.id}>",
        channels.logs_channel_id,
    )
    return reply


# /definircanais


def register_definircanais() -> CommandSpec:
    return CommandSpec(
        name="definircanais",
        description="Defina os canais do bot",
        options=(
            CommandOption("channel", "individual", "Categoria para canais individuais", True),
            CommandOption("channel", "anonimo", "Canal para mensagens anónimas", True),
            CommandOption("channel", "meta", "Canal para mensagens de meta", True),
            CommandOption("channel", "logs", "Canal para receber logs", True),
            CommandOption("channel", "approval", "Canal para aprovações", True),
            CommandOption("channel", "resultadometa", "Canal para o resultado das meta", True),
        ),
        default_member_permissions=Permissions.ADMINISTRATOR,
    )


def run_definircanais(ctx: Context, command: CommandInteraction) -> Response | None:
    """Store the six channels the bot works with."""
    individual, anonymous, meta, logs, approval, results = (
        _required_id(command, index) for index in range(6)
    )

    try:
        ctx.repo.set_channels(individual, anonymous, meta, logs, approval, results)
    except RepositoryError as exc:
        logger.error("❌ - Failed to set channels: %s", exc)
        return None

    description = (
        "Os canais foram configurados com sucesso!\n\n"
        "**Canais Definidos:**\n"
        f"💬 **Individual:** <#{individual}>\n"
        f"🤫 **Anônimo:** <#{anonymous}>\n"
        f"📊 **Meta:** <#{meta}>\n"
        f"📑 **Logs:** <#{logs}>\n"
        f"✅ **Aprovação:** <#{approval}>\n"
        f"         📈 **Resultado da Meta:** <#{results}>\n"
    )
    embed = Embed(
        title="✅ Configuração Concluída!",
        description=description,
        colour=Colour.from_rgb(144, 238, 144),
        timestamp=_now(),
    )
    return _respond(ctx, command, Response(embeds=(embed,), ephemeral=True))


# /definircanal


def register_definircanal() -> CommandSpec:
    return CommandSpec(
        name="definircanal",
        description="Defina um canal individual",
        options=(
            CommandOption(
                "user", "user", "O usuário para o qual você deseja definir o canal", True
            ),
            CommandOption("channel", "canal", "O canal que você deseja definir", True),
        ),
        default_member_permissions=Permissions.ADMINISTRATOR,
    )


def run_definircanal(ctx: Context, command: CommandInteraction) -> Response | None:
    """Assign an existing channel to a member as their individual channel."""
    try:
        channels = ctx.repo.get_channels()
    except RepositoryError:
        logger.error("❌ - Error getting channels.")
        return None

    user_id = _required_id(command, 0)
    channel_id = _required_id(command, 1)

    existing = _existing_channel(ctx, user_id)
    if existing is not None:
        reply = Response(
            content=f"❌ - Esse usuário já possui um canal individual aberto <#{existing}>.",
            ephemeral=True,
        )
        return _respond(ctx, command, reply)

    try:
        ctx.repo.create_user_channel(user_id, channel_id)
    except RepositoryError as exc:
        logger.error("❌ - Failed to create user channel in database: %s", exc)
        return None

    embed = Embed(
        description=f"- Você definiu o usuário <@{user_id}> para o canal <#{channel_id}>",
        footer=_FOOTER_INDIVIDUAL,
        timestamp=_now(),
        colour=Colour.LIGHT_GREY,
    )
    reply = _respond(ctx, command, Response(embeds=(embed,), ephemeral=True))

    send_log(
        ctx,
        "Canal individual definido com sucesso!\n"
        f"> Canal: <#{channel_id}>\n> User: <@{user_id}> \n"
        f"> Definido por: <@{command.user.id}>",
        channels.logs_channel_id,
    )
    return reply


# /definirmeta


def register_definirmeta() -> CommandSpec:
    return CommandSpec(
        name="definirmeta",
        description="Defina a meta semanal de dinheiro sujo",
        options=(
            CommandOption(
                "integer",
                "quantidade",
                "A quantidade de dinheiro sujo (ex: 1000000).",
                required=True,
            ),
        ),
        default_member_permissions=Permissions.ADMINISTRATOR,
    )


def run_definirmeta(ctx: Context, command: CommandInteraction) -> Response | None:
    """Set the weekly goal and announce it."""
    try:
        channels = ctx.repo.get_channels()
    except RepositoryError:
        logger.error("❌ - Error getting channels.")
        return None

    amount = _option_value(command, 0)
    if isinstance(amount, bool) or not isinstance(amount, int):
        logger.error("❌ - Opção de quantidade inválida ou ausente.")
        return None

    if amount < 0:
        reply = Response(content="🚫 O valor da meta não pode ser negativo!", ephemeral=True)
        return _respond(ctx, command, reply)

    try:
        ctx.repo.set_meta(amount)
    except RepositoryError as exc:
        logger.error("❌ - Falha ao definir meta: %s", exc)
        return None

    short_amount = format_amount(amount)
    deadline = int(get_next_monday_at_18().timestamp())

    public_embed = Embed(
        title="📢 Nova Meta Semanal Ativada!",
        description=(
            f"**💰 Valor da meta:** `{short_amount} sujo`\n"
            f"**📅 Data Limite:** <t:{deadline}:R>\n\n"
            "Quem será o destaque da semana? 👀"
        ),
        footer=f"Meta definida por {command.user.name}",
        timestamp=_now(),
        colour=Colour.from_rgb(241, 196, 15),
    )
    try:
        ctx.gateway.send_message(channels.meta_channel_id, Message(embeds=(public_embed,)))
    except Exception as exc:
        logger.error("❌ - Falha ao enviar embed público: %s", exc)
    try:
        ctx.gateway.send_message(
            channels.meta_channel_id, Message(content="@everyone", mention_everyone=True)
        )
    except Exception as exc:
        logger.error("❌ - Falha ao mencionar everyone: %s", exc)

    embed = Embed(
        title="✅ Meta Atualizada",
        description=(
            "📌 **Meta semanal definida com sucesso!**\n\n"
            f"💰 Valor definido: **${short_amount}**\n"
            "🗓️ Vigência: *Esta semana*\n\nVamos com tudo! 🚀"
        ),
        timestamp=_now(),
        colour=Colour.from_rgb(46, 204, 113),
    )
    reply = _respond(ctx, command, Response(embeds=(embed,), ephemeral=True))

    send_log(
        ctx,
        f"📢 **Meta semanal atualizada!**\n> 💸 Valor: **${short_amount}**\n"
        f"> 👤 Responsável: <@{command.user.id}>",
        channels.logs_channel_id,
    )
    return reply


# /info


def register_info() -> CommandSpec:
    return CommandSpec(name="info", description="Ver informações sobre a sua meta semanal")


def run_info(ctx: Context, command: CommandInteraction) -> Response | None:
    """Show the current goal and what the member delivered this week."""
    try:
        current_meta = ctx.repo.get_meta()
    except RepositoryError:
        logger.error("❌ - Failed to fetch current meta.")
        return None

    try:
        metas = ctx.repo.get_user_approved_weekly(command.user.id)
    except RepositoryError:
        logger.error("❌ - Failed to fetch approved metas.")
        return None

    total = sum(goal.amount for goal in metas)
    deadline = int(get_next_monday_at_18().timestamp())

    embed = Embed(
        colour=Colour.from_rgb(144, 238, 144),
        title="📊 Informações da Meta Semanal",
        description=(
            f"💰 **Meta Atual:** `{format_amount(current_meta)}`\n\n"
            f"📈 **Total Entregue:** `{format_amount(total)}`\n\n"
            f"📅 **Data de entrega:** <t:{deadline}:R>"
        ),
        footer="Meta Semanal",
        timestamp=_now(),
    )
    return _respond(ctx, command, Response(embeds=(embed,), ephemeral=True))


# /meta


def register_meta() -> CommandSpec:
    return CommandSpec(name="meta", description="Envie infos sobre a meta")


def run_meta(ctx: Context, command: CommandInteraction) -> Modal:
    """Open the form in which a member reports a delivery."""
    value_input = InputText(
        custom_id="value",
        label="Valor Entregue",
        style="short",
        placeholder="Digite a quantidade entegue",
    )
    who_input = InputText(
        custom_id="who",
        label="A quem entregou",
        style="short",
        placeholder="Digite a quem entregou",
    )
    modal = Modal(
        custom_id="goal",
        title="Entregar Meta",
        components=((value_input,), (who_input,)),
    )
    ctx.gateway.respond(command, modal)
    return modal


def register_commands() -> list[CommandSpec]:
    """Every command the bot offers, in registration order."""
    return [
        register_meta(),
        register_canal(),
        register_anonimo(),
        register_definirmeta(),
        register_definircanais(),
        register_definircanal(),
        register_info(),
    ]