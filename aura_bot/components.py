"""Handlers for the delivery form and the approve/deny buttons."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from .messaging import (
    Button,
    Colour,
    ComponentInteraction,
    Context,
    Embed,
    InputText,
    Message,
    ModalInteraction,
    Response,
    send_log,
)
from .repository import RepositoryError
from .timeutil import format_amount

logger = logging.getLogger(__name__)

_RULE = "━" * 24
_U64_MAX = 2**64 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _respond(ctx: Context, interaction: Any, response: Response) -> Response:
    try:
        ctx.gateway.respond(interaction, response)
    except Exception as exc:  # transport failures are reported, not fatal
        logger.error("Error sending response: %s", exc)
    return response


def _approval_buttons(disabled: bool = False) -> tuple[Button, Button]:
    return (
        Button("aprove", "Aprovar", style="success", disabled=disabled),
        Button("deny", "Recusar", style="danger", disabled=disabled),
    )


def _parse_number(text: str) -> float | None:
    """Parse a decimal number strictly: no surrounding spaces, no underscores."""
    if text != text.strip() or "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _saturate(value: float, low: int, high: int) -> int:
    """Convert to an integer, truncating and clamping to ``[low, high]``."""
    if math.isnan(value):
        return 0
    if value >= high:
        return high
    if value <= low:
        return low
    return int(value)


def get_texts(action_row: Iterable[Any]) -> list[str]:
    """Return the filled-in values of the text inputs in one row."""
    return [
        component.value
        for component in action_row
        if isinstance(component, InputText) and component.value is not None
    ]


def run_goal_modal(ctx: Context, interaction: ModalInteraction) -> Response | None:
    """Record a reported delivery and post it to the approval channel."""
    try:
        channels = ctx.repo.get_channels()
    except RepositoryError:
        logger.error("❌ - Error getting channels.")
        return None

    inputs = [text for row in interaction.components for text in get_texts(row)]
    if len(inputs) < 2:
        logger.error("Error: Not all fields were filled.")
        return None

    raw_value, responsible = inputs[0], inputs[1]
    value = _parse_number(raw_value)
    if value is None:
        reply = Response(content="🚫 The goal value must be a valid number!", ephemeral=True)
        return _respond(ctx, interaction, reply)

    user = interaction.user
    try:
        last_goal = ctx.repo.get_user_last_goal(user.id)
    except RepositoryError:
        last_goal = None
    if last_goal is not None and last_goal.status == "Pending":
        reply = Response(
            content="🚫 A sua ultima meta enviada ainda não foi analisada.",
            ephemeral=True,
        )
        return _respond(ctx, interaction, reply)

    embed = Embed(
        colour=Colour.from_rgb(144, 238, 144),
        title="📊 Pedido de Entrega de Meta",
        description=(
            "🚀 **Novo Pedido de Meta Recebido!**\n\n"
            f"👤 **Usuário:** <@{user.id}>\n"
            f"👤 **Responsável:** `{responsible}`\n"
            f"💰 **Valor da Meta:** `{format_amount(_saturate(value, 0, _U64_MAX))}`\n\n"
            "Por favor, avalie e processe este pedido com atenção. ✅"
        ),
        timestamp=_now(),
    )
    request = Message(embeds=(embed,), components=(_approval_buttons(),))

    try:
        created = ctx.gateway.send_message(channels.approval_channel_id, request)
    except Exception:
        logger.error("❌ - Failed to send message.")
        return None

    try:
        ctx.repo.create_goal(user.id, _saturate(value, _I64_MIN, _I64_MAX), str(created.id))
    except RepositoryError as exc:
        logger.error("❌ - Failed to create goal in database: %s", exc)
        return None

    reply = Response(
        content="✅ A tua meta foi enviada com sucesso! Em breve será analisada.",
        ephemeral=True,
    )
    return _respond(ctx, interaction, reply)


def run_meta_buttons(
    ctx: Context, interaction: ComponentInteraction, status: str
) -> Response | None:
    """Approve or reject a delivery and notify the member and the logs."""
    approved = status == "Approved"

    try:
        channels = ctx.repo.get_channels()
    except RepositoryError:
        logger.error("❌ - Failed to fetch channels.")
        return None

    message = interaction.message
    try:
        meta = ctx.repo.get_user_meta_by_message_id(message.id)
    except RepositoryError:
        logger.error("❌ - Failed to fetch meta.")
        return None

    try:
        ctx.repo.update_meta_status(message.id, status)
    except RepositoryError:
        logger.error("❌ - Failed to update meta status.")

    reply = Response(
        embeds=(
            Embed(
                description=(
                    "✅ **Meta Aprovada com Sucesso!**"
                    if approved
                    else "❌ **Meta Rejeitada com Sucesso!**"
                ),
                colour=Colour.LIGHT_GREY,
            ),
        ),
        ephemeral=True,
    )
    _respond(ctx, interaction, reply)

    original = message.embeds[0]
    edited = Message(
        embeds=(
            Embed(
                title=original.title,
                description=original.description,
                colour=original.colour,
                timestamp=original.timestamp,
            ),
        ),
        components=(_approval_buttons(disabled=True),),
    )

    try:
        user_channel_id = ctx.repo.get_user_channel(meta.user_id)
    except RepositoryError:
        logger.error("❌ - Failed to fetch user channel.")
        return None
    if user_channel_id is None:
        logger.error("❌ - User's channel not found.")
        return None

    try:
        current_meta = ctx.repo.get_meta()
    except RepositoryError:
        logger.error("❌ - Failed to fetch current meta.")
        return None

    try:
        ctx.gateway.edit_message(message.channel_id, message.id, edited)
    except Exception as exc:
        logger.error("❌ - Failed to edit message: %s", exc)
        return None

    try:
        metas = ctx.repo.get_user_approved_weekly(meta.user_id)
    except RepositoryError:
        logger.error("❌ - Failed to fetch approved metas.")
        return None

    total = sum(goal.amount for goal in metas)
    remaining = "0" if total > current_meta else format_amount(current_meta - total)
    amount = format_amount(max(meta.amount, 0))
    moderator = interaction.user.id

    if approved:
        user_title = "Meta Aprovada"
        user_description = (
            "A sua meta foi aprovada com sucesso!\n"
            f"{_RULE}\n"
            f"💰 **Valor Aprovado:** `{amount}`\n"
            "✅ **Status:** `Aprovada`\n"
            f"🛡️ **Aprovado por:** <@{moderator}>\n"
            f"📊 **Valor Restante:** `{remaining}`\n"
            f"{_RULE}"
        )
    else:
        user_title = "Meta Reprovada"
        user_description = (
            "A sua meta foi reprovada com sucesso!\n"
            f"{_RULE}\n"
            f"💰 **Valor Reprovado:** `{amount}`\n"
            "❌ **Status:** `Reprovada`\n"
            f"🛡️ **Reprovado por:** <@{moderator}>\n"
            f"📊 **Valor Restante:** `{remaining}`\n"
            f"{_RULE}"
        )

    user_embed = Embed(
        title=user_title,
        description=user_description,
        timestamp=_now(),
        colour=Colour.LIGHT_GREY,
    )
    try:
        ctx.gateway.send_message(user_channel_id, Message(embeds=(user_embed,)))
    except Exception as exc:
        logger.error("❌ - Failed to send anonymous message: %s", exc)
        return None

    if approved:
        log = (
            "🎯 **Meta Entregue com Sucesso!**\n"
            f"{_RULE}\n"
            f"👤 **Entregue por:** <@{meta.user_id}>\n"
            f"💰 **Valor Entregue:** `{amount}`\n"
            "✅ **Status:** `Aprovada`\n"
            f"🛡️ **Aprovado por:** <@{moderator}>\n"
            f"{_RULE}"
        )
    else:
        log = (
            "❌ **Meta Reprovada**\n"
            f"{_RULE}\n"
            f"👤 **Entregue por:** <@{meta.user_id}>\n"
            f"💰 **Valor da Meta:** `{amount}`\n"
            "❌ **Status:** `Reprovada`\n"
            f"🛡️ **Reprovado por:** <@{moderator}>\n"
            f"{_RULE}"
        )
    send_log(ctx, log, channels.logs_channel_id)
    return reply