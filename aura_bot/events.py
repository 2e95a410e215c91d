"""Routing of gateway events to the command and component handlers."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from . import commands
from .components import run_goal_modal, run_meta_buttons
from .messaging import (
    CommandInteraction,
    CommandSpec,
    ComponentInteraction,
    Context,
    ModalInteraction,
)

logger = logging.getLogger(__name__)

_COMMANDS: dict[str, Callable[[Context, CommandInteraction], Any]] = {
    "meta": commands.run_meta,
    "canal": commands.run_canal,
    "anonimo": commands.run_anonimo,
    "definirmeta": commands.run_definirmeta,
    "definircanais": commands.run_definircanais,
    "definircanal": commands.run_definircanal,
    "info": commands.run_info,
}

_MODALS: dict[str, Callable[[Context, ModalInteraction], Any]] = {
    "goal": run_goal_modal,
}

_BUTTON_STATUS = {"aprove": "Approved", "deny": "Rejected"}

_MAX_ID = 2**64


def dispatch_interaction(ctx: Context, interaction: Any) -> Any:
    """Run the handler for an interaction and return what it produced."""
    if isinstance(interaction, CommandInteraction):
        command_handler = _COMMANDS.get(interaction.name)
        if command_handler is None:
            logger.warning("❌ - Command not found!")
            return None
        return command_handler(ctx, interaction)
    if isinstance(interaction, ModalInteraction):
        modal_handler = _MODALS.get(interaction.custom_id)
        if modal_handler is None:
            logger.warning("❌ - Modal not found!")
            return None
        return modal_handler(ctx, interaction)
    if isinstance(interaction, ComponentInteraction):
        status = _BUTTON_STATUS.get(interaction.custom_id)
        if status is None:
            logger.warning("❌ - Button not found!")
            return None
        return run_meta_buttons(ctx, interaction, status)
    return None


def _guild_id_from_env() -> int:
    raw = os.environ.get("GUILD_ID")
    if raw is None:
        raise RuntimeError("❌ - Guild ID not found!")
    if not (raw.isascii() and raw.isdigit()) or int(raw) >= _MAX_ID:
        raise ValueError("❌ - Guild ID must be an integer")
    return int(raw)


def on_ready(ctx: Context, bot_name: str, guild_id: int | None = None) -> list[CommandSpec]:
    """Register the commands in the guild and clear the global ones.

    Without a guild id the ``GUILD_ID`` environment variable is used.
    """
    if guild_id is None:
        guild_id = _guild_id_from_env()

    registered: list[CommandSpec] = []
    try:
        registered = ctx.gateway.set_guild_commands(guild_id, commands.register_commands())
        print(f"☑️  - {len(registered)} Commands loaded!")
    except Exception:
        print("❌ - Unable to load commands!")

    try:
        global_commands = ctx.gateway.set_global_commands([])
        print(f"☑️  - {len(global_commands)} Global  Commands loaded!")
    except Exception:
        print("❌ - Unable to load commands!")

    print(f"✅ - {bot_name} started successfully!")
    return registered


@dataclass
class Handler:
    """Receives gateway events for the bot."""

    guild_id: int | None = None

    def ready(self, ctx: Context, bot_name: str) -> list[CommandSpec]:
        return on_ready(ctx, bot_name, self.guild_id)

    def interaction_create(self, ctx: Context, interaction: Any) -> Any:
        return dispatch_interaction(ctx, interaction)