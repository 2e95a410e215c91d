"""Chat primitives, an in-memory gateway and the shared bot context."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import IntFlag
from typing import Any, ClassVar

from .repository import Repository


@dataclass(frozen=True)
class Colour:
    """A 24-bit RGB colour."""

    value: int

    LIGHT_GREY: ClassVar[Colour]

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFFFFFF:
            raise ValueError(f"colour out of range: {self.value}")

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int) -> Colour:
        for component in (r, g, b):
            if not 0 <= component <= 255:
                raise ValueError(f"colour component out of range: {component}")
        return cls((r << 16) | (g << 8) | b)

    @property
    def r(self) -> int:
        return (self.value >> 16) & 0xFF

    @property
    def g(self) -> int:
        return (self.value >> 8) & 0xFF

    @property
    def b(self) -> int:
        return self.value & 0xFF


Colour.LIGHT_GREY = Colour(0x979C9F)


class Intents(IntFlag):
    GUILDS = 1 << 0
    GUILD_MESSAGES = 1 << 9
    DIRECT_MESSAGES = 1 << 12
    MESSAGE_CONTENT = 1 << 15


class Permissions(IntFlag):
    NONE = 0
    ADMINISTRATOR = 1 << 3
    MANAGE_CHANNELS = 1 << 4
    VIEW_CHANNEL = 1 << 10
    SEND_TTS_MESSAGES = 1 << 12


@dataclass(frozen=True)
class Embed:
    title: str | None = None
    description: str | None = None
    colour: Colour | None = None
    timestamp: datetime | None = None
    footer: str | None = None


@dataclass(frozen=True)
class Button:
    custom_id: str
    label: str
    style: str = "primary"
    disabled: bool = False


@dataclass(frozen=True)
class InputText:
    custom_id: str
    label: str
    style: str = "short"
    placeholder: str | None = None
    value: str | None = None


@dataclass(frozen=True)
class Message:
    content: str | None = None
    embeds: tuple[Embed, ...] = ()
    components: tuple[tuple[Any, ...], ...] = ()
    mention_everyone: bool = False
    id: int | None = None
    channel_id: int | None = None


@dataclass(frozen=True)
class PermissionOverwrite:
    allow: Permissions
    deny: Permissions
    kind: str
    target_id: int


@dataclass(frozen=True)
class CommandOption:
    kind: str
    name: str
    description: str = ""
    required: bool = False
    value: Any = None


@dataclass(frozen=True)
class CommandSpec:
    name: str
    description: str
    options: tuple[CommandOption, ...] = ()
    default_member_permissions: Permissions | None = None


@dataclass(frozen=True)
class Response:
    content: str | None = None
    embeds: tuple[Embed, ...] = ()
    ephemeral: bool = False


@dataclass(frozen=True)
class Modal:
    custom_id: str
    title: str
    components: tuple[tuple[Any, ...], ...] = ()


@dataclass(frozen=True)
class User:
    id: int
    name: str


@dataclass(frozen=True)
class CommandInteraction:
    name: str
    user: User
    guild_id: int | None = None
    options: tuple[CommandOption, ...] = ()


@dataclass(frozen=True)
class ModalInteraction:
    custom_id: str
    user: User
    components: tuple[tuple[Any, ...], ...] = ()


@dataclass(frozen=True)
class ComponentInteraction:
    custom_id: str
    user: User
    message: Message


@dataclass(frozen=True)
class _ChannelRecord:
    id: int
    guild_id: int
    name: str
    category_id: int | None
    overwrites: tuple[PermissionOverwrite, ...]


class Gateway:
    """In-memory transport that keeps everything the bot sends."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.messages: dict[int, Message] = {}
        self.channels: dict[int, _ChannelRecord] = {}
        self.responses: list[tuple[Any, Response | Modal]] = []
        self.guild_commands: dict[int, list[CommandSpec]] = {}
        self.global_commands: list[CommandSpec] = []

    def send_message(self, channel_id: int, message: Message) -> Message:
        sent = replace(message, id=next(self._ids), channel_id=channel_id)
        self.messages[sent.id] = sent
        return sent

    def edit_message(self, channel_id: int, message_id: int, message: Message) -> Message:
        current = self.messages.get(message_id)
        if current is None or current.channel_id != channel_id:
            raise LookupError(f"unknown message {message_id} in channel {channel_id}")
        edited = replace(message, id=message_id, channel_id=channel_id)
        self.messages[message_id] = edited
        return edited

    def create_channel(
        self,
        guild_id: int,
        name: str,
        category_id: int | None,
        overwrites: list[PermissionOverwrite] | tuple[PermissionOverwrite, ...],
    ) -> int:
        channel_id = next(self._ids)
        self.channels[channel_id] = _ChannelRecord(
            channel_id, guild_id, name, category_id, tuple(overwrites)
        )
        return channel_id

    def respond(self, interaction: Any, response: Response | Modal) -> None:
        self.responses.append((interaction, response))

    def set_guild_commands(self, guild_id: int, commands: list[CommandSpec]) -> list[CommandSpec]:
        self.guild_commands[guild_id] = list(commands)
        return list(commands)

    def set_global_commands(self, commands: list[CommandSpec]) -> list[CommandSpec]:
        self.global_commands = list(commands)
        return list(commands)


@dataclass
class Context:
    """What every handler receives: storage, transport and the bot's own id."""

    repo: Repository
    gateway: Gateway = field(default_factory=Gateway)
    current_user_id: int = 0


def default_intents() -> Intents:
    return Intents.GUILD_MESSAGES | Intents.DIRECT_MESSAGES | Intents.MESSAGE_CONTENT


def send_log(ctx: Context, message: str, logs_channel_id: int) -> Message:
    """Post a log entry as an embed in the logs channel."""
    embed = Embed(
        description=message,
        timestamp=datetime.now(timezone.utc),
        colour=Colour.LIGHT_GREY,
    )
    return ctx.gateway.send_message(logs_channel_id, Message(embeds=(embed,)))