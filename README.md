# aura_bot

The core of a community chat bot that tracks a weekly goal of "dirty money"
deliveries, gives each member an individual channel, and forwards anonymous
messages. Everything is stored in a SQLite database. It has no dependencies
outside the standard library.

## Commands

Slash commands (their names and texts are in Portuguese):

| Command         | Purpose                                                        |
|-----------------|----------------------------------------------------------------|
| `meta`          | Opens a form to report a delivered amount and to whom          |
| `canal`         | Creates the caller's individual channel                        |
| `anonimo`       | Posts an anonymous message to the configured channel           |
| `definirmeta`   | Sets the weekly goal (administrators only)                     |
| `definircanais` | Configures the bot's six channels (administrators only)        |
| `definircanal`  | Assigns an existing channel to a member (administrators only)  |
| `info`          | Shows the current goal and how much the caller has delivered   |

Reported deliveries are posted to the approval channel with *Aprovar* and
*Recusar* buttons. A member whose last report is still pending cannot send
another. On a decision, the member is told in their own channel how much of
the goal is left, and an entry is written to the logs channel.

The goal week runs from Monday 18:00 to the next Monday 18:00, São Paulo time.

## Layout

- `aura_bot.timeutil` — `format_amount`, `get_next_monday_at_18`,
  `get_last_monday_at_18`.
- `aura_bot.models` — the `ChannelIds` and `Goal` records.
- `aura_bot.repository` — `init_db` and `Repository`, the SQLite storage for
  channels, members' channels, the current goal and delivery reports.
  Lookups that must find a row and do not raise `NotFoundError`; other
  storage failures raise `RepositoryError`. `Repository` is a context manager
  that closes its connection on exit.
- `aura_bot.messaging` — `Colour`, `Intents`, `Permissions`, `Embed`,
  `Button`, `InputText`, `Message`, `Modal`, `Response`, the interaction
  types, the in-memory `Gateway`, `Context`, `default_intents` and `send_log`.
- `aura_bot.commands` — a `register_*` and `run_*` function per command, and
  `register_commands` for the full list in registration order.
- `aura_bot.components` — `run_goal_modal`, `run_meta_buttons` and
  `get_texts`.
- `aura_bot.events` — `dispatch_interaction`, `on_ready` and `Handler`.

## Usage

```python
from aura_bot.repository import init_db
from aura_bot.messaging import CommandInteraction, CommandOption, Context, User
from aura_bot.events import dispatch_interaction, on_ready

repo = init_db("sqlite:aura.db")          # creates the file and tables if missing
ctx = Context(repo=repo, current_user_id=1)

on_ready(ctx, "Aura", guild_id=100)        # registers the commands in guild 100

dispatch_interaction(
    ctx,
    CommandInteraction(
        name="definirmeta",
        user=User(id=42, name="admin"),
        options=(CommandOption("integer", "quantidade", value=1_000_000),),
    ),
)
```

Handlers return the `Response` (or, for `meta`, the `Modal`) they sent, or
`None` when they stopped early; such stops are reported through the
`logging` module. Everything sent ends up in `ctx.gateway`: `messages`,
`channels`, `responses`, `guild_commands` and `global_commands`.

`init_db` accepts a plain path, a `sqlite:` or `sqlite://` URL, or
`:memory:`.

## Amounts

Amounts are shown in the short form used in the game economy; negative
amounts raise `ValueError`:

```python
from aura_bot.timeutil import format_amount

format_amount(999)        # "999"
format_amount(25_000)     # "25k"
format_amount(3_000_000)  # "3kk"
```

## Deadlines

The week boundaries take the current moment as an optional argument (the
present when omitted; naive values are taken as UTC) and return São Paulo
time:

```python
from datetime import datetime, timezone
from aura_bot.timeutil import get_last_monday_at_18, get_next_monday_at_18

now = datetime.now(timezone.utc)
start = get_last_monday_at_18(now)
deadline = get_next_monday_at_18(now)
```

`Repository.get_user_approved_weekly` and
`Repository.get_approved_metas_from_current_week` take the same optional
moment.

## Configuration

`on_ready` registers the commands for a single guild and clears the global
command list. When no guild id is passed (as with a `Handler` created
without one), it reads the `GUILD_ID` environment variable and raises
`RuntimeError` if it is unset or `ValueError` if it is not a valid id.

## What it does not do

- It does not connect to a chat service. `Gateway` only records what would
  be sent; connecting the handlers to a live client is left to the caller.
- It has no command-line program or entry point that starts a bot.
- It sends no scheduled reminders; nothing runs on a timer.