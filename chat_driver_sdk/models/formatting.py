"""Plain-text rendering of transcript messages."""

from datetime import datetime, timedelta
from typing import Optional

from .enums import ChatRole
from .messages import ChatMessage


def format_chat_timestamp(timestamp: datetime, full_date: bool = False,
                          now: Optional[datetime] = None) -> str:
    """
    Render a timestamp relative to ``now``.

    Examples: ``Today at 09:30``, ``Yesterday (Monday, January 05) at 17:02``,
    ``Friday, January 02 at 08:15``. Aware timestamps are shown in local time.
    """
    local = timestamp.astimezone() if timestamp.tzinfo else timestamp
    if now is None:
        now = datetime.now(local.tzinfo)
    elif now.tzinfo and local.tzinfo:
        now = now.astimezone(local.tzinfo)

    time_str = local.strftime("%H:%M")
    date_str = local.strftime("%A, %B %d")

    if local.date() == now.date():
        label = "Today"
    elif local.date() == (now - timedelta(days=1)).date():
        label = "Yesterday"
    else:
        return f"{date_str} at {time_str}"

    if full_date:
        return f"{label} ({date_str}) at {time_str}"
    return f"{label} at {time_str}"


def render_chat_message(message: ChatMessage, now: Optional[datetime] = None) -> str:
    """Render a message as ``[<timestamp>] User:|Assistant:`` followed by its text."""
    originator = "User" if message.role == ChatRole.USER else "Assistant"
    timestamp = format_chat_timestamp(message.timestamp, full_date=True, now=now)
    return f"[{timestamp}] {originator}:\n{message.text}\n"
