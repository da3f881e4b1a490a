"""Message normalization, deduplication and pruning for conversation history.

The orchestration runtime hands over messages in whatever shape its agents
produce: dataclasses with a ``role``, LangChain-style objects tagged with
``type``, OpenAI-style dicts, or objects carrying ``text`` instead of
``content``. Everything here works on :class:`NormalizedMessage`, which keeps
a reference to the original object so callers can hand the runtime back the
messages it gave us.
"""

import json
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

MAX_MESSAGES = 10
PRUNE_MAX_MESSAGES = 15

ROLE_ALIASES = {"human": "user", "ai": "assistant"}


@dataclass
class ChatMessage:
    """Plain message used when the coordinator has to create one."""

    role: str
    content: str
    id: str | None = None


@dataclass(frozen=True)
class NormalizedMessage:
    """A message reduced to the fields memory logic looks at."""

    role: str
    content: str
    id: str | None
    original: Any

    @property
    def key(self) -> tuple[str, str] | None:
        """Composite ``(role, content)`` key, or None if either part is empty."""
        if not self.role or not self.content:
            return None
        return (self.role, self.content)

    @property
    def is_system(self) -> bool:
        return self.role == "system"


def _field(message: Any, name: str) -> Any:
    if isinstance(message, Mapping):
        return message.get(name)
    value = getattr(message, name, None)
    return value() if callable(value) else value


def _role(message: Any) -> str:
    role = _field(message, "role") or _field(message, "type") or _field(message, "_getType")
    if not isinstance(role, str):
        return ""
    role = role.strip().lower()
    return ROLE_ALIASES.get(role, role)


def _content(message: Any) -> str:
    content = _field(message, "content")
    if content is None or content == "":
        content = _field(message, "text")
    if content is None:
        return ""
    if not isinstance(content, str):
        # Multi-part content (e.g. a list of content blocks)
        content = json.dumps(content, sort_keys=True, default=str)
    return content.strip()


def normalize_message(message: Any) -> NormalizedMessage | None:
    """Normalize one runtime message; ``None`` stays ``None``."""
    if message is None:
        return None

    message_id = _field(message, "id")
    return NormalizedMessage(
        role=_role(message),
        content=_content(message),
        id=str(message_id) if message_id not in (None, "") else None,
        original=message,
    )


def normalize_messages(messages: Iterable[Any]) -> list[NormalizedMessage | None]:
    """Normalize a runtime message sequence, preserving order and gaps."""
    return [normalize_message(m) for m in messages]


def _split_system(
    messages: Sequence[NormalizedMessage],
) -> tuple[list[NormalizedMessage], list[NormalizedMessage]]:
    system = [m for m in messages if m.is_system]
    other = [m for m in messages if not m.is_system]
    return system, other


def _tail(messages: list[NormalizedMessage], size: int) -> list[NormalizedMessage]:
    if size <= 0:
        return []
    return messages[-size:]


def deduplicate_messages(
    messages: Sequence[NormalizedMessage | None],
    max_messages: int | None = MAX_MESSAGES,
) -> list[NormalizedMessage]:
    """Remove duplicate messages, keeping the most recent occurrence.

    A message is a duplicate if its id was already seen, or if its
    ``(role, content)`` key was. Messages without a role or content are
    dropped. Relative order of survivors is preserved.

    Args:
        messages: Messages in chronological order (``None`` entries skipped)
        max_messages: Hard cap; when exceeded, every system message is kept
            plus the most recent non-system messages. None disables the cap.

    Returns:
        Deduplicated messages
    """
    seen_ids: set[str] = set()
    seen_keys: set[tuple[str, str]] = set()
    unique: list[NormalizedMessage] = []

    # Newest first, so the first sighting of an id or key is its latest
    for message in reversed(messages):
        if message is None:
            continue

        if message.id is not None:
            if message.id in seen_ids:
                continue
            seen_ids.add(message.id)

        key = message.key
        if key is None or key in seen_keys:
            continue
        seen_keys.add(key)
        unique.append(message)

    unique.reverse()

    if max_messages is None or len(unique) <= max_messages:
        return unique

    system, other = _split_system(unique)
    if len(system) > max_messages:
        return system[-max_messages:]
    return system + _tail(other, max_messages - len(system))


def prune_messages(
    messages: list[NormalizedMessage],
    max_messages: int = PRUNE_MAX_MESSAGES,
) -> list[NormalizedMessage]:
    """Bound history length, keeping system messages and the latest turns.

    Lists within the bound are returned unchanged. Otherwise non-system
    messages are deduplicated (no hard cap) and only the most recent
    ``max_messages - #system`` of them are kept, after all system messages.
    """
    if len(messages) <= max_messages:
        return messages

    system, other = _split_system(messages)
    other = deduplicate_messages(other, max_messages=None)
    return system + _tail(other, max_messages - len(system))
