"""Response Decoding — pure decoders from raw redis-py replies to tagged results.

Invariants:
    - No IO, no logging: callers decide how to surface each tag
    - Every decoder is total over reply shapes (bytes, str, int, list, dict, None)
    - COMMAND INFO decodes to exactly one of PRESENT, ABSENT, MALFORMED
    - Existence flag polarity is the module's: 0 means the captcha exists, 1 means it does not

Design Decisions:
    - Tagged enum over structural matching at call sites: exhaustive, testable in isolation
    - bool replies are rejected by decode_integer: True/False are never a wire integer here
"""

from enum import Enum
from typing import Any


class CommandInfoStatus(str, Enum):
    """Outcome of introspecting one command."""
    PRESENT = "present"
    ABSENT = "absent"
    MALFORMED = "malformed"


# Module replies 0 for "exists" and 1 for "does not exist".
EXISTS_FLAG_MEANING = {0: True, 1: False}


def _text(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return value


def _record_values(record: Any) -> list:
    """Flatten one MODULE LIST record (dict from redis-py callbacks, or raw pairs)."""
    if isinstance(record, dict):
        items = list(record.values())
    elif isinstance(record, (list, tuple)):
        items = list(record)
    else:
        items = [record]
    return [_text(v) for v in items]


def module_listed(reply: Any, module_name: str) -> bool:
    """True when every MODULE LIST record names `module_name`.

    Each record is checked on its own, so a listing that also reports an
    unrelated module is treated as not loaded. An empty listing is not loaded.
    """
    if not isinstance(reply, (list, tuple)) or not reply:
        return False
    return all(module_name in _record_values(record) for record in reply)


def decode_command_info(reply: Any) -> CommandInfoStatus:
    """Classify a COMMAND INFO reply for a single command name."""
    if isinstance(reply, dict):
        entries = list(reply.values())
    elif isinstance(reply, (list, tuple)):
        entries = list(reply)
    else:
        return CommandInfoStatus.MALFORMED
    if not entries:
        return CommandInfoStatus.MALFORMED
    if entries[-1] is None:
        return CommandInfoStatus.ABSENT
    return CommandInfoStatus.PRESENT


def decode_integer(reply: Any) -> int | None:
    """Integer reply, or None when the reply is not an integer."""
    if isinstance(reply, bool):
        return None
    if isinstance(reply, int):
        return reply
    reply = _text(reply)
    if isinstance(reply, str):
        try:
            return int(reply)
        except ValueError:
            return None
    return None


def decode_text(reply: Any) -> str | None:
    """Bulk-string reply as str; None for nil."""
    if reply is None:
        return None
    reply = _text(reply)
    return reply if isinstance(reply, str) else str(reply)
