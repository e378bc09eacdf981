"""Round-tripped conversation state: dialog token and user storage.

Both blobs are opaque JSON strings owned by the caller. They are decoded once
when the request arrives and re-encoded at most once when the response is
emitted. Decoding never raises: a missing or malformed blob becomes the empty
default and is logged.
"""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

EMPTY_USER_STORAGE = '{"data":{}}'


def dumps_compact(value: Any) -> str:
    """Serialize like ``JSON.stringify``: no whitespace, non-ASCII kept verbatim."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def _loads_object(raw: str, what: str) -> dict[str, Any] | None:
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError) as exc:
        logger.warning("Unable to parse %s, using empty state: %s", what, exc)
        return None
    if not isinstance(parsed, dict):
        logger.warning("Ignoring %s that is not a JSON object: %r", what, raw)
        return None
    return parsed


class ConversationToken:
    """Dialog state ``{state, data}`` carried between turns of one conversation."""

    def __init__(
        self,
        state: Any = None,
        data: dict[str, Any] | None = None,
        *,
        has_state: bool = True,
        raw: str | None = None,
    ) -> None:
        self.state = state
        self.data = data if data is not None else {}
        self.has_state = has_state
        self.raw = raw

    @classmethod
    def decode(cls, raw: str | None) -> ConversationToken:
        if not raw:
            return cls()
        parsed = _loads_object(raw, "conversation token")
        if parsed is None:
            return cls(raw=raw)
        data = parsed.get("data")
        return cls(
            state=parsed.get("state"),
            data=data if isinstance(data, dict) else {},
            has_state="state" in parsed,
            raw=raw,
        )

    @classmethod
    def from_parameters(cls, parameters: dict[str, Any] | None) -> ConversationToken:
        """Token kept as context parameters (NLU platform): data only, no state key."""
        return cls(data=dict(parameters) if parameters else {}, has_state=False)

    def snapshot(self, state: Any, data: Any) -> dict[str, Any]:
        """Outbound dialog state; never introduces a ``state`` key the request lacked."""
        if self.has_state:
            return {"state": state, "data": data}
        return {"data": data}

    def encode(self, state: Any, data: Any) -> str:
        return dumps_compact(self.snapshot(state, data))


class UserStorage:
    """Cross-conversation ``{"data": ...}`` blob stored by the platform per user.

    Re-emission is decided per field from a before/after snapshot:

    * absent in the request  -> emitted only once something was written
    * present and unchanged  -> omitted
    * present and changed    -> emitted

    "Changed" compares serialized strings, so reordering keys alone forces a
    re-send.
    """

    def __init__(self, raw: str | None, *, enabled: bool = True) -> None:
        self.raw = raw if isinstance(raw, str) else None
        self.enabled = enabled
        self.data: dict[str, Any] = {}
        if self.raw:
            parsed = _loads_object(self.raw, "user storage")
            if parsed is not None and isinstance(parsed.get("data"), dict):
                self.data = parsed["data"]

    def encode(self, data: Any) -> str | None:
        """Serialized blob to send back, or ``None`` when the field must be omitted."""
        if not self.enabled or data is None:
            return None
        serialized = dumps_compact({"data": data})
        baseline = self.raw if self.raw is not None else EMPTY_USER_STORAGE
        if serialized == baseline:
            return None
        return serialized
