"""Framework-agnostic host request/response objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field


class WebhookRequest(BaseModel):
    """Inbound webhook call: headers plus the parsed JSON body."""
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None

    def get(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


@dataclass
class WebhookResponse:
    """Outbound response the app writes into; adapters translate it for their framework."""

    status_code: int = 200
    body: Any = None
    headers: list[tuple[str, str]] = field(default_factory=list)
    sent: bool = False

    def status(self, code: int) -> WebhookResponse:
        self.status_code = code
        return self

    def send(self, body: Any) -> WebhookResponse:
        self.body = body
        self.sent = True
        return self

    def append(self, header: str, value: str) -> WebhookResponse:
        self.headers.append((header, value))
        return self

    def header(self, name: str) -> str | None:
        for key, value in self.headers:
            if key.lower() == name.lower():
                return value
        return None
