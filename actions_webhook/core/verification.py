"""Identity-token verification — ABC and google-auth implementation."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

from actions_webhook.core.errors import VerificationError

logger = logging.getLogger(__name__)


class IdTokenVerifier(ABC):
    """Checks the signed JWT the platform attaches to each webhook call."""

    @abstractmethod
    async def verify(self, id_token: str, audience: str) -> dict[str, Any]:
        """Return the verified claims or raise :class:`VerificationError`."""


class GoogleIdTokenVerifier(IdTokenVerifier):
    """Verifies tokens against Google's published certificates.

    The google-auth call is blocking network I/O, so it runs in a worker thread.
    """

    def __init__(self) -> None:
        # Late import so the rest of the package works without google-auth installed
        from google.auth.transport import requests as google_requests
        from google.oauth2 import id_token

        self._id_token = id_token
        self._transport = google_requests

    def _verify_blocking(self, id_token: str, audience: str) -> Any:
        # requests.Session is not thread-safe; one transport per worker call
        return self._id_token.verify_oauth2_token(id_token, self._transport.Request(), audience)

    async def verify(self, id_token: str, audience: str) -> dict[str, Any]:
        try:
            claims = await asyncio.to_thread(self._verify_blocking, id_token, audience)
        except Exception as exc:
            logger.warning("id token verification failed: %s", exc)
            raise VerificationError(str(exc)) from exc
        return dict(claims)
