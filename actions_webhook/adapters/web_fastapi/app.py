"""FastAPI webhook adapter — thin translation layer, no business logic."""

from __future__ import annotations

import logging
import os
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from actions_webhook import ActionsSdkApp, create_assistant_app
from actions_webhook.adapters.demo import echo_handler
from actions_webhook.core.errors import ActionsWebhookError, VerificationError
from actions_webhook.core.http import WebhookRequest, WebhookResponse
from actions_webhook.core.models import CONTENT_TYPE_HEADER, Dialect
from actions_webhook.core.verification import IdTokenVerifier

logger = logging.getLogger(__name__)


def to_http_response(response: WebhookResponse) -> Response:
    if not response.sent:
        return JSONResponse({"error": "Handler did not send a response"}, status_code=500)
    headers = {name: value for name, value in response.headers if name.lower() != CONTENT_TYPE_HEADER.lower()}
    if isinstance(response.body, str):
        return PlainTextResponse(response.body, status_code=response.status_code, headers=headers)
    return JSONResponse(response.body, status_code=response.status_code, headers=headers)


def create_app(
    handler: Any = None,
    *,
    dialect: Dialect | str | None = None,
    project_id: str | None = None,
    verifier: IdTokenVerifier | None = None,
) -> FastAPI:
    """Serve *handler* (default: the echo demo) on ``POST /webhook``.

    Environment variables (all optional):
      ACTIONS_WEBHOOK_DIALECT  — ``actions_sdk`` (default) or ``dialogflow``
      ACTIONS_PROJECT_ID       — verify the Actions SDK ``Authorization`` JWT
    """
    handler = handler or echo_handler
    project_id = project_id or os.environ.get("ACTIONS_PROJECT_ID")
    api = FastAPI(title="Actions Webhook", version="0.1.0")

    @api.post("/webhook")
    async def webhook(request: Request) -> Response:
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse({"error": "Request body must be JSON"}, status_code=400)

        webhook_response = WebhookResponse()
        assistant = create_assistant_app(
            WebhookRequest(headers=dict(request.headers), body=body),
            webhook_response,
            dialect=dialect,
            verifier=verifier,
        )

        if project_id and isinstance(assistant, ActionsSdkApp):
            try:
                await assistant.is_request_from_google(project_id)
            except VerificationError as exc:
                return JSONResponse({"error": f"ID token verification failed: {exc}"}, status_code=403)

        try:
            await assistant.handle_request(handler)
        except ActionsWebhookError as exc:
            logger.warning("webhook request rejected: %s", exc)
        except Exception:
            logger.exception("webhook handler raised")
        return to_http_response(webhook_response)

    @api.get("/health")
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return api


# Module-level instance for ``uvicorn actions_webhook.adapters.web_fastapi.app:app``
app = create_app()


def serve() -> None:
    """Entry-point for ``actions-webhook-web`` console script."""
    import uvicorn

    log_level = os.environ.get("ACTIONS_WEBHOOK_LOG_LEVEL", "info").lower()
    logging.getLogger("actions_webhook").setLevel(log_level.upper())
    uvicorn.run(
        "actions_webhook.adapters.web_fastapi.app:app",
        host="0.0.0.0",
        port=8000,
        log_level=log_level,
    )
