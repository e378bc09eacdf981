"""actions_webhook — webhook adapter for assistant conversations (Actions SDK and Dialogflow).

Usage::

    from actions_webhook import WebhookRequest, WebhookResponse, create_assistant_app

    app = create_assistant_app(WebhookRequest(headers=headers, body=body), WebhookResponse())
    await app.handle_request(lambda app: app.tell("Goodbye!"))
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

load_dotenv()  # reads .env into os.environ (no-op if file missing)

from actions_webhook.core import (
    ActionsWebhookError,
    AssistantApp,
    BuiltInArgNames,
    Dialect,
    NoMatchingIntentError,
    ProtocolVersion,
    ResponseValidationError,
    StandardIntents,
    State,
    SupportedPermissions,
    SurfaceCapabilities,
    TransactionConfig,
    VerificationError,
    WebhookRequest,
    WebhookResponse,
)
from actions_webhook.dialects.actions_sdk import ActionsSdkApp
from actions_webhook.dialects.dialogflow import DialogflowApp
from actions_webhook.response import RichResponse, is_ssml

__all__ = [
    "ActionsSdkApp",
    "ActionsWebhookError",
    "AssistantApp",
    "BuiltInArgNames",
    "Dialect",
    "DialogflowApp",
    "NoMatchingIntentError",
    "ProtocolVersion",
    "ResponseValidationError",
    "RichResponse",
    "StandardIntents",
    "State",
    "SupportedPermissions",
    "SurfaceCapabilities",
    "TransactionConfig",
    "VerificationError",
    "WebhookRequest",
    "WebhookResponse",
    "create_assistant_app",
    "is_ssml",
]


def configured_dialect(dialect: Dialect | str | None = None) -> Dialect:
    """Explicit *dialect*, else ``ACTIONS_WEBHOOK_DIALECT``, else Actions SDK."""
    value = dialect or os.environ.get("ACTIONS_WEBHOOK_DIALECT") or Dialect.RAW_SDK.value
    return Dialect(value)


def create_assistant_app(
    request: WebhookRequest,
    response: WebhookResponse,
    *,
    dialect: Dialect | str | None = None,
    logger: logging.Logger | None = None,
    **options,
) -> AssistantApp:
    """Build the app for the configured dialect.

    Environment variables (all optional):
      ACTIONS_WEBHOOK_DIALECT  — ``actions_sdk`` (default) or ``dialogflow``
    """
    if configured_dialect(dialect) == Dialect.NLU_PLATFORM:
        options.pop("verifier", None)
        return DialogflowApp(request, response, logger=logger, **options)
    return ActionsSdkApp(request, response, logger=logger, **options)
