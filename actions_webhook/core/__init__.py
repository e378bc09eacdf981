from actions_webhook.core.errors import (
    ActionsWebhookError,
    NoMatchingIntentError,
    ResponseValidationError,
    VerificationError,
)
from actions_webhook.core.http import WebhookRequest, WebhookResponse
from actions_webhook.core.models import (
    BuiltInArgNames,
    Dialect,
    ProtocolVersion,
    StandardIntents,
    SupportedPermissions,
    SurfaceCapabilities,
    TransactionConfig,
)
from actions_webhook.core.state import ConversationToken, UserStorage
from actions_webhook.core.verification import GoogleIdTokenVerifier, IdTokenVerifier
from actions_webhook.core.app import AssistantApp, State

__all__ = [
    "ActionsWebhookError",
    "AssistantApp",
    "BuiltInArgNames",
    "ConversationToken",
    "Dialect",
    "GoogleIdTokenVerifier",
    "IdTokenVerifier",
    "NoMatchingIntentError",
    "ProtocolVersion",
    "ResponseValidationError",
    "StandardIntents",
    "State",
    "SupportedPermissions",
    "SurfaceCapabilities",
    "TransactionConfig",
    "UserStorage",
    "VerificationError",
    "WebhookRequest",
    "WebhookResponse",
]
