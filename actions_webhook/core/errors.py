"""Exception types raised by the webhook core."""

from __future__ import annotations


class ActionsWebhookError(Exception):
    """Base class for all errors raised by actions_webhook."""


class ResponseValidationError(ActionsWebhookError):
    """A response violates a wire-shape rule; surfaced to the platform as HTTP 400."""


class NoMatchingIntentError(ActionsWebhookError):
    """The intent map given to ``handle_request`` has no entry for the request."""


class VerificationError(ActionsWebhookError):
    """Identity-token verification of an inbound request failed."""
