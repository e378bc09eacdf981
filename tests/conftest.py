"""Shared fixtures for actions_webhook tests."""

from __future__ import annotations

import pytest

from actions_webhook import ActionsSdkApp, DialogflowApp
from actions_webhook.core.http import WebhookRequest, WebhookResponse
from actions_webhook.core.verification import IdTokenVerifier
from actions_webhook.core.errors import VerificationError

V1_HEADERS = {"Google-Assistant-API-Version": "v1"}
V2_HEADERS = {"Google-Actions-API-Version": "2"}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("ACTIONS_WEBHOOK_DIALECT", "ACTIONS_PROJECT_ID", "ACTIONS_WEBHOOK_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sdk_v2_body():
    return {
        "user": {
            "userId": "user-123",
            "locale": "en-US",
            "lastSeen": "2018-03-21T17:59:52Z",
            "profile": {"displayName": "Ada Lovelace", "givenName": "Ada", "familyName": "Lovelace"},
        },
        "conversation": {"conversationId": "conv-1", "type": "NEW"},
        "inputs": [{
            "intent": "actions.intent.MAIN",
            "rawInputs": [{"inputType": "VOICE", "query": "talk to echo"}],
            "arguments": [],
        }],
        "surface": {"capabilities": [
            {"name": "actions.capability.AUDIO_OUTPUT"},
            {"name": "actions.capability.SCREEN_OUTPUT"},
        ]},
        "availableSurfaces": [{"capabilities": [
            {"name": "actions.capability.SCREEN_OUTPUT"},
            {"name": "actions.capability.WEB_BROWSER"},
        ]}],
        "isInSandbox": True,
    }


@pytest.fixture
def sdk_v1_body():
    return {
        "user": {
            "user_id": "user-123",
            "profile": {"display_name": "Ada Lovelace", "given_name": "Ada", "family_name": "Lovelace"},
        },
        "conversation": {"conversation_id": "conv-1", "type": 2},
        "inputs": [{
            "intent": "assistant.intent.action.TEXT",
            "raw_inputs": [{"input_type": 2, "query": "hello there"}],
            "arguments": [],
        }],
    }


@pytest.fixture
def dialogflow_body(sdk_v2_body):
    return {
        "originalRequest": {"source": "google", "version": "2", "data": sdk_v2_body},
        "result": {
            "resolvedQuery": "start a game",
            "action": "game.start",
            "parameters": {"color": "blue", "size": ""},
            "contexts": [
                {"name": "_actions_on_google_", "lifespan": 99, "parameters": {"count": 1}},
                {"name": "game", "lifespan": 5, "parameters": {"level": "3", "level.original": "three"}},
            ],
            "fulfillment": {"speech": "", "messages": []},
        },
    }


@pytest.fixture
def sdk_app():
    """Factory: ``sdk_app(body, headers=..., **options) -> (app, response)``."""

    def build(body, headers=None, **options):
        response = WebhookResponse()
        request = WebhookRequest(headers=V2_HEADERS if headers is None else headers, body=body)
        return ActionsSdkApp(request, response, **options), response

    return build


@pytest.fixture
def dialogflow_app():
    """Factory: ``dialogflow_app(body, headers=..., **options) -> (app, response)``."""

    def build(body, headers=None, **options):
        response = WebhookResponse()
        request = WebhookRequest(headers=headers or {}, body=body)
        return DialogflowApp(request, response, **options), response

    return build


class FakeVerifier(IdTokenVerifier):
    """Accepts exactly one token; records every audience it was asked about."""

    def __init__(self, valid_token="good-token"):
        self.valid_token = valid_token
        self.audiences = []

    async def verify(self, id_token, audience):
        self.audiences.append(audience)
        if id_token != self.valid_token:
            raise VerificationError("Wrong recipient, payload audience != requiredAudience")
        return {"aud": audience, "iss": "https://accounts.google.com"}


@pytest.fixture
def verifier():
    return FakeVerifier()
