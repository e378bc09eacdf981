"""Actions SDK dialect: conversation webhooks sent straight by the assistant platform."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from actions_webhook.core.app import AssistantApp
from actions_webhook.core.errors import VerificationError
from actions_webhook.core.http import WebhookRequest, WebhookResponse
from actions_webhook.core.models import (
    ACTIONS_API_VERSION_HEADER,
    AGENT_VERSION_HEADER,
    INPUTS_MAX,
    MISSING_JWT_MESSAGE,
    SIGNATURE_HEADER,
    BuiltInArgNames,
    Dialect,
    ProtocolVersion,
    SystemIntentRequest,
)
from actions_webhook.core.state import ConversationToken, dumps_compact
from actions_webhook.core.transform import to_camel_case, to_snake_case
from actions_webhook.core.verification import GoogleIdTokenVerifier, IdTokenVerifier
from actions_webhook.dialects.interface import Prompt, WireDialect


class ActionsSdkDialect(WireDialect):
    """The whole body is the conversation; V1 bodies are snake_case on the wire."""

    dialect = Dialect.RAW_SDK

    def normalize(self, body: dict[str, Any], version: ProtocolVersion) -> dict[str, Any]:
        if version == ProtocolVersion.V1:
            return to_camel_case(body)
        return body

    def request_data(self, body: dict[str, Any]) -> dict[str, Any] | None:
        return body

    def load_state(self, body: dict[str, Any]) -> ConversationToken:
        conversation = body.get("conversation") or {}
        return ConversationToken.decode(conversation.get("conversationToken"))

    def build_ask(
        self,
        prompt: Prompt,
        *,
        dialog_state: dict[str, Any],
        text_intent: str,
        system_intent: SystemIntentRequest | None,
        contexts: list[dict[str, Any]],
        version: ProtocolVersion,
    ) -> dict[str, Any]:
        if system_intent is not None:
            expected_intent = self.expected_intent(system_intent, version)
        else:
            expected_intent = {"intent": text_intent}
        return {
            "conversationToken": dumps_compact(dialog_state),
            "expectUserResponse": True,
            "expectedInputs": [{
                "inputPrompt": self.input_prompt(prompt),
                "possibleIntents": [expected_intent],
            }],
        }

    def build_tell(self, prompt: Prompt, *, contexts: list[dict[str, Any]]) -> dict[str, Any]:
        if prompt.rich is not None:
            final_response: dict[str, Any] = {"richResponse": prompt.rich.to_wire()}
        else:
            final_response = {"speechResponse": prompt.prompts([prompt.speech])[0]}
        return {"expectUserResponse": False, "finalResponse": final_response}

    def attach_user_storage(self, payload: dict[str, Any], serialized: str) -> None:
        payload["userStorage"] = serialized

    def finalize(self, payload: dict[str, Any], version: ProtocolVersion) -> dict[str, Any]:
        if version == ProtocolVersion.V1:
            return to_snake_case(payload)
        return payload

    # -- pieces --------------------------------------------------------

    def expected_intent(self, request: SystemIntentRequest, version: ProtocolVersion) -> dict[str, Any]:
        key, value = self.intent_value(request, version)
        field = "inputValueSpec" if key == "spec" else "inputValueData"
        return {"intent": request.intent, field: value}

    @staticmethod
    def input_prompt(prompt: Prompt) -> dict[str, Any]:
        if prompt.rich is not None:
            return {"richInitialPrompt": prompt.rich.to_wire()}
        return {
            "initialPrompts": prompt.prompts([prompt.speech]),
            "noInputPrompts": prompt.prompts(prompt.no_inputs),
        }


class ActionsSdkApp(AssistantApp):
    """App for Actions SDK conversation webhooks.

    Usage::

        app = ActionsSdkApp(WebhookRequest(headers=..., body=...), WebhookResponse())
        await app.handle_request({StandardIntents.MAIN.value: welcome, ...})
    """

    def __init__(
        self,
        request: WebhookRequest,
        response: WebhookResponse,
        *,
        session_started: Callable[[], Any] | None = None,
        logger: logging.Logger | None = None,
        verifier: IdTokenVerifier | None = None,
    ) -> None:
        super().__init__(
            request,
            response,
            dialect=ActionsSdkDialect(),
            session_started=session_started,
            logger=logger,
        )
        self._verifier = verifier

    async def is_request_from_google(self, project_id: str) -> dict[str, Any]:
        """Verify the ``Authorization`` JWT against *project_id*.

        Resolves to the verified claims; raises :class:`VerificationError`
        otherwise. Does not send a response either way.
        """
        self.logger.debug("is_request_from_google: project_id=%s", project_id)
        id_token = self.request.get(SIGNATURE_HEADER)
        if not id_token:
            raise VerificationError(MISSING_JWT_MESSAGE)
        if self._verifier is None:
            self._verifier = GoogleIdTokenVerifier()
        return await self._verifier.verify(id_token, project_id)

    def get_api_version(self) -> str | None:
        self.logger.debug("get_api_version")
        return self.api_version or self.request.get(ACTIONS_API_VERSION_HEADER)

    def get_action_version_label(self) -> str | None:
        self.logger.debug("get_action_version_label")
        return self.request.get(AGENT_VERSION_HEADER) or None

    def get_conversation_id(self) -> str | None:
        self.logger.debug("get_conversation_id")
        conversation = self.body.get("conversation") or {}
        if not conversation.get("conversationId"):
            self.logger.error("No conversation ID")
            return None
        return conversation["conversationId"]

    def get_dialog_state(self) -> dict[str, Any]:
        """The dialog state as it arrived, before any handler mutation."""
        self.logger.debug("get_dialog_state")
        conversation = self.body.get("conversation") or {}
        raw = conversation.get("conversationToken")
        if not raw:
            return {}
        token = ConversationToken.decode(raw)
        return token.snapshot(token.state, token.data)

    def _top_input(self) -> dict[str, Any] | None:
        inputs = self.body.get("inputs") or []
        if not inputs:
            self.logger.error("Missing inputs from request body")
            return None
        return inputs[0]

    def get_intent(self) -> str | None:
        self.logger.debug("get_intent")
        top_input = self._top_input()
        return top_input.get("intent") if top_input else None

    def get_raw_input(self) -> str | None:
        self.logger.debug("get_raw_input")
        top_input = self._top_input()
        raw_inputs = (top_input or {}).get("rawInputs") or []
        if not raw_inputs or not raw_inputs[0].get("query"):
            self.logger.error("Missing user raw input")
            return None
        return raw_inputs[0]["query"]

    def get_argument(self, arg_name: str, raw: bool = False) -> Any:
        return self.get_argument_common(arg_name, raw=raw)

    def get_selected_option(self) -> Any:
        self.logger.debug("get_selected_option")
        option = self.get_argument(BuiltInArgNames.OPTION.value)
        if option:
            return option
        self.logger.debug("Failed to get selected option")
        return None

    def build_input_prompt(
        self,
        is_ssml: bool,
        initial_prompt: str,
        no_inputs: list[str] | None = None,
    ) -> dict[str, Any] | None:
        """Hand-built ``{initialPrompts, noInputPrompts}`` block accepted by :meth:`ask`."""
        self.logger.debug("build_input_prompt: is_ssml=%s, initial_prompt=%s", is_ssml, initial_prompt)
        if no_inputs and len(no_inputs) > INPUTS_MAX:
            self.handle_error("Invalid number of no inputs")
            return None
        key = "ssml" if is_ssml else "textToSpeech"
        return {
            "initialPrompts": [{key: initial_prompt}] if initial_prompt else [],
            "noInputPrompts": [{key: text} for text in no_inputs or []],
        }
