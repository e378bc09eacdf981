"""Dialogflow (v1 webhook format) dialect.

The NLU platform wraps the Actions SDK body in ``originalRequest.data`` and
carries dialog data in the parameters of the ``_actions_on_google_`` context.
Only ``originalRequest`` follows the protocol-version naming convention;
``result`` is always camelCase.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from actions_webhook.core.app import AssistantApp
from actions_webhook.core.http import WebhookRequest, WebhookResponse
from actions_webhook.core.models import (
    ACTIONS_API_VERSION_HEADER,
    BuiltInArgNames,
    Dialect,
    ProtocolVersion,
    SystemIntentRequest,
)
from actions_webhook.core.state import ConversationToken
from actions_webhook.core.transform import to_camel_case, to_snake_case
from actions_webhook.dialects.interface import Prompt, WireDialect, parse_protocol_version
from actions_webhook.response.builder import (
    BasicCard,
    Carousel,
    LinkOutSuggestion,
    List,
    ResponseItem,
    RichResponse,
    SimpleResponse,
    Suggestion,
)

logger = logging.getLogger(__name__)

ACTIONS_CONTEXT = "_actions_on_google_"
MAX_LIFESPAN = 100
ORIGINAL_SUFFIX = ".original"
SELECT_EVENT = "actions_intent_option"

# Fulfillment message types
SIMPLE_RESPONSE = "simple_response"
BASIC_CARD = "basic_card"
LIST = "list_card"
CAROUSEL = "carousel_card"
SUGGESTIONS = "suggestion_chips"
LINK_OUT_SUGGESTION = "link_out_chip"

_MESSAGE_META = ("type", "platform")


def _strip_meta(message: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in message.items() if k not in _MESSAGE_META}


class DialogflowDialect(WireDialect):
    dialect = Dialect.NLU_PLATFORM

    def detect_version(self, request: WebhookRequest, body: Any) -> ProtocolVersion:
        header = request.get(ACTIONS_API_VERSION_HEADER)
        if header is not None:
            return parse_protocol_version(header)
        original = body.get("originalRequest") if isinstance(body, dict) else None
        if isinstance(original, dict):
            return parse_protocol_version(original.get("version"))
        return ProtocolVersion.V1

    def normalize(self, body: dict[str, Any], version: ProtocolVersion) -> dict[str, Any]:
        if version == ProtocolVersion.V1 and isinstance(body.get("originalRequest"), dict):
            return {**body, "originalRequest": to_camel_case(body["originalRequest"])}
        return body

    def request_data(self, body: dict[str, Any]) -> dict[str, Any] | None:
        original = body.get("originalRequest")
        if not isinstance(original, dict) or not original.get("data"):
            return None
        return original["data"]

    def load_state(self, body: dict[str, Any]) -> ConversationToken:
        for context in (body.get("result") or {}).get("contexts") or []:
            if context.get("name") == ACTIONS_CONTEXT:
                return ConversationToken.from_parameters(context.get("parameters"))
        return ConversationToken.from_parameters(None)

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
        google = self._google(prompt, expect_user_response=True)
        if system_intent is not None:
            key, value = self.intent_value(system_intent, version)
            google["systemIntent"] = {"intent": system_intent.intent, key: value}
        dialog_context = {
            "name": ACTIONS_CONTEXT,
            "lifespan": MAX_LIFESPAN,
            "parameters": dialog_state.get("data", {}),
        }
        return {
            "speech": prompt.display_speech,
            "contextOut": [dialog_context, *contexts],
            "data": {"google": google},
        }

    def build_tell(self, prompt: Prompt, *, contexts: list[dict[str, Any]]) -> dict[str, Any]:
        return {
            "speech": prompt.display_speech,
            "contextOut": list(contexts),
            "data": {"google": self._google(prompt, expect_user_response=False)},
        }

    def attach_user_storage(self, payload: dict[str, Any], serialized: str) -> None:
        payload["data"]["google"]["userStorage"] = serialized

    def finalize(self, payload: dict[str, Any], version: ProtocolVersion) -> dict[str, Any]:
        if version == ProtocolVersion.V1 and "data" in payload:
            return {**payload, "data": to_snake_case(payload["data"])}
        return payload

    @staticmethod
    def _google(prompt: Prompt, *, expect_user_response: bool) -> dict[str, Any]:
        if prompt.rich is not None:
            return {"expectUserResponse": expect_user_response, "richResponse": prompt.rich.to_wire()}
        return {
            "expectUserResponse": expect_user_response,
            "isSsml": prompt.is_ssml,
            "noInputPrompts": prompt.prompts(prompt.no_inputs),
        }


class DialogflowApp(AssistantApp):
    """App for Dialogflow (v1) fulfillment webhooks."""

    def __init__(
        self,
        request: WebhookRequest,
        response: WebhookResponse,
        *,
        session_started: Callable[[], Any] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(
            request,
            response,
            dialect=DialogflowDialect(),
            session_started=session_started,
            logger=logger,
        )

    def _result(self) -> dict[str, Any]:
        result = self.body.get("result")
        return result if isinstance(result, dict) else {}

    def is_request_from_dialogflow(self, key: str, value: str) -> bool:
        """True when header *key* carries the shared secret *value*."""
        self.logger.debug("is_request_from_dialogflow: key=%s", key)
        if not key:
            self.handle_error("key must be specified.")
            return False
        if not value:
            self.handle_error("value must be specified.")
            return False
        return self.request.get(key) == value

    def get_intent(self) -> str | None:
        self.logger.debug("get_intent")
        intent = self._result().get("action")
        if not intent:
            self.logger.error("Missing intent from request body")
            return None
        return intent

    def get_argument(self, arg_name: str, raw: bool = False) -> Any:
        """NLU parameter *arg_name*, falling back to the raw conversation arguments."""
        self.logger.debug("get_argument: arg_name=%s", arg_name)
        if not arg_name:
            self.logger.error("Invalid argument name")
            return None
        parameters = self._result().get("parameters") or {}
        if parameters.get(arg_name):
            return parameters[arg_name]
        return self.get_argument_common(arg_name, raw=raw)

    def get_raw_input(self) -> str | None:
        self.logger.debug("get_raw_input")
        query = self._result().get("resolvedQuery")
        if not query:
            self.logger.error("No raw input")
            return None
        return query

    # -- contexts ------------------------------------------------------

    def set_context(self, name: str, lifespan: int | None = 1, parameters: dict[str, Any] | None = None) -> None:
        """Emit an output context with the next response (last call per name wins)."""
        self.logger.debug("set_context: name=%s, lifespan=%s, parameters=%s", name, lifespan, parameters)
        if not name:
            self.handle_error("Invalid context name")
            return
        context: dict[str, Any] = {"name": name, "lifespan": 1 if lifespan is None else lifespan}
        if parameters:
            context["parameters"] = parameters
        self._contexts[name] = context

    def get_contexts(self) -> list[dict[str, Any]]:
        self.logger.debug("get_contexts")
        contexts = self._result().get("contexts") or []
        return [context for context in contexts if context.get("name") != ACTIONS_CONTEXT]

    def get_context(self, name: str) -> dict[str, Any] | None:
        self.logger.debug("get_context: name=%s", name)
        for context in self._result().get("contexts") or []:
            if context.get("name") == name:
                return context
        self.logger.debug("Failed to get context: %s", name)
        return None

    def get_context_argument(self, context_name: str, arg_name: str) -> dict[str, Any] | None:
        """``{"value": ..., "original": ...}`` for *arg_name* of an incoming context."""
        self.logger.debug("get_context_argument: context_name=%s, arg_name=%s", context_name, arg_name)
        if not context_name or not arg_name:
            self.logger.error("Invalid context or argument name")
            return None
        context = self.get_context(context_name)
        parameters = (context or {}).get("parameters") or {}
        if not parameters.get(arg_name):
            self.logger.debug("Failed to get context argument value: %s", arg_name)
            return None
        argument = {"value": parameters[arg_name]}
        if parameters.get(arg_name + ORIGINAL_SUFFIX):
            argument["original"] = parameters[arg_name + ORIGINAL_SUFFIX]
        return argument

    def get_selected_option(self) -> Any:
        self.logger.debug("get_selected_option")
        selected = self.get_context_argument(SELECT_EVENT, BuiltInArgNames.OPTION.value)
        if selected and selected.get("value"):
            return selected["value"]
        option = self.get_argument(BuiltInArgNames.OPTION.value)
        if option:
            return option
        self.logger.debug("Failed to get selected option")
        return None

    # -- responses defined in the NLU console ---------------------------

    def _messages(self) -> list[dict[str, Any]]:
        fulfillment = self._result().get("fulfillment") or {}
        return [m for m in fulfillment.get("messages") or [] if isinstance(m, dict) and m.get("type")]

    def get_incoming_rich_response(self) -> RichResponse:
        """Rich response assembled from the console-defined fulfillment messages."""
        self.logger.debug("get_incoming_rich_response")
        response = self.build_rich_response()
        for message in self._messages():
            fields = _strip_meta(message)
            try:
                if message["type"] == SIMPLE_RESPONSE:
                    response.items.append(ResponseItem(simple_response=SimpleResponse.model_validate(fields)))
                elif message["type"] == BASIC_CARD:
                    response.items.append(ResponseItem(basic_card=BasicCard.model_validate(fields)))
                elif message["type"] == SUGGESTIONS:
                    response.suggestions = [Suggestion.model_validate(s) for s in fields.get("suggestions") or []]
                elif message["type"] == LINK_OUT_SUGGESTION:
                    response.link_out_suggestion = LinkOutSuggestion.model_validate(fields)
            except ValidationError as exc:
                logger.warning("Skipping malformed %s message: %s", message["type"], exc)
        return response

    def get_incoming_list(self) -> List:
        self.logger.debug("get_incoming_list")
        return self._incoming_selection(LIST, List)

    def get_incoming_carousel(self) -> Carousel:
        self.logger.debug("get_incoming_carousel")
        return self._incoming_selection(CAROUSEL, Carousel)

    def _incoming_selection(self, message_type: str, model: type[List] | type[Carousel]) -> Any:
        selection = model()
        for message in self._messages():
            if message["type"] != message_type:
                continue
            try:
                selection = model.model_validate(_strip_meta(message))
            except ValidationError as exc:
                logger.warning("Skipping malformed %s message: %s", message_type, exc)
        return selection
