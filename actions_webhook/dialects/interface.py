"""Wire-dialect strategy interface — every dialect implements this ABC."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from actions_webhook.core.errors import ResponseValidationError
from actions_webhook.core.http import WebhookRequest
from actions_webhook.core.models import (
    ACTIONS_API_VERSION_HEADER,
    ANY_TYPE_PROPERTY,
    INPUTS_MAX,
    Dialect,
    ProtocolVersion,
    SystemIntentRequest,
)
from actions_webhook.core.state import ConversationToken
from actions_webhook.response.builder import RichResponse, SimpleResponse, is_ssml

_LEADING_INT = re.compile(r"\s*(\d+)")


def parse_protocol_version(value: Any) -> ProtocolVersion:
    """``>= 2`` selects V2; anything missing or unparsable is the legacy V1."""
    if value is None:
        return ProtocolVersion.V1
    match = _LEADING_INT.match(str(value))
    if match and int(match.group(1)) >= 2:
        return ProtocolVersion.V2
    return ProtocolVersion.V1


class Prompt(BaseModel):
    """A validated reply: plain speech (+ no-input reprompts) or a rich response."""
    speech: str | None = None
    is_ssml: bool = False
    no_inputs: list[str] = Field(default_factory=list)
    rich: RichResponse | None = None

    @classmethod
    def parse(cls, value: Any, no_inputs: list[str] | None = None) -> Prompt:
        if not value:
            raise ResponseValidationError("Invalid input prompt")
        if no_inputs and len(no_inputs) > INPUTS_MAX:
            raise ResponseValidationError("Invalid number of no inputs")
        if isinstance(value, str):
            return cls(speech=value, is_ssml=is_ssml(value), no_inputs=list(no_inputs or []))
        if isinstance(value, Mapping) and "initialPrompts" in value:
            return cls._from_input_prompt(value)

        if isinstance(value, RichResponse):
            rich = value
        elif isinstance(value, SimpleResponse) or (isinstance(value, Mapping) and value.get("speech")):
            rich = RichResponse().add_simple_response(value)
        elif isinstance(value, Mapping) and "items" in value:
            try:
                rich = RichResponse.model_validate(value)
            except ValidationError as exc:
                raise ResponseValidationError(f"Invalid RichResponse: {exc}") from exc
        else:
            raise ResponseValidationError(
                "Invalid speech response. Must be string, RichResponse or SimpleResponse."
            )
        if not rich.simple_responses():
            raise ResponseValidationError("Invalid RichResponse. It must contain at least one SimpleResponse")
        return cls(rich=rich)

    @classmethod
    def _from_input_prompt(cls, value: Mapping[str, Any]) -> Prompt:
        """Accept an ``{initialPrompts, noInputPrompts}`` block built by hand."""
        initial = value.get("initialPrompts") or []
        if not initial or not isinstance(initial[0], Mapping):
            raise ResponseValidationError("Invalid input prompt")
        ssml = "ssml" in initial[0]
        speech = initial[0].get("ssml") if ssml else initial[0].get("textToSpeech")
        if not speech:
            raise ResponseValidationError("Invalid input prompt")
        no_inputs = [
            prompt.get("ssml") or prompt.get("textToSpeech")
            for prompt in value.get("noInputPrompts") or []
            if isinstance(prompt, Mapping)
        ]
        if len(no_inputs) > INPUTS_MAX:
            raise ResponseValidationError("Invalid number of no inputs")
        return cls(speech=speech, is_ssml=ssml, no_inputs=[text for text in no_inputs if text])

    def prompts(self, texts: list[str]) -> list[dict[str, str]]:
        key = "ssml" if self.is_ssml else "textToSpeech"
        return [{key: text} for text in texts]

    @property
    def display_speech(self) -> str | None:
        """Speech of the leading simple response, or the plain speech."""
        if self.rich is not None:
            return self.rich.simple_responses()[0].speech
        return self.speech


class WireDialect(ABC):
    """Request normalization and response serialization for one wire dialect.

    Payloads are assembled in camelCase; :meth:`finalize` applies the
    version-specific naming convention right before the body is written.
    """

    dialect: Dialect

    def detect_version(self, request: WebhookRequest, body: Any) -> ProtocolVersion:
        return parse_protocol_version(request.get(ACTIONS_API_VERSION_HEADER))

    @abstractmethod
    def normalize(self, body: dict[str, Any], version: ProtocolVersion) -> dict[str, Any]:
        """Return the body with every field the accessors read in camelCase."""
        ...

    @abstractmethod
    def request_data(self, body: dict[str, Any]) -> dict[str, Any] | None:
        """The conversation-webhook portion (user, device, inputs, surface...)."""
        ...

    @abstractmethod
    def load_state(self, body: dict[str, Any]) -> ConversationToken:
        ...

    @abstractmethod
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
        ...

    @abstractmethod
    def build_tell(self, prompt: Prompt, *, contexts: list[dict[str, Any]]) -> dict[str, Any]:
        ...

    @abstractmethod
    def attach_user_storage(self, payload: dict[str, Any], serialized: str) -> None:
        ...

    @abstractmethod
    def finalize(self, payload: dict[str, Any], version: ProtocolVersion) -> dict[str, Any]:
        ...

    # -- shared helpers ----------------------------------------------------

    @staticmethod
    def intent_value(request: SystemIntentRequest, version: ProtocolVersion) -> tuple[str, dict[str, Any]]:
        """``("spec", {...})`` for legacy V1 wrappers, otherwise ``("data", {"@type": ...})``."""
        spec = request.spec or {}
        if version == ProtocolVersion.V1 and request.legacy_spec_key:
            return "spec", {request.legacy_spec_key: spec}
        if request.spec_type is None:
            return "data", {}
        return "data", {ANY_TYPE_PROPERTY: request.spec_type.value, **spec}
