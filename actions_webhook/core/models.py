"""Wire constants and request-scoped models — only Pydantic + stdlib."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Dialect / protocol version
# ---------------------------------------------------------------------------

class Dialect(str, Enum):
    RAW_SDK = "actions_sdk"
    NLU_PLATFORM = "dialogflow"


class ProtocolVersion(str, Enum):
    V1 = "v1"  # legacy, snake_case wire
    V2 = "v2"  # camelCase wire


# ---------------------------------------------------------------------------
# Headers, status codes, fixed strings
# ---------------------------------------------------------------------------

CONVERSATION_API_VERSION_HEADER = "Google-Assistant-API-Version"
ACTIONS_API_VERSION_HEADER = "Google-Actions-API-Version"
AGENT_VERSION_HEADER = "Agent-Version-Label"
SIGNATURE_HEADER = "Authorization"
CONTENT_TYPE_HEADER = "Content-Type"
CONTENT_TYPE_JSON = "application/json"

RESPONSE_CODE_OK = 200
RESPONSE_CODE_BAD_REQUEST = 400

ERROR_MESSAGE = "Sorry, I am unable to process your request."
API_ERROR_MESSAGE_PREFIX = "Action Error: "
MISSING_JWT_MESSAGE = "No incoming API Signature JWT token"

ANY_TYPE_PROPERTY = "@type"
INPUTS_MAX = 3


# ---------------------------------------------------------------------------
# Intents and argument names
# ---------------------------------------------------------------------------

class StandardIntents(str, Enum):
    MAIN = "actions.intent.MAIN"
    TEXT = "actions.intent.TEXT"
    PERMISSION = "actions.intent.PERMISSION"
    OPTION = "actions.intent.OPTION"
    TRANSACTION_REQUIREMENTS_CHECK = "actions.intent.TRANSACTION_REQUIREMENTS_CHECK"
    DELIVERY_ADDRESS = "actions.intent.DELIVERY_ADDRESS"
    TRANSACTION_DECISION = "actions.intent.TRANSACTION_DECISION"
    PLACE = "actions.intent.PLACE"
    CONFIRMATION = "actions.intent.CONFIRMATION"
    DATETIME = "actions.intent.DATETIME"
    SIGN_IN = "actions.intent.SIGN_IN"
    NO_INPUT = "actions.intent.NO_INPUT"
    CANCEL = "actions.intent.CANCEL"
    NEW_SURFACE = "actions.intent.NEW_SURFACE"
    REGISTER_UPDATE = "actions.intent.REGISTER_UPDATE"
    CONFIGURE_UPDATES = "actions.intent.CONFIGURE_UPDATES"
    LINK = "actions.intent.LINK"
    MEDIA_STATUS = "actions.intent.MEDIA_STATUS"


# V1 requests still name these three with the pre-release scheme.
LEGACY_STANDARD_INTENTS: dict[StandardIntents, str] = {
    StandardIntents.MAIN: "assistant.intent.action.MAIN",
    StandardIntents.TEXT: "assistant.intent.action.TEXT",
    StandardIntents.PERMISSION: "assistant.intent.action.PERMISSION",
}


class BuiltInArgNames(str, Enum):
    PERMISSION_GRANTED = "PERMISSION"
    OPTION = "OPTION"
    TRANSACTION_REQ_CHECK_RESULT = "TRANSACTION_REQUIREMENTS_CHECK_RESULT"
    DELIVERY_ADDRESS_VALUE = "DELIVERY_ADDRESS_VALUE"
    TRANSACTION_DECISION_VALUE = "TRANSACTION_DECISION_VALUE"
    PLACE = "PLACE"
    CONFIRMATION = "CONFIRMATION"
    DATETIME = "DATETIME"
    SIGN_IN = "SIGN_IN"
    REPROMPT_COUNT = "REPROMPT_COUNT"
    IS_FINAL_REPROMPT = "IS_FINAL_REPROMPT"
    NEW_SURFACE = "NEW_SURFACE"
    REGISTER_UPDATE = "REGISTER_UPDATE"
    LINK = "LINK"
    MEDIA_STATUS = "MEDIA_STATUS"


LEGACY_PERMISSION_GRANTED_ARG = "permission_granted"


class SupportedPermissions(str, Enum):
    NAME = "NAME"
    DEVICE_PRECISE_LOCATION = "DEVICE_PRECISE_LOCATION"
    DEVICE_COARSE_LOCATION = "DEVICE_COARSE_LOCATION"
    UPDATE = "UPDATE"


class SurfaceCapabilities(str, Enum):
    AUDIO_OUTPUT = "actions.capability.AUDIO_OUTPUT"
    SCREEN_OUTPUT = "actions.capability.SCREEN_OUTPUT"
    MEDIA_RESPONSE_AUDIO = "actions.capability.MEDIA_RESPONSE_AUDIO"
    WEB_BROWSER = "actions.capability.WEB_BROWSER"


class SignInStatus(str, Enum):
    UNSPECIFIED = "SIGN_IN_STATUS_UNSPECIFIED"
    OK = "OK"
    CANCELLED = "CANCELLED"
    ERROR = "ERROR"


class EntitlementSkuTypes(str, Enum):
    IN_APP = "IN_APP"
    SUBSCRIPTION = "SUBSCRIPTION"
    APP = "APP"


class DeliveryAddressDecision(str, Enum):
    UNKNOWN = "UNKNOWN_USER_DECISION"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class TokenizationType(str, Enum):
    UNSPECIFIED = "UNSPECIFIED_TOKENIZATION_TYPE"
    PAYMENT_GATEWAY = "PAYMENT_GATEWAY"
    DIRECT = "DIRECT"


# Conversation stage / input type values are enum names on V2 and ints on V1.
CONVERSATION_STAGE_NEW = {ProtocolVersion.V1: 1, ProtocolVersion.V2: "NEW"}

INPUT_TYPES = {
    ProtocolVersion.V1: {"UNSPECIFIED": 0, "TOUCH": 1, "VOICE": 2, "KEYBOARD": 3},
    ProtocolVersion.V2: {
        "UNSPECIFIED": "UNSPECIFIED",
        "TOUCH": "TOUCH",
        "VOICE": "VOICE",
        "KEYBOARD": "KEYBOARD",
    },
}


# ---------------------------------------------------------------------------
# System intents
# ---------------------------------------------------------------------------

class SystemIntentKind(str, Enum):
    PERMISSION = "permission"
    UPDATE_PERMISSION = "update_permission"
    OPTION = "option"
    TRANSACTION_REQUIREMENTS = "transaction_requirements"
    TRANSACTION_DECISION = "transaction_decision"
    DELIVERY_ADDRESS = "delivery_address"
    CONFIRMATION = "confirmation"
    DATETIME = "datetime"
    SIGN_IN = "sign_in"
    NEW_SURFACE = "new_surface"
    PLACE = "place"
    REGISTER_UPDATE = "register_update"
    LINK = "link"


class InputValueDataTypes(str, Enum):
    PERMISSION = "type.googleapis.com/google.actions.v2.PermissionValueSpec"
    OPTION = "type.googleapis.com/google.actions.v2.OptionValueSpec"
    TRANSACTION_REQ_CHECK = "type.googleapis.com/google.actions.v2.TransactionRequirementsCheckSpec"
    DELIVERY_ADDRESS = "type.googleapis.com/google.actions.v2.DeliveryAddressValueSpec"
    TRANSACTION_DECISION = "type.googleapis.com/google.actions.v2.TransactionDecisionValueSpec"
    PLACE = "type.googleapis.com/google.actions.v2.PlaceValueSpec"
    CONFIRMATION = "type.googleapis.com/google.actions.v2.ConfirmationValueSpec"
    DATETIME = "type.googleapis.com/google.actions.v2.DateTimeValueSpec"
    NEW_SURFACE = "type.googleapis.com/google.actions.v2.NewSurfaceValueSpec"
    REGISTER_UPDATE = "type.googleapis.com/google.actions.v2.RegisterUpdateValueSpec"
    LINK = "type.googleapis.com/google.actions.v2.LinkValueSpec"


class DialogSpecTypes(str, Enum):
    PLACE = "type.googleapis.com/google.actions.v2.PlaceValueSpec.PlaceDialogSpec"
    LINK = "type.googleapis.com/google.actions.v2.LinkValueSpec.LinkDialogSpec"


class SystemIntentRequest(BaseModel):
    """One request asking the platform to collect data before the dialog resumes.

    ``spec`` is the camelCase value spec; ``legacy_spec_key`` names the wrapper
    used by V1 wire bodies for the intents that predate ``inputValueData``.
    """
    kind: SystemIntentKind
    intent: str
    spec_type: InputValueDataTypes | None = None
    spec: dict[str, Any] | None = None
    prompt: Any = "PLACEHOLDER"
    legacy_spec_key: str | None = None


# ---------------------------------------------------------------------------
# Transaction configuration
# ---------------------------------------------------------------------------

class TransactionConfig(BaseModel):
    """Caller-supplied payment/ordering options.

    ``type`` + ``display_name`` select action-provided payment;
    ``card_networks`` + tokenization fields select Google-provided payment.
    Keys may be given in snake_case or camelCase; unknown keys are ignored.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    delivery_address_required: bool | None = None
    type: str | None = None
    display_name: str | None = None
    card_networks: list[str] | None = None
    prepaid_card_disallowed: bool | None = None
    tokenization_parameters: dict[str, Any] | None = None
    tokenization_type: str | None = None
    customer_info_options: list[Any] | dict[str, Any] | None = Field(default=None)

    def payment_options(self) -> dict[str, Any]:
        if self.type:
            return {
                "actionProvidedOptions": _compact({
                    "paymentType": self.type,
                    "displayName": self.display_name,
                }),
            }
        google_options = _compact({
            "supportedCardNetworks": self.card_networks,
            "prepaidCardDisallowed": self.prepaid_card_disallowed,
        })
        if self.tokenization_parameters:
            google_options["tokenizationParameters"] = {
                "tokenizationType": self.tokenization_type or TokenizationType.PAYMENT_GATEWAY.value,
                "parameters": self.tokenization_parameters,
            }
        return {"googleProvidedOptions": google_options}


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}
