"""AssistantApp — per-request orchestrator shared by both dialects.

One instance serves exactly one webhook call::

    RECEIVED -> NORMALIZED -> HANDLER_INVOKED -> RESPONSE_ACCUMULATING
             -> SERIALIZED (200) | REJECTED (400)

The dialect strategy handed in at construction does all wire-shape work;
this class owns the request-scoped state (dialog data, user storage, the
"already responded" latch) and the public ask/tell surface.
"""

from __future__ import annotations

import copy
import functools
import inspect
import logging
from abc import abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from actions_webhook.core.errors import NoMatchingIntentError, ResponseValidationError
from actions_webhook.core.extractor import RequestExtractor
from actions_webhook.core.http import WebhookRequest, WebhookResponse
from actions_webhook.core.models import (
    ANY_TYPE_PROPERTY,
    API_ERROR_MESSAGE_PREFIX,
    CONTENT_TYPE_HEADER,
    CONTENT_TYPE_JSON,
    CONVERSATION_API_VERSION_HEADER,
    CONVERSATION_STAGE_NEW,
    ERROR_MESSAGE,
    INPUT_TYPES,
    LEGACY_STANDARD_INTENTS,
    RESPONSE_CODE_BAD_REQUEST,
    RESPONSE_CODE_OK,
    DialogSpecTypes,
    InputValueDataTypes,
    ProtocolVersion,
    StandardIntents,
    SupportedPermissions,
    SurfaceCapabilities,
    SystemIntentKind,
    SystemIntentRequest,
    TransactionConfig,
)
from actions_webhook.core.state import UserStorage, dumps_compact
from actions_webhook.dialects.interface import Prompt, WireDialect
from actions_webhook.response.builder import (
    BasicCard,
    BrowseCarousel,
    BrowseItem,
    Carousel,
    List,
    MediaObject,
    MediaResponse,
    OptionItem,
    RichResponse,
)

DEFAULT_LOGGER = logging.getLogger("actions_webhook")

Handler = Callable[["AssistantApp"], Any]

_ASKABLE_PERMISSIONS = frozenset({
    SupportedPermissions.NAME.value,
    SupportedPermissions.DEVICE_PRECISE_LOCATION.value,
    SupportedPermissions.DEVICE_COARSE_LOCATION.value,
})

DAILY = "DAILY"


class State:
    """Named dialog state usable as a key in a nested intent map."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"State({self.name!r})"


def _sends_response(method: Callable[..., dict[str, Any]]) -> Callable[..., WebhookResponse | None]:
    """Wrap a payload-building method: validation errors become a 400 and ``None``."""

    @functools.wraps(method)
    def wrapper(self: AssistantApp, *args: Any, **kwargs: Any) -> WebhookResponse | None:
        if self.responded:
            self.logger.debug("%s ignored: response already sent", method.__name__)
            return None
        try:
            payload = method(self, *args, **kwargs)
        except ResponseValidationError as exc:
            self.handle_error(str(exc))
            return None
        return self._do_response(payload)

    return wrapper


class AssistantApp(RequestExtractor):
    """Base app; use :class:`ActionsSdkApp` or :class:`DialogflowApp`."""

    def __init__(
        self,
        request: WebhookRequest,
        response: WebhookResponse,
        *,
        dialect: WireDialect,
        session_started: Callable[[], Any] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or DEFAULT_LOGGER
        self.request = request
        self.response = response
        self.responded = False
        self._dialect = dialect
        self._contexts: dict[str, dict[str, Any]] = {}
        self._last_error_message: str | None = None

        body = copy.deepcopy(request.body) if isinstance(request.body, dict) else {}
        self.logger.debug("Request from Assistant: %s", dumps_compact(body))

        # The conversation API header is echoed, never interpreted.
        self.api_version = request.get(CONVERSATION_API_VERSION_HEADER)
        self.version = dialect.detect_version(request, body)
        self.body = dialect.normalize(body, self.version)

        self._token = dialect.load_state(self.body)
        self.state: Any = self._token.state
        self.data: Any = self._token.data

        user = (self.request_data() or {}).get("user")
        self._user_storage = UserStorage(
            user.get("userStorage") if isinstance(user, dict) else None,
            enabled=isinstance(user, dict),
        )
        self.user_storage: Any = self._user_storage.data

        self._notify_session_started(session_started)

    # ------------------------------------------------------------------
    # Request-side plumbing
    # ------------------------------------------------------------------

    @property
    def dialect(self) -> WireDialect:
        return self._dialect

    def request_data(self) -> dict[str, Any] | None:
        return self._dialect.request_data(self.body)

    @abstractmethod
    def get_intent(self) -> str | None:
        ...

    @abstractmethod
    def get_raw_input(self) -> str | None:
        ...

    def intent_name(self, intent: StandardIntents) -> str:
        """Wire name of *intent* for this request's protocol version."""
        if self.version == ProtocolVersion.V1 and intent in LEGACY_STANDARD_INTENTS:
            return LEGACY_STANDARD_INTENTS[intent]
        return intent.value

    @property
    def input_types(self) -> dict[str, Any]:
        return INPUT_TYPES[self.version]

    def _notify_session_started(self, session_started: Any) -> None:
        if session_started is None:
            return
        if not callable(session_started):
            self.handle_error("options.sessionStarted must be a Function")
            return
        conversation = (self.request_data() or {}).get("conversation") or {}
        if conversation.get("type") == CONVERSATION_STAGE_NEW[self.version]:
            session_started()

    def _state_name(self) -> Any:
        return self.state.name if isinstance(self.state, State) else self.state

    # ------------------------------------------------------------------
    # Handler dispatch
    # ------------------------------------------------------------------

    async def handle_request(self, handler: Handler | Mapping[Any, Any]) -> Any:
        """Run *handler* against this request.

        *handler* is either a callable taking the app (sync or async) or a
        mapping of intent name to such callables. Mapping values that are
        themselves mappings are keyed by dialog state: a :class:`State`, a
        state name, or ``None`` for "no state yet".
        """
        self.logger.debug("handle_request: handler=%s", handler)
        if not handler:
            self.handle_error("request handler can NOT be empty.")
            raise ValueError("request handler can NOT be empty.")

        if isinstance(handler, Mapping):
            intent = self.get_intent()
            try:
                return await self._invoke_intent_handler(handler, intent)
            except NoMatchingIntentError:
                raise
            except Exception:
                self.tell(self._last_error_message or ERROR_MESSAGE)
                raise

        if callable(handler):
            try:
                return await _call(handler, self)
            except Exception as exc:
                self.logger.error("function failed: %s", exc)
                self.tell(str(exc) or ERROR_MESSAGE)
                raise

        self.handle_error(f"invalid intent handler type: {type(handler).__name__}")
        raise TypeError(f"invalid intent handler type: {type(handler).__name__}")

    async def _invoke_intent_handler(self, handler: Mapping[Any, Any], intent: str | None) -> Any:
        self._last_error_message = None
        state_name = self._state_name()
        for key, value in handler.items():
            if isinstance(key, State):
                name = key.name
            elif isinstance(key, StandardIntents):
                name = self.intent_name(key)
            else:
                name = key
            if isinstance(value, Mapping):
                if name == state_name:
                    return await self._invoke_intent_handler(value, intent)
                continue
            if name == intent:
                try:
                    return await _call(value, self)
                except Exception as exc:
                    self.logger.error("intent handler failed: %s", exc)
                    self._last_error_message = str(exc)
                    raise
        self.handle_error(f"no matching intent handler for: {intent}")
        raise NoMatchingIntentError(f"no matching intent handler for: {intent}")

    # ------------------------------------------------------------------
    # Response emission
    # ------------------------------------------------------------------

    def handle_error(self, text: str) -> None:
        """Reject the request with HTTP 400 ``Action Error: <text>`` (once)."""
        if not text:
            self.logger.error("Missing text")
            return
        self.logger.error(text)
        if self.responded:
            return
        self.response.status(RESPONSE_CODE_BAD_REQUEST).send(API_ERROR_MESSAGE_PREFIX + text)
        self.responded = True

    def _do_response(self, payload: dict[str, Any]) -> WebhookResponse | None:
        if self.responded:
            return None
        serialized = self._user_storage.encode(self.user_storage)
        if serialized is not None:
            self._dialect.attach_user_storage(payload, serialized)
        if self.api_version is not None:
            self.response.append(CONVERSATION_API_VERSION_HEADER, self.api_version)
        self.response.append(CONTENT_TYPE_HEADER, CONTENT_TYPE_JSON)
        body = self._dialect.finalize(payload, self.version)
        self.logger.debug("Response %s", dumps_compact(body))
        self.responded = True
        return self.response.status(RESPONSE_CODE_OK).send(body)

    def _dialog_state(self, dialog_state: Any) -> dict[str, Any]:
        if dialog_state is None:
            return self._token.snapshot(self._state_name(), self.data)
        if isinstance(dialog_state, (list, tuple)) or not isinstance(dialog_state, Mapping):
            raise ResponseValidationError("Invalid dialog state")
        return dict(dialog_state)

    def _ask_payload(
        self,
        prompt: Prompt,
        dialog_state: Any = None,
        system_intent: SystemIntentRequest | None = None,
    ) -> dict[str, Any]:
        return self._dialect.build_ask(
            prompt,
            dialog_state=self._dialog_state(dialog_state),
            text_intent=self.intent_name(StandardIntents.TEXT),
            system_intent=system_intent,
            contexts=list(self._contexts.values()),
            version=self.version,
        )

    def _system_intent(
        self,
        kind: SystemIntentKind,
        intent: StandardIntents,
        spec_type: InputValueDataTypes | None,
        spec: dict[str, Any] | None,
        prompt: Any,
        dialog_state: Any,
        legacy_spec_key: str | None = None,
    ) -> dict[str, Any]:
        request = SystemIntentRequest(
            kind=kind,
            intent=self.intent_name(intent),
            spec_type=spec_type,
            spec=spec,
            prompt=prompt,
            legacy_spec_key=legacy_spec_key,
        )
        return self._ask_payload(Prompt.parse(request.prompt), dialog_state, request)

    # -- ask / tell ----------------------------------------------------

    @_sends_response
    def ask(
        self,
        input_prompt: Any,
        no_inputs: list[str] | None = None,
        dialog_state: Any = None,
    ) -> dict[str, Any]:
        """Reply and keep the microphone open.

        *input_prompt* is a string (SSML auto-detected), a ``{speech,
        displayText}`` mapping, a :class:`SimpleResponse` or a
        :class:`RichResponse`. At most three *no_inputs* reprompts.
        """
        self.logger.debug("ask: input_prompt=%s, no_inputs=%s", input_prompt, no_inputs)
        return self._ask_payload(Prompt.parse(input_prompt, no_inputs), dialog_state)

    @_sends_response
    def tell(self, speech_response: Any) -> dict[str, Any]:
        """Reply and end the conversation."""
        self.logger.debug("tell: speech_response=%s", speech_response)
        return self._dialect.build_tell(
            Prompt.parse(speech_response),
            contexts=list(self._contexts.values()),
        )

    @_sends_response
    def ask_with_list(self, input_prompt: Any, list_: List | Mapping[str, Any], dialog_state: Any = None) -> dict[str, Any]:
        self.logger.debug("ask_with_list: input_prompt=%s", input_prompt)
        selection = _option_container(list_, List, "list")
        return self._ask_payload(
            Prompt.parse(input_prompt),
            dialog_state,
            self._option_request({"listSelect": selection.to_wire()}),
        )

    @_sends_response
    def ask_with_carousel(
        self, input_prompt: Any, carousel: Carousel | Mapping[str, Any], dialog_state: Any = None
    ) -> dict[str, Any]:
        self.logger.debug("ask_with_carousel: input_prompt=%s", input_prompt)
        selection = _option_container(carousel, Carousel, "carousel")
        return self._ask_payload(
            Prompt.parse(input_prompt),
            dialog_state,
            self._option_request({"carouselSelect": selection.to_wire()}),
        )

    def _option_request(self, spec: dict[str, Any]) -> SystemIntentRequest:
        return SystemIntentRequest(
            kind=SystemIntentKind.OPTION,
            intent=self.intent_name(StandardIntents.OPTION),
            spec_type=InputValueDataTypes.OPTION,
            spec=spec,
            legacy_spec_key="optionValueSpec",
        )

    # -- system intents --------------------------------------------------

    @_sends_response
    def ask_for_permissions(
        self,
        context: str,
        permissions: list[str | SupportedPermissions],
        dialog_state: Any = None,
    ) -> dict[str, Any]:
        self.logger.debug("ask_for_permissions: context=%s, permissions=%s", context, permissions)
        if not context:
            raise ResponseValidationError("Assistant context can NOT be empty.")
        if not permissions:
            raise ResponseValidationError("At least one permission needed.")
        names = [p.value if isinstance(p, SupportedPermissions) else p for p in permissions]
        if any(name not in _ASKABLE_PERMISSIONS for name in names):
            raise ResponseValidationError(
                "Assistant permission must be one of [NAME, DEVICE_PRECISE_LOCATION, DEVICE_COARSE_LOCATION]"
            )
        return self._system_intent(
            SystemIntentKind.PERMISSION,
            StandardIntents.PERMISSION,
            InputValueDataTypes.PERMISSION,
            {"optContext": context, "permissions": names},
            "PLACEHOLDER_FOR_PERMISSION",
            dialog_state,
            legacy_spec_key="permissionValueSpec",
        )

    def ask_for_permission(
        self, context: str, permission: str | SupportedPermissions, dialog_state: Any = None
    ) -> WebhookResponse | None:
        return self.ask_for_permissions(context, [permission], dialog_state)

    @_sends_response
    def ask_for_update_permission(
        self,
        intent: str,
        intent_arguments: list[dict[str, Any]] | None = None,
        dialog_state: Any = None,
    ) -> dict[str, Any]:
        self.logger.debug("ask_for_update_permission: intent=%s", intent)
        if not intent:
            raise ResponseValidationError("Name of intent to trigger on update must be specified")
        update_spec: dict[str, Any] = {"intent": intent}
        if intent_arguments:
            update_spec["arguments"] = intent_arguments
        return self._system_intent(
            SystemIntentKind.UPDATE_PERMISSION,
            StandardIntents.PERMISSION,
            InputValueDataTypes.PERMISSION,
            {"permissions": [SupportedPermissions.UPDATE.value], "updatePermissionValueSpec": update_spec},
            "PLACEHOLDER_FOR_PERMISSION",
            dialog_state,
            legacy_spec_key="permissionValueSpec",
        )

    @_sends_response
    def ask_for_transaction_requirements(
        self,
        transaction_config: TransactionConfig | Mapping[str, Any] | None = None,
        dialog_state: Any = None,
    ) -> dict[str, Any]:
        self.logger.debug("ask_for_transaction_requirements: transaction_config=%s", transaction_config)
        config = _transaction_config(transaction_config)
        spec: dict[str, Any] = {}
        if config and config.delivery_address_required:
            spec["orderOptions"] = {"requestDeliveryAddress": config.delivery_address_required}
        if config and (config.type or config.card_networks):
            spec["paymentOptions"] = config.payment_options()
        return self._system_intent(
            SystemIntentKind.TRANSACTION_REQUIREMENTS,
            StandardIntents.TRANSACTION_REQUIREMENTS_CHECK,
            InputValueDataTypes.TRANSACTION_REQ_CHECK,
            spec,
            "PLACEHOLDER_FOR_TXN_REQUIREMENTS",
            dialog_state,
        )

    @_sends_response
    def ask_for_transaction_decision(
        self,
        order: Mapping[str, Any],
        transaction_config: TransactionConfig | Mapping[str, Any] | None = None,
        dialog_state: Any = None,
    ) -> dict[str, Any]:
        self.logger.debug("ask_for_transaction_decision: order=%s", order)
        if not order:
            raise ResponseValidationError("Invalid order")
        config = _transaction_config(transaction_config)
        spec: dict[str, Any] = {"proposedOrder": dict(order)}
        if config and config.delivery_address_required:
            spec["orderOptions"] = {"requestDeliveryAddress": config.delivery_address_required}
        if config and (config.type or config.card_networks):
            spec["paymentOptions"] = config.payment_options()
        if config and config.customer_info_options:
            spec.setdefault("orderOptions", {})["customerInfoOptions"] = config.customer_info_options
        return self._system_intent(
            SystemIntentKind.TRANSACTION_DECISION,
            StandardIntents.TRANSACTION_DECISION,
            InputValueDataTypes.TRANSACTION_DECISION,
            spec,
            "PLACEHOLDER_FOR_TXN_DECISION",
            dialog_state,
        )

    @_sends_response
    def ask_for_delivery_address(self, reason: str, dialog_state: Any = None) -> dict[str, Any]:
        self.logger.debug("ask_for_delivery_address: reason=%s", reason)
        if not reason:
            raise ResponseValidationError("reason cannot be empty")
        return self._system_intent(
            SystemIntentKind.DELIVERY_ADDRESS,
            StandardIntents.DELIVERY_ADDRESS,
            InputValueDataTypes.DELIVERY_ADDRESS,
            {"addressOptions": {"reason": reason}},
            "PLACEHOLDER_FOR_DELIVERY_ADDRESS",
            dialog_state,
        )

    @_sends_response
    def ask_for_place(self, request_prompt: str, permission_context: str, dialog_state: Any = None) -> dict[str, Any]:
        self.logger.debug("ask_for_place: request_prompt=%s, permission_context=%s", request_prompt, permission_context)
        if not request_prompt:
            raise ResponseValidationError("requestPrompt cannot be empty")
        if not permission_context:
            raise ResponseValidationError("permissionContext cannot be empty")
        spec = {
            "dialogSpec": {
                "extension": {
                    ANY_TYPE_PROPERTY: DialogSpecTypes.PLACE.value,
                    "requestPrompt": request_prompt,
                    "permissionContext": permission_context,
                },
            },
        }
        return self._system_intent(
            SystemIntentKind.PLACE,
            StandardIntents.PLACE,
            InputValueDataTypes.PLACE,
            spec,
            "PLACEHOLDER_FOR_PLACE",
            dialog_state,
        )

    @_sends_response
    def ask_for_confirmation(self, prompt: str | None = None, dialog_state: Any = None) -> dict[str, Any]:
        self.logger.debug("ask_for_confirmation: prompt=%s", prompt)
        spec = {"dialogSpec": {"requestConfirmationText": prompt}} if prompt else {}
        return self._system_intent(
            SystemIntentKind.CONFIRMATION,
            StandardIntents.CONFIRMATION,
            InputValueDataTypes.CONFIRMATION,
            spec,
            "PLACEHOLDER_FOR_CONFIRMATION",
            dialog_state,
        )

    @_sends_response
    def ask_for_date_time(
        self,
        initial_prompt: str | None = None,
        date_prompt: str | None = None,
        time_prompt: str | None = None,
        dialog_state: Any = None,
    ) -> dict[str, Any]:
        self.logger.debug(
            "ask_for_date_time: initial_prompt=%s, date_prompt=%s, time_prompt=%s",
            initial_prompt, date_prompt, time_prompt,
        )
        spec: dict[str, Any] = {}
        dialog_spec = {
            key: text
            for key, text in (
                ("requestDatetimeText", initial_prompt),
                ("requestDateText", date_prompt),
                ("requestTimeText", time_prompt),
            )
            if text
        }
        if dialog_spec:
            spec["dialogSpec"] = dialog_spec
        return self._system_intent(
            SystemIntentKind.DATETIME,
            StandardIntents.DATETIME,
            InputValueDataTypes.DATETIME,
            spec,
            "PLACEHOLDER_FOR_DATETIME",
            dialog_state,
        )

    @_sends_response
    def ask_for_sign_in(self, dialog_state: Any = None) -> dict[str, Any]:
        self.logger.debug("ask_for_sign_in")
        return self._system_intent(
            SystemIntentKind.SIGN_IN,
            StandardIntents.SIGN_IN,
            None,
            None,
            "PLACEHOLDER_FOR_SIGN_IN",
            dialog_state,
        )

    @_sends_response
    def ask_for_new_surface(
        self,
        context: str,
        notification_title: str,
        capabilities: list[str | SurfaceCapabilities],
        dialog_state: Any = None,
    ) -> dict[str, Any]:
        self.logger.debug(
            "ask_for_new_surface: context=%s, notification_title=%s, capabilities=%s",
            context, notification_title, capabilities,
        )
        spec = {
            "context": context,
            "notificationTitle": notification_title,
            "capabilities": [c.value if isinstance(c, SurfaceCapabilities) else c for c in capabilities or []],
        }
        return self._system_intent(
            SystemIntentKind.NEW_SURFACE,
            StandardIntents.NEW_SURFACE,
            InputValueDataTypes.NEW_SURFACE,
            spec,
            "PLACEHOLDER_FOR_NEW_SURFACE",
            dialog_state,
        )

    @_sends_response
    def ask_to_register_daily_update(
        self,
        intent: str,
        intent_arguments: list[dict[str, Any]] | None = None,
        dialog_state: Any = None,
    ) -> dict[str, Any]:
        self.logger.debug("ask_to_register_daily_update: intent=%s", intent)
        if not intent:
            raise ResponseValidationError("Name of intent to trigger on update must be specified")
        spec: dict[str, Any] = {
            "intent": intent,
            "triggerContext": {"timeContext": {"frequency": DAILY}},
        }
        if intent_arguments:
            spec["arguments"] = intent_arguments
        return self._system_intent(
            SystemIntentKind.REGISTER_UPDATE,
            StandardIntents.REGISTER_UPDATE,
            InputValueDataTypes.REGISTER_UPDATE,
            spec,
            "PLACEHOLDER_FOR_REGISTER_UPDATE",
            dialog_state,
        )

    @_sends_response
    def ask_to_deep_link(
        self,
        prompt: Any,
        destination_name: str,
        url: str,
        package_name: str,
        reason: str | None = None,
        dialog_state: Any = None,
    ) -> dict[str, Any]:
        self.logger.debug(
            "ask_to_deep_link: destination_name=%s, url=%s, package_name=%s",
            destination_name, url, package_name,
        )
        extension: dict[str, Any] = {
            ANY_TYPE_PROPERTY: DialogSpecTypes.LINK.value,
            "destinationName": destination_name,
        }
        if reason:
            extension["requestLinkReason"] = reason
        spec = {
            "openUrlAction": {"url": url, "androidApp": {"packageName": package_name}},
            "dialogSpec": {"extension": extension},
        }
        return self._system_intent(
            SystemIntentKind.LINK,
            StandardIntents.LINK,
            InputValueDataTypes.LINK,
            spec,
            prompt,
            dialog_state,
        )

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def build_rich_response(self, rich_response: RichResponse | Mapping[str, Any] | None = None) -> RichResponse:
        if isinstance(rich_response, RichResponse):
            return rich_response.model_copy(deep=True)
        if isinstance(rich_response, Mapping):
            return RichResponse.model_validate(rich_response)
        return RichResponse()

    def build_basic_card(self, body_text: str | None = None) -> BasicCard:
        card = BasicCard()
        return card.set_body_text(body_text) if body_text else card

    def build_list(self, title: str | None = None) -> List:
        selection = List()
        return selection.set_title(title) if title else selection

    def build_carousel(self) -> Carousel:
        return Carousel()

    def build_option_item(self, key: str | None = None, synonyms: str | list[str] | None = None) -> OptionItem:
        item = OptionItem()
        if key:
            item.set_key(key)
        if synonyms:
            item.add_synonyms(synonyms)
        return item

    def build_browse_carousel(self) -> BrowseCarousel:
        return BrowseCarousel()

    def build_browse_item(self, title: str | None = None, url: str | None = None) -> BrowseItem:
        item = BrowseItem()
        if title:
            item.set_title(title)
        if url:
            item.set_url(url)
        return item

    def build_media_response(self) -> MediaResponse:
        return MediaResponse()

    def build_media_object(self, name: str, content_url: str) -> MediaObject:
        return MediaObject(name=name, content_url=content_url)


# ---------------------------------------------------------------------------
# Module helpers
# ---------------------------------------------------------------------------

async def _call(handler: Handler, app: AssistantApp) -> Any:
    result = handler(app)
    if inspect.isawaitable(result):
        result = await result
    return result


def _option_container(value: Any, model: type[List] | type[Carousel], label: str) -> List | Carousel:
    if isinstance(value, Mapping):
        try:
            value = model.model_validate(value)
        except ValidationError as exc:
            raise ResponseValidationError(f"Invalid {label}: {exc}") from exc
    if not isinstance(value, model):
        raise ResponseValidationError(f"Invalid {label}")
    if len(value.items) < 2:
        raise ResponseValidationError(f"{label.capitalize()} requires at least 2 items")
    if any(not item.option_info.key for item in value.items):
        raise ResponseValidationError(f"{label.capitalize()} items must each have a key")
    return value


def _transaction_config(value: TransactionConfig | Mapping[str, Any] | None) -> TransactionConfig | None:
    if value is None:
        return None
    if isinstance(value, TransactionConfig):
        config = value
    else:
        try:
            config = TransactionConfig.model_validate(dict(value))
        except ValidationError as exc:
            raise ResponseValidationError(f"Invalid transaction configuration: {exc}") from exc
    if config.type and config.card_networks:
        raise ResponseValidationError(
            "Invalid transaction configuration. Must be of type "
            "ActionPaymentTransactionConfig or GooglePaymentTransactionConfig"
        )
    return config
