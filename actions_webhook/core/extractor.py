"""Read-only accessors over the conversation-webhook portion of a request.

Every accessor degrades to ``None`` (singular data), an empty list (plural
data) or ``False`` (yes/no questions) when the request does not carry the
field. None of them raise.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from actions_webhook.core.models import (
    LEGACY_PERMISSION_GRANTED_ARG,
    BuiltInArgNames,
    DeliveryAddressDecision,
    ProtocolVersion,
    SurfaceCapabilities,
)
from actions_webhook.core.transform import to_snake_case

# Typed value fields of an argument record, in lookup order.
_VALUE_FIELDS = (
    "intValue",
    "floatValue",
    "boolValue",
    "datetimeValue",
    "placeValue",
    "extension",
    "structuredValue",
)

STATUS_OK = "OK"


class RequestExtractor(ABC):
    """Mixin for the app: subclasses provide ``request_data()``, ``version`` and ``logger``."""

    version: ProtocolVersion
    logger: logging.Logger

    @abstractmethod
    def request_data(self) -> dict[str, Any] | None:
        """The conversation-webhook body, or None when the request carries none."""
        ...

    # -- helpers -----------------------------------------------------------

    def _find_argument(self, *names: str) -> dict[str, Any] | None:
        data = self.request_data() or {}
        for request_input in data.get("inputs") or []:
            for argument in request_input.get("arguments") or []:
                if argument.get("name") in names:
                    return argument
        return None

    def _extension(self, name: str) -> dict[str, Any] | None:
        argument = self._find_argument(name)
        if argument and isinstance(argument.get("extension"), dict):
            return argument["extension"]
        return None

    def _wire_case(self, value: Any) -> Any:
        """Hand structured data back in the caller's naming convention."""
        if self.version == ProtocolVersion.V1:
            return to_snake_case(value)
        return value

    def _permission_arg_name(self) -> str:
        if self.version == ProtocolVersion.V1:
            return LEGACY_PERMISSION_GRANTED_ARG
        return BuiltInArgNames.PERMISSION_GRANTED.value

    # -- user --------------------------------------------------------------

    def get_user(self) -> dict[str, Any] | None:
        self.logger.debug("get_user")
        data = self.request_data()
        if not data or not isinstance(data.get("user"), dict):
            self.logger.error("No user object")
            return None
        user = dict(data["user"])
        user["user_id"] = user.get("userId")
        user["access_token"] = user.get("accessToken")
        profile = user.get("profile")
        user["userName"] = dict(profile) if isinstance(profile, dict) else None
        return user

    def get_user_name(self) -> dict[str, Any] | None:
        self.logger.debug("get_user_name")
        user = self.get_user()
        return user["userName"] if user and user.get("userName") else None

    def get_user_locale(self) -> str | None:
        self.logger.debug("get_user_locale")
        user = self.get_user()
        return user.get("locale") if user and user.get("locale") else None

    def get_last_seen(self) -> datetime | None:
        self.logger.debug("get_last_seen")
        user = self.get_user()
        last_seen = user.get("lastSeen") if user else None
        if not last_seen:
            return None
        try:
            return datetime.fromisoformat(str(last_seen).replace("Z", "+00:00"))
        except ValueError:
            self.logger.warning("Unparsable lastSeen timestamp: %s", last_seen)
            return None

    def get_package_entitlements(self) -> list[dict[str, Any]] | None:
        self.logger.debug("get_package_entitlements")
        user = self.get_user()
        entitlements = user.get("packageEntitlements") if user else None
        return entitlements or None

    # -- device / input ----------------------------------------------------

    def get_device_location(self) -> dict[str, Any] | None:
        self.logger.debug("get_device_location")
        data = self.request_data() or {}
        location = (data.get("device") or {}).get("location")
        if not location:
            return None
        location = dict(location)
        location["address"] = location.get("formattedAddress")
        return location

    def get_input_type(self) -> Any:
        self.logger.debug("get_input_type")
        data = self.request_data() or {}
        for request_input in data.get("inputs") or []:
            for raw_input in request_input.get("rawInputs") or []:
                if raw_input.get("inputType"):
                    return raw_input["inputType"]
        self.logger.error("No input type in incoming request")
        return None

    # -- arguments ---------------------------------------------------------

    def get_argument_common(self, arg_name: str, raw: bool = False) -> Any:
        """Value of the first argument named *arg_name*.

        Typed value fields win over ``textValue``; with neither present, or
        with ``raw=True``, the whole argument record is returned.
        """
        self.logger.debug("get_argument: arg_name=%s", arg_name)
        if not arg_name:
            self.logger.error("Invalid argument name")
            return None
        argument = self._find_argument(arg_name)
        if argument is None:
            self.logger.debug("Failed to get argument value: %s", arg_name)
            return None
        if raw:
            return self._wire_case(argument)
        for field in _VALUE_FIELDS:
            value = argument.get(field)
            if value is None:
                continue
            if field == "intValue":
                try:
                    return int(value)
                except (TypeError, ValueError):
                    return value
            return self._wire_case(value)
        if argument.get("textValue") is not None:
            return argument["textValue"]
        return self._wire_case(argument)

    def is_permission_granted(self) -> bool:
        self.logger.debug("is_permission_granted")
        argument = self._find_argument(self._permission_arg_name())
        if not argument:
            return False
        return argument.get("boolValue") is True or argument.get("textValue") == "true"

    def get_reprompt_count(self) -> int | None:
        self.logger.debug("get_reprompt_count")
        argument = self._find_argument(BuiltInArgNames.REPROMPT_COUNT.value)
        if argument and argument.get("intValue") is not None:
            try:
                return int(argument["intValue"])
            except (TypeError, ValueError):
                return None
        return None

    def is_final_reprompt(self) -> bool:
        self.logger.debug("is_final_reprompt")
        argument = self._find_argument(BuiltInArgNames.IS_FINAL_REPROMPT.value)
        return bool(argument and argument.get("boolValue"))

    # -- system intent results ---------------------------------------------

    def get_transaction_requirements_result(self) -> str | None:
        self.logger.debug("get_transaction_requirements_result")
        extension = self._extension(BuiltInArgNames.TRANSACTION_REQ_CHECK_RESULT.value)
        if extension and extension.get("resultType"):
            return extension["resultType"]
        self.logger.debug("Failed to get transaction requirements result")
        return None

    def get_delivery_address(self) -> dict[str, Any] | None:
        self.logger.debug("get_delivery_address")
        argument = self._find_argument(
            BuiltInArgNames.DELIVERY_ADDRESS_VALUE.value,
            BuiltInArgNames.TRANSACTION_DECISION_VALUE.value,
        )
        extension = argument.get("extension") if argument else None
        if not isinstance(extension, dict):
            self.logger.debug("Failed to get order delivery address")
            return None
        if extension.get("userDecision") != DeliveryAddressDecision.ACCEPTED.value:
            self.logger.debug("User rejected giving delivery address")
            return None
        location = extension.get("location") or {}
        if not location.get("postalAddress"):
            self.logger.debug("User accepted, but may not have configured address in app")
            return None
        return location

    def get_transaction_decision(self) -> dict[str, Any] | None:
        self.logger.debug("get_transaction_decision")
        return self._extension(BuiltInArgNames.TRANSACTION_DECISION_VALUE.value)

    def get_place(self) -> dict[str, Any] | None:
        self.logger.debug("get_place")
        argument = self._find_argument(BuiltInArgNames.PLACE.value)
        place = argument.get("placeValue") if argument else None
        if not place:
            return None
        place = dict(place)
        place["address"] = place.get("formattedAddress")
        return place

    def get_user_confirmation(self) -> bool | None:
        self.logger.debug("get_user_confirmation")
        argument = self._find_argument(BuiltInArgNames.CONFIRMATION.value)
        return argument.get("boolValue") if argument else None

    def get_date_time(self) -> dict[str, Any] | None:
        self.logger.debug("get_date_time")
        argument = self._find_argument(BuiltInArgNames.DATETIME.value)
        return argument.get("datetimeValue") if argument else None

    def get_sign_in_status(self) -> str | None:
        self.logger.debug("get_sign_in_status")
        extension = self._extension(BuiltInArgNames.SIGN_IN.value)
        return extension.get("status") if extension and extension.get("status") else None

    def get_media_status(self) -> str | None:
        self.logger.debug("get_media_status")
        extension = self._extension(BuiltInArgNames.MEDIA_STATUS.value)
        return extension.get("status") if extension and extension.get("status") else None

    def is_new_surface(self) -> bool:
        self.logger.debug("is_new_surface")
        extension = self._extension(BuiltInArgNames.NEW_SURFACE.value)
        return bool(extension and extension.get("status") == STATUS_OK)

    def is_update_registered(self) -> bool:
        self.logger.debug("is_update_registered")
        extension = self._extension(BuiltInArgNames.REGISTER_UPDATE.value)
        return bool(extension and extension.get("status") == STATUS_OK)

    def get_link_status(self) -> Any:
        self.logger.debug("get_link_status")
        argument = self._find_argument(BuiltInArgNames.LINK.value)
        status = argument.get("status") if argument else None
        if isinstance(status, dict) and status.get("code") is not None:
            return status["code"]
        return None

    # -- surfaces ----------------------------------------------------------

    def get_surface_capabilities(self) -> list[str]:
        self.logger.debug("get_surface_capabilities")
        data = self.request_data() or {}
        capabilities = (data.get("surface") or {}).get("capabilities")
        if not capabilities:
            self.logger.error("No surface capabilities in incoming request")
            return []
        return [capability.get("name") for capability in capabilities]

    def has_surface_capability(self, capability: str | SurfaceCapabilities) -> bool:
        self.logger.debug("has_surface_capability: capability=%s", capability)
        wanted = capability.value if isinstance(capability, SurfaceCapabilities) else capability
        return wanted in self.get_surface_capabilities()

    def get_available_surfaces(self) -> list[dict[str, Any]]:
        self.logger.debug("get_available_surfaces")
        data = self.request_data() or {}
        return list(data.get("availableSurfaces") or [])

    def has_available_surface_capabilities(
        self, capabilities: str | SurfaceCapabilities | list[str | SurfaceCapabilities]
    ) -> bool:
        """True when one available surface offers every requested capability."""
        self.logger.debug("has_available_surface_capabilities: capabilities=%s", capabilities)
        requested = capabilities if isinstance(capabilities, (list, tuple)) else [capabilities]
        wanted = {c.value if isinstance(c, SurfaceCapabilities) else c for c in requested}
        for surface in self.get_available_surfaces():
            offered = {c.get("name") for c in surface.get("capabilities") or []}
            if wanted <= offered:
                return True
        return False

    def is_in_sandbox(self) -> bool:
        self.logger.debug("is_in_sandbox")
        data = self.request_data() or {}
        return bool(data.get("isInSandbox"))
