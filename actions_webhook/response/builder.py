"""Rich response builders.

Every builder is a Pydantic model whose fields serialize to the camelCase wire
names. Setters return ``self`` for chaining and never raise: invalid input is
logged and ignored. Shape rules that span several objects (a rich response
needs a simple response, a list needs two items, ...) are checked later, when
the response is sent.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

LIST_ITEM_MAX = 30
CAROUSEL_ITEM_MAX = 10
OPTIONS_MIN = 2
SIMPLE_RESPONSE_MAX = 2
SUGGESTION_TEXT_MAX = 25

_SSML = re.compile(r"<speak\b[^>]*>.*?</speak>", re.IGNORECASE | re.DOTALL)


def is_ssml(text: Any) -> bool:
    """True only when the whole string is one ``<speak>`` element, unpadded."""
    if not isinstance(text, str) or not text:
        return False
    return _SSML.fullmatch(text) is not None


class ImageDisplays(str, Enum):
    DEFAULT = "DEFAULT"
    WHITE = "WHITE"
    CROPPED = "CROPPED"


class UrlTypeHint(str, Enum):
    UNSPECIFIED = "URL_TYPE_HINT_UNSPECIFIED"
    AMP_CONTENT = "AMP_CONTENT"


class MediaType(str, Enum):
    UNSPECIFIED = "MEDIA_TYPE_UNSPECIFIED"
    AUDIO = "AUDIO"


class MediaStatus(str, Enum):
    UNSPECIFIED = "STATUS_UNSPECIFIED"
    FINISHED = "FINISHED"


class MediaImageType(str, Enum):
    ICON = "ICON"
    LARGE = "LARGE_IMAGE"


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """camelCase dict with unset (``None``) fields left out."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def _build_image(url: str, accessibility_text: str, width: int | None, height: int | None) -> Image | None:
    if not url:
        logger.error("url cannot be empty")
        return None
    if not accessibility_text:
        logger.error("accessibilityText cannot be empty")
        return None
    return Image(url=url, accessibility_text=accessibility_text, width=width or None, height=height or None)


def _valid_image_display(option: Any) -> bool:
    value = option.value if isinstance(option, ImageDisplays) else option
    if value not in ImageDisplays.__members__:
        logger.error("Image display option %s is invalid", option)
        return False
    return True


def _as_list(values: Any) -> list[Any]:
    return list(values) if isinstance(values, (list, tuple)) else [values]


# ---------------------------------------------------------------------------
# Leaf pieces
# ---------------------------------------------------------------------------

class Image(WireModel):
    url: str
    accessibility_text: str
    width: int | None = None
    height: int | None = None


class OpenUrlAction(WireModel):
    url: str | None = None
    url_type_hint: str | None = None


class Button(WireModel):
    title: str
    open_url_action: OpenUrlAction


class Suggestion(WireModel):
    title: str


class LinkOutSuggestion(WireModel):
    destination_name: str
    url: str


class SimpleResponse(WireModel):
    text_to_speech: str | None = None
    ssml: str | None = None
    display_text: str | None = None

    @classmethod
    def from_input(cls, response: Any) -> SimpleResponse | None:
        """Accepts a string (SSML auto-detected) or a ``{speech, displayText}`` pair."""
        if isinstance(response, SimpleResponse):
            return response
        if isinstance(response, str) and response:
            return cls(ssml=response) if is_ssml(response) else cls(text_to_speech=response)
        if isinstance(response, Mapping) and response.get("speech"):
            speech = response["speech"]
            display_text = response.get("displayText", response.get("display_text"))
            if is_ssml(speech):
                return cls(ssml=speech, display_text=display_text)
            return cls(text_to_speech=speech, display_text=display_text)
        logger.error("SimpleResponse requires a speech parameter.")
        return None

    @property
    def speech(self) -> str | None:
        return self.text_to_speech if self.text_to_speech is not None else self.ssml


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------

class BasicCard(WireModel):
    title: str | None = None
    subtitle: str | None = None
    formatted_text: str = ""
    image: Image | None = None
    image_display_options: str | None = None
    buttons: list[Button] = Field(default_factory=list)

    def set_title(self, title: str) -> BasicCard:
        if not title:
            logger.error("title cannot be empty")
            return self
        self.title = title
        return self

    def set_subtitle(self, subtitle: str) -> BasicCard:
        if not subtitle:
            logger.error("subtitle cannot be empty")
            return self
        self.subtitle = subtitle
        return self

    def set_body_text(self, body_text: str) -> BasicCard:
        if not body_text:
            logger.error("bodyText cannot be empty")
            return self
        self.formatted_text = body_text
        return self

    def set_image(
        self,
        url: str,
        accessibility_text: str,
        width: int | None = None,
        height: int | None = None,
    ) -> BasicCard:
        image = _build_image(url, accessibility_text, width, height)
        if image is not None:
            self.image = image
        return self

    def set_image_display(self, option: str | ImageDisplays) -> BasicCard:
        if _valid_image_display(option):
            self.image_display_options = ImageDisplays(option).value
        return self

    def add_button(self, text: str, url: str) -> BasicCard:
        if not text:
            logger.error("text cannot be empty")
            return self
        if not url:
            logger.error("url cannot be empty")
            return self
        self.buttons.append(Button(title=text, open_url_action=OpenUrlAction(url=url)))
        return self


# ---------------------------------------------------------------------------
# Option selection (list / carousel)
# ---------------------------------------------------------------------------

class OptionInfo(WireModel):
    key: str = ""
    synonyms: list[str] = Field(default_factory=list)


class OptionItem(WireModel):
    option_info: OptionInfo = Field(default_factory=OptionInfo)
    title: str = ""
    description: str | None = None
    image: Image | None = None

    def set_key(self, key: str) -> OptionItem:
        if not key:
            logger.error("key cannot be empty")
            return self
        self.option_info.key = key
        return self

    def add_synonyms(self, synonyms: str | list[str]) -> OptionItem:
        if not synonyms:
            logger.error("Invalid synonyms")
            return self
        self.option_info.synonyms.extend(_as_list(synonyms))
        return self

    def set_title(self, title: str) -> OptionItem:
        if not title:
            logger.error("title cannot be empty")
            return self
        self.title = title
        return self

    def set_description(self, description: str) -> OptionItem:
        if not description:
            logger.error("descriptions cannot be empty")
            return self
        self.description = description
        return self

    def set_image(
        self,
        url: str,
        accessibility_text: str,
        width: int | None = None,
        height: int | None = None,
    ) -> OptionItem:
        image = _build_image(url, accessibility_text, width, height)
        if image is not None:
            self.image = image
        return self


class List(WireModel):
    title: str | None = None
    items: list[OptionItem] = Field(default_factory=list)

    def set_title(self, title: str) -> List:
        if not title:
            logger.error("title cannot be empty")
            return self
        self.title = title
        return self

    def add_items(self, option_items: OptionItem | list[OptionItem]) -> List:
        if not option_items:
            logger.error("optionItems cannot be null")
            return self
        self.items.extend(_as_list(option_items))
        if len(self.items) > LIST_ITEM_MAX:
            self.items = self.items[:LIST_ITEM_MAX]
            logger.warning("List can have no more than %d items", LIST_ITEM_MAX)
        return self


class Carousel(WireModel):
    items: list[OptionItem] = Field(default_factory=list)
    image_display_options: str | None = None

    def add_items(self, option_items: OptionItem | list[OptionItem]) -> Carousel:
        if not option_items:
            logger.error("optionItems cannot be null")
            return self
        self.items.extend(_as_list(option_items))
        if len(self.items) > CAROUSEL_ITEM_MAX:
            self.items = self.items[:CAROUSEL_ITEM_MAX]
            logger.warning("Carousel can have no more than %d items", CAROUSEL_ITEM_MAX)
        return self

    def set_image_display(self, option: str | ImageDisplays) -> Carousel:
        if _valid_image_display(option):
            self.image_display_options = ImageDisplays(option).value
        return self


# ---------------------------------------------------------------------------
# Browse carousel
# ---------------------------------------------------------------------------

class BrowseItem(WireModel):
    title: str = ""
    description: str | None = None
    footer: str | None = None
    image: Image | None = None
    open_url_action: OpenUrlAction = Field(
        default_factory=lambda: OpenUrlAction(url_type_hint=UrlTypeHint.UNSPECIFIED.value)
    )

    def set_title(self, title: str) -> BrowseItem:
        if not title:
            logger.error("title cannot be empty")
            return self
        self.title = title
        return self

    def set_description(self, description: str) -> BrowseItem:
        if not description:
            logger.error("descriptions cannot be empty")
            return self
        self.description = description
        return self

    def set_footer(self, footer_text: str) -> BrowseItem:
        if not footer_text:
            logger.error("footer cannot be empty")
            return self
        self.footer = footer_text
        return self

    def set_image(
        self,
        url: str,
        accessibility_text: str,
        width: int | None = None,
        height: int | None = None,
    ) -> BrowseItem:
        image = _build_image(url, accessibility_text, width, height)
        if image is not None:
            self.image = image
        return self

    def set_open_url_action(self, url: str, url_type_hint: str | None = None) -> BrowseItem:
        self.set_url(url)
        return self.set_url_type_hint(url_type_hint) if url_type_hint else self

    def set_url(self, url: str) -> BrowseItem:
        if not url:
            logger.error("url cannot be empty")
            return self
        self.open_url_action.url = url
        return self

    def set_url_type_hint(self, url_type_hint: str | UrlTypeHint) -> BrowseItem:
        if url_type_hint not in {hint.value for hint in UrlTypeHint}:
            logger.error("URL type hint must be valid")
            return self
        self.open_url_action.url_type_hint = UrlTypeHint(url_type_hint).value
        return self


class BrowseCarousel(WireModel):
    items: list[BrowseItem] = Field(default_factory=list)
    image_display_options: str | None = None

    def add_items(self, browse_items: BrowseItem | list[BrowseItem]) -> BrowseCarousel:
        if not browse_items:
            logger.error("browseItems cannot be null")
            return self
        self.items.extend(_as_list(browse_items))
        if len(self.items) > CAROUSEL_ITEM_MAX:
            self.items = self.items[:CAROUSEL_ITEM_MAX]
            logger.error("Carousel can have no more than %d items", CAROUSEL_ITEM_MAX)
        return self

    def set_image_display(self, option: str | ImageDisplays) -> BrowseCarousel:
        if _valid_image_display(option):
            self.image_display_options = ImageDisplays(option).value
        return self


# ---------------------------------------------------------------------------
# Media
# ---------------------------------------------------------------------------

class MediaImage(WireModel):
    url: str


class MediaObject(WireModel):
    name: str | None = None
    content_url: str | None = None
    description: str | None = None
    large_image: MediaImage | None = None
    icon: MediaImage | None = None

    def set_description(self, description: str) -> MediaObject:
        if not description:
            logger.error("description cannot be empty")
            return self
        self.description = description
        return self

    def set_image(self, url: str, image_type: str | MediaImageType) -> MediaObject:
        if not url:
            logger.error("url cannot be empty")
            return self
        if image_type == MediaImageType.ICON:
            self.icon = MediaImage(url=url)
            self.large_image = None
        elif image_type == MediaImageType.LARGE:
            self.large_image = MediaImage(url=url)
            self.icon = None
        else:
            logger.error("Invalid media image type: %s", image_type)
        return self


class MediaResponse(WireModel):
    media_type: str = MediaType.AUDIO.value
    media_objects: list[MediaObject] = Field(default_factory=list)

    def add_media_objects(self, media_objects: MediaObject | list[MediaObject]) -> MediaResponse:
        if not media_objects:
            logger.error("mediaObjects cannot be null")
            return self
        self.media_objects.extend(_as_list(media_objects))
        return self


# ---------------------------------------------------------------------------
# Rich response
# ---------------------------------------------------------------------------

class StructuredResponse(WireModel):
    order_update: dict[str, Any]


class ResponseItem(WireModel):
    """One slot of a rich response; exactly one field is set."""
    simple_response: SimpleResponse | None = None
    basic_card: BasicCard | None = None
    structured_response: StructuredResponse | None = None
    media_response: MediaResponse | None = None
    carousel_browse: BrowseCarousel | None = None


class RichResponse(WireModel):
    items: list[ResponseItem] = Field(default_factory=list)
    suggestions: list[Suggestion] = Field(default_factory=list)
    link_out_suggestion: LinkOutSuggestion | None = None

    def simple_responses(self) -> list[SimpleResponse]:
        return [item.simple_response for item in self.items if item.simple_response is not None]

    def add_simple_response(self, simple_response: str | Mapping[str, Any] | SimpleResponse) -> RichResponse:
        if not simple_response:
            logger.error("Invalid simpleResponse")
            return self
        if len(self.simple_responses()) >= SIMPLE_RESPONSE_MAX:
            logger.error("Cannot include >%d SimpleResponses in RichResponse", SIMPLE_RESPONSE_MAX)
            return self
        built = SimpleResponse.from_input(simple_response)
        if built is None:
            return self
        item = ResponseItem(simple_response=built)
        # A card or structured response may not lead the items list.
        if self.items and (self.items[0].basic_card or self.items[0].structured_response):
            self.items.insert(0, item)
        else:
            self.items.append(item)
        return self

    def add_basic_card(self, basic_card: BasicCard) -> RichResponse:
        if not basic_card:
            logger.error("Invalid basicCard")
            return self
        if any(item.basic_card for item in self.items):
            logger.error("Cannot include >1 BasicCard in RichResponse")
            return self
        self.items.append(ResponseItem(basic_card=basic_card))
        return self

    def add_media_response(self, media_response: MediaResponse) -> RichResponse:
        if not media_response:
            logger.error("Invalid MediaResponse")
            return self
        if any(item.media_response for item in self.items):
            logger.debug("Cannot include >1 MediaResponse in RichResponse")
            return self
        self.items.append(ResponseItem(media_response=media_response))
        return self

    def add_browse_carousel(self, browse_carousel: BrowseCarousel) -> RichResponse:
        if not browse_carousel:
            logger.error("Invalid browse carousel")
            return self
        self.items.append(ResponseItem(carousel_browse=browse_carousel))
        return self

    def add_suggestions(self, suggestions: str | list[str]) -> RichResponse:
        if not suggestions:
            logger.error("Invalid suggestions")
            return self
        for suggestion in _as_list(suggestions):
            if self.is_valid_suggestion_text(suggestion):
                self.suggestions.append(Suggestion(title=suggestion))
            else:
                logger.warning(
                    "Suggestion text can't be longer than %d characters: %s. "
                    "This suggestion won't be added to the list.",
                    SUGGESTION_TEXT_MAX, suggestion,
                )
        return self

    @staticmethod
    def is_valid_suggestion_text(suggestion_text: Any) -> bool:
        return isinstance(suggestion_text, str) and 0 < len(suggestion_text) <= SUGGESTION_TEXT_MAX

    def add_suggestion_link(self, destination_name: str, suggestion_url: str) -> RichResponse:
        if not destination_name:
            logger.error("destinationName cannot be empty")
            return self
        if not suggestion_url:
            logger.error("suggestionUrl cannot be empty")
            return self
        self.link_out_suggestion = LinkOutSuggestion(destination_name=destination_name, url=suggestion_url)
        return self

    def add_order_update(self, order_update: Mapping[str, Any]) -> RichResponse:
        if not order_update:
            logger.error("Invalid orderUpdate")
            return self
        if any(item.structured_response for item in self.items):
            logger.debug("Cannot include >1 StructuredResponses in RichResponse")
            return self
        self.items.append(ResponseItem(structured_response=StructuredResponse(order_update=dict(order_update))))
        return self
