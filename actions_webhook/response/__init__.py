from actions_webhook.response.builder import (
    BasicCard,
    BrowseCarousel,
    BrowseItem,
    Carousel,
    ImageDisplays,
    LinkOutSuggestion,
    List,
    MediaImageType,
    MediaObject,
    MediaResponse,
    MediaStatus,
    MediaType,
    OptionItem,
    RichResponse,
    SimpleResponse,
    Suggestion,
    UrlTypeHint,
    is_ssml,
)

__all__ = [
    "BasicCard",
    "BrowseCarousel",
    "BrowseItem",
    "Carousel",
    "ImageDisplays",
    "LinkOutSuggestion",
    "List",
    "MediaImageType",
    "MediaObject",
    "MediaResponse",
    "MediaStatus",
    "MediaType",
    "OptionItem",
    "RichResponse",
    "SimpleResponse",
    "Suggestion",
    "UrlTypeHint",
    "is_ssml",
]
