"""Tests for the Dialogflow (v1 webhook) dialect."""

from __future__ import annotations

import json

from actions_webhook.core.models import InputValueDataTypes, ProtocolVersion
from actions_webhook.response.builder import List, OptionItem, RichResponse


def option_list():
    return List().add_items([
        OptionItem().set_key("red").set_title("Red"),
        OptionItem().set_key("blue").set_title("Blue"),
    ])


class TestRequest:
    def test_version_from_original_request(self, dialogflow_app, dialogflow_body):
        app, _ = dialogflow_app(dialogflow_body)
        assert app.version == ProtocolVersion.V2

    def test_header_version_wins_over_body(self, dialogflow_app, dialogflow_body):
        dialogflow_body["originalRequest"]["version"] = "1"
        app, _ = dialogflow_app(dialogflow_body, headers={"Google-Actions-API-Version": "2"})
        assert app.version == ProtocolVersion.V2

    def test_v1_header_keeps_snake_case_reply(self, dialogflow_app, dialogflow_body, sdk_v1_body):
        dialogflow_body["originalRequest"] = {"source": "google", "version": "2", "data": sdk_v1_body}
        app, response = dialogflow_app(dialogflow_body, headers={"Google-Actions-API-Version": "1"})
        assert app.version == ProtocolVersion.V1
        assert app.get_user()["user_id"] == "user-123"
        app.ask("Hi")
        assert "expect_user_response" in response.body["data"]["google"]

    def test_missing_version_is_v1(self, dialogflow_app, dialogflow_body):
        del dialogflow_body["originalRequest"]["version"]
        app, _ = dialogflow_app(dialogflow_body)
        assert app.version == ProtocolVersion.V1

    def test_v1_original_request_is_camel_cased(self, dialogflow_app, dialogflow_body, sdk_v1_body):
        dialogflow_body["originalRequest"] = {"source": "google", "version": "1", "data": sdk_v1_body}
        app, _ = dialogflow_app(dialogflow_body)
        assert app.get_user()["user_id"] == "user-123"
        assert app.get_input_type() == app.input_types["VOICE"]
        assert app.body["result"]["resolvedQuery"] == "start a game"

    def test_intent_and_raw_input(self, dialogflow_app, dialogflow_body):
        app, _ = dialogflow_app(dialogflow_body)
        assert app.get_intent() == "game.start"
        assert app.get_raw_input() == "start a game"

    def test_missing_result(self, dialogflow_app):
        app, _ = dialogflow_app({})
        assert app.get_intent() is None
        assert app.get_raw_input() is None
        assert app.get_user() is None
        assert app.get_contexts() == []

    def test_argument_prefers_parameters(self, dialogflow_app, dialogflow_body):
        dialogflow_body["originalRequest"]["data"]["inputs"][0]["arguments"] = [
            {"name": "color", "textValue": "green"},
            {"name": "size", "textValue": "large"},
        ]
        app, _ = dialogflow_app(dialogflow_body)
        assert app.get_argument("color") == "blue"
        assert app.get_argument("size") == "large"
        assert app.get_argument("missing") is None

    def test_dialog_data_from_actions_context(self, dialogflow_app, dialogflow_body):
        app, _ = dialogflow_app(dialogflow_body)
        assert app.data == {"count": 1}


class TestContexts:
    def test_get_contexts_hides_dialog_context(self, dialogflow_app, dialogflow_body):
        app, _ = dialogflow_app(dialogflow_body)
        assert [c["name"] for c in app.get_contexts()] == ["game"]
        assert app.get_context("game")["lifespan"] == 5
        assert app.get_context("nope") is None

    def test_get_context_argument(self, dialogflow_app, dialogflow_body):
        app, _ = dialogflow_app(dialogflow_body)
        assert app.get_context_argument("game", "level") == {"value": "3", "original": "three"}
        assert app.get_context_argument("game", "missing") is None
        assert app.get_context_argument("", "level") is None

    def test_set_context_is_emitted(self, dialogflow_app, dialogflow_body):
        app, response = dialogflow_app(dialogflow_body)
        app.set_context("game", 2, {"level": 4})
        app.set_context("game", 3, {"level": 5})
        app.set_context("menu")
        app.ask("Next level?")
        assert response.body["contextOut"][1:] == [
            {"name": "game", "lifespan": 3, "parameters": {"level": 5}},
            {"name": "menu", "lifespan": 1},
        ]

    def test_set_context_without_name(self, dialogflow_app, dialogflow_body):
        app, response = dialogflow_app(dialogflow_body)
        app.set_context("")
        assert response.status_code == 400


class TestResponses:
    def test_ask(self, dialogflow_app, dialogflow_body):
        app, response = dialogflow_app(dialogflow_body)
        app.data["count"] += 1
        app.ask("Ready?", ["Hello?"])
        assert response.body == {
            "speech": "Ready?",
            "contextOut": [{"name": "_actions_on_google_", "lifespan": 100, "parameters": {"count": 2}}],
            "data": {"google": {
                "expectUserResponse": True,
                "isSsml": False,
                "noInputPrompts": [{"textToSpeech": "Hello?"}],
            }},
        }

    def test_tell(self, dialogflow_app, dialogflow_body):
        app, response = dialogflow_app(dialogflow_body)
        app.tell("<speak>Bye</speak>")
        assert response.body == {
            "speech": "<speak>Bye</speak>",
            "contextOut": [],
            "data": {"google": {"expectUserResponse": False, "isSsml": True, "noInputPrompts": []}},
        }

    def test_rich_response_speech(self, dialogflow_app, dialogflow_body):
        app, response = dialogflow_app(dialogflow_body)
        app.ask(RichResponse().add_simple_response({"speech": "Here you go", "displayText": "Here!"}))
        assert response.body["speech"] == "Here you go"
        rich = response.body["data"]["google"]["richResponse"]
        assert rich["items"][0]["simpleResponse"]["displayText"] == "Here!"

    def test_rich_response_needs_simple_response(self, dialogflow_app, dialogflow_body):
        app, response = dialogflow_app(dialogflow_body)
        app.ask(RichResponse().add_suggestions("Yes"))
        assert response.status_code == 400

    def test_list_system_intent(self, dialogflow_app, dialogflow_body):
        app, response = dialogflow_app(dialogflow_body)
        app.ask_with_list("Pick a color", option_list())
        system_intent = response.body["data"]["google"]["systemIntent"]
        assert system_intent["intent"] == "actions.intent.OPTION"
        assert system_intent["data"]["@type"] == InputValueDataTypes.OPTION.value
        assert len(system_intent["data"]["listSelect"]["items"]) == 2

    def test_v1_list_system_intent(self, dialogflow_app, dialogflow_body, sdk_v1_body):
        dialogflow_body["originalRequest"] = {"source": "google", "version": "1", "data": sdk_v1_body}
        app, response = dialogflow_app(dialogflow_body)
        app.ask_with_list("Pick a color", option_list())
        system_intent = response.body["data"]["google"]["system_intent"]
        assert len(system_intent["spec"]["option_value_spec"]["list_select"]["items"]) == 2
        assert response.body["contextOut"][0]["name"] == "_actions_on_google_"

    def test_permission_system_intent(self, dialogflow_app, dialogflow_body):
        app, response = dialogflow_app(dialogflow_body)
        app.ask_for_permission("To greet you", "NAME")
        system_intent = response.body["data"]["google"]["systemIntent"]
        assert system_intent["intent"] == "actions.intent.PERMISSION"
        assert system_intent["data"]["permissions"] == ["NAME"]
        assert response.body["speech"] == "PLACEHOLDER_FOR_PERMISSION"

    def test_user_storage(self, dialogflow_app, dialogflow_body):
        app, response = dialogflow_app(dialogflow_body)
        app.user_storage["favorite"] = "blue"
        app.tell("Noted")
        assert json.loads(response.body["data"]["google"]["userStorage"]) == {"data": {"favorite": "blue"}}

    def test_no_user_storage_without_original_request(self, dialogflow_app, dialogflow_body):
        del dialogflow_body["originalRequest"]
        app, response = dialogflow_app(dialogflow_body)
        app.user_storage["favorite"] = "blue"
        app.tell("Noted")
        assert "userStorage" not in response.body["data"]["google"]


class TestSelectionAndIncomingMessages:
    def test_selected_option_from_context(self, dialogflow_app, dialogflow_body):
        dialogflow_body["result"]["contexts"].append(
            {"name": "actions_intent_option", "lifespan": 0, "parameters": {"OPTION": "red"}}
        )
        app, _ = dialogflow_app(dialogflow_body)
        assert app.get_selected_option() == "red"

    def test_selected_option_from_argument(self, dialogflow_app, dialogflow_body):
        dialogflow_body["originalRequest"]["data"]["inputs"][0]["arguments"] = [
            {"name": "OPTION", "textValue": "blue"},
        ]
        app, _ = dialogflow_app(dialogflow_body)
        assert app.get_selected_option() == "blue"

    def test_incoming_rich_response(self, dialogflow_app, dialogflow_body):
        dialogflow_body["result"]["fulfillment"]["messages"] = [
            {"type": 0, "speech": "ignored"},
            {"type": "simple_response", "platform": "google", "textToSpeech": "Hello", "displayText": "Hi"},
            {"type": "basic_card", "platform": "google", "title": "Card", "formattedText": "Body", "buttons": []},
            {"type": "suggestion_chips", "platform": "google", "suggestions": [{"title": "Yes"}]},
            {"type": "link_out_chip", "platform": "google", "destinationName": "Site", "url": "https://example.com"},
        ]
        app, _ = dialogflow_app(dialogflow_body)
        rich = app.get_incoming_rich_response()
        assert rich.simple_responses()[0].display_text == "Hi"
        assert rich.items[1].basic_card.title == "Card"
        assert [s.title for s in rich.suggestions] == ["Yes"]
        assert rich.link_out_suggestion.url == "https://example.com"

    def test_incoming_list(self, dialogflow_app, dialogflow_body):
        dialogflow_body["result"]["fulfillment"]["messages"] = [{
            "type": "list_card",
            "platform": "google",
            "title": "Colors",
            "items": [
                {"optionInfo": {"key": "red", "synonyms": []}, "title": "Red"},
                {"optionInfo": {"key": "blue", "synonyms": []}, "title": "Blue"},
            ],
        }]
        app, _ = dialogflow_app(dialogflow_body)
        selection = app.get_incoming_list()
        assert selection.title == "Colors"
        assert [item.option_info.key for item in selection.items] == ["red", "blue"]
        assert app.get_incoming_carousel().items == []


class TestSharedSecret:
    def test_matching_header(self, dialogflow_app, dialogflow_body):
        app, _ = dialogflow_app(dialogflow_body, headers={"X-Webhook-Secret": "s3cret"})
        assert app.is_request_from_dialogflow("x-webhook-secret", "s3cret")
        assert not app.is_request_from_dialogflow("X-Webhook-Secret", "other")

    def test_blank_key(self, dialogflow_app, dialogflow_body):
        app, response = dialogflow_app(dialogflow_body)
        assert not app.is_request_from_dialogflow("", "s3cret")
        assert response.status_code == 400
