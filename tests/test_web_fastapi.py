"""Tests for the FastAPI webhook adapter."""

from __future__ import annotations

from fastapi.testclient import TestClient

from actions_webhook.adapters.web_fastapi.app import create_app

V2_HEADERS = {"Google-Actions-API-Version": "2"}


def with_query(body, query):
    body["inputs"][0]["rawInputs"][0]["query"] = query
    return body


class TestWebhookEndpoint:
    def test_health(self):
        client = TestClient(create_app())
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_echo_ask(self, sdk_v2_body):
        client = TestClient(create_app())
        response = client.post("/webhook", json=with_query(sdk_v2_body, "hello"), headers=V2_HEADERS)
        assert response.status_code == 200
        body = response.json()
        assert body["expectUserResponse"] is True
        assert body["expectedInputs"][0]["inputPrompt"]["initialPrompts"] == [{"textToSpeech": "You said, hello"}]

    def test_echo_bye_ends_conversation(self, sdk_v2_body):
        client = TestClient(create_app())
        response = client.post("/webhook", json=with_query(sdk_v2_body, "Bye"), headers=V2_HEADERS)
        assert response.json() == {
            "expectUserResponse": False,
            "finalResponse": {"speechResponse": {"textToSpeech": "Goodbye!"}},
        }

    def test_api_version_header_is_echoed(self, sdk_v1_body):
        client = TestClient(create_app())
        response = client.post("/webhook", json=sdk_v1_body, headers={"Google-Assistant-API-Version": "v1"})
        assert response.status_code == 200
        assert response.headers["google-assistant-api-version"] == "v1"
        assert response.json()["expect_user_response"] is True

    def test_invalid_json(self):
        client = TestClient(create_app())
        response = client.post("/webhook", content=b"{nope", headers={"Content-Type": "application/json"})
        assert response.status_code == 400
        assert "error" in response.json()

    def test_validation_error_is_plain_text_400(self, sdk_v2_body):
        client = TestClient(create_app(lambda app: app.ask("")))
        response = client.post("/webhook", json=sdk_v2_body, headers=V2_HEADERS)
        assert response.status_code == 400
        assert response.text == "Action Error: Invalid input prompt"

    def test_handler_without_response(self, sdk_v2_body):
        client = TestClient(create_app(lambda app: None))
        response = client.post("/webhook", json=sdk_v2_body, headers=V2_HEADERS)
        assert response.status_code == 500

    def test_failing_handler_still_answers(self, sdk_v2_body):
        def handler(app):
            raise RuntimeError("Database unavailable")

        client = TestClient(create_app(handler))
        response = client.post("/webhook", json=sdk_v2_body, headers=V2_HEADERS)
        assert response.status_code == 200
        assert response.json()["finalResponse"]["speechResponse"] == {"textToSpeech": "Database unavailable"}

    def test_intent_map_handler(self, sdk_v2_body):
        client = TestClient(create_app({"actions.intent.MAIN": lambda app: app.tell("Welcome")}))
        response = client.post("/webhook", json=sdk_v2_body, headers=V2_HEADERS)
        assert response.json()["finalResponse"]["speechResponse"] == {"textToSpeech": "Welcome"}

    def test_dialogflow_dialect(self, dialogflow_body):
        client = TestClient(create_app(dialect="dialogflow"))
        response = client.post("/webhook", json=dialogflow_body)
        body = response.json()
        assert body["speech"] == "You said, start a game"
        assert body["contextOut"][0]["name"] == "_actions_on_google_"


class TestVerification:
    """Requirement: with a project id, RAW_SDK requests must carry a valid ID token."""

    def test_missing_token(self, sdk_v2_body, verifier):
        client = TestClient(create_app(project_id="my-project", verifier=verifier))
        response = client.post("/webhook", json=sdk_v2_body, headers=V2_HEADERS)
        assert response.status_code == 403
        assert response.json() == {"error": "ID token verification failed: No incoming API Signature JWT token"}

    def test_rejected_token(self, sdk_v2_body, verifier):
        client = TestClient(create_app(project_id="my-project", verifier=verifier))
        response = client.post("/webhook", json=sdk_v2_body, headers={**V2_HEADERS, "Authorization": "forged"})
        assert response.status_code == 403
        assert response.json()["error"].startswith("ID token verification failed: ")

    def test_valid_token(self, sdk_v2_body, verifier):
        client = TestClient(create_app(project_id="my-project", verifier=verifier))
        response = client.post("/webhook", json=sdk_v2_body, headers={**V2_HEADERS, "Authorization": "good-token"})
        assert response.status_code == 200
        assert verifier.audiences == ["my-project"]

    def test_project_id_from_environment(self, monkeypatch, sdk_v2_body, verifier):
        monkeypatch.setenv("ACTIONS_PROJECT_ID", "env-project")
        client = TestClient(create_app(verifier=verifier))
        client.post("/webhook", json=sdk_v2_body, headers={**V2_HEADERS, "Authorization": "good-token"})
        assert verifier.audiences == ["env-project"]

    def test_dialogflow_is_not_verified(self, dialogflow_body, verifier):
        client = TestClient(create_app(dialect="dialogflow", project_id="my-project", verifier=verifier))
        response = client.post("/webhook", json=dialogflow_body)
        assert response.status_code == 200
        assert verifier.audiences == []
