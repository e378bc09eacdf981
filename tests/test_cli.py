"""Tests for the replay CLI adapter."""

from __future__ import annotations

import io
import json
import sys

import pytest

from actions_webhook.adapters.cli.main import main, replay


class TestReplay:
    async def test_envelope(self, sdk_v2_body):
        result = await replay({"headers": {"Google-Actions-API-Version": "2"}, "body": sdk_v2_body})
        assert result["status"] == 200
        assert result["headers"]["Content-Type"] == "application/json"
        assert result["body"]["expectedInputs"][0]["inputPrompt"]["initialPrompts"] == [
            {"textToSpeech": "You said, talk to echo"}
        ]

    async def test_bare_v1_body(self, sdk_v1_body):
        result = await replay(sdk_v1_body)
        assert result["status"] == 200
        assert "expected_inputs" in result["body"]

    async def test_custom_handler(self, sdk_v2_body):
        result = await replay({"body": sdk_v2_body}, handler=lambda app: app.tell("Custom"))
        assert result["body"]["final_response"]["speech_response"] == {"text_to_speech": "Custom"}

    async def test_no_matching_intent(self, sdk_v2_body, capsys):
        result = await replay({"body": sdk_v2_body}, handler={"actions.intent.TEXT": lambda app: app.tell("x")})
        assert result["status"] == 400
        assert "request rejected" in capsys.readouterr().err


class TestMain:
    def test_reads_file(self, tmp_path, monkeypatch, capsys, sdk_v2_body):
        request_file = tmp_path / "request.json"
        request_file.write_text(json.dumps({
            "headers": {"Google-Actions-API-Version": "2"},
            "body": {**sdk_v2_body, "inputs": [{"intent": "actions.intent.TEXT", "rawInputs": [{"query": "bye"}]}]},
        }))
        monkeypatch.setattr(sys, "argv", ["actions-webhook-replay", str(request_file)])
        main()
        output = json.loads(capsys.readouterr().out)
        assert output["status"] == 200
        assert output["body"]["finalResponse"]["speechResponse"] == {"textToSpeech": "Goodbye!"}

    def test_reads_stdin(self, monkeypatch, capsys, sdk_v2_body):
        monkeypatch.setattr(sys, "argv", ["actions-webhook-replay"])
        monkeypatch.setattr(sys, "stdin", io.StringIO(json.dumps(sdk_v2_body)))
        main()
        assert json.loads(capsys.readouterr().out)["status"] == 200

    def test_empty_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["actions-webhook-replay"])
        monkeypatch.setattr(sys, "stdin", io.StringIO(""))
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
        assert "Usage" in capsys.readouterr().err

    def test_invalid_json(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["actions-webhook-replay"])
        monkeypatch.setattr(sys, "stdin", io.StringIO("{not json"))
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
        assert "Invalid JSON" in capsys.readouterr().err
