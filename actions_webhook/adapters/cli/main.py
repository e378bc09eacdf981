"""CLI replay adapter — reads a webhook request from a file/stdin, prints the response as JSON."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from actions_webhook import create_assistant_app
from actions_webhook.adapters.demo import echo_handler
from actions_webhook.core.errors import ActionsWebhookError
from actions_webhook.core.http import WebhookRequest, WebhookResponse


def to_request(payload: Any) -> WebhookRequest:
    """``{"headers": ..., "body": ...}`` envelope, or a bare request body."""
    if isinstance(payload, dict) and "body" in payload:
        return WebhookRequest(headers=payload.get("headers") or {}, body=payload["body"])
    return WebhookRequest(body=payload)


async def replay(payload: Any, handler: Any = echo_handler) -> dict[str, Any]:
    response = WebhookResponse()
    app = create_assistant_app(to_request(payload), response)
    try:
        await app.handle_request(handler)
    except ActionsWebhookError as exc:
        print(f"request rejected: {exc}", file=sys.stderr)
    return {
        "status": response.status_code,
        "headers": dict(response.headers),
        "body": response.body,
    }


def main() -> None:
    if len(sys.argv) > 1:
        raw = Path(sys.argv[1]).read_text(encoding="utf-8")
    else:
        raw = sys.stdin.read().strip()
        if not raw:
            print("Usage: actions-webhook-replay <request.json>  OR  cat request.json | actions-webhook-replay",
                  file=sys.stderr)
            sys.exit(1)
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        print(f"Invalid JSON: {exc}", file=sys.stderr)
        sys.exit(1)

    result = asyncio.run(replay(payload))
    print(json.dumps(result, default=str), flush=True)


if __name__ == "__main__":
    main()
