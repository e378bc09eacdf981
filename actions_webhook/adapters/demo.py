"""Echo handler served by the adapters when no handler is supplied."""

from __future__ import annotations

from actions_webhook.core.app import AssistantApp

GOODBYE = "bye"


def echo_handler(app: AssistantApp) -> None:
    """Repeat what the user said; ``bye`` ends the conversation."""
    text = app.get_raw_input() or ""
    if text.strip().lower() == GOODBYE:
        app.tell("Goodbye!")
        return
    app.ask(f"You said, {text}" if text else "Hi! Say something.", ["Are you still there?"])
