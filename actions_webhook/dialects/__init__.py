from actions_webhook.dialects.interface import Prompt, WireDialect, parse_protocol_version

__all__ = ["Prompt", "WireDialect", "parse_protocol_version"]
