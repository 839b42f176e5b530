from __future__ import annotations

try:
    from openai import OpenAI as _OpenAI
except ImportError:
    _OpenAI = None  # type: ignore[assignment,misc]

from prledger_core.providers.base import BaseBot, Ids, Reply


class OpenAIBot(BaseBot):
    MODEL = "gpt-4o"
    TEMPERATURE = 0.0

    def __init__(self, api_key: str, base_url: str | None = None, **options):
        super().__init__(**options)
        if _OpenAI is None:
            raise ImportError(
                "The 'openai' package is required for this provider. Reinstall prledger or run: pip install openai"
            )
        self.client = _OpenAI(api_key=api_key, base_url=base_url, timeout=self.timeout_seconds, max_retries=0)

    def _call_api(self, message: str, ids: Ids) -> Reply:
        request = {
            "model": self.model,
            "instructions": self.system_message,
            "input": message,
            "temperature": self.temperature,
            "max_output_tokens": self.MAX_TOKENS,
        }
        # The Responses API stores prior turns server-side; chaining on the
        # previous response id continues the conversation.
        if ids.parent_message_id:
            request["previous_response_id"] = ids.parent_message_id
        response = self.client.responses.create(**request)
        return Reply(text=response.output_text, message_id=response.id)
