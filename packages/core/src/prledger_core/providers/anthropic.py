from __future__ import annotations

from prledger_core.providers.base import BaseBot, Ids, Reply


class AnthropicBot(BaseBot):
    MODEL = "claude-sonnet-4-20250514"
    TEMPERATURE = 0.3

    def __init__(self, api_key: str, **options):
        super().__init__(**options)
        try:
            from anthropic import Anthropic
        except ImportError:
            raise ImportError(
                "The 'anthropic' package is required for this provider. "
                "Reinstall prledger or run: pip install anthropic"
            )
        # SDK retries are disabled so BaseBot's budget is the only one.
        self.client = Anthropic(api_key=api_key, timeout=self.timeout_seconds, max_retries=0)

    def _call_api(self, message: str, ids: Ids) -> Reply:
        # The Messages API keeps no server-side history, so ids.parent_message_id
        # cannot be replayed here; each call is a single turn.
        from anthropic.types import TextBlock

        response = self.client.messages.create(
            model=self.model,
            system=self.system_message,
            messages=[{"role": "user", "content": message}],
            temperature=self.temperature,
            max_tokens=self.MAX_TOKENS,
        )
        text_blocks = [block.text for block in response.content if isinstance(block, TextBlock)]
        return Reply(text="".join(text_blocks).strip(), message_id=response.id)
