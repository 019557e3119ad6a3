from __future__ import annotations

import logging

from fixscout_core.providers.base import BaseOracle, missing_sdk

logger = logging.getLogger(__name__)


class AnthropicOracle(BaseOracle):
    MODEL = "claude-sonnet-4-5"
    # Classification and scoring want repeatable answers more than phrasing.
    TEMPERATURE = 0.0

    def __init__(self, api_key: str):
        try:
            from anthropic import Anthropic
        except ImportError:
            raise missing_sdk("anthropic") from None
        self.client = Anthropic(api_key=api_key)

    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        from anthropic.types import TextBlock

        response = self.client.messages.create(
            model=self.MODEL,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )
        if response.stop_reason == "max_tokens":
            # A cut-off JSON answer fails validation and is retried.
            logger.warning("Anthropic answer hit the %d token limit", self.MAX_TOKENS)
        return "".join(block.text for block in response.content if isinstance(block, TextBlock)).strip()
