from __future__ import annotations

import logging

try:
    from openai import OpenAI as _OpenAI
except ImportError:
    _OpenAI = None  # type: ignore[assignment,misc]

from fixscout_core.providers.base import BaseOracle, missing_sdk

logger = logging.getLogger(__name__)


class OpenAIOracle(BaseOracle):
    MODEL = "gpt-4o"
    TEMPERATURE = 0.0

    def __init__(self, api_key: str):
        if _OpenAI is None:
            raise missing_sdk("openai")
        self.client = _OpenAI(api_key=api_key)

    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        # JSON mode guarantees a syntactically valid object; the schema is checked by the caller.
        response = self.client.chat.completions.create(
            model=self.MODEL,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
            response_format={"type": "json_object"},
        )
        choice = response.choices[0]
        if choice.finish_reason == "length":
            logger.warning("OpenAI answer hit the %d token limit", self.MAX_TOKENS)
        return choice.message.content or ""
