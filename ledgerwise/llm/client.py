from typing import Protocol

from loguru import logger
from openai import OpenAI


class TextGenerator(Protocol):
    def generate(self, prompt: str) -> str: ...


class OpenRouterGenerator:
    """Single-prompt text generation over an OpenAI-compatible API.

    Errors from the API (rate limits, timeouts, auth) propagate to the
    caller, which decides how to report them.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://openrouter.ai/api/v1",
        temperature: float = 0.3,
    ):
        self.client = OpenAI(base_url=base_url, api_key=api_key)
        self.model = model
        self.temperature = temperature

    def generate(self, prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
        )
        text = (response.choices[0].message.content or "").strip()
        logger.debug("LLM raw response: {}", text)
        return text
