"""Claude (Anthropic) LLM Client"""

import os

from pushscript.llm.base import LLMClient, LLMResponse, LLMError, TransientLLMError, SYSTEM_PROMPT


class ClaudeClient(LLMClient):
    """Claude API client. Requires ANTHROPIC_API_KEY env var."""

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    API_KEY_ENV = "ANTHROPIC_API_KEY"
    MODEL_ENV = "ANTHROPIC_PUSHSCRIPT_MODEL"
    MAX_TOKENS = 1000
    TEMPERATURE = 0.4
    SDK_RETRIES = True

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key or os.environ.get(self.API_KEY_ENV)
        self.model = model or os.environ.get(self.MODEL_ENV) or self.DEFAULT_MODEL

        if not self.api_key:
            raise LLMError(
                "No API key found. Set ANTHROPIC_API_KEY environment variable:\n"
                "  export ANTHROPIC_API_KEY='your-key-here'"
            )

        try:
            from anthropic import Anthropic
        except ImportError:
            raise LLMError(
                "Anthropic SDK not installed. Run:\n"
                "  pip install anthropic"
            )
        self._client = Anthropic(api_key=self.api_key)

    @property
    def name(self) -> str:
        return f"Claude ({self.model})"

    def _complete(self, prompt: str) -> LLMResponse:
        from anthropic import (
            APIConnectionError, APIError, APIStatusError, AuthenticationError, RateLimitError,
        )

        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=self.MAX_TOKENS,
                temperature=self.TEMPERATURE,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except AuthenticationError:
            raise LLMError("Invalid API key. Check your ANTHROPIC_API_KEY.", status=401)
        except RateLimitError as e:
            raise TransientLLMError(f"Claude rate limited: {e.message}", status=429)
        except APIConnectionError as e:
            raise TransientLLMError(f"Could not reach Claude API: {e.message}")
        except APIStatusError as e:
            if e.status_code >= 500:
                raise TransientLLMError(f"Claude API error: {e.message}", status=e.status_code)
            raise LLMError(f"Claude API error: {e.message}", status=e.status_code)
        except APIError as e:
            raise LLMError(f"Claude API error: {e.message}")

        content = next((block.text.strip() for block in response.content if block.type == "text"), "")
        return LLMResponse(
            content=content,
            model=self.model,
            tokens_used=response.usage.input_tokens + response.usage.output_tokens,
        )
