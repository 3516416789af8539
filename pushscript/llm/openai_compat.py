"""OpenAI-compatible chat completion clients (OpenAI, Groq)."""

import os

from pushscript.llm.base import (
    LLMClient, LLMResponse, LLMError, TransientLLMError, SYSTEM_PROMPT, post_json,
)


class ChatCompletionsClient(LLMClient):
    """Base for providers speaking the /chat/completions protocol."""

    PROVIDER = ""
    ENDPOINT = ""
    DEFAULT_MODEL = ""
    API_KEY_ENV = ""
    MODEL_ENV = ""
    MAX_TOKENS = 1000
    TEMPERATURE = 0.3
    TIMEOUT = 60

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key or os.environ.get(self.API_KEY_ENV)
        self.model = model or os.environ.get(self.MODEL_ENV) or self.DEFAULT_MODEL
        if not self.api_key:
            raise LLMError(
                f"No API key found. Set {self.API_KEY_ENV} environment variable:\n"
                f"  export {self.API_KEY_ENV}='your-key-here'"
            )

    @property
    def name(self) -> str:
        return f"{self.PROVIDER} ({self.model})"

    def build_request(self, prompt: str) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.TEMPERATURE,
            "max_tokens": self.MAX_TOKENS,
        }

    def _complete(self, prompt: str) -> LLMResponse:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            data = post_json(self.ENDPOINT, self.build_request(prompt), headers, timeout=self.TIMEOUT)
        except TransientLLMError:
            raise
        except LLMError as e:
            if e.status == 401:
                raise LLMError(f"Invalid API key. Check your {self.API_KEY_ENV}.", status=401)
            raise LLMError(f"{self.PROVIDER} API error: {e}", status=e.status)

        try:
            content = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            raise LLMError(f"Unexpected {self.PROVIDER} response shape")

        usage = data.get("usage") or {}
        return LLMResponse(content=content.strip(), model=self.model, tokens_used=usage.get("total_tokens", 0))


class OpenAIClient(ChatCompletionsClient):
    PROVIDER = "OpenAI"
    ENDPOINT = "https://api.openai.com/v1/chat/completions"
    DEFAULT_MODEL = "gpt-4o"
    API_KEY_ENV = "OPENAI_API_KEY"
    MODEL_ENV = "OPENAI_PUSHSCRIPT_MODEL"


class GroqClient(ChatCompletionsClient):
    PROVIDER = "Groq"
    ENDPOINT = "https://api.groq.com/openai/v1/chat/completions"
    DEFAULT_MODEL = "llama-3.3-70b-versatile"
    API_KEY_ENV = "GROQ_API_KEY"
    MODEL_ENV = "GROQ_PUSHSCRIPT_MODEL"
