"""Google Gemini LLM Client"""

import os

from pushscript.llm.base import (
    LLMClient, LLMResponse, LLMError, TransientLLMError, SYSTEM_PROMPT, post_json,
)


class GeminiClient(LLMClient):
    """Gemini generateContent client. Requires GEMINI_API_KEY env var."""

    ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
    DEFAULT_MODEL = "gemini-2.0-flash"
    API_KEY_ENV = "GEMINI_API_KEY"
    MODEL_ENV = "GEMINI_PUSHSCRIPT_MODEL"
    MAX_TOKENS = 1000
    TEMPERATURE = 0.3
    TIMEOUT = 60

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key or os.environ.get(self.API_KEY_ENV)
        self.model = model or os.environ.get(self.MODEL_ENV) or self.DEFAULT_MODEL
        if not self.api_key:
            raise LLMError(
                "No API key found. Set GEMINI_API_KEY environment variable:\n"
                "  export GEMINI_API_KEY='your-key-here'"
            )

    @property
    def name(self) -> str:
        return f"Gemini ({self.model})"

    def build_request(self, prompt: str) -> dict:
        return {
            "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.TEMPERATURE,
                "maxOutputTokens": self.MAX_TOKENS,
            },
        }

    def _complete(self, prompt: str) -> LLMResponse:
        url = self.ENDPOINT.format(model=self.model)
        try:
            data = post_json(url, self.build_request(prompt), {"x-goog-api-key": self.api_key}, timeout=self.TIMEOUT)
        except TransientLLMError:
            raise
        except LLMError as e:
            if e.status in (401, 403):
                raise LLMError("Invalid API key. Check your GEMINI_API_KEY.", status=e.status)
            raise LLMError(f"Gemini API error: {e}", status=e.status)

        return LLMResponse(
            content=self._extract_text(data),
            model=self.model,
            tokens_used=(data.get("usageMetadata") or {}).get("totalTokenCount", 0),
        )

    @staticmethod
    def _extract_text(data: dict) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            raise LLMError("No candidates found in Gemini API response")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)
        if not text:
            raise LLMError("No text found in Gemini API response")
        return text.strip()
