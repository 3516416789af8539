"""Ollama LLM Client for Local Models"""

import os
import urllib.error
import urllib.request

from pushscript.llm.base import LLMClient, LLMResponse, LLMError, SYSTEM_PROMPT, post_json


class OllamaClient(LLMClient):
    """Ollama client for local models. Requires: ollama serve"""

    DEFAULT_MODEL = "mistral:7b"
    DEFAULT_HOST = "http://localhost:11434"
    DEFAULT_TIMEOUT = 300  # CPU inference is slow
    MODEL_ENV = "OLLAMA_PUSHSCRIPT_MODEL"

    def __init__(self, model: str | None = None, host: str | None = None):
        self.model = model or os.environ.get(self.MODEL_ENV) or self.DEFAULT_MODEL
        self.host = host or os.environ.get("OLLAMA_HOST", self.DEFAULT_HOST)
        self.timeout = int(os.environ.get("PUSHSCRIPT_TIMEOUT", self.DEFAULT_TIMEOUT))
        self._verify_connection()

    @property
    def name(self) -> str:
        return f"Ollama ({self.model})"

    def _verify_connection(self) -> None:
        """Check if Ollama is running and accessible."""
        try:
            req = urllib.request.Request(f"{self.host}/api/tags")
            with urllib.request.urlopen(req, timeout=5):
                pass
        except (urllib.error.URLError, OSError):
            raise LLMError("Ollama not running. Start with: ollama serve")

    def _complete(self, prompt: str) -> LLMResponse:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "system": SYSTEM_PROMPT,
            "stream": False,
            "keep_alive": "10m",
            "options": {"temperature": 0.4, "num_predict": 1000},
        }
        try:
            result = post_json(f"{self.host}/api/generate", payload, timeout=self.timeout)
        except LLMError as e:
            if e.status == 404:
                raise LLMError(f"Model '{self.model}' not found. Run: ollama pull {self.model}", status=404)
            raise

        return LLMResponse(
            content=result.get("response", "").strip(),
            model=self.model,
            tokens_used=result.get("eval_count", 0),
        )
