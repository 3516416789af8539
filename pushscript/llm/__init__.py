"""LLM Client Package"""

import os

from pushscript.config import ENV_API_KEY
from pushscript.llm.base import (
    LLMClient, LLMResponse, LLMError, TransientLLMError, SYSTEM_PROMPT,
    retry_request, validate_commit_message,
)
from pushscript.llm.claude import ClaudeClient
from pushscript.llm.gemini import GeminiClient
from pushscript.llm.ollama import OllamaClient
from pushscript.llm.openai_compat import GroqClient, OpenAIClient

PROVIDERS = {
    "claude": ClaudeClient,
    "openai": OpenAIClient,
    "groq": GroqClient,
    "gemini": GeminiClient,
    "ollama": OllamaClient,
}

# Local first, then whichever hosted provider has a key configured
AUTO_DETECT_ORDER = [OllamaClient, ClaudeClient, OpenAIClient, GroqClient, GeminiClient]


def get_client(provider: str = "auto", model: str | None = None) -> LLMClient:
    """Get an LLM client by provider name, or the first available one for 'auto'."""
    if provider == "ollama":
        return OllamaClient(model=model)

    if provider in PROVIDERS:
        return PROVIDERS[provider](api_key=os.environ.get(ENV_API_KEY), model=model)

    if provider == "auto":
        for client_class in AUTO_DETECT_ORDER:
            try:
                return client_class(model=model)
            except LLMError:
                continue

        raise LLMError(
            "No LLM provider available.\n\n"
            "Option 1 - Use Ollama (free, local):\n"
            "  1. Install: https://ollama.ai\n"
            "  2. Start: ollama serve\n\n"
            "Option 2 - Use a hosted provider:\n"
            "  export PUSHSCRIPT_LLM_PROVIDER=groq\n"
            "  export GROQ_API_KEY='your-key-here'"
        )

    raise LLMError(f"Unknown provider: {provider}. Use one of: auto, {', '.join(PROVIDERS)}.")


__all__ = [
    "LLMClient",
    "LLMResponse",
    "LLMError",
    "TransientLLMError",
    "ClaudeClient",
    "OllamaClient",
    "OpenAIClient",
    "GroqClient",
    "GeminiClient",
    "get_client",
    "retry_request",
    "PROVIDERS",
    "SYSTEM_PROMPT",
    "validate_commit_message",
]
