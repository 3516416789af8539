"""LLM Base Classes and Shared Code"""

import http.client
import json
import logging
import re
import time
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, TypeVar

from pushscript import COMMIT_TYPE_NAMES

logger = logging.getLogger(__name__)

T = TypeVar('T')

SYSTEM_PROMPT = """You are a senior software engineer who writes precise, informative git commit messages.

Your expertise:
- Conventional commit format (type, scope, subject, body)
- Finding the PRIMARY purpose of a change from a diff
- Writing for future developers reading git log while debugging

Your standards:
- Every word earns its place, no filler
- The diff shows WHAT; you explain WHY
- Specific verbs over vague ones (never "update", "change", "modify")
- Keep the first line under 80 characters"""

REPROMPT_SUFFIX = (
    "\n\nIMPORTANT: Your previous response was invalid ({error}). "
    "Start directly with the commit type, e.g., 'feat(scope):'"
)

RETRY_ATTEMPTS = 3
RETRY_BASE_DELAY = 1.0  # seconds, doubled after each failed attempt


def validate_commit_message(content: str) -> tuple[bool, str]:
    """Validate that response looks like a proper commit message."""
    if not content or len(content.strip()) < 10:
        return False, "Response too short"

    types_pattern = '|'.join(COMMIT_TYPE_NAMES)
    pattern = rf'^({types_pattern})(\(.+\))?!?:'
    first_line = content.strip().split('\n')[0]

    if not re.match(pattern, first_line):
        return False, f"Missing conventional commit format. Got: {first_line[:50]}"

    return True, ""


@dataclass
class LLMResponse:
    """Structured response from any LLM provider."""
    content: str
    model: str = ""
    tokens_used: int = 0


class LLMError(Exception):
    """Raised when LLM operations fail."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class TransientLLMError(LLMError):
    """Rate limits, server errors and timeouts: worth retrying."""
    pass


def retry_request(func: Callable[[], T], attempts: int = RETRY_ATTEMPTS,
                  base_delay: float = RETRY_BASE_DELAY,
                  sleep: Callable[[float], None] = time.sleep) -> T:
    """Call func, retrying transient failures with exponential backoff.

    Non-transient LLMErrors (bad key, unknown model) are raised at once.
    """
    for attempt in range(attempts):
        try:
            return func()
        except TransientLLMError as e:
            if attempt == attempts - 1:
                raise
            delay = base_delay * (2 ** attempt)
            logger.warning(f"{e} - retrying in {delay:.0f}s ({attempt + 1}/{attempts - 1})")
            sleep(delay)
    raise LLMError("retry_request needs at least one attempt")


def post_json(url: str, payload: dict, headers: dict | None = None, timeout: float = 60) -> dict:
    """POST a JSON body and decode the JSON reply, mapping failures to LLMError."""
    data = json.dumps(payload).encode('utf-8')
    req = urllib.request.Request(
        url, data=data, headers={"Content-Type": "application/json", **(headers or {})},
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            return json.loads(response.read().decode('utf-8'))
    except urllib.error.HTTPError as e:
        if e.code == 429 or e.code >= 500:
            raise TransientLLMError(f"HTTP {e.code}: {e.reason}", status=e.code)
        raise LLMError(f"HTTP {e.code}: {e.reason}", status=e.code)
    except urllib.error.URLError as e:
        if isinstance(e.reason, TimeoutError):
            raise TransientLLMError(f"Request timed out after {timeout}s")
        raise LLMError(f"Request failed: {e.reason}")
    except TimeoutError:
        raise TransientLLMError(f"Request timed out after {timeout}s")
    except json.JSONDecodeError:
        raise LLMError("Invalid JSON in provider response")
    except (http.client.HTTPException, OSError) as e:
        raise TransientLLMError(f"Connection lost: {e}")


class LLMClient(ABC):
    """Abstract base for LLM clients.

    Subclasses implement ``_complete``; ``generate`` adds transient-error
    retries and re-prompts when the reply is not a conventional commit.
    Clients whose SDK already backs off set ``SDK_RETRIES``.
    """

    MAX_REPROMPTS = 2
    SDK_RETRIES = False

    @abstractmethod
    def _complete(self, prompt: str) -> LLMResponse:
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    def generate(self, prompt: str) -> LLMResponse:
        """Generate a message; the last reply is returned even if still invalid."""
        current = prompt
        for attempt in range(self.MAX_REPROMPTS + 1):
            if self.SDK_RETRIES:
                response = self._complete(current)
            else:
                response = retry_request(lambda: self._complete(current))
            is_valid, error = validate_commit_message(response.content)
            if is_valid or attempt == self.MAX_REPROMPTS:
                return response
            logger.debug(f"{self.name} returned an invalid message: {error}")
            current = prompt + REPROMPT_SUFFIX.format(error=error)
