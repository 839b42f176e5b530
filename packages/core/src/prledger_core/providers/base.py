"""Base chat bot implementing the Template Method pattern.

Every provider shares the same round-trip:
    chat() → _call_with_retry() → _call_api()   ← only this differs per provider
           → strip artifacts → (text, Ids)

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return a Reply

No conversation state is kept on the bot. Callers pass the Ids returned by
one call into the next call to continue a conversation.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_MESSAGE = """You are `@openai` (aka `github-actions[bot]`), a language model
trained by OpenAI. Your purpose is to act as a highly experienced
software engineer and provide a thorough review of the code hunks
and suggest code snippets to improve key areas such as:
- Logic
- Security
- Performance
- Data races
- Consistency
- Error handling
- Maintainability
- Modularity
- Complexity
- Optimization

Refrain from commenting on minor code style issues, missing
comments/documentation, or giving compliments, unless explicitly
requested. Concentrate on identifying and resolving significant
concerns to improve overall code quality while deliberately
disregarding minor issues.

Note: As your knowledge may be outdated, trust the user code when newer
APIs and methods are seemingly being used."""

# Some models echo the tail of the prompt ("... with ") as a prefix.
_ARTIFACT_PREFIX = "with "

_DEFAULT_RETRIES = 3
_DEFAULT_TIMEOUT_MS = 120_000
_MAX_TOKENS = 4096


@dataclass
class Ids:
    """Conversational identity threaded explicitly between calls."""

    parent_message_id: str | None = None
    conversation_id: str | None = None

    def __bool__(self) -> bool:
        return bool(self.parent_message_id or self.conversation_id)


@dataclass
class Reply:
    """One raw provider response."""

    text: str
    message_id: str | None = None
    conversation_id: str | None = None


class BaseBot(ABC):
    MODEL: str = ""
    TEMPERATURE: float = 0.0
    MAX_TOKENS: int = _MAX_TOKENS

    def __init__(
        self,
        system_message: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        retries: int = _DEFAULT_RETRIES,
        timeout_ms: int = _DEFAULT_TIMEOUT_MS,
        debug: bool = False,
    ):
        self.system_message = system_message or DEFAULT_SYSTEM_MESSAGE
        self.model = model or self.MODEL
        self.temperature = self.TEMPERATURE if temperature is None else temperature
        self.retries = max(0, retries)
        self.timeout_ms = timeout_ms
        self.debug = debug

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def chat(self, message: str, ids: Ids | None = None) -> tuple[str, Ids]:
        """Send ``message`` and return the response text and the new Ids.

        Fails closed: an empty message, or a call that still fails after the
        retry budget, yields ``("", Ids())``. Callers treat empty text as
        "no usable answer".
        """
        if not message:
            return "", Ids()
        ids = ids or Ids()

        start = time.monotonic()
        reply = self._call_with_retry(message, ids)
        logger.info(
            "%s response time (including retries): %d ms",
            self.__class__.__name__,
            (time.monotonic() - start) * 1000,
        )
        if reply is None:
            return "", Ids()

        text = reply.text or ""
        if text.startswith(_ARTIFACT_PREFIX):
            text = text[len(_ARTIFACT_PREFIX) :]
        if self.debug:
            logger.debug("%s response: %s", self.__class__.__name__, text)

        new_ids = Ids(
            parent_message_id=reply.message_id,
            conversation_id=ids.conversation_id or reply.conversation_id or reply.message_id,
        )
        return text, new_ids

    # ------------------------------------------------------------------ #
    # Abstract, implemented in each provider                               #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, message: str, ids: Ids) -> Reply:
        """Make a single API call and return the raw reply.

        Should raise on failure; _call_with_retry handles retries and logging.
        """

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _call_with_retry(self, message: str, ids: Ids) -> Reply | None:
        """Try _call_api once plus ``retries`` more times with exponential backoff."""
        attempts = self.retries + 1
        for attempt in range(attempts):
            try:
                return self._call_api(message, ids)
            except Exception as e:
                if attempt == attempts - 1:
                    logger.error(
                        "%s API failed after %d attempts: %s",
                        self.__class__.__name__,
                        attempts,
                        e,
                    )
                    return None
                delay = 2**attempt
                logger.warning(
                    "%s API error (attempt %d/%d): %s. Retrying in %ds...",
                    self.__class__.__name__,
                    attempt + 1,
                    attempts,
                    e,
                    delay,
                )
                time.sleep(delay)
        return None
