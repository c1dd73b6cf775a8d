"""Generation client with one-shot model failover.

This module owns the only retry logic in the pipeline. Every flow calls
GenerationClient.generate() once; the returned text is then handed to the
ReportValidator.

Retry Policy:
    - Up to MAX_RETRIES attempts (default 3)
    - A failure is transient when it carries HTTP 503 or mentions
      "503"/"overloaded"; anything else is fatal and raised immediately
    - The first transient failure switches PRIMARY -> SECONDARY for the rest
      of the call; the selector never switches back
    - Before attempt i+1 the client waits base_delay * i (2s, 4s, ...)
    - Exhaustion raises TransientProviderError

JSON parsing happens outside this loop. A malformed answer is a contract
breach by the model and is never retried as provider overload.

Backends:
    GenerationBackend is a small protocol so the policy can be exercised
    without network access. GeminiBackend is the production backend
    (google-genai generate_content with a JSON response mime type).
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol

from google.genai import types
from pydantic_ai.providers.google import GoogleProvider

from config import Config

logger = logging.getLogger(__name__)

TRANSIENT_STATUS_CODES = frozenset({503})
TRANSIENT_MARKERS = ("503", "overloaded")


class TransientProviderError(Exception):
    """Raised when every attempt failed with a transient provider error.

    Attributes:
        attempts: Number of attempts made
        last_error: The final transient exception
    """

    def __init__(self, attempts: int, last_error: BaseException | None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Generation failed after {attempts} attempt(s): "
            f"{type(last_error).__name__ if last_error else 'unknown'}: {last_error}"
        )


class FatalProviderError(Exception):
    """Raised for non-retryable generation failures (auth, bad request, ...).

    Attributes:
        model_id: Model that produced the failure
    """

    def __init__(self, message: str, model_id: str = ""):
        self.model_id = model_id
        super().__init__(message)


def is_transient(error: BaseException) -> bool:
    """Classify a provider failure as transient overload.

    Checks a status_code attribute (PydanticAI ModelHTTPError) or a code
    attribute (google-genai APIError) and then falls back to message markers.
    """
    status = getattr(error, "status_code", None)
    if status is None:
        status = getattr(error, "code", None)
    if isinstance(status, int) and status in TRANSIENT_STATUS_CODES:
        return True
    message = str(error).lower()
    return any(marker in message for marker in TRANSIENT_MARKERS)


class ModelSlot(str, Enum):
    """Which configured model the selector currently points at."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


class ModelSelector:
    """Two-state model selector with a single PRIMARY -> SECONDARY transition.

    One selector is created per generate() call, so a failover never leaks
    into later calls.
    """

    def __init__(self, primary: str, secondary: str):
        self.primary = primary
        self.secondary = secondary
        self.slot = ModelSlot.PRIMARY

    @property
    def current(self) -> str:
        return self.primary if self.slot is ModelSlot.PRIMARY else self.secondary

    def fail_over(self) -> bool:
        """Switch to the secondary model.

        Returns:
            True if the switch happened, False if already on the secondary
        """
        if self.slot is ModelSlot.SECONDARY:
            return False
        self.slot = ModelSlot.SECONDARY
        return True


@dataclass(frozen=True)
class GenerationRequest:
    """One attempt's request. Only model_id may differ between attempts."""

    system_instruction: str
    user_prompt: str
    model_id: str


@dataclass(frozen=True)
class GenerationResult:
    """Raw model output plus the model and attempt that produced it."""

    text: str
    model_id: str
    attempts: int


class GenerationBackend(Protocol):
    """Provider call used by GenerationClient."""

    async def complete(self, request: GenerationRequest) -> str:
        """Return the raw response text for a request."""
        ...


class GeminiBackend:
    """Gemini backend requesting a bare JSON response.

    Every call sets response_mime_type="application/json" next to the
    system instruction, so the model answers with a JSON document instead
    of prose. Parsing stays in the validator. The google-genai client comes
    from the pydantic-ai GoogleProvider, which owns key handling and the
    HTTP client.
    """

    response_mime_type = "application/json"

    def __init__(self, api_key: str = "", client: Any = None):
        self._client = client if client is not None else GoogleProvider(api_key=api_key).client

    def config_for(self, request: GenerationRequest) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=request.system_instruction,
            response_mime_type=self.response_mime_type,
        )

    async def complete(self, request: GenerationRequest) -> str:
        response = await self._client.aio.models.generate_content(
            model=request.model_id,
            contents=request.user_prompt,
            config=self.config_for(request),
        )
        usage = getattr(response, "usage_metadata", None)
        if usage is not None:
            logger.debug(
                "Model call complete | model=%s input_tokens=%d output_tokens=%d",
                request.model_id,
                usage.prompt_token_count or 0,
                usage.candidates_token_count or 0,
            )
        return response.text or ""


class GenerationClient:
    """Invokes the generative model with failover and bounded backoff.

    Example:
        >>> client = GenerationClient.from_config(config)
        >>> result = await client.generate(prompt, system_instruction)
        >>> result.model_id
        'gemini-2.5-flash'
    """

    def __init__(
        self,
        backend: GenerationBackend,
        primary_model: str,
        secondary_model: str,
        max_retries: int = 3,
        base_delay: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_retries <= 0:
            raise ValueError("max_retries must be positive")
        self.backend = backend
        self.primary_model = primary_model
        self.secondary_model = secondary_model
        self.max_retries = max_retries
        self.base_delay = base_delay
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: Config) -> "GenerationClient":
        return cls(
            backend=GeminiBackend(config.gemini_api_key),
            primary_model=config.primary_model,
            secondary_model=config.secondary_model,
            max_retries=config.max_retries,
            base_delay=config.retry_base_delay,
        )

    def backoff(self, attempt_index: int) -> float:
        """Delay in seconds after a transient failure on attempt_index (1-based)."""
        return self.base_delay * attempt_index

    async def generate(self, prompt: str, system_instruction: str) -> GenerationResult:
        """Call the model, failing over once on overload.

        Args:
            prompt: User content (instructions plus aggregated context)
            system_instruction: Persona and JSON contract

        Returns:
            GenerationResult with the raw response text

        Raises:
            FatalProviderError: Non-transient failure, raised on first occurrence
            TransientProviderError: All attempts failed with transient errors
        """
        selector = ModelSelector(self.primary_model, self.secondary_model)
        last_error: BaseException | None = None

        for attempt in range(1, self.max_retries + 1):
            request = GenerationRequest(
                system_instruction=system_instruction,
                user_prompt=prompt,
                model_id=selector.current,
            )
            try:
                text = await self.backend.complete(request)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                if not is_transient(e):
                    logger.error(
                        "Generation failed | model=%s attempt=%d type=%s error=%s",
                        request.model_id, attempt, type(e).__name__, e,
                    )
                    raise FatalProviderError(
                        f"{type(e).__name__}: {e}", model_id=request.model_id
                    ) from e

                last_error = e
                logger.warning(
                    "Model busy | model=%s attempt=%d/%d error=%s",
                    request.model_id, attempt, self.max_retries, e,
                )
                if selector.fail_over():
                    logger.info(
                        "Model failover | from=%s to=%s",
                        selector.primary, selector.secondary,
                    )
                if attempt < self.max_retries:
                    delay = self.backoff(attempt)
                    logger.debug("Retrying in %.1fs", delay)
                    await self._sleep(delay)
                continue

            logger.info(
                "Generation complete | model=%s attempt=%d chars=%d",
                request.model_id, attempt, len(text or ""),
            )
            return GenerationResult(text=text or "", model_id=request.model_id, attempts=attempt)

        raise TransientProviderError(self.max_retries, last_error)
