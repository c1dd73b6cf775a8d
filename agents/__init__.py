"""Generation and validation for the Scout pipeline.

GenerationClient:
    Calls Gemini with a JSON-only contract, one-shot model failover and
    bounded backoff.

ReportValidator:
    Parses raw model output into a Report or a SchemaViolation.

Example:
    >>> from agents import GenerationClient, ReportValidator
    >>> client = GenerationClient.from_config(config)
    >>> result = await client.generate(prompt, instruction)
    >>> report = ReportValidator(schema).validate(result.text).unwrap()
"""

from agents.generator import (
    FatalProviderError,
    GenerationClient,
    GenerationResult,
    TransientProviderError,
)
from agents.validator import ReportValidator, SchemaViolation, ValidationOutcome

__all__ = [
    "GenerationClient",
    "GenerationResult",
    "TransientProviderError",
    "FatalProviderError",
    "ReportValidator",
    "SchemaViolation",
    "ValidationOutcome",
]
