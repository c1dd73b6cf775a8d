"""Report validation for raw model output.

The validator turns the model's raw text into a Report or a SchemaViolation.
It never raises on bad input; callers receive a ValidationOutcome and decide
whether to unwrap it. This keeps a contract bug (bad JSON, missing fields)
separate from provider failures handled by the generation client.

Discovery Variant:
    {"found": false} is a legitimate terminal answer ("nothing worth
    reporting today") and validates successfully. A bare JSON null is read
    the same way, since the discovery prompts allow the model to return it.

Single and Dual-Tone Variants:
    These always persist. A stray "found" key in the model output is
    dropped, so it can never turn a briefing into a skip.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from models.report import Report, ReportSchema

logger = logging.getLogger(__name__)


class SchemaViolation(Exception):
    """Generation succeeded but the output breaks the JSON contract.

    Attributes:
        reason: What was wrong with the output
        raw_text: The offending model output
    """

    def __init__(self, reason: str, raw_text: str = ""):
        self.reason = reason
        self.raw_text = raw_text
        super().__init__(reason)


@dataclass(frozen=True)
class ValidationOutcome:
    """Either a validated Report or the SchemaViolation that rejected it."""

    report: Report | None = None
    violation: SchemaViolation | None = None

    @property
    def ok(self) -> bool:
        return self.report is not None

    def unwrap(self) -> Report:
        """Return the report or raise the violation."""
        if self.report is None:
            raise self.violation or SchemaViolation("No report produced")
        return self.report


def strip_code_fence(text: str) -> str:
    """Remove a single surrounding markdown code fence, if present."""
    content = text.strip()
    if content.startswith("```"):
        content = content[3:]
        if content.lower().startswith("json"):
            content = content[4:]
        if content.rstrip().endswith("```"):
            content = content.rstrip()[:-3]
    return content.strip()


class ReportValidator:
    """Parses and shape-checks model output against a ReportSchema.

    Example:
        >>> validator = ReportValidator(ReportSchema.single())
        >>> outcome = validator.validate(raw_text)
        >>> report = outcome.unwrap()  # raises SchemaViolation on bad output
    """

    def __init__(self, schema: ReportSchema):
        self.schema = schema

    def _reject(self, reason: str, raw_text: str) -> ValidationOutcome:
        logger.warning("Report rejected | variant=%s reason=%s", self.schema.variant.value, reason)
        return ValidationOutcome(violation=SchemaViolation(reason, raw_text))

    def validate(self, raw_text: str) -> ValidationOutcome:
        """Validate raw model output.

        Args:
            raw_text: Response text from the generation client

        Returns:
            ValidationOutcome holding a Report or a SchemaViolation
        """
        content = strip_code_fence(raw_text or "")
        if not content:
            return self._reject("Empty response", raw_text)

        try:
            data: Any = json.loads(content)
        except json.JSONDecodeError as e:
            return self._reject(f"Invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})", raw_text)

        if data is None and self.schema.is_discovery:
            data = {"found": False}
        if not isinstance(data, dict):
            return self._reject(f"Expected a JSON object, got {type(data).__name__}", raw_text)

        if self.schema.is_discovery:
            found = data.get("found")
            if not isinstance(found, bool):
                return self._reject("Discovery report must carry a boolean 'found'", raw_text)
            if found is False:
                return ValidationOutcome(report=Report(found=False))
        elif "found" in data:
            # Single and dual-tone reports always persist
            data = {k: v for k, v in data.items() if k != "found"}

        try:
            report = Report.model_validate(data)
        except ValidationError as e:
            return self._reject(f"Schema mismatch: {e.error_count()} error(s): {e.errors()[0]['msg']}", raw_text)

        missing = self.schema.missing_fields(report)
        if missing:
            return self._reject(f"Missing required fields: {', '.join(missing)}", raw_text)

        return ValidationOutcome(report=report)
