"""Pydantic models for the Scout pipeline.

SearchResult:
    Ranked web-search hit (title, content, published_date, url).

Report:
    Validated JSON report from the model, shared by all flows.

ReportSchema / ReportVariant:
    Expected report shape per flow (single, dual_tone, discovery).

Example:
    >>> from models import Report, ReportSchema
    >>> schema = ReportSchema.discovery("title", "summary", "value")
"""

from models.search import SearchResult
from models.report import (
    FeatureOpportunity,
    Report,
    ReportSchema,
    ReportVariant,
    VideoScript,
    VideoStrategy,
)

__all__ = [
    "SearchResult",
    "Report",
    "ReportSchema",
    "ReportVariant",
    "VideoStrategy",
    "FeatureOpportunity",
    "VideoScript",
]
