"""Report models produced by the generation stage.

All flows share one configurable Report schema instead of one model per
flow. The shape a flow expects is described by a ReportSchema: a variant
plus the dotted field paths that must be present and non-empty.

Variants:
    single: Daily briefing (headline, short-video strategy, app opportunity)
    dual_tone: Briefing plus a long-form video script
    discovery: Filtered discovery; the model may answer {"found": false}

A Report is only ever built by the validator, and it is the sole input to
every sink renderer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class VideoStrategy(BaseModel):
    """Short-form video plan derived from the day's news."""

    title: str = Field(default="", description="Attention-grabbing video title")
    hook: str = Field(default="", description="Copy for the first three seconds")
    key_point: str = Field(default="", description="Single core talking point")


class FeatureOpportunity(BaseModel):
    """Product feature opportunity for the operator's app."""

    insight: str = Field(default="", description="New user need implied by the news")
    action: str = Field(default="", description="Concrete feature to change")


class VideoScript(BaseModel):
    """Long-form video script."""

    opening: str = Field(default="", description="Opening segment")
    body: str = Field(default="", description="Main segment")
    call_to_action: str = Field(default="", description="Closing call to action")


class Report(BaseModel):
    """Validated JSON report returned by the generative model.

    Fields are optional at the model level; which ones are required depends
    on the flow's ReportSchema. Unknown keys returned by the model are kept.

    Attributes:
        top_news_summary: One-line summary of the day's most important news
        tiktok_strategy: Short-form video plan
        app_feature_opportunity: App feature insight and action
        video_script: Optional long-form script
        found: Discovery flag; only a real JSON boolean is accepted and it is
            None for variants without the flag
        title, name, url, summary, value, feature, inspiration:
            Discovery fields for papers and products
    """

    model_config = ConfigDict(extra="allow")

    top_news_summary: str = ""
    tiktok_strategy: VideoStrategy | None = None
    app_feature_opportunity: FeatureOpportunity | None = None
    video_script: VideoScript | None = None

    found: StrictBool | None = None
    title: str | None = None
    name: str | None = None
    url: str | None = None
    summary: str | None = None
    value: str | None = None
    feature: str | None = None
    inspiration: str | None = None

    @property
    def is_skip(self) -> bool:
        """True when the model explicitly reported nothing worth sending."""
        return self.found is False

    def lookup(self, path: str) -> Any:
        """Resolve a dotted field path such as 'tiktok_strategy.hook'.

        Returns:
            The field value, or None if any segment is missing
        """
        node: Any = self
        for part in path.split("."):
            if node is None:
                return None
            if isinstance(node, BaseModel):
                node = getattr(node, part, None)
            elif isinstance(node, dict):
                node = node.get(part)
            else:
                return None
        return node

    def text(self, path: str, default: str = "") -> str:
        """Resolve a dotted path as a string, falling back to default."""
        value = self.lookup(path)
        if value is None or value == "":
            return default
        return str(value)

    def __str__(self) -> str:
        """Human-readable representation for logging."""
        headline = self.top_news_summary or self.title or self.name or ""
        if self.is_skip:
            return "Report(found=False)"
        return f"Report('{headline[:50]}')"


class ReportVariant(str, Enum):
    """Report shapes supported by the pipeline."""

    SINGLE = "single"
    DUAL_TONE = "dual_tone"
    DISCOVERY = "discovery"


SINGLE_REQUIRED = (
    "top_news_summary",
    "tiktok_strategy.title",
    "tiktok_strategy.hook",
    "tiktok_strategy.key_point",
    "app_feature_opportunity.insight",
    "app_feature_opportunity.action",
)

DUAL_TONE_REQUIRED = SINGLE_REQUIRED + (
    "video_script.opening",
    "video_script.body",
    "video_script.call_to_action",
)


@dataclass(frozen=True)
class ReportSchema:
    """Expected Report shape for one flow.

    For the discovery variant the required paths only apply when the
    model reports found=true.

    Attributes:
        variant: Report variant
        required: Dotted paths that must resolve to non-empty strings
    """

    variant: ReportVariant
    required: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def single(cls) -> "ReportSchema":
        return cls(ReportVariant.SINGLE, SINGLE_REQUIRED)

    @classmethod
    def dual_tone(cls) -> "ReportSchema":
        return cls(ReportVariant.DUAL_TONE, DUAL_TONE_REQUIRED)

    @classmethod
    def discovery(cls, *required: str) -> "ReportSchema":
        return cls(ReportVariant.DISCOVERY, tuple(required))

    @property
    def is_discovery(self) -> bool:
        return self.variant is ReportVariant.DISCOVERY

    def missing_fields(self, report: Report) -> list[str]:
        """List required paths that are absent or blank in a report."""
        missing = []
        for path in self.required:
            value = report.lookup(path)
            if not isinstance(value, str) or not value.strip():
                missing.append(path)
        return missing
