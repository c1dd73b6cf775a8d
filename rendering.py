"""Report renderers shared by the notification and persistence sinks.

Each Report shape has one renderer. A renderer turns a validated Report
into neutral pieces (chat lines, record fields, content blocks); the sinks
translate those pieces into their own wire formats. Adding a variant means
adding a renderer here, not touching the sinks or the pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum

from models.report import Report, ReportVariant


@dataclass(frozen=True)
class FieldSource:
    """Where a record field comes from: a dotted report path or a constant."""

    path: str = ""
    default: str = ""

    def resolve(self, report: Report) -> str:
        if not self.path:
            return self.default
        return report.text(self.path, self.default)


@dataclass(frozen=True)
class RecordMapping:
    """How a Report fills the persisted record's properties.

    Attributes:
        title_prefix: Prepended to the resolved title (e.g. '📑 [Paper] ')
        title: Source of the record title
        summary: Source of the Summary property
        value: Source of the Value property
        inspiration: Source of the App Inspiration property
        url: Source of the url property
    """

    title_prefix: str = ""
    title: FieldSource = field(default_factory=lambda: FieldSource("title", "未知条目"))
    summary: FieldSource = field(default_factory=lambda: FieldSource("summary"))
    value: FieldSource = field(default_factory=lambda: FieldSource("value"))
    inspiration: FieldSource = field(default_factory=lambda: FieldSource("inspiration"))
    url: FieldSource = field(default_factory=lambda: FieldSource("url"))


@dataclass(frozen=True)
class RecordFields:
    """Flat record properties rendered from a report."""

    title: str
    summary: str
    value: str
    inspiration: str
    url: str


class BlockKind(str, Enum):
    HEADING = "heading"
    CALLOUT = "callout"
    PARAGRAPH = "paragraph"
    DIVIDER = "divider"


@dataclass(frozen=True)
class Block:
    """One content block of a persisted record."""

    kind: BlockKind
    text: str = ""
    icon: str = ""


def _divider() -> Block:
    return Block(BlockKind.DIVIDER)


class ReportRenderer:
    """Base renderer; subclasses handle one Report shape."""

    def message_lines(self, report: Report, mapping: RecordMapping) -> list[str]:
        raise NotImplementedError

    def blocks(self, report: Report, mapping: RecordMapping) -> list[Block]:
        raise NotImplementedError

    def record_fields(self, report: Report, mapping: RecordMapping) -> RecordFields:
        title = mapping.title.resolve(report) or "未知条目"
        return RecordFields(
            title=f"{mapping.title_prefix}{title}",
            summary=mapping.summary.resolve(report),
            value=mapping.value.resolve(report),
            inspiration=mapping.inspiration.resolve(report),
            url=mapping.url.resolve(report),
        )


class BriefingRenderer(ReportRenderer):
    """Daily briefing: headline, short-video strategy, app opportunity.

    Also renders the long-form script when the report carries one, which
    covers the dual-tone variant.
    """

    def message_lines(self, report: Report, mapping: RecordMapping) -> list[str]:
        lines = [
            f"🗞️ **今日热点:** {report.top_news_summary}",
            "",
            "🎬 **抖音策略:**",
            f"> **标题:** {report.text('tiktok_strategy.title')}",
            f"> **Hook:** {report.text('tiktok_strategy.hook')}",
            f"> **知识点:** {report.text('tiktok_strategy.key_point')}",
            "",
            "📱 **App 机会:**",
            report.text("app_feature_opportunity.action"),
        ]
        if report.video_script:
            lines.extend([
                "",
                "🎥 **长视频脚本:**",
                f"> **开场:** {report.video_script.opening}",
                f"> **正文:** {report.video_script.body}",
                f"> **结尾:** {report.video_script.call_to_action}",
            ])
        return lines

    def blocks(self, report: Report, mapping: RecordMapping) -> list[Block]:
        blocks = [
            Block(BlockKind.HEADING, "今日热点"),
            Block(BlockKind.CALLOUT, report.top_news_summary, icon="🗞️"),
            _divider(),
            Block(BlockKind.HEADING, "抖音策略"),
            Block(BlockKind.PARAGRAPH, f"标题：{report.text('tiktok_strategy.title')}"),
            Block(BlockKind.CALLOUT, report.text("tiktok_strategy.hook"), icon="🎬"),
            Block(BlockKind.PARAGRAPH, f"知识点：{report.text('tiktok_strategy.key_point')}"),
            _divider(),
            Block(BlockKind.HEADING, "App 机会"),
            Block(BlockKind.PARAGRAPH, f"洞察：{report.text('app_feature_opportunity.insight')}"),
            Block(BlockKind.CALLOUT, report.text("app_feature_opportunity.action"), icon="📱"),
        ]
        if report.video_script:
            blocks.extend([
                _divider(),
                Block(BlockKind.HEADING, "长视频脚本"),
                Block(BlockKind.PARAGRAPH, report.video_script.opening),
                Block(BlockKind.PARAGRAPH, report.video_script.body),
                Block(BlockKind.CALLOUT, report.video_script.call_to_action, icon="📣"),
            ])
        return blocks


class DiscoveryRenderer(ReportRenderer):
    """Single discovered paper or product."""

    def message_lines(self, report: Report, mapping: RecordMapping) -> list[str]:
        fields = self.record_fields(report, mapping)
        lines = [f"**{fields.title}**"]
        if fields.summary:
            lines.append(fields.summary)
        if fields.value:
            lines.append(f"💡 {fields.value}")
        if fields.inspiration:
            lines.append(f"✨ {fields.inspiration}")
        if fields.url:
            lines.append(f"🔗 {fields.url}")
        return lines

    def blocks(self, report: Report, mapping: RecordMapping) -> list[Block]:
        fields = self.record_fields(report, mapping)
        blocks = [
            Block(BlockKind.HEADING, "摘要"),
            Block(BlockKind.PARAGRAPH, fields.summary),
            _divider(),
            Block(BlockKind.HEADING, "价值"),
            Block(BlockKind.CALLOUT, fields.value, icon="💡"),
        ]
        if fields.inspiration:
            blocks.extend([
                Block(BlockKind.HEADING, "App 灵感"),
                Block(BlockKind.CALLOUT, fields.inspiration, icon="✨"),
            ])
        return blocks


_RENDERERS: dict[ReportVariant, ReportRenderer] = {
    ReportVariant.SINGLE: BriefingRenderer(),
    ReportVariant.DUAL_TONE: BriefingRenderer(),
    ReportVariant.DISCOVERY: DiscoveryRenderer(),
}


def renderer_for(variant: ReportVariant) -> ReportRenderer:
    """Return the renderer for a report variant."""
    return _RENDERERS[variant]
