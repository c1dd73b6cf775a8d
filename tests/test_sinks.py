"""Tests for the notification and persistence sinks."""

import asyncio

import aiohttp
import pytest

import notifications
import persistence
from fakes import APP_JSON, BRIEFING_JSON, PAPER_JSON, TODAY
from flows import APPS, BRIEFING, RESEARCH
from models.report import Report
from notifications import MAX_CONTENT_LENGTH, NotificationSink
from persistence import MAX_TEXT_LENGTH, PersistenceSink, truncate
from sinks import SinkError


class FakePost:
    def __init__(self, status: int = 200, error: Exception | None = None):
        self.status = status
        self.error = error
        self.calls = []

    async def __call__(self, url, payload, headers=None, timeout=30.0):
        self.calls.append({"url": url, "payload": payload, "headers": headers})
        if self.error:
            raise self.error
        return self.status, "{}"


def notification_sink(profile=BRIEFING) -> NotificationSink:
    return NotificationSink(
        "https://discord.example/webhook",
        label=profile.label,
        renderer=profile.renderer,
        mapping=profile.mapping,
        today=TODAY,
    )


def persistence_sink(profile=RESEARCH) -> PersistenceSink:
    return PersistenceSink(
        "secret_notion",
        "db-123",
        renderer=profile.renderer,
        mapping=profile.mapping,
        status="New",
        today=TODAY,
    )


def rich(payload, name: str) -> str:
    return payload.properties[name]["rich_text"][0]["text"]["content"]


class TestTruncate:
    def test_long_text_cut_to_exact_prefix(self):
        text = "".join(str(i % 10) for i in range(2500))
        assert truncate(text) == text[:2000]
        assert len(truncate(text)) == MAX_TEXT_LENGTH

    def test_short_text_unchanged(self):
        assert truncate("short") == "short"

    def test_none(self):
        assert truncate(None) == ""

    def test_emoji_counts_as_two_units(self):
        text = "📈" * 1500
        result = truncate(text)
        assert result == "📈" * 1000
        assert len(result.encode("utf-16-le")) // 2 == MAX_TEXT_LENGTH

    def test_surrogate_pair_never_split(self):
        text = "a" + "🚀" * 1500
        result = truncate(text)
        assert result == "a" + "🚀" * 999
        assert len(result.encode("utf-16-le")) // 2 == MAX_TEXT_LENGTH - 1


class TestNotificationSink:
    def test_briefing_message(self):
        report = Report.model_validate(BRIEFING_JSON)
        payload = notification_sink().render(report)

        assert payload.content.startswith("📅 **2025-12-15 金融行动简报**")
        assert "央行宣布降准0.5个百分点" in payload.content
        assert "> **Hook:** 今天这条新闻，关系到每个有房贷的人" in payload.content
        assert "增加房贷月供模拟器" in payload.content
        assert payload.to_json() == {"content": payload.content}

    def test_discovery_message(self):
        report = Report.model_validate(APP_JSON)
        payload = notification_sink(APPS).render(report)

        assert "🚀 [App] VoiceLedger" in payload.content
        assert "https://www.producthunt.com/posts/voiceledger" in payload.content

    def test_long_message_capped_for_discord(self):
        report = Report.model_validate({**BRIEFING_JSON, "top_news_summary": "降准" * 1500})
        payload = notification_sink().render(report)

        assert len(payload.content) == MAX_CONTENT_LENGTH
        assert payload.content.startswith("📅 **2025-12-15 金融行动简报**")
        assert payload.content.endswith("…")

    @pytest.mark.asyncio
    async def test_send_posts_content(self, monkeypatch):
        post = FakePost(status=204)
        monkeypatch.setattr(notifications, "post_json", post)
        sink = notification_sink()

        await sink.send(sink.render(Report.model_validate(BRIEFING_JSON)))

        assert post.calls[0]["url"] == "https://discord.example/webhook"
        assert list(post.calls[0]["payload"]) == ["content"]

    @pytest.mark.asyncio
    async def test_non_2xx_raises(self, monkeypatch):
        monkeypatch.setattr(notifications, "post_json", FakePost(status=400))
        sink = notification_sink()

        with pytest.raises(SinkError) as exc_info:
            await sink.send(sink.render(Report.model_validate(BRIEFING_JSON)))
        assert exc_info.value.sink == "notification"
        assert exc_info.value.status == 400

    @pytest.mark.asyncio
    async def test_timeout_raises(self, monkeypatch):
        monkeypatch.setattr(notifications, "post_json", FakePost(error=asyncio.TimeoutError()))
        sink = notification_sink()

        with pytest.raises(SinkError, match="timeout"):
            await sink.send(sink.render(Report.model_validate(BRIEFING_JSON)))


class TestPersistenceSink:
    def test_research_properties(self):
        payload = persistence_sink().render(Report.model_validate(PAPER_JSON))

        props = payload.properties
        assert props["Name"]["title"][0]["text"]["content"] == "📑 [Paper] Reasoning Memory for Financial Agents"
        assert props["Date"] == {"date": {"start": "2025-12-15"}}
        assert props["Status"] == {"select": {"name": "New"}}
        assert rich(payload, "Summary") == "提出一种长期记忆机制"
        assert rich(payload, "Value") == "降低了幻觉"
        assert rich(payload, "App Inspiration") == "暂无直接应用灵感"
        assert props["url"] == {"url": "https://arxiv.org/abs/2512.00001"}

    def test_apps_mapping(self):
        payload = persistence_sink(APPS).render(Report.model_validate(APP_JSON))

        assert payload.properties["Name"]["title"][0]["text"]["content"] == "🚀 [App] VoiceLedger"
        assert rich(payload, "Summary") == "语音记账"
        assert rich(payload, "Value") == "参考其交互设计"
        assert rich(payload, "App Inspiration") == "它的语音输入动画很棒"

    def test_non_http_url_becomes_null(self):
        report = Report.model_validate({**PAPER_JSON, "url": "arxiv 2512.00001"})
        payload = persistence_sink().render(report)
        assert payload.properties["url"] == {"url": None}

    def test_long_free_text_truncated(self):
        long_summary = "摘" * 1500 + "要" * 1500
        report = Report.model_validate({**PAPER_JSON, "summary": long_summary})
        payload = persistence_sink().render(report)

        assert rich(payload, "Summary") == long_summary[:2000]
        paragraph = next(b for b in payload.children if b["type"] == "paragraph")
        assert paragraph["paragraph"]["rich_text"][0]["text"]["content"] == long_summary[:2000]

    def test_blocks_are_ordered(self):
        payload = persistence_sink(BRIEFING).render(Report.model_validate(BRIEFING_JSON))

        types = [b["type"] for b in payload.children]
        assert types[0] == "heading_2"
        assert types[1] == "callout"
        assert "divider" in types
        assert "paragraph" in types
        assert payload.to_json()["parent"] == {"database_id": "db-123"}

    @pytest.mark.asyncio
    async def test_send_uses_notion_headers(self, monkeypatch):
        post = FakePost(status=200)
        monkeypatch.setattr(persistence, "post_json", post)
        sink = persistence_sink()

        await sink.send(sink.render(Report.model_validate(PAPER_JSON)))

        call = post.calls[0]
        assert call["url"] == persistence.NOTION_PAGES_URL
        assert call["headers"]["Authorization"] == "Bearer secret_notion"
        assert call["headers"]["Notion-Version"] == "2022-06-28"

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, monkeypatch):
        post = FakePost(error=aiohttp.ClientConnectionError("refused"))
        monkeypatch.setattr(persistence, "post_json", post)
        sink = persistence_sink()

        with pytest.raises(SinkError) as exc_info:
            await sink.send(sink.render(Report.model_validate(PAPER_JSON)))
        assert exc_info.value.sink == "persistence"
