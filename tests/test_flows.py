"""Tests for flow profiles and renderers."""

from datetime import date

import pytest

from fakes import BRIEFING_JSON
from flows import APPS, BRIEFING, FLOWS, RESEARCH, SCRIPT, get_flows
from models.report import Report, ReportVariant
from rendering import BriefingRenderer, DiscoveryRenderer


def test_all_flows_registered():
    assert set(FLOWS) == {"briefing", "script", "research", "apps"}


def test_variants():
    assert BRIEFING.schema.variant is ReportVariant.SINGLE
    assert SCRIPT.schema.variant is ReportVariant.DUAL_TONE
    assert RESEARCH.schema.variant is ReportVariant.DISCOVERY
    assert APPS.schema.variant is ReportVariant.DISCOVERY


def test_renderer_per_variant():
    assert isinstance(BRIEFING.renderer, BriefingRenderer)
    assert isinstance(SCRIPT.renderer, BriefingRenderer)
    assert isinstance(APPS.renderer, DiscoveryRenderer)


def test_query_follows_calendar():
    assert APPS.search_query(date(2026, 3, 4)) == (
        "top trending new AI developer tools Product Hunt GitHub released March 2026"
    )


def test_instruction_keeps_json_braces():
    instruction = RESEARCH.instruction(date(2026, 3, 4))
    assert "2026年3月" in instruction
    assert '{ "found": false }' in instruction


def test_briefing_instruction_has_schema():
    instruction = BRIEFING.instruction(date(2026, 3, 4))
    assert '"top_news_summary"' in instruction
    assert "一人公司" in instruction


def test_get_flows_preserves_order():
    assert [p.name for p in get_flows(["apps", "research"])] == ["apps", "research"]


def test_get_flows_unknown():
    with pytest.raises(KeyError, match="weather"):
        get_flows(["research", "weather"])


def test_briefing_record_fields():
    fields = BRIEFING.renderer.record_fields(Report.model_validate(BRIEFING_JSON), BRIEFING.mapping)

    assert fields.title == "📅 [Briefing] 降准了，你的房贷会变吗？"
    assert fields.summary == "央行宣布降准0.5个百分点"
    assert fields.value == "降准释放流动性，不等于直接降息"
    assert fields.inspiration == "增加房贷月供模拟器"
    assert fields.url == ""


def test_missing_title_falls_back():
    fields = RESEARCH.renderer.record_fields(Report(found=True, summary="s", value="v"), RESEARCH.mapping)
    assert fields.title == "📑 [Paper] 未知条目"


def test_script_message_includes_long_form():
    report = Report.model_validate({
        **BRIEFING_JSON,
        "video_script": {"opening": "开场白", "body": "正文", "call_to_action": "关注我"},
    })
    lines = SCRIPT.renderer.message_lines(report, SCRIPT.mapping)
    assert "> **开场:** 开场白" in lines
    assert "> **结尾:** 关注我" in lines
