"""Tests for report validation."""

import pytest
from pydantic import ValidationError

from agents.validator import ReportValidator, SchemaViolation, strip_code_fence
from fakes import APP_JSON, BRIEFING_JSON, PAPER_JSON, dumps
from models.report import Report, ReportSchema


@pytest.fixture
def single() -> ReportValidator:
    return ReportValidator(ReportSchema.single())


@pytest.fixture
def discovery() -> ReportValidator:
    return ReportValidator(ReportSchema.discovery("title", "summary", "value"))


class TestSingleVariant:
    def test_valid_report(self, single):
        outcome = single.validate(dumps(BRIEFING_JSON))

        assert outcome.ok
        report = outcome.unwrap()
        assert report.top_news_summary == BRIEFING_JSON["top_news_summary"]
        assert report.tiktok_strategy.hook == BRIEFING_JSON["tiktok_strategy"]["hook"]
        assert report.found is None
        assert not report.is_skip

    def test_invalid_json(self, single):
        outcome = single.validate("Sure! Here is your report: {")

        assert not outcome.ok
        assert "Invalid JSON" in outcome.violation.reason
        with pytest.raises(SchemaViolation):
            outcome.unwrap()

    def test_violation_keeps_raw_text(self, single):
        outcome = single.validate("not json")
        assert outcome.violation.raw_text == "not json"

    def test_empty_response(self, single):
        outcome = single.validate("   ")
        assert not outcome.ok
        assert outcome.violation.reason == "Empty response"

    def test_top_level_array(self, single):
        outcome = single.validate("[1, 2, 3]")
        assert not outcome.ok
        assert "JSON object" in outcome.violation.reason

    def test_missing_nested_field(self, single):
        data = {**BRIEFING_JSON, "tiktok_strategy": {"title": "t", "hook": "h"}}
        outcome = single.validate(dumps(data))

        assert not outcome.ok
        assert "tiktok_strategy.key_point" in outcome.violation.reason

    def test_blank_field_counts_as_missing(self, single):
        data = {**BRIEFING_JSON, "top_news_summary": "  "}
        outcome = single.validate(dumps(data))
        assert "top_news_summary" in outcome.violation.reason

    def test_wrong_type(self, single):
        data = {**BRIEFING_JSON, "tiktok_strategy": "just a string"}
        outcome = single.validate(dumps(data))
        assert not outcome.ok
        assert "Schema mismatch" in outcome.violation.reason

    def test_code_fence_is_stripped(self, single):
        outcome = single.validate(f"```json\n{dumps(BRIEFING_JSON)}\n```")
        assert outcome.ok

    def test_extra_keys_are_kept(self, single):
        data = {**BRIEFING_JSON, "mood": "bullish"}
        report = single.validate(dumps(data)).unwrap()
        assert report.lookup("mood") == "bullish"

    @pytest.mark.parametrize("flag", [False, "false", 0, "no"])
    def test_found_flag_never_skips_a_briefing(self, single, flag):
        report = single.validate(dumps({**BRIEFING_JSON, "found": flag})).unwrap()
        assert report.found is None
        assert not report.is_skip


class TestDualToneVariant:
    def test_requires_script(self):
        validator = ReportValidator(ReportSchema.dual_tone())
        outcome = validator.validate(dumps(BRIEFING_JSON))

        assert not outcome.ok
        assert "video_script.opening" in outcome.violation.reason

    def test_valid_with_script(self):
        validator = ReportValidator(ReportSchema.dual_tone())
        data = {
            **BRIEFING_JSON,
            "video_script": {"opening": "o", "body": "b", "call_to_action": "c"},
        }
        report = validator.validate(dumps(data)).unwrap()
        assert report.video_script.call_to_action == "c"


class TestDiscoveryVariant:
    def test_found_false_is_a_valid_skip(self, discovery):
        report = discovery.validate('{"found": false}').unwrap()
        assert report.is_skip

    def test_null_is_a_skip(self, discovery):
        report = discovery.validate("null").unwrap()
        assert report.is_skip

    def test_found_true(self, discovery):
        report = discovery.validate(dumps(PAPER_JSON)).unwrap()
        assert report.found is True
        assert report.title == PAPER_JSON["title"]

    def test_found_true_missing_fields(self, discovery):
        outcome = discovery.validate('{"found": true, "title": "x"}')
        assert not outcome.ok
        assert "summary" in outcome.violation.reason

    def test_null_optional_url(self, discovery):
        report = discovery.validate(dumps({**PAPER_JSON, "url": None})).unwrap()
        assert report.text("url") == ""

    def test_null_required_field(self, discovery):
        outcome = discovery.validate(dumps({**PAPER_JSON, "value": None}))
        assert "value" in outcome.violation.reason

    @pytest.mark.parametrize("flag", ["false", 0, "no"])
    def test_found_must_be_a_json_boolean(self, discovery, flag):
        outcome = discovery.validate(dumps({**PAPER_JSON, "found": flag}))
        assert not outcome.ok
        assert "found" in outcome.violation.reason

    def test_missing_found_flag(self, discovery):
        data = {k: v for k, v in PAPER_JSON.items() if k != "found"}
        outcome = discovery.validate(dumps(data))
        assert not outcome.ok
        assert "found" in outcome.violation.reason

    def test_app_shape(self):
        validator = ReportValidator(ReportSchema.discovery("name", "feature", "inspiration"))
        report = validator.validate(dumps(APP_JSON)).unwrap()
        assert report.name == "VoiceLedger"

    def test_null_outside_discovery_is_a_violation(self, single):
        assert not single.validate("null").ok


class TestStripCodeFence:
    def test_plain_text_untouched(self):
        assert strip_code_fence(' {"a": 1} ') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'


def test_report_found_is_strict():
    with pytest.raises(ValidationError):
        Report.model_validate({"found": "false"})
