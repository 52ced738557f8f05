"""Unit tests for decision parsing, clamping and the model client"""

import json

import aiohttp
import pytest

from intake_qa.core import utils
from intake_qa.schemas import decision as decision_lib
from intake_qa.services import decision_service

from conftest import PASS_REPLY, StubDecisionClient

QAStatus = decision_lib.QAStatus
RiskLevel = decision_lib.RiskLevel


class TestClampText:

  def test_short_text_is_unchanged(self):
    assert utils.clamp_text("Fine.", 200) == "Fine."

  def test_cuts_after_last_sentence_within_budget(self):
    text = "a" * 150 + "." + "b" * 99
    assert len(text) == 250
    assert utils.clamp_text(text, 200) == text[:151]

  def test_prefers_last_terminator(self):
    text = "One. Two! Three? " + "x" * 300
    assert utils.clamp_text(text, 200) == "One. Two! Three?"

  def test_falls_back_to_ellipsis(self):
    clamped = utils.clamp_text("x" * 250, 200)
    assert len(clamped) == 200
    assert clamped.endswith("...")

  @pytest.mark.parametrize("length", [201, 250, 1000])
  @pytest.mark.parametrize("filler", ["word ", "Sentence one. ", "Wow! ok "])
  def test_clamped_output_respects_budget(self, length, filler):
    text = (filler * length)[:length]
    clamped = utils.clamp_text(text, 200)
    assert len(clamped) <= 200
    assert clamped.endswith((".", "!", "?", "..."))

  @pytest.mark.parametrize("budget", [0, 1, 2, 3, 4])
  def test_tiny_budget_never_overflows(self, budget):
    clamped = utils.clamp_text("x" * 50, budget)
    assert len(clamped) <= budget

  def test_zero_budget_is_empty(self):
    assert utils.clamp_text("Anything at all.", 0) == ""


class TestParseDecision:

  def test_full_reply_is_echoed(self):
    decision = decision_service.parse_decision(json.dumps(PASS_REPLY), 200)
    assert decision.to_wire() == PASS_REPLY

  @pytest.mark.parametrize("reply", [None, "", "not json", "[1, 2]", "42"])
  def test_unparseable_reply_yields_defaults(self, reply):
    decision = decision_service.parse_decision(reply, 200)
    assert decision.status == QAStatus.REVIEW
    assert decision.risk_level == RiskLevel.MEDIUM
    assert decision.key_findings == [decision_lib.DEFAULT_FINDING]
    assert decision.concerns == []

  def test_json_inside_code_fence(self):
    reply = "```json\n" + json.dumps(PASS_REPLY) + "\n```"
    assert decision_service.parse_decision(reply, 200).status == QAStatus.PASS

  def test_invalid_enum_and_list_values_are_defaulted(self):
    reply = json.dumps({
        "QA_Status": "MAYBE",
        "QA_Risk_Level": "low",
        "QA_Key_Findings": [],
        "QA_Concerns": "not a list",
    })
    decision = decision_service.parse_decision(reply, 200)
    assert decision.status == QAStatus.REVIEW
    assert decision.risk_level == RiskLevel.LOW
    assert decision.key_findings == [decision_lib.DEFAULT_FINDING]
    assert decision.concerns == []

  def test_list_items_are_cleaned(self):
    reply = json.dumps({"QA_Concerns": ["  Missing GPA ", "", None, 3]})
    decision = decision_service.parse_decision(reply, 200)
    assert decision.concerns == ["Missing GPA", "3"]

  def test_long_text_fields_are_clamped(self):
    reply = json.dumps({
        "QA_Summary": "a" * 150 + "." + "b" * 99,
        "QA_Advisory_Notes": "z" * 400,
    })
    decision = decision_service.parse_decision(reply, 200)
    assert len(decision.summary) == 151
    assert len(decision.advisory_notes) <= 200
    assert decision.advisory_notes.endswith("...")


class TestDecisionClient:

  @pytest.mark.asyncio
  async def test_decide_returns_parsed_decision(self):
    client = StubDecisionClient()
    decision = await client.decide("context")
    assert decision.status == QAStatus.PASS
    assert client.contexts == ["context"]

  @pytest.mark.asyncio
  async def test_network_error_raises_service_error(self):
    client = StubDecisionClient(
        error=aiohttp.ClientConnectionError("Connection refused")
    )
    with pytest.raises(decision_service.DecisionServiceError) as excinfo:
      await client.decide("context")
    assert excinfo.value.error_type == "ClientConnectionError"
    assert "Connection refused" in str(excinfo.value)

  @pytest.mark.asyncio
  async def test_timeout_raises_service_error(self):
    client = StubDecisionClient(delay=1.0, timeout_seconds=0.01)
    with pytest.raises(decision_service.DecisionServiceError) as excinfo:
      await client.decide("context")
    assert excinfo.value.error_type == "TimeoutError"

  @pytest.mark.asyncio
  async def test_generate_sends_instructions_and_json_mode(self):
    captured = {}

    class _Models:
      async def generate_content(self, **kwargs):
        captured.update(kwargs)

        class _Response:
          text = json.dumps(PASS_REPLY)

        return _Response()

    class _Aio:
      models = _Models()

    class _GenaiClient:
      aio = _Aio()

    client = decision_service.DecisionClient(
        client=_GenaiClient(), instructions="rules", model="gemini-test"
    )
    decision = await client.decide("report")

    assert decision.status == QAStatus.PASS
    assert captured["model"] == "gemini-test"
    assert captured["contents"] == "report"
    config = captured["config"]
    assert config.system_instruction == "rules"
    assert config.temperature == 0.0
    assert config.response_mime_type == "application/json"


def test_failed_decision_has_safe_defaults():
  decision = decision_lib.failed_decision()
  wire = decision.to_wire()
  assert wire["QA_Status"] == "REVIEW"
  assert wire["QA_Risk_Level"] == "MEDIUM"
  assert wire["QA_Key_Findings"] == [decision_lib.DEFAULT_FINDING]
  assert wire["QA_Summary"] == decision_lib.FAILED_SUMMARY
