"""Client for the external LLM that produces the intake QA verdict."""

import asyncio
import logging
from typing import Any

from google import genai
from google.genai import types
from intake_qa.core import utils
from intake_qa.schemas import decision as decision_lib

Decision = decision_lib.Decision
QAStatus = decision_lib.QAStatus
RiskLevel = decision_lib.RiskLevel
GenerateContentConfig = types.GenerateContentConfig


class DecisionServiceError(Exception):
  """Raised when the decision service cannot be reached or fails."""

  def __init__(self, message: str, error_type: str):
    super().__init__(message)
    self.error_type = error_type


def create_genai_client(settings: Any) -> genai.Client:
  """Builds a google-genai client for either Vertex AI or the Gemini API."""
  if settings.GOOGLE_GENAI_USE_VERTEX_AI.strip().lower() in ("1", "true"):
    return genai.Client(
        vertexai=True,
        project=settings.GOOGLE_PROJECT_ID,
        location=settings.GOOGLE_LOCATION,
    )
  return genai.Client(api_key=settings.GOOGLE_API_KEY)


def _coerce_enum(enum_cls, value: Any, default):
  text = utils.coerce_text(value)
  if text is None:
    return default
  try:
    return enum_cls(text.upper())
  except ValueError:
    logging.warning(
        "DECISION_SERVICE: Unexpected %s value %r. Using %s.",
        enum_cls.__name__,
        text,
        default.value,
    )
    return default


def build_decision(payload: dict[str, Any], text_budget: int) -> Decision:
  """Turns a parsed model reply into a Decision, filling in defaults.

  Args:
    payload: The parsed JSON object from the model. May be empty.
    text_budget: Character budget for the summary and advisory notes.

  Returns:
    A fully populated Decision.
  """
  summary = utils.coerce_text(payload.get("QA_Summary"))
  advisory = utils.coerce_text(payload.get("QA_Advisory_Notes"))
  findings = utils.coerce_string_list(payload.get("QA_Key_Findings"))
  return Decision(
      status=_coerce_enum(QAStatus, payload.get("QA_Status"), QAStatus.REVIEW),
      risk_level=_coerce_enum(
          RiskLevel, payload.get("QA_Risk_Level"), RiskLevel.MEDIUM
      ),
      summary=utils.clamp_text(
          summary or decision_lib.DEFAULT_SUMMARY, text_budget
      ),
      key_findings=findings or [decision_lib.DEFAULT_FINDING],
      concerns=utils.coerce_string_list(payload.get("QA_Concerns")),
      advisory_notes=utils.clamp_text(
          advisory or decision_lib.DEFAULT_ADVISORY, text_budget
      ),
  )


def parse_decision(text: str | None, text_budget: int) -> Decision:
  """Parses a raw model reply; unparseable replies yield the defaults."""
  return build_decision(utils.extract_json_object(text), text_budget)


class DecisionClient:
  """Sends a rendered applicant context to the model and parses its verdict.

  The instruction text is opaque configuration; this class only owns the
  transport and the shape of the result.
  """

  def __init__(
      self,
      client: genai.Client,
      instructions: str,
      model: str,
      temperature: float = 0.0,
      timeout_seconds: float = 30.0,
      text_budget: int = 200,
  ):
    self.client = client
    self.instructions = instructions
    self.model = model
    self.temperature = temperature
    self.timeout_seconds = timeout_seconds
    self.text_budget = text_budget
    logging.info("DECISION_SERVICE: Client initialized for model %s.", model)

  async def _generate(self, context: str) -> str | None:
    response = await self.client.aio.models.generate_content(
        model=self.model,
        contents=context,
        config=GenerateContentConfig(
            system_instruction=self.instructions,
            temperature=self.temperature,
            response_mime_type="application/json",
        ),
    )
    return response.text

  async def decide(self, context: str) -> Decision:
    """Requests a QA verdict for one rendered applicant context.

    Args:
      context: The rendered applicant report.

    Returns:
      The post-processed Decision.

    Raises:
      DecisionServiceError: If the call fails or times out.
    """
    logging.info(
        "DECISION_SERVICE: Requesting verdict (%d chars of context).",
        len(context),
    )
    try:
      text = await asyncio.wait_for(
          self._generate(context), timeout=self.timeout_seconds
      )
    except asyncio.TimeoutError as e:
      raise DecisionServiceError(
          f"Decision service timed out after {self.timeout_seconds}s",
          "TimeoutError",
      ) from e
    except Exception as e:  # pylint: disable=broad-exception-caught
      logging.exception("DECISION_SERVICE: Request failed: %s", e)
      raise DecisionServiceError(
          str(e) or type(e).__name__, type(e).__name__
      ) from e

    decision = parse_decision(text, self.text_budget)
    logging.info(
        "DECISION_SERVICE: Verdict %s / %s.",
        decision.status.value,
        decision.risk_level.value,
    )
    return decision
