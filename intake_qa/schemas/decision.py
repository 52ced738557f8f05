"""Pydantic schemas for the QA decision and the webhook responses."""

import enum

import pydantic

Field = pydantic.Field
BaseModel = pydantic.BaseModel
ConfigDict = pydantic.ConfigDict

DEFAULT_FINDING = "Application received for review."
DEFAULT_SUMMARY = "Intake QA review completed."
DEFAULT_ADVISORY = "No advisory notes."
FAILED_SUMMARY = (
    "Automated intake QA could not be completed. Manual review required."
)


class QAStatus(str, enum.Enum):
  PASS = "PASS"
  REVIEW = "REVIEW"
  FAIL = "FAIL"


class RiskLevel(str, enum.Enum):
  LOW = "LOW"
  MEDIUM = "MEDIUM"
  HIGH = "HIGH"


class Decision(BaseModel):
  """The verdict returned by the decision service, after post-processing."""

  model_config = ConfigDict(frozen=True, populate_by_name=True)

  status: QAStatus = Field(QAStatus.REVIEW, alias="QA_Status")
  risk_level: RiskLevel = Field(RiskLevel.MEDIUM, alias="QA_Risk_Level")
  summary: str = Field(DEFAULT_SUMMARY, alias="QA_Summary")
  key_findings: list[str] = Field(
      default_factory=lambda: [DEFAULT_FINDING], alias="QA_Key_Findings"
  )
  concerns: list[str] = Field(default_factory=list, alias="QA_Concerns")
  advisory_notes: str = Field(DEFAULT_ADVISORY, alias="QA_Advisory_Notes")

  def to_wire(self) -> dict[str, str | list[str]]:
    """Serializes with the QA_* field names used by the CRM."""
    return self.model_dump(mode="json", by_alias=True)


def failed_decision() -> Decision:
  """A safe-default decision returned alongside a failure status."""
  return Decision(summary=FAILED_SUMMARY)


class DeliveryStatus(str, enum.Enum):
  """Response status codes for the intake webhook."""

  ACKNOWLEDGED = "ACKNOWLEDGED"
  IGNORED_NON_INTAKE_EVENT = "IGNORED_NON_INTAKE_EVENT"
  IGNORED_INVALID_WEBHOOK = "IGNORED_INVALID_WEBHOOK"
  ACKNOWLEDGED_EMPTY_PAYLOAD = "ACKNOWLEDGED_EMPTY_PAYLOAD"
  INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
  INTAKE_QA_COMPLETED = "INTAKE_QA_COMPLETED"
  INTAKE_QA_FAILED = "INTAKE_QA_FAILED"


class IntakeResult(BaseModel):
  """Outcome of processing one actionable delivery."""

  decision: Decision
  error: str | None = None
  error_type: str | None = None
  cached: bool = False

  @property
  def failed(self) -> bool:
    return self.error is not None

  def to_response_body(self) -> dict[str, str | list[str]]:
    if self.failed:
      return {
          "status": DeliveryStatus.INTAKE_QA_FAILED.value,
          "error": self.error,
          "errorType": self.error_type,
          **self.decision.to_wire(),
      }
    return {
        "status": DeliveryStatus.INTAKE_QA_COMPLETED.value,
        **self.decision.to_wire(),
    }
