"""Pydantic schemas for inbound CRM deliveries and the canonical applicant."""

from typing import Any

import pydantic
from intake_qa.core import utils

Field = pydantic.Field
BaseModel = pydantic.BaseModel
ConfigDict = pydantic.ConfigDict

# Newest naming scheme first.
CONTAINER_NAMES = ("Data", "Current", "Lead")

_EVENT_LABEL_KEYS = ("ActivityEventName", "EventName")
_EVENT_CODE_KEYS = ("ActivityEvent", "EventType")
_ACTIVITY_ID_KEYS = ("ProspectActivityId", "ActivityId", "Id")
_LEAD_ID_KEYS = ("RelatedProspectId", "ProspectId", "LeadId")
_CREATED_ON_KEYS = ("CreatedOn", "ActivityDateTime")


class InboundDelivery(BaseModel):
  """The raw CRM webhook body, reduced to the parts the receiver relies on."""

  model_config = ConfigDict(frozen=True)

  event_label: str | None = Field(
      None, description="Event-type label, e.g. 'Intake Application'."
  )
  event_code: int | None = Field(
      None, description="Numeric event-type code, when the CRM sends one."
  )
  activity_id: str | None = Field(
      None, description="Identifier of the CRM activity that fired."
  )
  lead_id: str | None = Field(
      None, description="Identifier of the lead the activity belongs to."
  )
  created_on: str | None = Field(None, description="Activity timestamp.")
  containers: dict[str, dict[str, Any]] = Field(
      default_factory=dict,
      description="Data containers present in the body, keyed by name.",
  )

  @classmethod
  def from_body(cls, body: dict[str, Any]) -> "InboundDelivery":
    """Builds a delivery from a parsed JSON object without ever raising."""
    containers = {
        name: body[name]
        for name in CONTAINER_NAMES
        if isinstance(body.get(name), dict)
    }
    return cls(
        event_label=utils.first_text(body, _EVENT_LABEL_KEYS),
        event_code=_coerce_code(utils.first_text(body, _EVENT_CODE_KEYS)),
        activity_id=utils.first_text(body, _ACTIVITY_ID_KEYS),
        lead_id=utils.first_text(body, _LEAD_ID_KEYS),
        created_on=utils.first_text(body, _CREATED_ON_KEYS),
        containers=containers,
    )

  @property
  def has_containers(self) -> bool:
    return bool(self.containers)

  @property
  def has_data(self) -> bool:
    return any(self.containers.values())

  def with_container(
      self, name: str, values: dict[str, Any]
  ) -> "InboundDelivery":
    """Returns a copy with `values` installed as container `name`."""
    return self.model_copy(
        update={"containers": {**self.containers, name: values}}
    )


def _coerce_code(text: str | None) -> int | None:
  if text is None:
    return None
  try:
    return int(float(text))
  except (ValueError, OverflowError):
    return None


class LeadProfile(BaseModel):
  """Identity fields for the applicant."""

  model_config = ConfigDict(frozen=True)

  first_name: str
  last_name: str
  email: str
  phone: str
  date_of_birth: str
  country: str


class ActivityDetails(BaseModel):
  """Application fields captured on the intake activity."""

  model_config = ConfigDict(frozen=True)

  program: str
  intake_term: str
  citizenship: str
  residency_status: str
  visa_status: str

  high_school_name: str
  high_school_graduation_year: str
  high_school_gpa: str

  undergraduate_institution: str
  undergraduate_degree: str
  undergraduate_major: str
  undergraduate_gpa: str
  undergraduate_graduation_year: str

  graduate_institution: str
  graduate_degree: str
  graduate_gpa: str
  graduate_graduation_year: str

  fafsa_filed: str
  aid_requested: str
  household_income_band: str

  english_test_type: str
  english_test_score: str
  english_test_date: str

  declaration_accepted: str
  declaration_signed_name: str
  declaration_date: str


class DocumentVariants(BaseModel):
  """Document-review outcomes, already mapped to descriptive sentences."""

  model_config = ConfigDict(frozen=True)

  high_school_transcript: str
  college_transcript: str
  degree_certificate: str
  english_proficiency: str
  fafsa_acknowledgement: str


class ApplicantRecord(BaseModel):
  """Canonical, immutable view of one applicant built from a delivery."""

  model_config = ConfigDict(frozen=True)

  activity_id: str | None = None
  lead_id: str | None = None
  created_on: str
  lead: LeadProfile
  activity: ActivityDetails
  variants: DocumentVariants
