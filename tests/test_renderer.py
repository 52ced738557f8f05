"""Unit tests for the applicant context renderer"""

import pytest

from intake_qa.schemas.delivery import InboundDelivery
from intake_qa.services import normalizer
from intake_qa.services import renderer

EXEMPT_CITIZENSHIPS = ("US Citizen",)
EXEMPT_COUNTRIES = ("United States",)

HEADINGS = [
    "## APPLICANT PROFILE",
    "## PROGRAM",
    "## CITIZENSHIP & RESIDENCY",
    "## ACADEMIC RECORD: HIGH SCHOOL",
    "## ACADEMIC RECORD: UNDERGRADUATE",
    "## ACADEMIC RECORD: GRADUATE",
    "## FINANCIAL AID",
    "## ENGLISH PROFICIENCY",
    "## DECLARATION",
    "## DOCUMENT REVIEW",
]


def _render(current):
  record = normalizer.normalize(InboundDelivery.from_body({"Current": current}))
  return renderer.render_context(record, EXEMPT_CITIZENSHIPS, EXEMPT_COUNTRIES)


def _english_inputs(**extra):
  return {
      "mx_English_Test_Type": "IELTS",
      "mx_English_Test_Score": "7.5",
      "mx_English_Test_Date": "2024-11-02",
      "mx_English_Proficiency_Variant": "Positive",
      **extra,
  }


def test_all_sections_in_order():
  text = _render({})
  positions = [text.index(heading) for heading in HEADINGS]
  assert positions == sorted(positions)


def test_non_exempt_applicant_shows_english_details():
  text = _render(_english_inputs(mx_Custom_1="Indian", mx_Country="India"))
  assert "- Test Type: IELTS" in text
  assert "- Score: 7.5" in text
  assert "Required English proficiency test cleared." in text
  assert renderer.ENGLISH_EXEMPT_LINE not in text


@pytest.mark.parametrize(
    "identity",
    [
        {"mx_Custom_1": "US Citizen", "mx_Country": "India"},
        {"mx_Custom_1": "Indian", "mx_Country": "United States"},
        {"mx_Custom_1": "us citizen"},
        {"mx_Country": " UNITED STATES "},
    ],
)
def test_exempt_applicant_has_no_english_content(identity):
  text = _render(_english_inputs(**identity))
  assert renderer.ENGLISH_EXEMPT_LINE in text
  assert "IELTS" not in text
  assert "7.5" not in text
  assert "2024-11-02" not in text
  assert "Required English proficiency test" not in text


def test_exemption_is_configurable():
  record = normalizer.normalize(
      InboundDelivery.from_body({"Current": _english_inputs(mx_Country="Canada")})
  )
  assert "IELTS" in renderer.render_context(record)
  assert "IELTS" not in renderer.render_context(
      record, exempt_countries=["Canada"]
  )


def test_rendering_is_deterministic():
  current = _english_inputs(mx_Custom_1="Indian", mx_Program="MBA")
  assert _render(current) == _render(current)


def test_sentinels_are_rendered():
  text = _render({})
  assert "- First Name: Not provided" in text
  assert "- Program: Not specified" in text
  assert "- High School Transcript: Not submitted" in text
