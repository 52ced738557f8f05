"""Renders an ApplicantRecord into the plain-text context for the QA model."""

from typing import Iterable

from intake_qa.schemas import delivery as delivery_lib

ApplicantRecord = delivery_lib.ApplicantRecord

ENGLISH_EXEMPT_LINE = (
    "Exempt. Applicant is a US citizen or from an English-speaking country;"
    " no English proficiency evidence is required."
)


def is_english_exempt(
    record: ApplicantRecord,
    exempt_citizenships: Iterable[str],
    exempt_countries: Iterable[str],
) -> bool:
  """True when citizenship or country is in its exemption set."""
  citizenships = {value.strip().casefold() for value in exempt_citizenships}
  countries = {value.strip().casefold() for value in exempt_countries}
  return (
      record.activity.citizenship.casefold() in citizenships
      or record.lead.country.casefold() in countries
  )


def _section(title: str, lines: list[tuple[str, str]]) -> str:
  body = "\n".join(f"- {label}: {value}" for label, value in lines)
  return f"## {title}\n{body}"


def render_context(
    record: ApplicantRecord,
    exempt_citizenships: Iterable[str] = (),
    exempt_countries: Iterable[str] = (),
) -> str:
  """Serializes the record into a deterministic, sectioned report.

  When the applicant is English-proficiency exempt, the English section and
  the English document line carry only the exemption notice.

  Args:
    record: The normalized applicant.
    exempt_citizenships: Citizenship values exempt from English proficiency.
    exempt_countries: Countries exempt from English proficiency.

  Returns:
    The report text.
  """
  lead = record.lead
  activity = record.activity
  variants = record.variants
  exempt = is_english_exempt(record, exempt_citizenships, exempt_countries)

  if exempt:
    english_lines = [("Status", ENGLISH_EXEMPT_LINE)]
    english_document = ENGLISH_EXEMPT_LINE
  else:
    english_lines = [
        ("Test Type", activity.english_test_type),
        ("Score", activity.english_test_score),
        ("Test Date", activity.english_test_date),
    ]
    english_document = variants.english_proficiency

  sections = [
      "INTAKE APPLICATION CONTEXT",
      _section(
          "APPLICANT PROFILE",
          [
              ("First Name", lead.first_name),
              ("Last Name", lead.last_name),
              ("Email", lead.email),
              ("Phone", lead.phone),
              ("Date of Birth", lead.date_of_birth),
              ("Country", lead.country),
              ("Submitted On", record.created_on),
          ],
      ),
      _section(
          "PROGRAM",
          [
              ("Program", activity.program),
              ("Intake Term", activity.intake_term),
          ],
      ),
      _section(
          "CITIZENSHIP & RESIDENCY",
          [
              ("Citizenship", activity.citizenship),
              ("Residency Status", activity.residency_status),
              ("Visa Status", activity.visa_status),
          ],
      ),
      _section(
          "ACADEMIC RECORD: HIGH SCHOOL",
          [
              ("School", activity.high_school_name),
              ("Graduation Year", activity.high_school_graduation_year),
              ("GPA", activity.high_school_gpa),
          ],
      ),
      _section(
          "ACADEMIC RECORD: UNDERGRADUATE",
          [
              ("Institution", activity.undergraduate_institution),
              ("Degree", activity.undergraduate_degree),
              ("Major", activity.undergraduate_major),
              ("GPA", activity.undergraduate_gpa),
              ("Graduation Year", activity.undergraduate_graduation_year),
          ],
      ),
      _section(
          "ACADEMIC RECORD: GRADUATE",
          [
              ("Institution", activity.graduate_institution),
              ("Degree", activity.graduate_degree),
              ("GPA", activity.graduate_gpa),
              ("Graduation Year", activity.graduate_graduation_year),
          ],
      ),
      _section(
          "FINANCIAL AID",
          [
              ("FAFSA Filed", activity.fafsa_filed),
              ("Aid Requested", activity.aid_requested),
              ("Household Income Band", activity.household_income_band),
          ],
      ),
      _section("ENGLISH PROFICIENCY", english_lines),
      _section(
          "DECLARATION",
          [
              ("Accepted", activity.declaration_accepted),
              ("Signed Name", activity.declaration_signed_name),
              ("Date", activity.declaration_date),
          ],
      ),
      _section(
          "DOCUMENT REVIEW",
          [
              ("High School Transcript", variants.high_school_transcript),
              ("College Transcript", variants.college_transcript),
              ("Degree Certificate", variants.degree_certificate),
              ("English Proficiency", english_document),
              ("FAFSA Acknowledgement", variants.fafsa_acknowledgement),
          ],
      ),
  ]
  return "\n\n".join(sections) + "\n"
