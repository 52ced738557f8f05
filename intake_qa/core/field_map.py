"""Declarative mapping from CRM source keys to canonical applicant fields.

The CRM renamed its intake fields several times. Each canonical field lists
the (container, keys) pairs to check, in priority order; the first non-empty
value wins.
"""

from typing import NamedTuple

NOT_PROVIDED = "Not provided"
NOT_SPECIFIED = "Not specified"
NOT_SUBMITTED = "Not submitted"


class FieldSpec(NamedTuple):
  name: str
  sources: tuple[tuple[str, tuple[str, ...]], ...]
  sentinel: str = NOT_PROVIDED


def _spec(name, *sources, sentinel=NOT_PROVIDED) -> FieldSpec:
  return FieldSpec(name, tuple(sources), sentinel)


LEAD_FIELDS = (
    _spec(
        "first_name",
        ("Lead", ("FirstName",)),
        ("Data", ("FirstName", "First_Name")),
        ("Current", ("FirstName", "mx_First_Name")),
    ),
    _spec(
        "last_name",
        ("Lead", ("LastName",)),
        ("Data", ("LastName", "Last_Name")),
        ("Current", ("LastName", "mx_Last_Name")),
    ),
    _spec(
        "email",
        ("Lead", ("EmailAddress",)),
        ("Data", ("EmailAddress", "Email")),
        ("Current", ("EmailAddress", "mx_Email")),
    ),
    _spec(
        "phone",
        ("Lead", ("Phone", "Mobile")),
        ("Data", ("Phone", "Mobile")),
        ("Current", ("Phone", "mx_Phone")),
    ),
    _spec(
        "date_of_birth",
        ("Lead", ("mx_Date_of_Birth", "DateOfBirth")),
        ("Data", ("DateOfBirth", "Date_Of_Birth")),
        ("Current", ("mx_Date_of_Birth", "mx_DOB")),
    ),
    _spec(
        "country",
        ("Lead", ("mx_Country", "Country")),
        ("Data", ("Country",)),
        ("Current", ("mx_Country", "mx_Custom_2")),
    ),
)

ACTIVITY_FIELDS = (
    _spec(
        "program",
        ("Data", ("Program", "ProgramName")),
        ("Current", ("mx_Program", "mx_Custom_3")),
        ("Lead", ("mx_Program",)),
        sentinel=NOT_SPECIFIED,
    ),
    _spec(
        "intake_term",
        ("Data", ("IntakeTerm", "Intake")),
        ("Current", ("mx_Intake_Term", "mx_Custom_4")),
        sentinel=NOT_SPECIFIED,
    ),
    _spec(
        "citizenship",
        ("Data", ("Citizenship", "CitizenshipStatus")),
        ("Current", ("mx_Citizenship", "mx_Custom_1")),
        ("Lead", ("mx_Citizenship",)),
        sentinel=NOT_SPECIFIED,
    ),
    _spec(
        "residency_status",
        ("Data", ("ResidencyStatus",)),
        ("Current", ("mx_Residency_Status", "mx_Custom_5")),
        sentinel=NOT_SPECIFIED,
    ),
    _spec(
        "visa_status",
        ("Data", ("VisaStatus",)),
        ("Current", ("mx_Visa_Status", "mx_Custom_6")),
        sentinel=NOT_SPECIFIED,
    ),
    _spec(
        "high_school_name",
        ("Data", ("HighSchoolName",)),
        ("Current", ("mx_High_School_Name", "mx_Custom_7")),
    ),
    _spec(
        "high_school_graduation_year",
        ("Data", ("HighSchoolGraduationYear",)),
        ("Current", ("mx_High_School_Graduation_Year", "mx_Custom_8")),
    ),
    _spec(
        "high_school_gpa",
        ("Data", ("HighSchoolGPA",)),
        ("Current", ("mx_High_School_GPA", "mx_Custom_9")),
    ),
    _spec(
        "undergraduate_institution",
        ("Data", ("UndergraduateInstitution", "CollegeName")),
        ("Current", ("mx_Undergraduate_Institution", "mx_Custom_10")),
    ),
    _spec(
        "undergraduate_degree",
        ("Data", ("UndergraduateDegree",)),
        ("Current", ("mx_Undergraduate_Degree", "mx_Custom_11")),
    ),
    _spec(
        "undergraduate_major",
        ("Data", ("UndergraduateMajor", "Major")),
        ("Current", ("mx_Undergraduate_Major", "mx_Custom_12")),
    ),
    _spec(
        "undergraduate_gpa",
        ("Data", ("UndergraduateGPA", "CollegeGPA")),
        ("Current", ("mx_Undergraduate_GPA", "mx_Custom_13")),
    ),
    _spec(
        "undergraduate_graduation_year",
        ("Data", ("UndergraduateGraduationYear",)),
        ("Current", ("mx_Undergraduate_Graduation_Year", "mx_Custom_14")),
    ),
    _spec(
        "graduate_institution",
        ("Data", ("GraduateInstitution",)),
        ("Current", ("mx_Graduate_Institution", "mx_Custom_15")),
    ),
    _spec(
        "graduate_degree",
        ("Data", ("GraduateDegree",)),
        ("Current", ("mx_Graduate_Degree", "mx_Custom_16")),
    ),
    _spec(
        "graduate_gpa",
        ("Data", ("GraduateGPA",)),
        ("Current", ("mx_Graduate_GPA", "mx_Custom_17")),
    ),
    _spec(
        "graduate_graduation_year",
        ("Data", ("GraduateGraduationYear",)),
        ("Current", ("mx_Graduate_Graduation_Year", "mx_Custom_18")),
    ),
    _spec(
        "fafsa_filed",
        ("Data", ("FAFSAFiled", "FinancialAidApplied")),
        ("Current", ("mx_FAFSA_Filed", "mx_Custom_19")),
        sentinel=NOT_SPECIFIED,
    ),
    _spec(
        "aid_requested",
        ("Data", ("AidRequested", "FinancialAidRequested")),
        ("Current", ("mx_Aid_Requested", "mx_Custom_20")),
        sentinel=NOT_SPECIFIED,
    ),
    _spec(
        "household_income_band",
        ("Data", ("HouseholdIncomeBand",)),
        ("Current", ("mx_Household_Income", "mx_Custom_21")),
        sentinel=NOT_SPECIFIED,
    ),
    _spec(
        "english_test_type",
        ("Data", ("EnglishTestType",)),
        ("Current", ("mx_English_Test_Type", "mx_Custom_22")),
    ),
    _spec(
        "english_test_score",
        ("Data", ("EnglishTestScore",)),
        ("Current", ("mx_English_Test_Score", "mx_Custom_23")),
    ),
    _spec(
        "english_test_date",
        ("Data", ("EnglishTestDate",)),
        ("Current", ("mx_English_Test_Date", "mx_Custom_24")),
    ),
    _spec(
        "declaration_accepted",
        ("Data", ("DeclarationAccepted",)),
        ("Current", ("mx_Declaration_Accepted", "mx_Custom_25")),
        sentinel=NOT_SPECIFIED,
    ),
    _spec(
        "declaration_signed_name",
        ("Data", ("DeclarationSignature", "SignedName")),
        ("Current", ("mx_Declaration_Signature", "mx_Custom_26")),
    ),
    _spec(
        "declaration_date",
        ("Data", ("DeclarationDate",)),
        ("Current", ("mx_Declaration_Date", "mx_Custom_27")),
    ),
)

VARIANT_FIELDS = (
    _spec(
        "high_school_transcript",
        ("Data", ("HighSchoolTranscriptVariant",)),
        ("Current", ("mx_High_School_Transcript_Variant",)),
        sentinel=NOT_SUBMITTED,
    ),
    _spec(
        "college_transcript",
        ("Data", ("CollegeTranscriptVariant",)),
        ("Current", ("mx_College_Transcript_Variant",)),
        sentinel=NOT_SUBMITTED,
    ),
    _spec(
        "degree_certificate",
        ("Data", ("DegreeCertificateVariant",)),
        ("Current", ("mx_Degree_Certificate_Variant",)),
        sentinel=NOT_SUBMITTED,
    ),
    _spec(
        "english_proficiency",
        ("Data", ("EnglishProficiencyVariant",)),
        ("Current", ("mx_English_Proficiency_Variant",)),
        sentinel=NOT_SUBMITTED,
    ),
    _spec(
        "fafsa_acknowledgement",
        ("Data", ("FAFSAAckVariant",)),
        ("Current", ("mx_FAFSA_Ack_Variant",)),
        sentinel=NOT_SUBMITTED,
    ),
)

# Mock OCR outcomes for each document, keyed by variant code.
VARIANT_SENTENCES = {
    "high_school_transcript": {
        "V1": "Strong academic performance with consistently high grades.",
        "V2": "Average academic performance with no major disciplinary issues.",
        "V3": (
            "Below average academic performance with multiple low-scoring"
            " subjects."
        ),
        "V4": "High school transcript missing or incomplete.",
    },
    "college_transcript": {
        "V1": "GPA: 3.6 / 4.0. Backlogs: 0. Gap Years: 0.",
        "V2": "GPA: 3.0 / 4.0. Backlogs: 1. Gap Years: 0.",
        "V3": "GPA: 2.2 / 4.0. Backlogs: 5. Gap Years: 2.",
        "V4": "GPA: 1.9 / 4.0. Backlogs: 7. Gap Years: 3.",
    },
    "degree_certificate": {
        "V1": "Degree completed and verified.",
        "V2": (
            "Degree certificate present but university or year mismatch"
            " detected."
        ),
        "V3": (
            "Provisional degree certificate submitted; final certificate"
            " pending."
        ),
        "V4": "Degree certificate missing.",
    },
    "english_proficiency": {
        "POSITIVE": "Required English proficiency test cleared.",
        "NEGATIVE": "Required English proficiency test not cleared.",
    },
    "fafsa_acknowledgement": {
        "POSITIVE": "Financial aid application approved.",
        "NEGATIVE": "No financial aid approval on record.",
    },
}
