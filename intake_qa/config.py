"""Settings for the Intake QA Agent."""

import pydantic
import pydantic_settings

Field = pydantic.Field
SettingsConfigDict = pydantic_settings.SettingsConfigDict
BaseSettings = pydantic_settings.BaseSettings


class Settings(BaseSettings):
  """Settings for the Intake QA Agent."""

  model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8')
  APP_NAME: str = 'Intake QA Agent'
  LOG_LEVEL: str = 'INFO'

  # LLM Provider
  GOOGLE_API_KEY: str = ''
  GOOGLE_GENAI_USE_VERTEX_AI: str = 'false'
  GOOGLE_PROJECT_ID: str = ''
  GOOGLE_LOCATION: str = 'us-central1'
  QA_MODEL: str = 'gemini-2.5-flash'
  QA_TEMPERATURE: float = 0.0
  DECISION_TIMEOUT_SECONDS: float = 30.0
  QA_TEXT_BUDGET: int = Field(200, ge=4)
  QA_INSTRUCTIONS_PATH: str | None = None

  # Webhook dispatch
  # One of: label, activity_id, label_and_activity_id
  ACTIONABILITY_MODE: str = 'label'
  INTAKE_EVENT_LABELS: list[str] = [
      'Intake Application Submitted',
      'Intake Application',
  ]
  INTAKE_EVENT_CODES: list[int] = [212]
  ENGLISH_EXEMPT_CITIZENSHIPS: list[str] = [
      'US Citizen',
      'U.S. Citizen',
      'United States Citizen',
  ]
  ENGLISH_EXEMPT_COUNTRIES: list[str] = [
      'United States',
      'United States of America',
      'USA',
  ]

  # Dedup cache
  DEDUP_TTL_SECONDS: int = 300
  DEDUP_SWEEP_INTERVAL_SECONDS: int = 60

  # CRM
  CRM_API_HOST: str = ''
  CRM_ACCESS_KEY: str = ''
  CRM_SECRET_KEY: str = ''
  CRM_TIMEOUT_SECONDS: float = 10.0
  CRM_WRITE_BACK: bool = True
  CRM_ENRICH: bool = False


settings = Settings()
