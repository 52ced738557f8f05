"""Main application for the Intake QA Agent."""

from contextlib import asynccontextmanager

import logging
import sys
from google.cloud.logging_v2.handlers import StructuredLogHandler
from apscheduler.schedulers import asyncio as asyncio_scheduler
import dotenv
import fastapi
from intake_qa.api import intake
from intake_qa.config import settings
from intake_qa.prompts import instructions
from intake_qa.services import crm_service as crm_service_lib
from intake_qa.services import decision_service as decision_service_lib
from intake_qa.services import dedup_cache
from intake_qa.services import intake_service as intake_service_lib

AsyncIOScheduler = asyncio_scheduler.AsyncIOScheduler
FastAPI = fastapi.FastAPI
load_dotenv = dotenv.load_dotenv
CrmService = crm_service_lib.CrmService
DecisionClient = decision_service_lib.DecisionClient
InMemoryDecisionStore = dedup_cache.InMemoryDecisionStore
IntakeQAService = intake_service_lib.IntakeQAService

load_dotenv()


def setup_logging():
  """Configures a single structured logger for Cloud Run."""
  root_logger = logging.getLogger()
  root_logger.handlers.clear()
  root_logger.setLevel(settings.LOG_LEVEL)
  handler = StructuredLogHandler(stream=sys.stdout)
  root_logger.addHandler(handler)


def build_intake_service() -> IntakeQAService:
  """Wires the decision client, dedup store and CRM client from settings."""
  decision_client = DecisionClient(
      client=decision_service_lib.create_genai_client(settings),
      instructions=instructions.get_instructions(settings.QA_INSTRUCTIONS_PATH),
      model=settings.QA_MODEL,
      temperature=settings.QA_TEMPERATURE,
      timeout_seconds=settings.DECISION_TIMEOUT_SECONDS,
      text_budget=settings.QA_TEXT_BUDGET,
  )
  crm = CrmService(
      host=settings.CRM_API_HOST,
      access_key=settings.CRM_ACCESS_KEY,
      secret_key=settings.CRM_SECRET_KEY,
      timeout_seconds=settings.CRM_TIMEOUT_SECONDS,
  )
  return IntakeQAService.from_settings(
      settings,
      decision_client=decision_client,
      store=InMemoryDecisionStore(),
      crm=crm,
  )


# --- Logging and App Setup ---
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
  logging.info("FastAPI server starting up...")
  service = build_intake_service()
  app.state.intake_service = service
  scheduler = AsyncIOScheduler()
  dedup_cache.schedule_sweep(
      scheduler, service.store, settings.DEDUP_SWEEP_INTERVAL_SECONDS
  )
  scheduler.start()
  logging.info(
      "Dedup cache sweep scheduled every %ds.",
      settings.DEDUP_SWEEP_INTERVAL_SECONDS,
  )
  yield
  scheduler.shutdown(wait=False)
  logging.info("FastAPI server shut down.")


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
app.include_router(intake.router)


@app.get("/")
async def root():
  logging.info("Root path '/' accessed.")
  return {"message": "Intake QA Agent API is running."}


if __name__ == "__main__":
  import uvicorn  # pylint: disable=g-import-not-at-top

  uvicorn.run(
      "intake_qa.main:app",
      host="0.0.0.0",
      port=8080,
  )
