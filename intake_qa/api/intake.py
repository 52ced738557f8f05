"""FastAPI router for the CRM intake QA webhook."""

import datetime
import json
import logging

import fastapi
from fastapi import responses
from intake_qa.config import settings
from intake_qa.core import dispatch
from intake_qa.schemas import decision as decision_lib
from intake_qa.services import intake_service as intake_service_lib

APIRouter = fastapi.APIRouter
Depends = fastapi.Depends
Request = fastapi.Request
JSONResponse = responses.JSONResponse
ActionabilityPolicy = dispatch.ActionabilityPolicy
DeliveryStatus = decision_lib.DeliveryStatus
IntakeQAService = intake_service_lib.IntakeQAService

router = APIRouter(tags=["Intake QA"])


def get_policy() -> ActionabilityPolicy:
  return ActionabilityPolicy.from_settings(settings)


def get_intake_service(request: Request) -> IntakeQAService:
  return request.app.state.intake_service


@router.post("/intake-qa-agent")
async def intake_qa_webhook(
    request: Request,
    policy: ActionabilityPolicy = Depends(get_policy),
    service: IntakeQAService = Depends(get_intake_service),
) -> JSONResponse:
  """Receives a CRM delivery and returns the intake QA verdict."""
  logging.info("INTAKE: Webhook received.")
  try:
    raw = await request.body()
    body = json.loads(raw) if raw.strip() else {}
  except (ValueError, RecursionError) as e:
    logging.warning("INTAKE: Could not decode webhook body: %s", e)
    return JSONResponse(
        {"status": DeliveryStatus.IGNORED_INVALID_WEBHOOK.value}
    )

  try:
    classification = dispatch.classify_delivery(body, policy)
    if not classification.actionable:
      return JSONResponse({"status": classification.status.value})

    result = await service.process(classification.delivery)
  except Exception as e:  # pylint: disable=broad-exception-caught
    logging.exception("INTAKE: Unhandled error processing webhook: %s", e)
    result = decision_lib.IntakeResult(
        decision=decision_lib.failed_decision(),
        error=str(e) or type(e).__name__,
        error_type=type(e).__name__,
    )

  status_code = 500 if result.failed else 200
  return JSONResponse(result.to_response_body(), status_code=status_code)


@router.get("/health")
async def health():
  return {
      "status": "OK",
      "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
  }
