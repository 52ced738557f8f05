"""Pytest configuration and shared fixtures for testing"""

import asyncio
import contextlib
import json
from typing import Any

from aiohttp import test_utils
from aiohttp import web
import pytest
from fastapi import testclient

from intake_qa.main import app
from intake_qa.api import intake
from intake_qa.services import crm_service
from intake_qa.services import decision_service
from intake_qa.services import dedup_cache
from intake_qa.services import intake_service

INTAKE_LABEL = "Intake Application Submitted"

PASS_REPLY = {
    "QA_Status": "PASS",
    "QA_Risk_Level": "LOW",
    "QA_Summary": "ok.",
    "QA_Key_Findings": ["Strong record"],
    "QA_Concerns": [],
    "QA_Advisory_Notes": "none.",
}


class StubDecisionClient(decision_service.DecisionClient):
  """DecisionClient whose model call returns a canned reply"""

  def __init__(self, reply: Any = None, error: Exception | None = None,
               delay: float = 0.0, timeout_seconds: float = 5.0):
    super().__init__(
        client=None,
        instructions="test instructions",
        model="test-model",
        timeout_seconds=timeout_seconds,
    )
    self.reply = json.dumps(PASS_REPLY) if reply is None else reply
    self.error = error
    self.delay = delay
    self.contexts: list[str] = []

  @property
  def calls(self) -> int:
    return len(self.contexts)

  async def _generate(self, context: str) -> str | None:
    self.contexts.append(context)
    if self.delay:
      await asyncio.sleep(self.delay)
    if self.error is not None:
      raise self.error
    return self.reply


class FakeCrm:
  """Records CRM calls instead of making them"""

  is_configured = True

  def __init__(self, fail_writes: bool = False, lead: dict | None = None,
               activity_fields: dict | None = None,
               fail_lookups: bool = False):
    self.fail_writes = fail_writes
    self.fail_lookups = fail_lookups
    self.lead = lead
    self.activity_fields = activity_fields or {}
    self.writes: list[tuple[str, Any]] = []
    self.lookups: list[tuple[str, str]] = []

  def _maybe_fail(self):
    if self.fail_lookups:
      raise crm_service.CrmServiceError("CRM reply was not JSON")

  async def write_decision(self, activity_id, decision):
    if self.fail_writes:
      raise RuntimeError("CRM unavailable")
    self.writes.append((activity_id, decision))
    return {"Status": "Success"}

  async def get_lead_by_id(self, lead_id):
    self.lookups.append(("id", lead_id))
    self._maybe_fail()
    return self.lead

  async def get_lead_by_email(self, email):
    self.lookups.append(("email", email))
    self._maybe_fail()
    return self.lead

  async def get_activity_fields(self, activity_id):
    self.lookups.append(("activity", activity_id))
    self._maybe_fail()
    return self.activity_fields


@contextlib.asynccontextmanager
async def crm_test_server(handler, timeout_seconds: float = 2.0):
  """Serve every path with `handler` and yield a CrmService pointed at it"""
  app = web.Application()
  app.router.add_route("*", "/{tail:.*}", handler)
  server = test_utils.TestServer(app)
  await server.start_server()
  try:
    yield crm_service.CrmService(
        host=f"http://{server.host}:{server.port}",
        access_key="ak",
        secret_key="sk",
        timeout_seconds=timeout_seconds,
    )
  finally:
    await server.close()


def make_delivery(activity_id: str | None = "act-1", **current) -> dict:
  """Build an intake delivery with the given Current fields"""
  body = {
      "ActivityEventName": INTAKE_LABEL,
      "RelatedProspectId": "lead-1",
      "CreatedOn": "2025-01-15 10:00:00",
      "Current": current,
  }
  if activity_id is not None:
    body["ProspectActivityId"] = activity_id
  return body


@pytest.fixture
def stub_client() -> StubDecisionClient:
  return StubDecisionClient()


@pytest.fixture
def fake_crm() -> FakeCrm:
  return FakeCrm()


@pytest.fixture
def service(stub_client, fake_crm) -> intake_service.IntakeQAService:
  return intake_service.IntakeQAService(
      decision_client=stub_client,
      store=dedup_cache.InMemoryDecisionStore(),
      crm=fake_crm,
      exempt_citizenships=("US Citizen",),
      exempt_countries=("United States",),
  )


@pytest.fixture
def client(service):
  """TestClient wired to the fixture service; lifespan is not run"""
  app.dependency_overrides[intake.get_intake_service] = lambda: service
  yield testclient.TestClient(app)
  app.dependency_overrides.clear()
