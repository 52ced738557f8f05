"""Orchestrates one intake delivery: normalize, render, decide, record."""

import logging
from typing import Any

from intake_qa.core import field_map
from intake_qa.schemas import decision as decision_lib
from intake_qa.schemas import delivery as delivery_lib
from intake_qa.services import crm_service as crm_service_lib
from intake_qa.services import decision_service as decision_service_lib
from intake_qa.services import dedup_cache
from intake_qa.services import normalizer
from intake_qa.services import renderer

Decision = decision_lib.Decision
IntakeResult = decision_lib.IntakeResult
InboundDelivery = delivery_lib.InboundDelivery
CrmService = crm_service_lib.CrmService
CrmServiceError = crm_service_lib.CrmServiceError
DecisionClient = decision_service_lib.DecisionClient
DecisionServiceError = decision_service_lib.DecisionServiceError
DecisionStore = dedup_cache.DecisionStore
KeyedLocks = dedup_cache.KeyedLocks

_EMAIL_FIELD = next(
    spec for spec in field_map.LEAD_FIELDS if spec.name == "email"
)


class IntakeQAService:
  """Runs the QA pipeline for actionable deliveries.

  Decisions are cached per activity id. Concurrent deliveries for the same
  activity id are serialized, so only the first one calls the model.
  """

  def __init__(
      self,
      decision_client: DecisionClient,
      store: DecisionStore,
      crm: CrmService | None = None,
      ttl_seconds: float = 300,
      exempt_citizenships: tuple[str, ...] = (),
      exempt_countries: tuple[str, ...] = (),
      write_back: bool = True,
      enrich: bool = False,
  ):
    self.decision_client = decision_client
    self.store = store
    self.crm = crm
    self.ttl_seconds = ttl_seconds
    self.exempt_citizenships = tuple(exempt_citizenships)
    self.exempt_countries = tuple(exempt_countries)
    self.write_back = write_back
    self.enrich = enrich
    self._locks = KeyedLocks()

  @classmethod
  def from_settings(
      cls,
      settings: Any,
      decision_client: DecisionClient,
      store: DecisionStore,
      crm: CrmService | None,
  ) -> "IntakeQAService":
    return cls(
        decision_client=decision_client,
        store=store,
        crm=crm,
        ttl_seconds=settings.DEDUP_TTL_SECONDS,
        exempt_citizenships=tuple(settings.ENGLISH_EXEMPT_CITIZENSHIPS),
        exempt_countries=tuple(settings.ENGLISH_EXEMPT_COUNTRIES),
        write_back=settings.CRM_WRITE_BACK,
        enrich=settings.CRM_ENRICH,
    )

  @property
  def _crm_ready(self) -> bool:
    return self.crm is not None and self.crm.is_configured

  async def process(self, delivery: InboundDelivery) -> IntakeResult:
    """Produces the QA result for an actionable delivery.

    Args:
      delivery: A delivery that passed dispatch classification.

    Returns:
      The result. Failures are reported in the result, never raised.
    """
    activity_id = delivery.activity_id
    if activity_id is None:
      logging.info("INTAKE: Delivery has no activity id; skipping the cache.")
      return await self._run(delivery)

    async with self._locks.hold(activity_id):
      cached = self.store.get(activity_id)
      if cached is not None:
        logging.info(
            "INTAKE: Returning cached decision for activity %s.", activity_id
        )
        return IntakeResult(decision=cached, cached=True)
      result = await self._run(delivery)
      if not result.failed:
        self.store.put(activity_id, result.decision, self.ttl_seconds)
    return result

  async def _run(self, delivery: InboundDelivery) -> IntakeResult:
    try:
      delivery = await self._enrich(delivery)
      record = normalizer.normalize(delivery)
      context = renderer.render_context(
          record, self.exempt_citizenships, self.exempt_countries
      )
      decision = await self.decision_client.decide(context)
    except DecisionServiceError as e:
      logging.error(
          "INTAKE: Decision service failed for activity %s: %s",
          delivery.activity_id,
          e,
      )
      return IntakeResult(
          decision=decision_lib.failed_decision(),
          error=str(e),
          error_type=e.error_type,
      )
    except Exception as e:  # pylint: disable=broad-exception-caught
      logging.exception(
          "INTAKE: Unexpected error for activity %s: %s",
          delivery.activity_id,
          e,
      )
      return IntakeResult(
          decision=decision_lib.failed_decision(),
          error=str(e) or type(e).__name__,
          error_type=type(e).__name__,
      )

    logging.info(
        "INTAKE: Activity %s (lead %s) reviewed: %s / %s.",
        record.activity_id,
        record.lead_id,
        decision.status.value,
        decision.risk_level.value,
    )
    await self._write_back(delivery.activity_id, decision)
    return IntakeResult(decision=decision)

  async def _enrich(self, delivery: InboundDelivery) -> InboundDelivery:
    """Fills missing containers from the CRM. Failures are logged only."""
    if not (self.enrich and self._crm_ready):
      return delivery
    try:
      if delivery.activity_id and "Current" not in delivery.containers:
        fields = await self.crm.get_activity_fields(delivery.activity_id)
        if fields:
          delivery = delivery.with_container("Current", fields)
      if "Lead" not in delivery.containers:
        lead = None
        if delivery.lead_id:
          lead = await self.crm.get_lead_by_id(delivery.lead_id)
        else:
          email = normalizer.lookup(delivery.containers, _EMAIL_FIELD)
          if email != _EMAIL_FIELD.sentinel:
            lead = await self.crm.get_lead_by_email(email)
        if lead:
          delivery = delivery.with_container("Lead", lead)
    except CrmServiceError as e:
      logging.warning(
          "INTAKE: CRM enrichment failed for activity %s: %s",
          delivery.activity_id,
          e,
      )
    return delivery

  async def _write_back(self, activity_id: str | None, decision: Decision):
    """Pushes the decision to the CRM. Never fails the request."""
    if not (self.write_back and activity_id and self._crm_ready):
      return
    try:
      await self.crm.write_decision(activity_id, decision)
    except Exception as e:  # pylint: disable=broad-exception-caught
      logging.error(
          "INTAKE: CRM write-back failed for activity %s: %s",
          activity_id,
          e,
      )
