"""Decides whether an inbound webhook delivery is worth processing."""

import enum
import logging
from typing import Any

import pydantic
from intake_qa.schemas import decision as decision_lib
from intake_qa.schemas import delivery as delivery_lib

BaseModel = pydantic.BaseModel
Field = pydantic.Field
DeliveryStatus = decision_lib.DeliveryStatus
InboundDelivery = delivery_lib.InboundDelivery


class ActionabilityMode(str, enum.Enum):
  """Which signals mark a delivery as a genuine intake event."""

  LABEL = "label"
  ACTIVITY_ID = "activity_id"
  LABEL_AND_ACTIVITY_ID = "label_and_activity_id"


class ActionabilityPolicy(BaseModel):
  """Configuration for recognizing intake events."""

  mode: ActionabilityMode = ActionabilityMode.LABEL
  intake_labels: frozenset[str] = Field(default_factory=frozenset)
  intake_codes: frozenset[int] = Field(default_factory=frozenset)

  @classmethod
  def from_settings(cls, settings: Any) -> "ActionabilityPolicy":
    return cls(
        mode=ActionabilityMode(settings.ACTIONABILITY_MODE),
        intake_labels=frozenset(
            label.strip().casefold() for label in settings.INTAKE_EVENT_LABELS
        ),
        intake_codes=frozenset(settings.INTAKE_EVENT_CODES),
    )

  def has_discriminator(self, delivery: InboundDelivery) -> bool:
    return delivery.event_label is not None or delivery.event_code is not None

  def is_intake_event(self, delivery: InboundDelivery) -> bool:
    if (
        delivery.event_label is not None
        and delivery.event_label.casefold() in self.intake_labels
    ):
      return True
    return (
        delivery.event_code is not None
        and delivery.event_code in self.intake_codes
    )


class Classification(BaseModel):
  """Result of classifying a delivery.

  `status` is None when the delivery is actionable.
  """

  status: DeliveryStatus | None = None
  delivery: InboundDelivery | None = None

  @property
  def actionable(self) -> bool:
    return self.status is None


def classify_delivery(body: Any, policy: ActionabilityPolicy) -> Classification:
  """Classifies a parsed webhook body.

  This function has no side effects so that pings can be acknowledged
  immediately.

  Args:
    body: The parsed JSON body, of any type.
    policy: The actionability policy to apply.

  Returns:
    The classification. Non-actionable deliveries carry their response status.
  """
  if not isinstance(body, dict):
    logging.info(
        "DISPATCH: Body is %s, not an object. Ignoring.", type(body).__name__
    )
    return Classification(status=DeliveryStatus.IGNORED_INVALID_WEBHOOK)

  delivery = InboundDelivery.from_body(body)
  status = _gate(delivery, policy)
  if status is not None:
    logging.info(
        "DISPATCH: Delivery for activity %s classified as %s (event %s/%s).",
        delivery.activity_id,
        status.value,
        delivery.event_label,
        delivery.event_code,
    )
    return Classification(status=status, delivery=delivery)

  if not delivery.has_containers:
    logging.warning(
        "DISPATCH: Intake delivery for activity %s has no data container."
        " Keys: %s",
        delivery.activity_id,
        sorted(body.keys()),
    )
    return Classification(
        status=DeliveryStatus.INSUFFICIENT_DATA, delivery=delivery
    )
  if not delivery.has_data:
    logging.info(
        "DISPATCH: Intake delivery for activity %s has only empty containers.",
        delivery.activity_id,
    )
    return Classification(
        status=DeliveryStatus.ACKNOWLEDGED_EMPTY_PAYLOAD, delivery=delivery
    )
  return Classification(delivery=delivery)


def _gate(
    delivery: InboundDelivery, policy: ActionabilityPolicy
) -> DeliveryStatus | None:
  """Applies the actionability policy; returns a status for non-actionable."""
  if policy.mode == ActionabilityMode.ACTIVITY_ID:
    if delivery.activity_id is None:
      return DeliveryStatus.ACKNOWLEDGED
    if policy.has_discriminator(delivery) and not policy.is_intake_event(
        delivery
    ):
      return DeliveryStatus.IGNORED_NON_INTAKE_EVENT
    return None

  if not policy.is_intake_event(delivery):
    return DeliveryStatus.ACKNOWLEDGED
  if (
      policy.mode == ActionabilityMode.LABEL_AND_ACTIVITY_ID
      and delivery.activity_id is None
  ):
    return DeliveryStatus.IGNORED_INVALID_WEBHOOK
  return None
