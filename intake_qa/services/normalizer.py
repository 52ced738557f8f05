"""Maps an inbound CRM delivery onto the canonical applicant record."""

from typing import Any, Iterable, Mapping

from intake_qa.core import field_map
from intake_qa.core import utils
from intake_qa.schemas import delivery as delivery_lib

FieldSpec = field_map.FieldSpec
InboundDelivery = delivery_lib.InboundDelivery
ApplicantRecord = delivery_lib.ApplicantRecord
LeadProfile = delivery_lib.LeadProfile
ActivityDetails = delivery_lib.ActivityDetails
DocumentVariants = delivery_lib.DocumentVariants


def lookup(
    containers: Mapping[str, Mapping[str, Any]], spec: FieldSpec
) -> str:
  """Resolves one canonical field by probing its sources in order.

  Args:
    containers: The delivery's data containers, keyed by container name.
    spec: The field to resolve.

  Returns:
    The first non-empty trimmed value, or the field's sentinel.
  """
  for container_name, keys in spec.sources:
    container = containers.get(container_name)
    if not container:
      continue
    value = utils.first_text(container, keys)
    if value is not None:
      return value
  return spec.sentinel


def describe_variant(field_name: str, code: str) -> str:
  """Maps a raw document-variant code to its descriptive sentence."""
  table = field_map.VARIANT_SENTENCES.get(field_name, {})
  return table.get(code.strip().upper(), field_map.NOT_SUBMITTED)


def _resolve(
    containers: Mapping[str, Mapping[str, Any]], specs: Iterable[FieldSpec]
) -> dict[str, str]:
  return {spec.name: lookup(containers, spec) for spec in specs}


def normalize(delivery: InboundDelivery) -> ApplicantRecord:
  """Builds an ApplicantRecord from a delivery.

  Never raises on missing or malformed fields; anything absent is represented
  by its sentinel.

  Args:
    delivery: The parsed webhook delivery.

  Returns:
    The canonical applicant record.
  """
  containers = delivery.containers
  variant_codes = _resolve(containers, field_map.VARIANT_FIELDS)
  variants = {
      name: describe_variant(name, code)
      for name, code in variant_codes.items()
  }
  return ApplicantRecord(
      activity_id=delivery.activity_id,
      lead_id=delivery.lead_id,
      created_on=delivery.created_on or field_map.NOT_PROVIDED,
      lead=LeadProfile(**_resolve(containers, field_map.LEAD_FIELDS)),
      activity=ActivityDetails(
          **_resolve(containers, field_map.ACTIVITY_FIELDS)
      ),
      variants=DocumentVariants(**variants),
  )
