"""CRM REST client for lead lookup and QA write-back.

Talks to a LeadSquared-style API: every call is authenticated with
`accessKey`/`secretKey` query parameters.
"""

import asyncio
import logging
from typing import Any

import aiohttp
from intake_qa.schemas import decision as decision_lib

Decision = decision_lib.Decision

# Activity schema names the QA verdict is written to.
WRITE_BACK_FIELDS = {
    "QA_Status": "mx_Custom_QA_Status",
    "QA_Risk_Level": "mx_Custom_QA_Risk_Level",
    "QA_Summary": "mx_Custom_QA_Summary",
    "QA_Key_Findings": "mx_Custom_QA_Key_Findings",
    "QA_Concerns": "mx_Custom_QA_Concerns",
    "QA_Advisory_Notes": "mx_Custom_QA_Advisory_Notes",
}


class CrmServiceError(Exception):
  """Raised when the CRM API is unreachable or returns an error."""


def decision_to_crm_fields(decision: Decision) -> dict[str, str]:
  """Flattens a decision into CRM activity field values."""
  fields = {}
  for wire_name, value in decision.to_wire().items():
    if isinstance(value, list):
      value = "; ".join(value)
    fields[WRITE_BACK_FIELDS[wire_name]] = value
  return fields


class CrmService:
  """Reads leads and activities from the CRM and writes QA results back."""

  def __init__(
      self,
      host: str,
      access_key: str,
      secret_key: str,
      timeout_seconds: float = 10.0,
  ):
    self.base_url = f"{host.rstrip('/')}/v2" if host else ""
    self._auth_params = {"accessKey": access_key, "secretKey": secret_key}
    self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
    if not self.is_configured:
      logging.warning("CRM_SERVICE: Not configured; CRM calls are disabled.")

  @property
  def is_configured(self) -> bool:
    return bool(
        self.base_url
        and self._auth_params["accessKey"]
        and self._auth_params["secretKey"]
    )

  async def _request(
      self,
      method: str,
      path: str,
      params: dict[str, str] | None = None,
      json_body: Any = None,
  ) -> Any:
    url = f"{self.base_url}/{path}"
    try:
      async with aiohttp.ClientSession(timeout=self.timeout) as session:
        async with session.request(
            method,
            url,
            params={**self._auth_params, **(params or {})},
            json=json_body,
        ) as response:
          if response.status >= 400:
            text = await response.text()
            raise CrmServiceError(
                f"CRM API error {response.status} on {path}: {text[:200]}"
            )
          return await response.json(content_type=None)
    except aiohttp.ClientError as e:
      raise CrmServiceError(f"CRM request to {path} failed: {e}") from e
    except ValueError as e:
      raise CrmServiceError(f"CRM reply from {path} was not JSON: {e}") from e
    except asyncio.TimeoutError as e:
      raise CrmServiceError(f"CRM request to {path} timed out") from e

  @staticmethod
  def _first(result: Any) -> dict[str, Any] | None:
    if isinstance(result, list):
      result = result[0] if result else None
    return result if isinstance(result, dict) else None

  async def get_lead_by_id(self, lead_id: str) -> dict[str, Any] | None:
    """Fetches a lead by its id (a GUID in LeadSquared)."""
    logging.info("CRM_SERVICE: Fetching lead %s.", lead_id)
    result = await self._request(
        "GET", "LeadManagement.svc/Leads.GetById", params={"id": lead_id}
    )
    return self._first(result)

  async def get_lead_by_email(self, email: str) -> dict[str, Any] | None:
    """Fetches the lead that owns `email`, if any."""
    logging.info("CRM_SERVICE: Looking up lead by email %s.", email)
    result = await self._request(
        "GET",
        "LeadManagement.svc/Leads.GetByEmailaddress",
        params={"emailaddress": email},
    )
    return self._first(result)

  async def get_activity(self, activity_id: str) -> dict[str, Any] | None:
    logging.info("CRM_SERVICE: Fetching activity %s.", activity_id)
    result = await self._request(
        "GET",
        "ProspectActivity.svc/GetActivityDetails",
        params={"activityId": activity_id},
    )
    return self._first(result)

  async def get_activity_fields(self, activity_id: str) -> dict[str, Any]:
    """Returns an activity's fields as a flat {schema name: value} dict."""
    activity = await self.get_activity(activity_id)
    if not activity:
      return {}
    fields = {
        key: value
        for key, value in activity.items()
        if not isinstance(value, (dict, list))
    }
    for field in activity.get("Fields") or []:
      if isinstance(field, dict) and field.get("SchemaName"):
        fields[field["SchemaName"]] = field.get("Value")
    return fields

  async def update_activity_fields(
      self, activity_id: str, fields: dict[str, str]
  ) -> dict[str, Any]:
    """Writes field values onto an existing activity."""
    logging.info(
        "CRM_SERVICE: Updating activity %s with %d field(s).",
        activity_id,
        len(fields),
    )
    result = await self._request(
        "POST",
        "ProspectActivity.svc/CustomActivity/Update",
        params={"activityId": activity_id},
        json_body={
            "ProspectActivityId": activity_id,
            "Fields": [
                {"SchemaName": name, "Value": value}
                for name, value in fields.items()
            ],
        },
    )
    logging.info("CRM_SERVICE: Update successful for activity %s.", activity_id)
    return result if isinstance(result, dict) else {"result": result}

  async def write_decision(
      self, activity_id: str, decision: Decision
  ) -> dict[str, Any]:
    return await self.update_activity_fields(
        activity_id, decision_to_crm_fields(decision)
    )
