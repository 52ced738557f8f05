"""Helper functions for coercing loosely-typed webhook and model values."""

import json
import logging
import re
from typing import Any, Iterable, Mapping

_SENTENCE_TERMINATORS = (".", "!", "?")
_ELLIPSIS = "..."
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.S)


def coerce_text(value: Any) -> str | None:
  """Converts a scalar webhook value into a trimmed, non-empty string.

  Args:
    value: Any JSON value.

  Returns:
    The trimmed string, or None for empty strings, nulls, lists and objects.
  """
  if value is None or isinstance(value, (dict, list)):
    return None
  if isinstance(value, bool):
    return "Yes" if value else "No"
  text = str(value).strip()
  return text or None


def first_text(mapping: Mapping[str, Any], keys: Iterable[str]) -> str | None:
  """Returns the first non-empty text value found under any of `keys`."""
  for key in keys:
    text = coerce_text(mapping.get(key))
    if text is not None:
      return text
  return None


def clamp_text(text: str, budget: int) -> str:
  """Clamps text to `budget` characters, preferring a sentence boundary.

  Text within the budget is returned unchanged. Longer text is cut after the
  last sentence terminator inside the budget; if there is none, it is cut
  short and an ellipsis is appended.

  Args:
    text: The text to clamp.
    budget: Maximum number of characters in the result.

  Returns:
    The clamped text.
  """
  text = text.strip()
  if len(text) <= budget:
    return text
  window = text[: max(budget, 0)]
  if budget <= len(_ELLIPSIS):
    return window
  cut = max(window.rfind(mark) for mark in _SENTENCE_TERMINATORS)
  if cut > 0:
    return window[: cut + 1]
  return window[: budget - len(_ELLIPSIS)].rstrip() + _ELLIPSIS


def coerce_string_list(value: Any) -> list[str]:
  """Coerces a model-supplied list into a list of non-empty strings."""
  if not isinstance(value, list):
    return []
  items = []
  for item in value:
    text = coerce_text(item)
    if text is not None:
      items.append(text)
  return items


def extract_json_object(text: str | None) -> dict[str, Any]:
  """Parses a JSON object from a model reply.

  The reply may be wrapped in code fences or surrounded by prose, in which
  case the outermost `{...}` span is tried.

  Args:
    text: The raw model reply.

  Returns:
    The parsed object, or an empty dict if nothing parseable was found.
  """
  if not text:
    return {}
  try:
    parsed = json.loads(text)
  except json.JSONDecodeError:
    match = _JSON_OBJECT_RE.search(text)
    if not match:
      logging.warning("PARSE: Model reply contained no JSON object.")
      return {}
    try:
      parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
      logging.warning("PARSE: Could not decode model reply: %s", e)
      return {}
  if not isinstance(parsed, dict):
    logging.warning(
        "PARSE: Model reply was %s, not an object.", type(parsed).__name__
    )
    return {}
  return parsed
