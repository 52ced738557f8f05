"""TTL store for decisions, keyed by CRM activity id.

The CRM redelivers the same activity several times. Caching the first
decision keeps the verdict stable and avoids repeated model calls.
"""

import asyncio
import contextlib
import logging
import time
from typing import AsyncIterator, Callable, Protocol

from intake_qa.schemas import decision as decision_lib

Decision = decision_lib.Decision


class DecisionStore(Protocol):
  """Key-value store with per-entry expiry."""

  def get(self, key: str) -> Decision | None:
    ...

  def put(self, key: str, value: Decision, ttl_seconds: float) -> None:
    ...

  def sweep(self) -> int:
    ...


class InMemoryDecisionStore:
  """Process-local DecisionStore. Expired entries are never returned."""

  def __init__(self, clock: Callable[[], float] = time.monotonic):
    self._clock = clock
    self._entries: dict[str, tuple[float, Decision]] = {}

  def __len__(self) -> int:
    return len(self._entries)

  def get(self, key: str) -> Decision | None:
    entry = self._entries.get(key)
    if entry is None:
      return None
    expires_at, value = entry
    if expires_at <= self._clock():
      return None
    return value

  def put(self, key: str, value: Decision, ttl_seconds: float) -> None:
    self._entries[key] = (self._clock() + ttl_seconds, value)

  def sweep(self) -> int:
    """Drops expired entries and returns how many were removed."""
    now = self._clock()
    expired = [
        key
        for key, (expires_at, _) in self._entries.items()
        if expires_at <= now
    ]
    for key in expired:
      del self._entries[key]
    if expired:
      logging.info(
          "CACHE: Swept %d expired decision(s); %d remain.",
          len(expired),
          len(self._entries),
      )
    return len(expired)


class KeyedLocks:
  """One asyncio.Lock per key, released from memory when unused."""

  def __init__(self):
    self._locks: dict[str, asyncio.Lock] = {}
    self._users: dict[str, int] = {}

  def __len__(self) -> int:
    return len(self._locks)

  @contextlib.asynccontextmanager
  async def hold(self, key: str) -> AsyncIterator[None]:
    lock = self._locks.setdefault(key, asyncio.Lock())
    self._users[key] = self._users.get(key, 0) + 1
    try:
      async with lock:
        yield
    finally:
      self._users[key] -= 1
      if not self._users[key]:
        del self._users[key]
        del self._locks[key]


def schedule_sweep(scheduler, store: DecisionStore, interval_seconds: float):
  """Registers a periodic sweep of `store` on an AsyncIOScheduler.

  The job is a coroutine, so it runs on the event loop thread. The store is
  only ever touched from that thread.

  Args:
    scheduler: An APScheduler AsyncIOScheduler.
    store: The store to sweep.
    interval_seconds: Seconds between sweeps.

  Returns:
    The scheduled job.
  """

  async def sweep_job() -> int:
    return store.sweep()

  return scheduler.add_job(
      sweep_job,
      "interval",
      seconds=interval_seconds,
      id="dedup_cache_sweep",
      replace_existing=True,
  )
