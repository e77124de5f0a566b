"""Serialization of writes that share a derived aggregate.

Seat counts are derived from the sales table, so two admissions for the same
departure must not interleave their read-sum and insert. Every such write runs
under ``exclusive(db, key)``, which holds:

* an in-process ``asyncio.Lock`` per key, for workers in the same event loop;
* on PostgreSQL, ``pg_advisory_xact_lock`` inside the caller's transaction,
  for workers in other processes. It is released on commit or rollback.

The caller must commit or roll back before leaving the block.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

# Entries live only while a task holds or waits on the key
_local_locks: dict[str, asyncio.Lock] = {}
_lock_users: dict[str, int] = {}


def departure_key(route_id: UUID, vessel_id: UUID, travel_date: date, departure_time: str) -> str:
    """Lock key of a departure instance."""
    return f"departure:{route_id}:{vessel_id}:{travel_date.isoformat()}:{departure_time}"


def vessel_key(vessel_id: UUID) -> str:
    """Lock key of a vessel's operator slot."""
    return f"vessel-operator:{vessel_id}"


def boarding_key(vessel_id: UUID, travel_date: date, departure_time: str) -> str:
    """Lock key of a departure's boarding list."""
    return f"boarding:{vessel_id}:{travel_date.isoformat()}:{departure_time}"


def _is_postgres(db: AsyncSession) -> bool:
    bind = db.bind
    return bind is not None and bind.dialect.name == "postgresql"


@asynccontextmanager
async def exclusive(db: AsyncSession, key: str) -> AsyncIterator[None]:
    """Hold the in-process and database locks for ``key``."""
    lock = _local_locks.setdefault(key, asyncio.Lock())
    _lock_users[key] = _lock_users.get(key, 0) + 1
    try:
        async with lock:
            if _is_postgres(db):
                await db.execute(
                    text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
                    {"key": key},
                )
            logger.debug("Acquired lock", extra={"lock_key": key})
            yield
    finally:
        _lock_users[key] -= 1
        if not _lock_users[key]:
            del _lock_users[key]
            del _local_locks[key]


def active_lock_count() -> int:
    """Number of keys currently held or awaited in this process."""
    return len(_local_locks)
