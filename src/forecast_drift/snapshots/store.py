"""Forecast snapshot history per location, stored in SQLite via aiosqlite."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from forecast_drift.common.timefmt import timestamp_seconds
from forecast_drift.common.types import clamp
from forecast_drift.config import MAX_RETENTION, MIN_RETENTION, get_settings
from forecast_drift.weather.models import ForecastSnapshot, Location

logger = logging.getLogger(__name__)

_CREATE_SNAPSHOTS = """
CREATE TABLE IF NOT EXISTS snapshots (
    id TEXT PRIMARY KEY,
    location_id TEXT NOT NULL,
    fetched_at TEXT NOT NULL,
    fetched_ts REAL NOT NULL,  -- epoch seconds, for ordering
    data TEXT NOT NULL
);
"""

_CREATE_INDEX = """
CREATE INDEX IF NOT EXISTS idx_snapshots_location ON snapshots(location_id, fetched_ts);
"""

_CREATE_STATE = """
CREATE TABLE IF NOT EXISTS state (
    key TEXT PRIMARY KEY,
    data TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""

_PRUNE = """
DELETE FROM snapshots
WHERE location_id = ?
  AND id NOT IN (
      SELECT id FROM snapshots
      WHERE location_id = ?
      ORDER BY fetched_ts DESC, id DESC
      LIMIT ?
  )
"""

_LAST_LOCATION_KEY = "last_location"


def clamp_retention(limit: int) -> int:
    """Retention limits are kept within [3, 50]."""
    return int(clamp(int(limit), MIN_RETENTION, MAX_RETENTION))


class SnapshotStore:
    """Newest-first snapshot history, pruned to a retention limit per location."""

    def __init__(self, db_path: Path | None = None) -> None:
        if db_path is None:
            db_path = get_settings().db_path
        self._db_path = Path(db_path)

    async def _ensure_db(self) -> None:
        """Create database and tables if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_SNAPSHOTS)
            await db.execute(_CREATE_INDEX)
            await db.execute(_CREATE_STATE)
            await db.commit()

    async def save_snapshot(
        self, location_id: str, snapshot: ForecastSnapshot, retention_limit: int,
    ) -> list[ForecastSnapshot]:
        """Store a snapshot (replacing one with the same id) and prune.

        Returns the location's remaining snapshots, newest first.
        """
        await self._ensure_db()
        limit = clamp_retention(retention_limit)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(
                """INSERT INTO snapshots (id, location_id, fetched_at, fetched_ts, data)
                   VALUES (?, ?, ?, ?, ?)
                   ON CONFLICT (id) DO UPDATE
                   SET location_id = excluded.location_id,
                       fetched_at = excluded.fetched_at,
                       fetched_ts = excluded.fetched_ts,
                       data = excluded.data""",
                (
                    snapshot.id,
                    location_id,
                    snapshot.fetched_at,
                    timestamp_seconds(snapshot.fetched_at),
                    json.dumps(snapshot.to_dict(), ensure_ascii=False),
                ),
            )
            cursor = await db.execute(_PRUNE, (location_id, location_id, limit))
            await db.commit()
            if cursor.rowcount:
                logger.debug("Pruned %d snapshot(s) for %s (limit %d)", cursor.rowcount, location_id, limit)
        return await self.get_snapshots(location_id)

    async def get_snapshots(self, location_id: str) -> list[ForecastSnapshot]:
        """All stored snapshots for a location, newest first."""
        if not location_id:
            return []
        await self._ensure_db()
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(
                """SELECT id, data FROM snapshots
                   WHERE location_id = ?
                   ORDER BY fetched_ts DESC, id DESC""",
                (location_id,),
            )
            rows = await cursor.fetchall()

        snapshots = []
        for snapshot_id, data in rows:
            try:
                snapshots.append(ForecastSnapshot.from_dict(json.loads(data)))
            except (ValueError, TypeError) as exc:
                logger.warning("Skipping unreadable snapshot %s: %s", snapshot_id, exc)
        return snapshots

    async def apply_retention_limit(self, retention_limit: int) -> dict[str, int]:
        """Prune every location to the limit. Returns snapshots kept per location."""
        await self._ensure_db()
        limit = clamp_retention(retention_limit)
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute("SELECT DISTINCT location_id FROM snapshots")
            location_ids = [row[0] for row in await cursor.fetchall()]
            for location_id in location_ids:
                await db.execute(_PRUNE, (location_id, location_id, limit))
            await db.commit()
            cursor = await db.execute(
                "SELECT location_id, COUNT(*) FROM snapshots GROUP BY location_id"
            )
            return {row[0]: row[1] for row in await cursor.fetchall()}

    async def list_locations(self) -> list[tuple[str, int, str]]:
        """(location_id, snapshot count, latest fetched_at) per location, most recent first."""
        await self._ensure_db()
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(
                """SELECT location_id, COUNT(*), MAX(fetched_ts),
                          (SELECT s2.fetched_at FROM snapshots s2
                           WHERE s2.location_id = s.location_id
                           ORDER BY s2.fetched_ts DESC LIMIT 1)
                   FROM snapshots s
                   GROUP BY location_id
                   ORDER BY MAX(fetched_ts) DESC"""
            )
            rows = await cursor.fetchall()
        return [(row[0], row[1], row[3]) for row in rows]

    async def save_last_location(self, location: Location | None) -> None:
        """Remember the last viewed location; None clears it."""
        await self._ensure_db()
        async with aiosqlite.connect(str(self._db_path)) as db:
            if location is None:
                await db.execute("DELETE FROM state WHERE key = ?", (_LAST_LOCATION_KEY,))
            else:
                now = datetime.now(timezone.utc).isoformat()
                await db.execute(
                    """INSERT INTO state (key, data, updated_at)
                       VALUES (?, ?, ?)
                       ON CONFLICT (key) DO UPDATE
                       SET data = excluded.data, updated_at = excluded.updated_at""",
                    (_LAST_LOCATION_KEY, json.dumps(asdict(location)), now),
                )
            await db.commit()

    async def get_last_location(self) -> Location | None:
        await self._ensure_db()
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(
                "SELECT data FROM state WHERE key = ?", (_LAST_LOCATION_KEY,),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        try:
            return Location(**json.loads(row[0]))
        except (ValueError, TypeError) as exc:
            logger.warning("Ignoring unreadable last location: %s", exc)
            return None
