"""Database persistence layer for the learned header dictionary."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

import aiosqlite

from ..config import settings
from ..fields import FIELD_REGISTRY
from ..formats.models import normalize_header
from .models import DictionarySnapshot, HeaderMappingEntry, MappingCandidate

logger = logging.getLogger(__name__)

_ENTRY_COLUMNS = "id, raw_header, canonical_field, confidence, times_used, last_used_at, created_at"


class DictionaryStore:
    """
    Persistent cache of header -> canonical field mappings.

    Learning happens through `upsert` only: an existing (header, field) pair
    has its usage incremented atomically, a new pair starts at one use. The
    store never decays or overwrites confidence; the most-used entry wins at
    lookup time, not at write time.
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path else settings.database_path
        self._connection: Optional[aiosqlite.Connection] = None

    async def initialize(self):
        """Initialize the database and create tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(str(self.db_path))

        await self._connection.executescript(
            """
            CREATE TABLE IF NOT EXISTS header_mappings (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                raw_header TEXT NOT NULL,
                canonical_field TEXT NOT NULL,
                confidence REAL NOT NULL CHECK (confidence >= 0 AND confidence <= 1),
                times_used INTEGER NOT NULL DEFAULT 0 CHECK (times_used >= 0),
                last_used_at TEXT,
                created_at TEXT NOT NULL,
                UNIQUE(raw_header, canonical_field)
            );

            CREATE INDEX IF NOT EXISTS idx_header_mappings_usage
                ON header_mappings(times_used DESC);
            """
        )
        await self._connection.commit()
        logger.info("DictionaryStore initialized")

    async def close(self):
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    # Read operations

    async def load_all(self) -> DictionarySnapshot:
        """Bulk-load every entry into an immutable snapshot for one resolution pass."""
        async with self._connection.execute(
            f"SELECT {_ENTRY_COLUMNS} FROM header_mappings ORDER BY times_used DESC"
        ) as cursor:
            rows = await cursor.fetchall()

        snapshot = DictionarySnapshot(self._row_to_entry(row) for row in rows)
        logger.info(f"Loaded {len(snapshot)} header mappings from {len(rows)} dictionary rows")
        return snapshot

    @staticmethod
    def lookup(header: str, snapshot: DictionarySnapshot) -> Optional[HeaderMappingEntry]:
        """Look a header up in a loaded snapshot. No I/O."""
        return snapshot.lookup(header)

    async def get(self, raw_header: str, canonical_field: str) -> Optional[HeaderMappingEntry]:
        """Get the entry for an exact (header, field) pair."""
        async with self._connection.execute(
            f"""
            SELECT {_ENTRY_COLUMNS} FROM header_mappings
            WHERE raw_header = ? AND canonical_field = ?
            """,
            (normalize_header(raw_header), canonical_field),
        ) as cursor:
            row = await cursor.fetchone()
            if row:
                return self._row_to_entry(row)
        return None

    async def get_by_id(self, entry_id: int) -> Optional[HeaderMappingEntry]:
        """Get an entry by ID."""
        async with self._connection.execute(
            f"SELECT {_ENTRY_COLUMNS} FROM header_mappings WHERE id = ?", (entry_id,)
        ) as cursor:
            row = await cursor.fetchone()
            if row:
                return self._row_to_entry(row)
        return None

    async def list_all(self) -> list[HeaderMappingEntry]:
        """List all entries for the admin view, most used first."""
        async with self._connection.execute(
            f"""
            SELECT {_ENTRY_COLUMNS} FROM header_mappings
            ORDER BY times_used DESC, canonical_field ASC
            """
        ) as cursor:
            rows = await cursor.fetchall()
            return [self._row_to_entry(row) for row in rows]

    # Write operations

    async def upsert(
        self,
        raw_header: str,
        canonical_field: str,
        confidence: float,
        used_at: Optional[datetime] = None,
    ) -> Optional[HeaderMappingEntry]:
        """
        Record one use of a header -> field mapping.

        The increment happens inside a single INSERT ... ON CONFLICT statement,
        so concurrent imports cannot create duplicate pairs or clobber
        confidence. Storage errors are logged and reported as None.
        """
        key = normalize_header(raw_header)
        if not key or not canonical_field:
            logger.warning(f"Skipping dictionary upsert with empty header or field: {raw_header!r}")
            return None

        used_at = used_at or datetime.now(timezone.utc)
        try:
            await self._connection.execute(
                """
                INSERT INTO header_mappings
                (raw_header, canonical_field, confidence, times_used, last_used_at, created_at)
                VALUES (?, ?, ?, 1, ?, ?)
                ON CONFLICT(raw_header, canonical_field) DO UPDATE SET
                    times_used = times_used + 1,
                    last_used_at = excluded.last_used_at
                """,
                (key, canonical_field, confidence, used_at.isoformat(), used_at.isoformat()),
            )
            await self._connection.commit()
        except aiosqlite.Error as e:
            logger.error(f"Error saving mapping '{key}' -> '{canonical_field}': {e}")
            await self._connection.rollback()
            return None

        entry = await self.get(key, canonical_field)
        if entry is not None:
            logger.info(
                f"Saved mapping: '{key}' -> '{canonical_field}' (used {entry.times_used} times)"
            )
        return entry

    async def batch_upsert(
        self,
        candidates: Iterable[MappingCandidate],
        confidence_threshold: Optional[float] = None,
    ) -> int:
        """
        Upsert every candidate at or above the confidence threshold.

        Each upsert commits on its own; a failed one is skipped without
        aborting the rest. Returns the number of entries saved.
        """
        threshold = (
            settings.dictionary_confidence_threshold
            if confidence_threshold is None
            else confidence_threshold
        )
        eligible = [c for c in candidates if c.confidence >= threshold]

        if not eligible:
            logger.info(f"No mappings met confidence threshold ({threshold})")
            return 0

        saved = 0
        for candidate in eligible:
            entry = await self.upsert(
                candidate.raw_header, candidate.canonical_field, candidate.confidence
            )
            if entry is not None:
                saved += 1

        logger.info(f"Saved {saved}/{len(eligible)} high-confidence mappings")
        return saved

    async def delete(self, entry_id: int) -> bool:
        """Delete an entry by ID (administrative action)."""
        cursor = await self._connection.execute(
            "DELETE FROM header_mappings WHERE id = ?", (entry_id,)
        )
        await self._connection.commit()
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info(f"Deleted header mapping ID {entry_id}")
        return deleted

    async def seed_from_registry(self) -> int:
        """
        Insert the canonical field aliases as verified baseline entries.

        Seeds start at zero uses so learned mappings outrank them as soon as
        they are reused. Existing pairs are left untouched.
        """
        now = datetime.now(timezone.utc).isoformat()
        inserted = 0
        for definition in FIELD_REGISTRY:
            for alias in definition.aliases:
                cursor = await self._connection.execute(
                    """
                    INSERT OR IGNORE INTO header_mappings
                    (raw_header, canonical_field, confidence, times_used, last_used_at, created_at)
                    VALUES (?, ?, 1.0, 0, NULL, ?)
                    """,
                    (normalize_header(alias), definition.name, now),
                )
                inserted += cursor.rowcount
        await self._connection.commit()
        logger.info(f"Seeded {inserted} dictionary entries from the field registry")
        return inserted

    def _row_to_entry(self, row) -> HeaderMappingEntry:
        """Convert a database row to a HeaderMappingEntry."""
        return HeaderMappingEntry(
            id=row[0],
            raw_header=row[1],
            canonical_field=row[2],
            confidence=row[3],
            times_used=row[4],
            last_used_at=datetime.fromisoformat(row[5]) if row[5] else None,
            created_at=datetime.fromisoformat(row[6]),
        )
