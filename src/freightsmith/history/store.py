"""SQLite-based import and risk history."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

import aiosqlite

from ..config import settings
from ..quality.models import AuditRecord, ImportQualityReport
from ..risk.models import DemurrageStatus, RiskAssessment, RiskMode
from .models import ImportRecord, RiskSnapshot

logger = logging.getLogger(__name__)


class HistoryStore:
    """Persistent storage for import runs, per-unit audits and risk snapshots."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path else settings.database_path
        self._connection: Optional[aiosqlite.Connection] = None

    async def initialize(self):
        """Initialize the database and create tables."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(str(self.db_path))

        await self._connection.executescript(
            """
            CREATE TABLE IF NOT EXISTS imports (
                id TEXT PRIMARY KEY,
                file_name TEXT,
                format_id TEXT,
                forwarder_name TEXT,
                overall_confidence REAL,
                total_units INTEGER,
                column_mapping TEXT,
                unmapped_headers TEXT,
                sample_rows TEXT,
                quality TEXT,
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS unit_audits (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                import_id TEXT NOT NULL,
                unit_ref TEXT,
                total_fields INTEGER NOT NULL,
                unmapped_count INTEGER NOT NULL,
                confidence REAL,
                unmapped_fields TEXT,
                FOREIGN KEY (import_id) REFERENCES imports(id)
            );

            CREATE TABLE IF NOT EXISTS risk_snapshots (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                unit_ref TEXT NOT NULL,
                mode TEXT NOT NULL,
                demurrage_status TEXT NOT NULL,
                demurrage_total REAL,
                assessment TEXT,
                recorded_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_unit_audits_import ON unit_audits(import_id);
            CREATE INDEX IF NOT EXISTS idx_risk_snapshots_unit ON risk_snapshots(unit_ref, recorded_at);
            """
        )
        await self._connection.commit()
        logger.info("HistoryStore initialized")

    async def close(self):
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    # Import operations

    async def record_import(self, record: ImportRecord) -> ImportRecord:
        """Store or update an import record."""
        await self._connection.execute(
            """
            INSERT OR REPLACE INTO imports
            (id, file_name, format_id, forwarder_name, overall_confidence, total_units,
             column_mapping, unmapped_headers, sample_rows, quality, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                record.file_name,
                record.format_id,
                record.forwarder_name,
                record.overall_confidence,
                record.total_units,
                json.dumps(record.column_mapping),
                json.dumps(record.unmapped_headers),
                json.dumps(record.sample_rows, default=str),
                record.quality.model_dump_json() if record.quality else None,
                record.created_at.isoformat(),
            ),
        )
        await self._connection.commit()
        return record

    async def get_import(self, import_id: str) -> Optional[ImportRecord]:
        """Get an import record by ID."""
        async with self._connection.execute(
            "SELECT * FROM imports WHERE id = ?", (import_id,)
        ) as cursor:
            row = await cursor.fetchone()
            if row:
                return self._row_to_import(row)
        return None

    async def list_imports(self, limit: int = 50) -> list[ImportRecord]:
        """Get recent imports, newest first."""
        async with self._connection.execute(
            "SELECT * FROM imports ORDER BY created_at DESC LIMIT ?", (limit,)
        ) as cursor:
            rows = await cursor.fetchall()
            return [self._row_to_import(row) for row in rows]

    def _row_to_import(self, row) -> ImportRecord:
        return ImportRecord(
            id=row[0],
            file_name=row[1],
            format_id=row[2],
            forwarder_name=row[3],
            overall_confidence=row[4] or 0.0,
            total_units=row[5] or 0,
            column_mapping=json.loads(row[6]) if row[6] else {},
            unmapped_headers=json.loads(row[7]) if row[7] else [],
            sample_rows=json.loads(row[8]) if row[8] else [],
            quality=ImportQualityReport.model_validate_json(row[9]) if row[9] else None,
            created_at=datetime.fromisoformat(row[10]),
        )

    # Unit audit operations

    async def record_unit_audits(self, import_id: str, records: Iterable[AuditRecord]) -> int:
        """Store the per-unit audit records of an import."""
        rows = [
            (
                import_id,
                record.unit_ref,
                record.total_fields,
                record.unmapped_count,
                record.confidence,
                json.dumps(record.unmapped_fields),
            )
            for record in records
        ]
        await self._connection.executemany(
            """
            INSERT INTO unit_audits
            (import_id, unit_ref, total_fields, unmapped_count, confidence, unmapped_fields)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            rows,
        )
        await self._connection.commit()
        logger.info(f"Recorded {len(rows)} unit audits for import {import_id}")
        return len(rows)

    async def get_unit_audits(self, import_id: str) -> list[AuditRecord]:
        """Get the per-unit audit records of an import, in insertion order."""
        async with self._connection.execute(
            """
            SELECT unit_ref, total_fields, unmapped_count, confidence, unmapped_fields
            FROM unit_audits WHERE import_id = ? ORDER BY id
            """,
            (import_id,),
        ) as cursor:
            rows = await cursor.fetchall()
            return [
                AuditRecord(
                    unit_ref=row[0],
                    total_fields=row[1],
                    unmapped_count=row[2],
                    confidence=row[3] or 0.0,
                    unmapped_fields=json.loads(row[4]) if row[4] else [],
                )
                for row in rows
            ]

    # Risk snapshot operations

    async def record_risk_snapshot(self, unit_ref: str, assessment: RiskAssessment) -> RiskSnapshot:
        """Append an assessment to a unit's risk history."""
        snapshot = RiskSnapshot(
            unit_ref=unit_ref,
            mode=assessment.mode,
            demurrage_status=assessment.demurrage.status,
            demurrage_total=assessment.demurrage.total,
            assessment=assessment.model_dump(mode="json"),
            recorded_at=assessment.evaluated_at,
        )
        cursor = await self._connection.execute(
            """
            INSERT INTO risk_snapshots
            (unit_ref, mode, demurrage_status, demurrage_total, assessment, recorded_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                snapshot.unit_ref,
                snapshot.mode.value,
                snapshot.demurrage_status.value,
                snapshot.demurrage_total,
                json.dumps(snapshot.assessment),
                snapshot.recorded_at.isoformat(),
            ),
        )
        await self._connection.commit()
        snapshot.id = cursor.lastrowid
        return snapshot

    async def get_risk_snapshots(self, unit_ref: str, limit: int = 20) -> list[RiskSnapshot]:
        """Get a unit's risk history, newest first."""
        async with self._connection.execute(
            """
            SELECT id, unit_ref, mode, demurrage_status, demurrage_total, assessment, recorded_at
            FROM risk_snapshots WHERE unit_ref = ?
            ORDER BY recorded_at DESC, id DESC LIMIT ?
            """,
            (unit_ref, limit),
        ) as cursor:
            rows = await cursor.fetchall()
            return [
                RiskSnapshot(
                    id=row[0],
                    unit_ref=row[1],
                    mode=RiskMode(row[2]),
                    demurrage_status=DemurrageStatus(row[3]),
                    demurrage_total=row[4] or 0.0,
                    assessment=json.loads(row[5]) if row[5] else {},
                    recorded_at=datetime.fromisoformat(row[6]),
                )
                for row in rows
            ]
