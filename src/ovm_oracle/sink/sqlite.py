"""SQLite proof store - local downstream store upserting proofs by index."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any

import aiosqlite

from ovm_oracle.models.proofs import TransactionBatchProof
from ovm_oracle.models.records import DeliveryResult

log = logging.getLogger(__name__)

SCHEMA = """
-- One row per L2 transaction index; re-delivery replaces the row
CREATE TABLE IF NOT EXISTS proofs (
    idx INTEGER PRIMARY KEY,
    batch_index INTEGER NOT NULL,
    state_root TEXT NOT NULL,
    payload TEXT NOT NULL,
    deliveries INTEGER NOT NULL DEFAULT 1,
    delivered_at TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_proofs_batch ON proofs(batch_index);
"""


class SQLiteProofStore:
    """Stores delivered proofs keyed by index.

    Delivering the same index twice keeps a single row, holding the latest
    payload, and bumps its delivery counter.
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """Open the database and create tables if they don't exist."""
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self._db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.executescript(SCHEMA)
        await self._db.commit()

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        assert self._db is not None, "Store not initialized. Call initialize() first."
        return self._db

    async def deliver(self, proof: TransactionBatchProof) -> DeliveryResult:
        start = time.monotonic()
        payload = proof.to_payload()
        try:
            await self.db.execute(
                """INSERT INTO proofs (idx, batch_index, state_root, payload)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT(idx) DO UPDATE SET
                       batch_index = excluded.batch_index,
                       state_root = excluded.state_root,
                       payload = excluded.payload,
                       deliveries = proofs.deliveries + 1,
                       delivered_at = datetime('now')""",
                (
                    proof.index,
                    proof.batch_header.batch_index,
                    payload["stateRoot"],
                    json.dumps(payload),
                ),
            )
            await self.db.commit()
        except aiosqlite.Error as exc:
            log.warning("Delivery of index %d failed: %s", proof.index, exc)
            return DeliveryResult(
                success=False,
                index=proof.index,
                error=str(exc),
                duration_ms=int((time.monotonic() - start) * 1000),
            )

        log.info("Put transaction proof to %s (index %d)", self._db_path, proof.index)
        return DeliveryResult(
            success=True,
            index=proof.index,
            duration_ms=int((time.monotonic() - start) * 1000),
        )

    async def get_proof(self, index: int) -> dict[str, Any] | None:
        async with self.db.execute(
            "SELECT payload FROM proofs WHERE idx = ?", (index,),
        ) as cur:
            row = await cur.fetchone()
        return json.loads(row["payload"]) if row else None

    async def get_deliveries(self, index: int) -> int:
        async with self.db.execute(
            "SELECT deliveries FROM proofs WHERE idx = ?", (index,),
        ) as cur:
            row = await cur.fetchone()
        return row["deliveries"] if row else 0

    async def count(self) -> int:
        async with self.db.execute("SELECT COUNT(*) AS n FROM proofs") as cur:
            row = await cur.fetchone()
        return row["n"]

    async def list_indices(self, limit: int = 50) -> list[tuple[int, int, str]]:
        """Most recent (index, batch_index, delivered_at) rows, highest index first."""
        async with self.db.execute(
            "SELECT idx, batch_index, delivered_at FROM proofs ORDER BY idx DESC LIMIT ?",
            (limit,),
        ) as cur:
            rows = await cur.fetchall()
        return [(r["idx"], r["batch_index"], r["delivered_at"]) for r in rows]
