"""
Append-only SQLite journal of domain events.

The services append an event after every successful mutation of an invoice,
an item's shares or a merchant rule. Rows are never updated or deleted; the
journal's autoincrement sequence is the append order.

The journal is a local file. It records amounts and descriptions, so keep it
out of shared locations.
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from fintrack.model.events import (
    Event,
    InvoiceItemAdded,
    InvoiceItemRemoved,
    InvoiceOpened,
    InvoicePaymentRecorded,
    ItemSharePaymentChanged,
    ItemSharesDistributed,
    MerchantRuleApplied,
    MerchantRuleLearned,
)

EVENT_TYPE_MAP: dict[str, type[Event]] = {
    cls.model_fields["event_type"].default: cls
    for cls in (
        InvoiceOpened,
        InvoiceItemAdded,
        InvoiceItemRemoved,
        InvoicePaymentRecorded,
        ItemSharesDistributed,
        ItemSharePaymentChanged,
        MerchantRuleLearned,
        MerchantRuleApplied,
    )
}

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS journal (
        sequence_number INTEGER PRIMARY KEY AUTOINCREMENT,
        event_id TEXT NOT NULL UNIQUE,
        event_type TEXT NOT NULL,
        event_timestamp TEXT NOT NULL,
        aggregate_type TEXT,
        aggregate_id TEXT,
        payload TEXT NOT NULL,
        metadata TEXT,
        recorded_at TEXT DEFAULT (datetime('now'))
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_journal_type ON journal(event_type)",
    "CREATE INDEX IF NOT EXISTS idx_journal_aggregate ON journal(aggregate_type, aggregate_id)",
)


class EventStore:
    """Append-only event journal backed by SQLite.

    Usage:
        store = EventStore("data/events.db")
        store.append_event(InvoicePaymentRecorded(...))
        events = store.get_events("invoice", "42")
    """

    def __init__(self, db_path: str | Path):
        """Open (and create if needed) the journal at ``db_path``."""
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connection() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        # One short-lived connection per call; commits only when the block succeeds.
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def append_event(self, event: Event) -> int:
        """Append ``event`` and return its sequence number."""
        with self._connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO journal (
                    event_id, event_type, event_timestamp,
                    aggregate_type, aggregate_id, payload, metadata
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    event.event_id,
                    event.event_type,
                    event.event_timestamp.isoformat(),
                    event.aggregate_type,
                    event.aggregate_id,
                    event.model_dump_json(),
                    json.dumps(event.metadata) if event.metadata else None,
                ),
            )
            return cursor.lastrowid

    def get_all_events(self) -> list[Event]:
        """All events in append order."""
        return self._select()

    def get_events(self, aggregate_type: str, aggregate_id: str) -> list[Event]:
        """Events of one aggregate (e.g. ``("invoice", "42")``) in append order."""
        return self._select("aggregate_type = ? AND aggregate_id = ?", (aggregate_type, aggregate_id))

    def get_events_by_type(self, event_type: str) -> list[Event]:
        return self._select("event_type = ?", (event_type,))

    def get_events_since(self, sequence_number: int) -> list[Event]:
        """Events appended after ``sequence_number`` (0 returns everything)."""
        return self._select("sequence_number > ?", (sequence_number,))

    def get_recent_events(self, limit: int) -> list[Event]:
        """The last ``limit`` events, oldest first."""
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT payload FROM journal ORDER BY sequence_number DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [self._deserialize_event(payload) for (payload,) in reversed(rows)]

    def get_latest_sequence_number(self) -> int:
        """Latest sequence number, or 0 for an empty journal."""
        with self._connection() as conn:
            (latest,) = conn.execute("SELECT MAX(sequence_number) FROM journal").fetchone()
        return latest or 0

    def _select(self, where: str | None = None, params: tuple = ()) -> list[Event]:
        sql = "SELECT payload FROM journal"
        if where:
            sql += f" WHERE {where}"
        sql += " ORDER BY sequence_number"
        with self._connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._deserialize_event(payload) for (payload,) in rows]

    def _deserialize_event(self, payload: str) -> Event:
        event_type = json.loads(payload).get("event_type")
        event_class = EVENT_TYPE_MAP.get(event_type)
        if not event_class:
            raise ValueError(f"Unknown event type: {event_type}")
        return event_class.model_validate_json(payload)


__all__ = ["EVENT_TYPE_MAP", "EventStore"]
