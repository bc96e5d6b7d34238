"""
SQLite-based append-only ledger of finalized bills.
Keyed by bill number; a bill is stored as its JSON snapshot and never updated.
"""
import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from billing.models import Bill
from errors import ValidationError


class BillLedger:
    """Durable history of saved bills."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        """Get a new connection (sqlite3 connections are not thread-safe)."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self):
        conn = self._get_conn()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS bills (
                    bill_number TEXT PRIMARY KEY,
                    customer_name TEXT NOT NULL,
                    bill_date TEXT NOT NULL,
                    total REAL NOT NULL,
                    snapshot TEXT NOT NULL,
                    recorded_at TEXT NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def append(self, bill: Bill) -> None:
        """
        Record a finalized bill.

        Raises:
            ValidationError: a bill with this number is already recorded.
        """
        snapshot = bill.to_dict()
        conn = self._get_conn()
        try:
            conn.execute(
                """INSERT INTO bills (bill_number, customer_name, bill_date, total, snapshot, recorded_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    bill.bill_number,
                    bill.customer_name,
                    bill.date,
                    snapshot['total'],
                    json.dumps(snapshot, ensure_ascii=False),
                    datetime.now(timezone.utc).isoformat(),
                )
            )
            conn.commit()
        except sqlite3.IntegrityError:
            raise ValidationError(f"Bill {bill.bill_number} is already recorded", field='billNumber')
        finally:
            conn.close()

    def get(self, bill_number: str) -> Optional[Bill]:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT snapshot FROM bills WHERE bill_number = ?", (bill_number,)
            ).fetchone()
        finally:
            conn.close()
        return Bill.from_dict(json.loads(row['snapshot'])) if row else None

    def list(self, limit: int = 100) -> List[Bill]:
        """Most recently recorded first."""
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT snapshot FROM bills ORDER BY recorded_at DESC, rowid DESC LIMIT ?", (limit,)
            ).fetchall()
        finally:
            conn.close()
        return [Bill.from_dict(json.loads(r['snapshot'])) for r in rows]
