"""
Direct Postgres source for the day book.

Reads the same societies / vouchers / voucher_lines tables the hosted
service exposes over REST, using a plain psycopg connection.
"""
from __future__ import annotations
from datetime import date
import psycopg
from psycopg.rows import dict_row
from loguru import logger
from adapters.adapter_types import Society, Voucher, SocietyNotFound, VoucherStatus
from adapters.row_parser import society_from_row, group_joined_rows


def get_connection(db_url: str):
    """
    Create a database connection.

    Autocommit with dict rows; numeric columns come back as Decimal.
    """
    return psycopg.connect(db_url, autocommit=True, row_factory=dict_row)


class PostgresAdapter:
    """
    Read-only LedgerSource over a psycopg connection.

    The connection is opened lazily and reused. psycopg serialises
    concurrent use of one connection, so the two day-book reads may be
    issued from different threads.
    """

    def __init__(self, db_url: str, schema: str = "public"):
        self.db_url = db_url
        self.schema = schema
        self._conn = None

    @property
    def conn(self):
        """Get or create database connection."""
        if self._conn is None or self._conn.closed:
            self._conn = get_connection(self.db_url)
        return self._conn

    def close(self):
        if self._conn and not self._conn.closed:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def fetch_society(self, society_id: str) -> Society:
        with self.conn.cursor() as cur:
            cur.execute(
                f"""
                SELECT id, opening_cash, financial_year_start
                FROM {self.schema}.societies
                WHERE id = %s
                """,
                (society_id,),
            )
            row = cur.fetchone()
        if not row:
            raise SocietyNotFound(f"No society with id {society_id}")
        return society_from_row(row, society_id)

    def fetch_posted_vouchers(self, society_id: str, since: date, to: date) -> list[Voucher]:
        with self.conn.cursor() as cur:
            cur.execute(
                f"""
                SELECT v.id AS voucher_id, v.voucher_number, v.voucher_date, v.status,
                       l.id AS line_id, l.line_type, l.particulars,
                       l.cash_amount, l.transfer_amount
                FROM {self.schema}.vouchers v
                LEFT JOIN {self.schema}.voucher_lines l ON l.voucher_id = v.id
                WHERE v.society_id = %s
                  AND v.voucher_date BETWEEN %s AND %s
                  AND v.status = %s
                ORDER BY v.voucher_date, v.created_at, v.id, l.created_at, l.id
                """,
                (society_id, since, to, VoucherStatus.POSTED.value),
            )
            rows = cur.fetchall()
        vouchers = group_joined_rows(rows)
        logger.debug(f"Fetched {len(vouchers)} posted vouchers for {society_id} ({since}..{to})")
        return vouchers
