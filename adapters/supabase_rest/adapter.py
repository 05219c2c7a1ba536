from __future__ import annotations
from datetime import date
from loguru import logger
from adapters.adapter_types import Society, Voucher, SocietyNotFound, VoucherStatus
from adapters.row_parser import society_from_row, parse_nested_vouchers
from .client import SupabaseClient

SOCIETY_COLUMNS = "id,opening_cash,financial_year_start"
VOUCHER_COLUMNS = "id,voucher_number,voucher_date,status"
# voucher_lines carries line_type (receipt|payment); there is no side column in the table
LINE_COLUMNS = "line_type,particulars,cash_amount,transfer_amount"

def _date_filters(since: date, to: date) -> list[tuple[str, str]]:
    if since == to:
        return [("voucher_date", f"eq.{since.isoformat()}")]
    return [
        ("voucher_date", f"gte.{since.isoformat()}"),
        ("voucher_date", f"lte.{to.isoformat()}"),
    ]

class SupabaseRESTAdapter:
    def __init__(self, url: str, api_key: str, access_token: str | None = None, timeout: int = 30):
        self.client = SupabaseClient(url, api_key, access_token=access_token, timeout=timeout)

    def fetch_society(self, society_id: str) -> Society:
        rows = self.client.get_rows("societies", [
            ("select", SOCIETY_COLUMNS),
            ("id", f"eq.{society_id}"),
        ])
        if not rows:
            raise SocietyNotFound(f"No society with id {society_id}")
        return society_from_row(rows[0], society_id)

    def fetch_posted_vouchers(self, society_id: str, since: date, to: date) -> list[Voucher]:
        """
        Posted vouchers with their lines for an inclusive date range.

        The status filter is applied server-side. Vouchers are ordered by date,
        creation time and id, and their lines by creation time and id, the same
        order the Postgres source uses. The id tiebreak keeps pages stable when
        the result spans several Range requests.
        """
        params = [
            ("select", f"{VOUCHER_COLUMNS},voucher_lines({LINE_COLUMNS})"),
            ("society_id", f"eq.{society_id}"),
            *_date_filters(since, to),
            ("status", f"eq.{VoucherStatus.POSTED.value}"),
            ("order", "voucher_date.asc,created_at.asc,id.asc"),
            ("voucher_lines.order", "created_at.asc,id.asc"),
        ]
        vouchers = parse_nested_vouchers(self.client.get_rows("vouchers", params))
        logger.debug(f"Fetched {len(vouchers)} posted vouchers for {society_id} ({since}..{to})")
        return vouchers

    def close(self):
        self.client.close()
