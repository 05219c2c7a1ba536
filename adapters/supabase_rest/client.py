from __future__ import annotations
from decimal import Decimal
import requests
from loguru import logger
from .validators import ensure_response_ok, SupabaseConnectionError

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "coopledger/0.1",
}

# Supabase caps a response at 1000 rows unless the project raises max_rows
PAGE_SIZE = 1000


def content_range_total(header: str | None) -> int | None:
    """Total row count from a PostgREST Content-Range ("0-999/1500", "*/0"); None if unknown."""
    if not header or "/" not in header:
        return None
    total = header.rsplit("/", 1)[1].strip()
    return int(total) if total.isdigit() else None


class SupabaseClient:
    """Read-only PostgREST client. No retries: a failed read is reported once."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: str | None = None,
        timeout: int = 30,
        page_size: int = PAGE_SIZE,
    ):
        self.base_url = base_url.rstrip("/") + "/rest/v1"
        self.timeout = timeout
        self.page_size = page_size
        self.session = requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {access_token or api_key}",
        })

    def _get(self, url: str, params: list[tuple[str, str]], headers: dict) -> requests.Response:
        try:
            r = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.ConnectionError as e:
            logger.error(f"Failed to connect to Supabase at {self.base_url}: {e}")
            raise SupabaseConnectionError(f"Cannot connect to Supabase: {e}") from e
        except requests.Timeout as e:
            logger.error(f"Supabase request timed out after {self.timeout}s")
            raise SupabaseConnectionError(f"Request timeout: {e}") from e
        except requests.RequestException as e:
            logger.error(f"Supabase request failed: {e}")
            raise SupabaseConnectionError(f"Request failed: {e}") from e
        ensure_response_ok(r)
        return r

    def get_rows(self, table: str, params: list[tuple[str, str]]) -> list[dict]:
        """
        GET /rest/v1/<table> and return every matching row.

        Rows are read page by page with Range headers until the exact count
        from Content-Range is reached. When the server caps a page below
        page_size the next Range starts after the rows actually received.
        JSON numbers are decoded straight to Decimal so amounts never pass
        through float.
        """
        url = f"{self.base_url}/{table}"
        rows: list[dict] = []
        while True:
            start = len(rows)
            headers = {
                "Range-Unit": "items",
                "Range": f"{start}-{start + self.page_size - 1}",
                "Prefer": "count=exact",
            }
            r = self._get(url, params, headers)
            page = r.json(parse_float=Decimal)
            rows.extend(page)
            total = content_range_total(r.headers.get("Content-Range"))
            if not page:
                break
            if total is not None:
                if len(rows) >= total:
                    break
            elif len(page) < self.page_size:
                break
            logger.debug(f"{table}: read {len(rows)} of {total if total is not None else '?'} rows")
        return rows

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
