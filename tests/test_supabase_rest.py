"""
Tests for the Supabase (PostgREST) client, error mapping and adapter.

HTTP is stubbed at the requests.Session level; no network access.
"""
from datetime import date
from decimal import Decimal
from pathlib import Path
from unittest.mock import Mock
import json
import pytest
import requests
from adapters.adapter_types import SocietyNotFound
from adapters.supabase_rest.adapter import SupabaseRESTAdapter, SOCIETY_COLUMNS
from adapters.supabase_rest.client import SupabaseClient, content_range_total
from adapters.supabase_rest.validators import (
    ensure_response_ok,
    SupabaseHTTPError,
    SupabaseConnectionError,
)
from daybook.deriver import compute_day_book, RUNNING

FIX = Path(__file__).parent / "fixtures"
DAY = date(2024, 1, 15)


def _response(status, body=b"[]", reason="OK", content_range=None):
    r = requests.Response()
    r.status_code = status
    r._content = body
    r.reason = reason
    r.encoding = "utf-8"
    if content_range:
        r.headers["Content-Range"] = content_range
    return r


def _fixture_response(name, status=200):
    return _response(status, (FIX / name).read_bytes())


def _rows_response(rows, content_range=None):
    return _response(206 if content_range else 200, json.dumps(rows).encode(), content_range=content_range)


class TestEnsureResponseOk:
    def test_success_passes(self):
        ensure_response_ok(_response(200))
        ensure_response_ok(_response(206))

    def test_postgrest_error_body(self):
        r = _fixture_response("postgrest_error.json", status=403)
        r.reason = "Forbidden"
        with pytest.raises(SupabaseHTTPError) as exc:
            ensure_response_ok(r)
        assert exc.value.status_code == 403
        assert exc.value.code == "42501"
        assert "permission denied for table vouchers" in str(exc.value)

    def test_error_details_are_appended(self):
        body = b'{"code": "PGRST100", "message": "failed to parse filter", "details": "unexpected \\"x\\""}'
        with pytest.raises(SupabaseHTTPError) as exc:
            ensure_response_ok(_response(400, body, reason="Bad Request"))
        assert str(exc.value) == 'Supabase returned HTTP 400 - failed to parse filter (unexpected "x")'

    def test_non_json_error_uses_reason(self):
        with pytest.raises(SupabaseHTTPError) as exc:
            ensure_response_ok(_response(502, b"<html>Bad gateway</html>", reason="Bad Gateway"))
        assert "Bad Gateway" in str(exc.value)
        assert exc.value.code is None


class TestSupabaseClient:
    def test_headers(self):
        client = SupabaseClient("https://abc.supabase.co/", "anon-key")
        assert client.base_url == "https://abc.supabase.co/rest/v1"
        assert client.session.headers["apikey"] == "anon-key"
        assert client.session.headers["Authorization"] == "Bearer anon-key"
        assert client.session.headers["Accept"] == "application/json"

    def test_access_token_is_the_bearer(self):
        client = SupabaseClient("https://abc.supabase.co", "anon-key", access_token="user-jwt")
        assert client.session.headers["apikey"] == "anon-key"
        assert client.session.headers["Authorization"] == "Bearer user-jwt"

    def test_get_rows_decodes_numbers_as_decimal(self):
        client = SupabaseClient("https://abc.supabase.co", "anon-key", timeout=7)
        client.session.get = Mock(return_value=_fixture_response("society_row.json"))
        rows = client.get_rows("societies", [("id", "eq.soc-1")])
        assert rows[0]["opening_cash"] == Decimal("10000.50")
        assert isinstance(rows[0]["opening_cash"], Decimal)
        client.session.get.assert_called_once_with(
            "https://abc.supabase.co/rest/v1/societies",
            params=[("id", "eq.soc-1")],
            headers={"Range-Unit": "items", "Range": "0-999", "Prefer": "count=exact"},
            timeout=7,
        )

    @pytest.mark.parametrize("error", [
        requests.ConnectionError("refused"),
        requests.Timeout("read timed out"),
        requests.RequestException("too many redirects"),
    ])
    def test_transport_errors(self, error):
        client = SupabaseClient("https://abc.supabase.co", "anon-key")
        client.session.get = Mock(side_effect=error)
        with pytest.raises(SupabaseConnectionError):
            client.get_rows("vouchers", [])

    def test_http_error_is_raised(self):
        client = SupabaseClient("https://abc.supabase.co", "anon-key")
        client.session.get = Mock(return_value=_fixture_response("postgrest_error.json", status=401))
        with pytest.raises(SupabaseHTTPError):
            client.get_rows("vouchers", [])


class TestSupabaseRESTAdapter:
    @pytest.fixture
    def adapter(self):
        a = SupabaseRESTAdapter("https://abc.supabase.co", "anon-key")
        a.client.get_rows = Mock()
        yield a
        a.close()

    def test_fetch_society(self, adapter):
        adapter.client.get_rows.return_value = [
            {"id": "soc-1", "opening_cash": Decimal("10000.50"), "financial_year_start": None},
        ]
        society = adapter.fetch_society("soc-1")
        assert society.opening_cash == Decimal("10000.50")
        adapter.client.get_rows.assert_called_once_with(
            "societies", [("select", SOCIETY_COLUMNS), ("id", "eq.soc-1")]
        )

    def test_unknown_society(self, adapter):
        adapter.client.get_rows.return_value = []
        with pytest.raises(SocietyNotFound):
            adapter.fetch_society("missing")

    def test_fetch_posted_vouchers_for_one_day(self, adapter):
        adapter.client.get_rows.return_value = []
        adapter.fetch_posted_vouchers("soc-1", DAY, DAY)
        table, params = adapter.client.get_rows.call_args[0]
        assert table == "vouchers"
        assert ("society_id", "eq.soc-1") in params
        assert ("voucher_date", "eq.2024-01-15") in params
        assert ("status", "eq.posted") in params
        assert ("order", "voucher_date.asc,created_at.asc,id.asc") in params
        assert ("voucher_lines.order", "created_at.asc,id.asc") in params
        select = dict(params)["select"]
        assert "voucher_lines(" in select
        assert "cash_amount" in select and "transfer_amount" in select

    def test_fetch_posted_vouchers_for_a_range(self, adapter):
        adapter.client.get_rows.return_value = []
        adapter.fetch_posted_vouchers("soc-1", date(2023, 4, 1), date(2024, 1, 14))
        params = adapter.client.get_rows.call_args[0][1]
        assert ("voucher_date", "gte.2023-04-01") in params
        assert ("voucher_date", "lte.2024-01-14") in params

    def test_end_to_end_parsing(self):
        adapter = SupabaseRESTAdapter("https://abc.supabase.co", "anon-key")
        adapter.client.session.get = Mock(return_value=_fixture_response("vouchers_posted_day.json"))
        vouchers = adapter.fetch_posted_vouchers("soc-1", DAY, DAY)
        assert len(vouchers) == 3
        assert vouchers[1].lines[0].transfer_amount == Decimal("1500.1")
        adapter.close()


class TestPagination:
    """Results larger than one page are read with consecutive Range requests."""

    def _ranges(self, client):
        return [c.kwargs["headers"]["Range"] for c in client.session.get.call_args_list]

    def test_reads_every_page(self):
        rows = [{"id": f"v-{i}"} for i in range(5)]
        client = SupabaseClient("https://abc.supabase.co", "anon-key", page_size=2)
        client.session.get = Mock(side_effect=[
            _rows_response(rows[0:2], "0-1/5"),
            _rows_response(rows[2:4], "2-3/5"),
            _rows_response(rows[4:], "4-4/5"),
        ])
        assert client.get_rows("vouchers", []) == rows
        assert self._ranges(client) == ["0-1", "2-3", "4-5"]

    def test_server_cap_below_page_size(self):
        rows = [{"id": f"v-{i}"} for i in range(3)]
        client = SupabaseClient("https://abc.supabase.co", "anon-key")
        client.session.get = Mock(side_effect=[
            _rows_response(rows[0:2], "0-1/3"),
            _rows_response(rows[2:], "2-2/3"),
        ])
        assert client.get_rows("vouchers", []) == rows
        assert self._ranges(client) == ["0-999", "2-1001"]

    def test_unknown_total_reads_until_empty_page(self):
        client = SupabaseClient("https://abc.supabase.co", "anon-key", page_size=2)
        client.session.get = Mock(side_effect=[
            _rows_response([{"id": "a"}, {"id": "b"}], "0-1/*"),
            _rows_response([], "*/*"),
        ])
        assert len(client.get_rows("vouchers", [])) == 2
        assert client.session.get.call_count == 2

    def test_empty_result_is_one_request(self):
        client = SupabaseClient("https://abc.supabase.co", "anon-key")
        client.session.get = Mock(return_value=_rows_response([], "*/0"))
        assert client.get_rows("vouchers", []) == []
        assert client.session.get.call_count == 1

    @pytest.mark.parametrize("header, expected", [
        ("0-999/1500", 1500),
        ("*/0", 0),
        ("0-9/*", None),
        (None, None),
        ("", None),
    ])
    def test_content_range_total(self, header, expected):
        assert content_range_total(header) == expected

    def test_running_opening_counts_every_prior_voucher(self):
        prior = [
            {"id": f"v-{i:04d}", "voucher_number": None, "voucher_date": "2024-01-10", "status": "posted",
             "voucher_lines": [{"line_type": "receipt", "particulars": "Deposit",
                                "cash_amount": 1, "transfer_amount": 0}]}
            for i in range(1500)
        ]
        society = [{"id": "soc-1", "opening_cash": 0, "financial_year_start": "2024-01-01"}]

        def serve(url, params, headers, timeout):
            if url.endswith("/societies"):
                return _rows_response(society, "0-0/1")
            if ("voucher_date", "eq.2024-01-15") in params:
                return _rows_response([], "*/0")
            start = int(headers["Range"].split("-")[0])
            page = prior[start:start + 1000]
            return _rows_response(page, f"{start}-{start + len(page) - 1}/{len(prior)}")

        adapter = SupabaseRESTAdapter("https://abc.supabase.co", "anon-key")
        adapter.client.session.get = Mock(side_effect=serve)
        summary = compute_day_book(adapter, "soc-1", DAY, opening_mode=RUNNING).summary
        adapter.close()

        assert summary.opening_cash == Decimal("1500")
        assert summary.closing_cash == Decimal("1500")
