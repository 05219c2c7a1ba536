from __future__ import annotations
import requests

class SupabaseHTTPError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, code: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code

class SupabaseConnectionError(RuntimeError):
    pass

def _error_payload(response: requests.Response) -> dict:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}

def ensure_response_ok(response: requests.Response) -> None:
    """
    Raises SupabaseHTTPError for any non-2xx response.
    PostgREST error bodies look like {"code": ..., "message": ..., "details": ..., "hint": ...};
    when the body is not JSON the HTTP reason is used instead.
    """
    if 200 <= response.status_code < 300:
        return
    payload = _error_payload(response)
    msg = payload.get("message") or response.reason or "request failed"
    details = payload.get("details")
    if details:
        msg = f"{msg} ({details})"
    raise SupabaseHTTPError(
        f"Supabase returned HTTP {response.status_code} - {msg}",
        status_code=response.status_code,
        code=payload.get("code"),
    )
