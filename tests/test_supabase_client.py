"""Unit tests for Supabase client query encoding and error normalization."""

from __future__ import annotations

import json
from io import BytesIO
from urllib.error import HTTPError

import pytest

from backend.db.supabase_client import SupabaseClient, SupabaseSettings


def _build_client() -> SupabaseClient:
    return SupabaseClient(
        SupabaseSettings(url="https://example.supabase.co", service_role_key="service-role")
    )


class _Response:
    def __init__(self, body: bytes = b"[]", headers: dict[str, str] | None = None) -> None:
        self._body = body
        self.headers = headers or {}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def read(self) -> bytes:
        return self._body


def test_get_rows_uses_doseq_for_repeated_query_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request):
        assert "occurred_on=gte.2024-01-01" in request.full_url
        assert "occurred_on=lte.2024-01-31" in request.full_url
        return _Response()

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    rows, total = client.get_rows(
        table="expenses",
        query=[("occurred_on", "gte.2024-01-01"), ("occurred_on", "lte.2024-01-31")],
        with_count=False,
    )

    assert rows == []
    assert total is None


def test_get_rows_parses_exact_count_from_content_range(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request):
        assert request.get_header("Prefer") == "count=exact"
        return _Response(body=b'[{"id": "1"}]', headers={"content-range": "0-0/42"})

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    rows, total = client.get_rows(table="expenses", query={"select": "id"}, with_count=True)

    assert rows == [{"id": "1"}]
    assert total == 42


def test_get_rows_includes_status_and_body_on_http_error(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _raise_http_error(_request):
        raise HTTPError(
            url="https://example.supabase.co/rest/v1/expenses",
            code=400,
            msg="Bad Request",
            hdrs=None,
            fp=BytesIO(b"Bad Request from Supabase"),
        )

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _raise_http_error)

    with pytest.raises(RuntimeError, match="status 400") as error:
        client.get_rows(table="expenses", query={"select": "*"}, with_count=False)

    assert "Bad Request from Supabase" in str(error.value)


def test_get_rows_requires_anon_key_when_requested() -> None:
    client = _build_client()

    with pytest.raises(ValueError, match="Missing Supabase API key"):
        client.get_rows(table="expenses", query={"select": "*"}, with_count=False, use_anon_key=True)


def test_request_rows_sends_json_body_and_method(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request):
        assert request.get_method() == "PATCH"
        assert request.full_url == "https://example.supabase.co/rest/v1/expenses?id=eq.abc"
        assert request.get_header("Prefer") == "return=representation"
        assert json.loads(request.data.decode("utf-8")) == {"title": "Groceries"}
        return _Response(body=b'[{"id": "abc", "title": "Groceries"}]')

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    rows = client.request_rows(
        table="expenses",
        method="PATCH",
        query={"id": "eq.abc"},
        body={"title": "Groceries"},
    )

    assert rows == [{"id": "abc", "title": "Groceries"}]


def test_request_rows_returns_empty_list_for_empty_body(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request):
        assert request.get_method() == "DELETE"
        assert request.data is None
        return _Response(body=b"")

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    assert client.request_rows(table="expenses", method="DELETE", query={"id": "eq.abc"}) == []
