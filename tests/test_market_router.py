"""Tests for the market index refresh relay."""
import httpx
import pytest

from namsan_portal.db import MarketIndex

HEADERS = {"Authorization": "Bearer anon-key"}


@pytest.fixture
def indices(store):
    return store.table(MarketIndex).insert(
        [
            {"symbol": "KOSPI", "name_ko": "코스피", "name_en": "KOSPI"},
            {"symbol": "SPX", "name_ko": "S&P 500", "name_en": "S&P 500"},
            {"symbol": "CUSTOM:XYZ", "name_ko": "사용자 지수", "name_en": "Custom"},
            {"symbol": "KOSDAQ", "name_ko": "코스닥", "name_en": "KOSDAQ", "is_active": False},
        ]
    )


@pytest.fixture
def kospi_quote(tickers):
    tickers["^KS11"] = {"lastPrice": 2600.0, "previousClose": 2574.0}


class TestFetchMarketIndices:
    def test_requires_an_authorization_header(self, client):
        response = client.post("/fetch-market-indices")

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Authorization required"}

    def test_no_active_indices(self, client):
        response = client.post("/fetch-market-indices", headers=HEADERS)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "No active indices found"}

    def test_updates_indices_and_reports_failures(
        self, client, store, indices, kospi_quote, resend_upstream
    ):
        response = client.post("/fetch-market-indices", headers=HEADERS)

        assert response.status_code == 200
        data = {row["symbol"]: row for row in response.json()["data"]}
        assert set(data) == {"KOSPI", "SPX", "CUSTOM:XYZ"}
        assert data["KOSPI"]["currentValue"] == 2600.0
        assert data["KOSPI"]["changeValue"] == 26.0
        assert data["KOSPI"]["changePercent"] == 1.01
        assert data["KOSPI"]["error"] is None
        assert data["SPX"]["error"] == "No data from Yahoo Finance"
        assert data["CUSTOM:XYZ"]["error"] == "No Yahoo symbol mapping"

        kospi = store.table(MarketIndex).eq("symbol", "KOSPI").maybe_single()
        assert kospi.current_value == 2600.0
        assert kospi.updated_at is not None
        assert store.table(MarketIndex).eq("symbol", "SPX").maybe_single().current_value is None
        assert resend_upstream.requests == []

    def test_scheduled_run_mails_failures(self, client, indices, kospi_quote, resend_upstream):
        response = client.post("/fetch-market-indices", json={"autoUpdate": True}, headers=HEADERS)

        assert response.status_code == 200
        (sent,) = resend_upstream.bodies()
        assert sent["to"] == ["admin@namsan.test"]
        assert sent["subject"].endswith("2/3 지수")
        assert "CUSTOM:XYZ" in sent["html"]

    def test_mail_failure_does_not_fail_the_refresh(
        self, client, indices, kospi_quote, resend_upstream
    ):
        resend_upstream.handler = lambda request: httpx.Response(500, json={"message": "down"})

        response = client.post("/fetch-market-indices", json={"autoUpdate": True}, headers=HEADERS)

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert len(resend_upstream.requests) == 1
