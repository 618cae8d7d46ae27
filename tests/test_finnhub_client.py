"""Tests for the Finnhub client with requests.get mocked."""

from unittest.mock import patch

import pytest
import requests

from app.clients.finnhub import (
    BalanceSheet,
    FinnhubClient,
    Metrics,
    Profile,
    Quote,
    SymbolResolutionError,
)

GET = "app.clients.finnhub.requests.get"


@pytest.fixture
def client() -> FinnhubClient:
    return FinnhubClient("test-key", base_url="https://finnhub.test/api/v1", timeout=5)


class TestResolveSymbol:
    def test_first_entry_with_symbol(self, client, fake_response, search_payload):
        with patch(GET, return_value=fake_response(search_payload)) as mock_get:
            assert client.resolve_symbol("DE0007164600") == "SAP"

        args, kwargs = mock_get.call_args
        assert args[0] == "https://finnhub.test/api/v1/search"
        assert kwargs["params"] == {"q": "DE0007164600"}
        assert kwargs["headers"] == {"X-Finnhub-Token": "test-key"}
        assert kwargs["timeout"] == 5

    def test_no_symbol_raises(self, client, fake_response):
        payload = {"count": 1, "result": [{"description": "no ticker"}]}
        with patch(GET, return_value=fake_response(payload)):
            with pytest.raises(SymbolResolutionError, match="Could not resolve symbol"):
                client.resolve_symbol("XX0000000000")

    def test_empty_result_raises(self, client, fake_response):
        with patch(GET, return_value=fake_response({"count": 0, "result": []})):
            with pytest.raises(SymbolResolutionError):
                client.resolve_symbol("XX0000000000")

    def test_http_error_is_wrapped(self, client, fake_response):
        with patch(GET, return_value=fake_response(status_code=401)):
            with pytest.raises(SymbolResolutionError, match="API call failed") as exc_info:
                client.resolve_symbol("DE0007164600")
        assert isinstance(exc_info.value.__cause__, requests.HTTPError)

    def test_timeout_is_wrapped(self, client):
        with patch(GET, side_effect=requests.Timeout("timed out")):
            with pytest.raises(SymbolResolutionError) as exc_info:
                client.resolve_symbol("DE0007164600")
        assert isinstance(exc_info.value.__cause__, requests.Timeout)

    def test_malformed_json_is_wrapped(self, client, fake_response):
        with patch(GET, return_value=fake_response(json_error=ValueError("bad json"))):
            with pytest.raises(SymbolResolutionError):
                client.resolve_symbol("DE0007164600")


class TestFetchers:
    def test_quote(self, client, fake_response):
        with patch(GET, return_value=fake_response({"c": 101.5, "pc": 100.0})):
            assert client.get_quote("SAP") == Quote(current_price=101.5)

    def test_metrics(self, client, fake_response, metrics_payload):
        with patch(GET, return_value=fake_response(metrics_payload)) as mock_get:
            metrics = client.get_metrics("SAP")

        assert mock_get.call_args.kwargs["params"] == {"symbol": "SAP", "metric": "all"}
        assert metrics.pe_ratio == 10.0
        assert metrics.price_return_26w == 6.0
        assert metrics.price_return_52w == -6.0
        assert metrics.volatility == 15.0
        assert metrics.moving_average_50d == 95.0

    def test_profile(self, client, fake_response):
        payload = {"name": "SAP SE", "currency": "EUR", "marketCapitalization": 200000.5}
        with patch(GET, return_value=fake_response(payload)):
            profile = client.get_profile("SAP")
        assert profile == Profile(name="SAP SE", currency="EUR", market_capitalization=200000.5)

    def test_recommendations_keep_provider_order(self, client, fake_response):
        payload = [
            {"period": "2024-06-01", "rating": 1.9, "buy": 20},
            {"period": "2024-05-01", "rating": 2.4, "buy": 18},
        ]
        with patch(GET, return_value=fake_response(payload)):
            recs = client.get_recommendations("SAP")
        assert [r.rating for r in recs] == [1.9, 2.4]

    def test_balance_sheet_first_report_first_match(self, client, fake_response, financials_payload):
        with patch(GET, return_value=fake_response(financials_payload)):
            bs = client.get_balance_sheet("SAP")
        assert bs == BalanceSheet(total_equity=260.0, total_assets=1000.0)

    def test_balance_sheet_without_reports(self, client, fake_response):
        with patch(GET, return_value=fake_response({"data": []})):
            assert client.get_balance_sheet("SAP") == BalanceSheet()

    @pytest.mark.parametrize(
        "method,empty",
        [
            ("get_quote", Quote()),
            ("get_metrics", Metrics()),
            ("get_profile", Profile()),
            ("get_recommendations", []),
            ("get_balance_sheet", BalanceSheet()),
        ],
    )
    def test_failure_returns_empty(self, client, method, empty, caplog):
        with patch(GET, side_effect=requests.ConnectionError("down")):
            assert getattr(client, method)("SAP") == empty
        assert "Finnhub:" in caplog.text

    def test_non_2xx_returns_empty(self, client, fake_response):
        with patch(GET, return_value=fake_response(status_code=503)):
            assert client.get_profile("SAP") == Profile()

    def test_unexpected_shape_returns_empty(self, client, fake_response):
        with patch(GET, return_value=fake_response(["not", "a", "dict"])):
            assert client.get_metrics("SAP") == Metrics()
