"""Pytest configuration and fixtures."""

from unittest.mock import MagicMock

import pytest
import requests

from app.rules.models import NormalizedInputs


def make_response(payload=None, status_code: int = 200, json_error: Exception | None = None):
    """Build a stand-in for requests.Response."""
    resp = MagicMock()
    resp.status_code = status_code
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    else:
        resp.raise_for_status.return_value = None
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    return resp


@pytest.fixture
def fake_response():
    return make_response


@pytest.fixture
def search_payload() -> dict:
    return {
        "count": 2,
        "result": [
            {"description": "SAP SE", "displaySymbol": "", "type": "Common Stock"},
            {"description": "SAP SE", "displaySymbol": "SAP", "symbol": "SAP", "type": "Common Stock"},
        ],
    }


@pytest.fixture
def metrics_payload() -> dict:
    return {
        "metric": {
            "peNormalizedAnnual": 10.0,
            "operatingMarginTTM": 15.0,
            "roeTTM": 25.0,
            "revenueGrowthQuarterlyYoy": 4.0,
            "epsGrowthTTMYoy": 1.0,
            "recommendationMean": 2.1,
            "26WeekPriceReturnDaily": 6.0,
            "52WeekPriceReturnDaily": -6.0,
            "3MonthADReturnStd": 15.0,
            "beta": 0.7,
            "50DayMA": 95.0,
        },
        "metricType": "all",
        "symbol": "SAP",
    }


@pytest.fixture
def financials_payload() -> dict:
    return {
        "cik": "0001000184",
        "data": [
            {
                "year": 2024,
                "report": {
                    "bs": [
                        {"concept": "us-gaap_Assets", "value": 1000.0},
                        {"concept": "us-gaap_StockholdersEquity", "value": 260.0},
                        {"concept": "us-gaap_StockholdersEquity", "value": 999.0},
                    ],
                },
            },
            {
                "year": 2023,
                "report": {"bs": [{"concept": "us-gaap_Assets", "value": 1.0}]},
            },
        ],
    }


@pytest.fixture
def sma_payload() -> dict:
    return {
        "Meta Data": {"1: Symbol": "SAP", "2: Indicator": "Simple Moving Average (SMA)"},
        "Technical Analysis: SMA": {
            "2024-05-30": {"SMA": "99.5000"},
            "2024-05-31": {"SMA": "100.0000"},
            "2024-05-29": {"SMA": "98.7500"},
        },
    }


@pytest.fixture
def all_missing_inputs() -> NormalizedInputs:
    return NormalizedInputs()


@pytest.fixture
def strong_inputs() -> NormalizedInputs:
    """Twelve positive signals and a negative 12-month momentum."""
    return NormalizedInputs(
        pe_ratio=10,
        ebit_margin=15,
        return_on_equity=25,
        equity_ratio=26,
        quarter_reaction=4,
        earnings_revision=1,
        analyst_rating=1.8,
        momentum_6m=6,
        momentum_12m=-6,
        distance_from_ma=6,
        volatility=15,
        beta=0.7,
        market_cap=6e9,
    )
