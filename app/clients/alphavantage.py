from __future__ import annotations

import logging
from typing import Any

import pandas as pd
import requests

ALPHA_VANTAGE_BASE = "https://www.alphavantage.co/query"
HTTP_TIMEOUT = 30
SMA_SERIES_KEY = "Technical Analysis: SMA"

# 200 で返ってくるがデータを含まない応答のキー（レート制限・キー不正など）
_NOTICE_KEYS = ("Note", "Information", "Error Message")


class AlphaVantageClient:
    """Alpha Vantage テクニカル指標クライアント。"""

    def __init__(
        self, api_key: str, base_url: str = ALPHA_VANTAGE_BASE, timeout: float = HTTP_TIMEOUT
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout

    def _get(self, **params: Any) -> Any:
        resp = requests.get(
            self._base_url,
            params={**params, "apikey": self._api_key},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def get_sma(self, symbol: str, time_period: int = 50) -> float | None:
        """日足終値の単純移動平均の最新値を返す。取得できなければ None。"""
        try:
            payload = self._get(
                function="SMA",
                symbol=symbol,
                interval="daily",
                time_period=time_period,
                series_type="close",
            )
        except Exception as exc:
            logging.warning("AlphaVantage: SMA failed [%s]: %s", symbol, exc)
            return None

        if not isinstance(payload, dict):
            logging.warning("AlphaVantage: unexpected SMA payload [%s]", symbol)
            return None
        for key in _NOTICE_KEYS:
            if key in payload:
                logging.warning("AlphaVantage: %s [%s]: %s", key, symbol, payload[key])
                return None

        return latest_sma(payload.get(SMA_SERIES_KEY))


def latest_sma(values: Any) -> float | None:
    """日付キーの系列から最も新しい日付の SMA 値を取り出す。"""
    if not isinstance(values, dict) or not values:
        return None
    series = pd.Series(
        {d: v.get("SMA") for d, v in values.items() if isinstance(v, dict)},
        dtype="object",
    )
    if series.empty:
        return None
    series.index = pd.to_datetime(series.index, errors="coerce")
    series = pd.to_numeric(series, errors="coerce")
    series = series[series.index.notna()].dropna().sort_index()
    if series.empty:
        return None
    return float(series.iloc[-1])
