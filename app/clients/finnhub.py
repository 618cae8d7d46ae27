from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

FINNHUB_BASE = "https://finnhub.io/api/v1"
HTTP_TIMEOUT = 30

# financials-reported の貸借対照表で参照する概念ID
CONCEPT_STOCKHOLDERS_EQUITY = "us-gaap_StockholdersEquity"
CONCEPT_TOTAL_ASSETS = "us-gaap_Assets"


class SymbolResolutionError(Exception):
    """ISINからティッカーシンボルを解決できなかった。"""


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [x for x in value if isinstance(x, dict)]


# ──────────────────────────────────────────────
# レスポンスレコード（全フィールド任意）
# ──────────────────────────────────────────────

@dataclass(slots=True)
class Quote:
    current_price: float | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> Quote:
        return cls(current_price=_to_float(_as_dict(payload).get("c")))


@dataclass(slots=True)
class Metrics:
    """/stock/metric の metric オブジェクトから使う値だけを取り出したもの。"""

    pe_ratio: float | None = None
    operating_margin: float | None = None
    return_on_equity: float | None = None
    revenue_growth_quarterly: float | None = None
    eps_growth: float | None = None
    recommendation_mean: float | None = None
    price_return_26w: float | None = None
    price_return_52w: float | None = None
    volatility: float | None = None
    beta: float | None = None
    moving_average_50d: float | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> Metrics:
        m = _as_dict(_as_dict(payload).get("metric"))
        return cls(
            pe_ratio=_to_float(m.get("peNormalizedAnnual")),
            operating_margin=_to_float(m.get("operatingMarginTTM")),
            return_on_equity=_to_float(m.get("roeTTM")),
            revenue_growth_quarterly=_to_float(m.get("revenueGrowthQuarterlyYoy")),
            eps_growth=_to_float(m.get("epsGrowthTTMYoy")),
            recommendation_mean=_to_float(m.get("recommendationMean")),
            price_return_26w=_to_float(m.get("26WeekPriceReturnDaily")),
            price_return_52w=_to_float(m.get("52WeekPriceReturnDaily")),
            volatility=_to_float(m.get("3MonthADReturnStd")),
            beta=_to_float(m.get("beta")),
            moving_average_50d=_to_float(m.get("50DayMA")),
        )


@dataclass(slots=True)
class Profile:
    name: str | None = None
    currency: str | None = None
    market_capitalization: float | None = None  # 百万単位

    @classmethod
    def from_payload(cls, payload: Any) -> Profile:
        p = _as_dict(payload)
        return cls(
            name=p.get("name") or None,
            currency=p.get("currency") or None,
            market_capitalization=_to_float(p.get("marketCapitalization")),
        )


@dataclass(slots=True)
class Recommendation:
    period: str | None = None
    rating: float | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> Recommendation:
        r = _as_dict(payload)
        return cls(period=r.get("period"), rating=_to_float(r.get("rating")))


@dataclass(slots=True)
class BalanceSheet:
    total_equity: float | None = None
    total_assets: float | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> BalanceSheet:
        """最新レポート（data[0]）の bs から概念IDで最初に一致した値を取り出す。"""
        reports = _as_list(_as_dict(payload).get("data"))
        if not reports:
            return cls()
        items = _as_list(_as_dict(reports[0].get("report")).get("bs"))

        def _find(concept: str) -> float | None:
            item = next((x for x in items if x.get("concept") == concept), None)
            return _to_float(item.get("value")) if item else None

        return cls(
            total_equity=_find(CONCEPT_STOCKHOLDERS_EQUITY),
            total_assets=_find(CONCEPT_TOTAL_ASSETS),
        )


class FinnhubClient:
    """Finnhub API クライアント。

    認証は X-Finnhub-Token ヘッダーで行う。
    シンボル解決の失敗だけが例外（SymbolResolutionError）になり、
    それ以外の取得メソッドは失敗時に空レコードを返して処理を継続させる。
    """

    def __init__(
        self, api_key: str, base_url: str = FINNHUB_BASE, timeout: float = HTTP_TIMEOUT
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _get(self, path: str, **params: Any) -> Any:
        resp = requests.get(
            f"{self._base_url}{path}",
            params=params or None,
            headers={"X-Finnhub-Token": self._api_key},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        return resp.json()

    # ──────────────────────────────────────────────
    # ISIN → シンボル 変換
    # ──────────────────────────────────────────────

    def resolve_symbol(self, isin: str) -> str:
        """ISINで検索し、symbol を持つ最初の候補を返す。"""
        try:
            result = self._get("/search", q=isin)
        except (requests.RequestException, ValueError) as exc:
            raise SymbolResolutionError(f"API call failed for ISIN {isin}: {exc}") from exc

        for item in _as_list(_as_dict(result).get("result")):
            symbol = item.get("symbol")
            if isinstance(symbol, str) and symbol.strip():
                return symbol.strip()
        raise SymbolResolutionError(f"Could not resolve symbol for ISIN: {isin}")

    # ──────────────────────────────────────────────
    # API メソッド（失敗しても例外を投げない）
    # ──────────────────────────────────────────────

    def get_quote(self, symbol: str) -> Quote:
        try:
            return Quote.from_payload(self._get("/quote", symbol=symbol))
        except Exception as exc:
            logging.warning("Finnhub: quote failed [%s]: %s", symbol, exc)
            return Quote()

    def get_metrics(self, symbol: str) -> Metrics:
        try:
            return Metrics.from_payload(self._get("/stock/metric", symbol=symbol, metric="all"))
        except Exception as exc:
            logging.warning("Finnhub: metrics failed [%s]: %s", symbol, exc)
            return Metrics()

    def get_profile(self, symbol: str) -> Profile:
        try:
            return Profile.from_payload(self._get("/stock/profile2", symbol=symbol))
        except Exception as exc:
            logging.warning("Finnhub: profile failed [%s]: %s", symbol, exc)
            return Profile()

    def get_recommendations(self, symbol: str) -> list[Recommendation]:
        """アナリスト推奨の時系列（新しい順）を返す。失敗時は空リスト。"""
        try:
            result = self._get("/stock/recommendation", symbol=symbol)
            return [Recommendation.from_payload(r) for r in _as_list(result)]
        except Exception as exc:
            logging.warning("Finnhub: recommendations failed [%s]: %s", symbol, exc)
            return []

    def get_balance_sheet(self, symbol: str) -> BalanceSheet:
        try:
            return BalanceSheet.from_payload(
                self._get("/stock/financials-reported", symbol=symbol)
            )
        except Exception as exc:
            logging.warning("Finnhub: financials failed [%s]: %s", symbol, exc)
            return BalanceSheet()
