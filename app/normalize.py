"""プロバイダーの生データをスコアリング入力に正規化する。"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TypeVar

from .clients.finnhub import BalanceSheet, Metrics, Profile, Quote, Recommendation
from .rules.models import NormalizedInputs

T = TypeVar("T")

MARKET_CAP_UNIT = 1_000_000  # profile2 の時価総額は百万単位


def resolve_with_fallback(label: str, value: T | None, fallback: T) -> tuple[T, bool]:
    """値があればそのまま、なければ fallback を返す。2番目の戻り値はフォールバック使用有無。"""
    if value is not None:
        logging.info("[DATA] %s received: %s", label, value)
        return value, False
    logging.warning("[DATA] %s missing, fallback used: %s", label, fallback)
    return fallback, True


def _log_presence(label: str, value: float | None) -> None:
    if value is not None:
        logging.info("[DATA] %s received: %s", label, value)
    else:
        logging.info("[DATA] %s missing, rule fallback will apply", label)


@dataclass(slots=True)
class RawMarketData:
    """各プロバイダーから集めた生の数値（全て任意）。"""

    pe_ratio: float | None = None
    operating_margin: float | None = None
    return_on_equity: float | None = None
    total_assets: float | None = None
    total_equity: float | None = None
    revenue_growth_quarterly: float | None = None
    eps_growth: float | None = None
    analyst_rating: float | None = None
    price_return_26w: float | None = None
    price_return_52w: float | None = None
    current_price: float | None = None
    moving_average_50d: float | None = None
    volatility: float | None = None
    beta: float | None = None
    market_cap_millions: float | None = None


def collect_raw_data(
    quote: Quote,
    metrics: Metrics,
    profile: Profile,
    recommendations: list[Recommendation],
    balance_sheet: BalanceSheet,
    moving_average: float | None,
) -> RawMarketData:
    """取得結果を1つのレコードにまとめる。

    移動平均は Alpha Vantage の値を優先し、なければ metrics の 50DayMA を使う。
    """
    latest = recommendations[0] if recommendations else None
    return RawMarketData(
        pe_ratio=metrics.pe_ratio,
        operating_margin=metrics.operating_margin,
        return_on_equity=metrics.return_on_equity,
        total_assets=balance_sheet.total_assets,
        total_equity=balance_sheet.total_equity,
        revenue_growth_quarterly=metrics.revenue_growth_quarterly,
        eps_growth=metrics.eps_growth,
        analyst_rating=latest.rating if latest else None,
        price_return_26w=metrics.price_return_26w,
        price_return_52w=metrics.price_return_52w,
        current_price=quote.current_price,
        moving_average_50d=(
            moving_average if moving_average is not None else metrics.moving_average_50d
        ),
        volatility=metrics.volatility,
        beta=metrics.beta,
        market_cap_millions=profile.market_capitalization,
    )


def distance_from_moving_average(
    current_price: float | None, moving_average: float | None
) -> float | None:
    """移動平均からの乖離率(%)。移動平均が欠けていれば現在値で代用するので 0 になる。"""
    if current_price is None:
        logging.warning("[DATA] currentPrice missing, distance from MA not computed")
        return None
    ma, _ = resolve_with_fallback("movingAverage50d", moving_average, current_price)
    if ma == 0:
        return None
    return (current_price - ma) / ma * 100.0


def equity_ratio(total_equity: float | None, total_assets: float | None) -> float | None:
    """自己資本比率(%)。どちらか一方でも欠けていれば None。"""
    if total_equity is None or total_assets is None or total_assets == 0:
        return None
    return total_equity / total_assets * 100.0


def normalize_raw(raw: RawMarketData) -> NormalizedInputs:
    for label, value in (
        ("currentPrice", raw.current_price),
        ("totalEquity", raw.total_equity),
        ("totalAssets", raw.total_assets),
        ("marketCapitalization", raw.market_cap_millions),
        ("analystRating", raw.analyst_rating),
    ):
        _log_presence(label, value)

    # 0 は提供元の「不明」なので欠損扱い
    market_cap = raw.market_cap_millions * MARKET_CAP_UNIT if raw.market_cap_millions else None

    return NormalizedInputs(
        pe_ratio=raw.pe_ratio,
        ebit_margin=raw.operating_margin,
        return_on_equity=raw.return_on_equity,
        equity_ratio=equity_ratio(raw.total_equity, raw.total_assets),
        quarter_reaction=raw.revenue_growth_quarterly,
        earnings_revision=raw.eps_growth,
        analyst_rating=raw.analyst_rating,
        momentum_6m=raw.price_return_26w,
        momentum_12m=raw.price_return_52w,
        distance_from_ma=distance_from_moving_average(
            raw.current_price, raw.moving_average_50d
        ),
        volatility=raw.volatility,
        beta=raw.beta,
        market_cap=market_cap,
    )


def normalize(
    quote: Quote,
    metrics: Metrics,
    profile: Profile,
    recommendations: list[Recommendation],
    balance_sheet: BalanceSheet,
    moving_average: float | None,
) -> NormalizedInputs:
    """取得結果からスコアリング入力を作る。フォールバック値はここでは埋めない。"""
    raw = collect_raw_data(
        quote, metrics, profile, recommendations, balance_sheet, moving_average
    )
    return normalize_raw(raw)
