from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any

from .clients.alphavantage import AlphaVantageClient
from .clients.finnhub import (
    BalanceSheet,
    FinnhubClient,
    Metrics,
    Profile,
    Quote,
    Recommendation,
)
from .config import Settings, settings
from .normalize import normalize
from .rules.levermann import LevermannRuleEngine
from .rules.models import NormalizedInputs, ScoreResult

LOG = logging.getLogger(__name__)

MOVING_AVERAGE_PERIOD = 50


@dataclass(slots=True)
class MarketSnapshot:
    """1銘柄分の取得結果。取得に失敗した項目は空レコードになる。"""

    symbol: str
    quote: Quote = field(default_factory=Quote)
    metrics: Metrics = field(default_factory=Metrics)
    profile: Profile = field(default_factory=Profile)
    recommendations: list[Recommendation] = field(default_factory=list)
    balance_sheet: BalanceSheet = field(default_factory=BalanceSheet)
    moving_average: float | None = None


class AnalysisService:
    """ISIN → シンボル解決 → データ取得 → 正規化 → スコアリング。"""

    def __init__(
        self,
        finnhub: FinnhubClient,
        alpha_vantage: AlphaVantageClient,
        max_workers: int = 6,
    ) -> None:
        self.finnhub = finnhub
        self.alpha_vantage = alpha_vantage
        self.max_workers = max_workers
        self.engine = LevermannRuleEngine()

    @classmethod
    def from_settings(cls, cfg: Settings = settings) -> AnalysisService:
        if not cfg.finnhub_api_key:
            LOG.warning("FINNHUB_API_KEY unset; symbol resolution will fail")
        return cls(
            finnhub=FinnhubClient(cfg.finnhub_api_key, cfg.finnhub_base_url, cfg.http_timeout),
            alpha_vantage=AlphaVantageClient(
                cfg.alpha_vantage_api_key, cfg.alpha_vantage_base_url, cfg.http_timeout
            ),
            max_workers=cfg.fetch_workers,
        )

    def analyse_stock(self, isin: str) -> ScoreResult:
        """
        ISINのレバーマンスコアを計算する。

        Raises:
            SymbolResolutionError: シンボルを解決できなかった場合（処理全体を中断）
        """
        symbol, inputs = self.fetch_stock_data(isin)
        result = self.engine.evaluate(isin, inputs, symbol=symbol)
        LOG.info("%s (%s): total score %d", isin, symbol, result.total_score)
        return result

    def fetch_stock_data(self, isin: str) -> tuple[str, NormalizedInputs]:
        LOG.info("Fetching data for ISIN: %s", isin)
        try:
            symbol = self.finnhub.resolve_symbol(isin)
        except Exception:
            LOG.error("Symbol resolution failed for ISIN %s", isin)
            raise
        LOG.info("Resolved symbol: %s", symbol)

        snapshot = self.fetch_snapshot(symbol)
        inputs = normalize(
            snapshot.quote,
            snapshot.metrics,
            snapshot.profile,
            snapshot.recommendations,
            snapshot.balance_sheet,
            snapshot.moving_average,
        )
        return symbol, inputs

    def fetch_snapshot(self, symbol: str) -> MarketSnapshot:
        """6種類のデータを並列取得する。各取得は失敗しても空レコードを返す。"""
        fetchers: dict[str, Any] = {
            "quote": self.finnhub.get_quote,
            "metrics": self.finnhub.get_metrics,
            "profile": self.finnhub.get_profile,
            "recommendations": self.finnhub.get_recommendations,
            "balance_sheet": self.finnhub.get_balance_sheet,
            "moving_average": lambda s: self.alpha_vantage.get_sma(s, MOVING_AVERAGE_PERIOD),
        }
        snapshot = MarketSnapshot(symbol=symbol)
        with ThreadPoolExecutor(
            max_workers=max(1, min(self.max_workers, len(fetchers))),
            thread_name_prefix="fetch",
        ) as executor:
            futures = {executor.submit(fn, symbol): name for name, fn in fetchers.items()}
            for future in as_completed(futures):
                name = futures[future]
                try:
                    setattr(snapshot, name, future.result())
                except Exception:
                    LOG.exception("  %s: %s fetch failed (continuing)", symbol, name)
        return snapshot
