from __future__ import annotations

from ..normalize import resolve_with_fallback
from .models import NormalizedInputs, RuleResult, ScoreResult


class LevermannRuleEngine:
    """レバーマン戦略（13項目、各 -1/0/+1）の判定エンジン。

    欠損値はルールごとのフォールバック値で判定する。境界値ちょうどは 0 点。
    """

    # (フォールバック, +1 の閾値, -1 の閾値)
    PE_RATIO = (15.0, 12.0, 20.0)                 # 低いほど良い
    EBIT_MARGIN = (10.0, 12.0, 6.0)
    RETURN_ON_EQUITY = (15.0, 20.0, 10.0)
    EQUITY_RATIO = (30.0, 25.0, 15.0)
    EARNINGS_REACTION = (0.0, 3.0, -3.0)
    EARNINGS_REVISIONS = (0.0, 0.0, 0.0)
    ANALYST_OPINIONS = (2.5, 2.0, 3.0)            # 低いほど良い
    MOMENTUM = (0.0, 5.0, -5.0)
    MOVING_AVERAGE_DISTANCE = (0.0, 5.0, -5.0)
    PRICE_STABILITY = (50.0, 20.0, 60.0)          # 低いほど良い
    MARKET_REACTION = (1.0, 0.8, 1.2)             # 低いほど良い
    MARKET_CAP = (5_000_000_000.0, 5_000_000_000.0, 1_000_000_000.0)

    def evaluate(
        self, isin: str, inputs: NormalizedInputs, symbol: str | None = None
    ) -> ScoreResult:
        """13ルールを評価してスコアと合計を返す。"""
        rule_results = [
            self._lower_is_better("P_E_Ratio", "peNormalizedAnnual", inputs.pe_ratio, self.PE_RATIO),
            self._higher_is_better("EBIT_Margin", "operatingMarginTTM", inputs.ebit_margin, self.EBIT_MARGIN),
            self._higher_is_better("Return_on_Equity", "roeTTM", inputs.return_on_equity, self.RETURN_ON_EQUITY),
            self._higher_is_better("Equity_Ratio", "equityRatio", inputs.equity_ratio, self.EQUITY_RATIO),
            self._higher_is_better(
                "Earnings_Reaction", "revenueGrowthQuarterlyYoy", inputs.quarter_reaction, self.EARNINGS_REACTION
            ),
            self._higher_is_better(
                "Earnings_Revisions", "epsGrowthTTMYoy", inputs.earnings_revision, self.EARNINGS_REVISIONS
            ),
            self._lower_is_better(
                "Analyst_Opinions", "recommendationMean", inputs.analyst_rating, self.ANALYST_OPINIONS
            ),
            self._higher_is_better(
                "Price_Momentum_6M", "26WeekPriceReturnDaily", inputs.momentum_6m, self.MOMENTUM
            ),
            self._higher_is_better(
                "Price_Momentum_12M", "52WeekPriceReturnDaily", inputs.momentum_12m, self.MOMENTUM
            ),
            self._higher_is_better(
                "Moving_Average_Distance", "distanceFromMA", inputs.distance_from_ma, self.MOVING_AVERAGE_DISTANCE
            ),
            self._lower_is_better("Price_Stability", "3MonthADReturnStd", inputs.volatility, self.PRICE_STABILITY),
            self._lower_is_better("Market_Reaction", "beta", inputs.beta, self.MARKET_REACTION),
            self._higher_is_better("Market_Capitalization", "marketCapitalization", inputs.market_cap, self.MARKET_CAP),
        ]

        scores = {r.rule_name: r.score for r in rule_results}
        return ScoreResult(
            isin=isin,
            scores=scores,
            total_score=sum(scores.values()),
            symbol=symbol,
            rule_results=rule_results,
        )

    @staticmethod
    def _higher_is_better(
        rule_name: str, label: str, value: float | None, thresholds: tuple[float, float, float]
    ) -> RuleResult:
        fallback, positive_above, negative_below = thresholds
        v, used_fallback = resolve_with_fallback(label, value, fallback)
        if v > positive_above:
            score = 1
        elif v < negative_below:
            score = -1
        else:
            score = 0
        return RuleResult(rule_name, label, value, fallback, used_fallback, score)

    @staticmethod
    def _lower_is_better(
        rule_name: str, label: str, value: float | None, thresholds: tuple[float, float, float]
    ) -> RuleResult:
        fallback, positive_below, negative_above = thresholds
        v, used_fallback = resolve_with_fallback(label, value, fallback)
        if v < positive_below:
            score = 1
        elif v > negative_above:
            score = -1
        else:
            score = 0
        return RuleResult(rule_name, label, value, fallback, used_fallback, score)
