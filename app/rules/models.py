from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(slots=True)
class NormalizedInputs:
    """スコアリングに渡す13個の入力値。欠損は None のまま保持する。"""

    pe_ratio: float | None = None
    ebit_margin: float | None = None
    return_on_equity: float | None = None
    equity_ratio: float | None = None
    quarter_reaction: float | None = None
    earnings_revision: float | None = None
    analyst_rating: float | None = None
    momentum_6m: float | None = None
    momentum_12m: float | None = None
    distance_from_ma: float | None = None
    volatility: float | None = None
    beta: float | None = None
    market_cap: float | None = None


@dataclass(slots=True)
class RuleResult:
    """各ルールの判定結果。"""

    rule_name: str
    label: str
    value: float | None
    fallback: float
    used_fallback: bool
    score: int


@dataclass(slots=True)
class ScoreResult:
    """銘柄のレバーマンスコア。"""

    isin: str
    scores: dict[str, int]
    total_score: int
    symbol: str | None = None
    rule_results: list[RuleResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "isin": self.isin,
            "symbol": self.symbol,
            "scores": dict(self.scores),
            "total_score": self.total_score,
            "rules": [asdict(r) for r in self.rule_results],
        }
