"""
Composite Scorer / Recommender

Sums weighted sub-scores into total_score and maps it to a
recommendation through monotonic cut points.
"""

from typing import Mapping, Optional

from techscan.core.config import RecommendationThresholds, ScoringConfig
from techscan.schemas.indicators import IndicatorResult, Recommendation, Signal

# Category -> indicator whose positive score passes it
PASS_CATEGORIES = {
    "trend": "ema_crossover",
    "rsi": "rsi",
    "macd": "macd",
    "volume": "obv",
    "obv": "obv",
    "volatility": "bb_squeeze",
}

PASSING_RECOMMENDATIONS = (Recommendation.BUY, Recommendation.STRONG_BUY)


def recommend(score: float, thresholds: Optional[RecommendationThresholds] = None) -> Recommendation:
    """
    Map a total score to a recommendation.

    Bounds are inclusive and ordered strong_sell < sell <= 0 <= buy <
    strong_buy, so a higher score never ranks lower.
    """
    t = thresholds or RecommendationThresholds()
    if score >= t.strong_buy:
        return Recommendation.STRONG_BUY
    if score >= t.buy:
        return Recommendation.BUY
    if score <= t.strong_sell:
        return Recommendation.STRONG_SELL
    if score <= t.sell:
        return Recommendation.SELL
    return Recommendation.HOLD


class CompositeScorer:
    """Weighted sum over the configured indicator subset."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()

    def total_score(self, indicators: Mapping[str, Optional[IndicatorResult]]) -> float:
        total = 0.0
        for name, weight in self.config.composite_weights.items():
            result = indicators.get(name)
            if result is None:
                continue
            total += weight * result.score
        return round(total, 4)

    def recommendation(self, total_score: float) -> Recommendation:
        return recommend(total_score, self.config.recommendation)

    @staticmethod
    def passes(recommendation: Recommendation) -> bool:
        return recommendation in PASSING_RECOMMENDATIONS

    @staticmethod
    def passes_detail(indicators: Mapping[str, Optional[IndicatorResult]]) -> dict[str, bool]:
        detail = {}
        for category, name in PASS_CATEGORIES.items():
            result = indicators.get(name)
            detail[category] = result is not None and result.score > 0
        return detail

    def is_bullish_setup(
        self,
        indicators: Mapping[str, Optional[IndicatorResult]],
        total_score: float,
    ) -> bool:
        """At least `min_criteria` of trend/RSI/MACD/ADX agree, and the score is high enough."""
        c = self.config.bullish

        def _signal(name: str) -> Optional[Signal]:
            result = indicators.get(name)
            return result.signal if result is not None else None

        def _value(name: str) -> Optional[float]:
            result = indicators.get(name)
            return result.value if result is not None else None

        rsi_val = _value("rsi")
        adx_val = _value("adx")
        criteria = [
            _signal("ema_crossover") == Signal.BULLISH,
            rsi_val is not None and c.rsi_min < rsi_val < c.rsi_max,
            _signal("macd") == Signal.BULLISH,
            adx_val is not None and adx_val > c.adx_min,
        ]
        return sum(criteria) >= c.min_criteria and total_score > c.min_total_score
