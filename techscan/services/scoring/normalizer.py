"""
Score Normalizer

Maps raw indicator readings to IndicatorResult (score, signal, tier)
using one static rule per indicator from ScoringConfig.rules.
"""

import logging
from typing import Optional

from techscan.core.config import NormalizationRule, RuleKind, ScoringConfig
from techscan.schemas.indicators import IndicatorResult, Signal
from techscan.services.indicators.interface import IndicatorReading, IndicatorSnapshot

logger = logging.getLogger(__name__)


def clamp(value: float, bound: float) -> float:
    return max(-bound, min(bound, value))


def _format_value(value: float) -> str:
    if abs(value) >= 1000:
        return f"{value:,.0f}"
    if abs(value) >= 1:
        return f"{value:.2f}"
    return f"{value:.4g}"


class ScoreNormalizer:
    """
    Table-driven normalizer.

    Readings exactly on a threshold are neutral. Every score is clamped to
    +/- score_bound so no indicator can dominate the composite.
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()

    def classify(self, rule: NormalizationRule, reading: IndicatorReading) -> Signal:
        """Signal for a reading under a rule; None values are neutral."""
        basis = reading.basis

        if rule.kind == RuleKind.LABEL:
            if reading.label in (Signal.BULLISH.value, Signal.BEARISH.value):
                return Signal(reading.label)
            return Signal.NEUTRAL

        if basis is None or rule.kind == RuleKind.CONTEXT:
            return Signal.NEUTRAL

        if rule.kind == RuleKind.BAND:
            if basis < rule.lower:
                return Signal.BULLISH
            if basis > rule.upper:
                return Signal.BEARISH
            return Signal.NEUTRAL

        if rule.kind == RuleKind.SIGN:
            if basis > rule.deadband:
                return Signal.BULLISH
            if basis < -rule.deadband:
                return Signal.BEARISH
            return Signal.NEUTRAL

        if rule.kind == RuleKind.THRESHOLD:
            return Signal.BULLISH if basis > rule.upper else Signal.NEUTRAL

        if rule.kind == RuleKind.FLAG:
            return Signal.BULLISH if basis == 1 else Signal.NEUTRAL

        return Signal.NEUTRAL

    def score_for(self, rule: NormalizationRule, signal: Signal) -> float:
        if signal == Signal.BULLISH:
            raw = rule.score
        elif signal == Signal.BEARISH:
            raw = -(rule.bearish_score if rule.bearish_score is not None else rule.score)
        else:
            raw = 0.0
        return clamp(raw, self.config.score_bound)

    def describe(self, rule: NormalizationRule, reading: IndicatorReading, signal: Signal) -> str:
        if reading.value is None:
            return f"{rule.display_name}: insufficient data"
        text = {
            Signal.BULLISH: rule.bullish_text,
            Signal.BEARISH: rule.bearish_text,
            Signal.NEUTRAL: rule.neutral_text,
        }[signal]
        return f"{rule.display_name}: {_format_value(reading.value)} - {text}"

    def normalize(self, name: str, reading: IndicatorReading) -> IndicatorResult:
        """Normalize a single named reading."""
        rule = self.config.rules[name]

        if reading.value is None:
            return IndicatorResult(
                value=None,
                signal=Signal.NEUTRAL,
                score=0.0,
                tier=rule.tier,
                description=self.describe(rule, reading, Signal.NEUTRAL),
            )

        signal = self.classify(rule, reading)
        return IndicatorResult(
            value=reading.value,
            signal=signal,
            score=self.score_for(rule, signal),
            tier=rule.tier,
            description=self.describe(rule, reading, signal),
        )

    def normalize_all(self, snapshot: IndicatorSnapshot) -> dict[str, Optional[IndicatorResult]]:
        """
        Normalize every configured indicator.

        Disabled indicators map to None; indicators the snapshot lacks
        (e.g. an empty series) come back as insufficient-data results.
        """
        results: dict[str, Optional[IndicatorResult]] = {}
        for name in self.config.rules:
            if not self.config.is_enabled(name):
                results[name] = None
                continue
            reading = snapshot.readings.get(name, IndicatorReading(value=None))
            results[name] = self.normalize(name, reading)

        missing = [name for name, result in results.items() if result is not None and result.value is None]
        if missing:
            logger.debug(f"{snapshot.symbol}: insufficient data for {', '.join(missing)}")
        return results
