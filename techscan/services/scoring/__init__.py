"""
Scoring Service

CONTRACT:
    Input:  IndicatorSnapshot
    Output: normalized IndicatorResults, MarketState, total score, recommendation

RESPONSIBILITIES:
    - Normalize raw indicator readings into bounded sub-scores
    - Classify trend, momentum, volume and volatility states
    - Reduce sub-scores into a composite score and recommendation
"""

from techscan.services.scoring.normalizer import ScoreNormalizer, clamp
from techscan.services.scoring.classifier import (
    StateClassifier,
    trend_bias,
    momentum_state,
    volume_context,
    volatility_state,
)
from techscan.services.scoring.composite import CompositeScorer, recommend

__all__ = [
    "ScoreNormalizer",
    "clamp",
    "StateClassifier",
    "trend_bias",
    "momentum_state",
    "volume_context",
    "volatility_state",
    "CompositeScorer",
    "recommend",
]
