"""
Application Configuration

Runtime settings are loaded from environment variables. Everything that
shapes a score (periods, thresholds, normalization rules, weights) lives
in ScoringConfig, a versioned object handed to the scanner at
construction time.
"""

import json
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings

from techscan.services.base import ConfigurationError


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    app_name: str = "techscan"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"

    # Scanning
    default_timeframe: str = "1d"
    candle_lookback: int = Field(default=200, ge=1, le=1000)
    scan_concurrency: int = Field(default=8, ge=1)
    scan_timeout_seconds: Optional[float] = Field(default=30.0, gt=0)

    # Optional JSON file overriding the default ScoringConfig
    scoring_config_path: Optional[str] = None

    # Logging
    log_level: str = "INFO"

    class Config:
        env_prefix = "TECHSCAN_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# =============================================================================
# SCORING CONFIGURATION
# =============================================================================


class RuleKind(str, Enum):
    """How a raw indicator reading is mapped to a signal."""

    BAND = "band"  # oscillator: below lower is bullish, above upper is bearish
    SIGN = "sign"  # positive is bullish, negative is bearish
    THRESHOLD = "threshold"  # above upper is bullish, otherwise neutral
    FLAG = "flag"  # value == 1 is bullish
    LABEL = "label"  # the reading carries its own bullish/bearish label
    CONTEXT = "context"  # informational only, never scores


class NormalizationRule(BaseModel):
    """Static rule turning one indicator's raw value into score/signal/tier."""

    kind: RuleKind
    display_name: str
    tier: int = Field(..., ge=1, le=3)
    score: float = Field(default=1.0, ge=0)
    bearish_score: Optional[float] = Field(
        default=None, ge=0, description="Magnitude for bearish readings (defaults to score)"
    )
    lower: Optional[float] = None
    upper: Optional[float] = None
    deadband: float = Field(default=0.0, ge=0)
    bullish_text: str = "bullish"
    bearish_text: str = "bearish"
    neutral_text: str = "neutral"

    @model_validator(mode="after")
    def _check_bounds(self) -> "NormalizationRule":
        if self.kind == RuleKind.BAND:
            if self.lower is None or self.upper is None:
                raise ValueError(f"{self.display_name}: band rule needs lower and upper")
            if self.lower >= self.upper:
                raise ValueError(f"{self.display_name}: lower must be below upper")
        if self.kind == RuleKind.THRESHOLD and self.upper is None:
            raise ValueError(f"{self.display_name}: threshold rule needs upper")
        return self


class IndicatorPeriods(BaseModel):
    """Lookback periods for every indicator family."""

    ema_fast: int = Field(default=20, gt=0)
    ema_slow: int = Field(default=50, gt=0)
    rsi: int = Field(default=14, gt=0)
    macd_fast: int = Field(default=12, gt=0)
    macd_slow: int = Field(default=26, gt=0)
    macd_signal: int = Field(default=9, gt=0)
    mfi: int = Field(default=14, gt=0)
    atr: int = Field(default=14, gt=0)
    adx: int = Field(default=14, gt=0)
    bollinger: int = Field(default=20, gt=1)
    bollinger_std: float = Field(default=2.0, gt=0)
    stochastic_k: int = Field(default=14, gt=0)
    stochastic_d: int = Field(default=3, gt=0)
    williams_r: int = Field(default=14, gt=0)
    cci: int = Field(default=20, gt=0)
    volume_osc_short: int = Field(default=5, gt=0)
    volume_osc_long: int = Field(default=10, gt=0)
    volume_window: int = Field(default=20, gt=0)
    obv_trend_lookback: int = Field(default=5, gt=0)
    psar_step: float = Field(default=0.02, gt=0)
    psar_max: float = Field(default=0.2, gt=0)

    @model_validator(mode="after")
    def _check_pairs(self) -> "IndicatorPeriods":
        if self.ema_fast >= self.ema_slow:
            raise ValueError("ema_fast must be shorter than ema_slow")
        if self.macd_fast >= self.macd_slow:
            raise ValueError("macd_fast must be shorter than macd_slow")
        if self.volume_osc_short >= self.volume_osc_long:
            raise ValueError("volume_osc_short must be shorter than volume_osc_long")
        if self.psar_step > self.psar_max:
            raise ValueError("psar_step cannot exceed psar_max")
        return self


class StateThresholds(BaseModel):
    """Decision-table thresholds for the four market states."""

    rsi_oversold: float = 30.0
    rsi_overbought: float = 70.0
    rsi_strong: float = 55.0
    rsi_weak: float = 45.0
    atr_low_percent: float = 0.5
    atr_high_percent: float = 2.0
    bb_squeeze_width: float = Field(default=0.1, gt=0, description="Band width ratio below which bands are squeezed")

    @model_validator(mode="after")
    def _check_order(self) -> "StateThresholds":
        if not (self.rsi_oversold < self.rsi_weak <= self.rsi_strong < self.rsi_overbought):
            raise ValueError("RSI thresholds must satisfy oversold < weak <= strong < overbought")
        if self.atr_low_percent >= self.atr_high_percent:
            raise ValueError("atr_low_percent must be below atr_high_percent")
        return self


class RecommendationThresholds(BaseModel):
    """
    Cut points mapping total score to a recommendation.

    Bounds are inclusive: score >= buy is a buy, score <= sell is a sell.
    Everything strictly between sell and buy is a hold.
    """

    strong_sell: float = -6.0
    sell: float = -2.0
    buy: float = 2.0
    strong_buy: float = 6.0

    @model_validator(mode="after")
    def _check_monotonic(self) -> "RecommendationThresholds":
        if not (self.strong_sell < self.sell <= 0 <= self.buy < self.strong_buy):
            raise ValueError(
                "Recommendation thresholds must satisfy strong_sell < sell <= 0 <= buy < strong_buy"
            )
        if self.sell == self.buy:
            raise ValueError("sell and buy cannot share a cut point")
        return self


class BullishCriteria(BaseModel):
    """Checklist used by the bullish-only scan filter."""

    rsi_min: float = 40.0
    rsi_max: float = 70.0
    adx_min: float = 25.0
    min_criteria: int = Field(default=3, ge=1, le=4)
    min_total_score: float = 4.0


class UniverseRules(BaseModel):
    """Symbol allow/deny rules applied before any candles are fetched."""

    quote_assets: list[str] = ["USDT", "FDUSD", "USDC", "BUSD", "TUSD", "BTC", "ETH", "BNB"]
    stablecoins: list[str] = ["USDT", "USDC", "BUSD", "DAI", "TUSD", "FDUSD", "USDP", "EUR", "GBP"]
    leveraged_patterns: list[str] = [r"UP$", r"DOWN$", r"[1-5]L$", r"[1-5]S$", r"BULL$", r"BEAR$"]
    deny_patterns: list[str] = []
    allow_pattern: Optional[str] = None


def _default_rules() -> dict[str, NormalizationRule]:
    return {
        "vwap": NormalizationRule(
            kind=RuleKind.SIGN, display_name="VWAP", tier=3, score=1,
            bullish_text="Price above VWAP", bearish_text="Price below VWAP",
            neutral_text="Price at VWAP",
        ),
        "rsi": NormalizationRule(
            kind=RuleKind.BAND, display_name="RSI", tier=2, score=2,
            lower=30, upper=70,
            bullish_text="Oversold", bearish_text="Overbought", neutral_text="Normal",
        ),
        "macd": NormalizationRule(
            kind=RuleKind.SIGN, display_name="MACD", tier=1, score=3,
            bullish_text="MACD above signal line", bearish_text="MACD below signal line",
            neutral_text="MACD on signal line",
        ),
        "ema_crossover": NormalizationRule(
            kind=RuleKind.LABEL, display_name="EMA crossover", tier=1, score=3,
            bullish_text="Price above rising EMA stack", bearish_text="Price below falling EMA stack",
            neutral_text="Mixed EMA stack",
        ),
        "bb_squeeze": NormalizationRule(
            kind=RuleKind.FLAG, display_name="Bollinger Bands", tier=2, score=1,
            bullish_text="Bands in squeeze", neutral_text="Bands normal",
        ),
        "adx": NormalizationRule(
            kind=RuleKind.THRESHOLD, display_name="ADX", tier=1, score=3, upper=25,
            bullish_text="Strong trend", neutral_text="Weak trend",
        ),
        "plus_di": NormalizationRule(
            kind=RuleKind.SIGN, display_name="+DI", tier=2, score=2,
            bullish_text="+DI above -DI", bearish_text="+DI below -DI", neutral_text="+DI equals -DI",
        ),
        "stochastic": NormalizationRule(
            kind=RuleKind.BAND, display_name="Stochastic %K", tier=2, score=2, bearish_score=1,
            lower=20, upper=80,
            bullish_text="Oversold", bearish_text="Overbought", neutral_text="Normal",
        ),
        "williams_r": NormalizationRule(
            kind=RuleKind.BAND, display_name="Williams %R", tier=2, score=2, bearish_score=1,
            lower=-80, upper=-20,
            bullish_text="Oversold", bearish_text="Overbought", neutral_text="Normal",
        ),
        "cci": NormalizationRule(
            kind=RuleKind.BAND, display_name="CCI", tier=2, score=3, bearish_score=2,
            lower=-100, upper=100,
            bullish_text="Oversold", bearish_text="Overbought", neutral_text="Normal",
        ),
        "mfi": NormalizationRule(
            kind=RuleKind.BAND, display_name="MFI", tier=1, score=3, bearish_score=2,
            lower=20, upper=80,
            bullish_text="Oversold", bearish_text="Overbought", neutral_text="Normal",
        ),
        "obv": NormalizationRule(
            kind=RuleKind.SIGN, display_name="OBV", tier=3, score=1,
            bullish_text="Volume supporting uptrend", bearish_text="Volume supporting downtrend",
            neutral_text="Volume flat",
        ),
        "atr": NormalizationRule(
            kind=RuleKind.CONTEXT, display_name="ATR%", tier=3, score=0,
            neutral_text="Market volatility indicator",
        ),
        "parabolic_sar": NormalizationRule(
            kind=RuleKind.LABEL, display_name="PSAR", tier=2, score=2,
            bullish_text="Uptrend", bearish_text="Downtrend", neutral_text="No trend",
        ),
        "volume_oscillator": NormalizationRule(
            kind=RuleKind.SIGN, display_name="Volume Osc", tier=3, score=1, deadband=5,
            bullish_text="Above average volume", bearish_text="Below average volume",
            neutral_text="Average volume",
        ),
    }


def _default_weights() -> dict[str, float]:
    return {
        "ema_crossover": 1.0,
        "rsi": 1.0,
        "macd": 1.0,
        "obv": 1.0,
        "bb_squeeze": 1.0,
    }


class ScoringConfig(BaseModel):
    """
    Versioned scoring configuration.

    Passed to the scanner at construction so that scans with different
    thresholds can run side by side and tests can vary them freely.
    """

    version: str = "1.0"
    score_bound: float = Field(default=3.0, gt=0, description="Every sub-score is clamped to +/- this bound")
    periods: IndicatorPeriods = Field(default_factory=IndicatorPeriods)
    state: StateThresholds = Field(default_factory=StateThresholds)
    rules: dict[str, NormalizationRule] = Field(default_factory=_default_rules)
    composite_weights: dict[str, float] = Field(default_factory=_default_weights)
    recommendation: RecommendationThresholds = Field(default_factory=RecommendationThresholds)
    bullish: BullishCriteria = Field(default_factory=BullishCriteria)
    universe: UniverseRules = Field(default_factory=UniverseRules)
    disabled_indicators: list[str] = []

    class Config:
        frozen = True

    @model_validator(mode="after")
    def _check_references(self) -> "ScoringConfig":
        unknown = set(self.composite_weights) - set(self.rules)
        if unknown:
            raise ValueError(f"Composite weights reference unknown indicators: {sorted(unknown)}")
        unknown = set(self.disabled_indicators) - set(self.rules)
        if unknown:
            raise ValueError(f"Cannot disable unknown indicators: {sorted(unknown)}")
        return self

    def is_enabled(self, name: str) -> bool:
        return name in self.rules and name not in self.disabled_indicators

    @classmethod
    def from_file(cls, path: str) -> "ScoringConfig":
        """Load a configuration from a JSON file; missing top-level sections keep their defaults."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
            return cls.model_validate(data)
        except (OSError, ValueError) as e:
            raise ConfigurationError("ScoringConfig", f"Cannot load scoring config from {path}: {e}")


@lru_cache()
def get_scoring_config() -> ScoringConfig:
    """Scoring config from TECHSCAN_SCORING_CONFIG_PATH, or the defaults."""
    path = get_settings().scoring_config_path
    if path:
        return ScoringConfig.from_file(path)
    return ScoringConfig()
