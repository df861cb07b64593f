from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from quantgrid.constants import Regime, Trend
from quantgrid.core.indicators import IndicatorSnapshot, ema
from quantgrid.utils.candle import Candle


@dataclass(frozen=True)
class MarketState:
    regime: Regime = Regime.LOADING
    confidence: int = 0
    trend: Trend = Trend.NEUTRAL
    bull_score: int = 0
    bear_score: int = 0
    ema9: Optional[float] = None
    ema21: Optional[float] = None
    ema50: Optional[float] = None


def _above(fast: Optional[float], slow: Optional[float]) -> bool:
    # an EMA still warming up counts as below anything defined
    if fast is None:
        return False
    return slow is None or fast > slow


class RegimeDetector:
    def __init__(self, window: int = 30, vol_lookback: int = 10,
                 volatile_trend: float = 0.008, high_volatility: float = 0.01):
        self.window = window
        self.vol_lookback = vol_lookback
        self.volatile_trend = volatile_trend
        self.high_volatility = high_volatility

    def avg_volatility(self, closes: np.ndarray) -> float:
        recent = closes[-self.vol_lookback:]
        if len(recent) < 2:
            return 0.0
        moves = np.abs(np.diff(recent)) / (recent[:-1] + 1e-10)
        return float(np.mean(moves))

    def classify(self, bull: int, bear: int, avg_vol: float) -> tuple[Regime, Trend]:
        # trend dominance is checked before raw volatility
        if bull > bear + 2:
            if avg_vol > self.volatile_trend:
                return Regime.VOLATILE_BULL, Trend.BULLISH
            return Regime.TRENDING_BULL, Trend.BULLISH
        if bear > bull + 2:
            if avg_vol > self.volatile_trend:
                return Regime.VOLATILE_BEAR, Trend.BEARISH
            return Regime.TRENDING_BEAR, Trend.BEARISH
        if avg_vol > self.high_volatility:
            return Regime.HIGH_VOLATILITY, Trend.NEUTRAL
        return Regime.RANGING, Trend.NEUTRAL

    def detect(self, candles: Sequence[Candle], ind: IndicatorSnapshot) -> MarketState:
        if len(candles) < self.window:
            return MarketState()

        closes = np.array([c.close for c in candles])
        ema9, ema21, ema50 = ema(closes, 9), ema(closes, 21), ema(closes, 50)
        current = float(closes[-1])
        avg_vol = self.avg_volatility(closes)

        bull = bear = 0
        if _above(ema9, ema21): bull += 2
        else:                   bear += 2
        if _above(ema21, ema50): bull += 2
        else:                    bear += 2
        if current > ind.bollinger.middle: bull += 1
        else:                              bear += 1
        if ind.rsi > 55:   bull += 1
        elif ind.rsi < 45: bear += 1
        if ind.macd.histogram > 0: bull += 1
        else:                      bear += 1

        confidence = int(round(100 * max(bull, bear) / (bull + bear)))
        regime, trend = self.classify(bull, bear, avg_vol)

        return MarketState(
            regime=regime,
            confidence=confidence,
            trend=trend,
            bull_score=bull,
            bear_score=bear,
            ema9=ema9,
            ema21=ema21,
            ema50=ema50,
        )
