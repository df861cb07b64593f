import numpy as np
import pytest

from quantgrid.constants import Regime, Trend
from quantgrid.core.indicators import compute_indicators
from quantgrid.core.regime import MarketState, RegimeDetector
from quantgrid.utils.candle import Candle


def _candles(closes):
    return [Candle(open=c, high=c, low=c, close=c, volume=1000.0, time=float(i))
            for i, c in enumerate(closes)]


def _detect(closes):
    return RegimeDetector().detect(_candles(closes), compute_indicators(closes))


def test_loading_below_30_candles():
    closes = [100.0 + i for i in range(29)]
    state = _detect(closes)
    assert state == MarketState()
    assert state.regime == Regime.LOADING
    assert state.confidence == 0
    assert state.trend == Trend.NEUTRAL


def test_not_loading_at_30_candles():
    closes = [100.0 + i for i in range(30)]
    assert _detect(closes).regime != Regime.LOADING


def test_steep_rally_is_volatile_bull():
    closes = [1000.0 + 30 * i for i in range(60)]
    state = _detect(closes)
    assert state.bull_score == 7
    assert state.bear_score == 0
    assert state.confidence == 100
    assert state.trend == Trend.BULLISH
    assert state.regime == Regime.VOLATILE_BULL
    assert state.ema9 > state.ema21 > state.ema50


def test_slow_decline_is_trending_bear():
    closes = [5000.0 - 2 * i for i in range(60)]
    state = _detect(closes)
    assert state.bear_score == 7
    assert state.confidence == 100
    assert state.trend == Trend.BEARISH
    assert state.regime == Regime.TRENDING_BEAR


def test_missing_slow_ema_counts_as_bullish_cross():
    # 40 closes: EMA50 undefined, EMA21 above it by convention
    closes = [1000.0 + i for i in range(40)]
    state = _detect(closes)
    assert state.ema50 is None
    assert state.bull_score == 7


@pytest.mark.parametrize("bull,bear,vol,expected", [
    (7, 0, 0.001, (Regime.TRENDING_BULL, Trend.BULLISH)),
    (7, 0, 0.009, (Regime.VOLATILE_BULL, Trend.BULLISH)),
    (1, 6, 0.001, (Regime.TRENDING_BEAR, Trend.BEARISH)),
    (0, 7, 0.020, (Regime.VOLATILE_BEAR, Trend.BEARISH)),
    (4, 3, 0.020, (Regime.HIGH_VOLATILITY, Trend.NEUTRAL)),
    (4, 3, 0.009, (Regime.RANGING, Trend.NEUTRAL)),
    (4, 2, 0.050, (Regime.HIGH_VOLATILITY, Trend.NEUTRAL)),   # bull == bear + 2 is not dominant
    (5, 2, 0.050, (Regime.VOLATILE_BULL, Trend.BULLISH)),
])
def test_classify_checks_dominance_before_volatility(bull, bear, vol, expected):
    assert RegimeDetector().classify(bull, bear, vol) == expected


def test_avg_volatility_uses_last_nine_moves():
    closes = [100.0] * 20 + [100.0, 110.0] * 5
    det = RegimeDetector()
    vol = det.avg_volatility(np.array(closes))
    # 9 moves: 5 x +10% and 4 x -9.09%
    expected = (5 * 0.1 + 4 * (10 / 110)) / 9
    assert vol == pytest.approx(expected)


def test_confidence_bounds_on_random_walk():
    rng = np.random.default_rng(11)
    closes = list(45000 + np.cumsum(rng.normal(0, 120, 200)))
    det = RegimeDetector()
    for end in range(30, 200, 3):
        window = closes[:end]
        state = det.detect(_candles(window), compute_indicators(window))
        assert 0 <= state.confidence <= 100
        assert state.regime != Regime.LOADING
