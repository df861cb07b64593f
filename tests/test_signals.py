import pytest

from quantgrid.constants import Regime, Side, Strength, Trend
from quantgrid.core.indicators import MACD, compute_indicators
from quantgrid.core.regime import MarketState, RegimeDetector
from quantgrid.core.signals import RULES, Signal, SignalContext, SignalScorer, SignalSet
from quantgrid.utils.candle import Candle


def _candles(closes):
    return [Candle(open=c, high=c, low=c, close=c, volume=1000.0, time=float(i))
            for i, c in enumerate(closes)]


def _ctx(**kw):
    base = dict(
        close=100.0,
        rsi=50.0,
        macd=MACD(),
        prev_macd=MACD(),
        lower=90.0,
        upper=110.0,
        market=MarketState(regime=Regime.RANGING),
    )
    base.update(kw)
    return SignalContext(**base)


def _fired(ctx):
    return {(r.side, r.reason) for r in RULES if r.when(ctx)}


def test_neutral_context_fires_nothing():
    assert _fired(_ctx()) == set()


@pytest.mark.parametrize("value,expected", [
    (20.0, {(Side.BUY, "RSI Oversold")}),
    (35.0, {(Side.BUY, "RSI Low Zone")}),
    (44.9, {(Side.BUY, "RSI Low Zone")}),
    (45.0, set()),
    (55.0, set()),
    (55.1, {(Side.SELL, "RSI High Zone")}),
    (65.0, {(Side.SELL, "RSI High Zone")}),
    (80.0, {(Side.SELL, "RSI Overbought")}),
])
def test_rsi_zones_are_exclusive_per_side(value, expected):
    assert _fired(_ctx(rsi=value)) == expected


def test_band_touches_use_tolerance():
    assert (Side.BUY, "Bollinger Lower Touch") in _fired(_ctx(close=90.1))
    assert (Side.BUY, "Bollinger Lower Touch") not in _fired(_ctx(close=90.3))
    assert (Side.SELL, "Bollinger Upper Touch") in _fired(_ctx(close=109.9))
    assert (Side.SELL, "Bollinger Upper Touch") not in _fired(_ctx(close=109.7))


def test_macd_crossovers_need_a_sign_change():
    up = _ctx(prev_macd=MACD(-1.0, -0.9, -0.1), macd=MACD(1.0, 0.9, 0.1))
    down = _ctx(prev_macd=MACD(1.0, 0.9, 0.1), macd=MACD(-1.0, -0.9, -0.1))
    steady = _ctx(prev_macd=MACD(1.0, 0.9, 0.1), macd=MACD(2.0, 1.8, 0.2))
    assert _fired(up) == {(Side.BUY, "MACD Bullish Crossover")}
    assert _fired(down) == {(Side.SELL, "MACD Bearish Crossover")}
    assert _fired(steady) == set()


def test_trend_rules_follow_market_trend_and_ema9():
    bull = MarketState(regime=Regime.TRENDING_BULL, trend=Trend.BULLISH, ema9=99.0)
    bear = MarketState(regime=Regime.TRENDING_BEAR, trend=Trend.BEARISH, ema9=101.0)
    assert _fired(_ctx(market=bull)) == {(Side.BUY, "EMA Trend Alignment")}
    assert _fired(_ctx(market=bear)) == {(Side.SELL, "EMA Downtrend Confirm")}
    assert _fired(_ctx(market=bull, close=98.0)) == set()


def test_scorer_needs_30_candles():
    closes = [100.0 - i for i in range(29)]
    candles = _candles(closes)
    ind = compute_indicators(closes)
    assert SignalScorer().evaluate(candles, ind, MarketState()) == SignalSet()


def test_buy_and_sell_evidence_coexist():
    closes = [5000.0 - 2 * i for i in range(60)]
    candles = _candles(closes)
    ind = compute_indicators(closes)
    market = RegimeDetector().detect(candles, ind)

    signals = SignalScorer().evaluate(candles, ind, market)

    assert [s.reason for s in signals.buy] == ["RSI Oversold", "Bollinger Lower Touch"]
    assert [s.reason for s in signals.sell] == ["EMA Downtrend Confirm"]
    assert signals.buy_score == pytest.approx(5.5)
    assert signals.sell_score == pytest.approx(2.0)
    assert signals.top_buy.reason == "RSI Oversold"
    assert signals.top_sell.strength == Strength.MODERATE


def test_top_signal_prefers_earlier_rule_on_ties():
    s = SignalSet(buy=(
        Signal("Bollinger Lower Touch", Strength.STRONG, 2.5),
        Signal("RSI Oversold", Strength.STRONG, 3.0),
        Signal("MACD Bullish Crossover", Strength.STRONG, 3.0),
    ))
    assert s.top_buy.reason == "RSI Oversold"
    assert s.top_sell is None
    assert s.sell_score == 0
