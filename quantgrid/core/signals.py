from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from quantgrid.constants import Side, Strength, Trend
from quantgrid.core.indicators import MACD, IndicatorSnapshot, macd
from quantgrid.core.regime import MarketState
from quantgrid.utils.candle import Candle


@dataclass(frozen=True)
class Signal:
    reason: str
    strength: Strength
    score: float


@dataclass(frozen=True)
class SignalContext:
    """Everything a rule predicate may look at for one tick."""
    close: float
    rsi: float
    macd: MACD
    prev_macd: MACD
    lower: float
    upper: float
    market: MarketState


@dataclass(frozen=True)
class Rule:
    side: Side
    reason: str
    strength: Strength
    score: float
    when: Callable[[SignalContext], bool]

    def signal(self) -> Signal:
        return Signal(self.reason, self.strength, self.score)


@dataclass(frozen=True)
class SignalSet:
    buy: tuple = field(default_factory=tuple)
    sell: tuple = field(default_factory=tuple)

    @property
    def buy_score(self) -> float:
        return sum(s.score for s in self.buy)

    @property
    def sell_score(self) -> float:
        return sum(s.score for s in self.sell)

    @staticmethod
    def _top(signals: tuple) -> Optional[Signal]:
        # max() keeps the first of equal scores, i.e. the earlier rule
        return max(signals, key=lambda s: s.score) if signals else None

    @property
    def top_buy(self) -> Optional[Signal]:
        return self._top(self.buy)

    @property
    def top_sell(self) -> Optional[Signal]:
        return self._top(self.sell)


def _crossed_above(ctx: SignalContext) -> bool:
    return ctx.prev_macd.macd < ctx.prev_macd.signal and ctx.macd.macd > ctx.macd.signal

def _crossed_below(ctx: SignalContext) -> bool:
    return ctx.prev_macd.macd > ctx.prev_macd.signal and ctx.macd.macd < ctx.macd.signal


RULES: tuple[Rule, ...] = (
    # ── BUY ──
    Rule(Side.BUY, "RSI Oversold", Strength.STRONG, 3.0,
         lambda c: c.rsi < 35),
    Rule(Side.BUY, "RSI Low Zone", Strength.MODERATE, 1.5,
         lambda c: 35 <= c.rsi < 45),
    Rule(Side.BUY, "Bollinger Lower Touch", Strength.STRONG, 2.5,
         lambda c: c.close < c.lower * 1.002),
    Rule(Side.BUY, "MACD Bullish Crossover", Strength.STRONG, 3.0,
         _crossed_above),
    Rule(Side.BUY, "EMA Trend Alignment", Strength.MODERATE, 2.0,
         lambda c: c.market.trend == Trend.BULLISH
         and c.market.ema9 is not None and c.close > c.market.ema9),
    # ── SELL ──
    Rule(Side.SELL, "RSI Overbought", Strength.STRONG, 3.0,
         lambda c: c.rsi > 65),
    Rule(Side.SELL, "RSI High Zone", Strength.MODERATE, 1.5,
         lambda c: 55 < c.rsi <= 65),
    Rule(Side.SELL, "Bollinger Upper Touch", Strength.STRONG, 2.5,
         lambda c: c.close > c.upper * 0.998),
    Rule(Side.SELL, "MACD Bearish Crossover", Strength.STRONG, 3.0,
         _crossed_below),
    Rule(Side.SELL, "EMA Downtrend Confirm", Strength.MODERATE, 2.0,
         lambda c: c.market.trend == Trend.BEARISH
         and c.market.ema9 is not None and c.close < c.market.ema9),
)


class SignalScorer:
    """Evaluates every rule each tick; buy and sell evidence is never
    mutually exclusive. Thresholding is left to the caller."""

    def __init__(self, rules: Sequence[Rule] = RULES, min_candles: int = 30):
        self.rules = tuple(rules)
        self.min_candles = min_candles

    def evaluate(self, candles: Sequence[Candle], ind: IndicatorSnapshot,
                 market: MarketState) -> SignalSet:
        if len(candles) < self.min_candles:
            return SignalSet()

        closes = [c.close for c in candles]
        ctx = SignalContext(
            close=closes[-1],
            rsi=ind.rsi,
            macd=ind.macd,
            prev_macd=macd(closes[:-1]),
            lower=ind.bollinger.lower,
            upper=ind.bollinger.upper,
            market=market,
        )

        buy: list[Signal] = []
        sell: list[Signal] = []
        for rule in self.rules:
            if rule.when(ctx):
                (buy if rule.side == Side.BUY else sell).append(rule.signal())
        return SignalSet(buy=tuple(buy), sell=tuple(sell))
