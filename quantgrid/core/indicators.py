"""Technical indicators over a close-price sequence (most recent last).

All functions are pure. Short input is not an error: each indicator returns
its neutral default until it has enough history.
"""
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np


@dataclass(frozen=True)
class MACD:
    macd: float = 0.0
    signal: float = 0.0
    histogram: float = 0.0


@dataclass(frozen=True)
class Bands:
    upper: float = 0.0
    middle: float = 0.0
    lower: float = 0.0


@dataclass(frozen=True)
class IndicatorSnapshot:
    rsi: float
    macd: MACD
    bollinger: Bands


def _as_array(closes: Sequence[float]) -> np.ndarray:
    return np.asarray(closes, dtype=np.float64)


def ema(closes: Sequence[float], period: int) -> Optional[float]:
    data = _as_array(closes)
    if len(data) < period:
        return None
    k = 2.0 / (period + 1)
    val = float(np.mean(data[:period]))          # SMA seed
    for d in data[period:]:
        val = float(d) * k + val * (1 - k)
    return val


def rsi(closes: Sequence[float], period: int = 14) -> float:
    data = _as_array(closes)
    if len(data) < period + 1:
        return 50.0
    # simple average over the last `period` deltas, not Wilder smoothing
    deltas = np.diff(data[-(period + 1):])
    gain = float(np.sum(np.maximum(deltas, 0))) / period
    loss = float(np.sum(np.maximum(-deltas, 0))) / period
    if loss <= 0:
        return 100.0
    rs = gain / loss
    return 100.0 - 100.0 / (1.0 + rs)


def macd(closes: Sequence[float]) -> MACD:
    """EMA12 - EMA26.

    The signal line is approximated as 0.9 * macd and the histogram as
    0.1 * macd rather than a 9-period EMA of the MACD line. Crossover rules
    downstream are tuned to this approximation.
    """
    ema12 = ema(closes, 12)
    ema26 = ema(closes, 26)
    if ema12 is None or ema26 is None:
        return MACD()
    line = ema12 - ema26
    return MACD(macd=line, signal=line * 0.9, histogram=line * 0.1)


def bollinger(closes: Sequence[float], period: int = 20) -> Bands:
    data = _as_array(closes)
    if len(data) < period:
        return Bands()
    window = data[-period:]
    middle = float(np.mean(window))
    std = float(np.std(window))                  # population std (ddof=0)
    return Bands(upper=middle + 2 * std, middle=middle, lower=middle - 2 * std)


def compute_indicators(closes: Sequence[float]) -> IndicatorSnapshot:
    return IndicatorSnapshot(
        rsi=rsi(closes),
        macd=macd(closes),
        bollinger=bollinger(closes),
    )
