from dataclasses import dataclass

PRICE_FIELDS = ("open", "high", "low", "close")


@dataclass(frozen=True)
class Candle:
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0
    time: float = 0.0

    def __post_init__(self):
        if min(self.open, self.high, self.low, self.close) <= 0:
            raise ValueError(f"candle prices must be positive: {self}")
        if self.high < max(self.open, self.close):
            raise ValueError(f"candle high below body: {self}")
        if self.low > min(self.open, self.close):
            raise ValueError(f"candle low above body: {self}")
        if self.volume < 0:
            raise ValueError(f"candle volume must be non-negative: {self}")


def _require(raw, lookup) -> dict:
    prices = {}
    for name in PRICE_FIELDS:
        value = lookup(name)
        if value is None:
            raise ValueError(f"candle is missing '{name}': {raw!r}")
        prices[name] = float(value)
    return prices


def parse_candle(raw) -> Candle:
    """Build a Candle from a dict, a ``[time, open, high, low, close, volume?]``
    sequence or any object with matching attributes.

    Prices are mandatory; volume and time default to 0.  Raises ``ValueError``
    for incomplete or inconsistent input.
    """
    if isinstance(raw, Candle):
        return raw
    if isinstance(raw, dict):
        prices = _require(raw, raw.get)
        return Candle(**prices,
                      volume=float(raw.get("volume") or 0),
                      time=float(raw.get("time", raw.get("timestamp")) or 0))
    if isinstance(raw, (list, tuple)):
        if len(raw) < 5:
            raise ValueError(f"candle sequence needs at least 5 values: {raw!r}")
        return Candle(open=float(raw[1]), high=float(raw[2]), low=float(raw[3]),
                      close=float(raw[4]),
                      volume=float(raw[5]) if len(raw) > 5 else 0.0,
                      time=float(raw[0]))
    prices = _require(raw, lambda name: getattr(raw, name, None))
    return Candle(**prices,
                  volume=float(getattr(raw, "volume", 0) or 0),
                  time=float(getattr(raw, "time", getattr(raw, "timestamp", 0)) or 0))
