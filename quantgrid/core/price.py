import time
from typing import Callable, Optional

import numpy as np

from quantgrid.config import SimConfig
from quantgrid.utils.candle import Candle


class PriceGenerator:
    """Synthetic candle source.

    Each candle opens at the previous close and moves by a uniform draw
    centred on ``drift``, scaled by ``volatility * prev_close * move_scale``.
    Randomness and the clock are injectable so a seeded generator replays
    the exact same series.
    """

    def __init__(self, cfg: SimConfig, rng: Optional[np.random.Generator] = None,
                 clock: Callable[[], float] = time.time):
        self.cfg = cfg
        self.rng = rng if rng is not None else np.random.default_rng(cfg.seed)
        self.clock = clock

    def next(self, prev_close: float, volatility: float = 1.0) -> Candle:
        cfg = self.cfg
        u = float(self.rng.random())
        change = (u - 0.5 + cfg.drift) * volatility * prev_close * cfg.move_scale

        open_ = prev_close
        close = max(cfg.min_price, prev_close + change)
        high = max(open_, close) * (1 + float(self.rng.random()) * cfg.wick_scale)
        low = min(open_, close) * (1 - float(self.rng.random()) * cfg.wick_scale)
        volume = int(self.rng.integers(cfg.volume_min, cfg.volume_max))

        return Candle(
            open=open_,
            high=high,
            low=low,
            close=close,
            volume=float(volume),
            time=self.clock(),
        )

    def series(self, start: float, count: int, volatility: float = 1.0) -> list[Candle]:
        """Chain ``count`` candles, each opening at the previous close."""
        out: list[Candle] = []
        price = start
        for _ in range(count):
            c = self.next(price, volatility)
            out.append(c)
            price = c.close
        return out

    def start_price(self) -> float:
        lo, hi = self.cfg.start_price_min, self.cfg.start_price_max
        return lo + float(self.rng.random()) * (hi - lo)
