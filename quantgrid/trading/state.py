from collections import deque
from dataclasses import dataclass, field

from quantgrid.config import SimConfig
from quantgrid.trading.trade import LogEntry, Portfolio, TradeRecord
from quantgrid.utils.candle import Candle

@dataclass
class SimulationState:
    """Authoritative simulation state. Only the tick loop writes it."""

    candles: deque = field(default_factory=lambda: deque(maxlen=150))
    portfolio: Portfolio = field(default_factory=Portfolio)
    trades: deque = field(default_factory=lambda: deque(maxlen=50))   # newest first
    logs: deque = field(default_factory=lambda: deque(maxlen=20))     # newest first

    @classmethod
    def from_config(cls, cfg: SimConfig) -> "SimulationState":
        return cls(
            candles=deque(maxlen=cfg.lookback),
            portfolio=Portfolio(usd=cfg.initial_usd, btc=0.0),
            trades=deque(maxlen=cfg.max_trades),
            logs=deque(maxlen=cfg.max_logs),
        )

    @property
    def last_close(self) -> float:
        return self.candles[-1].close if self.candles else 0.0

    def add_candle(self, c: Candle):
        self.candles.append(c)                 # deque evicts the oldest

    def record(self, trade: TradeRecord, entry: LogEntry):
        self.trades.appendleft(trade)
        self.logs.appendleft(entry)
