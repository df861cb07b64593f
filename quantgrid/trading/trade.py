from dataclasses import dataclass

from quantgrid.constants import Side

@dataclass(frozen=True)
class Portfolio:
    usd: float = 0.0
    btc: float = 0.0

    def value(self, price: float) -> float:
        return self.usd + self.btc * price

@dataclass(frozen=True)
class TradeRecord:
    id: str
    type: Side
    price: float
    amount: float                          # BTC
    usd: float                             # USD spent (BUY) or received (SELL)
    reason: str
    time: float

@dataclass(frozen=True)
class LogEntry:
    message: str
    type: str                              # "BUY" / "SELL"
    timestamp: float
