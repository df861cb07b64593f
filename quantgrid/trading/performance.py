from collections import deque

from quantgrid.constants import Side
from quantgrid.trading.trade import TradeRecord

class PerformanceTracker:
    """Round-trip stats. A SELL is a win when it fills above the average
    BTC cost basis accumulated by earlier BUYs."""

    def __init__(self, initial_value: float = 10000.0):
        self.buys = 0
        self.sells = 0
        self.wins = 0
        self.losses = 0
        self.realized_pnl = 0.0
        self.max_drawdown = 0.0
        self._peak = initial_value
        self._btc_held = 0.0
        self._cost_basis = 0.0                 # total USD paid for _btc_held
        self.recent_results: deque[str] = deque(maxlen=100)

    @property
    def total(self):
        return self.buys + self.sells

    @property
    def win_rate(self):
        t = self.wins + self.losses
        return self.wins / t if t > 0 else 0.0

    @property
    def avg_entry(self) -> float:
        return self._cost_basis / self._btc_held if self._btc_held > 0 else 0.0

    def record(self, trade: TradeRecord):
        if trade.type == Side.BUY:
            self.buys += 1
            self._btc_held += trade.amount
            self._cost_basis += trade.usd
            return

        self.sells += 1
        entry = self.avg_entry
        profit = (trade.price - entry) * trade.amount
        # release the sold share of the cost basis
        if self._btc_held > 0:
            share = min(1.0, trade.amount / self._btc_held)
            self._cost_basis -= self._cost_basis * share
            self._btc_held = max(0.0, self._btc_held - trade.amount)
        self.realized_pnl += profit
        if profit > 0:
            self.wins += 1
            self.recent_results.append("win")
        else:
            self.losses += 1
            self.recent_results.append("loss")

    def mark(self, portfolio_value: float):
        """Track peak equity and drawdown once per tick."""
        if portfolio_value > self._peak:
            self._peak = portfolio_value
        dd = self._peak - portfolio_value
        if dd > self.max_drawdown:
            self.max_drawdown = dd

    def summary(self) -> str:
        return (
            f"Trades:{self.total} (B:{self.buys} S:{self.sells}) "
            f"W:{self.wins} L:{self.losses} "
            f"WR:{self.win_rate:.1%} "
            f"Realized:${self.realized_pnl:+.2f} "
            f"MaxDD:${self.max_drawdown:.2f}"
        )
