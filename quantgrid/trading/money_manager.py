import time
import uuid
from typing import Callable, Optional

from quantgrid.config import SimConfig
from quantgrid.constants import Side
from quantgrid.trading.state import SimulationState
from quantgrid.trading.trade import LogEntry, Portfolio, TradeRecord
from quantgrid.utils.logger import log

class MoneyManager:
    """Fixed-fraction position sizing against the virtual portfolio."""

    def __init__(self, cfg: SimConfig, clock: Callable[[], float] = time.time):
        self.cfg = cfg
        self.clock = clock

    def can_buy(self, p: Portfolio) -> bool:
        return p.usd > self.cfg.min_usd

    def can_sell(self, p: Portfolio) -> bool:
        return p.btc > self.cfg.min_btc

    def execute_trade(self, state: SimulationState, side: Side, price: float,
                      reason: str) -> Optional[TradeRecord]:
        """Fill at `price` and record the trade. Returns None when the
        balance guard skips it; a skip is not an error."""
        bal = state.portfolio
        if side == Side.BUY:
            if not self.can_buy(bal):
                log.debug("BUY skipped — USD balance $%.2f too low", bal.usd)
                return None
            usd = bal.usd * self.cfg.buy_fraction
            btc = usd / price
            new_bal = Portfolio(usd=bal.usd - usd, btc=bal.btc + btc)
        else:
            if not self.can_sell(bal):
                log.debug("SELL skipped — BTC holdings %.6f too low", bal.btc)
                return None
            btc = bal.btc * self.cfg.sell_fraction
            usd = btc * price
            new_bal = Portfolio(usd=bal.usd + usd, btc=bal.btc - btc)

        now = self.clock()
        trade = TradeRecord(
            id=uuid.uuid4().hex[:12],
            type=side,
            price=price,
            amount=btc,
            usd=usd,
            reason=reason,
            time=now,
        )
        msg = f"{side.value} {btc:.5f} BTC @ ${price:.0f} — {reason}"
        entry = LogEntry(message=msg, type=side.value, timestamp=now)

        # one portfolio replacement + both history entries, nothing in between
        state.portfolio = new_bal
        state.record(trade, entry)
        log.info("▶ %s", msg)
        return trade
