import asyncio
import time
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Optional

import numpy as np

from quantgrid.config import SimConfig
from quantgrid.constants import INTERVAL_PRESETS, LoopState, Side
from quantgrid.core.indicators import IndicatorSnapshot, compute_indicators
from quantgrid.core.price import PriceGenerator
from quantgrid.core.regime import MarketState, RegimeDetector
from quantgrid.core.signals import SignalScorer, SignalSet
from quantgrid.trading.money_manager import MoneyManager
from quantgrid.trading.performance import PerformanceTracker
from quantgrid.trading.state import SimulationState
from quantgrid.trading.trade import LogEntry, Portfolio, TradeRecord
from quantgrid.utils.candle import Candle, parse_candle
from quantgrid.utils.logger import log


@dataclass(frozen=True)
class EngineSnapshot:
    """Read-only view handed to whatever renders the simulation."""

    pair: str
    state: LoopState
    tick: int
    candles: tuple[Candle, ...]
    indicators: IndicatorSnapshot
    market: MarketState
    signals: SignalSet
    portfolio: Portfolio
    trades: tuple[TradeRecord, ...]
    logs: tuple[LogEntry, ...]
    portfolio_value: float
    pnl: float
    pnl_pct: float
    price_change_pct: float
    performance: str

    @property
    def buy_score(self) -> float:
        return self.signals.buy_score

    @property
    def sell_score(self) -> float:
        return self.signals.sell_score


class TradingSimulator:
    def __init__(self, cfg: SimConfig, rng: Optional[np.random.Generator] = None,
                 clock: Callable[[], float] = time.time,
                 candles: Optional[Iterable] = None):
        if cfg.interval_ms not in INTERVAL_PRESETS:
            raise ValueError(f"interval_ms must be one of {INTERVAL_PRESETS}, got {cfg.interval_ms}")
        self.cfg = cfg
        self.generator = PriceGenerator(cfg, rng=rng, clock=clock)
        self.regime_detector = RegimeDetector(window=cfg.min_candles)
        self.scorer = SignalScorer(min_candles=cfg.min_candles)
        self.money_mgr = MoneyManager(cfg, clock=clock)
        self.perf = PerformanceTracker(cfg.initial_usd)
        self.state = SimulationState.from_config(cfg)

        self._loop_state = LoopState.RUNNING if cfg.autostart else LoopState.PAUSED
        self._interval_ms = cfg.interval_ms
        self._ticks = 0
        self._stopped = False
        self._resume: Optional[asyncio.Event] = None

        if candles is not None:
            for c in candles:
                self.state.add_candle(parse_candle(c))
        else:
            start = self.generator.start_price()
            for c in self.generator.series(start, cfg.warmup_candles, cfg.warmup_volatility):
                self.state.add_candle(c)

        self._snapshot = self._build_snapshot(*self._analyze())

    # ------------------------------------------------------------------
    @property
    def running(self) -> bool:
        return self._loop_state == LoopState.RUNNING

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def snapshot(self) -> EngineSnapshot:
        return self._snapshot

    def set_running(self, run: bool):
        new_state = LoopState.RUNNING if run else LoopState.PAUSED
        if new_state == self._loop_state:
            return
        self._loop_state = new_state
        self._snapshot = replace(self._snapshot, state=new_state)
        log.info("Simulation %s", new_state.value)
        if self._resume is not None:
            if run:
                self._resume.set()
            else:
                self._resume.clear()

    def set_interval(self, interval_ms: int):
        """Takes effect on the next reschedule, never mid-sleep."""
        if interval_ms not in INTERVAL_PRESETS:
            raise ValueError(f"interval_ms must be one of {INTERVAL_PRESETS}, got {interval_ms}")
        self._interval_ms = interval_ms

    # ------------------------------------------------------------------
    def _analyze(self) -> tuple[list[Candle], IndicatorSnapshot, MarketState, SignalSet]:
        candles = list(self.state.candles)
        ind = compute_indicators([c.close for c in candles])
        market = self.regime_detector.detect(candles, ind)
        signals = self.scorer.evaluate(candles, ind, market)
        return candles, ind, market, signals

    def _build_snapshot(self, candles: list[Candle], ind: IndicatorSnapshot,
                        market: MarketState, signals: SignalSet) -> EngineSnapshot:
        last = candles[-1].close if candles else 0.0
        prev = candles[-2].close if len(candles) > 1 else 0.0
        value = self.state.portfolio.value(last)
        pnl = value - self.cfg.initial_usd
        return EngineSnapshot(
            pair=self.cfg.pair,
            state=self._loop_state,
            tick=self._ticks,
            candles=tuple(candles),
            indicators=ind,
            market=market,
            signals=signals,
            portfolio=self.state.portfolio,
            trades=tuple(self.state.trades),
            logs=tuple(self.state.logs),
            portfolio_value=value,
            pnl=pnl,
            pnl_pct=pnl / self.cfg.initial_usd * 100 if self.cfg.initial_usd else 0.0,
            price_change_pct=(last - prev) / prev * 100 if prev > 0 else 0.0,
            performance=self.perf.summary(),
        )

    def tick(self) -> EngineSnapshot:
        """One simulation step: new candle, fresh analysis, maybe trades."""
        last = self.state.last_close or self.cfg.start_price_min
        self.state.add_candle(self.generator.next(last, self.cfg.volatility))
        self._ticks += 1

        candles, ind, market, signals = self._analyze()
        price = self.state.last_close
        threshold = self.cfg.trade_threshold

        # BUY and SELL are checked independently; both may fire in one tick
        if signals.buy_score >= threshold:
            top = signals.top_buy
            trade = self.money_mgr.execute_trade(
                self.state, Side.BUY, price, top.reason if top else "Signal")
            if trade:
                self.perf.record(trade)
        if signals.sell_score >= threshold:
            top = signals.top_sell
            trade = self.money_mgr.execute_trade(
                self.state, Side.SELL, price, top.reason if top else "Signal")
            if trade:
                self.perf.record(trade)

        self.perf.mark(self.state.portfolio.value(price))
        # published after fills so consumers see this tick's trades
        self._snapshot = self._build_snapshot(candles, ind, market, signals)
        return self._snapshot

    # ------------------------------------------------------------------
    async def start(self):
        """Main entry point."""
        log.info("═" * 60)
        log.info("  ⚡ QUANT GRID BOT — paper trading %s", self.cfg.pair)
        log.info("  Interval: %dms  |  Threshold: %.1f  |  Balance: $%.2f",
                 self._interval_ms, self.cfg.trade_threshold, self.cfg.initial_usd)
        log.info("  Seeded %d candles, last close $%.2f",
                 len(self.state.candles), self.state.last_close)
        log.info("═" * 60)

        reporter = asyncio.create_task(self._status_reporter())
        try:
            await self.run()
        finally:
            reporter.cancel()

    async def run(self):
        """Fixed-delay tick loop: sleep, then tick, never overlapping.

        A simulator that was stopped, even before the loop started, stays stopped.
        """
        self._resume = asyncio.Event()
        if self.running:
            self._resume.set()

        while not self._stopped:
            await self._resume.wait()
            if self._stopped:
                break
            await asyncio.sleep(self._interval_ms / 1000.0)
            # paused or stopped while sleeping: skip this tick
            if self._stopped or not self.running:
                continue
            try:
                self.tick()
            except Exception as e:
                log.error("Tick loop error: %s", e, exc_info=True)

            if self.cfg.max_ticks and self._ticks >= self.cfg.max_ticks:
                log.info("Reached %d ticks — stopping.", self._ticks)
                self.stop()

    async def _status_reporter(self):
        """Periodic one-line status while the loop is alive."""
        while not self._stopped:
            await asyncio.sleep(self.cfg.report_interval)
            if self._stopped:
                break
            snap = self._snapshot
            log.info(
                "📊 tick=%d  %s  $%.2f  regime=%s (%d%%)  buy=%.1f sell=%.1f  value=$%.2f  pnl=%+.2f%%  [%s]",
                snap.tick, snap.pair, snap.candles[-1].close if snap.candles else 0.0,
                snap.market.regime.value, snap.market.confidence,
                snap.buy_score, snap.sell_score,
                snap.portfolio_value, snap.pnl_pct, snap.performance,
            )

    def stop(self):
        """Ends the loop after the in-flight tick; no forced cancellation."""
        self._stopped = True
        if self._resume is not None:
            self._resume.set()                 # wake a paused loop so it can exit
        log.info("Simulation stopped.  Final stats: %s", self.perf.summary())
