from dataclasses import dataclass
from typing import Optional

@dataclass
class SimConfig:
    """All tuneable knobs in one place."""

    # --- market ---
    pair: str = "BTC/USDT"                  # label only, no exchange behind it
    start_price_min: float = 42000.0        # warm-up start price drawn from
    start_price_max: float = 47000.0        # [min, max)
    seed: Optional[int] = None              # fixed seed = reproducible series

    # --- price generator ---
    drift: float = -0.02                    # shifts the uniform draw; <0 = slight downward bias
    move_scale: float = 0.012               # max relative move per candle at volatility 1.0
    wick_scale: float = 0.005               # max relative wick beyond open/close
    min_price: float = 0.01                 # closes never go below this
    volume_min: int = 500
    volume_max: int = 5500                  # exclusive
    volatility: float = 1.0                 # per-tick volatility multiplier

    # --- candle window ---
    warmup_candles: int = 80                # seeded before the first tick
    warmup_volatility: float = 1.2
    lookback: int = 150                     # max candle history to keep
    min_candles: int = 30                   # regime / signals need this many

    # --- money management ---
    initial_usd: float = 10000.0
    buy_fraction: float = 0.30              # share of USD spent per BUY
    sell_fraction: float = 0.50             # share of BTC sold per SELL
    min_usd: float = 100.0                  # BUY needs strictly more than this
    min_btc: float = 0.0001                 # SELL needs strictly more than this
    trade_threshold: float = 4.0            # aggregate signal score that triggers a trade

    # --- history ---
    max_trades: int = 50
    max_logs: int = 20

    # --- loop ---
    interval_ms: int = 1000                 # one of INTERVAL_PRESETS
    autostart: bool = False                 # start RUNNING instead of PAUSED
    max_ticks: int = 0                      # 0 = run until stopped
    report_interval: float = 30.0           # status line every 30s
