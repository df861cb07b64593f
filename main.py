import asyncio
import logging
import os
from quantgrid.bot import TradingSimulator
from quantgrid.config import SimConfig
from quantgrid.constants import INTERVAL_PRESETS
from quantgrid.utils.logger import log

def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning("Invalid %s '%s', defaulting to %d", name, raw, default)
        return default

def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        log.warning("Invalid %s '%s', defaulting to %.2f", name, raw, default)
        return default

def load_config() -> SimConfig:
    """Build the simulator config from QG_* env vars, falling back on bad values."""
    interval = _env_int("QG_INTERVAL_MS", 1000)
    if interval not in INTERVAL_PRESETS:
        log.warning("QG_INTERVAL_MS must be one of %s, defaulting to 1000", INTERVAL_PRESETS)
        interval = 1000

    seed_raw = os.environ.get("QG_SEED", "").strip()
    seed = _env_int("QG_SEED", 0) if seed_raw else None

    initial_usd = _env_float("QG_INITIAL_USD", 10000.0)
    if not initial_usd > 0:             # also catches nan
        log.warning("QG_INITIAL_USD must be positive, defaulting to 10000.00")
        initial_usd = 10000.0

    return SimConfig(
        pair=os.environ.get("QG_PAIR", "BTC/USDT"),
        interval_ms=interval,
        seed=seed,
        initial_usd=initial_usd,
        max_ticks=_env_int("QG_MAX_TICKS", 0),
        autostart=os.environ.get("QG_AUTOSTART", "1").strip() != "0",
    )

def main():
    level_name = os.environ.get("QG_LOG_LEVEL", "INFO").strip().upper()
    log.setLevel(getattr(logging, level_name, logging.INFO))

    sim = TradingSimulator(load_config())

    try:
        asyncio.run(sim.start())
    except KeyboardInterrupt:
        sim.stop()

if __name__ == "__main__":
    main()
