from enum import Enum

class Side(Enum):
    BUY = "BUY"
    SELL = "SELL"

class Strength(Enum):
    STRONG = "STRONG"
    MODERATE = "MODERATE"

class Trend(Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"

class Regime(Enum):
    LOADING = "LOADING"
    RANGING = "RANGING"
    TRENDING_BULL = "TRENDING_BULL"
    TRENDING_BEAR = "TRENDING_BEAR"
    VOLATILE_BULL = "VOLATILE_BULL"
    VOLATILE_BEAR = "VOLATILE_BEAR"
    HIGH_VOLATILITY = "HIGH_VOLATILITY"

class LoopState(Enum):
    PAUSED = "paused"
    RUNNING = "running"

# Tick interval presets offered to the UI (milliseconds)
INTERVAL_PRESETS = (200, 500, 1000, 2000)
