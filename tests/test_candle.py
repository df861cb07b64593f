from types import SimpleNamespace

import pytest

from quantgrid.utils.candle import Candle, parse_candle


def test_parse_dict_accepts_time_or_timestamp():
    c = parse_candle({"open": 1, "high": 2, "low": 0.5, "close": 1.5, "volume": 10, "timestamp": 7})
    assert c == Candle(open=1.0, high=2.0, low=0.5, close=1.5, volume=10.0, time=7.0)


def test_parse_sequence_without_volume():
    c = parse_candle([7, 1, 2, 0.5, 1.5])
    assert c.time == 7.0
    assert c.close == 1.5
    assert c.volume == 0


def test_parse_object_and_passthrough():
    obj = SimpleNamespace(open=1, high=2, low=0.5, close=1.5, volume=3, time=9)
    c = parse_candle(obj)
    assert c.time == 9.0
    assert parse_candle(c) is c


def test_candles_are_immutable():
    c = Candle(open=1.0, high=1.0, low=1.0, close=1.0)
    with pytest.raises(AttributeError):
        c.close = 2.0


@pytest.mark.parametrize("raw", [
    {"open": 100, "high": 90, "low": 110},                       # close missing
    {"open": 100, "high": 101, "low": 99},
    [7, 1, 2, 0.5],
    SimpleNamespace(open=1, high=2, low=0.5),
])
def test_parse_rejects_incomplete_candles(raw):
    with pytest.raises(ValueError):
        parse_candle(raw)


@pytest.mark.parametrize("fields", [
    dict(open=100.0, high=99.0, low=95.0, close=98.0),         # high below open
    dict(open=100.0, high=105.0, low=101.0, close=102.0),      # low above open
    dict(open=0.0, high=1.0, low=0.0, close=1.0),
    dict(open=-1.0, high=1.0, low=-2.0, close=0.5),
    dict(open=1.0, high=1.0, low=1.0, close=1.0, volume=-5.0),
])
def test_inconsistent_candles_are_rejected(fields):
    with pytest.raises(ValueError):
        Candle(**fields)
