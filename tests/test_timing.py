import time

import pytest

from tiotest import timing
from tiotest.errors import TimerError
from tiotest.timing import Timing


def test_elapsed_axes():
    t = Timing()
    t.start()
    time.sleep(0.05)
    sum(i * i for i in range(200000))
    t.stop()

    assert t.realtime() >= 0.05
    assert t.usertime() >= 0.0
    assert t.systime() >= 0.0
    assert t.stop_real >= t.start_real


def test_unstarted_timer_is_zero():
    t = Timing()
    assert t.realtime() == 0.0
    assert t.usertime() == 0.0
    assert t.systime() == 0.0


def test_microsecond_precision():
    t = Timing(start_real=1.0, stop_real=2.1234567)
    assert t.realtime() == 1.123457


def test_rusage_failure_is_fatal(monkeypatch):
    def broken(scope):
        raise OSError("no rusage")

    monkeypatch.setattr(timing.resource, "getrusage", broken)
    with pytest.raises(TimerError) as excinfo:
        Timing().start()
    assert excinfo.value.exit_code == 11


def test_clock_failure_is_fatal(monkeypatch):
    def broken():
        raise OSError("no clock")

    monkeypatch.setattr(timing.time, "time", broken)
    with pytest.raises(TimerError) as excinfo:
        Timing().stop()
    assert excinfo.value.exit_code == 10
