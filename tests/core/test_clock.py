import threading
from datetime import datetime, timedelta

import pytest

from examcore.core.clock import ManualClock, SystemClock, elapsed_seconds
from examcore.core.locks import KeyedLock


def test_elapsed_seconds_floors_and_never_goes_negative():
    start = datetime(2025, 1, 1, 9, 0, 0)
    assert elapsed_seconds(start, start + timedelta(seconds=59, microseconds=999999)) == 59
    assert elapsed_seconds(start, start - timedelta(seconds=5)) == 0
    assert elapsed_seconds(None, start) == 0


def test_manual_clock_only_moves_forward():
    clock = ManualClock(datetime(2025, 1, 1, 9, 0, 0))
    assert clock.advance(minutes=2, seconds=5) == datetime(2025, 1, 1, 9, 2, 5)

    clock.set(datetime(2025, 1, 1, 10, 0, 0))
    assert clock.now() == datetime(2025, 1, 1, 10, 0, 0)
    with pytest.raises(ValueError):
        clock.set(datetime(2025, 1, 1, 9, 59, 59))


def test_system_clock_is_monotonic():
    clock = SystemClock()
    readings = [clock.now() for _ in range(200)]
    assert readings == sorted(readings)
    assert readings[0].tzinfo is None


def test_keyed_lock_serializes_one_key_and_cleans_up():
    locks = KeyedLock()
    counter = {"value": 0}

    def bump():
        for _ in range(200):
            with locks.hold(7):
                current = counter["value"]
                counter["value"] = current + 1

    threads = [threading.Thread(target=bump) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert counter["value"] == 800
    assert len(locks) == 0


def test_keyed_lock_is_reentrant():
    locks = KeyedLock()
    with locks.hold("a"):
        with locks.hold("a"):
            assert len(locks) == 1
        with locks.hold("b"):
            assert len(locks) == 2
    assert len(locks) == 0
