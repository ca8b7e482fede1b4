import time
from datetime import timedelta

import pytest

from staticmetrics import timer


@pytest.mark.parametrize(
    "dur, expected",
    [
        (timedelta(seconds=1), 1000),
        (timedelta(microseconds=1000), 1),
        (timedelta(seconds=3, microseconds=103_000), 3103),
    ],
)
def test_duration_to_millis(dur, expected):
    assert timer.duration_to_millis(dur) == expected


def test_duration_to_millis_accepts_seconds():
    assert timer.duration_to_millis(1.5) == 1500


def test_duration_to_millis_truncates_sub_millisecond():
    assert timer.duration_to_millis(timedelta(microseconds=999)) == 0


def test_duration_to_millis_rejects_negative():
    with pytest.raises(ValueError):
        timer.duration_to_millis(timedelta(seconds=-1))


def test_now_millis_is_monotonic():
    first = timer.now_millis()
    second = timer.now_millis()
    third = timer.now_millis()
    assert first <= second <= third


def test_recent_tracks_now():
    now = timer.now_millis()
    assert timer.recent_millis() >= now


def test_time_update():
    now = timer.now_millis()
    timer.ensure_updater()
    timer.ensure_updater()
    time.sleep(timer.CHECK_UPDATE_INTERVAL * 2.5)
    assert timer.recent_millis() > now