from datetime import datetime, timedelta, timezone

import pytest

from media_cataloger.dating.drift import distance_ms, format_distance, is_too_far

BASE = datetime(2022, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_distance_is_signed_milliseconds():
    assert distance_ms(BASE + timedelta(seconds=1, microseconds=999), BASE) == 1000
    assert distance_ms(BASE - timedelta(seconds=1, microseconds=999), BASE) == -1000


def test_is_too_far_threshold_is_exclusive():
    limit = 26 * 3600 * 1000
    assert not is_too_far(BASE + timedelta(hours=26), BASE, limit)
    assert is_too_far(BASE + timedelta(hours=26, milliseconds=1), BASE, limit)
    assert is_too_far(BASE - timedelta(hours=27), BASE, limit)


def test_is_too_far_compares_instants_across_offsets():
    plus_two = datetime(2022, 6, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert not is_too_far(plus_two, BASE, 0)


@pytest.mark.parametrize(
    "delta,text",
    [
        (timedelta(0), "0s"),
        (timedelta(hours=26), "26h0m0s"),
        (timedelta(hours=-1, minutes=-2, seconds=-3), "-1h2m3s"),
        (timedelta(minutes=5), "5m0s"),
        (timedelta(seconds=1.5), "1.5s"),
        (timedelta(milliseconds=250), "250ms"),
    ],
)
def test_format_distance(delta, text):
    assert format_distance(delta) == text
