from datetime import datetime, timedelta, timezone

from src.school_attendance.school_attendance.attendance.policy import CorrectionWindowPolicy
from src.school_attendance.school_attendance.common.datetime_utils import hours_between, to_naive_utc, utc_now


def test_utc_now_is_naive_utc():
    before = datetime.now(timezone.utc).replace(tzinfo=None)

    now = utc_now()

    assert now.tzinfo is None
    assert before <= now <= datetime.now(timezone.utc).replace(tzinfo=None)


def test_offset_timestamps_normalise_to_naive_utc():
    kathmandu = timezone(timedelta(hours=5, minutes=45))

    assert to_naive_utc(datetime(2026, 2, 2, 15, 45, tzinfo=kathmandu)) == datetime(2026, 2, 2, 10, 0)
    assert to_naive_utc(datetime(2026, 2, 2, 10, 0, tzinfo=timezone.utc)) == datetime(2026, 2, 2, 10, 0)
    assert to_naive_utc(datetime(2026, 2, 2, 10, 0)) == datetime(2026, 2, 2, 10, 0)


def test_window_measures_elapsed_time_across_a_dst_change():
    # US clocks spring forward at 02:00 local on 2026-03-08.
    before_dst = datetime(2026, 3, 7, 12, 0, tzinfo=timezone(timedelta(hours=-5)))
    after_dst = datetime(2026, 3, 8, 12, 30, tzinfo=timezone(timedelta(hours=-4)))
    marked_at = to_naive_utc(before_dst)
    now = to_naive_utc(after_dst)

    # 24.5 h on the wall clock, 23.5 h actually elapsed
    assert hours_between(marked_at, now) == 23.5
    assert CorrectionWindowPolicy().can_correct(marked_at, now) is True
