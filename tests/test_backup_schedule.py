from datetime import datetime

from hr_admin.utils.backup_schedule import human_size, next_run


def test_every_eight_hours():
    now = datetime(2031, 3, 5, 10, 30)
    assert next_run("8hours", now) == datetime(2031, 3, 5, 18, 30)


def test_daily_is_next_midnight():
    assert next_run("daily", datetime(2031, 3, 5, 10, 30)) == datetime(2031, 3, 6)


def test_weekly_is_coming_sunday():
    # 2031-03-05 is a Wednesday
    assert next_run("weekly", datetime(2031, 3, 5, 10, 30)) == datetime(2031, 3, 9)


def test_weekly_on_sunday_skips_a_full_week():
    assert next_run("weekly", datetime(2031, 3, 9, 1, 0)) == datetime(2031, 3, 16)


def test_human_size():
    assert human_size(512) == "512 B"
    assert human_size(2048) == "2.0 KB"
    assert human_size(5 * 1024 * 1024) == "5.0 MB"
