#!/usr/bin/env python3
"""
Tests for per-user reminder bookkeeping of the scheduler
"""

from datetime import date

from habitglass.utils.scheduler import AppScheduler


def test_reminder_marked_once_per_local_day():
    scheduler = AppScheduler(bot=None, session_factory=None)
    today = date(2025, 1, 8)
    assert not scheduler._is_reminder_sent_today(1, "never_miss_twice", today)
    scheduler._mark_reminder_sent(1, "never_miss_twice", today)
    assert scheduler._is_reminder_sent_today(1, "never_miss_twice", today)
    assert not scheduler._is_reminder_sent_today(1, "never_miss_twice", date(2025, 1, 9))
    assert not scheduler._is_reminder_sent_today(2, "never_miss_twice", today)
