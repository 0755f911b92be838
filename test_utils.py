# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

from datetime import datetime, timedelta, timezone

import pytest

from glab.utils import display_url, fmt_duration, parse_time, pretty_time_ago

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "seconds, expected",
    [(0, "00m 00s"), (61, "01m 01s"), (599, "09m 59s"), (3725, "62m 05s")],
)
def test_fmt_duration(seconds, expected):
    assert fmt_duration(timedelta(seconds=seconds)) == expected


@pytest.mark.parametrize(
    "ago, expected",
    [
        (timedelta(seconds=30), "less than a minute ago"),
        (timedelta(minutes=1), "about 1 minute ago"),
        (timedelta(minutes=45), "about 45 minutes ago"),
        (timedelta(hours=3), "about 3 hours ago"),
        (timedelta(days=2), "about 2 days ago"),
        (timedelta(days=65), "about 2 months ago"),
        (timedelta(days=800), "about 2 years ago"),
    ],
)
def test_pretty_time_ago(ago, expected):
    assert pretty_time_ago(NOW - ago, now=NOW) == expected


def test_pretty_time_ago_unknown():
    assert pretty_time_ago(None) == "at an unknown time"


def test_parse_time():
    assert parse_time("2024-01-15T10:00:00.000Z") == datetime(2024, 1, 15, 10, tzinfo=timezone.utc)
    assert parse_time("2024-01-15T11:00:00+01:00") == datetime(2024, 1, 15, 10, tzinfo=timezone.utc)
    assert parse_time(None) is None
    assert parse_time("") is None


def test_display_url():
    assert display_url("https://gitlab.com/OWNER/REPO/-/pipelines/225") == "gitlab.com/OWNER/REPO/-/pipelines/225"
    assert display_url("not a url") == "not a url"
