# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Formatting and logging helpers"""

import logging
import urllib.parse
from datetime import datetime, timedelta, timezone
from typing import Optional

from .config import Config

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(config: Config, verbose: bool = False) -> logging.Handler:
    """Send log records to <cache_dir>/glab.log.

    The terminal belongs to curses while the pipeline viewer runs, so
    nothing is logged to stdout or stderr.
    """
    handler = logging.FileHandler(config.get_cache_path("glab.log"), encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger("glab")
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return handler


def parse_time(value) -> Optional[datetime]:
    """Parse an API timestamp such as 2024-01-15T10:00:00.000Z"""
    if value is None or isinstance(value, datetime):
        return value
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def fmt_duration(delta: timedelta) -> str:
    """Format a duration as minutes and seconds, e.g. 01m 05s"""
    total = int(round(delta.total_seconds()))
    minutes, seconds = divmod(total, 60)
    return f"{minutes:02d}m {seconds:02d}s"


def pluralize(num: int, thing: str) -> str:
    if num == 1:
        return f"{num} {thing}"
    return f"{num} {thing}s"


def pretty_time_ago(when: Optional[datetime], now: Optional[datetime] = None) -> str:
    if when is None:
        return "at an unknown time"
    now = now or datetime.now(timezone.utc)
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    ago = now - when

    if ago < timedelta(minutes=1):
        return "less than a minute ago"
    hours = ago.total_seconds() / 3600
    if ago < timedelta(hours=1):
        return f"about {pluralize(int(ago.total_seconds() // 60), 'minute')} ago"
    if ago < timedelta(days=1):
        return f"about {pluralize(int(hours), 'hour')} ago"
    if ago < timedelta(days=30):
        return f"about {pluralize(int(hours) // 24, 'day')} ago"
    if ago < timedelta(days=365):
        return f"about {pluralize(int(hours) // 24 // 30, 'month')} ago"
    return f"about {pluralize(int(hours / 24 / 365), 'year')} ago"


def display_url(url: str) -> str:
    """Strip the scheme from a URL for display"""
    parsed = urllib.parse.urlparse(url)
    if not parsed.hostname:
        return url
    return parsed.hostname + parsed.path
