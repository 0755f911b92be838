# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

import curses

import pytest

from glab.view.terminal import normalize_key


@pytest.mark.parametrize(
    "ch, expected",
    [
        (curses.KEY_LEFT, "left"),
        (curses.KEY_DOWN, "down"),
        (curses.KEY_ENTER, "enter"),
        ("\n", "enter"),
        ("\r", "enter"),
        ("\x1b", "esc"),
        ("\t", "tab"),
        ("\x04", "ctrl-d"),
        ("\x10", "ctrl-p"),
        ("\x11", "ctrl-q"),
        ("\x12", "ctrl-r"),
        ("\x00", "ctrl-space"),
        ("j", "j"),
        ("G", "G"),
        ("\x07", None),
        (curses.KEY_F1, None),
    ],
)
def test_normalize_key(ch, expected):
    assert normalize_key(ch) == expected
