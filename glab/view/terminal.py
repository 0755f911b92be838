# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""curses front end: keyboard input and painting a Canvas on screen"""

import curses
from contextlib import contextmanager
from typing import Optional, Tuple

from .canvas import Canvas

SPECIAL_KEYS = {
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_ENTER: "enter",
    curses.KEY_RESIZE: "resize",
    curses.KEY_BTAB: "tab",
}

CONTROL_KEYS = {
    "\n": "enter",
    "\r": "enter",
    "\x1b": "esc",
    "\t": "tab",
    "\x04": "ctrl-d",
    "\x10": "ctrl-p",
    "\x11": "ctrl-q",
    "\x12": "ctrl-r",
    "\x00": "ctrl-space",
}

ESC_DELAY_MS = 25


def normalize_key(ch) -> Optional[str]:
    """Map a curses get_wch() result to a key name.

    Printable characters are returned as they are.
    """
    if isinstance(ch, int):
        return SPECIAL_KEYS.get(ch)
    if ch in CONTROL_KEYS:
        return CONTROL_KEYS[ch]
    if ch.isprintable():
        return ch
    return None


class CursesTerminal:
    def __init__(self, stdscr):
        self.stdscr = stdscr
        # raw mode so Ctrl+Q, Ctrl+S and friends reach the application
        curses.raw()
        stdscr.keypad(True)
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        if hasattr(curses, "set_escdelay"):
            curses.set_escdelay(ESC_DELAY_MS)
        self._pairs = {}
        if curses.has_colors():
            curses.start_color()
            try:
                curses.use_default_colors()
                background = -1
            except curses.error:
                background = curses.COLOR_BLACK
            self._init_colors(background)

    def _init_colors(self, background):
        extended = curses.COLORS >= 256
        colors = {
            "green": curses.COLOR_GREEN,
            "red": curses.COLOR_RED,
            "blue": curses.COLOR_BLUE,
            "yellow": curses.COLOR_YELLOW,
            "grey": 8 if curses.COLORS > 8 else curses.COLOR_WHITE,
            "orange": 208 if extended else curses.COLOR_YELLOW,
        }
        for n, (name, color) in enumerate(colors.items(), start=1):
            curses.init_pair(n, color, background)
            self._pairs[name] = curses.color_pair(n)

    def size(self) -> Tuple[int, int]:
        height, width = self.stdscr.getmaxyx()
        return width, height

    def read_key(self, timeout: float) -> Optional[str]:
        self.stdscr.timeout(int(timeout * 1000))
        try:
            ch = self.stdscr.get_wch()
        except curses.error:
            return None
        return normalize_key(ch)

    def draw(self, canvas: Canvas):
        self.stdscr.erase()
        width, height = self.size()
        for y in range(min(canvas.height, height)):
            for x in range(min(canvas.width, width)):
                ch = canvas.get_content(x, y)
                attr = self._pairs.get(canvas.get_color(x, y), curses.A_NORMAL)
                try:
                    self.stdscr.addstr(y, x, ch, attr)
                except curses.error:
                    # writing the bottom right cell moves the cursor off screen
                    pass
        self.stdscr.refresh()

    @contextmanager
    def suspend(self):
        """Hand the terminal back to the shell for the duration of the block"""
        curses.def_prog_mode()
        curses.endwin()
        try:
            yield
        finally:
            curses.reset_prog_mode()
            self.stdscr.clear()
            self.stdscr.refresh()
