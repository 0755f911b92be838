# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""In-memory cell screen the viewer paints on.

Every frame is painted into a Canvas first; the curses terminal then copies
it to the real screen. Connector drawing reads cells back, which is why the
grid is kept in Python rather than in curses.
"""

from typing import List, Optional, Tuple

from .layout import Rect

ALIGN_LEFT = "left"
ALIGN_CENTER = "center"
ALIGN_RIGHT = "right"

ELLIPSIS = "…"

SINGLE_BORDER = {
    "h": "─", "v": "│",
    "tl": "┌", "tr": "┐", "bl": "└", "br": "┘",
}
DOUBLE_BORDER = {
    "h": "═", "v": "║",
    "tl": "╔", "tr": "╗", "bl": "╚", "br": "╝",
}

Cell = Tuple[str, Optional[str]]


class Canvas:
    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.clear()

    def clear(self):
        self._cells: List[List[Cell]] = [
            [(" ", None) for _ in range(self.width)] for _ in range(self.height)
        ]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def set_content(self, x: int, y: int, ch: str, color: Optional[str] = None):
        if self.in_bounds(x, y):
            self._cells[y][x] = (ch, color)

    def get_content(self, x: int, y: int) -> str:
        if not self.in_bounds(x, y):
            return " "
        return self._cells[y][x][0]

    def get_color(self, x: int, y: int) -> Optional[str]:
        if not self.in_bounds(x, y):
            return None
        return self._cells[y][x][1]

    def fill(self, rect: Rect, ch: str = " "):
        for y in range(rect.y, rect.y + rect.height):
            for x in range(rect.x, rect.x + rect.width):
                self.set_content(x, y, ch)

    def print_text(self, x: int, y: int, width: int, text: str,
                   align: str = ALIGN_LEFT, color: Optional[str] = None) -> int:
        """Print text into width cells starting at x; returns cells printed."""
        if width <= 0:
            return 0
        if align == ALIGN_CENTER and len(text) < width:
            x += (width - len(text)) // 2
        elif align == ALIGN_RIGHT and len(text) < width:
            x += width - len(text)
        printed = text[:width]
        for i, ch in enumerate(printed):
            self.set_content(x + i, y, ch, color)
        return len(printed)

    def draw_box(self, rect: Rect, title: str = "", text: str = "",
                 color: Optional[str] = None, focused: bool = False,
                 title_align: str = ALIGN_CENTER, text_align: str = ALIGN_LEFT):
        """Draw a bordered text view.

        The focused box gets a double border. A title wider than the top
        border ends in an ellipsis.
        """
        x, y, w, h = rect
        if w < 2 or h < 2:
            return
        self.fill(rect)
        border = DOUBLE_BORDER if focused else SINGLE_BORDER
        for i in range(x + 1, x + w - 1):
            self.set_content(i, y, border["h"], color)
            self.set_content(i, y + h - 1, border["h"], color)
        for j in range(y + 1, y + h - 1):
            self.set_content(x, j, border["v"], color)
            self.set_content(x + w - 1, j, border["v"], color)
        self.set_content(x, y, border["tl"], color)
        self.set_content(x + w - 1, y, border["tr"], color)
        self.set_content(x, y + h - 1, border["bl"], color)
        self.set_content(x + w - 1, y + h - 1, border["br"], color)

        if title:
            printed = self.print_text(x + 1, y, w - 2, title, title_align)
            if len(title) > printed > 0:
                x_ellipsis = x + 1 if title_align == ALIGN_RIGHT else x + w - 2
                self.set_content(x_ellipsis, y, ELLIPSIS)

        if text:
            lines = text.split("\n")
            for row, line in enumerate(lines[:h - 2]):
                self.print_text(x + 1, y + 1 + row, w - 2, line, text_align)

    def rows(self) -> List[str]:
        return ["".join(ch for ch, _ in row) for row in self._cells]
