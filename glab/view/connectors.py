# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Lines linking the job boxes of the pipeline graph"""

from typing import Dict, List

from ..errors import BoxNotFoundError
from .canvas import Canvas
from .layout import Rect, job_key
from .model import ViewJob


def hline(canvas: Canvas, x: int, y: int, length: int):
    for i in range(length):
        canvas.set_content(x + i, y, "═")


def vline(canvas: Canvas, x: int, y: int, length: int):
    for i in range(length):
        canvas.set_content(x, y + i, "║")


def link(canvas: Canvas, box1: Rect, box2: Rect, padding: int,
         first_stage: bool, last_stage: bool):
    """Connect two boxes that are next to each other in job order.

    Boxes in different stages get a horizontal line between them. Boxes in
    the same stage get a bracket on the left (towards the previous stage)
    and on the right (towards the next stage).
    """
    x1, y1, w, h = box1
    x2, y2 = box2.x, box2.y
    dx, dy = x2 - x1, y2 - y1
    p = padding

    if dx != 0:
        hline(canvas, x1 + w, y2 + h // 2, dx - w)
        if dy != 0:
            # the previous stage had more than one job
            canvas.set_content(x1 + w + p - 1, y2 + h // 2, "╦")
        return

    if not first_stage:
        if canvas.get_content(x2 - p, y1 + h // 2) == "╚":
            canvas.set_content(x2 - p, y1 + h // 2, "╠")
        else:
            canvas.set_content(x2 - p, y1 + h // 2, "╦")

        for i in range(1, p):
            canvas.set_content(x2 - i, y2 + h // 2, "═")
        canvas.set_content(x2 - p, y2 + h // 2, "╚")

        vline(canvas, x2 - p, y1 + h - 1, dy - 1)

    if not last_stage:
        # always closes with ╝, the right side never merges into ╣
        for i in range(p - 1):
            canvas.set_content(x2 + w + i, y2 + h // 2, "═")
        canvas.set_content(x2 + w + p - 1, y2 + h // 2, "╝")

        vline(canvas, x2 + w + p - 1, y1 + h - 1, dy - 1)


def padding_for_gap(gap: int) -> int:
    if gap <= 3:
        return 1
    if gap <= 6:
        return 2
    return 3


def determine_padding(jobs: List[ViewJob], boxes: Dict[str, Rect]) -> int:
    """Width of the connector stubs, from the gap between stage columns"""
    padding = 0
    for a, b in zip(jobs, jobs[1:]):
        if a.stage == b.stage:
            continue
        box_a, box_b = boxes[job_key(a)], boxes[job_key(b)]
        padding = padding_for_gap(box_b.x - box_a.x - box_a.width)
    return padding


def link_jobs(canvas: Canvas, jobs: List[ViewJob], boxes: Dict[str, Rect]):
    """Draw every connector of the graph.

    Raises BoxNotFoundError when a job has no box, before anything is drawn.
    """
    for i, j in enumerate(jobs):
        if job_key(j) not in boxes:
            raise BoxNotFoundError(j.name, i)

    padding = determine_padding(jobs, boxes)
    for a, b in zip(jobs, jobs[1:]):
        link(canvas, boxes[job_key(a)], boxes[job_key(b)], padding,
             a.stage == jobs[0].stage,
             a.stage == jobs[-1].stage)
