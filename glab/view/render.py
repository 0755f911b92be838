# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Paint pipeline graphs, log panes and dialogs onto a Canvas"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from rich.text import Text

from ..utils import fmt_duration
from .canvas import ALIGN_CENTER, ALIGN_LEFT, ALIGN_RIGHT, Canvas
from .connectors import link_jobs
from .layout import MAX_TITLE, Rect, compute_boxes, job_key, stage_key
from .model import JobKind, ViewJob

# status -> (glyph, colour)
STATUS_STYLES = {
    "success": ("✔", "green"),
    "failed": ("✘", "red"),
    "running": ("●", "blue"),
    "pending": ("●", "yellow"),
    "manual": ("■", "grey"),
    "canceled": ("Ø", None),
    "skipped": ("»", None),
}
ALLOWED_FAILURE_STYLE = ("!", "orange")

BRIDGE_MARKER = "»"


def status_style(job: ViewJob):
    if job.status == "failed" and job.allow_failure:
        return ALLOWED_FAILURE_STYLE
    return STATUS_STYLES.get(job.status, ("", None))


def job_title(job: ViewJob) -> str:
    glyph, _ = status_style(job)
    title = f"{glyph} {job.name}" if glyph else job.name
    # Names such as "deploy:staging" repeat the stage and overflow the box
    suffix = ":" + job.stage
    if title.endswith(suffix):
        title = title[:-len(suffix)]
    return title


def job_text(job: ViewJob, now: Optional[datetime] = None) -> str:
    text = BRIDGE_MARKER if job.kind == JobKind.BRIDGE else ""
    if job.started_at is not None:
        end = job.finished_at or now or datetime.now(timezone.utc)
        text += "\n" + fmt_duration(end - job.started_at)
    return text


def inner_rect(canvas: Canvas, border: bool = True) -> Rect:
    """Area inside the frame border and its 1x2 padding"""
    edge = 1 if border else 0
    return Rect(
        edge + 2,
        edge + 1,
        max(canvas.width - 2 * edge - 4, 0),
        max(canvas.height - 2 * edge - 2, 0),
    )


def draw_frame(canvas: Canvas, title: str):
    canvas.draw_box(Rect(0, 0, canvas.width, canvas.height), title=f" {title} ")


def draw_jobs(canvas: Canvas, jobs: List[ViewJob], cur_job: Optional[ViewJob],
              inner: Rect, now: Optional[datetime] = None) -> Dict[str, Rect]:
    """Paint stage headers and job boxes; returns the box layout."""
    boxes = compute_boxes(jobs, inner)
    drawn = set()
    for j in jobs:
        if j.stage in drawn:
            continue
        drawn.add(j.stage)
        canvas.draw_box(boxes[stage_key(j.stage)], text=j.stage.title(), text_align=ALIGN_CENTER)

    focused = job_key(cur_job) if cur_job is not None else None
    for j in jobs:
        key = job_key(j)
        _, color = status_style(j)
        title = job_title(j)
        # Long titles are cut at the end, keep the start visible
        title_align = ALIGN_LEFT if len(title) > MAX_TITLE else ALIGN_CENTER
        canvas.draw_box(
            boxes[key],
            title=title,
            text=job_text(j, now),
            color=color,
            focused=key == focused,
            title_align=title_align,
            text_align=ALIGN_RIGHT,
        )
    return boxes


def draw_pipeline(canvas: Canvas, jobs: List[ViewJob], cur_job: Optional[ViewJob],
                  inner: Rect, now: Optional[datetime] = None) -> Dict[str, Rect]:
    """Paint the whole graph, connectors included."""
    boxes = draw_jobs(canvas, jobs, cur_job, inner, now)
    link_jobs(canvas, jobs, boxes)
    return boxes


def strip_ansi(text: str) -> str:
    return Text.from_ansi(text).plain


def draw_logs(canvas: Canvas, rect: Rect, title: str, lines: Sequence[str]):
    """Bordered log pane showing the tail of lines"""
    canvas.draw_box(rect, title=title, title_align=ALIGN_LEFT)
    width = rect.width - 4
    height = rect.height - 2
    if width <= 0 or height <= 0:
        return
    wrapped = []
    for line in lines:
        line = line.expandtabs()
        if not line:
            wrapped.append("")
            continue
        wrapped.extend(line[i:i + width] for i in range(0, len(line), width))
    for row, line in enumerate(wrapped[-height:]):
        canvas.print_text(rect.x + 2, rect.y + 1 + row, width, line)


def draw_modal(canvas: Canvas, text: str, buttons: Sequence[str], selected: int):
    """Centred confirmation dialog; the selected button is bracketed."""
    labels = [f"[ {b} ]" if i == selected else f"  {b}  " for i, b in enumerate(buttons)]
    button_row = "  ".join(labels)
    width = min(max(len(text), len(button_row)) + 6, canvas.width)
    height = 7
    rect = Rect((canvas.width - width) // 2, (canvas.height - height) // 2, width, height)
    canvas.draw_box(rect, focused=True)
    canvas.print_text(rect.x + 1, rect.y + 2, width - 2, text, ALIGN_CENTER)
    canvas.print_text(rect.x + 1, rect.y + 4, width - 2, button_row, ALIGN_CENTER)


def draw_status_line(canvas: Canvas, message: str, color: Optional[str] = "red"):
    if not message or canvas.height < 1:
        return
    canvas.print_text(2, canvas.height - 1, canvas.width - 4, f" {message} ", color=color)
