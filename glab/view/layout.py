# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Stage boundaries and box geometry of the pipeline graph"""

from typing import Dict, List, NamedTuple, Tuple

from .model import ViewJob

MAX_TITLE = 20
BOX_WIDTH = MAX_TITLE + 2
HEADER_HEIGHT = 3
JOB_HEIGHT = 4
ROW_SPACING = 5


class Rect(NamedTuple):
    x: int
    y: int
    width: int
    height: int


def job_key(job: ViewJob) -> str:
    return "jobs-" + job.name


def stage_key(stage: str) -> str:
    return "stage-" + stage


def stage_runs(jobs: List[ViewJob]) -> List[str]:
    """Stage name of each run of consecutive jobs sharing a stage"""
    runs = []
    for j in jobs:
        if not runs or runs[-1] != j.stage:
            runs.append(j.stage)
    return runs


def stage_names(jobs: List[ViewJob]) -> List[str]:
    """Stage names in order of first appearance"""
    return list(dict.fromkeys(j.stage for j in jobs))


def stage_bounds(jobs: List[ViewJob], stage: str) -> Tuple[int, int]:
    """First and last index (inclusive) of the jobs in stage.

    Jobs are grouped by stage; (0, 0) is returned for fewer than two jobs
    or an unknown stage.
    """
    if len(jobs) <= 1:
        return 0, 0
    lower = upper = -1
    for i, j in enumerate(jobs):
        if j.stage == stage:
            if lower == -1:
                lower = i
            upper = i
        elif upper != -1:
            break
    if lower == -1:
        return 0, 0
    return lower, upper


def adjacent_stages(jobs: List[ViewJob], stage: str) -> Tuple[str, str]:
    """Stages before and after stage.

    The first stage is its own predecessor and the last stage its own
    successor, so moving past either end does nothing.
    """
    if not jobs:
        return "", ""
    stages = stage_names(jobs)
    if stage not in stages:
        return stage, stage
    i = stages.index(stage)
    return stages[max(i - 1, 0)], stages[min(i + 1, len(stages) - 1)]


def compute_boxes(jobs: List[ViewJob], inner: Rect) -> Dict[str, Rect]:
    """Place one header per stage and one box per job.

    Each stage gets a column of inner.width // stage count cells, jobs are
    stacked below their header.
    """
    boxes: Dict[str, Rect] = {}
    stages = stage_runs(jobs)
    if not stages:
        return boxes
    column = inner.width // len(stages)
    top = inner.height // 6

    for stage_idx, stage in enumerate(stages):
        x = inner.x + column * stage_idx
        boxes[stage_key(stage)] = Rect(x, top - 4, BOX_WIDTH, HEADER_HEIGHT)

    stage_idx = row = 0
    last_stage = jobs[0].stage
    for j in jobs:
        if j.stage != last_stage:
            last_stage = j.stage
            stage_idx += 1
            row = 0
        x = inner.x + column * stage_idx
        boxes[job_key(j)] = Rect(x, top + row * ROW_SPACING, BOX_WIDTH, JOB_HEIGHT)
        row += 1
    return boxes
