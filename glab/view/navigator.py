# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

from typing import List

from .layout import adjacent_stages, stage_bounds
from .model import ViewJob

LEFT_KEYS = ("left", "h")
RIGHT_KEYS = ("right", "l")
DOWN_KEYS = ("down", "j")
UP_KEYS = ("up", "k")


class Navigator:
    """Cursor over the stage/job grid.

    idx is the absolute index of the selected job; depth is the row within
    the stage and is kept across horizontal moves so the row is restored
    when moving back.
    """

    def __init__(self):
        self.depth = 0
        self.idx = 0

    def reset(self):
        self.depth = 0
        self.idx = 0

    def navigate(self, jobs: List[ViewJob], key: str) -> ViewJob:
        """Move according to key and return the selected job.

        Callers make sure jobs is not empty.
        """
        if self.idx >= len(jobs):
            self.reset()

        stage = jobs[self.idx].stage
        prev_stage, next_stage = adjacent_stages(jobs, stage)
        if key in LEFT_KEYS:
            stage = prev_stage
        elif key in RIGHT_KEYS:
            stage = next_stage
        lower, upper = stage_bounds(jobs, stage)

        if key in DOWN_KEYS:
            self.depth = min(self.depth + 1, upper - lower)
        elif key in UP_KEYS:
            self.depth -= 1
        elif key == "g":
            self.depth = 0
        elif key == "G":
            self.depth = upper - lower

        if self.depth < 0:
            self.depth = 0
        self.idx = min(lower + self.depth, upper)
        return jobs[self.idx]
