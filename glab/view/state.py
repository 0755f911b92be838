# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Events exchanged with the viewer loop and the state it owns"""

import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from .layout import Rect, stage_bounds
from .model import PipelineRef, ViewJob
from .navigator import Navigator


@dataclass
class JobsUpdated:
    pipeline: PipelineRef
    jobs: List[ViewJob]


@dataclass
class KeyPress:
    key: str


@dataclass
class LogOutput:
    session: int
    text: str


@dataclass
class Fatal:
    error: Exception


@dataclass
class Tick:
    pass


Event = Union[JobsUpdated, KeyPress, LogOutput, Fatal, Tick]


@dataclass
class TraceSession:
    """One open log pane and the trace stream feeding it"""
    id: int
    job: ViewJob
    cancel: threading.Event = field(default_factory=threading.Event)
    lines: List[str] = field(default_factory=list)
    partial: str = ""
    scroll: int = 0

    def append(self, text: str):
        text = self.partial + text
        *complete, self.partial = text.split("\n")
        for line in complete:
            # keep what a terminal would show after carriage returns
            self.lines.append(line.rsplit("\r", 1)[-1])

    def visible_lines(self) -> List[str]:
        lines = self.lines + ([self.partial] if self.partial else [])
        if self.scroll:
            return lines[:-self.scroll] if self.scroll < len(lines) else lines[:1]
        return lines


@dataclass
class Normal:
    pass


@dataclass
class LogsVisible:
    session: TraceSession


CANCEL = "cancel"
RUN = "run"

BUTTON_NO = "✘ No"
BUTTON_YES = "✔ Yes"
BUTTONS = (BUTTON_NO, BUTTON_YES)


@dataclass
class ModalVisible:
    action: str
    job: ViewJob
    selected: int = 0

    @property
    def text(self) -> str:
        return f"Are you sure you want to {self.action} {self.job.name}?"


Mode = Union[Normal, LogsVisible, ModalVisible]


@dataclass
class ViewerState:
    """Everything the viewer loop owns; no other thread touches it"""
    jobs: List[ViewJob] = field(default_factory=list)
    cur_job: Optional[ViewJob] = None
    navigator: Navigator = field(default_factory=Navigator)
    boxes: Dict[str, Rect] = field(default_factory=dict)
    mode: Mode = field(default_factory=Normal)
    message: str = ""

    def reset_cursor(self):
        self.cur_job = None
        self.navigator.reset()

    def replace_job(self, job: ViewJob):
        """Swap in the state the API returned after an action on job"""
        for i, j in enumerate(self.jobs):
            if (j.stage, j.name) == (job.stage, job.name):
                self.jobs[i] = job
                break
        self.cur_job = job

    def apply_snapshot(self, jobs: List[ViewJob]):
        self.jobs = jobs
        if not jobs:
            self.cur_job = None
            return
        if self.cur_job is not None:
            for i, j in enumerate(jobs):
                if (j.stage, j.name) == (self.cur_job.stage, self.cur_job.name):
                    self.cur_job = j
                    self.navigator.idx = i
                    self.navigator.depth = i - stage_bounds(jobs, j.stage)[0]
                    return
        if self.navigator.idx >= len(jobs):
            self.navigator.reset()
        self.cur_job = jobs[self.navigator.idx]
