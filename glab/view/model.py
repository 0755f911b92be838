# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Uniform view of pipeline jobs and bridges"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..utils import parse_time


class JobKind(Enum):
    JOB = "job"
    BRIDGE = "bridge"


@dataclass
class ViewJob:
    """A job or a bridge as shown in the pipeline viewer.

    original holds the API payload the entity was built from; it is used
    for actions such as cancel/retry and to find a bridge's downstream
    pipeline.
    """
    id: int = 0
    name: str = ""
    stage: str = ""
    status: str = ""
    kind: JobKind = JobKind.JOB
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    duration: Optional[float] = None
    allow_failure: bool = False
    original: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def _from_payload(cls, payload: Dict[str, Any], kind: JobKind) -> "ViewJob":
        return cls(
            id=payload.get('id', 0),
            name=payload.get('name', ''),
            stage=payload.get('stage', ''),
            status=payload.get('status', ''),
            kind=kind,
            started_at=parse_time(payload.get('started_at')),
            finished_at=parse_time(payload.get('finished_at')),
            duration=payload.get('duration'),
            allow_failure=bool(payload.get('allow_failure', False)),
            original=payload,
        )

    @classmethod
    def from_job(cls, job: Dict[str, Any]) -> "ViewJob":
        return cls._from_payload(job, JobKind.JOB)

    @classmethod
    def from_bridge(cls, bridge: Dict[str, Any]) -> "ViewJob":
        return cls._from_payload(bridge, JobKind.BRIDGE)

    @property
    def downstream_pipeline(self) -> Optional[Dict[str, Any]]:
        if self.kind != JobKind.BRIDGE:
            return None
        return self.original.get('downstream_pipeline')


def normalize(jobs: List[Dict[str, Any]], bridges: List[Dict[str, Any]]) -> List[ViewJob]:
    """Jobs first, then bridges, each in the order returned by the API"""
    view_jobs = [ViewJob.from_job(j) for j in jobs]
    view_jobs.extend(ViewJob.from_bridge(b) for b in bridges)
    return view_jobs


def latest_jobs(jobs: List[ViewJob]) -> List[ViewJob]:
    """Keep one entry per stage and name, favouring the last one seen.

    The first repeated (stage, name) pair marks where retries begin: the
    entries before it are returned in order, each replaced by the newest
    attempt of that job.
    """
    last_job: Dict[tuple, ViewJob] = {}
    dup_idx = -1
    for i, j in enumerate(jobs):
        key = (j.stage, j.name)
        if dup_idx == -1 and key in last_job:
            dup_idx = i
        last_job[key] = j
    if dup_idx == -1:
        dup_idx = len(jobs)
    return [last_job[(j.stage, j.name)] for j in jobs[:dup_idx]]


@dataclass(frozen=True)
class PipelineRef:
    id: int
    project_id: Any
    sha: str = ""
    web_url: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], project_id=None) -> "PipelineRef":
        return cls(
            id=payload['id'],
            project_id=payload.get('project_id') or project_id,
            sha=payload.get('sha', ''),
            web_url=payload.get('web_url', ''),
        )


class PipelineStack:
    """Navigation path from the root pipeline into child pipelines.

    The input handler pushes and pops, the poller reads the top; both
    sides go through the lock.
    """

    def __init__(self, root: PipelineRef):
        self._lock = threading.Lock()
        self._pipelines = [root]

    def push(self, pipeline: PipelineRef):
        with self._lock:
            self._pipelines.append(pipeline)

    def pop(self) -> Optional[PipelineRef]:
        """Return to the parent pipeline; the root is never popped."""
        with self._lock:
            if len(self._pipelines) == 1:
                return None
            return self._pipelines.pop()

    def top(self) -> PipelineRef:
        with self._lock:
            return self._pipelines[-1]

    @property
    def root(self) -> PipelineRef:
        return self._pipelines[0]

    def __len__(self):
        with self._lock:
            return len(self._pipelines)
