# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Background polling of the jobs of the pipeline being viewed"""

import logging
import queue
import threading
from typing import List

from gitlab.exceptions import GitlabError

from ..errors import JobsNotFoundError
from .model import PipelineStack, ViewJob, latest_jobs, normalize
from .state import Fatal, JobsUpdated

logger = logging.getLogger(__name__)

PAUSED_SLEEP = 1


class JobPoller:
    """Fetches the top pipeline of the stack and posts snapshots.

    One fetch is in flight at a time. After each snapshot the poller sleeps
    until refresh is set or interval seconds pass. While paused is set (a
    confirmation dialog is open) nothing is fetched.
    """

    def __init__(self, client, stack: PipelineStack, events: queue.Queue,
                 interval: float = 5, stop: threading.Event = None,
                 refresh: threading.Event = None, paused: threading.Event = None):
        self.client = client
        self.stack = stack
        self.events = events
        self.interval = interval
        self.stop = stop or threading.Event()
        self.refresh = refresh or threading.Event()
        self.paused = paused or threading.Event()
        self._thread = None

    def fetch(self, pipeline) -> List[ViewJob]:
        try:
            jobs, bridges = self.client.get_pipeline_jobs(pipeline.project_id, pipeline.id)
        except (GitlabError, OSError) as e:
            raise JobsNotFoundError(f"failed to find CI jobs: {e}") from e
        if not jobs and not bridges:
            raise JobsNotFoundError("failed to find CI jobs.")
        return latest_jobs(normalize(jobs, bridges))

    def poll_once(self) -> bool:
        """Fetch and post one snapshot; False once a fatal error was posted."""
        pipeline = self.stack.top()
        try:
            snapshot = self.fetch(pipeline)
        except JobsNotFoundError as e:
            logger.error("Pipeline %s: %s", pipeline.id, e)
            self.events.put(Fatal(e))
            return False
        logger.debug("Pipeline %s: %d jobs", pipeline.id, len(snapshot))
        self.events.put(JobsUpdated(pipeline, snapshot))
        return True

    def run(self):
        while not self.stop.is_set():
            if self.paused.is_set():
                self.stop.wait(PAUSED_SLEEP)
                continue
            if not self.poll_once():
                return
            self.refresh.wait(self.interval)
            self.refresh.clear()

    def start(self):
        self._thread = threading.Thread(target=self.run, name="job-poller", daemon=True)
        self._thread.start()

    def join(self, timeout=None):
        if self._thread is not None:
            self._thread.join(timeout)
