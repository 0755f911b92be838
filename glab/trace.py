# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Follow the trace of a running job"""

import codecs
import logging
import threading
from typing import Optional

from .errors import JobsNotFoundError

logger = logging.getLogger(__name__)

POLL_INTERVAL = 3
COMPLETED_STATUSES = {"success", "failed", "canceled", "skipped"}


def stream_job_trace(client, writer, project_id, sha: str, job_name: str,
                     cancel: threading.Event, poll_interval: float = POLL_INTERVAL,
                     job_id: Optional[int] = None):
    """Write the trace of job_name in the pipeline for sha to writer.

    New output is written as the job produces it. Returns when the job has
    finished or as soon as cancel is set. A known job_id skips looking the
    job up by name.
    """
    writer.write("Getting job trace...\n")
    if job_id is None:
        job = client.pipeline_job_with_sha(project_id, sha, job_name)
        if job is None:
            raise JobsNotFoundError(f"failed to find job {job_name}")
        job_id = job['id']

    announced = False
    offset = 0
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while not cancel.is_set():
        job = client.get_job(project_id, job_id)
        status = job.get('status')
        name = job.get('name', job_name)

        if status == "pending":
            writer.write(f"{name} is pending... waiting for job to start.\n")
            cancel.wait(poll_interval)
            continue
        if status == "manual":
            writer.write(f"Manual job {name} not started, waiting for job to start.\n")
            cancel.wait(poll_interval)
            continue
        if status == "skipped":
            writer.write(f"{name} has been skipped.\n")

        if not announced:
            writer.write(f"Showing logs for {name} job #{job_id}.\n")
            announced = True

        trace = client.get_job_trace(project_id, job_id)
        if len(trace) > offset:
            writer.write(decoder.decode(trace[offset:]))
            offset = len(trace)

        if status in COMPLETED_STATUSES:
            logger.debug("Trace of job %s complete (%s)", job_id, status)
            return
        cancel.wait(poll_interval)
    logger.debug("Trace of job %s cancelled", job_id)
