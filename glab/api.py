# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Thin wrappers around python-gitlab used by the commands and the viewer"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

import gitlab

from .config import Config

logger = logging.getLogger(__name__)

ProjectID = Union[int, str]

PER_PAGE = 100


class ApiClient:
    def __init__(self, config: Config, gl: Optional[gitlab.Gitlab] = None):
        self.config = config
        self.gl = gl or gitlab.Gitlab(config.gitlab_url, private_token=config.gitlab_token)

    def _project(self, project_id: ProjectID):
        # Lazy objects only carry the id; every call below issues exactly the
        # request it needs.
        return self.gl.projects.get(project_id, lazy=True)

    def get_commit(self, project_id: ProjectID, ref: str) -> Dict[str, Any]:
        """Get a commit (including its last pipeline) for a branch, tag or sha."""
        commit = self._project(project_id).commits.get(ref)
        return commit.attributes

    def get_pipeline(self, project_id: ProjectID, pipeline_id: int) -> Dict[str, Any]:
        pipeline = self._project(project_id).pipelines.get(pipeline_id)
        return pipeline.attributes

    def get_pipeline_jobs(
        self, project_id: ProjectID, pipeline_id: int
    ) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        """Get all jobs and bridges of a pipeline, each in creation order."""
        pipeline = self._project(project_id).pipelines.get(pipeline_id, lazy=True)
        jobs = [j.attributes for j in pipeline.jobs.list(get_all=True, per_page=PER_PAGE)]
        bridges = [b.attributes for b in pipeline.bridges.list(get_all=True, per_page=PER_PAGE)]

        # The API lists jobs newest first
        jobs.sort(key=lambda j: j.get('created_at') or '')
        bridges.sort(key=lambda b: b.get('created_at') or '')
        logger.debug(
            "Pipeline %s of %s: %d jobs, %d bridges", pipeline_id, project_id, len(jobs), len(bridges)
        )
        return jobs, bridges

    def get_job(self, project_id: ProjectID, job_id: int) -> Dict[str, Any]:
        return self._project(project_id).jobs.get(job_id).attributes

    def get_job_trace(self, project_id: ProjectID, job_id: int) -> bytes:
        job = self._project(project_id).jobs.get(job_id, lazy=True)
        trace = job.trace()
        if isinstance(trace, str):
            trace = trace.encode("utf-8")
        return trace or b""

    def cancel_job(self, project_id: ProjectID, job_id: int) -> Dict[str, Any]:
        logger.info("Cancelling job %s in %s", job_id, project_id)
        job = self._project(project_id).jobs.get(job_id, lazy=True)
        result = job.cancel()
        return self._job_result(project_id, job_id, result)

    def play_or_retry_job(
        self, project_id: ProjectID, job_id: int, status: str
    ) -> Optional[Dict[str, Any]]:
        """Play a manual job or retry a finished one.

        Jobs that are still pending or running are left alone and None is
        returned.
        """
        if status in ("pending", "running"):
            return None

        job = self._project(project_id).jobs.get(job_id, lazy=True)
        if status == "manual":
            logger.info("Playing job %s in %s", job_id, project_id)
            result = job.play()
        else:
            logger.info("Retrying job %s in %s", job_id, project_id)
            result = job.retry()
        return self._job_result(project_id, job_id, result)

    def _job_result(self, project_id: ProjectID, job_id: int, result) -> Dict[str, Any]:
        # play() updates the object in place and returns nothing
        if isinstance(result, dict) and result.get('id'):
            return result
        return self.get_job(project_id, job_id)

    def get_pipelines_for_sha(self, project_id: ProjectID, sha: str) -> List[Dict[str, Any]]:
        pipelines = self._project(project_id).pipelines.list(sha=sha, per_page=PER_PAGE, get_all=False)
        return [p.attributes for p in pipelines]

    def pipeline_job_with_sha(
        self, project_id: ProjectID, sha: str, name: str
    ) -> Optional[Dict[str, Any]]:
        """Find the job called name in the latest pipeline for sha.

        Falls back to the last running job, then to the first pending job,
        then to the last job of the pipeline.
        """
        pipelines = self.get_pipelines_for_sha(project_id, sha)
        if not pipelines:
            return None
        jobs, _ = self.get_pipeline_jobs(project_id, pipelines[0]['id'])
        if not jobs:
            return None

        job = last_running = first_pending = None
        for j in jobs:
            if j.get('status') == 'running':
                last_running = j
            if j.get('status') == 'pending' and first_pending is None:
                first_pending = j
            if j.get('name') == name:
                # keep going, a retry of the job may come later
                job = j
        return job or last_running or first_pending or jobs[-1]
