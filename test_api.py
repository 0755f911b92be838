# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""ApiClient against an in-memory stand-in for the python-gitlab object graph"""

from types import SimpleNamespace

import pytest

from glab.api import ApiClient


class FakeObject:
    def __init__(self, **attributes):
        self.attributes = attributes


class FakeJob(FakeObject):
    def __init__(self, log=None, **attributes):
        super().__init__(**attributes)
        self.log = log
        self.actions = []

    def cancel(self):
        self.actions.append("cancel")
        return dict(self.attributes, status="canceled")

    def retry(self):
        self.actions.append("retry")
        return {"id": self.attributes["id"] + 100, "name": self.attributes["name"], "status": "pending"}

    def play(self):
        self.actions.append("play")

    def trace(self):
        return self.log


class FakeManager:
    def __init__(self, items=(), by_key=None):
        self.items = list(items)
        self.by_key = by_key or {}
        self.list_kwargs = []

    def get(self, key, lazy=False):
        return self.by_key[key]

    def list(self, **kwargs):
        self.list_kwargs.append(kwargs)
        return self.items


class FakeProject:
    def __init__(self, commits=None, pipelines=None, jobs=None):
        self.commits = commits or FakeManager()
        self.pipelines = pipelines or FakeManager()
        self.jobs = jobs or FakeManager()


class FakeGitlab:
    def __init__(self, project):
        self.project = project
        self.requested = []
        self.projects = SimpleNamespace(get=self._get_project)

    def _get_project(self, project_id, lazy=False):
        self.requested.append((project_id, lazy))
        return self.project


def client_for(project):
    return ApiClient(config=None, gl=FakeGitlab(project))


def pipeline_with(jobs=(), bridges=()):
    pipeline = FakeObject(id=5)
    pipeline.jobs = FakeManager([FakeObject(**j) for j in jobs])
    pipeline.bridges = FakeManager([FakeObject(**b) for b in bridges])
    return pipeline


def test_get_commit_returns_attributes():
    commit = FakeObject(id="abc", last_pipeline={"id": 5})
    client = client_for(FakeProject(commits=FakeManager(by_key={"main": commit})))

    assert client.get_commit("group/app", "main") == {"id": "abc", "last_pipeline": {"id": 5}}
    assert client.gl.requested == [("group/app", True)]


def test_get_pipeline_jobs_sorted_by_creation():
    pipeline = pipeline_with(
        jobs=[
            {"id": 3, "name": "test", "created_at": "2024-01-15T10:02:00Z"},
            {"id": 1, "name": "build", "created_at": "2024-01-15T10:00:00Z"},
        ],
        bridges=[{"id": 9, "name": "child", "created_at": "2024-01-15T10:05:00Z"}],
    )
    client = client_for(FakeProject(pipelines=FakeManager(by_key={5: pipeline})))

    jobs, bridges = client.get_pipeline_jobs("group/app", 5)

    assert [j["id"] for j in jobs] == [1, 3]
    assert [b["id"] for b in bridges] == [9]
    assert pipeline.jobs.list_kwargs == [{"get_all": True, "per_page": 100}]


def test_cancel_job():
    job = FakeJob(id=7, name="build", status="running")
    client = client_for(FakeProject(jobs=FakeManager(by_key={7: job})))

    result = client.cancel_job("group/app", 7)

    assert job.actions == ["cancel"]
    assert result["status"] == "canceled"


@pytest.mark.parametrize("status", ["pending", "running"])
def test_play_or_retry_leaves_active_jobs_alone(status):
    job = FakeJob(id=7, name="build", status=status)
    client = client_for(FakeProject(jobs=FakeManager(by_key={7: job})))

    assert client.play_or_retry_job("group/app", 7, status) is None
    assert job.actions == []


def test_play_manual_job_refetches_job():
    job = FakeJob(id=7, name="deploy", status="manual")
    client = client_for(FakeProject(jobs=FakeManager(by_key={7: job})))

    result = client.play_or_retry_job("group/app", 7, "manual")

    assert job.actions == ["play"]
    assert result == {"id": 7, "name": "deploy", "status": "manual"}


def test_retry_finished_job_returns_new_job():
    job = FakeJob(id=7, name="build", status="failed")
    client = client_for(FakeProject(jobs=FakeManager(by_key={7: job})))

    result = client.play_or_retry_job("group/app", 7, "failed")

    assert job.actions == ["retry"]
    assert result["id"] == 107


@pytest.mark.parametrize("log, expected", [(b"bytes", b"bytes"), ("text", b"text"), (None, b"")])
def test_get_job_trace_returns_bytes(log, expected):
    job = FakeJob(id=7, name="build", log=log)
    client = client_for(FakeProject(jobs=FakeManager(by_key={7: job})))

    assert client.get_job_trace("group/app", 7) == expected


@pytest.mark.parametrize(
    "jobs, name, expected_id",
    [
        pytest.param(
            [{"id": 1, "name": "build", "status": "failed"},
             {"id": 2, "name": "test", "status": "running"},
             {"id": 3, "name": "build", "status": "success"}],
            "build", 3, id="last job with the name",
        ),
        pytest.param(
            [{"id": 1, "name": "a", "status": "running"},
             {"id": 2, "name": "b", "status": "running"},
             {"id": 3, "name": "c", "status": "pending"}],
            "missing", 2, id="last running job",
        ),
        pytest.param(
            [{"id": 1, "name": "a", "status": "success"},
             {"id": 2, "name": "b", "status": "pending"},
             {"id": 3, "name": "c", "status": "pending"}],
            "missing", 2, id="first pending job",
        ),
        pytest.param(
            [{"id": 1, "name": "a", "status": "success"},
             {"id": 2, "name": "b", "status": "failed"}],
            "missing", 2, id="last job",
        ),
    ],
)
def test_pipeline_job_with_sha(jobs, name, expected_id):
    pipeline = pipeline_with(jobs=jobs)
    pipelines = FakeManager([FakeObject(id=5)], by_key={5: pipeline})
    client = client_for(FakeProject(pipelines=pipelines))

    job = client.pipeline_job_with_sha("group/app", "abc", name)

    assert job["id"] == expected_id
    assert pipelines.list_kwargs[0]["sha"] == "abc"


def test_pipeline_job_with_sha_without_pipeline():
    client = client_for(FakeProject(pipelines=FakeManager([])))
    assert client.pipeline_job_with_sha("group/app", "abc", "build") is None
