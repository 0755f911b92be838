# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Tests for job normalization, deduplication and the pipeline stack"""

from datetime import datetime, timezone

import pytest

from glab.view.model import (
    JobKind,
    PipelineRef,
    PipelineStack,
    ViewJob,
    latest_jobs,
    normalize,
)


def job(id, name, stage="stage1"):
    return ViewJob(id=id, name=name, stage=stage)


@pytest.mark.parametrize(
    "jobs, expected_ids",
    [
        pytest.param(
            [job(1, "stage1-job1"), job(2, "stage1-job2"), job(3, "stage1-job3")],
            [1, 2, 3],
            id="no newer jobs",
        ),
        pytest.param(
            [job(1, "stage1-job1"), job(2, "stage1-job2"), job(3, "stage1-job3"),
             job(4, "stage1-job1")],
            [4, 2, 3],
            id="1 newer",
        ),
        pytest.param(
            [job(1, "stage1-job1"), job(2, "stage1-job2"), job(3, "stage1-job3"),
             job(4, "stage1-job3"), job(5, "stage1-job1")],
            [5, 2, 4],
            id="2 newer",
        ),
        pytest.param([], [], id="empty"),
    ],
)
def test_latest_jobs(jobs, expected_ids):
    assert [j.id for j in latest_jobs(jobs)] == expected_ids


def test_latest_jobs_is_idempotent():
    jobs = [job(1, "a"), job(2, "b"), job(3, "a"), job(4, "b")]
    once = latest_jobs(jobs)
    assert [j.id for j in once] == [3, 4]
    assert latest_jobs(once) == once


def test_latest_jobs_same_name_in_other_stage_is_not_a_retry():
    jobs = [job(1, "lint", "build"), job(2, "lint", "test")]
    assert [j.id for j in latest_jobs(jobs)] == [1, 2]


def test_normalize_puts_bridges_after_jobs():
    jobs = [
        {"id": 1, "name": "build", "stage": "build", "status": "success",
         "started_at": "2024-01-15T10:00:00.000Z", "finished_at": "2024-01-15T10:01:05Z"},
    ]
    bridges = [
        {"id": 2, "name": "trigger", "stage": "deploy", "status": "running",
         "downstream_pipeline": {"id": 99, "project_id": 7}},
    ]
    view_jobs = normalize(jobs, bridges)

    assert [j.kind for j in view_jobs] == [JobKind.JOB, JobKind.BRIDGE]
    build, trigger = view_jobs
    assert build.started_at == datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)
    assert build.finished_at == datetime(2024, 1, 15, 10, 1, 5, tzinfo=timezone.utc)
    assert build.downstream_pipeline is None
    assert trigger.started_at is None
    assert trigger.downstream_pipeline == {"id": 99, "project_id": 7}


def test_view_job_equality_ignores_payload():
    a = ViewJob.from_job({"id": 1, "name": "x", "stage": "s", "extra": 1})
    b = ViewJob.from_job({"id": 1, "name": "x", "stage": "s", "extra": 2})
    assert a == b


def test_pipeline_ref_from_payload_falls_back_to_parent_project():
    ref = PipelineRef.from_payload({"id": 5, "sha": "abc"}, project_id="group/app")
    assert ref == PipelineRef(id=5, project_id="group/app", sha="abc")

    ref = PipelineRef.from_payload({"id": 6, "project_id": 42}, project_id="group/app")
    assert ref.project_id == 42


def test_pipeline_stack_never_pops_root():
    root = PipelineRef(1, "p")
    child = PipelineRef(2, "p")
    stack = PipelineStack(root)

    assert stack.pop() is None
    stack.push(child)
    assert len(stack) == 2
    assert stack.top() == child
    assert stack.pop() == child
    assert stack.top() == root
    assert stack.root == root
    assert len(stack) == 1
