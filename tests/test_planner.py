import pytest

from pipeline_doctor.config import Config
from pipeline_doctor.diagnosis import (
    CacheMiss,
    CommentOnPR,
    ConfigurationViolation,
    FlakyTest,
    InefficientJobOrder,
    InfraFailure,
    LongRuntime,
    RetryJob,
)
from pipeline_doctor.event import EventType, NormalizedEvent, Platform
from pipeline_doctor.planner import plan_actions


def _event(job_id="42", **metadata):
    event = NormalizedEvent(Platform.GITHUB, "9", job_id, EventType.JOB_FAILED)
    event.metadata.update(metadata)
    return event


def test_no_diagnoses_no_actions():
    assert plan_actions(_event(), [], Config()) == []


def test_flaky_test_retries_and_comments():
    actions = plan_actions(
        _event(repository="octo/widgets"),
        [FlakyTest(test_name="test_a", reason="why")],
        Config(),
    )
    assert actions == [
        RetryJob(job_id="42"),
        CommentOnPR("⚠️ Flaky test detected: `test_a`\nReason: why\nRepo: octo/widgets"),
    ]


def test_flaky_test_without_retry_allowed():
    actions = plan_actions(
        _event(repository="o/r"),
        [FlakyTest(test_name="t", reason="r")],
        Config(allow_flaky_retry=False),
    )
    assert len(actions) == 1
    assert isinstance(actions[0], CommentOnPR)


def test_flaky_test_without_job_or_repository():
    actions = plan_actions(_event(job_id=None), [FlakyTest(test_name="t", reason="r")], Config())
    assert actions == [CommentOnPR("⚠️ Flaky test detected: `t`\nReason: r\nRepo: <repo>")]


def test_long_runtime_comment():
    actions = plan_actions(_event(), [LongRuntime(job_name="build", duration=4000)], Config())
    assert actions == [
        CommentOnPR(
            "⏱️ Job `build` took too long (4000s). Consider caching or splitting steps."
        )
    ]


def test_inefficient_order_comment():
    actions = plan_actions(_event(), [InefficientJobOrder(recommendation="lint first")], Config())
    assert actions == [CommentOnPR("🔀 Job ordering could be improved: lint first")]


def test_cache_miss_comment():
    actions = plan_actions(_event(), [CacheMiss(step="deps")], Config())
    assert actions == [
        CommentOnPR("📦 Cache miss detected at step: `deps`. Consider persistent caching.")
    ]


def test_configuration_violation_comment():
    actions = plan_actions(_event(), [ConfigurationViolation(description="no tests")], Config())
    assert actions == [CommentOnPR("🚨 Config violation: no tests")]


def test_infra_failure_retries_regardless_of_config():
    actions = plan_actions(_event(), [InfraFailure()], Config(allow_flaky_retry=False))
    assert actions == [
        RetryJob(job_id="42"),
        CommentOnPR("⚙️ Infrastructure failure detected. Retrying job..."),
    ]


def test_infra_failure_without_job():
    actions = plan_actions(_event(job_id=None), [InfraFailure()], Config())
    assert actions == [CommentOnPR("⚙️ Infrastructure failure detected. Retrying job...")]


def test_actions_follow_diagnosis_order():
    diagnoses = [CacheMiss(step="s"), InfraFailure(), ConfigurationViolation(description="d")]
    actions = plan_actions(_event(), diagnoses, Config())
    assert [type(a) for a in actions] == [CommentOnPR, RetryJob, CommentOnPR, CommentOnPR]


def test_unknown_diagnosis_rejected():
    with pytest.raises(TypeError):
        plan_actions(_event(), [object()], Config())